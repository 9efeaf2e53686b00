from http import HTTPStatus

from fastapi import HTTPException


class VehicleException(HTTPException):
    """Base exception class for vehicle directory errors."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    message = "An error occurred in the vehicle directory."

    def __init__(
        self,
        status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR,
        message: str = "An error occurred in the vehicle directory.",
    ):
        self.status_code = status_code
        self.message = message or self.message
        super().__init__(status_code=status_code, detail=self.message)


class VehicleNotFoundException(VehicleException):
    """No vehicle with the given id."""

    status_code = HTTPStatus.NOT_FOUND
    message = "Vehicle not found."

    def __init__(self, vehicle_id: str):
        self.vehicle_id = vehicle_id
        message = f"{self.message} Vehicle ID: {vehicle_id}"
        super().__init__(status_code=self.status_code, message=message)


class DuplicatePlateException(VehicleException):
    """Another vehicle already uses this plate."""

    status_code = HTTPStatus.CONFLICT
    message = "Plate already registered."

    def __init__(self, plate: str):
        self.plate = plate
        message = f"{self.message} Plate: {plate}"
        super().__init__(status_code=self.status_code, message=message)


class VehicleValidationException(VehicleException):
    """Vehicle data the request schema let through but the directory rejects."""

    status_code = HTTPStatus.BAD_REQUEST
    message = "Invalid vehicle data."

    def __init__(self, details: str = ""):
        self.details = details
        message = self.message
        if details:
            message += f" Details: {details}"
        super().__init__(status_code=self.status_code, message=message)
