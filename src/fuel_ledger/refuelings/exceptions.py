from http import HTTPStatus

from fastapi import HTTPException


class RefuelingException(HTTPException):
    """Base exception class for refueling ledger errors."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    message = "An error occurred in the refueling ledger."

    def __init__(
        self,
        status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR,
        message: str = "An error occurred in the refueling ledger.",
    ):
        self.status_code = status_code
        self.message = message or self.message
        super().__init__(status_code=status_code, detail=self.message)


class RefuelingNotFoundException(RefuelingException):
    """No refueling with the given id."""

    status_code = HTTPStatus.NOT_FOUND
    message = "Refueling not found."

    def __init__(self, refueling_id: str):
        self.refueling_id = refueling_id
        message = f"{self.message} Refueling ID: {refueling_id}"
        super().__init__(status_code=self.status_code, message=message)


class DuplicateOdometerReadingException(RefuelingException):
    """The vehicle already has a refueling at this odometer reading."""

    status_code = HTTPStatus.CONFLICT
    message = "A refueling with this odometer reading already exists."

    def __init__(self, vehicle_id: str, odometer: float):
        self.vehicle_id = vehicle_id
        self.odometer = odometer
        message = f"{self.message} Vehicle ID: {vehicle_id}, Odometer: {odometer}"
        super().__init__(status_code=self.status_code, message=message)


class InvalidVehicleReferenceException(RefuelingException):
    """The referenced vehicle is not in the vehicle directory."""

    status_code = HTTPStatus.UNPROCESSABLE_ENTITY
    message = "Vehicle does not exist."

    def __init__(self, vehicle_id: str):
        self.vehicle_id = vehicle_id
        message = f"{self.message} Vehicle ID: {vehicle_id}"
        super().__init__(status_code=self.status_code, message=message)


class RefuelingValidationException(RefuelingException):
    """Malformed refueling data that got past the request schema."""

    status_code = HTTPStatus.BAD_REQUEST
    message = "Invalid refueling data."

    def __init__(self, details: str = ""):
        self.details = details
        message = self.message
        if details:
            message += f" Details: {details}"
        super().__init__(status_code=self.status_code, message=message)


class ConcurrencyConflictException(RefuelingException):
    """Retries exhausted while other writers held the vehicle's sequence."""

    status_code = HTTPStatus.CONFLICT
    message = "Concurrent modification of the vehicle's refuelings, retry later."

    def __init__(self, vehicle_id: str = "", attempts: int = 0):
        self.vehicle_id = vehicle_id
        self.attempts = attempts
        message = self.message
        if vehicle_id:
            message += f" Vehicle ID: {vehicle_id}"
        if attempts:
            message += f", Attempts: {attempts}"
        super().__init__(status_code=self.status_code, message=message)
