from http import HTTPStatus

from fastapi import HTTPException


class MiddlewareException(HTTPException):
    """Base exception class for request middleware errors."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    message = "An error occurred."

    def __init__(
        self,
        status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR,
        message: str = "An error occurred.",
    ):
        self.status_code = status_code
        self.message = message
        super().__init__(status_code, message)


class MissingAPIKeyError(MiddlewareException):
    """Raised when the API key header is absent."""

    status_code = HTTPStatus.UNAUTHORIZED
    message = "Missing API key."

    def __init__(self, header: str = ""):
        message = self.message
        if header:
            message += f" Expected header: {header}"
        super().__init__(self.status_code, message)


class InvalidAPIKeyError(MiddlewareException):
    """Raised when the API key does not match the configured one."""

    status_code = HTTPStatus.FORBIDDEN
    message = "Invalid API key provided."

    def __init__(self):
        super().__init__(self.status_code, self.message)
