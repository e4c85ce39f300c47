"""
Error taxonomy shared by the handlers.

Every AppError carries the status code and the short message the client
sees; the exception handlers in main.py turn them into {"message": ...}.
"""


class AppError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingField(AppError):
    status_code = 400
    default_message = "All fields are required"


class InvalidField(AppError):
    status_code = 400
    default_message = "Invalid field value"


class EmailInUse(AppError):
    status_code = 400
    default_message = "Email already in use"


class InvalidCredentials(AppError):
    """Same message for unknown email and wrong password."""

    status_code = 400
    default_message = "Invalid email or password"


class Unauthorized(AppError):
    status_code = 401
    default_message = "Unauthorized"


class ServerError(AppError):
    status_code = 500
    default_message = "Server error"


class InvalidToken(Exception):
    """Raised by TokenService.verify; the reason is for logs only."""

    def __init__(self, reason):
        self.reason = reason
        super().__init__(reason)
