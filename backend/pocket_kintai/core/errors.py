"""Domain errors raised by services and translated to the error envelope in main.py."""


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailedError(AppError):
    status_code = 400


class ConflictError(AppError):
    """Business-rule violation (duplicate clock-in, non-PENDING mutation, ...)."""
    status_code = 400


class AuthenticationError(AppError):
    status_code = 401


class ForbiddenError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404
