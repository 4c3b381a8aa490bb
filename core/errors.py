"""Legajos - Domain errors
Errors raised by services and mapped to JSON responses by the API layer.
"""


class AppError(Exception):
    """Base class for errors with a user-facing message and HTTP status."""

    error = "AppError"
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None, expose: bool = True):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.expose = expose

    def to_dict(self) -> dict:
        if not self.expose:
            return {"error": "InternalServerError", "message": "Ocurrió un error inesperado"}
        return {"error": self.error, "message": self.message}


class BadRequestError(AppError):
    error = "BadRequest"
    status_code = 400


class UploadError(AppError):
    error = "UploadError"
    status_code = 400


class UnauthorizedError(AppError):
    error = "Unauthorized"
    status_code = 401


class ForbiddenError(AppError):
    error = "Forbidden"
    status_code = 403


class NotFoundError(AppError):
    error = "NotFound"
    status_code = 404


class ConflictError(AppError):
    error = "Conflict"
    status_code = 409
