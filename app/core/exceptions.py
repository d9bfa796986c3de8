"""Domain errors raised by the lifecycle and notification services.

Each error carries the HTTP status it maps to so routers can simply let
them propagate; ``main.py`` registers a single handler that renders
``{"detail": message}``.
"""
from starlette import status


class JobBoardError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(JobBoardError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class NotFoundError(JobBoardError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ForbiddenError(JobBoardError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized"


class ConflictError(JobBoardError):
    """A business rule rejects the request given the current state."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request conflicts with the current state"


class ApplicationWindowError(ConflictError):
    default_message = "This job is no longer accepting applications"


class DuplicateApplicationError(ConflictError):
    default_message = "An active application for this job already exists"


class StatusAlreadySetError(ConflictError):
    default_message = "Application status has already been set and cannot be changed"
