from youtrack_hub.core.exceptions.base import AppException


class FieldNotFoundError(AppException):
    """Raised by strict custom-field lookup when no field carries the requested name."""

    def __init__(self, field_name: str = ""):
        self.field_name = field_name
        message = "FieldNotFound"
        if field_name:
            message = f"FieldNotFound: '{field_name}'"
        super().__init__(message)


class ResourceNotFoundError(AppException):
    """Raised when a requested resource does not exist."""

    def __init__(self, resource: str = "Resource", identifier: str = ""):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} '{identifier}' not found"
        super().__init__(message)


class YouTrackConnectionError(AppException):
    """Raised when connection to the YouTrack API fails."""

    def __init__(self, message: str = "Failed to connect to YouTrack"):
        super().__init__(message)


class YouTrackAuthenticationError(AppException):
    """Raised when YouTrack API authentication fails (invalid token, etc.)."""

    def __init__(self, message: str = "YouTrack authentication failed - check your permanent token"):
        super().__init__(message)


class YouTrackRateLimitError(AppException):
    """Raised when YouTrack API rate limit is exceeded."""

    def __init__(self, retry_after: int | None = None):
        message = "YouTrack API rate limit exceeded"
        if retry_after:
            message += f" - retry after {retry_after} seconds"
        self.retry_after = retry_after
        super().__init__(message)


class ValidationError(AppException):
    """Raised when input validation fails."""

    def __init__(self, message: str = "Validation failed"):
        super().__init__(message)
