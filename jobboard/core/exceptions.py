"""Error taxonomy for the job board API.

Repositories, services and the access gates raise these; ``jobboard.main``
registers a handler that turns any ``JobBoardError`` into a JSON response
with the class's ``status_code``.
"""

from fastapi import status


class JobBoardError(Exception):
    """Base exception for application errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @classmethod
    def category(cls) -> str:
        """Name of the taxonomy class directly under ``JobBoardError``."""
        for klass in cls.__mro__:
            if JobBoardError in klass.__bases__:
                return klass.__name__
        return JobBoardError.__name__


class ValidationError(JobBoardError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class AuthError(JobBoardError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized"


class ForbiddenError(JobBoardError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(JobBoardError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(JobBoardError):
    # Duplicates are reported as 400, the way clients already expect them.
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource already exists"


class ServerError(JobBoardError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


# ---- Validation ----
class MissingFieldError(ValidationError):
    default_message = "Missing required field"


class InvalidStatusError(ValidationError):
    default_message = "Invalid status"


class InvalidFileError(ValidationError):
    default_message = "Only PDF files are allowed"


class FileTooLargeError(ValidationError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    default_message = "File too large"


# ---- Authentication ----
class InvalidCredentialsError(AuthError):
    """Raised for both unknown usernames and wrong passwords."""

    default_message = "Invalid credentials"


class NoTokenError(AuthError):
    default_message = "Not authorized, no token"


class TokenFailedError(AuthError):
    default_message = "Not authorized, token failed"


class TokenInvalidError(TokenFailedError):
    """Malformed token or bad signature."""


class TokenExpiredError(TokenFailedError):
    """Well-formed token past its expiry."""


# ---- Authorization ----
class NotAdminError(ForbiddenError):
    default_message = "Not authorized as an admin"


# ---- Lookups ----
class JobNotFoundError(NotFoundError):
    default_message = "Job not found or has been archived"


class ApplicationNotFoundError(NotFoundError):
    default_message = "Application not found"


class NotFoundOrAlreadyAdminError(NotFoundError):
    """Promotion touched no rows: the user is missing or already an admin."""

    default_message = "User not found or is already an admin."


# ---- Conflicts ----
class DuplicateUsernameError(ConflictError):
    default_message = "Username already exists"


class DuplicateApplicationError(ConflictError):
    default_message = "You have already applied to this job"

    def __init__(self, job_id: int | None = None, user_id: int | None = None):
        self.job_id = job_id
        self.user_id = user_id
        super().__init__()
