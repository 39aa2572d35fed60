"""
Custom exceptions and error handling for Trip Diary.

Defines application-specific exceptions with error codes for consistent
error handling across Lambda functions and client communication.

Usage:
    from core.errors import NotFoundError, ErrorCode

    raise NotFoundError("Travel abc not found", code=ErrorCode.TRAVEL_NOT_FOUND)
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for client-facing error messages."""

    # Authentication errors
    AUTH_FAILED = "AUTH_FAILED"
    UNAUTHORIZED = "UNAUTHORIZED"

    # Authorization errors
    FORBIDDEN = "FORBIDDEN"
    NOT_A_MEMBER = "NOT_A_MEMBER"

    # Lookup errors
    TRAVEL_NOT_FOUND = "TRAVEL_NOT_FOUND"
    TRAVELS_NOT_FOUND = "TRAVELS_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    INVITE_NOT_FOUND = "INVITE_NOT_FOUND"

    # Conflict errors
    ALREADY_MEMBER = "ALREADY_MEMBER"
    TOKEN_EXHAUSTED = "TOKEN_EXHAUSTED"
    CONCURRENT_UPDATE = "CONCURRENT_UPDATE"

    # Storage errors
    UPSTREAM_FAILURE = "UPSTREAM_FAILURE"
    UPLOAD_FAILED = "UPLOAD_FAILED"
    SIGN_FAILED = "SIGN_FAILED"
    MEDIA_CLEANUP_INCOMPLETE = "MEDIA_CLEANUP_INCOMPLETE"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"

    # System errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


USER_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.AUTH_FAILED: "Authentication failed. Please sign in again.",
    ErrorCode.UNAUTHORIZED: "Please sign in to continue.",
    ErrorCode.FORBIDDEN: "You do not have permission to modify this travel.",
    ErrorCode.NOT_A_MEMBER: "You are not a member of this travel.",
    ErrorCode.TRAVEL_NOT_FOUND: "The travel could not be found.",
    ErrorCode.TRAVELS_NOT_FOUND: "No travels were found for your account.",
    ErrorCode.USER_NOT_FOUND: "Your user profile could not be found.",
    ErrorCode.INVITE_NOT_FOUND: "No travel matches this invite code.",
    ErrorCode.ALREADY_MEMBER: "You are already a member of this travel.",
    ErrorCode.TOKEN_EXHAUSTED: "Unable to create the travel right now. Please try again.",
    ErrorCode.CONCURRENT_UPDATE: "The travel was changed by someone else. Please try again.",
    ErrorCode.UPSTREAM_FAILURE: "A storage service is temporarily unavailable. Please try again.",
    ErrorCode.UPLOAD_FAILED: "The travel image could not be uploaded. Please try again.",
    ErrorCode.SIGN_FAILED: "The image link could not be created. Please try again.",
    ErrorCode.MEDIA_CLEANUP_INCOMPLETE: "The travel was deleted but some images are still being removed.",
    ErrorCode.VALIDATION_ERROR: "Your request contains invalid information. Please check and try again.",
    ErrorCode.INVALID_REQUEST: "Invalid request format. Please try again.",
    ErrorCode.INTERNAL_ERROR: "An unexpected error occurred. Please try again.",
}

HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.AUTH_FAILED: 401,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.NOT_A_MEMBER: 403,
    ErrorCode.TRAVEL_NOT_FOUND: 404,
    ErrorCode.TRAVELS_NOT_FOUND: 404,
    ErrorCode.USER_NOT_FOUND: 404,
    ErrorCode.INVITE_NOT_FOUND: 404,
    ErrorCode.ALREADY_MEMBER: 400,
    ErrorCode.TOKEN_EXHAUSTED: 409,
    ErrorCode.CONCURRENT_UPDATE: 409,
    ErrorCode.UPSTREAM_FAILURE: 502,
    ErrorCode.UPLOAD_FAILED: 502,
    ErrorCode.SIGN_FAILED: 500,
    ErrorCode.MEDIA_CLEANUP_INCOMPLETE: 200,
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.INTERNAL_ERROR: 500,
}


class TripDiaryError(Exception):
    """Base exception for all Trip Diary errors."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INTERNAL_ERROR):
        self.message = message
        self.code = code
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return USER_MESSAGES.get(self.code, USER_MESSAGES[ErrorCode.INTERNAL_ERROR])

    @property
    def status_code(self) -> int:
        return HTTP_STATUS.get(self.code, 500)


class AuthenticationError(TripDiaryError):
    """No authenticated identity, or the token could not be verified."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.AUTH_FAILED):
        super().__init__(message, code)


class ForbiddenError(TripDiaryError):
    """Authenticated, but not a member of the travel."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.FORBIDDEN):
        super().__init__(message, code)


class NotFoundError(TripDiaryError):
    """Travel, user or invite token does not exist."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.TRAVEL_NOT_FOUND):
        super().__init__(message, code)


class ConflictError(TripDiaryError):
    """Request conflicts with the current state of a travel."""

    pass


class UpstreamError(TripDiaryError):
    """Record store or blob store I/O failed."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.UPSTREAM_FAILURE):
        super().__init__(message, code)


class ValidationError(TripDiaryError):
    """Input validation or schema validation failed."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.VALIDATION_ERROR):
        super().__init__(message, code)


class TokenCollisionError(TripDiaryError):
    """The invite token is already claimed by another travel."""

    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Invite token already claimed: {token}", ErrorCode.TOKEN_EXHAUSTED)


class MediaCleanupIncompleteError(TripDiaryError):
    """Travel record deleted, but some media objects could not be removed."""

    def __init__(self, travel_id: str, failed_keys: list[str]):
        self.travel_id = travel_id
        self.failed_keys = failed_keys
        super().__init__(
            f"Failed to delete {len(failed_keys)} media object(s) for travel {travel_id}: {failed_keys}",
            ErrorCode.MEDIA_CLEANUP_INCOMPLETE,
        )
