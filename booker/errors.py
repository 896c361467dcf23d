"""
Error taxonomy for the booking client.

Input errors (InvalidDate / InvalidTime) are raised before any network call.
Resolution errors (ResourceNotFound / BookingNotFound) are raised after a
successful read produced nothing usable. ApiError subclasses describe what the
remote service answered. Nothing here is retried; booker.main catches
BookerError once at the top and prints it.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence


class BookerError(Exception):
    """Base class for every error this tool reports to the user."""


class ConfigError(BookerError):
    pass


class InvalidDate(BookerError):
    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid date: {value}. Use YYYY-MM-DD, DD/MM or DD/MM/YYYY")


class InvalidTime(BookerError):
    def __init__(self, value: str, reason: Optional[str] = None):
        self.value = value
        super().__init__(reason or f"Invalid time: {value}. Use HH:MM, HH or HHhs")


class ResourceNotFound(BookerError):
    def __init__(self, token: str, candidates: Sequence[Any] = ()):
        self.token = token
        self.candidates: List[Any] = list(candidates)
        super().__init__(f'Resource "{token}" not found.')


class BookingNotFound(BookerError):
    pass


# ---- Remote service outcomes ---------------------------------------------------

class ApiError(BookerError):
    """
    A non-2xx answer from the booking service.

    status_code: HTTP status
    body       : parsed JSON body, raw text, or None when the body was empty
    """

    default_message = "API request failed"

    def __init__(self, status_code: int, message: Optional[str] = None, body: Any = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message or self.default_message)


class Unauthorized(ApiError):
    default_message = "Invalid API key. Check your DESKBIRD_API_KEY."


class Forbidden(ApiError):
    default_message = "Not authorized to access this resource."


class RateLimited(ApiError):
    default_message = "Rate limit exceeded. Please wait before retrying."


class RequestFailed(ApiError):
    pass


STATUS_ERRORS: Dict[int, type] = {
    401: Unauthorized,
    403: Forbidden,
    429: RateLimited,
}


def classify_status(status_code: int) -> type:
    """Return the ApiError subclass for a non-2xx status (RequestFailed if unlisted)."""
    return STATUS_ERRORS.get(status_code, RequestFailed)
