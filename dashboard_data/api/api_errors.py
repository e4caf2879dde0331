"""
Error types raised by the backend client and accessors.
"""

from typing import Optional


class BackendError(Exception):
    """Base class for failures talking to the dashboard backend."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def add_context(self, context: str) -> "BackendError":
        """Prefix the message with a resource-specific context, keeping type and fields."""
        self.message = f"{context}: {self.message}"
        self.args = (self.message,)
        return self

    def __str__(self) -> str:
        return self.message


class NetworkError(BackendError):
    """The backend could not be reached at all."""

    def __init__(self, url: str, reason: Optional[str] = None):
        super().__init__(
            f"Network error: Unable to connect to API at {url}. "
            f"Make sure the backend server is running."
        )
        self.url = url
        self.reason = reason


class ApiError(BackendError):
    """The backend answered with a non-2xx status."""

    def __init__(self, status: int, status_text: str, body: str):
        super().__init__(f"API request failed: {status} {status_text}. {body}")
        self.status = status
        self.status_text = status_text
        self.body = body


class ResponseDecodeError(BackendError):
    """A 2xx response whose body is not JSON."""

    def __init__(self, url: str, body: str):
        super().__init__(f"Invalid JSON in response from {url}: {body[:200]}")
        self.url = url
        self.body = body


class ShapeWarning(UserWarning):
    """Response JSON did not match the expected shape; a default was used."""
