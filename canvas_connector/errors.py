"""Exception hierarchy for Canvas API failures."""

from typing import Any, List, Optional


class CanvasAPIError(Exception):
    """Base exception for Canvas API errors."""

    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        url: Optional[str] = None,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.url = url
        self.status = status


class CanvasHTTPError(CanvasAPIError):
    """A request failed with a non-retryable HTTP status or transport error (status 0)."""
    pass


class RetriesExhaustedError(CanvasHTTPError):
    """Every allowed attempt ended in a retryable failure."""

    def __init__(self, message: str, method: str, url: str, status: int, attempts: int) -> None:
        super().__init__(message, method=method, url=url, status=status)
        self.attempts = attempts


class DeserializationError(CanvasAPIError):
    """A response body could not be decoded into the expected shape."""
    pass


class PaginationLimitExceeded(CanvasAPIError):
    """The server kept returning data past the configured page cap."""

    def __init__(self, message: str, url: str, pages: int, items: List[Any]) -> None:
        super().__init__(message, method="GET", url=url)
        self.pages = pages
        self.items = items


class RequestCancelled(CanvasAPIError):
    """The caller cancelled the operation or its deadline passed."""
    pass


class CredentialsError(CanvasAPIError):
    """No usable Canvas credentials could be found."""
    pass
