"""
exceptions.py – Exception hierarchy for the disc collection service.

All service-level errors derive from DiscServiceError so callers can catch
broadly or specifically depending on context.
"""
from typing import Optional


class DiscServiceError(Exception):
    """Base class for all disc service exceptions."""


class InvalidArgument(DiscServiceError):
    """Raised when an account id or item id fails validation."""


class UpstreamError(DiscServiceError):
    """Raised when dizzylab cannot be reached or answers unusably."""


class NetworkError(UpstreamError):
    """Raised when no response was received (connection error, timeout)."""


class UpstreamHTTPError(UpstreamError):
    """
    Raised when dizzylab answers with a non-2xx status.

    Attributes
    ----------
    status : HTTP status code returned by upstream.
    """

    def __init__(self, status: int, url: Optional[str] = None) -> None:
        self.status = status
        self.url = url
        message = f"Upstream returned HTTP {status}"
        if url:
            message += f" for {url}"
        super().__init__(message + ".")


class MalformedResponse(UpstreamError):
    """Raised when the response body is not the expected content type or shape."""


class StoreUnavailable(DiscServiceError):
    """Raised when the cache store cannot be read or written."""
