"""Exceptions raised by cachefetch requests."""

from typing import Any


class FetchError(Exception):
    """Base class for every failure surfaced by a fetch."""

    status: int | None = None
    response: Any = None
    data: Any = None


class NetworkError(FetchError):
    """The transport could not complete the call before a status was obtained."""


class RequestCancelledError(FetchError):
    """The call was cancelled before the transport completed.

    Attributes:
        cause: ``"cancelled"`` for caller cancellation, ``"timeout"`` when
            the deadline fired.
    """

    def __init__(self, message: str = "Request cancelled", cause: str = "cancelled") -> None:
        super().__init__(message)
        self.cause = cause


class RequestTimeoutError(RequestCancelledError):
    """The call exceeded its timeout."""

    def __init__(self, timeout: float, elapsed: float) -> None:
        super().__init__(f"Request timed out after {elapsed:.3f}s", cause="timeout")
        self.timeout = timeout
        self.elapsed = elapsed


class HTTPStatusError(FetchError):
    """A response was received but its status was not acceptable.

    The message is taken from the decoded error payload when it carries one,
    otherwise it falls back to ``"HTTP error <status>"``.
    """

    def __init__(self, status: int, response: Any = None, data: Any = None) -> None:
        super().__init__(_message_from_payload(data) or f"HTTP error {status}")
        self.status = status
        self.response = response
        self.data = data


def _message_from_payload(data: Any) -> str | None:
    if isinstance(data, dict):
        for field in ("message", "error", "detail"):
            value = data.get(field)
            if isinstance(value, str) and value:
                return value
        return None
    if isinstance(data, str) and data.strip():
        return data.strip()
    return None
