"""Transport interface."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class TransportRequest:
    """Description of one network call handed to a transport.

    Cancellation is delivered by cancelling the awaiting task, so no
    explicit signal object travels with the request.
    """

    method: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None


class IResponse(Protocol):
    """Contract for responses returned by a transport."""

    @property
    def status(self) -> int:
        """The numeric HTTP status."""
        ...

    @property
    def headers(self) -> Mapping[str, str]:
        """Case-insensitive header lookup."""
        ...

    async def json(self) -> Any:
        """Read the body as structured data.

        Raises:
            ValueError: If the body is not valid JSON.
        """
        ...

    async def text(self) -> str:
        """Read the body as text."""
        ...


class ITransport(Protocol):
    """Contract for the network call primitive.

    A transport performs exactly one call and either returns a response,
    whatever its status, or raises when no status could be obtained.
    """

    async def __call__(self, url: str, request: TransportRequest) -> IResponse:
        """Perform the call.

        Args:
            url: The effective request URL.
            request: Method, headers and body for the call.

        Returns:
            The received response.
        """
        ...
