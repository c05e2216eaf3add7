"""Transport implementations."""

from cachefetch.infrastructure.transports.httpx_transport import HttpxResponse, HttpxTransport

__all__ = ["HttpxResponse", "HttpxTransport"]
