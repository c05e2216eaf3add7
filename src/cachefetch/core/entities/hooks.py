"""Request lifecycle hooks."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from cachefetch.core.entities.request_options import RequestOptions
    from cachefetch.core.interfaces.transport import IResponse


class HookKind(str, Enum):
    """Lifecycle point at which a hook runs."""

    REQUEST = "request"
    RESPONSE = "response"
    ERROR = "error"


@dataclass(frozen=True)
class HookContext:
    """Per-call context handed to every hook."""

    url: str
    options: "RequestOptions"


RequestHook = Callable[[HookContext], Awaitable[None] | None]
ResponseHook = Callable[["IResponse", HookContext], Awaitable[None] | None]
ErrorHook = Callable[[BaseException, HookContext], Awaitable[None] | None]


@dataclass(frozen=True)
class Middleware:
    """A bundle of optional hooks, one per lifecycle point.

    Each callback may be sync or async. Failures are logged and never
    abort the request.

    Example:
        async def add_auth(ctx: HookContext) -> None:
            ctx.options.headers["Authorization"] = "Bearer ..."

        service.add_middleware(Middleware(on_request=add_auth))
    """

    on_request: RequestHook | None = None
    on_response: ResponseHook | None = None
    on_error: ErrorHook | None = None

    def hook_for(self, kind: HookKind) -> Callable[..., Any] | None:
        """Return the callback registered for ``kind``, if any."""
        if kind is HookKind.REQUEST:
            return self.on_request
        if kind is HookKind.RESPONSE:
            return self.on_response
        return self.on_error
