"""Single-attempt request execution."""

import asyncio
import inspect
import logging
from collections.abc import Callable, Sequence
from functools import partial
from typing import Any

from cachefetch.core.entities.hooks import HookContext, HookKind, Middleware
from cachefetch.core.entities.request_options import RequestOptions
from cachefetch.core.exceptions import (
    FetchError,
    HTTPStatusError,
    NetworkError,
    RequestCancelledError,
    RequestTimeoutError,
)
from cachefetch.core.interfaces.transport import IResponse, ITransport, TransportRequest

logger = logging.getLogger(__name__)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _hooks(stack: Sequence[Middleware], kind: HookKind) -> list[Callable[..., Any]]:
    return [hook for mw in stack if (hook := mw.hook_for(kind)) is not None]


async def extract_error_payload(response: IResponse) -> Any:
    """Best-effort decode of an error response body.

    Tries JSON first, then raw text. Returns None if the body cannot be
    read at all; never raises.
    """
    try:
        return await response.json()
    except Exception:
        logger.debug("Error body is not JSON, falling back to text")
    try:
        return await response.text()
    except Exception:
        logger.debug("Error body could not be read", exc_info=True)
        return None


async def parse_response(response: IResponse, options: RequestOptions) -> Any:
    """Decode a successful response according to ``options``."""
    if options.parser is not None:
        return await _maybe_await(options.parser(response))
    content_type = response.headers.get("content-type") or ""
    if options.parse_json and "application/json" in content_type:
        return await response.json()
    return await response.text()


class RequestExecutor:
    """Performs one attempt: hooks, transport call, outcome classification.

    Global middleware runs before per-call middleware, in registration
    order. Hook failures are logged and never abort the request.
    """

    def __init__(
        self,
        transport: ITransport,
        middleware: Sequence[Middleware] | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            transport: The network call primitive.
            middleware: Global middleware list. The executor keeps the
                reference, so later appends apply to later calls.
        """
        self._transport = transport
        self._middleware = middleware if middleware is not None else []

    async def execute(self, url: str, options: RequestOptions) -> Any:
        """Run a single attempt.

        Args:
            url: The effective request URL.
            options: Resolved request options.

        Returns:
            The decoded response payload.

        Raises:
            NetworkError: The transport failed before a status was obtained.
            RequestTimeoutError: The timeout elapsed first.
            RequestCancelledError: ``options.cancel_event`` was set first.
            HTTPStatusError: The status failed ``options.validate_status``.
        """
        ctx = HookContext(url=url, options=options)
        stack = [*self._middleware, *options.middleware]

        await self.run_request_hooks(stack, ctx)
        try:
            response = await self._invoke(url, options)
            await self.run_response_hooks(stack, response, ctx)

            if not options.validate_status(response.status):
                raise HTTPStatusError(
                    status=response.status,
                    response=response,
                    data=await extract_error_payload(response),
                )
            return await parse_response(response, options)
        except Exception as exc:
            await self.run_error_hooks(stack, exc, ctx)
            raise

    async def run_request_hooks(self, stack: Sequence[Middleware], ctx: HookContext) -> None:
        await self._dispatch(
            HookKind.REQUEST,
            ctx,
            [partial(hook, ctx) for hook in _hooks(stack, HookKind.REQUEST)],
        )

    async def run_response_hooks(
        self, stack: Sequence[Middleware], response: IResponse, ctx: HookContext
    ) -> None:
        await self._dispatch(
            HookKind.RESPONSE,
            ctx,
            [partial(hook, response, ctx) for hook in _hooks(stack, HookKind.RESPONSE)],
        )

    async def run_error_hooks(
        self, stack: Sequence[Middleware], error: BaseException, ctx: HookContext
    ) -> None:
        await self._dispatch(
            HookKind.ERROR,
            ctx,
            [partial(hook, error, ctx) for hook in _hooks(stack, HookKind.ERROR)],
        )

    async def _dispatch(
        self, kind: HookKind, ctx: HookContext, calls: list[Callable[[], Any]]
    ) -> None:
        for call in calls:
            try:
                await _maybe_await(call())
            except Exception:
                logger.exception("%s hook failed for %s", kind.value, ctx.url)

    async def _invoke(self, url: str, options: RequestOptions) -> IResponse:
        """Call the transport, racing it against timeout and cancellation.

        Every helper task is cancelled on exit, whatever the outcome.
        """
        cancel_event = options.cancel_event
        if cancel_event is not None and cancel_event.is_set():
            raise RequestCancelledError()

        request = TransportRequest(
            method=options.method,
            headers=dict(options.headers),
            body=options.body,
        )
        call = asyncio.ensure_future(self._transport(url, request))
        waiters: set[asyncio.Future[Any]] = {call}
        abort: asyncio.Future[Any] | None = None
        if cancel_event is not None:
            abort = asyncio.ensure_future(cancel_event.wait())
            waiters.add(abort)

        loop = asyncio.get_running_loop()
        started = loop.time()
        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=options.timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for waiter in waiters:
                if not waiter.done():
                    waiter.cancel()

        if call in done:
            try:
                return call.result()
            except FetchError:
                raise
            except Exception as exc:
                raise NetworkError(str(exc) or type(exc).__name__) from exc

        if abort is not None and abort in done:
            raise RequestCancelledError()

        # Only the deadline can end the wait with nothing done
        raise RequestTimeoutError(timeout=options.timeout or 0.0, elapsed=loop.time() - started)
