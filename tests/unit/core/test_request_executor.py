"""Tests for RequestExecutor."""

import asyncio

import pytest
from helpers import FakeResponse, FakeTransport

from cachefetch import (
    HookContext,
    HTTPStatusError,
    Middleware,
    NetworkError,
    RequestCancelledError,
    RequestOptions,
    RequestTimeoutError,
)
from cachefetch.core.services.request_executor import RequestExecutor

URL = "https://api.example.com/items"


def recording_middleware(name: str, events: list[str]) -> Middleware:
    """Create middleware that records every hook invocation."""

    async def on_request(ctx: HookContext) -> None:
        events.append(f"{name}:request")

    def on_response(response: FakeResponse, ctx: HookContext) -> None:
        events.append(f"{name}:response:{response.status}")

    def on_error(error: Exception, ctx: HookContext) -> None:
        events.append(f"{name}:error:{type(error).__name__}")

    return Middleware(on_request=on_request, on_response=on_response, on_error=on_error)


class TestExecution:
    """Tests for a successful single attempt."""

    @pytest.mark.asyncio
    async def test_json_response(self) -> None:
        """Test JSON responses are decoded."""
        transport = FakeTransport(FakeResponse(json_body={"id": 1}))
        executor = RequestExecutor(transport)

        result = await executor.execute(URL, RequestOptions(headers={"X-Id": "1"}))

        assert result == {"id": 1}
        url, request = transport.calls[0]
        assert url == URL
        assert request.method == "GET"
        assert request.headers == {"X-Id": "1"}

    @pytest.mark.asyncio
    async def test_text_response(self) -> None:
        """Test non-JSON content types are returned as text."""
        executor = RequestExecutor(FakeTransport(FakeResponse(text_body="plain")))
        assert await executor.execute(URL, RequestOptions()) == "plain"

    @pytest.mark.asyncio
    async def test_parse_json_disabled(self) -> None:
        """Test parse_json=False keeps the raw text."""
        executor = RequestExecutor(FakeTransport(FakeResponse(json_body={"a": 1})))
        result = await executor.execute(URL, RequestOptions(parse_json=False))
        assert result == '{"a": 1}'

    @pytest.mark.asyncio
    async def test_custom_parser(self) -> None:
        """Test a parser receives the raw response."""
        executor = RequestExecutor(FakeTransport(FakeResponse(status=204)))

        async def parser(response: FakeResponse) -> int:
            return response.status

        assert await executor.execute(URL, RequestOptions(parser=parser)) == 204

    @pytest.mark.asyncio
    async def test_custom_validate_status(self) -> None:
        """Test validate_status can accept non-2xx responses."""
        executor = RequestExecutor(
            FakeTransport(FakeResponse(status=404, json_body={"missing": True}))
        )
        result = await executor.execute(
            URL, RequestOptions(validate_status=lambda status: status < 500)
        )
        assert result == {"missing": True}


class TestErrors:
    """Tests for failure classification."""

    @pytest.mark.asyncio
    async def test_status_error_with_json_payload(self) -> None:
        """Test error payload and message come from the JSON body."""
        response = FakeResponse(status=422, json_body={"message": "invalid name"})
        executor = RequestExecutor(FakeTransport(response))

        with pytest.raises(HTTPStatusError) as exc_info:
            await executor.execute(URL, RequestOptions())

        assert exc_info.value.status == 422
        assert exc_info.value.data == {"message": "invalid name"}
        assert exc_info.value.response is response
        assert str(exc_info.value) == "invalid name"

    @pytest.mark.asyncio
    async def test_status_error_with_text_payload(self) -> None:
        """Test a non-JSON error body falls back to text."""
        executor = RequestExecutor(
            FakeTransport(FakeResponse(status=502, text_body="bad gateway"))
        )

        with pytest.raises(HTTPStatusError) as exc_info:
            await executor.execute(URL, RequestOptions())

        assert exc_info.value.data == "bad gateway"
        assert str(exc_info.value) == "bad gateway"

    @pytest.mark.asyncio
    async def test_status_error_with_unreadable_body(self) -> None:
        """Test an unreadable error body leaves data empty."""
        executor = RequestExecutor(
            FakeTransport(FakeResponse(status=500, text_body=RuntimeError("gone")))
        )

        with pytest.raises(HTTPStatusError) as exc_info:
            await executor.execute(URL, RequestOptions())

        assert exc_info.value.data is None
        assert str(exc_info.value) == "HTTP error 500"

    @pytest.mark.asyncio
    async def test_transport_failure_is_network_error(self) -> None:
        """Test low-level failures are wrapped as NetworkError."""
        cause = ConnectionResetError("reset by peer")
        executor = RequestExecutor(FakeTransport(cause))

        with pytest.raises(NetworkError) as exc_info:
            await executor.execute(URL, RequestOptions())

        assert exc_info.value.__cause__ is cause
        assert exc_info.value.status is None

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        """Test the deadline produces a timeout-tagged cancellation."""
        executor = RequestExecutor(FakeTransport(FakeResponse(), delay=1.0))

        with pytest.raises(RequestTimeoutError) as exc_info:
            await executor.execute(URL, RequestOptions(timeout=0.01))

        assert isinstance(exc_info.value, RequestCancelledError)
        assert exc_info.value.cause == "timeout"
        assert exc_info.value.timeout == 0.01

    @pytest.mark.asyncio
    async def test_pre_cancelled(self) -> None:
        """Test an already-set cancel event skips the transport."""
        transport = FakeTransport()
        executor = RequestExecutor(transport)
        cancel = asyncio.Event()
        cancel.set()

        with pytest.raises(RequestCancelledError) as exc_info:
            await executor.execute(URL, RequestOptions(cancel_event=cancel))

        assert exc_info.value.cause == "cancelled"
        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_cancel_while_in_flight(self) -> None:
        """Test setting the cancel event aborts a pending call."""
        transport = FakeTransport()
        transport.gate = asyncio.Event()
        executor = RequestExecutor(transport)
        cancel = asyncio.Event()

        task = asyncio.ensure_future(
            executor.execute(URL, RequestOptions(cancel_event=cancel))
        )
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        cancel.set()

        with pytest.raises(RequestCancelledError) as exc_info:
            await task
        assert not isinstance(exc_info.value, RequestTimeoutError)


class TestMiddleware:
    """Tests for hook ordering and isolation."""

    @pytest.mark.asyncio
    async def test_global_hooks_run_before_per_call(self) -> None:
        """Test global middleware precedes per-call middleware."""
        events: list[str] = []
        executor = RequestExecutor(
            FakeTransport(FakeResponse(json_body={})),
            [recording_middleware("global", events)],
        )

        await executor.execute(
            URL, RequestOptions(middleware=[recording_middleware("call", events)])
        )

        assert events == [
            "global:request",
            "call:request",
            "global:response:200",
            "call:response:200",
        ]

    @pytest.mark.asyncio
    async def test_error_hooks_after_response_hooks(self) -> None:
        """Test a rejected status runs response hooks, then error hooks."""
        events: list[str] = []
        executor = RequestExecutor(
            FakeTransport(FakeResponse(status=500)),
            [recording_middleware("global", events)],
        )

        with pytest.raises(HTTPStatusError):
            await executor.execute(URL, RequestOptions())

        assert events == [
            "global:request",
            "global:response:500",
            "global:error:HTTPStatusError",
        ]

    @pytest.mark.asyncio
    async def test_later_registration_applies(self) -> None:
        """Test middleware appended to the shared list is picked up."""
        events: list[str] = []
        middleware: list[Middleware] = []
        executor = RequestExecutor(FakeTransport(FakeResponse(json_body={})), middleware)

        await executor.execute(URL, RequestOptions())
        middleware.append(recording_middleware("late", events))
        await executor.execute(URL, RequestOptions())

        assert events == ["late:request", "late:response:200"]

    @pytest.mark.asyncio
    async def test_hook_failure_is_swallowed(self) -> None:
        """Test a raising hook does not abort the request."""
        events: list[str] = []

        def broken(ctx: HookContext) -> None:
            raise RuntimeError("hook bug")

        executor = RequestExecutor(
            FakeTransport(FakeResponse(json_body={"ok": True})),
            [Middleware(on_request=broken), recording_middleware("next", events)],
        )

        result = await executor.execute(URL, RequestOptions())

        assert result == {"ok": True}
        assert events[0] == "next:request"

    @pytest.mark.asyncio
    async def test_hook_context(self) -> None:
        """Test hooks receive the URL and options."""
        seen: list[HookContext] = []
        options = RequestOptions(method="DELETE", middleware=[Middleware(on_request=seen.append)])
        executor = RequestExecutor(FakeTransport(FakeResponse(status=204)))

        await executor.execute(URL, options)

        assert seen[0].url == URL
        assert seen[0].options is options
