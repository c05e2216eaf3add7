"""Test doubles shared across the cachefetch test suite."""

import asyncio
import json
from datetime import datetime, timedelta, timezone
from typing import Any

from cachefetch import TransportRequest

_MISSING = object()


class FakeClock:
    """Manually advanced clock returning aware datetimes."""

    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class FakeResponse:
    """Minimal response satisfying the transport response contract."""

    def __init__(
        self,
        status: int = 200,
        json_body: Any = _MISSING,
        text_body: str | Exception | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.status = status
        self._json_body = json_body
        self._text_body = text_body
        self.headers = dict(headers or {})
        if json_body is not _MISSING:
            self.headers.setdefault("content-type", "application/json")

    async def json(self) -> Any:
        if self._json_body is _MISSING:
            raise ValueError("body is not JSON")
        return self._json_body

    async def text(self) -> str:
        if isinstance(self._text_body, Exception):
            raise self._text_body
        if self._text_body is not None:
            return self._text_body
        if self._json_body is not _MISSING:
            return json.dumps(self._json_body)
        return ""


class FakeTransport:
    """Scripted transport recording every call.

    Outcomes are consumed in order; the last one repeats. An outcome that
    is an exception is raised instead of returned.
    """

    def __init__(self, *outcomes: Any, delay: float = 0.0) -> None:
        self.calls: list[tuple[str, TransportRequest]] = []
        self.outcomes = list(outcomes) or [FakeResponse(json_body={"ok": True})]
        self.delay = delay
        self.gate: asyncio.Event | None = None

    async def __call__(self, url: str, request: TransportRequest) -> FakeResponse:
        self.calls.append((url, request))
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
