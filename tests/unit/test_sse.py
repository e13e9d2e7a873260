"""Unit tests for SSE framing and the provider relay."""

import json
from collections.abc import AsyncGenerator

import pytest_check as check

from src.api.sse import format_sse, relay_stream
from src.models.schemas import ContentEvent, DoneEvent
from src.providers.errors import ErrorCode, ProviderError


class StubRequest:
    """Reports a disconnect after ``connected_for`` checks."""

    def __init__(self, connected_for: int = 1_000) -> None:
        self.connected_for = connected_for
        self.checks = 0

    async def is_disconnected(self) -> bool:
        self.checks += 1
        return self.checks > self.connected_for


class TrackedChunks:
    """Async generator wrapper that records whether it was closed."""

    def __init__(self, chunks: list[str], error: Exception | None = None) -> None:
        self.chunks = chunks
        self.error = error
        self.closed = False
        self.pulled = 0

    async def generate(self) -> AsyncGenerator[str]:
        try:
            for chunk in self.chunks:
                self.pulled += 1
                yield chunk
            if self.error is not None:
                raise self.error
        finally:
            self.closed = True


def parse_events(frames: list[str]) -> list[dict]:
    return [json.loads(frame.removeprefix("data: ").strip()) for frame in frames]


async def relay(request: StubRequest, source: TrackedChunks) -> list[dict]:
    return parse_events([frame async for frame in relay_stream(request, source.generate())])


class TestFormatSse:
    def test_frames_event_as_data_record(self) -> None:
        check.equal(format_sse(ContentEvent(data="Hi")), 'data: {"type":"content","data":"Hi"}\n\n')
        check.equal(format_sse(DoneEvent()), 'data: {"type":"done"}\n\n')


class TestRelayStream:
    """Tests for stream termination and cancellation."""

    async def test_content_then_done(self) -> None:
        source = TrackedChunks(["Hel", "lo"])

        events = await relay(StubRequest(), source)

        check.equal(
            events,
            [
                {"type": "content", "data": "Hel"},
                {"type": "content", "data": "lo"},
                {"type": "done"},
            ],
        )
        check.is_true(source.closed)

    async def test_provider_error_after_content(self) -> None:
        source = TrackedChunks(["partial"], ProviderError.from_code(ErrorCode.TIMEOUT))

        events = await relay(StubRequest(), source)

        check.equal(events[0], {"type": "content", "data": "partial"})
        check.equal(events[-1]["type"], "error")
        check.equal(events[-1]["code"], "TIMEOUT")
        check.equal([e["type"] for e in events].count("done"), 0)

    async def test_unexpected_error_is_unknown(self) -> None:
        source = TrackedChunks([], RuntimeError("internal detail"))

        events = await relay(StubRequest(), source)

        check.equal(len(events), 1)
        check.equal(events[0]["code"], "UNKNOWN_ERROR")
        check.is_not_in("internal detail", events[0]["error"])

    async def test_disconnect_stops_without_terminal_event(self) -> None:
        source = TrackedChunks(["one", "two", "three", "four"])

        events = await relay(StubRequest(connected_for=2), source)

        check.equal([e["data"] for e in events], ["one", "two"])
        check.is_true(source.closed)
        check.less(source.pulled, 4)

    async def test_exactly_one_terminal_event(self) -> None:
        for error in (None, ProviderError.from_code(ErrorCode.SERVICE_ERROR), ValueError("x")):
            events = await relay(StubRequest(), TrackedChunks(["a", "b"], error))
            terminal = [e for e in events if e["type"] in ("done", "error")]

            check.equal(len(terminal), 1)
            check.equal(events[-1], terminal[0])
