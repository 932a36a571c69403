"""The consumer handle for streamed agent deltas, and replay of stored messages."""

from __future__ import annotations

import queue
import threading
from collections import deque
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Sequence

from agentsdk.core.cancel import Context
from agentsdk.core.content import (
    AssistantMessage,
    Message,
    SystemMessage,
    TextContent,
    ToolResultContent,
    ToolUseContent,
    UserMessage,
)
from agentsdk.core.delta import (
    Delta,
    DoneDelta,
    TextContentDelta,
    TextEndDelta,
    TextStartDelta,
    ToolCallEndDelta,
    ToolCallStartDelta,
    ToolExecEndDelta,
    ToolExecStartDelta,
)

DEFAULT_BUFFER_SIZE = 128
_POLL_INTERVAL = 0.05


@dataclass(frozen=True)
class Resolution:
    """The consumer's decision on a marked tool call."""

    approved: bool
    modified_args: Optional[dict[str, Any]] = None
    message: str = ""


class EventStream:
    """A bounded, thread-safe stream of deltas with cancellation and marker resolution."""

    def __init__(
        self, ctx: Optional[Context] = None, buffer_size: int = DEFAULT_BUFFER_SIZE
    ) -> None:
        self._ctx = ctx if ctx is not None else Context()
        self._buffer_size = max(1, buffer_size)
        self._buffer: deque[Delta] = deque()
        self._cond = threading.Condition()
        self._closed = False
        self._done = threading.Event()
        self._err: Optional[BaseException] = None
        self._res_lock = threading.Lock()
        self._resolutions: dict[str, "queue.Queue[Resolution]"] = {}

    @property
    def context(self) -> Context:
        """The context that producers of this stream watch."""
        return self._ctx

    def deltas(self) -> Iterator[Delta]:
        """Yield deltas until the stream is closed and drained."""
        while True:
            with self._cond:
                while not self._buffer and not self._closed:
                    self._cond.wait()
                if not self._buffer:
                    return
                delta = self._buffer.popleft()
                self._cond.notify_all()
            yield delta

    def __iter__(self) -> Iterator[Delta]:
        return self.deltas()

    def wait(self) -> None:
        """Block until the stream is closed; raise the error it closed with, if any."""
        self._done.wait()
        if self._err is not None:
            raise self._err

    def cancel(self) -> None:
        """Stop the stream's producers."""
        self._ctx.cancel()

    def send(self, delta: Delta) -> None:
        """Queue a delta, blocking while the buffer is full; drop it once canceled."""
        with self._cond:
            while True:
                if self._closed:
                    raise RuntimeError("send on closed stream")
                if len(self._buffer) < self._buffer_size:
                    self._buffer.append(delta)
                    self._cond.notify_all()
                    return
                if self._ctx.is_done():
                    return
                self._cond.wait(_POLL_INTERVAL)

    def close(self, err: Optional[BaseException] = None) -> None:
        """Close the stream, recording ``err`` for ``wait``."""
        with self._cond:
            if self._closed:
                raise RuntimeError("stream already closed")
            self._err = err
            self._closed = True
            self._cond.notify_all()
        self._done.set()

    def resolve_marker(
        self,
        tool_call_id: str,
        approved: bool,
        modified_args: Optional[dict[str, Any]] = None,
        message: str = "",
    ) -> None:
        """Deliver the consumer's decision for a marked tool call, if one is awaited."""
        with self._res_lock:
            pending = self._resolutions.get(tool_call_id)
        if pending is not None:
            pending.put(Resolution(approved, modified_args, message))

    def await_resolution(self, tool_call_id: str) -> "queue.Queue[Resolution]":
        """Register a tool call as awaiting resolution and return its queue."""
        pending: "queue.Queue[Resolution]" = queue.Queue(maxsize=1)
        with self._res_lock:
            self._resolutions[tool_call_id] = pending
        return pending


def _replay_deltas(messages: Sequence[Message]) -> Iterator[Delta]:
    for message in messages:
        if isinstance(message, AssistantMessage):
            for block in message.content:
                if isinstance(block, TextContent):
                    yield TextStartDelta()
                    yield TextContentDelta(block.text)
                    yield TextEndDelta()
                elif isinstance(block, ToolUseContent):
                    yield ToolCallStartDelta(block.id, block.name)
                    yield ToolCallEndDelta(block.arguments)
        elif isinstance(message, (SystemMessage, UserMessage)):
            for block in message.content:
                if isinstance(block, ToolResultContent):
                    yield ToolExecStartDelta(block.tool_call_id)
                    yield ToolExecEndDelta(block.tool_call_id, result=block.text)


def replay(messages: Sequence[Message]) -> EventStream:
    """Stream stored messages back as the deltas a live run would have produced.

    Only assistant content and tool results produce deltas.
    """
    stream = EventStream()
    stored = list(messages)

    def run() -> None:
        try:
            for delta in _replay_deltas(stored):
                stream.send(delta)
        finally:
            stream.send(DoneDelta())
            stream.close(None)

    threading.Thread(target=run, name="replay", daemon=True).start()
    return stream