"""Helpers for testing code built on the agent SDK."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping, Optional, Sequence

from agentsdk.core.cancel import Context
from agentsdk.core.content import Message, ToolUseContent
from agentsdk.core.delta import (
    Delta,
    DoneDelta,
    ErrorDelta,
    TextContentDelta,
    TextEndDelta,
    TextStartDelta,
    ToolCallEndDelta,
    ToolCallStartDelta,
)
from agentsdk.core.tool import ToolDef


@dataclass
class ScriptedProvider:
    """Replays one scripted delta sequence per ``chat_stream`` call; thread-safe."""

    responses: list[list[Delta]] = field(default_factory=list)
    _call: int = field(default=0, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def chat_stream(
        self,
        ctx: Context,
        messages: Sequence[Message],
        tools: Optional[Sequence[ToolDef]],
    ) -> Iterator[Delta]:
        """Return the next scripted response; empty once the script runs out."""
        with self._lock:
            index = self._call
            self._call += 1
        script = self.responses[index] if index < len(self.responses) else []
        return iter(list(script))


def text_response(text: str) -> list[Delta]:
    """Deltas for a simple text response."""
    return [TextStartDelta(), TextContentDelta(text), TextEndDelta()]


def tool_call_response(
    call_id: str, name: str, args: Optional[dict[str, Any]]
) -> list[Delta]:
    """Deltas for a single tool call."""
    return [ToolCallStartDelta(call_id, name), ToolCallEndDelta(args)]


def collect_deltas(deltas: Iterable[Delta]) -> list[Delta]:
    """Drain ``deltas`` into a list."""
    return list(deltas)


def collect_text(deltas: Iterable[Delta]) -> str:
    """Drain ``deltas`` and return the concatenated text content."""
    return "".join(d.content for d in deltas if isinstance(d, TextContentDelta))


def collect_tool_calls(deltas: Iterable[Delta]) -> list[ToolUseContent]:
    """Drain ``deltas`` and return every completed tool call."""
    calls: list[ToolUseContent] = []
    current_id = current_name = ""
    for delta in deltas:
        if isinstance(delta, ToolCallStartDelta):
            current_id, current_name = delta.id, delta.name
        elif isinstance(delta, ToolCallEndDelta):
            calls.append(ToolUseContent(current_id, current_name, delta.arguments))
    return calls


def assert_text_contains(deltas: Iterable[Delta], substr: str) -> None:
    """Fail unless the streamed text contains ``substr``."""
    text = collect_text(deltas)
    if substr not in text:
        raise AssertionError(f"expected text to contain {substr!r}, got {text!r}")


def assert_tool_called(deltas: Iterable[Delta], name: str) -> None:
    """Fail unless a tool call named ``name`` was started."""
    if not any(isinstance(d, ToolCallStartDelta) and d.name == name for d in deltas):
        raise AssertionError(f"expected tool {name!r} to be called, but it was not")


def assert_no_errors(deltas: Iterable[Delta]) -> None:
    """Fail if any error delta was emitted."""
    errors = [d.error for d in deltas if isinstance(d, ErrorDelta)]
    if errors:
        listed = "; ".join(str(e) for e in errors)
        raise AssertionError(f"unexpected error delta: {listed}")


def assert_done(deltas: Iterable[Delta]) -> None:
    """Fail unless a DoneDelta was emitted."""
    if not any(isinstance(d, DoneDelta) for d in deltas):
        raise AssertionError("expected DoneDelta but none was found")


@dataclass
class MockTool:
    """A tool that records its calls and returns a fixed result or raises ``err``."""

    tool_def: ToolDef
    result: str = ""
    err: Optional[BaseException] = None
    calls: list[Mapping[str, Any]] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def definition(self) -> ToolDef:
        """Return the tool's schema."""
        return self.tool_def

    def execute(self, ctx: Context, args: Mapping[str, Any]) -> str:
        """Record the call, then raise ``err`` or return ``result``."""
        with self._lock:
            self.calls.append(args)
        if self.err is not None:
            raise self.err
        return self.result

    def call_count(self) -> int:
        """Return how many times the tool was called."""
        with self._lock:
            return len(self.calls)