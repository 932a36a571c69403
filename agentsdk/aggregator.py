"""Accumulation of streamed deltas into a complete assistant message."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from agentsdk.core.content import (
    AssistantContent,
    AssistantMessage,
    Message,
    TextContent,
    ToolUseContent,
)
from agentsdk.core.delta import (
    Delta,
    TextContentDelta,
    TextEndDelta,
    TextStartDelta,
    ToolCallEndDelta,
    ToolCallStartDelta,
)


@runtime_checkable
class StreamAggregator(Protocol):
    """Builds a message from a stream of deltas."""

    def push(self, delta: Delta) -> None:
        ...

    def message(self) -> Optional[Message]:
        ...

    def reset(self) -> None:
        ...


class DefaultAggregator:
    """Builds an AssistantMessage from text and tool-call deltas."""

    def __init__(self) -> None:
        self.reset()

    def push(self, delta: Delta) -> None:
        """Feed one delta into the aggregate."""
        if isinstance(delta, TextStartDelta):
            self._in_text = True
            self._text = []
        elif isinstance(delta, TextContentDelta):
            if self._in_text:
                self._text.append(delta.content)
        elif isinstance(delta, TextEndDelta):
            if self._in_text:
                self._blocks.append(TextContent("".join(self._text)))
                self._in_text = False
        elif isinstance(delta, ToolCallStartDelta):
            self._in_tool = True
            self._tool_id = delta.id
            self._tool_name = delta.name
        elif isinstance(delta, ToolCallEndDelta):
            if self._in_tool:
                self._blocks.append(
                    ToolUseContent(self._tool_id, self._tool_name, delta.arguments)
                )
                self._in_tool = False

    def message(self) -> Optional[AssistantMessage]:
        """Return the message built so far, or None if it has no content."""
        blocks = list(self._blocks)
        text = "".join(self._text)
        if self._in_text and text:
            blocks.append(TextContent(text))
        if not blocks:
            return None
        return AssistantMessage(blocks)

    def reset(self) -> None:
        """Discard everything accumulated."""
        self._blocks: list[AssistantContent] = []
        self._text: list[str] = []
        self._in_text = False
        self._tool_id = ""
        self._tool_name = ""
        self._in_tool = False