"""Strategies that shrink message history to fit a context window."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Protocol, Sequence, runtime_checkable

from agentsdk.core.cancel import Context
from agentsdk.core.content import (
    AssistantMessage,
    FileContent,
    Message,
    SystemMessage,
    TextContent,
    ToolResultContent,
    UserMessage,
    new_system_message,
    new_user_message,
)
from agentsdk.core.delta import TextContentDelta

if TYPE_CHECKING:
    from agentsdk.core.provider import Provider

_SUMMARY_PROMPT = (
    "Summarize the following conversation concisely, preserving key facts and decisions."
)
_SUMMARY_PREFIX = "Previous conversation summary: "
_SUMMARY_KEEP_LAST = 4


@runtime_checkable
class Compactor(Protocol):
    """Reduces message history."""

    def compact(
        self,
        ctx: Context,
        messages: Sequence[Message],
        provider: Optional["Provider"],
    ) -> list[Message]:
        ...


class CompactStrategy(str, enum.Enum):
    """Names of the compaction algorithms."""

    NONE = "none"
    SLIDING_WINDOW = "sliding_window"
    SUMMARIZE = "summarize"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class NoopCompactor:
    """Passes messages through unchanged."""

    def compact(
        self,
        ctx: Context,
        messages: Sequence[Message],
        provider: Optional["Provider"],
    ) -> list[Message]:
        return list(messages)


@dataclass(frozen=True)
class SlidingWindowCompactor:
    """Keeps the first message and the last ``window_size`` messages."""

    window_size: int

    def compact(
        self,
        ctx: Context,
        messages: Sequence[Message],
        provider: Optional["Provider"],
    ) -> list[Message]:
        if len(messages) <= self.window_size + 1:
            return list(messages)
        return [messages[0], *messages[len(messages) - self.window_size :]]


@dataclass(frozen=True)
class SummarizeCompactor:
    """Summarizes older messages once history grows past ``threshold``."""

    threshold: int

    def compact(
        self,
        ctx: Context,
        messages: Sequence[Message],
        provider: Optional["Provider"],
    ) -> list[Message]:
        if len(messages) <= self.threshold or not messages:
            return list(messages)

        keep_last = min(_SUMMARY_KEEP_LAST, len(messages) - 1)
        to_summarize = messages[1 : len(messages) - keep_last]
        if not to_summarize or provider is None:
            return list(messages)

        request: list[Message] = [
            new_system_message(_SUMMARY_PROMPT),
            new_user_message(messages_to_text(to_summarize)),
        ]
        try:
            summary = "".join(
                delta.content
                for delta in provider.chat_stream(ctx, request, None)
                if isinstance(delta, TextContentDelta)
            )
        except Exception:
            return list(messages)

        return [
            messages[0],
            new_user_message(_SUMMARY_PREFIX + summary),
            *messages[len(messages) - keep_last :],
        ]


@dataclass(frozen=True)
class CompactConfig:
    """A serialisable description of a compaction strategy."""

    strategy: CompactStrategy = CompactStrategy.NONE
    window_size: int = 0
    threshold: int = 0

    def to_compactor(self) -> Compactor:
        """Build the compactor this config describes."""
        if self.strategy == CompactStrategy.SLIDING_WINDOW:
            return SlidingWindowCompactor(self.window_size)
        if self.strategy == CompactStrategy.SUMMARIZE:
            return SummarizeCompactor(self.threshold)
        return NoopCompactor()


def _tool_result_line(block: ToolResultContent) -> str:
    return f"Tool Result [{block.tool_call_id}]: {block.text}\n"


def _message_lines(message: Message):
    if isinstance(message, SystemMessage):
        for block in message.content:
            if isinstance(block, TextContent):
                yield f"System: {block.text}\n"
            elif isinstance(block, ToolResultContent):
                yield _tool_result_line(block)
    elif isinstance(message, UserMessage):
        for block in message.content:
            if isinstance(block, TextContent):
                yield f"User: {block.text}\n"
            elif isinstance(block, ToolResultContent):
                yield _tool_result_line(block)
            elif isinstance(block, FileContent):
                yield f"User: [file: {block.filename} ({str(block.media_type)})]\n"
    elif isinstance(message, AssistantMessage):
        for block in message.content:
            if isinstance(block, TextContent):
                yield f"Assistant: {block.text}\n"


def messages_to_text(messages: Sequence[Message]) -> str:
    """Render messages as plain text, one line per text-bearing block."""
    return "".join(line for message in messages for line in _message_lines(message))