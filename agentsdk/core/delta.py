"""Incremental updates streamed by providers and the agent loop."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Optional, Union

if TYPE_CHECKING:
    from agentsdk.core.tool import Marker


@dataclass(frozen=True)
class TextStartDelta:
    """A text block begins."""


@dataclass(frozen=True)
class TextContentDelta:
    """A fragment of text."""

    content: str


@dataclass(frozen=True)
class TextEndDelta:
    """A text block ends."""


@dataclass(frozen=True)
class ToolCallStartDelta:
    """The model starts generating a tool call."""

    id: str
    name: str


@dataclass(frozen=True)
class ToolCallArgumentDelta:
    """A JSON fragment of tool call arguments."""

    content: str


@dataclass(frozen=True)
class ToolCallEndDelta:
    """The model finished a tool call; ``arguments`` holds the parsed arguments."""

    arguments: Optional[dict[str, Any]] = None


@dataclass(frozen=True)
class ToolExecStartDelta:
    """A tool starts executing."""

    tool_call_id: str
    name: str = ""


@dataclass(frozen=True)
class ToolExecDelta:
    """A delta produced inside a running tool or sub-agent."""

    tool_call_id: str
    inner: "Delta"


@dataclass(frozen=True)
class ToolExecEndDelta:
    """A tool finished executing."""

    tool_call_id: str
    result: str = ""
    error: str = ""


@dataclass(frozen=True)
class MarkerDelta:
    """A tool call waits for the consumer to resolve its markers."""

    tool_call_id: str
    tool_name: str
    arguments: Optional[dict[str, Any]] = None
    markers: tuple["Marker", ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "markers", tuple(self.markers))


@dataclass(frozen=True)
class ErrorDelta:
    """An error raised while streaming."""

    error: BaseException


@dataclass(frozen=True)
class DoneDelta:
    """The stream is complete."""


@dataclass(frozen=True)
class UsageDelta:
    """Token usage and latency of one model call."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    latency: timedelta = field(default_factory=timedelta)


Delta = Union[
    TextStartDelta,
    TextContentDelta,
    TextEndDelta,
    ToolCallStartDelta,
    ToolCallArgumentDelta,
    ToolCallEndDelta,
    ToolExecStartDelta,
    ToolExecDelta,
    ToolExecEndDelta,
    MarkerDelta,
    ErrorDelta,
    DoneDelta,
    UsageDelta,
]

DELTA_TYPES: tuple[type, ...] = (
    TextStartDelta,
    TextContentDelta,
    TextEndDelta,
    ToolCallStartDelta,
    ToolCallArgumentDelta,
    ToolCallEndDelta,
    ToolExecStartDelta,
    ToolExecDelta,
    ToolExecEndDelta,
    MarkerDelta,
    ErrorDelta,
    DoneDelta,
    UsageDelta,
)