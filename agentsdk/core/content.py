"""Messages, the content blocks they hold, and media-type support."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable, Optional, Union

if TYPE_CHECKING:
    from agentsdk.core.compactor import CompactConfig


class Role(str, enum.Enum):
    """The sender of a message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"

    def __str__(self) -> str:
        return self.value


class MediaType(str, enum.Enum):
    """Well-known MIME types for file content; any MIME string is accepted too."""

    JPEG = "image/jpeg"
    PNG = "image/png"
    GIF = "image/gif"
    WEBP = "image/webp"
    PDF = "application/pdf"
    CSV = "text/csv"
    MP3 = "audio/mpeg"
    WAV = "audio/wav"
    MP4 = "video/mp4"
    DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    PPTX = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
    HTML = "text/html"
    TEXT = "text/plain"
    JSON = "application/json"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TextContent:
    """Plain text; valid in every kind of message."""

    text: str


@dataclass(frozen=True)
class ToolUseContent:
    """A tool invocation requested by the assistant."""

    id: str
    name: str
    arguments: Optional[dict[str, Any]] = None


@dataclass(frozen=True)
class ToolResultContent:
    """The result of a tool execution."""

    tool_call_id: str
    text: str


@dataclass(frozen=True)
class ConfigContent:
    """Agent configuration stored in the conversation; empty fields mean no change."""

    model: str = ""
    max_iter: int = 0
    compact: Optional["CompactConfig"] = None
    compact_now: bool = False


@dataclass(frozen=True)
class FileContent:
    """A file attachment; ``data`` stays None until the URI is resolved."""

    uri: str
    media_type: str = ""
    data: Optional[bytes] = field(default=None, repr=False)
    filename: str = ""


SystemContent = Union[TextContent, ToolResultContent, ConfigContent]
UserContent = Union[TextContent, ToolResultContent, ConfigContent, FileContent]
AssistantContent = Union[TextContent, ToolUseContent]

_SYSTEM_TYPES = (TextContent, ToolResultContent, ConfigContent)
_USER_TYPES = (TextContent, ToolResultContent, ConfigContent, FileContent)
_ASSISTANT_TYPES = (TextContent, ToolUseContent)


def _validated(content: Iterable[Any], allowed: tuple[type, ...], kind: str) -> tuple:
    blocks = tuple(content)
    for block in blocks:
        if not isinstance(block, allowed):
            raise TypeError(f"{type(block).__name__} is not allowed in a {kind}")
    return blocks


@dataclass(frozen=True)
class SystemMessage:
    """System instructions or results of automatically executed tools."""

    content: tuple[SystemContent, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "content", _validated(self.content, _SYSTEM_TYPES, "system message")
        )

    @property
    def role(self) -> Role:
        return Role.SYSTEM


@dataclass(frozen=True)
class UserMessage:
    """User input or human-provided tool results."""

    content: tuple[UserContent, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "content", _validated(self.content, _USER_TYPES, "user message")
        )

    @property
    def role(self) -> Role:
        return Role.USER


@dataclass(frozen=True)
class AssistantMessage:
    """The model's response: text and tool calls."""

    content: tuple[AssistantContent, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "content",
            _validated(self.content, _ASSISTANT_TYPES, "assistant message"),
        )

    @property
    def role(self) -> Role:
        return Role.ASSISTANT


Message = Union[SystemMessage, UserMessage, AssistantMessage]


@dataclass(frozen=True)
class ContentSupport:
    """The media types a provider handles natively."""

    native_types: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "native_types", frozenset(self.native_types))

    def supports(self, media_type: str) -> bool:
        """Return True if ``media_type`` is handled natively."""
        return media_type in self.native_types


def new_system_message(text: str) -> SystemMessage:
    """A system message with a single text block."""
    return SystemMessage((TextContent(text),))


def new_user_message(text: str) -> UserMessage:
    """A user message with a single text block."""
    return UserMessage((TextContent(text),))


def new_tool_result_message(*results: ToolResultContent) -> SystemMessage:
    """A system message carrying results of tools the agent ran itself."""
    return SystemMessage(results)


def new_user_tool_result_message(*results: ToolResultContent) -> UserMessage:
    """A user message carrying tool results supplied by a human."""
    return UserMessage(results)


def new_file_message(uri: str, media_type: str = "") -> UserMessage:
    """A user message with a single file attachment."""
    return UserMessage((FileContent(uri=uri, media_type=media_type),))


def new_user_message_with_files(text: str, *files: FileContent) -> UserMessage:
    """A user message with optional text followed by file attachments."""
    blocks: list[UserContent] = [TextContent(text)] if text else []
    blocks.extend(files)
    return UserMessage(blocks)