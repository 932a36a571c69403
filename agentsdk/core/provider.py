"""Provider, resolver, extractor and embedder interfaces, plus ID generation."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import (
    TYPE_CHECKING,
    Callable,
    Iterator,
    Optional,
    Protocol,
    Sequence,
    runtime_checkable,
)

from agentsdk.core.cancel import Context
from agentsdk.core.content import ContentSupport, Message, UserContent
from agentsdk.core.delta import Delta

if TYPE_CHECKING:
    from agentsdk.core.tool import ParameterSchema, ToolDef


@runtime_checkable
class Provider(Protocol):
    """The model interface the agent loop needs.

    ``chat_stream`` raises if the call cannot start, and otherwise returns
    an iterator over the streamed deltas.
    """

    def chat_stream(
        self,
        ctx: Context,
        messages: Sequence[Message],
        tools: Optional[Sequence["ToolDef"]],
    ) -> Iterator[Delta]:
        ...


@runtime_checkable
class NamedProvider(Provider, Protocol):
    """A provider that can name itself for logs and errors."""

    def name(self) -> str:
        ...


@runtime_checkable
class StructuredOutputProvider(Provider, Protocol):
    """A provider that can constrain output to a JSON schema."""

    def chat_stream_with_schema(
        self,
        ctx: Context,
        messages: Sequence[Message],
        tools: Optional[Sequence["ToolDef"]],
        schema: Optional["ParameterSchema"],
    ) -> Iterator[Delta]:
        ...


@runtime_checkable
class ContentNegotiator(Protocol):
    """A provider that declares which media types it handles natively."""

    def content_support(self) -> ContentSupport:
        ...


@runtime_checkable
class Embedder(Protocol):
    """Turns texts into vector embeddings, one vector per text."""

    def embed(self, ctx: Context, texts: Sequence[str]) -> list[list[float]]:
        ...


@dataclass(frozen=True)
class ResolvedFile:
    """The bytes behind a URI and their media type."""

    data: bytes
    media_type: str = ""


@runtime_checkable
class Resolver(Protocol):
    """Fetches the bytes behind a URI."""

    def resolve(self, ctx: Context, uri: str) -> ResolvedFile:
        ...


@dataclass(frozen=True)
class ResolverFunc:
    """A resolver backed by a plain function."""

    fn: Callable[[Context, str], ResolvedFile]

    def resolve(self, ctx: Context, uri: str) -> ResolvedFile:
        """Call the wrapped function."""
        return self.fn(ctx, uri)


@runtime_checkable
class Extractor(Protocol):
    """Converts raw file data into user content blocks."""

    def extract(
        self, ctx: Context, data: bytes, media_type: str
    ) -> list[UserContent]:
        ...


@dataclass(frozen=True)
class ExtractorFunc:
    """An extractor backed by a plain function."""

    fn: Callable[[Context, bytes, str], list[UserContent]]

    def extract(self, ctx: Context, data: bytes, media_type: str) -> list[UserContent]:
        """Call the wrapped function."""
        return self.fn(ctx, data, media_type)


def provider_name(provider: object) -> str:
    """Return the provider's name, or "unknown" if it has none."""
    name = getattr(provider, "name", None)
    if callable(name):
        return name()
    return "unknown"


def new_id() -> str:
    """Return a new random unique identifier."""
    return str(uuid.uuid4())