"""Provider adapter and embedder backed by the Ollama client."""

from __future__ import annotations

import base64
from typing import Any, Iterator, Optional, Sequence

import httpx

from agentsdk.core.cancel import Context
from agentsdk.core.content import (
    AssistantMessage,
    ContentSupport,
    FileContent,
    MediaType,
    Message,
    SystemMessage,
    TextContent,
    ToolResultContent,
    ToolUseContent,
    UserMessage,
)
from agentsdk.core.delta import (
    Delta,
    TextContentDelta,
    TextEndDelta,
    TextStartDelta,
    ToolCallEndDelta,
    ToolCallStartDelta,
    UsageDelta,
)
from agentsdk.core.errors import ErrorKind, ProviderError
from agentsdk.core.provider import new_id
from agentsdk.core.tool import PropertyDef, ToolDef
from agentsdk.providers.ollama_client import (
    ChatChunk,
    ChatMessage,
    Client,
    ToolCall,
    ToolCallFunction,
    ToolFunction,
    ToolFunctionParams,
    ToolProperty,
    ToolSpec,
)

_TRANSIENT_MARKERS = ("connection refused", "timeout", "returned 5", "returned 429")


class OllamaAdapter:
    """A provider that talks to Ollama through a Client."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def name(self) -> str:
        """Return the provider name."""
        return "ollama"

    def chat_stream(
        self,
        ctx: Context,
        messages: Sequence[Message],
        tools: Optional[Sequence[ToolDef]],
    ) -> Iterator[Delta]:
        """Start a chat and return an iterator over its deltas."""
        wire_messages = to_ollama_messages(messages)
        wire_tools = to_ollama_tools(tools or [])
        try:
            chunks = self.client.chat_stream(ctx, wire_messages, wire_tools)
        except Exception as err:
            raise ProviderError(
                provider="ollama",
                model=self.client.model,
                kind=classify_ollama_error(err),
                err=err,
            ) from err
        return _chunks_to_deltas(chunks)

    def content_support(self) -> ContentSupport:
        """JPEG and PNG are sent natively as images."""
        return ContentSupport(frozenset({MediaType.JPEG.value, MediaType.PNG.value}))

    def generate(self, ctx: Context, prompt: str) -> str:
        """Delegate to the client."""
        return self.client.generate(ctx, prompt)

    def generate_with_model(
        self,
        ctx: Context,
        prompt: str,
        model: str,
        format: Any = None,
        options: Any = None,
    ) -> str:
        """Delegate to the client."""
        return self.client.generate_with_model(ctx, prompt, model, format, options)

    def generate_stream(self, ctx: Context, prompt: str) -> Iterator[str]:
        """Delegate to the client."""
        return self.client.generate_stream(ctx, prompt)

    def embed(self, ctx: Context, text: str) -> list[float]:
        """Delegate to the client."""
        return self.client.embed(ctx, text)


def _chunks_to_deltas(chunks: Iterator[ChatChunk]) -> Iterator[Delta]:
    text_started = False
    for chunk in chunks:
        if chunk.done:
            if text_started:
                yield TextEndDelta()
                text_started = False
            yield UsageDelta(
                prompt_tokens=chunk.prompt_eval_count,
                completion_tokens=chunk.eval_count,
                total_tokens=chunk.prompt_eval_count + chunk.eval_count,
            )
            continue

        if chunk.message.content:
            if not text_started:
                yield TextStartDelta()
                text_started = True
            yield TextContentDelta(chunk.message.content)

        if chunk.message.tool_calls:
            if text_started:
                yield TextEndDelta()
                text_started = False
            for call in chunk.message.tool_calls:
                yield ToolCallStartDelta(new_id(), call.function.name)
                yield ToolCallEndDelta(call.function.arguments)

    if text_started:
        yield TextEndDelta()


class OllamaEmbedder:
    """An embedder that calls Ollama once per text."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def embed(self, ctx: Context, texts: Sequence[str]) -> list[list[float]]:
        """Return one embedding per text, in order."""
        return [self.client.embed(ctx, text) for text in texts]


def _tool_result_messages(results: list[ToolResultContent]) -> list[ChatMessage]:
    return [ChatMessage("tool", r.text) for r in results]


def to_ollama_messages(messages: Sequence[Message]) -> list[ChatMessage]:
    """Convert messages into Ollama chat messages."""
    out: list[ChatMessage] = []
    for message in messages:
        if isinstance(message, SystemMessage):
            texts = [b.text for b in message.content if isinstance(b, TextContent)]
            results = [b for b in message.content if isinstance(b, ToolResultContent)]
            if texts:
                out.append(ChatMessage("system", "".join(texts)))
            out.extend(_tool_result_messages(results))
        elif isinstance(message, UserMessage):
            texts: list[str] = []
            images: list[str] = []
            results: list[ToolResultContent] = []
            for block in message.content:
                if isinstance(block, TextContent):
                    texts.append(block.text)
                elif isinstance(block, ToolResultContent):
                    results.append(block)
                elif isinstance(block, FileContent) and block.data is not None:
                    images.append(base64.b64encode(block.data).decode("ascii"))
            if texts or images:
                out.append(ChatMessage("user", "".join(texts), images=images))
            out.extend(_tool_result_messages(results))
        elif isinstance(message, AssistantMessage):
            reply = ChatMessage("assistant")
            for block in message.content:
                if isinstance(block, TextContent):
                    reply.content += block.text
                elif isinstance(block, ToolUseContent):
                    reply.tool_calls.append(
                        ToolCall(ToolCallFunction(block.name, block.arguments))
                    )
            out.append(reply)
    return out


def _convert_property(prop: PropertyDef) -> ToolProperty:
    return ToolProperty(
        type=prop.type,
        description=prop.description,
        enum=list(prop.enum),
        items=_convert_property(prop.items) if prop.items is not None else None,
        properties={k: _convert_property(v) for k, v in prop.properties.items()},
        required=list(prop.required),
        default=prop.default,
    )


def to_ollama_tools(defs: Sequence[ToolDef]) -> list[ToolSpec]:
    """Convert tool definitions into Ollama tool specs."""
    return [
        ToolSpec(
            ToolFunction(
                name=d.name,
                description=d.description,
                parameters=ToolFunctionParams(
                    type=d.parameters.type,
                    required=list(d.parameters.required),
                    properties={
                        k: _convert_property(v)
                        for k, v in d.parameters.properties.items()
                    },
                ),
            )
        )
        for d in defs
    ]


def classify_ollama_error(err: BaseException) -> ErrorKind:
    """Classify a client error as transient or permanent."""
    for candidate in (err, err.__cause__):
        if isinstance(candidate, (httpx.ConnectError, httpx.TimeoutException)):
            return ErrorKind.TRANSIENT
    text = str(err).lower()
    if any(marker in text for marker in _TRANSIENT_MARKERS):
        return ErrorKind.TRANSIENT
    return ErrorKind.PERMANENT