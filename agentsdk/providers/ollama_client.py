"""HTTP client and wire types for the Ollama API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Sequence

import httpx

from agentsdk.core.cancel import Context

DEFAULT_TIMEOUT = 300.0

_log = logging.getLogger(__name__)


@dataclass
class ToolCallFunction:
    """The function named in a tool call and its arguments."""

    name: str
    arguments: Optional[dict[str, Any]] = None


@dataclass
class ToolCall:
    """A tool call made by the model."""

    function: ToolCallFunction


def _tool_call_to_dict(call: ToolCall) -> dict[str, Any]:
    return {
        "function": {
            "name": call.function.name,
            "arguments": call.function.arguments,
        }
    }


def _tool_call_from_dict(data: dict[str, Any]) -> ToolCall:
    function = data.get("function") or {}
    return ToolCall(
        ToolCallFunction(
            name=str(function.get("name") or ""),
            arguments=function.get("arguments"),
        )
    )


@dataclass
class ChatMessage:
    """One message of a chat request or response."""

    role: str
    content: str = ""
    images: list[str] = field(default_factory=list)
    tool_calls: list[ToolCall] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON object sent on the wire."""
        data: dict[str, Any] = {"role": self.role, "content": self.content}
        if self.images:
            data["images"] = list(self.images)
        if self.tool_calls:
            data["tool_calls"] = [_tool_call_to_dict(c) for c in self.tool_calls]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChatMessage":
        """Build a message from its JSON object."""
        return cls(
            role=str(data.get("role") or ""),
            content=str(data.get("content") or ""),
            images=list(data.get("images") or []),
            tool_calls=[_tool_call_from_dict(c) for c in data.get("tool_calls") or []],
        )


@dataclass
class ToolProperty:
    """A JSON Schema property of a tool parameter."""

    type: str
    description: str = ""
    enum: list[str] = field(default_factory=list)
    items: Optional["ToolProperty"] = None
    properties: dict[str, "ToolProperty"] = field(default_factory=dict)
    required: list[str] = field(default_factory=list)
    default: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON object, leaving out empty fields."""
        data: dict[str, Any] = {"type": self.type}
        if self.description:
            data["description"] = self.description
        if self.enum:
            data["enum"] = list(self.enum)
        if self.items is not None:
            data["items"] = self.items.to_dict()
        if self.properties:
            data["properties"] = {k: v.to_dict() for k, v in self.properties.items()}
        if self.required:
            data["required"] = list(self.required)
        if self.default is not None:
            data["default"] = self.default
        return data


@dataclass
class ToolFunctionParams:
    """The parameter schema of a tool function."""

    type: str = ""
    required: list[str] = field(default_factory=list)
    properties: dict[str, ToolProperty] = field(default_factory=dict)


@dataclass
class ToolFunction:
    """A function the model may call."""

    name: str
    description: str = ""
    parameters: ToolFunctionParams = field(default_factory=ToolFunctionParams)


@dataclass
class ToolSpec:
    """A tool offered to the model in a chat request."""

    function: ToolFunction
    type: str = "function"

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON object sent on the wire."""
        params = self.function.parameters
        return {
            "type": self.type,
            "function": {
                "name": self.function.name,
                "description": self.function.description,
                "parameters": {
                    "type": params.type,
                    "required": list(params.required),
                    "properties": {
                        k: v.to_dict() for k, v in params.properties.items()
                    },
                },
            },
        }


@dataclass
class ChatChunk:
    """One streamed piece of a chat response."""

    message: ChatMessage = field(default_factory=lambda: ChatMessage(""))
    done: bool = False
    prompt_eval_count: int = 0
    eval_count: int = 0
    total_duration: int = 0
    prompt_eval_duration: int = 0
    eval_duration: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChatChunk":
        """Build a chunk from its JSON object."""
        return cls(
            message=ChatMessage.from_dict(data.get("message") or {}),
            done=bool(data.get("done", False)),
            prompt_eval_count=int(data.get("prompt_eval_count") or 0),
            eval_count=int(data.get("eval_count") or 0),
            total_duration=int(data.get("total_duration") or 0),
            prompt_eval_duration=int(data.get("prompt_eval_duration") or 0),
            eval_duration=int(data.get("eval_duration") or 0),
        )


def _json_lines(ctx: Context, response: httpx.Response) -> Iterator[dict[str, Any]]:
    """Yield each JSON object line of a streamed response, skipping bad lines."""
    try:
        for line in response.iter_lines():
            if ctx.is_done():
                return
            if not line:
                continue
            try:
                data = json.loads(line)
            except ValueError:
                continue
            if isinstance(data, dict):
                yield data
    finally:
        response.close()


class Client:
    """A client for the Ollama HTTP API."""

    def __init__(
        self,
        host: str,
        model: str,
        embedding_model: str = "",
        http: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.host = host
        self.model = model
        self.embedding_model = embedding_model
        self.http = http if http is not None else httpx.Client(timeout=timeout)

    def _send(
        self, ctx: Context, path: str, payload: dict[str, Any], label: str
    ) -> httpx.Response:
        ctx.check()
        try:
            request = self.http.build_request("POST", self.host + path, json=payload)
            return self.http.send(request, stream=True)
        except httpx.HTTPError as err:
            raise RuntimeError(f"{label}: {err}") from err

    def _read_json(
        self, response: httpx.Response, failure: str, decode_label: str
    ) -> dict[str, Any]:
        try:
            body = response.read()
            if response.status_code != 200:
                text = body.decode("utf-8", "replace")
                raise RuntimeError(f"{failure} {response.status_code}: {text}")
            try:
                data = json.loads(body)
            except ValueError as err:
                raise RuntimeError(f"{decode_label}: {err}") from err
            if not isinstance(data, dict):
                raise RuntimeError(f"{decode_label}: expected a JSON object")
            return data
        finally:
            response.close()

    def generate(self, ctx: Context, prompt: str) -> str:
        """Run a non-streaming generation with the default model."""
        return self.generate_with_model(ctx, prompt, self.model)

    def generate_with_model(
        self,
        ctx: Context,
        prompt: str,
        model: str,
        format: Any = None,
        options: Any = None,
    ) -> str:
        """Run a non-streaming generation with ``model``."""
        _log.info("generate model=%s prompt_len=%d", model, len(prompt))
        payload: dict[str, Any] = {"model": model, "prompt": prompt, "stream": False}
        if format is not None:
            payload["format"] = format
        if options is not None:
            payload["options"] = options
        response = self._send(ctx, "/api/generate", payload, "ollama generate")
        data = self._read_json(response, "ollama returned", "decode ollama response")
        result = str(data.get("response") or "")
        _log.info("generate done, response_len=%d", len(result))
        return result

    def generate_stream(self, ctx: Context, prompt: str) -> Iterator[str]:
        """Start a streaming generation and return an iterator over text pieces."""
        payload = {"model": self.model, "prompt": prompt, "stream": True}
        response = self._send(ctx, "/api/generate", payload, "ollama generate stream")
        if response.status_code != 200:
            response.close()
            raise RuntimeError(f"ollama returned {response.status_code}")
        return self._generate_pieces(ctx, response)

    @staticmethod
    def _generate_pieces(ctx: Context, response: httpx.Response) -> Iterator[str]:
        for data in _json_lines(ctx, response):
            text = data.get("response") or ""
            if text:
                yield str(text)
            if data.get("done"):
                return

    def embed(self, ctx: Context, text: str) -> list[float]:
        """Return the embedding of ``text`` from the embedding model."""
        _log.info("embed text_len=%d", len(text))
        payload = {"model": self.embedding_model, "input": text}
        response = self._send(ctx, "/api/embed", payload, "ollama embed")
        data = self._read_json(response, "ollama embed returned", "decode embed response")
        embeddings = data.get("embeddings") or []
        if not embeddings:
            raise RuntimeError("no embeddings returned")
        return [float(v) for v in embeddings[0]]

    def chat_stream(
        self,
        ctx: Context,
        messages: Sequence[ChatMessage],
        tools: Optional[Sequence[ToolSpec]] = None,
    ) -> Iterator[ChatChunk]:
        """Start a streaming chat and return an iterator over response chunks."""
        tools = list(tools or [])
        _log.info(
            "chat_stream model=%s msgs=%d tools=%d", self.model, len(messages), len(tools)
        )
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_dict() for m in messages],
            "stream": True,
        }
        if tools:
            payload["tools"] = [t.to_dict() for t in tools]
        response = self._send(ctx, "/api/chat", payload, "ollama chat_stream")
        if response.status_code != 200:
            response.close()
            _log.warning("chat_stream failed: %d", response.status_code)
            raise RuntimeError(f"ollama returned {response.status_code}")
        return self._chat_chunks(ctx, response)

    @staticmethod
    def _chat_chunks(ctx: Context, response: httpx.Response) -> Iterator[ChatChunk]:
        for data in _json_lines(ctx, response):
            try:
                chunk = ChatChunk.from_dict(data)
            except (TypeError, ValueError, AttributeError):
                continue
            yield chunk
            if chunk.done:
                return

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self.http.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()