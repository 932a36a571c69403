"""Tool definitions, the tool registry and marked tools."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Protocol, runtime_checkable

from agentsdk.core.cancel import Context
from agentsdk.core.errors import ToolNotFoundError


@dataclass(frozen=True)
class PropertyDef:
    """One parameter property, described with JSON Schema fields."""

    type: str
    description: str = ""
    enum: tuple[str, ...] = ()
    items: Optional["PropertyDef"] = None
    properties: dict[str, "PropertyDef"] = field(default_factory=dict)
    required: tuple[str, ...] = ()
    default: Any = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "enum", tuple(self.enum))
        object.__setattr__(self, "required", tuple(self.required))
        object.__setattr__(self, "properties", dict(self.properties))


@dataclass(frozen=True)
class ParameterSchema:
    """A JSON-Schema-like description of a tool's parameters."""

    type: str = ""
    required: tuple[str, ...] = ()
    properties: dict[str, PropertyDef] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "required", tuple(self.required))
        object.__setattr__(self, "properties", dict(self.properties))


@dataclass(frozen=True)
class ToolDef:
    """A tool's name, description and parameter schema as shown to the model."""

    name: str
    description: str = ""
    parameters: ParameterSchema = field(default_factory=ParameterSchema)


@runtime_checkable
class Tool(Protocol):
    """Anything the agent can call as a tool."""

    def definition(self) -> ToolDef:
        """Return the tool's schema."""
        ...

    def execute(self, ctx: Context, args: Mapping[str, Any]) -> str:
        """Run the tool and return its textual result; raise on failure."""
        ...


ToolFn = Callable[[Context, Mapping[str, Any]], str]


@dataclass
class ToolFunc:
    """A tool backed by a plain function."""

    tool_def: ToolDef
    fn: ToolFn

    def definition(self) -> ToolDef:
        """Return the tool's schema."""
        return self.tool_def

    def execute(self, ctx: Context, args: Mapping[str, Any]) -> str:
        """Call the wrapped function."""
        return self.fn(ctx, args)


class ToolRegistry:
    """Tools keyed by name; safe to use from several threads."""

    def __init__(self, *tools: Tool) -> None:
        self._lock = threading.RLock()
        self._tools: dict[str, Tool] = {t.definition().name: t for t in tools}

    def get(self, name: str) -> Optional[Tool]:
        """Return the tool called ``name``, or None."""
        with self._lock:
            return self._tools.get(name)

    def register(self, tool: Tool) -> None:
        """Add ``tool``, replacing any tool of the same name."""
        with self._lock:
            self._tools[tool.definition().name] = tool

    def definitions(self) -> list[ToolDef]:
        """Return the schemas of all registered tools."""
        with self._lock:
            tools = list(self._tools.values())
        return [t.definition() for t in tools]

    def execute(self, ctx: Context, name: str, args: Mapping[str, Any]) -> str:
        """Run the tool called ``name``; raise ToolNotFoundError if absent."""
        tool = self.get(name)
        if tool is None:
            raise ToolNotFoundError(name)
        return tool.execute(ctx, args)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._tools

    def __len__(self) -> int:
        with self._lock:
            return len(self._tools)


@dataclass(frozen=True)
class Marker:
    """A routing annotation that makes the agent pause before running a tool."""

    kind: str
    message: str = ""
    meta: dict[str, Any] = field(default_factory=dict)


@dataclass
class MarkedTool:
    """A tool wrapped with markers that must be resolved before it runs."""

    inner: Tool
    markers: tuple[Marker, ...] = ()

    def __post_init__(self) -> None:
        self.markers = tuple(self.markers)

    def definition(self) -> ToolDef:
        """Return the wrapped tool's schema."""
        return self.inner.definition()

    def execute(self, ctx: Context, args: Mapping[str, Any]) -> str:
        """Run the wrapped tool."""
        return self.inner.execute(ctx, args)


def with_markers(tool: Tool, *markers: Marker) -> MarkedTool:
    """Wrap ``tool`` with ``markers``."""
    return MarkedTool(inner=tool, markers=markers)