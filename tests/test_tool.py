import threading

import pytest

from agentsdk.core.cancel import Context
from agentsdk.core.errors import ToolNotFoundError
from agentsdk.core.tool import (
    MarkedTool,
    Marker,
    ParameterSchema,
    PropertyDef,
    ToolDef,
    ToolFunc,
    ToolRegistry,
    with_markers,
)


def _echo_tool(name="echo", result_key="value"):
    return ToolFunc(
        tool_def=ToolDef(
            name=name,
            description="Echo a value",
            parameters=ParameterSchema(
                type="object",
                required=[result_key],
                properties={result_key: PropertyDef(type="string")},
            ),
        ),
        fn=lambda ctx, args: str(args[result_key]),
    )


def _failing_tool():
    def fail(ctx, args):
        raise ValueError("boom")

    return ToolFunc(tool_def=ToolDef(name="fail"), fn=fail)


def test_tool_func_definition_and_execute():
    tool = _echo_tool()
    assert tool.definition().name == "echo"
    assert tool.definition().parameters.required == ("value",)
    assert tool.execute(Context(), {"value": "hello"}) == "hello"


def test_tool_func_passes_context():
    seen = []
    tool = ToolFunc(tool_def=ToolDef(name="ctx"), fn=lambda ctx, args: seen.append(ctx) or "ok")
    ctx = Context()
    assert tool.execute(ctx, {}) == "ok"
    assert seen == [ctx]


def test_registry_get_registered_and_missing():
    tool = _echo_tool()
    registry = ToolRegistry(tool)
    assert registry.get("echo") is tool
    assert registry.get("missing") is None
    assert "echo" in registry
    assert len(registry) == 1


def test_registry_register_replaces_same_name():
    first = _echo_tool()
    second = _echo_tool()
    registry = ToolRegistry(first)
    registry.register(second)
    assert registry.get("echo") is second
    assert len(registry) == 1


def test_registry_definitions():
    registry = ToolRegistry(_echo_tool("a"), _echo_tool("b"))
    registry.register(_echo_tool("c"))
    assert sorted(d.name for d in registry.definitions()) == ["a", "b", "c"]


def test_registry_definitions_empty():
    assert ToolRegistry().definitions() == []


def test_registry_execute_runs_tool():
    registry = ToolRegistry(_echo_tool())
    assert registry.execute(Context(), "echo", {"value": "x"}) == "x"


def test_registry_execute_unknown_raises():
    registry = ToolRegistry()
    with pytest.raises(ToolNotFoundError) as info:
        registry.execute(Context(), "nope", {})
    assert "tool not found" in str(info.value)
    assert "nope" in str(info.value)
    assert info.value.name == "nope"


def test_registry_execute_propagates_tool_error():
    registry = ToolRegistry(_failing_tool())
    with pytest.raises(ValueError, match="boom"):
        registry.execute(Context(), "fail", {})


def test_registry_concurrent_register():
    registry = ToolRegistry()
    threads = [
        threading.Thread(target=registry.register, args=(_echo_tool(f"t{i}"),))
        for i in range(20)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(registry.definitions()) == 20


def test_with_markers_keeps_order_and_delegates():
    inner = _echo_tool()
    approval = Marker(kind="human_approval", message="needs approval")
    audit = Marker(kind="audit", meta={"level": 1})
    marked = with_markers(inner, approval, audit)
    assert isinstance(marked, MarkedTool)
    assert marked.inner is inner
    assert marked.markers == (approval, audit)
    assert marked.definition() == inner.definition()
    assert marked.execute(Context(), {"value": "v"}) == "v"


def test_marked_tool_registered_under_inner_name():
    marked = with_markers(_echo_tool("guarded"), Marker(kind="audit"))
    registry = ToolRegistry(marked)
    assert registry.get("guarded") is marked


def test_with_markers_none_gives_empty_markers():
    marked = with_markers(_echo_tool())
    assert marked.markers == ()


def test_property_def_nested():
    prop = PropertyDef(
        type="array",
        items=PropertyDef(type="string", enum=["a", "b"]),
    )
    assert prop.items.enum == ("a", "b")
    assert prop.properties == {}
    assert prop.default is None