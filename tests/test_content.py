import dataclasses

import pytest

from agentsdk.core.content import (
    AssistantMessage,
    ConfigContent,
    ContentSupport,
    FileContent,
    MediaType,
    Role,
    SystemMessage,
    TextContent,
    ToolResultContent,
    ToolUseContent,
    UserMessage,
    new_file_message,
    new_system_message,
    new_tool_result_message,
    new_user_message,
    new_user_message_with_files,
    new_user_tool_result_message,
)


def test_roles_match_their_names():
    assert new_system_message("s").role is Role.SYSTEM
    assert new_user_message("u").role is Role.USER
    assert AssistantMessage([TextContent("a")]).role is Role.ASSISTANT
    assert Role.SYSTEM.value == "system"
    assert str(Role.ASSISTANT) == "assistant"


def test_media_type_values():
    assert MediaType("image/png") is MediaType.PNG
    assert MediaType("application/pdf") is MediaType.PDF
    typed = new_file_message("file:///a.jpg", MediaType.JPEG)
    assert typed.content[0].media_type == "image/jpeg"
    assert str(typed.content[0].media_type) == "image/jpeg"


def test_text_constructors():
    assert new_system_message("hi").content == (TextContent("hi"),)
    assert new_user_message("yo").content == (TextContent("yo"),)


def test_tool_result_messages_keep_order():
    first = ToolResultContent("1", "one")
    second = ToolResultContent("2", "two")
    system = new_tool_result_message(first, second)
    user = new_user_tool_result_message(first, second)
    assert system.content == (first, second)
    assert user.content == (first, second)
    assert system.role is Role.SYSTEM
    assert user.role is Role.USER


def test_file_message_with_and_without_media_type():
    plain = new_file_message("file:///a.png")
    typed = new_file_message("file:///a.png", MediaType.PNG)
    assert plain.content == (FileContent(uri="file:///a.png"),)
    assert plain.content[0].media_type == ""
    assert plain.content[0].data is None
    assert typed.content[0].media_type == MediaType.PNG


def test_user_message_with_files():
    attached = FileContent(uri="file:///x", filename="x")
    msg = new_user_message_with_files("look", attached)
    assert msg.content == (TextContent("look"), attached)
    assert new_user_message_with_files("", attached).content == (attached,)


def test_content_list_is_stored_as_tuple():
    msg = UserMessage([TextContent("a"), ConfigContent(max_iter=3)])
    assert msg.content == (TextContent("a"), ConfigContent(max_iter=3))


def test_disallowed_content_rejected():
    with pytest.raises(TypeError):
        SystemMessage([FileContent(uri="file:///x")])
    with pytest.raises(TypeError):
        AssistantMessage([ToolResultContent("1", "r")])
    with pytest.raises(TypeError):
        UserMessage([ToolUseContent("1", "t")])


def test_config_defaults_mean_no_change():
    cfg = ConfigContent()
    assert cfg.model == ""
    assert cfg.max_iter == 0
    assert cfg.compact is None
    assert cfg.compact_now is False


def test_blocks_are_immutable_and_replaceable():
    block = FileContent(uri="file:///x")
    with pytest.raises(dataclasses.FrozenInstanceError):
        block.data = b"abc"
    filled = dataclasses.replace(block, data=b"abc")
    assert filled.data == b"abc"
    assert filled.uri == block.uri


def test_content_support():
    support = ContentSupport(frozenset({MediaType.JPEG, MediaType.PNG}))
    assert support.supports(MediaType.PNG)
    assert support.supports("image/jpeg")
    assert not support.supports(MediaType.PDF)
    assert not ContentSupport().supports(MediaType.PNG)


def test_messages_compare_by_value():
    assert new_user_message("same") == new_user_message("same")
    assert new_user_message("a") != new_user_message("b")