import uuid

import pytest

from agentsdk.core.cancel import Context
from agentsdk.core.content import MediaType, TextContent
from agentsdk.core.delta import TextContentDelta
from agentsdk.core.provider import (
    ExtractorFunc,
    NamedProvider,
    ResolvedFile,
    ResolverFunc,
    new_id,
    provider_name,
)


class _Plain:
    def chat_stream(self, ctx, messages, tools):
        return iter([TextContentDelta("x")])


class _Named(_Plain):
    def name(self):
        return "ollama"


def test_new_id_is_uuid4():
    value = new_id()
    assert uuid.UUID(value).version == 4
    assert str(uuid.UUID(value)) == value


def test_new_id_is_unique():
    ids = {new_id() for _ in range(200)}
    assert len(ids) == 200


def test_provider_name_uses_name_method():
    assert provider_name(_Named()) == "ollama"
    assert isinstance(_Named(), NamedProvider)


def test_provider_name_unknown_without_name():
    assert provider_name(_Plain()) == "unknown"
    assert not isinstance(_Plain(), NamedProvider)


def test_resolver_func_delegates():
    calls = []

    def resolve(ctx, uri):
        calls.append((ctx, uri))
        return ResolvedFile(data=b"abc", media_type=MediaType.PNG)

    ctx = Context()
    resolver = ResolverFunc(resolve)
    result = resolver.resolve(ctx, "file:///tmp/a.png")
    assert result == ResolvedFile(data=b"abc", media_type=MediaType.PNG)
    assert calls == [(ctx, "file:///tmp/a.png")]


def test_resolver_func_propagates_error():
    def resolve(ctx, uri):
        raise FileNotFoundError(uri)

    with pytest.raises(FileNotFoundError):
        ResolverFunc(resolve).resolve(Context(), "file:///missing")


def test_extractor_func_delegates():
    def extract(ctx, data, media_type):
        return [TextContent(data.decode() + "|" + str(media_type))]

    blocks = ExtractorFunc(extract).extract(Context(), b"body", MediaType.CSV)
    assert blocks == [TextContent("body|text/csv")]


def test_resolved_file_default_media_type():
    assert ResolvedFile(data=b"").media_type == ""