from typing import Iterator

import pytest

from agentsdk.core.cancel import Context
from agentsdk.core.delta import Delta, TextContentDelta, TextEndDelta, TextStartDelta
from agentsdk.core.errors import (
    ErrorKind,
    FallbackError,
    ProviderError,
    ProviderFailedError,
    is_transient,
)
from agentsdk.providers.fallback import FallbackProvider


class MockProvider:
    def __init__(self, response: str) -> None:
        self.response = response
        self.calls = 0

    def chat_stream(self, ctx, messages, tools) -> Iterator[Delta]:
        self.calls += 1
        return iter(
            [TextStartDelta(), TextContentDelta(self.response), TextEndDelta()]
        )


class ErrorProvider:
    def __init__(self, err: BaseException) -> None:
        self.err = err
        self.calls = 0

    def chat_stream(self, ctx, messages, tools):
        self.calls += 1
        raise self.err


def _text(deltas) -> str:
    return "".join(d.content for d in deltas if isinstance(d, TextContentDelta))


def test_first_succeeds():
    fb = FallbackProvider(MockProvider("from-primary"), MockProvider("from-backup"))
    assert _text(fb.chat_stream(Context(), None, None)) == "from-primary"


def test_falls_back_on_error():
    failing = ErrorProvider(
        ProviderError(
            provider="bad",
            kind=ErrorKind.TRANSIENT,
            err=RuntimeError("connection refused"),
        )
    )
    fb = FallbackProvider(failing, MockProvider("from-backup"))
    assert _text(fb.chat_stream(Context(), None, None)) == "from-backup"
    assert failing.calls == 1


def test_all_fail():
    p1 = ErrorProvider(
        ProviderError(provider="a", kind=ErrorKind.TRANSIENT, err=RuntimeError("fail-a"))
    )
    p2 = ErrorProvider(
        ProviderError(provider="b", kind=ErrorKind.TRANSIENT, err=RuntimeError("fail-b"))
    )
    fb = FallbackProvider(p1, p2)
    with pytest.raises(FallbackError) as info:
        fb.chat_stream(Context(), None, None)
    assert len(info.value.errors) == 2
    assert info.value.errors == [p1.err, p2.err]
    assert isinstance(info.value, ProviderFailedError)


def test_stops_on_permanent_when_configured():
    perm = ErrorProvider(
        ProviderError(
            provider="auth-fail",
            kind=ErrorKind.PERMANENT,
            err=RuntimeError("unauthorized"),
        )
    )
    good = MockProvider("should not reach")
    fb = FallbackProvider(perm, good, fallback_on=is_transient)
    with pytest.raises(FallbackError) as info:
        fb.chat_stream(Context(), None, None)
    assert len(info.value.errors) == 1
    assert good.calls == 0


def test_context_cancelled():
    ctx = Context()
    ctx.cancel()
    p1 = ErrorProvider(
        ProviderError(provider="a", kind=ErrorKind.TRANSIENT, err=RuntimeError("fail"))
    )
    p2 = MockProvider("should not reach")
    fb = FallbackProvider(p1, p2)
    with pytest.raises(FallbackError) as info:
        fb.chat_stream(ctx, None, None)
    assert len(info.value.errors) == 1
    assert p2.calls == 0


def test_no_providers_raises_empty_fallback_error():
    with pytest.raises(FallbackError) as info:
        FallbackProvider().chat_stream(Context(), None, None)
    assert info.value.errors == []


def test_name():
    assert FallbackProvider().name() == "fallback"