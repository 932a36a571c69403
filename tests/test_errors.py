import pytest

from agentsdk.core.errors import (
    ContextCanceledError,
    ErrorKind,
    FallbackError,
    MaxIterationsError,
    ProviderError,
    ProviderFailedError,
    ResolverNotFoundError,
    RetryError,
    StreamCanceledError,
    ToolNotFoundError,
    UnsupportedMediaTypeError,
    classify_http_status,
    is_transient,
)


@pytest.mark.parametrize("code", [429, 408, 500, 502, 503, 599])
def test_transient_statuses(code):
    assert classify_http_status(code) is ErrorKind.TRANSIENT


@pytest.mark.parametrize("code", [200, 400, 401, 403, 404, 600])
def test_permanent_statuses(code):
    assert classify_http_status(code) is ErrorKind.PERMANENT


def test_provider_error_is_transient_by_kind():
    assert is_transient(ProviderError(provider="a", kind=ErrorKind.TRANSIENT))
    assert not is_transient(ProviderError(provider="a", kind=ErrorKind.PERMANENT))


def test_plain_errors_are_not_transient():
    assert not is_transient(ValueError("boom"))
    assert not is_transient(None)


def test_fallback_error_uses_last_error():
    transient = ProviderError(kind=ErrorKind.TRANSIENT)
    assert is_transient(FallbackError([transient]))
    assert not is_transient(FallbackError([]))
    assert not is_transient(FallbackError([ValueError("x"), KeyError("y")]))


def test_retry_error_unwraps_to_last():
    inner = ProviderError(kind=ErrorKind.TRANSIENT, err=ValueError("timeout"))
    err = RetryError(attempts=2, last=inner)
    assert is_transient(err)
    assert err.attempts == 2
    assert err.last is inner
    assert str(inner) in str(err)


def test_wrapped_cause_is_followed():
    try:
        try:
            raise ProviderError(kind=ErrorKind.TRANSIENT)
        except ProviderError as exc:
            raise RuntimeError("outer") from exc
    except RuntimeError as outer:
        assert is_transient(outer)


def test_provider_error_message_with_status():
    err = ProviderError(
        provider="ollama", model="m", code=500, err=ValueError("boom")
    )
    assert str(err) == "provider ollama (model m, status 500): boom"
    assert err.code == 500


def test_provider_error_message_without_status():
    err = ProviderError(provider="a", model="b", err=ValueError("x"))
    assert str(err) == "provider a (model b): x"


def test_fallback_error_message():
    err = FallbackError([ValueError("a"), ValueError("b")])
    assert str(err) == "all 2 providers failed"
    assert len(err.errors) == 2


def test_provider_and_fallback_match_provider_failed():
    with pytest.raises(ProviderFailedError) as provider_info:
        raise ProviderError(provider="x", model="m", err=ValueError("e"))
    assert str(provider_info.value) == "provider x (model m): e"

    with pytest.raises(ProviderFailedError) as fallback_info:
        raise FallbackError([ValueError("a")])
    assert str(fallback_info.value) == "all 1 providers failed"

    retry = RetryError(1, ValueError("x"))
    assert str(retry) == "failed after 1 attempts: x"
    assert not isinstance(retry, ProviderFailedError)


def test_sentinel_messages():
    assert str(ToolNotFoundError()) == "tool not found"
    assert str(ToolNotFoundError("add")) == "tool not found: add"
    assert str(MaxIterationsError()) == "max iterations reached"
    assert str(StreamCanceledError()) == "stream canceled"
    assert str(ProviderFailedError()) == "provider failed"
    assert str(UnsupportedMediaTypeError()) == "unsupported media type"
    assert str(ResolverNotFoundError()) == "no resolver for URI scheme"
    assert str(ContextCanceledError()) == "context canceled"


def test_tool_not_found_is_lookup_error():
    err = ToolNotFoundError("missing")
    assert isinstance(err, LookupError)
    assert str(err) == "tool not found: missing"