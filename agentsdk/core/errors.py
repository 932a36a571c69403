"""Error types raised by the agent loop and providers, and their classification."""

from __future__ import annotations

import enum
from typing import Iterator, Optional, Sequence, TypeVar

_E = TypeVar("_E", bound=BaseException)


class _AgentError(Exception):
    """Base for errors that carry a fixed default message."""

    default_message = ""

    def __init__(self, *args: object) -> None:
        super().__init__(*(args or (self.default_message,)))


class ToolNotFoundError(_AgentError, LookupError):
    """A tool name is not registered."""

    default_message = "tool not found"

    def __init__(self, name: str = "") -> None:
        self.name = name
        if name:
            super().__init__(f"{self.default_message}: {name}")
        else:
            super().__init__()


class MaxIterationsError(_AgentError):
    """The agent loop hit its iteration cap."""

    default_message = "max iterations reached"


class StreamCanceledError(_AgentError):
    """The event stream was canceled."""

    default_message = "stream canceled"


class ProviderFailedError(_AgentError):
    """A provider call failed."""

    default_message = "provider failed"


class UnsupportedMediaTypeError(_AgentError):
    """A media type cannot be handled."""

    default_message = "unsupported media type"


class ResolverNotFoundError(_AgentError, LookupError):
    """No resolver is registered for a URI scheme."""

    default_message = "no resolver for URI scheme"


class ContextCanceledError(_AgentError):
    """An operation stopped because its context was canceled."""

    default_message = "context canceled"


class ErrorKind(enum.IntEnum):
    """Whether an error is worth retrying."""

    TRANSIENT = 0
    PERMANENT = 1


class ProviderError(ProviderFailedError):
    """A failure from a provider call, with its classification.

    As with a zero-valued record, ``kind`` defaults to TRANSIENT.
    """

    def __init__(
        self,
        provider: str = "",
        model: str = "",
        kind: ErrorKind = ErrorKind.TRANSIENT,
        code: int = 0,
        err: Optional[BaseException] = None,
    ) -> None:
        self.provider = provider
        self.model = model
        self.kind = kind
        self.code = code
        self.err = err
        super().__init__(self._describe())

    def _describe(self) -> str:
        inner = str(self.err) if self.err is not None else "<nil>"
        if self.code:
            return (
                f"provider {self.provider} (model {self.model}, "
                f"status {self.code}): {inner}"
            )
        return f"provider {self.provider} (model {self.model}): {inner}"

    def __str__(self) -> str:
        return self._describe()


class FallbackError(ProviderFailedError):
    """Every provider in a fallback chain failed."""

    def __init__(self, errors: Sequence[BaseException] = ()) -> None:
        self.errors = list(errors)
        super().__init__(self._describe())

    def _describe(self) -> str:
        return f"all {len(self.errors)} providers failed"

    def __str__(self) -> str:
        return self._describe()


class RetryError(Exception):
    """All retry attempts were used up."""

    def __init__(self, attempts: int, last: Optional[BaseException]) -> None:
        self.attempts = attempts
        self.last = last
        super().__init__(self._describe())

    def _describe(self) -> str:
        return f"failed after {self.attempts} attempts: {self.last}"

    def __str__(self) -> str:
        return self._describe()


def _unwrap(err: BaseException) -> list[BaseException]:
    if isinstance(err, ProviderError):
        return [err.err] if err.err is not None else []
    if isinstance(err, RetryError):
        return [err.last] if err.last is not None else []
    if isinstance(err, FallbackError):
        return list(err.errors)
    return [err.__cause__] if err.__cause__ is not None else []


def _walk(err: BaseException) -> Iterator[BaseException]:
    """Yield ``err`` and everything it wraps, depth first."""
    yield err
    for inner in _unwrap(err):
        yield from _walk(inner)


def _find(err: BaseException, cls: type[_E]) -> Optional[_E]:
    return next((e for e in _walk(err) if isinstance(e, cls)), None)


def is_transient(err: Optional[BaseException]) -> bool:
    """Return True if ``err`` is worth retrying."""
    if err is None:
        return False
    provider_error = _find(err, ProviderError)
    if provider_error is not None:
        return provider_error.kind is ErrorKind.TRANSIENT
    fallback_error = _find(err, FallbackError)
    if fallback_error is not None and fallback_error.errors:
        return is_transient(fallback_error.errors[-1])
    return False


def classify_http_status(code: int) -> ErrorKind:
    """Map an HTTP status code to an ErrorKind."""
    if code in (429, 408) or 500 <= code < 600:
        return ErrorKind.TRANSIENT
    return ErrorKind.PERMANENT