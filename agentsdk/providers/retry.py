"""A provider wrapper that retries failed calls with exponential backoff."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Sequence

from agentsdk.core.cancel import Context
from agentsdk.core.content import Message
from agentsdk.core.delta import Delta
from agentsdk.core.errors import ContextCanceledError, RetryError, is_transient
from agentsdk.core.provider import Provider, provider_name
from agentsdk.core.tool import ToolDef

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 0.5
DEFAULT_MAX_DELAY = 10.0
DEFAULT_MULTIPLIER = 2.0


@dataclass(frozen=True)
class RetryConfig:
    """Retry behaviour; delays are in seconds and unset values take defaults.

    ``max_attempts`` counts every attempt, so 1 means no retry.
    ``should_retry`` of None retries transient errors only.
    """

    max_attempts: int = 0
    base_delay: float = 0.0
    max_delay: float = 0.0
    multiplier: float = 0.0
    should_retry: Optional[Callable[[BaseException], bool]] = None


def default_config() -> RetryConfig:
    """Three attempts, 0.5 s base delay, 10 s cap, doubling, transient only."""
    return RetryConfig(
        max_attempts=DEFAULT_MAX_ATTEMPTS,
        base_delay=DEFAULT_BASE_DELAY,
        max_delay=DEFAULT_MAX_DELAY,
        multiplier=DEFAULT_MULTIPLIER,
    )


def _normalise(config: RetryConfig) -> RetryConfig:
    return dataclasses.replace(
        config,
        max_attempts=config.max_attempts if config.max_attempts > 0 else DEFAULT_MAX_ATTEMPTS,
        multiplier=config.multiplier if config.multiplier > 0 else DEFAULT_MULTIPLIER,
        base_delay=config.base_delay if config.base_delay > 0 else DEFAULT_BASE_DELAY,
        max_delay=config.max_delay if config.max_delay > 0 else DEFAULT_MAX_DELAY,
    )


class RetryProvider:
    """Wraps a provider, retrying calls that fail to start."""

    def __init__(self, inner: Provider, config: Optional[RetryConfig] = None) -> None:
        self.inner = inner
        self.config = _normalise(config if config is not None else RetryConfig())

    def name(self) -> str:
        """Return "retry(<inner name>)"."""
        return f"retry({provider_name(self.inner)})"

    def _delay(self, attempt: int) -> float:
        delay = self.config.base_delay * self.config.multiplier**attempt
        return min(delay, self.config.max_delay)

    def chat_stream(
        self,
        ctx: Context,
        messages: Sequence[Message],
        tools: Optional[Sequence[ToolDef]],
    ) -> Iterator[Delta]:
        """Return the inner provider's stream, retrying with backoff on failure.

        A non-retryable error, or any error once the context is canceled, is
        raised as it is. Cancellation during backoff raises
        ContextCanceledError. Running out of attempts raises RetryError.
        """
        should_retry = self.config.should_retry or is_transient
        attempts = self.config.max_attempts
        last_err: Optional[BaseException] = None
        for attempt in range(attempts):
            try:
                return self.inner.chat_stream(ctx, messages, tools)
            except Exception as err:
                last_err = err
                if ctx.is_done() or not should_retry(err):
                    raise
            if attempt < attempts - 1 and ctx.wait(self._delay(attempt)):
                raise ContextCanceledError() from last_err
        raise RetryError(attempts, last_err) from last_err