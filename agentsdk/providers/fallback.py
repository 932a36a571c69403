"""A provider that tries several providers in order until one starts."""

from __future__ import annotations

from typing import Callable, Iterator, Optional, Sequence

from agentsdk.core.cancel import Context
from agentsdk.core.content import Message
from agentsdk.core.delta import Delta
from agentsdk.core.errors import FallbackError
from agentsdk.core.provider import Provider
from agentsdk.core.tool import ToolDef


def _always(_: BaseException) -> bool:
    return True


class FallbackProvider:
    """Tries each provider in turn, moving on when one fails.

    By default any error moves on to the next provider. ``fallback_on``
    narrows this; for example ``is_transient`` falls back on transient
    errors only.
    """

    def __init__(
        self,
        *providers: Provider,
        fallback_on: Optional[Callable[[BaseException], bool]] = None,
    ) -> None:
        self.providers: list[Provider] = list(providers)
        self.fallback_on = fallback_on

    def name(self) -> str:
        """Return the provider name."""
        return "fallback"

    def chat_stream(
        self,
        ctx: Context,
        messages: Sequence[Message],
        tools: Optional[Sequence[ToolDef]],
    ) -> Iterator[Delta]:
        """Return the stream of the first provider that starts.

        Raises FallbackError holding every error seen, in order.
        """
        should_fallback = self.fallback_on or _always
        errors: list[BaseException] = []
        for provider in self.providers:
            try:
                return provider.chat_stream(ctx, messages, tools)
            except Exception as err:
                errors.append(err)
                if ctx.is_done() or not should_fallback(err):
                    break
        raise FallbackError(errors)