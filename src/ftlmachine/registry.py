"""Locale registry: locale -> resolution context, plus the fallback locale.

Built once, frozen, then shared read-only across request handlers.

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from types import MappingProxyType

from ftlmachine.context import ResolutionContext
from ftlmachine.enums import NegotiationStrategy
from ftlmachine.errors import LocaleUnavailableError
from ftlmachine.locale_id import LocaleId

__all__ = ["LocaleRegistry"]

logger = logging.getLogger(__name__)


class LocaleRegistry(Mapping[LocaleId, ResolutionContext]):
    """Read-only mapping of locales to their resolution contexts.

    Iteration follows insertion order, which is also the last-resort
    tie-break during negotiation.

    Args:
        contexts: Contexts keyed by locale
        fallback: Locale used when nothing requested can be matched
        strategy: Negotiation strategy for preference lists

    Raises:
        LocaleUnavailableError: If ``fallback`` has no context
    """

    __slots__ = ("_available", "_contexts", "_fallback", "_frozen", "_strategy")

    def __init__(
        self,
        contexts: Mapping[LocaleId, ResolutionContext],
        fallback: LocaleId,
        strategy: NegotiationStrategy = NegotiationStrategy.FILTERING,
    ) -> None:
        if fallback not in contexts:
            raise LocaleUnavailableError(fallback, contexts)
        self._contexts: Mapping[LocaleId, ResolutionContext] = dict(contexts)
        self._available = tuple(self._contexts)
        self._fallback = fallback
        self._strategy = NegotiationStrategy(strategy)
        self._frozen = False

    def __repr__(self) -> str:
        return (
            f"LocaleRegistry(locales=[{', '.join(str(loc) for loc in self._available)}], "
            f"fallback='{self._fallback}', strategy={self._strategy.value!r})"
        )

    def __getitem__(self, locale: LocaleId) -> ResolutionContext:
        return self._contexts[locale]

    def __iter__(self) -> Iterator[LocaleId]:
        return iter(self._available)

    def __len__(self) -> int:
        return len(self._available)

    @property
    def available(self) -> tuple[LocaleId, ...]:
        return self._available

    @property
    def fallback(self) -> LocaleId:
        return self._fallback

    @property
    def strategy(self) -> NegotiationStrategy:
        return self._strategy

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> LocaleRegistry:
        """End the setup phase: freeze every context and the mapping itself."""
        if not self._frozen:
            for context in self._contexts.values():
                context.freeze()
            self._contexts = MappingProxyType(dict(self._contexts))
            self._frozen = True
            logger.debug("Registry frozen with %d locales", len(self._available))
        return self
