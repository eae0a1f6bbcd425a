"""Locale negotiation: pick available locales for a request.

Implements the fluent-langneg algorithm over LocaleId values. For each
requested locale, in order, candidates are searched in six passes of
decreasing precision:

    1. exact match
    2. available locales treated as ranges (``en`` accepts ``en-US``)
    3. the request maximized with likely subtags (``en`` -> ``en-Latn-US``)
    4. the request without variants, both sides as ranges
    5. the request without region, maximized (``en-UK`` -> ``en-Latn-US``)
    6. the request without region, both sides as ranges

FILTERING keeps every hit, MATCHING stops at the first hit per requested
locale, LOOKUP stops at the first hit overall. An available locale is
returned at most once. Ties inside a pass follow the order of ``available``.

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from typing import TYPE_CHECKING

from ftlmachine.enums import NegotiationStrategy
from ftlmachine.errors import InvalidLocaleError
from ftlmachine.locale_id import LocaleId

if TYPE_CHECKING:
    from ftlmachine.registry import LocaleRegistry

__all__ = [
    "negotiate_languages",
    "parse_accept_language",
    "parse_locales",
    "select",
    "select_single",
]

logger = logging.getLogger(__name__)


def _queries(req: LocaleId) -> Iterator[tuple[LocaleId, bool, bool]]:
    """Yield (query, available_as_range, query_as_range) for the six passes.

    Later passes refine the request produced by earlier ones, so a request
    maximized in pass 3 stays maximized in pass 4.
    """
    yield req, False, False
    yield req, True, False

    maxed = req.maximize()
    if maxed != req:
        req = maxed
        yield req, True, False

    req = req.without_variants()
    yield req, True, True

    req = req.without_region()
    maxed = req.maximize()
    if maxed != req:
        req = maxed
        yield req, True, False

    yield req.without_region(), True, True


def negotiate_languages(
    requested: Iterable[LocaleId],
    available: Sequence[LocaleId],
    fallback: LocaleId | None = None,
    strategy: NegotiationStrategy = NegotiationStrategy.FILTERING,
) -> list[LocaleId]:
    """Rank available locales against an ordered preference list.

    Args:
        requested: Preferred locales, most preferred first
        available: Supported locales; their order breaks ties
        fallback: Appended when missing (LOOKUP: only when nothing matched)
        strategy: FILTERING, MATCHING or LOOKUP

    Returns:
        Supported locales, best first

    Example:
        >>> avail = [LocaleId.parse(t) for t in ("en", "en-UK", "en-US")]
        >>> [str(loc) for loc in negotiate_languages([LocaleId.parse("en-US")], avail)]
        ['en-US', 'en', 'en-UK']
    """
    remaining = list(available)
    supported: list[LocaleId] = []

    for req in requested:
        for target, available_as_range, query_as_range in _queries(req):
            hits: list[LocaleId] = []
            for locale in remaining:
                if locale.matches(target, available_as_range, query_as_range):
                    hits.append(locale)
                    if strategy is not NegotiationStrategy.FILTERING:
                        break
            if not hits:
                continue
            supported.extend(hits)
            remaining = [loc for loc in remaining if loc not in hits]
            if strategy is not NegotiationStrategy.FILTERING:
                break
        if strategy is NegotiationStrategy.LOOKUP and supported:
            break

    if fallback is not None:
        if strategy is NegotiationStrategy.LOOKUP:
            if not supported:
                supported.append(fallback)
        elif fallback not in supported:
            supported.append(fallback)
    return supported


def select_single(
    requested: LocaleId, available: Sequence[LocaleId], fallback: LocaleId
) -> LocaleId:
    """Exact match, then without variants, then without region, then the bare
    language with the script dropped too, else fallback.
    """
    stripped = requested.without_variants().without_region()
    for candidate in dict.fromkeys(
        (requested, requested.without_variants(), stripped, LocaleId(stripped.language))
    ):
        if candidate in available:
            return candidate
    return fallback


def select(requested: LocaleId | Sequence[LocaleId], registry: LocaleRegistry) -> LocaleId:
    """Pick the single best locale present in ``registry``; never fails.

    A lone identifier uses progressive stripping (see ``select_single``); a
    preference list goes through ``negotiate_languages`` with the
    registry's strategy and the top-ranked result is returned.
    """
    if isinstance(requested, LocaleId):
        chosen = select_single(requested, registry.available, registry.fallback)
    else:
        ranked = negotiate_languages(
            requested, registry.available, registry.fallback, registry.strategy
        )
        chosen = ranked[0]
    logger.debug("Selected %s for %s", chosen, requested)
    return chosen


def parse_locales(tags: Iterable[str]) -> list[LocaleId]:
    """Parse tags, dropping (and logging) the malformed ones."""
    locales: list[LocaleId] = []
    for tag in tags:
        try:
            locales.append(LocaleId.parse(tag))
        except InvalidLocaleError as e:
            logger.debug("Skipping requested locale: %s", e)
    return list(dict.fromkeys(locales))


def _quality(params: list[str]) -> float:
    for param in params:
        name, _, value = param.strip().partition("=")
        if name.strip().lower() == "q":
            try:
                return max(0.0, min(1.0, float(value)))
            except ValueError:
                return 0.0
    return 1.0


def parse_accept_language(header: str) -> list[LocaleId]:
    """Parse an ``Accept-Language`` value into locales, best first.

    Weights (``q=``) reorder the list; equal weights keep header order.
    Wildcards, zero weights and malformed tags are dropped.

    Example:
        >>> [str(loc) for loc in parse_accept_language("de;q=0.5, en-US, *;q=0.1")]
        ['en-US', 'de']
    """
    weighted: list[tuple[float, str]] = []
    for item in header.split(","):
        tag, *params = item.strip().split(";")
        tag = tag.strip()
        if not tag or tag == "*":
            continue
        quality = _quality(params)
        if quality > 0:
            weighted.append((quality, tag))
    weighted.sort(key=lambda pair: pair[0], reverse=True)
    return parse_locales(tag for _, tag in weighted)
