"""Locale identifiers: parsed, comparable language tags.

Parsing is syntactic and delegated to Babel's ``parse_locale``; no CLDR
existence check is made, so a tag such as ``en-UK`` (used by region
directories in the wild) is accepted while ``??`` is rejected. Likely-subtag
maximization uses Babel's CLDR ``likely_subtags`` table.

Python 3.13+.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass, replace

from babel.core import get_global, parse_locale

from ftlmachine.errors import InvalidLocaleError

__all__ = ["LocaleId", "normalize_tag"]

# Letters, digits and the two accepted separators. Babel silently strips
# ".encoding" and "@modifier" suffixes, which must not pass as a directory name.
_TAG_CHARS = re.compile(r"[A-Za-z0-9_-]+")


def normalize_tag(tag: str) -> str:
    """Convert a BCP-47 tag to the POSIX form Babel parses (en-US -> en_US)."""
    return tag.replace("-", "_")


@functools.cache
def _likely_subtags() -> dict[str, str]:
    return dict(get_global("likely_subtags"))


@dataclass(frozen=True, slots=True)
class LocaleId:
    """Language identifier with optional script, region and variants.

    Subtags are stored in canonical case (language lower, script title,
    region upper, variants lower), so dataclass equality and hashing are
    case-insensitive with respect to the parsed text.

    Example:
        >>> LocaleId.parse("en_uk")
        LocaleId(language='en', script=None, region='UK', variants=())
        >>> str(LocaleId.parse("EN-uk"))
        'en-UK'
    """

    language: str
    script: str | None = None
    region: str | None = None
    variants: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "language", self.language.lower())
        if self.script is not None:
            object.__setattr__(self, "script", self.script.title())
        if self.region is not None:
            object.__setattr__(self, "region", self.region.upper())
        object.__setattr__(self, "variants", tuple(v.lower() for v in self.variants))

    @classmethod
    def parse(cls, tag: str) -> LocaleId:
        """Parse a BCP-47 (``en-US``) or POSIX (``en_US``) tag.

        Raises:
            InvalidLocaleError: If the tag is empty or not a syntactically
                valid language identifier
        """
        if not tag or not _TAG_CHARS.fullmatch(tag):
            raise InvalidLocaleError(tag, "expected letters, digits, '-' or '_'")
        try:
            language, region, script, variant = parse_locale(normalize_tag(tag))[:4]
        except ValueError as e:
            raise InvalidLocaleError(tag, str(e)) from e
        if not 2 <= len(language) <= 8 or len(language) == 4:
            msg = f"language subtag '{language}' must be 2-3 or 5-8 letters"
            raise InvalidLocaleError(tag, msg)
        return cls(language, script, region, (variant,) if variant else ())

    def __str__(self) -> str:
        return "-".join(self._subtags())

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, LocaleId):
            return NotImplemented
        return str(self) < str(other)

    def _subtags(self) -> list[str]:
        parts = [self.language]
        if self.script:
            parts.append(self.script)
        if self.region:
            parts.append(self.region)
        parts.extend(self.variants)
        return parts

    @property
    def posix(self) -> str:
        """Underscore-separated form used by Babel (``en_UK``)."""
        return "_".join(self._subtags())

    def without_region(self) -> LocaleId:
        return replace(self, region=None)

    def without_variants(self) -> LocaleId:
        return replace(self, variants=())

    def with_region(self, region: str) -> LocaleId:
        return replace(self, region=region)

    def matches(
        self, other: LocaleId, self_as_range: bool = False, other_as_range: bool = False
    ) -> bool:
        """Subtag-wise comparison where a missing subtag may act as a wildcard.

        Args:
            other: Identifier to compare against
            self_as_range: Missing subtags on ``self`` match anything
            other_as_range: Missing subtags on ``other`` match anything

        Example:
            >>> en, en_us = LocaleId("en"), LocaleId("en", region="US")
            >>> en.matches(en_us)
            False
            >>> en.matches(en_us, self_as_range=True)
            True
        """

        def subtag_matches(mine: object, theirs: object) -> bool:
            return (
                mine == theirs
                or (self_as_range and mine is None)
                or (other_as_range and theirs is None)
            )

        return (
            subtag_matches(self.language, other.language)
            and subtag_matches(self.script, other.script)
            and subtag_matches(self.region, other.region)
            and subtag_matches(self.variants or None, other.variants or None)
        )

    def maximize(self) -> LocaleId:
        """Fill missing script and region from CLDR likely subtags.

        Returns ``self`` unchanged when no likely-subtag entry applies.

        Example:
            >>> str(LocaleId("en").maximize())
            'en-Latn-US'
            >>> str(LocaleId("en", region="UK").maximize())
            'en-Latn-UK'
        """
        table = _likely_subtags()
        candidates = []
        if self.script and self.region:
            candidates.append(f"{self.language}_{self.script}_{self.region}")
        if self.region:
            candidates.append(f"{self.language}_{self.region}")
        if self.script:
            candidates.append(f"{self.language}_{self.script}")
        candidates.append(self.language)

        for key in candidates:
            likely = table.get(key)
            if likely is None:
                continue
            _, region, script, _ = parse_locale(likely)[:4]
            return replace(
                self,
                script=self.script or script,
                region=self.region or region,
            )
        return self
