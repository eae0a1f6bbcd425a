"""Resolution context: the merged message and term set of one locale.

A context owns one ftllexengine FluentBundle. Resource units are merged into
it in tier order; the bundle keys definitions by identifier, so a later unit
redefining a message or term replaces the earlier definition. That is the
overriding merge which lets region files refine language files, which in turn
refine global files.

Lifecycle:
    1. Setup: merge()/add() resource units, add_function() custom functions.
    2. freeze(): further mutation raises FrozenRegistryError.
    3. Shared read-only use: resolve() from any number of threads.

The bundle is created without its internal lock. Formatting only reads the
message and term tables, which no longer change once the context is frozen.

Python 3.13+.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ftllexengine import FluentBundle

from ftlmachine.errors import (
    AttributeNotFoundError,
    DuplicateDefinitionError,
    FormatError,
    FrozenRegistryError,
    MessageNotFoundError,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from ftllexengine import FluentValue

    from ftlmachine.locale_id import LocaleId
    from ftlmachine.message_id import MessageId
    from ftlmachine.resource import ResourceUnit

__all__ = ["ResolutionContext"]

logger = logging.getLogger(__name__)


class ResolutionContext:
    """Per-locale container of merged resource units.

    Example:
        >>> from ftlmachine import LocaleId, MessageId, compile_resource
        >>> ctx = ResolutionContext(LocaleId("en"), use_isolating=False)
        >>> ctx.merge(compile_resource("-movie = movie\\nlist = A { -movie }"))
        >>> ctx.merge(compile_resource("-movie = film"))
        >>> ctx.resolve(MessageId("list"))
        ('A film', ())
    """

    __slots__ = (
        "_bundle",
        "_frozen",
        "_functions",
        "_locale",
        "_message_ids",
        "_term_ids",
        "_units",
        "_valueless",
    )

    def __init__(self, locale: LocaleId, *, use_isolating: bool = True) -> None:
        self._locale = locale
        self._bundle = FluentBundle(str(locale), use_isolating=use_isolating)
        self._units: list[str] = []
        self._message_ids: set[str] = set()
        self._term_ids: set[str] = set()
        self._valueless: set[str] = set()
        self._functions: list[str] = []
        self._frozen = False

    def __repr__(self) -> str:
        return (
            f"ResolutionContext(locale='{self._locale}', units={len(self._units)}, "
            f"messages={len(self._message_ids)}, terms={len(self._term_ids)})"
        )

    @property
    def locale(self) -> LocaleId:
        return self._locale

    @property
    def units(self) -> tuple[str, ...]:
        """Origins of the merged units, in merge order."""
        return tuple(self._units)

    @property
    def message_ids(self) -> frozenset[str]:
        return frozenset(self._message_ids)

    @property
    def term_ids(self) -> frozenset[str]:
        return frozenset(self._term_ids)

    @property
    def functions(self) -> tuple[str, ...]:
        """Names of custom functions registered on this context."""
        return tuple(self._functions)

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def has_message(self, message: str) -> bool:
        return message in self._message_ids

    def _check_mutable(self, operation: str) -> None:
        if self._frozen:
            msg = f"Cannot {operation} on frozen context '{self._locale}'"
            raise FrozenRegistryError(msg)

    def merge(self, unit: ResourceUnit) -> None:
        """Merge a unit, replacing any definition it redefines."""
        self._check_mutable("merge resources")
        overridden = (unit.message_ids & self._message_ids) | {
            f"-{term}" for term in unit.term_ids & self._term_ids
        }
        self._bundle.add_resource(unit.source, source_path=unit.origin)
        self._units.append(unit.origin)
        self._message_ids |= unit.message_ids
        self._term_ids |= unit.term_ids
        self._valueless = (self._valueless - unit.message_ids) | unit.valueless_ids
        if overridden:
            logger.debug(
                "%s: %s overrides %s", self._locale, unit.origin, ", ".join(sorted(overridden))
            )

    def add(self, unit: ResourceUnit) -> None:
        """Merge a unit that must not redefine anything already present.

        Raises:
            DuplicateDefinitionError: If the unit defines a message or term
                the context already has; the context is left unchanged
        """
        self._check_mutable("add resources")
        clashes = (unit.message_ids & self._message_ids) | {
            f"-{term}" for term in unit.term_ids & self._term_ids
        }
        if clashes:
            raise DuplicateDefinitionError(self._locale, clashes)
        self.merge(unit)

    def add_function(self, name: str, func: Callable[..., FluentValue]) -> None:
        """Register a custom FTL function (setup phase only)."""
        self._check_mutable("add functions")
        self._bundle.add_function(name, func)
        self._functions.append(name)

    def freeze(self) -> None:
        self._frozen = True

    def resolve(
        self, message_id: MessageId, args: Mapping[str, FluentValue] | None = None
    ) -> tuple[str, tuple[FormatError, ...]]:
        """Format a message (or one of its attributes).

        Args:
            message_id: Parsed message id
            args: Named arguments passed verbatim to the engine

        Returns:
            Tuple of (formatted_string, errors). The string is the engine's
            best-effort output even when errors were reported.

        Raises:
            MessageNotFoundError: If the base identifier is not defined
            AttributeNotFoundError: If the message lacks the attribute, or
                has no value when no attribute is requested
        """
        if not self._bundle.has_message(message_id.message):
            raise MessageNotFoundError(message_id, self._locale)
        if message_id.attribute is None:
            if message_id.message in self._valueless:
                raise AttributeNotFoundError(message_id, self._locale)
        elif not self._bundle.has_attribute(message_id.message, message_id.attribute):
            raise AttributeNotFoundError(message_id, self._locale)

        result, engine_errors = self._bundle.format_pattern(
            message_id.message, args, attribute=message_id.attribute
        )
        errors = tuple(FormatError(message_id, self._locale, err) for err in engine_errors)
        return result, errors
