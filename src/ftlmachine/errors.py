"""Exception hierarchy for directory-tiered Fluent localization.

Two families share the FluentMachineError root:

- ConstructionError: fatal while composing the locale registry. Nothing is
  published when one is raised.
- TranslationLookupError: recoverable, per lookup. FluentMachine.t() turns
  these into a placeholder string and a log record.

Python 3.13+.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from ftlmachine.locale_id import LocaleId
    from ftlmachine.message_id import MessageId

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    "FluentMachineError",
    # Construction
    "ConstructionError",
    "ResourceIOError",
    "SyntaxProblem",
    "ResourceParseError",
    "InvalidLocaleError",
    "DuplicateLocaleError",
    "DuplicateDefinitionError",
    "LocaleUnavailableError",
    "FrozenRegistryError",
    # Lookup
    "TranslationLookupError",
    "InvalidMessageIdError",
    "MessageNotFoundError",
    "AttributeNotFoundError",
    "FormatError",
]


class FluentMachineError(Exception):
    """Base exception for all ftlmachine errors."""


# =============================================================================
# CONSTRUCTION
# =============================================================================


class ConstructionError(FluentMachineError):
    """Registry construction failed; no partial registry is exposed."""


class ResourceIOError(ConstructionError):
    """A locales directory or resource file could not be read.

    Attributes:
        path: Filesystem path that failed
    """

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot read '{self.path}': {reason}")


@dataclass(frozen=True, slots=True)
class SyntaxProblem:
    """One syntax error reported by the FTL parser.

    Attributes:
        origin: Resource path or label ("<string>" for in-memory sources)
        line_start: First 1-based line of the offending text
        line_end: Last 1-based line of the offending text
        code: Parser annotation code
        message: Parser annotation message
        text: The unparseable source slice
    """

    origin: str
    line_start: int
    line_end: int
    code: str
    message: str
    text: str

    def describe(self) -> str:
        """Render the problem as a multi-line human-readable block."""
        return (
            f"Lines {self.line_start} to {self.line_end} with {self.code}: {self.message}\n"
            f"'''\n{self.text}\n'''"
        )


class ResourceParseError(ConstructionError):
    """One or more resource files failed to compile.

    Attributes:
        problems: Every syntax problem found, in file order
    """

    def __init__(self, problems: Iterable[SyntaxProblem]) -> None:
        self.problems: tuple[SyntaxProblem, ...] = tuple(problems)
        lines = [
            f"While parsing resource(s) {', '.join(self.origins)}, "
            "the following errors were found:"
        ]
        lines.extend(p.describe() for p in self.problems)
        super().__init__("\n".join(lines))

    @property
    def origins(self) -> tuple[str, ...]:
        """Distinct origins with problems, in report order."""
        return tuple(dict.fromkeys(p.origin for p in self.problems))

    @classmethod
    def aggregate(cls, errors: Iterable[ResourceParseError]) -> ResourceParseError:
        """Merge several parse errors into a single report."""
        problems: list[SyntaxProblem] = []
        for error in errors:
            problems.extend(error.problems)
        return cls(problems)


class InvalidLocaleError(ConstructionError, ValueError):
    """A locale tag (or the directory that names it) is not a valid identifier.

    Attributes:
        tag: Offending text
        path: Directory that carried the tag, when it came from the filesystem
    """

    def __init__(self, tag: str, reason: str, *, path: Path | str | None = None) -> None:
        self.tag = tag
        self.reason = reason
        self.path = str(path) if path is not None else None
        where = f" (directory '{self.path}')" if self.path else ""
        super().__init__(f"Invalid locale '{tag}'{where}: {reason}")


class DuplicateLocaleError(ConstructionError):
    """Two directories resolved to the same locale identifier."""

    def __init__(self, locale: LocaleId, first: Path | str, second: Path | str) -> None:
        self.locale = locale
        self.paths = (str(first), str(second))
        super().__init__(
            f"Locale '{locale}' is defined twice: '{self.paths[0]}' and '{self.paths[1]}'"
        )


class DuplicateDefinitionError(ConstructionError):
    """A non-overriding merge tried to redefine existing messages or terms."""

    def __init__(self, locale: LocaleId, identifiers: Iterable[str]) -> None:
        self.locale = locale
        self.identifiers = tuple(sorted(identifiers))
        super().__init__(
            f"Locale '{locale}' already defines: {', '.join(self.identifiers)}"
        )


class LocaleUnavailableError(ConstructionError):
    """The configured fallback locale has no resolution context."""

    def __init__(self, locale: LocaleId, available: Iterable[LocaleId] = ()) -> None:
        self.locale = locale
        self.available = tuple(available)
        known = ", ".join(str(loc) for loc in self.available) or "none"
        super().__init__(f"Locale '{locale}' does not exist (available: {known})")


class FrozenRegistryError(FluentMachineError):
    """A resolution context was mutated after the registry was frozen."""


# =============================================================================
# LOOKUP
# =============================================================================


class TranslationLookupError(FluentMachineError, LookupError):
    """A single lookup could not be fully resolved."""


class InvalidMessageIdError(TranslationLookupError, ValueError):
    """Message id text is malformed (empty, bad characters, extra dots)."""

    def __init__(self, text: str, reason: str) -> None:
        self.text = text
        self.reason = reason
        super().__init__(f"Invalid message id {text!r}: {reason}")


class MessageNotFoundError(TranslationLookupError):
    """No message with the base identifier exists in the context."""

    def __init__(self, message_id: MessageId, locale: LocaleId) -> None:
        self.message_id = message_id
        self.locale = locale
        super().__init__(f"Message '{message_id.message}' not found for locale '{locale}'")


class AttributeNotFoundError(TranslationLookupError):
    """The message exists but does not declare the requested attribute.

    With no attribute requested, the message exists but has no value.
    """

    def __init__(self, message_id: MessageId, locale: LocaleId) -> None:
        self.message_id = message_id
        self.locale = locale
        if message_id.attribute is None:
            detail = "no value"
        else:
            detail = f"no attribute '{message_id.attribute}'"
        super().__init__(f"Message '{message_id.message}' has {detail} for locale '{locale}'")


class FormatError(TranslationLookupError):
    """The formatting engine reported a problem while resolving a message.

    The engine still produced a best-effort string; this error travels
    alongside it rather than replacing it.

    Attributes:
        cause: The engine error object
    """

    def __init__(self, message_id: MessageId, locale: LocaleId, cause: Exception) -> None:
        self.message_id = message_id
        self.locale = locale
        self.cause = cause
        super().__init__(f"{type(cause).__name__} in '{message_id}' ({locale}): {cause}")
