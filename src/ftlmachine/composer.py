"""Directory tree composer: build one resolution context per locale.

Layout of a locales directory::

    locales/
        global.ftl          global tier: merged into every locale
        en/                 language tier: locale "en"
            movie.ftl
            US/             region tier: locale "en-US"
                intl.ftl
            UK/             region tier: locale "en-UK" (en-UK/ also accepted)
                overrides.ftl
        pt/
            ...

Each locale's context merges, in order: every global file, every file of its
language directory, then (for region locales) every file of its region
directory. Files within a tier are merged by name. Later files override
earlier ones, so the most specific definition of an identifier wins.

Composition is all-or-nothing: any IO, parse or naming error raises before a
single context is returned.

Python 3.13+.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ftlmachine.context import ResolutionContext
from ftlmachine.enums import SyntaxErrorHandling
from ftlmachine.errors import (
    DuplicateLocaleError,
    InvalidLocaleError,
    ResourceIOError,
    ResourceParseError,
)
from ftlmachine.locale_id import LocaleId
from ftlmachine.resource import ResourceUnit, compile_resource

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Tiers
    "GlobalTier",
    "LanguageTier",
    "RegionTier",
    "Tier",
    # Plan
    "TierFiles",
    "TierPlan",
    "scan_directory",
    # Composition
    "compose_directory",
]

logger = logging.getLogger(__name__)

RESOURCE_SUFFIX = ".ftl"


# =============================================================================
# TIERS
# =============================================================================


@dataclass(frozen=True, slots=True)
class GlobalTier:
    """Files directly under the root: shared by every locale."""


@dataclass(frozen=True, slots=True)
class LanguageTier:
    """First-level directory; ``locale`` carries no region."""

    locale: LocaleId


@dataclass(frozen=True, slots=True)
class RegionTier:
    """Second-level directory; ``locale`` is the parent language plus a region."""

    locale: LocaleId


type Tier = GlobalTier | LanguageTier | RegionTier


@dataclass(frozen=True, slots=True)
class TierFiles:
    """Resource files of one tier directory, sorted by name."""

    tier: Tier
    directory: Path
    files: tuple[Path, ...]


@dataclass(frozen=True, slots=True)
class TierPlan:
    """Classified layout of a locales directory.

    Attributes:
        root: The scanned root directory
        tiers: Global tier first, then each language tier followed by its
            region tiers, in directory-name order
    """

    root: Path
    tiers: tuple[TierFiles, ...]

    @property
    def locales(self) -> tuple[LocaleId, ...]:
        """Every discovered locale, in registry insertion order."""
        return tuple(
            entry.tier.locale
            for entry in self.tiers
            if isinstance(entry.tier, LanguageTier | RegionTier)
        )

    def _files_for(self, tier: Tier) -> tuple[Path, ...]:
        for entry in self.tiers:
            if entry.tier == tier:
                return entry.files
        return ()

    def merge_order(self, locale: LocaleId) -> tuple[Path, ...]:
        """Files merged into ``locale``'s context: global, language, region."""
        files = list(self._files_for(GlobalTier()))
        match locale.region:
            case None:
                files.extend(self._files_for(LanguageTier(locale)))
            case _:
                files.extend(self._files_for(LanguageTier(locale.without_region())))
                files.extend(self._files_for(RegionTier(locale)))
        return tuple(files)


# =============================================================================
# SCANNING
# =============================================================================


def _list_directory(directory: Path) -> tuple[list[Path], list[Path]]:
    """Return (resource files, subdirectories) of ``directory``, sorted by name."""
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise ResourceIOError(directory, e.strerror or str(e)) from e

    files: list[Path] = []
    subdirs: list[Path] = []
    for path in entries:
        if path.is_dir():
            subdirs.append(path)
        elif path.is_file() and path.suffix == RESOURCE_SUFFIX:
            files.append(path)
    return files, subdirs


def _language_tier(directory: Path) -> LanguageTier:
    try:
        locale = LocaleId.parse(directory.name)
    except InvalidLocaleError as e:
        raise InvalidLocaleError(directory.name, e.reason, path=directory) from e
    if locale.region is not None:
        raise InvalidLocaleError(
            directory.name,
            "a language directory must not carry a region subtag",
            path=directory,
        )
    return LanguageTier(locale)


def _region_tier(language: LocaleId, directory: Path) -> RegionTier:
    """Combine the parent language with a ``UK`` (or ``en-UK``) directory name."""
    name = directory.name
    qualified = "-" in name or "_" in name
    try:
        parsed = LocaleId.parse(name if qualified else f"{language.language}-{name}")
    except InvalidLocaleError as e:
        raise InvalidLocaleError(name, e.reason, path=directory) from e
    if parsed.region is None:
        raise InvalidLocaleError(name, "expected a region subtag", path=directory)

    if qualified:
        if parsed.without_region() != language:
            msg = f"region directory does not belong to language '{language}'"
            raise InvalidLocaleError(name, msg, path=directory)
        return RegionTier(parsed)
    if parsed.script is not None or parsed.variants:
        raise InvalidLocaleError(name, "expected only a region subtag", path=directory)
    return RegionTier(language.with_region(parsed.region))


def scan_directory(root: Path | str) -> TierPlan:
    """Classify a locales directory into global, language and region tiers.

    Raises:
        ResourceIOError: If ``root`` is missing, not a directory or unreadable
        InvalidLocaleError: If a directory name is not a valid subtag
        DuplicateLocaleError: If two directories name the same locale
    """
    root = Path(root)
    if not root.is_dir():
        raise ResourceIOError(root, "not a directory")

    global_files, language_dirs = _list_directory(root)
    tiers = [TierFiles(GlobalTier(), root, tuple(global_files))]
    seen: dict[LocaleId, Path] = {}

    def register(locale: LocaleId, directory: Path) -> None:
        if locale in seen:
            raise DuplicateLocaleError(locale, seen[locale], directory)
        seen[locale] = directory

    for language_dir in language_dirs:
        language = _language_tier(language_dir)
        register(language.locale, language_dir)
        files, region_dirs = _list_directory(language_dir)
        tiers.append(TierFiles(language, language_dir, tuple(files)))

        for region_dir in region_dirs:
            region = _region_tier(language.locale, region_dir)
            register(region.locale, region_dir)
            region_files, nested = _list_directory(region_dir)
            for directory in nested:
                logger.warning("Ignoring directory below region tier: %s", directory)
            tiers.append(TierFiles(region, region_dir, tuple(region_files)))

    plan = TierPlan(root, tuple(tiers))
    logger.debug(
        "Scanned %s: %d global files, locales %s",
        root,
        len(global_files),
        ", ".join(str(loc) for loc in plan.locales) or "none",
    )
    return plan


# =============================================================================
# COMPOSITION
# =============================================================================


def _read_resource(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ResourceIOError(path, f"not valid UTF-8 ({e.reason})") from e
    except OSError as e:
        raise ResourceIOError(path, e.strerror or str(e)) from e


def _compile_all(
    plan: TierPlan, syntax_errors: SyntaxErrorHandling
) -> dict[Path, ResourceUnit]:
    units: dict[Path, ResourceUnit] = {}
    failures: list[ResourceParseError] = []
    for entry in plan.tiers:
        for path in entry.files:
            try:
                units[path] = compile_resource(_read_resource(path), origin=str(path))
            except ResourceParseError as e:
                if syntax_errors is SyntaxErrorHandling.FAIL_FAST:
                    raise
                logger.debug("Deferring syntax errors in %s", path)
                failures.append(e)
    if failures:
        raise ResourceParseError.aggregate(failures)
    return units


def compose_directory(
    root: Path | str,
    *,
    use_isolating: bool = True,
    syntax_errors: SyntaxErrorHandling = SyntaxErrorHandling.FAIL_FAST,
) -> dict[LocaleId, ResolutionContext]:
    """Build a resolution context for every locale found under ``root``.

    Every resource file is read and compiled once; each context then merges
    its own copy of the definitions, so overrides never leak between locales.

    Args:
        root: Locales directory
        use_isolating: Wrap placeables in Unicode bidi isolation marks
        syntax_errors: Abort on the first broken file or report them all

    Returns:
        Contexts keyed by locale, in directory order (each language followed
        by its regions)

    Raises:
        ResourceIOError: Unreadable directory or file
        ResourceParseError: A resource file failed to compile
        InvalidLocaleError: A directory name is not a valid subtag
        DuplicateLocaleError: Two directories name the same locale
    """
    logger.info("Loading fluent translations from %s", root)
    plan = scan_directory(root)
    units = _compile_all(plan, syntax_errors)

    contexts: dict[LocaleId, ResolutionContext] = {}
    for locale in plan.locales:
        context = ResolutionContext(locale, use_isolating=use_isolating)
        for path in plan.merge_order(locale):
            context.merge(units[path])
        contexts[locale] = context
        logger.debug("Composed %r", context)

    logger.info(
        "Finished loading locales: %s",
        ", ".join(str(locale) for locale in contexts) or "none",
    )
    return contexts
