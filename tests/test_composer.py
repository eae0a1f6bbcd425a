"""Tests for directory scanning and tiered composition of locale contexts."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from ftlmachine import (
    DuplicateLocaleError,
    InvalidLocaleError,
    LocaleId,
    MessageId,
    ResourceIOError,
    ResourceParseError,
    SyntaxErrorHandling,
)
from ftlmachine.composer import (
    GlobalTier,
    LanguageTier,
    RegionTier,
    compose_directory,
    scan_directory,
)

type TreeWriter = Callable[[dict[str, str]], Path]

EN = LocaleId("en")
EN_UK = LocaleId("en", region="UK")
EN_US = LocaleId("en", region="US")


def _text(contexts: dict, locale: LocaleId, key: str) -> str:
    result, errors = contexts[locale].resolve(MessageId.parse(key))
    assert errors == ()
    return result


# ============================================================================
# Scanning
# ============================================================================


class TestScanDirectory:
    """Classification of the {global}/{language}/{region} layout."""

    def test_fixture_tiers(self, locales_dir: Path) -> None:
        plan = scan_directory(locales_dir)
        kinds = [entry.tier for entry in plan.tiers]
        assert kinds == [
            GlobalTier(),
            LanguageTier(EN),
            RegionTier(EN_UK),
            RegionTier(EN_US),
            LanguageTier(LocaleId("pt")),
            RegionTier(LocaleId("pt", region="BR")),
        ]

    def test_locales_in_directory_order(self, locales_dir: Path) -> None:
        plan = scan_directory(locales_dir)
        assert [str(loc) for loc in plan.locales] == ["en", "en-UK", "en-US", "pt", "pt-BR"]

    def test_files_sorted_by_name(self, locales_dir: Path) -> None:
        plan = scan_directory(locales_dir)
        english = plan.tiers[1]
        assert [path.name for path in english.files] == ["movie.ftl", "region.ftl"]

    def test_merge_order_is_global_language_region(self, locales_dir: Path) -> None:
        plan = scan_directory(locales_dir)
        names = [path.relative_to(locales_dir).as_posix() for path in plan.merge_order(EN_UK)]
        assert names == ["global.ftl", "en/movie.ftl", "en/region.ftl", "en/UK/overrides.ftl"]

    def test_non_ftl_files_ignored(self, write_tree: TreeWriter) -> None:
        root = write_tree({"en/main.ftl": "a = b", "en/README.md": "# docs", "notes.txt": "x"})
        plan = scan_directory(root)
        assert plan.tiers[0].files == ()
        assert [path.name for path in plan.tiers[1].files] == ["main.ftl"]

    def test_qualified_region_directory(self, write_tree: TreeWriter) -> None:
        root = write_tree({"en/main.ftl": "a = b", "en/en-GB/gb.ftl": "a = c"})
        assert scan_directory(root).locales == (EN, LocaleId("en", region="GB"))

    def test_script_language_directory(self, write_tree: TreeWriter) -> None:
        root = write_tree({"sr-Latn/main.ftl": "a = b", "sr-Latn/RS/rs.ftl": "a = c"})
        assert [str(loc) for loc in scan_directory(root).locales] == ["sr-Latn", "sr-Latn-RS"]

    def test_nested_directories_below_region_warn(
        self, write_tree: TreeWriter, caplog: pytest.LogCaptureFixture
    ) -> None:
        root = write_tree({"en/main.ftl": "a = b", "en/US/deep/x.ftl": "a = c"})
        with caplog.at_level(logging.WARNING, logger="ftlmachine.composer"):
            plan = scan_directory(root)
        assert plan.locales == (EN, EN_US)
        assert "Ignoring directory below region tier" in caplog.text


class TestScanDirectoryErrors:
    """Naming and IO problems abort the scan with a precise cause."""

    def test_missing_root(self, tmp_path: Path) -> None:
        with pytest.raises(ResourceIOError) as exc_info:
            scan_directory(tmp_path / "nowhere")
        assert exc_info.value.path.endswith("nowhere")

    def test_root_is_a_file(self, tmp_path: Path) -> None:
        path = tmp_path / "file.ftl"
        path.write_text("a = b", encoding="utf-8")
        with pytest.raises(ResourceIOError, match="not a directory"):
            scan_directory(path)

    def test_invalid_language_directory(self, write_tree: TreeWriter) -> None:
        root = write_tree({"??/main.ftl": "a = b"})
        with pytest.raises(InvalidLocaleError) as exc_info:
            scan_directory(root)
        assert exc_info.value.tag == "??"
        assert exc_info.value.path is not None
        assert exc_info.value.path.endswith("??")

    def test_language_directory_with_region(self, write_tree: TreeWriter) -> None:
        root = write_tree({"en-US/main.ftl": "a = b"})
        with pytest.raises(InvalidLocaleError, match="must not carry a region"):
            scan_directory(root)

    def test_invalid_region_directory(self, write_tree: TreeWriter) -> None:
        root = write_tree({"en/main.ftl": "a = b", "en/!!/x.ftl": "a = c"})
        with pytest.raises(InvalidLocaleError) as exc_info:
            scan_directory(root)
        assert exc_info.value.tag == "!!"

    def test_region_directory_of_other_language(self, write_tree: TreeWriter) -> None:
        root = write_tree({"en/main.ftl": "a = b", "en/pt-BR/x.ftl": "a = c"})
        with pytest.raises(InvalidLocaleError, match="does not belong to language 'en'"):
            scan_directory(root)

    def test_duplicate_region(self, write_tree: TreeWriter) -> None:
        root = write_tree(
            {"en/main.ftl": "a = b", "en/US/x.ftl": "a = c", "en/en-US/y.ftl": "a = d"}
        )
        with pytest.raises(DuplicateLocaleError) as exc_info:
            scan_directory(root)
        assert exc_info.value.locale == EN_US

    def test_duplicate_language_by_case(self, write_tree: TreeWriter) -> None:
        root = write_tree({"EN/a.ftl": "a = b", "en/b.ftl": "a = c"})
        with pytest.raises(DuplicateLocaleError, match="'en' is defined twice"):
            scan_directory(root)


# ============================================================================
# Composition
# ============================================================================


class TestComposeDirectory:
    """Merged contexts honor the overriding law."""

    def test_region_override_wins(self, locales_dir: Path) -> None:
        contexts = compose_directory(locales_dir, use_isolating=False)
        assert _text(contexts, EN_UK, "movie-list") == "Your film list"

    def test_sibling_region_keeps_language_definition(self, locales_dir: Path) -> None:
        contexts = compose_directory(locales_dir, use_isolating=False)
        assert _text(contexts, EN_US, "movie-list") == "Your movie list"

    def test_language_locale_keeps_language_definition(self, locales_dir: Path) -> None:
        contexts = compose_directory(locales_dir, use_isolating=False)
        assert _text(contexts, EN, "movie-list") == "Your movie list"

    def test_language_overrides_global(self, locales_dir: Path) -> None:
        contexts = compose_directory(locales_dir, use_isolating=False)
        assert _text(contexts, EN, "region") == "International"
        assert _text(contexts, EN_UK, "region") == "International"
        assert _text(contexts, EN_US, "region") == "United States"
        assert _text(contexts, LocaleId("pt", region="BR"), "region") == "Brasil"

    def test_global_definitions_reach_every_locale(self, locales_dir: Path) -> None:
        contexts = compose_directory(locales_dir, use_isolating=False)
        for locale in contexts:
            assert _text(contexts, locale, "about") == "About FTL Machine"

    def test_overrides_do_not_leak_between_locales(self, locales_dir: Path) -> None:
        contexts = compose_directory(locales_dir, use_isolating=False)
        assert contexts[EN].units[-1].endswith("region.ftl")
        assert not any("UK" in origin for origin in contexts[EN_US].units)

    def test_later_file_in_tier_overrides_earlier(self, write_tree: TreeWriter) -> None:
        root = write_tree({"en/a.ftl": "greeting = A", "en/b.ftl": "greeting = B"})
        contexts = compose_directory(root, use_isolating=False)
        assert _text(contexts, EN, "greeting") == "B"

    def test_deterministic(self, locales_dir: Path) -> None:
        first = compose_directory(locales_dir)
        second = compose_directory(locales_dir)
        assert list(first) == list(second)
        for locale in first:
            assert first[locale].units == second[locale].units
            assert first[locale].message_ids == second[locale].message_ids

    def test_empty_root(self, write_tree: TreeWriter) -> None:
        assert compose_directory(write_tree({})) == {}

    def test_logs_start_and_finish(
        self, locales_dir: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="ftlmachine.composer"):
            compose_directory(locales_dir)
        assert "Loading fluent translations" in caplog.text
        assert "Finished loading locales: en, en-UK, en-US, pt, pt-BR" in caplog.text


class TestComposeDirectoryErrors:
    """Construction is all-or-nothing."""

    def test_fail_fast_reports_first_broken_file(self, write_tree: TreeWriter) -> None:
        root = write_tree({"en/a.ftl": "broken {\n", "en/b.ftl": "also {\n"})
        with pytest.raises(ResourceParseError) as exc_info:
            compose_directory(root)
        assert len(exc_info.value.origins) == 1
        assert exc_info.value.origins[0].endswith("a.ftl")

    def test_collect_reports_every_broken_file(self, write_tree: TreeWriter) -> None:
        root = write_tree(
            {"global.ftl": "ok = 1", "en/a.ftl": "broken {\n", "pt/b.ftl": "also {\n"}
        )
        with pytest.raises(ResourceParseError) as exc_info:
            compose_directory(root, syntax_errors=SyntaxErrorHandling.COLLECT)
        origins = exc_info.value.origins
        assert len(origins) == 2
        assert origins[0].endswith("a.ftl")
        assert origins[1].endswith("b.ftl")

    def test_invalid_utf8(self, write_tree: TreeWriter) -> None:
        root = write_tree({"en/a.ftl": "a = b"})
        (root / "en" / "bad.ftl").write_bytes(b"a = \xff\xfe")
        with pytest.raises(ResourceIOError, match="not valid UTF-8"):
            compose_directory(root)
