"""FluentMachine Example - Locale Directory Trees.

Demonstrates loading a {global}/{language}/{region} tree and resolving
messages with region overrides and locale fallback.

Scenarios covered:
1. Region overrides (en-UK says "film", en-US keeps "movie")
2. Fallback for unsupported locales
3. Accept-Language negotiation
4. Request cookies and headers
5. In-memory builder with custom functions

WARNING: Examples 1-4 use default use_isolating=True behavior. You may see
FSI (U+2068) and PDI (U+2069) bidi isolation marks around placeables.

Python 3.13+.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from ftlmachine import FluentMachine, NegotiationStrategy

TREE = {
    "global.ftl": "-brand-name = Cinema\nabout = About { -brand-name }\n",
    "en/main.ftl": (
        "-movie = movie\n"
        "movie-list = Your { -movie } list\n"
        "welcome = Welcome, { $name }!\n"
        "search = Search\n"
        "    .placeholder = Find a { -movie }\n"
    ),
    "en/UK/overrides.ftl": "-movie = film\n",
    "en/US/intl.ftl": "",
    "pt/main.ftl": "-movie = filme\nmovie-list = A sua lista de { -movie }s\n",
    "pt/BR/brasil.ftl": "welcome = Bem-vindo, { $name }!\n",
}


def write_tree(root: Path) -> Path:
    """Write the sample locales tree below ``root``."""
    locales = root / "locales"
    for relative, source in TREE.items():
        path = locales / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding="utf-8")
    return locales


def example_1_region_overrides(machine: FluentMachine) -> None:
    """Example 1: Region files refine the language tier."""
    print("=" * 60)
    print("Example 1: Region Overrides")
    print("=" * 60)

    for locale in ("en", "en-US", "en-UK", "pt", "pt-BR"):
        print(f"  {locale:6} movie-list: {machine.t(locale, 'movie-list')}")

    print("\nAttributes:")
    print(f"  en-UK search.placeholder: {machine.t('en-UK', 'search.placeholder')}")


def example_2_fallback(machine: FluentMachine) -> None:
    """Example 2: Unsupported locales and missing messages."""
    print("\n" + "=" * 60)
    print("Example 2: Fallback")
    print("=" * 60)

    print(f"  de-AT movie-list: {machine.t('de-AT', 'movie-list')}")
    print(f"  pt-BR search: {machine.t('pt-BR', 'search')}")
    print(f"  en nonexistent: {machine.t('en', 'nonexistent')}")


def example_3_negotiation(machine: FluentMachine) -> None:
    """Example 3: Negotiating an Accept-Language value."""
    print("\n" + "=" * 60)
    print("Example 3: Negotiation")
    print("=" * 60)

    header = "fr-CA, pt;q=0.8, en;q=0.5"
    ranked = machine.negotiate_languages(header)
    print(f"  {header!r} -> {', '.join(str(loc) for loc in ranked)}")

    translate = machine.localize(header)
    print(f"  welcome: {translate('welcome', {'name': 'Ana'})}")


def example_4_requests(machine: FluentMachine) -> None:
    """Example 4: Translators built from request headers and cookies."""
    print("\n" + "=" * 60)
    print("Example 4: Requests")
    print("=" * 60)

    headers = {"Accept-Language": "en-GB,en;q=0.9"}
    print(f"  header only: {machine.from_request(headers)('movie-list')}")
    cookies = {"lang": "pt-BR"}
    print(f"  with cookie: {machine.from_request(headers, cookies)('movie-list')}")


def example_5_builder() -> None:
    """Example 5: In-memory setup with a custom function."""
    print("\n" + "=" * 60)
    print("Example 5: Builder")
    print("=" * 60)

    machine = (
        FluentMachine.build(use_isolating=False)
        .add_resource("en", "shout = { UPPER($text) }!")
        .add_resource("en-US", "color = color")
        .add_resource("en-GB", "color = colour")
        .add_function("UPPER", lambda text: str(text).upper())
        .set_strategy(NegotiationStrategy.LOOKUP)
        .finish()
    )
    print(f"  shout: {machine.t('en', 'shout', {'text': 'hello'})}")
    print(f"  en-GB color: {machine.t('en-GB', 'color')}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    with tempfile.TemporaryDirectory() as tmp_dir:
        loaded = FluentMachine.from_directory(write_tree(Path(tmp_dir)), cookie_name="lang")
        example_1_region_overrides(loaded)
        example_2_fallback(loaded)
        example_3_negotiation(loaded)
        example_4_requests(loaded)

    example_5_builder()

    print("\n" + "=" * 60)
    print("[SUCCESS] All examples complete!")
    print("=" * 60)
