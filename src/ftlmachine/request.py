"""Request preference extraction, independent of any web framework.

A web adapter hands over the request's headers and cookies as plain
mappings; the extractor turns them into an ordered locale preference list
for negotiation. Framework glue (reading ``request.headers`` from Flask,
Starlette, Django, ...) stays in the application.

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Protocol

from ftlmachine.errors import InvalidLocaleError
from ftlmachine.locale_id import LocaleId
from ftlmachine.negotiation import parse_accept_language

__all__ = ["ACCEPT_LANGUAGE", "HeaderCookiePreferences", "RequestPreferences"]

logger = logging.getLogger(__name__)

ACCEPT_LANGUAGE = "Accept-Language"


class RequestPreferences(Protocol):
    """Protocol for turning request data into ordered locale preferences."""

    def __call__(
        self,
        headers: Mapping[str, str],
        cookies: Mapping[str, str] | None = None,
        *,
        available: tuple[LocaleId, ...] = (),
    ) -> list[LocaleId]:
        """Return preferred locales, most preferred first (may be empty)."""


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


class HeaderCookiePreferences:
    """Cookie first (when it names an available locale), then Accept-Language.

    Args:
        cookie_name: Cookie carrying an explicit locale choice; ``None``
            disables the cookie lookup

    Example:
        >>> prefs = HeaderCookiePreferences("lang")
        >>> prefs({"accept-language": "de;q=0.9, en"}, {"lang": "pt-BR"},
        ...       available=(LocaleId("pt", region="BR"),))
        [LocaleId(language='pt', script=None, region='BR', variants=())]
    """

    __slots__ = ("_cookie_name",)

    def __init__(self, cookie_name: str | None = None) -> None:
        self._cookie_name = cookie_name

    @property
    def cookie_name(self) -> str | None:
        return self._cookie_name

    def _from_cookie(
        self, cookies: Mapping[str, str] | None, available: tuple[LocaleId, ...]
    ) -> LocaleId | None:
        if self._cookie_name is None or not cookies:
            return None
        value = cookies.get(self._cookie_name)
        if not value:
            return None
        try:
            locale = LocaleId.parse(value)
        except InvalidLocaleError as e:
            logger.debug("Ignoring locale cookie %s: %s", self._cookie_name, e)
            return None
        if locale not in available:
            logger.debug("Ignoring unavailable cookie locale %s", locale)
            return None
        return locale

    def __call__(
        self,
        headers: Mapping[str, str],
        cookies: Mapping[str, str] | None = None,
        *,
        available: tuple[LocaleId, ...] = (),
    ) -> list[LocaleId]:
        chosen = self._from_cookie(cookies, available)
        if chosen is not None:
            return [chosen]
        accept_language = _header(headers, ACCEPT_LANGUAGE)
        if not accept_language:
            return []
        return parse_accept_language(accept_language)
