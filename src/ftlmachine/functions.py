"""Custom FTL functions shipped with ftlmachine.

Registered on every resolution context during the setup phase when
``with_title=True`` is configured::

    page-title = { TITLE($section) }

Python 3.13+.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from ftllexengine import FluentValue

__all__ = ["BUILTIN_FUNCTIONS", "title"]


def title(value: FluentValue) -> str:
    """Upper-case the first character, leaving the rest untouched.

    Example:
        >>> title("movie list")
        'Movie list'
        >>> title("")
        ''
    """
    text = str(value)
    return text[:1].upper() + text[1:]


BUILTIN_FUNCTIONS: dict[str, Callable[..., FluentValue]] = {"TITLE": title}
