"""Enumerations for ftlmachine configuration values.

Uses StrEnum so members compare equal to their configuration strings:
NegotiationStrategy("filtering") is NegotiationStrategy.FILTERING.

Python 3.13+.
"""

from enum import StrEnum


class NegotiationStrategy(StrEnum):
    """How requested locales are matched against available ones.

    StrEnum provides automatic string conversion: str(NegotiationStrategy.LOOKUP) == "lookup"
    """

    FILTERING = "filtering"
    """Every acceptable available locale, ranked by request order."""

    MATCHING = "matching"
    """At most one best match per requested locale."""

    LOOKUP = "lookup"
    """A single best match for the whole request."""


class SyntaxErrorHandling(StrEnum):
    """When resource syntax errors abort directory composition."""

    FAIL_FAST = "fail_fast"
    """Raise on the first resource that fails to compile."""

    COLLECT = "collect"
    """Compile every resource, then raise once with all problems."""


__all__ = [
    "NegotiationStrategy",
    "SyntaxErrorHandling",
]
