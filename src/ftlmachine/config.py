"""Construction settings for FluentMachine.

One frozen dataclass gathers everything needed to build a machine from a
locales directory, so the settings can be assembled from application config
or the environment and passed around as a single value.

Python 3.13+.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ftlmachine.enums import NegotiationStrategy, SyntaxErrorHandling

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = ["DEFAULT_ENV_PREFIX", "DEFAULT_FALLBACK", "MachineConfig"]

DEFAULT_FALLBACK = "en"
DEFAULT_ENV_PREFIX = "FTLMACHINE_"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    msg = f"{name} must be a boolean (1/0, true/false, yes/no, on/off), got: {value!r}"
    raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class MachineConfig:
    """Immutable configuration for ``FluentMachine.from_config``.

    Attributes:
        root: Locales directory ({global}/{language}/{region} layout).
        fallback: Locale used when nothing requested matches (default: "en").
            Parsed at machine construction; an invalid tag or a locale with
            no directory fails construction.
        strategy: Negotiation strategy for preference lists (default: FILTERING).
        use_isolating: Wrap placeables in Unicode bidi isolation marks
            (default: True).
        syntax_errors: Fail on the first broken resource or report all of
            them at once (default: FAIL_FAST).
        with_title: Register the TITLE() function on every locale
            (default: False).
        cookie_name: Cookie whose value overrides Accept-Language in
            ``FluentMachine.from_request`` (default: None, header only).

    Example:
        >>> config = MachineConfig("locales", fallback="en-US")
        >>> machine = FluentMachine.from_config(config)
    """

    root: str
    fallback: str = DEFAULT_FALLBACK
    strategy: NegotiationStrategy = NegotiationStrategy.FILTERING
    use_isolating: bool = True
    syntax_errors: SyntaxErrorHandling = SyntaxErrorHandling.FAIL_FAST
    with_title: bool = False
    cookie_name: str | None = None

    def __post_init__(self) -> None:
        """Normalize enum fields and validate values.

        Raises:
            ValueError: If root or fallback is empty, the cookie name is
                empty, or an enum field holds an unknown value
        """
        if not self.root:
            msg = "root must not be empty"
            raise ValueError(msg)
        if not self.fallback:
            msg = "fallback must not be empty"
            raise ValueError(msg)
        if self.cookie_name is not None and not self.cookie_name.strip():
            msg = "cookie_name must not be blank"
            raise ValueError(msg)
        object.__setattr__(self, "strategy", NegotiationStrategy(self.strategy))
        object.__setattr__(self, "syntax_errors", SyntaxErrorHandling(self.syntax_errors))

    @classmethod
    def from_env(
        cls,
        prefix: str = DEFAULT_ENV_PREFIX,
        environ: Mapping[str, str] | None = None,
    ) -> MachineConfig:
        """Read settings from ``{prefix}ROOT``, ``{prefix}FALLBACK`` and friends.

        Recognized variables: ROOT (required), FALLBACK, STRATEGY,
        USE_ISOLATING, SYNTAX_ERRORS, WITH_TITLE, COOKIE_NAME.

        Raises:
            ValueError: If ROOT is unset or a value is malformed
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(f"{prefix}{name}")
            return value if value not in (None, "") else None

        root = get("ROOT")
        if root is None:
            msg = f"{prefix}ROOT is not set"
            raise ValueError(msg)

        kwargs: dict[str, object] = {}
        if (fallback := get("FALLBACK")) is not None:
            kwargs["fallback"] = fallback
        if (strategy := get("STRATEGY")) is not None:
            kwargs["strategy"] = NegotiationStrategy(strategy.lower())
        if (syntax_errors := get("SYNTAX_ERRORS")) is not None:
            kwargs["syntax_errors"] = SyntaxErrorHandling(syntax_errors.lower())
        if (use_isolating := get("USE_ISOLATING")) is not None:
            kwargs["use_isolating"] = _parse_bool(f"{prefix}USE_ISOLATING", use_isolating)
        if (with_title := get("WITH_TITLE")) is not None:
            kwargs["with_title"] = _parse_bool(f"{prefix}WITH_TITLE", with_title)
        if (cookie_name := get("COOKIE_NAME")) is not None:
            kwargs["cookie_name"] = cookie_name
        return cls(root, **kwargs)  # type: ignore[arg-type]
