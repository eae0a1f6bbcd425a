"""FluentMachine: the translate facade over a frozen locale registry.

Two ways to build one:

    >>> machine = FluentMachine.from_directory("locales", fallback="en-US")
    >>> machine = (
    ...     FluentMachine.build()
    ...     .add_resource("en", "region = International")
    ...     .add_resource("en-US", "region = United States")
    ...     .finish()
    ... )

Lookups never raise for missing content: an unresolvable message id comes
back as ``{message-id}`` and is logged at WARNING. A malformed message id
comes back the same way, wrapped around the raw text.

Requested locales may be given as:
    - a LocaleId or a single tag ("en-US"): best registry match for that
      locale, then the fallback locale
    - a preference list or an Accept-Language value ("de;q=0.9, en"):
      negotiated with the registry's strategy; the first locale in the
      ranked chain that defines the message wins

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Self

from ftlmachine.composer import compose_directory
from ftlmachine.config import DEFAULT_FALLBACK, MachineConfig
from ftlmachine.context import ResolutionContext
from ftlmachine.enums import NegotiationStrategy, SyntaxErrorHandling
from ftlmachine.errors import (
    AttributeNotFoundError,
    FrozenRegistryError,
    InvalidLocaleError,
    InvalidMessageIdError,
    MessageNotFoundError,
)
from ftlmachine.functions import BUILTIN_FUNCTIONS
from ftlmachine.locale_id import LocaleId
from ftlmachine.message_id import MessageId
from ftlmachine.negotiation import (
    negotiate_languages,
    parse_accept_language,
    parse_locales,
    select_single,
)
from ftlmachine.registry import LocaleRegistry
from ftlmachine.request import HeaderCookiePreferences
from ftlmachine.resource import compile_resource

if TYPE_CHECKING:
    from pathlib import Path

    from ftllexengine import FluentValue

    from ftlmachine.request import RequestPreferences

__all__ = ["FluentMachine", "FluentMachineBuilder", "LocaleInput", "Translator"]

logger = logging.getLogger(__name__)

type LocaleInput = LocaleId | str | Sequence[LocaleId | str]
"""A locale, a tag, an Accept-Language value or a preference list."""

type FluentArgs = Mapping[str, FluentValue] | None


@dataclass(frozen=True, slots=True)
class Translator:
    """Translate function bound to a negotiated locale chain.

    Attributes:
        machine: Machine performing the lookups
        locales: Ranked locales tried in order for every message
    """

    machine: FluentMachine
    locales: tuple[LocaleId, ...]

    def __call__(self, message_id: str | MessageId, args: FluentArgs = None) -> str:
        return self.machine._lookup(self.locales, message_id, args)


def _is_header(value: str) -> bool:
    return "," in value or ";" in value


class FluentMachine:
    """Localized lookups against a frozen LocaleRegistry.

    Thread Safety:
        The registry is frozen at construction. Every public method only
        reads shared state and may be called concurrently.

    Args:
        registry: Locale registry; frozen by the constructor
        preferences: Request preference extractor used by from_request()
    """

    __slots__ = ("_preferences", "_registry")

    def __init__(
        self,
        registry: LocaleRegistry,
        *,
        preferences: RequestPreferences | None = None,
    ) -> None:
        self._registry = registry.freeze()
        self._preferences: RequestPreferences = preferences or HeaderCookiePreferences()
        logger.info(
            "FluentMachine ready: locales=[%s], fallback=%s, strategy=%s",
            ", ".join(str(locale) for locale in registry.available),
            registry.fallback,
            registry.strategy,
        )

    def __repr__(self) -> str:
        return f"FluentMachine({self._registry!r})"

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @staticmethod
    def build(*, use_isolating: bool = True) -> FluentMachineBuilder:
        """Start an in-memory builder."""
        return FluentMachineBuilder(use_isolating=use_isolating)

    @classmethod
    def from_directory(
        cls,
        root: Path | str,
        *,
        fallback: str | LocaleId = DEFAULT_FALLBACK,
        strategy: NegotiationStrategy = NegotiationStrategy.FILTERING,
        use_isolating: bool = True,
        syntax_errors: SyntaxErrorHandling = SyntaxErrorHandling.FAIL_FAST,
        functions: Mapping[str, Callable[..., FluentValue]] | None = None,
        with_title: bool = False,
        cookie_name: str | None = None,
    ) -> FluentMachine:
        """Compose a machine from a ``{global}/{language}/{region}`` tree.

        Args:
            root: Locales directory
            fallback: Fallback locale; must exist under ``root``
            strategy: Negotiation strategy for preference lists
            use_isolating: Wrap placeables in bidi isolation marks
            syntax_errors: Fail fast or collect all syntax errors
            functions: Custom FTL functions registered on every locale
            with_title: Also register the built-in TITLE() function
            cookie_name: Cookie consulted by from_request() before the header

        Raises:
            ConstructionError: Any IO, parse, locale or fallback problem;
                nothing is built
        """
        builder = FluentMachineBuilder.from_directory(
            root, use_isolating=use_isolating, syntax_errors=syntax_errors
        )
        builder.set_fallback_locale(fallback).set_strategy(strategy)
        if with_title:
            builder.add_functions(BUILTIN_FUNCTIONS)
        if functions:
            builder.add_functions(functions)
        if cookie_name is not None:
            builder.set_cookie_name(cookie_name)
        return builder.finish()

    @classmethod
    def from_config(
        cls,
        config: MachineConfig,
        *,
        functions: Mapping[str, Callable[..., FluentValue]] | None = None,
    ) -> FluentMachine:
        """Compose a machine from a MachineConfig."""
        return cls.from_directory(
            config.root,
            fallback=config.fallback,
            strategy=config.strategy,
            use_isolating=config.use_isolating,
            syntax_errors=config.syntax_errors,
            functions=functions,
            with_title=config.with_title,
            cookie_name=config.cookie_name,
        )

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    @property
    def registry(self) -> LocaleRegistry:
        return self._registry

    @property
    def supported_locales(self) -> tuple[LocaleId, ...]:
        return self._registry.available

    @property
    def fallback_locale(self) -> LocaleId:
        return self._registry.fallback

    @property
    def strategy(self) -> NegotiationStrategy:
        return self._registry.strategy

    # -------------------------------------------------------------------------
    # Negotiation
    # -------------------------------------------------------------------------

    def negotiate_languages(self, requested: LocaleInput) -> list[LocaleId]:
        """Rank supported locales for a preference list or Accept-Language value."""
        match requested:
            case LocaleId():
                preferences = [requested]
            case str() if _is_header(requested):
                preferences = parse_accept_language(requested)
            case str():
                preferences = parse_locales([requested])
            case _:
                preferences = self._parse_preferences(requested)
        return negotiate_languages(
            preferences,
            self._registry.available,
            self._registry.fallback,
            self._registry.strategy,
        )

    def select(self, requested: LocaleInput) -> LocaleId:
        """Return the single locale whose context serves ``requested``."""
        return self._chain(requested)[0]

    @staticmethod
    def _parse_preferences(requested: Sequence[LocaleId | str]) -> list[LocaleId]:
        locales: list[LocaleId] = []
        for item in requested:
            if isinstance(item, LocaleId):
                locales.append(item)
            else:
                locales.extend(parse_locales([item]))
        return list(dict.fromkeys(locales))

    def _single_chain(self, locale: LocaleId) -> tuple[LocaleId, ...]:
        registry = self._registry
        chosen = select_single(locale, registry.available, registry.fallback)
        return tuple(dict.fromkeys((chosen, registry.fallback)))

    def _chain(self, requested: LocaleInput) -> tuple[LocaleId, ...]:
        match requested:
            case LocaleId():
                return self._single_chain(requested)
            case str() if not _is_header(requested):
                try:
                    return self._single_chain(LocaleId.parse(requested))
                except InvalidLocaleError as e:
                    logger.warning("Using fallback locale: %s", e)
                    return (self._registry.fallback,)
            case _:
                return tuple(self.negotiate_languages(requested))

    # -------------------------------------------------------------------------
    # Translation
    # -------------------------------------------------------------------------

    def t(
        self,
        locales: LocaleInput,
        message_id: str | MessageId,
        args: FluentArgs = None,
    ) -> str:
        """Translate ``message_id`` (``"message"`` or ``"message.attribute"``).

        Args:
            locales: Requested locale(s), see module docstring
            message_id: Message id text or parsed MessageId
            args: Named arguments for the message

        Returns:
            The formatted string, the engine's best-effort string when it
            reported formatting errors, or ``{message-id}`` when no locale in
            the chain defines the message or the id is malformed
        """
        return self._lookup(self._chain(locales), message_id, args)

    def localize(self, locales: LocaleInput) -> Translator:
        """Negotiate once and return a translate function for the result."""
        return Translator(self, self._chain(locales))

    def from_request(
        self,
        headers: Mapping[str, str],
        cookies: Mapping[str, str] | None = None,
    ) -> Translator:
        """Translator for an inbound request's cookie or Accept-Language header."""
        preferences = self._preferences(
            headers, cookies, available=self._registry.available
        )
        if len(preferences) == 1 and preferences[0] in self._registry:
            return Translator(self, self._single_chain(preferences[0]))
        return self.localize(preferences)

    def _lookup(
        self,
        chain: tuple[LocaleId, ...],
        message_id: str | MessageId,
        args: FluentArgs,
    ) -> str:
        if isinstance(message_id, MessageId):
            return self._translate(chain, message_id, args)
        try:
            key = MessageId.parse(message_id)
        except InvalidMessageIdError as e:
            logger.warning("%s", e)
            return f"{{{message_id}}}"
        return self._translate(chain, key, args)

    def _translate(
        self, chain: tuple[LocaleId, ...], key: MessageId, args: FluentArgs
    ) -> str:
        for locale in chain:
            try:
                result, errors = self._registry[locale].resolve(key, args)
            except (MessageNotFoundError, AttributeNotFoundError) as e:
                logger.debug("%s", e)
                continue
            if errors:
                logger.warning(
                    "Formatting '%s' for %s produced %d error(s): %s",
                    key,
                    locale,
                    len(errors),
                    "; ".join(str(error) for error in errors),
                )
                if not result:
                    return key.placeholder
            return result

        logger.warning(
            "Missing message '%s' for locales [%s]",
            key,
            ", ".join(str(locale) for locale in chain),
        )
        return key.placeholder


class FluentMachineBuilder:
    """Assemble resolution contexts, then freeze them into a FluentMachine.

    Resources can be added per locale with strict (``add_resource``) or
    overriding (``add_resource_override``) semantics, on top of contexts
    composed from a directory. Functions are registered on every context
    when ``finish()`` runs, which is the end of the setup phase.

    Example:
        >>> machine = (
        ...     FluentMachine.build()
        ...     .add_resource_override("en", "length = { STRLEN($text) }")
        ...     .add_function("STRLEN", lambda text: len(str(text)))
        ...     .finish()
        ... )
    """

    __slots__ = (
        "_contexts",
        "_cookie_name",
        "_fallback",
        "_finished",
        "_functions",
        "_strategy",
        "_use_isolating",
    )

    def __init__(
        self,
        *,
        use_isolating: bool = True,
        contexts: Mapping[LocaleId, ResolutionContext] | None = None,
    ) -> None:
        self._use_isolating = use_isolating
        self._contexts: dict[LocaleId, ResolutionContext] = dict(contexts or {})
        self._strategy = NegotiationStrategy.FILTERING
        self._fallback = LocaleId.parse(DEFAULT_FALLBACK)
        self._functions: dict[str, Callable[..., FluentValue]] = {}
        self._cookie_name: str | None = None
        self._finished = False

    def __repr__(self) -> str:
        return (
            f"FluentMachineBuilder(locales=[{', '.join(str(loc) for loc in self._contexts)}], "
            f"fallback='{self._fallback}', strategy={self._strategy.value!r})"
        )

    @classmethod
    def from_directory(
        cls,
        root: Path | str,
        *,
        use_isolating: bool = True,
        syntax_errors: SyntaxErrorHandling = SyntaxErrorHandling.FAIL_FAST,
    ) -> FluentMachineBuilder:
        """Builder pre-populated with the contexts composed from ``root``."""
        contexts = compose_directory(
            root, use_isolating=use_isolating, syntax_errors=syntax_errors
        )
        return cls(use_isolating=use_isolating, contexts=contexts)

    def _check_open(self) -> None:
        if self._finished:
            msg = "FluentMachineBuilder.finish() was already called"
            raise FrozenRegistryError(msg)

    def _merge(
        self, locale: str | LocaleId, source: str, origin: str | None, *, strict: bool
    ) -> None:
        self._check_open()
        key = locale if isinstance(locale, LocaleId) else LocaleId.parse(locale)
        unit = compile_resource(source, origin)
        context = self._contexts.get(key)
        if context is None:
            context = ResolutionContext(key, use_isolating=self._use_isolating)
        if strict:
            context.add(unit)
        else:
            context.merge(unit)
        # Registered only after a unit merged cleanly.
        self._contexts[key] = context

    def add_resource(
        self, locale: str | LocaleId, source: str, *, origin: str | None = None
    ) -> Self:
        """Add FTL source; redefining an existing message or term is an error.

        Raises:
            InvalidLocaleError: If ``locale`` is not a valid tag
            ResourceParseError: If ``source`` has syntax errors
            DuplicateDefinitionError: If an identifier is already defined
        """
        self._merge(locale, source, origin, strict=True)
        return self

    def add_resource_override(
        self, locale: str | LocaleId, source: str, *, origin: str | None = None
    ) -> Self:
        """Add FTL source; its definitions replace existing ones."""
        self._merge(locale, source, origin, strict=False)
        return self

    def add_function(self, name: str, func: Callable[..., FluentValue]) -> Self:
        """Register an FTL function on every locale at finish()."""
        self._check_open()
        self._functions[name] = func
        return self

    def add_functions(self, functions: Mapping[str, Callable[..., FluentValue]]) -> Self:
        for name, func in functions.items():
            self.add_function(name, func)
        return self

    def set_strategy(self, strategy: NegotiationStrategy | str) -> Self:
        self._strategy = NegotiationStrategy(strategy)
        return self

    def set_fallback_locale(self, locale: str | LocaleId) -> Self:
        """Set the fallback locale.

        Raises:
            InvalidLocaleError: If ``locale`` is not a valid tag
        """
        self._fallback = locale if isinstance(locale, LocaleId) else LocaleId.parse(locale)
        return self

    def set_cookie_name(self, name: str) -> Self:
        self._cookie_name = name
        return self

    def finish(self) -> FluentMachine:
        """End the setup phase and return a frozen machine.

        Raises:
            LocaleUnavailableError: If the fallback locale has no resources
        """
        self._check_open()
        registry = LocaleRegistry(self._contexts, self._fallback, self._strategy)
        for context in registry.values():
            for name, func in self._functions.items():
                context.add_function(name, func)
        self._finished = True
        return FluentMachine(registry, preferences=HeaderCookiePreferences(self._cookie_name))
