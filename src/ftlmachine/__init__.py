"""ftlmachine - Fluent (FTL) resource loader and translate facade.

Composes a ``{global}/{language}/{region}`` directory of .ftl files into one
resolution context per locale, where region files override language files
and language files override global ones. Requests are negotiated against the
available locales and resolved with fallback.

Public API:
    FluentMachine - Translate facade (from_directory, from_config, t, localize)
    FluentMachineBuilder - In-memory setup with strict or overriding resources
    MachineConfig - Construction settings (from_env for environment variables)
    LocaleId - Parsed locale identifier
    MessageId - Parsed ``message[.attribute]`` key
    NegotiationStrategy - FILTERING, MATCHING, LOOKUP
    SyntaxErrorHandling - FAIL_FAST, COLLECT
    negotiate_languages - Rank available locales for a preference list
    parse_accept_language - Parse an Accept-Language header value

Exceptions:
    FluentMachineError - Base exception class
    ConstructionError - Anything that prevents building a machine
    TranslationLookupError - Lookup failures reported by resolution contexts

Submodules:
    ftlmachine.composer - Directory scanning and tier merging
    ftlmachine.context - Per-locale resolution context
    ftlmachine.registry - Frozen locale -> context mapping
    ftlmachine.request - Request header/cookie preference extraction
    ftlmachine.functions - Built-in custom FTL functions (TITLE)
"""

from .config import MachineConfig
from .context import ResolutionContext
from .enums import NegotiationStrategy, SyntaxErrorHandling
from .errors import (
    AttributeNotFoundError,
    ConstructionError,
    DuplicateDefinitionError,
    DuplicateLocaleError,
    FluentMachineError,
    FormatError,
    FrozenRegistryError,
    InvalidLocaleError,
    InvalidMessageIdError,
    LocaleUnavailableError,
    MessageNotFoundError,
    ResourceIOError,
    ResourceParseError,
    SyntaxProblem,
    TranslationLookupError,
)
from .locale_id import LocaleId
from .machine import FluentMachine, FluentMachineBuilder, Translator
from .message_id import MessageId
from .negotiation import negotiate_languages, parse_accept_language
from .registry import LocaleRegistry
from .resource import ResourceUnit, compile_resource

try:
    from importlib.metadata import PackageNotFoundError
    from importlib.metadata import version as _get_version
except ImportError as e:
    raise RuntimeError("importlib.metadata unavailable - Python version too old? " + str(e)) from e

try:
    __version__ = _get_version("ftlmachine")
except PackageNotFoundError:
    # Development mode: package not installed yet
    __version__ = "0.0.0+dev"

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Facade
    "FluentMachine",
    "FluentMachineBuilder",
    "MachineConfig",
    "Translator",
    # Building blocks
    "LocaleId",
    "LocaleRegistry",
    "MessageId",
    "NegotiationStrategy",
    "ResolutionContext",
    "ResourceUnit",
    "SyntaxErrorHandling",
    "compile_resource",
    "negotiate_languages",
    "parse_accept_language",
    # Errors
    "FluentMachineError",
    "ConstructionError",
    "ResourceIOError",
    "ResourceParseError",
    "SyntaxProblem",
    "InvalidLocaleError",
    "DuplicateLocaleError",
    "DuplicateDefinitionError",
    "LocaleUnavailableError",
    "FrozenRegistryError",
    "TranslationLookupError",
    "InvalidMessageIdError",
    "MessageNotFoundError",
    "AttributeNotFoundError",
    "FormatError",
    "__version__",
]
