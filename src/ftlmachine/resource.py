"""Resource units: one FTL source compiled and checked for syntax errors.

The FTL parser recovers from syntax errors by wrapping the offending text in
Junk entries. A resource unit refuses that recovery: any Junk makes
``compile_resource`` raise ``ResourceParseError`` with every problem located
by line range, so a broken file stops registry construction instead of
silently dropping messages.

Python 3.13+.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ftllexengine import FluentSyntaxError, parse_ftl
from ftllexengine.syntax import Junk, Message, Term

from ftlmachine.errors import ResourceParseError, SyntaxProblem

__all__ = ["ResourceUnit", "compile_resource"]

logger = logging.getLogger(__name__)

DEFAULT_ORIGIN = "<string>"


@dataclass(frozen=True, slots=True)
class ResourceUnit:
    """Immutable compiled resource, ready to be merged into a context.

    Attributes:
        source: FTL source text
        origin: Path or label the source came from
        message_ids: Identifiers of the messages it defines
        term_ids: Identifiers of the terms it defines (without the ``-`` sigil)
        valueless_ids: Messages it defines with attributes but no value
    """

    source: str
    origin: str
    message_ids: frozenset[str]
    term_ids: frozenset[str]
    valueless_ids: frozenset[str] = frozenset()

    def __repr__(self) -> str:
        return (
            f"ResourceUnit(origin={self.origin!r}, "
            f"messages={len(self.message_ids)}, terms={len(self.term_ids)})"
        )


def _line_of(source: str, offset: int) -> int:
    return source.count("\n", 0, offset) + 1


def _problems_from_junk(source: str, origin: str, junk: Junk) -> list[SyntaxProblem]:
    start, end = (junk.span.start, junk.span.end) if junk.span else (0, len(junk.content))
    text = junk.content.rstrip("\n")
    line_start = _line_of(source, start)
    line_end = max(line_start, _line_of(source, start + len(text)))
    problems = [
        SyntaxProblem(
            origin=origin,
            line_start=line_start,
            line_end=line_end,
            code=str(annotation.code),
            message=annotation.message,
            text=text,
        )
        for annotation in junk.annotations
    ]
    if not problems:
        problems.append(
            SyntaxProblem(origin, line_start, line_end, "junk", "unparseable content", text)
        )
    logger.debug("Junk in %s at offsets %d-%d", origin, start, end)
    return problems


def compile_resource(source: str, origin: str | None = None) -> ResourceUnit:
    """Parse FTL source into a resource unit.

    Args:
        source: FTL text
        origin: Path or label used in error reports (default ``"<string>"``)

    Returns:
        ResourceUnit indexing the messages and terms the source defines

    Raises:
        ResourceParseError: If the parser produced any Junk entry or rejected
            the source outright
    """
    origin = origin or DEFAULT_ORIGIN
    try:
        resource = parse_ftl(source)
    except FluentSyntaxError as e:
        problem = SyntaxProblem(origin, 1, _line_of(source, len(source)), "parse", str(e), "")
        raise ResourceParseError([problem]) from e

    messages: set[str] = set()
    valueless: set[str] = set()
    terms: set[str] = set()
    problems: list[SyntaxProblem] = []
    for entry in resource.entries:
        match entry:
            case Message():
                messages.add(entry.id.name)
                if entry.value is None:
                    valueless.add(entry.id.name)
            case Term():
                terms.add(entry.id.name)
            case Junk():
                problems.extend(_problems_from_junk(source, origin, entry))
            case _:
                pass

    if problems:
        raise ResourceParseError(problems)

    logger.debug(
        "Compiled %s: %d messages, %d terms", origin, len(messages), len(terms)
    )
    return ResourceUnit(
        source=source,
        origin=origin,
        message_ids=frozenset(messages),
        term_ids=frozenset(terms),
        valueless_ids=frozenset(valueless),
    )
