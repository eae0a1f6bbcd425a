"""Message ids: a message identifier with an optional attribute selector.

``"login-input"`` addresses a message value, ``"login-input.placeholder"``
one of its attributes.

Python 3.13+.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ftlmachine.errors import InvalidMessageIdError

__all__ = ["MessageId"]

_ID_CHARS = re.compile(r"[A-Za-z0-9_.-]+")


@dataclass(frozen=True, slots=True)
class MessageId:
    """Parsed ``message[.attribute]`` key.

    Example:
        >>> MessageId.parse("login-input.placeholder")
        MessageId(message='login-input', attribute='placeholder')
        >>> str(MessageId("hello"))
        'hello'
    """

    message: str
    attribute: str | None = None

    @classmethod
    def parse(cls, text: str) -> MessageId:
        """Split dotted text into message and attribute.

        Raises:
            InvalidMessageIdError: If the text is empty, contains characters
                outside ``[A-Za-z0-9_.-]``, has an empty segment or more than
                one attribute separator
        """
        if not text:
            raise InvalidMessageIdError(text, "the given key is empty")
        if not _ID_CHARS.fullmatch(text):
            raise InvalidMessageIdError(text, "the given key has invalid characters")

        message, dot, attribute = text.partition(".")
        if "." in attribute:
            raise InvalidMessageIdError(text, "the given key has more than one attribute")
        if not message or (dot and not attribute):
            raise InvalidMessageIdError(text, "the given key has an empty segment")
        return cls(message, attribute if dot else None)

    def __str__(self) -> str:
        if self.attribute is None:
            return self.message
        return f"{self.message}.{self.attribute}"

    @property
    def placeholder(self) -> str:
        """Visible stand-in returned when the id cannot be resolved."""
        return f"{{{self}}}"
