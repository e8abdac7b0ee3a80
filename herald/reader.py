"""
Token-oriented reader for structured documents.

Wraps PyYAML's event stream so that definitions written in YAML or JSON can
be consumed one token at a time, the way a streaming JSON parser is used.
"""

from collections.abc import Iterator
from enum import Enum
from typing import IO

import yaml
from yaml.events import (
    AliasEvent,
    CollectionStartEvent,
    Event,
    MappingEndEvent,
    MappingStartEvent,
    ScalarEvent,
    SequenceEndEvent,
    SequenceStartEvent,
)
from yaml.nodes import ScalarNode
from yaml.resolver import Resolver

from herald.errors import DocumentSyntaxError


class Token(Enum):
    """Kinds of token produced by DocumentReader."""
    START_OBJECT = "START_OBJECT"
    END_OBJECT = "END_OBJECT"
    START_ARRAY = "START_ARRAY"
    END_ARRAY = "END_ARRAY"
    FIELD_NAME = "FIELD_NAME"
    VALUE_STRING = "VALUE_STRING"
    VALUE_NUMBER = "VALUE_NUMBER"
    VALUE_BOOLEAN = "VALUE_BOOLEAN"
    VALUE_NULL = "VALUE_NULL"

    @property
    def is_value(self) -> bool:
        """True for scalar value tokens."""
        return self in _VALUE_TOKENS


_VALUE_TOKENS = frozenset({
    Token.VALUE_STRING,
    Token.VALUE_NUMBER,
    Token.VALUE_BOOLEAN,
    Token.VALUE_NULL,
})

_TAG_TO_TOKEN = {
    "tag:yaml.org,2002:null": Token.VALUE_NULL,
    "tag:yaml.org,2002:bool": Token.VALUE_BOOLEAN,
    "tag:yaml.org,2002:int": Token.VALUE_NUMBER,
    "tag:yaml.org,2002:float": Token.VALUE_NUMBER,
}


class _Frame:
    """One open mapping or sequence."""

    __slots__ = ("is_mapping", "expects_key")

    def __init__(self, is_mapping: bool) -> None:
        self.is_mapping = is_mapping
        self.expects_key = is_mapping


class DocumentReader:
    """
    Pull reader over a single YAML or JSON document.

    Usage:
        reader = DocumentReader('{"addresses": ["ops@example.com"]}')
        token = reader.next_token()   # Token.START_OBJECT
        token = reader.next_token()   # Token.FIELD_NAME, current_name() == "addresses"
    """

    def __init__(self, stream: str | IO[str]) -> None:
        """
        Initialize the reader.

        Args:
            stream: Document text or a readable text stream
        """
        self._events: Iterator[Event] = yaml.parse(stream, Loader=yaml.SafeLoader)
        self._resolver = Resolver()
        self._stack: list[_Frame] = []
        self._current_token: Token | None = None
        self._current_name: str | None = None
        self._text: str | None = None

    @property
    def current_token(self) -> Token | None:
        """The token the reader is positioned on."""
        return self._current_token

    def current_name(self) -> str | None:
        """Name of the field whose name or value is the current token."""
        return self._current_name

    def text(self) -> str:
        """Text of the current token (the field name for FIELD_NAME tokens)."""
        if self._current_token is Token.FIELD_NAME:
            return self._current_name or ""
        if self._text is None:
            raise DocumentSyntaxError(f"Current token [{self._current_token}] has no text")
        return self._text

    def next_token(self) -> Token | None:
        """
        Advance to the next token.

        Returns:
            The new current token, or None when the document is exhausted
        """
        self._text = None
        while True:
            try:
                event = next(self._events)
            except StopIteration:
                self._current_token = None
                return None
            except yaml.YAMLError as e:
                raise DocumentSyntaxError(f"Invalid document: {e}") from e

            token = self._translate(event)
            if token is not None:
                self._current_token = token
                return token

    def _translate(self, event: Event) -> Token | None:  # pylint: disable=too-many-return-statements
        """Map one YAML event to a token, or None for stream/document markers."""
        if isinstance(event, AliasEvent):
            raise DocumentSyntaxError(f"Aliases are not supported: *{event.anchor}")

        frame = self._stack[-1] if self._stack else None

        if isinstance(event, CollectionStartEvent):
            if frame is not None and frame.expects_key:
                raise DocumentSyntaxError("Field names must be scalars")
            is_mapping = isinstance(event, MappingStartEvent)
            self._stack.append(_Frame(is_mapping))
            return Token.START_OBJECT if is_mapping else Token.START_ARRAY

        if isinstance(event, (MappingEndEvent, SequenceEndEvent)):
            self._stack.pop()
            self._value_done()
            return Token.END_OBJECT if isinstance(event, MappingEndEvent) else Token.END_ARRAY

        if isinstance(event, ScalarEvent):
            if frame is not None and frame.expects_key:
                frame.expects_key = False
                self._current_name = event.value
                return Token.FIELD_NAME
            self._text = event.value
            self._value_done()
            return self._scalar_token(event)

        return None

    def _value_done(self) -> None:
        """A complete value was read; the enclosing mapping expects a key next."""
        if self._stack and self._stack[-1].is_mapping:
            self._stack[-1].expects_key = True

    def _scalar_token(self, event: ScalarEvent) -> Token:
        if event.tag and event.tag != "!":
            tag = event.tag
        else:
            tag = self._resolver.resolve(ScalarNode, event.value, event.implicit)
        return _TAG_TO_TOKEN.get(tag, Token.VALUE_STRING)
