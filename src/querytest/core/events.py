"""Streaming XML tokenizer.

Turns XML content into a flat stream of tagged element events. Each
event carries the lowercased element name, its lowercased attributes,
the name of its parent element and its nesting depth, so a consumer can
rebuild the document hierarchy without keeping its own element stack.

The tokenizer is built on the expat binding of the standard library and
reads file-like sources in chunks.
"""

from collections.abc import Iterator
from typing import IO, Literal
from xml.parsers.expat import ExpatError, ParserCreate

from pydantic import Field

from querytest.errors import ConfigurationError
from querytest.models import SchemaModel

#: Size of chunks read from file-like sources.
CHUNK_SIZE = 64 * 1024


class ElementEvent(SchemaModel):
    """Common fields of element events."""

    name: str = Field(
        title='Element name',
        description='Lowercased element name.',
    )

    parent: str | None = Field(
        default=None,
        title='Parent element name',
        description='Lowercased name of the enclosing element, `None` for the root.',
    )

    depth: int = Field(
        default=0,
        ge=0,
        title='Nesting depth',
        description='Number of enclosing elements, `0` for the root.',
    )

    line: int | None = Field(default=None, title='Source line (1-based)')
    column: int | None = Field(default=None, title='Source column (1-based)')

    @property
    def is_root(self) -> bool:
        """Whether the element is the document root."""
        return self.depth == 0


class ElementStart(ElementEvent):
    """An element start tag."""

    kind: Literal['start'] = 'start'

    attributes: dict[str, str] = Field(
        default_factory=dict,
        title='Attributes',
        description='Element attributes keyed by lowercased name.',
    )


class ElementEnd(ElementEvent):
    """An element end tag."""

    kind: Literal['end'] = 'end'


#: Tagged element event.
type Event = ElementStart | ElementEnd


class EventReader:
    """Incremental XML tokenizer producing element events.

    Content is pushed with `feed`; every call returns the events
    completed by that chunk.
    """

    def __init__(self, filename: str | None = None) -> None:
        """Initialize the tokenizer.

        Args:
            filename: Source name used in error messages.
        """
        self.filename = filename

        self._stack: list[str] = []
        self._pending: list[Event] = []

        self._parser = ParserCreate()
        self._parser.StartElementHandler = self._on_start
        self._parser.EndElementHandler = self._on_end

        # Deliver events as soon as a chunk completes them (expat >= 2.6).
        if hasattr(self._parser, 'SetReparseDeferralEnabled'):
            self._parser.SetReparseDeferralEnabled(False)

    @property
    def parent(self) -> str | None:
        """Name of the innermost open element."""
        return self._stack[-1] if self._stack else None

    def _on_start(self, name: str, attributes: dict[str, str]) -> None:
        element = name.lower()

        self._pending.append(ElementStart(
            name=element,
            attributes={key.lower(): value for key, value in attributes.items()},
            parent=self.parent,
            depth=len(self._stack),
            line=self._parser.CurrentLineNumber,
            column=self._parser.CurrentColumnNumber + 1,
        ))

        self._stack.append(element)

    def _on_end(self, name: str) -> None:
        self._stack.pop()

        self._pending.append(ElementEnd(
            name=name.lower(),
            parent=self.parent,
            depth=len(self._stack),
            line=self._parser.CurrentLineNumber,
            column=self._parser.CurrentColumnNumber + 1,
        ))

    def feed(self, data: bytes | str, *, final: bool = False) -> list[Event]:
        """Push a chunk of content.

        Args:
            data: Next chunk of the document.
            final: Whether this is the last chunk.

        Returns:
            Events completed by this chunk, in document order.

        Raises:
            ConfigurationError: If the content is not well-formed XML.
        """
        try:
            self._parser.Parse(data, final)

        except ExpatError as base:
            raise ConfigurationError.from_xml_error(base, filename=self.filename) from base

        events, self._pending = self._pending, []

        return events


def iter_events(content: IO[bytes] | IO[str] | bytes | str, *,
                filename: str | None = None) -> Iterator[Event]:
    """Tokenize XML content into element events.

    Args:
        content: Whole document or a file-like object read in chunks.
        filename: Source name used in error messages.

    Yields:
        Element events in document order.

    Raises:
        ConfigurationError: If the content is not well-formed XML.
    """
    reader = EventReader(filename)

    if isinstance(content, (bytes, str)):
        yield from reader.feed(content, final=True)
        return

    while chunk := content.read(CHUNK_SIZE):
        yield from reader.feed(chunk)

    yield from reader.feed(b'', final=True)
