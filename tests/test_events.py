"""Tests for the streaming XML tokenizer."""

from io import BytesIO, StringIO
from typing import TYPE_CHECKING

import pytest

from querytest.core import ElementEnd, ElementStart, iter_events
from querytest.core.events import EventReader
from querytest.errors import ConfigurationError

if TYPE_CHECKING:
    from pytest_mock import MockerFixture

DOCUMENT = (
    '<Scenario NameSpace="ns">\n'
    '  <Transaction>\n'
    '    <EXECUTE sql-name="q1"/>\n'
    '  </Transaction>\n'
    '</Scenario>\n'
)


def test_event_stream() -> None:
    """Emit lowercased start/end events with parent and depth."""
    events = list(iter_events(DOCUMENT))

    assert [(type(event), event.name, event.parent, event.depth) for event in events] == [
        (ElementStart, 'scenario', None, 0),
        (ElementStart, 'transaction', 'scenario', 1),
        (ElementStart, 'execute', 'transaction', 2),
        (ElementEnd, 'execute', 'transaction', 2),
        (ElementEnd, 'transaction', 'scenario', 1),
        (ElementEnd, 'scenario', None, 0),
    ]

    root = events[0]
    assert isinstance(root, ElementStart)
    assert root.is_root
    assert root.attributes == {'namespace': 'ns'}
    assert (root.line, root.column) == (1, 1)

    execute = events[2]
    assert isinstance(execute, ElementStart)
    assert not execute.is_root
    assert execute.kind == 'start'
    assert (execute.line, execute.column) == (3, 5)


@pytest.mark.parametrize('stream', (
    pytest.param(BytesIO(DOCUMENT.encode()), id='binary'),
    pytest.param(StringIO(DOCUMENT), id='text'),
))
def test_event_stream_from_file(stream: BytesIO | StringIO, mocker: 'MockerFixture') -> None:
    """Read file-like sources in chunks."""
    mocker.patch('querytest.core.events.CHUNK_SIZE', 7)

    events = list(iter_events(stream))

    assert len(events) == 6
    assert events[-1] == ElementEnd(name='scenario', line=5, column=1)


def test_event_reader_incremental() -> None:
    """Return only the events completed by each chunk."""
    reader = EventReader()

    assert [event.name for event in reader.feed('<scenario namespace="a"><exe')] == ['scenario']
    assert [event.name for event in reader.feed('cute sql-name="q"/>')] == ['execute', 'execute']
    assert [event.name for event in reader.feed('</scenario>', final=True)] == ['scenario']


@pytest.mark.parametrize('content, position', (
    pytest.param('<scenario>\n  <execute>\n</scenario>', 'line 3', id='mismatched tag'),
    pytest.param('', 'line 1', id='empty document'),
    pytest.param('<scenario a="1" a="2"/>', 'line 1', id='duplicate attribute'),
))
def test_malformed_xml(content: str, position: str) -> None:
    """Report syntax errors with the source position."""
    with pytest.raises(ConfigurationError, match='Invalid XML') as error:
        list(iter_events(content, filename='broken.xml'))

    assert f'in "broken.xml", {position}' in str(error.value)
