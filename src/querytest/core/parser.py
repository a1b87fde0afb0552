"""Scenario file parser.

The parser consumes the element event stream of a scenario file and
incrementally builds the scenario → transaction → tester → parameter
hierarchy. It holds two pieces of transient state: the transaction
under construction and the tester under construction.

Grouping rules:
- a `transaction` element directly under `scenario` starts an explicit
  transaction, flushing any pending one first;
- an `execute` element outside of any pending transaction implicitly
  starts one;
- a non-dummy `execute` directly under `scenario` is flushed right away
  and becomes a single-statement transaction, while top-level dummy
  executes accumulate and join the next transaction that is flushed.

Elements found in an unexpected context are ignored.
"""

import logging
from functools import partial
from pathlib import Path
from typing import IO, TYPE_CHECKING

from pydantic import ValidationError

from querytest.errors import ConfigurationError, ErrorContext
from querytest.scenario import QueryTester, QueryTransaction, Scenario

from . import elements
from .events import ElementEnd, ElementStart, iter_events

if TYPE_CHECKING:
    from collections.abc import Callable

if TYPE_CHECKING:
    from .events import Event

logger = logging.getLogger(__name__)


class ScenarioParser:
    """Stateful reducer of element events into a `Scenario`."""

    def __init__(self, scenario: Scenario | None = None, *,
                 filename: str | None = None) -> None:
        """Initialize the parser.

        Args:
            scenario: Scenario to populate, a new empty one by default.
            filename: Source name used in error messages.
        """
        self.scenario = scenario if scenario is not None else Scenario()
        self.filename = filename

        self.transaction: QueryTransaction | None = None
        self.tester: QueryTester | None = None

    def feed(self, event: 'Event') -> None:
        """Apply a single element event.

        Args:
            event: Next event of the document.

        Raises:
            ConfigurationError: If a required attribute is missing or
                empty, or a parameter literal does not match its type.
        """
        match event:
            case ElementStart(name=elements.SCENARIO):
                self.on_scenario(event)
            case ElementStart(name=elements.TRANSACTION):
                self.on_transaction(event)
            case ElementStart(name=elements.EXECUTE):
                self.on_execute(event)
            case ElementStart(name=elements.PARAM):
                self.on_param(event)
            case ElementEnd(name=elements.EXECUTE):
                self.tester = None
            case ElementEnd(name=elements.TRANSACTION):
                self.flush()

    def on_scenario(self, event: ElementStart) -> None:
        """Set the scenario namespace from the root element."""
        if not event.is_root:
            return

        attributes = self._build(event, partial(
            elements.ScenarioAttributes.model_validate,
            event.attributes,
        ))

        self.scenario.namespace = attributes.namespace

    def on_transaction(self, event: ElementStart) -> None:
        """Start an explicit transaction."""
        if event.parent != elements.SCENARIO:
            return

        self.flush()
        self.transaction = QueryTransaction()

    def on_execute(self, event: ElementStart) -> None:
        """Create a tester in the pending transaction."""
        if event.parent not in (elements.SCENARIO, elements.TRANSACTION):
            return

        attributes = self._build(event, partial(
            elements.ExecuteAttributes.model_validate,
            event.attributes,
        ))

        if self.transaction is None:
            self.transaction = QueryTransaction()

        self.tester = QueryTester(
            query_name=attributes.sql_name,
            is_dummy=attributes.dummy,
        )
        self.transaction.add_tester(self.tester)

        if event.parent == elements.SCENARIO and not attributes.dummy:
            self.flush()

    def on_param(self, event: ElementStart) -> None:
        """Bind a parameter value to the current tester."""
        if event.parent != elements.EXECUTE or self.tester is None:
            return

        attributes = self._build(event, partial(
            elements.ParamAttributes.model_validate,
            event.attributes,
        ))
        value = self._build(event, attributes.to_value)

        self.tester.add_parameter(value, attributes.parameter_name)

    def flush(self) -> None:
        """Move the pending transaction into the scenario."""
        if self.transaction is None:
            return

        self.scenario.add_transaction(self.transaction)
        logger.debug(
            'Transaction #%d with %d tester(s) added',
            len(self.scenario.transactions),
            len(self.transaction),
        )

        self.transaction = None

    def finish(self) -> Scenario:
        """Complete the scenario at the end of the document.

        A transaction still pending (for example trailing top-level dummy
        executes) is flushed.

        Returns:
            The populated scenario.

        Raises:
            ConfigurationError: If the document has no root `scenario`
                element with a namespace.
        """
        self.tester = None
        self.flush()

        if not self.scenario.namespace:
            raise ConfigurationError(
                'Missing root <scenario> element with a namespace',
                context=ErrorContext(filename=self.filename),
            )

        return self.scenario

    def _build[T](self, event: ElementStart, builder: 'Callable[[], T]') -> T:
        """Run a model builder with unified validation error handling.

        Args:
            event: Element whose attributes are being validated.
            builder: Callable producing the model.

        Returns:
            Result of the builder.

        Raises:
            ConfigurationError: Wrapped validation error with location.
        """
        try:
            return builder()

        except ValidationError as base:
            raise ConfigurationError.from_pydantic_error(
                base,
                element=event.name,
                attributes=event.attributes,
                filename=self.filename,
                line_num=event.line,
                column_num=event.column,
            ) from base


def parse(content: IO[bytes] | IO[str] | bytes | str, *,
          filename: str | None = None) -> Scenario:
    """Parse a scenario document.

    A transaction still pending at the end of the document is kept, so
    trailing top-level dummy executes are dispatched and their queries
    count as covered.

    Args:
        content: XML content as bytes, a string or a file-like object.
        filename: Source name used in error messages.

    Returns:
        The parsed scenario, ready for execution.

    Raises:
        ConfigurationError: If the document is malformed.
    """
    parser = ScenarioParser(filename=filename)

    for event in iter_events(content, filename=filename):
        parser.feed(event)

    scenario = parser.finish()
    logger.info(
        'Parsed scenario %r: %d transaction(s)',
        scenario.namespace,
        len(scenario.transactions),
    )

    return scenario


def parse_file(path: Path | str) -> Scenario:
    """Parse a scenario file.

    Args:
        path: Path to the XML scenario file.

    Returns:
        The parsed scenario, ready for execution.

    Raises:
        ConfigurationError: If the document is malformed.
        OSError: If the file can not be read.
    """
    path = Path(path)

    with path.open('rb') as content:
        return parse(content, filename=path.as_posix())
