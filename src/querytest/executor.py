"""Scenario execution engine.

Runs the transactions of a parsed scenario against a query client in
file order. Every transaction is rolled back after its testers ran, so
no test leaks committed changes into the next one and a scenario can be
run repeatedly against the same database.

Outcomes are classified per tester:
- success counts as a pass (dummy testers are not counted at all);
- a validation mismatch is a warning and never fails the run;
- any other dispatch error fails the enclosing transaction and the run;
  the remaining testers of the transaction still run.

After the last transaction the executor reports statistics and the
catalog queries that no tester referenced.
"""

import logging
from typing import TYPE_CHECKING

from querytest.errors import DispatchError, DispatchFailure, ValidationMismatch
from querytest.report import ConsoleReporter

if TYPE_CHECKING:
    from collections.abc import Iterable

if TYPE_CHECKING:
    from querytest.client import QueryClient
    from querytest.scenario import QueryTester, QueryTransaction, Scenario

EXIT_OK = 0
EXIT_FAILURE = 1

logger = logging.getLogger(__name__)


class QueryCoverage:
    """Tracks which catalog queries were referenced by testers."""

    def __init__(self, catalog: 'Iterable[str]') -> None:
        """Initialize coverage for a query catalog.

        Args:
            catalog: Query names in catalog order.
        """
        self.catalog = list(catalog)
        self.dummies: set[str] = set()

        self._unexecuted = dict.fromkeys(self.catalog)

    def record(self, tester: 'QueryTester') -> None:
        """Mark the tester's query as covered."""
        if tester.is_dummy:
            self.dummies.add(tester.query_name)

        self._unexecuted.pop(tester.query_name, None)

    @property
    def unexecuted(self) -> list[str]:
        """Catalog queries never referenced, in catalog order."""
        return list(self._unexecuted)

    @property
    def tested_size(self) -> int:
        """Catalog size excluding queries used only as dummies."""
        return len(self.catalog) - len(self.dummies)


class ScenarioExecutor:
    """Executes a scenario against a query client."""

    def __init__(self, client: 'QueryClient', *,
                 reporter: ConsoleReporter | None = None,
                 force_validate: bool = True) -> None:
        """Initialize the executor.

        Args:
            client: Query client bound to the scenario namespace.
            reporter: Console reporter, a default one if omitted.
            force_validate: Whether to make the client validate every
                result against its declared shape.
        """
        self.client = client
        self.reporter = reporter if reporter is not None else ConsoleReporter()
        self.force_validate = force_validate

    def execute(self, scenario: 'Scenario') -> int:
        """Run every transaction of the scenario.

        The client is closed when the run ends, whatever the outcome.

        Args:
            scenario: Parsed scenario, executed at most once.

        Returns:
            `EXIT_OK` if no transaction failed, otherwise `EXIT_FAILURE`.

        Raises:
            QueryTestError: If the scenario was already executed.
        """
        scenario.mark_executed()

        result = EXIT_OK

        try:
            self.client.set_autocommit(False)
            if self.force_validate:
                self.client.set_force_validate_result(True)

            coverage = QueryCoverage(self.client.query_names)

            for number, transaction in enumerate(scenario.transactions, start=1):
                if not self.run_transaction(scenario, transaction, coverage):
                    logger.info('Transaction #%d failed', number)
                    result = EXIT_FAILURE

            self.reporter.summary(
                scenario.pass_count,
                scenario.test_count,
                coverage.tested_size,
            )

            if unexecuted := coverage.unexecuted:
                self.reporter.unexecuted(unexecuted)

        finally:
            self.client.close()

        return result

    def run_transaction(self, scenario: 'Scenario',
                        transaction: 'QueryTransaction',
                        coverage: QueryCoverage) -> bool:
        """Run the testers of a transaction and roll it back.

        A hard failure marks the transaction as failed; the remaining
        testers still run before the single rollback.

        Args:
            scenario: Scenario owning the counters.
            transaction: Transaction to run.
            coverage: Catalog coverage of the run.

        Returns:
            False if a tester failed hard, otherwise True.
        """
        succeeded = True

        try:
            for tester in transaction.testers:
                coverage.record(tester)

                if not tester.is_dummy:
                    scenario.test_count += 1

                try:
                    passed = self.run_tester(tester)

                except DispatchFailure as error:
                    logger.debug('Query %r failed hard', error.query_name)
                    succeeded = False
                    continue

                if passed and not tester.is_dummy:
                    scenario.pass_count += 1

        finally:
            self.client.rollback()

        return succeeded

    def run_tester(self, tester: 'QueryTester') -> bool:
        """Dispatch a single tester and report its outcome.

        Args:
            tester: Tester to dispatch.

        Returns:
            True if the query succeeded, False on a validation mismatch.

        Raises:
            DispatchFailure: If the query failed for any other reason,
                including dummy testers.
        """
        logger.debug('Dispatching %r with %r', tester.query_name, tester.parameters)

        try:
            result = self.client.execute(tester.query_name, tester.parameters)

        except ValidationMismatch as error:
            self.reporter.query_mismatch(tester.query_name, error.message)
            return False

        except DispatchError as error:
            self.reporter.query_failure(tester.query_name, error.message)
            raise DispatchFailure.from_dispatch_error(error, tester.query_name) from error

        if tester.is_dummy:
            return True

        if result.needs_fetch:
            self.reporter.query_rows(tester.query_name, result.row_count)
        else:
            self.reporter.query_affected(tester.query_name, result.affected_rows)

        return True


def execute(scenario: 'Scenario', client: 'QueryClient', *,
            reporter: ConsoleReporter | None = None,
            force_validate: bool = True) -> int:
    """Execute a scenario against a client.

    Args:
        scenario: Parsed scenario.
        client: Query client bound to the scenario namespace.
        reporter: Console reporter, a default one if omitted.
        force_validate: Whether to force result validation on the client.

    Returns:
        Process exit code: `0` if no transaction failed, `1` otherwise.
    """
    executor = ScenarioExecutor(
        client,
        reporter=reporter,
        force_validate=force_validate,
    )

    return executor.execute(scenario)
