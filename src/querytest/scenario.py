"""Scenario data model.

A scenario is the root aggregate of a test run: it owns an ordered
sequence of query transactions, each transaction owns an ordered
sequence of query testers, and each tester owns its parameter set.
Nothing is shared between owners and nothing refers back to its owner.

The parser is the only writer while the scenario is being built; the
executor is the only writer of the pass/test counters during a run.
"""

from collections.abc import Iterator

from pydantic import Field, PrivateAttr

from querytest.errors import QueryTestError
from querytest.models import SchemaModel, StateModel
from querytest.names import QueryName  # noqa: TC001
from querytest.values import ParameterSet, ParameterValue


class QueryTester(SchemaModel):
    """One declared execution of a pre-registered query.

    A dummy tester is dispatched like any other, but it is excluded from
    pass/test statistics and from the unexecuted-query warning. Dummy
    testers are typically used to prepare data for the testers that
    follow them in the same transaction.
    """

    query_name: QueryName = Field(
        title='Query name',
        description='Name of the query to dispatch.',
    )

    is_dummy: bool = Field(
        default=False,
        title='Dummy flag',
        description='Marks the tester as a non-counted probe.',
    )

    parameters: ParameterSet = Field(
        default_factory=ParameterSet,
        title='Parameters',
        description='Named and positional values bound to the query.',
    )

    def add_parameter(self, value: ParameterValue, name: str | None = None) -> None:
        """Bind a value by name or positionally."""
        self.parameters.put(value, name)


class QueryTransaction(SchemaModel):
    """Ordered group of testers sharing one transactional context.

    All testers of a transaction run before the transaction is rolled
    back as a unit.
    """

    testers: list[QueryTester] = Field(
        default_factory=list,
        title='Testers',
        description='Testers in execution order.',
    )

    def add_tester(self, tester: QueryTester) -> None:
        """Append a tester."""
        self.testers.append(tester)

    def __len__(self) -> int:
        """Number of testers."""
        return len(self.testers)


class Scenario(StateModel):
    """Root aggregate of a scenario file.

    Holds the query namespace, the transactions in file order and the
    statistics of its single execution pass.
    """

    namespace: str | None = Field(
        default=None,
        title='Query namespace',
        description='Namespace of the query catalog the scenario runs against.',
    )

    transactions: list[QueryTransaction] = Field(
        default_factory=list,
        title='Transactions',
        description='Transactions in execution order.',
    )

    test_count: int = Field(
        default=0,
        ge=0,
        title='Tested queries',
        description='Number of non-dummy testers dispatched.',
    )

    pass_count: int = Field(
        default=0,
        ge=0,
        title='Passed queries',
        description='Number of non-dummy testers that succeeded.',
    )

    _executed: bool = PrivateAttr(default=False)

    def add_transaction(self, transaction: QueryTransaction) -> None:
        """Append a transaction."""
        self.transactions.append(transaction)

    def testers(self) -> Iterator[QueryTester]:
        """Iterate over all testers in execution order."""
        for transaction in self.transactions:
            yield from transaction.testers

    @property
    def executed(self) -> bool:
        """Whether the scenario has already been executed."""
        return self._executed

    def mark_executed(self) -> None:
        """Start the single execution pass of this scenario.

        Freezes the parameter sets of all testers.

        Raises:
            QueryTestError: If the scenario was executed before.
        """
        if self._executed:
            raise QueryTestError(f'Scenario {self.namespace!r} has already been executed')

        self._executed = True

        for tester in self.testers():
            tester.parameters.freeze()
