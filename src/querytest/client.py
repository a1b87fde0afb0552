"""Structural interface of the query-dispatch client.

The executor is backend-agnostic: any object exposing methods with the
signatures below can run a scenario. Implementations are **not** required
to subclass these protocols.

Failures are reported with exceptions instead of error codes: `execute`
raises `ValidationMismatch` when the result shape disagrees with the
query declaration, and `DispatchError` for any other failure.
"""

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from querytest.values import ParameterSet


@runtime_checkable
class QueryResult(Protocol):
    """Result descriptor returned by a successful dispatch."""

    @property
    def needs_fetch(self) -> bool:
        """Whether the statement produced rows (a read statement)."""
        ...

    @property
    def row_count(self) -> int:
        """Number of fetched rows of a read statement."""
        ...

    @property
    def affected_rows(self) -> int:
        """Number of rows changed by a write statement."""
        ...


@runtime_checkable
class QueryClient(Protocol):
    """Query-dispatch client bound to one query namespace."""

    @property
    def query_names(self) -> Sequence[str]:
        """Names of all queries in the catalog, in catalog order."""
        ...

    def set_autocommit(self, enabled: bool) -> None:
        """Enable or disable autocommit on the underlying session."""
        ...

    def set_force_validate_result(self, enabled: bool) -> None:
        """Validate every result against its declared shape."""
        ...

    def execute(self, query_name: str, parameters: ParameterSet) -> QueryResult:
        """Dispatch a named query with bound parameters.

        Raises:
            ValidationMismatch: If the result shape disagrees with the
                query declaration.
            DispatchError: If the query fails for any other reason.
        """
        ...

    def rollback(self) -> None:
        """Roll back the current transaction."""
        ...

    def close(self) -> None:
        """Close the client session."""
        ...


#: Creates a client for a query namespace from query map files and an
#: optional connector definition.
type ClientFactory = Callable[[str, Sequence[Path], Path | None], QueryClient]
