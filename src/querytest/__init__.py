"""Scenario-driven test runner for named SQL queries.

The `querytest` package reads declarative XML scenario files describing
groups of named, parameterized queries, runs them against a query
dispatch client, and reports pass/fail and catalog coverage statistics.

Key features:
- streaming scenario parsing with implicit single-statement transactions;
- unconditional rollback of every test transaction;
- soft handling of result validation mismatches and per-transaction
  containment of hard failures;
- detection of catalog queries that no scenario exercises.
"""

from querytest.core import parse, parse_file
from querytest.executor import ScenarioExecutor, execute
from querytest.scenario import QueryTester, QueryTransaction, Scenario
from querytest.values import ParameterSet, ParameterValue, ValueType

__all__ = (
    'ParameterSet',
    'ParameterValue',
    'QueryTester',
    'QueryTransaction',
    'Scenario',
    'ScenarioExecutor',
    'ValueType',
    'execute',
    'parse',
    'parse_file',
)
