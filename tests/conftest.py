"""Tests configurations and fixtures."""

from importlib.metadata import EntryPoint, EntryPoints
from typing import TYPE_CHECKING

import pytest

from querytest.core import parse
from tests.examples.clients import FakeClient

if TYPE_CHECKING:
    from collections.abc import Callable

if TYPE_CHECKING:
    from pytest_mock import MockerFixture, MockType

    from querytest.scenario import Scenario


@pytest.fixture
def make_client() -> 'Callable[..., FakeClient]':
    """Provide a factory of journaling fake query clients.

    Returns:
        A callable accepting a catalog of query names and a mapping of
        per-query outcomes, returning a fresh `FakeClient`.
    """
    def factory(*query_names: str, **outcomes: object) -> FakeClient:
        return FakeClient(query_names, outcomes)  # type: ignore[arg-type]

    return factory


@pytest.fixture
def make_scenario() -> 'Callable[[str], Scenario]':
    """Provide a shortcut parsing scenario bodies in a fixed namespace.

    Returns:
        A callable wrapping the given XML body into a `scenario` root
        element with the `test` namespace and parsing it.
    """
    def factory(body: str) -> 'Scenario':
        return parse(f'<scenario namespace="test">{body}</scenario>')

    return factory


@pytest.fixture
def patch_entrypoints(mocker: 'MockerFixture') -> 'Callable[..., MockType]':
    """Provide a factory for mocking `importlib.metadata.entry_points`.

    Returns a callable that patches `entry_points()` to simulate
    discovery of client factories in the `querytest_clients` group.

    The returned factory allows configuring:
    - successfully loadable factories keyed by client name,
    - or an exception raised during loading,
    - or an empty entry point list.
    """
    def patch(raises: Exception | None = None, **factories: object) -> 'MockType':
        """Patch `entry_points` with a controlled client configuration.

        Args:
            raises: Exception to raise when `EntryPoint.load()` is called.
            factories: Objects returned by `EntryPoint.load()`, keyed by
                entry point name. If empty, no entry points are registered.

        Returns:
            A mock patch object replacing `importlib.metadata.entry_points`.
        """
        entrypoints = []
        for name, factory in factories.items():
            ep = mocker.Mock(spec=EntryPoint)
            ep.group = 'querytest_clients'
            ep.name = name
            ep.value = f'tests.clients:{name}'
            ep.load.return_value = factory
            if raises is not None:
                ep.load.side_effect = raises
            entrypoints.append(ep)

        return mocker.patch(
            'importlib.metadata.entry_points',
            return_value=EntryPoints(entrypoints),
        )

    return patch
