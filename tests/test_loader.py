"""Tests for query client discovery and creation."""

from typing import TYPE_CHECKING

import pytest

from querytest.core import ClientRegistry
from querytest.errors import ClientError, ClientWarning
from tests.examples.clients import FakeClient, broken_client, querymap_client

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

if TYPE_CHECKING:
    from pytest_mock import MockerFixture, MockType


def test_loading_from_entrypoints(patch_entrypoints: 'Callable[..., MockType]') -> None:
    """Register client factories discovered via entry points."""
    patch_entrypoints(fake=querymap_client)

    registry = ClientRegistry()

    assert registry.clients == {'fake': querymap_client}
    assert registry.resolve('fake') is querymap_client


def test_loading_without_entrypoints(patch_entrypoints: 'Callable[..., MockType]') -> None:
    """Start with an empty registry when no plugin is installed."""
    patch_entrypoints()

    assert ClientRegistry().clients == {}


def test_loading_skip_with_failed_entrypoint(patch_entrypoints: 'Callable[..., MockType]') -> None:
    """Verify skipping of entry points that fail during loading."""
    patch_entrypoints(raises=ImportError('no module named driver'), fake=None)

    with pytest.warns(ClientWarning, match=r'^Failed to load entrypoint'):
        registry = ClientRegistry(strict=False)

    assert registry.clients == {}


def test_loading_fail_with_failed_entrypoint(patch_entrypoints: 'Callable[..., MockType]') -> None:
    """Verify failing of entry points that fail during loading with strict mode."""
    patch_entrypoints(raises=ImportError('no module named driver'), fake=None)

    with pytest.raises(ClientError, match=r'^Failed to load entrypoint') as error:
        ClientRegistry(strict=True)

    assert isinstance(error.value.__cause__, ImportError)
    assert error.value.entrypoint is not None


def test_loading_skip_with_invalid_factory(patch_entrypoints: 'Callable[..., MockType]') -> None:
    """Verify handling of entry points not pointing to a callable."""
    patch_entrypoints(fake=42)

    with pytest.warns(ClientWarning, match=r'is not callable$'):
        registry = ClientRegistry(strict=False)

    assert registry.clients == {}


def test_loading_fail_with_invalid_factory(patch_entrypoints: 'Callable[..., MockType]') -> None:
    """Verify failing on entry points not pointing to a callable with strict mode."""
    patch_entrypoints(fake=42)

    with pytest.raises(ClientError, match=r"^Client 'fake' from 'tests.clients:fake' is not callable$"):
        ClientRegistry(strict=True)


def test_shadowing_client() -> None:
    """Replace an existing client with a warning in relaxed mode."""
    registry = ClientRegistry(strict=False, auto_load=False)
    registry.add_client('fake', querymap_client)

    with pytest.warns(ClientWarning, match=r'is shadowing an existing$'):
        registry.add_client('fake', broken_client)

    assert registry.clients['fake'] is broken_client


def test_shadowing_client_fails_on_strict_mode() -> None:
    """Keep the first client and fail in strict mode."""
    registry = ClientRegistry(strict=True, auto_load=False)
    registry.add_client('fake', querymap_client)

    with pytest.raises(ClientError, match=r'is shadowing an existing$'):
        registry.add_client('fake', broken_client)

    assert registry.clients['fake'] is querymap_client


def test_resolve_reference() -> None:
    """Load factories referenced as `module:attribute`."""
    registry = ClientRegistry(auto_load=False)

    assert registry.resolve('tests.examples.clients:querymap_client') is querymap_client


@pytest.mark.parametrize('reference, message', (
    pytest.param('missing', r"^Unknown client 'missing'$", id='unknown name'),
    pytest.param('tests.examples.missing:factory', r'^Failed to load client', id='missing module'),
    pytest.param('tests.examples.clients:missing', r'^Failed to load client', id='missing attribute'),
    pytest.param('tests.examples.clients:__doc__', r'is not callable$', id='not callable'),
))
def test_resolve_invalid_reference(reference: str, message: str) -> None:
    """Reject references that do not lead to a factory."""
    registry = ClientRegistry(auto_load=False)

    with pytest.raises(ClientError, match=message):
        registry.resolve(reference)


def test_create_client(tmp_path: 'Path') -> None:
    """Pass the namespace and query maps to the factory."""
    querymap = tmp_path / 'shop.map'
    querymap.write_text('select_order\ninsert_order write\n\nbroken fail\n')

    registry = ClientRegistry(auto_load=False)
    client = registry.create('tests.examples.clients:querymap_client', 'shop', [querymap])

    assert isinstance(client, FakeClient)
    assert client.query_names == ['select_order', 'insert_order', 'broken']


def test_create_client_passes_connector(mocker: 'MockerFixture', tmp_path: 'Path') -> None:
    """Call the factory with the namespace, query maps and connector."""
    factory = mocker.Mock(return_value=FakeClient())
    connector = tmp_path / 'connector.json'

    registry = ClientRegistry(auto_load=False)
    registry.add_client('mock', factory)

    assert registry.create('mock', 'shop', [tmp_path / 'a.map'], connector) is factory.return_value

    factory.assert_called_once_with('shop', (tmp_path / 'a.map',), connector)


def test_create_client_wraps_factory_errors() -> None:
    """Wrap unexpected factory errors into client errors."""
    registry = ClientRegistry(auto_load=False)
    registry.add_client('broken', broken_client)

    with pytest.raises(ClientError, match=r"^Failed to create client 'broken' for namespace 'shop'$") as error:
        registry.create('broken', 'shop')

    assert isinstance(error.value.__cause__, ConnectionError)


def test_create_client_keeps_library_errors(mocker: 'MockerFixture') -> None:
    """Propagate library errors raised by factories unchanged."""
    failure = ClientError('connector file is required')

    registry = ClientRegistry(auto_load=False)
    registry.add_client('strict', mocker.Mock(side_effect=failure))

    with pytest.raises(ClientError) as error:
        registry.create('strict', 'shop')

    assert error.value is failure


def test_create_client_rejects_non_clients(mocker: 'MockerFixture') -> None:
    """Reject factories returning objects without the client interface."""
    registry = ClientRegistry(auto_load=False)
    registry.add_client('odd', mocker.Mock(return_value=object()))

    with pytest.raises(ClientError, match=r"^Client 'odd' did not return a query client$"):
        registry.create('odd', 'shop')
