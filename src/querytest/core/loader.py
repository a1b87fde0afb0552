"""Query client discovery and loading infrastructure.

Query clients are provided by plugins: each entry point of the
`querytest_clients` group names a client factory. A factory may also be
referenced directly as `module:attribute`.

Plugins are loaded defensively: individual failures do not interrupt
the loading process unless strict mode is enabled.
"""

import logging
from importlib.metadata import EntryPoint
from typing import TYPE_CHECKING
from warnings import warn

from querytest.client import QueryClient
from querytest.errors import ClientError, ClientWarning, QueryTestError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

if TYPE_CHECKING:
    from querytest.client import ClientFactory

ENTRYPOINT_GROUP = 'querytest_clients'

logger = logging.getLogger(__name__)


class ClientRegistry:
    """Registry of named query client factories.

    Attributes:
        strict_mode: If True, any plugin loading issue raises an error.
            If False, issues are emitted as warnings and loading continues.
        clients: Registered factories keyed by client name.
    """

    def __init__(self, *, strict: bool = True, auto_load: bool = True) -> None:
        """Initialize the registry.

        Args:
            strict: Whether to raise errors on plugin loading failures
                instead of emitting warnings.
            auto_load: Whether to load plugins from entry points.

        Raises:
            ClientError: If any loading issues occur on strict mode.
        """
        self.strict_mode = strict
        self.clients: dict[str, ClientFactory] = {}

        if auto_load:
            self.load_plugins()

    def add_client(self, name: str, factory: 'ClientFactory',
                   entrypoint: EntryPoint | None = None) -> None:
        """Register a client factory.

        Args:
            name: Client name used to select the factory.
            factory: Callable creating a client for a namespace.
            entrypoint: Entry point from which the factory was loaded,
                if applicable. Used for diagnostics and warnings.

        Raises:
            ClientError: If the factory is invalid on strict mode.
        """
        module = entrypoint.value if entrypoint else getattr(factory, '__module__', None)

        if not callable(factory):
            if error := self.emit_plugin_issue(
                f'Client {name!r} from {module!r} is not callable',
                entrypoint,
            ):
                raise error
            return

        if name in self.clients and (error := self.emit_plugin_issue(
            f'Client {name!r} from {module!r} is shadowing an existing',
            entrypoint,
        )):
            raise error

        self.clients[name] = factory
        logger.debug('Client %r registered from %r', name, module)

    def resolve(self, reference: str) -> 'ClientFactory':
        """Find a client factory by name or `module:attribute` reference.

        Args:
            reference: Registered client name or import reference.

        Returns:
            The client factory.

        Raises:
            ClientError: If the reference is unknown or can not be loaded.
        """
        if reference in self.clients:
            return self.clients[reference]

        if ':' not in reference:
            raise ClientError(f'Unknown client {reference!r}')

        entrypoint = EntryPoint(name=reference, value=reference, group=ENTRYPOINT_GROUP)

        try:
            factory = entrypoint.load()

        except Exception as base:
            raise ClientError(
                f'Failed to load client {reference!r}',
                entrypoint=entrypoint,
            ) from base

        if not callable(factory):
            raise ClientError(f'Client {reference!r} is not callable', entrypoint=entrypoint)

        return factory  # type: ignore[no-any-return]

    def create(self, reference: str, namespace: str,
               querymaps: 'Sequence[Path]' = (),
               connector: 'Path | None' = None) -> QueryClient:
        """Create a client for a scenario namespace.

        Args:
            reference: Registered client name or import reference.
            namespace: Query namespace of the scenario.
            querymaps: Query map files defining the catalog.
            connector: Optional connector definition file.

        Returns:
            A client bound to the namespace.

        Raises:
            ClientError: If the factory is unknown, fails, or returns
                an object that is not a query client.
        """
        factory = self.resolve(reference)

        try:
            client = factory(namespace, tuple(querymaps), connector)

        except QueryTestError:
            raise

        except Exception as base:
            raise ClientError(
                f'Failed to create client {reference!r} for namespace {namespace!r}',
            ) from base

        if not isinstance(client, QueryClient):
            raise ClientError(f'Client {reference!r} did not return a query client')

        logger.info('Client %r created for namespace %r', reference, namespace)

        return client

    def emit_plugin_issue(self, message: str,
                          entrypoint: EntryPoint | None = None) -> Exception | None:
        """Emit a plugin warning or return the exception.

        Args:
            message: Warning message to emit.
            entrypoint: Entry point associated with the issue, if applicable.

        Returns:
            ClientError on strict mode, otherwise `None`
                with producing a ClientWarning.
        """
        if self.strict_mode:
            return ClientError(message, entrypoint=entrypoint)

        warn(message, category=ClientWarning, stacklevel=2)

        return None

    def _load_plugin(self, entrypoint: EntryPoint) -> None:
        """Load and register a single client entry point.

        Args:
            entrypoint: Entry point describing the factory to load.

        Raises:
            ClientError: If any loading issues occur on strict mode.
        """
        try:
            factory = entrypoint.load()

        except Exception as base:
            if error := self.emit_plugin_issue(
                f'Failed to load entrypoint {entrypoint.name!r}',
                entrypoint,
            ):
                raise error from base
            return

        self.add_client(entrypoint.name, factory, entrypoint)

    def load_plugins(self) -> None:
        """Load client factories via entry points.

        Discovers factories from the `querytest_clients` entry point group.

        Raises:
            ClientError: If any loading issues occur on strict mode.
        """
        from importlib.metadata import entry_points  # noqa: PLC0415

        for entrypoint in entry_points().select(group=ENTRYPOINT_GROUP):
            self._load_plugin(entrypoint)
