"""Command-line interface of querytest.

Runs scenario files against a query client selected by name, lists the
registered clients, and checks scenario files without running them.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from click import Choice, Context, UsageError, argument, echo, group, option, pass_context
from click import Path as PathParam
from pydantic import ValidationError

from querytest.core import ClientRegistry, parse_file
from querytest.errors import QueryTestError
from querytest.executor import EXIT_FAILURE, execute
from querytest.report import INFO, ConsoleReporter
from querytest.settings import ENV_PREFIX, LOG_LEVELS, RunnerSettings

if TYPE_CHECKING:
    from querytest.scenario import Scenario

LOG_FORMAT = '%(levelname)s %(name)s: %(message)s'

InputFilepath = PathParam(
    exists=True,
    dir_okay=False,
    readable=True,
    path_type=Path,
)


@group(help='Scenario-driven tester for named SQL queries.')
@option(
    '--log-level',
    type=Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help=f'Level of diagnostic messages (default: ${ENV_PREFIX}LOG_LEVEL or WARNING).',
)
@pass_context
def cli(ctx: Context, log_level: str | None) -> None:
    """Root CLI group resolving runtime settings."""
    try:
        settings = RunnerSettings()
    except ValidationError as base:
        raise UsageError(f'Invalid {ENV_PREFIX}* environment: {base}') from base

    if log_level:
        settings = settings.model_copy(update={'log_level': log_level.upper()})

    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    ctx.obj = settings


@cli.command(
    name='run',
    help=(
        'Execute the SCENARIO file against a query client. '
        'QUERYMAP files are passed to the client factory.'
    ),
)
@option(
    '-c', '--client', 'client_name',
    help=f'Client name or module:attribute reference (default: ${ENV_PREFIX}CLIENT).',
)
@option(
    '--connector',
    type=InputFilepath,
    default=None,
    help='Connector definition file passed to the client factory.',
)
@option(
    '--force-validate/--no-force-validate',
    default=None,
    help='Validate every query result against its declared shape.',
)
@option(
    '--relaxed',
    is_flag=True,
    default=False,
    help='Warn instead of failing on client plugin loading issues.',
)
@argument('scenario', type=InputFilepath)
@argument('querymaps', nargs=-1, type=InputFilepath)
@pass_context
def run_scenario(ctx: Context, client_name: str | None,  # noqa: PLR0913
                 connector: Path | None, force_validate: bool | None,
                 relaxed: bool, scenario: Path,
                 querymaps: tuple[Path, ...]) -> None:
    """Parse a scenario, create its client and execute it."""
    settings: RunnerSettings = ctx.obj

    client_name = client_name or settings.client
    if not client_name:
        raise UsageError(f'Missing query client: pass --client or set {ENV_PREFIX}CLIENT')

    if force_validate is None:
        force_validate = settings.force_validate

    reporter = ConsoleReporter()

    try:
        document = parse_file(scenario)
        registry = ClientRegistry(strict=settings.strict and not relaxed)
        client = registry.create(
            client_name,
            document.namespace or '',
            querymaps,
            connector or settings.connector,
        )
        code = execute(
            document,
            client,
            reporter=reporter,
            force_validate=force_validate,
        )

    except QueryTestError as error:
        reporter.fatal(str(error))
        ctx.exit(EXIT_FAILURE)

    ctx.exit(code)


@cli.command(name='clients', help='List registered query clients.')
@pass_context
def list_clients(ctx: Context) -> None:
    """Print registered client names with their origin."""
    settings: RunnerSettings = ctx.obj

    try:
        registry = ClientRegistry(strict=settings.strict)

    except QueryTestError as error:
        ConsoleReporter().fatal(str(error))
        ctx.exit(EXIT_FAILURE)

    for name, factory in sorted(registry.clients.items()):
        echo(f'{name}\t{getattr(factory, "__module__", None) or "-"}')


def _describe(scenario: 'Scenario') -> str:
    """Summarize the structure of a parsed scenario."""
    testers = list(scenario.testers())
    dummies = sum(1 for tester in testers if tester.is_dummy)

    return (
        f'{INFO} {scenario.namespace}: '
        f'{len(scenario.transactions)} transaction(s), '
        f'{len(testers)} tester(s), {dummies} dummy.'
    )


@cli.command(name='check', help='Parse the SCENARIO file without executing it.')
@argument('scenario', type=InputFilepath)
@pass_context
def check_scenario(ctx: Context, scenario: Path) -> None:
    """Validate a scenario file and print its structure."""
    try:
        document = parse_file(scenario)

    except QueryTestError as error:
        ConsoleReporter().fatal(str(error))
        ctx.exit(EXIT_FAILURE)

    echo(_describe(document))


if __name__ == '__main__':
    cli()
