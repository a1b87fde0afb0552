"""Runtime settings resolved from the environment.

Every setting can be provided with a `QUERYTEST_` prefixed environment
variable and overridden by the matching command-line option.
"""

from pathlib import Path  # noqa: TC003
from typing import Annotated, Any, Literal

from pydantic import BeforeValidator, Field
from pydantic_settings import SettingsConfigDict

from querytest.models import SettingsModel

ENV_PREFIX = 'QUERYTEST_'

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def _uppercase(value: Any) -> Any:  # noqa: ANN401
    """Uppercase string input before literal validation."""
    if isinstance(value, str):
        return value.strip().upper()

    return value


LogLevel = Annotated[
    Literal['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
    BeforeValidator(_uppercase),
]


class RunnerSettings(SettingsModel):
    """Settings of a scenario run."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
    )

    client: str | None = Field(
        default=None,
        title='Query client',
        description=(
            'Name of a registered client factory, or a `module:attribute` '
            'reference to one.'
        ),
    )

    connector: Path | None = Field(
        default=None,
        title='Connector definition',
        description='Connector definition file passed to the client factory.',
    )

    force_validate: bool = Field(
        default=True,
        title='Force result validation',
        description='Validate every query result against its declared shape.',
    )

    strict: bool = Field(
        default=True,
        title='Strict plugin loading',
        description='Fail on client plugin loading issues instead of warning.',
    )

    log_level: LogLevel = Field(
        default='WARNING',
        title='Log level',
        description='Level of diagnostic log records.',
    )
