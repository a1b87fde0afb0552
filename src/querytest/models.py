"""Base Pydantic models for scenario elements and runtime settings.

Scenario elements are immutable once parsed. The few values that change
during a run (the scenario counters) live on models derived from
`StateModel`, which validates every assignment instead of forbidding it.
"""

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchemaModel(BaseModel):
    """Base immutable model for all scenario elements.

    Design principles enforced by this model:
        - Immutability: elements cannot be reassigned after creation.
          Containers owned by an element may still grow while the
          parser is building the scenario.
        - Strict schema validation: unknown or extra fields are rejected
          to avoid silent errors caused by typos.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        extra='forbid',
    )


class StateModel(BaseModel):
    """Base mutable model for elements that carry execution state.

    Assignments are validated, so counters and flags keep their declared
    types through the execution pass.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        validate_assignment=True,
        extra='forbid',
    )


class AttributesModel(BaseModel):
    """Base immutable model for XML element attributes.

    Unknown attributes are ignored so newer scenario files remain
    readable by older runners.
    """

    model_config = ConfigDict(
        frozen=True,
        extra='ignore',
        populate_by_name=True,
    )


class SettingsModel(BaseSettings):
    """Base immutable model for runtime settings.

    Design principles enforced by this model:
        - Immutability: resolved settings cannot be modified after creation.
        - Tolerant schema handling: unknown or extra fields are ignored.
          This allows the surrounding environment to contain unrelated
          variables without breaking configuration resolution.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra='ignore',
    )
