"""Typed parameter values bound to scenario queries.

A parameter value is a nullable scalar declared in a scenario file with
an explicit type. Numeric literals are parsed when the value is created,
so a malformed number is reported while the scenario is being read and
never reaches the query client.
"""

from collections.abc import Iterator
from enum import StrEnum
from re import ASCII
from re import compile as regexp
from typing import Annotated, Any, Self

from pydantic import AliasChoices, BeforeValidator, Field, model_validator

from querytest.errors import QueryTestError
from querytest.models import SchemaModel

#: Resolved parameter value passed to the query client.
type Scalar = int | float | str | None

_INTEGER_PATTERN = regexp(r'^[+-]?\d+$', flags=ASCII)
_DECIMAL_PATTERN = regexp(r'^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$', flags=ASCII)


class ValueType(StrEnum):
    """Declared type of a parameter value."""

    INT = 'int'
    LONG = 'long'
    FLOAT = 'float'
    DOUBLE = 'double'
    STRING = 'string'
    CHAR = 'char'
    DATE = 'date'
    TIME = 'time'
    DATETIME = 'datetime'

    @property
    def is_numeric(self) -> bool:
        """Whether literals of this type are parsed into numbers."""
        return self in NUMERIC_TYPES


NUMERIC_TYPES = frozenset({
    ValueType.INT,
    ValueType.LONG,
    ValueType.FLOAT,
    ValueType.DOUBLE,
})

INTEGER_RANGES = {
    ValueType.INT: (-2 ** 31, 2 ** 31 - 1),
    ValueType.LONG: (-2 ** 63, 2 ** 63 - 1),
}


def _casefold(value: Any) -> Any:  # noqa: ANN401
    """Lowercase string input before enum validation."""
    if isinstance(value, str):
        return value.strip().lower()

    return value


#: Value type matched case-insensitively.
TypeName = Annotated[ValueType, BeforeValidator(_casefold)]


def parse_raw(value_type: ValueType, raw: str | None) -> Scalar:
    """Convert a raw literal into a Python value of the declared type.

    Args:
        value_type: Declared parameter type.
        raw: Literal text from the scenario file.

    Returns:
        An `int` for integer types, a `float` for floating-point types,
        and the text itself (empty when absent) for string-like types.

    Raises:
        ValueError: If the literal does not match the declared numeric
            type or is out of its range.
    """
    if not value_type.is_numeric:
        return '' if raw is None else raw

    literal = (raw or '').strip()

    if value_type in INTEGER_RANGES:
        if not _INTEGER_PATTERN.match(literal):
            raise ValueError(f'{raw!r} is not a valid {value_type} literal')
        number = int(literal)
        low, high = INTEGER_RANGES[value_type]
        if not low <= number <= high:
            raise ValueError(f'{raw!r} is out of {value_type} range')
        return number

    if not _DECIMAL_PATTERN.match(literal):
        raise ValueError(f'{raw!r} is not a valid {value_type} literal')

    return float(literal)


class ParameterValue(SchemaModel):
    """Typed, nullable scalar bound to a query parameter slot."""

    value_type: TypeName = Field(
        validation_alias=AliasChoices('type', 'value_type'),
        title='Value type',
        description='Declared type of the value.',
    )

    raw: str | None = Field(
        default=None,
        validation_alias=AliasChoices('value', 'raw'),
        title='Raw literal',
        description='Literal text of the value as written in the scenario.',
    )

    is_null: bool = Field(
        default=False,
        validation_alias=AliasChoices('is-null', 'is_null'),
        title='Null flag',
        description='Binds SQL NULL instead of the literal.',
    )

    @model_validator(mode='after')
    def check_literal(self) -> Self:
        """Parse non-null literals eagerly.

        Returns:
            Self.

        Raises:
            ValueError: If the literal does not match the declared type.
        """
        if not self.is_null:
            parse_raw(self.value_type, self.raw)

        return self

    @property
    def value(self) -> Scalar:
        """Typed Python value, `None` for null values."""
        if self.is_null:
            return None

        return parse_raw(self.value_type, self.raw)


class ParameterSet:
    """Ordered collection of named and positional parameter values.

    Named values are unique per name: adding a value under an existing
    name replaces it in place and keeps its position. Positional values
    are appended in declaration order. A frozen set rejects changes.
    """

    def __init__(self) -> None:
        """Initialize an empty parameter set."""
        self._entries: list[tuple[str | None, ParameterValue]] = []
        self._frozen = False

    def put(self, value: ParameterValue, name: str | None = None) -> None:
        """Add a value by name or positionally.

        Args:
            value: Value to bind.
            name: Parameter name, `None` for a positional value.

        Raises:
            QueryTestError: If the set is frozen.
        """
        if self._frozen:
            raise QueryTestError('Parameters can not be changed after execution begins')

        if name is not None:
            for index, (key, _) in enumerate(self._entries):
                if key == name:
                    self._entries[index] = (name, value)
                    return

        self._entries.append((name, value))

    def freeze(self) -> None:
        """Reject further changes."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        """Whether the set rejects changes."""
        return self._frozen

    @property
    def positional(self) -> tuple[ParameterValue, ...]:
        """Positional values in declaration order."""
        return tuple(value for name, value in self._entries if name is None)

    @property
    def named(self) -> dict[str, ParameterValue]:
        """Named values keyed by parameter name."""
        return {name: value for name, value in self._entries if name is not None}

    def get(self, name: str) -> ParameterValue | None:
        """Return the value bound to `name`, if any."""
        return self.named.get(name)

    def values(self) -> list[Scalar]:
        """Typed Python values in declaration order."""
        return [value.value for _, value in self._entries]

    def __iter__(self) -> Iterator[tuple[str | None, ParameterValue]]:
        """Iterate over `(name, value)` entries in declaration order."""
        return iter(self._entries)

    def __len__(self) -> int:
        """Number of bound values."""
        return len(self._entries)

    def __repr__(self) -> str:
        """Debug representation."""
        entries = ', '.join(
            f'{name}={value.value!r}' if name is not None else repr(value.value)
            for name, value in self._entries
        )
        return f'ParameterSet({entries})'
