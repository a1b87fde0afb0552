"""Attribute schemas of scenario file elements.

Each schema validates the attributes of one element kind. Required
attributes must be present and non-empty, boolean attributes accept the
usual spellings (`true`, `false`, `yes`, `no`, `1`, `0`, `on`, `off`), and
unknown attributes are ignored.
"""

from pydantic import Field

from querytest.models import AttributesModel
from querytest.names import Namespace, QueryName  # noqa: TC001
from querytest.values import ParameterValue, TypeName

SCENARIO = 'scenario'
TRANSACTION = 'transaction'
EXECUTE = 'execute'
PARAM = 'param'


class ScenarioAttributes(AttributesModel):
    """Attributes of the root `scenario` element."""

    namespace: Namespace


class ExecuteAttributes(AttributesModel):
    """Attributes of an `execute` element."""

    sql_name: QueryName = Field(alias='sql-name')
    dummy: bool = False


class ParamAttributes(AttributesModel):
    """Attributes of a `param` element.

    A missing `name` binds the value positionally.
    """

    name: str | None = None
    value_type: TypeName = Field(alias='type')
    value: str | None = None
    is_null: bool = Field(default=False, alias='is-null')

    @property
    def parameter_name(self) -> str | None:
        """Name to bind the value under, `None` for positional values."""
        return self.name or None

    def to_value(self) -> ParameterValue:
        """Build the typed parameter value.

        Raises:
            pydantic.ValidationError: If the literal does not match the
                declared type.
        """
        return ParameterValue(
            value_type=self.value_type,
            raw=self.value,
            is_null=self.is_null,
        )
