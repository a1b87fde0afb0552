"""Scenario names primitive types and validation rules.

This module defines strongly-typed aliases for the identifiers used by
scenario files: query names registered in a query catalog and the query
namespace of a scenario.
"""

from typing import Annotated

from pydantic import Field, StringConstraints

QueryName = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1),
    Field(
        title='Query name',
        description=(
            'Name of a pre-registered query in the catalog of the '
            'query-dispatch client.'
        ),
        examples=[
            'select_user',
            'insert_order',
        ],
    ),
]

Namespace = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1),
    Field(
        title='Query namespace',
        description=(
            'Identifier of the query namespace a scenario runs against. '
            'The client resolves its catalog from this namespace.'
        ),
    ),
]
