"""
Primary-key projections for an entity.

Readers, writers, services, controllers and clients all refer to an entity's
key columns, each in its own syntactic form: method parameters, call
arguments, equality predicates, assignments. Every form is rendered here from
one resolved key sequence, so a key column gets the same property and
variable token in every artifact.
"""

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional

from ..constants import IDENTIFIER_SUFFIXES, INDENT, NEWLINE, ROUTE_BOUND_ANNOTATION
from ..exceptions import MetadataInconsistencyError
from .models import ColumnDescriptor, Entity
from .naming import decapitalize, escape_reserved, strip_suffixes, to_pascal_case
from .ordering import TypeAliasTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyColumn:
    """A resolved key column and the tokens derived from it."""

    column: ColumnDescriptor
    property_name: str
    variable_name: str
    type_alias: str

    @property
    def column_name(self) -> str:
        return self.column.name


def resolve_column(entity: Entity, columns: Iterable[ColumnDescriptor], name: str) -> ColumnDescriptor:
    """
    Find a declared key column in the live column set.

    An exact name match wins; otherwise a single case-insensitive match is
    accepted. Anything else means the metadata and the schema disagree.
    """
    columns = list(columns)
    for column in columns:
        if column.name == name:
            return column

    folded = [column for column in columns if column.name.casefold() == name.casefold()]
    if len(folded) == 1:
        return folded[0]

    raise MetadataInconsistencyError(
        f"Column not found: {name}",
        entity=entity.entity_name,
        table=f"{entity.storage_schema}.{entity.storage_table}",
        column=name,
    )


def derive_variable_name(property_name: str, strip_identifier_suffix: bool) -> str:
    """
    Variable name for a key property.

    Example:
        >>> derive_variable_name("InvoiceId", True)
        'invoice'
        >>> derive_variable_name("EventId", True)
        '@event'
    """
    variable = decapitalize(property_name)
    if strip_identifier_suffix:
        variable = strip_suffixes(variable, IDENTIFIER_SUFFIXES)
    return escape_reserved(variable)


class PrimaryKeyProjector:
    """
    Renders an entity's key columns in each form a template needs.

    Args:
        entity: Entity whose storage key is projected
        columns: Full column set of the entity's table
        strip_identifier_suffix: Drop trailing "Id"/"Identifier" from variables
        aliases: Type alias table for parameter types

    Raises:
        MetadataInconsistencyError: If a key column is missing from the table
    """

    def __init__(
        self,
        entity: Entity,
        columns: Iterable[ColumnDescriptor],
        strip_identifier_suffix: bool = True,
        aliases: Optional[TypeAliasTable] = None,
    ):
        self.entity = entity
        self.strip_identifier_suffix = strip_identifier_suffix
        aliases = aliases or TypeAliasTable()

        columns = list(columns)
        keys: List[KeyColumn] = []
        for name in entity.storage_key_columns:
            column = resolve_column(entity, columns, name)
            property_name = to_pascal_case(column.name)
            keys.append(KeyColumn(
                column=column,
                property_name=property_name,
                variable_name=derive_variable_name(property_name, strip_identifier_suffix),
                type_alias=aliases.alias_of(column),
            ))

        self.keys: List[KeyColumn] = keys
        logger.debug(
            f"Resolved key of {entity.entity_name}: "
            f"{[(key.column_name, key.property_name, key.variable_name) for key in keys]}"
        )

    @property
    def key_column_names(self) -> FrozenSet[str]:
        return frozenset(key.column_name for key in self.keys)

    def is_key(self, column: ColumnDescriptor) -> bool:
        return column.name in self.key_column_names

    def parameters(self, route_bound: bool = False) -> str:
        """
        Method parameter list, e.g. ``int invoice, int line``.

        Route-bound parameters carry the API binding annotation.
        """
        annotation = ROUTE_BOUND_ANNOTATION if route_bound else ""
        return ", ".join(f"{annotation}{key.type_alias} {key.variable_name}" for key in self.keys)

    def arguments(self, source: Optional[str] = None) -> str:
        """
        Call argument list.

        Without a source object the key variables are passed as they are;
        with one, the key properties of that object are passed
        (``modify.InvoiceId``).
        """
        if source is None:
            return ", ".join(key.variable_name for key in self.keys)
        return ", ".join(f"{source}.{key.property_name}" for key in self.keys)

    def equality_expression(self, target: str = "x") -> str:
        return " && ".join(f"{target}.{key.property_name} == {key.variable_name}" for key in self.keys)

    def assignments(self, target: str, source: str) -> str:
        return NEWLINE.join(f"{target}.{key.property_name} = {source}.{key.property_name}" for key in self.keys)

    def initializers(self, source: str, indent: str = INDENT * 3) -> str:
        """Object-initializer lines, comma-separated, one per key property."""
        lines = [f"{indent}{key.property_name} = {source}.{key.property_name}" for key in self.keys]
        return ",\n".join(lines) + NEWLINE if lines else ""

    def column_names(self) -> str:
        return ", ".join(key.column_name for key in self.keys)

    def property_names(self, source: str = "entity") -> str:
        return ", ".join(f"{source}.{key.property_name}" for key in self.keys)

    def key_selector(self, target: str = "x") -> str:
        return ", ".join(f"{target}.{key.property_name}" for key in self.keys)

    def property_values(self, source: str) -> str:
        """Interpolation fragments naming each key value, e.g. ``InvoiceId {create.InvoiceId}``."""
        return ", ".join(f"{key.property_name} {{{source}.{key.property_name}}}" for key in self.keys)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            'columns': [key.column_name for key in self.keys],
            'properties': [key.property_name for key in self.keys],
            'variables': [key.variable_name for key in self.keys],
            'types': [key.type_alias for key in self.keys],
        }
