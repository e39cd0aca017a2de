"""
Deterministic column ordering and type aliases.

Generated declarations must not depend on the physical column order of a
table, so property lists are sorted by a fixed type priority and then by
column name.
"""

import logging
from typing import Iterable, List, Mapping, Tuple

from ..constants import TYPE_ALIASES, TYPE_PRIORITY, SemanticType
from ..exceptions import raise_unsupported_type
from .models import ColumnDescriptor

logger = logging.getLogger(__name__)


class TypeAliasTable:
    """Maps semantic column types to the type keywords of the generated code."""

    def __init__(self, aliases: Mapping[SemanticType, str] = TYPE_ALIASES):
        self._aliases = aliases

    def alias(self, semantic_type: SemanticType, column: str = None) -> str:
        try:
            return self._aliases[semantic_type]
        except KeyError:
            raise_unsupported_type(
                f"No type alias for {semantic_type}",
                type_name=str(semantic_type),
                column=column,
            )

    def alias_of(self, column: ColumnDescriptor) -> str:
        return self.alias(column.semantic_type, column.name)


class ColumnOrderingPolicy:
    """
    Total order over column descriptors.

    Columns sort by type priority (identifiers first, binary last), then by
    case-insensitive name, with the exact name as final tie-break so that any
    permutation of the same column set yields the same sequence.
    """

    def __init__(self, priorities: Mapping[SemanticType, int] = TYPE_PRIORITY):
        self._priorities = priorities

    def priority(self, column: ColumnDescriptor) -> int:
        try:
            return self._priorities[column.semantic_type]
        except KeyError:
            raise_unsupported_type(
                f"Column type {column.semantic_type.value} has no declaration priority",
                type_name=column.semantic_type.value,
                column=column.name,
            )

    def sort_key(self, column: ColumnDescriptor) -> Tuple[int, str, str]:
        return (self.priority(column), column.name.casefold(), column.name)

    def sort(self, columns: Iterable[ColumnDescriptor]) -> List[ColumnDescriptor]:
        ordered = sorted(columns, key=self.sort_key)
        logger.debug(f"Ordered columns: {[column.name for column in ordered]}")
        return ordered
