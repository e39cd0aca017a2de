"""
Property declarations and column mappings built from ordered column sets.

These are the multi-line substitution values of entity, query, command and
configuration artifacts. Property lists follow the column ordering policy;
column mappings follow the physical column order of the table.
"""

from typing import Iterable, List, Optional

from ..constants import INDENT, NEWLINE, UNICODE_NATIVE_TYPES
from .models import ColumnDescriptor, PropertyScope
from .naming import to_pascal_case
from .ordering import ColumnOrderingPolicy, TypeAliasTable

# Lengths at or above this value mean "unbounded" (varchar(max), text).
UNBOUNDED_LENGTH = 2 ** 31 - 1


class DeclarationBuilder:
    """
    Builds declaration blocks for one entity's columns.

    Args:
        ordering: Column ordering policy
        aliases: Type alias table
    """

    def __init__(
        self,
        ordering: Optional[ColumnOrderingPolicy] = None,
        aliases: Optional[TypeAliasTable] = None,
    ):
        self.ordering = ordering or ColumnOrderingPolicy()
        self.aliases = aliases or TypeAliasTable()

    @staticmethod
    def select(
        columns: Iterable[ColumnDescriptor],
        key_names: Iterable[str],
        scope: PropertyScope,
    ) -> List[ColumnDescriptor]:
        keys = set(key_names)
        if scope is PropertyScope.ONLY_KEY:
            return [column for column in columns if column.name in keys]
        if scope is PropertyScope.EXCLUDE_KEY:
            return [column for column in columns if column.name not in keys]
        return list(columns)

    def properties(
        self,
        columns: Iterable[ColumnDescriptor],
        key_names: Iterable[str],
        scope: PropertyScope = PropertyScope.ALL,
        allow_null: bool = False,
        is_core: bool = False,
        tabs: int = 2,
        remove_modifier: bool = False,
    ) -> str:
        """
        Auto-property declarations, one per selected column.

        Columns are sorted by the ordering policy and a blank line separates
        runs of different types. A property is nullable when the column allows
        nulls or ``allow_null`` is set (criteria objects); value types always
        show nullability, reference types only in core entities, where
        required reference properties get a null-forgiving initializer.

        Args:
            columns: Full column set of the table
            key_names: Names of the key columns
            scope: Which columns to declare
            allow_null: Treat every column as optional
            is_core: Declarations belong to a persistence entity
            tabs: Indentation depth in units of four spaces
            remove_modifier: Omit the access modifier (interface members)
        """
        indent = INDENT * tabs
        selected = self.ordering.sort(self.select(columns, key_names, scope))

        lines: List[str] = []
        last_alias = None
        for column in selected:
            alias = self.aliases.alias_of(column)
            declared_type = alias

            is_required = not allow_null and not column.nullable
            if not is_required and (is_core or not column.is_reference_type):
                declared_type += "?"

            if lines and alias != last_alias:
                lines.append("")

            modifier = "" if remove_modifier else "public "
            line = f"{indent}{modifier}{declared_type} {to_pascal_case(column.name)} {{ get; set; }}"

            if is_core and column.is_reference_type and not declared_type.endswith("?"):
                line += " = null!;"

            lines.append(line)
            last_alias = alias

        return NEWLINE.join(lines)

    def column_specifications(self, columns: Iterable[ColumnDescriptor], is_core: bool = True) -> str:
        """
        Fluent column mappings in physical column order.

        Example line:
            ``builder.Property(x => x.InvoiceId).HasColumnName("invoice_id").IsRequired();``
        """
        text = []
        for column in sorted(columns, key=lambda c: c.ordinal):
            spec = INDENT * 2
            if is_core:
                spec += "builder."
            spec += f"Property(x => x.{to_pascal_case(column.name)})"
            spec += f'.HasColumnName("{column.name}")'

            if not column.nullable:
                spec += ".IsRequired()"

            if column.is_string:
                unicode = (column.native_type or "").lower() in UNICODE_NATIVE_TYPES
                spec += f".IsUnicode({'true' if unicode else 'false'})"
                if column.max_length is not None and -1 < column.max_length < UNBOUNDED_LENGTH:
                    spec += f".HasMaxLength({column.max_length})"
            elif column.is_decimal:
                if column.precision is not None and column.scale is not None:
                    spec += f".HasPrecision({column.precision}, {column.scale})"

            text.append(spec + ";" + NEWLINE)
        return "".join(text)

    @staticmethod
    def query_filters(columns: Iterable[ColumnDescriptor]) -> str:
        """Commented-out criteria filters, one pair of lines per column."""
        text = []
        for column in sorted(columns, key=lambda c: c.ordinal):
            name = to_pascal_case(column.name)
            text.append(NEWLINE)
            text.append(f"{INDENT * 2}// if (criteria.{name} != null){NEWLINE}")
            text.append(f"{INDENT * 2}//    q = q.Where(x => x.{name} == criteria.{name});{NEWLINE}")
        return "".join(text)

    @staticmethod
    def assign_statements(
        columns: Iterable[ColumnDescriptor],
        target: str,
        source: str,
        exclude: Iterable[str] = (),
        indent: str = INDENT * 2,
    ) -> str:
        """Statements copying each column property, e.g. ``entity.Total = modify.Total;``."""
        skipped = set(exclude)
        text = []
        for column in sorted(columns, key=lambda c: c.ordinal):
            if column.name in skipped:
                continue
            name = to_pascal_case(column.name)
            text.append(f"{indent}{target}.{name} = {source}.{name};{NEWLINE}")
        return "".join(text)

    @staticmethod
    def initializers(
        columns: Iterable[ColumnDescriptor],
        source: str,
        indent: str = INDENT * 3,
    ) -> str:
        """Object-initializer lines for every column, comma-separated."""
        lines = []
        for column in sorted(columns, key=lambda c: c.ordinal):
            name = to_pascal_case(column.name)
            lines.append(f"{indent}{name} = {source}.{name}")
        return ",\n".join(lines)
