"""
Metadata health checks for Spindle Generator.

Checks that the metadata table and the live schema agree before anything is
generated: every declared key column exists, every lookup key is unique,
every column type can be named and ordered. Naming drift (plural entity
names, tables outside their component schema) is reported as warnings.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from inflect import engine as inflect_engine

from .domain.collaborators import Database
from .domain.entity_index import EntityMetadataIndex
from .domain.models import Entity
from .domain.naming import split_words
from .domain.ordering import ColumnOrderingPolicy, TypeAliasTable
from .domain.primary_key import resolve_column
from .exceptions import MetadataInconsistencyError, UnsupportedTypeError, ValidationError

logger = logging.getLogger(__name__)

_INFLECT_ENGINE_ = inflect_engine()


@dataclass
class ValidationResult:
    """Result of a validation operation."""

    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Ensure consistency."""
        if self.errors and self.is_valid:
            self.is_valid = False

    def add_error(self, error: str) -> None:
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        self.warnings.append(warning)

    def raise_if_invalid(self) -> None:
        """Raise ValidationError if invalid."""
        if not self.is_valid:
            raise ValidationError(
                f"Validation failed: {'; '.join(self.errors)}",
                validator="metadata_health",
                context={"errors": self.errors, "warnings": self.warnings},
            )


def singular_entity_name(name: str) -> str:
    """
    Singular form of an entity name, judged on its last word.

    Returns an empty string when the name already reads as singular.

    Example:
        >>> singular_entity_name("InvoiceLines")
        'InvoiceLine'
    """
    words = split_words(name)
    if not words:
        return ""
    last = words[-1]
    singular = _INFLECT_ENGINE_.singular_noun(last)
    if not singular or singular.lower() == last.lower():
        return ""
    return name[: len(name) - len(last)] + singular


class MetadataHealthChecker:
    """
    Runs the metadata health checks against a database.

    Args:
        database: Source of column descriptors
        index: Entities to check
        ordering: Column ordering policy whose priorities must cover every column
        aliases: Type alias table that must name every column type
    """

    def __init__(
        self,
        database: Database,
        index: EntityMetadataIndex,
        ordering: ColumnOrderingPolicy = None,
        aliases: TypeAliasTable = None,
    ):
        self.database = database
        self.index = index
        self.ordering = ordering or ColumnOrderingPolicy()
        self.aliases = aliases or TypeAliasTable()

    def check_duplicates(self, result: ValidationResult) -> None:
        counts = Counter(entity.lookup_key for entity in self.index)
        for key, count in sorted(counts.items()):
            if count > 1:
                result.add_error(f"Entity {'.'.join(key)} is defined {count} times")

    def check_columns(self, entity: Entity, result: ValidationResult) -> None:
        """Key columns must exist; every column must have an alias and a priority."""
        table = f"{entity.storage_schema}.{entity.storage_table}"
        try:
            columns = self.database.columns_of(entity.storage_schema, entity.storage_table)
        except (MetadataInconsistencyError, UnsupportedTypeError) as e:
            result.add_error(f"{entity.entity_name}: {e.message}")
            return

        for name in entity.storage_key_columns:
            try:
                resolve_column(entity, columns, name)
            except MetadataInconsistencyError:
                result.add_error(f"{entity.entity_name}: key column '{name}' not found in {table}")

        for column in columns:
            try:
                self.aliases.alias_of(column)
                self.ordering.priority(column)
            except UnsupportedTypeError as e:
                result.add_error(f"{entity.entity_name}: {e.message} ({table}.{column.name})")

    def check_naming(self, entity: Entity, result: ValidationResult) -> None:
        singular = singular_entity_name(entity.entity_name)
        if singular:
            result.add_warning(
                f"Entity name '{entity.entity_name}' looks plural; consider '{singular}'"
            )

    def check_migrations(self, result: ValidationResult) -> None:
        features: Dict[Tuple[str, str], None] = {}
        for entity in self.index:
            features.setdefault((entity.component_name, entity.component_feature), None)

        for component, feature in sorted(features):
            for suggestion in self.index.migration_suggestions(component, feature):
                result.add_warning(f"{component} {feature}: {suggestion.lstrip('* ')}")

    def run(self) -> ValidationResult:
        result = ValidationResult()

        self.check_duplicates(result)
        for entity in self.index:
            self.check_columns(entity, result)
            self.check_naming(entity, result)
        self.check_migrations(result)

        logger.debug(
            f"Metadata health check: {len(result.errors)} error(s), {len(result.warnings)} warning(s)"
        )
        return result
