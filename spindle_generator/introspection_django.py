"""
Database collaborator built on Django's database connections.

Django is configured once with the DATABASES of the tool configuration and
used purely as a driver layer: entity metadata comes from the metadata
table, column descriptors from ``information_schema.columns`` (PostgreSQL,
SQL Server) or ``PRAGMA table_info`` (SQLite).
"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import django
from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, DatabaseError, connections

from .constants import NATIVE_TYPE_MAP, MetadataNaming, SemanticType
from .domain.models import ColumnDescriptor, Entity, StorageStructure
from .exceptions import (
    DatabaseConnectionError,
    MetadataInconsistencyError,
    raise_unsupported_type,
)

logger = logging.getLogger(__name__)

# --- Django Setup Helper ---
_django_setup_done = False


def setup_django(db_settings: Dict[str, Any], secret_key: str):
    """Configures minimal Django settings and runs django.setup()."""
    global _django_setup_done
    if _django_setup_done or settings.configured:
        logger.debug("Django setup already performed.")
        _django_setup_done = True
        return

    logger.info("Configuring Django settings for metadata access...")
    plain_db_settings: Dict[str, Dict[str, Any]] = {}
    for alias, db_model in db_settings.items():
        if hasattr(db_model, "to_django"):
            plain_db_settings[alias] = db_model.to_django()
        elif isinstance(db_model, dict):
            plain_db_settings[alias] = db_model
        else:
            raise TypeError(f"Invalid database settings type for alias '{alias}': {type(db_model).__name__}")

    settings.configure(
        SECRET_KEY=secret_key,
        DATABASES=plain_db_settings,
        TIME_ZONE='UTC',
        USE_TZ=True,
        DEFAULT_AUTO_FIELD='django.db.models.BigAutoField',
    )
    django.setup()
    _django_setup_done = True
    logger.info("Django setup complete.")


TYPE_ARGUMENTS = re.compile(r"^\s*([^(]+?)\s*(?:\(([^)]*)\))?\s*$")


def parse_declared_type(declared: str) -> Tuple[str, List[int]]:
    """
    Split a declared column type into its base name and numeric arguments.

    Example:
        >>> parse_declared_type("DECIMAL(10, 2)")
        ('decimal', [10, 2])
        >>> parse_declared_type("varchar(max)")
        ('varchar', [-1])
    """
    match = TYPE_ARGUMENTS.match(declared or "")
    if not match:
        return (declared or "").strip().lower(), []

    base = match.group(1).lower()
    arguments = []
    for raw in (match.group(2) or "").split(","):
        raw = raw.strip().lower()
        if raw.isdigit():
            arguments.append(int(raw))
        elif raw == "max":
            arguments.append(-1)
    return base, arguments


def semantic_type_of(native_type: str, column: str = None):
    try:
        return NATIVE_TYPE_MAP[native_type.lower()]
    except KeyError:
        raise_unsupported_type(
            f"Column type '{native_type}' is not supported",
            type_name=native_type,
            column=column,
        )


class DjangoDatabase:
    """
    Reads entity metadata and column descriptors through a Django connection.

    Args:
        metadata_table: Qualified name of the metadata table
        metadata_naming: 'snake_case' or 'PascalCase' column naming of that table
        alias: Django database alias
    """

    INFORMATION_SCHEMA_VENDORS = ("postgresql", "microsoft")
    COLUMN_ATTRIBUTES = ("data_type", "numeric_precision", "numeric_scale")

    def __init__(
        self,
        metadata_table: str,
        metadata_naming: str = MetadataNaming.SNAKE_CASE,
        alias: str = DEFAULT_DB_ALIAS,
    ):
        if not _django_setup_done:
            raise RuntimeError("Django has not been set up. Call setup_django() first.")
        self.metadata_table = metadata_table
        self.metadata_naming = metadata_naming
        self.alias = alias

    @classmethod
    def from_config(cls, config) -> "DjangoDatabase":
        setup_django(config.databases, config.SECRET_KEY)
        return cls(config.metadata_table, config.metadata_naming)

    @property
    def connection(self):
        return connections[self.alias]

    @property
    def vendor(self) -> str:
        return self.connection.vendor

    def _quote_qualified(self, name: str) -> str:
        quote = self.connection.ops.quote_name
        return ".".join(quote(part) for part in name.split("."))

    def _metadata_column(self, field: str) -> str:
        index = 1 if self.metadata_naming == MetadataNaming.PASCAL_CASE else 0
        return MetadataNaming.COLUMNS[field][index]

    def _fetch(self, sql: str, params=None) -> Tuple[List[str], List[tuple]]:
        try:
            with self.connection.cursor() as cursor:
                cursor.execute(sql, params)
                names = [column[0] for column in cursor.description or []]
                return names, cursor.fetchall()
        except DatabaseError as e:
            settings_dict = self.connection.settings_dict
            raise DatabaseConnectionError(
                f"Database query failed: {e}",
                engine=settings_dict.get("ENGINE"),
                context={"query": " ".join(sql.split())},
            ) from e

    # --- Entities ---

    def _row_to_fields(self, names: List[str], row: tuple) -> Dict[str, Any]:
        by_name = {name.lower(): value for name, value in zip(names, row)}
        fields = {}
        for field, candidates in MetadataNaming.COLUMNS.items():
            legacy = MetadataNaming.LEGACY_COLUMNS.get(field, ())
            for candidate in (*candidates, *legacy):
                if candidate.lower() in by_name:
                    fields[field] = by_name[candidate.lower()]
                    break
        return fields

    def list_entities(self, structure: Optional[StorageStructure] = None) -> List[Entity]:
        """
        Entities of the metadata table, sorted by component, feature and entity.

        Rows may name the feature column ``component_part`` (older tables).
        """
        sql = f"SELECT * FROM {self._quote_qualified(self.metadata_table)}"
        params = None
        if structure is not None:
            sql += f" WHERE {self._metadata_column('storage_structure')} = %s"
            params = [structure.value]

        names, rows = self._fetch(sql, params)
        entities = [Entity.from_row(self._row_to_fields(names, row)) for row in rows]
        entities.sort(key=lambda entity: entity.lookup_key)
        logger.debug(f"Loaded {len(entities)} entities from {self.metadata_table}")
        return entities

    # --- Columns ---

    def _describe_information_schema(self, schema: str, table: str) -> List[ColumnDescriptor]:
        names, rows = self._fetch(
            """
            SELECT column_name, data_type, is_nullable, character_maximum_length,
                   numeric_precision, numeric_scale, ordinal_position
            FROM information_schema.columns
            WHERE table_schema = %s AND table_name = %s
            ORDER BY ordinal_position
            """,
            [schema, table],
        )
        columns = []
        for name, data_type, is_nullable, max_length, precision, scale, ordinal in rows:
            columns.append(ColumnDescriptor(
                name=name,
                semantic_type=semantic_type_of(data_type, name),
                nullable=str(is_nullable).upper() == "YES",
                max_length=max_length,
                precision=precision,
                scale=scale,
                native_type=data_type.lower(),
                ordinal=ordinal,
            ))
        return columns

    def _describe_sqlite(self, table: str) -> List[ColumnDescriptor]:
        _, rows = self._fetch(f"PRAGMA table_info({self.connection.ops.quote_name(table)})")
        columns = []
        for cid, name, declared, not_null, _default, pk in rows:
            native, arguments = parse_declared_type(declared)
            semantic_type = semantic_type_of(native, name)
            max_length = precision = scale = None
            if semantic_type is SemanticType.STRING and arguments:
                max_length = arguments[0]
            elif semantic_type is SemanticType.DECIMAL and len(arguments) == 2:
                precision, scale = arguments
            columns.append(ColumnDescriptor(
                name=name,
                semantic_type=semantic_type,
                nullable=not (not_null or pk),
                max_length=max_length,
                precision=precision,
                scale=scale,
                native_type=native,
                ordinal=cid + 1,
            ))
        return columns

    def columns_of(self, schema: str, table: str) -> List[ColumnDescriptor]:
        """
        Column descriptors of a table in ordinal order.

        Raises:
            MetadataInconsistencyError: If the table has no columns (does not exist)
            UnsupportedTypeError: If a column type has no semantic mapping
        """
        if not schema or not table:
            raise ValueError("Schema and table names cannot be empty")

        if self.vendor in self.INFORMATION_SCHEMA_VENDORS:
            columns = self._describe_information_schema(schema, table)
        else:
            columns = self._describe_sqlite(table)

        if not columns:
            raise MetadataInconsistencyError(
                f"Table not found: {schema}.{table}",
                table=f"{schema}.{table}",
            )
        return columns

    def _column_attribute(self, table: str, column: str, attribute: str) -> Any:
        if attribute not in self.COLUMN_ATTRIBUTES:
            raise ValueError(f"Unknown column attribute: {attribute}")

        if self.vendor in self.INFORMATION_SCHEMA_VENDORS:
            _, rows = self._fetch(
                f"SELECT {attribute} FROM information_schema.columns "
                "WHERE table_name = %s AND column_name = %s",
                [table, column],
            )
            return rows[0][0] if rows else None

        for descriptor in self._describe_sqlite(table):
            if descriptor.name == column:
                return {
                    "data_type": descriptor.native_type,
                    "numeric_precision": descriptor.precision,
                    "numeric_scale": descriptor.scale,
                }[attribute]
        return None

    def native_type_name(self, table: str, column: str) -> Optional[str]:
        value = self._column_attribute(table, column, "data_type")
        return None if value is None else str(value).lower()

    def column_precision(self, table: str, column: str) -> Optional[int]:
        value = self._column_attribute(table, column, "numeric_precision")
        return None if value is None else int(value)

    def column_scale(self, table: str, column: str) -> Optional[int]:
        value = self._column_attribute(table, column, "numeric_scale")
        return None if value is None else int(value)
