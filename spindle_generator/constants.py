"""
Centralized constants for Spindle Generator.

This module holds the configuration defaults and every lookup table the
derivation engine consults: type aliases, type priorities, native database
type names, plural exceptions and reserved words. Tables are immutable
mappings built once at import time and passed by reference to the
components that use them.
"""

from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping


# =============================================================================
# CORE CONFIGURATION
# =============================================================================

class DefaultConfig:
    """Default configuration values."""

    PLATFORM_NAME = "Platform"
    TEMPLATE_FOLDER = "./templates"
    OUTPUT_FOLDER = "./generated"

    TEMPLATE_ENGINE = "placeholder"
    STRICT_TEMPLATES = False
    STRIP_IDENTIFIER_SUFFIX = True
    OUTPUT_ENTITY_FRAMEWORK6 = False
    MAX_WORKERS = 4
    CONTINUE_ON_ERROR = False


class SupportedDatabases:
    """Supported database engines."""

    POSTGRESQL = 'django.db.backends.postgresql'
    SQLITE = 'django.db.backends.sqlite3'
    SQLSERVER = 'mssql'

    ALL = [POSTGRESQL, SQLITE, SQLSERVER]


class MetadataNaming:
    """Column naming conventions of the metadata table."""

    SNAKE_CASE = "snake_case"
    PASCAL_CASE = "PascalCase"

    DEFAULT_TABLES: Dict[str, str] = {
        SNAKE_CASE: "metadata.t_entity",
        PASCAL_CASE: "metadata.TEntity",
    }

    # Field -> (snake_case column, PascalCase column)
    COLUMNS: Dict[str, tuple] = {
        "component_type": ("component_type", "ComponentType"),
        "component_name": ("component_name", "ComponentName"),
        "component_feature": ("component_feature", "ComponentFeature"),
        "entity_name": ("entity_name", "EntityName"),
        "collection_slug": ("collection_slug", "CollectionSlug"),
        "collection_key": ("collection_key", "CollectionKey"),
        "storage_structure": ("storage_structure", "StorageStructure"),
        "storage_schema": ("storage_schema", "StorageSchema"),
        "storage_table": ("storage_table", "StorageTable"),
        "storage_key": ("storage_key", "StorageKey"),
        "storage_table_rename": ("storage_table_rename", "StorageTableRename"),
    }

    # Older metadata tables call the feature column "part".
    LEGACY_COLUMNS: Dict[str, tuple] = {
        "component_feature": ("component_part", "ComponentPart"),
    }


# Value used by metadata rows for "no value" in namespace and path segments.
PLACEHOLDER_SEGMENT = "-"


# =============================================================================
# SEMANTIC TYPES
# =============================================================================

class SemanticType(Enum):
    """Language-neutral column types the generator knows how to name."""

    GUID = "guid"
    BOOLEAN = "boolean"
    BYTE = "byte"
    SBYTE = "sbyte"
    INT16 = "int16"
    UINT16 = "uint16"
    INT32 = "int32"
    UINT32 = "uint32"
    INT64 = "int64"
    UINT64 = "uint64"
    SINGLE = "single"
    DOUBLE = "double"
    DECIMAL = "decimal"
    CHAR = "char"
    STRING = "string"
    DATETIME = "datetime"
    DATETIME_OFFSET = "datetime_offset"
    BINARY = "binary"
    OBJECT = "object"


TYPE_ALIASES: Mapping[SemanticType, str] = MappingProxyType({
    SemanticType.BOOLEAN: "bool",
    SemanticType.BYTE: "byte",
    SemanticType.BINARY: "byte[]",
    SemanticType.CHAR: "char",
    SemanticType.DATETIME: "DateTime",
    SemanticType.DATETIME_OFFSET: "DateTimeOffset",
    SemanticType.DECIMAL: "decimal",
    SemanticType.DOUBLE: "double",
    SemanticType.SINGLE: "float",
    SemanticType.GUID: "Guid",
    SemanticType.INT32: "int",
    SemanticType.INT64: "long",
    SemanticType.OBJECT: "object",
    SemanticType.SBYTE: "sbyte",
    SemanticType.INT16: "short",
    SemanticType.STRING: "string",
    SemanticType.UINT32: "uint",
    SemanticType.UINT64: "ulong",
    SemanticType.UINT16: "ushort",
})

# Declaration order: identifiers first, binary payloads last.
TYPE_PRIORITY: Mapping[SemanticType, int] = MappingProxyType({
    SemanticType.GUID: 0,
    SemanticType.BOOLEAN: 1,
    SemanticType.STRING: 2,
    SemanticType.INT32: 3,
    SemanticType.INT64: 4,
    SemanticType.DECIMAL: 5,
    SemanticType.DOUBLE: 6,
    SemanticType.DATETIME_OFFSET: 7,
    SemanticType.DATETIME: 8,
    SemanticType.BINARY: 9,
})

# Types rendered as reference types (no "?" suffix outside core entities).
REFERENCE_TYPES: FrozenSet[SemanticType] = frozenset({
    SemanticType.STRING,
    SemanticType.BINARY,
})

# Native column type names (information_schema / PRAGMA, lowercased,
# without length arguments) to semantic types.
NATIVE_TYPE_MAP: Mapping[str, SemanticType] = MappingProxyType({
    # Identifiers
    "uuid": SemanticType.GUID,
    "uniqueidentifier": SemanticType.GUID,
    # Booleans
    "boolean": SemanticType.BOOLEAN,
    "bool": SemanticType.BOOLEAN,
    "bit": SemanticType.BOOLEAN,
    # Integers
    "tinyint": SemanticType.BYTE,
    "smallint": SemanticType.INT16,
    "int2": SemanticType.INT16,
    "integer": SemanticType.INT32,
    "int": SemanticType.INT32,
    "int4": SemanticType.INT32,
    "serial": SemanticType.INT32,
    "bigint": SemanticType.INT64,
    "int8": SemanticType.INT64,
    "bigserial": SemanticType.INT64,
    # Fractional numbers
    "real": SemanticType.SINGLE,
    "float4": SemanticType.SINGLE,
    "double precision": SemanticType.DOUBLE,
    "double": SemanticType.DOUBLE,
    "float": SemanticType.DOUBLE,
    "float8": SemanticType.DOUBLE,
    "numeric": SemanticType.DECIMAL,
    "decimal": SemanticType.DECIMAL,
    "money": SemanticType.DECIMAL,
    "smallmoney": SemanticType.DECIMAL,
    # Text
    "character varying": SemanticType.STRING,
    "varchar": SemanticType.STRING,
    "nvarchar": SemanticType.STRING,
    "character": SemanticType.STRING,
    "char": SemanticType.STRING,
    "nchar": SemanticType.STRING,
    "text": SemanticType.STRING,
    "ntext": SemanticType.STRING,
    "citext": SemanticType.STRING,
    "json": SemanticType.STRING,
    "jsonb": SemanticType.STRING,
    "xml": SemanticType.STRING,
    # Date and time
    "timestamp with time zone": SemanticType.DATETIME_OFFSET,
    "timestamptz": SemanticType.DATETIME_OFFSET,
    "datetimeoffset": SemanticType.DATETIME_OFFSET,
    "timestamp without time zone": SemanticType.DATETIME,
    "timestamp": SemanticType.DATETIME,
    "datetime": SemanticType.DATETIME,
    "datetime2": SemanticType.DATETIME,
    "smalldatetime": SemanticType.DATETIME,
    "date": SemanticType.DATETIME,
    # Binary
    "bytea": SemanticType.BINARY,
    "varbinary": SemanticType.BINARY,
    "binary": SemanticType.BINARY,
    "image": SemanticType.BINARY,
    "blob": SemanticType.BINARY,
})

# Native types that store unicode text; others get IsUnicode(false).
UNICODE_NATIVE_TYPES: FrozenSet[str] = frozenset({"nvarchar"})


# =============================================================================
# NAMING CONVENTIONS
# =============================================================================

IRREGULAR_PLURALS: Mapping[str, str] = MappingProxyType({
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "tooth": "teeth",
    "foot": "feet",
    "mouse": "mice",
    "goose": "geese",
})

INVARIANT_PLURALS: FrozenSet[str] = frozenset({
    "sheep", "fish", "deer", "moose", "series", "species",
    "money", "rice", "information", "equipment",
})

VOWELS = "aeiouAEIOU"

# Reserved words of the generated language; escaped with VERBATIM_PREFIX.
RESERVED_WORDS: FrozenSet[str] = frozenset({
    "abstract", "as", "base", "bool", "break", "byte", "case", "catch",
    "char", "checked", "class", "const", "continue", "decimal", "default",
    "delegate", "do", "double", "else", "enum", "event", "explicit",
    "extern", "false", "finally", "fixed", "float", "for", "foreach",
    "goto", "if", "implicit", "in", "int", "interface", "internal", "is",
    "lock", "long", "namespace", "new", "null", "object", "operator",
    "out", "override", "params", "private", "protected", "public",
    "readonly", "ref", "return", "sbyte", "sealed", "short", "sizeof",
    "stackalloc", "static", "string", "struct", "switch", "this", "throw",
    "true", "try", "typeof", "uint", "ulong", "unchecked", "unsafe",
    "ushort", "using", "virtual", "void", "volatile", "while",
})

VERBATIM_PREFIX = "@"

# Checked in this order when stripping identifier suffixes from variables.
IDENTIFIER_SUFFIXES: List[str] = ["Id", "Identifier"]

ROUTE_BOUND_ANNOTATION = "[FromRoute] "


# =============================================================================
# GENERATION LAYOUT
# =============================================================================

class Layers:
    """Top-level output folders of the generated solution."""

    CONTRACT = "Contract"
    SERVICE = "Service"
    SERVICE_EF6 = "Service.EF6"
    API = "Api"
    CONTRACT_TEST = "Contract.Test"
    COMMON = "Common"

    # Sub-folders that receive a README per component feature.
    README_LAYERS: List[str] = ["Data", "State", "Process", "UI"]


class QueryNames:
    """Query artifacts generated per entity."""

    ITEM: List[str] = ["Assert", "Retrieve"]
    LIST: List[str] = ["Collect", "Count", "Search"]
    BASE_OBJECTS: List[str] = ["Criteria", "Match", "Model"]

    ALL: List[str] = ITEM + LIST + BASE_OBJECTS


class CommandNames:
    """Command artifacts generated per entity."""

    ALL: List[str] = ["Create", "Modify", "Delete"]


class PolicyRoutes:
    """Route suffixes published in the policies artifact."""

    QUERIES: List[str] = ["Assert", "Retrieve", "Collect", "Count", "Search", "Download"]
    COMMANDS: List[str] = ["Create", "Delete", "Modify"]


INDENT = "    "
NEWLINE = "\n"
