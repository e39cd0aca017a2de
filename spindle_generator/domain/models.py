"""
Core domain models for Spindle Generator.

These models represent the metadata the generator works from: entities read
from the metadata table, column descriptors read from the live schema, and
the tagged results of entity lookups. They are independent of any database
driver or template engine.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from ..constants import PLACEHOLDER_SEGMENT, REFERENCE_TYPES, SemanticType
from ..exceptions import raise_metadata_error


class ComponentType(Enum):
    """Kinds of component an entity belongs to."""

    APPLICATION = "Application"
    PLUGIN = "Plugin"
    UTILITY = "Utility"

    @classmethod
    def parse(cls, value: Any, entity: str = None) -> "ComponentType":
        return _parse_enum(cls, value, "component type", entity)


class StorageStructure(Enum):
    """Kinds of database object backing an entity."""

    TABLE = "Table"
    VIEW = "View"
    PROCEDURE = "Procedure"
    PROJECTION = "Projection"

    @classmethod
    def parse(cls, value: Any, entity: str = None) -> "StorageStructure":
        return _parse_enum(cls, value, "storage structure", entity)

    @property
    def prefix(self) -> str:
        """Single-letter prefix used in storage names (TInvoice, VInvoice, ...)."""
        return {
            StorageStructure.TABLE: "T",
            StorageStructure.VIEW: "V",
            StorageStructure.PROCEDURE: "P",
            StorageStructure.PROJECTION: "Q",
        }[self]

    @property
    def is_writable(self) -> bool:
        return self is StorageStructure.TABLE


class PropertyScope(Enum):
    """Which columns of an entity a property list covers."""

    ALL = "all"
    ONLY_KEY = "only_key"
    EXCLUDE_KEY = "exclude_key"


def _parse_enum(enum_cls, value, label: str, entity: Optional[str]):
    if isinstance(value, enum_cls):
        return value

    text = str(value or "").strip()
    for member in enum_cls:
        if member.value.lower() == text.lower():
            return member

    raise_metadata_error(
        f"Unrecognized {label} '{value}'",
        entity=entity,
        suggestions=[f"Use one of: {', '.join(m.value for m in enum_cls)}"],
    )


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


@dataclass(frozen=True)
class ColumnDescriptor:
    """
    A column of a live table, as reported by the database.

    Descriptors are fetched once per entity for each generation call and are
    never cached across entities.
    """

    name: str
    semantic_type: SemanticType
    nullable: bool = True
    max_length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    native_type: Optional[str] = None
    ordinal: int = 0

    @property
    def is_string(self) -> bool:
        return self.semantic_type is SemanticType.STRING

    @property
    def is_binary(self) -> bool:
        return self.semantic_type is SemanticType.BINARY

    @property
    def is_reference_type(self) -> bool:
        return self.semantic_type in REFERENCE_TYPES

    @property
    def is_decimal(self) -> bool:
        return self.semantic_type is SemanticType.DECIMAL


@dataclass(frozen=True)
class Entity:
    """
    One generated business object, as described by a metadata row.

    Enum fields accept their string values and are converted on construction.
    The storage key is an ordered, comma-delimited column list; its order
    fixes argument order in every generated artifact.
    """

    component_type: ComponentType
    component_name: str
    component_feature: str
    entity_name: str
    collection_slug: str
    collection_key: str
    storage_structure: StorageStructure
    storage_schema: str
    storage_table: str
    storage_key: str
    storage_table_rename: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(
            self, "component_type", ComponentType.parse(self.component_type, self.entity_name)
        )
        object.__setattr__(
            self, "storage_structure", StorageStructure.parse(self.storage_structure, self.entity_name)
        )

        if _is_blank(self.storage_key):
            raise_metadata_error(
                "Entity has an empty storage key",
                entity=self.entity_name,
                table=self.storage_table,
                suggestions=["Set storage_key to the comma-delimited key columns of the table"],
            )

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Entity":
        """Build an entity from a metadata row keyed by field name."""

        def text(key: str) -> str:
            value = row.get(key)
            return "" if value is None else str(value)

        rename = row.get("storage_table_rename")
        return cls(
            component_type=text("component_type"),
            component_name=text("component_name"),
            component_feature=text("component_feature"),
            entity_name=text("entity_name"),
            collection_slug=text("collection_slug"),
            collection_key=text("collection_key"),
            storage_structure=text("storage_structure"),
            storage_schema=text("storage_schema"),
            storage_table=text("storage_table"),
            storage_key=text("storage_key"),
            storage_table_rename=None if rename is None else str(rename),
        )

    @property
    def lookup_key(self) -> Tuple[str, str, str]:
        return (self.component_name, self.component_feature, self.entity_name)

    @property
    def storage_key_columns(self) -> List[str]:
        return [column.strip() for column in self.storage_key.split(",")]

    @property
    def storage_key_size(self) -> int:
        return len(self.storage_key_columns)

    @property
    def storage_structure_prefix(self) -> str:
        return self.storage_structure.prefix

    @property
    def storage_name(self) -> str:
        return self.storage_structure_prefix + self.entity_name

    @property
    def is_projection(self) -> bool:
        return self.storage_structure is StorageStructure.PROJECTION

    def collection_path(self) -> str:
        """
        URL path of the entity's collection.

        Plugins nest the collection under their feature, dropping a slug prefix
        that repeats the feature name (``billing/invoices/invoices-open`` would
        read ``billing/invoices/open``). Everything else is ``component/slug``.
        """
        if _is_blank(self.component_name) or _is_blank(self.collection_slug):
            return ""

        component = self.component_name.lower()
        slug = self.collection_slug

        if self.component_type is not ComponentType.PLUGIN or _is_blank(self.component_feature):
            return f"{component}/{slug}"

        feature = self.component_feature.lower()
        redundant = f"{feature}-"
        if slug.lower().startswith(redundant):
            slug = slug[len(redundant):]

        return f"{component}/{feature}/{slug}"

    def namespace(self) -> str:
        """Dotted component.feature.entity path, skipping blank or placeholder parts."""
        parts = [self.component_name]
        for part in (self.component_feature, self.entity_name):
            if not _is_blank(part) and part != PLACEHOLDER_SEGMENT:
                parts.append(part)
        return ".".join(part for part in parts if not _is_blank(part))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'component_type': self.component_type.value,
            'component_name': self.component_name,
            'component_feature': self.component_feature,
            'entity_name': self.entity_name,
            'collection_slug': self.collection_slug,
            'collection_key': self.collection_key,
            'storage_structure': self.storage_structure.value,
            'storage_schema': self.storage_schema,
            'storage_table': self.storage_table,
            'storage_key': self.storage_key,
            'storage_table_rename': self.storage_table_rename,
        }


@dataclass(frozen=True)
class LookupFound:
    entity: Entity


@dataclass(frozen=True)
class LookupNotFound:
    key: Tuple[str, str, str]


@dataclass(frozen=True)
class LookupAmbiguous:
    key: Tuple[str, str, str]
    count: int


LookupResult = Union[LookupFound, LookupNotFound, LookupAmbiguous]
