"""
Read-only indexed view over the entity metadata collection.

The index is built once per generation run and never mutated afterwards, so
it can be shared between worker threads without locking.
"""

from typing import Iterable, Iterator, List, Optional, Tuple

from ..exceptions import LookupAmbiguousError, LookupNotFoundError
from .models import (
    Entity,
    LookupAmbiguous,
    LookupFound,
    LookupNotFound,
    LookupResult,
    StorageStructure,
)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class EntityMetadataIndex:
    """
    Ordered, immutable collection of entities with sorted distinct views.

    Example:
        >>> index = EntityMetadataIndex(entities)
        >>> index.components()
        ['Billing', 'Shipping']
        >>> index.get("Billing", "Invoices", "Invoice").storage_table
        'invoice'
    """

    def __init__(self, entities: Iterable[Entity]):
        self._entities: Tuple[Entity, ...] = tuple(entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self._entities)

    def __len__(self) -> int:
        return len(self._entities)

    def __repr__(self) -> str:
        return f"EntityMetadataIndex({len(self._entities)} entities)"

    def components(self) -> List[str]:
        return sorted({entity.component_name for entity in self._entities})

    def features(self, component: str) -> List[str]:
        if _is_blank(component):
            return []
        return sorted({
            entity.component_feature
            for entity in self._entities
            if entity.component_name == component
        })

    def entities(self, component: str, feature: str) -> List[str]:
        if _is_blank(component) or _is_blank(feature):
            return []
        return sorted({
            entity.entity_name
            for entity in self._entities
            if entity.component_name == component and entity.component_feature == feature
        })

    def _matches(self, component: str, feature: str, entity: str) -> List[Entity]:
        key = (component, feature, entity)
        return [item for item in self._entities if item.lookup_key == key]

    def lookup(self, component: str, feature: str, entity: str) -> LookupResult:
        """Resolve a lookup key to a tagged result without raising."""
        key = (component, feature, entity)
        if any(_is_blank(part) for part in key):
            return LookupNotFound(key)

        matches = self._matches(component, feature, entity)
        if not matches:
            return LookupNotFound(key)
        if len(matches) > 1:
            return LookupAmbiguous(key, len(matches))
        return LookupFound(matches[0])

    def get(self, component: str, feature: str, entity: str) -> Entity:
        """
        Return the unique entity for a lookup key.

        Raises:
            ValueError: If any part of the key is blank
            LookupNotFoundError: If no entity matches
            LookupAmbiguousError: If several entities match
        """
        for label, value in (("Component", component), ("Feature", feature), ("Entity", entity)):
            if _is_blank(value):
                raise ValueError(f"{label} name cannot be empty.")

        result = self.lookup(component, feature, entity)
        if isinstance(result, LookupAmbiguous):
            raise LookupAmbiguousError(result.key, result.count)
        if isinstance(result, LookupNotFound):
            raise LookupNotFoundError(result.key)
        return result.entity

    def try_get(self, component: str, feature: str, entity: str) -> Optional[Entity]:
        result = self.lookup(component, feature, entity)
        if isinstance(result, LookupFound):
            return result.entity
        return None

    def migration_suggestions(self, component: str, feature: str) -> List[str]:
        """
        Schema changes that would align the storage of a feature with naming conventions.

        Tables are expected to live in a schema named after the lowercased
        component, and to carry their rename target when one is recorded.
        """
        if _is_blank(component) or _is_blank(feature):
            return []

        target_schema = component.lower()
        in_scope = sorted(
            (
                entity for entity in self._entities
                if entity.component_name == component and entity.component_feature == feature
            ),
            key=lambda entity: (entity.storage_table, entity.storage_schema),
        )

        suggestions: List[str] = []
        for entity in in_scope:
            if entity.storage_schema.lower() != target_schema:
                suggestions.append(
                    f"* Move table `{entity.storage_table}` from schema "
                    f"`{entity.storage_schema}` to schema `{target_schema}`."
                )

            rename = entity.storage_table_rename
            if not _is_blank(rename) and rename != entity.storage_table:
                suggestions.append(f"* Rename table from `{entity.storage_table}` to `{rename}`.")

        return list(dict.fromkeys(suggestions))

    def filter(self, *structures: StorageStructure) -> "EntityMetadataIndex":
        """Return a new index restricted to the given storage structures."""
        if not structures:
            return self
        wanted = set(structures)
        return EntityMetadataIndex(e for e in self._entities if e.storage_structure in wanted)
