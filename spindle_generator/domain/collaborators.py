"""
Interfaces of the generator's external collaborators.

The derivation engine only ever talks to a database, a template renderer and
an output sink through these protocols, so that each can be replaced (by a
different engine, or by an in-memory fake in tests) without touching the
naming and projection code.
"""

from typing import List, Mapping, Optional, Protocol, runtime_checkable

from .models import ColumnDescriptor, Entity, StorageStructure


@runtime_checkable
class Database(Protocol):
    """Source of entity metadata and live column descriptors."""

    def list_entities(self, structure: Optional[StorageStructure] = None) -> List[Entity]:
        """Entities sorted by (component, feature, entity), optionally of one structure."""
        ...

    def columns_of(self, schema: str, table: str) -> List[ColumnDescriptor]:
        """Columns of a table in ordinal order."""
        ...

    def native_type_name(self, table: str, column: str) -> Optional[str]:
        ...

    def column_precision(self, table: str, column: str) -> Optional[int]:
        ...

    def column_scale(self, table: str, column: str) -> Optional[int]:
        ...


@runtime_checkable
class TemplateRenderer(Protocol):
    """Turns a template id and a substitution context into text."""

    def render(self, template_id: str, context: Mapping[str, str]) -> str:
        ...


@runtime_checkable
class OutputWriter(Protocol):
    """Persists rendered text at a path relative to the output root."""

    def write(self, path: str, text: str) -> None:
        ...
