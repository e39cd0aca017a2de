# File: tests/conftest.py
# Shared fixtures: sample entities, their live columns, and an in-memory
# Database that serves them.

import threading
from collections import Counter
from typing import Dict, List, Optional, Tuple

import pytest

from spindle_generator.constants import SemanticType
from spindle_generator.domain.models import ColumnDescriptor, Entity, StorageStructure
from spindle_generator.exceptions import MetadataInconsistencyError


def column(name, semantic_type, nullable=False, ordinal=0, **kwargs) -> ColumnDescriptor:
    return ColumnDescriptor(name=name, semantic_type=semantic_type, nullable=nullable, ordinal=ordinal, **kwargs)


def entity(**overrides) -> Entity:
    fields = dict(
        component_type="Application",
        component_name="Billing",
        component_feature="Invoices",
        entity_name="Invoice",
        collection_slug="invoices",
        collection_key="invoice",
        storage_structure="Table",
        storage_schema="billing",
        storage_table="invoice",
        storage_key="invoice_id",
        storage_table_rename=None,
    )
    fields.update(overrides)
    return Entity(**fields)


INVOICE_COLUMNS = [
    column("invoice_id", SemanticType.INT32, ordinal=1, native_type="int"),
    column("customer_name", SemanticType.STRING, ordinal=2, max_length=100, native_type="varchar"),
    column("total", SemanticType.DECIMAL, nullable=True, ordinal=3, precision=10, scale=2, native_type="decimal"),
    column("created_at", SemanticType.DATETIME_OFFSET, ordinal=4, native_type="datetimeoffset"),
    column("notes", SemanticType.STRING, nullable=True, ordinal=5, max_length=-1, native_type="nvarchar"),
]

INVOICE_LINE_COLUMNS = [
    column("invoice_id", SemanticType.INT32, ordinal=1),
    column("line_number", SemanticType.INT32, ordinal=2),
    column("amount", SemanticType.DECIMAL, ordinal=3, precision=12, scale=4),
]

SUMMARY_COLUMNS = [
    column("invoice_id", SemanticType.INT32, ordinal=1),
    column("total", SemanticType.DECIMAL, nullable=True, ordinal=2),
]

EVENT_COLUMNS = [
    column("event_id", SemanticType.INT64, ordinal=1),
    column("title", SemanticType.STRING, ordinal=2, max_length=200, native_type="varchar"),
]

OPEN_INVOICE_COLUMNS = [
    column("invoice_id", SemanticType.INT32, ordinal=1),
    column("customer_name", SemanticType.STRING, nullable=True, ordinal=2),
]


class FakeDatabase:
    """In-memory Database collaborator; counts column fetches per table."""

    def __init__(
        self,
        entities: List[Entity],
        tables: Dict[Tuple[str, str], List[ColumnDescriptor]],
    ):
        self.entities = list(entities)
        self.tables = dict(tables)
        self.column_fetches: Counter = Counter()
        self._lock = threading.Lock()

    def list_entities(self, structure: Optional[StorageStructure] = None) -> List[Entity]:
        selected = [e for e in self.entities if structure is None or e.storage_structure is structure]
        return sorted(selected, key=lambda e: e.lookup_key)

    def columns_of(self, schema: str, table: str) -> List[ColumnDescriptor]:
        with self._lock:
            self.column_fetches[(schema, table)] += 1
        try:
            return list(self.tables[(schema, table)])
        except KeyError:
            raise MetadataInconsistencyError(f"Table not found: {schema}.{table}", table=f"{schema}.{table}")

    def _column(self, table: str, name: str) -> Optional[ColumnDescriptor]:
        for (_, table_name), columns in self.tables.items():
            if table_name == table:
                for descriptor in columns:
                    if descriptor.name == name:
                        return descriptor
        return None

    def native_type_name(self, table: str, column: str) -> Optional[str]:
        descriptor = self._column(table, column)
        return descriptor.native_type if descriptor else None

    def column_precision(self, table: str, column: str) -> Optional[int]:
        descriptor = self._column(table, column)
        return descriptor.precision if descriptor else None

    def column_scale(self, table: str, column: str) -> Optional[int]:
        descriptor = self._column(table, column)
        return descriptor.scale if descriptor else None


@pytest.fixture
def make_entity():
    return entity


@pytest.fixture
def make_column():
    return column


@pytest.fixture
def invoice_entity() -> Entity:
    return entity()


@pytest.fixture
def invoice_columns() -> List[ColumnDescriptor]:
    return list(INVOICE_COLUMNS)


@pytest.fixture
def event_entity() -> Entity:
    return entity(
        component_name="Calendar",
        component_feature="Events",
        entity_name="Event",
        collection_slug="events",
        collection_key="event",
        storage_schema="calendar",
        storage_table="event",
        storage_key="event_id",
    )


@pytest.fixture
def sample_entities(invoice_entity, event_entity) -> List[Entity]:
    return [
        invoice_entity,
        entity(
            entity_name="InvoiceLine",
            collection_slug="invoice-lines",
            storage_schema="dbo",
            storage_table="invoice_line",
            storage_key="invoice_id, line_number",
            storage_table_rename="invoice_lines",
        ),
        entity(
            entity_name="InvoiceSummary",
            collection_slug="invoice-summaries",
            storage_structure="Projection",
            storage_table="invoice_summary",
        ),
        entity(
            component_feature="Reports",
            entity_name="OpenInvoice",
            collection_slug="open-invoices",
            storage_structure="View",
            storage_table="v_open_invoice",
        ),
        event_entity,
    ]


@pytest.fixture
def sample_tables() -> Dict[Tuple[str, str], List[ColumnDescriptor]]:
    return {
        ("billing", "invoice"): list(INVOICE_COLUMNS),
        ("dbo", "invoice_line"): list(INVOICE_LINE_COLUMNS),
        ("billing", "invoice_summary"): list(SUMMARY_COLUMNS),
        ("billing", "v_open_invoice"): list(OPEN_INVOICE_COLUMNS),
        ("calendar", "event"): list(EVENT_COLUMNS),
    }


@pytest.fixture
def fake_database(sample_entities, sample_tables) -> FakeDatabase:
    return FakeDatabase(sample_entities, sample_tables)


TEMPLATE_IDS = [
    "Policies",
    *[f"Queries-{name}" for name in ("Assert", "Retrieve", "Collect", "Count", "Search", "Criteria", "Match", "Model")],
    *[f"Commands-{name}" for name in ("Create", "Modify", "Delete")],
    "TableDbContext",
    "Readme",
    "Entity",
    "EntityConfiguration",
    "Entity6",
    "Entity6Configuration",
    "EntityReader",
    "EntityWriter",
    "EntityAdapter",
    "EntityService",
    "Controller",
    "ControllerForProjection",
    "Client",
    "ClientForProjection",
    "ClientTest",
    "Validator",
]


@pytest.fixture
def template_folder(tmp_path):
    """One placeholder template per template id, naming the id and the entity."""
    folder = tmp_path / "templates"
    folder.mkdir()
    for template_id in TEMPLATE_IDS:
        (folder / f"{template_id}.txt").write_text(
            f"// {template_id}\n$EntityName($PrimaryKeyMethodParameters)\n",
            encoding="utf-8",
        )
    return folder
