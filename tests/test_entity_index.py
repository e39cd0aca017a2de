"""
Tests for the entity metadata index.
"""

import pytest

from spindle_generator.domain.entity_index import EntityMetadataIndex
from spindle_generator.domain.models import (
    LookupAmbiguous,
    LookupFound,
    LookupNotFound,
    StorageStructure,
)
from spindle_generator.exceptions import LookupAmbiguousError, LookupNotFoundError


@pytest.fixture
def index(sample_entities):
    return EntityMetadataIndex(sample_entities)


@pytest.fixture
def ambiguous_index(sample_entities, invoice_entity):
    return EntityMetadataIndex(sample_entities + [invoice_entity])


def test_sorted_distinct_views(index):
    assert index.components() == ["Billing", "Calendar"]
    assert index.features("Billing") == ["Invoices", "Reports"]
    assert index.entities("Billing", "Invoices") == ["Invoice", "InvoiceLine", "InvoiceSummary"]


def test_blank_arguments_give_empty_views(index):
    assert index.features("") == []
    assert index.features(None) == []
    assert index.entities("Billing", " ") == []


def test_unknown_component_gives_empty_views(index):
    assert index.features("Shipping") == []
    assert index.entities("Shipping", "Parcels") == []


def test_get(index):
    entity = index.get("Billing", "Invoices", "InvoiceLine")
    assert entity.storage_table == "invoice_line"


def test_get_not_found(index):
    with pytest.raises(LookupNotFoundError):
        index.get("Billing", "Invoices", "Payment")


def test_get_blank_part(index):
    with pytest.raises(ValueError, match="Feature name cannot be empty"):
        index.get("Billing", "", "Invoice")


def test_get_ambiguous(ambiguous_index):
    with pytest.raises(LookupAmbiguousError) as raised:
        ambiguous_index.get("Billing", "Invoices", "Invoice")
    assert raised.value.count == 2
    assert raised.value.key == ("Billing", "Invoices", "Invoice")


def test_lookup_is_tagged(index, ambiguous_index):
    assert isinstance(index.lookup("Billing", "Invoices", "Invoice"), LookupFound)
    assert isinstance(index.lookup("Billing", "Invoices", "Payment"), LookupNotFound)
    assert isinstance(index.lookup("Billing", None, "Invoice"), LookupNotFound)

    result = ambiguous_index.lookup("Billing", "Invoices", "Invoice")
    assert isinstance(result, LookupAmbiguous)
    assert result.count == 2


def test_try_get(index, ambiguous_index):
    assert index.try_get("Calendar", "Events", "Event").storage_key == "event_id"
    assert index.try_get("Calendar", "Events", "Meeting") is None
    assert ambiguous_index.try_get("Billing", "Invoices", "Invoice") is None


def test_migration_suggestions(index):
    assert index.migration_suggestions("Billing", "Invoices") == [
        "* Move table `invoice_line` from schema `dbo` to schema `billing`.",
        "* Rename table from `invoice_line` to `invoice_lines`.",
    ]


def test_migration_suggestions_none_needed(index):
    assert index.migration_suggestions("Calendar", "Events") == []
    assert index.migration_suggestions("Billing", "") == []


def test_filter(index):
    tables = index.filter(StorageStructure.TABLE)
    assert len(tables) == 3
    assert {entity.entity_name for entity in tables} == {"Invoice", "InvoiceLine", "Event"}
    assert len(index.filter(StorageStructure.VIEW, StorageStructure.PROJECTION)) == 2
    assert index.filter() is index
