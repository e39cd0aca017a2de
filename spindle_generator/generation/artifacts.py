"""
Artifact kinds and the plans that describe one rendered file.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple

from ..constants import PLACEHOLDER_SEGMENT
from ..domain.models import StorageStructure


class ArtifactKind(Enum):
    """Categories of generated output."""

    POLICIES = "policies"
    QUERIES = "queries"
    COMMANDS = "commands"
    TABLE_DB_CONTEXT = "table_db_context"
    READMES = "readmes"
    ENTITIES = "entities"
    READERS = "readers"
    WRITERS = "writers"
    ADAPTERS = "adapters"
    SERVICES = "services"
    CONTROLLERS = "controllers"
    CLIENTS = "clients"
    CLIENT_TESTS = "client_tests"
    VALIDATORS = "validators"

    @property
    def is_aggregate(self) -> bool:
        """Aggregate kinds render from the whole index rather than per entity."""
        return self in AGGREGATE_KINDS

    @property
    def structures(self) -> Optional[Tuple[StorageStructure, ...]]:
        """Storage structures the kind applies to; None means all."""
        return KIND_STRUCTURES.get(self)

    @property
    def needs_columns(self) -> bool:
        return self not in COLUMNLESS_KINDS


AGGREGATE_KINDS = frozenset({
    ArtifactKind.POLICIES,
    ArtifactKind.TABLE_DB_CONTEXT,
    ArtifactKind.READMES,
})

COLUMNLESS_KINDS = frozenset({
    ArtifactKind.POLICIES,
    ArtifactKind.TABLE_DB_CONTEXT,
    ArtifactKind.READMES,
    ArtifactKind.VALIDATORS,
})

_CONTRACT_STRUCTURES = (StorageStructure.TABLE, StorageStructure.PROJECTION)

KIND_STRUCTURES: Dict[ArtifactKind, Tuple[StorageStructure, ...]] = {
    ArtifactKind.QUERIES: _CONTRACT_STRUCTURES,
    ArtifactKind.COMMANDS: _CONTRACT_STRUCTURES,
    ArtifactKind.TABLE_DB_CONTEXT: _CONTRACT_STRUCTURES,
}

DEFAULT_SEQUENCE: List[ArtifactKind] = [
    # Contract
    ArtifactKind.POLICIES,
    ArtifactKind.QUERIES,
    ArtifactKind.COMMANDS,
    # Service
    ArtifactKind.TABLE_DB_CONTEXT,
    ArtifactKind.READMES,
    ArtifactKind.ENTITIES,
    ArtifactKind.READERS,
    ArtifactKind.WRITERS,
    ArtifactKind.ADAPTERS,
    ArtifactKind.SERVICES,
    # Api
    ArtifactKind.CONTROLLERS,
]


@dataclass(frozen=True)
class GenerationOptions:
    """Settings of one generation run, taken from the tool configuration."""

    platform_name: str
    strip_identifier_suffix: bool = True
    output_entity_framework6: bool = False
    max_workers: int = 4
    continue_on_error: bool = False

    @classmethod
    def from_config(cls, config) -> "GenerationOptions":
        return cls(
            platform_name=config.platform_name,
            strip_identifier_suffix=config.strip_identifier_suffix,
            output_entity_framework6=config.output_entity_framework6,
            max_workers=config.max_workers,
            continue_on_error=config.continue_on_error,
        )


@dataclass(frozen=True)
class ArtifactPlan:
    """One file to render: a template, its substitution context and its output path."""

    template_id: str
    path: str
    context: Mapping[str, str] = field(default_factory=dict)


def build_path(*segments: Optional[str]) -> str:
    """
    Join path segments with "/", skipping blank and placeholder ("-") segments.

    Example:
        >>> build_path("Service", "Billing", "-", "Data", "TInvoice", "InvoiceReader.cs")
        'Service/Billing/Data/TInvoice/InvoiceReader.cs'
    """
    return "/".join(
        segment for segment in segments
        if segment and segment.strip() and segment != PLACEHOLDER_SEGMENT
    )


def build_namespace(*parts: Optional[str]) -> str:
    return ".".join(part for part in parts if part)
