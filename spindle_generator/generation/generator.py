"""
Artifact generation orchestrator.

The generator loads the entity index once, then renders artifact kinds on
request: per-entity kinds fan out over a thread pool (columns are fetched
once per entity), aggregate kinds render once from the whole index.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from ..colored_logging import log_progress, log_section, log_success
from ..domain.collaborators import Database, OutputWriter, TemplateRenderer
from ..domain.entity_index import EntityMetadataIndex
from ..domain.models import ColumnDescriptor, Entity, StorageStructure
from ..domain.ordering import ColumnOrderingPolicy, TypeAliasTable
from ..exceptions import CodeGenerationError
from .aggregates import AggregatePlanner
from .artifacts import DEFAULT_SEQUENCE, ArtifactKind, ArtifactPlan, GenerationOptions
from .planners import EntityPlanner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtifactFailure:
    """A generation unit (one kind for one entity, or one aggregate) that failed."""

    kind: ArtifactKind
    entity: Optional[Entity]
    error: Exception

    def describe(self) -> str:
        target = ".".join(self.entity.lookup_key) if self.entity else "(aggregate)"
        return f"{self.kind.value} {target}: {self.error}"


@dataclass
class GenerationReport:
    """Paths written and failures collected during generation."""

    written: List[str] = field(default_factory=list)
    failures: List[ArtifactFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def merge(self, other: "GenerationReport") -> None:
        self.written.extend(other.written)
        self.failures.extend(other.failures)

    def raise_if_failed(self) -> None:
        if not self.failures:
            return
        details = "\n".join(f"  - {failure.describe()}" for failure in self.failures)
        first = self.failures[0]
        raise CodeGenerationError(
            f"{len(self.failures)} artifact(s) failed to generate\n{details}",
            kind=first.kind.value,
            entity=first.entity.entity_name if first.entity else None,
        )


class ArtifactGenerator:
    """
    Renders artifacts for the entities of a metadata table.

    Call ``initialize()`` once, then ``generate(kind)`` for any kind, or
    ``run()`` for the default sequence. Identical metadata and templates
    always produce byte-identical output.

    Args:
        options: Options of the generation run
        database: Source of entities and column descriptors
        renderer: Template renderer
        output: Writer for rendered text
        ordering: Column ordering policy
        aliases: Type alias table
    """

    def __init__(
        self,
        options: GenerationOptions,
        database: Database,
        renderer: TemplateRenderer,
        output: OutputWriter,
        ordering: Optional[ColumnOrderingPolicy] = None,
        aliases: Optional[TypeAliasTable] = None,
    ):
        self.options = options
        self.database = database
        self.renderer = renderer
        self.output = output
        self.entity_planner = EntityPlanner(options, ordering, aliases)
        self.aggregate_planner = AggregatePlanner(options)
        self._index: Optional[EntityMetadataIndex] = None

    def initialize(self) -> EntityMetadataIndex:
        """Load every entity of the metadata table; errors propagate unchanged."""
        log_progress(logger, "Loading entity metadata...")
        self._index = EntityMetadataIndex(self.database.list_entities())
        log_success(logger, f"Loaded {len(self._index)} entities.")
        return self._index

    @property
    def index(self) -> EntityMetadataIndex:
        if self._index is None:
            raise RuntimeError("Generator is not initialized. Call initialize() first.")
        return self._index

    def entities_for(
        self,
        kind: ArtifactKind,
        structures: Optional[Sequence[StorageStructure]] = None,
    ) -> List[Entity]:
        """Entities a per-entity kind applies to, in index order."""
        wanted = structures or kind.structures
        index = self.index.filter(*wanted) if wanted else self.index
        return list(index)

    # --- Units ---

    def _write(self, plans: Iterable[ArtifactPlan]) -> List[str]:
        written = []
        for plan in plans:
            text = self.renderer.render(plan.template_id, plan.context)
            self.output.write(plan.path, text)
            written.append(plan.path)
        return written

    def _columns(self, kind: ArtifactKind, entity: Entity) -> List[ColumnDescriptor]:
        if not kind.needs_columns:
            return []
        return self.database.columns_of(entity.storage_schema, entity.storage_table)

    def generate_entity(self, kind: ArtifactKind, entity: Entity) -> List[str]:
        """Render and write every artifact of one kind for one entity."""
        columns = self._columns(kind, entity)
        return self._write(self.entity_planner.plan(kind, entity, columns))

    def _aggregate_plans(self, kind: ArtifactKind) -> List[ArtifactPlan]:
        if kind is ArtifactKind.POLICIES:
            return self.aggregate_planner.plan_policies(self.index)
        if kind is ArtifactKind.TABLE_DB_CONTEXT:
            return self.aggregate_planner.plan_table_db_context(self.index)
        if kind is ArtifactKind.READMES:
            return self.aggregate_planner.plan_readmes(self.index)
        raise ValueError(f"{kind.value} is not an aggregate artifact kind")

    # --- Kinds ---

    def _generate_aggregate(self, kind: ArtifactKind) -> GenerationReport:
        report = GenerationReport()
        try:
            report.written.extend(self._write(self._aggregate_plans(kind)))
        except Exception as e:
            if not self.options.continue_on_error:
                raise
            logger.error(f"Failed to generate {kind.value}: {e}")
            report.failures.append(ArtifactFailure(kind, None, e))
        return report

    def _generate_sequential(self, kind: ArtifactKind, entities: List[Entity]) -> GenerationReport:
        report = GenerationReport()
        for entity in entities:
            try:
                report.written.extend(self.generate_entity(kind, entity))
            except Exception as e:
                if not self.options.continue_on_error:
                    raise
                logger.error(f"Failed to generate {kind.value} for {entity.entity_name}: {e}")
                report.failures.append(ArtifactFailure(kind, entity, e))
        return report

    def _generate_parallel(self, kind: ArtifactKind, entities: List[Entity]) -> GenerationReport:
        report = GenerationReport()
        max_workers = min(self.options.max_workers, len(entities))

        executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=f"spindle-{kind.value}")
        try:
            future_to_entity = {
                executor.submit(self.generate_entity, kind, entity): entity for entity in entities
            }
            for future in as_completed(future_to_entity):
                entity = future_to_entity[future]
                try:
                    written = future.result()
                except Exception as e:
                    if not self.options.continue_on_error:
                        # Stop dispatching; jobs already running finish first.
                        executor.shutdown(wait=True, cancel_futures=True)
                        raise
                    logger.error(f"Failed to generate {kind.value} for {entity.entity_name}: {e}")
                    report.failures.append(ArtifactFailure(kind, entity, e))
                    continue
                report.written.extend(written)
        finally:
            executor.shutdown(wait=True)

        return report

    def generate(
        self,
        kind: ArtifactKind,
        structures: Optional[Sequence[StorageStructure]] = None,
    ) -> GenerationReport:
        """
        Generate one artifact kind.

        Args:
            kind: Artifact kind to generate
            structures: Restrict per-entity kinds to these storage structures

        Returns:
            GenerationReport with the written paths (sorted) and, when
            ``continue_on_error`` is set, the failed units

        Raises:
            RuntimeError: If the generator is not initialized
            SpindleGeneratorError: The first failure, unless ``continue_on_error`` is set
        """
        if kind.is_aggregate:
            report = self._generate_aggregate(kind)
        else:
            entities = self.entities_for(kind, structures)
            if self.options.max_workers <= 1 or len(entities) <= 1:
                report = self._generate_sequential(kind, entities)
            else:
                report = self._generate_parallel(kind, entities)

        report.written.sort()
        if report.ok:
            log_success(logger, f"Generated {len(report.written)} {kind.value} file(s).")
        else:
            logger.warning(
                f"Generated {len(report.written)} {kind.value} file(s), {len(report.failures)} failure(s)."
            )
        return report

    def run(self, kinds: Optional[Sequence[ArtifactKind]] = None) -> GenerationReport:
        """Generate the given kinds in order (default: the full default sequence)."""
        report = GenerationReport()
        for kind in kinds or DEFAULT_SEQUENCE:
            log_section(logger, f"Generating {kind.value.replace('_', ' ')}")
            report.merge(self.generate(kind))
        return report
