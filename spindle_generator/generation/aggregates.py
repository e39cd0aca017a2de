"""
Aggregate artifacts, rendered once from the whole entity index.

The policies catalogue lists the route constants of every table and
projection; the table db-context registers their entity sets and
configurations; readmes describe each layer folder of a component feature.
"""

import logging
from itertools import groupby
from typing import Dict, List, Optional, Tuple

from ..constants import INDENT, NEWLINE, Layers, PolicyRoutes
from ..domain.entity_index import EntityMetadataIndex
from ..domain.models import Entity, StorageStructure
from .artifacts import ArtifactPlan, GenerationOptions, build_namespace, build_path

logger = logging.getLogger(__name__)

POLICY_STRUCTURES = (StorageStructure.TABLE, StorageStructure.PROJECTION)

LAYER_SUMMARIES: Dict[str, str] = {
    "Data": (
        "The **Data** folder contains code for - including entities, entity type configurations, "
        "entity readers and readers, entity adapters, and entity services. "
        "This is the **persistence** (or entity) layer for {component} {feature}."
    ),
    "State": (
        "The **State** folder contains code for models - including aggregates and changes. "
        "This is the **domain** layer for {component} {feature}."
    ),
    "Process": (
        "The **Process** folder contains application logic and business rules - including commands, "
        "command generators, command handlers, change handlers (projectors and processors), queries, "
        "and query handlers. This is the **application** layer for {feature}."
    ),
    "UI": (
        "The **UI** folder contains code for presentation logic. "
        "This is the code *behind* the **user interface** layer for {component} {feature}."
    ),
}

PROPOSED_IMPROVEMENTS = (
    "When time and opportunity permit, the following database schema changes should be considered, "
    "to improve alignment with current naming conventions:"
)


class AggregatePlanner:
    """Builds the artifact plans that depend on the full entity index."""

    def __init__(self, options: GenerationOptions):
        self.options = options

    def namespace(self, *parts: Optional[str]) -> str:
        return build_namespace(self.options.platform_name, *parts)

    # --- Policies ---

    @staticmethod
    def policy_block(entity: Entity) -> str:
        """Route constants of one entity; projections publish queries only."""
        indent = INDENT * 4
        collection = entity.collection_path()

        def constants(routes: List[str]) -> List[str]:
            return [
                f'{indent}{INDENT}public const string {route} = "{collection}/{route.lower()}";'
                for route in routes
            ]

        queries = constants(PolicyRoutes.QUERIES)
        lines = [
            f"{indent}public static partial class {entity.entity_name} // Entity",
            f"{indent}{{",
            f"{indent}{INDENT}// Queries",
            "",
            *queries[:2],
            "",
            *queries[2:],
        ]
        if not entity.is_projection:
            lines.extend(["", f"{indent}{INDENT}// Commands", "", *constants(PolicyRoutes.COMMANDS)])
        lines.append(f"{indent}}}")
        return NEWLINE.join(lines) + NEWLINE

    def policies_text(self, index: EntityMetadataIndex) -> str:
        """
        Nested static classes of route constants, component > feature > entity.

        Views and procedures get no routes; their features still appear so the
        class tree mirrors the index.
        """
        text: List[str] = []
        components = index.components()
        for component in components:
            text.append(f"{INDENT * 2}public static partial class {component} // Component{NEWLINE}")
            text.append(f"{INDENT * 2}{{{NEWLINE}")

            features = index.features(component)
            for feature in features:
                text.append(f"{INDENT * 3}public static partial class {feature} // Subcomponent{NEWLINE}")
                text.append(f"{INDENT * 3}{{{NEWLINE}")

                blocks = []
                for name in index.entities(component, feature):
                    entity = index.get(component, feature, name)
                    if entity.storage_structure in POLICY_STRUCTURES:
                        blocks.append(self.policy_block(entity))
                text.append(NEWLINE.join(blocks))

                text.append(f"{INDENT * 3}}}{NEWLINE}")
                if feature != features[-1]:
                    text.append(NEWLINE)

            text.append(f"{INDENT * 2}}}{NEWLINE}")
            if component != components[-1]:
                text.append(NEWLINE)

        return "".join(text)

    def plan_policies(self, index: EntityMetadataIndex) -> List[ArtifactPlan]:
        return [ArtifactPlan(
            template_id="Policies",
            path=build_path(Layers.CONTRACT, "Policies.cs"),
            context={
                "$Namespace": self.namespace(Layers.CONTRACT),
                "$Policies": self.policies_text(index),
            },
        )]

    # --- Table db-context ---

    @staticmethod
    def _component_groups(index: EntityMetadataIndex) -> List[Tuple[str, List[Entity]]]:
        def group_key(entity: Entity) -> str:
            return f"{entity.component_type.value}: {entity.component_name}"

        ordered = sorted(index.filter(*POLICY_STRUCTURES), key=group_key)
        return [(key, list(group)) for key, group in groupby(ordered, key=group_key)]

    def _grouped_lines(self, index: EntityMetadataIndex, indent: str, line_for) -> str:
        text = []
        for key, entities in self._component_groups(index):
            text.append(f"{indent}// {key}{NEWLINE}")
            for line in sorted(line_for(entity) for entity in entities):
                text.append(line + NEWLINE)
            text.append(NEWLINE)
        return "".join(text)

    def db_set_properties(self, index: EntityMetadataIndex) -> str:
        return self._grouped_lines(
            index,
            INDENT,
            lambda e: f"{INDENT}internal DbSet<{e.entity_name}Entity> {e.entity_name} {{ get; set; }}",
        )

    def db_set_configurations(self, index: EntityMetadataIndex) -> str:
        return self._grouped_lines(
            index,
            INDENT * 2,
            lambda e: f"{INDENT * 2}builder.ApplyConfiguration(new {e.entity_name}Configuration());",
        )

    def service_usings(self, index: EntityMetadataIndex) -> str:
        components = sorted({entity.component_name for entity in index.filter(*POLICY_STRUCTURES)})
        return "".join(
            f"using {self.namespace(Layers.SERVICE, component)};{NEWLINE}" for component in components
        )

    def plan_table_db_context(self, index: EntityMetadataIndex) -> List[ArtifactPlan]:
        return [ArtifactPlan(
            template_id="TableDbContext",
            path=build_path(Layers.SERVICE, "Metadata", "TableDbContext.cs"),
            context={
                "$Usings": self.service_usings(index),
                "$Namespace": self.namespace(Layers.SERVICE),
                "$DbSetProperties": self.db_set_properties(index),
                "$DbSetConfigurations": self.db_set_configurations(index),
            },
        )]

    # --- Readmes ---

    @staticmethod
    def entity_summary(index: EntityMetadataIndex, component: str, feature: str, layer: str) -> str:
        """Markdown summary of a layer folder; the Data layer lists pending schema changes."""
        lines = [LAYER_SUMMARIES[layer].format(component=component, feature=feature)]

        if layer == "Data":
            suggestions = index.migration_suggestions(component, feature)
            if suggestions:
                lines.extend(["", "## Proposed Improvements", "", PROPOSED_IMPROVEMENTS, ""])
                lines.extend(suggestions)

        return NEWLINE.join(lines) + NEWLINE

    def plan_readmes(self, index: EntityMetadataIndex) -> List[ArtifactPlan]:
        """
        One README per layer folder of every component feature.

        Features are visited once, however many entities they hold, so each
        README path is planned exactly once.
        """
        services = [Layers.SERVICE]
        if self.options.output_entity_framework6:
            services.append(Layers.SERVICE_EF6)

        features: Dict[Tuple[str, str], Entity] = {}
        for entity in index:
            features.setdefault((entity.component_name, entity.component_feature), entity)

        plans = []
        for service in services:
            for (component, feature), entity in sorted(features.items(), key=lambda item: item[0]):
                for layer in Layers.README_LAYERS:
                    plans.append(ArtifactPlan(
                        template_id="Readme",
                        path=build_path(service, component, feature, layer, "README.md"),
                        context={
                            "$ComponentPart": feature,
                            "$ComponentFeature": feature,
                            "$ComponentLayer": layer,
                            "$ComponentName": component,
                            "$ComponentType": entity.component_type.value.lower(),
                            "$EntitySummary": self.entity_summary(index, component, feature, layer),
                        },
                    ))

        logger.debug(f"Planned {len(plans)} readme(s) for {len(features)} feature(s)")
        return plans
