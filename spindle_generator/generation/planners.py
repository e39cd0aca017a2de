"""
Per-entity artifact planners.

A planner turns one entity and its live columns into the artifact plans of
one kind: which template to render, with which substitution values, to which
path. Every key-related value comes from a single PrimaryKeyProjector per
entity, so readers, writers, services and controllers agree on names.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence

from ..constants import INDENT, CommandNames, Layers, QueryNames
from ..domain.declarations import DeclarationBuilder
from ..domain.models import ColumnDescriptor, Entity, PropertyScope, StorageStructure
from ..domain.naming import decapitalize, escape_reserved, pluralize, to_sentence_case
from ..domain.ordering import ColumnOrderingPolicy, TypeAliasTable
from ..domain.primary_key import PrimaryKeyProjector
from .artifacts import ArtifactKind, ArtifactPlan, GenerationOptions, build_namespace, build_path

logger = logging.getLogger(__name__)

Context = Dict[str, str]


def swagger_heading(entity: Entity) -> str:
    """
    Quoted API group heading of an entity.

    Example:
        >>> swagger_heading(invoice)
        '"Billing API: Invoices"'
    """
    heading = entity.component_name
    if entity.component_feature != "-":
        heading += f" API: {entity.component_feature}"
    return f'"{heading}"'


def entity_variable(entity: Entity) -> str:
    return escape_reserved(decapitalize(entity.entity_name))


def query_file_name(query: str, entity: Entity) -> str:
    """
    File name (without extension) of a query artifact.

    Item queries read ``AssertInvoice``, list queries ``CollectInvoices``,
    base objects ``InvoiceModel``; the criteria object is an interface,
    ``IInvoiceCriteria``.
    """
    if query in QueryNames.LIST:
        return query + pluralize(entity.entity_name)
    if query in QueryNames.BASE_OBJECTS:
        name = entity.entity_name + query
        return "I" + name if query == "Criteria" else name
    return query + entity.entity_name


class EntityPlanner:
    """
    Builds artifact plans for single entities.

    Args:
        options: Options of the generation run
        ordering: Column ordering policy for property declarations
        aliases: Type alias table
    """

    def __init__(
        self,
        options: GenerationOptions,
        ordering: Optional[ColumnOrderingPolicy] = None,
        aliases: Optional[TypeAliasTable] = None,
    ):
        self.options = options
        self.aliases = aliases or TypeAliasTable()
        self.declarations = DeclarationBuilder(ordering, self.aliases)
        self._planners: Dict[ArtifactKind, Callable[[Entity, Sequence[ColumnDescriptor]], List[ArtifactPlan]]] = {
            ArtifactKind.QUERIES: self.plan_queries,
            ArtifactKind.COMMANDS: self.plan_commands,
            ArtifactKind.ENTITIES: self.plan_entities,
            ArtifactKind.READERS: self.plan_reader,
            ArtifactKind.WRITERS: self.plan_writer,
            ArtifactKind.ADAPTERS: self.plan_adapter,
            ArtifactKind.SERVICES: self.plan_service,
            ArtifactKind.CONTROLLERS: self.plan_controller,
            ArtifactKind.CLIENTS: self.plan_client,
            ArtifactKind.CLIENT_TESTS: self.plan_client_test,
            ArtifactKind.VALIDATORS: self.plan_validator,
        }

    def supports(self, kind: ArtifactKind) -> bool:
        return kind in self._planners

    def plan(self, kind: ArtifactKind, entity: Entity, columns: Sequence[ColumnDescriptor] = ()) -> List[ArtifactPlan]:
        try:
            planner = self._planners[kind]
        except KeyError:
            raise ValueError(f"{kind.value} artifacts are not planned per entity") from None
        plans = planner(entity, columns)
        logger.debug(f"Planned {len(plans)} {kind.value} artifact(s) for {entity.entity_name}")
        return plans

    # --- Shared values ---

    def namespace(self, *parts: Optional[str]) -> str:
        return build_namespace(self.options.platform_name, *parts)

    def projector(self, entity: Entity, columns: Sequence[ColumnDescriptor]) -> PrimaryKeyProjector:
        return PrimaryKeyProjector(
            entity,
            columns,
            strip_identifier_suffix=self.options.strip_identifier_suffix,
            aliases=self.aliases,
        )

    def properties(
        self,
        columns: Sequence[ColumnDescriptor],
        projector: PrimaryKeyProjector,
        scope: PropertyScope = PropertyScope.ALL,
        **kwargs,
    ) -> str:
        return self.declarations.properties(columns, projector.key_column_names, scope, **kwargs)

    def data_folder(self, entity: Entity, layer: str = Layers.SERVICE) -> str:
        return build_path(layer, entity.component_name, entity.component_feature, "Data", entity.storage_name)

    def service_context(self, entity: Entity, projector: PrimaryKeyProjector) -> Context:
        """Values shared by the data-access artifacts of the service layer."""
        return {
            "$ContractNamespace": self.namespace(Layers.CONTRACT),
            "$ServiceNamespace": self.namespace(Layers.SERVICE, entity.component_name),
            "$StorageStructure": entity.storage_structure.value,
            "$StorageName": entity.storage_name,
            "$EntityName": entity.entity_name,
            "$EntityNamePlural": pluralize(entity.entity_name),
            "$PrimaryKeyEqualityExpression": projector.equality_expression("x"),
            "$PrimaryKeyMethodParameters": projector.parameters(),
            "$PrimaryKeyPropertyNames": projector.property_names("entity"),
            "$PrimaryKeyMethodArguments": projector.arguments(),
            "$PrimaryKeyMethodArgumentsForModify": projector.arguments("modify"),
        }

    # --- Contract ---

    def plan_queries(self, entity: Entity, columns: Sequence[ColumnDescriptor]) -> List[ArtifactPlan]:
        projector = self.projector(entity, columns)
        context = {
            "$Namespace": self.namespace(Layers.CONTRACT),
            "$EntityName": entity.entity_name,
            "$EntityNamePlural": pluralize(entity.entity_name),
            "$SingleItemProperties": self.properties(columns, projector, PropertyScope.ONLY_KEY),
            "$MultipleItemPropertiesForInterface": self.properties(
                columns, projector, PropertyScope.EXCLUDE_KEY, allow_null=True, remove_modifier=True
            ),
            "$MultipleItemProperties": self.properties(
                columns, projector, PropertyScope.EXCLUDE_KEY, allow_null=True
            ),
            "$MatchItemProperties": self.properties(columns, projector, PropertyScope.ONLY_KEY),
            "$ModelItemProperties": self.properties(columns, projector, PropertyScope.ALL),
        }

        folder = build_path(
            Layers.CONTRACT, entity.component_name, entity.component_feature, entity.entity_name, "Queries"
        )
        return [
            ArtifactPlan(
                template_id=f"Queries-{query}",
                path=build_path(folder, query_file_name(query, entity) + ".cs"),
                context=context,
            )
            for query in QueryNames.ALL
        ]

    def plan_commands(self, entity: Entity, columns: Sequence[ColumnDescriptor]) -> List[ArtifactPlan]:
        projector = self.projector(entity, columns)
        context = {
            "$Namespace": self.namespace(Layers.CONTRACT),
            "$EntityName": entity.entity_name,
            "$EntityNamePlural": pluralize(entity.entity_name),
            "$CreateProperties": self.properties(columns, projector, PropertyScope.ALL),
            "$ModifyProperties": self.properties(columns, projector, PropertyScope.ALL),
            "$DeleteProperties": self.properties(columns, projector, PropertyScope.ONLY_KEY),
        }

        folder = build_path(
            Layers.CONTRACT, entity.component_name, entity.component_feature, entity.entity_name, "Commands"
        )
        return [
            ArtifactPlan(
                template_id=f"Commands-{command}",
                path=build_path(folder, f"{command}{entity.entity_name}.cs"),
                context=context,
            )
            for command in CommandNames.ALL
        ]

    # --- Service ---

    def plan_entities(self, entity: Entity, columns: Sequence[ColumnDescriptor]) -> List[ArtifactPlan]:
        """
        Entity class and entity type configuration, plus the EF6 pair when
        the run is configured for it.
        """
        projector = self.projector(entity, columns)
        namespace = self.namespace(Layers.SERVICE, entity.component_name)
        key_selector = projector.key_selector("x")

        class_name = f"{entity.entity_name}Entity"
        folder = self.data_folder(entity)
        plans = [
            ArtifactPlan(
                template_id="Entity",
                path=build_path(folder, f"{class_name}.cs"),
                context={
                    "$Namespace": namespace,
                    "$ClassName": class_name,
                    "$ClassProperties": self.properties(columns, projector, is_core=True, tabs=1),
                },
            ),
            ArtifactPlan(
                template_id="EntityConfiguration",
                path=build_path(folder, f"{entity.entity_name}Configuration.cs"),
                context={
                    "$Namespace": namespace,
                    "$EntityName": entity.entity_name,
                    "$StorageSchema": entity.storage_schema,
                    "$StorageTable": entity.storage_table,
                    "$PrimaryKeyColumnNames": key_selector,
                    "$ColumnSpecifications": self.declarations.column_specifications(columns),
                },
            ),
        ]

        if self.options.output_entity_framework6:
            class_name = f"{entity.storage_name}Entity"
            folder = self.data_folder(entity, Layers.SERVICE_EF6)
            plans.append(ArtifactPlan(
                template_id="Entity6",
                path=build_path(folder, f"{class_name}.cs"),
                context={
                    "$Namespace": namespace,
                    "$ClassName": class_name,
                    "$ClassProperties": self.properties(columns, projector, tabs=2),
                },
            ))
            plans.append(ArtifactPlan(
                template_id="Entity6Configuration",
                path=build_path(folder, f"{entity.storage_name}Configuration.cs"),
                context={
                    "$Namespace": namespace,
                    "$StorageName": entity.storage_name,
                    "$StorageSchema": entity.storage_schema,
                    "$StorageTable": entity.storage_table,
                    "$PrimaryKeyColumnNames": key_selector,
                    "$ColumnSpecifications": self.declarations.column_specifications(columns, is_core=False),
                },
            ))

        return plans

    def plan_reader(self, entity: Entity, columns: Sequence[ColumnDescriptor]) -> List[ArtifactPlan]:
        projector = self.projector(entity, columns)
        context = self.service_context(entity, projector)
        # Projections are read through the table readers.
        if entity.is_projection:
            context["$StorageStructure"] = StorageStructure.TABLE.value
        context.update({
            "$PrimaryKeyColumnNames": projector.column_names(),
            "$Query": self.declarations.query_filters(columns),
            "$AssignEntityToMatch": projector.initializers("entity", indent=INDENT * 4),
        })
        return [ArtifactPlan(
            template_id="EntityReader",
            path=build_path(self.data_folder(entity), f"{entity.entity_name}Reader.cs"),
            context=context,
        )]

    def plan_writer(self, entity: Entity, columns: Sequence[ColumnDescriptor]) -> List[ArtifactPlan]:
        projector = self.projector(entity, columns)
        context = self.service_context(entity, projector)
        if entity.is_projection:
            context["$StorageStructure"] = StorageStructure.TABLE.value
        return [ArtifactPlan(
            template_id="EntityWriter",
            path=build_path(self.data_folder(entity), f"{entity.entity_name}Writer.cs"),
            context=context,
        )]

    def plan_adapter(self, entity: Entity, columns: Sequence[ColumnDescriptor]) -> List[ArtifactPlan]:
        projector = self.projector(entity, columns)
        context = self.service_context(entity, projector)
        context.update({
            "$AssignModifyToEntity": self.declarations.assign_statements(
                columns, "entity", "modify", exclude=projector.key_column_names
            ),
            "$AssignCreateToEntity": self.declarations.initializers(columns, "create"),
            "$AssignEntityToModel": self.declarations.initializers(columns, "entity"),
            "$AssignEntityToMatch": projector.initializers("entity"),
            "$PrimaryKeyAssignments": projector.assignments("entity", "modify"),
        })
        return [ArtifactPlan(
            template_id="EntityAdapter",
            path=build_path(self.data_folder(entity), f"{entity.entity_name}Adapter.cs"),
            context=context,
        )]

    def plan_service(self, entity: Entity, columns: Sequence[ColumnDescriptor]) -> List[ArtifactPlan]:
        projector = self.projector(entity, columns)
        return [ArtifactPlan(
            template_id="EntityService",
            path=build_path(self.data_folder(entity), f"{entity.entity_name}Service.cs"),
            context=self.service_context(entity, projector),
        )]

    def plan_validator(self, entity: Entity, columns: Sequence[ColumnDescriptor] = ()) -> List[ArtifactPlan]:
        return [ArtifactPlan(
            template_id="Validator",
            path=build_path(self.data_folder(entity), f"{entity.storage_name}Validator.cs"),
            context={
                "$Namespace": self.namespace(Layers.SERVICE, entity.component_name),
                "$ContractNamespace": self.namespace(Layers.CONTRACT),
                "$StorageName": entity.storage_name,
                "$EntityName": entity.entity_name,
            },
        )]

    # --- Api ---

    def plan_controller(self, entity: Entity, columns: Sequence[ColumnDescriptor]) -> List[ArtifactPlan]:
        projector = self.projector(entity, columns)
        variable = entity_variable(entity)
        label = to_sentence_case(entity.entity_name)

        context = {
            "$ApiNamespace": self.namespace(Layers.API),
            "$ComponentName": entity.component_name,
            "$ContractNamespace": self.namespace(Layers.CONTRACT),
            "$ServiceNamespace": self.namespace(Layers.SERVICE, entity.component_name),
            "$EntityNamePluralVariable": pluralize(variable),
            "$EntityNamePlural": pluralize(entity.entity_name),
            "$EntityNameVariable": variable,
            "$EntityName": entity.entity_name,
            "$EntityLabelPlural": pluralize(label),
            "$EntityLabel": label,
            "$EntityPolicy": f"Policies.{entity.namespace()}",
            "$SwaggerHeading": swagger_heading(entity),
            "$CollectionPath": entity.collection_path(),
            "$CollectionKey": entity.collection_key,
            "$PrimaryKeyMethodArguments": projector.arguments(),
            "$PrimaryKeyMethodParameters": projector.parameters(route_bound=True),
            "$PrimaryKeyValuesForCreateRetrieve": projector.property_names("create"),
            "$PrimaryKeyValuesForCreate": projector.property_values("create"),
            "$PrimaryKeyValuesForModifyRetrieve": projector.property_names("modify"),
            "$PrimaryKeyValuesForModify": projector.property_values("modify"),
        }

        template_id = "ControllerForProjection" if entity.is_projection else "Controller"
        return [ArtifactPlan(
            template_id=template_id,
            path=build_path(
                Layers.API, entity.component_name, entity.component_feature,
                f"{entity.entity_name}Controller.cs",
            ),
            context=context,
        )]

    # --- Contract clients ---

    def client_context(self, entity: Entity, projector: PrimaryKeyProjector) -> Context:
        return {
            "$SwaggerHeading": swagger_heading(entity),
            "$ApiNamespace": self.namespace(Layers.API),
            "$ApiRoute": f"Endpoints.{entity.namespace()}",
            "$ContractNamespace": self.namespace(Layers.CONTRACT),
            "$EntityNamePlural": pluralize(entity.entity_name),
            "$EntityName": entity.entity_name,
            "$PrimaryKeyMethodArguments": projector.arguments(),
            "$PrimaryKeyMethodParameters": projector.parameters(),
            "$PrimaryKeyValuesForDelete": projector.property_names("delete"),
            "$PrimaryKeyValuesForModify": projector.property_names("modify"),
        }

    def plan_client(self, entity: Entity, columns: Sequence[ColumnDescriptor]) -> List[ArtifactPlan]:
        projector = self.projector(entity, columns)
        template_id = "ClientForProjection" if entity.is_projection else "Client"
        return [ArtifactPlan(
            template_id=template_id,
            path=build_path(
                Layers.CONTRACT, entity.component_name, entity.component_feature, entity.entity_name,
                f"{entity.entity_name}Client.cs",
            ),
            context=self.client_context(entity, projector),
        )]

    def plan_client_test(self, entity: Entity, columns: Sequence[ColumnDescriptor]) -> List[ArtifactPlan]:
        projector = self.projector(entity, columns)
        context = self.client_context(entity, projector)
        context["$CommonNamespace"] = self.namespace(Layers.COMMON)
        return [ArtifactPlan(
            template_id="ClientTest",
            path=build_path(
                Layers.CONTRACT_TEST, entity.component_name, entity.component_feature,
                f"{entity.entity_name}Client.Tests.cs",
            ),
            context=context,
        )]
