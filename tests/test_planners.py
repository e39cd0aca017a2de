"""
Tests for the per-entity and aggregate artifact planners.
"""

import pytest

from conftest import INVOICE_COLUMNS, INVOICE_LINE_COLUMNS, SUMMARY_COLUMNS, EVENT_COLUMNS
from spindle_generator.domain.entity_index import EntityMetadataIndex
from spindle_generator.generation import ArtifactKind, GenerationOptions
from spindle_generator.generation.aggregates import AggregatePlanner
from spindle_generator.generation.artifacts import build_namespace, build_path
from spindle_generator.generation.planners import (
    EntityPlanner,
    entity_variable,
    query_file_name,
    swagger_heading,
)


@pytest.fixture
def options():
    return GenerationOptions(platform_name="Acme.Platform")


@pytest.fixture
def planner(options):
    return EntityPlanner(options)


@pytest.fixture
def summary_entity(sample_entities):
    return sample_entities[2]


@pytest.fixture
def index(sample_entities):
    return EntityMetadataIndex(sample_entities)


def only(plans):
    assert len(plans) == 1
    return plans[0]


class TestHelpers:

    def test_build_path_skips_placeholder_segments(self):
        assert build_path("Service", "Billing", "-", "Data", "", "InvoiceReader.cs") == (
            "Service/Billing/Data/InvoiceReader.cs"
        )

    def test_build_namespace(self):
        assert build_namespace("Acme.Platform", "Service", None, "Billing") == "Acme.Platform.Service.Billing"

    def test_swagger_heading(self, invoice_entity, make_entity):
        assert swagger_heading(invoice_entity) == '"Billing API: Invoices"'
        assert swagger_heading(make_entity(component_feature="-")) == '"Billing"'

    def test_entity_variable(self, invoice_entity, event_entity):
        assert entity_variable(invoice_entity) == "invoice"
        assert entity_variable(event_entity) == "@event"

    @pytest.mark.parametrize("query, expected", [
        ("Assert", "AssertInvoice"),
        ("Retrieve", "RetrieveInvoice"),
        ("Collect", "CollectInvoices"),
        ("Count", "CountInvoices"),
        ("Search", "SearchInvoices"),
        ("Criteria", "IInvoiceCriteria"),
        ("Match", "InvoiceMatch"),
        ("Model", "InvoiceModel"),
    ])
    def test_query_file_name(self, invoice_entity, query, expected):
        assert query_file_name(query, invoice_entity) == expected


class TestEntityPlanner:

    def test_aggregate_kinds_are_not_planned_per_entity(self, planner, invoice_entity):
        assert not planner.supports(ArtifactKind.POLICIES)
        with pytest.raises(ValueError):
            planner.plan(ArtifactKind.POLICIES, invoice_entity, INVOICE_COLUMNS)

    def test_queries(self, planner, invoice_entity):
        plans = planner.plan(ArtifactKind.QUERIES, invoice_entity, INVOICE_COLUMNS)
        assert [plan.template_id for plan in plans] == [
            "Queries-Assert", "Queries-Retrieve", "Queries-Collect", "Queries-Count",
            "Queries-Search", "Queries-Criteria", "Queries-Match", "Queries-Model",
        ]
        assert plans[5].path == "Contract/Billing/Invoices/Invoice/Queries/IInvoiceCriteria.cs"

        context = plans[0].context
        assert context["$Namespace"] == "Acme.Platform.Contract"
        assert context["$EntityNamePlural"] == "Invoices"
        assert context["$SingleItemProperties"] == "        public int InvoiceId { get; set; }"
        assert "        DateTimeOffset? CreatedAt { get; set; }" in context["$MultipleItemPropertiesForInterface"]
        assert "        public DateTimeOffset? CreatedAt { get; set; }" in context["$MultipleItemProperties"]
        assert "InvoiceId" in context["$ModelItemProperties"]

    def test_commands(self, planner, invoice_entity):
        plans = planner.plan(ArtifactKind.COMMANDS, invoice_entity, INVOICE_COLUMNS)
        assert [plan.path for plan in plans] == [
            "Contract/Billing/Invoices/Invoice/Commands/CreateInvoice.cs",
            "Contract/Billing/Invoices/Invoice/Commands/ModifyInvoice.cs",
            "Contract/Billing/Invoices/Invoice/Commands/DeleteInvoice.cs",
        ]
        assert plans[2].context["$DeleteProperties"] == "        public int InvoiceId { get; set; }"

    def test_entities(self, planner, invoice_entity):
        entity_plan, configuration_plan = planner.plan(ArtifactKind.ENTITIES, invoice_entity, INVOICE_COLUMNS)

        assert entity_plan.path == "Service/Billing/Invoices/Data/TInvoice/InvoiceEntity.cs"
        assert entity_plan.context["$ClassName"] == "InvoiceEntity"
        assert entity_plan.context["$Namespace"] == "Acme.Platform.Service.Billing"
        assert "    public string? Notes { get; set; }" in entity_plan.context["$ClassProperties"]

        assert configuration_plan.path == "Service/Billing/Invoices/Data/TInvoice/InvoiceConfiguration.cs"
        assert configuration_plan.context["$PrimaryKeyColumnNames"] == "x.InvoiceId"
        assert configuration_plan.context["$ColumnSpecifications"].startswith(
            '        builder.Property(x => x.InvoiceId).HasColumnName("invoice_id")'
        )

    def test_entities_with_entity_framework6(self, invoice_entity):
        planner = EntityPlanner(GenerationOptions(platform_name="Acme.Platform", output_entity_framework6=True))
        plans = planner.plan(ArtifactKind.ENTITIES, invoice_entity, INVOICE_COLUMNS)

        assert [plan.template_id for plan in plans] == ["Entity", "EntityConfiguration", "Entity6", "Entity6Configuration"]
        assert plans[2].path == "Service.EF6/Billing/Invoices/Data/TInvoice/TInvoiceEntity.cs"
        assert plans[2].context["$ClassName"] == "TInvoiceEntity"
        assert plans[3].path == "Service.EF6/Billing/Invoices/Data/TInvoice/TInvoiceConfiguration.cs"
        assert "builder." not in plans[3].context["$ColumnSpecifications"]

    def test_reader(self, planner, invoice_entity):
        plan = only(planner.plan(ArtifactKind.READERS, invoice_entity, INVOICE_COLUMNS))
        assert plan.path == "Service/Billing/Invoices/Data/TInvoice/InvoiceReader.cs"
        assert plan.context["$StorageStructure"] == "Table"
        assert plan.context["$PrimaryKeyEqualityExpression"] == "x.InvoiceId == invoice"
        assert plan.context["$PrimaryKeyMethodParameters"] == "int invoice"
        assert plan.context["$PrimaryKeyColumnNames"] == "invoice_id"
        assert plan.context["$AssignEntityToMatch"] == "                InvoiceId = entity.InvoiceId\n"
        assert "// if (criteria.CustomerName != null)" in plan.context["$Query"]

    def test_projection_reader_reads_table(self, planner, summary_entity):
        plan = only(planner.plan(ArtifactKind.READERS, summary_entity, SUMMARY_COLUMNS))
        assert plan.path == "Service/Billing/Invoices/Data/QInvoiceSummary/InvoiceSummaryReader.cs"
        assert plan.context["$StorageStructure"] == "Table"
        assert plan.context["$StorageName"] == "QInvoiceSummary"

    def test_writer(self, planner, summary_entity):
        plan = only(planner.plan(ArtifactKind.WRITERS, summary_entity, SUMMARY_COLUMNS))
        assert plan.path == "Service/Billing/Invoices/Data/QInvoiceSummary/InvoiceSummaryWriter.cs"
        assert plan.context["$StorageStructure"] == "Table"

    def test_adapter(self, planner, invoice_entity):
        context = only(planner.plan(ArtifactKind.ADAPTERS, invoice_entity, INVOICE_COLUMNS)).context
        assert context["$AssignModifyToEntity"].startswith("        entity.CustomerName = modify.CustomerName;\n")
        assert "InvoiceId" not in context["$AssignModifyToEntity"]
        assert context["$AssignCreateToEntity"].split("\n")[0] == "            InvoiceId = create.InvoiceId,"
        assert context["$AssignEntityToModel"].split("\n")[-1] == "            Notes = entity.Notes"
        assert context["$PrimaryKeyAssignments"] == "entity.InvoiceId = modify.InvoiceId"
        assert context["$PrimaryKeyMethodArgumentsForModify"] == "modify.InvoiceId"

    def test_composite_key_service(self, planner, sample_entities):
        context = only(planner.plan(ArtifactKind.SERVICES, sample_entities[1], INVOICE_LINE_COLUMNS)).context
        assert context["$PrimaryKeyMethodParameters"] == "int invoice, int lineNumber"
        assert context["$PrimaryKeyMethodArguments"] == "invoice, lineNumber"
        assert context["$PrimaryKeyPropertyNames"] == "entity.InvoiceId, entity.LineNumber"
        assert context["$StorageName"] == "TInvoiceLine"

    def test_validator(self, planner, invoice_entity):
        plan = only(planner.plan(ArtifactKind.VALIDATORS, invoice_entity))
        assert plan.path == "Service/Billing/Invoices/Data/TInvoice/TInvoiceValidator.cs"
        assert plan.context["$StorageName"] == "TInvoice"

    def test_controller(self, planner, invoice_entity):
        plan = only(planner.plan(ArtifactKind.CONTROLLERS, invoice_entity, INVOICE_COLUMNS))
        assert plan.template_id == "Controller"
        assert plan.path == "Api/Billing/Invoices/InvoiceController.cs"

        context = plan.context
        assert context["$ApiNamespace"] == "Acme.Platform.Api"
        assert context["$EntityPolicy"] == "Policies.Billing.Invoices.Invoice"
        assert context["$SwaggerHeading"] == '"Billing API: Invoices"'
        assert context["$CollectionPath"] == "billing/invoices"
        assert context["$EntityLabel"] == "invoice"
        assert context["$EntityLabelPlural"] == "invoices"
        assert context["$PrimaryKeyMethodParameters"] == "[FromRoute] int invoice"
        assert context["$PrimaryKeyValuesForCreate"] == "InvoiceId {create.InvoiceId}"
        assert context["$PrimaryKeyValuesForCreateRetrieve"] == "create.InvoiceId"
        assert context["$PrimaryKeyValuesForModifyRetrieve"] == "modify.InvoiceId"

    def test_projection_controller(self, planner, summary_entity):
        plan = only(planner.plan(ArtifactKind.CONTROLLERS, summary_entity, SUMMARY_COLUMNS))
        assert plan.template_id == "ControllerForProjection"

    def test_reserved_entity_variable(self, planner, event_entity):
        context = only(planner.plan(ArtifactKind.CONTROLLERS, event_entity, EVENT_COLUMNS)).context
        assert context["$EntityNameVariable"] == "@event"
        assert context["$PrimaryKeyMethodParameters"] == "[FromRoute] long @event"

    def test_client(self, planner, invoice_entity):
        plan = only(planner.plan(ArtifactKind.CLIENTS, invoice_entity, INVOICE_COLUMNS))
        assert plan.template_id == "Client"
        assert plan.path == "Contract/Billing/Invoices/Invoice/InvoiceClient.cs"
        assert plan.context["$ApiRoute"] == "Endpoints.Billing.Invoices.Invoice"
        assert plan.context["$PrimaryKeyValuesForDelete"] == "delete.InvoiceId"
        assert plan.context["$PrimaryKeyMethodParameters"] == "int invoice"

    def test_client_test(self, planner, invoice_entity):
        plan = only(planner.plan(ArtifactKind.CLIENT_TESTS, invoice_entity, INVOICE_COLUMNS))
        assert plan.path == "Contract.Test/Billing/Invoices/InvoiceClient.Tests.cs"
        assert plan.context["$CommonNamespace"] == "Acme.Platform.Common"


class TestAggregatePlanner:

    def test_policy_block_for_projection(self, summary_entity):
        lines = AggregatePlanner.policy_block(summary_entity).split("\n")
        indent = " " * 16
        assert lines == [
            f"{indent}public static partial class InvoiceSummary // Entity",
            f"{indent}{{",
            f"{indent}    // Queries",
            "",
            f'{indent}    public const string Assert = "billing/invoice-summaries/assert";',
            f'{indent}    public const string Retrieve = "billing/invoice-summaries/retrieve";',
            "",
            f'{indent}    public const string Collect = "billing/invoice-summaries/collect";',
            f'{indent}    public const string Count = "billing/invoice-summaries/count";',
            f'{indent}    public const string Search = "billing/invoice-summaries/search";',
            f'{indent}    public const string Download = "billing/invoice-summaries/download";',
            f"{indent}}}",
            "",
        ]

    def test_policy_block_for_table_has_commands(self, invoice_entity):
        text = AggregatePlanner.policy_block(invoice_entity)
        assert "                    // Commands\n" in text
        assert '                    public const string Delete = "billing/invoices/delete";\n' in text

    def test_policies_text(self, options, index):
        text = AggregatePlanner(options).policies_text(index)

        assert text.startswith(
            "        public static partial class Billing // Component\n"
            "        {\n"
            "            public static partial class Invoices // Subcomponent\n"
            "            {\n"
            "                public static partial class Invoice // Entity\n"
        )
        assert (
            "            public static partial class Reports // Subcomponent\n"
            "            {\n"
            "            }\n"
            "        }\n"
            "\n"
            "        public static partial class Calendar // Component\n"
        ) in text
        assert "OpenInvoice" not in text
        assert text.endswith("            }\n        }\n")

    def test_plan_policies(self, options, index):
        plan = only(AggregatePlanner(options).plan_policies(index))
        assert plan.path == "Contract/Policies.cs"
        assert plan.context["$Namespace"] == "Acme.Platform.Contract"

    def test_table_db_context(self, options, index):
        plan = only(AggregatePlanner(options).plan_table_db_context(index))
        assert plan.path == "Service/Metadata/TableDbContext.cs"
        assert plan.context["$Namespace"] == "Acme.Platform.Service"
        assert plan.context["$Usings"] == (
            "using Acme.Platform.Service.Billing;\n"
            "using Acme.Platform.Service.Calendar;\n"
        )
        assert plan.context["$DbSetProperties"] == (
            "    // Application: Billing\n"
            "    internal DbSet<InvoiceEntity> Invoice { get; set; }\n"
            "    internal DbSet<InvoiceLineEntity> InvoiceLine { get; set; }\n"
            "    internal DbSet<InvoiceSummaryEntity> InvoiceSummary { get; set; }\n"
            "\n"
            "    // Application: Calendar\n"
            "    internal DbSet<EventEntity> Event { get; set; }\n"
            "\n"
        )
        assert "        builder.ApplyConfiguration(new EventConfiguration());\n" in plan.context["$DbSetConfigurations"]

    def test_readmes(self, options, index):
        plans = AggregatePlanner(options).plan_readmes(index)
        assert len(plans) == 12
        assert len({plan.path for plan in plans}) == 12
        assert plans[0].path == "Service/Billing/Invoices/Data/README.md"
        assert plans[0].context["$ComponentType"] == "application"
        assert plans[0].context["$ComponentLayer"] == "Data"

    def test_readmes_with_entity_framework6(self, index):
        options = GenerationOptions(platform_name="Acme.Platform", output_entity_framework6=True)
        paths = [plan.path for plan in AggregatePlanner(options).plan_readmes(index)]
        assert len(paths) == 24
        assert "Service.EF6/Calendar/Events/UI/README.md" in paths

    def test_data_summary_lists_proposed_improvements(self, index):
        text = AggregatePlanner.entity_summary(index, "Billing", "Invoices", "Data")
        assert "## Proposed Improvements" in text
        assert text.endswith("* Rename table from `invoice_line` to `invoice_lines`.\n")

    def test_summary_without_improvements(self, index):
        assert "Proposed Improvements" not in AggregatePlanner.entity_summary(index, "Calendar", "Events", "Data")
        text = AggregatePlanner.entity_summary(index, "Billing", "Invoices", "Process")
        assert text.endswith("This is the **application** layer for Invoices.\n")
