"""
Tests for the template renderers.
"""

from types import SimpleNamespace

import pytest

from spindle_generator.exceptions import (
    ConfigurationError,
    MissingTemplateError,
    UnresolvedPlaceholderError,
)
from spindle_generator.rendering import (
    JinjaTemplateRenderer,
    PlaceholderTemplateRenderer,
    create_renderer,
)


@pytest.fixture
def templates(tmp_path):
    def write(name, text):
        (tmp_path / name).write_text(text, encoding="utf-8")
        return tmp_path
    return write


class TestPlaceholderTemplateRenderer:

    def test_longest_key_first(self, templates):
        folder = templates("Entity.txt", "$EntityNamePlural of $EntityName\n")
        renderer = PlaceholderTemplateRenderer(str(folder))
        text = renderer.render("Entity", {"$EntityName": "Invoice", "$EntityNamePlural": "Invoices"})
        assert text == "Invoices of Invoice\n"

    def test_values_are_not_rescanned(self, templates):
        folder = templates("Entity.txt", "$A / $B")
        renderer = PlaceholderTemplateRenderer(str(folder))
        assert renderer.render("Entity", {"$A": "$B", "$B": "b"}) == "$B / b"

    def test_unresolved_placeholders_pass_through(self, templates):
        folder = templates("Entity.txt", "class $EntityName : $BaseClass")
        renderer = PlaceholderTemplateRenderer(str(folder))
        assert renderer.render("Entity", {"$EntityName": "Invoice"}) == "class Invoice : $BaseClass"

    def test_strict_mode_names_unresolved_placeholders(self, templates):
        folder = templates("Entity.txt", "class $EntityName : $BaseClass, $Other, $BaseClass")
        renderer = PlaceholderTemplateRenderer(str(folder), strict=True)
        with pytest.raises(UnresolvedPlaceholderError) as raised:
            renderer.render("Entity", {"$EntityName": "Invoice"})
        assert raised.value.placeholders == ["$BaseClass", "$Other"]

    def test_matching_is_case_sensitive(self, templates):
        folder = templates("Entity.txt", "$entityname $EntityName")
        renderer = PlaceholderTemplateRenderer(str(folder))
        assert renderer.render("Entity", {"$EntityName": "Invoice"}) == "$entityname Invoice"

    def test_keeps_line_endings(self, tmp_path):
        (tmp_path / "Entity.txt").write_bytes(b"$EntityName\r\n")
        renderer = PlaceholderTemplateRenderer(str(tmp_path))
        assert renderer.render("Entity", {"$EntityName": "Invoice"}).endswith("Invoice\r\n")

    def test_missing_template(self, tmp_path):
        renderer = PlaceholderTemplateRenderer(str(tmp_path))
        with pytest.raises(MissingTemplateError) as raised:
            renderer.render("Nope", {})
        assert raised.value.context["template_id"] == "Nope"

    def test_source_is_cached(self, templates):
        folder = templates("Entity.txt", "$EntityName")
        renderer = PlaceholderTemplateRenderer(str(folder))
        renderer.render("Entity", {})
        (folder / "Entity.txt").write_text("changed", encoding="utf-8")
        assert renderer.render("Entity", {"$EntityName": "Invoice"}) == "Invoice"


class TestJinjaTemplateRenderer:

    def test_context_keys_lose_prefix(self, templates):
        folder = templates("Entity.j2", "class {{ EntityName }}\n")
        renderer = JinjaTemplateRenderer(str(folder))
        assert renderer.render("Entity", {"$EntityName": "Invoice"}) == "class Invoice\n"

    def test_naming_filters(self, templates):
        folder = templates(
            "Entity.j2",
            "{{ EntityName | pluralize }} {{ EntityName | camel }} {{ EntityName | snake }} {{ EntityName | kebab }}",
        )
        renderer = JinjaTemplateRenderer(str(folder))
        assert renderer.render("Entity", {"$EntityName": "InvoiceLine"}) == (
            "InvoiceLines invoiceLine invoice_line invoice-line"
        )

    def test_undefined_renders_empty(self, templates):
        folder = templates("Entity.j2", "[{{ Missing }}]")
        assert JinjaTemplateRenderer(str(folder)).render("Entity", {}) == "[]"

    def test_strict_undefined_fails(self, templates):
        folder = templates("Entity.j2", "[{{ Missing }}]")
        with pytest.raises(UnresolvedPlaceholderError):
            JinjaTemplateRenderer(str(folder), strict=True).render("Entity", {})

    def test_missing_template(self, tmp_path):
        with pytest.raises(MissingTemplateError):
            JinjaTemplateRenderer(str(tmp_path)).render("Nope", {})


class TestCreateRenderer:

    def config(self, engine, folder="templates", strict=False):
        return SimpleNamespace(template_engine=engine, template_folder=folder, strict_templates=strict)

    def test_placeholder_engine(self):
        renderer = create_renderer(self.config("placeholder", strict=True))
        assert isinstance(renderer, PlaceholderTemplateRenderer)
        assert renderer.strict

    def test_jinja_engine(self):
        assert isinstance(create_renderer(self.config("jinja")), JinjaTemplateRenderer)

    def test_unknown_engine(self):
        with pytest.raises(ConfigurationError):
            create_renderer(self.config("mustache"))
