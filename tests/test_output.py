"""
Tests for the output writers.
"""

import pytest

from spindle_generator.exceptions import OutputWriteError
from spindle_generator.output import FileSystemOutput, InMemoryOutput


def test_write_creates_nested_folders(tmp_path):
    output = FileSystemOutput(str(tmp_path / "generated"))
    output.write("Service/Billing/Invoices/Data/TInvoice/InvoiceReader.cs", "class InvoiceReader {}")

    target = tmp_path / "generated" / "Service" / "Billing" / "Invoices" / "Data" / "TInvoice" / "InvoiceReader.cs"
    assert target.read_text(encoding="utf-8") == "class InvoiceReader {}"


def test_write_overwrites(tmp_path):
    output = FileSystemOutput(str(tmp_path))
    output.write("Contract/Policies.cs", "first")
    output.write("Contract/Policies.cs", "second")
    assert (tmp_path / "Contract" / "Policies.cs").read_text(encoding="utf-8") == "second"


def test_write_keeps_line_endings(tmp_path):
    output = FileSystemOutput(str(tmp_path))
    output.write("Readme.md", "# Billing\r\n\nText\n")
    assert (tmp_path / "Readme.md").read_bytes() == b"# Billing\r\n\nText\n"


def test_write_failure(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a folder", encoding="utf-8")

    output = FileSystemOutput(str(blocker))
    with pytest.raises(OutputWriteError) as raised:
        output.write("Contract/Policies.cs", "text")
    assert "Policies.cs" in raised.value.context["path"]


def test_in_memory_output():
    output = InMemoryOutput()
    output.write("b/File.cs", "b")
    output.write("a/File.cs", "a")
    output.write("b/File.cs", "b2")

    assert output.paths == ["a/File.cs", "b/File.cs"]
    assert output.files["b/File.cs"] == "b2"
