"""Tests for report rendering."""

import json

from rich.console import Console

from api_trace.models.ast_models import ApiInvocationRecord, MethodIdentity, UiBinding
from api_trace.outputs.output import (
    DIVIDER,
    NOT_FOUND,
    print_summary,
    render_record,
    render_report,
    to_json,
    write_report,
)


def make_record(binding=True):
    helper = MethodIdentity("Helper", "Default.aspx.cs")
    click = MethodIdentity("Submit_Click", "Default.aspx.cs")
    return ApiInvocationRecord(
        api_file="Default.aspx.cs",
        api_method="GET_JWT",
        endpoint="https://api/x",
        immediate_method=helper,
        line=14,
        col=12,
        top_level_method=click,
        ui_binding=UiBinding("Default.aspx", "Go") if binding else None,
    )


class TestTextReport:
    def test_block_fields_in_order(self):
        lines = render_record(make_record()).splitlines()
        assert lines == [
            DIVIDER,
            "API called in file: Default.aspx.cs",
            "API method: GET_JWT",
            "Endpoint: https://api/x",
            "Immediate method: Helper (File: Default.aspx.cs)",
            "Top-level method: Submit_Click (File: Default.aspx.cs)",
            "ASPX file: Default.aspx",
            "Button text: Go",
        ]

    def test_missing_binding(self):
        lines = render_record(make_record(binding=False)).splitlines()
        assert lines[-1] == NOT_FOUND
        assert not any(line.startswith("Button text") for line in lines)

    def test_one_block_per_record(self):
        report = render_report([make_record(), make_record(binding=False)])
        assert report.count(DIVIDER) == 2

    def test_empty_report(self):
        assert render_report([]) == ""


class TestJson:
    def test_fields(self):
        data = json.loads(to_json([make_record()]))
        assert data == [{
            "apiFile": "Default.aspx.cs",
            "apiMethod": "GET_JWT",
            "endpoint": "https://api/x",
            "line": 14,
            "col": 12,
            "immediateMethod": {"name": "Helper", "file": "Default.aspx.cs"},
            "topLevelMethod": {"name": "Submit_Click", "file": "Default.aspx.cs"},
            "uiBinding": {"file": "Default.aspx", "text": "Go"},
        }]

    def test_missing_binding_is_null(self):
        data = json.loads(to_json([make_record(binding=False)]))
        assert data[0]["uiBinding"] is None


class TestWriteReport:
    def test_writes_content(self, tmp_path):
        path = tmp_path / "report.txt"
        write_report(str(path), "hello\n")
        assert path.read_text(encoding="utf-8") == "hello\n"

    def test_replaces_existing_and_leaves_no_temp_files(self, tmp_path):
        path = tmp_path / "report.txt"
        path.write_text("old", encoding="utf-8")
        write_report(str(path), "new")
        assert path.read_text(encoding="utf-8") == "new"
        assert [p.name for p in tmp_path.iterdir()] == ["report.txt"]

    def test_unencodable_text_does_not_abort(self, tmp_path):
        path = tmp_path / "report.txt"
        write_report(str(path), "Endpoint: a\ud83db\n")
        assert path.read_text(encoding="utf-8") == "Endpoint: a\\ud83db\n"


class TestSummary:
    def test_prints_table(self):
        console = Console(record=True, width=200)
        print_summary([make_record(), make_record(binding=False)], console)
        text = console.export_text()
        assert "GET_JWT" in text
        assert "Submit_Click" in text
        assert "not found" in text
