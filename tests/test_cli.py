"""Tests for the docconform CLI."""

import json
import textwrap

import pytest
from typer.testing import CliRunner

from docconform.cli import app

runner = CliRunner()


@pytest.fixture
def docs(temp_dir, count_doc, test_config):
    """A folder with one conforming and one non-conforming block."""
    folder = temp_dir / "docs"
    folder.mkdir()
    (folder / "count.rdoc").write_text(textwrap.dedent(count_doc).strip("\n") + "\n")
    (folder / "blocks.json").write_text(json.dumps([
        {
            "method": "Array#first",
            "text": "Returns the first element.\n\nRelated: #last, #take, #min, #dig.",
            "location": {"file": "array.c", "line_start": 20},
        }
    ]))
    return folder


class TestCheck:
    """Tests for the check command."""

    def test_text_output(self, docs):
        result = runner.invoke(app, ["check", str(docs)])

        assert result.exit_code == 1
        assert "array.c:22: violation [R4] Array#first" in result.stdout
        assert "2 block(s) checked: 1 violation(s), 0 suggestion(s)" in result.stdout

    def test_json_output(self, docs):
        result = runner.invoke(app, ["check", str(docs), "--format", "json"])

        data = json.loads(result.stdout)
        assert result.exit_code == 1
        assert [b["method"] for b in data["blocks"]] == ["Array#first", "count"]
        assert data["summary"]["violations"] == 1

    def test_table_output(self, docs):
        result = runner.invoke(app, ["check", str(docs), "--format", "table"])

        assert result.exit_code == 1
        assert "R4" in result.stdout

    def test_conforming_file_exits_zero(self, docs):
        result = runner.invoke(app, ["check", str(docs / "count.rdoc"), "--workers", "1"])

        assert result.exit_code == 0

    def test_config_file_disables_rule(self, docs, temp_dir):
        rules = temp_dir / "rules.json"
        rules.write_text(json.dumps({"R4": {"enabled": False}}))

        result = runner.invoke(app, ["check", str(docs), "--config", str(rules)])

        assert result.exit_code == 0

    def test_invalid_input(self, temp_dir, test_config):
        path = temp_dir / "broken.json"
        path.write_text('{"other": 1}')

        result = runner.invoke(app, ["check", str(path)])

        assert result.exit_code == 2

    def test_missing_path(self, temp_dir, test_config):
        result = runner.invoke(app, ["check", str(temp_dir / "missing.rdoc")])

        assert result.exit_code != 0


def test_sections(docs):
    result = runner.invoke(app, ["sections", str(docs / "count.rdoc")])

    assert result.exit_code == 0
    assert "call_seq" in result.stdout
    assert "absent" in result.stdout


def test_rules(test_config):
    result = runner.invoke(app, ["rules"])

    assert result.exit_code == 0
    for rule_id in ("R1", "R4", "R7", "R12"):
        assert rule_id in result.stdout
