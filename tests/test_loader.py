"""Tests for loading documentation blocks."""

import json

import pytest

from docconform.ingest.loader import load_blocks, load_file, scan_folder


class TestLoadFile:
    """Tests for single-file loading."""

    def test_json_list(self, temp_dir):
        path = temp_dir / "blocks.json"
        path.write_text(json.dumps([
            {"method": "Array#size", "text": "Returns the size."},
            {"method": "Array#first", "text": "Returns the first element.", "markup": "markdown"},
        ]))

        blocks = load_file(path)

        assert [b.method for b in blocks] == ["Array#size", "Array#first"]
        assert blocks[0].markup == "rdoc"
        assert blocks[1].markup == "markdown"
        assert blocks[0].location.file == str(path)

    def test_json_object(self, temp_dir):
        path = temp_dir / "blocks.json"
        path.write_text(json.dumps({
            "blocks": [
                {
                    "method": "Array#size",
                    "text": "Returns the size.",
                    "location": {"file": "array.c", "line_start": 42},
                }
            ]
        }))

        block = load_file(path)[0]

        assert block.location.file == "array.c"
        assert block.location.line_start == 42

    def test_jsonl(self, temp_dir):
        path = temp_dir / "blocks.jsonl"
        path.write_text(
            '{"method": "Array#size", "text": "Returns the size."}\n'
            "\n"
            '{"method": "Array#length", "text": "Returns the length."}\n'
        )

        assert [b.method for b in load_file(path)] == ["Array#size", "Array#length"]

    def test_rdoc_file(self, temp_dir):
        path = temp_dir / "count.rdoc"
        path.write_text("Returns a count.\n")

        block = load_file(path)[0]

        assert block.method == "count"
        assert block.text == "Returns a count.\n"
        assert block.markup == "rdoc"

    def test_markdown_file(self, temp_dir):
        path = temp_dir / "count.md"
        path.write_text("Returns a count.\n")

        assert load_file(path)[0].markup == "markdown"

    def test_default_markup(self, temp_dir):
        path = temp_dir / "blocks.json"
        path.write_text(json.dumps([{"method": "m", "text": "t"}]))

        assert load_file(path, default_markup="markdown")[0].markup == "markdown"

    def test_invalid_record(self, temp_dir):
        path = temp_dir / "blocks.json"
        path.write_text(json.dumps([{"text": "no method"}]))

        with pytest.raises(ValueError, match="Invalid block record"):
            load_file(path)

    def test_json_without_blocks(self, temp_dir):
        path = temp_dir / "blocks.json"
        path.write_text(json.dumps({"other": []}))

        with pytest.raises(ValueError, match="Expected a list"):
            load_file(path)

    def test_unsupported_file(self, temp_dir):
        path = temp_dir / "array.c"
        path.write_text("")

        with pytest.raises(ValueError, match="Unsupported"):
            load_file(path)

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            load_file(temp_dir / "missing.json")


class TestScanFolder:
    """Tests for folder scanning."""

    def test_scan(self, temp_dir):
        (temp_dir / "b.rdoc").write_text("B.")
        (temp_dir / "a.json").write_text("[]")
        (temp_dir / "notes.c").write_text("")
        (temp_dir / "sub").mkdir()
        (temp_dir / "sub" / "c.md").write_text("C.")

        files = scan_folder(temp_dir)

        assert [f.name for f in files] == ["a.json", "b.rdoc", "c.md"]

    def test_non_recursive(self, temp_dir):
        (temp_dir / "a.rdoc").write_text("A.")
        (temp_dir / "sub").mkdir()
        (temp_dir / "sub" / "b.rdoc").write_text("B.")

        assert [f.name for f in scan_folder(temp_dir, recursive=False)] == ["a.rdoc"]

    def test_missing_folder(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            scan_folder(temp_dir / "missing")

    def test_not_a_directory(self, temp_dir):
        path = temp_dir / "a.rdoc"
        path.write_text("A.")

        with pytest.raises(ValueError):
            scan_folder(path)


def test_load_blocks_mixes_files_and_folders(temp_dir):
    folder = temp_dir / "docs"
    folder.mkdir()
    (folder / "size.rdoc").write_text("Returns the size.")
    single = temp_dir / "first.md"
    single.write_text("Returns the first element.")

    blocks = load_blocks([single, folder])

    assert [b.method for b in blocks] == ["first", "size"]
