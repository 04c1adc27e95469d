"""Tests for the documentation line scanner."""

from scripts.doccov.config import Configuration
from scripts.doccov.doc_scanner import find_doc_files, scan_doc_lines


class TestScanDocLines:
    """Tests for scan_doc_lines."""

    def test_line_numbers_start_at_one(self):
        lines = scan_doc_lines("first\nsecond\n")
        assert [(l.number, l.text) for l in lines] == [(1, "first"), (2, "second"), (3, "")]

    def test_fence_toggles_block_state(self):
        lines = scan_doc_lines("text\n```php\ncode\n```\nafter\n")
        assert [l.in_code_block for l in lines[:5]] == [False, False, True, True, False]
        assert [l.is_fence for l in lines[:5]] == [False, True, False, True, False]

    def test_unclosed_fence_runs_to_end(self):
        lines = scan_doc_lines("```\none\ntwo")
        assert lines[1].in_code_block
        assert lines[2].in_code_block

    def test_indented_fence_does_not_toggle(self):
        lines = scan_doc_lines("  ```\ninside?\n")
        assert not lines[0].is_fence
        assert not lines[1].in_code_block

    def test_windows_line_endings(self):
        lines = scan_doc_lines("one\r\n```\r\ntwo\r\n")
        assert lines[0].text == "one"
        assert lines[1].is_fence
        assert lines[2].in_code_block


class TestFindDocFiles:
    """Tests for find_doc_files."""

    def test_finds_markdown_recursively(self, tmp_path):
        (tmp_path / "docs" / "guide").mkdir(parents=True)
        (tmp_path / "docs" / "index.md").write_text("# Index\n")
        (tmp_path / "docs" / "guide" / "setup.markdown").write_text("# Setup\n")
        (tmp_path / "docs" / "notes.txt").write_text("not docs\n")

        files = find_doc_files(Configuration(project_root=tmp_path))
        assert sorted(p.name for p in files) == ["index.md", "setup.markdown"]

    def test_missing_docs_path_skipped(self, tmp_path):
        config = Configuration(project_root=tmp_path, docs_paths=["nope/"])
        assert find_doc_files(config) == []

    def test_single_file_docs_path(self, tmp_path):
        (tmp_path / "README.md").write_text("# Readme\n")
        config = Configuration(project_root=tmp_path, docs_paths=["README.md", "docs/"])
        assert [p.name for p in find_doc_files(config)] == ["README.md"]
