"""Tests for the PHP declaration scanner."""

from scripts.doccov.config import Configuration
from scripts.doccov.models import ElementKind
from scripts.doccov.php_scanner import (
    extract_elements_from_source,
    find_source_files,
    scan_source_tree,
    strip_non_code,
)


def _by_name(elements):
    return {e.name: e for e in elements}


class TestStripNonCode:
    """Tests for strip_non_code."""

    def test_preserves_length_and_lines(self):
        source = "<?php\n// class Fake {}\n$a = 'class B {}';\n"
        stripped = strip_non_code(source)
        assert len(stripped) == len(source)
        assert stripped.count("\n") == source.count("\n")
        assert "Fake" not in stripped
        assert "class B" not in stripped

    def test_block_comment_blanked(self):
        stripped = strip_non_code("<?php\n/**\n * class Doc {}\n */\nclass Real {}\n")
        assert "Doc" not in stripped
        assert "Real" in stripped

    def test_heredoc_blanked(self):
        source = "<?php\n$x = <<<EOT\nclass Hidden {}\nEOT;\nclass Shown {}\n"
        stripped = strip_non_code(source)
        assert "Hidden" not in stripped
        assert "Shown" in stripped

    def test_inline_html_blanked(self):
        stripped = strip_non_code("<html>class Nope</html>\n<?php class Yes {}\n")
        assert "Nope" not in stripped
        assert "Yes" in stripped


class TestExtractElementsFromSource:
    """Tests for extract_elements_from_source."""

    def test_class_members_and_lines(self, sample_php_project):
        source = (sample_php_project / "src" / "Widget.php").read_text()
        elements = _by_name(extract_elements_from_source(source, "src/Widget.php"))

        assert elements["Widget"].kind == ElementKind.CLASS
        assert elements["Widget"].line == 5
        assert elements["Widget"].namespace == "App"
        assert elements["VERSION"].kind == ElementKind.CONSTANT
        assert elements["VERSION"].line == 7
        assert elements["title"].kind == ElementKind.PROPERTY
        assert elements["title"].line == 9
        assert elements["count"].modifiers == ["private"]
        assert elements["render"].kind == ElementKind.METHOD
        assert elements["render"].line == 13
        assert elements["render"].parent == "Widget"
        assert elements["prepare"].modifiers == ["protected"]
        assert elements["reset"].line == 22
        assert len(elements) == 7

    def test_interface_trait_and_function(self, sample_php_project):
        source = (sample_php_project / "src" / "Support" / "helpers.php").read_text()
        elements = _by_name(extract_elements_from_source(source, "helpers.php"))

        assert elements["Loggable"].kind == ElementKind.TRAIT
        assert elements["logger"].parent == "Loggable"
        assert elements["log"].kind == ElementKind.METHOD
        assert elements["format_price"].kind == ElementKind.FUNCTION
        assert elements["format_price"].line == 14
        assert elements["format_price"].parent is None
        assert elements["format_price"].namespace == "App\\Support"

    def test_interface_kind(self):
        elements = extract_elements_from_source(
            "<?php\ninterface Shape\n{\n    public function area(): float;\n}\n", "a.php"
        )
        assert [(e.name, e.kind) for e in elements] == [
            ("Shape", ElementKind.INTERFACE),
            ("area", ElementKind.METHOD),
        ]

    def test_multiple_properties_in_one_declaration(self):
        source = "<?php\nclass Point\n{\n    public $x = 1, $y = 2;\n}\n"
        names = [e.name for e in extract_elements_from_source(source, "a.php")]
        assert names == ["Point", "x", "y"]

    def test_modifiers_in_canonical_order(self):
        source = (
            "<?php\n"
            "abstract class Base\n"
            "{\n"
            "    static public function make() {}\n"
            "    abstract protected function run();\n"
            "}\n"
        )
        elements = _by_name(extract_elements_from_source(source, "a.php"))
        assert elements["Base"].modifiers == ["abstract"]
        assert elements["make"].modifiers == ["public", "static"]
        assert elements["run"].modifiers == ["protected", "abstract"]

    def test_braced_namespaces(self):
        source = (
            "<?php\n"
            "namespace First {\n"
            "    class A {}\n"
            "}\n"
            "namespace Second {\n"
            "    class B {}\n"
            "}\n"
        )
        elements = _by_name(extract_elements_from_source(source, "a.php"))
        assert elements["A"].namespace == "First"
        assert elements["B"].namespace == "Second"

    def test_skips_closures_and_nested_functions(self):
        source = (
            "<?php\n"
            "function outer()\n"
            "{\n"
            "    function inner() {}\n"
            "    $f = function () { return 1; };\n"
            "}\n"
        )
        names = [e.name for e in extract_elements_from_source(source, "a.php")]
        assert names == ["outer"]

    def test_skips_anonymous_class_and_class_constant_fetch(self):
        source = (
            "<?php\n"
            "class Factory\n"
            "{\n"
            "    public function make()\n"
            "    {\n"
            "        $name = Factory::class;\n"
            "        return new class {\n"
            "            public function hidden() {}\n"
            "        };\n"
            "    }\n"
            "}\n"
        )
        names = [e.name for e in extract_elements_from_source(source, "a.php")]
        assert names == ["Factory", "make"]

    def test_use_function_import_not_a_declaration(self):
        source = "<?php\nnamespace App;\n\nuse function Other\\helper;\n\nfunction own() {}\n"
        names = [e.name for e in extract_elements_from_source(source, "a.php")]
        assert names == ["own"]

    def test_constructor_promotion_not_a_property(self):
        source = (
            "<?php\n"
            "class User\n"
            "{\n"
            "    public function __construct(private string $email) {}\n"
            "}\n"
        )
        names = [e.name for e in extract_elements_from_source(source, "a.php")]
        assert names == ["User", "__construct"]

    def test_declarations_in_comments_ignored(self):
        source = "<?php\n// class Ghost {}\n/* function phantom() {} */\nclass Real {}\n"
        names = [e.name for e in extract_elements_from_source(source, "a.php")]
        assert names == ["Real"]


class TestFindSourceFiles:
    """Tests for find_source_files."""

    def test_finds_php_files_sorted(self, sample_php_project):
        config = Configuration(project_root=sample_php_project)
        files = [p.relative_to(sample_php_project).as_posix() for p in find_source_files(config)]
        assert files == sorted(files)
        assert "src/Widget.php" in files
        assert len(files) == 4

    def test_excluded_directory_by_name(self, sample_php_project):
        (sample_php_project / "tests").mkdir()
        fixtures = sample_php_project / "src" / "tests"
        fixtures.mkdir()
        (fixtures / "WidgetTest.php").write_text("<?php\nclass WidgetTest {}\n")

        config = Configuration(project_root=sample_php_project)
        names = [p.name for p in find_source_files(config)]
        assert "WidgetTest.php" not in names

    def test_excluded_directory_by_path(self, sample_php_project):
        config = Configuration(project_root=sample_php_project, exclude_paths=["src/Legacy/"])
        names = [p.name for p in find_source_files(config)]
        assert "Report.php" not in names
        assert "Widget.php" in names

    def test_missing_source_path(self, tmp_path):
        config = Configuration(project_root=tmp_path, source_paths=["nope/"])
        assert find_source_files(config) == []


class TestScanSourceTree:
    """Tests for scan_source_tree."""

    def test_labels_are_project_relative(self, sample_php_project):
        scan = scan_source_tree(Configuration(project_root=sample_php_project))
        assert "src/Service/Mailer.php" in scan.files
        assert all(not e.file.startswith("/") for e in scan.elements)
        assert len(scan.elements) == 15

    def test_undecodable_file_skipped(self, sample_php_project):
        (sample_php_project / "src" / "Broken.php").write_bytes(b"<?php\nclass \xff\xfe {}\n")
        scan = scan_source_tree(Configuration(project_root=sample_php_project))
        assert scan.skipped_files == ["src/Broken.php"]
        assert len(scan.elements) == 15
