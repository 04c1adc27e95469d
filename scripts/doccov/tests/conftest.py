"""Shared fixtures for doccov tests."""

import pytest

from scripts.doccov.config import Configuration


@pytest.fixture
def sample_php_project(tmp_path):
    """Create a small PHP project with known declarations.

    Elements (file, line):
        src/Widget.php: Widget 5, VERSION 7, title 9, count 11 (private),
            render 13, prepare 18, reset 22 (private)
        src/Service/Mailer.php: Mailer 5 (interface), send 7
        src/Support/helpers.php: Loggable 5 (trait), logger 7, log 9,
            format_price 14 (function)
        src/Legacy/Report.php: Report 5, build 7
    """
    src = tmp_path / "src"
    (src / "Service").mkdir(parents=True)
    (src / "Support").mkdir()
    (src / "Legacy").mkdir()

    (src / "Widget.php").write_text(
        "<?php\n"
        "\n"
        "namespace App;\n"
        "\n"
        "class Widget\n"
        "{\n"
        "    public const VERSION = '1.0';\n"
        "\n"
        "    public string $title = 'widget';\n"
        "\n"
        "    private int $count = 0;\n"
        "\n"
        "    public function render(): string\n"
        "    {\n"
        "        return $this->title;\n"
        "    }\n"
        "\n"
        "    protected function prepare(): void\n"
        "    {\n"
        "    }\n"
        "\n"
        "    private function reset(): void\n"
        "    {\n"
        "        $this->count = 0;\n"
        "    }\n"
        "}\n"
    )

    (src / "Service" / "Mailer.php").write_text(
        "<?php\n"
        "\n"
        "namespace App\\Service;\n"
        "\n"
        "interface Mailer\n"
        "{\n"
        "    public function send(string $to): bool;\n"
        "}\n"
    )

    (src / "Support" / "helpers.php").write_text(
        "<?php\n"
        "\n"
        "namespace App\\Support;\n"
        "\n"
        "trait Loggable\n"
        "{\n"
        "    protected $logger;\n"
        "\n"
        "    public function log(string $message): void\n"
        "    {\n"
        "    }\n"
        "}\n"
        "\n"
        "function format_price(float $amount): string\n"
        "{\n"
        "    return number_format($amount, 2);\n"
        "}\n"
    )

    (src / "Legacy" / "Report.php").write_text(
        "<?php\n"
        "\n"
        "namespace App\\Legacy;\n"
        "\n"
        "class Report\n"
        "{\n"
        "    public function build(): array\n"
        "    {\n"
        "        return [];\n"
        "    }\n"
        "}\n"
    )

    return tmp_path


@pytest.fixture
def sample_docs(sample_php_project):
    """Add Markdown docs that reference part of the sample project.

    Documented after matching: Widget, render, Mailer, send and everything
    in helpers.php (via a #L10 link). App\\Missing\\Thing is a broken
    reference.
    """
    root = sample_php_project
    docs = root / "docs"
    docs.mkdir()

    (docs / "widget.md").write_text(
        "# Widget\n"
        "\n"
        "The App\\Widget class renders things.\n"
        "Call Widget::render() to draw it.\n"
        "\n"
        "```php\n"
        "$w->prepare();\n"
        "```\n"
    )

    (docs / "mail.md").write_text(
        "# Mail\n"
        "\n"
        "Mail goes through App\\Service\\Mailer.\n"
        "Use ->send() to deliver.\n"
        "See [helpers](../src/Support/helpers.php#L10).\n"
        "Old reference to App\\Missing\\Thing here.\n"
        "We speak JSON over HTTP and PHP\\API.\n"
    )

    return root


@pytest.fixture
def sample_config(sample_docs):
    """Default configuration rooted at the sample project."""
    return Configuration(project_root=sample_docs)
