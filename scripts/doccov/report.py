"""Render a CoverageReport as console text, JSON or HTML."""

from __future__ import annotations

import html
import json

from scripts.doccov.coverage import CoverageReport, group_by_file
from scripts.doccov.models import CodeElement

RULE_WIDTH = 50
SECTION_RULE_WIDTH = 30

HTML_STYLES = """
        body { font-family: Arial, sans-serif; margin: 0; padding: 20px; background-color: #f5f5f5; }
        .container { max-width: 1200px; margin: 0 auto; background: white; padding: 30px; border-radius: 8px; }
        h1 { color: #333; margin-bottom: 30px; }
        h2 { color: #555; border-bottom: 2px solid #eee; padding-bottom: 10px; }
        h3 { color: #666; margin-top: 20px; }
        .summary { text-align: center; margin-bottom: 40px; padding: 20px; background: #f9f9f9; }
        .coverage-badge { display: inline-block; font-size: 3em; font-weight: bold; padding: 20px 30px; }
        .coverage-badge.success { background: #4CAF50; color: white; }
        .coverage-badge.error { background: #f44336; color: white; }
        .coverage-table { width: 100%; border-collapse: collapse; margin-bottom: 30px; }
        .coverage-table th, .coverage-table td { padding: 12px; text-align: left; border-bottom: 1px solid #ddd; }
        .coverage-table tr.success { background-color: #e8f5e8; }
        .coverage-table tr.warning { background-color: #fff3cd; }
        .coverage-table tr.error { background-color: #f8d7da; }
        .file-section { margin-bottom: 20px; padding: 15px; background: #f9f9f9; }
        code { background: #f4f4f4; padding: 2px 4px; font-family: monospace; }
"""


def _status_issues(report: CoverageReport, minimum_coverage: float) -> list[str]:
    issues = []
    if report.percentage < minimum_coverage:
        issues.append(
            f"Coverage {report.percentage:.1f}% is below minimum {minimum_coverage:.1f}%"
        )
    if report.has_broken_references:
        issues.append(f"{len(report.broken_references)} broken reference(s)")
    return issues


def _element_lines(title: str, elements: tuple[CodeElement, ...]) -> list[str]:
    lines = [title, "-" * SECTION_RULE_WIDTH]
    for file, file_elements in group_by_file(elements).items():
        lines.append(f"  {file}")
        for element in file_elements:
            lines.append(f"    Line {element.line}: {element.kind.value} {element.name}")
        lines.append("")
    return lines


def render_console(report: CoverageReport, minimum_coverage: float) -> str:
    """Plain-text report for terminals.

    Args:
        report: Coverage report
        minimum_coverage: Threshold the verdict is checked against

    Returns:
        Report text ending with the PASSED/FAILED status
    """
    lines = [
        "Documentation Coverage Report",
        "=" * RULE_WIDTH,
        "",
        f"Overall Coverage: {report.percentage:.1f}% "
        f"({report.documented_elements}/{report.total_elements} elements)",
        f"Minimum Required: {minimum_coverage:.1f}%",
        "",
        "Coverage by Type:",
        "-" * SECTION_RULE_WIDTH,
    ]
    for kind, stats in report.coverage_by_kind().items():
        if stats.total > 0:
            label = kind.value.capitalize()
            lines.append(
                f"  {label:<12}: {stats.percentage:.1f}% ({stats.documented}/{stats.total})"
            )
    constants = report.constant_coverage()
    if constants.total > 0 and not report.classes_only:
        lines.append(
            f"  Overall includes {constants.documented}/{constants.total} class constants"
        )
    lines.append("")

    if report.undocumented_classes:
        lines.extend(_element_lines("Undocumented Classes:", report.undocumented_classes))
    if report.undocumented:
        lines.extend(_element_lines("Undocumented Elements:", report.undocumented))

    if report.broken_references:
        lines.append("Broken Documentation References:")
        lines.append("-" * 35)
        for ref in report.broken_references:
            lines.append(f"  {ref.source_file}:{ref.source_line} - {ref.kind.value} '{ref.text}'")
        lines.append("")

    if report.is_successful(minimum_coverage):
        lines.append("✅ PASSED")
    else:
        lines.append("❌ FAILED")
        lines.append("Issues: " + ", ".join(_status_issues(report, minimum_coverage)))

    return "\n".join(lines)


def render_json(report: CoverageReport) -> str:
    return json.dumps(report.to_dict(), indent=2, ensure_ascii=False)


def _kind_status(percentage: float) -> str:
    if percentage >= 80:
        return "success"
    if percentage >= 50:
        return "warning"
    return "error"


def _element_section(title: str, elements: tuple[CodeElement, ...]) -> list[str]:
    parts = [f"        <h2>{title}</h2>", '        <div class="file-list">']
    for file, file_elements in group_by_file(elements).items():
        parts.append('            <div class="file-section">')
        parts.append(f"                <h3>{html.escape(file)}</h3>")
        parts.append("                <ul>")
        for element in file_elements:
            parts.append(
                f"                    <li>Line {element.line}: "
                f"<code>{element.kind.value} {html.escape(element.name)}</code></li>"
            )
        parts.append("                </ul>")
        parts.append("            </div>")
    parts.append("        </div>")
    return parts


def render_html(report: CoverageReport, minimum_coverage: float) -> str:
    """Standalone HTML page with summary, per-kind table and undocumented lists."""
    status = "success" if report.is_successful(minimum_coverage) else "error"
    parts = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '    <meta charset="UTF-8">',
        "    <title>Documentation Coverage Report</title>",
        "    <style>",
        HTML_STYLES,
        "    </style>",
        "</head>",
        "<body>",
        '    <div class="container">',
        "        <h1>Documentation Coverage Report</h1>",
        '        <div class="summary">',
        f'            <div class="coverage-badge {status}">{report.percentage:.1f}%</div>',
        f"            <p>{report.documented_elements} out of {report.total_elements} elements documented</p>",
        f"            <p>Minimum required: {minimum_coverage:.1f}%</p>",
        "        </div>",
        "        <h2>Coverage by Type</h2>",
        '        <table class="coverage-table">',
        "            <thead>",
        "                <tr><th>Type</th><th>Coverage</th><th>Documented</th><th>Total</th></tr>",
        "            </thead>",
        "            <tbody>",
    ]
    for kind, stats in report.coverage_by_kind().items():
        if stats.total == 0:
            continue
        parts.append(f'                <tr class="{_kind_status(stats.percentage)}">')
        parts.append(f"                    <td>{kind.value.capitalize()}</td>")
        parts.append(f"                    <td>{stats.percentage:.1f}%</td>")
        parts.append(f"                    <td>{stats.documented}</td>")
        parts.append(f"                    <td>{stats.total}</td>")
        parts.append("                </tr>")
    parts.extend(["            </tbody>", "        </table>"])
    constants = report.constant_coverage()
    if constants.total > 0 and not report.classes_only:
        parts.append(
            f"        <p>Overall coverage includes {constants.documented} out of "
            f"{constants.total} class constants documented</p>"
        )

    if report.undocumented_classes:
        parts.extend(_element_section("Undocumented Classes", report.undocumented_classes))
    if report.undocumented:
        parts.extend(_element_section("Undocumented Elements", report.undocumented))

    if report.broken_references:
        parts.append("        <h2>Broken Documentation References</h2>")
        parts.append("        <ul>")
        for ref in report.broken_references:
            parts.append(
                f"            <li>{html.escape(ref.source_file)}:{ref.source_line} - "
                f"{ref.kind.value} <code>{html.escape(ref.text)}</code></li>"
            )
        parts.append("        </ul>")

    parts.extend(["    </div>", "</body>", "</html>"])
    return "\n".join(parts)


RENDERERS = {
    "console": lambda report, minimum: render_console(report, minimum),
    "json": lambda report, minimum: render_json(report),
    "html": lambda report, minimum: render_html(report, minimum),
}


def render(report: CoverageReport, output_format: str, minimum_coverage: float) -> str:
    """Render in the named format.

    Raises:
        ValueError: If the format is unknown.
    """
    renderer = RENDERERS.get(output_format)
    if renderer is None:
        raise ValueError(f"Unknown output format: {output_format}")
    return renderer(report, minimum_coverage)
