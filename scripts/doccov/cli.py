"""Command-line interface for documentation coverage analysis."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from enum import IntEnum
from pathlib import Path
from typing import Any, Optional

from scripts.doccov.analysis import analyze, resolve_without_verdict
from scripts.doccov.baseline import (
    DEFAULT_REASON,
    generate_baseline,
    load_baseline,
    save_baseline,
    update_baseline,
    validate_baseline,
)
from scripts.doccov.config import (
    DEFAULT_CONFIG_FILE,
    OUTPUT_FORMATS,
    ConfigError,
    Configuration,
    load_config,
)
from scripts.doccov.php_scanner import scan_source_tree
from scripts.doccov.report import render

logger = logging.getLogger(__name__)


class ExitCode(IntEnum):
    """Process exit codes."""

    SUCCESS = 0
    FAILURE = 1
    CONFIG_ERROR = 2


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    """CLI options that were explicitly given, keyed by config field."""
    return {
        "source_paths": args.source,
        "docs_paths": args.docs,
        "exclude_paths": args.exclude,
        "baseline_file": args.baseline,
        "output_format": getattr(args, "format", None),
        "output_file": getattr(args, "output", None),
        "minimum_coverage": getattr(args, "min_coverage", None),
        "coverage_scope": getattr(args, "coverage_scope", None),
    }


def _get_config(args: argparse.Namespace) -> Configuration:
    return load_config(args.path, args.config, _overrides(args))


def _baseline_path(config: Configuration) -> Optional[Path]:
    """Baseline file, relative paths resolved against the project root."""
    if not config.baseline_file:
        return None
    path = Path(config.baseline_file)
    if not path.is_absolute():
        path = config.project_root / path
    return path


def cmd_analyze(args: argparse.Namespace) -> int:
    """Analyze coverage and print or save the report."""
    try:
        config = _get_config(args)
    except ConfigError as e:
        print(json.dumps(e.to_json()), file=sys.stderr)
        return ExitCode.CONFIG_ERROR

    baseline_entries = None
    baseline_path = _baseline_path(config)
    if baseline_path is not None:
        baseline_entries = load_baseline(baseline_path)
        logger.info(f"Loaded {len(baseline_entries)} baseline entries from {baseline_path}")

    report = analyze(config, baseline_entries)
    content = render(report, config.output_format, config.minimum_coverage)

    if config.output_file:
        output_path = Path(config.output_file)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content + "\n", encoding="utf-8")
        print(f"Report saved to: {output_path}")
    else:
        print(content)

    if report.is_successful(config.minimum_coverage):
        return ExitCode.SUCCESS

    if config.output_format != "console" or config.output_file:
        print(
            f"Documentation coverage check failed! Coverage: {report.percentage:.1f}% "
            f"(minimum: {config.minimum_coverage:.1f}%)",
            file=sys.stderr,
        )
    return ExitCode.FAILURE


def cmd_generate_baseline(args: argparse.Namespace) -> int:
    """Snapshot every currently undocumented element into the baseline."""
    try:
        config = _get_config(args)
    except ConfigError as e:
        print(json.dumps(e.to_json()), file=sys.stderr)
        return ExitCode.CONFIG_ERROR

    baseline_path = _baseline_path(config)
    if baseline_path is None:
        print("Baseline file path is required (--baseline)", file=sys.stderr)
        return ExitCode.FAILURE

    result = resolve_without_verdict(config)
    entries = generate_baseline(result.elements, DEFAULT_REASON)
    if not entries:
        print("All elements are documented! No baseline needed.")
        return ExitCode.SUCCESS

    save_baseline(baseline_path, entries)
    print(f"Baseline generated successfully: {baseline_path}")
    print(f"Total entries: {len(entries)}")
    print(f"Files covered: {len({entry.file for entry in entries})}")
    return ExitCode.SUCCESS


def cmd_update_baseline(args: argparse.Namespace) -> int:
    """Remove baseline entries whose element no longer exists."""
    try:
        config = _get_config(args)
    except ConfigError as e:
        print(json.dumps(e.to_json()), file=sys.stderr)
        return ExitCode.CONFIG_ERROR

    baseline_path = _baseline_path(config)
    if baseline_path is None:
        print("Baseline file path is required (--baseline)", file=sys.stderr)
        return ExitCode.FAILURE
    if not baseline_path.exists():
        print(f"Baseline file not found: {baseline_path}", file=sys.stderr)
        return ExitCode.FAILURE

    existing = load_baseline(baseline_path)
    updated = update_baseline(existing, scan_source_tree(config).elements)
    removed = len(existing) - len(updated)
    save_baseline(baseline_path, updated)

    if removed > 0:
        print(f"Removed {removed} invalid entries from baseline")
        print(f"Remaining entries: {len(updated)}")
    else:
        print("Baseline is up to date. No changes needed.")
    return ExitCode.SUCCESS


def cmd_validate_baseline(args: argparse.Namespace) -> int:
    """Report stale baseline entries without modifying the file."""
    try:
        config = _get_config(args)
    except ConfigError as e:
        print(json.dumps(e.to_json()), file=sys.stderr)
        return ExitCode.CONFIG_ERROR

    baseline_path = _baseline_path(config)
    if baseline_path is None or not baseline_path.exists():
        print(f"Baseline file not found: {baseline_path or '(none given)'}", file=sys.stderr)
        return ExitCode.FAILURE

    validation = validate_baseline(load_baseline(baseline_path), scan_source_tree(config).elements)
    print(f"Valid entries: {len(validation.valid)}")
    print(f"Stale entries: {len(validation.invalid)}")
    for entry in validation.invalid:
        print(f"  {entry.file}:{entry.line} - {entry.element_type} {entry.element_name}")

    return ExitCode.FAILURE if validation.invalid else ExitCode.SUCCESS


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    """Add the project and path options shared by every command."""
    parser.add_argument("path", nargs="?", default=".", help="Project path to analyze (default: .)")
    parser.add_argument(
        "--config",
        "-c",
        help=f"Path to config file, relative to the project (default: {DEFAULT_CONFIG_FILE})",
    )
    parser.add_argument("--source", "-s", action="append", help="Source directory (repeatable)")
    parser.add_argument("--docs", "-d", action="append", help="Documentation directory (repeatable)")
    parser.add_argument("--exclude", "-e", action="append", help="Directory to exclude (repeatable)")
    parser.add_argument("--baseline", "-b", help="Baseline file path")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="doccov",
        description="Documentation coverage analysis for PHP codebases",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # analyze command
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze documentation coverage",
    )
    _add_common_args(analyze_parser)
    analyze_parser.add_argument(
        "--format",
        "-f",
        help=f"Output format: {', '.join(OUTPUT_FORMATS)} (default: console)",
    )
    analyze_parser.add_argument("--output", "-o", help="Write the report to this file")
    analyze_parser.add_argument(
        "--min-coverage", "-m", type=float, help="Minimum coverage percentage"
    )
    analyze_parser.add_argument("--coverage-scope", help="Coverage scope: classes or elements")

    # generate-baseline command
    generate_parser = subparsers.add_parser(
        "generate-baseline",
        help="Write a baseline of all currently undocumented elements",
    )
    _add_common_args(generate_parser)

    # update-baseline command
    update_parser = subparsers.add_parser(
        "update-baseline",
        help="Remove baseline entries whose element no longer exists",
    )
    _add_common_args(update_parser)

    # validate-baseline command
    validate_parser = subparsers.add_parser(
        "validate-baseline",
        help="Report stale baseline entries",
    )
    _add_common_args(validate_parser)

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    commands = {
        "analyze": cmd_analyze,
        "generate-baseline": cmd_generate_baseline,
        "update-baseline": cmd_update_baseline,
        "validate-baseline": cmd_validate_baseline,
    }

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
