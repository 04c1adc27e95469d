"""End-to-end coverage pipeline: scan, extract, match, filter, aggregate."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from scripts.doccov.baseline import filter_elements
from scripts.doccov.config import Configuration
from scripts.doccov.coverage import CoverageReport
from scripts.doccov.matcher import MatchingEngine, MatchStats
from scripts.doccov.models import BaselineEntry, CodeElement, DocumentationReference
from scripts.doccov.php_scanner import scan_source_tree
from scripts.doccov.reference_extractor import extract_all_references
from scripts.doccov.symbol_catalog import SymbolCatalog

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Elements and references of one run, plus what was skipped."""

    elements: list[CodeElement] = field(default_factory=list)
    references: list[DocumentationReference] = field(default_factory=list)
    source_files: list[str] = field(default_factory=list)
    doc_files: list[str] = field(default_factory=list)
    skipped_files: list[str] = field(default_factory=list)
    match_stats: Optional[MatchStats] = None


def collect(config: Configuration) -> AnalysisResult:
    """Scan sources and documentation without matching."""
    source_scan = scan_source_tree(config)
    docs_scan = extract_all_references(config)
    logger.info(
        f"Found {len(source_scan.elements)} elements in {len(source_scan.files)} source files, "
        f"{len(docs_scan.references)} references in {len(docs_scan.files)} documentation files"
    )
    return AnalysisResult(
        elements=source_scan.elements,
        references=docs_scan.references,
        source_files=source_scan.files,
        doc_files=docs_scan.files,
        skipped_files=source_scan.skipped_files + docs_scan.skipped_files,
    )


def resolve_without_verdict(config: Configuration) -> AnalysisResult:
    """Collect and match, leaving baseline filtering and scoring to the caller.

    Returns:
        AnalysisResult whose elements carry their final documented flags
    """
    result = collect(config)
    engine = MatchingEngine(SymbolCatalog(result.elements), config.project_root)
    result.match_stats = engine.resolve(result.references)
    return result


def analyze(
    config: Configuration,
    baseline_entries: Optional[list[BaselineEntry]] = None,
) -> CoverageReport:
    """Run the full pipeline and build the coverage report.

    Args:
        config: Run configuration
        baseline_entries: Accepted undocumented elements to exclude

    Returns:
        CoverageReport for the run
    """
    result = resolve_without_verdict(config)
    elements = result.elements
    if baseline_entries:
        elements = filter_elements(elements, baseline_entries)
        logger.info(f"Baseline excluded {len(result.elements) - len(elements)} elements")
    return CoverageReport.from_results(elements, result.references, config.is_classes_only_scope)
