"""Resolve documentation references against the symbol catalog.

Resolution only ever sets ``documented`` to True, so the final documented
set does not depend on the order references are resolved in. The target
location recorded on a reference is the first match in catalog insertion
order.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from scripts.doccov.models import CodeElement, DocumentationReference, ReferenceKind
from scripts.doccov.reference_extractor import SOURCE_DIR_NAME, parse_code_link
from scripts.doccov.symbol_catalog import SymbolCatalog
from scripts.doccov.utils.paths import path_label

logger = logging.getLogger(__name__)

# Elements within this many lines of a link's #L anchor are documented by it
LINK_LINE_TOLERANCE = 10

HOSTED_BLOB_PATTERN = re.compile(r"/(?:-/)?blob/[^/]+/(.+)$")
RELATIVE_PREFIX_PATTERN = re.compile(r"^(?:\.{1,2}/|/)+")


@dataclass
class MatchStats:
    """Outcome counts of one resolution pass."""

    resolved: int = 0
    unresolved: int = 0
    documented_elements: int = 0


def normalize_link_path(path: str) -> str:
    """Reduce a link path to a project-relative form.

    Hosted blob URLs keep the part after ``/blob/<ref>/``; leading ``./``,
    ``../`` and ``/`` segments are stripped.
    """
    blob = HOSTED_BLOB_PATTERN.search(path)
    if blob:
        path = blob.group(1)
    return RELATIVE_PREFIX_PATTERN.sub("", path)


class MatchingEngine:
    """Resolves references and marks the elements they document."""

    def __init__(self, catalog: SymbolCatalog, project_root: Path | str):
        self.catalog = catalog
        self.project_root = Path(project_root).resolve()

    def resolve(self, references: Iterable[DocumentationReference]) -> MatchStats:
        """Resolve every reference in order.

        Args:
            references: References to resolve; mutated in place

        Returns:
            Resolution counts and the resulting documented element count
        """
        stats = MatchStats()
        for reference in references:
            if self.resolve_reference(reference):
                stats.resolved += 1
            else:
                stats.unresolved += 1
        stats.documented_elements = sum(1 for e in self.catalog.elements if e.documented)
        logger.debug(
            f"Resolved {stats.resolved} references, {stats.unresolved} unresolved, "
            f"{stats.documented_elements} elements documented"
        )
        return stats

    def resolve_reference(self, reference: DocumentationReference) -> bool:
        """Resolve a single reference, marking matched elements documented.

        Returns:
            True if the reference now points at a code location
        """
        if reference.kind is ReferenceKind.LINK:
            resolved = self._resolve_link(reference)
        else:
            resolved = self._resolve_symbol(reference)

        if not resolved:
            logger.debug(
                f"Unresolved {reference.kind.value} reference '{reference.text}' "
                f"at {reference.source_file}:{reference.source_line}"
            )
        return resolved

    def _resolve_symbol(self, reference: DocumentationReference) -> bool:
        matches = self.catalog.lookup(reference.kind, reference.text)
        if not matches:
            return False

        for element in matches:
            element.documented = True
        first = matches[0]
        reference.resolve_to(first.file, first.line)
        return True

    def _resolve_link(self, reference: DocumentationReference) -> bool:
        link = parse_code_link(reference.text)
        if link is None:
            return False

        file_path = self.find_link_target(link.path)
        if file_path is None:
            return False

        label = path_label(file_path, self.project_root)
        reference.resolve_to(label, link.line)
        for element in self._elements_near(label, link.line):
            element.documented = True
        return True

    def find_link_target(self, link_path: str) -> Optional[Path]:
        """First existing file among the candidate locations of a link path."""
        relative = normalize_link_path(link_path)
        candidates = [
            self.project_root / relative,
            self.project_root / SOURCE_DIR_NAME / relative,
            Path(link_path),
        ]
        for candidate in candidates:
            if candidate.is_file():
                return candidate
        return None

    def _elements_near(self, file: str, line: Optional[int]) -> list[CodeElement]:
        elements = self.catalog.elements_in_file(file)
        if line is None:
            return elements
        return [e for e in elements if abs(e.line - line) <= LINK_LINE_TOLERANCE]
