"""Coverage statistics over resolved elements and references."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, NamedTuple

from scripts.doccov.models import (
    CodeElement,
    DocumentationReference,
    ElementKind,
    REPORTED_KINDS,
)


class KindCoverage(NamedTuple):
    """Coverage numbers for one element kind."""

    total: int
    documented: int
    undocumented: int
    percentage: float

    def to_dict(self) -> dict[str, Any]:
        return self._asdict()


def coverage_percentage(documented: int, total: int) -> float:
    """Documented share in percent; an empty population counts as covered."""
    if total == 0:
        return 100.0
    return documented / total * 100


def _kind_coverage(elements: Iterable[CodeElement], kind: ElementKind) -> KindCoverage:
    of_kind = [e for e in elements if e.kind is kind and e.should_be_documented]
    documented = sum(1 for e in of_kind if e.documented)
    return KindCoverage(
        total=len(of_kind),
        documented=documented,
        undocumented=len(of_kind) - documented,
        percentage=coverage_percentage(documented, len(of_kind)),
    )


def _location_order(element: CodeElement) -> tuple[str, int, str, str]:
    return (element.file, element.line, element.kind.value, element.name)


@dataclass(frozen=True)
class CoverageReport:
    """Aggregate coverage result, computed once from the final collections.

    Attributes:
        elements: Every element given to the report (after baseline filtering)
        references: Every documentation reference
        documentable: Elements counted towards coverage
        undocumented: Counted elements still undocumented, by file and line
        broken_references: References that did not resolve
    """

    elements: tuple[CodeElement, ...]
    references: tuple[DocumentationReference, ...]
    documentable: tuple[CodeElement, ...]
    undocumented: tuple[CodeElement, ...]
    broken_references: tuple[DocumentationReference, ...]
    classes_only: bool = False

    @classmethod
    def from_results(
        cls,
        elements: Iterable[CodeElement],
        references: Iterable[DocumentationReference],
        classes_only: bool = False,
    ) -> "CoverageReport":
        """Build a report from resolved elements and references.

        Args:
            elements: Elements after matching (and baseline filtering)
            references: References after matching
            classes_only: Count only class, interface and trait declarations

        Returns:
            Immutable CoverageReport
        """
        elements = tuple(elements)
        references = tuple(references)

        documentable = [e for e in elements if e.should_be_documented]
        if classes_only:
            documentable = [e for e in documentable if e.is_type]

        undocumented = sorted((e for e in documentable if not e.documented), key=_location_order)
        broken = tuple(r for r in references if not r.valid)

        return cls(
            elements=elements,
            references=references,
            documentable=tuple(documentable),
            undocumented=tuple(undocumented),
            broken_references=broken,
            classes_only=classes_only,
        )

    @property
    def total_elements(self) -> int:
        return len(self.documentable)

    @property
    def undocumented_elements(self) -> int:
        return len(self.undocumented)

    @property
    def documented_elements(self) -> int:
        return self.total_elements - self.undocumented_elements

    @property
    def percentage(self) -> float:
        return coverage_percentage(self.documented_elements, self.total_elements)

    @property
    def undocumented_classes(self) -> tuple[CodeElement, ...]:
        return tuple(e for e in self.undocumented if e.is_type)

    @property
    def has_broken_references(self) -> bool:
        return bool(self.broken_references)

    def is_successful(self, minimum_coverage: float) -> bool:
        """Pass/fail verdict.

        Broken references are reported but do not fail the run.
        """
        return self.percentage >= minimum_coverage

    def coverage_by_kind(self) -> dict[ElementKind, KindCoverage]:
        """Per-kind coverage over all elements that should be documented.

        The breakdown ignores the classes-only scope so every reported kind
        keeps its own numbers.
        """
        return {kind: _kind_coverage(self.elements, kind) for kind in REPORTED_KINDS}

    def constant_coverage(self) -> KindCoverage:
        """Class constants: part of the overall numbers, outside the per-kind table."""
        return _kind_coverage(self.elements, ElementKind.CONSTANT)

    def summary(self) -> dict[str, Any]:
        return {
            "coverage_percentage": self.percentage,
            "total_elements": self.total_elements,
            "documented_elements": self.documented_elements,
            "undocumented_elements": self.undocumented_elements,
            "undocumented_classes": len(self.undocumented_classes),
            "broken_references": len(self.broken_references),
        }

    def to_dict(self) -> dict[str, Any]:
        """Machine-readable export including the raw element and reference lists."""
        return {
            "summary": self.summary(),
            "coverage_by_type": {
                kind.value: stats.to_dict() for kind, stats in self.coverage_by_kind().items()
            },
            "constants": self.constant_coverage().to_dict(),
            "undocumented_classes": [e.to_dict() for e in self.undocumented_classes],
            "undocumented_elements": [e.to_dict() for e in self.undocumented],
            "broken_references": [r.to_dict() for r in self.broken_references],
            "all_elements": [e.to_dict() for e in self.elements],
            "all_references": [r.to_dict() for r in self.references],
        }


def group_by_file(elements: Iterable[CodeElement]) -> dict[str, list[CodeElement]]:
    """Group elements by file, keeping first-seen file order."""
    grouped: dict[str, list[CodeElement]] = {}
    for element in elements:
        grouped.setdefault(element.file, []).append(element)
    return grouped
