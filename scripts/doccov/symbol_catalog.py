"""Multi-key index over the code elements of one run."""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from scripts.doccov.models import CodeElement, ElementKind, ReferenceKind, TYPE_KINDS

# Member kinds that also get a name bucket of their own
BUCKETED_KINDS = (ElementKind.METHOD, ElementKind.PROPERTY, ElementKind.CONSTANT)

# Element kinds a reference of each kind may resolve to
COMPATIBLE_KINDS: dict[ReferenceKind, frozenset[ElementKind]] = {
    ReferenceKind.CLASS: TYPE_KINDS,
    ReferenceKind.METHOD: frozenset({ElementKind.METHOD}),
    ReferenceKind.PROPERTY: frozenset({ElementKind.PROPERTY, ElementKind.CONSTANT}),
}


class SymbolCatalog:
    """Index of code elements by bare name, qualified name and member kind.

    Every key maps to the elements in the order they were added, so a
    common member name like ``save`` resolves to all declaring types.
    The catalog is built once per run and never shrinks.
    """

    def __init__(self, elements: Iterable[CodeElement] = ()):
        self.elements: list[CodeElement] = []
        self._by_name: dict[str, list[CodeElement]] = defaultdict(list)
        self._by_qualified_name: dict[str, list[CodeElement]] = defaultdict(list)
        self._by_kind: dict[ElementKind, dict[str, list[CodeElement]]] = {
            kind: defaultdict(list) for kind in BUCKETED_KINDS
        }
        self._by_file: dict[str, list[CodeElement]] = defaultdict(list)
        for element in elements:
            self.add(element)

    def __len__(self) -> int:
        return len(self.elements)

    def add(self, element: CodeElement) -> None:
        self.elements.append(element)
        self._by_name[element.name].append(element)
        self._by_qualified_name[element.qualified_name].append(element)
        if element.kind in self._by_kind:
            self._by_kind[element.kind][element.name].append(element)
        self._by_file[element.file].append(element)

    def by_qualified_name(self, qualified_name: str) -> list[CodeElement]:
        return list(self._by_qualified_name.get(qualified_name, []))

    def by_kind(self, kind: ElementKind, name: str) -> list[CodeElement]:
        bucket = self._by_kind.get(kind)
        if bucket is None:
            return []
        return list(bucket.get(name, []))

    def lookup(self, reference_kind: ReferenceKind, text: str) -> list[CodeElement]:
        """Find the elements a mention of ``text`` may refer to.

        Class mentions are looked up by qualified name, then bare name.
        Member mentions are looked up in the member buckets.

        Args:
            reference_kind: Kind of the documentation reference
            text: Mentioned name, without sigil or parentheses

        Returns:
            Matching elements in insertion order, each at most once
        """
        compatible = COMPATIBLE_KINDS.get(reference_kind)
        if compatible is None:
            return []

        if reference_kind is ReferenceKind.CLASS:
            candidates = self._by_qualified_name.get(text, []) + self._by_name.get(text, [])
        else:
            candidates = []
            for kind in BUCKETED_KINDS:
                if kind in compatible:
                    candidates.extend(self._by_kind[kind].get(text, []))

        matches: list[CodeElement] = []
        seen: set[int] = set()
        for element in candidates:
            if element.kind in compatible and id(element) not in seen:
                seen.add(id(element))
                matches.append(element)
        return matches

    def elements_in_file(self, file: str) -> list[CodeElement]:
        return list(self._by_file.get(file, []))
