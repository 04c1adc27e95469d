"""Extract code references from documentation files.

Each file is processed in ordered passes:

1. Qualified class names (``App\\Service\\Mailer``) on every line.
2. The documented-class set, built from pass 1 (full and short names).
3. Member mentions (``->send(``, ``Mailer::send(``, ``->host``) outside
   fenced code blocks, gated by the documented-class set.
4. Markdown links pointing at PHP sources, independent of the above.

The exclusion lists and the context window are part of the matching
contract: changing them changes coverage numbers.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, NamedTuple, Optional

from scripts.doccov.config import Configuration
from scripts.doccov.doc_scanner import DocLine, find_doc_files, read_doc_file
from scripts.doccov.models import DocumentationReference, NAMESPACE_SEPARATOR, ReferenceKind
from scripts.doccov.utils.paths import path_label

logger = logging.getLogger(__name__)

# Final segments that are acronyms, not classes (case-sensitive)
COMMON_ACRONYMS = frozenset({
    "PHP", "HTML", "JSON", "XML", "API", "CLI", "URL", "HTTP", "HTTPS",
    "CSS", "JS", "SQL", "CI", "CD", "CRUD", "UUID", "UTF", "ASCII",
})

# Method names too generic to count without a qualifying class
COMMON_METHODS = frozenset({
    "get", "set", "has", "is", "add", "remove", "create", "delete", "update",
    "find", "save", "load", "run", "execute", "call", "apply", "bind", "clone",
    "__construct", "__destruct", "__get", "__set", "__call", "__toString",
})

# Variables too generic to count, matched with their `$` sigil
COMMON_VARIABLES = frozenset({
    "$this", "$self", "$static", "$parent", "$id", "$name", "$data", "$config",
    "$request", "$response", "$session", "$user", "$item", "$value", "$key",
})

# Lines above and below a member mention searched for a documented class
CONTEXT_WINDOW = 3

SOURCE_DIR_NAME = "src"

CLASS_PATTERN = re.compile(r"\\?([A-Z][a-zA-Z0-9_]*(?:\\[A-Z][a-zA-Z0-9_]*)+)")
METHOD_PATTERN = re.compile(
    r"([A-Z][a-zA-Z0-9_]*)::([a-zA-Z_][a-zA-Z0-9_]*)\s*\("
    r"|(?:->|::)([a-zA-Z_][a-zA-Z0-9_]*)\s*\("
)
PROPERTY_PATTERN = re.compile(r"(?:->|::)(\$?[a-zA-Z_][a-zA-Z0-9_]*)(?![a-zA-Z0-9_]|\s*\()")
CODE_LINE_PATTERN = re.compile(r"^\s*(?:\$|//|/\*|\*|#)")
MARKDOWN_LINK_PATTERN = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")

SOURCE_LINK_PATTERN = re.compile(r"\.php(?:#.*)?$")
HOSTED_LINK_PATTERN = re.compile(r"(?:github\.com|gitlab\.com).*#L\d+")
RELATIVE_SOURCE_PATTERN = re.compile(r"^(?:\.\.?/)*" + SOURCE_DIR_NAME + r"/.*\.php")
CODE_LINK_GRAMMAR = re.compile(r"^(.+\.php)(?:#L(\d+))?$")


class CodeLink(NamedTuple):
    """A link target split into file path and optional line anchor."""

    path: str
    line: Optional[int]


@dataclass
class DocumentExtraction:
    """References found in one document plus the state gating pass 3."""

    references: list[DocumentationReference]
    documented_classes: frozenset[str]


@dataclass
class DocsScan:
    """Result of scanning all documentation files."""

    references: list[DocumentationReference] = field(default_factory=list)
    files: list[str] = field(default_factory=list)
    skipped_files: list[str] = field(default_factory=list)


def is_common_acronym(class_name: str) -> bool:
    return class_name.split(NAMESPACE_SEPARATOR)[-1] in COMMON_ACRONYMS


def is_code_link(target: str) -> bool:
    """Check if a Markdown link target points at PHP source."""
    if SOURCE_LINK_PATTERN.search(target):
        return True
    if HOSTED_LINK_PATTERN.search(target):
        return True
    if RELATIVE_SOURCE_PATTERN.search(target):
        return True
    return False


def parse_code_link(target: str) -> Optional[CodeLink]:
    """Split ``path/File.php#L12`` into its path and line anchor.

    Returns:
        CodeLink, or None if the target does not end in a PHP file
    """
    match = CODE_LINK_GRAMMAR.match(target)
    if not match:
        return None
    line = int(match.group(2)) if match.group(2) else None
    return CodeLink(match.group(1), line)


def find_class_references(lines: list[DocLine], source_file: str) -> list[DocumentationReference]:
    """Pass 1: qualified class names on every line, code blocks included."""
    refs: list[DocumentationReference] = []
    for line in lines:
        for match in CLASS_PATTERN.finditer(line.text):
            class_name = match.group(1)
            if is_common_acronym(class_name):
                continue
            refs.append(
                DocumentationReference(source_file, line.number, ReferenceKind.CLASS, class_name)
            )
    return refs


def documented_class_names(class_refs: Iterable[DocumentationReference]) -> frozenset[str]:
    """Pass 2: full and short names of every class mentioned."""
    names: set[str] = set()
    for ref in class_refs:
        if ref.kind is not ReferenceKind.CLASS:
            continue
        names.add(ref.text)
        names.add(ref.text.split(NAMESPACE_SEPARATOR)[-1])
    return frozenset(names)


def _mentions_documented_class(text: str, documented_classes: frozenset[str]) -> bool:
    return any(name in text for name in documented_classes)


def _in_documented_context(
    lines: list[DocLine],
    index: int,
    documented_classes: frozenset[str],
) -> bool:
    """Check the line itself and CONTEXT_WINDOW lines on either side."""
    if _mentions_documented_class(lines[index].text, documented_classes):
        return True
    start = max(0, index - CONTEXT_WINDOW)
    end = min(len(lines) - 1, index + CONTEXT_WINDOW)
    for i in range(start, end + 1):
        if i != index and _mentions_documented_class(lines[i].text, documented_classes):
            return True
    return False


def find_member_references(
    lines: list[DocLine],
    source_file: str,
    documented_classes: frozenset[str],
) -> list[DocumentationReference]:
    """Pass 3: method and property mentions outside fenced code blocks."""
    refs: list[DocumentationReference] = []
    if not documented_classes:
        return refs

    for index, line in enumerate(lines):
        if line.is_fence or line.in_code_block:
            continue

        for match in METHOD_PATTERN.finditer(line.text):
            class_name, static_method, bare_method = match.groups()
            if class_name is not None:
                if class_name in documented_classes:
                    refs.append(
                        DocumentationReference(source_file, line.number, ReferenceKind.METHOD, static_method)
                    )
            elif bare_method not in COMMON_METHODS and _in_documented_context(
                lines, index, documented_classes
            ):
                refs.append(
                    DocumentationReference(source_file, line.number, ReferenceKind.METHOD, bare_method)
                )

        if CODE_LINE_PATTERN.match(line.text):
            continue
        for match in PROPERTY_PATTERN.finditer(line.text):
            mention = match.group(1)
            if mention in COMMON_VARIABLES:
                continue
            name = mention.lstrip("$")
            if _in_documented_context(lines, index, documented_classes):
                refs.append(
                    DocumentationReference(source_file, line.number, ReferenceKind.PROPERTY, name)
                )

    return refs


def find_markdown_links(lines: list[DocLine], source_file: str) -> list[DocumentationReference]:
    """Pass 4: Markdown links whose target looks like PHP source."""
    refs: list[DocumentationReference] = []
    for line in lines:
        for match in MARKDOWN_LINK_PATTERN.finditer(line.text):
            target = match.group(2)
            if is_code_link(target):
                refs.append(
                    DocumentationReference(source_file, line.number, ReferenceKind.LINK, target)
                )
    return refs


def extract_references(lines: list[DocLine], source_file: str) -> DocumentExtraction:
    """Run all passes over one document.

    Args:
        lines: Scanned documentation lines
        source_file: Label stored on every reference

    Returns:
        References in pass order plus the documented-class set
    """
    class_refs = find_class_references(lines, source_file)
    documented = documented_class_names(class_refs)
    member_refs = find_member_references(lines, source_file, documented)
    link_refs = find_markdown_links(lines, source_file)
    return DocumentExtraction(class_refs + member_refs + link_refs, documented)


def extract_all_references(config: Configuration) -> DocsScan:
    """Extract references from every documentation file.

    Unreadable files contribute nothing; they are logged and listed in
    ``skipped_files``.
    """
    scan = DocsScan()
    for path in find_doc_files(config):
        label = path_label(path, config.project_root)
        try:
            extraction = extract_references(read_doc_file(path), label)
        except (OSError, UnicodeDecodeError, ValueError) as e:
            logger.warning(f"Skipping documentation file {label}: {e}")
            scan.skipped_files.append(label)
            continue
        except Exception:
            logger.exception(f"Failed to extract references from {label}")
            scan.skipped_files.append(label)
            continue

        scan.files.append(label)
        scan.references.extend(extraction.references)
        logger.debug(f"{label}: {len(extraction.references)} references")

    return scan
