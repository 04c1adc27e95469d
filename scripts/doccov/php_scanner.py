"""Extract documentable declarations from PHP source files.

This is a lexical scanner, not a full parser: comments and literals are
blanked out first (newlines kept so offsets still map to lines), then the
remaining tokens are walked with a scope stack to find class-likes,
functions, methods, properties and class constants.
"""

from __future__ import annotations

import logging
import re
from bisect import bisect_right
from dataclasses import dataclass, field
from pathlib import Path
from typing import NamedTuple, Optional

from scripts.doccov.config import Configuration
from scripts.doccov.models import CodeElement, ElementKind
from scripts.doccov.utils.paths import is_under, path_label

logger = logging.getLogger(__name__)

SOURCE_EXTENSION = ".php"

HEREDOC_START = re.compile(r"<<<[ \t]*([\"']?)([A-Za-z_]\w*)\1\r?\n")

TOKEN_PATTERN = re.compile(
    r"(?P<name>\\?[^\W\d]\w*(?:\\[^\W\d]\w*)*)"
    r"|(?P<var>\$[^\W\d]\w*)"
    r"|(?P<op>::|\?->|->|=>|===|!==|==|!=|<=>|<=|>=|\?\?=|\?\?|[{}()\[\];,=&?:])"
    r"|(?P<other>\S)"
)

# Canonical order used when reporting modifiers
MODIFIER_ORDER = ("public", "protected", "private", "static", "abstract", "final")

TYPE_MODIFIERS = frozenset({"abstract", "final", "readonly"})
MEMBER_MODIFIERS = frozenset({"public", "protected", "private", "static", "abstract", "final"})
PROPERTY_MODIFIERS = frozenset({"public", "protected", "private", "static", "readonly", "var"})

TYPE_KEYWORDS = {
    "class": ElementKind.CLASS,
    "enum": ElementKind.CLASS,
    "interface": ElementKind.INTERFACE,
    "trait": ElementKind.TRAIT,
}

# Scopes whose bodies hide declarations from the member/function passes
OPAQUE_SCOPES = frozenset({"type", "function", "opaque"})


class Token(NamedTuple):
    kind: str  # "name", "var", or the operator text itself
    value: str
    line: int


def strip_non_code(source: str) -> str:
    """Blank comments, string literals and inline HTML.

    Every blanked character becomes a space except newlines, so the result
    has the same length and line structure as the input. A closing ``?>``
    becomes ``;`` since it terminates a statement.
    """
    out = list(source)
    n = len(source)

    def blank(start: int, end: int) -> None:
        for j in range(start, min(end, n)):
            if out[j] != "\n":
                out[j] = " "

    i = 0
    in_php = False
    while i < n:
        if not in_php:
            j = source.find("<?", i)
            if j == -1:
                blank(i, n)
                break
            blank(i, j)
            if source.startswith("<?php", j):
                k = j + 5
            elif source.startswith("<?=", j):
                k = j + 3
            else:
                k = j + 2
            blank(j, k)
            i = k
            in_php = True
            continue

        ch = source[i]
        if source.startswith("?>", i):
            out[i] = ";"
            out[i + 1] = " "
            i += 2
            in_php = False
        elif source.startswith("//", i) or (ch == "#" and not source.startswith("#[", i)):
            end = source.find("\n", i)
            end = n if end == -1 else end
            tag = source.find("?>", i, end)
            if tag != -1:
                end = tag
            blank(i, end)
            i = end
        elif source.startswith("/*", i):
            end = source.find("*/", i + 2)
            end = n if end == -1 else end + 2
            blank(i, end)
            i = end
        elif ch in "'\"`":
            j = i + 1
            while j < n:
                if source[j] == "\\":
                    j += 2
                    continue
                if source[j] == ch:
                    j += 1
                    break
                j += 1
            blank(i, j)
            i = j
        elif source.startswith("<<<", i) and HEREDOC_START.match(source, i):
            match = HEREDOC_START.match(source, i)
            closing = re.compile(r"^[ \t]*" + re.escape(match.group(2)) + r"\b", re.MULTILINE)
            close_match = closing.search(source, match.end())
            end = close_match.end() if close_match else n
            blank(i, end)
            i = end
        else:
            i += 1

    return "".join(out)


def tokenize(code: str) -> list[Token]:
    """Split blanked PHP code into tokens carrying 1-based line numbers."""
    line_starts = [0] + [m.end() for m in re.finditer("\n", code)]
    tokens: list[Token] = []
    for match in TOKEN_PATTERN.finditer(code):
        line = bisect_right(line_starts, match.start())
        group = match.lastgroup
        if group in ("name", "var"):
            tokens.append(Token(group, match.group(), line))
        else:
            tokens.append(Token(match.group(), match.group(), line))
    return tokens


class _DeclarationWalker:
    """Walk tokens and collect declarations, tracking brace scopes."""

    def __init__(self, tokens: list[Token], file: str):
        self.tokens = tokens
        self.file = file
        self.elements: list[CodeElement] = []
        self.namespace: Optional[str] = None
        self.scopes: list[tuple[str, Optional[str]]] = []
        self.pending: Optional[tuple[str, Optional[str]]] = None
        self.pending_paren = 0
        self.paren = 0

    def walk(self) -> list[CodeElement]:
        i = 0
        while i < len(self.tokens):
            i = self._step(i)
        return self.elements

    # Scope helpers

    def _in_type_body(self) -> bool:
        return bool(self.scopes) and self.scopes[-1][0] == "type"

    def _current_type(self) -> Optional[str]:
        return self.scopes[-1][1] if self._in_type_body() else None

    def _at_file_level(self) -> bool:
        return not any(kind in OPAQUE_SCOPES for kind, _ in self.scopes)

    def _expect_body(self, kind: str, name: Optional[str] = None) -> None:
        self.pending = (kind, name)
        self.pending_paren = self.paren

    def _token(self, i: int) -> Optional[Token]:
        if 0 <= i < len(self.tokens):
            return self.tokens[i]
        return None

    def _emit(
        self,
        name: str,
        kind: ElementKind,
        line: int,
        parent: Optional[str] = None,
        modifiers: Optional[list[str]] = None,
    ) -> None:
        self.elements.append(
            CodeElement(
                name=name,
                kind=kind,
                file=self.file,
                line=line,
                namespace=self.namespace,
                parent=parent,
                modifiers=modifiers or [],
            )
        )

    def _leading_modifiers(self, i: int, allowed: frozenset[str]) -> tuple[list[str], int]:
        """Collect modifier keywords directly before token i.

        Returns:
            Tuple of (modifiers in canonical order, line of first token)
        """
        found: set[str] = set()
        line = self.tokens[i].line
        j = i - 1
        while j >= 0:
            tok = self.tokens[j]
            if tok.kind != "name" or tok.value.lower() not in allowed:
                break
            found.add(tok.value.lower())
            line = tok.line
            j -= 1
        return _canonical_modifiers(found), line

    def _at_statement_start(self, i: int) -> bool:
        prev = self._token(i - 1)
        return prev is None or prev.kind in ("{", ";", "}", "]")

    # Main dispatch

    def _step(self, i: int) -> int:
        tok = self.tokens[i]

        if tok.kind == "(":
            self.paren += 1
        elif tok.kind == ")":
            self.paren = max(0, self.paren - 1)
        elif tok.kind == "{":
            self.scopes.append(self.pending or ("block", None))
            self.pending = None
        elif tok.kind == "}":
            if self.scopes:
                kind, _ = self.scopes.pop()
                if kind == "namespace":
                    self.namespace = None
        elif tok.kind == ";":
            if self.pending and self.paren == self.pending_paren:
                self.pending = None
        elif tok.kind == "name":
            return self._keyword(i, tok)
        return i + 1

    def _keyword(self, i: int, tok: Token) -> int:
        prev = self._token(i - 1)
        if prev is not None and prev.kind in ("::", "->", "?->"):
            return i + 1

        word = tok.value.lower()
        if word in ("function", "const") and prev is not None and prev.value.lower() == "use":
            # use function Foo\bar; / use const Foo\BAR;
            return i + 1
        if word == "namespace" and not self.scopes:
            return self._namespace(i)
        if word in TYPE_KEYWORDS:
            return self._type_declaration(i, word)
        if word == "function":
            return self._function(i)
        if self._in_type_body():
            if word == "const":
                return self._constants(i)
            if word in PROPERTY_MODIFIERS and self._at_statement_start(i):
                return self._properties(i)
        return i + 1

    def _namespace(self, i: int) -> int:
        nxt = self._token(i + 1)
        if nxt is not None and nxt.kind == "name":
            self.namespace = nxt.value.lstrip("\\")
            after = self._token(i + 2)
            if after is not None and after.kind == "{":
                self._expect_body("namespace")
            return i + 2
        if nxt is not None and nxt.kind == "{":
            self.namespace = None
            self._expect_body("namespace")
        return i + 1

    def _type_declaration(self, i: int, word: str) -> int:
        prev = self._token(i - 1)
        if word == "class" and prev is not None and prev.kind == "name" and prev.value.lower() == "new":
            self._expect_body("opaque")
            return i + 1

        nxt = self._token(i + 1)
        if nxt is None or nxt.kind != "name":
            return i + 1
        if word == "enum" and not self._looks_like_enum(i):
            return i + 1

        modifiers, line = self._leading_modifiers(i, TYPE_MODIFIERS)
        self._emit(nxt.value, TYPE_KEYWORDS[word], line, modifiers=modifiers)
        self._expect_body("type", nxt.value)
        return i + 2

    def _looks_like_enum(self, i: int) -> bool:
        prev = self._token(i - 1)
        if prev is not None and prev.kind == "name" and prev.value.lower() in ("function", "const"):
            return False
        after = self._token(i + 2)
        if after is None:
            return False
        return after.kind in (":", "{") or (after.kind == "name" and after.value.lower() == "implements")

    def _function(self, i: int) -> int:
        j = i + 1
        nxt = self._token(j)
        if nxt is not None and nxt.kind == "&":
            j += 1
            nxt = self._token(j)

        if nxt is not None and nxt.kind == "name":
            if self._in_type_body():
                modifiers, line = self._leading_modifiers(i, MEMBER_MODIFIERS)
                self._emit(nxt.value, ElementKind.METHOD, line, self._current_type(), modifiers)
            elif self._at_file_level():
                self._emit(nxt.value, ElementKind.FUNCTION, self.tokens[i].line)
            j += 1

        self._expect_body("function")
        return j

    def _constants(self, i: int) -> int:
        modifiers, line = self._leading_modifiers(i, MEMBER_MODIFIERS)
        parent = self._current_type()
        depth = 0
        in_default = False
        k = i + 1
        while k < len(self.tokens):
            tok = self.tokens[k]
            if tok.kind in ("(", "["):
                depth += 1
            elif tok.kind in (")", "]"):
                depth -= 1
            elif depth == 0:
                if tok.kind in (";", "{", "}"):
                    break
                if tok.kind == ",":
                    in_default = False
                elif tok.kind == "=":
                    in_default = True
                elif tok.kind == "name" and not in_default:
                    after = self._token(k + 1)
                    if after is not None and after.kind == "=":
                        self._emit(tok.value, ElementKind.CONSTANT, line, parent, modifiers)
            k += 1
        return k

    def _properties(self, i: int) -> int:
        j = i
        words: set[str] = set()
        while j < len(self.tokens):
            tok = self.tokens[j]
            if tok.kind != "name" or tok.value.lower() not in PROPERTY_MODIFIERS:
                break
            words.add(tok.value.lower())
            j += 1

        nxt = self._token(j)
        if nxt is not None and nxt.kind == "name" and nxt.value.lower() in ("function", "const"):
            # Handled when the walker reaches the keyword itself
            return i + 1

        if "var" in words:
            words.discard("var")
            words.add("public")
        modifiers = _canonical_modifiers(words)
        line = self.tokens[i].line
        parent = self._current_type()

        depth = 0
        in_default = False
        k = j
        while k < len(self.tokens):
            tok = self.tokens[k]
            if tok.kind in ("(", "["):
                depth += 1
            elif tok.kind in (")", "]"):
                depth -= 1
            elif depth == 0:
                if tok.kind in (";", "{", "}"):
                    break
                if tok.kind == ",":
                    in_default = False
                elif tok.kind == "=":
                    in_default = True
                elif tok.kind == "var" and not in_default:
                    self._emit(tok.value[1:], ElementKind.PROPERTY, line, parent, modifiers)
            k += 1
        return k


def _canonical_modifiers(found: set[str]) -> list[str]:
    return [m for m in MODIFIER_ORDER if m in found]


def extract_elements_from_source(source: str, file: str) -> list[CodeElement]:
    """Extract code elements from PHP source text.

    Args:
        source: PHP file contents
        file: Label stored on every element (usually a project-relative path)

    Returns:
        Elements in source order
    """
    tokens = tokenize(strip_non_code(source))
    return _DeclarationWalker(tokens, file).walk()


def extract_elements_from_file(path: Path, file_label: str) -> list[CodeElement]:
    """Extract code elements from a PHP file.

    Raises:
        OSError: If the file cannot be read.
        UnicodeDecodeError: If the file is not valid UTF-8.
    """
    source = path.read_text(encoding="utf-8")
    return extract_elements_from_source(source, file_label)


@dataclass
class SourceScan:
    """Result of scanning the configured source paths."""

    elements: list[CodeElement] = field(default_factory=list)
    files: list[str] = field(default_factory=list)
    skipped_files: list[str] = field(default_factory=list)


def _is_excluded(
    path: Path,
    source_root: Path,
    exclude_paths: list[Path],
    exclude_names: set[str],
) -> bool:
    resolved = path.resolve()
    if any(is_under(resolved, excluded) for excluded in exclude_paths):
        return True
    try:
        parts = path.relative_to(source_root).parts[:-1]
    except ValueError:
        return False
    return any(part in exclude_names for part in parts)


def find_source_files(config: Configuration) -> list[Path]:
    """Find PHP files below the source paths, minus excluded directories."""
    exclude_paths = [p.resolve() for p in config.absolute_exclude_paths]
    exclude_names = {p.name for p in config.absolute_exclude_paths if p.is_dir()}

    files: list[Path] = []
    seen: set[Path] = set()
    for source_path in config.absolute_source_paths:
        if not source_path.exists():
            logger.debug(f"Source path not found: {source_path}")
            continue

        if source_path.is_file():
            candidates = [source_path]
        else:
            candidates = sorted(source_path.rglob(f"*{SOURCE_EXTENSION}"))

        for candidate in candidates:
            if not candidate.is_file():
                continue
            resolved = candidate.resolve()
            if resolved in seen:
                continue
            if _is_excluded(candidate, source_path, exclude_paths, exclude_names):
                continue
            seen.add(resolved)
            files.append(candidate)

    return files


def scan_source_tree(config: Configuration) -> SourceScan:
    """Extract elements from every source file.

    A file that cannot be read or decoded contributes nothing; it is logged
    and listed in ``skipped_files``.
    """
    scan = SourceScan()
    for path in find_source_files(config):
        label = path_label(path, config.project_root)
        try:
            elements = extract_elements_from_file(path, label)
        except (OSError, UnicodeDecodeError, ValueError) as e:
            logger.warning(f"Skipping source file {label}: {e}")
            scan.skipped_files.append(label)
            continue
        except Exception:
            logger.exception(f"Failed to scan source file {label}")
            scan.skipped_files.append(label)
            continue
        scan.files.append(label)
        scan.elements.extend(elements)

    return scan
