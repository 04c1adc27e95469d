"""Data model shared by every stage of the coverage pipeline."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ElementKind(str, Enum):
    """Kind of a documentable code element."""

    CLASS = "class"
    INTERFACE = "interface"
    TRAIT = "trait"
    METHOD = "method"
    FUNCTION = "function"
    PROPERTY = "property"
    CONSTANT = "constant"


class ReferenceKind(str, Enum):
    """Kind of a mention found in documentation."""

    CLASS = "class"
    METHOD = "method"
    PROPERTY = "property"
    LINK = "link"


TYPE_KINDS = frozenset({ElementKind.CLASS, ElementKind.INTERFACE, ElementKind.TRAIT})
MEMBER_KINDS = frozenset({ElementKind.METHOD, ElementKind.PROPERTY, ElementKind.CONSTANT})

# Kinds reported in the per-kind breakdown, in display order
REPORTED_KINDS = (
    ElementKind.CLASS,
    ElementKind.INTERFACE,
    ElementKind.TRAIT,
    ElementKind.METHOD,
    ElementKind.FUNCTION,
    ElementKind.PROPERTY,
)

NAMESPACE_SEPARATOR = "\\"
MEMBER_SEPARATOR = "::"


def identity_key(file: str, line: int, kind: str, name: str) -> str:
    """Build the ``file:line:kind:name`` key identifying an element."""
    return f"{file}:{line}:{kind}:{name}"


def identity_hash(file: str, line: int, kind: str, name: str) -> str:
    """MD5 hex digest of the identity key.

    Equal identity tuples always produce equal hashes, which is what the
    baseline reconciliation relies on.
    """
    return hashlib.md5(identity_key(file, line, kind, name).encode("utf-8")).hexdigest()


@dataclass
class CodeElement:
    """A documentable declaration found in source code.

    ``documented`` is the only field mutated after construction, and only
    by the matching engine.
    """

    name: str
    kind: ElementKind
    file: str
    line: int
    namespace: Optional[str] = None
    parent: Optional[str] = None  # enclosing type, members only
    modifiers: list[str] = field(default_factory=list)
    documented: bool = False

    @property
    def identity(self) -> tuple[str, int, str, str]:
        return (self.file, self.line, self.kind.value, self.name)

    @property
    def qualified_name(self) -> str:
        """Namespace-qualified name, ``Ns\\Type::member`` for members."""
        prefix = f"{self.namespace}{NAMESPACE_SEPARATOR}" if self.namespace else ""
        if self.parent and self.kind in MEMBER_KINDS:
            return f"{prefix}{self.parent}{MEMBER_SEPARATOR}{self.name}"
        return f"{prefix}{self.name}"

    @property
    def is_type(self) -> bool:
        return self.kind in TYPE_KINDS

    @property
    def is_private(self) -> bool:
        return "private" in self.modifiers

    @property
    def should_be_documented(self) -> bool:
        """Types always; members and functions unless private."""
        if self.is_type:
            return True
        return not self.is_private

    def identity_hash(self) -> str:
        return identity_hash(*self.identity)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.kind.value,
            "file": self.file,
            "line": self.line,
            "namespace": self.namespace,
            "parent": self.parent,
            "qualified_name": self.qualified_name,
            "modifiers": list(self.modifiers),
            "documented": self.documented,
        }


@dataclass
class DocumentationReference:
    """A mention in documentation believed to point at code.

    ``valid`` is true exactly when a target location has been attached.
    """

    source_file: str
    source_line: int
    kind: ReferenceKind
    text: str
    target_file: Optional[str] = None
    target_line: Optional[int] = None
    valid: bool = False

    def resolve_to(self, file: str, line: Optional[int]) -> None:
        """Attach the resolved location; the first resolution wins."""
        if self.valid:
            return
        self.target_file = file
        self.target_line = line
        self.valid = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_file": self.source_file,
            "source_line": self.source_line,
            "type": self.kind.value,
            "reference": self.text,
            "target_file": self.target_file,
            "target_line": self.target_line,
            "valid": self.valid,
        }


@dataclass
class BaselineEntry:
    """An accepted undocumented element recorded in the baseline file."""

    file: str
    line: int
    element_type: str
    element_name: str
    reason: str = ""
    hash: str = ""

    def __post_init__(self) -> None:
        if not self.hash:
            self.hash = identity_hash(self.file, self.line, self.element_type, self.element_name)

    @property
    def identity(self) -> tuple[str, int, str, str]:
        return (self.file, self.line, self.element_type, self.element_name)

    @property
    def identity_hash(self) -> str:
        """Hash recomputed from the identity, regardless of the stored value."""
        return identity_hash(*self.identity)

    @classmethod
    def from_element(cls, element: CodeElement, reason: str = "") -> "BaselineEntry":
        return cls(
            file=element.file,
            line=element.line,
            element_type=element.kind.value,
            element_name=element.name,
            reason=reason,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BaselineEntry":
        """Build an entry from its persisted form.

        Raises:
            KeyError, TypeError, ValueError: If required fields are missing
                or have the wrong shape.
        """
        file = data["file"]
        name = data["element_name"]
        element_type = data["element_type"]
        if not isinstance(file, str) or not isinstance(name, str):
            raise TypeError("file and element_name must be strings")
        if isinstance(data["line"], bool):
            raise TypeError("line must be an integer")
        return cls(
            file=file,
            line=int(data["line"]),
            element_type=ElementKind(element_type).value,
            element_name=name,
            reason=str(data.get("reason") or ""),
            hash=str(data.get("hash") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "line": self.line,
            "element_type": self.element_type,
            "element_name": self.element_name,
            "reason": self.reason,
            "hash": self.hash,
        }
