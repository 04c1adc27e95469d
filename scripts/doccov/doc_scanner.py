"""Line-oriented scanning of Markdown documentation."""

from __future__ import annotations

from pathlib import Path
from typing import NamedTuple

from scripts.doccov.config import Configuration

DOC_PATTERNS = ("*.md", "*.markdown")

FENCE_MARKER = "```"


class DocLine(NamedTuple):
    """A documentation line with its fenced-block state."""

    number: int  # 1-based
    text: str
    in_code_block: bool
    is_fence: bool


def scan_doc_lines(content: str) -> list[DocLine]:
    """Split documentation text into lines, tracking fenced code blocks.

    A line starting with ``` toggles the block state. The fence line itself
    is flagged ``is_fence`` and carries the state from before the toggle.
    """
    lines: list[DocLine] = []
    in_block = False
    for number, text in enumerate(content.split("\n"), start=1):
        text = text.rstrip("\r")
        if text.startswith(FENCE_MARKER):
            lines.append(DocLine(number, text, in_block, True))
            in_block = not in_block
        else:
            lines.append(DocLine(number, text, in_block, False))
    return lines


def read_doc_file(path: Path) -> list[DocLine]:
    """Read and scan a documentation file.

    Raises:
        OSError: If the file cannot be read.
        UnicodeDecodeError: If the file is not valid UTF-8.
    """
    return scan_doc_lines(path.read_text(encoding="utf-8"))


def find_doc_files(config: Configuration) -> list[Path]:
    """Find Markdown files below the configured documentation paths."""
    files: list[Path] = []
    seen: set[Path] = set()
    for docs_path in config.absolute_docs_paths:
        if not docs_path.exists():
            continue

        if docs_path.is_file():
            candidates = [docs_path]
        else:
            candidates = sorted(
                {p for pattern in DOC_PATTERNS for p in docs_path.rglob(pattern)}
            )

        for candidate in candidates:
            resolved = candidate.resolve()
            if candidate.is_file() and resolved not in seen:
                seen.add(resolved)
                files.append(candidate)

    return files
