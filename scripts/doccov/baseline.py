"""Baseline ledger: accepted undocumented elements and their reconciliation."""

from __future__ import annotations

import logging
import os
import tempfile
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

import yaml

from scripts.doccov.models import BaselineEntry, CodeElement

logger = logging.getLogger(__name__)

BASELINE_VERSION = "1.0"
DEFAULT_REASON = "Legacy code - documentation needed"


@dataclass
class BaselineValidation:
    """Baseline entries split by whether their element still exists."""

    valid: list[BaselineEntry] = field(default_factory=list)
    invalid: list[BaselineEntry] = field(default_factory=list)


def sort_entries(entries: Iterable[BaselineEntry]) -> list[BaselineEntry]:
    return sorted(entries, key=lambda e: (e.file, e.line))


def generate_baseline(
    elements: Iterable[CodeElement],
    reason: str = DEFAULT_REASON,
) -> list[BaselineEntry]:
    """Create entries for every undocumented element, sorted by file and line."""
    entries = [
        BaselineEntry.from_element(element, reason)
        for element in elements
        if not element.documented
    ]
    return sort_entries(entries)


def filter_elements(
    elements: Iterable[CodeElement],
    entries: Iterable[BaselineEntry],
) -> list[CodeElement]:
    """Drop elements that are baselined and still undocumented.

    A documented element is always kept, whether or not the baseline
    lists it.
    """
    baselined = {entry.identity_hash for entry in entries}
    if not baselined:
        return list(elements)
    return [
        element
        for element in elements
        if element.documented or element.identity_hash() not in baselined
    ]


def validate_baseline(
    entries: Iterable[BaselineEntry],
    elements: Iterable[CodeElement],
) -> BaselineValidation:
    """Partition entries by whether their identity still exists in the code."""
    current = {element.identity_hash() for element in elements}
    validation = BaselineValidation()
    for entry in entries:
        if entry.identity_hash in current:
            validation.valid.append(entry)
        else:
            validation.invalid.append(entry)
    return validation


def update_baseline(
    entries: Iterable[BaselineEntry],
    elements: Iterable[CodeElement],
) -> list[BaselineEntry]:
    """Prune stale entries, keeping only those still matching an element."""
    return validate_baseline(entries, elements).valid


def load_baseline(path: Path | str) -> list[BaselineEntry]:
    """Load baseline entries from a YAML file.

    A missing or malformed file yields no entries. Malformed entries are
    skipped individually.

    Args:
        path: Baseline file

    Returns:
        Parsed entries in file order
    """
    path = Path(path)
    if not path.exists():
        return []

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        logger.warning(f"Ignoring unreadable baseline {path}: {e}")
        return []

    if not isinstance(data, dict) or not isinstance(data.get("entries"), list):
        logger.warning(f"Ignoring baseline {path}: no 'entries' list")
        return []

    entries: list[BaselineEntry] = []
    for raw in data["entries"]:
        try:
            entries.append(BaselineEntry.from_dict(raw))
        except (KeyError, TypeError, ValueError) as e:
            logger.debug(f"Skipping malformed baseline entry {raw!r}: {e}")
    return entries


def _header(generated_at: str, entries: list[BaselineEntry]) -> str:
    per_file = Counter(entry.file for entry in entries)
    lines = [
        "# doccov - Documentation Coverage Baseline",
        "# Elements listed here are excluded from documentation coverage checks",
        f"# Generated on: {generated_at}",
        f"# Total entries: {len(entries)}",
        "#",
        "# Files overview:",
    ]
    lines.extend(f"# - {file} ({count} entries)" for file, count in sorted(per_file.items()))
    return "\n".join(lines) + "\n\n"


def dump_baseline(entries: Iterable[BaselineEntry], generated_at: Optional[str] = None) -> str:
    """Render entries as baseline YAML, sorted by file and line."""
    ordered = sort_entries(entries)
    if generated_at is None:
        generated_at = datetime.now(timezone.utc).isoformat()

    data: dict[str, Any] = {
        "version": BASELINE_VERSION,
        "generated_at": generated_at,
        "total_entries": len(ordered),
        "entries": [entry.to_dict() for entry in ordered],
    }
    body = yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
    return _header(generated_at, ordered) + body


def save_baseline(
    path: Path | str,
    entries: Iterable[BaselineEntry],
    generated_at: Optional[str] = None,
) -> None:
    """Write the baseline file atomically.

    Args:
        path: Destination file; parent directories are created
        entries: Entries to persist
        generated_at: ISO-8601 timestamp, defaults to now (UTC)
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    content = dump_baseline(entries, generated_at)

    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp", prefix=path.stem)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        Path(tmp_path).replace(path)
    except BaseException:
        Path(tmp_path).unlink(missing_ok=True)
        raise
