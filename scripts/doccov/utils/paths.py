"""Path helpers shared by the scanners, the matcher and the reports."""

from __future__ import annotations

from pathlib import Path


def is_under(path: Path, parent: Path) -> bool:
    """Check if ``path`` is ``parent`` or lies below it."""
    try:
        path.relative_to(parent)
    except ValueError:
        return False
    return True


def path_label(path: Path | str, root: Path) -> str:
    """Stable label for a file: POSIX path relative to root when inside it.

    Args:
        path: File path (absolute or relative to the current directory)
        root: Project root

    Returns:
        Relative POSIX path, or the absolute POSIX path for outside files
    """
    resolved = Path(path).resolve()
    root = root.resolve()
    if is_under(resolved, root):
        return resolved.relative_to(root).as_posix()
    return resolved.as_posix()
