"""doccov - Documentation coverage analysis for PHP codebases.

This package provides tools for:
- Scanning PHP sources for documentable declarations
- Extracting code references from Markdown documentation
- Matching references to declarations and scoring coverage
- Maintaining a baseline of accepted undocumented legacy code
- Rendering console, JSON and HTML reports

Usage:
    python -m scripts.doccov analyze [path]             # Coverage check
    python -m scripts.doccov generate-baseline -b FILE  # Snapshot legacy debt
    python -m scripts.doccov update-baseline -b FILE    # Prune stale entries
    python -m scripts.doccov validate-baseline -b FILE  # Report stale entries
"""

__version__ = "1.0.0"
