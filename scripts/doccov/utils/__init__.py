"""doccov utility modules."""

from scripts.doccov.utils.paths import (
    path_label,
    is_under,
)

__all__ = [
    "path_label",
    "is_under",
]
