"""
Inline tabular editor for tracked records.
"""

from .tabular_editor import (
    STATUS_LABELS,
    EditResult,
    EditTarget,
    ParseRevert,
    RenderedCell,
    RenderedRow,
    TabularEditor,
)

__all__ = [
    "TabularEditor",
    "EditTarget",
    "EditResult",
    "RenderedCell",
    "RenderedRow",
    "ParseRevert",
    "STATUS_LABELS",
]
