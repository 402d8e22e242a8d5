"""Markup strategies.

Implements encoding repair, tag reconciliation and structured macro
handling for storage-format documents.
"""

from docforge.strategies.markup.macros import (
    canonical_macro,
    extract_diagrams,
    rewrite_macros,
)
from docforge.strategies.markup.normalizer import normalize
from docforge.strategies.markup.reconciler import TagReconciler, sanitize

__all__ = [
    "canonical_macro",
    "extract_diagrams",
    "normalize",
    "rewrite_macros",
    "sanitize",
    "TagReconciler",
]
