"""Content backend and generation service clients."""

from docforge.strategies.backends.confluence import (
    ConfluenceClient,
    clean_title,
    extract_page_id,
)
from docforge.strategies.backends.generation import GenerationApiFiller

__all__ = [
    "ConfluenceClient",
    "GenerationApiFiller",
    "clean_title",
    "extract_page_id",
]
