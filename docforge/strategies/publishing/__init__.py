"""Diagram publishing strategies."""

from docforge.strategies.publishing.batch import BatchPublisher

__all__ = [
    "BatchPublisher",
]
