"""docforge: storage-format document preparation and diagram publishing."""

__version__ = "0.1.0"
