"""Quote Catalog - normalized quote ingestion and catalog queries."""

__version__ = "0.1.0"
