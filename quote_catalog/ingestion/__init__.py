"""
Quote Catalog Ingestion
=======================

This package loads quote records from CSV files into the catalog.

Pipeline Stages:
1. Read - CsvRecordSource streams raw rows from one or more files
2. Validate - Reject rows with missing fields, oversized authors, short quotes
3. Normalize - Clean quote text, author names and category labels
4. Resolve - Get-or-create authors and categories through a per-run cache
5. Persist - Save each quote in its own transaction
"""

from quote_catalog.ingestion.registry import (
    IngestionConfig,
    SourceRegistry,
    SourceConfig,
    get_default_registry,
)
from quote_catalog.ingestion.source import CsvRecordSource
from quote_catalog.ingestion.normalizer import (
    Normalizer,
    NormalizedRecord,
)
from quote_catalog.ingestion.permalink import generate_permalink
from quote_catalog.ingestion.resolver import (
    EntityResolver,
    Resolution,
    ResolutionOrigin,
)
from quote_catalog.ingestion.pipeline import (
    IngestionPipeline,
    IngestionResult,
    RecordOutcome,
    ingest_files,
    ingest_source,
)

__all__ = [
    # Registry
    "IngestionConfig",
    "SourceRegistry",
    "SourceConfig",
    "get_default_registry",
    # Source
    "CsvRecordSource",
    # Normalizer
    "Normalizer",
    "NormalizedRecord",
    "generate_permalink",
    # Resolver
    "EntityResolver",
    "Resolution",
    "ResolutionOrigin",
    # Pipeline
    "IngestionPipeline",
    "IngestionResult",
    "RecordOutcome",
    "ingest_files",
    "ingest_source",
]
