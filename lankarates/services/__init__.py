"""Service layer for orchestrating extractors and persistence."""

from .ingestion_service import IngestionService, UnsupportedBankError
from .query_service import QueryService

__all__ = [
    "IngestionService",
    "QueryService",
    "UnsupportedBankError",
]
