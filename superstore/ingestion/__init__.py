"""
Data Ingestion Module
"""
from .batch_loader import (
    BatchFileConfig,
    BatchLoader,
    LoadResult,
    LoadStatus,
    load_records,
    records_from_frame,
    records_from_rows,
)

__all__ = [
    "BatchFileConfig",
    "BatchLoader",
    "LoadResult",
    "LoadStatus",
    "load_records",
    "records_from_frame",
    "records_from_rows",
]
