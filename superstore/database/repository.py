"""
Records Repository

Stores a validated record batch in the ``records`` table and reads it back.
"""

from typing import Optional

import structlog
from sqlalchemy import func, insert, select

from superstore.analytics.records import RecordSet
from superstore.config import get_settings
from superstore.database.connection import get_db
from superstore.database.models import Record
from superstore.ingestion.batch_loader import BatchLoader, records_from_rows

logger = structlog.get_logger(__name__)

RECORD_COLUMNS = [
    column.name for column in Record.__table__.columns
    if column.name not in ("id", "row_index")
]


async def store_records(records: RecordSet, batch_size: Optional[int] = None) -> int:
    """
    Insert every record of a validated batch.

    Args:
        records: Validated record set
        batch_size: Rows per INSERT; defaults to ``DATABASE_BATCH_SIZE``

    Returns:
        Number of rows inserted
    """
    batch_size = batch_size or get_settings().database.batch_size
    rows = [
        {"row_index": index, **{column: row[column] for column in RECORD_COLUMNS}}
        for index, row in enumerate(records.to_rows())
    ]

    inserted = 0
    async with get_db() as db:
        for start in range(0, len(rows), batch_size):
            chunk = rows[start:start + batch_size]
            await db.execute(insert(Record), chunk)
            inserted += len(chunk)
            logger.debug("Inserted record batch", rows=len(chunk), total=inserted)

    logger.info("Records stored", rows=inserted)
    return inserted


async def count_records() -> int:
    """Row count of the records table"""
    async with get_db() as db:
        result = await db.execute(select(func.count()).select_from(Record))
        return result.scalar_one()


async def fetch_records(loader: Optional[BatchLoader] = None) -> RecordSet:
    """
    Read the records table back into a validated ``RecordSet``.

    Rows come back in their original extract order.
    """
    async with get_db() as db:
        result = await db.execute(select(Record).order_by(Record.row_index, Record.id))
        rows = [
            {column: getattr(record, column) for column in RECORD_COLUMNS}
            for record in result.scalars()
        ]

    logger.info("Records fetched", rows=len(rows))
    return records_from_rows(rows, loader=loader)
