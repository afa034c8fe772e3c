"""
Batch Data Loader

Loads the transaction record extract once, before any report runs.
Supports:
- CSV extracts with quoted text fields and a header row
- Header normalization and text cleaning
- Schema and business-rule validation with row-level error context
- Exact fixed-point conversion of monetary fields
- Audit logging and file hashing for provenance
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union
import hashlib

import polars as pl
import structlog
from pydantic import BaseModel

from superstore.analytics.records import RECORD_SCHEMA, RecordSet
from superstore.config import AnalyticsSettings, DataSettings, get_settings
from superstore.exceptions import RecordLoadError, RecordValidationError
from superstore.quality.validators import (
    NUMERIC_COLUMNS,
    ROW_INDEX,
    ValidationResult,
    ValidationStatus,
    create_records_rules_validator,
    create_records_schema_validator,
)
from superstore.transformation.cleaners import DataCleaner
from superstore.transformation.enrichers import DataEnricher
from superstore.transformation.money import units_expr

logger = structlog.get_logger(__name__)

ISO_DATE = "%Y-%m-%d"


class LoadStatus(str, Enum):
    """Batch load status"""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class BatchFileConfig:
    """Configuration for batch file loading"""
    file_path: Union[str, Path]
    delimiter: str = ","
    encoding: str = "utf8"
    date_format: str = ISO_DATE
    null_values: List[str] = field(default_factory=lambda: ["", "NULL", "null", "None", "NA", "N/A"])

    @classmethod
    def from_settings(cls, file_path: Optional[Union[str, Path]] = None, data: Optional[DataSettings] = None) -> "BatchFileConfig":
        data = data or get_settings().data
        return cls(
            file_path=file_path or data.source_path,
            delimiter=data.delimiter,
            encoding=data.encoding,
            date_format=data.date_format,
            null_values=list(data.null_values),
        )


class LoadResult(BaseModel):
    """Result of a batch load operation"""
    file_path: Optional[str] = None
    status: LoadStatus
    rows_loaded: int = 0
    warnings: List[str] = []
    error_message: Optional[str] = None
    load_duration_seconds: float = 0
    started_at: datetime
    completed_at: Optional[datetime] = None
    file_hash: Optional[str] = None


class BatchLoader:
    """
    Transaction record loader.

    Reads every column as text, cleans it, validates it, and only then
    types it, so any bad value is reported with its row index and column
    rather than surfacing later inside a report.

    Example:
        loader = BatchLoader()
        records, result = loader.load(BatchFileConfig(file_path="data/superstore.csv"))
    """

    def __init__(
        self,
        analytics: Optional[AnalyticsSettings] = None,
        data: Optional[DataSettings] = None,
    ):
        settings = get_settings()
        self.analytics = analytics or settings.analytics
        self.data = data or settings.data
        self.enricher = DataEnricher()

    def _compute_file_hash(self, file_path: Path) -> str:
        """Compute MD5 hash of file for provenance"""
        hash_md5 = hashlib.md5()
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(4096), b""):
                hash_md5.update(chunk)
        return hash_md5.hexdigest()

    def _read_csv(self, config: BatchFileConfig) -> pl.DataFrame:
        """Read the extract with every column as text"""
        return pl.read_csv(
            config.file_path,
            separator=config.delimiter,
            encoding=config.encoding,
            quote_char='"',
            has_header=True,
            infer_schema_length=0,
        )

    def _raise_for_status(
        self,
        result: ValidationResult,
        file_path: Optional[Path],
    ) -> List[str]:
        """Raise on a failed validation, otherwise return warning messages"""
        if result.status != ValidationStatus.FAILED:
            return [c.message for c in result.warnings]

        first = result.first_error
        raise RecordValidationError(
            first.message,
            file_path=file_path,
            row_index=first.row_indices[0] if first.row_indices else None,
            column_name=first.column,
            invalid_value=first.sample_values[0] if first.sample_values else None,
            validation_errors=[c.message for c in result.errors],
        )

    def _cast(self, df: pl.DataFrame, date_format: str) -> pl.DataFrame:
        """Type the validated text frame and convert money to minor units"""
        scale = self.analytics.money_scale

        casts = [
            pl.col(column).cast(dtype, strict=False)
            for column, dtype in NUMERIC_COLUMNS.items()
            if column in df.columns
        ]
        casts += [
            pl.col(column).str.to_date(date_format, strict=False)
            for column in ("order_date", "ship_date")
        ]
        casts += [units_expr("sales", scale), units_expr("profit", scale)]

        df = df.with_columns(casts).drop(["sales", "profit"])

        # Optional extract columns that are absent become typed nulls
        missing = [
            pl.lit(None, dtype=dtype).alias(column)
            for column, dtype in RECORD_SCHEMA.items()
            if column not in df.columns
        ]
        if missing:
            df = df.with_columns(missing)

        return df

    def build(
        self,
        df: pl.DataFrame,
        date_format: Optional[str] = None,
        file_path: Optional[Path] = None,
        null_values: Optional[List[str]] = None,
    ) -> Tuple[RecordSet, List[str]]:
        """
        Turn a text frame into a validated ``RecordSet``.

        Args:
            df: Extract with one row per line item, all columns as text
            date_format: Format of order_date/ship_date
            file_path: Source file, for error context
            null_values: Tokens treated as missing

        Returns:
            Tuple of (RecordSet, validation warning messages)

        Raises:
            RecordValidationError: if any record fails validation
        """
        date_format = date_format or self.data.date_format

        # Cleaning keeps row order, so the index still points at the source row
        df, _ = DataCleaner(null_values=null_values or self.data.null_values).clean_records(df)
        df = df.with_row_index(ROW_INDEX)

        data = self.data.model_copy(update={"date_format": date_format})
        schema_result = create_records_schema_validator(self.analytics, data).validate(df)
        warnings = self._raise_for_status(schema_result, file_path)

        df = self._cast(df, date_format)
        df = self.enricher.enrich_records_with_time_features(df)

        rules_result = create_records_rules_validator(self.analytics).validate(df)
        warnings += self._raise_for_status(rules_result, file_path)

        frame = df.select(
            [pl.col(column).cast(dtype) for column, dtype in RECORD_SCHEMA.items()]
        )

        return RecordSet(frame=frame, money_scale=self.analytics.money_scale), warnings

    def load(self, config: Union[BatchFileConfig, str, Path]) -> Tuple[RecordSet, LoadResult]:
        """
        Load and validate a CSV extract.

        Args:
            config: Batch file configuration, or a path using configured defaults

        Returns:
            Tuple of (RecordSet, LoadResult)

        Raises:
            RecordLoadError: if the file is missing or unreadable
            RecordValidationError: if any record fails validation
        """
        if not isinstance(config, BatchFileConfig):
            config = BatchFileConfig.from_settings(config, self.data)

        file_path = Path(config.file_path)
        started_at = datetime.now(timezone.utc)

        result = LoadResult(
            file_path=str(file_path),
            status=LoadStatus.RUNNING,
            started_at=started_at,
        )

        logger.info("Starting batch load", file=str(file_path))

        if not file_path.exists():
            raise RecordLoadError("file not found", file_path=file_path)

        result.file_hash = self._compute_file_hash(file_path)

        try:
            df = self._read_csv(config)
        except (pl.exceptions.PolarsError, OSError, UnicodeDecodeError) as e:
            logger.error("Batch load failed", error=str(e), file=str(file_path))
            raise RecordLoadError("could not read CSV", file_path=file_path, original_error=e) from e

        logger.info(f"Read {len(df)} rows from file", columns=len(df.columns))

        try:
            records, warnings = self.build(
                df,
                date_format=config.date_format,
                file_path=file_path,
                null_values=config.null_values,
            )
        except RecordValidationError as e:
            logger.error(
                "Batch rejected",
                file=str(file_path),
                row=e.row_index,
                column=e.column_name,
                error=str(e),
            )
            raise

        result.status = LoadStatus.COMPLETED
        result.rows_loaded = len(records)
        result.warnings = warnings
        result.completed_at = datetime.now(timezone.utc)
        result.load_duration_seconds = (result.completed_at - started_at).total_seconds()

        logger.info(
            "Batch load completed",
            rows_loaded=result.rows_loaded,
            warnings=len(warnings),
            file_hash=result.file_hash,
            duration_seconds=result.load_duration_seconds,
        )

        return records, result


def _to_text(value: Any, date_format: str) -> Optional[str]:
    """Render one input value as the text the extract would have held"""
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.strftime(date_format)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def records_from_rows(
    rows: Iterable[Mapping[str, Any]],
    loader: Optional[BatchLoader] = None,
) -> RecordSet:
    """
    Build a validated ``RecordSet`` from in-memory rows.

    Values may be text or native Python types; dates are rendered in the
    configured date format before validation.
    """
    loader = loader or BatchLoader()
    date_format = loader.data.date_format
    rows = list(rows)

    if not rows:
        return RecordSet.empty(money_scale=loader.analytics.money_scale)

    columns: Dict[str, Any] = {}
    for row in rows:
        for key in row:
            columns.setdefault(key, pl.Utf8)

    text_rows = [
        {key: _to_text(row.get(key), date_format) for key in columns}
        for row in rows
    ]
    df = pl.DataFrame(text_rows, schema=columns)

    records, _ = loader.build(df, date_format=date_format)
    return records


def records_from_frame(df: pl.DataFrame, loader: Optional[BatchLoader] = None) -> RecordSet:
    """Build a validated ``RecordSet`` from a typed frame, such as generator output"""
    loader = loader or BatchLoader()
    date_format = loader.data.date_format

    text = df.with_columns([
        pl.col(column).dt.strftime(date_format) if dtype in (pl.Date, pl.Datetime) else pl.col(column).cast(pl.Utf8)
        for column, dtype in zip(df.columns, df.dtypes)
    ])

    records, _ = loader.build(text, date_format=date_format)
    return records


def load_records(path: Optional[Union[str, Path]] = None) -> RecordSet:
    """Load the configured (or given) extract into a ``RecordSet``"""
    records, _ = BatchLoader().load(BatchFileConfig.from_settings(path))
    return records
