"""
Data Cleaning Module

Cleaning transformations applied to the raw text extract before typing.
Handles:
- Header normalization ("Customer Name" -> customer_name)
- Whitespace trimming
- Missing value tokens
- Currency symbol removal on monetary columns
"""

from dataclasses import dataclass
from typing import List, Optional
import re

import polars as pl
import structlog

logger = structlog.get_logger(__name__)

MONEY_COLUMNS = ["sales", "profit"]


@dataclass
class CleaningStats:
    """Statistics from cleaning operations"""
    total_rows: int
    renamed_columns: int
    nulls_marked: int
    format_corrections: int


class DataCleaner:
    """
    Data cleaner for the transaction record extract.

    Operates on an all-text Polars frame; typing happens afterwards in the
    loader so that unparseable values can still be reported by row.

    Example:
        cleaner = DataCleaner()
        df_clean, stats = cleaner.clean_records(df)
    """

    def __init__(self, null_values: Optional[List[str]] = None):
        self.null_values = null_values or ["", "NULL", "null", "None", "NA", "N/A"]

    @staticmethod
    def normalize_column_name(name: str) -> str:
        """Snake-case a header: 'Sub-Category' -> 'sub_category'"""
        name = re.sub(r"[^0-9a-zA-Z]+", "_", name.strip()).strip("_")
        return name.lower()

    def _normalize_column_names(self, df: pl.DataFrame) -> pl.DataFrame:
        """Rename every column to its snake_case form"""
        mapping = {col: self.normalize_column_name(col) for col in df.columns}
        renamed = {old: new for old, new in mapping.items() if old != new}
        if renamed:
            logger.debug("Normalized column names", renamed=renamed)
            df = df.rename(renamed)
        return df

    def _string_columns(self, df: pl.DataFrame) -> List[str]:
        return [col for col, dtype in zip(df.columns, df.dtypes) if dtype == pl.Utf8]

    def _trim_strings(self, df: pl.DataFrame, columns: Optional[List[str]] = None) -> pl.DataFrame:
        """Trim whitespace from string columns"""
        string_cols = columns or self._string_columns(df)

        for col in string_cols:
            if col in df.columns:
                df = df.with_columns(
                    pl.col(col).str.strip_chars().alias(col)
                )

        return df

    def _mark_nulls(self, df: pl.DataFrame, columns: Optional[List[str]] = None) -> pl.DataFrame:
        """Replace missing-value tokens in string columns with real nulls"""
        string_cols = columns or self._string_columns(df)

        for col in string_cols:
            if col in df.columns:
                df = df.with_columns(
                    pl.when(pl.col(col).is_in(self.null_values))
                    .then(None)
                    .otherwise(pl.col(col))
                    .alias(col)
                )

        return df

    def _normalize_currency(
        self,
        df: pl.DataFrame,
        amount_columns: List[str],
    ) -> pl.DataFrame:
        """Remove currency symbols and thousands separators, keeping the text exact"""
        for col in amount_columns:
            if col in df.columns and df[col].dtype == pl.Utf8:
                df = df.with_columns(
                    pl.col(col)
                    .str.replace_all(r"[$€£¥,]", "")
                    .str.strip_chars()
                    .alias(col)
                )

        return df

    def clean_records(self, df: pl.DataFrame) -> tuple:
        """
        Apply record-specific cleaning transformations.

        Returns:
            Tuple of (cleaned DataFrame, CleaningStats)
        """
        total_rows = len(df)
        original_columns = list(df.columns)

        df = self._normalize_column_names(df)
        renamed = sum(1 for old, new in zip(original_columns, df.columns) if old != new)

        df = self._trim_strings(df)

        string_cols = self._string_columns(df)
        nulls_before = sum(df[c].null_count() for c in string_cols)
        df = self._mark_nulls(df)
        nulls_marked = sum(df[c].null_count() for c in string_cols) - nulls_before

        money_cols = [c for c in MONEY_COLUMNS if c in df.columns and df[c].dtype == pl.Utf8]
        corrections = 0
        if money_cols:
            corrections = df.select(
                pl.sum_horizontal(
                    [pl.col(c).str.contains(r"[$€£¥,]").fill_null(False).sum() for c in money_cols]
                )
            ).item()
            df = self._normalize_currency(df, money_cols)

        stats = CleaningStats(
            total_rows=total_rows,
            renamed_columns=renamed,
            nulls_marked=nulls_marked,
            format_corrections=corrections,
        )

        logger.info(
            "Records cleaned",
            rows=total_rows,
            renamed_columns=renamed,
            nulls_marked=nulls_marked,
            format_corrections=corrections,
        )

        return df, stats


def clean_dataframe(df: pl.DataFrame, null_values: Optional[List[str]] = None) -> pl.DataFrame:
    """
    Convenience function to clean a record extract.

    Args:
        df: Input DataFrame with text columns
        null_values: Tokens read as missing values

    Returns:
        Cleaned DataFrame
    """
    cleaned, _ = DataCleaner(null_values=null_values).clean_records(df)
    return cleaned
