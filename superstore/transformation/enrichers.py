"""
Data Enrichment Module

Derived attributes on the typed record frame.
"""

import polars as pl
import structlog

logger = structlog.get_logger(__name__)


class DataEnricher:
    """Adds derived calendar attributes to transaction records."""

    def enrich_records_with_time_features(
        self,
        df: pl.DataFrame,
        order_date_col: str = "order_date",
    ) -> pl.DataFrame:
        """
        Add order_year and order_month from the order date.

        Values already present in the extract are kept; only missing ones are
        derived.
        """
        if order_date_col not in df.columns:
            return df

        derived = {
            "order_year": pl.col(order_date_col).dt.year().cast(pl.Int64),
            "order_month": pl.col(order_date_col).dt.month().cast(pl.Int64),
        }

        columns = []
        for name, expr in derived.items():
            if name in df.columns:
                columns.append(pl.coalesce([pl.col(name), expr]).alias(name))
            else:
                columns.append(expr.alias(name))

        logger.debug("Enriched records with time features", columns=list(derived))
        return df.with_columns(columns)


def enrich_record_data(df: pl.DataFrame) -> pl.DataFrame:
    """Convenience wrapper around ``DataEnricher``"""
    return DataEnricher().enrich_records_with_time_features(df)
