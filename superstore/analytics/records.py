"""
Loaded transaction records.

A ``RecordSet`` is the single read-only value every report receives. It is
built once by the loader and never modified afterwards.
"""

from dataclasses import dataclass
from decimal import Decimal
from functools import cached_property
from typing import Any, Dict, List

import polars as pl

from superstore.transformation.money import from_units

INT64_MAX = 2**63 - 1

RECORD_SCHEMA: Dict[str, Any] = {
    "order_id": pl.Utf8,
    "order_date": pl.Date,
    "ship_date": pl.Date,
    "ship_mode": pl.Utf8,
    "customer_name": pl.Utf8,
    "segment": pl.Utf8,
    "region": pl.Utf8,
    "state": pl.Utf8,
    "city": pl.Utf8,
    "postal_code": pl.Int64,
    "category": pl.Utf8,
    "sub_category": pl.Utf8,
    "manufacturer": pl.Utf8,
    "product_name": pl.Utf8,
    "discount": pl.Float64,
    "sales_units": pl.Int64,
    "profit_units": pl.Int64,
    "profit_ratio": pl.Float64,
    "quantity": pl.Int64,
    "order_year": pl.Int64,
    "order_month": pl.Int64,
}

MONEY_UNIT_COLUMNS = {"sales_units": "sales", "profit_units": "profit"}


@dataclass(frozen=True)
class RecordSet:
    """
    Immutable, validated collection of transaction line items.

    ``frame`` follows ``RECORD_SCHEMA``; money lives in ``sales_units`` and
    ``profit_units`` as integers at ``money_scale`` decimal places.
    """
    frame: pl.DataFrame
    money_scale: int = 4

    @classmethod
    def empty(cls, money_scale: int = 4) -> "RecordSet":
        """Record set with the full schema and no rows"""
        return cls(frame=pl.DataFrame(schema=RECORD_SCHEMA), money_scale=money_scale)

    def __len__(self) -> int:
        return self.frame.height

    @property
    def is_empty(self) -> bool:
        return self.frame.height == 0

    @cached_property
    def missing_profit(self) -> int:
        """Number of line items without a profit figure"""
        return self.frame["profit_units"].null_count()

    @cached_property
    def unit_headroom(self) -> int:
        """Upper bound on the magnitude of any sum of minor units in this set"""
        return max(
            int(self.frame[column].abs().cast(pl.Float64).sum() or 0)
            for column in MONEY_UNIT_COLUMNS
        )

    @property
    def fits_int64(self) -> bool:
        """Whether every grouped money sum is guaranteed not to overflow"""
        return self.unit_headroom < INT64_MAX

    def total_sales(self) -> Decimal:
        """Grand total of sales across all records"""
        return from_units(int(self.frame["sales_units"].sum() or 0), self.money_scale)

    def total_profit(self) -> Decimal:
        """Grand total of profit across all records (missing profits excluded)"""
        return from_units(int(self.frame["profit_units"].sum() or 0), self.money_scale)

    def to_rows(self) -> List[Dict[str, Any]]:
        """Rows as plain dicts, with money converted back to ``Decimal``"""
        rows = []
        for row in self.frame.to_dicts():
            for units_col, money_col in MONEY_UNIT_COLUMNS.items():
                row[money_col] = from_units(row.pop(units_col), self.money_scale)
            rows.append(row)
        return rows
