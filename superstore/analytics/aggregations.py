"""
Grouping utility shared by every report.
"""

from typing import List, Optional, Sequence, Tuple, Union

import polars as pl

SortKey = Tuple[str, bool]  # (column, descending)


def group_totals(
    frame: pl.DataFrame,
    keys: Union[str, Sequence[str]],
    sort: Sequence[SortKey] = (),
    having: Optional[pl.Expr] = None,
    limit: Optional[int] = None,
) -> pl.DataFrame:
    """
    Group ``frame`` by ``keys`` and total sales and profit per group.

    Output columns are the keys plus ``total_sales_units``,
    ``total_profit_units`` and ``line_items``. Only key combinations that
    occur in ``frame`` appear. ``having`` filters groups after aggregation,
    ``sort`` orders them, and ``limit`` keeps the first rows.

    Example:
        group_totals(df, "state", sort=[("total_profit_units", True), ("state", False)], limit=10)
    """
    keys = [keys] if isinstance(keys, str) else list(keys)

    totals = frame.group_by(keys).agg([
        pl.col("sales_units").sum().alias("total_sales_units"),
        pl.col("profit_units").sum().alias("total_profit_units"),
        pl.len().alias("line_items"),
    ])

    if having is not None:
        totals = totals.filter(having)

    if sort:
        columns: List[str] = [column for column, _ in sort]
        descending: List[bool] = [desc for _, desc in sort]
        totals = totals.sort(columns, descending=descending, nulls_last=True)

    if limit is not None:
        totals = totals.head(limit)

    return totals
