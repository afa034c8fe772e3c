"""
Profitability Reports

Pure report functions over a loaded ``RecordSet``. Each one is a
deterministic read of the record frame: discount leakage, loss-making
products, category performance, customer, segment and geographic rankings.

Ties in every ranking are broken by the group key in ascending order, so
repeated runs over the same records return identical rows.
"""

from datetime import datetime, timezone
from functools import wraps
from typing import Callable, List, Optional, TypeVar

import polars as pl
import structlog

from superstore.analytics.aggregations import group_totals
from superstore.analytics.models import (
    AnalysisReport,
    CategoryPerformance,
    CityProfit,
    CustomerProfit,
    DiscountLevel,
    DiscountProfit,
    DiscountSales,
    ProductLoss,
    SegmentPerformance,
    StateProfit,
)
from superstore.analytics.records import RecordSet
from superstore.config import get_settings
from superstore.exceptions import ReportComputationError
from superstore.transformation.money import average_units, from_units

logger = structlog.get_logger(__name__)

T = TypeVar("T")

PROFIT_ASC = ("total_profit_units", False)
PROFIT_DESC = ("total_profit_units", True)


def report(name: str, sums_profit: bool = True) -> Callable:
    """
    Wrap a report function with logging and internal-fault handling.

    Any Polars compute error, arithmetic fault, or a record set whose money
    totals could overflow 64-bit minor units is raised as
    ``ReportComputationError``.
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(records: RecordSet, *args, **kwargs) -> T:
            if not records.fits_int64:
                raise ReportComputationError(name, OverflowError("money totals exceed 64-bit range"))

            if sums_profit and records.missing_profit:
                logger.warning(
                    "missing_profit_excluded",
                    report=name,
                    records=records.missing_profit,
                )

            try:
                result = func(records, *args, **kwargs)
            except (pl.exceptions.PolarsError, ArithmeticError) as e:
                logger.error("Report failed", report=name, error=str(e))
                raise ReportComputationError(name, e) from e

            logger.debug(
                "Report computed",
                report=name,
                rows=len(result) if isinstance(result, list) else result,
            )
            return result
        return wrapper
    return decorator


def _pct(discount: float) -> float:
    """Discount rate as a percentage rounded to 2 places; 0.1 -> 10.0"""
    return round(discount * 100, 2) + 0.0


def _label(pct: float) -> str:
    return f"{pct:g}%"


def _resolve_limit(limit: Optional[int], default: int) -> int:
    limit = default if limit is None else limit
    if limit < 0:
        raise ValueError(f"limit must be non-negative, got {limit}")
    return limit


# =============================================================================
# DISCOUNTS
# =============================================================================

@report("discount_levels", sums_profit=False)
def discount_levels(records: RecordSet) -> List[DiscountLevel]:
    """Distinct discount tiers as percentages, ascending."""
    levels = (
        records.frame
        .select((pl.col("discount") * 100).round(2).alias("discount_pct"))
        .unique()
        .sort("discount_pct")
    )
    return [DiscountLevel(discount_pct=pct + 0.0) for pct in levels["discount_pct"].to_list()]


@report("profit_by_discount")
def profit_by_discount(records: RecordSet) -> List[DiscountProfit]:
    """
    Total profit per discount tier, ascending by discount.

    Groups on the exact stored discount value; tiers are discrete policy
    rates, not a continuous variable.
    """
    totals = group_totals(records.frame, "discount", sort=[("discount", False)])
    scale = records.money_scale

    rows = []
    for row in totals.iter_rows(named=True):
        pct = _pct(row["discount"])
        rows.append(DiscountProfit(
            discount=row["discount"],
            discount_pct=pct,
            label=_label(pct),
            total_profit=from_units(row["total_profit_units"], scale),
        ))
    return rows


@report("sales_by_discount", sums_profit=False)
def sales_by_discount(records: RecordSet) -> List[DiscountSales]:
    """Total sales per discount tier, highest revenue first."""
    totals = group_totals(
        records.frame,
        "discount",
        sort=[("total_sales_units", True), ("discount", False)],
    )
    scale = records.money_scale

    rows = []
    for row in totals.iter_rows(named=True):
        pct = _pct(row["discount"])
        rows.append(DiscountSales(
            discount=row["discount"],
            discount_pct=pct,
            label=_label(pct),
            total_sales=from_units(row["total_sales_units"], scale),
        ))
    return rows


# =============================================================================
# PRODUCTS
# =============================================================================

@report("loss_making_product_count")
def loss_making_product_count(records: RecordSet) -> int:
    """Number of products whose profit summed over all transactions is below zero."""
    losses = group_totals(
        records.frame,
        "product_name",
        having=pl.col("total_profit_units") < 0,
    )
    return losses.height


@report("worst_loss_making_products")
def worst_loss_making_products(records: RecordSet, limit: Optional[int] = None) -> List[ProductLoss]:
    """
    The most negative products by summed profit.

    Only products with net profit below zero qualify; fewer than ``limit``
    rows come back when fewer products lose money.
    """
    limit = _resolve_limit(limit, get_settings().analytics.worst_products_limit)
    losses = group_totals(
        records.frame,
        "product_name",
        having=pl.col("total_profit_units") < 0,
        sort=[PROFIT_ASC, ("product_name", False)],
        limit=limit,
    )
    scale = records.money_scale

    return [
        ProductLoss(
            product_name=row["product_name"],
            total_sales=from_units(row["total_sales_units"], scale),
            total_profit=from_units(row["total_profit_units"], scale),
        )
        for row in losses.iter_rows(named=True)
    ]


# =============================================================================
# CATEGORIES
# =============================================================================

@report("category_performance")
def category_performance(records: RecordSet) -> List[CategoryPerformance]:
    """
    Category totals with a true per-order profit average.

    Line items are first collapsed to one figure per (order_id, category),
    then averaged per category, so an order with many line items counts
    once. Categories are returned in name order.
    """
    orders = records.frame.group_by(["order_id", "category"]).agg([
        pl.col("sales_units").sum().alias("order_sales_units"),
        pl.col("profit_units").sum().alias("order_profit_units"),
    ])

    categories = orders.group_by("category").agg([
        pl.col("order_sales_units").sum().alias("total_sales_units"),
        pl.col("order_profit_units").sum().alias("total_profit_units"),
        pl.len().alias("order_count"),
    ]).sort("category")

    scale = records.money_scale

    return [
        CategoryPerformance(
            category=row["category"],
            total_sales=from_units(row["total_sales_units"], scale),
            total_profit=from_units(row["total_profit_units"], scale),
            average_profit_per_order=average_units(row["total_profit_units"], row["order_count"], scale),
            order_count=row["order_count"],
        )
        for row in categories.iter_rows(named=True)
    ]


# =============================================================================
# CUSTOMERS AND SEGMENTS
# =============================================================================

def _customer_rows(totals: pl.DataFrame, scale: int) -> List[CustomerProfit]:
    return [
        CustomerProfit(
            customer_name=row["customer_name"],
            total_sales=from_units(row["total_sales_units"], scale),
            total_profit=from_units(row["total_profit_units"], scale),
        )
        for row in totals.iter_rows(named=True)
    ]


@report("top_customers")
def top_customers(records: RecordSet, limit: Optional[int] = None) -> List[CustomerProfit]:
    """Most profitable customers, highest summed profit first."""
    limit = _resolve_limit(limit, get_settings().analytics.ranking_limit)
    totals = group_totals(
        records.frame,
        "customer_name",
        sort=[PROFIT_DESC, ("customer_name", False)],
        limit=limit,
    )
    return _customer_rows(totals, records.money_scale)


@report("bottom_customers")
def bottom_customers(records: RecordSet, limit: Optional[int] = None) -> List[CustomerProfit]:
    """Least profitable customers, lowest summed profit first."""
    limit = _resolve_limit(limit, get_settings().analytics.ranking_limit)
    totals = group_totals(
        records.frame,
        "customer_name",
        sort=[PROFIT_ASC, ("customer_name", False)],
        limit=limit,
    )
    return _customer_rows(totals, records.money_scale)


@report("segment_performance")
def segment_performance(records: RecordSet) -> List[SegmentPerformance]:
    """Sales and profit per customer segment, most profitable first."""
    totals = group_totals(
        records.frame,
        "segment",
        sort=[PROFIT_DESC, ("segment", False)],
    )
    scale = records.money_scale

    return [
        SegmentPerformance(
            segment=row["segment"],
            total_sales=from_units(row["total_sales_units"], scale),
            total_profit=from_units(row["total_profit_units"], scale),
        )
        for row in totals.iter_rows(named=True)
    ]


# =============================================================================
# GEOGRAPHY
# =============================================================================

@report("top_states")
def top_states(records: RecordSet, limit: Optional[int] = None) -> List[StateProfit]:
    """Most profitable states."""
    limit = _resolve_limit(limit, get_settings().analytics.ranking_limit)
    totals = group_totals(
        records.frame,
        "state",
        sort=[PROFIT_DESC, ("state", False)],
        limit=limit,
    )
    scale = records.money_scale

    return [
        StateProfit(
            state=row["state"],
            total_sales=from_units(row["total_sales_units"], scale),
            total_profit=from_units(row["total_profit_units"], scale),
        )
        for row in totals.iter_rows(named=True)
    ]


@report("top_cities")
def top_cities(records: RecordSet, limit: Optional[int] = None) -> List[CityProfit]:
    """Most profitable cities, grouped with their state."""
    limit = _resolve_limit(limit, get_settings().analytics.ranking_limit)
    totals = group_totals(
        records.frame,
        ["city", "state"],
        sort=[PROFIT_DESC, ("city", False), ("state", False)],
        limit=limit,
    )
    scale = records.money_scale

    return [
        CityProfit(
            city=row["city"],
            state=row["state"],
            total_sales=from_units(row["total_sales_units"], scale),
            total_profit=from_units(row["total_profit_units"], scale),
        )
        for row in totals.iter_rows(named=True)
    ]


# =============================================================================
# ALL REPORTS
# =============================================================================

def run_all_reports(records: RecordSet) -> AnalysisReport:
    """
    Run every report against the same record set.

    Args:
        records: Validated record set

    Returns:
        AnalysisReport bundling all report rows
    """
    logger.info("Running reports", records=len(records))

    result = AnalysisReport(
        generated_at=datetime.now(timezone.utc),
        record_count=len(records),
        total_sales=records.total_sales(),
        total_profit=records.total_profit(),
        missing_profit_records=records.missing_profit,
        discount_levels=discount_levels(records),
        profit_by_discount=profit_by_discount(records),
        sales_by_discount=sales_by_discount(records),
        loss_making_product_count=loss_making_product_count(records),
        worst_loss_making_products=worst_loss_making_products(records),
        category_performance=category_performance(records),
        top_customers=top_customers(records),
        bottom_customers=bottom_customers(records),
        segment_performance=segment_performance(records),
        top_states=top_states(records),
        top_cities=top_cities(records),
    )

    logger.info(
        "Reports complete",
        records=result.record_count,
        loss_making_products=result.loss_making_product_count,
        categories=len(result.category_performance),
    )

    return result
