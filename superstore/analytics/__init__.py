"""
Aggregation Engine
"""
from .aggregations import group_totals
from .records import RecordSet, RECORD_SCHEMA
from .reports import (
    bottom_customers,
    category_performance,
    discount_levels,
    loss_making_product_count,
    profit_by_discount,
    run_all_reports,
    sales_by_discount,
    segment_performance,
    top_cities,
    top_customers,
    top_states,
    worst_loss_making_products,
)

__all__ = [
    "group_totals",
    "RecordSet",
    "RECORD_SCHEMA",
    "bottom_customers",
    "category_performance",
    "discount_levels",
    "loss_making_product_count",
    "profit_by_discount",
    "run_all_reports",
    "sales_by_discount",
    "segment_performance",
    "top_cities",
    "top_customers",
    "top_states",
    "worst_loss_making_products",
]
