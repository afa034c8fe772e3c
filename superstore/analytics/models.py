"""
Report row models.

These rows are the whole contract surface handed to the dashboard layer.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class DiscountLevel(BaseModel):
    """Distinct discount tier, as a percentage"""
    discount_pct: float


class DiscountProfit(BaseModel):
    """Total profit at one discount tier"""
    discount: float
    discount_pct: float
    label: str
    total_profit: Decimal


class DiscountSales(BaseModel):
    """Total sales at one discount tier"""
    discount: float
    discount_pct: float
    label: str
    total_sales: Decimal


class ProductLoss(BaseModel):
    """Product whose summed profit is negative"""
    product_name: str
    total_sales: Decimal
    total_profit: Decimal


class CategoryPerformance(BaseModel):
    """Category totals with profit averaged per order rather than per line item"""
    category: str
    total_sales: Decimal
    total_profit: Decimal
    average_profit_per_order: Optional[Decimal]
    order_count: int


class CustomerProfit(BaseModel):
    """Customer sales and profit totals"""
    customer_name: str
    total_sales: Decimal
    total_profit: Decimal


class SegmentPerformance(BaseModel):
    """Segment sales and profit totals"""
    segment: str
    total_sales: Decimal
    total_profit: Decimal


class StateProfit(BaseModel):
    """State sales and profit totals"""
    state: str
    total_sales: Decimal
    total_profit: Decimal


class CityProfit(BaseModel):
    """City sales and profit totals; city names are only unique within a state"""
    city: str
    state: str
    total_sales: Decimal
    total_profit: Decimal


class AnalysisReport(BaseModel):
    """Every report computed over one record set"""
    generated_at: datetime
    record_count: int
    total_sales: Decimal
    total_profit: Decimal
    missing_profit_records: int
    discount_levels: List[DiscountLevel]
    profit_by_discount: List[DiscountProfit]
    sales_by_discount: List[DiscountSales]
    loss_making_product_count: int
    worst_loss_making_products: List[ProductLoss]
    category_performance: List[CategoryPerformance]
    top_customers: List[CustomerProfit]
    bottom_customers: List[CustomerProfit]
    segment_performance: List[SegmentPerformance]
    top_states: List[StateProfit]
    top_cities: List[CityProfit]
