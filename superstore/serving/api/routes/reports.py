"""
Report Endpoints

Serves every profitability report over the loaded record set to the
dashboard layer.
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
import structlog

from superstore.analytics import reports
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

router = APIRouter()
logger = structlog.get_logger(__name__)

RankingLimit = Query(default=None, ge=1, le=1000, description="Rows to return")


def get_records(request: Request) -> RecordSet:
    """Dependency resolving the loaded record set, 503 until it exists"""
    records: Optional[RecordSet] = getattr(request.app.state, "records", None)
    if records is None:
        raise HTTPException(status_code=503, detail="Records not loaded")
    return records


@router.get("", response_model=AnalysisReport)
def all_reports(records: RecordSet = Depends(get_records)) -> AnalysisReport:
    """Every report in one document."""
    return reports.run_all_reports(records)


@router.get("/discounts/levels", response_model=List[DiscountLevel])
def discount_levels(records: RecordSet = Depends(get_records)) -> List[DiscountLevel]:
    return reports.discount_levels(records)


@router.get("/discounts/profit", response_model=List[DiscountProfit])
def profit_by_discount(records: RecordSet = Depends(get_records)) -> List[DiscountProfit]:
    return reports.profit_by_discount(records)


@router.get("/discounts/sales", response_model=List[DiscountSales])
def sales_by_discount(records: RecordSet = Depends(get_records)) -> List[DiscountSales]:
    return reports.sales_by_discount(records)


@router.get("/products/loss-count")
def loss_making_product_count(records: RecordSet = Depends(get_records)) -> Dict[str, int]:
    return {"loss_making_products": reports.loss_making_product_count(records)}


@router.get("/products/worst", response_model=List[ProductLoss])
def worst_products(
    limit: Optional[int] = RankingLimit,
    records: RecordSet = Depends(get_records),
) -> List[ProductLoss]:
    return reports.worst_loss_making_products(records, limit=limit)


@router.get("/categories", response_model=List[CategoryPerformance])
def category_performance(records: RecordSet = Depends(get_records)) -> List[CategoryPerformance]:
    return reports.category_performance(records)


@router.get("/customers/top", response_model=List[CustomerProfit])
def top_customers(
    limit: Optional[int] = RankingLimit,
    records: RecordSet = Depends(get_records),
) -> List[CustomerProfit]:
    return reports.top_customers(records, limit=limit)


@router.get("/customers/bottom", response_model=List[CustomerProfit])
def bottom_customers(
    limit: Optional[int] = RankingLimit,
    records: RecordSet = Depends(get_records),
) -> List[CustomerProfit]:
    return reports.bottom_customers(records, limit=limit)


@router.get("/segments", response_model=List[SegmentPerformance])
def segment_performance(records: RecordSet = Depends(get_records)) -> List[SegmentPerformance]:
    return reports.segment_performance(records)


@router.get("/states/top", response_model=List[StateProfit])
def top_states(
    limit: Optional[int] = RankingLimit,
    records: RecordSet = Depends(get_records),
) -> List[StateProfit]:
    return reports.top_states(records, limit=limit)


@router.get("/cities/top", response_model=List[CityProfit])
def top_cities(
    limit: Optional[int] = RankingLimit,
    records: RecordSet = Depends(get_records),
) -> List[CityProfit]:
    return reports.top_cities(records, limit=limit)
