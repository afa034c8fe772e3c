"""
Database Models

A single denormalized ``records`` table holding one row per order line
item, mirroring the CSV extract. Money is stored as ``Numeric(14, 4)``.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Date,
    Float,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


class Record(Base):
    """Transaction line item"""

    __tablename__ = "records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    row_index: Mapped[int] = mapped_column(Integer, nullable=False)

    # Order
    order_id: Mapped[str] = mapped_column(String(40), nullable=False)
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    ship_date: Mapped[date] = mapped_column(Date, nullable=False)
    ship_mode: Mapped[Optional[str]] = mapped_column(String(40))
    order_year: Mapped[Optional[int]] = mapped_column(Integer)
    order_month: Mapped[Optional[int]] = mapped_column(Integer)

    # Customer and geography
    customer_name: Mapped[str] = mapped_column(String(40), nullable=False)
    segment: Mapped[str] = mapped_column(String(40), nullable=False)
    region: Mapped[str] = mapped_column(String(40), nullable=False)
    state: Mapped[str] = mapped_column(String(40), nullable=False)
    city: Mapped[str] = mapped_column(String(40), nullable=False)
    postal_code: Mapped[Optional[int]] = mapped_column(Integer)

    # Product; names can be long and contain commas
    category: Mapped[str] = mapped_column(String(40), nullable=False)
    sub_category: Mapped[str] = mapped_column(String(40), nullable=False)
    manufacturer: Mapped[Optional[str]] = mapped_column(String(40))
    product_name: Mapped[str] = mapped_column(Text, nullable=False)

    # Metrics
    discount: Mapped[float] = mapped_column(Float, nullable=False)
    sales: Mapped[Decimal] = mapped_column(Numeric(14, 4), nullable=False)
    profit: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 4))
    profit_ratio: Mapped[Optional[float]] = mapped_column(Float)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        Index("ix_records_order_category", "order_id", "category"),
        Index("ix_records_customer_name", "customer_name"),
        Index("ix_records_state_city", "state", "city"),
    )

    def __repr__(self) -> str:
        return f"<Record {self.order_id} {self.product_name[:30]!r}>"
