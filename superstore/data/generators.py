"""
Synthetic Data Generator

Generates superstore-shaped transaction records for demos and tests.
Includes:
- Multi-line orders spanning one or more categories
- Consumer / Corporate / Home Office customers
- Discrete discount tiers, with margins that turn negative at deep discounts
- US regions, states and cities
"""

from datetime import date, timedelta
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import numpy as np
import polars as pl
import structlog
from faker import Faker

logger = structlog.get_logger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

CATEGORIES: Dict[str, Dict[str, Tuple[float, float, float]]] = {
    # sub_category: (min unit price, max unit price, base margin)
    "Furniture": {
        "Bookcases": (40.0, 900.0, 0.05),
        "Chairs": (30.0, 1200.0, 0.12),
        "Furnishings": (5.0, 300.0, 0.25),
        "Tables": (80.0, 1500.0, 0.02),
    },
    "Office Supplies": {
        "Appliances": (10.0, 800.0, 0.20),
        "Art": (2.0, 60.0, 0.25),
        "Binders": (2.0, 120.0, 0.30),
        "Paper": (3.0, 40.0, 0.45),
        "Storage": (10.0, 400.0, 0.12),
    },
    "Technology": {
        "Accessories": (10.0, 400.0, 0.25),
        "Copiers": (300.0, 3500.0, 0.35),
        "Machines": (100.0, 4000.0, 0.08),
        "Phones": (20.0, 900.0, 0.15),
    },
}

SEGMENTS = [("Consumer", 0.52), ("Corporate", 0.30), ("Home Office", 0.18)]

SHIP_MODES = [("Standard Class", 0.60), ("Second Class", 0.19), ("First Class", 0.16), ("Same Day", 0.05)]

DISCOUNT_TIERS = [
    (0.0, 0.48),
    (0.1, 0.09),
    (0.15, 0.01),
    (0.2, 0.24),
    (0.3, 0.03),
    (0.4, 0.03),
    (0.5, 0.02),
    (0.6, 0.02),
    (0.7, 0.04),
    (0.8, 0.04),
]

REGIONS: Dict[str, List[str]] = {
    "West": ["California", "Washington", "Oregon", "Arizona", "Colorado", "Utah"],
    "East": ["New York", "Pennsylvania", "Ohio", "Massachusetts", "New Jersey", "Delaware"],
    "Central": ["Texas", "Illinois", "Michigan", "Indiana", "Wisconsin", "Minnesota"],
    "South": ["Florida", "Georgia", "Virginia", "North Carolina", "Tennessee", "Kentucky"],
}

COLUMNS = [
    "category", "city", "customer_name", "manufacturer", "order_date", "order_id",
    "postal_code", "product_name", "region", "segment", "ship_date", "ship_mode",
    "state", "sub_category", "discount", "profit", "profit_ratio", "quantity",
    "sales", "order_year", "order_month",
]


def _weighted(rng: np.random.Generator, options: List[Tuple]) -> object:
    values = [o[0] for o in options]
    weights = np.array([o[1] for o in options])
    return values[rng.choice(len(values), p=weights / weights.sum())]


# =============================================================================
# GENERATOR
# =============================================================================

class RecordGenerator:
    """
    Generate reproducible transaction line items.

    Example:
        df = RecordGenerator(seed=42).generate(n_orders=500)
    """

    def __init__(
        self,
        seed: int = 42,
        n_customers: int = 200,
        products_per_sub_category: int = 8,
        start_date: date = date(2014, 1, 1),
        end_date: date = date(2017, 12, 31),
    ):
        self.rng = np.random.default_rng(seed)
        self.fake = Faker("en_US")
        self.fake.seed_instance(seed)
        self.start_date = start_date
        self.end_date = end_date
        self.customers = self._build_customers(n_customers)
        self.products = self._build_products(products_per_sub_category)
        self.places = self._build_places()

    def _build_customers(self, n: int) -> List[Tuple[str, str]]:
        names = set()
        while len(names) < n:
            names.add(self.fake.name())
        return [(name, _weighted(self.rng, SEGMENTS)) for name in sorted(names)]

    def _build_products(self, per_sub_category: int) -> List[dict]:
        products = []
        for category, subs in CATEGORIES.items():
            for sub_category, (low, high, margin) in subs.items():
                for _ in range(per_sub_category):
                    manufacturer = self.fake.last_name()
                    model = self.fake.bothify("??-###").upper()
                    products.append({
                        "category": category,
                        "sub_category": sub_category,
                        "manufacturer": manufacturer,
                        "product_name": f"{manufacturer} {model} {sub_category.rstrip('s')}",
                        "unit_price": float(self.rng.uniform(low, high)),
                        "margin": margin,
                    })
        return products

    def _build_places(self) -> List[dict]:
        places = []
        for region, states in REGIONS.items():
            for state in states:
                for _ in range(4):
                    places.append({
                        "region": region,
                        "state": state,
                        "city": self.fake.city(),
                        "postal_code": int(self.fake.postcode()),
                    })
        return places

    def _line_item(self, product: dict) -> dict:
        quantity = int(self.rng.integers(1, 15))
        discount = float(_weighted(self.rng, DISCOUNT_TIERS))
        sales = round(product["unit_price"] * quantity * (1 - discount), 4)

        # Margin erodes roughly twice as fast as the discount deepens
        margin = product["margin"] + float(self.rng.normal(0, 0.05)) - 2 * discount
        profit = round(sales * margin, 4)

        return {
            "category": product["category"],
            "sub_category": product["sub_category"],
            "manufacturer": product["manufacturer"],
            "product_name": product["product_name"],
            "discount": discount,
            "quantity": quantity,
            "sales": sales,
            "profit": profit,
            "profit_ratio": round(profit / sales, 4) if sales else 0.0,
        }

    def generate(self, n_orders: int = 1000) -> pl.DataFrame:
        """Generate ``n_orders`` orders of one to six line items each"""
        span = (self.end_date - self.start_date).days
        rows = []

        for i in range(n_orders):
            customer_name, segment = self.customers[self.rng.integers(len(self.customers))]
            place = self.places[self.rng.integers(len(self.places))]
            order_date = self.start_date + timedelta(days=int(self.rng.integers(span + 1)))
            ship_date = order_date + timedelta(days=int(self.rng.integers(0, 8)))
            order_id = f"US-{order_date.year}-{100000 + i:06d}"
            ship_mode = _weighted(self.rng, SHIP_MODES)

            for _ in range(int(self.rng.integers(1, 7))):
                product = self.products[self.rng.integers(len(self.products))]
                rows.append({
                    "order_id": order_id,
                    "order_date": order_date,
                    "ship_date": ship_date,
                    "ship_mode": ship_mode,
                    "customer_name": customer_name,
                    "segment": segment,
                    **place,
                    **self._line_item(product),
                    "order_year": order_date.year,
                    "order_month": order_date.month,
                })

        df = pl.DataFrame(rows).select(COLUMNS)
        logger.info("Generated records", orders=n_orders, rows=len(df))
        return df


def write_csv(df: pl.DataFrame, path: Union[str, Path]) -> Path:
    """Write generated records as a CSV extract"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.write_csv(path)
    logger.info("Written generated records", file=str(path), rows=len(df))
    return path


def generate_records(n_orders: int = 1000, seed: Optional[int] = 42) -> pl.DataFrame:
    """Convenience wrapper around ``RecordGenerator``"""
    return RecordGenerator(seed=seed if seed is not None else 42).generate(n_orders)
