"""
Test Suite Configuration
"""
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List

import pytest

from superstore.analytics.records import RecordSet
from superstore.config import Settings
from superstore.ingestion import records_from_rows


def make_record(**overrides: Any) -> Dict[str, Any]:
    """One valid transaction line item; keyword arguments replace fields"""
    record = {
        "order_id": "CA-2016-100001",
        "order_date": date(2016, 3, 1),
        "ship_date": date(2016, 3, 4),
        "ship_mode": "Standard Class",
        "customer_name": "Claire Gute",
        "segment": "Consumer",
        "region": "South",
        "state": "Kentucky",
        "city": "Henderson",
        "postal_code": 42420,
        "category": "Furniture",
        "sub_category": "Bookcases",
        "manufacturer": "Bush",
        "product_name": "Bush Somerset Collection Bookcase",
        "discount": 0.0,
        "sales": "261.96",
        "profit": "41.9136",
        "quantity": 2,
    }
    record.update(overrides)
    return record


@pytest.fixture
def record_factory() -> Callable[..., Dict[str, Any]]:
    """Row builder shared by the report and ingestion tests"""
    return make_record


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        app_env="testing",
        debug=True,
    )


@pytest.fixture
def sample_rows() -> List[Dict[str, Any]]:
    """Two orders, three customers, two categories and two discount tiers"""
    return [
        make_record(
            order_id="O-1", customer_name="Alice", product_name="Desk",
            category="Furniture", state="Texas", city="Houston",
            discount=0.0, sales="200.00", profit="50.00",
        ),
        make_record(
            order_id="O-1", customer_name="Alice", product_name="Lamp",
            category="Furniture", state="Texas", city="Houston",
            discount=0.2, sales="40.00", profit="-20.00",
        ),
        make_record(
            order_id="O-2", customer_name="Bob", product_name="Phone",
            category="Technology", segment="Corporate", state="Ohio", city="Columbus",
            discount=0.2, sales="500.00", profit="120.00",
        ),
        make_record(
            order_id="O-3", customer_name="Carol", product_name="Lamp",
            category="Furniture", segment="Home Office", state="Ohio", city="Dayton",
            discount=0.0, sales="35.50", profit="-4.25",
        ),
    ]


@pytest.fixture
def sample_records(sample_rows) -> RecordSet:
    """Validated record set built from ``sample_rows``"""
    return records_from_rows(sample_rows)


@pytest.fixture
def sample_csv(tmp_path: Path) -> Path:
    """Extract in the original header style, with a quoted product name"""
    path = tmp_path / "superstore.csv"
    path.write_text(
        "Order ID,Order Date,Ship Date,Ship Mode,Customer Name,Segment,Region,State,City,"
        "Postal Code,Category,Sub-Category,Manufacturer,Product Name,Discount,Sales,Profit,Quantity\n"
        'CA-2016-152156,2016-11-08,2016-11-11,Second Class,Claire Gute,Consumer,South,Kentucky,Henderson,'
        '42420,Furniture,Bookcases,Bush,"Bush Somerset Collection Bookcase, Fully Assembled",0,261.96,41.9136,2\n'
        "CA-2016-152156,2016-11-08,2016-11-11,Second Class,Claire Gute,Consumer,South,Kentucky,Henderson,"
        "42420,Furniture,Chairs,Hon,Hon Deluxe Fabric Upholstered Stacking Chairs,0,731.94,219.582,3\n"
        "US-2015-108966,2015-10-11,2015-10-18,Standard Class,Sean O'Donnell,Consumer,South,Florida,"
        "Fort Lauderdale,33311,Furniture,Tables,Bretford,Bretford CR4500 Series Slim Rectangular Table,"
        "0.45,957.5775,-383.031,5\n",
        encoding="utf-8",
    )
    return path
