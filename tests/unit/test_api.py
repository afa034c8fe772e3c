"""
Unit Tests - Report API
"""
import inspect

import polars as pl
import pytest
from fastapi.testclient import TestClient

from superstore.analytics.records import RecordSet
from superstore.config import get_settings
from superstore.exceptions import RecordLoadError
from superstore.serving.api import main as api_main
from superstore.serving.api.main import create_app
from superstore.serving.api.routes import reports


@pytest.fixture
def client(sample_records) -> TestClient:
    """Client for an app serving the sample records"""
    return TestClient(create_app(records=sample_records))


@pytest.fixture
def empty_client() -> TestClient:
    """Client for an app whose records never loaded"""
    return TestClient(create_app())


class TestHealth:
    """Tests for health endpoints"""

    def test_health(self, client):
        """Test loaded dataset is reported"""
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["checks"]["dataset"]["records"] == 4

    def test_ready(self, client, empty_client):
        """Test readiness follows the loaded dataset"""
        assert client.get("/api/v1/health/ready").status_code == 200
        assert empty_client.get("/api/v1/health/ready").status_code == 503
        assert empty_client.get("/api/v1/health/live").status_code == 200

    @pytest.mark.parametrize("app_env,docs_status", [("development", 200), ("production", 404)])
    def test_docs_only_in_development(self, monkeypatch, sample_records, app_env, docs_status):
        """Test interactive docs are served only in development"""
        monkeypatch.setenv("APP_ENV", app_env)
        get_settings.cache_clear()
        try:
            client = TestClient(create_app(records=sample_records))
        finally:
            get_settings.cache_clear()

        assert client.get("/docs").status_code == docs_status

    def test_request_id_header(self, client):
        """Test request id is echoed back"""
        response = client.get("/api/v1/health/live", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"
        assert "X-Response-Time" in response.headers


class TestReportRoutes:
    """Tests for report endpoints"""

    def test_all_reports(self, client):
        """Test the bundled report document"""
        response = client.get("/api/v1/reports")

        assert response.status_code == 200
        body = response.json()
        assert body["record_count"] == 4
        assert body["loss_making_product_count"] == 1
        assert len(body["top_customers"]) == 3

    def test_profit_by_discount(self, client):
        """Test discount tiers with exact decimal totals"""
        body = client.get("/api/v1/reports/discounts/profit").json()

        assert [row["label"] for row in body] == ["0%", "20%"]
        assert [row["total_profit"] for row in body] == ["45.7500", "100.0000"]

    def test_discount_levels(self, client):
        """Test discount levels as percentages"""
        body = client.get("/api/v1/reports/discounts/levels").json()

        assert body == [{"discount_pct": 0.0}, {"discount_pct": 20.0}]

    def test_sales_by_discount(self, client):
        """Test highest revenue tier first"""
        body = client.get("/api/v1/reports/discounts/sales").json()

        assert body[0]["discount_pct"] == 20.0

    def test_loss_count(self, client):
        """Test loss-making product count"""
        body = client.get("/api/v1/reports/products/loss-count").json()

        assert body == {"loss_making_products": 1}

    def test_worst_products(self, client):
        """Test worst products"""
        body = client.get("/api/v1/reports/products/worst").json()

        assert [row["product_name"] for row in body] == ["Lamp"]
        assert body[0]["total_profit"] == "-24.2500"

    def test_categories(self, client):
        """Test per-order category average"""
        body = client.get("/api/v1/reports/categories").json()

        assert [row["category"] for row in body] == ["Furniture", "Technology"]
        assert body[0]["order_count"] == 2

    def test_rankings_with_limit(self, client):
        """Test ranking limits from the query string"""
        top = client.get("/api/v1/reports/customers/top", params={"limit": 1}).json()
        bottom = client.get("/api/v1/reports/customers/bottom", params={"limit": 2}).json()

        assert [row["customer_name"] for row in top] == ["Bob"]
        assert [row["customer_name"] for row in bottom] == ["Carol", "Alice"]

    def test_invalid_limit(self, client):
        """Test a non-positive limit is rejected"""
        response = client.get("/api/v1/reports/states/top", params={"limit": 0})

        assert response.status_code == 422

    def test_geography_and_segments(self, client):
        """Test state, city and segment rankings"""
        states = client.get("/api/v1/reports/states/top").json()
        cities = client.get("/api/v1/reports/cities/top").json()
        segments = client.get("/api/v1/reports/segments").json()

        assert states[0]["state"] == "Ohio"
        assert (cities[0]["city"], cities[0]["state"]) == ("Columbus", "Ohio")
        assert [row["segment"] for row in segments] == ["Corporate", "Consumer", "Home Office"]

    def test_not_loaded(self, empty_client):
        """Test reports are unavailable until records load"""
        response = empty_client.get("/api/v1/reports/categories")

        assert response.status_code == 503
        assert response.json()["detail"] == "Records not loaded"

    def test_report_failure(self, sample_records):
        """Test an internal report fault becomes a 500 naming the report"""
        frame = sample_records.frame.with_columns(
            pl.lit(2**62, dtype=pl.Int64).alias("profit_units")
        )
        client = TestClient(create_app(records=RecordSet(frame=frame)))

        response = client.get("/api/v1/reports/segments")

        assert response.status_code == 500
        assert response.json() == {"error": "report_failed", "report": "segment_performance"}

    def test_handlers_run_in_threadpool(self):
        """Test report handlers are plain functions so blocking work stays off the event loop"""
        endpoints = [route.endpoint for route in reports.router.routes]

        assert endpoints
        assert not any(inspect.iscoroutinefunction(endpoint) for endpoint in endpoints)

class TestLifespan:
    """Tests for loading records at startup"""

    def test_loads_configured_extract(self, monkeypatch, sample_records):
        """Test the extract is loaded when the app starts without records"""
        monkeypatch.setattr(api_main, "load_records", lambda source: sample_records)

        with TestClient(create_app()) as client:
            response = client.get("/api/v1/reports/products/loss-count")

        assert response.status_code == 200

    def test_failed_load_serves_503(self, monkeypatch):
        """Test a bad extract leaves the service up but not ready"""
        def fail(source):
            raise RecordLoadError("file not found", file_path=source)

        monkeypatch.setattr(api_main, "load_records", fail)

        with TestClient(create_app()) as client:
            response = client.get("/api/v1/health/ready")

        assert response.status_code == 503
