"""
Unit Tests - Profitability Reports
"""
from decimal import Decimal

import polars as pl
import pytest

from superstore.analytics import (
    RecordSet,
    bottom_customers,
    category_performance,
    discount_levels,
    group_totals,
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
from superstore.config import AnalyticsSettings
from superstore.exceptions import ReportComputationError
from superstore.ingestion import BatchLoader, records_from_rows


class TestGroupTotals:
    """Tests for the shared grouping utility"""

    def test_totals_per_key(self, sample_records):
        """Test sales, profit and line counts per group"""
        totals = group_totals(sample_records.frame, "customer_name", sort=[("customer_name", False)])

        assert totals["customer_name"].to_list() == ["Alice", "Bob", "Carol"]
        assert totals["total_profit_units"].to_list() == [300000, 1200000, -42500]
        assert totals["line_items"].to_list() == [2, 1, 1]

    def test_having_and_limit(self, sample_records):
        """Test post-aggregation filter and row limit"""
        totals = group_totals(
            sample_records.frame,
            "state",
            sort=[("total_profit_units", True)],
            having=pl.col("total_profit_units") > 0,
            limit=1,
        )

        assert totals["state"].to_list() == ["Ohio"]


class TestDiscountReports:
    """Tests for discount level, profit and sales reports"""

    def test_discount_levels(self, sample_records):
        """Test distinct tiers as ascending percentages"""
        levels = discount_levels(sample_records)

        assert [level.discount_pct for level in levels] == [0.0, 20.0]

    def test_profit_by_discount_scenario(self, record_factory):
        """Test equal discounts merge into one ascending group"""
        records = records_from_rows([
            record_factory(discount=0.0, profit="100"),
            record_factory(discount=0.1, profit="20"),
            record_factory(discount=0.1, profit="10"),
            record_factory(discount=0.3, profit="-5"),
        ])

        rows = profit_by_discount(records)

        assert [(row.label, row.total_profit) for row in rows] == [
            ("0%", Decimal("100")),
            ("10%", Decimal("30")),
            ("30%", Decimal("-5")),
        ]
        assert [row.discount for row in rows] == [0.0, 0.1, 0.3]

    def test_profit_by_discount_is_lossless(self, sample_records):
        """Test group sums add up to the grand total profit"""
        rows = profit_by_discount(sample_records)

        assert sum(row.total_profit for row in rows) == sample_records.total_profit()
        assert sample_records.total_profit() == Decimal("145.75")

    def test_sales_by_discount_highest_first(self, sample_records):
        """Test sales tiers ordered by revenue descending"""
        rows = sales_by_discount(sample_records)

        assert [row.discount_pct for row in rows] == [20.0, 0.0]
        assert rows[0].total_sales == Decimal("540.00")
        assert rows[1].total_sales == Decimal("235.50")

    def test_sales_by_discount_tie_breaks_on_discount(self, record_factory):
        """Test equal revenue tiers are ordered by discount ascending"""
        records = records_from_rows([
            record_factory(discount=0.2, sales="100"),
            record_factory(discount=0.1, sales="100"),
        ])

        assert [row.discount for row in sales_by_discount(records)] == [0.1, 0.2]


class TestProductReports:
    """Tests for loss-making product reports"""

    @pytest.fixture
    def ab_records(self, record_factory):
        return records_from_rows([
            record_factory(product_name="A", sales="10", profit="100"),
            record_factory(product_name="A", sales="20", profit="-150"),
            record_factory(product_name="B", sales="5", profit="30"),
        ])

    def test_loss_count(self, ab_records):
        """Test only products with negative net profit are counted"""
        assert loss_making_product_count(ab_records) == 1

    def test_worst_products(self, ab_records):
        """Test worst products carry summed sales and profit"""
        rows = worst_loss_making_products(ab_records)

        assert len(rows) == 1
        assert rows[0].product_name == "A"
        assert rows[0].total_sales == Decimal("30")
        assert rows[0].total_profit == Decimal("-50")
        assert "B" not in [row.product_name for row in rows]

    def test_zero_profit_product_excluded(self, record_factory):
        """Test a product netting exactly zero is not loss-making"""
        records = records_from_rows([
            record_factory(product_name="Even", profit="25.5"),
            record_factory(product_name="Even", profit="-25.5"),
        ])

        assert loss_making_product_count(records) == 0
        assert worst_loss_making_products(records) == []

    def test_worst_products_sorted_and_limited(self, record_factory):
        """Test at most five products, most negative first"""
        records = records_from_rows([
            record_factory(product_name=f"P{i}", profit=str(-i))
            for i in range(1, 9)
        ])

        rows = worst_loss_making_products(records)

        assert len(rows) == 5
        assert [row.product_name for row in rows] == ["P8", "P7", "P6", "P5", "P4"]
        assert all(row.total_profit < 0 for row in rows)
        assert loss_making_product_count(records) == 8

    def test_worst_products_custom_limit(self, sample_records):
        """Test explicit limit overrides the default"""
        assert worst_loss_making_products(sample_records, limit=0) == []

        with pytest.raises(ValueError):
            worst_loss_making_products(sample_records, limit=-1)


class TestCategoryPerformance:
    """Tests for the two-stage category report"""

    def test_average_is_per_order(self, record_factory):
        """Test line items collapse into one order before averaging"""
        records = records_from_rows([
            record_factory(order_id="O-1", category="Furniture", profit="50"),
            record_factory(order_id="O-1", category="Furniture", profit="-20"),
        ])

        rows = category_performance(records)

        assert len(rows) == 1
        assert rows[0].average_profit_per_order == Decimal("30")
        assert rows[0].order_count == 1

    def test_totals_and_order(self, sample_records):
        """Test category totals in name order"""
        rows = category_performance(sample_records)

        assert [row.category for row in rows] == ["Furniture", "Technology"]

        furniture = rows[0]
        assert furniture.total_sales == Decimal("275.50")
        assert furniture.total_profit == Decimal("25.75")
        assert furniture.order_count == 2
        assert furniture.average_profit_per_order == Decimal("12.875")

        assert rows[1].average_profit_per_order == Decimal("120")

    def test_order_spanning_categories(self, record_factory):
        """Test an order counts once in every category it touches"""
        records = records_from_rows([
            record_factory(order_id="O-1", category="Furniture", profit="10"),
            record_factory(order_id="O-1", category="Technology", profit="40"),
            record_factory(order_id="O-2", category="Technology", profit="20"),
        ])

        rows = {row.category: row for row in category_performance(records)}

        assert rows["Furniture"].order_count == 1
        assert rows["Technology"].order_count == 2
        assert rows["Technology"].average_profit_per_order == Decimal("30")


class TestRankings:
    """Tests for customer, segment, state and city rankings"""

    def test_top_and_bottom_customers(self, sample_records):
        """Test customers ranked by summed profit both ways"""
        top = top_customers(sample_records)
        bottom = bottom_customers(sample_records)

        assert [row.customer_name for row in top] == ["Bob", "Alice", "Carol"]
        assert [row.customer_name for row in bottom] == ["Carol", "Alice", "Bob"]
        assert top[1].total_profit == Decimal("30")
        assert top[1].total_sales == Decimal("240")

    def test_rankings_capped_at_ten(self, record_factory):
        """Test rankings never return more than ten rows"""
        records = records_from_rows([
            record_factory(
                customer_name=f"Customer {i:02d}",
                state=f"State {i:02d}",
                city=f"City {i:02d}",
                profit=str(i),
            )
            for i in range(15)
        ])

        for ranking in (top_customers, bottom_customers, top_states, top_cities):
            assert len(ranking(records)) == 10

        assert top_customers(records)[0].customer_name == "Customer 14"
        assert bottom_customers(records)[0].customer_name == "Customer 00"

    def test_ties_break_on_name(self, record_factory):
        """Test equal profits are ordered by name ascending"""
        records = records_from_rows([
            record_factory(customer_name="Zed", profit="10"),
            record_factory(customer_name="Amy", profit="10"),
        ])

        assert [row.customer_name for row in top_customers(records)] == ["Amy", "Zed"]
        assert [row.customer_name for row in bottom_customers(records)] == ["Amy", "Zed"]

    def test_segments(self, sample_records):
        """Test every segment present, most profitable first"""
        rows = segment_performance(sample_records)

        assert [row.segment for row in rows] == ["Corporate", "Consumer", "Home Office"]

    def test_states(self, sample_records):
        """Test states ranked by summed profit"""
        rows = top_states(sample_records)

        assert [row.state for row in rows] == ["Ohio", "Texas"]
        assert rows[0].total_profit == Decimal("115.75")

    def test_cities_keep_their_state(self, record_factory):
        """Test same-named cities in different states stay separate"""
        records = records_from_rows([
            record_factory(city="Springfield", state="Illinois", profit="5"),
            record_factory(city="Springfield", state="Missouri", profit="7"),
            record_factory(city="Springfield", state="Missouri", profit="1"),
        ])

        rows = top_cities(records)

        assert [(row.city, row.state, row.total_profit) for row in rows] == [
            ("Springfield", "Missouri", Decimal("8")),
            ("Springfield", "Illinois", Decimal("5")),
        ]

    def test_no_fabricated_groups(self, sample_records):
        """Test every ranked key occurs in the input"""
        present = set(zip(sample_records.frame["city"], sample_records.frame["state"]))

        for row in top_cities(sample_records):
            assert (row.city, row.state) in present


class TestReportRun:
    """Tests for running every report together"""

    def test_run_all_reports(self, sample_records):
        """Test the bundled report"""
        report = run_all_reports(sample_records)

        assert report.record_count == 4
        assert report.total_sales == Decimal("775.50")
        assert report.total_profit == Decimal("145.75")
        assert report.missing_profit_records == 0
        assert report.loss_making_product_count == 1
        assert report.worst_loss_making_products[0].product_name == "Lamp"

    def test_idempotent(self, sample_records):
        """Test repeated runs return identical rows"""
        first = run_all_reports(sample_records).model_dump(exclude={"generated_at"})
        second = run_all_reports(sample_records).model_dump(exclude={"generated_at"})

        assert first == second

    def test_empty_record_set(self):
        """Test every report is empty on an empty set"""
        report = run_all_reports(RecordSet.empty())

        assert report.record_count == 0
        assert report.total_profit == Decimal("0")
        assert report.discount_levels == []
        assert report.profit_by_discount == []
        assert report.loss_making_product_count == 0
        assert report.category_performance == []
        assert report.top_cities == []

    def test_overflow_raises_computation_error(self, sample_records):
        """Test sums that could exceed 64-bit units fail loudly"""
        frame = sample_records.frame.with_columns(
            pl.lit(2**62, dtype=pl.Int64).alias("sales_units")
        )
        records = RecordSet(frame=frame, money_scale=sample_records.money_scale)

        with pytest.raises(ReportComputationError) as exc_info:
            sales_by_discount(records)

        assert exc_info.value.report == "sales_by_discount"

    def test_missing_profit_excluded_from_sums(self, record_factory):
        """Test allowed missing profits are left out of profit totals"""
        loader = BatchLoader(analytics=AnalyticsSettings(allow_missing_profit=True))
        records = records_from_rows(
            [
                record_factory(discount=0.1, profit="12.5"),
                record_factory(discount=0.1, profit=None),
            ],
            loader=loader,
        )

        rows = profit_by_discount(records)

        assert records.missing_profit == 1
        assert rows[0].total_profit == Decimal("12.5")
        assert run_all_reports(records).missing_profit_records == 1
