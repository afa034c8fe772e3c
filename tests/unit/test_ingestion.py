"""
Unit Tests - Record Ingestion
"""
from datetime import date
from decimal import Decimal

import pytest
import polars as pl

from superstore.analytics.records import RECORD_SCHEMA, RecordSet
from superstore.config import AnalyticsSettings
from superstore.data.generators import RecordGenerator, write_csv
from superstore.exceptions import RecordLoadError, RecordValidationError
from superstore.ingestion import (
    BatchFileConfig,
    BatchLoader,
    LoadStatus,
    load_records,
    records_from_frame,
    records_from_rows,
)


class TestBatchLoader:
    """Tests for BatchLoader"""

    def test_load_csv(self, sample_csv):
        """Test a valid extract loads into a typed record set"""
        records, result = BatchLoader().load(sample_csv)

        assert len(records) == 3
        assert result.status == LoadStatus.COMPLETED
        assert result.rows_loaded == 3
        assert result.file_hash is not None
        assert dict(records.frame.schema) == RECORD_SCHEMA

    def test_headers_normalized_and_values_exact(self, sample_csv):
        """Test original headers map to record fields and money stays exact"""
        records = load_records(sample_csv)
        first = records.to_rows()[0]

        assert first["sub_category"] == "Bookcases"
        assert first["product_name"] == "Bush Somerset Collection Bookcase, Fully Assembled"
        assert first["order_date"] == date(2016, 11, 8)
        assert first["postal_code"] == 42420
        assert first["sales"] == Decimal("261.9600")
        assert first["profit"] == Decimal("41.9136")
        assert records.total_profit() == Decimal("-121.5354")

    def test_time_features_derived(self, sample_csv):
        """Test order year and month are filled in"""
        records = load_records(sample_csv)

        assert records.frame["order_year"].to_list() == [2016, 2016, 2015]
        assert records.frame["order_month"].to_list() == [11, 11, 10]

    def test_missing_file(self, tmp_path):
        """Test a missing extract raises a load error"""
        with pytest.raises(RecordLoadError) as exc_info:
            BatchLoader().load(tmp_path / "absent.csv")

        assert "file not found" in str(exc_info.value)

    def test_bad_value_reports_row_and_column(self, sample_csv):
        """Test the whole batch is rejected with the bad record located"""
        text = sample_csv.read_text(encoding="utf-8").replace(",731.94,", ",abc,")
        sample_csv.write_text(text, encoding="utf-8")

        with pytest.raises(RecordValidationError) as exc_info:
            BatchLoader().load(sample_csv)

        error = exc_info.value
        assert error.row_index == 1
        assert error.column_name == "sales"
        assert error.invalid_value == "abc"
        assert "Row: 1" in str(error)
        assert "Column: sales" in str(error)

    def test_missing_required_column(self, tmp_path):
        """Test an extract without a required column is rejected"""
        path = tmp_path / "partial.csv"
        path.write_text("Order ID,Sales\nO-1,10\n", encoding="utf-8")

        with pytest.raises(RecordValidationError) as exc_info:
            BatchLoader().load(path)

        assert "Missing columns" in str(exc_info.value)

    def test_custom_delimiter(self, tmp_path, record_factory):
        """Test the configured dialect is used to read the file"""
        path = tmp_path / "records.tsv"
        pl.DataFrame([
            {key: str(value) for key, value in record_factory().items()}
        ]).write_csv(path, separator="\t")

        records, _ = BatchLoader().load(BatchFileConfig(file_path=path, delimiter="\t"))

        assert len(records) == 1

    def test_header_only_extract(self, tmp_path):
        """Test an extract with no rows gives an empty record set"""
        path = tmp_path / "empty.csv"
        path.write_text(
            "order_id,order_date,ship_date,customer_name,segment,region,state,city,"
            "category,sub_category,product_name,discount,sales,profit,quantity\n",
            encoding="utf-8",
        )

        records = load_records(path)

        assert records.is_empty
        assert records.total_sales() == Decimal("0")


class TestRecordsFromRows:
    """Tests for building record sets from in-memory rows"""

    def test_rows(self, sample_rows):
        """Test native values are accepted"""
        records = records_from_rows(sample_rows)

        assert len(records) == 4
        assert records.frame["discount"].to_list() == [0.0, 0.2, 0.2, 0.0]
        assert records.frame["profit_units"].to_list() == [500000, -200000, 1200000, -42500]

    def test_empty(self):
        """Test no rows gives an empty record set"""
        records = records_from_rows([])

        assert isinstance(records, RecordSet)
        assert records.is_empty

    @pytest.mark.parametrize("field,value", [
        ("discount", 1.0),
        ("discount", -0.1),
        ("quantity", 0),
        ("sales", "-1"),
        ("order_date", "2016-13-01"),
        ("sales", "1e20"),
        ("profit", "1e999999"),
        ("profit", "0.00004"),
        ("sales", "12.345678"),
    ])
    def test_rule_violations_rejected(self, record_factory, field, value):
        """Test out-of-range values reject the batch"""
        rows = [record_factory(), record_factory(**{field: value})]

        with pytest.raises(RecordValidationError) as exc_info:
            records_from_rows(rows)

        assert exc_info.value.row_index == 1
        assert exc_info.value.column_name in (field, f"{field}_units")

    def test_amounts_kept_exact(self, record_factory):
        """Test amounts at the money scale sum without rounding"""
        records = records_from_rows([
            record_factory(profit="0.0001"),
            record_factory(profit="-1234567.8901"),
        ])

        assert records.total_profit() == Decimal("-1234567.8900")

    def test_missing_profit_rejected_by_default(self, record_factory):
        """Test a missing profit is an error unless allowed"""
        rows = [record_factory(profit=None)]

        with pytest.raises(RecordValidationError) as exc_info:
            records_from_rows(rows)

        assert exc_info.value.column_name == "profit"

    def test_missing_profit_allowed(self, record_factory):
        """Test allowed missing profits are kept as nulls"""
        loader = BatchLoader(analytics=AnalyticsSettings(allow_missing_profit=True))

        records = records_from_rows([record_factory(profit=None)], loader=loader)

        assert records.missing_profit == 1
        assert records.to_rows()[0]["profit"] is None

    def test_ship_before_order_is_warning(self, record_factory):
        """Test a ship date before the order date does not reject the batch"""
        rows = [record_factory(order_date=date(2016, 3, 5), ship_date=date(2016, 3, 1))]

        records = records_from_rows(rows)

        assert len(records) == 1


class TestGeneratedRecords:
    """Tests for loading generated extracts"""

    def test_records_from_frame(self):
        """Test generator output passes validation"""
        df = RecordGenerator(seed=7, n_customers=20).generate(25)

        records = records_from_frame(df)

        assert len(records) == len(df)
        assert records.frame["order_id"].n_unique() == 25

    def test_generated_csv_round_trip(self, tmp_path):
        """Test a written extract loads back with the same totals"""
        df = RecordGenerator(seed=3, n_customers=20).generate(30)
        path = write_csv(df, tmp_path / "generated.csv")

        loaded = load_records(path)

        assert loaded.total_sales() == records_from_frame(df).total_sales()
