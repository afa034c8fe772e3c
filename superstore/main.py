"""
Batch Report Runner

Loads the record extract, optionally stores it in the records table, runs
every profitability report and writes the result.

Usage:
    python -m superstore.main --source data/superstore.csv
    python -m superstore.main --source data/superstore.csv --persist --output reports.json
    python -m superstore.main --synthetic 500
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import structlog

from superstore.analytics import RecordSet, run_all_reports
from superstore.analytics.models import AnalysisReport
from superstore.config import get_settings
from superstore.config.logging import configure_logging
from superstore.exceptions import ReportComputationError, SuperstoreError
from superstore.ingestion import BatchLoader, BatchFileConfig, records_from_frame

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Superstore profitability reports")
    parser.add_argument(
        "--source",
        help="CSV extract to analyse (default: DATA_SOURCE_PATH)",
    )
    parser.add_argument(
        "--output",
        help="Write all reports as JSON to this path instead of printing a summary",
    )
    parser.add_argument(
        "--persist",
        action="store_true",
        help="Store the validated records in the database before reporting",
    )
    parser.add_argument(
        "--synthetic",
        type=int,
        metavar="ORDERS",
        help="Analyse generated records instead of reading an extract",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Seed for --synthetic (default: 42)",
    )
    parser.add_argument(
        "--log-level",
        help="Override LOG_LEVEL",
    )
    return parser


def load(args: argparse.Namespace) -> RecordSet:
    """Load the extract, or generate records when asked to"""
    if args.synthetic:
        from superstore.data.generators import RecordGenerator

        return records_from_frame(RecordGenerator(seed=args.seed).generate(args.synthetic))

    records, result = BatchLoader().load(BatchFileConfig.from_settings(args.source))
    for warning in result.warnings:
        logger.warning("Load warning", message=warning)
    return records


async def persist(records: RecordSet) -> int:
    """Recreate the records table and store the batch"""
    from superstore.database import (
        close_database,
        count_records,
        create_schema,
        init_database,
        store_records,
    )

    await init_database()
    try:
        await create_schema(reset=True)
        stored = await store_records(records)
        counted = await count_records()
        if counted != len(records):
            logger.warning("Stored row count differs from batch", stored=counted, expected=len(records))
        return stored
    finally:
        await close_database()


def render_summary(report: AnalysisReport) -> str:
    """Human-readable digest of the reports"""
    lines = [
        f"Records: {report.record_count}",
        f"Total sales: {report.total_sales}",
        f"Total profit: {report.total_profit}",
        "",
        "Discount levels: " + ", ".join(f"{d.discount_pct:g}%" for d in report.discount_levels),
        "",
        "Profit by discount:",
    ]
    lines += [f"  {row.label:>8}  {row.total_profit}" for row in report.profit_by_discount]
    lines += ["", "Sales by discount:"]
    lines += [f"  {row.label:>8}  {row.total_sales}" for row in report.sales_by_discount]
    lines += ["", f"Loss-making products: {report.loss_making_product_count}", "Worst products:"]
    lines += [f"  {row.total_profit:>14}  {row.product_name}" for row in report.worst_loss_making_products]
    lines += ["", "Categories (sales / profit / avg profit per order):"]
    lines += [
        f"  {row.category}: {row.total_sales} / {row.total_profit} / {row.average_profit_per_order}"
        for row in report.category_performance
    ]
    lines += ["", "Top customers:"]
    lines += [f"  {row.total_profit:>14}  {row.customer_name}" for row in report.top_customers]
    lines += ["", "Bottom customers:"]
    lines += [f"  {row.total_profit:>14}  {row.customer_name}" for row in report.bottom_customers]
    lines += ["", "Segments:"]
    lines += [f"  {row.total_profit:>14}  {row.segment}" for row in report.segment_performance]
    lines += ["", "Top states:"]
    lines += [f"  {row.total_profit:>14}  {row.state}" for row in report.top_states]
    lines += ["", "Top cities:"]
    lines += [f"  {row.total_profit:>14}  {row.city}, {row.state}" for row in report.top_cities]
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    settings = get_settings()

    try:
        records = load(args)
    except SuperstoreError as e:
        logger.error("Load failed", error=str(e))
        return 1

    if args.persist:
        stored = asyncio.run(persist(records))
        logger.info("Records persisted", rows=stored)

    try:
        report = run_all_reports(records)
    except ReportComputationError as e:
        logger.error("Reports failed", report=e.report, error=str(e))
        return 1

    output = args.output or settings.data.output_path
    if output:
        path = Path(output)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(report.model_dump_json(indent=2), encoding="utf-8")
        logger.info("Reports written", file=str(path))
    else:
        print(render_summary(report))

    return 0


if __name__ == "__main__":
    sys.exit(main())
