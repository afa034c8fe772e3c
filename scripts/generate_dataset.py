"""
Superstore Dataset Generator

Writes a synthetic transaction extract in the same column layout as the
real one, for local runs of the loader, the reports and the API.

Usage:
    python scripts/generate_dataset.py --orders 5000 --output data/superstore.csv
"""

import argparse
from pathlib import Path

from superstore.config.logging import configure_logging
from superstore.data.generators import RecordGenerator, write_csv

DEFAULT_OUTPUT = Path(__file__).parent.parent / "data" / "superstore.csv"


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate a synthetic superstore extract")
    parser.add_argument("--orders", type=int, default=5000, help="Orders to generate (default: 5000)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--output", type=Path, default=DEFAULT_OUTPUT, help="CSV destination")
    args = parser.parse_args()

    configure_logging(log_format="text")

    df = RecordGenerator(seed=args.seed).generate(args.orders)
    path = write_csv(df, args.output)

    size = path.stat().st_size / 1024 / 1024
    print(f"{path}: {len(df):,} rows ({size:.2f} MB)")


if __name__ == "__main__":
    main()
