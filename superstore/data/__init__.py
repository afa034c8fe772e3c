"""
Data Generation Module
"""
from .generators import RecordGenerator, generate_records, write_csv

__all__ = [
    "RecordGenerator",
    "generate_records",
    "write_csv",
]
