"""
Database Module
"""
from .connection import close_database, create_schema, get_db, init_database
from .models import Base, Record
from .repository import count_records, fetch_records, store_records

__all__ = [
    "init_database",
    "close_database",
    "create_schema",
    "get_db",
    "Base",
    "Record",
    "count_records",
    "fetch_records",
    "store_records",
]
