"""
Data Transformation Module
"""
from .cleaners import DataCleaner, clean_dataframe
from .enrichers import DataEnricher, enrich_record_data
from .money import average_units, from_units, to_units

__all__ = [
    "DataCleaner",
    "clean_dataframe",
    "DataEnricher",
    "enrich_record_data",
    "average_units",
    "from_units",
    "to_units",
]
