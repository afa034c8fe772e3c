"""
Superstore Profitability Analytics
Configuration Module
"""
from .settings import (
    AnalyticsSettings,
    DataSettings,
    DatabaseSettings,
    Settings,
    get_settings,
)

__all__ = [
    "AnalyticsSettings",
    "DataSettings",
    "DatabaseSettings",
    "Settings",
    "get_settings",
]
