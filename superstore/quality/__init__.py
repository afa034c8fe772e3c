"""
Data Quality Module
"""
from .validators import (
    DataValidator,
    ValidationCheck,
    ValidationResult,
    ValidationSeverity,
    ValidationStatus,
    create_records_rules_validator,
    create_records_schema_validator,
)

__all__ = [
    "DataValidator",
    "ValidationCheck",
    "ValidationResult",
    "ValidationSeverity",
    "ValidationStatus",
    "create_records_rules_validator",
    "create_records_schema_validator",
]
