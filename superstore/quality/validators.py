"""
Data Validation Module

Rule-based data quality validation for the transaction record extract.
Implements validation patterns inspired by Great Expectations.

Features:
- Required column checks
- Null checks
- Type castability checks on raw text columns
- Range and business rule checks on typed columns
- Failing row indices on every check, so a bad record can be located
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import polars as pl
import structlog

from superstore.config import AnalyticsSettings, DataSettings, get_settings
from superstore.transformation.money import MAX_UNITS, is_exact_amount

logger = structlog.get_logger(__name__)

ROW_INDEX = "_row_index"


class ValidationSeverity(str, Enum):
    """Severity levels for validation failures"""
    ERROR = "error"  # Critical - rejects the batch
    WARNING = "warning"  # Non-critical - logged but continues
    INFO = "info"  # Informational only


class ValidationStatus(str, Enum):
    """Overall validation status"""
    PASSED = "passed"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class ValidationCheck:
    """Single validation check result"""
    name: str
    passed: bool
    severity: ValidationSeverity
    message: str
    column: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    failed_rows: int = 0
    total_rows: int = 0
    row_indices: List[int] = field(default_factory=list)
    sample_values: List[Any] = field(default_factory=list)


@dataclass
class ValidationResult:
    """Complete validation suite result"""
    status: ValidationStatus
    total_checks: int
    passed_checks: int
    failed_checks: int
    warning_count: int
    checks: List[ValidationCheck] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None

    @property
    def errors(self) -> List[ValidationCheck]:
        """Failed checks with ERROR severity"""
        return [
            c for c in self.checks
            if not c.passed and c.severity == ValidationSeverity.ERROR
        ]

    @property
    def warnings(self) -> List[ValidationCheck]:
        """Failed checks with WARNING severity"""
        return [
            c for c in self.checks
            if not c.passed and c.severity == ValidationSeverity.WARNING
        ]

    @property
    def first_error(self) -> Optional[ValidationCheck]:
        """The error check pointing at the earliest failing row"""
        errors = self.errors
        if not errors:
            return None
        return min(
            errors,
            key=lambda c: c.row_indices[0] if c.row_indices else -1,
        )


class DataValidator:
    """
    Data validator with a fluent check-suite builder.

    Every check receives the frame with a ``_row_index`` column holding the
    0-based position of each data row in the source, and reports the indices
    of the rows it rejects.

    Example:
        validator = DataValidator()
        validator.add_not_null_check("order_id")
        validator.add_range_check("discount", min_value=0, max_value=1, exclusive_max=True)
        result = validator.validate(df)
    """

    def __init__(self, strict_mode: bool = False, max_error_rows: int = 20):
        self.strict_mode = strict_mode  # Fail on any warning
        self.max_error_rows = max_error_rows
        self._checks: List[Callable] = []

    def reset(self) -> None:
        """Reset validator state"""
        self._checks = []

    def _failing(self, df: pl.DataFrame, condition: pl.Expr, column: str) -> tuple:
        """Count, row indices and sample values of rows matching a failure condition"""
        failing = df.filter(condition)
        indices = failing[ROW_INDEX].head(self.max_error_rows).to_list()
        samples = failing[column].head(self.max_error_rows).to_list() if column in failing.columns else []
        return failing.height, indices, samples

    def _missing_column(self, name: str, column: str, severity: ValidationSeverity) -> ValidationCheck:
        return ValidationCheck(
            name=name,
            passed=False,
            severity=severity,
            message=f"Column '{column}' not found",
            column=column,
        )

    def add_required_columns_check(
        self,
        columns: List[str],
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check that all listed columns are present"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            missing = [c for c in columns if c not in df.columns]
            passed = not missing

            return ValidationCheck(
                name="required_columns",
                passed=passed,
                severity=severity,
                message=f"Missing columns: {missing}" if not passed else "All required columns present",
                column=missing[0] if missing else None,
                details={"missing": missing},
            )

        self._checks.append(check)
        return self

    def add_not_null_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for null values in column"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"not_null_{column}"
            if column not in df.columns:
                return self._missing_column(name, column, severity)

            total = len(df)
            null_count, indices, _ = self._failing(df, pl.col(column).is_null(), column)
            passed = null_count == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {null_count} null values" if not passed else f"Column '{column}' has no null values",
                column=column,
                details={"null_count": null_count, "null_percentage": (null_count / total) * 100 if total > 0 else 0},
                failed_rows=null_count,
                total_rows=total,
                row_indices=indices,
            )

        self._checks.append(check)
        return self

    def add_castable_check(
        self,
        column: str,
        dtype: Any,
        format: Optional[str] = None,
        optional: bool = False,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check that non-null text values parse as ``dtype``"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"type_{column}"
            if column not in df.columns:
                if optional:
                    return ValidationCheck(
                        name=name,
                        passed=True,
                        severity=severity,
                        message=f"Optional column '{column}' not present",
                        column=column,
                    )
                return self._missing_column(name, column, severity)

            if dtype == pl.Date:
                parsed = pl.col(column).str.to_date(format, strict=False)
            else:
                parsed = pl.col(column).cast(dtype, strict=False)

            condition = pl.col(column).is_not_null() & parsed.is_null()
            total = len(df)
            bad, indices, samples = self._failing(df, condition, column)
            passed = bad == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {bad} values not parseable as {dtype}" if not passed else f"Column '{column}' parses as {dtype}",
                column=column,
                details={"dtype": str(dtype), "format": format, "invalid_count": bad},
                failed_rows=bad,
                total_rows=total,
                row_indices=indices,
                sample_values=samples,
            )

        self._checks.append(check)
        return self

    def add_range_check(
        self,
        column: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        exclusive_min: bool = False,
        exclusive_max: bool = False,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for values within specified range"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"range_{column}"
            if column not in df.columns:
                return self._missing_column(name, column, severity)

            conditions = []
            if min_value is not None:
                conditions.append(pl.col(column) <= min_value if exclusive_min else pl.col(column) < min_value)
            if max_value is not None:
                conditions.append(pl.col(column) >= max_value if exclusive_max else pl.col(column) > max_value)

            if not conditions:
                return ValidationCheck(
                    name=name,
                    passed=True,
                    severity=severity,
                    message="No range specified",
                    column=column,
                )

            # Combine conditions with OR
            combined = conditions[0]
            for cond in conditions[1:]:
                combined = combined | cond

            total = len(df)
            out_of_range, indices, samples = self._failing(df, combined, column)
            passed = out_of_range == 0

            lower = "(" if exclusive_min else "["
            upper = ")" if exclusive_max else "]"
            bounds = f"{lower}{min_value}, {max_value}{upper}"

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {out_of_range} values outside range {bounds}" if not passed else "All values in range",
                column=column,
                details={"min": min_value, "max": max_value, "out_of_range_count": out_of_range},
                failed_rows=out_of_range,
                total_rows=total,
                row_indices=indices,
                sample_values=samples,
            )

        self._checks.append(check)
        return self

    def add_positive_check(
        self,
        column: str,
        allow_zero: bool = True,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for positive values"""
        return self.add_range_check(
            column,
            min_value=0,
            exclusive_min=not allow_zero,
            severity=severity,
        )

    def add_pattern_check(
        self,
        column: str,
        pattern: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add regex pattern check"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"pattern_{column}"
            if column not in df.columns:
                return self._missing_column(name, column, severity)

            condition = ~pl.col(column).str.contains(pattern) & pl.col(column).is_not_null()
            total = df.filter(pl.col(column).is_not_null()).height
            non_matching, indices, samples = self._failing(df, condition, column)
            passed = non_matching == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {non_matching} values not matching pattern" if not passed else "All values match pattern",
                column=column,
                details={"pattern": pattern, "non_matching_count": non_matching},
                failed_rows=non_matching,
                total_rows=total,
                row_indices=indices,
                sample_values=samples,
            )

        self._checks.append(check)
        return self

    def add_amount_check(
        self,
        column: str,
        scale: int,
        max_units: int = MAX_UNITS,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check that text amounts convert to minor units at ``scale`` without rounding"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"amount_{column}"
            if column not in df.columns:
                return self._missing_column(name, column, severity)

            exact = pl.col(column).map_elements(
                lambda v: is_exact_amount(v, scale, max_units),
                return_dtype=pl.Boolean,
            )
            condition = pl.col(column).is_not_null() & ~exact
            total = len(df)
            bad, indices, samples = self._failing(df, condition, column)
            passed = bad == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=(
                    f"Column '{column}' has {bad} amounts with more than {scale} decimal places or out of range"
                    if not passed else f"Column '{column}' amounts are exact at {scale} decimal places"
                ),
                column=column,
                details={"scale": scale, "max_units": max_units, "invalid_count": bad},
                failed_rows=bad,
                total_rows=total,
                row_indices=indices,
                sample_values=samples,
            )

        self._checks.append(check)
        return self

    def add_enum_check(
        self,
        column: str,
        allowed_values: List[Any],
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for values in allowed set"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"enum_{column}"
            if column not in df.columns:
                return self._missing_column(name, column, severity)

            condition = ~pl.col(column).is_in(allowed_values) & pl.col(column).is_not_null()
            total = len(df)
            invalid, indices, samples = self._failing(df, condition, column)
            passed = invalid == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {invalid} invalid values" if not passed else "All values are valid",
                column=column,
                details={"allowed_values": allowed_values, "invalid_count": invalid},
                failed_rows=invalid,
                total_rows=total,
                row_indices=indices,
                sample_values=samples,
            )

        self._checks.append(check)
        return self

    def add_column_order_check(
        self,
        earlier: str,
        later: str,
        severity: ValidationSeverity = ValidationSeverity.WARNING,
    ) -> "DataValidator":
        """Add check that ``earlier`` <= ``later`` wherever both are set"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"order_{earlier}_{later}"
            for column in (earlier, later):
                if column not in df.columns:
                    return self._missing_column(name, column, severity)

            condition = pl.col(later) < pl.col(earlier)
            total = len(df)
            bad, indices, samples = self._failing(df, condition, later)
            passed = bad == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"{bad} rows have '{later}' before '{earlier}'" if not passed else f"'{later}' never precedes '{earlier}'",
                column=later,
                details={"violations": bad},
                failed_rows=bad,
                total_rows=total,
                row_indices=indices,
                sample_values=samples,
            )

        self._checks.append(check)
        return self

    def add_custom_check(
        self,
        name: str,
        check_func: Callable[[pl.DataFrame], bool],
        message_on_fail: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add custom validation check"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            try:
                passed = check_func(df)
                return ValidationCheck(
                    name=name,
                    passed=passed,
                    severity=severity,
                    message="Check passed" if passed else message_on_fail,
                    total_rows=len(df),
                )
            except Exception as e:
                return ValidationCheck(
                    name=name,
                    passed=False,
                    severity=severity,
                    message=f"Check failed with error: {str(e)}",
                )

        self._checks.append(check)
        return self

    def validate(self, df: pl.DataFrame) -> ValidationResult:
        """
        Run all validation checks on DataFrame.

        Args:
            df: DataFrame to validate. A ``_row_index`` column is added when
                the frame does not already carry one.

        Returns:
            ValidationResult with all check results
        """
        started_at = datetime.now(timezone.utc)
        results = []

        if ROW_INDEX not in df.columns:
            df = df.with_row_index(ROW_INDEX)

        logger.info(f"Running {len(self._checks)} validation checks on {len(df)} rows")

        for check_func in self._checks:
            result = check_func(df)
            results.append(result)

            if not result.passed:
                logger.warning(
                    f"Validation failed: {result.name}",
                    message=result.message,
                    severity=result.severity.value,
                    rows=result.row_indices[:5],
                )

        completed_at = datetime.now(timezone.utc)

        passed_checks = sum(1 for r in results if r.passed)
        failed_checks = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.ERROR)
        warning_count = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.WARNING)

        if failed_checks > 0:
            status = ValidationStatus.FAILED
        elif warning_count > 0 and self.strict_mode:
            status = ValidationStatus.FAILED
        elif warning_count > 0:
            status = ValidationStatus.PARTIAL
        else:
            status = ValidationStatus.PASSED

        validation_result = ValidationResult(
            status=status,
            total_checks=len(results),
            passed_checks=passed_checks,
            failed_checks=failed_checks,
            warning_count=warning_count,
            checks=results,
            started_at=started_at,
            completed_at=completed_at,
        )

        logger.info(
            f"Validation complete: {status.value}",
            passed=passed_checks,
            failed=failed_checks,
            warnings=warning_count,
        )

        return validation_result


# =============================================================================
# RECORD SCHEMA
# =============================================================================

REQUIRED_TEXT_COLUMNS = [
    "order_id",
    "customer_name",
    "segment",
    "category",
    "sub_category",
    "product_name",
    "region",
    "state",
    "city",
]

REQUIRED_COLUMNS = REQUIRED_TEXT_COLUMNS + [
    "order_date",
    "ship_date",
    "discount",
    "sales",
    "profit",
    "quantity",
]

NUMERIC_COLUMNS = {
    "discount": pl.Float64,
    "quantity": pl.Int64,
    "postal_code": pl.Int64,
    "profit_ratio": pl.Float64,
    "order_year": pl.Int64,
    "order_month": pl.Int64,
}

DATE_COLUMNS = ["order_date", "ship_date"]

# Plain decimal numbers; rejects inf/nan which a float cast would accept
NUMBER_PATTERN = r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$"

FINITE_NUMBER_COLUMNS = ["discount", "sales", "profit"]

MONEY_COLUMNS = ["sales", "profit"]


def create_records_schema_validator(
    analytics: Optional[AnalyticsSettings] = None,
    data: Optional[DataSettings] = None,
) -> DataValidator:
    """
    Validator for the raw text extract: required fields present and every
    typed column parseable, with sales and profit exact at the money scale.
    Runs before any casting.
    """
    settings = get_settings()
    analytics = analytics or settings.analytics
    data = data or settings.data

    validator = DataValidator(max_error_rows=analytics.max_error_rows)
    validator.add_required_columns_check(REQUIRED_COLUMNS)

    for column in REQUIRED_COLUMNS:
        if column == "profit" and analytics.allow_missing_profit:
            validator.add_not_null_check(column, severity=ValidationSeverity.WARNING)
        else:
            validator.add_not_null_check(column)

    for column, dtype in NUMERIC_COLUMNS.items():
        validator.add_castable_check(column, dtype, optional=column not in REQUIRED_COLUMNS)

    for column in FINITE_NUMBER_COLUMNS:
        validator.add_pattern_check(column, NUMBER_PATTERN)

    for column in MONEY_COLUMNS:
        validator.add_amount_check(column, analytics.money_scale)

    for column in DATE_COLUMNS:
        validator.add_castable_check(column, pl.Date, format=data.date_format)

    return validator


def create_records_rules_validator(analytics: Optional[AnalyticsSettings] = None) -> DataValidator:
    """Validator for business rules on the typed record frame"""
    analytics = analytics or get_settings().analytics

    return (
        DataValidator(max_error_rows=analytics.max_error_rows)
        .add_range_check("discount", min_value=0, max_value=1, exclusive_max=True)
        .add_positive_check("sales_units")
        .add_positive_check("quantity", allow_zero=False)
        .add_range_check("order_month", min_value=1, max_value=12)
        .add_column_order_check("order_date", "ship_date")
    )
