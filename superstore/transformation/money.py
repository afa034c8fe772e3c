"""
Fixed-point money helpers.

Sales and profit are carried as integer minor units at a fixed scale
(4 decimal places by default) so sums over the whole extract are exact.
"""

from decimal import Decimal, InvalidOperation, Overflow, ROUND_HALF_UP
from typing import Any, Optional

import polars as pl

# Numeric(14, 4) storage: at most 14 digits of minor units
MAX_UNITS = 10**14


def quantum(scale: int) -> Decimal:
    """Smallest representable amount at ``scale``: 4 -> Decimal('0.0001')"""
    return Decimal(1).scaleb(-scale)


def _parse(value: Any) -> Optional[Decimal]:
    """Finite ``Decimal`` for ``value``, or None when it is not an amount"""
    if isinstance(value, float):
        value = repr(value)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return None
    return amount if amount.is_finite() else None


def is_exact_amount(value: Any, scale: int, max_units: int = MAX_UNITS) -> bool:
    """
    Whether ``value`` is representable as minor units at ``scale`` without
    rounding and with fewer than ``max_units`` units in magnitude.
    """
    amount = _parse(value)
    if amount is None:
        return False
    if abs(amount) >= Decimal(max_units).scaleb(-scale):
        return False
    return amount.quantize(quantum(scale)) == amount


def to_units(value: Any, scale: int, exact: bool = False) -> Optional[int]:
    """
    Convert a monetary value to integer minor units.

    Text is parsed directly by ``Decimal`` so no binary float rounding is
    introduced; floats go through their shortest repr. Digits beyond
    ``scale`` round half up, or raise ``ValueError`` when ``exact``.
    """
    if value is None:
        return None
    amount = _parse(value)
    if amount is None:
        raise ValueError(f"Not a monetary amount: {value!r}")
    try:
        units = amount.scaleb(scale).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    except (InvalidOperation, Overflow) as e:
        raise ValueError(f"Monetary amount out of range: {value!r}") from e
    if exact and units != amount.scaleb(scale):
        raise ValueError(f"Monetary amount has more than {scale} decimal places: {value!r}")
    return int(units)


def from_units(units: Optional[int], scale: int) -> Optional[Decimal]:
    """Convert integer minor units back to a ``Decimal`` at ``scale`` places"""
    if units is None:
        return None
    return (Decimal(units) / (Decimal(10) ** scale)).quantize(quantum(scale))


def average_units(total_units: int, count: int, scale: int, extra_places: int = 4) -> Optional[Decimal]:
    """
    Mean of ``count`` amounts whose sum is ``total_units``.

    Returns None for an empty group. The result keeps ``extra_places`` more
    digits than the money scale, like SQL ``AVG`` over a DECIMAL column.
    """
    if count == 0:
        return None
    mean = Decimal(total_units) / Decimal(count) / (Decimal(10) ** scale)
    return mean.quantize(quantum(scale + extra_places), rounding=ROUND_HALF_UP)


def units_expr(column: str, scale: int) -> pl.Expr:
    """Polars expression turning a validated monetary column into Int64 minor units"""
    return (
        pl.col(column)
        .map_elements(lambda v: to_units(v, scale, exact=True), return_dtype=pl.Int64)
        .alias(f"{column}_units")
    )
