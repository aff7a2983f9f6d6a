"""Monetary rounding.

Every monetary step rounds through ``round2``: ties go away from zero
(``ROUND_HALF_UP`` in :mod:`decimal` terms), so 0.005 -> 0.01 and
-0.005 -> -0.01. Values are converted to Decimal via their string form,
so 1.005 stays 1.005 instead of becoming 1.00499999...
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value) -> Decimal:
    """
    Convert a number (or numeric string) to Decimal.

    None and blank strings count as zero.

    Raises:
        ValueError: If the value is not numeric or not finite
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    else:
        text = str(value).strip()
        if not text:
            return Decimal("0")
        try:
            result = Decimal(text)
        except InvalidOperation:
            raise ValueError(f"Not a number: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def round2(value) -> Decimal:
    """Round to 2 decimal places, ties away from zero."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
