"""Partition keys for invoice counters.

A counter restarts every calendar period of its scope. Keys use the local
calendar fields of the supplied date as-is; an aware datetime is not
converted to another zone first.
"""

from datetime import date

from core.models.sequence import Scope


def key_for_date(when: date, scope: Scope | str = Scope.MONTH) -> str:
    """
    Derive the counter key for a date.

    year -> "2025", month -> "2025-03", day -> "2025-03-15".
    Accepts date or datetime; never reads the clock.
    """
    scope = Scope(scope)
    if scope == Scope.YEAR:
        return f"{when.year:04d}"
    if scope == Scope.DAY:
        return f"{when.year:04d}-{when.month:02d}-{when.day:02d}"
    return f"{when.year:04d}-{when.month:02d}"


def scope_segment(when: date, scope: Scope | str = Scope.MONTH) -> str:
    """Date segment printed inside a formatted invoice number."""
    scope = Scope(scope)
    y, m, d = f"{when.year:04d}", f"{when.month:02d}", f"{when.day:02d}"
    if scope == Scope.YEAR:
        return y
    if scope == Scope.DAY:
        return f"{y}-{m}-{d}"
    return f"{y}-{m}"
