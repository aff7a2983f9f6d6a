"""Invoice number sequence models.

Counter state on disk is a flat JSON object: partition key -> last issued
value, e.g. {"2025-01": 7, "2025-02": 0}.
"""

import datetime as dt
from enum import Enum

from pydantic import BaseModel, Field


class Scope(str, Enum):
    """Reset granularity of an invoice counter."""

    YEAR = "year"
    MONTH = "month"
    DAY = "day"


class SequenceOptions(BaseModel):
    """
    Per-call overrides for the sequence service.

    Unset fields fall back to the configured defaults.
    """

    file: str | None = None
    scope: Scope | None = None
    pad: int | None = Field(None, ge=1, le=12)
    prefix: str | None = Field(None, max_length=50)
    date: dt.datetime | dt.date | None = None  # back-dating and tests


class IssuedNumber(BaseModel):
    """Result of issuing the next number."""

    number: str
    value: int
    key: str
    file: str


class CounterValue(BaseModel):
    """Counter value at a key (peek or forced set)."""

    value: int
    key: str
    file: str


class CounterReset(BaseModel):
    """Key removed from counter state."""

    key: str
    file: str
