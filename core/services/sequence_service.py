"""
Sequence service for invoice numbers.

Counters are partitioned by scope key (year, month or day of the invoice
date) and stored through a CounterStore. Every mutation is a
read-modify-write inside the store's critical section; peek reads without it
and is advisory only.

Number format: {prefix}{segment}-{sequence}, e.g. INV-2025-03-0007.
"""

import datetime as dt
import logging
import math
from decimal import Decimal

from clients.counter_store import CounterStore
from core.config import NumberingConfig
from core.models import CounterReset, CounterValue, IssuedNumber, Scope, SequenceOptions
from core.scope import key_for_date, scope_segment
from utils.timezone import now_local

logger = logging.getLogger(__name__)


def format_number(
    value: int,
    scope: Scope | str = Scope.MONTH,
    pad: int = 4,
    prefix: str = "",
    date: dt.date | None = None,
    tz_name: str | None = None,
) -> str:
    """
    Format an invoice number without touching counter state.

    Args:
        value: Sequence value
        scope: Decides the date segment (YYYY, YYYY-MM or YYYY-MM-DD)
        pad: Minimum digits of the sequence part
        prefix: Text placed before the date segment
        date: Invoice date; defaults to today in tz_name

    Returns:
        Formatted number, e.g. format_number(7, "month", 4, "INV-", date(2025, 3, 15))
        -> "INV-2025-03-0007"
    """
    when = date if date is not None else now_local(tz_name)
    return f"{prefix}{scope_segment(when, scope)}-{str(value).zfill(pad)}"


def _is_finite(value) -> bool:
    if isinstance(value, int):
        return True
    if isinstance(value, Decimal):
        return value.is_finite()
    return math.isfinite(value)


class SequenceService:
    """Issues, inspects and corrects invoice counters."""

    def __init__(self, store: CounterStore, config: NumberingConfig | None = None):
        self.store = store
        self.config = config or NumberingConfig()

    def _resolve(self, options: SequenceOptions | None):
        """Merge per-call options over config; returns (file, scope, pad, prefix, date, key)."""
        options = options or SequenceOptions()
        file = options.file or self.config.counter_file
        scope = options.scope or self.config.scope
        pad = options.pad if options.pad is not None else self.config.pad
        prefix = options.prefix if options.prefix is not None else self.config.prefix
        when = options.date if options.date is not None else now_local(self.config.timezone)
        return file, scope, pad, prefix, when, key_for_date(when, scope)

    def next(self, options: SequenceOptions | None = None) -> IssuedNumber:
        """
        Issue the next number for the current scope key.

        The first number of a key is 1. Calls serialized by the store's
        critical section get strictly increasing, gap-free values.

        Raises:
            CounterWriteError: If the new state cannot be persisted
        """
        file, scope, pad, prefix, when, key = self._resolve(options)

        def issue() -> int:
            state = self.store.read(file)
            value = state.get(key, 0) + 1
            state[key] = value
            self.store.write(file, state)
            return value

        value = self.store.run_exclusive(file, issue)
        number = format_number(value, scope=scope, pad=pad, prefix=prefix, date=when)
        logger.info(f"Issued invoice number {number} (key={key}, file={file})")
        return IssuedNumber(number=number, value=value, key=key, file=file)

    def peek(self, options: SequenceOptions | None = None) -> CounterValue:
        """
        Current value at the scope key, 0 if never issued.

        Not locked: the result may be stale and must never be treated as a
        reservation.
        """
        file, _, _, _, _, key = self._resolve(options)
        state = self.store.read(file)
        return CounterValue(value=state.get(key, 0), key=key, file=file)

    def set(self, value: int | float | Decimal, options: SequenceOptions | None = None) -> CounterValue:
        """
        Force the counter at the scope key to max(0, floor(value)).

        Administrative correction; may move the counter backwards.

        Raises:
            ValueError: If value is not a finite number
            CounterWriteError: If the new state cannot be persisted
        """
        if isinstance(value, bool) or not _is_finite(value):
            raise ValueError(f"Counter value must be a finite number, got {value!r}")
        forced = max(0, math.floor(value))
        file, _, _, _, _, key = self._resolve(options)

        def force() -> None:
            state = self.store.read(file)
            previous = state.get(key)
            state[key] = forced
            self.store.write(file, state)
            logger.info(f"Counter {key} in {file} set to {forced} (was {previous})")

        self.store.run_exclusive(file, force)
        return CounterValue(value=forced, key=key, file=file)

    def reset(self, options: SequenceOptions | None = None) -> CounterReset:
        """
        Drop the scope key so the next number restarts at 1.

        Raises:
            CounterWriteError: If the new state cannot be persisted
        """
        file, _, _, _, _, key = self._resolve(options)

        def drop() -> None:
            state = self.store.read(file)
            previous = state.pop(key, None)
            self.store.write(file, state)
            logger.info(f"Counter {key} in {file} reset (was {previous})")

        self.store.run_exclusive(file, drop)
        return CounterReset(key=key, file=file)
