"""Utility modules for cross-cutting concerns."""

from utils.timezone import now_utc, now_local, get_zone, parse_iso_date, today_iso
