"""Clock helpers. Calendar-sensitive code takes the date as an argument; only these helpers read the clock."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def now_utc() -> datetime:
    """
    Current time in UTC.

    Use this for timestamps that are never shown as calendar dates
    (response metadata, log correlation).
    """
    return datetime.now(timezone.utc)


def now_local(tz_name: str | None = None) -> datetime:
    """
    Current wall-clock time in the given zone.

    Invoice numbers partition by local calendar fields, so the zone decides
    which month a request near midnight belongs to.

    Args:
        tz_name: IANA timezone name (e.g., "Europe/Berlin"). None uses the
            host's local zone.

    Raises:
        ValueError: If the timezone name is unknown
    """
    if tz_name is None:
        return datetime.now().astimezone()
    return datetime.now(get_zone(tz_name))


def get_zone(tz_name: str) -> ZoneInfo:
    """
    Resolve an IANA timezone name.

    Raises ValueError if the name is unknown.
    """
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone: {tz_name}")


def parse_iso_date(value: str) -> date | None:
    """
    Parse an ISO 8601 date or datetime string to a calendar date.

    Returns None for blank or unparseable input rather than raising;
    callers treat such values as "not provided".
    """
    text = (value or "").strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def today_iso() -> str:
    """Today's date in UTC as YYYY-MM-DD."""
    return now_utc().date().isoformat()
