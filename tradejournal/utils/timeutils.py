"""
Timezone and calendar-day utilities.

This module centralises all timestamp handling.  The journal stores
trade dates as ISO strings; the analytics work on timezone-aware
`pandas.Timestamp` objects and need to know which trades fall on the
same local calendar day (daily limits, discipline score) or inside a
reporting period (last 7 / 30 days, year to date).
"""

from __future__ import annotations

from datetime import date
from typing import Optional, Union
import pandas as pd

TimestampLike = Union[str, int, float, pd.Timestamp, date]


def to_timezone(ts: TimestampLike, tz_name: str) -> pd.Timestamp:
    """Convert a timestamp to the specified timezone.

    If the timestamp is naive, it is assumed to be in UTC before
    conversion.  If it already has a timezone, it will be converted.
    """
    if not isinstance(ts, pd.Timestamp):
        ts = pd.Timestamp(ts)
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    return ts.tz_convert(tz_name)


def parse_timestamp(value: Optional[TimestampLike]) -> Optional[pd.Timestamp]:
    """Parse a stored timestamp into a UTC `pandas.Timestamp`.

    Integers are read as epoch milliseconds (the journal's id format).
    Empty values return `None`.
    """
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return pd.Timestamp(int(value), unit="ms", tz="UTC")
    return to_timezone(value, "UTC")


def utc_now() -> pd.Timestamp:
    """Current time as a timezone-aware UTC timestamp."""
    return pd.Timestamp.now(tz="UTC")


def local_date(ts: TimestampLike, tz_name: str) -> date:
    """Calendar date of `ts` in the given timezone."""
    return to_timezone(ts, tz_name).date()


def is_same_day(ts: TimestampLike, reference: TimestampLike, tz_name: str) -> bool:
    """Return `True` if both timestamps fall on the same local calendar day."""
    return local_date(ts, tz_name) == local_date(reference, tz_name)


def weekday_index(ts: TimestampLike, tz_name: str = "UTC") -> int:
    """Day of week with Sunday as ``0`` and Saturday as ``6``."""
    # pandas counts from Monday == 0
    return (to_timezone(ts, tz_name).dayofweek + 1) % 7


def period_start(period: str, now: TimestampLike, tz_name: str = "UTC") -> Optional[pd.Timestamp]:
    """Start of a reporting period ending at `now`.

    Parameters
    ----------
    period : str
        ``"all"``, ``"7d"``, ``"30d"`` or ``"year"``.
    now : timestamp
        Reference time.

    Returns
    -------
    pandas.Timestamp or None
        Inclusive lower bound, or `None` for ``"all"``.

    Raises
    ------
    ValueError
        For an unknown period name.
    """
    local_now = to_timezone(now, tz_name)
    if period == "all":
        return None
    if period == "7d":
        return local_now - pd.Timedelta(days=7)
    if period == "30d":
        return local_now - pd.Timedelta(days=30)
    if period == "year":
        return pd.Timestamp(year=local_now.year, month=1, day=1, tz=tz_name)
    raise ValueError(f"Unsupported period: {period}")
