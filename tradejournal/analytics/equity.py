"""
Equity curve and drawdown calculations.

The journal has no account balance of its own, so equity here is the
running sum of closed-trade P&L starting from zero.  Drawdown is
tracked once, as the signed distance below the running peak; the
scalar "worst drawdown" is its largest magnitude.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple
import pandas as pd

from ..utils.timeutils import TimestampLike, local_date, period_start, to_timezone, utc_now


@dataclass
class EquityPoint:
    """Cumulative P&L after a closed trade.

    `drawdown` is ``cumulative - peak`` and therefore never positive.
    """
    timestamp: pd.Timestamp
    pnl: float
    cumulative: float
    peak: float
    drawdown: float


def closed_in_order(trades: Iterable) -> List:
    """Non-pending trades sorted ascending by date.

    Callers may pass trades in any order (the journal keeps the newest
    first), so every sequential reduction goes through here.
    """
    return sorted((t for t in trades if not t.result.is_pending), key=lambda t: t.date)


def equity_curve(trades: Iterable) -> List[EquityPoint]:
    curve: List[EquityPoint] = []
    cumulative = 0.0
    peak = 0.0
    for trade in closed_in_order(trades):
        cumulative += trade.pnl
        peak = max(peak, cumulative)
        curve.append(EquityPoint(
            timestamp=trade.date,
            pnl=trade.pnl,
            cumulative=cumulative,
            peak=peak,
            drawdown=cumulative - peak,
        ))
    return curve


def drawdown_series(trades: Iterable) -> List[Tuple[pd.Timestamp, float]]:
    """Signed drawdown per closed trade, paired with the trade date."""
    return [(pt.timestamp, pt.drawdown) for pt in equity_curve(trades)]


def max_drawdown(trades: Iterable) -> float:
    """Largest drop below the running peak, as a positive amount."""
    return max((-pt.drawdown for pt in equity_curve(trades)), default=0.0)


def filter_by_period(
    trades: Iterable,
    period: str,
    now: Optional[TimestampLike] = None,
    tz_name: str = "UTC",
) -> List:
    """Trades dated inside ``"all"``, ``"7d"``, ``"30d"`` or ``"year"``."""
    start = period_start(period, now if now is not None else utc_now(), tz_name)
    if start is None:
        return list(trades)
    return [t for t in trades if to_timezone(t.date, tz_name) >= start]


def daily_cumulative_pnl(trades: Sequence, tz_name: str = "UTC") -> List[Tuple[date, float, float]]:
    """Closed-trade P&L per calendar day with its running total.

    Returns
    -------
    list of (date, day_pnl, cumulative_pnl)
        One entry per day that has at least one closed trade, oldest
        first.
    """
    closed = closed_in_order(trades)
    if not closed:
        return []
    df = pd.DataFrame({
        'day': [local_date(t.date, tz_name) for t in closed],
        'pnl': [t.pnl for t in closed],
    })
    per_day = df.groupby('day', sort=True)['pnl'].sum()
    cumulative = per_day.cumsum()
    return [
        (day, float(per_day[day]), float(cumulative[day]))
        for day in per_day.index
    ]
