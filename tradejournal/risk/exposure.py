"""
Open risk exposure monitor.

Adds up the risk of every trade still ``PENDING`` and compares it with
the daily loss limit, so the trader sees how much of the day's budget
would be gone if every open stop were hit.  Assets with more than one
open position are reported as correlation alerts.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable

from ..config.schema import Settings
from ..journal.models import Trade

HIGH_EXPOSURE_PERCENT = 70.0
CRITICAL_EXPOSURE_PERCENT = 100.0


@dataclass(frozen=True)
class RiskExposure:
    total_open_risk: float
    open_positions: int
    exposure_percent: float
    status: str
    correlated_assets: Dict[str, int] = field(default_factory=dict)


def exposure_status(exposure_percent: float, limit: float) -> str:
    if limit <= 0:
        return "No Limit"
    if exposure_percent >= CRITICAL_EXPOSURE_PERCENT:
        return "Critical Overload"
    if exposure_percent >= HIGH_EXPOSURE_PERCENT:
        return "High Exposure"
    return "Safe"


def open_risk_exposure(trades: Iterable[Trade], settings: Settings) -> RiskExposure:
    open_trades = [t for t in trades if t.result.is_pending]
    total = sum(t.risk for t in open_trades)
    limit = settings.daily_loss_limit
    percent = total / limit * 100 if limit > 0 else 0.0
    counts = Counter(t.asset or "Unknown" for t in open_trades)
    return RiskExposure(
        total_open_risk=total,
        open_positions=len(open_trades),
        exposure_percent=percent,
        status=exposure_status(percent, limit),
        correlated_assets={asset: n for asset, n in counts.items() if n > 1},
    )
