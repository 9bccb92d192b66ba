"""
Trade outcome resolver.

Derives the realised P&L of a journal entry from the risk it was saved
with, its planned reward:risk multiple and the result label chosen by
the trader.  This is only the default derivation: a P&L typed in by
hand is stored as-is and never checked against these formulas.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional
import pandas as pd

from ..journal.models import Trade, TradeResult
from ..utils.timeutils import utc_now

# Used when a trade carries no usable reward:risk ratio
DEFAULT_RR_RATIO = 2.0


@dataclass(frozen=True)
class OutcomeResolution:
    """New values the caller should write back onto the trade."""
    result: TradeResult
    pnl: float
    exit_time: Optional[pd.Timestamp]


def effective_rr_ratio(rr_ratio: Optional[float]) -> float:
    """Reward:risk multiple used for P&L, falling back to 2 when unset or zero."""
    if rr_ratio is None or math.isnan(rr_ratio) or rr_ratio == 0:
        return DEFAULT_RR_RATIO
    return rr_ratio


def resolve_pnl(risk: float, rr_ratio: Optional[float], current_pnl: float,
                result: TradeResult) -> float:
    """P&L implied by `result`.

    ``WIN`` and ``LOSS`` keep the magnitude of a P&L entered by hand and
    only fall back to the risk based formula when it is zero.
    """
    result = TradeResult(result)
    rr = effective_rr_ratio(rr_ratio)
    if result is TradeResult.TP_HIT:
        return risk * rr
    if result is TradeResult.SL_HIT:
        return -risk
    if result is TradeResult.WIN:
        return abs(current_pnl) or risk * rr
    if result is TradeResult.LOSS:
        return -abs(current_pnl) or -risk
    return 0.0


def resolve_outcome(trade: Trade, result: TradeResult,
                    now: Optional[pd.Timestamp] = None) -> OutcomeResolution:
    """Resolve a trade to `result` without modifying it.

    The exit time is stamped with `now` the first time the trade leaves
    ``PENDING``; an existing exit time is kept on later changes.
    """
    result = TradeResult(result)
    exit_time = trade.exit_time
    if trade.result.is_pending and not result.is_pending and exit_time is None:
        exit_time = now if now is not None else utc_now()
    pnl = resolve_pnl(trade.risk, trade.rr_ratio, trade.pnl, result)
    return OutcomeResolution(result=result, pnl=pnl, exit_time=exit_time)
