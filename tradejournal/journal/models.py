"""
Trade, strategy and backtest record models.

These dataclasses are the plain data passed between the journal store
and the analytics engine.  The closed vocabularies (market mode,
direction, trade result, emotion) are `str` enums so that they compare
and serialise like the strings stored in the journal file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional
import pandas as pd


class MarketMode(str, Enum):
    FOREX = "forex"
    CRYPTO = "crypto"


class Direction(str, Enum):
    LONG = "LONG"
    SHORT = "SHORT"
    NONE = ""


class TradeResult(str, Enum):
    PENDING = "PENDING"
    WIN = "WIN"
    LOSS = "LOSS"
    TP_HIT = "TP HIT"
    SL_HIT = "SL HIT"
    BREAKEVEN = "BREAKEVEN"

    @property
    def is_pending(self) -> bool:
        return self is TradeResult.PENDING


WINNING_RESULTS = frozenset({TradeResult.WIN, TradeResult.TP_HIT})


def is_win(result: TradeResult) -> bool:
    """Return `True` for results that count as a winning trade."""
    return result in WINNING_RESULTS


LOSING_RESULTS = frozenset({TradeResult.LOSS, TradeResult.SL_HIT})


def is_loss(result: TradeResult) -> bool:
    return result in LOSING_RESULTS


class Emotion(str, Enum):
    CONFIDENT = "confident"
    CALM = "calm"
    NEUTRAL = "neutral"
    EXCITED = "excited"
    ANXIOUS = "anxious"
    FEARFUL = "fearful"
    FRUSTRATED = "frustrated"
    GREEDY = "greedy"
    FOMO = "fomo"


@dataclass
class Trade:
    """A single journal entry.

    `risk` is the monetary amount at stake when the trade was saved and
    `rr_ratio` the planned reward:risk multiple.  `pnl` stays ``0``
    while the result is ``PENDING``.  `checklist_complete` is `None`
    when the entry checklist was not tracked for this trade.
    """
    id: int
    date: pd.Timestamp
    mode: MarketMode
    asset: str
    entry: float
    sl: float
    tp: float = 0.0
    direction: Direction = Direction.NONE
    position_size: float = 0.0
    leverage: Optional[float] = None
    risk: float = 0.0
    rr_ratio: Optional[float] = None
    result: TradeResult = TradeResult.PENDING
    pnl: float = 0.0
    strategy_id: Optional[int] = None
    strategy_name: str = ""
    emotion: Emotion = Emotion.NEUTRAL
    notes: str = ""
    checklist_complete: Optional[bool] = None
    is_backtest: bool = False
    entry_time: Optional[pd.Timestamp] = None
    exit_time: Optional[pd.Timestamp] = None


@dataclass
class Strategy:
    """A named trading method with its checklists.

    Performance figures are never stored here; they are derived from
    the trade collection by strategy id.
    """
    id: int
    name: str
    description: str = ""
    open_checklist: List[str] = field(default_factory=list)
    sl_tp_checklist: List[str] = field(default_factory=list)
    indicator_checklist: List[str] = field(default_factory=list)


@dataclass
class BacktestTrade:
    """A simulated outcome recorded by a backtest session."""
    id: int
    date: pd.Timestamp
    asset: str
    strategy_id: int
    style: str
    result: TradeResult
    risk_amount: float
    rr_ratio: float
    pnl: float
    equity_after: float
    is_backtest: bool = True
