"""
Backtest session simulator.

A backtest session replays hypothetical outcomes one at a time.  Every
new outcome risks a fixed percentage of the *current* equity, so wins
and losses compound.  Current equity is always measured over the
trades visible through the session's filter: looking at one strategy
shows how the account would have grown had it traded only that
strategy.

`record_outcome()` is the single-step function; `simulate()` folds it
over a list of outcomes and `BacktestSession` keeps the running list
for interactive use.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple
import pandas as pd

from ..analytics.aggregate import ALL, Criterion, criterion_key, win_rate
from ..analytics.streaks import analyze_streaks
from ..config.schema import BacktestSessionConfig
from ..journal.models import BacktestTrade, TradeResult, is_win
from ..utils.timeutils import utc_now


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BacktestFilter:
    """Which recorded outcomes are in view; ``"all"`` matches everything."""
    strategy: Criterion = ALL
    asset: Criterion = ALL
    style: Criterion = ALL
    result: Criterion = ALL

    def matches(self, trade: BacktestTrade) -> bool:
        if self.strategy != ALL and criterion_key(self.strategy) != str(trade.strategy_id):
            return False
        if self.asset != ALL and criterion_key(self.asset) != trade.asset:
            return False
        if self.style != ALL and criterion_key(self.style) != trade.style:
            return False
        if self.result != ALL and criterion_key(self.result) != trade.result.value:
            return False
        return True

    def apply(self, trades: Iterable[BacktestTrade]) -> List[BacktestTrade]:
        return [t for t in trades if self.matches(t)]


ALL_OUTCOMES = BacktestFilter()


@dataclass(frozen=True)
class BacktestSummary:
    equity: float
    growth_percent: float
    win_rate: float
    max_win_streak: int
    max_lose_streak: int
    total_trades: int


def current_equity(config: BacktestSessionConfig, history: Sequence[BacktestTrade],
                   view: BacktestFilter = ALL_OUTCOMES) -> float:
    return config.balance + sum(t.pnl for t in view.apply(history))


def _next_id(history: Sequence[BacktestTrade], now: pd.Timestamp) -> int:
    candidate = int(now.value // 1_000_000)
    if history:
        candidate = max(candidate, max(t.id for t in history) + 1)
    return candidate


def record_outcome(
    config: BacktestSessionConfig,
    history: Sequence[BacktestTrade],
    result: TradeResult,
    view: BacktestFilter = ALL_OUTCOMES,
    now: Optional[pd.Timestamp] = None,
) -> Optional[BacktestTrade]:
    """Simulate one outcome on top of `history`.

    Returns the new record without appending it, or `None` when the
    session has no strategy selected or the outcome is ``PENDING``.
    """
    if not config.strategy_id:
        logger.warning("No strategy selected for the backtest session; outcome ignored")
        return None
    result = TradeResult(result)
    if result.is_pending:
        logger.warning("Backtest outcomes must be closed results, got %s", result.value)
        return None

    now = now if now is not None else utc_now()
    equity = current_equity(config, history, view)
    risk_amount = equity * config.risk_percent / 100
    if is_win(result):
        pnl = risk_amount * config.reward_risk
    elif result in (TradeResult.LOSS, TradeResult.SL_HIT):
        pnl = -risk_amount
    else:
        pnl = 0.0

    trade = BacktestTrade(
        id=_next_id(history, now),
        date=now,
        asset=config.asset,
        strategy_id=config.strategy_id,
        style=config.style,
        result=result,
        risk_amount=risk_amount,
        rr_ratio=config.reward_risk,
        pnl=pnl,
        equity_after=equity + pnl,
    )
    logger.debug("Backtest %s: risk %.2f pnl %.2f equity %.2f",
                 result.value, risk_amount, pnl, trade.equity_after)
    return trade


def summarize_session(config: BacktestSessionConfig, history: Sequence[BacktestTrade],
                      view: BacktestFilter = ALL_OUTCOMES) -> BacktestSummary:
    visible = view.apply(history)
    equity = config.balance + sum(t.pnl for t in visible)
    growth = (equity - config.balance) / config.balance * 100 if config.balance else 0.0
    streaks = analyze_streaks(visible)
    return BacktestSummary(
        equity=equity,
        growth_percent=growth,
        win_rate=win_rate(visible),
        max_win_streak=streaks.max_win_streak,
        max_lose_streak=streaks.max_lose_streak,
        total_trades=len(visible),
    )


def session_equity_curve(config: BacktestSessionConfig, history: Sequence[BacktestTrade],
                         view: BacktestFilter = ALL_OUTCOMES) -> List[Tuple[pd.Timestamp, float]]:
    """Equity after each visible outcome, oldest first."""
    equity = config.balance
    points: List[Tuple[pd.Timestamp, float]] = []
    for trade in sorted(view.apply(history), key=lambda t: t.date):
        equity += trade.pnl
        points.append((trade.date, equity))
    return points


def simulate(
    config: BacktestSessionConfig,
    outcomes: Iterable[TradeResult],
    start: Optional[pd.Timestamp] = None,
) -> List[BacktestTrade]:
    """Replay `outcomes` in order and return the recorded trades.

    Outcomes are stamped one second apart from `start` so the replay
    sorts back into the order it was given.
    """
    start = start if start is not None else utc_now()
    history: List[BacktestTrade] = []
    for step, outcome in enumerate(outcomes):
        trade = record_outcome(config, history, outcome,
                               now=start + pd.Timedelta(seconds=step))
        if trade is None:
            break
        history.append(trade)
    return history


class BacktestSession:
    """Running backtest session for interactive use."""

    def __init__(self, config: BacktestSessionConfig,
                 trades: Optional[List[BacktestTrade]] = None,
                 view: BacktestFilter = ALL_OUTCOMES) -> None:
        self.config = config
        self.trades: List[BacktestTrade] = list(trades or [])
        self.view = view

    def record(self, result: TradeResult, now: Optional[pd.Timestamp] = None) -> Optional[BacktestTrade]:
        trade = record_outcome(self.config, self.trades, result, self.view, now)
        if trade is not None:
            self.trades.append(trade)
        return trade

    def filtered(self) -> List[BacktestTrade]:
        return self.view.apply(self.trades)

    def summary(self) -> BacktestSummary:
        return summarize_session(self.config, self.trades, self.view)
