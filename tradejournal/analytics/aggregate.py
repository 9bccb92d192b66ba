"""
Aggregate journal statistics.

This module provides the reductions behind the journal summary cards
and breakdown tables: overall win rate and net P&L, win rates grouped
by strategy, emotion and weekday, and the "best strategy" ranking.
All functions are pure; they read the trades they are given and never
modify them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Union

from ..journal.models import Strategy, Trade, TradeResult, is_loss, is_win
from ..utils.timeutils import weekday_index

ALL = "all"
BEST_STRATEGY_WIN_RATE_WEIGHT = 0.5
BEST_STRATEGY_PNL_WEIGHT = 0.5

Criterion = Union[str, int, Enum]


def criterion_key(value: Criterion) -> str:
    if isinstance(value, Enum):
        value = value.value
    return str(value)


@dataclass(frozen=True)
class TradeFilter:
    """Journal filter; every criterion set to ``"all"`` matches everything.

    Backtest-flagged entries are left out unless `include_backtest` is
    set, so statistics describe live trading by default.
    """
    mode: Criterion = ALL
    result: Criterion = ALL
    strategy: Criterion = ALL
    emotion: Criterion = ALL
    include_backtest: bool = False

    def matches(self, trade: Trade) -> bool:
        if trade.is_backtest and not self.include_backtest:
            return False
        if self.mode != ALL and criterion_key(self.mode).lower() != trade.mode.value:
            return False
        if self.result != ALL and criterion_key(self.result) != trade.result.value:
            return False
        if self.strategy != ALL and criterion_key(self.strategy) != str(trade.strategy_id):
            return False
        if self.emotion != ALL and criterion_key(self.emotion) != trade.emotion.value:
            return False
        return True

    def apply(self, trades: Iterable[Trade]) -> List[Trade]:
        return [t for t in trades if self.matches(t)]


@dataclass(frozen=True)
class TradeStats:
    total_trades: int = 0
    wins: int = 0
    losses: int = 0
    breakevens: int = 0
    win_rate: float = 0.0
    net_pnl: float = 0.0
    avg_rr: float = 0.0


@dataclass
class GroupStats:
    count: int = 0
    wins: int = 0
    pnl: float = 0.0

    @property
    def win_rate(self) -> float:
        return self.wins / self.count * 100 if self.count else 0.0


@dataclass(frozen=True)
class StrategyPerformance:
    strategy_id: int
    name: str
    trades: int
    wins: int
    win_rate: float
    total_pnl: float
    score: float


def win_rate(trades: Sequence) -> float:
    """Percentage of non-pending trades that are wins."""
    closed = [t for t in trades if not t.result.is_pending]
    if not closed:
        return 0.0
    return sum(1 for t in closed if is_win(t.result)) / len(closed) * 100


def compute_stats(trades: Sequence[Trade]) -> TradeStats:
    """Compute the journal summary for the given trades.

    Parameters
    ----------
    trades : sequence of Trade
        Already filtered trades, pending ones included.

    Returns
    -------
    TradeStats
        `total_trades`, the outcome counts, `win_rate` and `avg_rr` only consider
        closed trades; `net_pnl` sums every trade supplied (pending
        trades carry zero P&L).
    """
    closed = [t for t in trades if not t.result.is_pending]
    net_pnl = sum(t.pnl for t in trades)
    if not closed:
        return TradeStats(net_pnl=net_pnl)
    wins = sum(1 for t in closed if is_win(t.result))
    losses = sum(1 for t in closed if is_loss(t.result))
    breakevens = sum(1 for t in closed if t.result is TradeResult.BREAKEVEN)
    avg_rr = sum(t.rr_ratio or 0.0 for t in closed) / len(closed)
    return TradeStats(
        total_trades=len(closed),
        wins=wins,
        losses=losses,
        breakevens=breakevens,
        win_rate=wins / len(closed) * 100,
        net_pnl=net_pnl,
        avg_rr=avg_rr,
    )


def _accumulate(groups: Dict, key, trade: Trade) -> None:
    group = groups.setdefault(key, GroupStats())
    group.count += 1
    group.pnl += trade.pnl
    if is_win(trade.result):
        group.wins += 1


def group_by_strategy(trades: Iterable[Trade]) -> Dict[str, GroupStats]:
    """Closed trades grouped by strategy name; unnamed trades are skipped."""
    groups: Dict[str, GroupStats] = {}
    for trade in trades:
        if trade.result.is_pending or not trade.strategy_name:
            continue
        _accumulate(groups, trade.strategy_name, trade)
    return groups


def group_by_emotion(trades: Iterable[Trade]) -> Dict[str, GroupStats]:
    groups: Dict[str, GroupStats] = {}
    for trade in trades:
        if trade.result.is_pending:
            continue
        _accumulate(groups, trade.emotion.value, trade)
    return groups


def group_by_weekday(trades: Iterable[Trade], tz_name: str = "UTC") -> Dict[int, GroupStats]:
    """Closed trades grouped by weekday, ``0`` = Sunday to ``6`` = Saturday.

    All seven days are present, empty days with zero counts.
    """
    groups: Dict[int, GroupStats] = {day: GroupStats() for day in range(7)}
    for trade in trades:
        if trade.result.is_pending:
            continue
        _accumulate(groups, weekday_index(trade.date, tz_name), trade)
    return groups


def strategy_performance(strategies: Sequence[Strategy], trades: Sequence[Trade]) -> List[StrategyPerformance]:
    """Per-strategy figures derived from the trades, in strategy order.

    `score` mixes the win rate (a percentage) with total P&L (currency)
    at equal weights.
    """
    table: List[StrategyPerformance] = []
    for strategy in strategies:
        closed = [
            t for t in trades
            if t.strategy_id == strategy.id and not t.result.is_pending
        ]
        wins = sum(1 for t in closed if is_win(t.result))
        rate = wins / len(closed) * 100 if closed else 0.0
        total = sum(t.pnl for t in closed)
        table.append(StrategyPerformance(
            strategy_id=strategy.id,
            name=strategy.name,
            trades=len(closed),
            wins=wins,
            win_rate=rate,
            total_pnl=total,
            score=rate * BEST_STRATEGY_WIN_RATE_WEIGHT + total * BEST_STRATEGY_PNL_WEIGHT,
        ))
    return table


def best_strategy(strategies: Sequence[Strategy], trades: Sequence[Trade]) -> Optional[str]:
    """Name of the highest scoring strategy; the earlier one wins a tie."""
    ranked = sorted(strategy_performance(strategies, trades), key=lambda p: p.score, reverse=True)
    return ranked[0].name if ranked else None
