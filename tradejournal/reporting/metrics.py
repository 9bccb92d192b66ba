"""
Journal summary assembly.

This module gathers the engine's individual results (overall stats,
breakdowns, best strategy, streaks and drawdown) into one plain
dictionary.  It backs both the `stats` command of the CLI and the
`summary.json` report file.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Sequence

from ..analytics.aggregate import (
    TradeFilter,
    best_strategy,
    compute_stats,
    group_by_emotion,
    group_by_strategy,
    group_by_weekday,
    strategy_performance,
)
from ..analytics.equity import max_drawdown
from ..analytics.streaks import analyze_streaks
from ..journal.models import Strategy, Trade

WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def _group_rows(groups: Dict) -> Dict[str, Dict[str, float]]:
    return {
        str(key): {
            'count': g.count,
            'wins': g.wins,
            'pnl': g.pnl,
            'win_rate': g.win_rate,
        }
        for key, g in groups.items()
    }


def compute_journal_summary(
    trades: Sequence[Trade],
    strategies: Sequence[Strategy],
    trade_filter: TradeFilter = TradeFilter(),
    tz_name: str = "UTC",
) -> Dict[str, Any]:
    """Compute every summary figure for the filtered journal.

    Parameters
    ----------
    trades : sequence of Trade
        The whole journal; `trade_filter` is applied here.
    strategies : sequence of Strategy
        Strategies used for the performance table and ranking.
    trade_filter : TradeFilter
        Mode / result / strategy / emotion filter.
    tz_name : str
        Timezone used for weekday grouping.

    Returns
    -------
    dict
        JSON-serialisable dictionary of results.
    """
    selected = trade_filter.apply(trades)
    stats = compute_stats(selected)
    streaks = analyze_streaks(selected)
    weekdays = group_by_weekday(selected, tz_name)
    return {
        'total_trades': stats.total_trades,
        'wins': stats.wins,
        'losses': stats.losses,
        'breakevens': stats.breakevens,
        'win_rate': stats.win_rate,
        'net_pnl': stats.net_pnl,
        'avg_rr': stats.avg_rr,
        'max_drawdown': max_drawdown(selected),
        'streaks': list(streaks.streaks),
        'max_win_streak': streaks.max_win_streak,
        'max_lose_streak': streaks.max_lose_streak,
        'best_strategy': best_strategy(strategies, selected),
        'strategies': [asdict(p) for p in strategy_performance(strategies, selected)],
        'by_strategy': _group_rows(group_by_strategy(selected)),
        'by_emotion': _group_rows(group_by_emotion(selected)),
        'by_weekday': _group_rows({WEEKDAY_NAMES[day]: g for day, g in weekdays.items()}),
    }
