import os
import sys
import copy
import pandas as pd

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from tradejournal.analytics.aggregate import (
    TradeFilter,
    best_strategy,
    compute_stats,
    group_by_emotion,
    group_by_strategy,
    group_by_weekday,
    strategy_performance,
    win_rate,
)
from tradejournal.journal.models import Emotion, MarketMode, Strategy, Trade, TradeResult

import unittest


def _trade(trade_id, result, pnl, strategy_id=1, strategy_name="Breakout", rr=2.0,
           mode=MarketMode.FOREX, emotion=Emotion.CALM, when="2024-01-01 10:00",
           is_backtest=False) -> Trade:
    return Trade(
        id=trade_id,
        date=pd.Timestamp(when, tz="UTC"),
        mode=mode,
        asset="EURUSD" if mode is MarketMode.FOREX else "BTCUSDT",
        entry=1.1,
        sl=1.095,
        rr_ratio=rr,
        result=result,
        pnl=pnl,
        strategy_id=strategy_id,
        strategy_name=strategy_name,
        emotion=emotion,
        is_backtest=is_backtest,
    )


STRATEGIES = [Strategy(1, "Breakout"), Strategy(2, "Reversal")]


def _journal():
    return [
        _trade(1, TradeResult.TP_HIT, 100, rr=2.0),
        _trade(2, TradeResult.SL_HIT, -50, rr=1.0, emotion=Emotion.FOMO),
        _trade(3, TradeResult.WIN, 80, strategy_id=2, strategy_name="Reversal", rr=None,
               mode=MarketMode.CRYPTO, when="2024-01-07 10:00"),
        _trade(4, TradeResult.BREAKEVEN, 0, strategy_id=2, strategy_name="Reversal", rr=3.0),
        _trade(5, TradeResult.PENDING, 0, rr=2.0),
    ]


class TestComputeStats(unittest.TestCase):
    def test_summary(self) -> None:
        stats = compute_stats(_journal())
        self.assertEqual(stats.total_trades, 4)
        self.assertEqual(stats.wins, 2)
        self.assertEqual(stats.losses, 1)
        self.assertEqual(stats.breakevens, 1)
        self.assertAlmostEqual(stats.win_rate, 50.0)
        self.assertAlmostEqual(stats.net_pnl, 130.0)
        # (2 + 1 + 0 + 3) / 4
        self.assertAlmostEqual(stats.avg_rr, 1.5)

    def test_net_pnl_includes_pending_entries(self) -> None:
        trades = [_trade(1, TradeResult.WIN, 100), _trade(2, TradeResult.PENDING, 25)]
        self.assertAlmostEqual(compute_stats(trades).net_pnl, 125.0)
        self.assertEqual(compute_stats(trades).total_trades, 1)

    def test_idempotent_and_non_mutating(self) -> None:
        trades = _journal()
        snapshot = copy.deepcopy(trades)
        first = compute_stats(trades)
        second = compute_stats(trades)
        self.assertEqual(first, second)
        self.assertEqual(trades, snapshot)

    def test_empty_input(self) -> None:
        stats = compute_stats([])
        self.assertEqual(stats.total_trades, 0)
        self.assertEqual(stats.win_rate, 0.0)
        self.assertEqual(stats.net_pnl, 0.0)
        self.assertEqual(win_rate([]), 0.0)
        self.assertEqual(group_by_strategy([]), {})
        self.assertIsNone(best_strategy([], []))


class TestTradeFilter(unittest.TestCase):
    def test_default_filter_keeps_live_trades(self) -> None:
        trades = _journal() + [_trade(6, TradeResult.WIN, 40, is_backtest=True)]
        self.assertEqual(len(TradeFilter().apply(trades)), 5)
        self.assertEqual(len(TradeFilter(include_backtest=True).apply(trades)), 6)

    def test_criteria(self) -> None:
        trades = _journal()
        self.assertEqual([t.id for t in TradeFilter(mode="crypto").apply(trades)], [3])
        self.assertEqual([t.id for t in TradeFilter(mode=MarketMode.FOREX).apply(trades)], [1, 2, 4, 5])
        self.assertEqual([t.id for t in TradeFilter(result="TP HIT").apply(trades)], [1])
        self.assertEqual([t.id for t in TradeFilter(strategy=2).apply(trades)], [3, 4])
        self.assertEqual([t.id for t in TradeFilter(strategy="2").apply(trades)], [3, 4])
        self.assertEqual([t.id for t in TradeFilter(emotion=Emotion.FOMO).apply(trades)], [2])

    def test_criteria_combine(self) -> None:
        selected = TradeFilter(strategy=1, result=TradeResult.SL_HIT).apply(_journal())
        self.assertEqual([t.id for t in selected], [2])


class TestGroups(unittest.TestCase):
    def test_by_strategy(self) -> None:
        groups = group_by_strategy(_journal())
        self.assertEqual(set(groups), {"Breakout", "Reversal"})
        self.assertEqual(groups["Breakout"].count, 2)
        self.assertAlmostEqual(groups["Breakout"].win_rate, 50.0)
        self.assertAlmostEqual(groups["Reversal"].pnl, 80.0)

    def test_unnamed_strategy_skipped(self) -> None:
        groups = group_by_strategy([_trade(1, TradeResult.WIN, 10, strategy_name="")])
        self.assertEqual(groups, {})

    def test_by_emotion(self) -> None:
        groups = group_by_emotion(_journal())
        self.assertEqual(groups["fomo"].count, 1)
        self.assertEqual(groups["fomo"].wins, 0)
        self.assertEqual(groups["calm"].count, 3)

    def test_by_weekday_sunday_is_zero(self) -> None:
        groups = group_by_weekday(_journal())
        self.assertEqual(sorted(groups), list(range(7)))
        # 2024-01-07 was a Sunday, 2024-01-01 a Monday
        self.assertEqual(groups[0].count, 1)
        self.assertEqual(groups[1].count, 3)
        self.assertEqual(groups[3].count, 0)
        self.assertEqual(groups[3].win_rate, 0.0)


class TestBestStrategy(unittest.TestCase):
    def test_score_mixes_win_rate_and_pnl(self) -> None:
        trades = [
            _trade(1, TradeResult.WIN, 50, strategy_id=1),
            _trade(2, TradeResult.WIN, 1000, strategy_id=2, strategy_name="Reversal"),
            _trade(3, TradeResult.LOSS, -10, strategy_id=2, strategy_name="Reversal"),
        ]
        table = strategy_performance(STRATEGIES, trades)
        self.assertAlmostEqual(table[0].score, 100 * 0.5 + 50 * 0.5)
        self.assertAlmostEqual(table[1].score, 50 * 0.5 + 990 * 0.5)
        self.assertEqual(best_strategy(STRATEGIES, trades), "Reversal")

    def test_tie_goes_to_earlier_strategy(self) -> None:
        trades = [
            _trade(1, TradeResult.WIN, 100, strategy_id=1),
            _trade(2, TradeResult.WIN, 100, strategy_id=2, strategy_name="Reversal"),
        ]
        self.assertEqual(best_strategy(STRATEGIES, trades), "Breakout")

    def test_strategies_without_trades_score_zero(self) -> None:
        table = strategy_performance(STRATEGIES, [])
        self.assertEqual([p.score for p in table], [0.0, 0.0])
        self.assertEqual(best_strategy(STRATEGIES, []), "Breakout")


if __name__ == '__main__':
    unittest.main()
