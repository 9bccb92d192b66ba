import os
import sys
import pandas as pd

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from tradejournal.journal.models import MarketMode, Trade, TradeResult
from tradejournal.risk.outcome import DEFAULT_RR_RATIO, resolve_outcome, resolve_pnl

import unittest


def _trade(risk=50.0, rr_ratio=2.0, pnl=0.0, result=TradeResult.PENDING, exit_time=None) -> Trade:
    return Trade(
        id=1,
        date=pd.Timestamp("2024-01-01 10:00", tz="UTC"),
        mode=MarketMode.FOREX,
        asset="EURUSD",
        entry=1.1,
        sl=1.095,
        risk=risk,
        rr_ratio=rr_ratio,
        pnl=pnl,
        result=result,
        exit_time=exit_time,
    )


class TestResolvePnl(unittest.TestCase):
    def test_tp_sl_breakeven(self) -> None:
        self.assertEqual(resolve_pnl(50, 2, 0, TradeResult.TP_HIT), 100)
        self.assertEqual(resolve_pnl(50, 2, 100, TradeResult.SL_HIT), -50)
        self.assertEqual(resolve_pnl(50, 2, -50, TradeResult.BREAKEVEN), 0)

    def test_missing_ratio_defaults_to_two(self) -> None:
        self.assertEqual(DEFAULT_RR_RATIO, 2.0)
        self.assertEqual(resolve_pnl(40, None, 0, TradeResult.TP_HIT), 80)
        self.assertEqual(resolve_pnl(40, float("nan"), 0, TradeResult.TP_HIT), 80)
        self.assertEqual(resolve_pnl(40, 0.0, 0, TradeResult.TP_HIT), 80)

    def test_win_keeps_manual_magnitude(self) -> None:
        self.assertEqual(resolve_pnl(50, 2, -75, TradeResult.WIN), 75)
        self.assertEqual(resolve_pnl(50, 2, 0, TradeResult.WIN), 100)

    def test_loss_keeps_manual_magnitude(self) -> None:
        self.assertEqual(resolve_pnl(50, 2, 30, TradeResult.LOSS), -30)
        self.assertEqual(resolve_pnl(50, 2, 0, TradeResult.LOSS), -50)

    def test_back_to_pending_zeroes_pnl(self) -> None:
        self.assertEqual(resolve_pnl(50, 2, 100, TradeResult.PENDING), 0)


class TestResolveOutcome(unittest.TestCase):
    def test_round_trip_through_results(self) -> None:
        trade = _trade()
        self.assertEqual(resolve_outcome(trade, TradeResult.TP_HIT).pnl, 100)
        self.assertEqual(resolve_outcome(trade, TradeResult.SL_HIT).pnl, -50)
        self.assertEqual(resolve_outcome(trade, TradeResult.BREAKEVEN).pnl, 0)

    def test_exit_time_stamped_when_leaving_pending(self) -> None:
        now = pd.Timestamp("2024-01-01 12:00", tz="UTC")
        resolution = resolve_outcome(_trade(), TradeResult.WIN, now=now)
        self.assertEqual(resolution.exit_time, now)

    def test_exit_time_not_restamped(self) -> None:
        first = pd.Timestamp("2024-01-01 12:00", tz="UTC")
        later = pd.Timestamp("2024-01-02 12:00", tz="UTC")
        trade = _trade(result=TradeResult.WIN, pnl=100, exit_time=first)
        resolution = resolve_outcome(trade, TradeResult.LOSS, now=later)
        self.assertEqual(resolution.exit_time, first)
        self.assertEqual(resolution.pnl, -100)

    def test_input_trade_is_not_modified(self) -> None:
        trade = _trade()
        resolve_outcome(trade, TradeResult.TP_HIT)
        self.assertEqual(trade.result, TradeResult.PENDING)
        self.assertEqual(trade.pnl, 0.0)
        self.assertIsNone(trade.exit_time)

    def test_accepts_result_strings(self) -> None:
        self.assertEqual(resolve_outcome(_trade(), "TP HIT").result, TradeResult.TP_HIT)


if __name__ == '__main__':
    unittest.main()
