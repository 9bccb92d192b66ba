import os
import sys
import pandas as pd

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from tradejournal.config.schema import Settings
from tradejournal.journal.models import MarketMode, Trade, TradeResult
from tradejournal.risk.exposure import open_risk_exposure
from tradejournal.risk.guardrails import (
    Guardrail,
    check_daily_loss,
    check_trade_count,
    evaluate_guardrails,
    trades_on_day,
)

import unittest


def _trade(pnl=0.0, result=TradeResult.LOSS, asset="EURUSD", risk=50.0,
           when="2024-01-01 10:00", trade_id=1) -> Trade:
    return Trade(
        id=trade_id,
        date=pd.Timestamp(when, tz="UTC"),
        mode=MarketMode.FOREX,
        asset=asset,
        entry=1.1,
        sl=1.095,
        risk=risk,
        pnl=pnl,
        result=result,
    )


class TestDailyLoss(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = Settings(daily_loss_limit=100)

    def test_below_warning_threshold(self) -> None:
        decision = check_daily_loss([_trade(-79)], self.settings)
        self.assertTrue(decision.allowed)
        self.assertFalse(decision.warning)
        self.assertAlmostEqual(decision.percentage, 79.0)

    def test_warning_band(self) -> None:
        decision = check_daily_loss([_trade(-85)], self.settings)
        self.assertTrue(decision.allowed)
        self.assertTrue(decision.warning)

    def test_limit_reached_blocks(self) -> None:
        decision = check_daily_loss([_trade(-100)], self.settings)
        self.assertFalse(decision.allowed)
        self.assertFalse(decision.warning)

    def test_wins_offset_losses(self) -> None:
        trades = [_trade(-100), _trade(30, TradeResult.WIN)]
        decision = check_daily_loss(trades, self.settings)
        self.assertAlmostEqual(decision.value, 70.0)
        self.assertTrue(decision.allowed)

    def test_green_day_has_no_loss(self) -> None:
        decision = check_daily_loss([_trade(50, TradeResult.WIN)], self.settings)
        self.assertEqual(decision.value, 0.0)
        self.assertEqual(decision.percentage, 0.0)

    def test_pending_trades_do_not_count_as_loss(self) -> None:
        decision = check_daily_loss([_trade(-90, TradeResult.PENDING)], self.settings)
        self.assertEqual(decision.value, 0.0)

    def test_disabled_limit_always_allows(self) -> None:
        decision = check_daily_loss([_trade(-10_000)], Settings(daily_loss_limit=0))
        self.assertTrue(decision.allowed)
        self.assertFalse(decision.warning)


class TestTradeCount(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = Settings(max_trades_per_day=3)

    def test_counts_pending_trades(self) -> None:
        trades = [_trade(result=TradeResult.PENDING, trade_id=i) for i in range(2)]
        decision = check_trade_count(trades, self.settings)
        self.assertEqual(decision.value, 2)
        self.assertTrue(decision.allowed)
        self.assertTrue(decision.warning)

    def test_well_below_cap(self) -> None:
        decision = check_trade_count([_trade()], self.settings)
        self.assertTrue(decision.allowed)
        self.assertFalse(decision.warning)

    def test_cap_reached_blocks(self) -> None:
        trades = [_trade(trade_id=i) for i in range(3)]
        decision = check_trade_count(trades, self.settings)
        self.assertFalse(decision.allowed)
        self.assertFalse(decision.warning)

    def test_disabled_cap(self) -> None:
        trades = [_trade(trade_id=i) for i in range(50)]
        decision = check_trade_count(trades, Settings(max_trades_per_day=0))
        self.assertTrue(decision.allowed)
        self.assertFalse(decision.warning)


class TestGuardrailReport(unittest.TestCase):
    def test_loss_block_reported_first(self) -> None:
        settings = Settings(daily_loss_limit=100, max_trades_per_day=1)
        report = evaluate_guardrails([_trade(-150)], settings)
        self.assertFalse(report.allowed)
        self.assertEqual(report.blocked_by.guardrail, Guardrail.DAILY_LOSS)
        self.assertEqual([d.guardrail for d in report.steps()],
                         [Guardrail.TRADE_COUNT, Guardrail.DAILY_LOSS])

    def test_nothing_blocked(self) -> None:
        report = evaluate_guardrails([], Settings(daily_loss_limit=100, max_trades_per_day=5))
        self.assertTrue(report.allowed)
        self.assertIsNone(report.blocked_by)

    def test_trades_on_day_uses_local_calendar(self) -> None:
        late = _trade(when="2024-01-01 23:30", trade_id=1)
        early = _trade(when="2024-01-02 16:00", trade_id=2)
        # 23:30 UTC is 2 January in Tokyo, 16:00 UTC is already 3 January
        on_day = trades_on_day([late, early], pd.Timestamp("2024-01-02 09:00", tz="Asia/Tokyo"), "Asia/Tokyo")
        self.assertEqual([t.id for t in on_day], [1])
        on_day_utc = trades_on_day([late, early], pd.Timestamp("2024-01-02 09:00", tz="UTC"), "UTC")
        self.assertEqual([t.id for t in on_day_utc], [2])


class TestOpenRiskExposure(unittest.TestCase):
    def test_critical_overload_and_correlation(self) -> None:
        trades = [
            _trade(result=TradeResult.PENDING, asset="EURUSD", risk=50, trade_id=1),
            _trade(result=TradeResult.PENDING, asset="EURUSD", risk=50, trade_id=2),
            _trade(result=TradeResult.LOSS, asset="GBPUSD", risk=500, trade_id=3),
        ]
        exposure = open_risk_exposure(trades, Settings(daily_loss_limit=100))
        self.assertEqual(exposure.total_open_risk, 100)
        self.assertEqual(exposure.open_positions, 2)
        self.assertAlmostEqual(exposure.exposure_percent, 100.0)
        self.assertEqual(exposure.status, "Critical Overload")
        self.assertEqual(exposure.correlated_assets, {"EURUSD": 2})

    def test_status_bands(self) -> None:
        settings = Settings(daily_loss_limit=100)
        high = open_risk_exposure([_trade(result=TradeResult.PENDING, risk=70)], settings)
        safe = open_risk_exposure([_trade(result=TradeResult.PENDING, risk=69)], settings)
        self.assertEqual(high.status, "High Exposure")
        self.assertEqual(safe.status, "Safe")

    def test_no_limit(self) -> None:
        exposure = open_risk_exposure([_trade(result=TradeResult.PENDING)], Settings())
        self.assertEqual(exposure.status, "No Limit")
        self.assertEqual(exposure.exposure_percent, 0.0)


if __name__ == '__main__':
    unittest.main()
