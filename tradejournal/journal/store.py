"""
In-memory journal store.

`JournalStore` owns the mutable trade and strategy lists on behalf of
the caller.  It is the only place where trades are created, resolved,
edited and deleted; every figure it reports is delegated to the pure
functions in `risk` and `analytics`, which only ever see snapshots of
these lists.  Writing the store to disk is left to
`utils.persistence`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional
import pandas as pd

from ..analytics.discipline import DisciplineScore, calculate_discipline_score
from ..analytics.equity import max_drawdown
from ..config.schema import Settings
from ..risk.exposure import RiskExposure, open_risk_exposure
from ..risk.guardrails import (
    GuardrailDecision,
    GuardrailReport,
    daily_pnl,
    evaluate_guardrails,
    trades_on_day,
)
from ..risk.outcome import resolve_outcome
from ..risk.sizing import PositionSizeResult
from ..utils.timeutils import utc_now
from .models import BacktestTrade, Emotion, MarketMode, Strategy, Trade, TradeResult


logger = logging.getLogger(__name__)

# Called with a warning decision; returning False cancels the save
ConfirmCallback = Callable[[GuardrailDecision], bool]


class SaveRejection(str, Enum):
    INVALID_PRICE_LEVELS = "InvalidPriceLevels"
    TRADE_LIMIT_REACHED = "TradeLimitReached"
    DAILY_LOSS_LIMIT_REACHED = "DailyLossLimitReached"
    WARNING_DECLINED = "WarningDeclined"
    NO_STRATEGY_SELECTED = "NoStrategySelected"


@dataclass
class SaveOutcome:
    saved: bool
    trade: Optional[Trade] = None
    rejection: Optional[SaveRejection] = None
    decision: Optional[GuardrailDecision] = None


_BLOCKED = {
    "trade": SaveRejection.TRADE_LIMIT_REACHED,
    "loss": SaveRejection.DAILY_LOSS_LIMIT_REACHED,
}


def _ms(ts: pd.Timestamp) -> int:
    return int(ts.value // 1_000_000)


class JournalStore:
    """Trades (newest first), strategies, settings and backtest records."""

    def __init__(
        self,
        trades: Optional[List[Trade]] = None,
        strategies: Optional[List[Strategy]] = None,
        settings: Optional[Settings] = None,
        timezone: str = "UTC",
        backtest_trades: Optional[List[BacktestTrade]] = None,
    ) -> None:
        self.trades: List[Trade] = list(trades or [])
        self.strategies: List[Strategy] = list(strategies or [])
        self.settings = settings or Settings()
        self.timezone = timezone
        self.backtest_trades: List[BacktestTrade] = list(backtest_trades or [])

    # ---------- lookups ----------
    def get_trade(self, trade_id: int) -> Optional[Trade]:
        for trade in self.trades:
            if trade.id == trade_id:
                return trade
        return None

    def get_strategy(self, strategy_id: int) -> Optional[Strategy]:
        for strategy in self.strategies:
            if strategy.id == strategy_id:
                return strategy
        return None

    def _unique_trade_id(self, now: pd.Timestamp) -> int:
        candidate = _ms(now)
        taken = {t.id for t in self.trades}
        while candidate in taken:
            candidate += 1
        return candidate

    # ---------- journaling ----------
    def save_calculation(
        self,
        calculation: PositionSizeResult,
        strategy_id: Optional[int],
        emotion: Emotion = Emotion.NEUTRAL,
        notes: str = "",
        checklist_complete: bool = False,
        now: Optional[pd.Timestamp] = None,
        confirm: Optional[ConfirmCallback] = None,
    ) -> SaveOutcome:
        """Commit a sizing result to the journal as a ``PENDING`` trade.

        The guardrails are walked in order: trade cap block, trade cap
        warning, daily loss block, daily loss warning.  Warnings are
        passed to `confirm`; without a callback they are only logged.
        A trade saved without an entry checklist counts as not completed.
        """
        now = now if now is not None else utc_now()
        if not calculation.is_valid:
            logger.warning("Refusing to journal %s: entry equals stop loss", calculation.asset)
            return SaveOutcome(False, rejection=SaveRejection.INVALID_PRICE_LEVELS)

        report = self.guardrails(now)
        for decision in report.steps():
            if not decision.allowed:
                logger.warning("Trade blocked by %s limit (%s of %s)",
                               decision.guardrail.value, decision.value, decision.limit)
                return SaveOutcome(False, rejection=_BLOCKED[decision.guardrail.value],
                                   decision=decision)
            if decision.warning:
                if confirm is not None and not confirm(decision):
                    return SaveOutcome(False, rejection=SaveRejection.WARNING_DECLINED,
                                       decision=decision)
                logger.info("Approaching %s limit (%s of %s)",
                            decision.guardrail.value, decision.value, decision.limit)

        strategy = self.get_strategy(strategy_id) if strategy_id else None
        if strategy is None:
            logger.warning("No strategy selected; trade not saved")
            return SaveOutcome(False, rejection=SaveRejection.NO_STRATEGY_SELECTED)

        is_forex = calculation.mode is MarketMode.FOREX
        trade = Trade(
            id=self._unique_trade_id(now),
            date=now,
            entry_time=now,
            mode=calculation.mode,
            asset=calculation.asset,
            direction=calculation.direction,
            entry=calculation.entry,
            sl=calculation.sl,
            tp=calculation.tp,
            position_size=round(calculation.lot_size, 2) if is_forex else round(calculation.quantity, 6),
            leverage=None if is_forex else calculation.leverage,
            risk=round(calculation.max_risk, 2),
            rr_ratio=round(calculation.rr_ratio, 2),
            strategy_id=strategy.id,
            strategy_name=strategy.name,
            emotion=Emotion(emotion),
            notes=notes.strip(),
            checklist_complete=checklist_complete,
        )
        self.trades.insert(0, trade)
        logger.info("Journaled %s %s (risk %.2f, R:R %.2f)",
                    trade.direction.value, trade.asset, trade.risk, trade.rr_ratio)
        return SaveOutcome(True, trade=trade)

    def set_result(self, trade_id: int, result: TradeResult,
                   now: Optional[pd.Timestamp] = None) -> Optional[Trade]:
        trade = self.get_trade(trade_id)
        if trade is None:
            logger.warning("Cannot set result: trade %s not found", trade_id)
            return None
        resolution = resolve_outcome(trade, result, now)
        trade.result = resolution.result
        trade.pnl = resolution.pnl
        trade.exit_time = resolution.exit_time
        return trade

    def set_pnl(self, trade_id: int, pnl: float) -> Optional[Trade]:
        """Overwrite the P&L by hand, leaving the result untouched."""
        trade = self.get_trade(trade_id)
        if trade is None:
            logger.warning("Cannot set P&L: trade %s not found", trade_id)
            return None
        trade.pnl = pnl
        return trade

    def edit_trade(
        self,
        trade_id: int,
        entry: Optional[float] = None,
        sl: Optional[float] = None,
        tp: Optional[float] = None,
        pnl: Optional[float] = None,
        notes: Optional[str] = None,
    ) -> Optional[Trade]:
        trade = self.get_trade(trade_id)
        if trade is None:
            logger.warning("Cannot edit: trade %s not found", trade_id)
            return None
        if entry is not None:
            trade.entry = entry
        if sl is not None:
            trade.sl = sl
        if tp is not None:
            trade.tp = tp
        if pnl is not None:
            trade.pnl = pnl
        if notes is not None:
            trade.notes = notes
        return trade

    def delete_trade(self, trade_id: int) -> bool:
        before = len(self.trades)
        self.trades = [t for t in self.trades if t.id != trade_id]
        return len(self.trades) < before

    # ---------- strategies ----------
    def add_strategy(
        self,
        name: str,
        description: str = "",
        open_checklist: Optional[List[str]] = None,
        sl_tp_checklist: Optional[List[str]] = None,
        indicator_checklist: Optional[List[str]] = None,
    ) -> Strategy:
        next_id = max((s.id for s in self.strategies), default=0) + 1
        strategy = Strategy(
            id=next_id,
            name=name,
            description=description,
            open_checklist=list(open_checklist or []),
            sl_tp_checklist=list(sl_tp_checklist or []),
            indicator_checklist=list(indicator_checklist or []),
        )
        self.strategies.append(strategy)
        return strategy

    def delete_strategy(self, strategy_id: int) -> bool:
        before = len(self.strategies)
        self.strategies = [s for s in self.strategies if s.id != strategy_id]
        return len(self.strategies) < before

    # ---------- today ----------
    def live_trades(self) -> List[Trade]:
        return [t for t in self.trades if not t.is_backtest]

    def today_trades(self, now: Optional[pd.Timestamp] = None) -> List[Trade]:
        now = now if now is not None else utc_now()
        return trades_on_day(self.live_trades(), now, self.timezone)

    def daily_pnl(self, now: Optional[pd.Timestamp] = None) -> float:
        return daily_pnl(self.today_trades(now))

    def daily_drawdown(self, now: Optional[pd.Timestamp] = None) -> float:
        return max_drawdown(self.today_trades(now))

    def guardrails(self, now: Optional[pd.Timestamp] = None) -> GuardrailReport:
        return evaluate_guardrails(self.today_trades(now), self.settings)

    def discipline(self, now: Optional[pd.Timestamp] = None,
                   pre_market_done: bool = False) -> DisciplineScore:
        return calculate_discipline_score(
            self.today_trades(now), self.daily_pnl(now), self.settings, pre_market_done
        )

    def exposure(self) -> RiskExposure:
        return open_risk_exposure(self.live_trades(), self.settings)
