"""
Daily guardrails.

Two independent caps protect the trader from a bad day: a maximum
daily loss and a maximum number of journal entries per day.  Each check
returns a decision telling the caller whether another trade may be
journaled and whether to ask for confirmation first.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from ..config.schema import Settings
from ..journal.models import Trade
from ..utils.timeutils import TimestampLike, is_same_day

LOSS_WARNING_PERCENT = 80.0


class Guardrail(str, Enum):
    DAILY_LOSS = "loss"
    TRADE_COUNT = "trade"


@dataclass(frozen=True)
class GuardrailDecision:
    """Result of a single guardrail check.

    `value` is the loss so far (daily loss) or the number of trades
    today (trade count); `percentage` is only meaningful for the daily
    loss check.  A disabled limit is reported as ``limit == 0``.
    """
    guardrail: Guardrail
    allowed: bool
    warning: bool
    value: float
    limit: float
    percentage: float = 0.0


@dataclass(frozen=True)
class GuardrailReport:
    trade_count: GuardrailDecision
    daily_loss: GuardrailDecision

    @property
    def allowed(self) -> bool:
        return self.trade_count.allowed and self.daily_loss.allowed

    @property
    def blocked_by(self) -> Optional[GuardrailDecision]:
        """The decision to show when blocked; the loss limit wins."""
        if not self.daily_loss.allowed:
            return self.daily_loss
        if not self.trade_count.allowed:
            return self.trade_count
        return None

    def steps(self) -> List[GuardrailDecision]:
        """Decisions in the order a save must walk them.

        The trade-count check (block, then warning) comes before the
        daily loss check (block, then warning).
        """
        return [self.trade_count, self.daily_loss]


def trades_on_day(trades: Iterable[Trade], day: TimestampLike, tz_name: str = "UTC") -> List[Trade]:
    """Trades dated on the same local calendar day as `day`, any status."""
    return [t for t in trades if is_same_day(t.date, day, tz_name)]


def daily_pnl(trades: Iterable[Trade]) -> float:
    """Sum of P&L over closed trades."""
    return sum(t.pnl for t in trades if not t.result.is_pending)


def check_daily_loss(today_trades: Sequence[Trade], settings: Settings) -> GuardrailDecision:
    limit = settings.daily_loss_limit
    loss = abs(min(0.0, daily_pnl(today_trades)))
    if limit <= 0:
        return GuardrailDecision(Guardrail.DAILY_LOSS, allowed=True, warning=False,
                                 value=loss, limit=0.0)
    percentage = loss / limit * 100
    return GuardrailDecision(
        Guardrail.DAILY_LOSS,
        allowed=percentage < 100,
        warning=LOSS_WARNING_PERCENT <= percentage < 100,
        value=loss,
        limit=limit,
        percentage=percentage,
    )


def check_trade_count(today_trades: Sequence[Trade], settings: Settings) -> GuardrailDecision:
    cap = settings.max_trades_per_day
    count = len(today_trades)
    if cap <= 0:
        return GuardrailDecision(Guardrail.TRADE_COUNT, allowed=True, warning=False,
                                 value=count, limit=0)
    return GuardrailDecision(
        Guardrail.TRADE_COUNT,
        allowed=count < cap,
        # warns on the last trade before the cap
        warning=cap - 1 <= count < cap,
        value=count,
        limit=cap,
    )


def evaluate_guardrails(today_trades: Sequence[Trade], settings: Settings) -> GuardrailReport:
    """Run both checks over today's trades.

    `today_trades` must contain every trade of the day, pending ones
    included; pending trades count towards the trade cap but not
    towards the loss.
    """
    return GuardrailReport(
        trade_count=check_trade_count(today_trades, settings),
        daily_loss=check_daily_loss(today_trades, settings),
    )
