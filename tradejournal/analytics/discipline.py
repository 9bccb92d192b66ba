"""
Daily discipline score.

Scores a trading day out of 100: breaking the daily loss limit or the
trade cap costs heavily, every trade taken without completing its entry
checklist costs a little, and a green day or a completed pre-market
routine earns a small bonus.  The score is clamped to ``[0, 100]``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence

from ..config.schema import Settings
from ..journal.models import Trade

START_SCORE = 100
LOSS_LIMIT_PENALTY = 50
MAX_TRADES_PENALTY = 30
CHECKLIST_PENALTY = 5
GREEN_DAY_BONUS = 5
PRE_MARKET_BONUS = 5

ELITE_THRESHOLD = 90
SOLID_THRESHOLD = 70

SCRIBE_MIN_NOTE_LENGTH = 10
GUARDIAN_MIN_TRADES = 3


@dataclass(frozen=True)
class Infraction:
    reason: str
    points: int


@dataclass(frozen=True)
class DisciplineScore:
    score: int
    infractions: List[Infraction] = field(default_factory=list)


class DisciplineBand(str, Enum):
    ELITE = "Elite"
    SOLID = "Solid"
    RISK = "Risk"

    @property
    def label(self) -> str:
        if self is DisciplineBand.RISK:
            return "Discipline Risk"
        return f"{self.value} Discipline"


def calculate_discipline_score(
    today_trades: Sequence[Trade],
    daily_pnl: float,
    settings: Settings,
    pre_market_done: bool = False,
) -> DisciplineScore:
    """Score today's trading.

    Parameters
    ----------
    today_trades : sequence of Trade
        Every trade dated today, pending ones included.
    daily_pnl : float
        Today's signed net P&L.
    settings : Settings
        Daily limits; a ``0`` limit is never breached.
    pre_market_done : bool
        Whether the pre-market routine was completed today.

    Returns
    -------
    DisciplineScore
        Clamped score and one infraction per penalty applied.
    """
    score = START_SCORE
    infractions: List[Infraction] = []

    if settings.daily_loss_limit > 0 and daily_pnl <= -settings.daily_loss_limit:
        score -= LOSS_LIMIT_PENALTY
        infractions.append(Infraction("Daily Loss Limit Hit", -LOSS_LIMIT_PENALTY))

    if settings.max_trades_per_day > 0 and len(today_trades) > settings.max_trades_per_day:
        score -= MAX_TRADES_PENALTY
        infractions.append(Infraction("Max Trades Exceeded", -MAX_TRADES_PENALTY))

    for trade in today_trades:
        # untracked checklists (None) are not penalised
        if trade.checklist_complete is False:
            score -= CHECKLIST_PENALTY
            infractions.append(Infraction("Skipped Checklist", -CHECKLIST_PENALTY))

    if daily_pnl > 0:
        score += GREEN_DAY_BONUS
    if pre_market_done:
        score += PRE_MARKET_BONUS

    return DisciplineScore(score=max(0, min(START_SCORE, score)), infractions=infractions)


def discipline_band(score: int) -> DisciplineBand:
    if score >= ELITE_THRESHOLD:
        return DisciplineBand.ELITE
    if score >= SOLID_THRESHOLD:
        return DisciplineBand.SOLID
    return DisciplineBand.RISK


def discipline_badges(
    today_trades: Sequence[Trade],
    daily_pnl: float,
    result: DisciplineScore,
    pre_market_done: bool = False,
) -> List[str]:
    """Achievement badges earned today, in display order."""
    badges: List[str] = []
    if result.score == START_SCORE and today_trades:
        badges.append("Perfect Day")
    if daily_pnl > 0:
        badges.append("Green Day")
    if today_trades and all(len(t.notes) > SCRIBE_MIN_NOTE_LENGTH for t in today_trades):
        badges.append("Scribe")
    if len(today_trades) >= GUARDIAN_MIN_TRADES and not result.infractions:
        badges.append("Guardian")
    if pre_market_done:
        badges.append("Ready")
    return badges
