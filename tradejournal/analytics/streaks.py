"""
Win/loss streak analysis.

Walks closed trades in date order keeping a signed counter: positive
while winning, negative while not winning.  Breakeven trades are not
wins and therefore extend (or start) a losing streak.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List

from ..journal.models import is_win
from .equity import closed_in_order


@dataclass(frozen=True)
class StreakSummary:
    """Signed streak lengths, oldest first, and their extremes.

    A streak of ``3`` is three wins in a row, ``-2`` two non-wins.
    `max_lose_streak` is reported as a positive length.
    """
    streaks: List[int] = field(default_factory=list)
    max_win_streak: int = 0
    max_lose_streak: int = 0


def analyze_streaks(trades: Iterable) -> StreakSummary:
    streaks: List[int] = []
    current = 0
    max_win = 0
    max_lose = 0
    for trade in closed_in_order(trades):
        if is_win(trade.result):
            if current >= 0:
                current += 1
            else:
                streaks.append(current)
                current = 1
        else:
            if current <= 0:
                current -= 1
            else:
                streaks.append(current)
                current = -1
        max_win = max(max_win, current)
        max_lose = max(max_lose, -current)
    streaks.append(current)
    return StreakSummary(
        streaks=[s for s in streaks if s != 0],
        max_win_streak=max_win,
        max_lose_streak=max_lose,
    )
