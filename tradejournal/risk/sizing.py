"""
Position sizing calculator.

Turns an account balance, a risk percentage and the planned entry,
stop-loss and take-profit levels into a position size.  Forex pairs are
sized in standard lots from the stop distance in pips; crypto pairs are
sized in coin quantity from the raw price distance, with the margin
required at the chosen leverage.

The calculator never raises for bad levels: problems are reported as
warnings on the returned result and the caller decides whether the
calculation may be saved to the journal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..journal.models import Direction, MarketMode


logger = logging.getLogger(__name__)

JPY_PIP_MULTIPLIER = 100
PIP_MULTIPLIER = 10_000
# Value of one pip on one standard lot, in USD
DEFAULT_PIP_VALUE = 10.0
USDJPY_PIP_VALUE_JPY = 1000.0
# Substituted for a zero entry price in the rate conversions
ZERO_RATE_FALLBACK = 1.0
MAX_MARGIN_PERCENT = 100.0


class SizingWarning(str, Enum):
    INVALID_PRICE_LEVELS = "InvalidPriceLevels"
    NON_POSITIVE_BALANCE = "NonPositiveBalance"


@dataclass
class PositionSizeResult:
    """Outcome of a sizing calculation.

    Forex results fill `pips`, `pip_value` and `lot_size`; crypto
    results fill `quantity`, `exposure`, `margin_needed`,
    `suggested_margin_percent` and `leverage`.
    """
    mode: MarketMode
    asset: str
    balance: float
    risk_percent: float
    max_risk: float
    entry: float
    sl: float
    tp: float
    direction: Direction
    rr_ratio: float
    lot_size: float = 0.0
    pips: float = 0.0
    pip_value: float = 0.0
    quantity: float = 0.0
    exposure: float = 0.0
    margin_needed: float = 0.0
    suggested_margin_percent: float = 0.0
    leverage: Optional[float] = None
    warnings: List[SizingWarning] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """`False` when the direction could not be determined."""
        return SizingWarning.INVALID_PRICE_LEVELS not in self.warnings

    @property
    def position_size(self) -> float:
        return self.lot_size if self.mode is MarketMode.FOREX else self.quantity


def infer_direction(entry: float, sl: float) -> Direction:
    """LONG when the stop is below entry, SHORT when above."""
    if sl < entry:
        return Direction.LONG
    if sl > entry:
        return Direction.SHORT
    return Direction.NONE


def normalise_pair(pair: str) -> str:
    return pair.replace("/", "").replace(" ", "").upper()


def pip_multiplier(pair: str) -> int:
    return JPY_PIP_MULTIPLIER if "JPY" in normalise_pair(pair) else PIP_MULTIPLIER


def pip_value(pair: str, entry: float) -> float:
    """USD value of one pip on one standard lot.

    Pairs quoted in USD are worth a flat 10 USD per pip.  For USD based
    pairs the pip is worth 10 units (1000 JPY for USD/JPY) of the quote
    currency, converted back to USD at the entry rate.
    """
    symbol = normalise_pair(pair)
    rate = entry or ZERO_RATE_FALLBACK
    if symbol.endswith("USD"):
        return DEFAULT_PIP_VALUE
    if symbol.startswith("USD") and "JPY" in symbol:
        return USDJPY_PIP_VALUE_JPY / rate
    if symbol.startswith("USD"):
        return DEFAULT_PIP_VALUE / rate
    return DEFAULT_PIP_VALUE


def reward_risk_ratio(entry: float, sl: float, tp: float) -> float:
    """Take-profit distance over stop distance, ``0`` without a target."""
    stop_distance = abs(entry - sl)
    if tp <= 0 or stop_distance == 0:
        return 0.0
    return abs(tp - entry) / stop_distance


def calculate_position_size(
    balance: float,
    risk_percent: float,
    entry: float,
    sl: float,
    tp: float = 0.0,
    mode: MarketMode = MarketMode.FOREX,
    asset: str = "",
    leverage: Optional[float] = None,
) -> PositionSizeResult:
    """Size a position so that hitting the stop loses `risk_percent` of `balance`.

    Parameters
    ----------
    balance : float
        Account balance in account currency.
    risk_percent : float
        Percentage of the balance to risk (``1`` means 1 %).
    entry, sl, tp : float
        Planned price levels.  ``tp <= 0`` means no target.
    mode : MarketMode
        Forex lot sizing or crypto quantity sizing.
    asset : str
        Pair symbol, e.g. ``"EURUSD"`` or ``"USD/JPY"`` for forex.
    leverage : float, optional
        Crypto leverage; values below 1 are treated as 1.

    Returns
    -------
    PositionSizeResult
        Sizing figures plus any warnings.
    """
    mode = MarketMode(mode)
    warnings: List[SizingWarning] = []
    if balance <= 0:
        warnings.append(SizingWarning.NON_POSITIVE_BALANCE)

    max_risk = balance * risk_percent / 100
    direction = infer_direction(entry, sl)
    if direction is Direction.NONE:
        warnings.append(SizingWarning.INVALID_PRICE_LEVELS)
    stop_distance = abs(entry - sl)

    result = PositionSizeResult(
        mode=mode,
        asset=asset,
        balance=balance,
        risk_percent=risk_percent,
        max_risk=max_risk,
        entry=entry,
        sl=sl,
        tp=tp,
        direction=direction,
        rr_ratio=reward_risk_ratio(entry, sl, tp),
        warnings=warnings,
    )

    if mode is MarketMode.FOREX:
        result.pips = stop_distance * pip_multiplier(asset)
        result.pip_value = pip_value(asset, entry)
        denominator = result.pips * result.pip_value
        result.lot_size = max_risk / denominator if denominator else 0.0
    else:
        lev = leverage if leverage is not None and leverage >= 1 else 1.0
        result.leverage = lev
        result.quantity = max_risk / stop_distance if stop_distance else 0.0
        result.exposure = result.quantity * entry
        result.margin_needed = result.exposure / lev
        if balance > 0:
            result.suggested_margin_percent = min(
                result.margin_needed / balance * 100, MAX_MARGIN_PERCENT
            )

    if warnings:
        logger.debug("Sizing %s %s produced warnings: %s", mode.value, asset,
                     [w.value for w in warnings])
    return result
