"""
Conversion between stored journal records and model dataclasses.

The journal file keeps the record layout of the browser application it
was exported from: camelCase keys, numbers that are sometimes strings
(``"50.00"``, ``"1,250.5"``) and placeholders such as ``"-"`` or ``""``
for unset values.  Everything is normalised here so that the analytics
only ever see floats, enums and timestamps.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Optional

from ..config.schema import Settings
from ..utils.timeutils import parse_timestamp
from .models import (
    BacktestTrade,
    Direction,
    Emotion,
    MarketMode,
    Strategy,
    Trade,
    TradeResult,
)


logger = logging.getLogger(__name__)


def parse_number(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    """Parse a stored numeric field.

    Strings may contain thousands separators.  Empty strings, ``"-"``,
    ``None``, NaN and anything that does not parse return `default`.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.replace(",", "").strip()
        if value in ("", "-"):
            return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    return number


def _parse_enum(enum_cls, value: Any, default):
    if isinstance(value, enum_cls):
        return value
    if value is None:
        return default
    text = str(value).strip()
    for candidate in (text, text.upper(), text.lower()):
        try:
            return enum_cls(candidate)
        except ValueError:
            continue
    logger.debug("Unknown %s value %r, using %s", enum_cls.__name__, value, default.value)
    return default


def _optional_int(value: Any) -> Optional[int]:
    number = parse_number(value, None)
    if number is None or number == 0:
        return None
    return int(number)


def _record_date(raw: Dict[str, Any]):
    date = parse_timestamp(raw.get('date')) or parse_timestamp(raw.get('id'))
    if date is None:
        raise ValueError(f"Journal record without date or id: {raw!r}")
    return date


def trade_from_dict(raw: Dict[str, Any]) -> Trade:
    """Build a `Trade` from a stored journal record.

    Raises
    ------
    ValueError
        If the record has neither a ``date`` nor an ``id`` to date it by.
    """
    date = _record_date(raw)
    checklist = raw.get('checklistComplete')
    leverage = parse_number(raw.get('leverage'), None)
    return Trade(
        id=int(parse_number(raw.get('id'), 0.0)),
        date=date,
        mode=_parse_enum(MarketMode, raw.get('mode'), MarketMode.FOREX),
        asset=str(raw.get('asset') or ""),
        entry=parse_number(raw.get('entry')),
        sl=parse_number(raw.get('sl')),
        tp=parse_number(raw.get('tp')),
        direction=_parse_enum(Direction, raw.get('direction'), Direction.NONE),
        position_size=parse_number(raw.get('positionSize')),
        leverage=leverage,
        risk=abs(parse_number(raw.get('risk'))),
        rr_ratio=parse_number(raw.get('rrRatio'), None),
        result=_parse_enum(TradeResult, raw.get('result'), TradeResult.PENDING),
        pnl=parse_number(raw.get('pnl')),
        strategy_id=_optional_int(raw.get('strategyId')),
        strategy_name=str(raw.get('strategyName') or ""),
        emotion=_parse_enum(Emotion, raw.get('emotion'), Emotion.NEUTRAL),
        notes=str(raw.get('notes') or ""),
        checklist_complete=checklist if isinstance(checklist, bool) else None,
        is_backtest=bool(raw.get('isBacktest', False)),
        entry_time=parse_timestamp(raw.get('entryTime')),
        exit_time=parse_timestamp(raw.get('exitTime')),
    )


def _iso(ts) -> Optional[str]:
    return ts.isoformat() if ts is not None else None


def trade_to_dict(trade: Trade) -> Dict[str, Any]:
    """Serialise a `Trade` using the journal's record keys."""
    data: Dict[str, Any] = {
        'id': trade.id,
        'date': _iso(trade.date),
        'entryTime': _iso(trade.entry_time),
        'exitTime': _iso(trade.exit_time),
        'mode': trade.mode.value,
        'asset': trade.asset,
        'direction': trade.direction.value,
        'entry': trade.entry,
        'sl': trade.sl,
        'tp': trade.tp,
        'positionSize': trade.position_size,
        'leverage': trade.leverage,
        'risk': trade.risk,
        'rrRatio': trade.rr_ratio,
        'strategyId': trade.strategy_id,
        'strategyName': trade.strategy_name,
        'emotion': trade.emotion.value,
        'result': trade.result.value,
        'pnl': trade.pnl,
        'notes': trade.notes,
        'isBacktest': trade.is_backtest,
    }
    if trade.checklist_complete is not None:
        data['checklistComplete'] = trade.checklist_complete
    return data


def strategy_from_dict(raw: Dict[str, Any]) -> Strategy:
    return Strategy(
        id=int(parse_number(raw.get('id'), 0.0)),
        name=str(raw.get('name') or ""),
        description=str(raw.get('description') or ""),
        open_checklist=list(raw.get('openChecklist') or []),
        sl_tp_checklist=list(raw.get('slTpChecklist') or []),
        indicator_checklist=list(raw.get('indicatorChecklist') or []),
    )


def strategy_to_dict(strategy: Strategy) -> Dict[str, Any]:
    return {
        'id': strategy.id,
        'name': strategy.name,
        'description': strategy.description,
        'openChecklist': list(strategy.open_checklist),
        'slTpChecklist': list(strategy.sl_tp_checklist),
        'indicatorChecklist': list(strategy.indicator_checklist),
    }


def settings_from_dict(raw: Optional[Dict[str, Any]]) -> Settings:
    raw = raw or {}
    return Settings(
        daily_loss_limit=parse_number(raw.get('dailyLossLimit')),
        max_trades_per_day=int(parse_number(raw.get('maxTradesPerDay'))),
    )


def settings_to_dict(settings: Settings) -> Dict[str, Any]:
    return {
        'dailyLossLimit': settings.daily_loss_limit,
        'maxTradesPerDay': settings.max_trades_per_day,
    }


def backtest_trade_to_dict(trade: BacktestTrade) -> Dict[str, Any]:
    return {
        'id': trade.id,
        'date': _iso(trade.date),
        'asset': trade.asset,
        'strategyId': trade.strategy_id,
        'style': trade.style,
        'result': trade.result.value,
        'riskAmount': trade.risk_amount,
        'rrRatio': trade.rr_ratio,
        'pnl': trade.pnl,
        'equityAfter': trade.equity_after,
        'isBacktest': True,
    }


def backtest_trade_from_dict(raw: Dict[str, Any]) -> BacktestTrade:
    return BacktestTrade(
        id=int(parse_number(raw.get('id'), 0.0)),
        date=_record_date(raw),
        asset=str(raw.get('asset') or ""),
        strategy_id=int(parse_number(raw.get('strategyId'))),
        style=str(raw.get('style') or ""),
        result=_parse_enum(TradeResult, raw.get('result'), TradeResult.BREAKEVEN),
        risk_amount=parse_number(raw.get('riskAmount')),
        rr_ratio=parse_number(raw.get('rrRatio')),
        pnl=parse_number(raw.get('pnl')),
        equity_after=parse_number(raw.get('equityAfter')),
    )
