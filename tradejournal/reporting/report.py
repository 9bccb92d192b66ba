"""
Report generation utilities.

This module turns the journal into plain artefacts: a CSV file of
trades, a CSV file of the equity curve with its drawdown and a JSON
summary of performance figures.  Rendering charts from these files is
left to whatever tool reads them.
"""

from __future__ import annotations

import os
import json
import logging
from typing import Dict, List, Sequence
import pandas as pd

from ..analytics.aggregate import TradeFilter
from ..analytics.equity import equity_curve
from ..journal.models import Strategy, Trade
from .metrics import compute_journal_summary


logger = logging.getLogger(__name__)


def trades_frame(trades: Sequence[Trade]) -> pd.DataFrame:
    """Trades as a DataFrame using the journal's export columns."""
    rows = [
        {
            'Date': t.date.isoformat(),
            'Mode': t.mode.value,
            'Asset': t.asset,
            'Entry': t.entry,
            'SL': t.sl,
            'TP': t.tp or '',
            'Position Size': t.position_size,
            'Leverage': t.leverage if t.leverage is not None else '-',
            'Risk': t.risk,
            'RR Ratio': t.rr_ratio if t.rr_ratio is not None else '',
            'Strategy': t.strategy_name,
            'Result': t.result.value,
            'P&L': round(t.pnl, 2),
            'Notes': t.notes,
        }
        for t in trades
    ]
    columns = ['Date', 'Mode', 'Asset', 'Entry', 'SL', 'TP', 'Position Size', 'Leverage',
               'Risk', 'RR Ratio', 'Strategy', 'Result', 'P&L', 'Notes']
    return pd.DataFrame(rows, columns=columns)


def equity_frame(trades: Sequence[Trade]) -> pd.DataFrame:
    rows = [
        {
            'timestamp': pt.timestamp.isoformat(),
            'pnl': pt.pnl,
            'cumulative': pt.cumulative,
            'peak': pt.peak,
            'drawdown': pt.drawdown,
        }
        for pt in equity_curve(trades)
    ]
    return pd.DataFrame(rows, columns=['timestamp', 'pnl', 'cumulative', 'peak', 'drawdown'])


def generate_journal_report(
    trades: List[Trade],
    strategies: List[Strategy],
    out_dir: str = "results",
    trade_filter: TradeFilter = TradeFilter(),
    tz_name: str = "UTC",
) -> Dict[str, str]:
    """Generate report files for the journal.

    Creates the output directory if it does not exist and writes the
    following files:

    - `trades.csv` – filtered journal entries
    - `equity_curve.csv` – cumulative P&L, peak and drawdown per closed trade
    - `summary.json` – performance figures

    Returns
    -------
    dict
        Mapping of artefact name to written path.
    """
    os.makedirs(out_dir, exist_ok=True)
    selected = trade_filter.apply(trades)

    trades_path = os.path.join(out_dir, 'trades.csv')
    trades_frame(selected).to_csv(trades_path, index=False)

    eq_path = os.path.join(out_dir, 'equity_curve.csv')
    equity_frame(selected).to_csv(eq_path, index=False)

    summary = compute_journal_summary(trades, strategies, trade_filter, tz_name)
    summary_path = os.path.join(out_dir, 'summary.json')
    with open(summary_path, 'w', encoding='utf-8') as fh:
        json.dump(summary, fh, indent=2, ensure_ascii=False)

    logger.info("Wrote report for %d trades to %s", len(selected), out_dir)
    return {'trades': trades_path, 'equity_curve': eq_path, 'summary': summary_path}
