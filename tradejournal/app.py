"""
Application entry point.

This module defines a simple command-line interface over the journal
engine: position sizing, journal statistics, today's guardrails and
discipline, report generation and backtest simulation.  Results are
printed to stdout as JSON so they can be piped into other tools.
"""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict, replace
from pathlib import Path
from typing import Any, List, Optional

from .analytics.aggregate import TradeFilter
from .analytics.discipline import discipline_badges, discipline_band
from .analytics.equity import filter_by_period
from .backtest.simulator import simulate, summarize_session
from .config.schema import Config, load_config
from .journal.models import MarketMode, TradeResult
from .reporting.metrics import compute_journal_summary
from .reporting.report import generate_journal_report
from .risk.sizing import calculate_position_size
from .utils.persistence import load_journal
from .utils.timeutils import utc_now


logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


def _load_config(path: str) -> Config:
    if Path(path).exists():
        return load_config(path)
    logger.debug("No configuration at %s, using defaults", path)
    return Config()


def _trade_filter(args: argparse.Namespace) -> TradeFilter:
    return TradeFilter(mode=args.filter_mode, result=args.result,
                       strategy=args.strategy, emotion=args.emotion)


def _cmd_size(args: argparse.Namespace, config: Config) -> None:
    result = calculate_position_size(
        balance=args.balance,
        risk_percent=args.risk,
        entry=args.entry,
        sl=args.sl,
        tp=args.tp,
        mode=MarketMode(args.mode),
        asset=args.asset,
        leverage=args.leverage,
    )
    payload = asdict(result)
    payload['position_size'] = result.position_size
    _emit(payload)


def _cmd_stats(args: argparse.Namespace, config: Config) -> None:
    store = load_journal(args.journal or config.journal_path, config.timezone, config.settings)
    trades = filter_by_period(store.trades, args.period, tz_name=config.timezone)
    _emit(compute_journal_summary(trades, store.strategies, _trade_filter(args), config.timezone))


def _cmd_today(args: argparse.Namespace, config: Config) -> None:
    store = load_journal(args.journal or config.journal_path, config.timezone, config.settings)
    now = utc_now()
    today = store.today_trades(now)
    pnl = store.daily_pnl(now)
    score = store.discipline(now, pre_market_done=args.pre_market)
    report = store.guardrails(now)
    _emit({
        'trades_today': len(today),
        'daily_pnl': pnl,
        'daily_drawdown': store.daily_drawdown(now),
        'guardrails': {
            'allowed': report.allowed,
            'trade_count': asdict(report.trade_count),
            'daily_loss': asdict(report.daily_loss),
        },
        'discipline': {
            'score': score.score,
            'band': discipline_band(score.score).label,
            'infractions': [asdict(i) for i in score.infractions],
            'badges': discipline_badges(today, pnl, score, args.pre_market),
        },
        'exposure': asdict(store.exposure()),
    })


def _cmd_report(args: argparse.Namespace, config: Config) -> None:
    store = load_journal(args.journal or config.journal_path, config.timezone, config.settings)
    paths = generate_journal_report(store.trades, store.strategies,
                                    out_dir=args.out or config.report_dir,
                                    trade_filter=_trade_filter(args), tz_name=config.timezone)
    _emit(paths)


def _cmd_backtest(args: argparse.Namespace, config: Config) -> None:
    session = config.backtest
    if args.strategy_id is not None:
        session = replace(session, strategy_id=args.strategy_id)
    outcomes = [TradeResult(o) for o in args.outcomes]
    history = simulate(session, outcomes)
    if not history and outcomes:
        logger.error("Backtest not recorded: select a strategy with --strategy-id or in the config")
    summary = summarize_session(session, history)
    _emit({
        'trades': [
            {'result': t.result.value, 'risk': t.risk_amount, 'pnl': t.pnl, 'equity': t.equity_after}
            for t in history
        ],
        'summary': asdict(summary),
    })


def _add_filter_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--journal', help="Journal JSON file (defaults to config journal_path)")
    parser.add_argument('--filter-mode', default='all', help="forex, crypto or all")
    parser.add_argument('--result', default='all', help="Trade result to keep or all")
    parser.add_argument('--strategy', default='all', help="Strategy id to keep or all")
    parser.add_argument('--emotion', default='all', help="Emotion tag to keep or all")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Trading journal risk and performance tools")
    parser.add_argument('--config', default='config.yaml', help="Path to configuration YAML file")
    parser.add_argument('-v', '--verbose', action='store_true', help="Enable debug logging")
    sub = parser.add_subparsers(dest='command', required=True)

    size = sub.add_parser('size', help="Position size calculator")
    size.add_argument('--mode', choices=[m.value for m in MarketMode], default='forex')
    size.add_argument('--balance', type=float, required=True)
    size.add_argument('--risk', type=float, required=True, help="Risk percent per trade")
    size.add_argument('--entry', type=float, required=True)
    size.add_argument('--sl', type=float, required=True)
    size.add_argument('--tp', type=float, default=0.0)
    size.add_argument('--asset', default='', help="Pair symbol, e.g. EURUSD or BTCUSDT")
    size.add_argument('--leverage', type=float, default=None)

    stats = sub.add_parser('stats', help="Journal statistics")
    _add_filter_args(stats)
    stats.add_argument('--period', choices=['all', '7d', '30d', 'year'], default='all')

    today = sub.add_parser('today', help="Guardrails, discipline and exposure for today")
    today.add_argument('--journal', help="Journal JSON file (defaults to config journal_path)")
    today.add_argument('--pre-market', action='store_true', help="Pre-market routine completed")

    report = sub.add_parser('report', help="Write CSV/JSON reports")
    _add_filter_args(report)
    report.add_argument('--out', help="Output directory (defaults to config report_dir)")

    backtest = sub.add_parser('backtest', help="Simulate a backtest session")
    backtest.add_argument('outcomes', nargs='+', type=str.upper, choices=['WIN', 'LOSS', 'BREAKEVEN'])
    backtest.add_argument('--strategy-id', type=int, default=None)
    return parser


COMMANDS = {
    'size': _cmd_size,
    'stats': _cmd_stats,
    'today': _cmd_today,
    'report': _cmd_report,
    'backtest': _cmd_backtest,
}


def main(argv: Optional[List[str]] = None) -> None:
    """Parse command-line arguments and dispatch to the selected command."""
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)
    config = _load_config(args.config)
    COMMANDS[args.command](args, config)


if __name__ == '__main__':
    main()
