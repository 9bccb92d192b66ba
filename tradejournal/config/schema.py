"""
Configuration schema and loader.

This module defines dataclasses that mirror the expected structure of
the YAML configuration file (`config.yaml`).  A helper function
`load_config()` reads a YAML file from disk and returns an instance
of `Config` populated with defaults for any missing fields.

The trading limits (`Settings`) and the backtest session parameters
(`BacktestSessionConfig`) are deliberately separate: the first gates
the live journal, the second only drives the backtest simulator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict
import yaml


@dataclass
class Settings:
    """Daily trading limits.

    Attributes
    ----------
    daily_loss_limit : float
        Maximum loss allowed per calendar day in account currency.
        ``0`` disables the check.
    max_trades_per_day : int
        Maximum number of journal entries per calendar day.  ``0``
        disables the check.
    """

    daily_loss_limit: float = 0.0
    max_trades_per_day: int = 0


@dataclass
class BacktestSessionConfig:
    """Parameters of a simulated backtest session.

    Attributes
    ----------
    balance : float
        Starting balance of the session.
    risk_percent : float
        Percentage of current equity risked on every simulated trade.
    reward_risk : float
        Fixed reward:risk multiple applied to winning trades.
    asset : str
        Label of the instrument being replayed.
    strategy_id : int
        Strategy the session belongs to.  ``0`` means no strategy is
        selected and the simulator refuses to record outcomes.
    style : str
        Free-form trading style tag (``scalping``, ``swing`` ...).
    """

    balance: float = 10_000.0
    risk_percent: float = 1.0
    reward_risk: float = 2.0
    asset: str = ""
    strategy_id: int = 0
    style: str = ""


@dataclass
class Config:
    """Root configuration for the journal tools.

    Attributes
    ----------
    journal_path : str
        JSON backup file holding trades, strategies and settings.
    timezone : str
        IANA timezone used to decide which trades belong to "today".
    report_dir : str
        Output directory for generated reports.
    settings : Settings
        Daily loss and trade-count limits.
    backtest : BacktestSessionConfig
        Backtest simulator parameters.
    """

    journal_path: str = "journal.json"
    timezone: str = "UTC"
    report_dir: str = "results"
    settings: Settings = field(default_factory=Settings)
    backtest: BacktestSessionConfig = field(default_factory=BacktestSessionConfig)


def _merge_dict(defaults: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge two dictionaries.

    The values in `override` take precedence over those in `defaults`.
    This helper is used when loading YAML into nested dataclasses.
    """
    result: Dict[str, Any] = defaults.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_dict(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: str) -> Config:
    """Load a configuration file from the given YAML path.

    Parameters
    ----------
    path : str
        Path to the YAML file.

    Returns
    -------
    Config
        A populated configuration object.  Missing fields are filled with
        the defaults defined in the dataclasses.

    Raises
    ------
    FileNotFoundError
        If `path` does not exist.
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")
    with file_path.open("r", encoding="utf-8") as fh:
        raw: Dict[str, Any] = yaml.safe_load(fh) or {}

    defaults: Dict[str, Any] = {
        'journal_path': "journal.json",
        'timezone': "UTC",
        'report_dir': "results",
        'settings': {
            'daily_loss_limit': 0.0,
            'max_trades_per_day': 0,
        },
        'backtest': {
            'balance': 10_000.0,
            'risk_percent': 1.0,
            'reward_risk': 2.0,
            'asset': "",
            'strategy_id': 0,
            'style': "",
        },
    }

    merged = _merge_dict(defaults, raw)

    settings_raw = merged['settings']
    settings = Settings(
        daily_loss_limit=float(settings_raw.get('daily_loss_limit') or 0.0),
        max_trades_per_day=int(settings_raw.get('max_trades_per_day') or 0),
    )
    bt_raw = merged['backtest']
    backtest = BacktestSessionConfig(
        balance=float(bt_raw.get('balance', 10_000.0)),
        risk_percent=float(bt_raw.get('risk_percent', 1.0)),
        reward_risk=float(bt_raw.get('reward_risk', 2.0)),
        asset=str(bt_raw.get('asset') or ""),
        strategy_id=int(bt_raw.get('strategy_id') or 0),
        style=str(bt_raw.get('style') or ""),
    )

    return Config(
        journal_path=str(merged.get('journal_path', "journal.json")),
        timezone=str(merged.get('timezone', "UTC")),
        report_dir=str(merged.get('report_dir', "results")),
        settings=settings,
        backtest=backtest,
    )
