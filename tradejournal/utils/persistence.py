"""
Journal persistence utilities.

The journal is kept as a single JSON backup document holding the
trades, the strategies, the daily limits and any backtest records.
This module provides simple JSON-based load/save functions for that
document and converts it to and from a `JournalStore`.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from ..config.schema import Settings
from ..journal.codec import (
    backtest_trade_from_dict,
    backtest_trade_to_dict,
    settings_from_dict,
    settings_to_dict,
    strategy_from_dict,
    strategy_to_dict,
    trade_from_dict,
    trade_to_dict,
)
from ..journal.store import JournalStore
from .timeutils import utc_now


logger = logging.getLogger(__name__)

BACKUP_VERSION = "1.0"


def load_state(path: str) -> Optional[Dict[str, Any]]:
    """Load a JSON document.

    Parameters
    ----------
    path : str
        Path to the JSON file.

    Returns
    -------
    dict or None
        The parsed document if the file exists, otherwise `None`.
    """
    file_path = Path(path)
    if not file_path.exists():
        return None
    with file_path.open("r", encoding="utf-8") as fh:
        return json.load(fh)


def save_state(path: str, state: Dict[str, Any]) -> None:
    """Write a JSON document to disk, creating parent directories."""
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with file_path.open("w", encoding="utf-8") as fh:
        json.dump(state, fh, ensure_ascii=False, indent=2)


def store_from_document(document: Dict[str, Any], timezone: str = "UTC",
                        settings: Optional[Settings] = None) -> JournalStore:
    """Build a store from a backup document.

    `settings` is used when the document carries none of its own.

    Raises
    ------
    ValueError
        If the document lacks the ``journalData`` or ``strategies`` lists.
    """
    if not isinstance(document.get('journalData'), list) or not isinstance(document.get('strategies'), list):
        raise ValueError("Invalid journal backup: 'journalData' and 'strategies' lists are required")
    if document.get('settings') is not None:
        settings = settings_from_dict(document['settings'])
    return JournalStore(
        trades=[trade_from_dict(raw) for raw in document['journalData']],
        strategies=[strategy_from_dict(raw) for raw in document['strategies']],
        settings=settings,
        timezone=timezone,
        backtest_trades=[backtest_trade_from_dict(raw) for raw in document.get('backtestData') or []],
    )


def store_to_document(store: JournalStore) -> Dict[str, Any]:
    return {
        'version': BACKUP_VERSION,
        'exportDate': utc_now().isoformat(),
        'journalData': [trade_to_dict(t) for t in store.trades],
        'strategies': [strategy_to_dict(s) for s in store.strategies],
        'settings': settings_to_dict(store.settings),
        'backtestData': [backtest_trade_to_dict(t) for t in store.backtest_trades],
    }


def load_journal(path: str, timezone: str = "UTC",
                 settings: Optional[Settings] = None) -> JournalStore:
    """Load a journal backup file into a `JournalStore`.

    Raises
    ------
    FileNotFoundError
        If `path` does not exist.
    """
    document = load_state(path)
    if document is None:
        raise FileNotFoundError(f"Journal file not found: {path}")
    store = store_from_document(document, timezone=timezone, settings=settings)
    logger.info("Loaded %d trades and %d strategies from %s",
                len(store.trades), len(store.strategies), path)
    return store


def save_journal(path: str, store: JournalStore) -> None:
    save_state(path, store_to_document(store))
    logger.info("Saved %d trades to %s", len(store.trades), path)
