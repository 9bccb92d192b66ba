import os
import sys
import io
import json
import tempfile
from contextlib import redirect_stdout

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from tradejournal.app import main
from tradejournal.config.schema import Settings
from tradejournal.journal.models import Strategy, TradeResult
from tradejournal.journal.store import JournalStore
from tradejournal.risk.sizing import calculate_position_size
from tradejournal.utils.persistence import save_journal
from tradejournal.utils.timeutils import utc_now

import unittest


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = self._tmp.name
        self.missing_config = os.path.join(self.tmp, "config.yaml")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _run(self, *argv) -> dict:
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            main(['--config', self.missing_config, *argv])
        return json.loads(buffer.getvalue())

    def _journal(self) -> str:
        store = JournalStore(strategies=[Strategy(1, "Breakout")],
                             settings=Settings(daily_loss_limit=200, max_trades_per_day=3))
        calc = calculate_position_size(10_000, 1, entry=1.1, sl=1.095, tp=1.11, asset="EURUSD")
        now = utc_now()
        closed = store.save_calculation(calc, 1, checklist_complete=True, now=now).trade
        store.set_result(closed.id, TradeResult.TP_HIT, now=now)
        store.save_calculation(calc, 1, checklist_complete=False, now=now)
        path = os.path.join(self.tmp, "journal.json")
        save_journal(path, store)
        return path

    def test_size(self) -> None:
        payload = self._run('size', '--balance', '10000', '--risk', '1',
                            '--entry', '1.1', '--sl', '1.095', '--asset', 'EURUSD')
        self.assertAlmostEqual(payload['lot_size'], 0.2)
        self.assertAlmostEqual(payload['position_size'], 0.2)
        self.assertEqual(payload['direction'], 'LONG')
        self.assertEqual(payload['warnings'], [])

    def test_backtest(self) -> None:
        payload = self._run('backtest', 'win', 'loss', '--strategy-id', '1')
        self.assertEqual([t['result'] for t in payload['trades']], ['WIN', 'LOSS'])
        self.assertAlmostEqual(payload['trades'][0]['pnl'], 200.0)
        self.assertEqual(payload['summary']['total_trades'], 2)

    def test_backtest_without_strategy_records_nothing(self) -> None:
        payload = self._run('backtest', 'WIN')
        self.assertEqual(payload['trades'], [])
        self.assertEqual(payload['summary']['total_trades'], 0)

    def test_stats(self) -> None:
        payload = self._run('stats', '--journal', self._journal())
        self.assertEqual(payload['total_trades'], 1)
        self.assertAlmostEqual(payload['net_pnl'], 200.0)
        self.assertEqual(payload['best_strategy'], 'Breakout')

    def test_today(self) -> None:
        payload = self._run('today', '--journal', self._journal())
        self.assertEqual(payload['trades_today'], 2)
        self.assertAlmostEqual(payload['daily_pnl'], 200.0)
        self.assertTrue(payload['guardrails']['allowed'])
        self.assertEqual(payload['discipline']['score'], 100)
        self.assertIn('Green Day', payload['discipline']['badges'])
        self.assertEqual(payload['exposure']['open_positions'], 1)

    def test_report(self) -> None:
        out_dir = os.path.join(self.tmp, "results")
        payload = self._run('report', '--journal', self._journal(), '--out', out_dir)
        self.assertTrue(os.path.exists(payload['summary']))
        self.assertTrue(os.path.exists(payload['trades']))


if __name__ == '__main__':
    unittest.main()
