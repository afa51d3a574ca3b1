"""Integration tests for CLI."""

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from ranchhand import __version__


def run_ranchhand(args: list[str], data_dir: Path) -> subprocess.CompletedProcess:
    """Run ranchhand CLI command against a data directory."""
    env = dict(os.environ, RANCHHAND_DATA_DIR=str(data_dir))
    src_dir = Path(__file__).resolve().parent.parent / "src"
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(src_dir), env.get("PYTHONPATH")]))
    return subprocess.run(
        [sys.executable, "-m", "ranchhand.cli"] + args,
        capture_output=True,
        text=True,
        env=env,
    )


@pytest.fixture
def data_dir(temp_dir):
    return temp_dir / "data"


class TestCLIIntegration:
    """Integration tests for CLI commands."""

    def test_version(self, data_dir):
        result = run_ranchhand(["--version"], data_dir)
        assert result.returncode == 0
        assert __version__ in result.stdout

    def test_fund_starts_empty(self, data_dir):
        result = run_ranchhand(["fund", "balance"], data_dir)
        assert result.returncode == 0
        assert "$0.00" in result.stdout

    def test_deposit_and_withdraw(self, data_dir):
        result = run_ranchhand(["fund", "deposit", "20", "-d", "Sold pelts"], data_dir)
        assert result.returncode == 0
        assert "Balance: $20.00" in result.stdout

        run_ranchhand(["fund", "withdraw", "7.5"], data_dir)

        result = run_ranchhand(["fund", "balance", "--json"], data_dir)
        assert json.loads(result.stdout) == {"balance": "12.50"}

        result = run_ranchhand(["fund", "history", "--json"], data_dir)
        entries = json.loads(result.stdout)
        assert [e["type"] for e in entries] == ["withdrawal", "deposit"]
        assert entries[1]["description"] == "Sold pelts"

    def test_invalid_amount(self, data_dir):
        result = run_ranchhand(["fund", "deposit", "-5"], data_dir)
        assert result.returncode == 1
        assert "Error:" in result.stderr

    def test_guest_role_denied(self, data_dir):
        result = run_ranchhand(["--role", "guest", "fund", "deposit", "5"], data_dir)
        assert result.returncode == 1
        assert "not allowed" in result.stderr

    def test_catalog_import_defaults(self, data_dir):
        result = run_ranchhand(["catalog", "import-defaults"], data_dir)
        assert result.returncode == 0
        assert "Imported" in result.stdout

        result = run_ranchhand(["catalog", "import-defaults"], data_dir)
        assert "already has every default price" in result.stdout

    def test_orders_stats_and_list_empty(self, data_dir):
        result = run_ranchhand(["orders", "stats", "--json"], data_dir)
        assert result.returncode == 0
        assert json.loads(result.stdout)["total_outstanding"] == "0.00"

        result = run_ranchhand(["orders", "list"], data_dir)
        assert "No orders." in result.stdout

    def test_quotes_reconcile(self, data_dir):
        result = run_ranchhand(["quotes", "reconcile"], data_dir)
        assert result.returncode == 0
        assert "No stalled conversions." in result.stdout

    def test_activity(self, data_dir):
        run_ranchhand(["--actor-name", "Dutch", "fund", "deposit", "3"], data_dir)
        result = run_ranchhand(["activity"], data_dir)
        assert "Dutch: Deposited $3.00" in result.stdout

    def test_group_without_subcommand_shows_help(self, data_dir):
        result = run_ranchhand(["fund"], data_dir)
        assert result.returncode == 0
        assert "usage:" in result.stdout

    def test_logs_add_and_list(self, data_dir):
        result = run_ranchhand(
            ["logs", "add", "Sold two cows", "-a", "40", "-c", "livestock"], data_dir
        )
        assert result.returncode == 0
        assert "Logged [livestock]: Sold two cows" in result.stdout

        run_ranchhand(["logs", "add", "Mended fence"], data_dir)

        result = run_ranchhand(["logs", "list", "-c", "livestock", "--json"], data_dir)
        entries = json.loads(result.stdout)
        assert [e["description"] for e in entries] == ["Sold two cows"]
        assert entries[0]["amount"] == "40.00"
