"""Tests for the distribute command line."""

import json
from decimal import Decimal
from io import StringIO
from unittest.mock import MagicMock, patch

import pytest
from rich.console import Console

import cli
from distributer.exceptions import PriceSourceError
from distributer.snapshots import current_snapshot_name


@pytest.fixture
def workspace(tmp_path):
    (tmp_path / "ranking.json").write_text(json.dumps(["AAA", "BBB"]))
    (tmp_path / "start.json").write_text(
        json.dumps([{"ticket": "AAA", "amount": 100}, {"ticket": "OLD", "amount": 7}])
    )
    return tmp_path


@pytest.fixture
def prices():
    source = MagicMock()
    source.fetch.return_value = {
        "AAA": Decimal("10"),
        "BBB": Decimal("20"),
        "OLD": Decimal("1"),
    }
    with patch("cli.BrapiPriceSource", return_value=source):
        yield source


@pytest.fixture
def output():
    buf = StringIO()
    with patch("cli.console", Console(file=buf, width=200)):
        yield buf


def _args(workspace, *extra):
    return [
        "993",
        "--file", str(workspace / "start.json"),
        "--ranking", str(workspace / "ranking.json"),
        "--output-dir", str(workspace),
        *extra,
    ]


class TestParser:
    def test_amount_required(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.build_parser().parse_args([])
        assert exc_info.value.code == 2

    def test_invalid_amount(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["lots"])

    def test_negative_amount(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["-5"])

    def test_defaults(self):
        args = cli.build_parser().parse_args(["1500.50"])
        assert args.amount == Decimal("1500.50")
        assert args.file is None
        assert args.ranking == "ranking.json"
        assert not args.skip_missing_prices
        assert not args.dry_run


class TestMain:
    def test_distributes_and_saves(self, workspace, prices, output):
        assert cli.main(_args(workspace)) == 0

        prices.fetch.assert_called_once_with(["AAA", "BBB", "OLD"])
        saved = json.loads((workspace / current_snapshot_name()).read_text())
        # total 2000, target 1000 per ticker
        assert saved == [
            {"ticket": "AAA", "amount": 100},
            {"ticket": "BBB", "amount": 50},
        ]
        text = output.getvalue()
        assert "Rebalanced portfolio" in text
        assert "OLD" in text

    def test_dry_run_does_not_save(self, workspace, prices, output):
        assert cli.main(_args(workspace, "--dry-run")) == 0
        assert not (workspace / current_snapshot_name()).exists()

    def test_missing_price_aborts(self, workspace, prices, output):
        prices.fetch.return_value = {"AAA": Decimal("10"), "OLD": Decimal("1")}

        assert cli.main(_args(workspace)) == 1
        assert "BBB does not have a price" in output.getvalue()
        assert not (workspace / current_snapshot_name()).exists()

    def test_skip_missing_prices(self, workspace, prices, output):
        prices.fetch.return_value = {"AAA": Decimal("10"), "OLD": Decimal("1")}

        assert cli.main(_args(workspace, "--skip-missing-prices")) == 0
        saved = json.loads((workspace / current_snapshot_name()).read_text())
        assert saved == [{"ticket": "AAA", "amount": 100}]

    def test_price_source_failure(self, workspace, prices, output):
        prices.fetch.side_effect = PriceSourceError("Failed to fetch prices")

        assert cli.main(_args(workspace)) == 1
        assert "Failed to fetch prices" in output.getvalue()

    def test_malformed_snapshot(self, workspace, prices, output):
        (workspace / "start.json").write_text("not json")

        assert cli.main(_args(workspace)) == 1
        assert "not valid JSON" in output.getvalue()
        prices.fetch.assert_not_called()

    def test_repeated_ranking_ticker(self, workspace, prices, output):
        (workspace / "ranking.json").write_text(json.dumps(["AAA", "AAA"]))

        assert cli.main(_args(workspace)) == 1
        assert "same ticker more than once" in output.getvalue()
        prices.fetch.assert_not_called()
