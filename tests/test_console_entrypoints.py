"""Verify the CLI dispatcher: help, price and klines commands, error exit codes."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from price_aggregator.cli.main import main
from price_aggregator.providers.aggregator import PriceAggregator
from price_aggregator.providers.base import PriceSource
from price_aggregator.providers.errors import NoCredentialsError
from tests.fakes.providers import (
    FAKE_TIMESTAMP,
    FakePriceProvider,
    FakePriceProviderAlwaysFail,
    make_candles,
)

CREATE = "price_aggregator.providers.defaults.create_aggregator"


def test_cli_main_help_exits_zero():
    with pytest.raises(SystemExit) as exc_info:
        main(["--help"])
    assert exc_info.value.code == 0


def test_cli_without_command_prints_help(capsys):
    assert main([]) == 0
    assert "price-aggregator" in capsys.readouterr().out


def test_price_command_prints_quote(capsys):
    agg = PriceAggregator(FakePriceProvider("binance", {"BTCUSDT": "50000.5"}), FakePriceProvider("cmc"))
    with patch(CREATE, return_value=agg):
        assert main(["price", "BTCUSDT"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out == {
        "symbol": "BTCUSDT",
        "price": "50000.5",
        "source": "primary",
        "timestamp": FAKE_TIMESTAMP,
    }


def test_klines_command_prints_count_and_last(capsys):
    candles = make_candles(FAKE_TIMESTAMP, 2)
    primary = FakePriceProvider("binance", candles=candles)
    agg = PriceAggregator(primary, FakePriceProvider("cmc"))
    with patch(CREATE, return_value=agg):
        assert main(["klines", "BTCUSDT", "--interval", "1h", "--hours", "2"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "Fetched 2 candles"
    assert json.loads(lines[1])["open_time"] == candles[-1].open_time
    assert primary.kline_calls[0][1] == "1h"


def test_provider_error_exits_one(capsys):
    agg = PriceAggregator(
        FakePriceProviderAlwaysFail("binance"),
        FakePriceProviderAlwaysFail("cmc", error=NoCredentialsError("No CoinMarketCap API keys available")),
    )
    with patch(CREATE, return_value=agg):
        assert main(["price", "BTCUSDT"]) == 1
    assert "NoCredentialsError" in capsys.readouterr().err


def test_secondary_quote_source_in_output(capsys):
    agg = PriceAggregator(
        FakePriceProviderAlwaysFail("binance"),
        FakePriceProvider("cmc", source=PriceSource.SECONDARY),
    )
    with patch(CREATE, return_value=agg):
        assert main(["price", "ETHUSDT"]) == 0
    assert json.loads(capsys.readouterr().out)["source"] == "secondary"
