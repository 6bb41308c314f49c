"""
Tests for the command-line entry point.
"""

import json

import pytest

from market_bias.apps.analyze import build_parser, main, run_analysis
from market_bias.engines.signals import Signal


@pytest.fixture(autouse=True)
def keep_test_logging(monkeypatch):
    """main() must not replace pytest's root handlers."""
    monkeypatch.setattr("market_bias.apps.analyze.configure_default_logging", lambda: None)


@pytest.fixture
def candle_file(tmp_path, uptrend_candles):
    path = tmp_path / "daily.json"
    path.write_text(json.dumps({"values": [c.to_dict() for c in uptrend_candles]}))
    return path


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.symbol == "EUR/USD"
        assert args.interval == "1day"
        assert args.profile == "default"
        assert not args.predict

    def test_rejects_unknown_interval(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["EURUSD", "--interval", "3h"])


class TestRunAnalysis:
    @pytest.mark.asyncio
    async def test_from_file_with_prediction(self, candle_file):
        report = await run_analysis(
            "EUR/USD", candle_file=str(candle_file), four_hour_file=str(candle_file), predict=True
        )
        assert len(report.candles) == 25
        assert report.prediction.prediction is Signal.BULLISH
        assert report.to_dict()["candleCount"] == 25

    @pytest.mark.asyncio
    async def test_intraday_file_cannot_feed_prediction(self, candle_file):
        with pytest.raises(ValueError, match="daily"):
            await run_analysis("EUR/USD", interval="4h", candle_file=str(candle_file), predict=True)

    @pytest.mark.asyncio
    async def test_intraday_file_without_prediction(self, candle_file):
        report = await run_analysis("EUR/USD", interval="4h", candle_file=str(candle_file))
        assert report.prediction is None

    @pytest.mark.asyncio
    async def test_synthetic(self):
        report = await run_analysis("USD/JPY", synthetic=True, predict=True)
        assert len(report.candles) == 31
        assert report.prediction is not None
        assert 0 <= report.structure.bias.confidence <= 95


class TestMain:
    def test_file_prediction_requires_daily_interval(self, candle_file):
        with pytest.raises(SystemExit) as exc_info:
            main(["--file", str(candle_file), "--predict", "--interval", "4h"])
        assert exc_info.value.code == 2

    def test_json_output(self, candle_file, capsys):
        assert main(["EUR/USD", "--file", str(candle_file), "--json"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["symbol"] == "EUR/USD"
        assert payload["marketStructure"]["bias"]["bias"] in {"bullish", "bearish", "neutral"}
        assert "prediction" not in payload

    def test_report_output(self, candle_file, capsys):
        assert main(["EUR/USD", "--file", str(candle_file), "--predict", "--no-color"]) == 0
        out = capsys.readouterr().out
        assert "MARKET BIAS ANALYSIS: EUR/USD" in out
        assert "NEXT-DAY PREDICTION" in out

    def test_missing_file(self, tmp_path, capsys):
        assert main(["--file", str(tmp_path / "missing.json"), "--json"]) == 1
        assert "Error" in capsys.readouterr().err
