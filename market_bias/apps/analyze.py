#!/usr/bin/env python3
"""
Market Bias Analysis - Entry Point.
Fetches (or loads) candles for a symbol, runs the market structure engine and
optionally the next-day prediction, then prints a report or JSON.
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from dataclasses import dataclass
from typing import List, Optional, Sequence

from market_bias.display import Colors, print_header, print_market_structure, print_prediction, strip_colors
from market_bias.engines.analysis_config import (
    AnalysisConfig,
    create_aggressive_config,
    create_conservative_config,
    get_config,
)
from market_bias.engines.candles import Candle, load_candles
from market_bias.engines.data_fetcher import TwelveDataFetcher, fetch_candles_with_fallback
from market_bias.engines.market_structure import MarketStructureResult, analyze_market_structure
from market_bias.engines.prediction import PredictionResult, predict_next_day
from market_bias.logging_config import configure_default_logging, log_exception

logger = logging.getLogger(__name__)

PROFILES = {
    "default": get_config,
    "aggressive": create_aggressive_config,
    "conservative": create_conservative_config,
}


@dataclass
class AnalysisReport:
    """Everything the CLI renders."""

    symbol: str
    interval: str
    candles: List[Candle]
    structure: MarketStructureResult
    prediction: Optional[PredictionResult] = None

    def to_dict(self) -> dict:
        payload = {
            "symbol": self.symbol,
            "interval": self.interval,
            "candleCount": len(self.candles),
            "marketStructure": self.structure.to_dict(),
        }
        if self.prediction is not None:
            payload["prediction"] = self.prediction.to_dict()
        return payload


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="market-bias",
        description="Market structure bias analysis (FVGs, swings, liquidity, prediction)",
    )
    parser.add_argument(
        "symbol", nargs="?", default="EUR/USD", help="Instrument symbol (default: EUR/USD)"
    )
    parser.add_argument(
        "--interval",
        "-i",
        default="1day",
        choices=TwelveDataFetcher.VALID_INTERVALS,
        help="Candle interval for the structure analysis (default: 1day)",
    )
    parser.add_argument(
        "--output-size", type=int, default=None, help="Number of candles to request"
    )
    parser.add_argument(
        "--file", "-f", default=None, help="Load candles from a JSON file instead of the API"
    )
    parser.add_argument(
        "--four-hour-file",
        default=None,
        help="JSON file with 4h candles for --predict (used together with --file)",
    )
    parser.add_argument(
        "--predict", "-p", action="store_true", help="Also run the daily + 4h next-day prediction"
    )
    parser.add_argument(
        "--synthetic", action="store_true", help="Skip the API and use synthetic candles"
    )
    parser.add_argument(
        "--profile",
        choices=sorted(PROFILES),
        default="default",
        help="Threshold profile (default: default)",
    )
    parser.add_argument("--json", action="store_true", help="Print JSON instead of a report")
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colors")
    parser.add_argument(
        "--log-level", default=None, help="Override LOG_LEVEL (DEBUG, INFO, WARNING, ...)"
    )
    return parser


async def _fetch(symbol: str, interval: str, output_size: Optional[int], synthetic: bool) -> List[Candle]:
    return await fetch_candles_with_fallback(
        symbol, interval, output_size=output_size, use_synthetic=synthetic
    )


async def run_analysis(
    symbol: str,
    interval: str = "1day",
    config: Optional[AnalysisConfig] = None,
    predict: bool = False,
    candle_file: Optional[str] = None,
    four_hour_file: Optional[str] = None,
    output_size: Optional[int] = None,
    synthetic: bool = False,
) -> AnalysisReport:
    """Gather candles and run every requested analysis."""
    cfg = config or get_config()

    if predict and candle_file and interval != "1day":
        raise ValueError(
            f"Prediction needs daily candles; --file holds {interval} candles (use --interval 1day)"
        )

    if candle_file:
        candles = load_candles(candle_file)
        logger.info(f"Loaded {len(candles)} candles from {candle_file}")
    else:
        candles = await _fetch(symbol, interval, output_size, synthetic)

    structure = analyze_market_structure(candles, cfg)

    prediction = None
    if predict:
        if candle_file:
            daily = candles
            four_hour = load_candles(four_hour_file) if four_hour_file else []
        else:
            daily_task = (
                _fetch(symbol, "1day", output_size, synthetic)
                if interval != "1day"
                else asyncio.sleep(0, result=candles)
            )
            daily, four_hour = await asyncio.gather(
                daily_task, _fetch(symbol, "4h", None, synthetic)
            )
        prediction = predict_next_day(daily, four_hour, cfg.prediction, cfg.trend)

    return AnalysisReport(
        symbol=symbol,
        interval=interval,
        candles=list(candles),
        structure=structure,
        prediction=prediction,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.predict and args.file and args.interval != "1day":
        parser.error("--predict with --file expects daily candles; pass --interval 1day")

    if args.log_level:
        os.environ["LOG_LEVEL"] = args.log_level.upper()
    configure_default_logging()

    if args.no_color or args.json or os.getenv("NO_COLOR"):
        strip_colors()

    try:
        report = asyncio.run(
            run_analysis(
                args.symbol,
                interval=args.interval,
                config=PROFILES[args.profile](),
                predict=args.predict,
                candle_file=args.file,
                four_hour_file=args.four_hour_file,
                output_size=args.output_size,
                synthetic=args.synthetic,
            )
        )
    except KeyboardInterrupt:
        print(f"\n{Colors.YELLOW}Analysis cancelled.{Colors.RESET}")
        return 0
    except (OSError, ValueError) as e:
        log_exception(logger, e, "Analysis failed", level=logging.DEBUG)
        print(f"\n{Colors.RED}Error: {e}{Colors.RESET}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print_header(report.symbol, report.interval, report.candles)
        print_market_structure(report.structure)
        print_prediction(report.prediction)
        print()

    return 0


if __name__ == "__main__":
    sys.exit(main())
