"""Market Bias Analyzer.

Public symbols are exposed lazily so importing `market_bias` does not eagerly
import optional network dependencies (`aiohttp` via the data fetcher).
"""

from __future__ import annotations

import importlib
from typing import Dict, Tuple


__all__ = [
    # Candles
    "Candle",
    "load_candles",
    "parse_candles",
    "sort_candles",
    # Signals
    "Signal",
    "LiquidityKind",
    "LiquiditySide",
    "SwingKind",
    "coerce_signal",
    "signal_value",
    # Config
    "AnalysisConfig",
    "BiasConfig",
    "StructureThresholds",
    "TrendThresholds",
    "PredictionThresholds",
    "DEFAULT_CONFIG",
    "get_config",
    "create_aggressive_config",
    "create_conservative_config",
    "safe_divide",
    # Indicators
    "sma",
    "ema",
    "rsi",
    # Patterns
    "CandlePattern",
    "PatternMatch",
    "detect_patterns",
    "detect_bullish_engulfing",
    "detect_bearish_engulfing",
    "detect_hammer",
    "detect_shooting_star",
    "detect_doji",
    "detect_morning_star",
    "detect_evening_star",
    # Trend strength
    "TrendStrength",
    "analyze_trend_strength",
    # Market structure
    "FairValueGap",
    "SwingPoint",
    "LiquidityLevel",
    "MarketBias",
    "MarketStructureResult",
    "detect_fvgs",
    "detect_swing_points",
    "identify_liquidity_levels",
    "determine_market_bias",
    "analyze_market_structure",
    # Prediction
    "PredictionResult",
    "predict_next_day",
    "predict_from_last_candle",
    "last_candle_confidence",
    # Data fetcher
    "TwelveDataFetcher",
    "TwelveDataAPIError",
    "TwelveDataRateLimitError",
    "TwelveDataTimeoutError",
    "TwelveDataConnectionError",
    "RequestConfig",
    "DEFAULT_REQUEST_CONFIG",
    "fetch_candles_with_fallback",
    "generate_synthetic_candles",
]


_EXPORT_TO_SOURCE: Dict[str, Tuple[str, str]] = {}


def _register(module: str, names: list[str]) -> None:
    for name in names:
        _EXPORT_TO_SOURCE[name] = (module, name)


_register(".engines.candles", ["Candle", "load_candles", "parse_candles", "sort_candles"])

_register(
    ".engines.signals",
    ["Signal", "LiquidityKind", "LiquiditySide", "SwingKind", "coerce_signal", "signal_value"],
)

_register(
    ".engines.analysis_config",
    [
        "AnalysisConfig",
        "BiasConfig",
        "StructureThresholds",
        "TrendThresholds",
        "PredictionThresholds",
        "DEFAULT_CONFIG",
        "get_config",
        "create_aggressive_config",
        "create_conservative_config",
        "safe_divide",
    ],
)

_register(".engines.calculations", ["sma", "ema", "rsi"])

_register(
    ".engines.patterns",
    [
        "CandlePattern",
        "PatternMatch",
        "detect_patterns",
        "detect_bullish_engulfing",
        "detect_bearish_engulfing",
        "detect_hammer",
        "detect_shooting_star",
        "detect_doji",
        "detect_morning_star",
        "detect_evening_star",
    ],
)

_register(".engines.trend_strength", ["TrendStrength", "analyze_trend_strength"])

_register(
    ".engines.market_structure",
    [
        "FairValueGap",
        "SwingPoint",
        "LiquidityLevel",
        "MarketBias",
        "MarketStructureResult",
        "detect_fvgs",
        "detect_swing_points",
        "identify_liquidity_levels",
        "determine_market_bias",
        "analyze_market_structure",
    ],
)

_register(
    ".engines.prediction",
    ["PredictionResult", "predict_next_day", "predict_from_last_candle", "last_candle_confidence"],
)

_register(
    ".engines.data_fetcher",
    [
        "TwelveDataFetcher",
        "TwelveDataAPIError",
        "TwelveDataRateLimitError",
        "TwelveDataTimeoutError",
        "TwelveDataConnectionError",
        "RequestConfig",
        "DEFAULT_REQUEST_CONFIG",
        "fetch_candles_with_fallback",
        "generate_synthetic_candles",
    ],
)


_missing_exports = [name for name in __all__ if name not in _EXPORT_TO_SOURCE]
if _missing_exports:
    raise RuntimeError(f"Lazy export map incomplete: {_missing_exports}")


def __getattr__(name: str):
    if name not in _EXPORT_TO_SOURCE:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_name, symbol_name = _EXPORT_TO_SOURCE[name]
    module = importlib.import_module(module_name, __name__)
    value = getattr(module, symbol_name)

    # Cache resolved symbol on module globals for subsequent fast access.
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(set(globals()) | set(__all__))
