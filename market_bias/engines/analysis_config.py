"""
Analysis Configuration Module
Centralizes all magic numbers and thresholds for the bias analysis engines.

Every engine receives its thresholds explicitly, so tests and callers can
override any constant without touching module globals. All config objects are
frozen; derive variants with ``dataclasses.replace``.
"""

from dataclasses import dataclass, field

# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

EPSILON = 1e-9


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """
    Safely divide two numbers, returning default if denominator is near zero.

    Args:
        numerator: The numerator
        denominator: The denominator
        default: Value to return if division is unsafe (default: 0.0)

    Returns:
        numerator / denominator if safe, otherwise default
    """
    return numerator / denominator if abs(denominator) > EPSILON else default


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


@dataclass(frozen=True)
class BiasConfig:
    """Market bias engine thresholds."""

    # Trailing window used for momentum counting and FVG touches
    recent_candle_count: int = 10
    # Last N window candles that must all close in the reaction direction
    reversal_check_count: int = 3

    # Position within the swing range (0 = swing low, 1 = swing high)
    liquidity_upper_threshold: float = 0.7
    liquidity_lower_threshold: float = 0.3
    # Position used when the swing range has zero width
    degenerate_range_position: float = 0.5

    # Momentum fallback: dominant side must exceed the other by this factor
    momentum_multiplier: float = 1.5

    # Confidence values (0-100)
    base_confidence: float = 50.0
    reaction_confidence: float = 70.0
    targeting_confidence: float = 70.0
    momentum_confidence: float = 60.0
    extra_fvg_confidence: float = 10.0
    max_confidence: float = 95.0
    insufficient_confidence: float = 0.0

    def __post_init__(self):
        """Validate window sizes and bounds."""
        if self.recent_candle_count < 1:
            raise ValueError("recent_candle_count must be >= 1")
        if self.reversal_check_count < 1:
            raise ValueError("reversal_check_count must be >= 1")
        if self.liquidity_lower_threshold > self.liquidity_upper_threshold:
            raise ValueError("liquidity_lower_threshold must not exceed liquidity_upper_threshold")


@dataclass(frozen=True)
class StructureThresholds:
    """Swing detection and liquidity level parameters."""

    swing_lookback: int = 5  # Bars on each side for a swing
    erl_offset: float = 0.001  # 0.1% beyond the swing extremes

    def __post_init__(self):
        if self.swing_lookback < 1:
            raise ValueError("swing_lookback must be >= 1")


@dataclass(frozen=True)
class TrendThresholds:
    """Trend strength analyzer parameters."""

    min_candles: int = 20
    sma_fast_period: int = 20
    sma_slow_period: int = 50
    ema_fast_period: int = 12
    ema_slow_period: int = 26
    rsi_period: int = 14

    # RSI score steps (stacking)
    rsi_neutral: float = 50.0
    rsi_strong: float = 60.0
    rsi_extreme: float = 70.0

    # Recent candle momentum term
    momentum_window: int = 5

    # Maximum attainable raw score, used for normalization
    score_divisor: float = 7.0
    # |normalized score| above this is a directional trend
    trend_threshold: float = 0.3


@dataclass(frozen=True)
class PredictionThresholds:
    """Dual-timeframe prediction aggregator parameters."""

    min_daily_candles: int = 20
    decision_threshold: float = 1.0  # |total score| above this is directional
    daily_trend_weight: float = 2.0
    intraday_trend_weight: float = 1.0

    base_confidence: float = 50.0
    confidence_per_point: float = 15.0
    neutral_penalty_per_point: float = 20.0
    max_confidence: float = 95.0

    rsi_overbought: float = 70.0
    rsi_oversold: float = 30.0


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Master configuration containing all threshold categories.

    Usage:
        config = AnalysisConfig()
        # Use defaults

        # Or customize:
        config = AnalysisConfig(
            bias=BiasConfig(momentum_multiplier=2.0),
            structure=StructureThresholds(swing_lookback=3),
        )
    """

    bias: BiasConfig = field(default_factory=BiasConfig)
    structure: StructureThresholds = field(default_factory=StructureThresholds)
    trend: TrendThresholds = field(default_factory=TrendThresholds)
    prediction: PredictionThresholds = field(default_factory=PredictionThresholds)


# Global default config instance
DEFAULT_CONFIG = AnalysisConfig()


def get_config() -> AnalysisConfig:
    """Get the default configuration."""
    return DEFAULT_CONFIG


def create_aggressive_config() -> AnalysisConfig:
    """
    Create a more aggressive configuration with lower thresholds.
    Reacts to shorter windows and weaker momentum imbalances.
    """
    return AnalysisConfig(
        bias=BiasConfig(
            recent_candle_count=6,
            reversal_check_count=2,
            liquidity_upper_threshold=0.6,
            liquidity_lower_threshold=0.4,
            momentum_multiplier=1.2,
        ),
        structure=StructureThresholds(swing_lookback=3),
    )


def create_conservative_config() -> AnalysisConfig:
    """
    Create a more conservative configuration with higher thresholds.
    Requires stronger confirmation before leaving neutral.
    """
    return AnalysisConfig(
        bias=BiasConfig(
            recent_candle_count=15,
            reversal_check_count=4,
            liquidity_upper_threshold=0.8,
            liquidity_lower_threshold=0.2,
            momentum_multiplier=2.0,
            max_confidence=90.0,
        ),
        structure=StructureThresholds(swing_lookback=7),
        trend=TrendThresholds(trend_threshold=0.4),
    )
