"""Shared direction enums and helpers to avoid stringly-typed verdicts."""

from enum import Enum
from typing import Union


class Signal(Enum):
    """Directional verdict shared by every analysis module."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"

    def __str__(self) -> str:
        return self.value


class LiquidityKind(Enum):
    """Internal vs external range liquidity."""

    IRL = "IRL"
    ERL = "ERL"


class LiquiditySide(Enum):
    """Which side's resting orders a level represents."""

    BUY = "buy"
    SELL = "sell"


class SwingKind(Enum):
    """Swing point type."""

    HIGH = "high"
    LOW = "low"


SignalLike = Union[Signal, str]


def signal_value(signal: SignalLike) -> str:
    """Normalize signal-like values to their string representation."""
    return signal.value if isinstance(signal, Signal) else str(signal)


def coerce_signal(signal: SignalLike, default: Signal = Signal.NEUTRAL) -> Signal:
    """Convert a string to Signal, falling back to default for unknown values."""
    if isinstance(signal, Signal):
        return signal
    try:
        return Signal(str(signal).lower())
    except ValueError:
        return default
