"""Formatting utilities for bias analysis display."""

from typing import Union

from .colors import Colors
from ..engines.signals import Signal, signal_value


def signal_color(signal: Union[Signal, str]) -> str:
    """Get color for signal type."""
    value = signal_value(signal)
    if value == Signal.BULLISH.value:
        return Colors.GREEN
    elif value == Signal.BEARISH.value:
        return Colors.RED
    else:
        return Colors.YELLOW


def signal_icon(signal: Union[Signal, str]) -> str:
    """Arrow for a direction."""
    value = signal_value(signal)
    if value == Signal.BULLISH.value:
        return "↑"
    if value == Signal.BEARISH.value:
        return "↓"
    return "→"


def strength_bar(strength: float, width: int = 20) -> str:
    """Create a visual strength bar.

    Args:
        strength: Value from 0-100
        width: Bar width in characters

    Returns:
        Colored bar string
    """
    strength = max(0.0, min(100.0, strength))
    filled = int(strength / 100 * width)
    empty = width - filled

    if strength >= 70:
        color = Colors.GREEN
    elif strength >= 50:
        color = Colors.YELLOW
    else:
        color = Colors.RED

    return f"{color}{'█' * filled}{Colors.DIM}{'░' * empty}{Colors.RESET}"


def format_price(price: float) -> str:
    """Forex-friendly price: 5 decimals below 10, 3 otherwise (JPY pairs)."""
    return f"{price:,.5f}" if abs(price) < 10 else f"{price:,.3f}"
