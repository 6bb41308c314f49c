"""Display utilities for bias analysis output."""

from .colors import Colors, strip_colors
from .formatters import format_price, signal_color, signal_icon, strength_bar
from .bias_display import (
    print_header,
    print_market_structure,
    print_prediction,
    print_section,
)

__all__ = [
    # Colors
    "Colors",
    "strip_colors",
    # Formatters
    "format_price",
    "signal_color",
    "signal_icon",
    "strength_bar",
    # Bias display
    "print_header",
    "print_section",
    "print_market_structure",
    "print_prediction",
]
