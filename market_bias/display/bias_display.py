"""
Terminal rendering for market structure and prediction results.
"""

from datetime import datetime
from typing import Optional, Sequence

from .colors import Colors
from .formatters import format_price, signal_color, signal_icon, strength_bar
from ..engines.candles import Candle
from ..engines.market_structure import MarketStructureResult
from ..engines.prediction import PredictionResult


def print_header(symbol: str, interval: str, candles: Sequence[Candle]) -> None:
    """Print analysis header."""
    print()
    print(f"{Colors.BOLD}{'═' * 72}{Colors.RESET}")
    print(f"{Colors.BOLD}{Colors.CYAN}  MARKET BIAS ANALYSIS: {symbol}{Colors.RESET}")
    print(f"{Colors.BOLD}{'═' * 72}{Colors.RESET}")

    if candles:
        first, last = candles[0], candles[-1]
        change_pct = (last.close - first.close) / first.close * 100 if first.close else 0.0
        change_color = Colors.GREEN if change_pct >= 0 else Colors.RED
        print(f"  Last: {Colors.BOLD}{format_price(last.close)}{Colors.RESET}  |  "
              f"{interval} x {len(candles)}: {change_color}{change_pct:+.2f}%{Colors.RESET}  |  "
              f"{first.timestamp} → {last.timestamp}")
    else:
        print(f"  {Colors.DIM}No candles{Colors.RESET}")
    print(f"  {Colors.DIM}Generated {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}{Colors.RESET}")
    print(f"{Colors.DIM}{'─' * 72}{Colors.RESET}")


def print_section(title: str, emoji: str = ""):
    """Print section header."""
    print()
    print(f"{Colors.BOLD}{Colors.BLUE}{emoji} {title}{Colors.RESET}")
    print(f"{Colors.DIM}{'─' * 40}{Colors.RESET}")


def print_market_structure(result: MarketStructureResult, max_gaps: int = 5) -> None:
    """
    Print bias verdict, swings, liquidity levels and the latest active FVGs.
    """
    bias = result.bias
    color = signal_color(bias.direction)

    print_section("MARKET BIAS", "🧭")
    print(f"  {Colors.BOLD}Bias:{Colors.RESET} {color}{signal_icon(bias.direction)} "
          f"{bias.direction.value.upper()}{Colors.RESET}")
    print(f"  {Colors.BOLD}Confidence:{Colors.RESET} {color}{bias.confidence:.0f}%{Colors.RESET} "
          f"{strength_bar(bias.confidence)}")
    print(f"  {Colors.DIM}{bias.reason}{Colors.RESET}")

    print_section("STRUCTURE", "📐")
    if result.swing_high:
        print(f"  Swing High: {Colors.RED}{format_price(result.swing_high.price)}{Colors.RESET} "
              f"{Colors.DIM}@ {result.swing_high.timestamp}{Colors.RESET}")
    else:
        print(f"  Swing High: {Colors.DIM}None{Colors.RESET}")
    if result.swing_low:
        print(f"  Swing Low:  {Colors.GREEN}{format_price(result.swing_low.price)}{Colors.RESET} "
              f"{Colors.DIM}@ {result.swing_low.timestamp}{Colors.RESET}")
    else:
        print(f"  Swing Low:  {Colors.DIM}None{Colors.RESET}")

    if result.erl_levels or result.irl_levels:
        print(f"\n  {Colors.BOLD}Liquidity:{Colors.RESET}")
        for level in result.erl_levels + result.irl_levels:
            side_color = Colors.GREEN if level.side.value == "buy" else Colors.RED
            print(f"    {level.kind.value} {side_color}{level.side.value:<4}{Colors.RESET} "
                  f"{format_price(level.price)}")

    active = result.active_fvgs
    filled = len(result.fvgs) - len(active)
    print(f"\n  {Colors.BOLD}Fair Value Gaps:{Colors.RESET} {len(active)} active, {filled} filled")
    for i, fvg in enumerate(active[-max_gaps:], 1):
        fvg_color = signal_color(fvg.direction)
        print(f"    {i}. {fvg_color}{fvg.direction.value.capitalize()} FVG{Colors.RESET}: "
              f"{format_price(fvg.start)} - {format_price(fvg.end)} "
              f"{Colors.DIM}@ {fvg.created_at}{Colors.RESET}")


def print_prediction(prediction: Optional[PredictionResult]) -> None:
    """Print the next-day prediction with its reasoning trail."""
    if prediction is None:
        return

    color = signal_color(prediction.prediction)
    print_section("NEXT-DAY PREDICTION", "🔮")
    print(f"  {Colors.BOLD}Prediction:{Colors.RESET} {color}{signal_icon(prediction.prediction)} "
          f"{prediction.prediction.value.upper()}{Colors.RESET} "
          f"({prediction.confidence:.0f}%) {strength_bar(prediction.confidence)}")

    for timeframe, trend in prediction.timeframe_analysis.items():
        trend_color = signal_color(trend.trend)
        print(f"  {timeframe:<6} trend: {trend_color}{trend.trend.value:<8}{Colors.RESET} "
              f"strength {trend.strength * 100:.0f}%")

    if prediction.patterns:
        print(f"\n  {Colors.BOLD}Patterns:{Colors.RESET}")
        for pattern in prediction.patterns:
            p_color = Colors.GREEN if pattern.score > 0 else Colors.RED if pattern.score < 0 else Colors.YELLOW
            print(f"    {p_color}{pattern.label}{Colors.RESET} ({pattern.score:+.2f}) "
                  f"{Colors.DIM}{pattern.description}{Colors.RESET}")

    print(f"\n  {Colors.BOLD}Reasoning:{Colors.RESET}")
    for line in prediction.reasoning:
        print(f"    • {line}")
