"""
Shared indicator math: SMA, EMA and RSI over a candle sequence.

Index alignment:
    sma  -> one value per candle; indexes before the first full window hold 0.0
    ema  -> element 0 is the seed for candle index ``period - 1``
    rsi  -> one value per candle; the first ``period`` values are 50.0
"""

from typing import List, Sequence

from .candles import Candle

RSI_NEUTRAL = 50.0
RSI_MAX = 100.0


def _check_period(period: int) -> None:
    if period < 1:
        raise ValueError(f"period must be >= 1, got {period}")


def sma(candles: Sequence[Candle], period: int) -> List[float]:
    """Calculate Simple Moving Average of closes, aligned to candle indexes."""
    _check_period(period)

    result = [0.0] * len(candles)
    if len(candles) < period:
        return result

    window_sum = sum(c.close for c in candles[:period])
    result[period - 1] = window_sum / period
    for i in range(period, len(candles)):
        window_sum += candles[i].close - candles[i - period].close
        result[i] = window_sum / period
    return result


def ema(candles: Sequence[Candle], period: int) -> List[float]:
    """
    Calculate Exponential Moving Average of closes.

    Seeded with the SMA of the first ``period`` closes. The returned list has
    ``len(candles) - period + 1`` values (empty when there is not enough data),
    so ``ema(...)[-1]`` always corresponds to the latest candle.
    """
    _check_period(period)
    if len(candles) < period:
        return []

    multiplier = 2 / (period + 1)
    values = [sum(c.close for c in candles[:period]) / period]

    for candle in candles[period:]:
        values.append((candle.close - values[-1]) * multiplier + values[-1])

    return values


def rsi(candles: Sequence[Candle], period: int = 14) -> List[float]:
    """
    Calculate RSI with a simple trailing average of gains and losses.

    Returns one value per candle. Bars without a full window of deltas are
    reported as neutral (50). A window with no losses reads 100.
    """
    _check_period(period)
    if not candles:
        return []

    gains: List[float] = []
    losses: List[float] = []
    for i in range(1, len(candles)):
        change = candles[i].close - candles[i - 1].close
        gains.append(change if change > 0 else 0.0)
        losses.append(-change if change < 0 else 0.0)

    values = [RSI_NEUTRAL]
    for i in range(len(gains)):
        if i < period - 1:
            values.append(RSI_NEUTRAL)
            continue

        avg_gain = sum(gains[i - period + 1 : i + 1]) / period
        avg_loss = sum(losses[i - period + 1 : i + 1]) / period

        if avg_loss == 0:
            values.append(RSI_MAX)
        else:
            rs = avg_gain / avg_loss
            values.append(RSI_MAX - (RSI_MAX / (1 + rs)))

    return values
