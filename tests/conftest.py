"""Shared candle fixtures."""

from datetime import date, timedelta
from typing import List

import pytest

from market_bias.engines.candles import Candle


def _day(i: int) -> str:
    return (date(2024, 1, 1) + timedelta(days=i)).isoformat()


def _trend(count: int, start: float, step: float) -> List[Candle]:
    candles = []
    for i in range(count):
        close = start + step * i
        open_ = close - step / 2
        candles.append(
            Candle(
                timestamp=_day(i),
                open=open_,
                high=max(open_, close) + 0.002,
                low=min(open_, close) - 0.002,
                close=close,
            )
        )
    return candles


@pytest.fixture
def uptrend_candles() -> List[Candle]:
    """25 strictly rising, all-bullish daily candles."""
    return _trend(25, 1.0, 0.01)


@pytest.fixture
def downtrend_candles() -> List[Candle]:
    """25 strictly falling, all-bearish daily candles."""
    return _trend(25, 1.5, -0.01)


@pytest.fixture
def engulfing_candles() -> List[Candle]:
    """Bearish candle followed by a bullish candle that engulfs its body."""
    return [
        Candle(timestamp=_day(0), open=1.095, high=1.10, low=1.09, close=1.097),
        Candle(timestamp=_day(1), open=1.10, high=1.11, low=1.08, close=1.09),
        Candle(timestamp=_day(2), open=1.085, high=1.11, low=1.08, close=1.105),
    ]
