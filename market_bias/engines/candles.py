"""
Candle Model

OHLC(V) candle record plus parsing helpers for the JSON shapes produced by
market data providers. Analysis functions treat a candle list as read-only
and assume it is already in chronological order.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

_TIMESTAMP_KEYS = ("datetime", "timestamp", "time", "date")


@dataclass(frozen=True)
class Candle:
    """OHLCV candle."""

    timestamp: str  # ISO or exchange-local string
    open: float
    high: float
    low: float
    close: float
    volume: Optional[float] = None

    @property
    def body(self) -> float:
        return abs(self.close - self.open)

    @property
    def range(self) -> float:
        return self.high - self.low

    @property
    def upper_shadow(self) -> float:
        return self.high - max(self.open, self.close)

    @property
    def lower_shadow(self) -> float:
        return min(self.open, self.close) - self.low

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open

    @property
    def midpoint(self) -> float:
        """Midpoint of the open/close body."""
        return (self.open + self.close) / 2

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Candle":
        """
        Build a Candle from a provider payload.

        Accepts numeric or numeric-string prices (Twelve Data returns strings)
        and any of the usual timestamp keys.

        Raises:
            ValueError: If a timestamp or price field is missing or not numeric
        """
        timestamp = None
        for key in _TIMESTAMP_KEYS:
            if data.get(key) is not None:
                timestamp = str(data[key])
                break
        if timestamp is None:
            raise ValueError(f"Candle record has no timestamp field: {dict(data)!r}")

        prices = {}
        for key in ("open", "high", "low", "close"):
            if data.get(key) is None:
                raise ValueError(f"Candle record at {timestamp} is missing '{key}'")
            try:
                prices[key] = float(data[key])
            except (TypeError, ValueError) as e:
                raise ValueError(
                    f"Candle record at {timestamp} has non-numeric '{key}': {data[key]!r}"
                ) from e

        volume = data.get("volume")
        try:
            volume = float(volume) if volume not in (None, "") else None
        except (TypeError, ValueError) as e:
            raise ValueError(f"Candle record at {timestamp} has non-numeric volume") from e

        return cls(timestamp=timestamp, volume=volume, **prices)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the provider-style wire dictionary."""
        payload: Dict[str, Any] = {
            "datetime": self.timestamp,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
        }
        if self.volume is not None:
            payload["volume"] = self.volume
        return payload


def sort_candles(candles: Iterable[Candle]) -> List[Candle]:
    """Return a new list ordered by timestamp (stable for equal timestamps)."""
    return sorted(candles, key=lambda c: c.timestamp)


def parse_candles(records: Iterable[Mapping[str, Any]]) -> List[Candle]:
    """Parse raw records and return them in chronological order."""
    return sort_candles(Candle.from_dict(r) for r in records)


def load_candles(path: Union[str, Path]) -> List[Candle]:
    """
    Load candles from a JSON file.

    The file may hold a bare list of candle objects or an object wrapping the
    list under ``values`` (Twelve Data shape) or ``data``.
    """
    with open(path, encoding="utf-8") as handle:
        payload = json.load(handle)

    if isinstance(payload, dict):
        for key in ("values", "data", "candles"):
            if isinstance(payload.get(key), list):
                payload = payload[key]
                break
        else:
            raise ValueError(f"{path}: expected a candle list under 'values', 'data' or 'candles'")

    if not isinstance(payload, list):
        raise ValueError(f"{path}: expected a JSON list of candles")

    return parse_candles(payload)
