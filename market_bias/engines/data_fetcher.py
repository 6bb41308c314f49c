"""
Twelve Data Candle Fetcher
Fetches OHLC time series for forex pairs and other instruments, falling back
to synthetic candles when no usable API key is configured or the API fails.
"""

import asyncio
import logging
import math
import os
import random
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Dict, List, Optional

import aiohttp

from .candles import Candle, parse_candles

logger = logging.getLogger(__name__)

API_KEY_ENV = "TWELVE_API_KEY"


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================


class TwelveDataAPIError(Exception):
    """Base exception for Twelve Data API errors."""

    def __init__(self, status_code: int, message: str, response_text: str = ""):
        self.status_code = status_code
        self.message = message
        self.response_text = response_text
        super().__init__(f"Twelve Data API error {status_code}: {message}")


class TwelveDataRateLimitError(TwelveDataAPIError):
    """Raised when rate limit (HTTP 429) is hit."""

    def __init__(self, retry_after: Optional[int] = None):
        self.retry_after = retry_after
        super().__init__(429, "Rate limit exceeded", "")


class TwelveDataTimeoutError(TwelveDataAPIError):
    """Raised when request times out."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(0, f"Request timed out after {timeout}s", "")


class TwelveDataConnectionError(TwelveDataAPIError):
    """Raised when connection fails."""

    def __init__(self, original_error: Exception):
        self.original_error = original_error
        super().__init__(0, f"Connection error: {original_error}", "")


# =============================================================================
# REQUEST CONFIGURATION
# =============================================================================


@dataclass
class RequestConfig:
    """Configuration for HTTP requests."""

    timeout_total: float = 30.0  # Total request timeout in seconds
    timeout_connect: float = 10.0  # Connection timeout in seconds
    max_retries: int = 3  # Maximum number of attempts
    retry_base_delay: float = 1.0  # Base delay for exponential backoff
    retry_max_delay: float = 30.0  # Maximum delay between retries
    retry_on_status: tuple = (429, 500, 502, 503, 504)  # HTTP status codes to retry


DEFAULT_REQUEST_CONFIG = RequestConfig()


def default_output_size(interval: str) -> int:
    """Candles requested per interval: four weeks of 4h bars, otherwise ~4 months."""
    return 168 if interval == "4h" else 120


def is_placeholder_key(api_key: Optional[str]) -> bool:
    """True for missing, demo or test API keys."""
    if not api_key:
        return True
    lowered = api_key.lower()
    return "demo" in lowered or "test" in lowered


def parse_retry_after(value: Optional[str], now: Optional[datetime] = None) -> Optional[int]:
    """
    Seconds to wait from a Retry-After header.

    Accepts delta-seconds or an HTTP-date; anything unparseable reads as None
    so the caller falls back to exponential backoff.
    """
    if not value:
        return None
    value = value.strip()
    if value.isdigit():
        return int(value)

    try:
        retry_at = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if retry_at is None:
        return None
    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=timezone.utc)

    now = now or datetime.now(timezone.utc)
    return max(0, math.ceil((retry_at - now).total_seconds()))


def generate_synthetic_candles(
    symbol: str,
    count: int = 31,
    seed: Optional[int] = None,
    end_date: Optional[date] = None,
) -> List[Candle]:
    """
    Generate synthetic daily candles scattered around a base price.

    JPY pairs are centred on 110.0, everything else on 1.0, with about 1%
    variance. Wicks extend 1.5x the open-to-close move on both sides of the
    open, so they always cover the body. Timestamps are consecutive calendar
    days ending at ``end_date``.
    """
    rng = random.Random(seed)
    base_price = 110.0 if "JPY" in symbol.upper() else 1.0
    variance = base_price * 0.01
    last_day = end_date or date.today()

    candles: List[Candle] = []
    for days_back in range(count - 1, -1, -1):
        day = last_day - timedelta(days=days_back)
        open_ = base_price + (rng.random() - 0.5) * variance * 2
        change = (rng.random() - 0.5) * variance
        close = open_ + change
        high = open_ + abs(change) * 1.5
        low = open_ - abs(change) * 1.5

        candles.append(
            Candle(
                timestamp=day.isoformat(),
                open=round(open_, 5),
                high=round(high, 5),
                low=round(low, 5),
                close=round(close, 5),
            )
        )

    return candles


class TwelveDataFetcher:
    """
    Fetches OHLC time series from the Twelve Data REST API.

    Usage:
        async with TwelveDataFetcher(api_key) as fetcher:
            candles = await fetcher.get_candles("EUR/USD", "1day")
    """

    BASE_URL = "https://api.twelvedata.com"

    VALID_INTERVALS = [
        "1min",
        "5min",
        "15min",
        "30min",
        "45min",
        "1h",
        "2h",
        "4h",
        "1day",
        "1week",
        "1month",
    ]

    def __init__(
        self,
        api_key: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        request_config: Optional[RequestConfig] = None,
    ):
        self._api_key = api_key if api_key is not None else os.getenv(API_KEY_ENV, "")
        self._session = session
        self._owns_session = session is None
        self._config = request_config or DEFAULT_REQUEST_CONFIG

    async def __aenter__(self):
        if self._session is None:
            timeout = aiohttp.ClientTimeout(
                total=self._config.timeout_total, connect=self._config.timeout_connect
            )
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._owns_session and self._session:
            await self._session.close()

    def _normalize_symbol(self, symbol: str) -> str:
        """Normalize symbol format (eurusd / EUR-USD -> EUR/USD)."""
        cleaned = symbol.upper().replace("-", "/").replace("_", "/")
        if "/" not in cleaned and len(cleaned) == 6 and cleaned.isalpha():
            cleaned = f"{cleaned[:3]}/{cleaned[3:]}"
        return cleaned

    def _calculate_backoff_delay(self, attempt: int, retry_after: Optional[int] = None) -> float:
        """Calculate exponential backoff delay with jitter."""
        if retry_after is not None:
            return min(retry_after, self._config.retry_max_delay)

        delay = self._config.retry_base_delay * (2**attempt)
        jitter = random.uniform(0, 0.1 * delay)
        return min(delay + jitter, self._config.retry_max_delay)

    async def _get(self, url: str, params: Optional[Dict] = None) -> Any:
        """
        Make GET request with timeout and retry logic.

        Raises:
            TwelveDataAPIError: For non-retryable API errors or error payloads
            TwelveDataRateLimitError: When rate limit is exceeded after retries
            TwelveDataTimeoutError: When request times out after retries
            TwelveDataConnectionError: When connection fails after retries
        """
        if self._session is None:
            raise RuntimeError(
                "Session not initialized. Use 'async with TwelveDataFetcher()' "
                "or pass a session to __init__."
            )

        last_error: Optional[Exception] = None

        for attempt in range(self._config.max_retries):
            is_last = attempt >= self._config.max_retries - 1
            try:
                logger.debug(
                    "GET %s symbol=%s (attempt %d/%d)",
                    url,
                    (params or {}).get("symbol"),
                    attempt + 1,
                    self._config.max_retries,
                )
                async with self._session.get(url, params=params) as response:
                    if response.status == 429:
                        retry_after_sec = parse_retry_after(response.headers.get("Retry-After"))
                        if is_last:
                            raise TwelveDataRateLimitError(retry_after_sec)
                        delay = self._calculate_backoff_delay(attempt, retry_after_sec)
                        logger.warning(
                            f"Rate limited on {url}, attempt {attempt + 1}/{self._config.max_retries}. "
                            f"Retrying in {delay:.1f}s"
                        )
                        await asyncio.sleep(delay)
                        continue

                    if response.status in self._config.retry_on_status:
                        text = await response.text()
                        if is_last:
                            raise TwelveDataAPIError(response.status, text, text)
                        delay = self._calculate_backoff_delay(attempt)
                        logger.warning(
                            f"Retryable error {response.status} on {url}, "
                            f"attempt {attempt + 1}/{self._config.max_retries}. "
                            f"Retrying in {delay:.1f}s"
                        )
                        await asyncio.sleep(delay)
                        continue

                    if response.status != 200:
                        text = await response.text()
                        raise TwelveDataAPIError(response.status, text, text)

                    payload = await response.json()

            except asyncio.TimeoutError:
                last_error = TwelveDataTimeoutError(self._config.timeout_total)
                if is_last:
                    raise last_error
                delay = self._calculate_backoff_delay(attempt)
                logger.warning(
                    f"Timeout on {url}, attempt {attempt + 1}/{self._config.max_retries}. "
                    f"Retrying in {delay:.1f}s"
                )
                await asyncio.sleep(delay)
                continue

            except aiohttp.ClientError as e:
                last_error = TwelveDataConnectionError(e)
                if is_last:
                    raise last_error
                delay = self._calculate_backoff_delay(attempt)
                logger.warning(
                    f"Connection error on {url}: {e}, "
                    f"attempt {attempt + 1}/{self._config.max_retries}. "
                    f"Retrying in {delay:.1f}s"
                )
                await asyncio.sleep(delay)
                continue

            # Twelve Data reports most failures as HTTP 200 with an error body
            if isinstance(payload, dict) and payload.get("status") == "error":
                code = int(payload.get("code", 0) or 0)
                message = payload.get("message", "API returned an error")
                raise TwelveDataAPIError(code, message, str(payload))
            return payload

        if last_error:
            raise last_error
        raise TwelveDataAPIError(0, "Unknown error after retries", "")

    async def get_candles(
        self, symbol: str, interval: str = "1day", output_size: Optional[int] = None
    ) -> List[Candle]:
        """
        Fetch OHLC candles in chronological order.

        Args:
            symbol: Instrument (e.g., 'EUR/USD' or 'EURUSD')
            interval: Timeframe (1min ... 1month)
            output_size: Number of candles (max 5000). Defaults per interval.

        Returns:
            List of Candle objects, oldest first
        """
        if interval not in self.VALID_INTERVALS:
            raise ValueError(f"Invalid interval. Must be one of: {self.VALID_INTERVALS}")

        size = default_output_size(interval) if output_size is None else min(output_size, 5000)
        data = await self._get(
            f"{self.BASE_URL}/time_series",
            {
                "symbol": self._normalize_symbol(symbol),
                "interval": interval,
                "outputsize": size,
                "apikey": self._api_key,
            },
        )

        values = data.get("values") if isinstance(data, dict) else None
        if not values:
            return []

        try:
            return parse_candles(values)
        except ValueError as e:
            raise TwelveDataAPIError(200, f"Malformed candle payload: {e}", str(values[:1])) from e

    async def get_latest_price(self, symbol: str) -> Optional[float]:
        """Latest daily close, or None if no candles came back."""
        candles = await self.get_candles(symbol, "1day")
        return candles[-1].close if candles else None


async def fetch_candles_with_fallback(
    symbol: str,
    interval: str = "1day",
    api_key: Optional[str] = None,
    output_size: Optional[int] = None,
    use_synthetic: bool = False,
    session: Optional[aiohttp.ClientSession] = None,
    request_config: Optional[RequestConfig] = None,
) -> List[Candle]:
    """
    Fetch candles, substituting synthetic data when the live API is unusable.

    Synthetic candles are returned when ``use_synthetic`` is set, when the
    key is missing / demo / test, or when the fetch raises an API error.
    """
    key = api_key if api_key is not None else os.getenv(API_KEY_ENV, "")

    if use_synthetic or is_placeholder_key(key):
        logger.info(f"Using synthetic candles for {symbol}")
        return generate_synthetic_candles(symbol)

    try:
        async with TwelveDataFetcher(key, session=session, request_config=request_config) as fetcher:
            return await fetcher.get_candles(symbol, interval, output_size)
    except TwelveDataAPIError as e:
        logger.warning(f"Twelve Data fetch failed for {symbol} ({e}); falling back to synthetic candles")
        return generate_synthetic_candles(symbol)
