"""
Exchange Rate Service

Multi-currency conversion for reporting:
- Time-boxed in-memory cache keyed by "FROM-TO"
- exchangerate-api.com v4 provider (httpx)
- Reverse-rate and identity fallbacks when the provider fails

Conversion favours availability over correctness: callers always get a
number back, at worst an unconverted amount, and the degradation is logged.
"""

import asyncio
import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Protocol, Union

import httpx

from invoicely.core import settings
from invoicely.models.money import MonetaryAmount
from invoicely.services.errors import ExchangeRateProviderError

logger = logging.getLogger(__name__)

CACHE_DURATION_MS = settings.EXCHANGE_RATE_CACHE_SECONDS * 1000


def _epoch_ms() -> float:
    return time.time() * 1000


@dataclass
class ExchangeRate:
    """Cache entry for one directed currency pair."""
    from_currency: str
    to_currency: str
    rate: float
    timestamp: float  # epoch milliseconds

    @property
    def key(self) -> str:
        return f"{self.from_currency}-{self.to_currency}"

    def is_valid(self, now_ms: float, ttl_ms: float) -> bool:
        return now_ms - self.timestamp < ttl_ms

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.from_currency,
            "to": self.to_currency,
            "rate": self.rate,
            "timestamp": self.timestamp,
        }


class ExchangeRateCache:
    """
    Process-wide pair -> rate map with a fixed time-to-live.

    Entries are overwritten on refresh and only removed by clear(). A stale
    entry stays in memory but is reported as absent by get().
    """

    def __init__(
        self,
        ttl_ms: float = CACHE_DURATION_MS,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.ttl_ms = ttl_ms
        self._clock = clock or _epoch_ms
        self._entries: Dict[str, ExchangeRate] = {}

    @staticmethod
    def pair_key(from_currency: str, to_currency: str) -> str:
        return f"{from_currency}-{to_currency}"

    def now(self) -> float:
        return self._clock()

    def get(self, from_currency: str, to_currency: str) -> Optional[ExchangeRate]:
        """Return the entry only while it is younger than the TTL."""
        entry = self._entries.get(self.pair_key(from_currency, to_currency))
        if entry and entry.is_valid(self.now(), self.ttl_ms):
            return entry
        return None

    def peek(self, from_currency: str, to_currency: str) -> Optional[ExchangeRate]:
        """Return the raw entry regardless of age."""
        return self._entries.get(self.pair_key(from_currency, to_currency))

    def put(self, from_currency: str, to_currency: str, rate: float) -> ExchangeRate:
        entry = ExchangeRate(
            from_currency=from_currency,
            to_currency=to_currency,
            rate=rate,
            timestamp=self.now(),
        )
        self._entries[entry.key] = entry
        return entry

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class RateProvider(Protocol):
    async def fetch_rates(self, base: str) -> Mapping[str, Any]:
        ...


class ExchangeRateApiProvider:
    """
    exchangerate-api.com provider.

    GET {EXCHANGE_RATE_API_URL}/{BASE} -> {"base": ..., "date": ..., "rates": {CODE: rate}}
    """

    def __init__(
        self,
        base_url: str = settings.EXCHANGE_RATE_API_URL,
        timeout: float = settings.EXCHANGE_RATE_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def fetch_rates(self, base: str) -> Mapping[str, Any]:
        """
        Fetch the rate table for a base currency.

        Raises:
            ExchangeRateProviderError: on transport errors, non-2xx responses
                or a body without a "rates" object.
        """
        url = f"{self.base_url}/{base}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, headers={"Accept": "application/json"})
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            raise ExchangeRateProviderError(
                base, f"Exchange rate API error: {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ExchangeRateProviderError(base, f"Request failed: {exc}") from exc
        except ValueError as exc:
            raise ExchangeRateProviderError(base, "Response body is not JSON") from exc

        rates = data.get("rates") if isinstance(data, dict) else None
        if not isinstance(rates, dict):
            raise ExchangeRateProviderError(base, "Invalid API response structure")
        return rates


def _usable_rate(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    rate = float(value)
    if not math.isfinite(rate) or rate <= 0:
        return None
    return rate


AmountLike = Union[MonetaryAmount, Mapping[str, Any]]


class CurrencyConverter:
    """
    Single-amount and batch conversion on top of the rate cache.

    Never raises for provider problems: a failed fetch falls back to a
    valid cached reverse rate, then to the identity rate 1.
    """

    def __init__(self, cache: ExchangeRateCache, provider: RateProvider):
        self.cache = cache
        self.provider = provider

    async def get_exchange_rate(self, from_currency: str, to_currency: str) -> float:
        from_currency = from_currency.upper()
        to_currency = to_currency.upper()

        if from_currency == to_currency:
            return 1.0

        cached = self.cache.get(from_currency, to_currency)
        if cached:
            return cached.rate

        try:
            rates = await self.provider.fetch_rates(from_currency)
            rate = _usable_rate(rates.get(to_currency))
            if rate is None:
                raise ExchangeRateProviderError(
                    from_currency,
                    f"Exchange rate not found for {from_currency} to {to_currency}",
                )
            self.cache.put(from_currency, to_currency, rate)
            return rate
        except Exception as exc:
            logger.warning(
                "Failed to fetch exchange rate %s->%s: %s", from_currency, to_currency, exc
            )

        reverse = self.cache.get(to_currency, from_currency)
        if reverse:
            derived = 1 / reverse.rate
            self.cache.put(from_currency, to_currency, derived)
            logger.info(
                "Derived %s->%s rate %.6f from cached reverse rate", from_currency, to_currency, derived
            )
            return derived

        logger.warning("Using fallback rate of 1 for %s to %s", from_currency, to_currency)
        return 1.0

    async def convert_currency(self, amount: float, from_currency: str, to_currency: str) -> float:
        if from_currency.upper() == to_currency.upper():
            return amount
        rate = await self.get_exchange_rate(from_currency, to_currency)
        return amount * rate

    async def convert_multiple_currencies(
        self,
        amounts: Iterable[AmountLike],
        target_currency: str,
    ) -> float:
        """Convert every (amount, currency) pair concurrently and sum the results."""
        pairs = [_as_pair(item) for item in amounts]
        if not pairs:
            return 0.0
        conversions = await asyncio.gather(
            *(self.convert_currency(amount, currency, target_currency) for amount, currency in pairs)
        )
        return sum(conversions, 0.0)

    def clear_exchange_rate_cache(self) -> None:
        self.cache.clear()


def _as_pair(item: AmountLike):
    if isinstance(item, MonetaryAmount):
        return item.amount, item.currency
    return float(item["amount"]), str(item["currency"])
