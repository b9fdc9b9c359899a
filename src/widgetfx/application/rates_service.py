"""
Rates Service - Rate Source Gateway

This module contains the rate-fetch pipeline: an ordered provider chain for
latest rates and a historical-series fetch whose terminal fallback is a
synthetic placeholder series.

Files that USE this module:
- widgetfx.application.converter_service (RatesGateway for refreshes)
- widgetfx.app (wires the gateway with concrete providers)
- tests.test_rates_service (unit tests)

Files that this module USES:
- widgetfx.adapters.providers.base (RateProvider interface)
- widgetfx.domain.models (RateTable, RatePoint, placeholder_series)
- widgetfx.domain.errors (ProviderUnavailableError, RatesUnavailableError, DateRangeError)
"""
from __future__ import annotations  # Enable postponed evaluation of annotations

import logging
import random
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional, Protocol, Sequence, Tuple

from widgetfx.adapters.providers.base import RateProvider
from widgetfx.domain.errors import DateRangeError, ProviderUnavailableError, RatesUnavailableError
from widgetfx.domain.models import RatePoint, RateTable, placeholder_series, utcnow

log = logging.getLogger(__name__)


class SeriesProvider(Protocol):
    """Protocol for historical series providers."""
    name: str

    def fetch_timeseries(self, base: str, target: str, start: date, end: date) -> List[RatePoint]:
        ...


class ProviderChain:
    """
    Provider chain that tries providers strictly in order.
    The first success wins; the chain remembers which provider answered.
    """

    def __init__(self, providers: Sequence[RateProvider]):
        """
        Initialize provider chain.

        Args:
            providers: Providers in priority order (primary first)
        """
        if not providers:
            raise ValueError("ProviderChain needs at least one provider")
        self.providers = list(providers)
        self.last_used_provider: Optional[str] = None

    def fetch_rates(self, base: str, symbols: Sequence[str]) -> RateTable:
        """
        Fetch rates from the first provider that succeeds.

        Returns:
            RateTable restricted to `symbols`

        Raises:
            RatesUnavailableError: If every provider fails
        """
        failures = []
        for provider in self.providers:
            try:
                table = provider.fetch_rates(base, symbols)
            except ProviderUnavailableError as e:
                log.warning("Provider %s failed, trying next: %s", provider.name, e)
                failures.append(f"{provider.name}={e}")
                continue
            self.last_used_provider = provider.name
            log.info("Fetched %d %s rates from %s", len(table.rates), base, provider.name)
            return table.restricted_to(symbols)

        log.error("All rate providers failed: %s", "; ".join(failures))
        raise RatesUnavailableError("All providers failed: " + "; ".join(failures))

    def get_last_provider(self) -> Optional[str]:
        return self.last_used_provider


def trend_window(days: int, now: Optional[datetime] = None) -> Tuple[date, date]:
    """
    Compute a window of `days` calendar days ending the day before `now`.

    The current day is excluded so a partial day never enters the series.

    Raises:
        DateRangeError: If days < 1 or the arithmetic leaves the calendar
    """
    if days < 1:
        raise DateRangeError(f"Trend window needs at least one day, got {days}")
    today = (now or utcnow()).date()
    try:
        end = today - timedelta(days=1)
        start = end - timedelta(days=days - 1)
    except OverflowError as e:
        raise DateRangeError(f"Cannot compute {days}-day window before {today}") from e
    return start, end


class RatesGateway:
    """
    High-level gateway for current rates and historical trends.
    Callers only ever see RatesUnavailableError or DateRangeError.
    """

    def __init__(
        self,
        chain: ProviderChain,
        series_provider: SeriesProvider,
        clock: Callable[[], datetime] = utcnow,
        rng: Optional[random.Random] = None,
    ):
        self.chain = chain
        self.series_provider = series_provider
        self.clock = clock
        self.rng = rng

    def fetch_rates(self, base: str, symbols: Sequence[str]) -> RateTable:
        """
        Fetch latest rates through the provider chain.

        Raises:
            RatesUnavailableError: If every provider fails
        """
        return self.chain.fetch_rates(base, symbols)

    def fetch_trend(
        self,
        base: str,
        target: str,
        days: int,
        seed: Optional[float] = None,
    ) -> List[RatePoint]:
        """
        Fetch a daily `base`->`target` series, or a placeholder when unavailable.

        Args:
            base: Base currency code
            target: Target currency code
            days: Number of calendar days in the window
            seed: Last known rate for the placeholder series (defaults to 1.0)

        Returns:
            Points sorted ascending by date

        Raises:
            DateRangeError: If the date window cannot be computed
        """
        now = self.clock()
        start, end = trend_window(days, now)
        try:
            points = self.series_provider.fetch_timeseries(base, target, start, end)
            if points:
                return points
            log.warning("%s returned an empty %s/%s series", self.series_provider.name, base, target)
        except ProviderUnavailableError as e:
            log.warning("Trend fetch failed, using placeholder series: %s", e)
        return placeholder_series(seed or 1.0, days, now=now, rng=self.rng)

    def get_last_provider(self) -> Optional[str]:
        return self.chain.get_last_provider()
