"""
exchangerate.host Provider for Latest Rates and Historical Series

Primary rate provider and the only historical-series provider.

Latest rates:
    GET <latest_url>?base=USD&symbols=EUR,GBP
    {"base": "USD", "date": "2025-11-09", "rates": {"EUR": 0.93, ...}}

Historical series:
    GET <timeseries_url>?base=USD&symbols=EUR&start_date=...&end_date=...
    {"success": true, "rates": {"2025-11-08": {"EUR": 0.93}, ...}}

Files that USE this module:
- widgetfx.application.rates_service (primary provider and trend source)
- widgetfx.app (wires the provider with settings)
- tests.test_providers (unit tests)

Files that this module USES:
- widgetfx.adapters.providers.base (RateProvider, get_json, decode_rates)
- widgetfx.config (settings for URLs and HTTP timeout)
"""
import logging
from datetime import date, datetime, timezone
from typing import List, Optional, Sequence

from widgetfx.adapters.providers.base import RateProvider, check_base, decode_rates, get_json
from widgetfx.config import settings
from widgetfx.domain.errors import ProviderUnavailableError
from widgetfx.domain.models import RatePoint, RateTable

log = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


def _parse_day(raw: str) -> datetime:
    """Parse a YYYY-MM-DD provider date as UTC midnight."""
    return datetime.strptime(raw, DATE_FORMAT).replace(tzinfo=timezone.utc)


class ExchangeRateHostProvider(RateProvider):
    name = "exchangerate.host"

    def __init__(
        self,
        latest_url: Optional[str] = None,
        timeseries_url: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        """
        Initialize exchangerate.host provider.

        Args:
            latest_url: Optional latest-rates endpoint (defaults to settings.latest_rates_url)
            timeseries_url: Optional series endpoint (defaults to settings.timeseries_url)
            timeout: Optional HTTP timeout in seconds (defaults to settings.http_timeout_seconds)
        """
        self.latest_url = latest_url or settings.latest_rates_url
        self.timeseries_url = timeseries_url or settings.timeseries_url
        self.timeout = timeout or settings.http_timeout_seconds

    def fetch_rates(self, base: str, symbols: Sequence[str]) -> RateTable:
        """
        Fetch latest rates for `base`.

        Raises:
            ProviderUnavailableError: On any transport or schema failure
        """
        log.info("Fetching %s rates from %s", base, self.name)
        data = get_json(
            self.name,
            self.latest_url,
            self.timeout,
            params={"base": base, "symbols": ",".join(symbols)},
        )
        if data.get("success") is False:
            raise ProviderUnavailableError(f"{self.name} reported success=false")

        try:
            as_of = _parse_day(data["date"])
            table_base = check_base(self.name, base, str(data["base"]))
        except (KeyError, TypeError, ValueError) as e:
            log.error("%s unexpected schema: %s", self.name, data)
            raise ProviderUnavailableError(f"{self.name} schema error: {e}") from e

        return RateTable(
            base=table_base,
            as_of=as_of,
            rates=decode_rates(self.name, data.get("rates"), symbols),
        )

    def fetch_timeseries(self, base: str, target: str, start: date, end: date) -> List[RatePoint]:
        """
        Fetch daily `base`->`target` rates between `start` and `end` inclusive.

        Days without a value for `target` are skipped.

        Returns:
            Points sorted ascending by date

        Raises:
            ProviderUnavailableError: On transport failure, success=false or schema mismatch
        """
        log.info("Fetching %s/%s series %s..%s from %s", base, target, start, end, self.name)
        data = get_json(
            self.name,
            self.timeseries_url,
            self.timeout,
            params={
                "base": base,
                "symbols": target,
                "start_date": start.strftime(DATE_FORMAT),
                "end_date": end.strftime(DATE_FORMAT),
            },
        )
        if data.get("success") is not True:
            log.warning("%s series reported success=%r", self.name, data.get("success"))
            raise ProviderUnavailableError(f"{self.name} series reported failure")

        rates = data.get("rates")
        if not isinstance(rates, dict):
            raise ProviderUnavailableError(f"{self.name} series missing 'rates' object")

        points = []
        try:
            for day, values in rates.items():
                if not isinstance(values, dict) or target not in values:
                    continue
                points.append(RatePoint(date=_parse_day(day), value=float(values[target])))
        except (TypeError, ValueError) as e:
            raise ProviderUnavailableError(f"{self.name} series schema error: {e}") from e

        return sorted(points, key=lambda p: p.date)
