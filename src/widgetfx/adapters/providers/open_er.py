"""
open.er-api.com Provider for Latest Rates

Secondary rate provider. The endpoint is path-parameterized by base and
always returns every currency it knows, so the result is filtered down to
the requested symbols.

    GET <open_er_url>/USD
    {"result": "success", "base_code": "USD",
     "time_last_update_unix": 1731110401, "rates": {"EUR": 0.93, ...}}

Files that USE this module:
- widgetfx.application.rates_service (fallback provider in the chain)
- widgetfx.app (wires the provider with settings)
- tests.test_providers (unit tests)

Files that this module USES:
- widgetfx.adapters.providers.base (RateProvider, get_json, decode_rates)
- widgetfx.config (settings for URL and HTTP timeout)
"""
import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from widgetfx.adapters.providers.base import RateProvider, check_base, decode_rates, get_json
from widgetfx.config import settings
from widgetfx.domain.errors import ProviderUnavailableError
from widgetfx.domain.models import RateTable

log = logging.getLogger(__name__)


class OpenERProvider(RateProvider):
    name = "open.er-api"

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[int] = None):
        self.url = (base_url or settings.open_er_url).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds

    def fetch_rates(self, base: str, symbols: Sequence[str]) -> RateTable:
        """
        Fetch latest rates for `base`, keeping only `symbols`.

        Raises:
            ProviderUnavailableError: On any transport or schema failure
        """
        log.info("Fetching %s rates from %s", base, self.name)
        data = get_json(self.name, f"{self.url}/{base}", self.timeout)
        if data.get("result", "success") != "success":
            raise ProviderUnavailableError(f"{self.name} result={data.get('result')!r}")

        try:
            table_base = check_base(self.name, base, str(data["base_code"]))
            as_of = datetime.fromtimestamp(float(data["time_last_update_unix"]), tz=timezone.utc)
        except (KeyError, TypeError, ValueError, OverflowError, OSError) as e:
            log.error("%s unexpected schema: %s", self.name, data)
            raise ProviderUnavailableError(f"{self.name} schema error: {e}") from e

        return RateTable(
            base=table_base,
            as_of=as_of,
            rates=decode_rates(self.name, data.get("rates"), symbols),
        )
