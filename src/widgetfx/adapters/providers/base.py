"""
Base Provider Interface for Exchange Rate Providers

This module defines the abstract base class for all rate providers and the
single HTTP helper they share, so every provider fails the same way: any
network error, timeout, non-200 status or undecodable body becomes a
ProviderUnavailableError.

Files that USE this module:
- widgetfx.adapters.providers.exchangerate_host (primary + historical provider)
- widgetfx.adapters.providers.open_er (secondary provider)
- widgetfx.application.rates_service (ProviderChain walks RateProvider instances)
- tests.test_providers (unit tests)

Files that this module USES:
- widgetfx.domain.errors (ProviderUnavailableError)
- widgetfx.domain.models (RateTable)
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional, Sequence

import requests

from widgetfx.domain.errors import ProviderUnavailableError
from widgetfx.domain.models import RateTable
from widgetfx.shared.validators import validate_currency_code

log = logging.getLogger(__name__)


class RateProvider(ABC):
    name: str = "provider"

    @abstractmethod
    def fetch_rates(self, base: str, symbols: Sequence[str]) -> RateTable:
        """Return the latest rates for `base`, restricted to `symbols`."""
        raise NotImplementedError


def get_json(
    provider: str,
    url: str,
    timeout: int,
    params: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """
    GET a JSON object from a provider endpoint.

    Args:
        provider: Provider name used in log lines and error messages
        url: Endpoint URL
        timeout: HTTP timeout in seconds
        params: Optional query parameters

    Returns:
        Decoded JSON object

    Raises:
        ProviderUnavailableError: On network error, timeout, non-200 status,
            invalid JSON or a non-object body
    """
    try:
        resp = requests.get(url, params=params, timeout=timeout)
    except requests.exceptions.Timeout as e:
        log.warning("%s timeout after %d seconds, will trigger fallback", provider, timeout)
        raise ProviderUnavailableError(f"{provider} timeout after {timeout}s") from e
    except requests.exceptions.RequestException as e:
        log.warning("%s request failed (network/connection error), will trigger fallback: %s", provider, e)
        raise ProviderUnavailableError(f"{provider} request failed: {e}") from e

    if resp.status_code != 200:
        log.warning("%s returned HTTP %d, will trigger fallback", provider, resp.status_code)
        raise ProviderUnavailableError(f"{provider} returned HTTP {resp.status_code}")

    try:
        data = resp.json()
    except ValueError as e:
        log.error("%s returned invalid JSON: %s", provider, e)
        raise ProviderUnavailableError(f"{provider} returned invalid JSON: {e}") from e

    if not isinstance(data, dict):
        log.error("%s returned non-object JSON: %r", provider, data)
        raise ProviderUnavailableError(f"{provider} returned non-object JSON")
    return data


def decode_rates(provider: str, raw: Any, symbols: Sequence[str]) -> Dict[str, float]:
    """
    Decode a code->rate mapping, keeping only requested, well-formed codes.

    Raises:
        ProviderUnavailableError: If raw is not a mapping or a kept value is not numeric
    """
    if not isinstance(raw, dict):
        raise ProviderUnavailableError(f"{provider} response missing 'rates' object")
    wanted = set(symbols)
    rates: Dict[str, float] = {}
    try:
        for code, value in raw.items():
            if code in wanted and validate_currency_code(code):
                rates[code] = float(value)
    except (TypeError, ValueError) as e:
        raise ProviderUnavailableError(f"{provider} schema error: {e}") from e
    return rates


def check_base(provider: str, requested: str, returned: str) -> str:
    """
    Ensure a provider answered for the base that was asked for.

    Raises:
        ProviderUnavailableError: If the response is quoted against another base
    """
    if returned != requested:
        raise ProviderUnavailableError(f"{provider} returned {returned} rates for base {requested}")
    return returned
