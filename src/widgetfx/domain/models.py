"""
Domain Models - Pure Business Objects

This module contains the records shared between the foreground converter
session and the widget:
- Rate tables fetched from providers
- Historical rate points (real or placeholder)
- The persisted conversion snapshot
- User-defined widget amount presets

Every record serializes to field-tagged JSON so that a reader built from a
slightly different revision can still decode what a writer stored.

Files that USE this module:
- widgetfx.domain.conversion (builds ConversionSnapshot values)
- widgetfx.adapters.providers.* (providers return RateTable / RatePoint)
- widgetfx.adapters.persistence.snapshot_store (encodes and decodes records)
- widgetfx.application.* (all services pass these records around)
- tests.* (tests build records for fixtures)

Files that this module USES:
- None (pure domain layer, no external dependencies)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations

import random  # Jitter for placeholder series
import uuid  # Preset identifiers
from dataclasses import dataclass, field  # Immutable record types
from datetime import datetime, timedelta, timezone  # Timestamps and day offsets
from typing import Any, Dict, List, Optional, Sequence, Tuple

# Codes shown on the widget conversion list
PRIMARY_CODES: Tuple[str, ...] = (
    "USD", "EUR", "GBP", "CHF", "JPY", "CNY", "AUD", "CAD", "AED", "KZT", "TRY",
)

# Codes requested from providers by the converter session
EXTENDED_CODES: Tuple[str, ...] = (
    "USD", "EUR", "GBP", "CHF", "JPY", "CNY", "AUD", "CAD",
    "AED", "KZT", "TRY", "SEK", "NOK", "PLN", "UAH", "BRL", "INR", "SGD",
)

PLACEHOLDER_JITTER = 0.004
PLACEHOLDER_FLOOR = 0.01


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(raw: Any) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    Accepts both "...Z" and "+00:00" suffixes; naive values are taken as UTC.

    Raises:
        ValueError: If raw is not a parsable ISO-8601 string
    """
    if not isinstance(raw, str):
        raise ValueError(f"Expected ISO-8601 string, got {type(raw).__name__}")
    ts = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


@dataclass(frozen=True)
class RatePoint:
    """A single (date, value) point of a historical series."""
    date: datetime
    value: float

    def to_json(self) -> dict:
        return {"date": self.date.isoformat(), "value": self.value}

    @staticmethod
    def from_json(data: dict) -> "RatePoint":
        return RatePoint(date=parse_timestamp(data["date"]), value=float(data["value"]))


@dataclass(frozen=True)
class RateTable:
    """
    Latest rates for one base currency.

    Attributes:
        base: Base currency code (e.g. "USD")
        as_of: When the provider last updated these rates (UTC)
        rates: Mapping of currency code to units of that currency per 1 base
    """
    base: str
    as_of: datetime
    rates: Dict[str, float] = field(default_factory=dict)

    def rate(self, code: str) -> Optional[float]:
        return self.rates.get(code)

    def restricted_to(self, symbols: Sequence[str]) -> "RateTable":
        """Return a copy keeping only the requested symbols."""
        wanted = set(symbols)
        return RateTable(
            base=self.base,
            as_of=self.as_of,
            rates={code: value for code, value in self.rates.items() if code in wanted},
        )

    def to_json(self) -> dict:
        return {
            "base": self.base,
            "as_of": self.as_of.isoformat(),
            "rates": dict(self.rates),
        }

    @staticmethod
    def from_json(data: dict) -> "RateTable":
        return RateTable(
            base=str(data["base"]),
            as_of=parse_timestamp(data["as_of"]),
            rates={str(k): float(v) for k, v in data["rates"].items()},
        )


@dataclass(frozen=True)
class ConversionSnapshot:
    """
    The last computed conversion, shared by the converter session and the widget.

    Attributes:
        base_currency: Currency the amount is denominated in
        target_currency: Currency the amount is converted into
        rate: Units of target per 1 base used for this conversion
        amount: Parsed numeric amount
        amount_text: Canonical text form of amount (what the keypad edits)
        converted_amount: amount * rate at the time of write
        timestamp: When the conversion (or the rate it reused) was produced
        chart_series: Ascending historical points, possibly empty
    """
    base_currency: str
    target_currency: str
    rate: float
    amount: float
    amount_text: str
    converted_amount: float
    timestamp: datetime
    chart_series: Tuple[RatePoint, ...] = ()

    def to_json(self) -> dict:
        return {
            "base_currency": self.base_currency,
            "target_currency": self.target_currency,
            "rate": self.rate,
            "amount": self.amount,
            "amount_text": self.amount_text,
            "converted_amount": self.converted_amount,
            "timestamp": self.timestamp.isoformat(),
            "chart_series": [point.to_json() for point in self.chart_series],
        }

    @staticmethod
    def from_json(data: dict) -> "ConversionSnapshot":
        series = tuple(RatePoint.from_json(p) for p in data.get("chart_series") or [])
        return ConversionSnapshot(
            base_currency=str(data["base_currency"]),
            target_currency=str(data["target_currency"]),
            rate=float(data["rate"]),
            amount=float(data["amount"]),
            amount_text=str(data["amount_text"]),
            converted_amount=float(data["converted_amount"]),
            timestamp=parse_timestamp(data["timestamp"]),
            chart_series=tuple(sorted(series, key=lambda p: p.date)),
        )


@dataclass(frozen=True)
class Preset:
    """A quick-amount shortcut shown on the widget."""
    title: str
    amount: float
    identifier: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_json(self) -> dict:
        return {"identifier": self.identifier, "title": self.title, "amount": self.amount}

    @staticmethod
    def from_json(data: dict) -> "Preset":
        return Preset(
            identifier=str(data.get("identifier") or uuid.uuid4().hex),
            title=str(data["title"]),
            amount=float(data["amount"]),
        )


def default_presets() -> List[Preset]:
    return [
        Preset(title="25", amount=25.0),
        Preset(title="50", amount=50.0),
        Preset(title="100", amount=100.0),
    ]


def placeholder_series(
    seed: float,
    days: int,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> List[RatePoint]:
    """
    Build a synthetic series of `days` points ending at `now`.

    Each value is `seed` jittered by at most ±0.4%, floored at 0.01 so the
    series stays positive even for a zero or negative seed. Values equal the
    floor only when `seed` is at most about 0.01004; any larger seed yields
    values strictly above it. This never raises.

    Args:
        seed: Last known rate (1.0 when nothing is known)
        days: Number of daily points to produce
        now: End of the series (defaults to current UTC time)
        rng: Random source (tests pass a seeded one)

    Returns:
        Points sorted ascending by date
    """
    now = now or utcnow()
    rng = rng or random
    points = []
    for offset in range(max(days, 0)):
        variance = rng.uniform(-PLACEHOLDER_JITTER, PLACEHOLDER_JITTER)
        points.append(
            RatePoint(
                date=now - timedelta(days=offset),
                value=max(PLACEHOLDER_FLOOR, seed * (1 + variance)),
            )
        )
    return sorted(points, key=lambda p: p.date)


def placeholder_snapshot(now: Optional[datetime] = None) -> ConversionSnapshot:
    """Snapshot shown before anything has ever been persisted."""
    now = now or utcnow()
    return ConversionSnapshot(
        base_currency="USD",
        target_currency="EUR",
        rate=0.93,
        amount=100.0,
        amount_text="100",
        converted_amount=93.0,
        timestamp=now,
        chart_series=tuple(placeholder_series(0.94, 7, now=now)),
    )
