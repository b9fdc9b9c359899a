"""
Converter Service Tests - Foreground Refresh and Persistence

Tests drive ConverterSession with a mocked RatesGateway against a real
SnapshotStore in a temporary directory.

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- widgetfx.application.converter_service (ConverterSession)
- widgetfx.adapters.persistence (SnapshotStore, ReloadSignal)
"""
import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from widgetfx.adapters.persistence.reload_signal import ReloadSignal
from widgetfx.adapters.persistence.snapshot_store import SnapshotStore
from widgetfx.application.converter_service import ConverterSession
from widgetfx.domain.errors import DateRangeError, RatesUnavailableError
from widgetfx.domain.models import Preset, RatePoint, RateTable

NOW = datetime(2025, 11, 10, 12, 0, tzinfo=timezone.utc)
CACHED_AT = datetime(2025, 11, 9, 0, 0, tzinfo=timezone.utc)
NAMESPACE = "group.widgetfx"
SERIES = [RatePoint(NOW - timedelta(days=d), 0.9 + d / 1000) for d in (3, 2, 1)]


def _table(base="USD", **rates):
    return RateTable(base, NOW, rates or {"EUR": 0.93, "GBP": 0.81})


@pytest.fixture
def store(tmp_path):
    return SnapshotStore(tmp_path, NAMESPACE)


@pytest.fixture
def signal(tmp_path):
    return ReloadSignal(tmp_path, NAMESPACE, "WidgetFXRate")


@pytest.fixture
def gateway():
    gw = Mock()
    gw.fetch_rates.return_value = _table()
    gw.fetch_trend.return_value = list(SERIES)
    gw.get_last_provider.return_value = "exchangerate.host"
    return gw


def _session(gateway, store, signal, **kwargs):
    return ConverterSession(gateway, store, signal, clock=lambda: NOW, **kwargs)


class TestRefresh:
    def test_refresh_rates_persists(self, gateway, store, signal):
        session = _session(gateway, store, signal)

        assert session.refresh_rates() is True

        assert session.converted_value == pytest.approx(93.0)
        assert session.notice is None
        assert store.load_rates() == _table()
        snapshot = store.load_snapshot()
        assert snapshot.amount_text == "100"
        assert snapshot.rate == 0.93
        assert snapshot.timestamp == NOW
        assert signal.token() > 0

    def test_activate_runs_rates_and_trend(self, gateway, store, signal):
        session = _session(gateway, store, signal)

        asyncio.run(session.activate())

        gateway.fetch_rates.assert_called_once()
        gateway.fetch_trend.assert_called_once()
        assert session.chart_series == SERIES
        assert [p.value for p in store.load_snapshot().chart_series] == [p.value for p in SERIES]

    def test_failure_reuses_cached_rates(self, gateway, store, signal):
        store.save_rates(RateTable("USD", CACHED_AT, {"EUR": 0.9}))
        gateway.fetch_rates.side_effect = RatesUnavailableError("All providers failed")
        session = _session(gateway, store, signal)

        assert session.refresh_rates() is False

        assert "Could not refresh rates" in session.notice
        assert session.converted_value == pytest.approx(90.0)
        snapshot = store.load_snapshot()
        assert snapshot.rate == 0.9
        assert snapshot.timestamp == CACHED_AT

    def test_failure_without_matching_cache(self, gateway, store, signal):
        session = _session(gateway, store, signal)
        store.save_rates(RateTable("EUR", CACHED_AT, {"USD": 1.1}))
        gateway.fetch_rates.side_effect = RatesUnavailableError("All providers failed")

        session.refresh_rates()

        assert session.latest_rates is None
        assert session.converted_value is None
        assert session.notice is not None
        assert store.load_snapshot() is None

    def test_wrong_base_is_a_failure(self, gateway, store, signal):
        gateway.fetch_rates.return_value = RateTable("EUR", NOW, {"USD": 1.08})
        session = _session(gateway, store, signal)

        assert session.refresh_rates() is False

        assert session.converted_value is None
        assert "received EUR rates for USD" in session.notice
        assert store.load_rates() is None

    def test_wrong_base_reuses_cached_rates(self, gateway, store, signal):
        store.save_rates(RateTable("USD", CACHED_AT, {"EUR": 0.9}))
        gateway.fetch_rates.return_value = RateTable("EUR", NOW, {"USD": 1.08})
        session = _session(gateway, store, signal)

        session.refresh_rates()

        assert session.notice is not None
        assert session.converted_value == pytest.approx(90.0)
        assert store.load_rates().base == "USD"

    def test_success_clears_notice(self, gateway, store, signal):
        session = _session(gateway, store, signal)
        gateway.fetch_rates.side_effect = RatesUnavailableError("down")
        session.refresh_rates()
        gateway.fetch_rates.side_effect = None

        session.refresh_rates()

        assert session.notice is None

    def test_trend_persists_even_when_rates_fail(self, gateway, store, signal):
        store.save_rates(RateTable("USD", CACHED_AT, {"EUR": 0.9}))
        gateway.fetch_rates.side_effect = RatesUnavailableError("down")
        session = _session(gateway, store, signal)

        asyncio.run(session.activate())

        assert len(store.load_snapshot().chart_series) == len(SERIES)

    def test_trend_date_error_uses_placeholder(self, gateway, store, signal):
        gateway.fetch_trend.side_effect = DateRangeError("bad window")
        session = _session(gateway, store, signal, trend_days=5)
        session.refresh_rates()

        series = session.refresh_trend()

        assert len(series) == 5
        assert all(p.value > 0.01 for p in series)

    def test_trend_seeded_with_current_rate(self, gateway, store, signal):
        session = _session(gateway, store, signal)
        session.refresh_rates()

        session.refresh_trend()

        gateway.fetch_trend.assert_called_with("USD", "EUR", 7, seed=0.93)


class TestRestore:
    def test_restores_persisted_snapshot(self, gateway, store, signal):
        first = _session(gateway, store, signal)
        first.update_amount("250")
        first.refresh_rates()

        second = _session(gateway, store, signal)

        assert second.amount_text == "250"
        assert second.converted_value == pytest.approx(250 * 0.93)
        assert second.latest_rates == _table()


class TestUserActions:
    def test_update_amount(self, gateway, store, signal):
        session = _session(gateway, store, signal)
        session.refresh_rates()

        assert session.update_amount("1,5") == pytest.approx(1.5 * 0.93)
        assert session.amount_text == "1.5"
        assert store.load_snapshot().amount_text == "1.5"

    def test_update_amount_capped(self, gateway, store, signal):
        session = _session(gateway, store, signal)

        session.update_amount("12345678901234")

        assert session.amount_text == "123456789"

    def test_update_amount_without_rates(self, gateway, store, signal):
        session = _session(gateway, store, signal)

        assert session.update_amount("5") is None
        assert store.load_snapshot() is None

    def test_swap_currencies(self, gateway, store, signal):
        gateway.fetch_rates.return_value = RateTable("EUR", NOW, {"USD": 1.08})
        session = _session(gateway, store, signal)

        asyncio.run(session.swap_currencies())

        assert (session.base_currency, session.target_currency) == ("EUR", "USD")
        gateway.fetch_rates.assert_called_once_with("EUR", session.symbols)
        assert session.converted_value == pytest.approx(108.0)

    def test_select_base_unchanged(self, gateway, store, signal):
        session = _session(gateway, store, signal)

        assert asyncio.run(session.select_base("usd")) is False
        gateway.fetch_rates.assert_not_called()

    def test_select_base_invalid(self, gateway, store, signal):
        session = _session(gateway, store, signal)

        with pytest.raises(ValueError):
            asyncio.run(session.select_base("US"))

    def test_select_target(self, gateway, store, signal):
        session = _session(gateway, store, signal)
        session.refresh_rates()
        gateway.fetch_rates.reset_mock()

        assert asyncio.run(session.select_target("GBP")) is True

        assert session.converted_value == pytest.approx(81.0)
        gateway.fetch_rates.assert_not_called()
        assert gateway.fetch_trend.call_args[0][:2] == ("USD", "GBP")
        assert store.load_snapshot().target_currency == "GBP"

    def test_select_target_outside_catalog(self, gateway, store, signal):
        gateway.fetch_rates.return_value = _table(EUR=0.93, MXN=18.5)
        session = _session(gateway, store, signal)
        assert "MXN" not in session.symbols

        asyncio.run(session.select_target("mxn"))

        assert "MXN" in session.symbols
        assert "MXN" in gateway.fetch_rates.call_args[0][1]
        assert session.converted_value == pytest.approx(1850.0)

    def test_update_presets(self, gateway, store, signal):
        session = _session(gateway, store, signal)

        kept = session.update_presets([
            Preset(title="10", amount=10.0),
            Preset(title="0", amount=0.0),
            Preset(title="-5", amount=-5.0),
        ])

        assert [p.title for p in kept] == ["10"]
        assert [p.title for p in store.load_presets()] == ["10"]
        assert signal.token() > 0

    def test_update_presets_empty_uses_defaults(self, gateway, store, signal):
        session = _session(gateway, store, signal)

        kept = session.update_presets([Preset(title="0", amount=0.0)])

        assert [p.title for p in kept] == ["25", "50", "100"]
