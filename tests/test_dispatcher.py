"""Tests for validation, location fallback and failure mapping in the dispatcher."""
import logging

import pytest

from conftest import FakeGapClient, uniform_series
from core.dispatcher import (
    FETCH_FAILED_TEXT,
    MISSING_LOCATION_TEXT,
    NO_DATA_TEXT,
    NOT_CONFIGURED_TEXT,
    AdvisoryDispatcher,
    resolve_coordinates,
)
from core.errors import MissingLocationError

NAIROBI = (-1.2864, 36.8172)


@pytest.fixture
def dispatcher(fake_client):
    return AdvisoryDispatcher(fake_client)


class TestCoordinates:

    def test_latitude_out_of_range(self, dispatcher, fake_client):
        result = dispatcher.weather_forecast(95, 36.8)

        assert result.is_error
        assert "Invalid latitude" in result.text
        assert fake_client.calls == []

    def test_longitude_out_of_range(self, dispatcher, fake_client):
        result = dispatcher.weather_forecast(-1.2, 200)

        assert result.is_error
        assert "Invalid longitude" in result.text
        assert fake_client.calls == []

    def test_boundaries_are_valid(self, dispatcher):
        assert not dispatcher.weather_forecast(-90, 180).is_error
        assert not dispatcher.weather_forecast(90, -180).is_error

    def test_nan_is_rejected(self, dispatcher):
        assert dispatcher.weather_forecast(float("nan"), 10.0).is_error

    def test_missing_location_asks_for_it(self, dispatcher, fake_client):
        result = dispatcher.weather_forecast()

        assert not result.is_error
        assert result.text == MISSING_LOCATION_TEXT
        assert fake_client.calls == []

    def test_default_location_fills_in(self, dispatcher, fake_client):
        dispatcher.farming_advisory(default_location=NAIROBI)
        assert fake_client.calls[0][1:3] == NAIROBI

    def test_explicit_params_override_default(self, dispatcher, fake_client):
        dispatcher.weather_forecast(0.5, 35.0, default_location=NAIROBI)
        assert fake_client.calls[0][1:3] == (0.5, 35.0)

    def test_fallback_is_per_axis(self):
        assert resolve_coordinates(5.0, None, (1.0, 2.0)) == (5.0, 2.0)
        with pytest.raises(MissingLocationError):
            resolve_coordinates(5.0, None, (1.0, None))

    def test_coordinates_not_echoed(self, dispatcher):
        result = dispatcher.weather_forecast(*NAIROBI)
        assert "36.8172" not in result.text


class TestParameters:

    @pytest.mark.parametrize("days", [0, 15, True, "7"])
    def test_forecast_days_out_of_range(self, dispatcher, fake_client, days):
        result = dispatcher.weather_forecast(*NAIROBI, days=days)

        assert result.is_error
        assert "between 1 and 14" in result.text
        assert fake_client.calls == []

    def test_farming_days_must_be_at_least_seven(self, dispatcher):
        result = dispatcher.farming_advisory(*NAIROBI, forecast_days=5)
        assert result.is_error
        assert "between 7 and 14" in result.text

    def test_historical_days_back(self, dispatcher):
        assert dispatcher.historical_weather(*NAIROBI, days_back=91).is_error
        assert not dispatcher.historical_weather(*NAIROBI, days_back=90).is_error

    def test_unknown_crop_lists_supported(self, dispatcher, fake_client):
        result = dispatcher.planting_recommendation(*NAIROBI, crop="durian")

        assert result.is_error
        assert "Unknown crop 'durian'" in result.text
        assert "maize" in result.text
        assert fake_client.calls == []

    def test_crop_names_are_normalised(self, dispatcher):
        result = dispatcher.planting_recommendation(*NAIROBI, crop="Sweet Potato")
        assert not result.is_error
        assert "Sweet Potato" in result.text

    def test_planting_requires_crop(self, dispatcher):
        result = dispatcher.planting_recommendation(*NAIROBI)
        assert result.is_error
        assert "which crop" in result.text


class TestFetchSizes:

    def test_each_tool_fetches_once_with_its_window(self, fake_client):
        dispatcher = AdvisoryDispatcher(fake_client, timeout=9)
        dispatcher.weather_forecast(*NAIROBI, days=3)
        dispatcher.farming_advisory(*NAIROBI, forecast_days=10)
        dispatcher.planting_recommendation(*NAIROBI, crop="maize")
        dispatcher.irrigation_advisory(*NAIROBI)
        dispatcher.historical_weather(*NAIROBI, days_back=60)

        assert [(c[0], c[3], c[4]) for c in fake_client.calls] == [
            ("forecast", 3, 9),
            ("farming", 10, 9),
            ("farming", 14, 9),
            ("forecast", 7, 9),
            ("historical", 60, 9),
        ]

    def test_historical_is_titled(self, dispatcher):
        assert dispatcher.historical_weather(*NAIROBI).text.startswith("🌤️ Historical Weather")


class TestFailures:

    def test_no_client_is_not_configured(self):
        result = AdvisoryDispatcher(None).weather_forecast(*NAIROBI)
        assert result.is_error
        assert result.text == NOT_CONFIGURED_TEXT

    def test_validation_runs_before_configuration_check(self):
        result = AdvisoryDispatcher(None).weather_forecast(95, 0)
        assert "Invalid latitude" in result.text

    def test_upstream_failure_is_logged_not_leaked(self, failing_client, caplog):
        dispatcher = AdvisoryDispatcher(failing_client)
        with caplog.at_level(logging.ERROR, logger="core.dispatcher"):
            result = dispatcher.irrigation_advisory(*NAIROBI, crop="maize")

        assert result.is_error
        assert result.text == FETCH_FAILED_TEXT
        assert "stack trace" not in result.text
        assert "stack trace here" in caplog.text

    def test_unexpected_error_is_generic(self, caplog):
        dispatcher = AdvisoryDispatcher(FakeGapClient(error=RuntimeError("boom")))
        with caplog.at_level(logging.ERROR, logger="core.dispatcher"):
            result = dispatcher.weather_forecast(*NAIROBI)

        assert result.text == FETCH_FAILED_TEXT
        assert "boom" not in result.text
        assert "unexpected error" in caplog.text

    @pytest.mark.parametrize("tool", [
        "weather_forecast", "farming_advisory", "irrigation_advisory", "historical_weather",
    ])
    def test_empty_series_is_no_data(self, empty_client, tool):
        result = getattr(AdvisoryDispatcher(empty_client), tool)(*NAIROBI)
        assert not result.is_error
        assert result.text == NO_DATA_TEXT

    def test_planting_empty_series_is_no_data(self, empty_client):
        result = AdvisoryDispatcher(empty_client).planting_recommendation(*NAIROBI, crop="beans")
        assert result.text == NO_DATA_TEXT


class TestHappyPath:

    def test_planting_answer(self):
        client = FakeGapClient(uniform_series(14, max_temp=24.0, total_precip=100.0))
        result = AdvisoryDispatcher(client).planting_recommendation(*NAIROBI, crop="maize")

        assert not result.is_error
        assert "YES" in result.text

    def test_irrigation_answer(self):
        client = FakeGapClient(uniform_series(7, max_temp=29.6, total_precip=0.6))
        result = AdvisoryDispatcher(client).irrigation_advisory(*NAIROBI)

        assert "HEAVY IRRIGATION" in result.text
