"""Tests for the general farming advisory and forecast presentation."""
import pytest

from conftest import make_series, uniform_series
from core.advisory import (
    farming_advisory,
    field_work_days,
    format_forecast,
    format_value,
    rainfall_band,
    temperature_band,
)
from core.models import Crop, Severity, Verdict


class TestBands:

    def test_heat_and_drought_both_warn(self):
        advice = farming_advisory(uniform_series(14, max_temp=36.5, total_precip=5.0))

        assert advice.verdict.verdict is Verdict.UNFAVORABLE
        assert "High temperatures (36.5°C)" in advice.text
        assert "Very little rain expected (5.0 mm)" in advice.text

    def test_cold_and_excess_rain(self):
        advice = farming_advisory(uniform_series(14, max_temp=13.0, total_precip=140.0))

        assert advice.verdict.verdict is Verdict.UNFAVORABLE
        assert "Cool temperatures" in advice.text
        assert "Heavy rainfall expected (140.0 mm)" in advice.text

    def test_favorable_conditions(self):
        advice = farming_advisory(uniform_series(14, max_temp=26.0, total_precip=45.0))

        assert advice.verdict.verdict is Verdict.FAVORABLE
        assert all(r.severity is Severity.OK for r in advice.verdict.reasons)

    @pytest.mark.parametrize("temp", [15.0, 35.0])
    def test_temperature_band_edges_are_ok(self, temp):
        assert [r.severity for r in temperature_band(temp)] == [Severity.OK]

    @pytest.mark.parametrize("rain", [10.0, 100.0])
    def test_rainfall_band_edges_are_ok(self, rain):
        assert [r.severity for r in rainfall_band(rain)] == [Severity.OK]

    def test_missing_rain_is_wait(self):
        advice = farming_advisory(make_series([{"max_temperature": 25.0}] * 14))
        assert advice.verdict.verdict is Verdict.WAIT


class TestWindowAndFieldWork:

    def test_window_limits_days(self):
        advice = farming_advisory(uniform_series(14), days=7)
        assert advice.stats.days == 7
        assert "next 7 days" in advice.text

    def test_field_work_days_are_dry_and_capped(self):
        rains = [5.0, 0.0, 1.9, 2.0, 0.5, 0.0, 3.0]
        series = make_series([{"precipitation": r, "max_temperature": 25.0} for r in rains])

        assert field_work_days(series) == ["2025-03-02", "2025-03-03", "2025-03-05"]

    def test_no_dry_days(self):
        advice = farming_advisory(uniform_series(14, total_precip=70.0))
        assert advice.field_work_days == []
        assert "No clearly dry days" in advice.text


class TestCropBlock:

    def test_fitting_crop_is_called_out(self):
        advice = farming_advisory(uniform_series(14, max_temp=24.0), Crop.MAIZE)
        assert "🌱 Maize guidance:" in advice.text
        assert "Current conditions are favorable for maize" in advice.text

    def test_crop_outside_band_gets_tips_only(self):
        advice = farming_advisory(uniform_series(14, max_temp=33.0), Crop.WHEAT)
        assert "🌱 Wheat guidance:" in advice.text
        assert "favorable for wheat" not in advice.text

    def test_dry_air_does_not_suit_tea(self):
        advice = farming_advisory(uniform_series(14, max_temp=22.0, humidity=0.4), Crop.TEA)
        assert "favorable for tea" not in advice.text

    def test_anomalies_are_summarised(self):
        series = uniform_series(14, max_temperature_anom=1.5, precipitation_anom=-2.0)
        advice = farming_advisory(series)
        assert "Daytime temperatures 1.5°C above normal" in advice.text
        assert "28.0 mm less rain than normal" in advice.text


class TestForecastPresentation:

    def test_humidity_is_shown_as_percent(self):
        assert format_value("relative_humidity", 0.65) == "Humidity: 65.0%"

    def test_anomaly_keeps_its_sign(self):
        assert format_value("max_temperature_anom", -1.5) == "Max temp vs normal: -1.5°C"
        assert format_value("precipitation_anom", 3.0) == "Rain vs normal: +3.0 mm"

    def test_unknown_attribute_is_labelled_from_name(self):
        assert format_value("soil_moisture", 0.3) == "Soil moisture: 0.3"

    def test_listing_and_summary(self):
        series = make_series([
            {"max_temperature": 26.0, "min_temperature": 14.0, "precipitation": 2.0, "relative_humidity": 0.6},
            {"max_temperature": 28.0, "min_temperature": 16.0, "precipitation": 4.0, "relative_humidity": 0.7},
        ])
        text = format_forecast(series)

        assert text.startswith("🌤️ Weather Forecast (2 days)")
        assert "Period: 2025-03-01 to 2025-03-02" in text
        assert "📅 2025-03-02" in text
        assert "Average max temperature: 27.0°C" in text
        assert "Average min temperature: 15.0°C" in text
        assert "Average humidity: 65.0%" in text
        assert "Total rainfall: 6.0 mm" in text

    def test_no_coordinates_in_output(self):
        text = format_forecast(uniform_series())
        assert "36.8172" not in text
