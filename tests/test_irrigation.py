"""Tests for the weekly water balance and daily irrigation plan."""
import pytest

from conftest import make_series, uniform_series
from core.advisory import (
    IrrigationTier,
    daily_irrigation_advice,
    irrigation_advisory,
    irrigation_tier,
)
from core.models import Crop, DailyForecast


def day(**attributes):
    return DailyForecast(date="2025-03-01", latitude=None, longitude=None, attributes=attributes)


class TestWaterBalance:

    def test_hot_dry_week_needs_heavy_irrigation(self):
        plan = irrigation_advisory(uniform_series(max_temp=29.6, total_precip=0.6))

        assert plan.et_daily == pytest.approx(17.76)
        assert plan.deficit == pytest.approx(123.72)
        assert plan.tier is IrrigationTier.HEAVY
        assert plan.sessions == "3-4"
        assert "Water deficit: 123.7 mm" in plan.text
        assert "HEAVY IRRIGATION" in plan.text
        assert "Irrigate 3-4 times this week" in plan.text
        assert "Consider drip irrigation" in plan.text

    def test_surplus_shows_zero_deficit(self):
        plan = irrigation_advisory(uniform_series(max_temp=20.0, total_precip=120.0))

        assert plan.deficit == pytest.approx(-36.0)
        assert plan.displayed_deficit == 0.0
        assert plan.tier is IrrigationTier.NONE
        assert plan.sessions is None
        assert "Water deficit: 0.0 mm" in plan.text
        assert "NO IRRIGATION NEEDED" in plan.text

    @pytest.mark.parametrize("deficit, tier", [
        (-5.0, IrrigationTier.NONE),
        (0.0, IrrigationTier.NONE),
        (0.1, IrrigationTier.LIGHT),
        (19.9, IrrigationTier.LIGHT),
        (20.0, IrrigationTier.MODERATE),
        (39.9, IrrigationTier.MODERATE),
        (40.0, IrrigationTier.HEAVY),
    ])
    def test_tier_boundaries(self, deficit, tier):
        assert irrigation_tier(deficit) is tier

    def test_only_first_seven_days_count(self):
        week = [{"max_temperature": 25.0, "precipitation": 20.0}] * 7
        later = [{"max_temperature": 40.0, "precipitation": 0.0}] * 7
        plan = irrigation_advisory(make_series(week + later))

        assert plan.stats.days == 7
        assert len(plan.daily) == 7
        assert plan.tier is IrrigationTier.NONE

    def test_missing_temperature_gives_no_tier(self):
        plan = irrigation_advisory(make_series([{"precipitation": 1.0}] * 7))

        assert plan.tier is None
        assert plan.deficit is None
        assert "Not enough forecast data" in plan.text


class TestDailyAdvice:

    def test_heavy_rain_skips(self):
        assert daily_irrigation_advice(day(precipitation=12.0)).startswith("Skip irrigation")

    def test_moderate_rain_is_light(self):
        assert daily_irrigation_advice(day(precipitation=6.0)).startswith("Light irrigation only")

    def test_hot_dry_day_irrigates(self):
        advice = daily_irrigation_advice(day(precipitation=0.5, max_temperature=33.0))
        assert advice == "Irrigate - hot and dry (33.0°C)"

    def test_mild_dry_day(self):
        advice = daily_irrigation_advice(day(precipitation=1.0, max_temperature=24.0))
        assert advice == "Irrigate if there has been no recent rain"

    def test_missing_rain_counts_as_dry(self):
        assert daily_irrigation_advice(day(max_temperature=31.0)).startswith("Irrigate - hot")


class TestCropCaveats:

    def test_rice_gets_standing_water_note(self):
        plan = irrigation_advisory(uniform_series(max_temp=30.0, total_precip=10.0), Crop.RICE)
        assert "standing water" in plan.text
        assert "Avoid over-irrigation" not in plan.text

    def test_other_crops_warn_about_waterlogging(self):
        plan = irrigation_advisory(uniform_series(max_temp=30.0, total_precip=10.0), Crop.MAIZE)
        assert "Avoid over-irrigation" in plan.text
        assert plan.text.startswith("💧 Irrigation Advisory (Maize)")
