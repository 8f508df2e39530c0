"""Shared fixtures: synthetic forecast series and a recording fake client."""
import os
import sys
from datetime import date, timedelta

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from core.errors import UpstreamError
from core.models import DailyForecast, ForecastSeries

START = date(2025, 3, 1)


def make_series(days, lat=-1.2864, lon=36.8172, start=START):
    """Build a ForecastSeries from a list of attribute dicts, one per day."""
    return ForecastSeries(results=[
        DailyForecast(
            date=(start + timedelta(days=i)).isoformat(),
            latitude=lat,
            longitude=lon,
            attributes=dict(attrs),
        )
        for i, attrs in enumerate(days)
    ])


def uniform_series(n=7, max_temp=25.0, total_precip=35.0, humidity=0.65, min_temp=None, **extra):
    """``n`` identical days whose max temp averages ``max_temp`` and rain sums to ``total_precip``."""
    day = {
        "max_temperature": max_temp,
        "precipitation": total_precip / n,
        "relative_humidity": humidity,
    }
    if min_temp is not None:
        day["min_temperature"] = min_temp
    day.update(extra)
    return make_series([day] * n)


class FakeGapClient:
    """Stands in for GapClient; records every call."""

    def __init__(self, series=None, error=None):
        self.series = series if series is not None else uniform_series(14)
        self.error = error
        self.calls = []

    def _respond(self, method, lat, lon, days, timeout):
        self.calls.append((method, lat, lon, days, timeout))
        if self.error is not None:
            raise self.error
        return self.series

    def get_forecast(self, lat, lon, days=7, timeout=None):
        return self._respond("forecast", lat, lon, days, timeout)

    def get_farming_forecast(self, lat, lon, days=14, timeout=None):
        return self._respond("farming", lat, lon, days, timeout)

    def get_historical(self, lat, lon, days_back=30, timeout=None):
        return self._respond("historical", lat, lon, days_back, timeout)


@pytest.fixture
def fake_client():
    return FakeGapClient()


@pytest.fixture
def failing_client():
    return FakeGapClient(error=UpstreamError("GAP API error: 500 Internal Server Error",
                                             status=500, body="stack trace here"))


@pytest.fixture
def empty_client():
    return FakeGapClient(series=ForecastSeries())
