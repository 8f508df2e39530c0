"""Tests for the GAP API client; urlopen is patched, no network access."""
import io
import json
import socket
import urllib.error
import urllib.parse
from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from core.errors import UpstreamError
from core.gap_client import (
    FARMING_ATTRIBUTES,
    FORECAST_PRODUCT,
    HISTORICAL_PRODUCT,
    GapClient,
    forecast_window,
    historical_window,
    parse_response,
)

URLOPEN = "core.gap_client.urllib.request.urlopen"


def gap_payload(data, coordinates=(36.8172, -1.2864)):
    return {
        "metadata": {},
        "results": [{
            "geometry": {"type": "Point", "coordinates": list(coordinates)},
            "data": data,
        }],
    }


def http_response(payload):
    body = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
    response = MagicMock()
    response.read.return_value = body
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    return response


def query_of(request):
    return dict(urllib.parse.parse_qsl(urllib.parse.urlparse(request.full_url).query))


@pytest.fixture
def client():
    return GapClient("secret-token", "https://gap.example.org/api/v1/", timeout=12)


@pytest.fixture
def ensemble_payload():
    return gap_payload([
        {"datetime": "2025-03-01T00:00:00", "max_temperature": [24.0, 26.0], "precipitation": [0.0, 4.0]},
        {"datetime": "2025-03-02T00:00:00", "max_temperature": [28.0, 30.0], "precipitation": [1.0, 1.0]},
    ])


class TestRequestBuilding:

    def test_forecast_request(self, client, ensemble_payload):
        with patch(URLOPEN, return_value=http_response(ensemble_payload)) as urlopen:
            client.get_forecast(-1.2864, 36.8172, days=7)

        request = urlopen.call_args.args[0]
        query = query_of(request)
        start, end = forecast_window(7)
        assert request.full_url.startswith("https://gap.example.org/api/v1/measurement/?")
        assert query["lat"] == "-1.2864"
        assert query["lon"] == "36.8172"
        assert query["start_date"] == start.isoformat()
        assert query["end_date"] == end.isoformat()
        assert query["product"] == FORECAST_PRODUCT
        assert query["attributes"] == "max_temperature,min_temperature,precipitation,relative_humidity,wind_speed"
        assert query["output_type"] == "json"
        assert request.get_header("Authorization") == "Token secret-token"
        assert urlopen.call_args.kwargs["timeout"] == 12

    def test_farming_request_includes_anomalies(self, client, ensemble_payload):
        with patch(URLOPEN, return_value=http_response(ensemble_payload)) as urlopen:
            client.get_farming_forecast(0.5, 35.0)

        attributes = query_of(urlopen.call_args.args[0])["attributes"].split(",")
        assert tuple(attributes) == FARMING_ATTRIBUTES
        assert "solar_radiation" in attributes
        assert "precipitation_anom" in attributes

    def test_caller_deadline_overrides_default(self, client, ensemble_payload):
        with patch(URLOPEN, return_value=http_response(ensemble_payload)) as urlopen:
            client.get_forecast(0.5, 35.0, timeout=3)
        assert urlopen.call_args.kwargs["timeout"] == 3

    def test_windows_use_calendar_days(self):
        today = date(2025, 2, 25)
        assert forecast_window(7, today) == (date(2025, 2, 25), date(2025, 3, 4))
        assert historical_window(30, today) == (date(2025, 1, 26), date(2025, 2, 25))

    def test_empty_token_rejected(self):
        with pytest.raises(ValueError):
            GapClient("")


class TestResponses:

    def test_forecast_is_aggregated_per_day(self, client, ensemble_payload):
        with patch(URLOPEN, return_value=http_response(ensemble_payload)):
            series = client.get_forecast(-1.2864, 36.8172)

        assert series.count == 2
        first, second = series.results
        assert first.date == "2025-03-01"
        assert first.max_temperature == pytest.approx(25.0)
        assert first.precipitation == pytest.approx(2.0)
        assert second.max_temperature == pytest.approx(29.0)
        assert (first.latitude, first.longitude) == (-1.2864, 36.8172)

    def test_historical_uses_single_values(self, client):
        payload = gap_payload([
            {"datetime": "2025-02-01T00:00:00", "max_temperature": 27.5, "precipitation": 3.2},
            {"datetime": "2025-02-02T00:00:00", "max_temperature": 26.0, "precipitation": [9.0, 9.0]},
        ])
        with patch(URLOPEN, return_value=http_response(payload)) as urlopen:
            series = client.get_historical(-1.0, 36.0, days_back=10)

        assert query_of(urlopen.call_args.args[0])["product"] == HISTORICAL_PRODUCT
        assert series.results[0].precipitation == pytest.approx(3.2)
        assert series.results[1].precipitation is None

    def test_no_results_is_empty_series(self, client):
        with patch(URLOPEN, return_value=http_response({"metadata": {}, "results": []})):
            series = client.get_forecast(10.0, 10.0)
        assert series.count == 0
        assert series.next is None and series.previous is None

    def test_http_error_becomes_upstream_error(self, client):
        error = urllib.error.HTTPError(
            "https://gap.example.org", 401, "Unauthorized", {}, io.BytesIO(b'{"detail": "Invalid token."}')
        )
        with patch(URLOPEN, side_effect=error):
            with pytest.raises(UpstreamError) as excinfo:
                client.get_forecast(0.0, 0.0)
        assert excinfo.value.status == 401
        assert "Invalid token" in excinfo.value.body

    def test_timeout_becomes_upstream_error(self, client):
        with patch(URLOPEN, side_effect=socket.timeout("timed out")):
            with pytest.raises(UpstreamError) as excinfo:
                client.get_forecast(0.0, 0.0)
        assert excinfo.value.status is None

    def test_network_error_becomes_upstream_error(self, client):
        with patch(URLOPEN, side_effect=urllib.error.URLError("Name or service not known")):
            with pytest.raises(UpstreamError):
                client.get_forecast(0.0, 0.0)

    def test_connection_reset_becomes_upstream_error(self, client):
        with patch(URLOPEN, side_effect=ConnectionResetError("reset by peer")):
            with pytest.raises(UpstreamError):
                client.get_forecast(0.0, 0.0)

    def test_invalid_json_becomes_upstream_error(self, client):
        with patch(URLOPEN, return_value=http_response(b"<html>oops</html>")):
            with pytest.raises(UpstreamError):
                client.get_forecast(0.0, 0.0)


class TestParseResponse:

    def test_geometry_is_lon_lat(self):
        series = parse_response(gap_payload(
            [{"datetime": "2025-03-01T00:00:00", "precipitation": 1.0}], coordinates=(35.0, -1.5)))
        assert series.results[0].latitude == -1.5
        assert series.results[0].longitude == 35.0

    def test_missing_geometry_is_upstream_error(self):
        with pytest.raises(UpstreamError):
            parse_response({"results": [{"data": []}]})

    def test_non_object_is_upstream_error(self):
        with pytest.raises(UpstreamError):
            parse_response([1, 2, 3])
