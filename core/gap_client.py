# =============================================================================
# core/gap_client.py  —  TomorrowNow GAP API client (the Forecast Client)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Builds parameterized requests to the GAP ``/measurement/`` endpoint,
#   parses the JSON response, and hands the raw samples to
#   core/aggregation.py so callers always get one record per day.
#
# THREE ENTRY POINTS, TWO PRODUCTS:
#   get_forecast()          →  salient_seasonal_forecast, basic attributes
#   get_farming_forecast()  →  salient_seasonal_forecast, + anomalies & solar
#   get_historical()        →  cbam_historical_analysis, single values
#
#   Dates are computed from the SERVER's local calendar day, not the farm's
#   timezone.
#
# FAILURE MODES:
#   Non-2xx, timeout, network error or unparsable JSON  →  UpstreamError.
#   No matched location (``results == []``)              →  empty series.
#   No retries here; the caller decides what a failure means.
#
# A GapClient always holds a token.  "Not configured" is represented by not
# constructing one at all (see tools/mcp_server.py).
# =============================================================================

import json
import logging
import socket
import urllib.error
import urllib.parse
import urllib.request
from datetime import date, timedelta
from typing import Any, Optional

from core.aggregation import aggregate
from core.config import DEFAULT_GAP_BASE_URL
from core.errors import UpstreamError
from core.models import ForecastSeries, RawSample

logger = logging.getLogger(__name__)

FORECAST_PRODUCT = "salient_seasonal_forecast"
HISTORICAL_PRODUCT = "cbam_historical_analysis"

FORECAST_ATTRIBUTES = (
    "max_temperature",
    "min_temperature",
    "precipitation",
    "relative_humidity",
    "wind_speed",
)

FARMING_ATTRIBUTES = (
    "max_temperature",
    "max_temperature_anom",
    "min_temperature",
    "min_temperature_anom",
    "precipitation",
    "precipitation_anom",
    "relative_humidity",
    "relative_humidity_anom",
    "solar_radiation",
    "wind_speed",
)

HISTORICAL_ATTRIBUTES = (
    "max_temperature",
    "min_temperature",
    "precipitation",
)


class GapClient:
    """Thin client for the GAP measurement endpoint.

    Args:
        api_token: GAP API token; sent as ``Authorization: Token <token>``.
        base_url: API root, e.g. ``https://gap.tomorrownow.org/api/v1``.
        timeout: Default per-request deadline in seconds.
    """

    def __init__(self, api_token: str, base_url: str = DEFAULT_GAP_BASE_URL, timeout: float = 30.0):
        if not api_token:
            raise ValueError("GapClient requires a non-empty API token")
        self._api_token = api_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    # -------------------------------------------------------------------------
    # Low level: one GET, one parse
    # -------------------------------------------------------------------------
    def build_url(self, params: dict[str, Any]) -> str:
        return f"{self.base_url}/measurement/?{urllib.parse.urlencode(params)}"

    def get_measurement(
        self,
        params: dict[str, Any],
        ensemble: bool = True,
        timeout: Optional[float] = None,
    ) -> ForecastSeries:
        """GET ``/measurement/`` and aggregate the response into daily records.

        Raises:
            UpstreamError: on any non-2xx status, timeout, network failure or
                malformed payload.
        """
        url = self.build_url(params)
        logger.info(f"[GAP API] Fetching: {url}")

        request = urllib.request.Request(
            url,
            method="GET",
            headers={
                "Authorization": f"Token {self._api_token}",
                "Accept": "application/json",
            },
        )

        try:
            with urllib.request.urlopen(request, timeout=timeout or self.timeout) as response:
                payload = response.read().decode("utf-8")
        except urllib.error.HTTPError as e:
            body = _read_error_body(e)
            raise UpstreamError(f"GAP API error: {e.code} {e.reason}", status=e.code, body=body) from e
        except (socket.timeout, TimeoutError) as e:
            raise UpstreamError(f"GAP API request timed out after {timeout or self.timeout}s") from e
        except urllib.error.URLError as e:
            raise UpstreamError(f"GAP API network error: {e.reason}") from e
        except OSError as e:
            raise UpstreamError(f"GAP API connection failed: {e}") from e

        try:
            raw = json.loads(payload)
        except json.JSONDecodeError as e:
            raise UpstreamError("GAP API returned invalid JSON", body=payload[:500]) from e

        series = parse_response(raw, ensemble=ensemble)
        logger.info(f"[GAP API] Received {series.count} daily data points")
        return series

    # -------------------------------------------------------------------------
    # Use-case entry points
    # -------------------------------------------------------------------------
    def get_forecast(self, lat: float, lon: float, days: int = 7,
                     timeout: Optional[float] = None) -> ForecastSeries:
        """Ensemble forecast for today .. today + ``days``."""
        start, end = forecast_window(days)
        return self.get_measurement(
            _params(lat, lon, start, end, FORECAST_PRODUCT, FORECAST_ATTRIBUTES),
            timeout=timeout,
        )

    def get_farming_forecast(self, lat: float, lon: float, days: int = 14,
                             timeout: Optional[float] = None) -> ForecastSeries:
        """Forecast with anomaly counterparts and solar radiation."""
        start, end = forecast_window(days)
        return self.get_measurement(
            _params(lat, lon, start, end, FORECAST_PRODUCT, FARMING_ATTRIBUTES),
            timeout=timeout,
        )

    def get_historical(self, lat: float, lon: float, days_back: int = 30,
                       timeout: Optional[float] = None) -> ForecastSeries:
        """Single-value historical analysis for today - ``days_back`` .. today."""
        start, end = historical_window(days_back)
        return self.get_measurement(
            _params(lat, lon, start, end, HISTORICAL_PRODUCT, HISTORICAL_ATTRIBUTES),
            ensemble=False,
            timeout=timeout,
        )


# =============================================================================
# Helpers (module level so they can be tested without a client)
# =============================================================================
def forecast_window(days: int, today: Optional[date] = None) -> tuple[date, date]:
    start = today or date.today()
    return start, start + timedelta(days=days)


def historical_window(days_back: int, today: Optional[date] = None) -> tuple[date, date]:
    end = today or date.today()
    return end - timedelta(days=days_back), end


def _params(lat: float, lon: float, start: date, end: date,
            product: str, attributes: tuple[str, ...]) -> dict[str, Any]:
    return {
        "lat": lat,
        "lon": lon,
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "product": product,
        "attributes": ",".join(attributes),
        "output_type": "json",
    }


def parse_response(raw: Any, ensemble: bool = True) -> ForecastSeries:
    """Turn a GAP JSON payload into an aggregated ForecastSeries.

    Only ``results[0]`` is used: one request is always one point.  The
    coordinates on each DailyForecast come from its ``geometry`` ([lon, lat]).

    Raises:
        UpstreamError: when the payload does not have the documented shape.
    """
    if not isinstance(raw, dict):
        raise UpstreamError("GAP API response is not a JSON object")

    results = raw.get("results") or []
    if not results:
        return ForecastSeries()

    first = results[0]
    try:
        lon, lat = first["geometry"]["coordinates"][:2]
        points = first.get("data") or []
        samples = [RawSample.from_api(p) for p in points]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise UpstreamError(f"GAP API response has unexpected shape: {e}") from e

    return aggregate(samples, latitude=lat, longitude=lon, ensemble=ensemble)


def _read_error_body(error: urllib.error.HTTPError) -> str:
    try:
        return error.read().decode("utf-8", errors="replace")
    except OSError:
        return ""
