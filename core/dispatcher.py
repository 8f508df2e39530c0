# =============================================================================
# core/dispatcher.py  —  Tool Dispatcher (validation → fetch → advise → text)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   One method per MCP tool.  Each one:
#     1. resolves coordinates: explicit params first, then the caller's
#        default location (e.g. X-Farm-* headers), else MissingLocationError
#     2. validates latitude / longitude / day counts / crop BEFORE any fetch
#     3. fails fast with AuthError if no GapClient was configured
#     4. makes exactly one GAP call
#     5. feeds the ForecastSeries to core/advisory.py
#     6. returns a ToolResult(text, is_error)
#
#   Every exception stops here.  Farmers see friendly text only; technical
#   detail goes to the server log.  Caller-facing text never echoes
#   coordinates.
# =============================================================================

import logging
import math
from typing import Any, Callable, Optional

from core import advisory
from core.crops import parse_crop, supported_crops
from core.errors import AuthError, MissingLocationError, UpstreamError, ValidationError
from core.gap_client import GapClient
from core.models import Coordinate, Crop, ForecastSeries, ToolResult

logger = logging.getLogger(__name__)

# (latitude, longitude) from a request-scoped source; either may be None
DefaultLocation = tuple[Optional[float], Optional[float]]
NO_DEFAULT: DefaultLocation = (None, None)

FORECAST_DAYS_RANGE = (1, 14)
FARMING_DAYS_RANGE = (7, 14)
HISTORICAL_DAYS_RANGE = (1, 90)
PLANTING_FETCH_DAYS = 14

MISSING_LOCATION_TEXT = (
    "I need to know where your farm is to check the weather. "
    "Could you share your farm's location (latitude and longitude)?"
)
NO_DATA_TEXT = (
    "No weather data available for this location. "
    "Please check if the coordinates are correct."
)
NOT_CONFIGURED_TEXT = (
    "I'm having trouble connecting to the weather data service. Try again in a moment?"
)
FETCH_FAILED_TEXT = "I'm having trouble getting weather data right now. Try again in a moment?"


# =============================================================================
# Validation helpers
# =============================================================================
def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and not math.isnan(value)


def resolve_coordinates(latitude: Optional[float], longitude: Optional[float],
                        default_location: DefaultLocation = NO_DEFAULT) -> tuple[Any, Any]:
    """Pick explicit values first, then the default location, per axis.

    Raises:
        MissingLocationError: if either axis has no value from any source.
    """
    default_lat, default_lon = default_location
    lat = latitude if latitude is not None else default_lat
    lon = longitude if longitude is not None else default_lon
    if lat is None or lon is None:
        raise MissingLocationError()
    return lat, lon


def validate_coordinates(latitude: Any, longitude: Any) -> Coordinate:
    if not _is_number(latitude) or not -90 <= latitude <= 90:
        raise ValidationError(
            "Invalid latitude coordinate. Please provide a valid latitude between -90 and 90."
        )
    if not _is_number(longitude) or not -180 <= longitude <= 180:
        raise ValidationError(
            "Invalid longitude coordinate. Please provide a valid longitude between -180 and 180."
        )
    return Coordinate(float(latitude), float(longitude))


def validate_days(days: Any, bounds: tuple[int, int], name: str = "days") -> int:
    low, high = bounds
    if not isinstance(days, int) or isinstance(days, bool) or not low <= days <= high:
        raise ValidationError(
            f"Invalid number of {name}. Please provide a value between {low} and {high}."
        )
    return days


# =============================================================================
# Dispatcher
# =============================================================================
class AdvisoryDispatcher:
    """Runs the forecast-to-advisory pipeline for each tool call.

    Args:
        client: A configured GapClient, or None when no API token exists.
        timeout: Per-call deadline passed to the client (None = client default).
    """

    def __init__(self, client: Optional[GapClient], timeout: Optional[float] = None):
        self.client = client
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return self.client is not None

    # -------------------------------------------------------------------------
    # Tools
    # -------------------------------------------------------------------------
    def weather_forecast(self, latitude: Optional[float] = None, longitude: Optional[float] = None,
                         days: int = 7, default_location: DefaultLocation = NO_DEFAULT) -> ToolResult:
        def prepare():
            return validate_days(days, FORECAST_DAYS_RANGE)

        return self._run(
            "get_weather_forecast", latitude, longitude, default_location, prepare,
            fetch=lambda client, c, n: client.get_forecast(c.latitude, c.longitude, n, timeout=self.timeout),
            render=lambda series, n: advisory.format_forecast(series),
        )

    def farming_advisory(self, latitude: Optional[float] = None, longitude: Optional[float] = None,
                         crop: Optional[str] = None, forecast_days: int = 14,
                         default_location: DefaultLocation = NO_DEFAULT) -> ToolResult:
        def prepare():
            return validate_days(forecast_days, FARMING_DAYS_RANGE, "forecast days"), parse_crop(crop)

        return self._run(
            "get_farming_advisory", latitude, longitude, default_location, prepare,
            fetch=lambda client, c, p: client.get_farming_forecast(
                c.latitude, c.longitude, p[0], timeout=self.timeout),
            render=lambda series, p: advisory.farming_advisory(series, crop=p[1], days=p[0]).text,
        )

    def planting_recommendation(self, latitude: Optional[float] = None,
                                longitude: Optional[float] = None, crop: Optional[str] = None,
                                default_location: DefaultLocation = NO_DEFAULT) -> ToolResult:
        def prepare() -> Crop:
            parsed = parse_crop(crop)
            if parsed is None:
                raise ValidationError(
                    "Please tell me which crop you want to plant. "
                    f"Supported crops: {', '.join(supported_crops())}."
                )
            return parsed

        return self._run(
            "get_planting_recommendation", latitude, longitude, default_location, prepare,
            fetch=lambda client, c, _: client.get_farming_forecast(
                c.latitude, c.longitude, PLANTING_FETCH_DAYS, timeout=self.timeout),
            render=lambda series, parsed: advisory.planting_recommendation(series, parsed).text,
        )

    def irrigation_advisory(self, latitude: Optional[float] = None, longitude: Optional[float] = None,
                            crop: Optional[str] = None,
                            default_location: DefaultLocation = NO_DEFAULT) -> ToolResult:
        return self._run(
            "get_irrigation_advisory", latitude, longitude, default_location,
            lambda: parse_crop(crop),
            fetch=lambda client, c, _: client.get_forecast(
                c.latitude, c.longitude, advisory.IRRIGATION_WINDOW_DAYS, timeout=self.timeout),
            render=lambda series, parsed: advisory.irrigation_advisory(series, parsed).text,
        )

    def historical_weather(self, latitude: Optional[float] = None, longitude: Optional[float] = None,
                           days_back: int = 30,
                           default_location: DefaultLocation = NO_DEFAULT) -> ToolResult:
        def prepare():
            return validate_days(days_back, HISTORICAL_DAYS_RANGE, "days back")

        return self._run(
            "get_historical_weather", latitude, longitude, default_location, prepare,
            fetch=lambda client, c, n: client.get_historical(c.latitude, c.longitude, n, timeout=self.timeout),
            render=lambda series, n: advisory.format_forecast(series, title="Historical Weather"),
        )

    # -------------------------------------------------------------------------
    # Shared pipeline
    # -------------------------------------------------------------------------
    def _run(
        self,
        tool_name: str,
        latitude: Optional[float],
        longitude: Optional[float],
        default_location: DefaultLocation,
        prepare: Callable[[], Any],
        fetch: Callable[[GapClient, Coordinate, Any], ForecastSeries],
        render: Callable[[ForecastSeries, Any], str],
    ) -> ToolResult:
        try:
            lat, lon = resolve_coordinates(latitude, longitude, default_location)
            coord = validate_coordinates(lat, lon)
            prepared = prepare()

            if self.client is None:
                raise AuthError()

            series = fetch(self.client, coord, prepared)
            if series.count == 0:
                logger.info(f"[{tool_name}] upstream returned no data")
                return ToolResult(NO_DATA_TEXT)

            return ToolResult(render(series, prepared))

        except MissingLocationError:
            logger.info(f"[{tool_name}] no location from params or defaults")
            return ToolResult(MISSING_LOCATION_TEXT)
        except ValidationError as e:
            return ToolResult(str(e), is_error=True)
        except AuthError as e:
            logger.error(f"[{tool_name}] {e}")
            return ToolResult(NOT_CONFIGURED_TEXT, is_error=True)
        except UpstreamError as e:
            logger.error(f"[{tool_name}] upstream failure: {e} body={e.body[:500]!r}")
            return ToolResult(FETCH_FAILED_TEXT, is_error=True)
        except Exception:
            logger.exception(f"[{tool_name}] unexpected error")
            return ToolResult(FETCH_FAILED_TEXT, is_error=True)
