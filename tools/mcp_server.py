# =============================================================================
# tools/mcp_server.py  —  FastMCP Tool Server (ALL tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Defines the MCP tools farmers' assistants can call.  Each tool is a thin
#   wrapper around core/dispatcher.py: it reads the request-scoped default
#   location, logs the call, and turns a ToolResult into an MCP response.
#
# HOW IT WORKS (the flow):
#   1. An MCP client (the ADK agent in agent/, or any other) calls a tool
#      by name, e.g. "get_planting_recommendation"
#   2. FastMCP routes the call to the decorated function below
#   3. The function reads X-Farm-Latitude / X-Farm-Longitude headers (HTTP
#      transports only) as the fallback location
#   4. core/dispatcher.py validates, fetches from GAP once, runs the rule
#      engine, and returns farmer-facing text
#   5. Errors become MCP tool errors (isError: true) via ToolError
#
# TOOLS:
#   get_weather_forecast         → daily forecast + period summary
#   get_farming_advisory         → 7-14 day farming outlook (+ crop guidance)
#   get_planting_recommendation  → YES / WAIT for planting a crop this week
#   get_irrigation_advisory      → weekly water deficit + daily plan
#   get_historical_weather       → recent observed weather
#   All tools are read-only and idempotent for a given day.
#
# RUNNING THIS SERVER:
#   a) stdio (default):  python -m tools.mcp_server
#   b) HTTP:             MCP_TRANSPORT=http PORT=3000 python -m tools.mcp_server
# =============================================================================

import asyncio
import logging
import sys
from typing import Annotated, Optional

from dotenv import load_dotenv
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.server.dependencies import get_http_headers
from pydantic import Field

from core.config import Settings
from core.crops import supported_crops
from core.dispatcher import AdvisoryDispatcher, DefaultLocation
from core.gap_client import GapClient
from core.models import ToolResult

load_dotenv()
settings = Settings.from_env()

# =============================================================================
# Logging Setup
# =============================================================================
# Logs go to STDERR: with the stdio transport, STDOUT carries the MCP JSON
# stream and any stray print would corrupt it.
#
# ANSI colours:  CYAN = incoming call,  YELLOW = status,  GREEN = response.
# =============================================================================
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s [MCP] %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stderr,
)
logger = logging.getLogger("tools.mcp_server")


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logger.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logger.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, result: ToolResult) -> str:
    """Log the outcome in GREEN, then return the text or raise ToolError."""
    logger.info(
        f"{_GREEN}  ← {tool_name} response: is_error={result.is_error} "
        f"chars={len(result.text)}{_RESET}"
    )
    if result.is_error:
        raise ToolError(result.text)
    return result.text


# =============================================================================
# Forecast client + dispatcher
# =============================================================================
# No token → no client.  The server still starts (so tools can be listed),
# but every call answers with a generic "service unavailable" message.
# =============================================================================
def build_client(config: Settings) -> Optional[GapClient]:
    if not config.gap_configured:
        logger.warning("⚠️  GAP_API_TOKEN is not set; weather tools will not work until it is configured.")
        return None
    return GapClient(config.gap_api_token, config.gap_api_base_url, timeout=config.gap_api_timeout)


dispatcher = AdvisoryDispatcher(build_client(settings))


def _header_float(headers: dict[str, str], name: str) -> Optional[float]:
    raw = headers.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError:
        _log_status(f"Ignoring unparsable {name} header")
        return None


def _default_location() -> DefaultLocation:
    """Farm location from the X-Farm-* headers of the current HTTP request.

    Returns (None, None) on stdio, where there are no headers.
    """
    headers = get_http_headers()
    location = (
        _header_float(headers, "x-farm-latitude"),
        _header_float(headers, "x-farm-longitude"),
    )
    if location != (None, None):
        _log_status("Default farm location available from headers")
    return location


# =============================================================================
# Create the FastMCP server instance
# =============================================================================
# Tools are async and await the dispatcher in a worker thread; the event
# loop never blocks on a GAP fetch.
#
# Crop arguments are plain strings: core/crops.py::parse_crop normalises
# them ("Sweet Potato" → sweet_potato) and answers unknown names with the
# farmer-facing list of supported crops.
# =============================================================================
mcp = FastMCP("gap-weather-intelligence")

CROP_DESCRIPTION = (
    f"Crop name, one of: {', '.join(supported_crops())}. "
    "Case, spaces and hyphens are ignored."
)
CropName = Annotated[Optional[str], Field(description=CROP_DESCRIPTION)]


async def _dispatch(method, *args) -> ToolResult:
    return await asyncio.to_thread(method, *args, default_location=_default_location())


# =============================================================================
# TOOL 1: get_weather_forecast
# =============================================================================
@mcp.tool()
async def get_weather_forecast(
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    days: int = 7,
) -> str:
    """Get the weather forecast (temperature, rainfall, humidity, wind) for a farm.

    WHEN TO CALL THIS: When the farmer asks what the weather will be like.
    Data comes from the TomorrowNow GAP platform, averaged across its
    ensemble forecast members into one value per day.

    Args:
        latitude: Farm latitude (-90 to 90), e.g. -1.2864 for Nairobi.
            Optional if the farm location was supplied in request headers.
        longitude: Farm longitude (-180 to 180), e.g. 36.8172 for Nairobi.
            Optional if the farm location was supplied in request headers.
        days: Number of days to forecast (1-14, default 7).

    Returns:
        A day-by-day listing plus a period summary (average max/min
        temperature, average humidity, total rainfall).
    """
    _log_request("get_weather_forecast", latitude=latitude, longitude=longitude, days=days)
    result = await _dispatch(dispatcher.weather_forecast, latitude, longitude, days)
    return _log_response("get_weather_forecast", result)


# =============================================================================
# TOOL 2: get_farming_advisory
# =============================================================================
@mcp.tool()
async def get_farming_advisory(
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    crop: CropName = None,
    forecast_days: int = 14,
) -> str:
    """Get general farming advice for the coming one to two weeks.

    WHEN TO CALL THIS: When the farmer asks how the coming weeks look for
    farm work, or wants crop-specific guidance.  Flags heat stress, cold,
    drought and excess rain, compares conditions with normal, and lists
    good days for field work.

    Args:
        latitude: Farm latitude (-90 to 90). Optional if sent in headers.
        longitude: Farm longitude (-180 to 180). Optional if sent in headers.
        crop: Optional crop to add crop-specific guidance for.
        forecast_days: Days to assess (7-14, default 14).
    """
    _log_request("get_farming_advisory", latitude=latitude, longitude=longitude,
                 crop=crop, forecast_days=forecast_days)
    result = await _dispatch(dispatcher.farming_advisory, latitude, longitude, crop, forecast_days)
    return _log_response("get_farming_advisory", result)


# =============================================================================
# TOOL 3: get_planting_recommendation
# =============================================================================
@mcp.tool()
async def get_planting_recommendation(
    crop: CropName = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
) -> str:
    """Should the farmer plant this crop now?  Answers YES or WAIT.

    WHEN TO CALL THIS: When the farmer asks whether it is a good time to
    plant a specific crop.  Judged on the next 7 days of temperature,
    rainfall and humidity against the crop's requirements.

    Args:
        crop: The crop to plant (e.g. "maize", "beans", "sweet potato").
            Required; without it the farmer is asked which crop.
        latitude: Farm latitude (-90 to 90). Optional if sent in headers.
        longitude: Farm longitude (-180 to 180). Optional if sent in headers.
    """
    _log_request("get_planting_recommendation", latitude=latitude, longitude=longitude, crop=crop)
    result = await _dispatch(dispatcher.planting_recommendation, latitude, longitude, crop)
    return _log_response("get_planting_recommendation", result)


# =============================================================================
# TOOL 4: get_irrigation_advisory
# =============================================================================
@mcp.tool()
async def get_irrigation_advisory(
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    crop: CropName = None,
) -> str:
    """How much should the farmer irrigate this week?

    WHEN TO CALL THIS: When the farmer asks about watering or irrigation.
    Estimates the 7-day water deficit (crop water use minus expected rain),
    recommends a number of irrigation sessions, and gives a daily plan.

    Args:
        latitude: Farm latitude (-90 to 90). Optional if sent in headers.
        longitude: Farm longitude (-180 to 180). Optional if sent in headers.
        crop: Optional crop (rice gets paddy water advice).
    """
    _log_request("get_irrigation_advisory", latitude=latitude, longitude=longitude, crop=crop)
    result = await _dispatch(dispatcher.irrigation_advisory, latitude, longitude, crop)
    return _log_response("get_irrigation_advisory", result)


# =============================================================================
# TOOL 5: get_historical_weather
# =============================================================================
@mcp.tool()
async def get_historical_weather(
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    days_back: int = 30,
) -> str:
    """Get observed weather for the past days (temperature and rainfall).

    WHEN TO CALL THIS: When the farmer asks how much it has rained recently
    or how hot it has been.

    Args:
        latitude: Farm latitude (-90 to 90). Optional if sent in headers.
        longitude: Farm longitude (-180 to 180). Optional if sent in headers.
        days_back: How many past days to include (1-90, default 30).
    """
    _log_request("get_historical_weather", latitude=latitude, longitude=longitude,
                 days_back=days_back)
    result = await _dispatch(dispatcher.historical_weather, latitude, longitude, days_back)
    return _log_response("get_historical_weather", result)


def main() -> None:
    logger.info(f"GAP API token: {'✅ configured' if settings.gap_configured else '⚠️  NOT CONFIGURED'}")
    if settings.mcp_transport == "stdio":
        mcp.run()
    else:
        logger.info(f"🌾 MCP endpoint on {settings.host}:{settings.port} ({settings.mcp_transport})")
        mcp.run(transport=settings.mcp_transport, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
