# =============================================================================
# core/models.py  —  Data Models (the "nouns" of the system)
# =============================================================================
#
# These dataclasses define the *shape* of every piece of information that flows
# through the advisory pipeline:
#
#   GAP API JSON  →  RawSample  →  DailyForecast  →  ForecastSeries
#                                                        │
#                                         CropProfile ───┤
#                                                        ▼
#                                               AdvisoryVerdict / text
#
# They carry no I/O.  Anything that talks to the network lives in
# core/gap_client.py; anything that makes a decision lives in core/advisory.py.
#
# UNITS:
#   Temperatures are °C, precipitation is mm, wind is m/s.  Relative humidity
#   is a FRACTION in [0, 1] everywhere inside the core; it is multiplied by
#   100 only when text is rendered for the farmer.
# =============================================================================

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


# -----------------------------------------------------------------------------
# Coordinate — where the farm is
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Coordinate:
    """A validated latitude/longitude pair (see core/dispatcher.py)."""

    latitude: float                    # -90 .. 90
    longitude: float                   # -180 .. 180


# -----------------------------------------------------------------------------
# RawSample — one observation straight from the GAP API
# -----------------------------------------------------------------------------
# Values are either a single number (historical product) or a list of up to
# 50 ensemble members (seasonal forecast product).  Lives only for one fetch.
# -----------------------------------------------------------------------------
@dataclass
class RawSample:
    """One timestamped row of the upstream ``results[0].data`` array."""

    datetime: str                      # ISO datetime, e.g. "2025-03-01T00:00:00"
    values: dict[str, Any] = field(default_factory=dict)

    @property
    def date(self) -> str:
        """Calendar date of the sample (timestamp truncated to YYYY-MM-DD)."""
        return self.datetime.split("T")[0][:10]

    @classmethod
    def from_api(cls, point: dict[str, Any]) -> "RawSample":
        values = {k: v for k, v in point.items() if k != "datetime"}
        return cls(datetime=str(point.get("datetime", "")), values=values)


# -----------------------------------------------------------------------------
# DailyForecast — the aggregated unit the rule engine reasons about
# -----------------------------------------------------------------------------
@dataclass
class DailyForecast:
    """Weather for one calendar day at one location.

    ``attributes`` maps a GAP attribute name (``max_temperature``,
    ``precipitation``, ``relative_humidity`` ...) to the mean over every
    ensemble member and every raw sample that shares this date.  An attribute
    with no numeric data is simply absent, never zero.
    """

    date: str                          # "2025-03-01"
    latitude: Optional[float]
    longitude: Optional[float]
    attributes: dict[str, float] = field(default_factory=dict)

    def get(self, name: str) -> Optional[float]:
        return self.attributes.get(name)

    @property
    def max_temperature(self) -> Optional[float]:
        return self.attributes.get("max_temperature")

    @property
    def min_temperature(self) -> Optional[float]:
        return self.attributes.get("min_temperature")

    @property
    def precipitation(self) -> Optional[float]:
        return self.attributes.get("precipitation")

    @property
    def relative_humidity(self) -> Optional[float]:
        return self.attributes.get("relative_humidity")


# -----------------------------------------------------------------------------
# ForecastSeries — what the Forecast Client hands back
# -----------------------------------------------------------------------------
# Sorted ascending by date, one entry per date.  An empty series (count == 0)
# is a legitimate "no data for this location" answer, not an error.
# -----------------------------------------------------------------------------
@dataclass
class ForecastSeries:
    """Ordered daily forecasts plus the upstream paging envelope."""

    results: list[DailyForecast] = field(default_factory=list)
    next: Optional[str] = None         # GAP never pages for a single point
    previous: Optional[str] = None

    @property
    def count(self) -> int:
        return len(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self):
        return iter(self.results)

    def window(self, days: int) -> "ForecastSeries":
        """The first ``days`` entries as a new series."""
        return ForecastSeries(results=self.results[:days])

    def values(self, name: str) -> list[float]:
        """Every available value of one attribute, in date order."""
        return [d.attributes[name] for d in self.results if name in d.attributes]


# -----------------------------------------------------------------------------
# Crop — the fixed set of crops the tools understand
# -----------------------------------------------------------------------------
class Crop(str, Enum):
    # Cereals
    MAIZE = "maize"
    WHEAT = "wheat"
    RICE = "rice"
    SORGHUM = "sorghum"
    MILLET = "millet"
    # Legumes
    BEANS = "beans"
    COWPEA = "cowpea"
    PIGEON_PEA = "pigeon_pea"
    GROUNDNUT = "groundnut"
    # Roots and tubers
    CASSAVA = "cassava"
    SWEET_POTATO = "sweet_potato"
    POTATO = "potato"
    # Vegetables
    VEGETABLES = "vegetables"
    TOMATO = "tomato"
    CABBAGE = "cabbage"
    KALE = "kale"
    ONION = "onion"
    # Cash crops
    TEA = "tea"
    COFFEE = "coffee"
    SUGARCANE = "sugarcane"
    COTTON = "cotton"
    SUNFLOWER = "sunflower"
    BANANA = "banana"

    @property
    def label(self) -> str:
        """Human-readable name, e.g. "sweet potato"."""
        return self.value.replace("_", " ")


class RainRule(str, Enum):
    """How a crop's planting-window rainfall is judged."""

    RANGE = "range"                    # rain_min <= total <= rain_max
    MINIMUM = "minimum"                # total >= rain_min
    BELOW = "below"                    # total < rain_max is preferred
    NONE = "none"                      # no rainfall rule (humidity-driven crops)


# -----------------------------------------------------------------------------
# CropProfile — agronomic thresholds for one crop
# -----------------------------------------------------------------------------
# The whole table lives in core/crops.py.  Irregular behaviour is expressed
# through the flag fields below instead of per-crop functions.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class CropProfile:
    """Thresholds and guidance for one crop (or the generic default)."""

    name: str                          # "maize", "sweet potato", "your crop"
    group: str                         # "cereal", "legume", "root", "vegetable", "cash crop"
    temp_min: float                    # Optimal mean max temperature band (°C)
    temp_max: float
    rain_rule: RainRule = RainRule.MINIMUM
    rain_min: Optional[float] = None   # mm over the 7-day planting window
    rain_max: Optional[float] = None
    min_humidity: Optional[float] = None   # fraction; bonus line when met
    excess_rain_blocks: bool = False   # excess rain forces WAIT (beans)
    irrigation_dependent: bool = False     # low rain means "only with irrigation" (rice)
    standing_water: bool = False       # paddy crop: standing-water caveat
    guidance: tuple[str, ...] = ()     # Static farming tips


# -----------------------------------------------------------------------------
# Verdicts and reasons
# -----------------------------------------------------------------------------
class Verdict(str, Enum):
    FAVORABLE = "favorable"
    UNFAVORABLE = "unfavorable"
    WAIT = "wait"                      # also "insufficient data"


class Severity(str, Enum):
    OK = "ok"
    WARNING = "warning"
    BLOCKING = "blocking"

    @property
    def marker(self) -> str:
        return _SEVERITY_MARKERS[self]


_SEVERITY_MARKERS = {
    Severity.OK: "✅",
    Severity.WARNING: "⚠️",
    Severity.BLOCKING: "❌",
}


@dataclass
class Reason:
    """One itemized line behind a verdict."""

    severity: Severity
    text: str

    def render(self) -> str:
        return f"{self.severity.marker} {self.text}"


@dataclass
class RuleCheck:
    """Outcome of one planting rule.

    ``sets_plant`` is None when the rule only adds a reason and leaves the
    running should-plant flag untouched.
    """

    reason: Reason
    sets_plant: Optional[bool] = None


@dataclass
class AdvisoryVerdict:
    """Categorical outcome plus its itemized, severity-tagged reasons."""

    verdict: Verdict
    reasons: list[Reason] = field(default_factory=list)

    @property
    def is_favorable(self) -> bool:
        return self.verdict is Verdict.FAVORABLE


# -----------------------------------------------------------------------------
# ToolResult — what the dispatcher hands to the MCP layer
# -----------------------------------------------------------------------------
@dataclass
class ToolResult:
    """Farmer-facing text plus the MCP ``isError`` flag."""

    text: str
    is_error: bool = False
