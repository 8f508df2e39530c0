# =============================================================================
# core/advisory.py  —  Advisory Rule Engine
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Turns an aggregated ForecastSeries (+ optional crop) into farmer-facing
#   advice.  Four modes share the same input shape:
#
#     format_forecast()           →  per-day listing + period summary
#     farming_advisory()          →  7-14 day outlook, temperature & rain bands
#     planting_recommendation()   →  first 7 days, YES / WAIT per crop
#     irrigation_advisory()       →  7-day water balance + daily plan
#
#   Everything here is pure: no network, no globals that change.  Numbers are
#   computed first (WindowStats, IrrigationPlan ...) and text is rendered
#   from them, so tests can assert on either.
#
# HUMIDITY:
#   Stored as a fraction.  _pct() is the ONLY place it becomes a percentage.
#
# PLANTING VERDICT:
#   Planting rules run in a fixed order and each may set the should-plant
#   flag.  The LAST rule that sets it wins (resolve_planting_verdict).  Only
#   the temperature rule sets it to True; only crops with excess_rain_blocks
#   can have rainfall knock it back to False.
# =============================================================================

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from core.crops import get_profile
from core.models import (
    AdvisoryVerdict,
    Crop,
    CropProfile,
    DailyForecast,
    ForecastSeries,
    RainRule,
    Reason,
    RuleCheck,
    Severity,
    Verdict,
)

# --- Windows ---
PLANTING_WINDOW_DAYS = 7
IRRIGATION_WINDOW_DAYS = 7
MAX_FIELD_WORK_DAYS = 3

# --- General advisory bands ---
HEAT_STRESS_C = 35.0
COLD_DELAY_C = 15.0
DROUGHT_MM = 10.0
EXCESS_RAIN_MM = 100.0
FIELD_WORK_MAX_RAIN_MM = 2.0

# --- Irrigation ---
ET_FACTOR = 0.6                        # ET_daily = mean max temp × 0.6 (empirical)
SKIP_IRRIGATION_MM = 10.0
LIGHT_IRRIGATION_MM = 5.0
HOT_DAY_C = 30.0

_ATTRIBUTE_LABELS = {
    "max_temperature": ("Max temp", "°C"),
    "min_temperature": ("Min temp", "°C"),
    "precipitation": ("Rain", " mm"),
    "relative_humidity": ("Humidity", "%"),
    "wind_speed": ("Wind", " m/s"),
    "solar_radiation": ("Solar radiation", " W/m²"),
}


# =============================================================================
# Shared statistics
# =============================================================================
def _mean(values: Iterable[float]) -> Optional[float]:
    values = list(values)
    if not values:
        return None
    return sum(values) / len(values)


def _total(values: Iterable[float]) -> Optional[float]:
    values = list(values)
    if not values:
        return None
    return sum(values)


def _pct(fraction: float) -> float:
    return fraction * 100


@dataclass
class WindowStats:
    """Window-wide summary numbers used by every advisory mode."""

    days: int
    start_date: Optional[str]
    end_date: Optional[str]
    avg_max_temp: Optional[float]
    avg_min_temp: Optional[float]
    total_precip: Optional[float]
    avg_humidity: Optional[float]      # fraction

    @property
    def period(self) -> str:
        if not self.start_date:
            return "N/A"
        return f"{self.start_date} to {self.end_date}"


def compute_stats(series: ForecastSeries) -> WindowStats:
    days = series.results
    return WindowStats(
        days=len(days),
        start_date=days[0].date if days else None,
        end_date=days[-1].date if days else None,
        avg_max_temp=_mean(series.values("max_temperature")),
        avg_min_temp=_mean(series.values("min_temperature")),
        total_precip=_total(series.values("precipitation")),
        avg_humidity=_mean(series.values("relative_humidity")),
    )


def _stat_lines(stats: WindowStats) -> list[str]:
    lines = []
    if stats.avg_max_temp is not None:
        lines.append(f"  • Average max temperature: {stats.avg_max_temp:.1f}°C")
    if stats.avg_min_temp is not None:
        lines.append(f"  • Average min temperature: {stats.avg_min_temp:.1f}°C")
    if stats.avg_humidity is not None:
        lines.append(f"  • Average humidity: {_pct(stats.avg_humidity):.1f}%")
    if stats.total_precip is not None:
        lines.append(f"  • Total rainfall: {stats.total_precip:.1f} mm")
    return lines


# =============================================================================
# (a) Forecast presentation
# =============================================================================
def format_value(name: str, value: float) -> str:
    """Render one attribute with its unit ("relative_humidity" → "65.0%")."""
    base = name[:-5] if name.endswith("_anom") else name
    label, unit = _ATTRIBUTE_LABELS.get(base, (base.replace("_", " ").capitalize(), ""))
    shown = _pct(value) if base == "relative_humidity" else value
    if name.endswith("_anom"):
        return f"{label} vs normal: {shown:+.1f}{unit}"
    return f"{label}: {shown:.1f}{unit}"


def format_day(day: DailyForecast) -> list[str]:
    lines = [f"📅 {day.date}"]
    known = [n for n in _ATTRIBUTE_LABELS if n in day.attributes]
    extra = sorted(n for n in day.attributes if n not in _ATTRIBUTE_LABELS)
    for name in known + extra:
        lines.append(f"  • {format_value(name, day.attributes[name])}")
    return lines


def format_forecast(series: ForecastSeries, title: str = "Weather Forecast") -> str:
    """Per-day listing of every available attribute plus a period summary.

    The summary (mean max/min temperature, mean humidity, total rainfall)
    covers the whole series passed in.
    """
    stats = compute_stats(series)
    lines = [f"🌤️ {title} ({stats.days} days)", f"Period: {stats.period}", ""]
    for day in series:
        lines.extend(format_day(day))
        lines.append("")

    summary = _stat_lines(stats)
    if summary:
        lines.append("📊 Summary:")
        lines.extend(summary)
    return "\n".join(lines).rstrip()


# =============================================================================
# (b) General farming advisory
# =============================================================================
@dataclass
class FarmingAdvice:
    stats: WindowStats
    verdict: AdvisoryVerdict
    crop: Optional[Crop] = None
    field_work_days: list[str] = field(default_factory=list)
    text: str = ""


def temperature_band(avg_max_temp: float) -> list[Reason]:
    if avg_max_temp > HEAT_STRESS_C:
        return [
            Reason(Severity.WARNING, f"High temperatures ({avg_max_temp:.1f}°C) - risk of heat stress"),
            Reason(Severity.WARNING, "Irrigate early morning or evening and mulch to keep soil cool"),
        ]
    if avg_max_temp < COLD_DELAY_C:
        return [
            Reason(Severity.WARNING, f"Cool temperatures ({avg_max_temp:.1f}°C) - crop growth may be slow"),
            Reason(Severity.WARNING, "Consider delaying planting of warm-season crops"),
        ]
    return [Reason(Severity.OK, f"Temperatures ({avg_max_temp:.1f}°C) are favorable for most crops")]


def rainfall_band(total_precip: float) -> list[Reason]:
    if total_precip < DROUGHT_MM:
        return [
            Reason(Severity.WARNING, f"Very little rain expected ({total_precip:.1f} mm) - drought conditions"),
            Reason(Severity.WARNING, "Plan irrigation and conserve soil moisture with mulch"),
        ]
    if total_precip > EXCESS_RAIN_MM:
        return [
            Reason(Severity.WARNING, f"Heavy rainfall expected ({total_precip:.1f} mm) - risk of waterlogging"),
            Reason(Severity.WARNING, "Clear drainage channels and delay fertilizer application"),
        ]
    return [Reason(Severity.OK, f"Rainfall ({total_precip:.1f} mm) is adequate")]


def crop_fits(profile: CropProfile, stats: WindowStats) -> bool:
    """Whether the window means fall inside the crop's optimal band."""
    if stats.avg_max_temp is None:
        return False
    if not profile.temp_min <= stats.avg_max_temp <= profile.temp_max:
        return False
    if profile.min_humidity is not None:
        return stats.avg_humidity is not None and stats.avg_humidity >= profile.min_humidity
    return True


def field_work_days(series: ForecastSeries, limit: int = MAX_FIELD_WORK_DAYS) -> list[str]:
    """Dates with under 2 mm of rain, earliest first, at most ``limit``."""
    dry = [
        d.date for d in series
        if d.precipitation is not None and d.precipitation < FIELD_WORK_MAX_RAIN_MM
    ]
    return dry[:limit]


def _anomaly_lines(series: ForecastSeries) -> list[str]:
    lines = []
    temp_anom = _mean(series.values("max_temperature_anom"))
    if temp_anom is not None:
        direction = "above" if temp_anom >= 0 else "below"
        lines.append(f"  • Daytime temperatures {abs(temp_anom):.1f}°C {direction} normal")
    rain_anom = _total(series.values("precipitation_anom"))
    if rain_anom is not None:
        direction = "more" if rain_anom >= 0 else "less"
        lines.append(f"  • {abs(rain_anom):.1f} mm {direction} rain than normal")
    return lines


def farming_advisory(series: ForecastSeries, crop: Optional[Crop] = None,
                     days: int = 14) -> FarmingAdvice:
    """General outlook over the first ``days`` entries of ``series``.

    Temperature and rainfall bands are evaluated independently; both may
    warn.  The verdict is FAVORABLE when neither warns, UNFAVORABLE when
    either does, and WAIT when temperature or rainfall data is missing.
    """
    window = series.window(days)
    stats = compute_stats(window)

    reasons: list[Reason] = []
    if stats.avg_max_temp is not None:
        reasons.extend(temperature_band(stats.avg_max_temp))
    if stats.total_precip is not None:
        reasons.extend(rainfall_band(stats.total_precip))

    if stats.avg_max_temp is None or stats.total_precip is None:
        verdict = Verdict.WAIT
    elif any(r.severity is not Severity.OK for r in reasons):
        verdict = Verdict.UNFAVORABLE
    else:
        verdict = Verdict.FAVORABLE

    advice = FarmingAdvice(
        stats=stats,
        verdict=AdvisoryVerdict(verdict, reasons),
        crop=crop,
        field_work_days=field_work_days(window),
    )
    advice.text = _render_farming(advice, window)
    return advice


def _render_farming(advice: FarmingAdvice, window: ForecastSeries) -> str:
    stats = advice.stats
    lines = [f"🌾 Farming Advisory (next {stats.days} days)", f"Period: {stats.period}", ""]

    outlook = _stat_lines(stats)
    if outlook:
        lines.append("📊 Weather outlook:")
        lines.extend(outlook)
        lines.append("")

    anomalies = _anomaly_lines(window)
    if anomalies:
        lines.append("📈 Compared with normal:")
        lines.extend(anomalies)
        lines.append("")

    if advice.verdict.reasons:
        lines.append("🔍 Conditions:")
        lines.extend(f"  {r.render()}" for r in advice.verdict.reasons)
        lines.append("")
    else:
        lines.append("⏳ Not enough temperature or rainfall data to assess conditions.")
        lines.append("")

    if advice.crop is not None:
        profile = get_profile(advice.crop)
        lines.append(f"🌱 {profile.name.title()} guidance:")
        lines.extend(f"  • {tip}" for tip in profile.guidance)
        if crop_fits(profile, stats):
            lines.append(f"  ✅ Current conditions are favorable for {profile.name}")
        lines.append("")

    if advice.field_work_days:
        lines.append("📅 Good days for field work (little or no rain):")
        lines.extend(f"  • {d}" for d in advice.field_work_days)
    else:
        lines.append("📅 No clearly dry days ahead; plan field work around breaks in the rain.")
    return "\n".join(lines).rstrip()


# =============================================================================
# (c) Planting recommendation
# =============================================================================
@dataclass
class PlantingAdvice:
    crop: Optional[Crop]
    stats: WindowStats
    verdict: AdvisoryVerdict
    text: str = ""

    @property
    def should_plant(self) -> bool:
        return self.verdict.is_favorable


def temperature_check(profile: CropProfile, avg_max_temp: float) -> RuleCheck:
    band = f"{profile.temp_min:g}-{profile.temp_max:g}°C"
    if avg_max_temp < profile.temp_min:
        return RuleCheck(
            Reason(Severity.BLOCKING, f"Too cold ({avg_max_temp:.1f}°C) for {profile.name} (needs {band})"),
            sets_plant=False,
        )
    if avg_max_temp > profile.temp_max:
        return RuleCheck(
            Reason(Severity.BLOCKING, f"Too hot ({avg_max_temp:.1f}°C) for {profile.name} (needs {band})"),
            sets_plant=False,
        )
    return RuleCheck(
        Reason(Severity.OK, f"Temperature ({avg_max_temp:.1f}°C) is ideal for {profile.name} ({band})"),
        sets_plant=True,
    )


def rainfall_check(profile: CropProfile, total_precip: float) -> Optional[RuleCheck]:
    """Judge 7-day rainfall against the crop's RainRule.

    Only crops flagged ``excess_rain_blocks`` ever touch the should-plant
    flag here; every other outcome is advisory.
    """
    rain = f"{total_precip:.1f} mm"
    name = profile.name

    if profile.rain_rule is RainRule.NONE:
        return None

    if profile.rain_rule is RainRule.BELOW:
        if total_precip < profile.rain_max:
            return RuleCheck(Reason(Severity.OK, f"Moderate rainfall ({rain}) suits drought-tolerant {name}"))
        return RuleCheck(Reason(
            Severity.WARNING,
            f"Rainfall ({rain}) is above the {profile.rain_max:g} mm {name} prefers - ensure good drainage",
        ))

    if total_precip < profile.rain_min:
        if profile.irrigation_dependent:
            return RuleCheck(Reason(
                Severity.WARNING,
                f"Rainfall ({rain}) is below {profile.rain_min:g} mm - "
                f"only plant {name} if you have reliable irrigation",
            ))
        return RuleCheck(Reason(
            Severity.WARNING,
            f"Low rainfall ({rain}) for {name} (needs {profile.rain_min:g} mm+) - plan supplementary irrigation",
        ))

    if profile.rain_rule is RainRule.RANGE and total_precip > profile.rain_max:
        if profile.excess_rain_blocks:
            return RuleCheck(
                Reason(Severity.BLOCKING,
                       f"Too much rain ({rain}) for {name} (max {profile.rain_max:g} mm) - "
                       f"risk of root rot, wait for drier conditions"),
                sets_plant=False,
            )
        return RuleCheck(Reason(
            Severity.WARNING,
            f"Heavy rainfall ({rain}) expected - risk of waterlogging, ensure good drainage",
        ))

    return RuleCheck(Reason(Severity.OK, f"Rainfall ({rain}) is adequate for {name}"))


def humidity_check(profile: CropProfile, avg_humidity: float) -> Optional[RuleCheck]:
    if profile.min_humidity is None:
        return None
    if avg_humidity >= profile.min_humidity:
        return RuleCheck(Reason(
            Severity.OK, f"High humidity ({_pct(avg_humidity):.1f}%) favors {profile.name}",
        ))
    return RuleCheck(Reason(
        Severity.WARNING,
        f"Humidity ({_pct(avg_humidity):.1f}%) is below the {_pct(profile.min_humidity):.0f}% "
        f"{profile.name} prefers - provide shade and mulch",
    ))


def evaluate_planting_rules(profile: CropProfile, stats: WindowStats) -> list[RuleCheck]:
    """Run temperature, rainfall and humidity rules in that order."""
    checks: list[RuleCheck] = []
    if stats.avg_max_temp is None:
        checks.append(RuleCheck(
            Reason(Severity.BLOCKING, "Temperature forecast unavailable - cannot judge planting conditions"),
            sets_plant=False,
        ))
    else:
        checks.append(temperature_check(profile, stats.avg_max_temp))

    if stats.total_precip is None:
        checks.append(RuleCheck(Reason(Severity.WARNING, "Rainfall forecast unavailable")))
    else:
        rain = rainfall_check(profile, stats.total_precip)
        if rain is not None:
            checks.append(rain)

    if stats.avg_humidity is not None:
        humidity = humidity_check(profile, stats.avg_humidity)
        if humidity is not None:
            checks.append(humidity)
    return checks


def resolve_planting_verdict(checks: list[RuleCheck], initial: bool = False) -> bool:
    """Last-write-wins over the should-plant flag.

    Checks are applied in order; every check whose ``sets_plant`` is not None
    overwrites the flag, so the final flag is whatever the last such check
    said.  Checks that only add a reason leave it unchanged.
    """
    should_plant = initial
    for check in checks:
        if check.sets_plant is not None:
            should_plant = check.sets_plant
    return should_plant


def planting_recommendation(series: ForecastSeries, crop: Optional[Crop]) -> PlantingAdvice:
    """YES / WAIT for planting ``crop`` judged on the first 7 days only."""
    window = series.window(PLANTING_WINDOW_DAYS)
    stats = compute_stats(window)
    profile = get_profile(crop)

    checks = evaluate_planting_rules(profile, stats)
    should_plant = resolve_planting_verdict(checks)

    advice = PlantingAdvice(
        crop=crop,
        stats=stats,
        verdict=AdvisoryVerdict(
            Verdict.FAVORABLE if should_plant else Verdict.WAIT,
            [c.reason for c in checks],
        ),
    )
    advice.text = _render_planting(advice, profile)
    return advice


def _render_planting(advice: PlantingAdvice, profile: CropProfile) -> str:
    stats = advice.stats
    name = profile.name
    lines = [
        f"🌱 Planting Recommendation: {name.title()}",
        f"Period: {stats.period} (next {stats.days} days)",
        "",
        "📊 Conditions:",
        *_stat_lines(stats),
        "",
        "🔍 Assessment:",
        *(f"  {r.render()}" for r in advice.verdict.reasons),
        "",
    ]
    if advice.should_plant:
        lines.append(f"✅ Verdict: YES - good time to plant {name}")
    else:
        lines.append(f"⏳ Verdict: WAIT - conditions are not yet right for planting {name}")

    if profile.guidance:
        lines.append("")
        lines.append("💡 Tips:")
        lines.extend(f"  • {tip}" for tip in profile.guidance)
    return "\n".join(lines)


# =============================================================================
# (d) Irrigation advisory
# =============================================================================
class IrrigationTier(str, Enum):
    NONE = "no irrigation needed"
    LIGHT = "light irrigation"
    MODERATE = "moderate irrigation"
    HEAVY = "heavy irrigation"


_TIER_SESSIONS = {
    IrrigationTier.NONE: None,
    IrrigationTier.LIGHT: "1-2",
    IrrigationTier.MODERATE: "2-3",
    IrrigationTier.HEAVY: "3-4",
}


def irrigation_tier(deficit: float) -> IrrigationTier:
    """Tier from the UNCLAMPED weekly deficit."""
    if deficit <= 0:
        return IrrigationTier.NONE
    if deficit < 20:
        return IrrigationTier.LIGHT
    if deficit < 40:
        return IrrigationTier.MODERATE
    return IrrigationTier.HEAVY


def daily_irrigation_advice(day: DailyForecast) -> str:
    rain = day.precipitation or 0.0
    if rain >= SKIP_IRRIGATION_MM:
        return f"Skip irrigation - {rain:.1f} mm of rain expected"
    if rain >= LIGHT_IRRIGATION_MM:
        return f"Light irrigation only if soil is dry ({rain:.1f} mm of rain expected)"
    if day.max_temperature is not None and day.max_temperature > HOT_DAY_C:
        return f"Irrigate - hot and dry ({day.max_temperature:.1f}°C)"
    return "Irrigate if there has been no recent rain"


@dataclass
class IrrigationPlan:
    crop: Optional[Crop]
    stats: WindowStats
    et_daily: Optional[float] = None
    deficit: Optional[float] = None    # unclamped; negative means surplus
    tier: Optional[IrrigationTier] = None
    daily: list[tuple[str, str]] = field(default_factory=list)
    text: str = ""

    @property
    def displayed_deficit(self) -> Optional[float]:
        if self.deficit is None:
            return None
        return max(0.0, self.deficit)

    @property
    def sessions(self) -> Optional[str]:
        return _TIER_SESSIONS.get(self.tier) if self.tier else None


def irrigation_advisory(series: ForecastSeries, crop: Optional[Crop] = None) -> IrrigationPlan:
    """Weekly water balance and a per-day irrigation plan.

    ``ET_daily = mean max temp × 0.6`` and
    ``deficit = ET_daily × 7 - total rainfall``.  The tier follows the signed
    deficit; the text shows it clamped at 0 mm.  When temperature or rainfall
    is missing, no tier is produced.
    """
    window = series.window(IRRIGATION_WINDOW_DAYS)
    stats = compute_stats(window)
    plan = IrrigationPlan(crop=crop, stats=stats)

    if stats.avg_max_temp is not None and stats.total_precip is not None:
        plan.et_daily = stats.avg_max_temp * ET_FACTOR
        plan.deficit = plan.et_daily * IRRIGATION_WINDOW_DAYS - stats.total_precip
        plan.tier = irrigation_tier(plan.deficit)

    plan.daily = [(d.date, daily_irrigation_advice(d)) for d in window]
    plan.text = _render_irrigation(plan)
    return plan


def _render_irrigation(plan: IrrigationPlan) -> str:
    stats = plan.stats
    profile = get_profile(plan.crop)
    title = "💧 Irrigation Advisory"
    if plan.crop is not None:
        title += f" ({profile.name.title()})"
    lines = [title, f"Period: {stats.period}", "", f"📊 Water balance ({stats.days} days):"]

    if stats.total_precip is not None:
        lines.append(f"  • Expected rainfall: {stats.total_precip:.1f} mm")
    if stats.avg_max_temp is not None:
        lines.append(f"  • Average max temperature: {stats.avg_max_temp:.1f}°C")
    if stats.avg_humidity is not None:
        lines.append(f"  • Average humidity: {_pct(stats.avg_humidity):.1f}%")
    if plan.et_daily is not None:
        lines.append(f"  • Estimated crop water use: {plan.et_daily:.1f} mm/day")
        lines.append(f"  • Water deficit: {plan.displayed_deficit:.1f} mm")
    lines.append("")

    tier = plan.tier
    if tier is None:
        lines.append("⏳ Not enough forecast data to estimate irrigation needs.")
    elif tier is IrrigationTier.NONE:
        lines.append("✅ Recommendation: NO IRRIGATION NEEDED")
        lines.append("  • Expected rainfall covers crop water needs this week")
    else:
        lines.append(f"🚿 Recommendation: {tier.value.upper()}")
        lines.append(f"  • Irrigate {plan.sessions} times this week")
        if tier is IrrigationTier.HEAVY:
            lines.append("  • Consider drip irrigation to save water")
        lines.append("  • Water early morning or late evening to reduce evaporation")

    if plan.daily:
        lines.append("")
        lines.append("📅 Daily plan:")
        lines.extend(f"  • {date}: {advice}" for date, advice in plan.daily)

    lines.append("")
    if profile.standing_water:
        lines.append(f"🌾 {profile.name.title()}: keep 5-10 cm of standing water in the paddy "
                     "and top up after hot, dry days")
    else:
        lines.append("⚠️ Avoid over-irrigation; waterlogged soil damages roots")
    return "\n".join(lines)
