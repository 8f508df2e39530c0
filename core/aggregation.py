# =============================================================================
# core/aggregation.py  —  Raw GAP samples → one DailyForecast per date
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   The seasonal forecast product returns several timestamped samples per
#   day, and each attribute of a sample can be an array of up to 50 ensemble
#   members.  Farmers need one number per attribute per day, so we:
#
#     1. truncate every timestamp to its calendar date
#     2. bucket all samples that share a date
#     3. per attribute, flatten scalars and ensemble arrays together
#     4. take the arithmetic mean (non-numeric, NaN and infinite values are dropped)
#     5. sort the buckets ascending by date
#
#   An attribute with nothing numeric in a bucket is left out of that day.
#
# Pure and deterministic: same samples in any order → same series.
# =============================================================================

import math
from collections import defaultdict
from numbers import Real
from typing import Any, Iterable, Optional

from core.models import DailyForecast, ForecastSeries, RawSample


def _is_number(value: Any) -> bool:
    # bool is an int subclass; a True/False flag is not a measurement.
    # JSON "NaN" / "Infinity" members are gaps, not values.
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def _numeric_values(value: Any, ensemble: bool) -> list[float]:
    if isinstance(value, (list, tuple)):
        if not ensemble:
            return []
        return [float(v) for v in value if _is_number(v)]
    if _is_number(value):
        return [float(value)]
    return []


def group_by_date(samples: Iterable[RawSample]) -> dict[str, list[RawSample]]:
    """Bucket samples by calendar date, keeping arrival order within a bucket."""
    buckets: dict[str, list[RawSample]] = defaultdict(list)
    for sample in samples:
        buckets[sample.date].append(sample)
    return dict(buckets)


def reduce_bucket(samples: list[RawSample], ensemble: bool = True) -> dict[str, float]:
    """Mean of every attribute present across one date's samples.

    Args:
        samples: All raw samples for a single date.
        ensemble: When False (historical product) array values are ignored,
            so each sample contributes at most one value per attribute.
    """
    names: set[str] = set()
    for sample in samples:
        names.update(k for k in sample.values if k != "datetime")

    reduced: dict[str, float] = {}
    for name in sorted(names):
        collected: list[float] = []
        for sample in samples:
            collected.extend(_numeric_values(sample.values.get(name), ensemble))
        if collected:
            reduced[name] = sum(collected) / len(collected)
    return reduced


def aggregate(
    samples: Iterable[RawSample],
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    ensemble: bool = True,
) -> ForecastSeries:
    """Collapse raw samples into a date-sorted ForecastSeries.

    Args:
        samples: Raw samples from one location.
        latitude / longitude: The grid point GAP matched (from the response
            geometry); copied onto every DailyForecast.
        ensemble: Average ensemble arrays (forecast product).  Pass False for
            single-value historical data.

    Returns:
        A ForecastSeries; empty (count == 0) when there were no samples.
    """
    buckets = group_by_date(samples)

    results = [
        DailyForecast(
            date=date,
            latitude=latitude,
            longitude=longitude,
            attributes=reduce_bucket(bucket, ensemble=ensemble),
        )
        for date, bucket in buckets.items()
        if date
    ]
    # Zero-padded YYYY-MM-DD sorts correctly as a string
    results.sort(key=lambda d: d.date)

    return ForecastSeries(results=results)
