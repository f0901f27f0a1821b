"""
Race Performance Analysis

Placement trends, form (TSB) correlation, terrain strengths and power
summaries from an athlete's race history.
"""

import re
import statistics
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..models.races import FormBucket, Race, RaceStatistics, TerrainGroup
from ..models.requests import RaceAnalysisRequest
from ..models.results import NoDataResult
from ..utils import round_half_up


MIN_RACES_FOR_TREND = 6
TREND_THRESHOLD_PCT = 5.0
MIN_RACES_PER_GROUP = 2
TERRAIN_GAP_THRESHOLD_PCT = 10
RECENT_RACES = 5
FEW_RACES = 10

# (label, lower bound inclusive, upper bound exclusive); None is open-ended
TSB_BUCKETS: Tuple[Tuple[str, Optional[float], Optional[float]], ...] = (
    ("Very Fatigued (<-20)", None, -20),
    ("Fatigued (-20 to -10)", -20, -10),
    ("Neutral (-10 to 5)", -10, 5),
    ("Fresh (5 to 15)", 5, 15),
    ("Very Fresh (>15)", 15, None),
)

_BOUNDED_RANGE = re.compile(r"\((-?\d+)\s*to\s*(-?\d+)\)")
_OPEN_RANGE = re.compile(r"([<>])(-?\d+)")


@dataclass(frozen=True)
class TsbRange:
    """TSB bounds parsed from a bucket label; None means unbounded."""

    min: Optional[int]
    max: Optional[int]

    def describe(self) -> str:
        if self.min is not None and self.max is not None:
            return f"{self.min} to {self.max}"
        if self.min is not None:
            return f"above {self.min}"
        return f"below {self.max}"

    def to_dict(self) -> Dict[str, Optional[int]]:
        return {"min": self.min, "max": self.max}


@dataclass
class RacePowerSummary:
    avg_race_power: int
    races_with_power: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "avg_race_power": self.avg_race_power,
            "races_with_power": self.races_with_power,
        }


@dataclass
class RacePerformanceReport:
    """Race performance analysis for one athlete."""

    stats: RaceStatistics
    placement_trend: str  # 'improving', 'stable', 'declining'
    category_progression: Optional[List[str]]
    form_buckets: List[FormBucket]
    best_tsb_range: Optional[TsbRange]
    best_tsb_avg_placement: Optional[int]
    terrain_groups: List[TerrainGroup]
    terrain_insight: Optional[str]
    power: Optional[RacePowerSummary]
    recent_races: List[Race]
    recommendations: List[str]

    @property
    def form_insight(self) -> str:
        if self.best_tsb_range is None:
            return "Insufficient data to determine optimal form range. Keep racing and tracking!"
        return (
            f"Your best results come when TSB is {self.best_tsb_range.describe()}. "
            "Plan key races for this form range."
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        form_correlation: Dict[str, Any] = {
            "analysis": [b.model_dump() for b in self.form_buckets],
            "insight": self.form_insight,
        }
        if self.best_tsb_range is not None:
            form_correlation["best_tsb_range"] = {
                **self.best_tsb_range.to_dict(),
                "avg_placement": self.best_tsb_avg_placement,
            }

        return {
            "summary": {
                "total_races": self.stats.total_races,
                "avg_placement": self.stats.avg_placement,
                "avg_placement_percent": self.stats.avg_placement_percent,
                "best_placement": self.stats.best_placement,
                "placement_trend": self.placement_trend,
                "category_progression": self.category_progression,
            },
            "form_correlation": form_correlation,
            "terrain_analysis": {
                "by_type": [g.model_dump() for g in self.terrain_groups],
                "insight": self.terrain_insight or "No significant terrain preference detected.",
            },
            "power_analysis": self.power.to_dict() if self.power else None,
            "recent_races": [
                {
                    "name": r.name,
                    "date": r.date.isoformat(),
                    "placement": r.placement,
                    "total": r.total_in_category,
                    "category": r.category,
                    "avg_power": r.avg_power,
                    "avg_wkg": r.avg_wkg,
                    "tsb": r.tsb_at_race,
                }
                for r in self.recent_races
            ],
            "recommendations": self.recommendations,
        }


def _mean_rounded(values: Sequence[float]) -> Optional[int]:
    return round_half_up(statistics.fmean(values)) if values else None


def _placement_averages(races: Sequence[Race]) -> Tuple[Optional[int], Optional[int]]:
    placements = [r.placement for r in races if r.placement is not None]
    percents = [r.placement_percent for r in races if r.placement_percent is not None]
    return _mean_rounded(placements), _mean_rounded(percents)


# ==============================================================================
# Aggregations
# ==============================================================================

def race_statistics(races: Sequence[Race]) -> RaceStatistics:
    """Career totals for a race history."""
    avg_placement, avg_percent = _placement_averages(races)
    placements = [r.placement for r in races if r.placement is not None]

    category_counts: Dict[str, int] = {}
    race_type_counts: Dict[str, int] = {}
    for race in races:
        if race.category:
            category_counts[race.category] = category_counts.get(race.category, 0) + 1
        if race.race_type:
            key = race.race_type.value
            race_type_counts[key] = race_type_counts.get(key, 0) + 1

    return RaceStatistics(
        total_races=len(races),
        avg_placement=avg_placement,
        avg_placement_percent=avg_percent,
        category_counts=category_counts,
        race_type_counts=race_type_counts,
        best_placement=min(placements) if placements else None,
        worst_placement=max(placements) if placements else None,
    )


def races_by_form(races: Sequence[Race]) -> List[FormBucket]:
    """
    Group placed races by TSB on race day.

    Buckets are half-open ``[min, max)``; empty buckets are omitted.
    """
    placed = [r for r in races if r.tsb_at_race is not None and r.placement is not None]

    buckets = []
    for label, low, high in TSB_BUCKETS:
        in_range = [
            r for r in placed
            if (low is None or r.tsb_at_race >= low)
            and (high is None or r.tsb_at_race < high)
        ]
        if not in_range:
            continue
        avg_placement, avg_percent = _placement_averages(in_range)
        buckets.append(
            FormBucket(
                tsb_range=label,
                races=len(in_range),
                avg_placement=avg_placement,
                avg_placement_percent=avg_percent,
            )
        )
    return buckets


def performance_by_race_type(races: Sequence[Race]) -> List[TerrainGroup]:
    """Group races by course type, in order of first appearance."""
    by_type: Dict[str, List[Race]] = {}
    for race in races:
        if race.race_type is not None:
            by_type.setdefault(race.race_type.value, []).append(race)

    groups = []
    for race_type, typed in by_type.items():
        avg_placement, avg_percent = _placement_averages(typed)
        wkgs = [r.avg_wkg for r in typed if r.avg_wkg is not None]
        groups.append(
            TerrainGroup(
                race_type=race_type,
                races=len(typed),
                avg_placement=avg_placement,
                avg_placement_percent=avg_percent,
                avg_wkg=round_half_up(statistics.fmean(wkgs), 2) if wkgs else None,
            )
        )
    return groups


# ==============================================================================
# Insights
# ==============================================================================

def placement_trend(races: Sequence[Race], min_races: int = MIN_RACES_FOR_TREND) -> str:
    """
    Compare mean placement percentile of the older and newer half of races.

    Halves are split by count after sorting by date. Races without both a
    placement and a field size are left out of either half. Below
    ``min_races`` the trend is "stable".
    """
    if len(races) < min_races:
        return "stable"

    ordered = sorted(races, key=lambda r: r.date)
    midpoint = len(ordered) // 2
    older = [r.placement_percent for r in ordered[:midpoint] if r.placement_percent is not None]
    newer = [r.placement_percent for r in ordered[midpoint:] if r.placement_percent is not None]
    if not older or not newer:
        return "stable"

    # Lower percentile is better, so a positive difference is improvement
    diff = statistics.fmean(older) - statistics.fmean(newer)
    if diff > TREND_THRESHOLD_PCT:
        return "improving"
    elif diff < -TREND_THRESHOLD_PCT:
        return "declining"
    return "stable"


def category_progression(races: Sequence[Race]) -> List[str]:
    """Categories in date order with consecutive repeats collapsed."""
    progression: List[str] = []
    for race in sorted(races, key=lambda r: r.date):
        if race.category and (not progression or progression[-1] != race.category):
            progression.append(race.category)
    return progression


def parse_tsb_range(label: str) -> Optional[TsbRange]:
    """
    Parse the numeric bounds out of a TSB bucket label.

    "Fresh (5 to 15)" -> TsbRange(5, 15); "Very Fatigued (<-20)" ->
    TsbRange(None, -20); "Very Fresh (>15)" -> TsbRange(15, None).
    """
    bounded = _BOUNDED_RANGE.search(label)
    if bounded:
        return TsbRange(min=int(bounded.group(1)), max=int(bounded.group(2)))

    open_ended = _OPEN_RANGE.search(label)
    if open_ended:
        bound = int(open_ended.group(2))
        if open_ended.group(1) == "<":
            return TsbRange(min=None, max=bound)
        return TsbRange(min=bound, max=None)

    return None


def best_form_bucket(buckets: Iterable[FormBucket]) -> Optional[FormBucket]:
    """Bucket with the lowest mean placement among those with 2+ races."""
    candidates = [
        b for b in buckets
        if b.races >= MIN_RACES_PER_GROUP and b.avg_placement is not None
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda b: b.avg_placement)


def terrain_insight(groups: Iterable[TerrainGroup]) -> Optional[str]:
    """Relative comparison of best and worst terrain, if the gap is large."""
    candidates = [g for g in groups if g.races >= MIN_RACES_PER_GROUP]
    if len(candidates) < 2:
        return None

    best = min(
        candidates,
        key=lambda g: g.avg_placement_percent if g.avg_placement_percent is not None else 100,
    )
    worst = max(
        candidates,
        key=lambda g: g.avg_placement_percent if g.avg_placement_percent is not None else 0,
    )
    if (
        best.race_type == worst.race_type
        or not best.avg_placement_percent
        or not worst.avg_placement_percent
    ):
        return None

    gap = round_half_up(worst.avg_placement_percent - best.avg_placement_percent)
    if gap <= TERRAIN_GAP_THRESHOLD_PCT:
        return None

    return (
        f"You place {gap}% better in {best.race_type} races than {worst.race_type} races. "
        f"Consider focusing on {worst.race_type} course training."
    )


def race_power_summary(races: Iterable[Race]) -> Optional[RacePowerSummary]:
    """Mean race power, omitted entirely when no race has power data."""
    powers = [r.avg_power for r in races if r.avg_power]
    if not powers:
        return None
    return RacePowerSummary(
        avg_race_power=round_half_up(statistics.fmean(powers)),
        races_with_power=len(powers),
    )


def filter_races(races: Iterable[Race], request: RaceAnalysisRequest, today: date) -> List[Race]:
    """Apply period, category and race-type filters."""
    start = request.period.start_date(today)
    return [
        r for r in races
        if (start is None or r.date >= start)
        and (request.category is None or r.category == request.category)
        and (request.race_type is None or r.race_type == request.race_type)
    ]


def analyze_race_performance(
    races: Sequence[Race],
    race_stats: Optional[RaceStatistics] = None,
    form_buckets: Optional[List[FormBucket]] = None,
    terrain_groups: Optional[List[TerrainGroup]] = None,
    min_races_for_trend: int = MIN_RACES_FOR_TREND,
) -> Union[RacePerformanceReport, NoDataResult]:
    """
    Analyze race performance.

    Aggregates that the caller does not supply are computed from ``races``.

    Args:
        races: Filtered race history, any order
        race_stats: Career statistics (default: computed from races)
        form_buckets: Results grouped by TSB (default: computed from races)
        terrain_groups: Results grouped by race type (default: computed from races)
        min_races_for_trend: Races needed before a placement trend is reported

    Returns:
        RacePerformanceReport, or NoDataResult for an empty history
    """
    if not races:
        return NoDataResult(
            message="No race results found. Connect a race results source and sync your races to enable race analysis.",
            suggestion="Go to Settings > Integrations to connect your race results.",
        )

    if race_stats is None:
        race_stats = race_statistics(races)
    if form_buckets is None:
        form_buckets = races_by_form(races)
    if terrain_groups is None:
        terrain_groups = performance_by_race_type(races)

    trend = placement_trend(races, min_races=min_races_for_trend)
    progression = category_progression(races)

    best_bucket = best_form_bucket(form_buckets)
    best_range = parse_tsb_range(best_bucket.tsb_range) if best_bucket else None
    terrain = terrain_insight(terrain_groups)

    recommendations = []
    if trend == "declining":
        recommendations.append("Consider reviewing your training - race results are declining")
    if best_range is not None and best_range.min is not None and best_range.min > -5:
        recommendations.append(f"Target TSB of {best_range.describe()} for important races")
    if terrain:
        recommendations.append(terrain)
    if race_stats.total_races < FEW_RACES:
        recommendations.append("Keep racing to build more data for accurate analysis")

    return RacePerformanceReport(
        stats=race_stats,
        placement_trend=trend,
        category_progression=progression if len(progression) > 1 else None,
        form_buckets=form_buckets,
        best_tsb_range=best_range,
        best_tsb_avg_placement=best_bucket.avg_placement if best_range else None,
        terrain_groups=terrain_groups,
        terrain_insight=terrain,
        power=race_power_summary(races),
        recent_races=sorted(races, key=lambda r: r.date, reverse=True)[:RECENT_RACES],
        recommendations=recommendations,
    )
