"""Load balance calculations (ACWR, monotony, strain, intensity distribution)."""

import math
import statistics
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from ..exceptions import InsufficientDataError
from ..models.sessions import DailyLoad, Session
from ..utils import round_half_up
from .fitness import densify_daily_loads, describe_form


ACUTE_WINDOW_DAYS = 7
CHRONIC_WINDOW_DAYS = 28
MONOTONY_WINDOW_DAYS = 7

LOW_INTENSITY_MAX_IF = 0.75
HIGH_INTENSITY_MIN_IF = 0.90


@dataclass
class ACWRResult:
    """Acute:Chronic Workload Ratio with its risk classification."""

    acwr: float
    acute_load: float  # mean daily load, acute window
    chronic_load: float  # mean daily load, chronic window
    risk: str  # 'low', 'moderate', 'high'
    zone: str  # 'under_training', 'optimal', 'caution', 'danger'
    status: str

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "value": self.acwr,
            "acute_load": self.acute_load,
            "chronic_load": self.chronic_load,
            "risk": self.risk,
            "zone": self.zone,
            "status": self.status,
            "recommendation": acwr_recommendation(self.acwr),
        }


@dataclass
class IntensityDistribution:
    """Share of sessions per intensity band, whole percentages summing to 100."""

    low: int
    medium: int
    high: int
    sessions_counted: int

    def to_dict(self) -> dict:
        return {
            "low": self.low,
            "medium": self.medium,
            "high": self.high,
            "sessions_counted": self.sessions_counted,
        }


@dataclass
class WeeklyLoad:
    """Load totals for one Monday-to-Sunday week."""

    week_start: date
    total_load: int
    training_days: int
    avg_load: int  # per training day

    def to_dict(self) -> dict:
        return {
            "week": self.week_start.isoformat(),
            "total_load": self.total_load,
            "training_days": self.training_days,
            "avg_load": self.avg_load,
        }


# ==============================================================================
# ACWR
# ==============================================================================

def classify_acwr_risk(acwr: float) -> str:
    """
    Classify ACWR into the user-facing risk label.

    Under-training (<0.8) and the sweet spot (0.8-1.3) share the "low" label;
    ``acwr_zone`` keeps them apart.
    """
    if acwr <= 1.3:
        return "low"
    elif acwr <= 1.5:
        return "moderate"
    else:
        return "high"


def acwr_zone(acwr: float) -> str:
    """
    Determine the training zone for an ACWR value.

    Based on research by Gabbett (2016) and others:
    - < 0.8: Under-training (not enough stimulus)
    - 0.8 - 1.3: Optimal (sweet spot for adaptation)
    - 1.3 - 1.5: Caution (elevated injury risk)
    - > 1.5: Danger (high injury risk)
    """
    if acwr < 0.8:
        return "under_training"
    elif acwr <= 1.3:
        return "optimal"
    elif acwr <= 1.5:
        return "caution"
    else:
        return "danger"


_ZONE_STATUS = {
    "under_training": "Under-training zone - may be losing fitness",
    "optimal": "Sweet spot - optimal balance of load and recovery",
    "caution": "Caution zone - elevated injury/overtraining risk",
    "danger": "Danger zone - high injury/overtraining risk, consider reducing load",
}


def acwr_recommendation(acwr: float) -> str:
    if acwr > 1.3:
        return "Consider reducing this week's load"
    if acwr < 0.8:
        return "Safe to increase training load"
    return "Maintain current load progression"


def calculate_acwr(
    daily_loads: Iterable[DailyLoad],
    start: Optional[date] = None,
    end: Optional[date] = None,
    acute_days: int = ACUTE_WINDOW_DAYS,
    chronic_days: int = CHRONIC_WINDOW_DAYS,
) -> ACWRResult:
    """
    Calculate the Acute:Chronic Workload Ratio.

    ACWR = mean daily load over the acute window / mean daily load over the
    chronic window, both ending on ``end`` (default: the latest load).

    History is counted from ``start`` when given, otherwise from the earliest
    load. Pass ``start`` when the athlete has history before the first load
    row so leading rest days count as zero load.

    Args:
        daily_loads: Daily loads; gaps count as rest days
        start: First day of recorded history
        end: Last day of both windows
        acute_days: Acute window length (default 7)
        chronic_days: Chronic window length (default 28)

    Returns:
        ACWRResult rounded to 2 decimals

    Raises:
        InsufficientDataError: If fewer than ``chronic_days`` days are covered
    """
    series = densify_daily_loads(daily_loads, start=start, end=end)
    if len(series) < chronic_days:
        raise InsufficientDataError(
            f"ACWR needs at least {chronic_days} days of load history",
            required=chronic_days,
            available=len(series),
        )

    loads = [d.training_stress for d in series]
    acute_load = math.fsum(loads[-acute_days:]) / acute_days
    chronic_load = math.fsum(loads[-chronic_days:]) / chronic_days
    acwr = round_half_up(acute_load / chronic_load, 2) if chronic_load > 0 else 0.0

    zone = acwr_zone(acwr)
    return ACWRResult(
        acwr=acwr,
        acute_load=round_half_up(acute_load, 1),
        chronic_load=round_half_up(chronic_load, 1),
        risk=classify_acwr_risk(acwr),
        zone=zone,
        status=_ZONE_STATUS[zone],
    )


# ==============================================================================
# Monotony and strain
# ==============================================================================

def calculate_monotony(week_loads: Sequence[float]) -> float:
    """
    Training monotony (Foster): mean / standard deviation of daily load.

    A week of identical days has zero deviation; monotony is defined as 0
    in that case.

    Args:
        week_loads: Exactly 7 daily loads

    Returns:
        Monotony rounded to 2 decimals

    Raises:
        InsufficientDataError: If not given exactly 7 values
    """
    if len(week_loads) != MONOTONY_WINDOW_DAYS:
        raise InsufficientDataError(
            f"Monotony needs exactly {MONOTONY_WINDOW_DAYS} daily loads",
            required=MONOTONY_WINDOW_DAYS,
            available=len(week_loads),
        )

    std_dev = statistics.pstdev(week_loads)
    if std_dev == 0:
        return 0.0
    return round_half_up(statistics.fmean(week_loads) / std_dev, 2)


def calculate_strain(week_loads: Sequence[float], monotony: Optional[float] = None) -> int:
    """Weekly strain = weekly load x monotony, rounded to the nearest integer."""
    if monotony is None:
        monotony = calculate_monotony(week_loads)
    return round_half_up(math.fsum(week_loads) * monotony)


def last_week_loads(
    daily_loads: Iterable[DailyLoad],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[float]:
    """The 7 daily loads ending on ``end`` with rest days zero-filled."""
    series = densify_daily_loads(daily_loads, start=start, end=end)
    if len(series) < MONOTONY_WINDOW_DAYS:
        raise InsufficientDataError(
            f"Need at least {MONOTONY_WINDOW_DAYS} days of load history",
            required=MONOTONY_WINDOW_DAYS,
            available=len(series),
        )
    return [d.training_stress for d in series[-MONOTONY_WINDOW_DAYS:]]


def assess_monotony(monotony: float) -> str:
    if monotony < 1.5:
        return "Good variety - training load varies appropriately day to day"
    elif monotony < 2.0:
        return "Moderate monotony - consider adding more variation"
    else:
        return "High monotony - training too repetitive, risk of staleness"


def assess_strain(strain: int) -> str:
    if strain < 3000:
        return "Low strain - room for more training"
    elif strain < 6000:
        return "Moderate strain - sustainable training load"
    elif strain < 10000:
        return "High strain - monitor recovery carefully"
    else:
        return "Very high strain - consider a recovery period"


# ==============================================================================
# Weekly breakdown and intensity distribution
# ==============================================================================

def weekly_breakdown(daily_loads: Iterable[DailyLoad]) -> List[WeeklyLoad]:
    """Group daily loads into Monday-start weeks."""
    weeks: Dict[date, List[float]] = {}
    for day in densify_daily_loads(daily_loads):
        week_start = day.date - timedelta(days=day.date.weekday())
        weeks.setdefault(week_start, []).append(day.training_stress)

    breakdown = []
    for week_start in sorted(weeks):
        loads = weeks[week_start]
        total = math.fsum(loads)
        training_days = sum(1 for load in loads if load > 0)
        breakdown.append(
            WeeklyLoad(
                week_start=week_start,
                total_load=round_half_up(total),
                training_days=training_days,
                avg_load=round_half_up(total / training_days) if training_days else 0,
            )
        )
    return breakdown


def _largest_remainder_percentages(counts: Sequence[int]) -> List[int]:
    """Whole percentages for ``counts`` that always add up to 100."""
    total = sum(counts)
    raw = [count * 100 / total for count in counts]
    floors = [math.floor(value) for value in raw]
    shortfall = 100 - sum(floors)
    by_remainder = sorted(range(len(raw)), key=lambda i: raw[i] - floors[i], reverse=True)
    for i in by_remainder[:shortfall]:
        floors[i] += 1
    return floors


def intensity_distribution(sessions: Iterable[Session]) -> Optional[IntensityDistribution]:
    """
    Distribute sessions into low/medium/high intensity by Intensity Factor.

    - Low: IF < 0.75
    - Medium: 0.75 <= IF < 0.90
    - High: IF >= 0.90

    Sessions without an intensity factor are not counted.

    Returns:
        IntensityDistribution, or None when no session has an IF
    """
    factors = [s.intensity_factor for s in sessions if s.intensity_factor is not None]
    if not factors:
        return None

    low = sum(1 for f in factors if f < LOW_INTENSITY_MAX_IF)
    high = sum(1 for f in factors if f >= HIGH_INTENSITY_MIN_IF)
    medium = len(factors) - low - high

    low_pct, medium_pct, high_pct = _largest_remainder_percentages([low, medium, high])
    return IntensityDistribution(
        low=low_pct,
        medium=medium_pct,
        high=high_pct,
        sessions_counted=len(factors),
    )


# ==============================================================================
# Training load report
# ==============================================================================

@dataclass
class TrainingLoadReport:
    """Composite load-balance view for the last few weeks."""

    acwr: ACWRResult
    monotony: float
    strain: int
    ctl: float
    atl: float
    weeks: List[WeeklyLoad]
    recommendations: List[str]

    @property
    def tsb(self) -> int:
        return round_half_up(self.ctl - self.atl)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "acwr": self.acwr.to_dict(),
            "monotony": {
                "value": self.monotony,
                "assessment": assess_monotony(self.monotony),
            },
            "strain": {
                "value": self.strain,
                "assessment": assess_strain(self.strain),
            },
            "current_fitness": {
                "ctl": round_half_up(self.ctl),
                "atl": round_half_up(self.atl),
                "tsb": self.tsb,
                "form_status": describe_form(self.tsb),
            },
            "weekly_breakdown": [week.to_dict() for week in self.weeks],
            "recommendations": self.recommendations,
        }


def load_recommendations(acwr: float, monotony: float, strain: int, tsb: float) -> List[str]:
    """Actionable advice for the current load balance, most urgent first."""
    recommendations = []
    if acwr > 1.5:
        recommendations.append(
            "URGENT: Your acute load is much higher than your chronic load. "
            "Reduce training volume this week to avoid injury."
        )
    elif acwr > 1.3:
        recommendations.append(
            "Consider an easier week to let your body adapt to recent load increases."
        )
    if monotony > 2.0:
        recommendations.append(
            "Add more variety: alternate hard and easy days, include rest days."
        )
    if strain > 8000:
        recommendations.append(
            "High strain detected. Prioritize sleep, nutrition, and recovery."
        )
    if tsb < -25:
        recommendations.append(
            "You're carrying significant fatigue. Schedule a recovery day or two."
        )
    return recommendations


def analyze_training_load(
    daily_loads: Sequence[DailyLoad],
    ctl: float,
    atl: float,
    start: Optional[date] = None,
    end: Optional[date] = None,
    acute_days: int = ACUTE_WINDOW_DAYS,
    chronic_days: int = CHRONIC_WINDOW_DAYS,
) -> TrainingLoadReport:
    """
    Build the load-balance report: ACWR, monotony, strain, weekly breakdown.

    Args:
        daily_loads: At least ``chronic_days`` days of load history
        ctl: Current chronic training load
        atl: Current acute training load
        start: First day of recorded history (default: earliest load)
        end: Last day of the analysis window (default: latest load)

    Raises:
        InsufficientDataError: If the history is shorter than the chronic window
    """
    series = densify_daily_loads(daily_loads, start=start, end=end)
    acwr = calculate_acwr(series, acute_days=acute_days, chronic_days=chronic_days)

    week = [d.training_stress for d in series[-MONOTONY_WINDOW_DAYS:]]
    monotony = calculate_monotony(week)
    strain = calculate_strain(week, monotony)

    return TrainingLoadReport(
        acwr=acwr,
        monotony=monotony,
        strain=strain,
        ctl=ctl,
        atl=atl,
        weeks=weekly_breakdown(series[-chronic_days:]),
        recommendations=load_recommendations(acwr.acwr, monotony, strain, ctl - atl),
    )
