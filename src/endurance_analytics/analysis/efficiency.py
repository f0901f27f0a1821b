"""
Aerobic efficiency analysis.

Tracks Efficiency Factor (NP / HR) across sessions and classifies whether
the athlete produces more or less power for the same heart rate over time.
"""

import statistics
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Sequence, Tuple, Union

from ..exceptions import InsufficientDataError
from ..metrics.power import calculate_efficiency_factor
from ..models.results import NoDataResult
from ..models.sessions import Session
from ..utils import round_half_up


MIN_SESSIONS = 5
TREND_BAND_PCT = 3.0


@dataclass
class EfficiencySample:
    """EF for one qualifying session."""

    date: date
    session_id: str
    normalized_power: float
    avg_hr: float
    ef: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "session_id": self.session_id,
            "ef": self.ef,
            "np": self.normalized_power,
            "avg_hr": self.avg_hr,
        }


@dataclass
class EfficiencyTrend:
    """Earlier-vs-later comparison of mean EF."""

    earlier_mean: float
    later_mean: float
    trend_percent: int
    direction: str  # 'improving', 'stable', 'declining'

    def to_dict(self) -> Dict[str, Any]:
        return {
            "earlier_mean": round_half_up(self.earlier_mean, 2),
            "later_mean": round_half_up(self.later_mean, 2),
            "trend_percent": self.trend_percent,
            "direction": self.direction,
        }


@dataclass
class EfficiencyAnalysis:
    """Efficiency report over a look-back window."""

    sample_count: int
    average_ef: float
    min_ef: float
    max_ef: float
    trend: EfficiencyTrend
    level: str
    best_sessions: List[EfficiencySample]
    worst_sessions: List[EfficiencySample]
    weekly_progression: List[Tuple[date, float]]
    recommendations: List[str]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "session_count": self.sample_count,
            "summary": {
                "average_ef": self.average_ef,
                "min_ef": self.min_ef,
                "max_ef": self.max_ef,
                "trend": self.trend.direction,
                "trend_percent": self.trend.trend_percent,
            },
            "interpretation": {
                "ef_meaning": "Efficiency Factor = NP/HR. Higher is better - more power for same heart rate.",
                "current_level": self.level,
                "trend_interpretation": _TREND_INTERPRETATION[self.trend.direction],
            },
            "best_sessions": [s.to_dict() for s in self.best_sessions],
            "worst_sessions": [s.to_dict() for s in self.worst_sessions],
            "weekly_progression": [
                {"week": week.isoformat(), "avg_ef": ef} for week, ef in self.weekly_progression
            ],
            "recommendations": self.recommendations,
        }


_TREND_INTERPRETATION = {
    "improving": "Aerobic fitness is improving - producing more power for same HR",
    "declining": "Efficiency declining - may indicate fatigue, overtraining, or detraining",
    "stable": "Efficiency stable - fitness is maintained",
}


def classify_efficiency_trend(
    earlier_mean: float,
    later_mean: float,
    band_pct: float = TREND_BAND_PCT,
) -> EfficiencyTrend:
    """
    Compare two mean EF values.

    trend_percent = round_half_up((later - earlier) / earlier * 100). Changes inside
    +/- ``band_pct`` are treated as noise and reported as stable.
    """
    if earlier_mean <= 0:
        trend_percent = 0
    else:
        trend_percent = round_half_up((later_mean - earlier_mean) / earlier_mean * 100)

    if trend_percent > band_pct:
        direction = "improving"
    elif trend_percent < -band_pct:
        direction = "declining"
    else:
        direction = "stable"

    return EfficiencyTrend(
        earlier_mean=earlier_mean,
        later_mean=later_mean,
        trend_percent=trend_percent,
        direction=direction,
    )


def efficiency_trend(ef_values: Sequence[float], band_pct: float = TREND_BAND_PCT) -> EfficiencyTrend:
    """
    Trend of chronologically ordered EF values, split into halves by count.

    Raises:
        InsufficientDataError: With fewer than 2 values
    """
    if len(ef_values) < 2:
        raise InsufficientDataError(
            "EF trend needs at least 2 sessions",
            required=2,
            available=len(ef_values),
        )

    midpoint = len(ef_values) // 2
    return classify_efficiency_trend(
        statistics.fmean(ef_values[:midpoint]),
        statistics.fmean(ef_values[midpoint:]),
        band_pct=band_pct,
    )


def efficiency_level(average_ef: float) -> str:
    if average_ef > 1.8:
        return "excellent"
    elif average_ef > 1.5:
        return "good"
    elif average_ef > 1.2:
        return "developing"
    else:
        return "needs work"


def efficiency_samples(sessions: Iterable[Session]) -> List[EfficiencySample]:
    """EF for every session with NP and a positive HR, oldest first."""
    samples = [
        EfficiencySample(
            date=s.date,
            session_id=s.id,
            normalized_power=s.normalized_power,
            avg_hr=s.avg_heart_rate,
            ef=calculate_efficiency_factor(s.normalized_power, s.avg_heart_rate),
        )
        for s in sessions
        if s.has_efficiency_data
    ]
    samples.sort(key=lambda s: s.date)
    return samples


def _weekly_mean_ef(samples: Sequence[EfficiencySample]) -> List[Tuple[date, float]]:
    weeks: Dict[date, List[float]] = {}
    for sample in samples:
        week_start = sample.date - timedelta(days=sample.date.weekday())
        weeks.setdefault(week_start, []).append(sample.ef)
    return [(week, round_half_up(statistics.fmean(weeks[week]), 2)) for week in sorted(weeks)]


def analyze_efficiency(
    sessions: Iterable[Session],
    min_sessions: int = MIN_SESSIONS,
    band_pct: float = TREND_BAND_PCT,
) -> Union[EfficiencyAnalysis, NoDataResult]:
    """
    Analyze aerobic efficiency across sessions.

    Args:
        sessions: Sessions in the look-back window, any order
        min_sessions: Qualifying sessions required (default 5)
        band_pct: Noise band for the trend classification

    Returns:
        EfficiencyAnalysis, or NoDataResult with too few qualifying sessions
    """
    samples = efficiency_samples(sessions)
    if len(samples) < min_sessions:
        return NoDataResult(
            message=(
                "Insufficient data for efficiency analysis. Need at least "
                f"{min_sessions} sessions with power and heart rate data."
            ),
            suggestion="Record rides with both a power meter and a heart rate strap.",
        )

    ef_values = [s.ef for s in samples]
    average_ef = round_half_up(statistics.fmean(ef_values), 2)
    trend = efficiency_trend(ef_values, band_pct=band_pct)

    # Stable sort keeps the older session first among equal EF values
    by_ef = sorted(samples, key=lambda s: s.ef, reverse=True)

    recommendations = []
    if trend.direction == "declining":
        recommendations.append("Consider a recovery week if efficiency is declining")
    if average_ef < 1.3:
        recommendations.append("Focus on aerobic development - more easy endurance rides")

    return EfficiencyAnalysis(
        sample_count=len(samples),
        average_ef=average_ef,
        min_ef=min(ef_values),
        max_ef=max(ef_values),
        trend=trend,
        level=efficiency_level(average_ef),
        best_sessions=by_ef[:3],
        worst_sessions=list(reversed(by_ef[-3:])),
        weekly_progression=_weekly_mean_ef(samples),
        recommendations=recommendations,
    )
