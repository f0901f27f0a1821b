"""
Historical Training Trends

Summarize training volume, intensity and fitness progression over a period.
"""

import math
import statistics
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

from ..metrics.fitness import FitnessPoint
from ..metrics.load import IntensityDistribution, intensity_distribution
from ..models.results import NoDataResult
from ..models.sessions import Session
from ..utils import round_half_up


@dataclass
class FitnessSummary:
    """CTL/ATL/TSB progression across a period."""

    start_ctl: float
    end_ctl: float
    avg_tsb: float
    current_atl: float
    current_tsb: int

    @property
    def ctl_change(self) -> float:
        return self.end_ctl - self.start_ctl

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_ctl": round_half_up(self.start_ctl),
            "end_ctl": round_half_up(self.end_ctl),
            "ctl_change": round_half_up(self.ctl_change, 1),
            "avg_tsb": round_half_up(self.avg_tsb),
            "current_atl": round_half_up(self.current_atl),
            "current_tsb": self.current_tsb,
        }


@dataclass
class PeriodSummary:
    """Training volume and intensity over a look-back period."""

    period_days: int
    session_count: int
    total_tss: float
    total_seconds: int
    avg_intensity_factor: Optional[float]
    intensity: Optional[IntensityDistribution]
    fitness: Optional[FitnessSummary]
    tss_sessions: int  # sessions with a known TSS

    @property
    def avg_tss_per_session(self) -> Optional[int]:
        if not self.tss_sessions:
            return None
        return round_half_up(self.total_tss / self.tss_sessions)

    @property
    def total_hours(self) -> float:
        return round_half_up(self.total_seconds / 3600, 1)

    @property
    def avg_hours_per_session(self) -> float:
        return round_half_up(self.total_seconds / self.session_count / 3600, 1)

    @property
    def sessions_per_week(self) -> float:
        return round_half_up(self.session_count / (self.period_days / 7), 1)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "period_days": self.period_days,
            "session_count": self.session_count,
            "total_tss": round_half_up(self.total_tss),
            "avg_tss_per_session": self.avg_tss_per_session,
            "total_hours": self.total_hours,
            "avg_hours_per_session": self.avg_hours_per_session,
            "avg_intensity_factor": self.avg_intensity_factor,
            "sessions_per_week": self.sessions_per_week,
            "intensity_distribution": self.intensity.to_dict() if self.intensity else None,
            "fitness": self.fitness.to_dict() if self.fitness else None,
        }


def summarize_fitness(history: Sequence[FitnessPoint]) -> Optional[FitnessSummary]:
    """Start/end CTL, mean TSB and current state for a fitness series."""
    if not history:
        return None

    first, last = history[0], history[-1]
    return FitnessSummary(
        start_ctl=first.ctl,
        end_ctl=last.ctl,
        avg_tsb=statistics.fmean(point.ctl - point.atl for point in history),
        current_atl=last.atl,
        current_tsb=last.tsb,
    )


def summarize_period(
    sessions: Sequence[Session],
    period_days: int,
    fitness_history: Optional[Sequence[FitnessPoint]] = None,
) -> Union[PeriodSummary, NoDataResult]:
    """
    Summarize sessions recorded during the last ``period_days`` days.

    TSS and IF averages only include sessions where the value is known.

    Args:
        sessions: Sessions already restricted to the period
        period_days: Period length used for the per-week rate
        fitness_history: Optional fitness series covering the period

    Returns:
        PeriodSummary, or NoDataResult when the period has no sessions
    """
    if not sessions:
        return NoDataResult(
            message="No training data found for this period",
            suggestion="Sync your training sessions or choose a longer period.",
        )

    known_tss: List[float] = [s.tss for s in sessions if s.tss is not None]
    known_if: List[float] = [s.intensity_factor for s in sessions if s.intensity_factor is not None]

    return PeriodSummary(
        period_days=period_days,
        session_count=len(sessions),
        total_tss=math.fsum(known_tss),
        total_seconds=sum(s.duration_seconds for s in sessions),
        avg_intensity_factor=round_half_up(statistics.fmean(known_if), 2) if known_if else None,
        intensity=intensity_distribution(sessions),
        fitness=summarize_fitness(fitness_history) if fitness_history else None,
        tss_sessions=len(known_tss),
    )
