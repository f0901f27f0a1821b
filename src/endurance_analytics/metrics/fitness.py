"""Fitness-Fatigue model calculations (CTL, ATL, TSB)."""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from ..exceptions import InvalidInputError
from ..models.sessions import DailyLoad, Session
from ..utils import round_half_up


logger = logging.getLogger(__name__)

CTL_TIME_CONSTANT = 42
ATL_TIME_CONSTANT = 7


@dataclass(frozen=True)
class FitnessPoint:
    """Fitness-Fatigue model state at the end of one day.

    CTL and ATL keep full precision so the next day can be chained from
    them; TSB is always derived.
    """

    date: date
    daily_load: float  # TSS for the day
    ctl: float  # Chronic Training Load (fitness) - 42 day EWMA
    atl: float  # Acute Training Load (fatigue) - 7 day EWMA

    @property
    def tsb(self) -> int:
        """Training Stress Balance (form) = CTL - ATL, rounded."""
        return round_half_up(self.ctl - self.atl)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "date": self.date.isoformat(),
            "daily_load": round_half_up(self.daily_load, 1),
            "ctl": round_half_up(self.ctl, 1),
            "atl": round_half_up(self.atl, 1),
            "tsb": self.tsb,
        }


def calculate_ewma(
    current_value: float,
    previous_ewma: float,
    time_constant: int,
) -> float:
    """
    Exponentially Weighted Moving Average.

    Uses the formula: EWMA_n = EWMA_{n-1} + (value - EWMA_{n-1}) / time_constant

    Args:
        current_value: Today's training load
        previous_ewma: Yesterday's EWMA value
        time_constant: Time constant in days (42 for CTL, 7 for ATL)

    Returns:
        New EWMA value
    """
    return previous_ewma + (current_value - previous_ewma) / time_constant


def densify_daily_loads(
    daily_loads: Iterable[DailyLoad],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[DailyLoad]:
    """
    Turn daily loads into one entry per calendar day.

    Entries sharing a date are summed, missing days are filled with zero
    load, and entries outside ``[start, end]`` are dropped. Every windowed
    calculation in this package goes through this function so gaps are
    treated the same way everywhere.

    Args:
        daily_loads: Loads in any order, possibly with gaps or duplicates
        start: First day of the output (default: earliest load)
        end: Last day of the output (default: latest load)

    Returns:
        Contiguous, date-ordered list of DailyLoad
    """
    totals: Dict[date, float] = defaultdict(float)
    for load in daily_loads:
        totals[load.date] += load.training_stress

    if not totals and (start is None or end is None):
        return []

    first = start or min(totals)
    last = end or max(totals)
    if last < first:
        raise InvalidInputError(
            f"Load window ends ({last}) before it starts ({first})",
            field="end",
        )

    days = (last - first).days + 1
    filled = days - sum(1 for d in totals if first <= d <= last)
    if filled:
        logger.debug(f"Zero-filled {filled} of {days} days between {first} and {last}")

    return [
        DailyLoad(date=day, training_stress=totals.get(day, 0.0))
        for day in (first + timedelta(days=offset) for offset in range(days))
    ]


def daily_loads_from_sessions(sessions: Iterable[Session]) -> List[DailyLoad]:
    """Sum per-session TSS by date, skipping sessions with unknown TSS."""
    totals: Dict[date, float] = defaultdict(float)
    for session in sessions:
        if session.tss is None:
            continue
        totals[session.date] += session.tss
    return [
        DailyLoad(date=day, training_stress=total)
        for day, total in sorted(totals.items())
    ]


def advance_fitness(
    previous: Optional[FitnessPoint],
    day: date,
    load: float,
    ctl_time_constant: int = CTL_TIME_CONSTANT,
    atl_time_constant: int = ATL_TIME_CONSTANT,
) -> FitnessPoint:
    """Compute one day's point from the previous day's point.

    ``previous=None`` starts from zero fitness and zero fatigue.
    """
    prev_ctl = previous.ctl if previous else 0.0
    prev_atl = previous.atl if previous else 0.0
    return FitnessPoint(
        date=day,
        daily_load=load,
        ctl=calculate_ewma(load, prev_ctl, ctl_time_constant),
        atl=calculate_ewma(load, prev_atl, atl_time_constant),
    )


def calculate_fitness_series(
    daily_loads: Sequence[DailyLoad],
    seed: Optional[FitnessPoint] = None,
    end: Optional[date] = None,
    ctl_time_constant: int = CTL_TIME_CONSTANT,
    atl_time_constant: int = ATL_TIME_CONSTANT,
) -> List[FitnessPoint]:
    """
    Calculate CTL, ATL and TSB for a series of daily loads.

    The Fitness-Fatigue (Banister) model uses two exponential moving averages:
    - CTL (Chronic Training Load): 42-day EWMA representing "fitness"
    - ATL (Acute Training Load): 7-day EWMA representing "fatigue"
    - TSB (Training Stress Balance): CTL - ATL representing "form"

    Args:
        daily_loads: Loads for consecutive or gapped days; gaps are zero-filled
        seed: Last known point before the first load (None = zero state)
        end: Last day of the series (default: latest load); later days are rest days
        ctl_time_constant: Days for CTL calculation (default 42)
        atl_time_constant: Days for ATL calculation (default 7)

    Returns:
        List of FitnessPoint, one per calendar day after the seed

    Raises:
        InvalidInputError: If a load falls on or before the seed date
    """
    if not daily_loads and (seed is None or end is None):
        return []

    start = None
    if seed is not None:
        earliest = min((load.date for load in daily_loads), default=None)
        if earliest is not None and earliest <= seed.date:
            raise InvalidInputError(
                f"Load on {earliest} is not after the seed point ({seed.date})",
                field="daily_loads",
            )
        start = seed.date + timedelta(days=1)

    points: List[FitnessPoint] = []
    previous = seed
    for load in densify_daily_loads(daily_loads, start=start, end=end):
        previous = advance_fitness(
            previous,
            load.date,
            load.training_stress,
            ctl_time_constant=ctl_time_constant,
            atl_time_constant=atl_time_constant,
        )
        points.append(previous)

    return points


def recompute_latest(
    series: Sequence[FitnessPoint],
    load: float,
    seed: Optional[FitnessPoint] = None,
    ctl_time_constant: int = CTL_TIME_CONSTANT,
    atl_time_constant: int = ATL_TIME_CONSTANT,
) -> List[FitnessPoint]:
    """
    Replace the newest point after "today" received more training.

    Past points are never touched; the newest one is rebuilt from the point
    before it (or from ``seed`` when the series has a single point).
    """
    if not series:
        raise InvalidInputError("Cannot recompute an empty fitness series", field="series")

    previous = series[-2] if len(series) > 1 else seed
    latest = advance_fitness(
        previous,
        series[-1].date,
        load,
        ctl_time_constant=ctl_time_constant,
        atl_time_constant=atl_time_constant,
    )
    return [*series[:-1], latest]


def ctl_change(series: Sequence[FitnessPoint], days: int) -> float:
    """CTL change over the last ``days`` days, 0 when the series is too short."""
    if days < 0:
        raise InvalidInputError("Trend window must not be negative", field="days")
    if len(series) < days + 1:
        return 0.0
    return series[-1].ctl - series[-1 - days].ctl


def describe_form(tsb: float) -> str:
    """
    Describe current form from Training Stress Balance.

    Args:
        tsb: Training Stress Balance

    Returns:
        Form status string
    """
    if tsb < -25:
        return "Very fatigued - consider recovery"
    elif tsb < -10:
        return "Fatigued - building fitness, normal for hard training"
    elif tsb < 5:
        return "Neutral - good training zone"
    elif tsb < 25:
        return "Fresh - ready for hard efforts or racing"
    else:
        return "Very fresh - may be losing fitness"
