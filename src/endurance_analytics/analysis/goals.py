"""
Goal Progress Detection

Detect progress toward athlete goals from the latest athlete profile,
fitness state and recent sessions, and classify each goal's risk of
missing its deadline.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Callable, Dict, Optional, Sequence, Type

from ..exceptions import GoalEvaluationError
from ..metrics.fitness import FitnessPoint
from ..metrics.power import calculate_power_to_weight
from ..models.goals import (
    CtlGoal,
    FtpGoal,
    GoalBase,
    GoalStatus,
    HrAtPowerGoal,
    PowerDurationGoal,
    RelativePowerGoal,
    RiskLevel,
    WeightGoal,
)
from ..models.sessions import AthleteSnapshot, Session
from ..utils import round_half_up


# Minimum change that counts as progress, per goal kind
CTL_DEAD_BAND = 1.0
WEIGHT_DEAD_BAND_KG = 0.1
WKG_DEAD_BAND = 0.01

HR_AT_POWER_TOLERANCE = 0.10  # +/- fraction of target power
HR_AT_POWER_MIN_DURATION_SEC = 1200
PARTIAL_EFFORT_FRACTION = 0.5

AT_RISK_MARGIN_PCT = 20

# Absorbs binary float error so 72.4 -> 72.5 clears a 0.1 dead-band
_EPSILON = 1e-9


@dataclass
class GoalContext:
    """Read-only inputs shared by every goal in one check run."""

    snapshot: Optional[AthleteSnapshot] = None
    fitness: Optional[FitnessPoint] = None
    sessions: Sequence[Session] = field(default_factory=list)


@dataclass
class ProgressDetection:
    """Outcome of evaluating one goal."""

    goal_id: str
    goal_title: str
    detected: bool = False
    previous_value: Optional[float] = None
    new_value: Optional[float] = None
    session_id: Optional[str] = None
    details: Optional[str] = None
    achieved: bool = False
    error_code: Optional[str] = None  # set when the goal could not be evaluated

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "goal_id": self.goal_id,
            "goal_title": self.goal_title,
            "detected": self.detected,
            "previous_value": self.previous_value,
            "new_value": self.new_value,
            "session_id": self.session_id,
            "details": self.details,
            "achieved": self.achieved,
            "error_code": self.error_code,
        }


def _changed_by(new: float, previous: float, band: float) -> bool:
    return abs(new - previous) >= band - _EPSILON


def _fmt(value: Optional[float]) -> str:
    return "N/A" if value is None else f"{value:g}"


# ==============================================================================
# Detectors
# ==============================================================================

def detect_ftp_progress(goal: FtpGoal, ctx: GoalContext, base: ProgressDetection) -> ProgressDetection:
    """Any FTP change counts; achieved once FTP reaches the target."""
    ftp = ctx.snapshot.ftp if ctx.snapshot else None
    if not ftp:
        return replace(base, details="No FTP data available")

    previous = goal.current_value if goal.current_value is not None else 0.0
    if ftp == previous:
        return base

    return replace(
        base,
        detected=True,
        new_value=ftp,
        details=f"FTP updated from {_fmt(previous)}W to {_fmt(ftp)}W",
        achieved=bool(goal.target_value) and ftp >= goal.target_value,
    )


def detect_ctl_progress(goal: CtlGoal, ctx: GoalContext, base: ProgressDetection) -> ProgressDetection:
    """CTL moves every day; only whole-point changes are reported."""
    if ctx.fitness is None:
        return replace(base, details="No CTL data available")

    ctl = float(round_half_up(ctx.fitness.ctl))
    previous = goal.current_value if goal.current_value is not None else 0.0
    if not _changed_by(ctl, previous, CTL_DEAD_BAND):
        return base

    return replace(
        base,
        detected=True,
        new_value=ctl,
        details=f"CTL updated from {_fmt(previous)} to {_fmt(ctl)}",
        achieved=bool(goal.target_value) and ctl >= goal.target_value,
    )


def detect_weight_progress(goal: WeightGoal, ctx: GoalContext, base: ProgressDetection) -> ProgressDetection:
    """Weight goals are weight-loss goals: achieved at or below the target."""
    weight = ctx.snapshot.weight_kg if ctx.snapshot else None
    if not weight:
        return replace(base, details="No weight data available")

    previous = goal.current_value if goal.current_value is not None else 0.0
    if not _changed_by(weight, previous, WEIGHT_DEAD_BAND_KG):
        return base

    # TODO: support weight-gain goals once goals record a direction
    return replace(
        base,
        detected=True,
        new_value=weight,
        details=f"Weight updated from {_fmt(previous)}kg to {_fmt(weight)}kg",
        achieved=bool(goal.target_value) and weight <= goal.target_value,
    )


def detect_hr_at_power_progress(
    goal: HrAtPowerGoal, ctx: GoalContext, base: ProgressDetection
) -> ProgressDetection:
    """Lowest heart rate among 20+ minute sessions near the target power."""
    conditions = goal.metric_conditions
    target_power = conditions.target_power
    if not target_power:
        return replace(base, details="Missing target_power in conditions")

    tolerance = target_power * HR_AT_POWER_TOLERANCE
    matching = [
        s for s in ctx.sessions
        if s.avg_power is not None
        and s.avg_heart_rate
        and abs(s.avg_power - target_power) <= tolerance
        and s.duration_seconds >= HR_AT_POWER_MIN_DURATION_SEC
    ]
    if not matching:
        return replace(base, details=f"No sessions found near {_fmt(target_power)}W")

    best = min(matching, key=lambda s: s.avg_heart_rate)
    best_hr = best.avg_heart_rate
    previous = goal.current_value

    if previous is not None and best_hr >= previous:
        return base

    return replace(
        base,
        detected=True,
        new_value=best_hr,
        session_id=best.id,
        details=f"Best HR at ~{_fmt(target_power)}W: {_fmt(best_hr)}bpm (was {_fmt(previous)})",
        achieved=bool(conditions.target_hr) and best_hr <= conditions.target_hr,
    )


def detect_power_duration_progress(
    goal: PowerDurationGoal, ctx: GoalContext, base: ProgressDetection
) -> ProgressDetection:
    """
    Achieved by any session holding the target NP for the full duration.

    Otherwise the best NP from sessions covering at least half the target
    duration is tracked as progress.
    """
    conditions = goal.metric_conditions
    target_power = conditions.target_power
    target_duration = conditions.duration_seconds
    if not target_power or not target_duration:
        return replace(base, details="Missing target_power or duration_seconds in conditions")

    minutes = round_half_up(target_duration / 60)

    full_efforts = [
        s for s in ctx.sessions
        if s.normalized_power is not None
        and s.normalized_power >= target_power
        and s.duration_seconds >= target_duration
    ]
    if full_efforts:
        best = max(full_efforts, key=lambda s: s.normalized_power)
        return replace(
            base,
            detected=True,
            new_value=best.normalized_power,
            session_id=best.id,
            details=(
                f"Achieved {_fmt(best.normalized_power)}W for {minutes}min "
                f"(target: {_fmt(target_power)}W)"
            ),
            achieved=True,
        )

    partial_efforts = [
        s for s in ctx.sessions
        if s.normalized_power
        and s.duration_seconds >= target_duration * PARTIAL_EFFORT_FRACTION
    ]
    if not partial_efforts:
        return base

    best = max(partial_efforts, key=lambda s: s.normalized_power)
    previous = goal.current_value
    if previous is not None and best.normalized_power <= previous:
        return base

    return replace(
        base,
        detected=True,
        new_value=best.normalized_power,
        session_id=best.id,
        details=(
            f"Best sustained power: {_fmt(best.normalized_power)}W "
            f"(target: {_fmt(target_power)}W for {minutes}min)"
        ),
        achieved=False,
    )


def detect_relative_power_progress(
    goal: RelativePowerGoal, ctx: GoalContext, base: ProgressDetection
) -> ProgressDetection:
    """FTP / weight, reported on any change of at least 0.01 W/kg."""
    target_wkg = goal.metric_conditions.target_wkg
    if not target_wkg:
        return replace(base, details="Missing target_wkg in conditions")

    snapshot = ctx.snapshot
    if snapshot is None or not snapshot.ftp or not snapshot.weight_kg:
        return replace(base, details="Missing FTP or weight data")

    wkg = calculate_power_to_weight(snapshot.ftp, snapshot.weight_kg)
    previous = goal.current_value
    if previous is not None and not _changed_by(wkg, previous, WKG_DEAD_BAND):
        return base

    previous_text = "N/A" if previous is None else f"{previous:.2f}"
    return replace(
        base,
        detected=True,
        new_value=wkg,
        details=f"W/kg updated from {previous_text} to {wkg:.2f} (target: {_fmt(target_wkg)})",
        achieved=wkg >= target_wkg,
    )


Detector = Callable[[Any, GoalContext, ProgressDetection], ProgressDetection]

GOAL_DETECTORS: Dict[Type[GoalBase], Detector] = {
    FtpGoal: detect_ftp_progress,
    CtlGoal: detect_ctl_progress,
    WeightGoal: detect_weight_progress,
    HrAtPowerGoal: detect_hr_at_power_progress,
    PowerDurationGoal: detect_power_duration_progress,
    RelativePowerGoal: detect_relative_power_progress,
}


def detect_progress(goal: GoalBase, ctx: GoalContext) -> ProgressDetection:
    """
    Evaluate one goal against the shared context.

    Args:
        goal: Any goal variant
        ctx: Snapshot, fitness and recent sessions for the athlete

    Returns:
        ProgressDetection; ``detected`` is False when nothing changed

    Raises:
        GoalEvaluationError: If the goal variant has no detector
    """
    detector = GOAL_DETECTORS.get(type(goal))
    if detector is None:
        raise GoalEvaluationError(
            f"No progress detector for {type(goal).__name__}",
            goal_id=goal.id,
        )

    base = ProgressDetection(
        goal_id=goal.id,
        goal_title=goal.title,
        previous_value=goal.current_value,
    )
    return detector(goal, ctx, base)


# ==============================================================================
# Progress and risk
# ==============================================================================

def calculate_goal_progress(goal: GoalBase) -> Optional[int]:
    """
    Percent progress toward the target, capped at 100.

    Weight and HR-at-power goals improve downward, so their progress is
    target / current instead of current / target.

    Returns:
        Whole percent, or None without a usable target
    """
    if not goal.target_value:
        return None

    current = goal.current_value or 0.0

    if isinstance(goal, (WeightGoal, HrAtPowerGoal)):
        if current == 0:
            return 0
        return min(100, round_half_up(goal.target_value / current * 100))

    return min(100, round_half_up(current / goal.target_value * 100))


def calculate_goal_risk_level(goal: GoalBase, today: date) -> RiskLevel:
    """
    Classify a goal against its deadline.

    A goal is at risk when its progress trails the time-proportional
    expectation by more than 20 percentage points.
    """
    if goal.status == GoalStatus.COMPLETED:
        return RiskLevel.ACHIEVED

    progress = calculate_goal_progress(goal)
    if goal.deadline is None or progress is None:
        return RiskLevel.NO_DEADLINE

    if (goal.deadline - today).days <= 0:
        return RiskLevel.ACHIEVED if progress >= 100 else RiskLevel.AT_RISK

    if goal.created_at is not None:
        total_days = (goal.deadline - goal.created_at).days
        elapsed_days = (today - goal.created_at).days
        expected = round_half_up(elapsed_days / total_days * 100) if total_days > 0 else 100
        if progress < expected - AT_RISK_MARGIN_PCT:
            return RiskLevel.AT_RISK

    if progress >= 100:
        return RiskLevel.ACHIEVED

    return RiskLevel.ON_TRACK

