"""Goal models.

A goal is a tagged union: the ``target_type`` field selects the variant and,
for metric goals, ``metric_type`` selects the metric variant. Each variant
carries only the conditions its detector reads.
"""

from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


class GoalStatus(str, Enum):
    """Goal lifecycle states."""
    ACTIVE = "active"
    COMPLETED = "completed"


class RiskLevel(str, Enum):
    """Goal risk classification against its deadline."""
    ON_TRACK = "on_track"
    AT_RISK = "at_risk"
    ACHIEVED = "achieved"
    NO_DEADLINE = "no_deadline"


class GoalBase(BaseModel):
    """Fields shared by every goal variant."""

    id: str
    title: str = ""
    status: GoalStatus = GoalStatus.ACTIVE
    target_value: Optional[float] = None
    current_value: Optional[float] = None
    deadline: Optional[date] = None
    created_at: Optional[date] = None
    last_checked_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == GoalStatus.ACTIVE


class FtpGoal(GoalBase):
    """Raise FTP to ``target_value`` watts."""
    target_type: Literal["ftp"] = "ftp"


class CtlGoal(GoalBase):
    """Build chronic training load to ``target_value``."""
    target_type: Literal["ctl"] = "ctl"


class WeightGoal(GoalBase):
    """Bring body weight down to ``target_value`` kg."""
    target_type: Literal["weight"] = "weight"


# ==============================================================================
# Metric goals
# ==============================================================================

class HrAtPowerConditions(BaseModel):
    target_power: Optional[float] = Field(None, gt=0)
    target_hr: Optional[float] = Field(None, gt=0)


class PowerDurationConditions(BaseModel):
    target_power: Optional[float] = Field(None, gt=0)
    duration_seconds: Optional[int] = Field(None, gt=0)


class RelativePowerConditions(BaseModel):
    target_wkg: Optional[float] = Field(None, gt=0)


class HrAtPowerGoal(GoalBase):
    """Lower the heart rate needed to hold a given power."""
    target_type: Literal["metric"] = "metric"
    metric_type: Literal["hr_at_power"] = "hr_at_power"
    metric_conditions: HrAtPowerConditions = Field(default_factory=HrAtPowerConditions)


class PowerDurationGoal(GoalBase):
    """Hold a target power for a target duration."""
    target_type: Literal["metric"] = "metric"
    metric_type: Literal["power_duration"] = "power_duration"
    metric_conditions: PowerDurationConditions = Field(default_factory=PowerDurationConditions)


class RelativePowerGoal(GoalBase):
    """Reach a target FTP-to-weight ratio (W/kg)."""
    target_type: Literal["metric"] = "metric"
    metric_type: Literal["relative_power"] = "relative_power"
    metric_conditions: RelativePowerConditions = Field(default_factory=RelativePowerConditions)


MetricGoal = Annotated[
    Union[HrAtPowerGoal, PowerDurationGoal, RelativePowerGoal],
    Field(discriminator="metric_type"),
]

Goal = Annotated[
    Union[FtpGoal, CtlGoal, WeightGoal, MetricGoal],
    Field(discriminator="target_type"),
]

GOAL_VARIANTS = (
    FtpGoal,
    CtlGoal,
    WeightGoal,
    HrAtPowerGoal,
    PowerDurationGoal,
    RelativePowerGoal,
)

_goal_adapter: TypeAdapter = TypeAdapter(Goal)


def parse_goal(data: Dict[str, Any]) -> GoalBase:
    """Build the goal variant selected by ``target_type``/``metric_type``."""
    return _goal_adapter.validate_python(data)
