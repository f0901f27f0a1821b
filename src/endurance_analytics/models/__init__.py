"""Input records, request objects and shared results."""

from .sessions import AthleteSnapshot, DailyLoad, Session
from .goals import (
    GOAL_VARIANTS,
    CtlGoal,
    FtpGoal,
    Goal,
    GoalBase,
    GoalStatus,
    HrAtPowerConditions,
    HrAtPowerGoal,
    PowerDurationConditions,
    PowerDurationGoal,
    RelativePowerConditions,
    RelativePowerGoal,
    RiskLevel,
    WeightGoal,
    parse_goal,
)
from .races import (
    CategoryComparison,
    FormBucket,
    NearFinisherSummary,
    OpponentEncounter,
    Race,
    RaceStatistics,
    RaceType,
    TerrainGroup,
)
from .requests import (
    CompetitorAnalysisRequest,
    EfficiencyRequest,
    RaceAnalysisRequest,
    RacePeriod,
    TrendPeriod,
    TrendsRequest,
)
from .results import NoDataResult

__all__ = [
    # Sessions
    "AthleteSnapshot",
    "DailyLoad",
    "Session",
    # Goals
    "GOAL_VARIANTS",
    "CtlGoal",
    "FtpGoal",
    "Goal",
    "GoalBase",
    "GoalStatus",
    "HrAtPowerConditions",
    "HrAtPowerGoal",
    "PowerDurationConditions",
    "PowerDurationGoal",
    "RelativePowerConditions",
    "RelativePowerGoal",
    "RiskLevel",
    "WeightGoal",
    "parse_goal",
    # Races
    "CategoryComparison",
    "FormBucket",
    "NearFinisherSummary",
    "OpponentEncounter",
    "Race",
    "RaceStatistics",
    "RaceType",
    "TerrainGroup",
    # Requests
    "CompetitorAnalysisRequest",
    "EfficiencyRequest",
    "RaceAnalysisRequest",
    "RacePeriod",
    "TrendPeriod",
    "TrendsRequest",
    # Results
    "NoDataResult",
]
