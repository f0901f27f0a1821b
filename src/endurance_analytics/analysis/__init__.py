"""
Analysis module for training data.

Provides efficiency and historical trend analysis, goal progress
detection, race performance and competitor insights.
"""

from .efficiency import (
    EfficiencyAnalysis,
    EfficiencyTrend,
    analyze_efficiency,
    classify_efficiency_trend,
    efficiency_trend,
)
from .trends import (
    FitnessSummary,
    PeriodSummary,
    summarize_fitness,
    summarize_period,
)
from .goals import (
    GOAL_DETECTORS,
    GoalContext,
    ProgressDetection,
    calculate_goal_progress,
    calculate_goal_risk_level,
    detect_progress,
)
from .races import (
    RacePerformanceReport,
    TsbRange,
    analyze_race_performance,
    category_progression,
    filter_races,
    parse_tsb_range,
    performance_by_race_type,
    placement_trend,
    race_statistics,
    races_by_form,
)
from .competitors import (
    CompetitorReport,
    analyze_competitors,
    overall_win_rate,
)

__all__ = [
    # Efficiency
    "EfficiencyAnalysis",
    "EfficiencyTrend",
    "analyze_efficiency",
    "classify_efficiency_trend",
    "efficiency_trend",
    # Trends
    "FitnessSummary",
    "PeriodSummary",
    "summarize_fitness",
    "summarize_period",
    # Goals
    "GOAL_DETECTORS",
    "GoalContext",
    "ProgressDetection",
    "calculate_goal_progress",
    "calculate_goal_risk_level",
    "detect_progress",
    # Races
    "RacePerformanceReport",
    "TsbRange",
    "analyze_race_performance",
    "category_progression",
    "filter_races",
    "parse_tsb_range",
    "performance_by_race_type",
    "placement_trend",
    "race_statistics",
    "races_by_form",
    # Competitors
    "CompetitorReport",
    "analyze_competitors",
    "overall_win_rate",
]
