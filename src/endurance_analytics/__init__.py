"""Training-load and performance analytics for endurance athletes."""

from .config import Settings, configure_logging, get_settings
from .exceptions import (
    DataSourceError,
    EnduranceAnalyticsError,
    ErrorCode,
    GoalEvaluationError,
    InsufficientDataError,
    InvalidInputError,
)
from .metrics import (
    FitnessPoint,
    analyze_training_load,
    calculate_acwr,
    calculate_efficiency_factor,
    calculate_fitness_series,
    calculate_monotony,
    calculate_strain,
    intensity_distribution,
)
from .analysis import (
    analyze_competitors,
    analyze_efficiency,
    analyze_race_performance,
    calculate_goal_progress,
    calculate_goal_risk_level,
    detect_progress,
    summarize_period,
)
from .models import NoDataResult, parse_goal
from .services import GoalProgressService, TrainingAnalyticsService

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Configuration
    "Settings",
    "configure_logging",
    "get_settings",
    # Exceptions
    "DataSourceError",
    "EnduranceAnalyticsError",
    "ErrorCode",
    "GoalEvaluationError",
    "InsufficientDataError",
    "InvalidInputError",
    # Metrics
    "FitnessPoint",
    "analyze_training_load",
    "calculate_acwr",
    "calculate_efficiency_factor",
    "calculate_fitness_series",
    "calculate_monotony",
    "calculate_strain",
    "intensity_distribution",
    # Analysis
    "analyze_competitors",
    "analyze_efficiency",
    "analyze_race_performance",
    "calculate_goal_progress",
    "calculate_goal_risk_level",
    "detect_progress",
    "summarize_period",
    # Models
    "NoDataResult",
    "parse_goal",
    # Services
    "GoalProgressService",
    "TrainingAnalyticsService",
]
