"""Training metrics calculations."""

from .fitness import (
    ATL_TIME_CONSTANT,
    CTL_TIME_CONSTANT,
    FitnessPoint,
    advance_fitness,
    calculate_ewma,
    calculate_fitness_series,
    ctl_change,
    daily_loads_from_sessions,
    densify_daily_loads,
    describe_form,
    recompute_latest,
)
from .load import (
    ACWRResult,
    IntensityDistribution,
    TrainingLoadReport,
    WeeklyLoad,
    acwr_zone,
    analyze_training_load,
    assess_monotony,
    assess_strain,
    calculate_acwr,
    calculate_monotony,
    calculate_strain,
    classify_acwr_risk,
    intensity_distribution,
    last_week_loads,
    weekly_breakdown,
)
from .power import (
    calculate_efficiency_factor,
    calculate_intensity_factor,
    calculate_power_to_weight,
    calculate_tss,
)

__all__ = [
    # Fitness-Fatigue model
    "ATL_TIME_CONSTANT",
    "CTL_TIME_CONSTANT",
    "FitnessPoint",
    "advance_fitness",
    "calculate_ewma",
    "calculate_fitness_series",
    "ctl_change",
    "daily_loads_from_sessions",
    "densify_daily_loads",
    "describe_form",
    "recompute_latest",
    # Load balance
    "ACWRResult",
    "IntensityDistribution",
    "TrainingLoadReport",
    "WeeklyLoad",
    "acwr_zone",
    "analyze_training_load",
    "assess_monotony",
    "assess_strain",
    "calculate_acwr",
    "calculate_monotony",
    "calculate_strain",
    "classify_acwr_risk",
    "intensity_distribution",
    "last_week_loads",
    "weekly_breakdown",
    # Power
    "calculate_efficiency_factor",
    "calculate_intensity_factor",
    "calculate_power_to_weight",
    "calculate_tss",
]
