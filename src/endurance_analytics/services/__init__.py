"""
Service layer for the endurance analytics engine.

Services orchestrate store reads, the pure metric and analysis functions,
and goal progress writes.
"""

from .base import BaseService, GoalStore, TrainingDataStore
from .goal_progress import GoalProgressCheckResult, GoalProgressService
from .analytics_service import TrainingAnalyticsService

__all__ = [
    # Base
    "BaseService",
    "GoalStore",
    "TrainingDataStore",
    # Goal progress
    "GoalProgressCheckResult",
    "GoalProgressService",
    # Analytics
    "TrainingAnalyticsService",
]
