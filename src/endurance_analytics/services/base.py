"""
Base service classes and protocols.

Defines the store interfaces the services read from and write to, and the
base class shared by all services.
"""

import asyncio
import logging
from abc import ABC
from datetime import date
from typing import Any, Awaitable, List, Optional, Protocol, runtime_checkable

from ..config import Settings, get_settings
from ..exceptions import DataSourceError, EnduranceAnalyticsError
from ..metrics.fitness import FitnessPoint
from ..models.goals import GoalBase
from ..models.races import CategoryComparison, NearFinisherSummary, OpponentEncounter, Race
from ..models.sessions import AthleteSnapshot, DailyLoad, Session


@runtime_checkable
class GoalStore(Protocol):
    """
    Protocol for the goal side of the athlete data store.

    Reads return fresh records on every call; writes are per goal.
    """

    async def get_goals(self, athlete_id: str) -> List[GoalBase]:
        """Get the athlete's goals (any status)."""
        ...

    async def get_athlete_snapshot(self, athlete_id: str) -> Optional[AthleteSnapshot]:
        """Get current FTP, weight and max HR."""
        ...

    async def get_current_fitness(self, athlete_id: str) -> Optional[FitnessPoint]:
        """Get the newest fitness point."""
        ...

    async def get_recent_sessions(self, athlete_id: str, since: date) -> List[Session]:
        """Get sessions on or after ``since``."""
        ...

    async def update_goal_progress(
        self,
        goal_id: str,
        value: float,
        session_id: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        """Store a new current value for a goal."""
        ...

    async def mark_goal_achieved(self, goal_id: str, session_id: Optional[str] = None) -> None:
        """Complete a goal, recording the session that achieved it."""
        ...

    async def update_goal_last_checked(self, goal_id: str) -> None:
        """Record that a goal was checked without changes."""
        ...


@runtime_checkable
class TrainingDataStore(Protocol):
    """Protocol for training, fitness and race reads."""

    async def get_daily_loads(self, athlete_id: str, start: date, end: date) -> List[DailyLoad]:
        ...

    async def get_fitness_point(self, athlete_id: str, day: date) -> Optional[FitnessPoint]:
        ...

    async def get_fitness_history(self, athlete_id: str, start: date, end: date) -> List[FitnessPoint]:
        ...

    async def save_fitness_history(self, athlete_id: str, points: List[FitnessPoint]) -> None:
        """Insert or replace fitness points by date."""
        ...

    async def get_sessions(self, athlete_id: str, start: date, end: date) -> List[Session]:
        ...

    async def get_races(self, athlete_id: str, limit: int) -> List[Race]:
        ...

    async def get_frequent_opponents(
        self, athlete_id: str, min_races_together: int
    ) -> List[OpponentEncounter]:
        ...

    async def get_near_finishers(self, athlete_id: str) -> Optional[NearFinisherSummary]:
        ...

    async def get_category_comparison(self, athlete_id: str) -> List[CategoryComparison]:
        ...


class BaseService(ABC):
    """
    Abstract base class for all services.

    Provides common functionality:
    - Logging setup
    - Settings access
    - Store read error handling
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._logger = logger or logging.getLogger(
            f"{self.__class__.__module__}.{self.__class__.__name__}"
        )

    @property
    def logger(self) -> logging.Logger:
        """Get the logger instance."""
        return self._logger

    @property
    def settings(self) -> Settings:
        """Get the settings instance."""
        return self._settings

    async def _read(self, operation: str, *reads: Awaitable[Any]) -> List[Any]:
        """
        Run independent store reads concurrently.

        Raises:
            DataSourceError: If any read fails with a non-domain error
        """
        try:
            return list(await asyncio.gather(*reads))
        except EnduranceAnalyticsError:
            raise
        except Exception as e:
            self._logger.error(f"Store read failed during {operation}: {e}")
            raise DataSourceError(
                f"Failed to read {operation} from the data store",
                operation=operation,
            ) from e
