"""
Goal progress service.

Checks every active goal of an athlete against the latest athlete profile,
fitness and recent sessions, and writes detected progress back to the
goal store.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from .base import BaseService, GoalStore
from ..analysis.goals import GoalContext, ProgressDetection, detect_progress
from ..config import Settings
from ..exceptions import EnduranceAnalyticsError, GoalEvaluationError
from ..models.goals import GoalBase


@dataclass
class GoalProgressCheckResult:
    """Summary of one progress check run."""

    goals_checked: int = 0
    goals_updated: int = 0
    goals_achieved: int = 0
    results: List[ProgressDetection] = field(default_factory=list)

    @property
    def writes(self) -> int:
        """Progress and achievement writes made by the run."""
        return self.goals_updated + self.goals_achieved

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "goals_checked": self.goals_checked,
            "goals_updated": self.goals_updated,
            "goals_achieved": self.goals_achieved,
            "results": [r.to_dict() for r in self.results],
        }


class GoalProgressService(BaseService):
    """
    Service for automatic goal progress detection.

    Prerequisite reads are issued once per run and concurrently; goals are
    then evaluated one by one. A failure on one goal is recorded in its
    result and does not stop the others.
    """

    def __init__(
        self,
        store: GoalStore,
        settings: Optional[Settings] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(settings=settings, logger=logger)
        self._store = store

    async def check_goal_progress(
        self,
        athlete_id: str,
        today: Optional[date] = None,
    ) -> GoalProgressCheckResult:
        """
        Check progress for all active goals of an athlete.

        Args:
            athlete_id: Athlete whose goals are checked
            today: Reference date for the session look-back (default: today)

        Returns:
            GoalProgressCheckResult with one entry per active goal

        Raises:
            DataSourceError: If the goals or the shared inputs cannot be read
        """
        today = today or date.today()

        (goals,) = await self._read("goals", self._store.get_goals(athlete_id))
        active = [goal for goal in goals if goal.is_active]
        if not active:
            self.logger.debug(f"No active goals for athlete {athlete_id}")
            return GoalProgressCheckResult()

        since = today - timedelta(days=self.settings.goal_session_lookback_days)
        snapshot, fitness, sessions = await self._read(
            "goal progress inputs",
            self._store.get_athlete_snapshot(athlete_id),
            self._store.get_current_fitness(athlete_id),
            self._store.get_recent_sessions(athlete_id, since),
        )
        ctx = GoalContext(snapshot=snapshot, fitness=fitness, sessions=sessions)

        outcome = GoalProgressCheckResult(goals_checked=len(active))
        for goal in active:
            try:
                result = await self._check_goal(goal, ctx, outcome)
            except GoalEvaluationError as e:
                self.logger.error(f"Error checking goal {goal.id}: {e.message}")
                result = ProgressDetection(
                    goal_id=goal.id,
                    goal_title=goal.title,
                    previous_value=goal.current_value,
                    details=f"Error: {e.message}",
                    error_code=e.code.value,
                )
            outcome.results.append(result)

        self.logger.info(
            f"Checked {outcome.goals_checked} goals for athlete {athlete_id}: "
            f"{outcome.goals_updated} updated, {outcome.goals_achieved} achieved"
        )
        return outcome

    async def _check_goal(
        self,
        goal: GoalBase,
        ctx: GoalContext,
        outcome: GoalProgressCheckResult,
    ) -> ProgressDetection:
        """Evaluate one goal and write the outcome; any failure becomes a GoalEvaluationError."""
        try:
            return await self._apply_progress(goal, ctx, outcome)
        except GoalEvaluationError:
            raise
        except Exception as e:
            message = e.message if isinstance(e, EnduranceAnalyticsError) else str(e)
            raise GoalEvaluationError(message or type(e).__name__, goal_id=goal.id) from e

    async def _apply_progress(
        self,
        goal: GoalBase,
        ctx: GoalContext,
        outcome: GoalProgressCheckResult,
    ) -> ProgressDetection:
        result = detect_progress(goal, ctx)

        if not result.detected or result.new_value is None:
            self.logger.debug(f"No progress for goal {goal.id}: {result.details or 'unchanged'}")
            await self._store.update_goal_last_checked(goal.id)
            return result

        await self._store.update_goal_progress(
            goal.id,
            result.new_value,
            session_id=result.session_id,
            details=result.details,
        )
        outcome.goals_updated += 1

        if result.achieved:
            await self._store.mark_goal_achieved(goal.id, session_id=result.session_id)
            outcome.goals_achieved += 1
            self.logger.info(f"Goal {goal.id} achieved: {result.details}")

        return result
