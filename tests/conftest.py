"""Shared fixtures: an in-memory athlete data store and record factories."""

from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Set, Tuple

import pytest

from endurance_analytics.config import Settings
from endurance_analytics.metrics.fitness import FitnessPoint
from endurance_analytics.models import (
    AthleteSnapshot,
    CategoryComparison,
    DailyLoad,
    GoalBase,
    GoalStatus,
    NearFinisherSummary,
    OpponentEncounter,
    Race,
    Session,
)


TODAY = date(2024, 6, 30)


class InMemoryAthleteStore:
    """
    Athlete data store backed by plain lists.

    Every write is appended to ``writes`` as ``(operation, goal_id, ...)``
    so tests can count them.
    """

    def __init__(self) -> None:
        self.goals: Dict[str, GoalBase] = {}
        self.snapshot: Optional[AthleteSnapshot] = None
        self.fitness: List[FitnessPoint] = []
        self.sessions: List[Session] = []
        self.daily_loads: List[DailyLoad] = []
        self.races: List[Race] = []
        self.opponents: List[OpponentEncounter] = []
        self.near_finishers: Optional[NearFinisherSummary] = None
        self.categories: List[CategoryComparison] = []

        self.writes: List[Tuple] = []
        self.failing_goal_ids: Set[str] = set()
        self.fail_reads = False
        self.read_calls: List[str] = []

    # -- reads ---------------------------------------------------------------

    def _record_read(self, name: str) -> None:
        self.read_calls.append(name)
        if self.fail_reads:
            raise ConnectionError("store unavailable")

    async def get_goals(self, athlete_id: str) -> List[GoalBase]:
        self._record_read("goals")
        return list(self.goals.values())

    async def get_athlete_snapshot(self, athlete_id: str) -> Optional[AthleteSnapshot]:
        self._record_read("snapshot")
        return self.snapshot

    async def get_current_fitness(self, athlete_id: str) -> Optional[FitnessPoint]:
        self._record_read("fitness")
        return self.fitness[-1] if self.fitness else None

    async def get_recent_sessions(self, athlete_id: str, since: date) -> List[Session]:
        self._record_read("recent_sessions")
        return [s for s in self.sessions if s.date >= since]

    async def get_daily_loads(self, athlete_id: str, start: date, end: date) -> List[DailyLoad]:
        self._record_read("daily_loads")
        return [d for d in self.daily_loads if start <= d.date <= end]

    async def get_fitness_point(self, athlete_id: str, day: date) -> Optional[FitnessPoint]:
        self._record_read("fitness_point")
        return next((p for p in self.fitness if p.date == day), None)

    async def get_fitness_history(self, athlete_id: str, start: date, end: date) -> List[FitnessPoint]:
        self._record_read("fitness_history")
        return [p for p in self.fitness if start <= p.date <= end]

    async def get_sessions(self, athlete_id: str, start: date, end: date) -> List[Session]:
        self._record_read("sessions")
        return [s for s in self.sessions if start <= s.date <= end]

    async def get_races(self, athlete_id: str, limit: int) -> List[Race]:
        self._record_read("races")
        return sorted(self.races, key=lambda r: r.date, reverse=True)[:limit]

    async def get_frequent_opponents(
        self, athlete_id: str, min_races_together: int
    ) -> List[OpponentEncounter]:
        self._record_read("opponents")
        return [o for o in self.opponents if o.races_together >= min_races_together]

    async def get_near_finishers(self, athlete_id: str) -> Optional[NearFinisherSummary]:
        self._record_read("near_finishers")
        return self.near_finishers

    async def get_category_comparison(self, athlete_id: str) -> List[CategoryComparison]:
        self._record_read("categories")
        return list(self.categories)

    # -- writes --------------------------------------------------------------

    async def update_goal_progress(
        self,
        goal_id: str,
        value: float,
        session_id: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        if goal_id in self.failing_goal_ids:
            raise RuntimeError(f"write rejected for {goal_id}")
        self.writes.append(("progress", goal_id, value, session_id))
        self.goals[goal_id] = self.goals[goal_id].model_copy(update={"current_value": value})

    async def mark_goal_achieved(self, goal_id: str, session_id: Optional[str] = None) -> None:
        self.writes.append(("achieved", goal_id, session_id))
        self.goals[goal_id] = self.goals[goal_id].model_copy(
            update={"status": GoalStatus.COMPLETED}
        )

    async def update_goal_last_checked(self, goal_id: str) -> None:
        self.writes.append(("last_checked", goal_id))
        self.goals[goal_id] = self.goals[goal_id].model_copy(
            update={"last_checked_at": datetime(2024, 6, 30, 12, 0)}
        )

    async def save_fitness_history(self, athlete_id: str, points: List[FitnessPoint]) -> None:
        replaced = {p.date for p in points}
        self.fitness = sorted(
            [p for p in self.fitness if p.date not in replaced] + list(points),
            key=lambda p: p.date,
        )
        self.writes.append(("fitness", len(points)))

    def progress_writes(self) -> List[Tuple]:
        """Progress and achievement writes, excluding last-checked touches."""
        return [w for w in self.writes if w[0] in ("progress", "achieved")]


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def store() -> InMemoryAthleteStore:
    return InMemoryAthleteStore()


@pytest.fixture
def settings() -> Settings:
    """Default settings, independent of the environment."""
    return Settings(_env_file=None)


@pytest.fixture
def make_session():
    """Factory for sessions; ids are generated when omitted."""
    counter = {"n": 0}

    def _make(day: date, duration_seconds: int = 3600, session_id: Optional[str] = None, **fields) -> Session:
        counter["n"] += 1
        return Session(
            id=session_id or f"s{counter['n']}",
            date=day,
            duration_seconds=duration_seconds,
            **fields,
        )

    return _make


@pytest.fixture
def make_race():
    """Factory for races; ids are generated when omitted."""
    counter = {"n": 0}

    def _make(day: date, **fields) -> Race:
        counter["n"] += 1
        return Race(id=fields.pop("id", f"r{counter['n']}"), date=day, **fields)

    return _make


def constant_loads(value: float, days: int, end: date = TODAY) -> List[DailyLoad]:
    """``days`` consecutive daily loads of ``value`` ending on ``end``."""
    start = end - timedelta(days=days - 1)
    return [DailyLoad(date=start + timedelta(days=i), training_stress=value) for i in range(days)]


@pytest.fixture
def loads_factory():
    return constant_loads
