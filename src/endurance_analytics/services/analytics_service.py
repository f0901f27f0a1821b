"""
Training analytics service.

Entry points used by the chat and dashboard layers: fitness refresh, load
balance, efficiency, historical trends, race and competitor analysis.
Every call reads fresh data from the store; nothing is cached.
"""

import logging
from datetime import date, timedelta
from typing import List, Optional, Union

from .base import BaseService, TrainingDataStore
from ..analysis.competitors import CompetitorReport, analyze_competitors
from ..analysis.efficiency import EfficiencyAnalysis, analyze_efficiency
from ..analysis.races import (
    RacePerformanceReport,
    analyze_race_performance,
    filter_races,
    performance_by_race_type,
    race_statistics,
    races_by_form,
)
from ..analysis.trends import PeriodSummary, summarize_period
from ..config import Settings
from ..exceptions import InsufficientDataError
from ..metrics.fitness import FitnessPoint, calculate_fitness_series
from ..metrics.load import TrainingLoadReport, analyze_training_load
from ..models.requests import (
    CompetitorAnalysisRequest,
    EfficiencyRequest,
    RaceAnalysisRequest,
    TrendsRequest,
)
from ..models.results import NoDataResult
from ..models.sessions import DailyLoad


class TrainingAnalyticsService(BaseService):
    """
    Service for training analytics operations.

    Soft "not enough data" states come back as NoDataResult; store failures
    raise DataSourceError.
    """

    def __init__(
        self,
        store: TrainingDataStore,
        settings: Optional[Settings] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(settings=settings, logger=logger)
        self._store = store

    async def refresh_fitness(
        self,
        athlete_id: str,
        since: date,
        today: Optional[date] = None,
    ) -> List[FitnessPoint]:
        """
        Recompute and store fitness points from ``since`` through ``today``.

        The stored point for the day before ``since`` seeds the series so
        earlier history is left untouched.

        Returns:
            The recomputed FitnessPoint list
        """
        today = today or date.today()
        if since > today:
            return []

        seed, loads = await self._read(
            "fitness inputs",
            self._store.get_fitness_point(athlete_id, since - timedelta(days=1)),
            self._store.get_daily_loads(athlete_id, since, today),
        )
        if seed is None:
            self.logger.debug(f"No fitness seed before {since} for athlete {athlete_id}, starting from zero")

        points = calculate_fitness_series(
            loads,
            seed=seed,
            end=today,
            ctl_time_constant=self.settings.ctl_time_constant,
            atl_time_constant=self.settings.atl_time_constant,
        )
        if points:
            await self._store.save_fitness_history(athlete_id, points)
            self.logger.info(f"Stored {len(points)} fitness points for athlete {athlete_id}")
        return points

    async def get_training_load(
        self,
        athlete_id: str,
        today: Optional[date] = None,
    ) -> Union[TrainingLoadReport, NoDataResult]:
        """
        ACWR, monotony, strain and weekly breakdown for the last 4 weeks.

        Days without a load row inside the window count as rest days as long
        as the athlete has history from before the window. Current fitness is
        the latest stored point carried forward to ``today`` with zero load,
        or an estimate from the loads when nothing is stored.
        """
        today = today or date.today()
        chronic_days = self.settings.chronic_window_days
        window_start = today - timedelta(days=chronic_days - 1)
        history_start = today - timedelta(days=max(self.settings.load_history_days, chronic_days) - 1)

        loads, history = await self._read(
            "training load",
            self._store.get_daily_loads(athlete_id, history_start, today),
            self._store.get_fitness_history(athlete_id, history_start, today),
        )

        first_seen = min([d.date for d in loads] + [p.date for p in history], default=None)
        start = window_start if first_seen is not None and first_seen <= window_start else None

        try:
            current = self._current_fitness(athlete_id, loads, history, today)
            if current is None:
                raise InsufficientDataError(
                    "No training load recorded",
                    required=chronic_days,
                    available=0,
                )
            return analyze_training_load(
                loads,
                ctl=current.ctl,
                atl=current.atl,
                start=start,
                end=today,
                acute_days=self.settings.acute_window_days,
                chronic_days=chronic_days,
            )
        except InsufficientDataError as e:
            self.logger.debug(f"Training load unavailable for athlete {athlete_id}: {e.message}")
            return NoDataResult(
                message=f"Insufficient data for training load analysis. {e.message}.",
                suggestion=f"Keep syncing your sessions; load balance needs {chronic_days} days of history.",
            )

    def _current_fitness(
        self,
        athlete_id: str,
        loads: List[DailyLoad],
        history: List[FitnessPoint],
        today: date,
    ) -> Optional[FitnessPoint]:
        """Fitness at the end of ``today``; None when there is nothing to go on."""
        if not history:
            if not loads:
                return None
            self.logger.warning(
                f"No stored fitness for athlete {athlete_id}, estimating from {len(loads)} daily loads"
            )
            series = calculate_fitness_series(
                loads,
                end=today,
                ctl_time_constant=self.settings.ctl_time_constant,
                atl_time_constant=self.settings.atl_time_constant,
            )
            return series[-1]

        latest = history[-1]
        if latest.date >= today:
            return latest
        self.logger.debug(
            f"Stored fitness for athlete {athlete_id} ends on {latest.date}, carrying it forward to {today}"
        )
        later = [d for d in loads if d.date > latest.date]
        series = calculate_fitness_series(
            later,
            seed=latest,
            end=today,
            ctl_time_constant=self.settings.ctl_time_constant,
            atl_time_constant=self.settings.atl_time_constant,
        )
        return series[-1]

    async def get_efficiency(
        self,
        athlete_id: str,
        request: Optional[EfficiencyRequest] = None,
        today: Optional[date] = None,
    ) -> Union[EfficiencyAnalysis, NoDataResult]:
        """Efficiency Factor analysis over the requested look-back."""
        request = request or EfficiencyRequest(days=self.settings.efficiency_default_days)
        today = today or date.today()
        days = min(request.days, self.settings.efficiency_max_days)

        (sessions,) = await self._read(
            "efficiency sessions",
            self._store.get_sessions(athlete_id, today - timedelta(days=days), today),
        )
        return analyze_efficiency(
            sessions,
            min_sessions=self.settings.efficiency_min_sessions,
            band_pct=self.settings.efficiency_trend_band_pct,
        )

    async def get_historical_trends(
        self,
        athlete_id: str,
        request: Optional[TrendsRequest] = None,
        today: Optional[date] = None,
    ) -> Union[PeriodSummary, NoDataResult]:
        """Volume, intensity and fitness progression over a period."""
        request = request or TrendsRequest()
        today = today or date.today()
        days = request.period.days
        start = today - timedelta(days=days)

        reads = [self._store.get_sessions(athlete_id, start, today)]
        if request.include_fitness:
            reads.append(self._store.get_fitness_history(athlete_id, start, today))
        results = await self._read("historical trends", *reads)

        sessions = results[0]
        history = results[1] if request.include_fitness else None
        return summarize_period(sessions, days, fitness_history=history)

    async def get_race_analysis(
        self,
        athlete_id: str,
        request: Optional[RaceAnalysisRequest] = None,
        today: Optional[date] = None,
    ) -> Union[RacePerformanceReport, NoDataResult]:
        """
        Race performance for the filtered races.

        Career statistics and the form/terrain breakdowns cover the whole
        fetched history regardless of filters.
        """
        request = request or RaceAnalysisRequest()
        today = today or date.today()

        (history,) = await self._read(
            "race history",
            self._store.get_races(athlete_id, self.settings.race_history_limit),
        )
        races = filter_races(history, request, today)
        if not races:
            return analyze_race_performance([])

        return analyze_race_performance(
            races,
            race_stats=race_statistics(history),
            form_buckets=races_by_form(history),
            terrain_groups=performance_by_race_type(history),
            min_races_for_trend=self.settings.min_races_for_trend,
        )

    async def get_competitor_analysis(
        self,
        athlete_id: str,
        request: Optional[CompetitorAnalysisRequest] = None,
    ) -> Union[CompetitorReport, NoDataResult]:
        """Frequent opponents, head-to-head records and power gaps."""
        request = request or CompetitorAnalysisRequest(
            min_races_together=self.settings.default_min_races_together
        )

        opponents, near_finishers, categories = await self._read(
            "competitor data",
            self._store.get_frequent_opponents(athlete_id, request.min_races_together),
            self._store.get_near_finishers(athlete_id),
            self._store.get_category_comparison(athlete_id),
        )
        return analyze_competitors(
            opponents,
            near_finishers=near_finishers,
            categories=categories,
            min_races_together=request.min_races_together,
        )
