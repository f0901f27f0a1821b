"""Tests for historical training trends."""

from datetime import date, timedelta

import pytest

from endurance_analytics.analysis.trends import PeriodSummary, summarize_fitness, summarize_period
from endurance_analytics.metrics.fitness import FitnessPoint
from endurance_analytics.models import NoDataResult, Session


D0 = date(2024, 6, 1)


def _session(offset, seconds=3600, tss=None, intensity_factor=None):
    return Session(
        id=f"s{offset}",
        date=D0 + timedelta(days=offset),
        duration_seconds=seconds,
        tss=tss,
        intensity_factor=intensity_factor,
    )


class TestSummarizePeriod:
    """Tests for the period volume summary."""

    def test_no_sessions(self):
        result = summarize_period([], 30)

        assert isinstance(result, NoDataResult)
        assert result.message == "No training data found for this period"

    def test_volume_and_averages(self):
        sessions = [
            _session(0, 3600, tss=80, intensity_factor=0.8),
            _session(2, 5400, tss=100, intensity_factor=0.7),
            _session(4, 1800),
        ]
        summary = summarize_period(sessions, 14)

        assert isinstance(summary, PeriodSummary)
        assert summary.session_count == 3
        assert summary.total_tss == 180
        assert summary.avg_tss_per_session == 90
        assert summary.total_hours == 3.0
        assert summary.avg_hours_per_session == 1.0
        assert summary.avg_intensity_factor == 0.75
        assert summary.sessions_per_week == 1.5

    def test_unknown_values_not_averaged(self):
        """Sessions without TSS or IF are left out of those averages."""
        summary = summarize_period([_session(0), _session(1)], 7)

        assert summary.avg_tss_per_session is None
        assert summary.avg_intensity_factor is None
        assert summary.intensity is None
        assert summary.total_tss == 0

    def test_fitness_omitted_without_history(self):
        summary = summarize_period([_session(0, tss=50)], 7)
        assert summary.to_dict()["fitness"] is None

    def test_fitness_progression(self):
        history = [
            FitnessPoint(date=D0, daily_load=0, ctl=40.0, atl=50.0),
            FitnessPoint(date=D0 + timedelta(days=1), daily_load=0, ctl=45.0, atl=40.0),
        ]
        summary = summarize_period([_session(0, tss=50)], 7, fitness_history=history)
        data = summary.to_dict()["fitness"]

        assert data["start_ctl"] == 40
        assert data["end_ctl"] == 45
        assert data["ctl_change"] == 5.0
        assert data["avg_tsb"] == -2
        assert data["current_tsb"] == 5


class TestSummarizeFitness:
    def test_empty_history(self):
        assert summarize_fitness([]) is None

    def test_mean_tsb_uses_unrounded_values(self):
        history = [
            FitnessPoint(date=D0, daily_load=0, ctl=10.4, atl=10.0),
            FitnessPoint(date=D0 + timedelta(days=1), daily_load=0, ctl=10.4, atl=10.0),
        ]
        assert summarize_fitness(history).avg_tsb == pytest.approx(0.4)
