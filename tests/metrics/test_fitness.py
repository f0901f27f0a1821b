"""Tests for the Fitness-Fatigue model."""

from datetime import date, timedelta

import pytest

from endurance_analytics.exceptions import InvalidInputError
from endurance_analytics.metrics.fitness import (
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
from endurance_analytics.models import DailyLoad, Session


D0 = date(2024, 1, 1)


def _load(offset: int, value: float) -> DailyLoad:
    return DailyLoad(date=D0 + timedelta(days=offset), training_stress=value)


class TestEWMA:
    """Tests for the EWMA update."""

    def test_ewma_moves_toward_value(self):
        """EWMA should move 1/tc of the way toward today's load."""
        assert calculate_ewma(100, 0, 42) == pytest.approx(100 / 42)
        assert calculate_ewma(100, 0, 7) == pytest.approx(100 / 7)

    def test_ewma_steady_state(self):
        """A load equal to the previous EWMA leaves it unchanged."""
        assert calculate_ewma(60, 60, 42) == 60


class TestFitnessSeries:
    """Tests for CTL/ATL/TSB series calculation."""

    def test_first_day_from_zero_state(self):
        """Starting from zero, day one is load/42 and load/7."""
        points = calculate_fitness_series([_load(0, 84)])

        assert len(points) == 1
        assert points[0].ctl == pytest.approx(2.0)
        assert points[0].atl == pytest.approx(12.0)
        assert points[0].tsb == -10

    def test_tsb_is_derived_and_rounded(self):
        """TSB is round(CTL - ATL)."""
        point = FitnessPoint(date=D0, daily_load=0, ctl=50.4, atl=45.0)
        assert point.tsb == 5

    def test_tsb_half_rounds_up(self):
        assert FitnessPoint(date=D0, daily_load=0, ctl=10.5, atl=10.0).tsb == 1
        assert FitnessPoint(date=D0, daily_load=0, ctl=10.0, atl=10.5).tsb == 0
        assert FitnessPoint(date=D0, daily_load=0, ctl=10.0, atl=12.5).tsb == -2

    def test_gaps_are_zero_filled(self):
        """Missing days count as rest days."""
        points = calculate_fitness_series([_load(0, 100), _load(3, 100)])

        assert [p.date for p in points] == [D0 + timedelta(days=i) for i in range(4)]
        assert points[1].daily_load == 0
        assert points[1].ctl < points[0].ctl

    def test_duplicate_dates_are_summed(self):
        """Two entries for the same day act as one combined load."""
        summed = calculate_fitness_series([_load(0, 40), _load(0, 60)])
        single = calculate_fitness_series([_load(0, 100)])

        assert summed[0].ctl == pytest.approx(single[0].ctl)

    def test_seeded_series_continues_from_seed(self):
        """Chaining from a seed equals computing the full series."""
        loads = [_load(i, 50 + i) for i in range(10)]
        full = calculate_fitness_series(loads)
        tail = calculate_fitness_series(loads[5:], seed=full[4])

        assert tail[-1].ctl == pytest.approx(full[-1].ctl)
        assert tail[-1].atl == pytest.approx(full[-1].atl)

    def test_seed_extends_through_rest_days(self):
        """With an end date, the series runs past the last load."""
        seed = FitnessPoint(date=D0, daily_load=0, ctl=40, atl=40)
        points = calculate_fitness_series([], seed=seed, end=D0 + timedelta(days=3))

        assert len(points) == 3
        assert points[-1].ctl < 40

    def test_load_before_seed_rejected(self):
        """Loads must come after the seed point."""
        seed = FitnessPoint(date=D0 + timedelta(days=2), daily_load=0, ctl=10, atl=10)
        with pytest.raises(InvalidInputError):
            calculate_fitness_series([_load(1, 50)], seed=seed)

    def test_empty_series(self):
        """No loads and no seed gives an empty series."""
        assert calculate_fitness_series([]) == []

    def test_to_dict_rounds(self):
        point = advance_fitness(None, D0, 100)
        data = point.to_dict()

        assert data["date"] == "2024-01-01"
        assert data["ctl"] == 2.4
        assert data["atl"] == 14.3
        assert data["tsb"] == -12


class TestRecomputeLatest:
    """Tests for replacing the newest point."""

    def test_only_latest_point_changes(self):
        """Earlier points are left exactly as they were."""
        series = calculate_fitness_series([_load(i, 60) for i in range(5)])
        updated = recompute_latest(series, 150)

        assert updated[:-1] == series[:-1]
        assert updated[-1].daily_load == 150
        assert updated[-1].ctl == pytest.approx(calculate_ewma(150, series[-2].ctl, 42))

    def test_single_point_uses_seed(self):
        seed = FitnessPoint(date=D0, daily_load=0, ctl=30, atl=30)
        series = calculate_fitness_series([_load(1, 30)], seed=seed)
        updated = recompute_latest(series, 72, seed=seed)

        assert updated[0].ctl == pytest.approx(31.0)

    def test_empty_series_rejected(self):
        with pytest.raises(InvalidInputError):
            recompute_latest([], 50)


class TestCtlChange:
    """Tests for the CTL ramp trend."""

    def test_change_over_window(self):
        series = calculate_fitness_series([_load(i, 100) for i in range(10)])
        assert ctl_change(series, 7) == pytest.approx(series[-1].ctl - series[-8].ctl)

    def test_short_series_is_zero(self):
        """Fewer than days + 1 points gives 0, not an error."""
        series = calculate_fitness_series([_load(i, 100) for i in range(7)])
        assert ctl_change(series, 7) == 0.0

    def test_negative_window_rejected(self):
        with pytest.raises(InvalidInputError):
            ctl_change([], -1)


class TestDensify:
    """Tests for daily load densification."""

    def test_window_bounds(self):
        """Entries outside the window are dropped and the window is filled."""
        loads = [_load(0, 10), _load(5, 20)]
        dense = densify_daily_loads(loads, start=D0 + timedelta(days=2), end=D0 + timedelta(days=6))

        assert len(dense) == 5
        assert [d.training_stress for d in dense] == [0, 0, 0, 20, 0]

    def test_reversed_window_rejected(self):
        with pytest.raises(InvalidInputError):
            densify_daily_loads([], start=D0, end=D0 - timedelta(days=1))

    def test_sessions_to_daily_loads(self):
        """Session TSS is summed per day; unknown TSS is skipped."""
        sessions = [
            Session(id="a", date=D0, duration_seconds=3600, tss=50),
            Session(id="b", date=D0, duration_seconds=1800, tss=30),
            Session(id="c", date=D0 + timedelta(days=1), duration_seconds=3600),
        ]
        loads = daily_loads_from_sessions(sessions)

        assert loads == [DailyLoad(date=D0, training_stress=80)]


class TestDescribeForm:
    """Tests for the form description."""

    @pytest.mark.parametrize(
        "tsb,prefix",
        [
            (-30, "Very fatigued"),
            (-15, "Fatigued"),
            (0, "Neutral"),
            (10, "Fresh"),
            (30, "Very fresh"),
        ],
    )
    def test_form_bands(self, tsb, prefix):
        assert describe_form(tsb).startswith(prefix)
