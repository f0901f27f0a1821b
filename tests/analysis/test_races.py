"""Tests for race performance analysis."""

from datetime import date, timedelta

import pytest

from endurance_analytics.analysis.races import (
    RacePerformanceReport,
    TsbRange,
    analyze_race_performance,
    best_form_bucket,
    category_progression,
    filter_races,
    parse_tsb_range,
    performance_by_race_type,
    placement_trend,
    race_power_summary,
    race_statistics,
    races_by_form,
    terrain_insight,
)
from endurance_analytics.models import (
    FormBucket,
    NoDataResult,
    RaceAnalysisRequest,
    RacePeriod,
    RaceType,
    TerrainGroup,
)


D0 = date(2024, 1, 6)


class TestPlacementTrend:
    """Tests for the older-vs-newer placement comparison."""

    def test_too_few_races_is_stable(self, make_race):
        """Five races, however bad, are not enough for a trend."""
        races = [make_race(D0 + timedelta(days=7 * i), placement=i * 10 + 1, total_in_category=50) for i in range(5)]
        assert placement_trend(races) == "stable"

    def test_improving(self, make_race):
        percents = [60, 50, 40, 20, 20, 10]
        races = [
            make_race(D0 + timedelta(days=7 * i), placement=p, total_in_category=100)
            for i, p in enumerate(percents)
        ]
        assert placement_trend(races) == "improving"

    def test_declining_ignores_input_order(self, make_race):
        percents = [10, 10, 20, 40, 50, 60]
        races = [
            make_race(D0 + timedelta(days=7 * i), placement=p, total_in_category=100)
            for i, p in enumerate(percents)
        ]
        assert placement_trend(list(reversed(races))) == "declining"

    def test_small_shift_is_stable(self, make_race):
        percents = [30, 30, 30, 28, 27, 26]
        races = [
            make_race(D0 + timedelta(days=7 * i), placement=p, total_in_category=100)
            for i, p in enumerate(percents)
        ]
        assert placement_trend(races) == "stable"

    def test_unplaced_races_skipped(self, make_race):
        races = [make_race(D0 + timedelta(days=i)) for i in range(6)]
        assert placement_trend(races) == "stable"


class TestCategoryProgression:
    def test_consecutive_repeats_collapsed(self, make_race):
        categories = ["A", "A", "B", "B", "A", "A"]
        races = [make_race(D0 + timedelta(days=i), category=c) for i, c in enumerate(categories)]

        assert category_progression(races) == ["A", "B", "A"]

    def test_sorted_by_date(self, make_race):
        races = [make_race(D0 + timedelta(days=1), category="B"), make_race(D0, category="C")]
        assert category_progression(races) == ["C", "B"]


class TestRacesByForm:
    """Tests for TSB bucketing."""

    def test_bucket_boundaries_are_half_open(self, make_race):
        tsbs = [-25, -20, -10, 5, 15, 14.9]
        races = [
            make_race(D0 + timedelta(days=i), placement=i + 1, total_in_category=20, tsb_at_race=t)
            for i, t in enumerate(tsbs)
        ]
        buckets = {b.tsb_range: b.races for b in races_by_form(races)}

        assert buckets == {
            "Very Fatigued (<-20)": 1,
            "Fatigued (-20 to -10)": 1,
            "Neutral (-10 to 5)": 1,
            "Fresh (5 to 15)": 2,
            "Very Fresh (>15)": 1,
        }

    def test_races_without_tsb_or_placement_skipped(self, make_race):
        races = [
            make_race(D0, placement=3, total_in_category=20),
            make_race(D0, tsb_at_race=4),
        ]
        assert races_by_form(races) == []


class TestParseTsbRange:
    @pytest.mark.parametrize(
        "label,expected",
        [
            ("Fresh (5 to 15)", TsbRange(5, 15)),
            ("Fatigued (-20 to -10)", TsbRange(-20, -10)),
            ("Very Fatigued (<-20)", TsbRange(None, -20)),
            ("Very Fresh (>15)", TsbRange(15, None)),
            ("Unknown", None),
        ],
    )
    def test_labels(self, label, expected):
        assert parse_tsb_range(label) == expected

    def test_describe(self):
        assert TsbRange(5, 15).describe() == "5 to 15"
        assert TsbRange(15, None).describe() == "above 15"
        assert TsbRange(None, -20).describe() == "below -20"


class TestBestFormBucket:
    def test_needs_two_races(self):
        buckets = [
            FormBucket(tsb_range="Fresh (5 to 15)", races=1, avg_placement=1),
            FormBucket(tsb_range="Neutral (-10 to 5)", races=3, avg_placement=6),
            FormBucket(tsb_range="Fatigued (-20 to -10)", races=2, avg_placement=9),
        ]
        assert best_form_bucket(buckets).tsb_range == "Neutral (-10 to 5)"

    def test_no_candidates(self):
        assert best_form_bucket([FormBucket(tsb_range="Fresh (5 to 15)", races=1, avg_placement=1)]) is None


class TestTerrainInsight:
    """Tests for best-vs-worst terrain comparison."""

    def test_large_gap_reported(self):
        groups = [
            TerrainGroup(race_type="flat", races=4, avg_placement_percent=20),
            TerrainGroup(race_type="hilly", races=3, avg_placement_percent=45),
        ]
        assert terrain_insight(groups) == (
            "You place 25% better in flat races than hilly races. "
            "Consider focusing on hilly course training."
        )

    def test_small_gap_ignored(self):
        groups = [
            TerrainGroup(race_type="flat", races=4, avg_placement_percent=20),
            TerrainGroup(race_type="hilly", races=3, avg_placement_percent=30),
        ]
        assert terrain_insight(groups) is None

    def test_single_race_groups_excluded(self):
        groups = [
            TerrainGroup(race_type="flat", races=4, avg_placement_percent=20),
            TerrainGroup(race_type="hilly", races=1, avg_placement_percent=80),
        ]
        assert terrain_insight(groups) is None

    def test_groups_from_races(self, make_race):
        races = [
            make_race(D0, race_type=RaceType.FLAT, placement=2, total_in_category=20, avg_wkg=3.5),
            make_race(D0, race_type=RaceType.HILLY, placement=10, total_in_category=20),
            make_race(D0, race_type=RaceType.FLAT, placement=4, total_in_category=20, avg_wkg=3.7),
        ]
        groups = performance_by_race_type(races)

        assert [g.race_type for g in groups] == ["flat", "hilly"]
        assert groups[0].races == 2
        assert groups[0].avg_placement == 3
        assert groups[0].avg_placement_percent == 15
        assert groups[0].avg_wkg == 3.6
        assert groups[1].avg_wkg is None


class TestRaceStatistics:
    def test_totals(self, make_race):
        races = [
            make_race(D0, placement=5, total_in_category=50, category="B", race_type=RaceType.FLAT),
            make_race(D0, placement=12, total_in_category=40, category="B"),
            make_race(D0, category="A"),
        ]
        stats = race_statistics(races)

        assert stats.total_races == 3
        assert stats.avg_placement == 9  # 8.5 rounds up
        assert stats.avg_placement_percent == 20
        assert stats.best_placement == 5
        assert stats.worst_placement == 12
        assert stats.category_counts == {"B": 2, "A": 1}
        assert stats.race_type_counts == {"flat": 1}


class TestRacePower:
    def test_power_omitted_without_data(self, make_race):
        assert race_power_summary([make_race(D0), make_race(D0, avg_power=0)]) is None

    def test_mean_power(self, make_race):
        summary = race_power_summary([make_race(D0, avg_power=250), make_race(D0, avg_power=265)])

        assert summary.avg_race_power == 258
        assert summary.races_with_power == 2


class TestFilterRaces:
    def test_period_category_and_type(self, make_race):
        today = date(2024, 6, 30)
        races = [
            make_race(date(2024, 6, 1), category="B", race_type=RaceType.FLAT),
            make_race(date(2024, 6, 2), category="A", race_type=RaceType.FLAT),
            make_race(date(2024, 1, 1), category="B", race_type=RaceType.FLAT),
            make_race(date(2024, 6, 3), category="B", race_type=RaceType.HILLY),
        ]
        request = RaceAnalysisRequest(period=RacePeriod.DAYS_90, category="B", race_type=RaceType.FLAT)

        assert [r.id for r in filter_races(races, request, today)] == ["r1"]

    def test_all_time_without_filters(self, make_race):
        races = [make_race(date(2015, 1, 1)), make_race(date(2024, 6, 1))]
        assert len(filter_races(races, RaceAnalysisRequest(), date(2024, 6, 30))) == 2


class TestAnalyzeRacePerformance:
    """Tests for the composite race report."""

    def test_empty_history(self):
        result = analyze_race_performance([])

        assert isinstance(result, NoDataResult)
        assert result.message.startswith("No race results found")

    def test_full_report(self, make_race):
        races = []
        for i in range(6):
            fresh = i % 2 == 0
            races.append(
                make_race(
                    D0 + timedelta(days=14 * i),
                    name=f"Race {i}",
                    placement=3 if fresh else 12,
                    total_in_category=30,
                    category="B" if i < 3 else "A",
                    tsb_at_race=8 if fresh else -15,
                    avg_power=250 + i,
                )
            )
        report = analyze_race_performance(races)

        assert isinstance(report, RacePerformanceReport)
        assert report.stats.total_races == 6
        assert report.category_progression == ["B", "A"]
        assert report.best_tsb_range == TsbRange(5, 15)
        assert report.best_tsb_avg_placement == 3
        assert report.power.races_with_power == 6
        assert [r.name for r in report.recent_races] == ["Race 5", "Race 4", "Race 3", "Race 2", "Race 1"]
        assert "Target TSB of 5 to 15 for important races" in report.recommendations
        assert report.recommendations[-1] == "Keep racing to build more data for accurate analysis"
        assert report.form_insight.startswith("Your best results come when TSB is 5 to 15")

    def test_single_category_has_no_progression(self, make_race):
        races = [make_race(D0 + timedelta(days=i), category="B") for i in range(3)]
        report = analyze_race_performance(races)

        assert report.category_progression is None
        assert report.best_tsb_range is None
        assert report.power is None
        assert report.form_insight.startswith("Insufficient data")

    def test_fatigued_best_range_not_recommended(self, make_race):
        races = [
            make_race(D0 + timedelta(days=i), placement=2, total_in_category=20, tsb_at_race=-15)
            for i in range(2)
        ]
        report = analyze_race_performance(races)

        assert report.best_tsb_range == TsbRange(-20, -10)
        assert not any(r.startswith("Target TSB") for r in report.recommendations)

    def test_supplied_aggregates_win(self, make_race):
        """Career aggregates passed in are used instead of recomputing."""
        races = [make_race(D0, placement=1, total_in_category=10)]
        stats = race_statistics(races * 12)
        report = analyze_race_performance(races, race_stats=stats, form_buckets=[], terrain_groups=[])

        assert report.stats.total_races == 12
        assert "Keep racing to build more data for accurate analysis" not in report.recommendations

    def test_to_dict(self, make_race):
        races = [make_race(D0, name="Crit", placement=4, total_in_category=40, tsb_at_race=2.5)]
        data = analyze_race_performance(races).to_dict()

        assert data["summary"]["total_races"] == 1
        assert data["summary"]["placement_trend"] == "stable"
        assert data["power_analysis"] is None
        assert data["terrain_analysis"]["insight"] == "No significant terrain preference detected."
        assert data["recent_races"][0]["date"] == "2024-01-06"
        assert "best_tsb_range" not in data["form_correlation"]
