"""
Competitor Analysis

Head-to-head records, power gaps to the next finisher and category
comparisons from aggregated opponent data.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from ..models.races import CategoryComparison, NearFinisherSummary, OpponentEncounter
from ..models.results import NoDataResult
from ..utils import round_half_up


MIN_RACES_TOGETHER = 2
MIN_RACES_FOR_DOMINATED = 3
TOP_RIVALS = 3
TOP_OPPONENTS = 10
SMALL_GAP_W = 5
MODERATE_GAP_W = 10
CATEGORY_POWER_MARGIN_W = 10


@dataclass
class CompetitorReport:
    """Competitor analysis for one athlete."""

    frequent_opponents: List[OpponentEncounter]
    opponents_with_record: int
    overall_win_rate: Optional[int]
    toughest_rivals: List[OpponentEncounter]
    dominated: List[OpponentEncounter]
    near_finishers: NearFinisherSummary
    power_gap_insight: Optional[str]
    categories: List[CategoryComparison]
    category_insight: Optional[str]
    insights: List[str]
    recommendations: List[str]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "frequent_opponents": [
                {
                    "name": o.rider_name,
                    "races_together": o.races_together,
                    "wins_against": o.wins_against,
                    "losses_against": o.losses_against,
                    "win_rate": o.win_rate,
                    "avg_power_gap": o.avg_power_gap,
                    "avg_position_gap": o.avg_position_gap,
                }
                for o in self.frequent_opponents
            ],
            "head_to_head": {
                "total_opponents": self.opponents_with_record,
                "overall_win_rate": self.overall_win_rate,
                "toughest_rivals": [
                    {"name": r.rider_name, "record": r.record, "avg_power_gap": r.avg_power_gap}
                    for r in self.toughest_rivals
                ],
                "dominated_opponents": [
                    {"name": d.rider_name, "record": d.record} for d in self.dominated
                ],
            },
            "category_comparison": [
                {
                    "category": c.category,
                    "races": c.races,
                    "your_avg_power": c.user_avg_power,
                    "category_avg_power": c.category_avg_power,
                    "power_difference": c.power_difference,
                    "your_avg_wkg": c.user_avg_wkg,
                    "category_avg_wkg": c.category_avg_wkg,
                    "wkg_difference": c.wkg_difference,
                    "message": category_message(c),
                }
                for c in self.categories
            ],
            "near_finishers": {
                "avg_power_gap_to_next_place": self.near_finishers.avg_power_gap_to_next_place,
                "avg_time_gap_to_next_place": self.near_finishers.avg_time_gap_to_next_place,
                "races_analyzed": self.near_finishers.races_analyzed,
                "insight": self.power_gap_insight or "Insufficient data for gap analysis.",
            },
            "insights": self.insights,
            "recommendations": self.recommendations,
        }


def _fmt(value: float) -> str:
    return f"{round_half_up(value, 1):g}"


def overall_win_rate(opponents: Iterable[OpponentEncounter]) -> Optional[int]:
    """
    Percent of head-to-heads won across all opponents with a result.

    Returns None, not 0, when no opponent has a recorded result.
    """
    wins = 0
    total = 0
    for opponent in opponents:
        wins += opponent.wins_against
        total += opponent.results_recorded
    if total == 0:
        return None
    return round_half_up(wins / total * 100)


def toughest_rivals(opponents: Iterable[OpponentEncounter]) -> List[OpponentEncounter]:
    """Opponents with more losses than wins, most losses first, top 3."""
    rivals = [o for o in opponents if o.losses_against > o.wins_against]
    rivals.sort(key=lambda o: o.losses_against, reverse=True)
    return rivals[:TOP_RIVALS]


def dominated_opponents(opponents: Iterable[OpponentEncounter]) -> List[OpponentEncounter]:
    """Opponents beaten more often than not over at least 3 shared races."""
    dominated = [
        o for o in opponents
        if o.wins_against > o.losses_against and o.races_together >= MIN_RACES_FOR_DOMINATED
    ]
    dominated.sort(key=lambda o: o.wins_against, reverse=True)
    return dominated[:TOP_RIVALS]


def power_gap_insight(gap: Optional[float]) -> Optional[str]:
    """Message for the average power gap to the rider one place ahead."""
    if gap is None:
        return None
    if gap <= SMALL_GAP_W:
        return (
            f"You're within {_fmt(gap)}W of the next position on average. "
            "Small gains could significantly improve placements."
        )
    elif gap <= MODERATE_GAP_W:
        return f"Adding {_fmt(gap)}W average power could move you up 1-2 positions in most races."
    else:
        return f"There's a {_fmt(gap)}W gap to the next position. Focus on building threshold power."


def category_message(comparison: CategoryComparison) -> Optional[str]:
    """Upgrade / build-power message; None within +/- 10 W of the category."""
    diff = comparison.power_difference
    if diff is None:
        return None
    if diff > CATEGORY_POWER_MARGIN_W:
        return (
            f"Your raw power is {_fmt(diff)}W above category average in "
            f"{comparison.category}. You may be ready to upgrade."
        )
    if diff < -CATEGORY_POWER_MARGIN_W:
        return (
            f"Your raw power is {_fmt(abs(diff))}W below category average in "
            f"{comparison.category}. Focus on building power."
        )
    return None


def main_category(categories: Sequence[CategoryComparison]) -> Optional[CategoryComparison]:
    """The category raced most often; the first listed wins a tie."""
    if not categories:
        return None
    return max(categories, key=lambda c: c.races)


def analyze_competitors(
    opponents: Sequence[OpponentEncounter],
    near_finishers: Optional[NearFinisherSummary] = None,
    categories: Optional[Sequence[CategoryComparison]] = None,
    min_races_together: int = MIN_RACES_TOGETHER,
) -> Union[CompetitorReport, NoDataResult]:
    """
    Analyze frequent opponents.

    Args:
        opponents: Aggregated head-to-head rows
        near_finishers: Gap to the next finisher, averaged over races
        categories: Athlete vs category averages per category
        min_races_together: Shared races needed to count as a frequent opponent

    Returns:
        CompetitorReport, or NoDataResult when no opponent qualifies
    """
    frequent = [o for o in opponents if o.races_together >= min_races_together]
    if not frequent:
        return NoDataResult(
            message="No competitor data found. Sync more races to analyze your competitors.",
            suggestion=(
                f"You need at least {min_races_together} races with the same riders "
                "to identify frequent opponents."
            ),
        )

    frequent.sort(key=lambda o: o.races_together, reverse=True)
    near_finishers = near_finishers or NearFinisherSummary()
    categories = list(categories or [])

    win_rate = overall_win_rate(frequent)
    rivals = toughest_rivals(frequent)
    gap = near_finishers.avg_power_gap_to_next_place
    gap_insight = power_gap_insight(gap)
    main = main_category(categories)
    category_insight = category_message(main) if main else None

    insights = []
    if win_rate is not None:
        if win_rate >= 50:
            insights.append(
                f"You win {win_rate}% of head-to-head matchups against frequent opponents."
            )
        else:
            insights.append(
                f"You win {win_rate}% of head-to-head matchups. "
                "Focus on closing the gap to key rivals."
            )
    if category_insight:
        insights.append(category_insight)
    if gap_insight:
        insights.append(gap_insight)
    if rivals:
        insights.append(
            f"Your toughest rival is {rivals[0].rider_name} ({rivals[0].record} record)."
        )

    recommendations = []
    if gap and gap <= MODERATE_GAP_W:
        recommendations.append(
            f"Small power gains ({_fmt(gap)}W) could improve your placements significantly."
        )
    if rivals and rivals[0].avg_power_gap is not None and rivals[0].avg_power_gap < 0:
        recommendations.append(
            f"Study {rivals[0].rider_name}'s racing - they average "
            f"{_fmt(abs(rivals[0].avg_power_gap))}W more than you."
        )
    if main is not None and main.power_difference is not None and main.power_difference > CATEGORY_POWER_MARGIN_W:
        recommendations.append("Consider racing in a higher category to challenge yourself.")

    return CompetitorReport(
        frequent_opponents=frequent[:TOP_OPPONENTS],
        opponents_with_record=sum(1 for o in frequent if o.results_recorded > 0),
        overall_win_rate=win_rate,
        toughest_rivals=rivals,
        dominated=dominated_opponents(frequent),
        near_finishers=near_finishers,
        power_gap_insight=gap_insight,
        categories=categories,
        category_insight=category_insight,
        insights=insights,
        recommendations=recommendations,
    )
