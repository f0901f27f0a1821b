"""Race history and competitor aggregate models."""

from datetime import date
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..utils import round_half_up


class RaceType(str, Enum):
    """Course terrain classification."""
    FLAT = "flat"
    HILLY = "hilly"
    MIXED = "mixed"
    TT = "tt"


class Race(BaseModel):
    """One recorded race result. Immutable once recorded."""

    model_config = ConfigDict(frozen=True)

    id: str
    date: date
    name: Optional[str] = None
    placement: Optional[int] = Field(None, ge=1)
    total_in_category: Optional[int] = Field(None, ge=1)
    category: Optional[str] = None
    race_type: Optional[RaceType] = None
    avg_power: Optional[float] = Field(None, ge=0)
    avg_wkg: Optional[float] = Field(None, ge=0)
    tsb_at_race: Optional[float] = None

    @property
    def placement_percent(self) -> Optional[float]:
        """Placement as a percentile of the category field (lower is better)."""
        if self.placement is None or not self.total_in_category:
            return None
        return self.placement / self.total_in_category * 100


# ==============================================================================
# Pre-aggregated race breakdowns
# ==============================================================================

class RaceStatistics(BaseModel):
    """Career totals across a race history."""
    total_races: int = 0
    avg_placement: Optional[int] = None
    avg_placement_percent: Optional[int] = None
    category_counts: Dict[str, int] = Field(default_factory=dict)
    race_type_counts: Dict[str, int] = Field(default_factory=dict)
    best_placement: Optional[int] = None
    worst_placement: Optional[int] = None


class FormBucket(BaseModel):
    """Results grouped by TSB on race day, labelled e.g. "Fresh (5 to 15)"."""
    tsb_range: str
    races: int = Field(..., ge=0)
    avg_placement: Optional[int] = None
    avg_placement_percent: Optional[int] = None


class TerrainGroup(BaseModel):
    """Results grouped by race type."""
    race_type: str
    races: int = Field(..., ge=0)
    avg_placement: Optional[int] = None
    avg_placement_percent: Optional[int] = None
    avg_wkg: Optional[float] = None


# ==============================================================================
# Competitor aggregates
# ==============================================================================

class OpponentEncounter(BaseModel):
    """Head-to-head record against one rider, aggregated over shared races.

    ``avg_power_gap`` is the athlete's power minus the opponent's, so a
    negative gap means the opponent averages more power.
    """

    model_config = ConfigDict(frozen=True)

    rider_name: str
    races_together: int = Field(..., ge=0)
    wins_against: int = Field(0, ge=0)
    losses_against: int = Field(0, ge=0)
    avg_power_gap: Optional[float] = None
    avg_position_gap: Optional[float] = None

    @property
    def results_recorded(self) -> int:
        return self.wins_against + self.losses_against

    @property
    def win_rate(self) -> Optional[int]:
        """Percent of recorded head-to-heads won, None without results."""
        if self.results_recorded == 0:
            return None
        return round_half_up(self.wins_against / self.results_recorded * 100)

    @property
    def record(self) -> str:
        return f"{self.wins_against}-{self.losses_against}"


class NearFinisherSummary(BaseModel):
    """Gaps to the rider who finished one place ahead, averaged over races."""
    avg_power_gap_to_next_place: Optional[float] = None
    avg_time_gap_to_next_place: Optional[float] = None
    races_analyzed: int = 0


class CategoryComparison(BaseModel):
    """Athlete averages against the field average in one category."""
    category: str
    races: int = 0
    user_avg_power: Optional[float] = None
    category_avg_power: Optional[float] = None
    user_avg_wkg: Optional[float] = None
    category_avg_wkg: Optional[float] = None

    @property
    def power_difference(self) -> Optional[float]:
        if self.user_avg_power is None or self.category_avg_power is None:
            return None
        return self.user_avg_power - self.category_avg_power

    @property
    def wkg_difference(self) -> Optional[float]:
        if self.user_avg_wkg is None or self.category_avg_wkg is None:
            return None
        return round_half_up(self.user_avg_wkg - self.category_avg_wkg, 2)
