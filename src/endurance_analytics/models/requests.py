"""Request objects for the analytics entry points.

Filters arriving from the presentation layer are plain enumerations and
integers; they are validated here by membership and range.
"""

from datetime import date, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .races import RaceType


class RacePeriod(str, Enum):
    """Look-back windows for race analysis."""
    DAYS_30 = "30d"
    DAYS_90 = "90d"
    DAYS_180 = "180d"
    DAYS_365 = "365d"
    ALL = "all"

    @property
    def days(self) -> Optional[int]:
        return {
            RacePeriod.DAYS_30: 30,
            RacePeriod.DAYS_90: 90,
            RacePeriod.DAYS_180: 180,
            RacePeriod.DAYS_365: 365,
        }.get(self)

    def start_date(self, today: date) -> Optional[date]:
        """First date inside the window, None for the whole history."""
        if self.days is None:
            return None
        return today - timedelta(days=self.days)


class TrendPeriod(str, Enum):
    """Windows for historical training summaries."""
    WEEK = "week"
    MONTH = "month"
    THREE_MONTHS = "3months"
    SIX_MONTHS = "6months"
    YEAR = "year"

    @property
    def days(self) -> int:
        return {
            TrendPeriod.WEEK: 7,
            TrendPeriod.MONTH: 30,
            TrendPeriod.THREE_MONTHS: 90,
            TrendPeriod.SIX_MONTHS: 180,
            TrendPeriod.YEAR: 365,
        }[self]


class RaceAnalysisRequest(BaseModel):
    """Filters for race performance analysis."""
    period: RacePeriod = RacePeriod.ALL
    category: Optional[str] = Field(None, min_length=1, max_length=8)
    race_type: Optional[RaceType] = None


class CompetitorAnalysisRequest(BaseModel):
    """Filters for competitor analysis."""
    min_races_together: int = Field(default=2, ge=1, le=100)


class EfficiencyRequest(BaseModel):
    """Look-back for efficiency analysis, capped at 180 days."""
    days: int = Field(default=90, ge=7, le=180)


class TrendsRequest(BaseModel):
    """Window and metric focus for a historical summary."""
    period: TrendPeriod = TrendPeriod.MONTH
    include_fitness: bool = True
