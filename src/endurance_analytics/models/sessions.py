"""Session, daily-load and athlete snapshot models.

Optional numeric fields are ``None`` when the source did not record them.
They are never coerced to zero; every consumer skips sessions that lack the
field it needs.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DailyLoad(BaseModel):
    """Training stress accumulated on one calendar day."""

    model_config = ConfigDict(frozen=True)

    date: date
    training_stress: float = Field(..., ge=0, description="TSS for the day, 0 on rest days")


class Session(BaseModel):
    """A single recorded training session."""

    model_config = ConfigDict(frozen=True)

    id: str
    date: date
    duration_seconds: int = Field(..., ge=0)
    avg_power: Optional[float] = Field(None, ge=0)
    normalized_power: Optional[float] = Field(None, ge=0)
    avg_heart_rate: Optional[float] = Field(None, ge=0)
    tss: Optional[float] = Field(None, ge=0)
    intensity_factor: Optional[float] = Field(None, ge=0)

    @property
    def has_efficiency_data(self) -> bool:
        """Whether both NP and a usable heart rate were recorded."""
        return (
            self.normalized_power is not None
            and self.avg_heart_rate is not None
            and self.avg_heart_rate > 0
        )


class AthleteSnapshot(BaseModel):
    """Current athlete profile values used by goal detection."""

    ftp: Optional[float] = Field(None, gt=0, description="Functional Threshold Power in watts")
    weight_kg: Optional[float] = Field(None, gt=0)
    max_hr: Optional[int] = Field(None, gt=0)
