from datetime import date, datetime, time
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import String
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from teamops.models.scrim_game import ScrimGame
    from teamops.models.scrim_series import ScrimSeries


class ScrimStatus(str, Enum):
    scheduled = "Scheduled"
    in_progress = "In Progress"
    completed = "Completed"
    cancelled = "Cancelled"


class Scrim(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: str
    opponent: str
    scrim_date: date
    start_time: Optional[time] = Field(default=None)
    status: ScrimStatus = Field(default=ScrimStatus.scheduled, sa_column=Column(String, nullable=False))

    # Only set while status is Completed
    overall_result: Optional[str] = Field(default=None)  # "{w}W-{l}L-{d}D"
    cancellation_reason: Optional[str] = Field(default=None)

    patch: Optional[str] = None
    notes: Optional[str] = None

    # Null for one-off scrims
    series_id: Optional[int] = Field(default=None, foreign_key="scrimseries.id")

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    series: Optional["ScrimSeries"] = Relationship(back_populates="scrims")
    games: List["ScrimGame"] = Relationship(back_populates="scrim")
