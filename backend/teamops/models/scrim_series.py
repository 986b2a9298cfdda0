from datetime import date, datetime, time
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from teamops.models.scrim import Scrim


class ScrimSeries(SQLModel, table=True):
    """Weekly recurrence template that scrims are materialized from. Never edited after insert."""

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: str
    opponent: str
    weekdays: List[str] = Field(sa_column=Column(JSON, nullable=False))  # Monday-first codes, e.g. ["MO", "WE"]
    series_start_date: date
    series_end_date: date  # inclusive
    start_time_template: Optional[time] = Field(default=None)
    notes_template: Optional[str] = None
    patch_template: Optional[str] = None
    rrule_string: str
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    scrims: List["Scrim"] = Relationship(back_populates="series")
