from datetime import date, datetime, time
from enum import Enum
from typing import Optional

from sqlalchemy import String
from sqlmodel import Column, Field, SQLModel


class CalendarEventCategory(str, Enum):
    official = "official"
    meeting = "meeting"
    theory = "theory"
    other = "other"


class CalendarEvent(SQLModel, table=True):
    """General (non-scrim) calendar entry. Recurring events are stored as independent rows."""

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: str
    title: str
    event_date: date
    start_time: Optional[time] = Field(default=None)
    end_time: Optional[time] = Field(default=None)
    category: CalendarEventCategory = Field(sa_column=Column(String, nullable=False))
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})
