from datetime import date, time
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, field_validator, model_validator
from sqlmodel import Session

from teamops.database import get_session
from teamops.models.calendar_event import CalendarEventCategory
from teamops.services.calendar_aggregator import GeneralEventTemplate, create_general_event, load_calendar
from teamops.services.errors import ScrimServiceError
from teamops.services.recurrence import normalize_weekdays
from teamops.utils.actor_guards import Actor, get_actor
from teamops.utils.http_errors import to_http_exception

router = APIRouter()


class CalendarItemResponse(BaseModel):
    id: int
    title: str
    date: date
    category: str
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    description: Optional[str] = None

    class Config:
        from_attributes = True


class CalendarEventCreate(BaseModel):
    title: str
    event_date: date
    category: CalendarEventCategory
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    description: Optional[str] = None
    is_recurring: bool = False
    recurrence_days: List[str] = []
    series_end_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if not v or not v.strip():
            raise ValueError("title cannot be empty")
        return v.strip()

    @field_validator("recurrence_days")
    @classmethod
    def validate_recurrence_days(cls, v):
        return list(normalize_weekdays(v))

    @model_validator(mode="after")
    def validate_times_and_recurrence(self):
        if self.start_time and self.end_time and self.end_time < self.start_time:
            raise ValueError("end_time cannot be before start_time")
        if self.is_recurring:
            if not self.recurrence_days:
                raise ValueError("recurrence_days are required for a recurring event")
            if self.series_end_date is None:
                raise ValueError("series_end_date is required for a recurring event")
            if self.series_end_date < self.event_date:
                raise ValueError("series_end_date cannot be before event_date")
        return self


class CalendarEventCreateResponse(BaseModel):
    status: str  # "created" | "empty"
    events: List[CalendarItemResponse] = []
    warnings: List[Dict[str, Any]] = []
    changes: List[Dict[str, Any]] = []


@router.get("/calendar", response_model=List[CalendarItemResponse])
def get_calendar(on: Optional[date] = None, session: Session = Depends(get_session)):
    """Scrims (excluding cancelled) and general events in calendar order. `on` restricts to one day."""
    return load_calendar(session, on=on)


@router.post("/calendar/events", response_model=CalendarEventCreateResponse, status_code=201)
def create_calendar_event(
    payload: CalendarEventCreate,
    response: Response,
    actor: Actor = Depends(get_actor),
    session: Session = Depends(get_session),
) -> CalendarEventCreateResponse:
    """Create a general event; recurring events become one independent row per occurrence"""
    template = GeneralEventTemplate(
        title=payload.title,
        event_date=payload.event_date,
        category=payload.category,
        start_time=payload.start_time,
        end_time=payload.end_time,
        description=payload.description or None,
        is_recurring=payload.is_recurring,
        weekdays=payload.recurrence_days,
        series_end_date=payload.series_end_date,
    )
    try:
        result = create_general_event(session, actor, template)
    except ScrimServiceError as exc:
        raise to_http_exception(exc)

    if result.status == "empty":
        response.status_code = 200

    return CalendarEventCreateResponse(
        status=result.status,
        events=[
            CalendarItemResponse(
                id=e.id,
                title=e.title,
                date=e.event_date,
                category=e.category,
                start_time=e.start_time,
                end_time=e.end_time,
                description=e.description,
            )
            for e in result.events
        ],
        warnings=[w.to_dict() for w in result.warnings],
        changes=[c.to_dict() for c in result.changes],
    )
