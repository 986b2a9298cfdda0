"""
Calendar view: scrims and general events merged into one ordered list.

Order within the merged list:
1. calendar date
2. timed entries before untimed ones; two timed entries by start time
3. title (case-sensitive)

No de-duplication across sources.
"""
import itertools
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Iterable, List, Optional, Sequence, Union

from sqlmodel import Session, select

from teamops.models.calendar_event import CalendarEvent, CalendarEventCategory
from teamops.models.scrim import Scrim, ScrimStatus
from teamops.services.changes import GENERAL_CALENDAR_EVENTS, ChangeSignal
from teamops.services.errors import EmptyExpansionNotice, ServiceWarning
from teamops.services.recurrence import expand
from teamops.utils.actor_guards import Actor, require_authenticated
from teamops.utils.sql import commit_or_raise

logger = logging.getLogger(__name__)

SCRIM_CATEGORY = "scrim"


@dataclass(frozen=True)
class CalendarItem:
    id: int
    title: str
    date: date
    category: str  # "scrim" or a CalendarEventCategory value
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    description: Optional[str] = None


def _sort_key(item: CalendarItem):
    return (item.date, item.start_time is None, item.start_time or time.min, item.title)


def merge(*collections: Iterable[CalendarItem]) -> List[CalendarItem]:
    return sorted(itertools.chain.from_iterable(collections), key=_sort_key)


def events_on_date(items: Iterable[CalendarItem], day: Union[date, datetime]) -> List[CalendarItem]:
    """Items falling on the same calendar day (any time component of `day` is ignored)"""
    if isinstance(day, datetime):
        day = day.date()
    return [item for item in items if item.date == day]


def scrims_as_calendar_items(session: Session) -> List[CalendarItem]:
    """Non-cancelled scrims, ordered by date"""
    scrims = session.exec(
        select(Scrim).where(Scrim.status != ScrimStatus.cancelled.value).order_by(Scrim.scrim_date, Scrim.id)
    ).all()
    return [
        CalendarItem(
            id=scrim.id,
            title=f"vs {scrim.opponent}",
            date=scrim.scrim_date,
            category=SCRIM_CATEGORY,
            start_time=scrim.start_time,
            description=f"Scrim against {scrim.opponent}",
        )
        for scrim in scrims
    ]


def general_events_as_calendar_items(session: Session) -> List[CalendarItem]:
    events = session.exec(select(CalendarEvent).order_by(CalendarEvent.event_date, CalendarEvent.id)).all()
    return [
        CalendarItem(
            id=event.id,
            title=event.title,
            date=event.event_date,
            category=CalendarEventCategory(event.category).value,
            start_time=event.start_time,
            end_time=event.end_time,
            description=event.description,
        )
        for event in events
    ]


def load_calendar(session: Session, on: Optional[date] = None) -> List[CalendarItem]:
    """Merged calendar, optionally restricted to one day"""
    items = merge(scrims_as_calendar_items(session), general_events_as_calendar_items(session))
    if on is not None:
        items = events_on_date(items, on)
    return items


# ============================================================================
# General event creation
# ============================================================================


@dataclass
class GeneralEventTemplate:
    title: str
    event_date: date
    category: CalendarEventCategory
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    description: Optional[str] = None
    is_recurring: bool = False
    weekdays: Sequence[Union[str, int]] = field(default_factory=list)
    series_end_date: Optional[date] = None


class GeneralEventResult:
    def __init__(self):
        self.status = "created"
        self.events: List[CalendarEvent] = []
        self.warnings: List[ServiceWarning] = []
        self.changes: List[ChangeSignal] = []


def create_general_event(session: Session, actor: Actor, template: GeneralEventTemplate) -> GeneralEventResult:
    """
    Create a general calendar event, or one independent row per weekly occurrence.

    Recurring events share no series row; each occurrence stands alone.

    Raises:
        AuthorizationError: no signed-in actor
        PersistenceError: insert failed (no rows kept)
    """
    require_authenticated(actor, "create calendar events")
    result = GeneralEventResult()

    if template.is_recurring and template.weekdays and template.series_end_date:
        dates = expand(template.event_date, template.weekdays, template.series_end_date)
        if not dates:
            logger.warning("No calendar events generated for '%s'", template.title)
            result.status = "empty"
            result.warnings.append(EmptyExpansionNotice("No dates matched the recurrence criteria."))
            return result
    else:
        dates = [template.event_date]

    events = [
        CalendarEvent(
            owner_id=actor.user_id,
            title=template.title,
            event_date=occurrence,
            start_time=template.start_time,
            end_time=template.end_time,
            category=CalendarEventCategory(template.category).value,
            description=template.description,
        )
        for occurrence in dates
    ]
    session.add_all(events)
    commit_or_raise(session, f"create calendar event '{template.title}'")
    for event in events:
        session.refresh(event)

    result.events = events
    result.changes = [ChangeSignal(GENERAL_CALENDAR_EVENTS)]
    logger.info("Created %d calendar event(s) '%s'", len(events), template.title)
    return result
