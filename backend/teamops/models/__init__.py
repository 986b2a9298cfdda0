from teamops.models.calendar_event import CalendarEvent, CalendarEventCategory
from teamops.models.scrim import Scrim, ScrimStatus
from teamops.models.scrim_game import GameResult, ScrimGame
from teamops.models.scrim_series import ScrimSeries

__all__ = [
    "ScrimSeries",
    "Scrim",
    "ScrimStatus",
    "ScrimGame",
    "GameResult",
    "CalendarEvent",
    "CalendarEventCategory",
]
