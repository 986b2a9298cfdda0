"""
Change signals returned by mutating services.

The caller propagates these to whatever caches or subscribers it keeps.
Keys mirror the collections the dashboard reads.
"""
from dataclasses import dataclass
from typing import Optional

SCRIM = "scrim"
SCRIMS = "scrims"
SCRIM_GAMES = "scrimGames"
SCRIM_SERIES = "scrimSeries"
SCRIM_CALENDAR_EVENTS = "scrimCalendarEvents"
GENERAL_CALENDAR_EVENTS = "generalCalendarEvents"


@dataclass(frozen=True)
class ChangeSignal:
    collection: str
    key: Optional[int] = None

    def to_dict(self):
        return {"collection": self.collection, "key": self.key}
