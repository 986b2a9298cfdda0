"""
Scrim creation: one-off scrims and weekly series.

Recurring pipeline:
1. Expand the weekly rule (nothing is written if it yields no dates)
2. Insert the series row and one scrim per date in a single transaction
3. Insert placeholder games for every scrim (separate step, may partially fail)

Step 2 either fully commits or fully rolls back, so a series never exists
without its scrims. Step 3 failing leaves the scrims in place and reports
status "partial" with the scrim ids that still need games.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, time
from typing import List, Optional, Sequence, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from teamops.models.scrim import Scrim, ScrimStatus
from teamops.models.scrim_game import ScrimGame
from teamops.models.scrim_series import ScrimSeries
from teamops.services.changes import SCRIM_CALENDAR_EVENTS, SCRIM_SERIES, SCRIMS, ChangeSignal
from teamops.services.errors import (
    EmptyExpansionNotice,
    InvalidTransitionError,
    PartialFailureError,
    PartialFailureWarning,
    PersistenceError,
    ServiceWarning,
)
from teamops.services.game_replicator import replicate_games
from teamops.services.recurrence import build_rrule_string, expand, normalize_weekdays
from teamops.services.scrim_lifecycle import STRUCTURALLY_EDITABLE
from teamops.utils.actor_guards import Actor, require_privileged
from teamops.utils.sql import commit_or_raise

logger = logging.getLogger(__name__)

STATUS_CREATED = "created"
STATUS_EMPTY = "empty"
STATUS_PARTIAL = "partial"


@dataclass
class ScrimTemplate:
    """Validated scrim input. Recurring when is_recurring with weekdays and an end date."""

    opponent: str
    scrim_date: date
    start_time: Optional[time] = None
    patch: Optional[str] = None
    notes: Optional[str] = None
    status: ScrimStatus = ScrimStatus.scheduled
    number_of_games: Optional[int] = None
    is_recurring: bool = False
    weekdays: Sequence[Union[str, int]] = field(default_factory=list)
    series_end_date: Optional[date] = None

    @property
    def wants_series(self) -> bool:
        return bool(self.is_recurring and self.weekdays and self.series_end_date)


class MaterializationResult:
    """Complete result of a scrim creation"""

    def __init__(self):
        self.status = STATUS_CREATED
        self.series: Optional[ScrimSeries] = None
        self.scrims: List[Scrim] = []
        self.games: List[ScrimGame] = []
        self.warnings: List[ServiceWarning] = []
        self.changes: List[ChangeSignal] = []

    @property
    def scrim_ids(self) -> List[int]:
        return [s.id for s in self.scrims]


def materialize(session: Session, actor: Actor, template: ScrimTemplate) -> MaterializationResult:
    """Create a series or a single scrim depending on the template"""
    if template.wants_series:
        return create_recurring(session, actor, template)
    return create_single(session, actor, template)


def create_recurring(session: Session, actor: Actor, template: ScrimTemplate) -> MaterializationResult:
    """
    Persist a weekly series and one Scheduled scrim per occurrence.

    Returns status "empty" (nothing written) when the rule yields no dates.

    Raises:
        AuthorizationError: actor is not admin/coach
        PersistenceError: series/scrim insert failed; nothing was kept
    """
    require_privileged(actor, "create scrims")
    result = MaterializationResult()

    weekdays = normalize_weekdays(template.weekdays)
    dates = expand(template.scrim_date, weekdays, template.series_end_date)
    if not dates:
        logger.warning(
            "No scrims generated for %s: %s..%s on %s",
            template.opponent,
            template.scrim_date,
            template.series_end_date,
            ",".join(weekdays) or "-",
        )
        result.status = STATUS_EMPTY
        result.warnings.append(
            EmptyExpansionNotice("No scrim instances generated from the recurrence rule. Check dates and days.")
        )
        return result

    series = ScrimSeries(
        owner_id=actor.user_id,
        opponent=template.opponent,
        weekdays=list(weekdays),
        series_start_date=template.scrim_date,
        series_end_date=template.series_end_date,
        start_time_template=template.start_time,
        notes_template=template.notes,
        patch_template=template.patch,
        rrule_string=build_rrule_string(template.scrim_date, weekdays, template.series_end_date),
    )

    try:
        session.add(series)
        session.flush()  # assigns series.id for the scrims below
        scrims = [
            Scrim(
                owner_id=actor.user_id,
                opponent=template.opponent,
                scrim_date=occurrence,
                start_time=template.start_time,
                status=ScrimStatus.scheduled.value,
                patch=template.patch,
                notes=template.notes,
                series_id=series.id,
            )
            for occurrence in dates
        ]
        session.add_all(scrims)
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Failed to create scrim series vs %s", template.opponent)
        raise PersistenceError(f"Failed to create scrim series: {exc}") from exc

    session.refresh(series)
    for scrim in scrims:
        session.refresh(scrim)

    result.series = series
    result.scrims = scrims
    result.changes = [ChangeSignal(SCRIM_SERIES, series.id), ChangeSignal(SCRIMS), ChangeSignal(SCRIM_CALENDAR_EVENTS)]
    logger.info(
        "Created series %s vs %s with %d scrims (%s..%s)",
        series.id,
        series.opponent,
        len(scrims),
        dates[0],
        dates[-1],
    )

    _attach_games(session, actor, result, template.number_of_games)
    return result


def create_single(session: Session, actor: Actor, template: ScrimTemplate) -> MaterializationResult:
    """
    Persist one scrim with no series link.

    Raises:
        AuthorizationError: actor is not admin/coach
        InvalidTransitionError: initial status is not Scheduled or In Progress
        PersistenceError: insert failed
    """
    require_privileged(actor, "create scrims")
    status = ScrimStatus(template.status)
    if status not in STRUCTURALLY_EDITABLE:
        raise InvalidTransitionError(f"New scrims must start Scheduled or In Progress, not {status.value}")

    scrim = Scrim(
        owner_id=actor.user_id,
        opponent=template.opponent,
        scrim_date=template.scrim_date,
        start_time=template.start_time,
        status=status.value,
        patch=template.patch,
        notes=template.notes,
    )
    session.add(scrim)
    commit_or_raise(session, f"create scrim vs {template.opponent}")
    session.refresh(scrim)

    result = MaterializationResult()
    result.scrims = [scrim]
    result.changes = [ChangeSignal(SCRIMS), ChangeSignal(SCRIM_CALENDAR_EVENTS)]
    logger.info("Created scrim %s vs %s on %s", scrim.id, scrim.opponent, scrim.scrim_date)

    _attach_games(session, actor, result, template.number_of_games)
    return result


def _attach_games(
    session: Session, actor: Actor, result: MaterializationResult, number_of_games: Optional[int]
) -> None:
    try:
        replication = replicate_games(session, actor, result.scrim_ids, number_of_games)
    except PartialFailureError as exc:
        result.status = STATUS_PARTIAL
        result.warnings.append(PartialFailureWarning(exc.message, exc.scrim_ids))
        return
    result.games = replication.games
    result.changes.extend(replication.changes)
