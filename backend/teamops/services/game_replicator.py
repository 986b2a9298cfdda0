"""
Placeholder game creation for freshly created scrims.

Every scrim gets game_count rows numbered 1..game_count with result N/A.
All rows for all scrims go in one insert. If that insert fails the scrims are
left in place and PartialFailureError names them so games can be retried per scrim.
"""
import logging
from typing import List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from teamops.models.scrim import Scrim, ScrimStatus
from teamops.models.scrim_game import GameResult, ScrimGame
from teamops.services.changes import SCRIM_GAMES, SCRIMS, ChangeSignal
from teamops.services.errors import NotFoundError, PartialFailureError, StructuralEditRefused
from teamops.services.scrim_lifecycle import STRUCTURALLY_EDITABLE, get_scrim, require_structurally_editable
from teamops.utils.actor_guards import Actor, require_privileged
from teamops.utils.sql import scalar_int

logger = logging.getLogger(__name__)


class ReplicationResult:
    def __init__(self):
        self.games: List[ScrimGame] = []
        self.changes: List[ChangeSignal] = []


def build_game_stubs(scrim_ids: Sequence[int], game_count: int, owner_id: str) -> List[ScrimGame]:
    """Unsaved ScrimGame rows, grouped by scrim in input order, numbered 1..game_count"""
    return [
        ScrimGame(
            scrim_id=scrim_id,
            owner_id=owner_id,
            game_number=number,
            result=GameResult.not_applicable.value,
        )
        for scrim_id in scrim_ids
        for number in range(1, game_count + 1)
    ]


def _bulk_insert(session: Session, games: List[ScrimGame]) -> None:
    session.add_all(games)
    session.commit()


def _require_editable_scrims(session: Session, scrim_ids: Sequence[int]) -> None:
    """All scrims must exist and be Scheduled/In Progress. Checked in one query before any write."""
    scrims = session.exec(select(Scrim).where(Scrim.id.in_(list(scrim_ids)))).all()  # type: ignore[union-attr]
    found = {scrim.id: scrim for scrim in scrims}

    missing = [scrim_id for scrim_id in scrim_ids if scrim_id not in found]
    if missing:
        raise NotFoundError(f"Scrims not found: {', '.join(str(i) for i in missing)}")

    locked = [scrim for scrim in scrims if ScrimStatus(scrim.status) not in STRUCTURALLY_EDITABLE]
    if locked:
        raise StructuralEditRefused(
            "Games can only be added while Scheduled or In Progress; "
            + ", ".join(f"scrim {s.id} is {s.status}" for s in locked)
        )


def replicate_games(
    session: Session,
    actor: Actor,
    scrim_ids: Sequence[int],
    game_count: Optional[int],
) -> ReplicationResult:
    """
    Create game_count placeholder games for each scrim id.

    No-op when game_count is missing/<= 0 or scrim_ids is empty.
    On success there is one scrimGames change signal per scrim, in input order.

    Raises:
        AuthorizationError: actor is not admin/coach
        NotFoundError: a scrim id does not exist
        StructuralEditRefused: a scrim is Completed or Cancelled
        PartialFailureError: the bulk insert failed (nothing from it persisted)
    """
    require_privileged(actor, "create games")
    result = ReplicationResult()
    if not game_count or game_count <= 0 or not scrim_ids:
        return result

    _require_editable_scrims(session, scrim_ids)

    games = build_game_stubs(scrim_ids, game_count, actor.user_id)
    try:
        _bulk_insert(session, games)
    except SQLAlchemyError as exc:
        session.rollback()
        logger.warning(
            "Failed to insert %d game stubs for %d scrims: %s",
            len(games),
            len(scrim_ids),
            exc,
        )
        raise PartialFailureError(
            f"Scrims created, but failed to add initial games: {exc}",
            scrim_ids=list(scrim_ids),
        ) from exc

    # Committed; a failure from here on is not a partial failure
    for game in games:
        session.refresh(game)

    result.games = games
    result.changes = [ChangeSignal(SCRIM_GAMES, scrim_id) for scrim_id in scrim_ids]
    logger.info("Created %d game stubs across %d scrims", len(games), len(scrim_ids))
    return result


def retry_game_stubs(session: Session, actor: Actor, scrim_id: int, game_count: int) -> ReplicationResult:
    """
    Re-run stub creation for one scrim after a partial failure.

    Refused when the scrim already has games (numbering would collide) or is
    no longer Scheduled/In Progress.
    """
    require_privileged(actor, "create games")
    scrim = get_scrim(session, scrim_id)
    require_structurally_editable(scrim)

    existing = scalar_int(
        session.exec(select(func.count()).select_from(ScrimGame).where(ScrimGame.scrim_id == scrim_id)).one()
    )
    if existing:
        raise StructuralEditRefused(f"Scrim {scrim_id} already has {existing} games; add games individually instead")

    result = replicate_games(session, actor, [scrim_id], game_count)
    if result.games:
        result.changes.append(ChangeSignal(SCRIMS))
    return result
