"""
Scrim lifecycle: status transitions, overall result, and game edits.

States: Scheduled -> In Progress -> Completed, plus Cancelled from anywhere.
overall_result is only present while Completed:
- entering Completed computes it from the scrim's current games
- leaving Completed (including to Cancelled) clears it

Games may only be added or removed while the scrim is Scheduled or In Progress.
A completed record is corrected by re-opening it, editing, and completing again.
"""
import logging
from datetime import datetime
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from teamops.models.scrim import Scrim, ScrimStatus
from teamops.models.scrim_game import GameResult, ScrimGame
from teamops.services.changes import (
    SCRIM,
    SCRIM_CALENDAR_EVENTS,
    SCRIM_GAMES,
    SCRIMS,
    ChangeSignal,
)
from teamops.services.errors import (
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    StructuralEditRefused,
)
from teamops.utils.actor_guards import Actor, require_privileged
from teamops.utils.sql import commit_or_raise, scalar_int

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[ScrimStatus, FrozenSet[ScrimStatus]] = {
    ScrimStatus.scheduled: frozenset({ScrimStatus.in_progress, ScrimStatus.completed, ScrimStatus.cancelled}),
    ScrimStatus.in_progress: frozenset({ScrimStatus.scheduled, ScrimStatus.completed, ScrimStatus.cancelled}),
    ScrimStatus.completed: frozenset({ScrimStatus.scheduled, ScrimStatus.in_progress, ScrimStatus.cancelled}),
    ScrimStatus.cancelled: frozenset({ScrimStatus.scheduled}),
}

STRUCTURALLY_EDITABLE: FrozenSet[ScrimStatus] = frozenset({ScrimStatus.scheduled, ScrimStatus.in_progress})

GAME_UPDATE_FIELDS = ("result", "duration", "notes", "blue_side_pick", "red_side_pick")


class LifecycleResult:
    """Outcome of a lifecycle mutation"""

    def __init__(self, scrim: Scrim, game: Optional[ScrimGame] = None):
        self.scrim = scrim
        self.game = game
        self.changes: List[ChangeSignal] = []


def compute_overall_result(games: Iterable[ScrimGame]) -> str:
    """Summarize game results as "{w}W-{l}L-{d}D". N/A games are ignored."""
    wins = losses = draws = 0
    for game in games:
        result = GameResult(game.result)
        if result == GameResult.win:
            wins += 1
        elif result == GameResult.loss:
            losses += 1
        elif result == GameResult.draw:
            draws += 1
    return f"{wins}W-{losses}L-{draws}D"


def get_scrim(session: Session, scrim_id: int) -> Scrim:
    scrim = session.get(Scrim, scrim_id)
    if not scrim:
        raise NotFoundError(f"Scrim {scrim_id} not found")
    return scrim


def get_game(session: Session, game_id: int) -> ScrimGame:
    game = session.get(ScrimGame, game_id)
    if not game:
        raise NotFoundError(f"Scrim game {game_id} not found")
    return game


def list_games(session: Session, scrim_id: int) -> List[ScrimGame]:
    """Games of a scrim ordered by game_number"""
    return list(
        session.exec(select(ScrimGame).where(ScrimGame.scrim_id == scrim_id).order_by(ScrimGame.game_number)).all()
    )


def require_structurally_editable(scrim: Scrim) -> None:
    status = ScrimStatus(scrim.status)
    if status not in STRUCTURALLY_EDITABLE:
        raise StructuralEditRefused(
            f"Scrim {scrim.id} is {status.value}; games can only be changed while Scheduled or In Progress"
        )


def _scrim_changes(scrim_id: int) -> List[ChangeSignal]:
    return [
        ChangeSignal(SCRIM, scrim_id),
        ChangeSignal(SCRIMS),
        ChangeSignal(SCRIM_CALENDAR_EVENTS),
    ]


def transition_status(
    session: Session,
    actor: Actor,
    scrim_id: int,
    new_status: ScrimStatus,
    cancellation_reason: Optional[str] = None,
) -> LifecycleResult:
    """
    Move a scrim to new_status.

    Raises:
        AuthorizationError: actor is not admin/coach
        NotFoundError: scrim does not exist
        InvalidTransitionError: transition not in ALLOWED_TRANSITIONS
        PersistenceError: update failed
    """
    require_privileged(actor, "change scrim status")
    scrim = get_scrim(session, scrim_id)

    current = ScrimStatus(scrim.status)
    new_status = ScrimStatus(new_status)
    if new_status not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError(f"Cannot move scrim {scrim_id} from {current.value} to {new_status.value}")

    if new_status == ScrimStatus.completed:
        scrim.overall_result = compute_overall_result(list_games(session, scrim_id))
    else:
        scrim.overall_result = None

    if new_status == ScrimStatus.cancelled:
        scrim.cancellation_reason = cancellation_reason or None
    elif current == ScrimStatus.cancelled:
        scrim.cancellation_reason = None

    scrim.status = new_status.value
    scrim.updated_at = datetime.utcnow()
    session.add(scrim)
    commit_or_raise(session, f"update status of scrim {scrim_id}")
    session.refresh(scrim)

    logger.info(
        "Scrim %s: %s -> %s (result=%s, by %s)",
        scrim_id,
        current.value,
        new_status.value,
        scrim.overall_result,
        actor.user_id,
    )

    result = LifecycleResult(scrim)
    result.changes = _scrim_changes(scrim_id)
    return result


def add_game(
    session: Session,
    actor: Actor,
    scrim_id: int,
    result: GameResult = GameResult.not_applicable,
    duration: Optional[str] = None,
    notes: Optional[str] = None,
    blue_side_pick: Optional[str] = None,
    red_side_pick: Optional[str] = None,
) -> LifecycleResult:
    """Append one game numbered after the scrim's current last game"""
    require_privileged(actor, "add games")
    scrim = get_scrim(session, scrim_id)
    require_structurally_editable(scrim)

    last_number = scalar_int(
        session.exec(select(func.max(ScrimGame.game_number)).where(ScrimGame.scrim_id == scrim_id)).one()
    )
    game = ScrimGame(
        scrim_id=scrim_id,
        owner_id=actor.user_id,
        game_number=last_number + 1,
        result=GameResult(result).value,
        duration=duration,
        notes=notes,
        blue_side_pick=blue_side_pick,
        red_side_pick=red_side_pick,
    )
    session.add(game)
    commit_or_raise(session, f"add game to scrim {scrim_id}")
    session.refresh(game)

    outcome = LifecycleResult(scrim, game)
    outcome.changes = [ChangeSignal(SCRIM_GAMES, scrim_id), ChangeSignal(SCRIMS)]
    return outcome


def remove_game(session: Session, actor: Actor, game_id: int) -> LifecycleResult:
    """
    Delete a game and renumber the later games of the same scrim so numbering stays 1..N.

    Refused (no write attempted) unless the parent scrim is Scheduled or In Progress.
    """
    require_privileged(actor, "remove games")
    game = get_game(session, game_id)
    scrim = get_scrim(session, game.scrim_id)
    require_structurally_editable(scrim)

    scrim_id = scrim.id
    removed_number = game.game_number
    later_games = [g for g in list_games(session, scrim_id) if g.game_number > removed_number]

    try:
        session.delete(game)
        session.flush()
        # One flush per row keeps uq_scrim_game_number satisfied while shifting down
        for later in later_games:
            later.game_number -= 1
            later.updated_at = datetime.utcnow()
            session.add(later)
            session.flush()
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Failed to remove game %s from scrim %s", game_id, scrim_id)
        raise PersistenceError(f"Failed to remove game {game_id}: {exc}") from exc

    session.refresh(scrim)
    outcome = LifecycleResult(scrim)
    outcome.changes = [ChangeSignal(SCRIM_GAMES, scrim_id), ChangeSignal(SCRIMS)]
    return outcome


def record_game_result(session: Session, actor: Actor, game_id: int, **updates: Any) -> LifecycleResult:
    """
    Update a game's result and free-text fields.

    Only the keys passed in updates are touched. None clears a free-text field;
    result cannot be cleared, so result=None leaves it unchanged.
    Only while the scrim is Scheduled or In Progress, so a completed scrim's
    overall_result never goes stale.
    """
    unknown = set(updates) - set(GAME_UPDATE_FIELDS)
    if unknown:
        raise TypeError(f"Unknown game fields: {', '.join(sorted(unknown))}")

    require_privileged(actor, "record game results")
    game = get_game(session, game_id)
    scrim = get_scrim(session, game.scrim_id)
    require_structurally_editable(scrim)

    result = updates.pop("result", None)
    if result is not None:
        game.result = GameResult(result).value
    for key, value in updates.items():
        setattr(game, key, value)
    game.updated_at = datetime.utcnow()

    session.add(game)
    commit_or_raise(session, f"update game {game_id}")
    session.refresh(game)

    outcome = LifecycleResult(scrim, game)
    outcome.changes = [ChangeSignal(SCRIM_GAMES, scrim.id)]
    return outcome
