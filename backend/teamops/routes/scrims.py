from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, field_validator, model_validator
from sqlmodel import Session, select

from teamops.database import get_session
from teamops.models.scrim import Scrim, ScrimStatus
from teamops.models.scrim_game import GameResult
from teamops.models.scrim_series import ScrimSeries
from teamops.services import game_replicator, scrim_lifecycle
from teamops.services.errors import ScrimServiceError
from teamops.services.recurrence import normalize_weekdays
from teamops.services.series_materializer import STATUS_EMPTY, ScrimTemplate, materialize
from teamops.utils.actor_guards import Actor, get_actor
from teamops.utils.http_errors import to_http_exception

router = APIRouter()

MAX_GAMES_PER_SCRIM = 20


class ScrimCreate(BaseModel):
    opponent: str
    scrim_date: date
    start_time: Optional[time] = None
    patch: Optional[str] = None
    notes: Optional[str] = None
    status: ScrimStatus = ScrimStatus.scheduled
    number_of_games: Optional[int] = None
    is_recurring: bool = False
    recurrence_days: List[str] = []
    series_end_date: Optional[date] = None

    @field_validator("opponent")
    @classmethod
    def validate_opponent(cls, v):
        if not v or not v.strip():
            raise ValueError("opponent cannot be empty")
        return v.strip()

    @field_validator("number_of_games")
    @classmethod
    def validate_number_of_games(cls, v):
        if v is not None and not 0 <= v <= MAX_GAMES_PER_SCRIM:
            raise ValueError(f"number_of_games must be between 0 and {MAX_GAMES_PER_SCRIM}")
        return v

    @field_validator("recurrence_days")
    @classmethod
    def validate_recurrence_days(cls, v):
        return list(normalize_weekdays(v))

    @model_validator(mode="after")
    def validate_recurrence(self):
        if self.is_recurring:
            if not self.recurrence_days:
                raise ValueError("recurrence_days are required for a recurring scrim")
            if self.series_end_date is None:
                raise ValueError("series_end_date is required for a recurring scrim")
            if self.series_end_date < self.scrim_date:
                raise ValueError("series_end_date cannot be before scrim_date")
        return self


class ScrimResponse(BaseModel):
    id: int
    owner_id: str
    opponent: str
    scrim_date: date
    start_time: Optional[time] = None
    status: ScrimStatus
    overall_result: Optional[str] = None
    cancellation_reason: Optional[str] = None
    patch: Optional[str] = None
    notes: Optional[str] = None
    series_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ScrimGameResponse(BaseModel):
    id: int
    scrim_id: int
    game_number: int
    result: GameResult
    duration: Optional[str] = None
    notes: Optional[str] = None
    blue_side_pick: Optional[str] = None
    red_side_pick: Optional[str] = None

    class Config:
        from_attributes = True


class SeriesResponse(BaseModel):
    id: int
    owner_id: str
    opponent: str
    weekdays: List[str]
    series_start_date: date
    series_end_date: date
    start_time_template: Optional[time] = None
    notes_template: Optional[str] = None
    patch_template: Optional[str] = None
    rrule_string: str

    class Config:
        from_attributes = True


class SeriesDetailResponse(SeriesResponse):
    scrims: List[ScrimResponse] = []


class ScrimCreateResponse(BaseModel):
    status: str  # "created" | "empty" | "partial"
    series: Optional[SeriesResponse] = None
    scrims: List[ScrimResponse] = []
    games: List[ScrimGameResponse] = []
    warnings: List[Dict[str, Any]] = []
    changes: List[Dict[str, Any]] = []


class ScrimStatusUpdate(BaseModel):
    status: ScrimStatus
    cancellation_reason: Optional[str] = None


class ScrimMutationResponse(BaseModel):
    scrim: ScrimResponse
    game: Optional[ScrimGameResponse] = None
    changes: List[Dict[str, Any]] = []


class GameCreate(BaseModel):
    result: GameResult = GameResult.not_applicable
    duration: Optional[str] = None
    notes: Optional[str] = None
    blue_side_pick: Optional[str] = None
    red_side_pick: Optional[str] = None


class GameUpdate(BaseModel):
    result: Optional[GameResult] = None
    duration: Optional[str] = None
    notes: Optional[str] = None
    blue_side_pick: Optional[str] = None
    red_side_pick: Optional[str] = None


class GameStubsCreate(BaseModel):
    number_of_games: int

    @field_validator("number_of_games")
    @classmethod
    def validate_number_of_games(cls, v):
        if not 1 <= v <= MAX_GAMES_PER_SCRIM:
            raise ValueError(f"number_of_games must be between 1 and {MAX_GAMES_PER_SCRIM}")
        return v


class GameStubsResponse(BaseModel):
    games: List[ScrimGameResponse]
    changes: List[Dict[str, Any]] = []


def _mutation_response(outcome: scrim_lifecycle.LifecycleResult) -> ScrimMutationResponse:
    return ScrimMutationResponse(
        scrim=ScrimResponse.model_validate(outcome.scrim),
        game=ScrimGameResponse.model_validate(outcome.game) if outcome.game is not None else None,
        changes=[c.to_dict() for c in outcome.changes],
    )


@router.post("/scrims", response_model=ScrimCreateResponse, status_code=201)
def create_scrims(
    payload: ScrimCreate,
    response: Response,
    actor: Actor = Depends(get_actor),
    session: Session = Depends(get_session),
) -> ScrimCreateResponse:
    """Create a single scrim or a weekly series of scrims (with optional placeholder games).

    Returns 200 with status "empty" when the recurrence yields no dates (nothing written),
    201 with status "partial" when scrims were created but their games were not."""
    template = ScrimTemplate(
        opponent=payload.opponent,
        scrim_date=payload.scrim_date,
        start_time=payload.start_time,
        patch=payload.patch or None,
        notes=payload.notes or None,
        status=payload.status,
        number_of_games=payload.number_of_games,
        is_recurring=payload.is_recurring,
        weekdays=payload.recurrence_days,
        series_end_date=payload.series_end_date,
    )
    try:
        result = materialize(session, actor, template)
    except ScrimServiceError as exc:
        raise to_http_exception(exc)

    if result.status == STATUS_EMPTY:
        response.status_code = 200

    return ScrimCreateResponse(
        status=result.status,
        series=SeriesResponse.model_validate(result.series) if result.series is not None else None,
        scrims=[ScrimResponse.model_validate(s) for s in result.scrims],
        games=[ScrimGameResponse.model_validate(g) for g in result.games],
        warnings=[w.to_dict() for w in result.warnings],
        changes=[c.to_dict() for c in result.changes],
    )


@router.get("/scrims", response_model=List[ScrimResponse])
def list_scrims(
    status: Optional[ScrimStatus] = None,
    series_id: Optional[int] = None,
    session: Session = Depends(get_session),
):
    """List scrims ordered by date, optionally filtered by status or series"""
    query = select(Scrim)
    if status is not None:
        query = query.where(Scrim.status == status.value)
    if series_id is not None:
        query = query.where(Scrim.series_id == series_id)
    return session.exec(query.order_by(Scrim.scrim_date, Scrim.start_time, Scrim.id)).all()


@router.get("/scrims/{scrim_id}", response_model=ScrimResponse)
def get_scrim(scrim_id: int, session: Session = Depends(get_session)):
    scrim = session.get(Scrim, scrim_id)
    if not scrim:
        raise HTTPException(status_code=404, detail="Scrim not found")
    return scrim


@router.get("/scrims/{scrim_id}/games", response_model=List[ScrimGameResponse])
def get_scrim_games(scrim_id: int, session: Session = Depends(get_session)):
    """Games of a scrim ordered by game_number"""
    scrim = session.get(Scrim, scrim_id)
    if not scrim:
        raise HTTPException(status_code=404, detail="Scrim not found")
    return scrim_lifecycle.list_games(session, scrim_id)


@router.patch("/scrims/{scrim_id}/status", response_model=ScrimMutationResponse)
def update_scrim_status(
    scrim_id: int,
    payload: ScrimStatusUpdate,
    actor: Actor = Depends(get_actor),
    session: Session = Depends(get_session),
) -> ScrimMutationResponse:
    """Move a scrim through its lifecycle. Completing computes overall_result; leaving Completed clears it."""
    try:
        outcome = scrim_lifecycle.transition_status(
            session, actor, scrim_id, payload.status, cancellation_reason=payload.cancellation_reason
        )
    except ScrimServiceError as exc:
        raise to_http_exception(exc)
    return _mutation_response(outcome)


@router.post("/scrims/{scrim_id}/games", response_model=ScrimMutationResponse, status_code=201)
def add_scrim_game(
    scrim_id: int,
    payload: GameCreate,
    actor: Actor = Depends(get_actor),
    session: Session = Depends(get_session),
) -> ScrimMutationResponse:
    """Append a game after the scrim's last game (Scheduled/In Progress only)"""
    try:
        outcome = scrim_lifecycle.add_game(session, actor, scrim_id, **payload.model_dump())
    except ScrimServiceError as exc:
        raise to_http_exception(exc)
    return _mutation_response(outcome)


@router.post("/scrims/{scrim_id}/games/stubs", response_model=GameStubsResponse, status_code=201)
def create_game_stubs(
    scrim_id: int,
    payload: GameStubsCreate,
    actor: Actor = Depends(get_actor),
    session: Session = Depends(get_session),
) -> GameStubsResponse:
    """Retry placeholder game creation for a scrim that has no games yet"""
    try:
        result = game_replicator.retry_game_stubs(session, actor, scrim_id, payload.number_of_games)
    except ScrimServiceError as exc:
        raise to_http_exception(exc)
    return GameStubsResponse(
        games=[ScrimGameResponse.model_validate(g) for g in result.games],
        changes=[c.to_dict() for c in result.changes],
    )


@router.patch("/scrim-games/{game_id}", response_model=ScrimMutationResponse)
def update_scrim_game(
    game_id: int,
    payload: GameUpdate,
    actor: Actor = Depends(get_actor),
    session: Session = Depends(get_session),
) -> ScrimMutationResponse:
    try:
        update_data = payload.model_dump(exclude_unset=True)
        outcome = scrim_lifecycle.record_game_result(session, actor, game_id, **update_data)
    except ScrimServiceError as exc:
        raise to_http_exception(exc)
    return _mutation_response(outcome)


@router.delete("/scrim-games/{game_id}", response_model=ScrimMutationResponse)
def delete_scrim_game(
    game_id: int,
    actor: Actor = Depends(get_actor),
    session: Session = Depends(get_session),
) -> ScrimMutationResponse:
    """Remove a game; later games are renumbered (Scheduled/In Progress only)"""
    try:
        outcome = scrim_lifecycle.remove_game(session, actor, game_id)
    except ScrimServiceError as exc:
        raise to_http_exception(exc)
    return _mutation_response(outcome)


@router.get("/series/{series_id}", response_model=SeriesDetailResponse)
def get_series(series_id: int, session: Session = Depends(get_session)):
    """A series with its scrims. Series are read-only once created."""
    series = session.get(ScrimSeries, series_id)
    if not series:
        raise HTTPException(status_code=404, detail="Series not found")
    scrims = session.exec(select(Scrim).where(Scrim.series_id == series_id).order_by(Scrim.scrim_date)).all()
    return SeriesDetailResponse(
        **SeriesResponse.model_validate(series).model_dump(),
        scrims=[ScrimResponse.model_validate(s) for s in scrims],
    )
