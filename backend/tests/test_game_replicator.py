"""Placeholder game creation across scrims."""
from datetime import date

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, select

from teamops.models.scrim import Scrim, ScrimStatus
from teamops.models.scrim_game import ScrimGame
from teamops.services import game_replicator
from teamops.services.errors import (
    AuthorizationError,
    NotFoundError,
    PartialFailureError,
    StructuralEditRefused,
)
from teamops.services.game_replicator import build_game_stubs, replicate_games, retry_game_stubs


@pytest.fixture
def two_scrims(session: Session):
    scrims = [
        Scrim(owner_id="coach-1", opponent="KOI", scrim_date=date(2026, 4, 6), status="Scheduled"),
        Scrim(owner_id="coach-1", opponent="KOI", scrim_date=date(2026, 4, 8), status="Scheduled"),
    ]
    session.add_all(scrims)
    session.commit()
    return [s.id for s in scrims]


def test_three_games_across_two_scrims(session: Session, coach, two_scrims):
    result = replicate_games(session, coach, two_scrims, 3)

    assert len(result.games) == 6
    for scrim_id in two_scrims:
        games = session.exec(select(ScrimGame).where(ScrimGame.scrim_id == scrim_id)).all()
        assert sorted(g.game_number for g in games) == [1, 2, 3]
        assert all(g.result == "N/A" for g in games)


def test_one_change_signal_per_scrim_in_order(session: Session, coach, two_scrims):
    result = replicate_games(session, coach, list(reversed(two_scrims)), 2)

    assert [(c.collection, c.key) for c in result.changes] == [
        ("scrimGames", two_scrims[1]),
        ("scrimGames", two_scrims[0]),
    ]


@pytest.mark.parametrize("count", [None, 0, -2])
def test_no_op_without_positive_count(session: Session, coach, two_scrims, count):
    result = replicate_games(session, coach, two_scrims, count)

    assert result.games == []
    assert result.changes == []
    assert session.exec(select(ScrimGame)).all() == []


def test_no_op_without_scrims(session: Session, coach):
    assert replicate_games(session, coach, [], 3).games == []


def test_single_bulk_insert(session: Session, coach, two_scrims, monkeypatch):
    calls = []
    real_insert = game_replicator._bulk_insert

    def counting_insert(session, games):
        calls.append(len(games))
        real_insert(session, games)

    monkeypatch.setattr(game_replicator, "_bulk_insert", counting_insert)

    replicate_games(session, coach, two_scrims, 4)

    assert calls == [8]


def test_insert_failure_raises_partial_failure(session: Session, coach, two_scrims, monkeypatch):
    def failing_insert(session, games):
        raise OperationalError("INSERT INTO scrimgame", {}, Exception("timeout"))

    monkeypatch.setattr(game_replicator, "_bulk_insert", failing_insert)

    with pytest.raises(PartialFailureError) as exc_info:
        replicate_games(session, coach, two_scrims, 2)

    assert exc_info.value.scrim_ids == two_scrims
    assert len(session.exec(select(Scrim)).all()) == 2


def test_player_cannot_replicate(session: Session, player, two_scrims):
    with pytest.raises(AuthorizationError):
        replicate_games(session, player, two_scrims, 2)


def test_build_game_stubs_groups_by_scrim():
    stubs = build_game_stubs([10, 11], 2, "coach-1")

    assert [(s.scrim_id, s.game_number) for s in stubs] == [(10, 1), (10, 2), (11, 1), (11, 2)]


def test_retry_creates_games_for_empty_scrim(session: Session, coach, two_scrims):
    result = retry_game_stubs(session, coach, two_scrims[0], 3)

    assert [g.game_number for g in result.games] == [1, 2, 3]


def test_retry_refused_when_games_exist(session: Session, coach, two_scrims):
    replicate_games(session, coach, [two_scrims[0]], 2)

    with pytest.raises(StructuralEditRefused):
        retry_game_stubs(session, coach, two_scrims[0], 2)

    assert len(session.exec(select(ScrimGame)).all()) == 2


@pytest.mark.parametrize("status", [ScrimStatus.completed, ScrimStatus.cancelled])
def test_replicate_refused_for_locked_scrim(session: Session, coach, two_scrims, status):
    locked = session.get(Scrim, two_scrims[1])
    locked.status = status.value
    locked.overall_result = "0W-0L-0D" if status == ScrimStatus.completed else None
    session.add(locked)
    session.commit()

    with pytest.raises(StructuralEditRefused):
        replicate_games(session, coach, two_scrims, 2)

    assert session.exec(select(ScrimGame)).all() == []
    session.refresh(locked)
    assert locked.overall_result == ("0W-0L-0D" if status == ScrimStatus.completed else None)


def test_replicate_refused_for_unknown_scrim(session: Session, coach, two_scrims):
    with pytest.raises(NotFoundError) as exc_info:
        replicate_games(session, coach, [two_scrims[0], 9999], 2)

    assert "9999" in exc_info.value.message
    assert session.exec(select(ScrimGame)).all() == []


def test_refresh_failure_after_commit_is_not_partial(session: Session, coach, two_scrims, monkeypatch):
    def failing_refresh(instance, *args, **kwargs):
        raise OperationalError("SELECT scrimgame", {}, Exception("connection reset"))

    monkeypatch.setattr(session, "refresh", failing_refresh)

    with pytest.raises(OperationalError):
        replicate_games(session, coach, two_scrims, 2)

    monkeypatch.undo()
    assert len(session.exec(select(ScrimGame)).all()) == 4
