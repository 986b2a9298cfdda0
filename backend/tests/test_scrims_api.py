"""HTTP surface for scrims, series and games."""
import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def weekly_payload():
    return {
        "opponent": "Karmine Corp Blue",
        "scrim_date": "2026-01-05",
        "start_time": "19:00:00",
        "patch": "14.2",
        "is_recurring": True,
        "recurrence_days": ["MO", "WE"],
        "series_end_date": "2026-01-18",
        "number_of_games": 3,
    }


@pytest.fixture
def scrim(client: TestClient, coach_headers):
    response = client.post(
        "/api/scrims",
        json={"opponent": "Heretics", "scrim_date": "2026-02-10", "number_of_games": 2},
        headers=coach_headers,
    )
    return response.json()["scrims"][0]


def test_create_weekly_series(client: TestClient, coach_headers, weekly_payload):
    response = client.post("/api/scrims", json=weekly_payload, headers=coach_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "created"
    assert data["series"]["weekdays"] == ["MO", "WE"]
    assert [s["scrim_date"] for s in data["scrims"]] == ["2026-01-05", "2026-01-07", "2026-01-12", "2026-01-14"]
    assert len(data["games"]) == 12
    assert {"collection": "scrimGames", "key": data["scrims"][0]["id"]} in data["changes"]

    series = client.get(f"/api/series/{data['series']['id']}").json()
    assert len(series["scrims"]) == 4


def test_empty_recurrence_returns_200_with_notice(client: TestClient, coach_headers, weekly_payload):
    weekly_payload.update({"recurrence_days": ["SA"], "series_end_date": "2026-01-08"})

    response = client.post("/api/scrims", json=weekly_payload, headers=coach_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "empty"
    assert data["series"] is None
    assert data["warnings"][0]["code"] == "NO_INSTANCES_GENERATED"
    assert client.get("/api/scrims").json() == []


def test_recurring_requires_end_after_start(client: TestClient, coach_headers, weekly_payload):
    weekly_payload["series_end_date"] = "2026-01-01"

    response = client.post("/api/scrims", json=weekly_payload, headers=coach_headers)

    assert response.status_code == 422


def test_unknown_weekday_rejected(client: TestClient, coach_headers, weekly_payload):
    weekly_payload["recurrence_days"] = ["Funday"]

    assert client.post("/api/scrims", json=weekly_payload, headers=coach_headers).status_code == 422


def test_player_cannot_create(client: TestClient, player_headers, weekly_payload):
    response = client.post("/api/scrims", json=weekly_payload, headers=player_headers)

    assert response.status_code == 403
    assert response.json()["detail"].startswith("NOT_AUTHORIZED")


def test_missing_actor_is_unauthenticated(client: TestClient, weekly_payload):
    assert client.post("/api/scrims", json=weekly_payload).status_code == 401


def test_complete_and_reopen(client: TestClient, coach_headers, scrim):
    games = client.get(f"/api/scrims/{scrim['id']}/games").json()
    client.patch(f"/api/scrim-games/{games[0]['id']}", json={"result": "Win"}, headers=coach_headers)
    client.patch(f"/api/scrim-games/{games[1]['id']}", json={"result": "Loss"}, headers=coach_headers)

    response = client.patch(f"/api/scrims/{scrim['id']}/status", json={"status": "Completed"}, headers=coach_headers)
    assert response.status_code == 200
    assert response.json()["scrim"]["overall_result"] == "1W-1L-0D"

    response = client.patch(f"/api/scrims/{scrim['id']}/status", json={"status": "Scheduled"}, headers=coach_headers)
    assert response.status_code == 200
    assert response.json()["scrim"]["overall_result"] is None


def test_invalid_transition_is_conflict(client: TestClient, coach_headers, scrim):
    client.patch(
        f"/api/scrims/{scrim['id']}/status",
        json={"status": "Cancelled", "cancellation_reason": "Patch day"},
        headers=coach_headers,
    )

    response = client.patch(f"/api/scrims/{scrim['id']}/status", json={"status": "Completed"}, headers=coach_headers)

    assert response.status_code == 409
    assert response.json()["detail"].startswith("INVALID_STATUS_TRANSITION")


def test_delete_game_on_cancelled_scrim_refused(client: TestClient, coach_headers, scrim):
    games = client.get(f"/api/scrims/{scrim['id']}/games").json()
    client.patch(f"/api/scrims/{scrim['id']}/status", json={"status": "Cancelled"}, headers=coach_headers)

    response = client.delete(f"/api/scrim-games/{games[0]['id']}", headers=coach_headers)

    assert response.status_code == 409
    assert response.json()["detail"].startswith("STRUCTURAL_EDIT_REFUSED")
    assert len(client.get(f"/api/scrims/{scrim['id']}/games").json()) == 2


def test_add_and_delete_game(client: TestClient, coach_headers, scrim):
    response = client.post(f"/api/scrims/{scrim['id']}/games", json={"result": "Draw"}, headers=coach_headers)
    assert response.status_code == 201
    assert response.json()["game"]["game_number"] == 3

    first = client.get(f"/api/scrims/{scrim['id']}/games").json()[0]
    response = client.delete(f"/api/scrim-games/{first['id']}", headers=coach_headers)
    assert response.status_code == 200

    numbers = [g["game_number"] for g in client.get(f"/api/scrims/{scrim['id']}/games").json()]
    assert numbers == [1, 2]


def test_retry_stubs(client: TestClient, coach_headers):
    created = client.post(
        "/api/scrims", json={"opponent": "Team BDS Academy", "scrim_date": "2026-02-11"}, headers=coach_headers
    ).json()
    scrim_id = created["scrims"][0]["id"]

    response = client.post(f"/api/scrims/{scrim_id}/games/stubs", json={"number_of_games": 3}, headers=coach_headers)
    assert response.status_code == 201
    assert [g["game_number"] for g in response.json()["games"]] == [1, 2, 3]

    response = client.post(f"/api/scrims/{scrim_id}/games/stubs", json={"number_of_games": 3}, headers=coach_headers)
    assert response.status_code == 409


def test_list_scrims_filters_by_status(client: TestClient, coach_headers, weekly_payload):
    data = client.post("/api/scrims", json=weekly_payload, headers=coach_headers).json()
    first_id = data["scrims"][0]["id"]
    client.patch(f"/api/scrims/{first_id}/status", json={"status": "In Progress"}, headers=coach_headers)

    in_progress = client.get("/api/scrims", params={"status": "In Progress"}).json()

    assert [s["id"] for s in in_progress] == [first_id]


def test_get_missing_scrim(client: TestClient):
    assert client.get("/api/scrims/424242").status_code == 404


def test_game_update_null_clears_field(client: TestClient, coach_headers, scrim):
    game = client.get(f"/api/scrims/{scrim['id']}/games").json()[0]
    client.patch(
        f"/api/scrim-games/{game['id']}",
        json={"result": "Win", "notes": "Lost bot lane", "red_side_pick": "Kalista"},
        headers=coach_headers,
    )

    response = client.patch(f"/api/scrim-games/{game['id']}", json={"notes": None}, headers=coach_headers)

    assert response.status_code == 200
    updated = response.json()["game"]
    assert updated["notes"] is None
    assert updated["red_side_pick"] == "Kalista"
    assert updated["result"] == "Win"
