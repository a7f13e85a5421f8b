"""
Tests for the API service and HTTP endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from ..api.app import create_app
from ..api.schemas import ActionName, ActionRequest, ErrorCode, EventName, TeamName
from ..api.service import FishbowlService
from ..engine_core.shuffle import SeededEntropy
from ..session import GameSession
from ..storage import MemoryGameStore
from .conftest import WORDS


def submit_request(index: int) -> dict:
    name, team, items = WORDS[index]
    return {"type": "ENTRY_SUBMIT_PLAYER", "player_name": name, "team_id": team.value, "items": items}


@pytest.fixture
def store():
    return MemoryGameStore()


@pytest.fixture
def service(store, clock):
    return FishbowlService(session=GameSession(store=store, clock=clock, entropy=SeededEntropy(3)))


@pytest.fixture
def client(service):
    return TestClient(create_app(service=service, run_ticker=False))


def post_actions(client, *bodies) -> dict:
    data = None
    for body in bodies:
        response = client.post("/api/v1/game/actions", json=body)
        assert response.status_code == 200
        data = response.json()
    return data


def start_turn(client) -> dict:
    return post_actions(
        client,
        {"type": "HOST_SET_PLAYER_COUNT", "player_count": 2},
        {"type": "HOST_START_WORD_ENTRY"},
        submit_request(0),
        {"type": "ENTRY_ACK_HANDOFF"},
        submit_request(1),
        {"type": "READY_START_ROUND1"},
        {"type": "HANDOFF_ACK"},
        {"type": "TURN_START"},
    )


class TestService:
    """Tests for FishbowlService without HTTP."""

    def test_build_action_requires_fields(self, service):
        with pytest.raises(ValueError, match="player_count"):
            service.build_action(ActionRequest(type=ActionName.HOST_SET_PLAYER_COUNT))

    def test_sync_timer_defaults_to_session_clock(self, service, clock):
        action = service.build_action(ActionRequest(type=ActionName.TURN_SYNC_TIMER))
        assert action.payload.now_ms == clock.now_ms()

    def test_team_name_action(self, service):
        response = service.apply_action(
            ActionRequest(type=ActionName.HOST_SET_TEAM_NAME, team_id=TeamName.B, name="Foxes")
        )
        assert response.success
        assert response.state.teams[1].name == "Foxes"

    def test_error_codes_match_engine(self):
        """Every API error code is one the engine or the app actually returns."""
        assert {c.value for c in ErrorCode} == {
            "VALIDATION_ERROR", "NOTHING_TO_UNDO", "PRECONDITION_FAILED", "INVALID_ACTION", "NO_SAVED_GAME",
        }

    def test_events_filter_in_service(self, service):
        service.apply_action(ActionRequest(type=ActionName.HOST_SET_PLAYER_COUNT, player_count=2))
        assert service.get_events(EventName.WORD_GUESSED).count == 0

    def test_current_item_hidden_outside_turn(self, service):
        assert service.get_state().current_item is None


class TestEndpoints:

    def test_health(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_initial_state(self, client):
        data = client.get("/api/v1/game").json()
        assert data["screen"] == "hostSetup"
        assert [t["name"] for t in data["teams"]] == ["Blue", "Red"]
        assert data["player_count"] == 8
        assert data["timer_settings"] == {"round1_seconds": 30, "round2_seconds": 45, "round3_seconds": 20}

    def test_full_turn_flow(self, client):
        data = start_turn(client)
        state = data["state"]
        assert state["screen"] == "turnActive"
        assert state["current_round"] == 1
        assert state["round_name"] == "Describe"
        assert state["current_team_turn"] == "A"
        assert state["current_item"] is not None
        assert state["timer_seconds_remaining"] == 30
        assert state["can_undo"] is False

        data = post_actions(client, {"type": "TURN_GUESSED"})
        assert data["success"]
        assert data["state"]["scores"][0]["a"] == 1
        assert data["state"]["can_undo"] is True

        data = post_actions(client, {"type": "TURN_UNDO"})
        assert data["state"]["scores"][0]["a"] == 0

    def test_validation_error_comes_back_in_state(self, client):
        post_actions(client, {"type": "HOST_START_WORD_ENTRY"})
        data = post_actions(client, {"type": "ENTRY_SUBMIT_PLAYER", "team_id": "A", "items": ["Pizza", "Tuba", "Moon"]})
        assert data["success"] is False
        assert data["error_code"] == ErrorCode.VALIDATION_ERROR.value
        assert data["state"]["last_error"] == "Please enter a player name."

    def test_stale_action_is_ignored(self, client):
        data = post_actions(client, {"type": "TURN_GUESSED"})
        assert data["success"] is False
        assert data["error_code"] == "PRECONDITION_FAILED"
        assert data["state"]["screen"] == "hostSetup"
        assert data["state"]["last_error"] is None

    def test_missing_fields(self, client):
        response = client.post("/api/v1/game/actions", json={"type": "HOST_SET_TIMER", "round": 2})
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_ACTION"

    def test_unknown_action(self, client):
        response = client.post("/api/v1/game/actions", json={"type": "TURN_CHEAT"})
        assert response.status_code == 422

    def test_tick_to_time_up(self, client, clock):
        start_turn(client)
        clock.advance(30_000)
        data = client.post("/api/v1/game/tick").json()
        assert data["state"]["screen"] == "timeUp"
        assert data["state"]["current_item"] is None

    def test_tick_with_explicit_time(self, client):
        state = start_turn(client)["state"]
        response = client.post("/api/v1/game/tick", json={"now_ms": state["turn_end_epoch_ms"] - 4_200})
        assert response.json()["state"]["timer_seconds_remaining"] == 5

    def test_events(self, client):
        start_turn(client)
        post_actions(client, {"type": "TURN_PASSED"})
        data = client.get("/api/v1/game/events").json()
        types = [e["type"] for e in data["events"]]
        assert types == ["ROUND_STARTED", "TURN_STARTED", "WORD_PASSED"]
        assert data["count"] == 3
        assert data["events"][2]["team"] == "A"

    def test_events_filtered_by_type(self, client):
        start_turn(client)
        post_actions(client, {"type": "TURN_PASSED"}, {"type": "TURN_GUESSED"}, {"type": "TURN_PASSED"})
        data = client.get("/api/v1/game/events", params={"type": "WORD_PASSED"}).json()
        assert [e["type"] for e in data["events"]] == ["WORD_PASSED", "WORD_PASSED"]
        assert data["count"] == 2

    def test_events_unknown_type(self, client):
        assert client.get("/api/v1/game/events", params={"type": "NOPE"}).status_code == 422

    def test_long_names_accepted(self, client):
        team_name = "The Extremely Long Named Team Of Champions 2026"
        player_name = "Alexandra Konstantinopoulou-Featherstonehaugh"
        data = post_actions(
            client,
            {"type": "HOST_SET_TEAM_NAME", "team_id": "A", "name": team_name},
            {"type": "HOST_START_WORD_ENTRY"},
            {"type": "ENTRY_SUBMIT_PLAYER", "player_name": player_name, "team_id": "A", "items": ["Pizza", "Tuba", "Moon"]},
        )
        assert data["success"]
        assert data["state"]["teams"][0]["name"] == team_name
        assert data["state"]["players"][0]["name"] == player_name

    def test_results(self, client):
        start_turn(client)
        post_actions(client, {"type": "TURN_GUESSED"})
        data = client.get("/api/v1/game/results").json()
        assert data["teams"][0]["total_score"] == 1
        assert data["winner"] == "A"
        assert data["winner_name"] == "Blue"
        assert data["is_tie"] is False
        assert data["is_final"] is False

    def test_restart(self, client, store):
        start_turn(client)
        data = client.post("/api/v1/game/restart").json()
        assert data["success"]
        assert data["state"]["screen"] == "hostSetup"
        assert store.load() is None


class TestResumeEndpoints:

    def test_no_saved_game(self, client):
        assert client.get("/api/v1/game/resume").status_code == 404
        response = client.post("/api/v1/game/resume")
        assert response.status_code == 404
        assert response.json()["error_code"] == "NO_SAVED_GAME"

    def test_resume_saved_game(self, client, store, clock):
        start_turn(client)
        fresh = TestClient(create_app(
            service=FishbowlService(session=GameSession(store=store, clock=clock)),
            run_ticker=False,
        ))

        offer = fresh.get("/api/v1/game/resume").json()
        assert offer["screen"] == "turnActive"
        assert offer["current_round"] == 1
        assert offer["players_entered"] == 2
        assert offer["item_count"] == 6

        state = fresh.post("/api/v1/game/resume").json()
        assert state["screen"] == "turnActive"
        assert fresh.get("/api/v1/game").json()["screen"] == "turnActive"

    def test_discard_saved_game(self, client, store, clock):
        start_turn(client)
        fresh = TestClient(create_app(
            service=FishbowlService(session=GameSession(store=store, clock=clock)),
            run_ticker=False,
        ))
        state = fresh.delete("/api/v1/game/resume").json()
        assert state["screen"] == "hostSetup"
        assert fresh.get("/api/v1/game/resume").status_code == 404
        assert store.load() is None
