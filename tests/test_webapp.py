from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from flow_tracker.models import FlowInterval, Phase, SessionSnapshot
from flow_tracker.persistence import RESUME_QUESTION, PersistenceBridge
from flow_tracker.scheduling import ImmediateScheduler
from flow_tracker.storage import MemoryStore
from flow_tracker.webapp import create_app


def _client(store: MemoryStore, clock) -> TestClient:
    app = create_app(store=store, scheduler=ImmediateScheduler(), clock=clock)
    return TestClient(app)


@pytest.fixture
def client(store: MemoryStore, clock) -> TestClient:
    return _client(store, clock)


def test_session_starts_in_start_phase(client: TestClient) -> None:
    body = client.get("/api/session").json()

    assert body["phase"] == "start"
    assert body["in_transition"] is False
    assert body["resume_prompt"] is None
    assert body["snapshot"]["completed_flows"] == []


def test_full_day_over_http(client: TestClient, clock) -> None:
    assert client.post("/api/begin").json()["phase"] == "prompt"

    response = client.put("/api/pending-name", json={"name": "Write"})
    assert response.json()["snapshot"]["pending_task_name"] == "Write"

    body = client.post("/api/flows", json={}).json()
    assert body["phase"] == "in_flow"
    assert body["snapshot"]["current_flow"]["name"] == "Write"

    clock.advance(3_600)
    body = client.post("/api/pause").json()
    assert body["phase"] == "prompt"
    assert len(body["snapshot"]["completed_flows"]) == 1

    clock.advance(1_800)
    assert client.post("/api/end-day").json()["phase"] == "summary"

    summary = client.get("/api/summary").json()
    assert [entry["name"] for entry in summary["entries"]] == ["Total Time", "Write"]
    assert summary["entries"][0]["label"] == "Total Time: 1 hours and 30 minutes"
    assert summary["entries"][1]["left_offset_pct"] == 0.0
    assert summary["entries"][1]["right_offset_pct"] == pytest.approx(100 / 3)

    assert client.post("/api/start-over").json()["phase"] == "start"


def test_empty_submit_leaves_session_unchanged(client: TestClient) -> None:
    client.post("/api/begin")

    body = client.post("/api/flows", json={"name": ""}).json()

    assert body["phase"] == "prompt"
    assert body["snapshot"]["current_flow"] is None


def test_out_of_phase_triggers_conflict(client: TestClient) -> None:
    assert client.post("/api/pause").status_code == 409
    assert client.post("/api/end-day").status_code == 409
    assert client.post("/api/start-over").status_code == 409
    assert client.get("/api/summary").status_code == 409

    assert client.post("/api/flows", json={"name": "Write"}).status_code == 409

    client.post("/api/begin")
    assert client.post("/api/begin").status_code == 409
    client.post("/api/flows", json={"name": "Write"})
    assert client.post("/api/flows", json={"name": "Again"}).status_code == 409


def test_filter_updates_summary(client: TestClient, clock) -> None:
    client.post("/api/begin")
    client.post("/api/flows", json={"name": "Quick fix"})
    clock.advance(600)
    client.post("/api/end-day")

    assert client.get("/api/summary").json()["hidden_count"] == 1

    client.put("/api/filter", json={"minutes": 10})
    summary = client.get("/api/summary").json()

    assert summary["hidden_count"] == 0
    assert summary["filter_minutes"] == 10
    assert summary["entries"][1]["label"] == "Quick fix: 0 hours and 10 minutes"


def test_filter_out_of_range_is_rejected(client: TestClient) -> None:
    assert client.put("/api/filter", json={"minutes": 121}).status_code == 422
    assert client.put("/api/filter", json={"minutes": -1}).status_code == 422


def test_end_day_clears_saved_session(client: TestClient, store: MemoryStore) -> None:
    client.post("/api/begin")
    assert store.values

    client.post("/api/end-day")

    assert store.values == {}


class TestResume:
    @pytest.fixture
    def saved(self, store: MemoryStore) -> SessionSnapshot:
        snapshot = SessionSnapshot(
            day_start_time=100.0,
            current_flow=FlowInterval("Write", 200.0),
            phase=Phase.IN_FLOW,
        )
        PersistenceBridge(store).save(snapshot)
        return snapshot

    def test_prompt_is_offered(self, saved, store, clock) -> None:
        body = _client(store, clock).get("/api/session").json()

        assert body["resume_prompt"] == RESUME_QUESTION
        assert body["phase"] == "start"

    def test_accepting_restores(self, saved, store, clock) -> None:
        client = _client(store, clock)

        body = client.post("/api/resume", json={"accept": True}).json()

        assert body["phase"] == "in_flow"
        assert body["snapshot"]["current_flow"]["name"] == "Write"
        assert body["resume_prompt"] is None
        assert client.post("/api/resume", json={"accept": True}).status_code == 409

    def test_declining_keeps_stored_data(self, saved, store, clock) -> None:
        client = _client(store, clock)

        body = client.post("/api/resume", json={"accept": False}).json()

        assert body["phase"] == "start"
        assert PersistenceBridge(store).load() == saved

    def test_triggers_wait_for_the_answer(self, saved, store, clock) -> None:
        client = _client(store, clock)

        assert client.post("/api/begin").status_code == 409
        assert client.put("/api/pending-name", json={"name": "x"}).status_code == 409
        assert client.post("/api/flows", json={"name": "x"}).status_code == 409
        assert client.post("/api/pause").status_code == 409
        assert client.post("/api/end-day").status_code == 409
        assert client.post("/api/start-over").status_code == 409

        assert PersistenceBridge(store).load() == saved
        assert client.get("/api/session").json()["resume_prompt"] == RESUME_QUESTION

    def test_declining_then_beginning_starts_a_new_day(self, saved, store, clock) -> None:
        client = _client(store, clock)
        client.post("/api/resume", json={"accept": False})

        assert client.post("/api/begin").json()["phase"] == "prompt"
        assert PersistenceBridge(store).load().day_start_time == 1_000.0

    def test_no_saved_session(self, client: TestClient) -> None:
        assert client.post("/api/resume", json={"accept": True}).status_code == 409
