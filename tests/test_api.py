"""Tests for the HTTP and WebSocket endpoints."""

from pathlib import Path

from fastapi.testclient import TestClient

from tests.conftest import PROJECT_PATH, SCENARIO_EVENTS, write_jsonl


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["watchers"] == 0


def test_search_session(client: TestClient, scenario_file: Path) -> None:
    response = client.post("/api/search/session", json={
        "project_path": PROJECT_PATH,
        "session_id": "s1",
        "query": "error OR warning",
    })
    assert response.status_code == 200
    data = response.json()
    assert [m["sequence"] for m in data["matches"]] == [1, 2]
    assert data["totalSearched"] == 3
    assert data["truncated"] is False
    assert set(data["matches"][0]) == {"sequence", "byteOffset", "snippet"}


def test_search_session_with_cap(client: TestClient, scenario_file: Path) -> None:
    response = client.post("/api/search/session", json={
        "project_path": PROJECT_PATH,
        "session_id": "s1",
        "query": "o",
        "max_results": 1,
    })
    data = response.json()
    assert len(data["matches"]) == 1
    assert data["truncated"] is True


def test_search_unknown_session_is_empty_not_error(client: TestClient, project_dir: Path) -> None:
    response = client.post("/api/search/session", json={
        "project_path": PROJECT_PATH,
        "session_id": "nope",
        "query": "error",
    })
    assert response.status_code == 200
    assert response.json() == {"matches": [], "totalSearched": 0, "truncated": False}


def test_search_subagent(client: TestClient, project_dir: Path) -> None:
    write_jsonl(project_dir / "agent-a1.jsonl", [{"content": "all fine"}, {"content": "ERROR!"}])
    response = client.post("/api/search/subagent", json={
        "project_path": PROJECT_PATH,
        "agent_id": "a1",
        "query": "error",
    })
    data = response.json()
    assert [m["sequence"] for m in data["matches"]] == [1]
    assert data["matches"][0]["snippet"] == "ERROR!"


def test_search_requires_identifiers(client: TestClient) -> None:
    response = client.post("/api/search/session", json={"session_id": "s1", "query": "x"})
    assert response.status_code == 400
    response = client.post("/api/search/subagent", json={"project_path": PROJECT_PATH, "query": "x"})
    assert response.status_code == 400


def test_search_rejects_bad_cap_and_query(client: TestClient) -> None:
    body = {"project_path": PROJECT_PATH, "session_id": "s1", "query": "x"}
    assert client.post("/api/search/session", json={**body, "max_results": 0}).status_code == 400
    assert client.post("/api/search/session", json={**body, "max_results": "5"}).status_code == 400
    assert client.post("/api/search/session", json={**body, "query": 5}).status_code == 400


def test_validate_query(client: TestClient) -> None:
    data = client.post("/api/search/validate-query", json={"query": "a b OR c"}).json()
    assert data == {"valid": True, "terms": ["a", "b", "c"], "expression": "((a AND b) OR c)"}

    data = client.post("/api/search/validate-query", json={"query": "  "}).json()
    assert data["valid"] is False


def test_get_event_by_byte_offset(client: TestClient, scenario_file: Path) -> None:
    search = client.post("/api/search/session", json={
        "project_path": PROJECT_PATH, "session_id": "s1", "query": "warning",
    }).json()
    offset = search["matches"][0]["byteOffset"]

    response = client.get("/api/events/session/event", params={
        "project_path": PROJECT_PATH, "log_id": "s1", "byte_offset": offset,
    })
    assert response.status_code == 200
    assert response.json() == {"byteOffset": offset, "event": SCENARIO_EVENTS[2]}


def test_get_event_errors(client: TestClient, scenario_file: Path) -> None:
    params = {"project_path": PROJECT_PATH, "log_id": "s1", "byte_offset": 10_000}
    assert client.get("/api/events/session/event", params=params).status_code == 404

    params = {"project_path": PROJECT_PATH, "log_id": "missing", "byte_offset": 0}
    assert client.get("/api/events/session/event", params=params).status_code == 404

    params = {"project_path": PROJECT_PATH, "log_id": "s1", "byte_offset": 0}
    assert client.get("/api/events/bogus/event", params=params).status_code == 404

    params = {"project_path": PROJECT_PATH, "log_id": "s1", "byte_offset": -1}
    assert client.get("/api/events/session/event", params=params).status_code == 422


def test_get_event_page(client: TestClient, scenario_file: Path) -> None:
    response = client.get("/api/events/session/page", params={
        "project_path": PROJECT_PATH, "log_id": "s1", "offset": 1, "lines": 1,
    })
    data = response.json()
    assert [e["event"] for e in data["events"]] == [SCENARIO_EVENTS[1]]
    assert data["hasMore"] is True


def test_watch_and_unwatch_session(client: TestClient, scenario_file: Path) -> None:
    body = {"project_path": PROJECT_PATH, "session_id": "s1"}
    first = client.post("/api/watch/session", json=body)
    second = client.post("/api/watch/session", json=body)
    assert first.status_code == 200
    assert second.json() == {"watching": True, "key": f"{PROJECT_PATH}:s1"}
    assert client.get("/api/watch").json() == {"watchers": [f"{PROJECT_PATH}:s1"]}

    response = client.delete("/api/watch/session", params=body)
    assert response.json() == {"watching": False}
    assert client.get("/api/watch").json() == {"watchers": []}


def test_watch_missing_session_is_404(client: TestClient, project_dir: Path) -> None:
    response = client.post("/api/watch/session", json={"project_path": PROJECT_PATH, "session_id": "nope"})
    assert response.status_code == 404


def test_watch_telemetry(client: TestClient, tmp_path: Path) -> None:
    project = str(tmp_path / "workspace")
    response = client.post("/api/watch/telemetry", json={"project_path": project})
    assert response.json()["key"] == f"{project}:telemetry"
    assert (tmp_path / "workspace" / ".cupcake" / "telemetry").is_dir()
    client.delete("/api/watch/telemetry", params={"project_path": project})


def test_live_events_websocket_ping(client: TestClient) -> None:
    with client.websocket_connect("/ws/events") as ws:
        ws.send_text("ping")
        assert ws.receive_json() == {"event": "pong", "payload": {}}
