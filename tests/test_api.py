"""
Tests for the FastAPI endpoints.
"""

import uuid

import pytest
from fastapi.testclient import TestClient
from httpx import AsyncClient, ASGITransport

from logicflow.config import settings
from logicflow.main import app
from logicflow.workflows.countdown import DEMO_FLOW_NAME


# ============================================================
# Sync Test Client (for simple tests)
# ============================================================

@pytest.fixture(scope="module")
def client():
    # Entering the client runs the lifespan, which registers the demo flow
    with TestClient(app) as c:
        yield c


def unique_name(prefix: str = "flow") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


def build_addition_flow(client, name: str) -> None:
    """E (TriggerNode) -> A (AdditionNode), A = E.parameter + 1.0."""
    response = client.post("/flows/", json={"name": name, "event_name": "E"})
    assert response.status_code == 201
    assert client.post(f"/flows/{name}/nodes", json={"type": "AdditionNode", "name": "A"}).json()["applied"]
    assert client.put(f"/flows/{name}/nodes/E/next/0", json={"target": "A"}).json()["applied"]
    assert client.put(
        f"/flows/{name}/nodes/A/inputs/0/reference", json={"source": "E", "index": 1}
    ).json()["applied"]
    assert client.put(f"/flows/{name}/nodes/A/inputs/1/const", json={"value": 1.0}).json()["applied"]


class TestRootEndpoints:
    """Tests for root endpoints."""

    def test_root(self, client):
        """Test root endpoint."""
        response = client.get("/")
        assert response.status_code == 200

        data = response.json()
        assert data["name"] == settings.APP_NAME
        assert "endpoints" in data
        assert data["demo_flow"] == DEMO_FLOW_NAME

    def test_health(self, client):
        """Test health endpoint."""
        response = client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["flows_count"] >= 1
        assert "runs_count" in data


class TestNodeTypeEndpoints:
    """Tests for node type endpoints."""

    def test_list_node_types(self, client):
        """Test listing node types."""
        response = client.get("/nodes/")
        assert response.status_code == 200

        data = response.json()
        assert data["total"] == len(data["node_types"])
        types = {t["type"]: t for t in data["node_types"]}
        assert types["TriggerNode"]["is_event"] is True
        assert types["AdditionNode"]["is_event"] is False

    def test_get_node_type(self, client):
        """Test getting a node type with its ports."""
        response = client.get("/nodes/IfConditionNode")
        assert response.status_code == 200

        data = response.json()
        assert [b["name"] for b in data["branches"]] == ["true", "false"]
        assert data["inputs"][0]["name"] == "condition"

    def test_get_nonexistent_node_type(self, client):
        response = client.get("/nodes/NoSuchNode")
        assert response.status_code == 404


class TestFlowEndpoints:
    """Tests for flow CRUD endpoints."""

    def test_demo_flow_registered(self, client):
        response = client.get(f"/flows/{DEMO_FLOW_NAME}")
        assert response.status_code == 200

        data = response.json()
        assert data["start_type"] == "TriggerNode"
        assert data["document"]["startNodeId"] >= 0
        assert "[announce]" in data["rendered"]

    def test_create_flow(self, client):
        name = unique_name()
        response = client.post("/flows/", json={"name": name})
        assert response.status_code == 201

        data = response.json()
        assert data["name"] == name
        assert data["node_count"] == 1
        assert data["start_node"] == "start"
        assert data["enabled"] is False

        names = [f["name"] for f in client.get("/flows/").json()["flows"]]
        assert name in names

    def test_create_duplicate_flow(self, client):
        name = unique_name()
        client.post("/flows/", json={"name": name})
        response = client.post("/flows/", json={"name": name})
        assert response.status_code == 409

    def test_create_flow_unknown_event(self, client):
        response = client.post("/flows/", json={"name": unique_name(), "event_type": "NoSuchEvent"})
        assert response.status_code == 404

    def test_create_flow_non_event(self, client):
        response = client.post("/flows/", json={"name": unique_name(), "event_type": "AdditionNode"})
        assert response.status_code == 400

    def test_delete_flow(self, client):
        name = unique_name()
        client.post("/flows/", json={"name": name})
        assert client.delete(f"/flows/{name}").status_code == 204
        assert client.get(f"/flows/{name}").status_code == 404
        assert client.delete(f"/flows/{name}").status_code == 404


class TestEditingEndpoints:
    """Tests for editing, undo and redo."""

    def test_build_and_run(self, client):
        """Test a flow built through the API runs."""
        name = unique_name()
        build_addition_flow(client, name)

        response = client.post(f"/flows/{name}/run", json={"start_outputs": ["console", 5.0]})
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "completed"
        assert data["error"] is None
        assert data["trace"][1]["outputs"] == [6.0]
        assert "[A]" in data["rendered"]

    def test_missing_node_edit_is_not_applied(self, client):
        name = unique_name()
        client.post("/flows/", json={"name": name})
        response = client.put(f"/flows/{name}/nodes/Ghost/inputs/0/const", json={"value": 1.0})
        assert response.status_code == 200

        data = response.json()
        assert data["applied"] is False
        assert data["flow"]["can_undo"] is False

    def test_unknown_node_type(self, client):
        name = unique_name()
        client.post("/flows/", json={"name": name})
        response = client.post(f"/flows/{name}/nodes", json={"type": "NoSuchNode", "name": "x"})
        assert response.status_code == 404

    def test_undo_redo(self, client):
        name = unique_name()
        client.post("/flows/", json={"name": name})
        created = client.post(f"/flows/{name}/nodes", json={"type": "AdditionNode", "name": "A"}).json()
        assert created["node_id"] is not None
        assert created["flow"]["node_count"] == 2

        undone = client.post(f"/flows/{name}/undo").json()
        assert undone["applied"] is True
        assert undone["flow"]["node_count"] == 1
        assert undone["flow"]["can_redo"] is True

        redone = client.post(f"/flows/{name}/redo").json()
        assert redone["flow"]["node_count"] == 2
        assert client.post(f"/flows/{name}/redo").json()["applied"] is False

    def test_auto_cast_constant(self, client):
        name = unique_name()
        client.post("/flows/", json={"name": name})
        client.post(f"/flows/{name}/nodes", json={"type": "BroadcastMessageNode", "name": "say"})
        client.put(f"/flows/{name}/nodes/say/inputs/2/const", json={"value": "(0, 64, 0)", "auto_cast": True})

        document = client.get(f"/flows/{name}").json()["document"]
        say = next(n for n in document["nodes"] if n["name"] == "say")
        assert say["inputs"][2]["value"] == "(0.0, 64.0, 0.0)"

    def test_replace_start_node(self, client):
        name = unique_name()
        client.post("/flows/", json={"name": name})
        response = client.put(f"/flows/{name}/start", json={"type": "DummyNode", "name": "begin"})
        assert response.json()["flow"]["start_type"] == "DummyNode"

        response = client.put(f"/flows/{name}/start", json={"type": "AdditionNode", "name": "x"})
        assert response.status_code == 400


class TestRunEndpoints:
    """Tests for running flows and the run history."""

    def test_run_demo(self, client):
        response = client.post(f"/flows/{DEMO_FLOW_NAME}/run", json={"start_outputs": ["console", 3.0]})
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "completed"
        assert data["step_count"] == 18
        assert data["variables"]["n"] == 0.0
        assert data["messages"][0]["receiver"] == "console"

        fetched = client.get(f"/runs/{data['run_id']}")
        assert fetched.status_code == 200
        assert fetched.json()["step_count"] == 18

    def test_dead_loop(self, client):
        """Test a failing run is reported with status 200."""
        response = client.post(
            f"/flows/{DEMO_FLOW_NAME}/run",
            json={"start_outputs": ["console", 100.0], "max_steps": 10},
        )
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "failed"
        assert data["error"]["kind"] == "DeadLoopError"
        assert data["step_count"] == 11

    def test_list_runs_by_flow(self, client):
        name = unique_name()
        build_addition_flow(client, name)
        client.post(f"/flows/{name}/run", json={"start_outputs": ["console", 1.0]})

        data = client.get("/runs/", params={"flow": name}).json()
        assert data["total"] == 1
        assert data["runs"][0]["flow_name"] == name

    def test_get_nonexistent_run(self, client):
        assert client.get("/runs/no-such-run").status_code == 404

    def test_event_dispatch(self, client):
        """Test only enabled flows with a matching start type run."""
        enabled = unique_name("enabled")
        disabled = unique_name("disabled")
        for name in (enabled, disabled):
            client.post("/flows/", json={"name": name, "event_type": "EntityDeathEventNode"})
        client.put(f"/flows/{enabled}/enabled", json={"enabled": True})

        response = client.post(
            "/events/EntityDeathEventNode",
            json={"outputs": ["zombie", "fire", "player", "torch", "(1, 2, 3)", "burned"], "auto_cast": True},
        )
        assert response.status_code == 200

        flow_names = [run["flow_name"] for run in response.json()["runs"]]
        assert enabled in flow_names
        assert disabled not in flow_names


class TestPersistenceEndpoints:
    """Tests for saving and loading flow files."""

    def test_save_and_load(self, client, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "FLOW_DIRECTORY", str(tmp_path))
        name = unique_name()
        build_addition_flow(client, name)

        saved = client.post(f"/flows/{name}/save", json={}).json()
        assert saved["saved"] is True
        assert (tmp_path / f"{name}.json").is_file()

        client.delete(f"/flows/{name}")
        response = client.post("/flows/load", json={"file": f"{name}.json"})
        assert response.status_code == 201
        assert response.json()["node_count"] == 2

    def test_save_without_replace(self, client, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "FLOW_DIRECTORY", str(tmp_path))
        name = unique_name()
        client.post("/flows/", json={"name": name})

        assert client.post(f"/flows/{name}/save", json={"replace": False}).json()["saved"] is True
        assert client.post(f"/flows/{name}/save", json={"replace": False}).json()["saved"] is False

    def test_load_missing_file(self, client, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "FLOW_DIRECTORY", str(tmp_path))
        response = client.post("/flows/load", json={"file": "missing.json"})
        assert response.status_code == 400


# ============================================================
# Async Tests (for async endpoints)
# ============================================================

@pytest.mark.asyncio
async def test_run_flow_async():
    """Test creating and running a flow through the async client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        name = unique_name("async")
        response = await ac.post("/flows/", json={"name": name, "event_type": "DummyNode"})
        assert response.status_code == 201

        response = await ac.post(f"/flows/{name}/run", json={})
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "completed"
        assert data["step_count"] == 1


@pytest.mark.asyncio
async def test_run_nonexistent_flow():
    """Test running a flow that doesn't exist."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.post("/flows/nonexistent-flow/run", json={})
        assert response.status_code == 404


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
