from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from agentry.auth.api_keys import ApiKeyManager
from agentry.db.connection import get_conn
from agentry.db.queries import create_user
from agentry.main import app


def _auth_headers(username: str) -> dict[str, str]:
    with get_conn() as conn:
        user = create_user(conn, username, "hash")
        token = ApiKeyManager(conn).create(int(str(user["id"])), "tests").token
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client() -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def headers() -> dict[str, str]:
    return _auth_headers("alice")


@pytest.fixture
def file_agent(agents_root: Path) -> str:
    (agents_root / "personas").mkdir()
    (agents_root / "personas" / "researcher.md").write_text("Expert", encoding="utf-8")
    (agents_root / "personas" / "researcher.json").write_text(
        '{"displayName": "Researcher", "description": "Digs deep", "category": "research"}',
        encoding="utf-8",
    )
    knowledge = agents_root / "knowledge" / "researcher"
    knowledge.mkdir(parents=True)
    (knowledge / "db.md").write_text("B", encoding="utf-8")
    (knowledge / "api.md").write_text("A", encoding="utf-8")
    return "researcher"


def _create(client: TestClient, headers: dict[str, str], **overrides: str) -> dict[str, object]:
    body = {
        "name": "helper",
        "displayName": "Helper",
        "description": "Helps",
        "systemPrompt": "You help.",
        **overrides,
    }
    response = client.post("/api/agents", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return dict(response.json()["agent"])


def test_requests_without_api_key_are_rejected(client: TestClient) -> None:
    response = client.get("/api/agents")
    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "missing API key"}


def test_invalid_api_key_is_rejected(client: TestClient) -> None:
    response = client.get("/api/agents", headers={"X-API-Key": "ck_" + "f" * 64})
    assert response.status_code == 401
    assert response.json()["error"] == "invalid API key"


def test_x_api_key_header_is_accepted(client: TestClient, headers: dict[str, str]) -> None:
    token = headers["Authorization"].removeprefix("Bearer ")
    response = client.get("/api/agents", headers={"X-API-Key": token})
    assert response.status_code == 200


def test_list_puts_file_agents_before_seeded_templates(
    client: TestClient, headers: dict[str, str], file_agent: str
) -> None:
    response = client.get("/api/agents", headers=headers)
    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    agents = payload["agents"]

    assert agents[0] == {
        "id": f"file:{file_agent}",
        "name": file_agent,
        "displayName": "Researcher",
        "description": "Digs deep",
        "source": "file",
        "isTemplate": True,
        "isActive": True,
        "category": "research",
    }
    stored = agents[1:]
    assert len(stored) == 5
    assert all(item["source"] == "database" and item["isTemplate"] for item in stored)

    again = client.get("/api/agents", headers=headers).json()["agents"]
    assert len(again) == len(agents)


def test_get_file_agent_assembles_prompt(
    client: TestClient, headers: dict[str, str], file_agent: str
) -> None:
    response = client.get(f"/api/agents/file:{file_agent}", headers=headers)
    assert response.status_code == 200
    agent = response.json()["agent"]
    assert agent["systemPrompt"] == (
        "# PERSONA & ROLE\nExpert\n\n# KNOWLEDGE BASE\n\n## api\nA\n\n## db\nB"
    )
    assert agent["knowledge"] == ["api", "db"]
    assert agent["skills"] == []
    assert agent["source"] == "file"


def test_get_missing_file_agent_is_404(
    client: TestClient, headers: dict[str, str], agents_root: Path
) -> None:
    del agents_root
    response = client.get("/api/agents/file:ghost", headers=headers)
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "File-based agent not found"}


@pytest.mark.parametrize("agent_id", ["abc", "file:", "1.5"])
def test_get_with_malformed_id_is_400(
    client: TestClient, headers: dict[str, str], agent_id: str
) -> None:
    response = client.get(f"/api/agents/{agent_id}", headers=headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid agent ID"


def test_create_and_get_stored_agent(client: TestClient, headers: dict[str, str]) -> None:
    created = _create(client, headers)
    assert created["isTemplate"] is False
    assert created["isActive"] is True

    response = client.get(f"/api/agents/{created['id']}", headers=headers)
    assert response.status_code == 200
    agent = response.json()["agent"]
    assert agent["systemPrompt"] == "You help."
    assert agent["source"] == "database"
    assert "knowledge" not in agent


def test_create_duplicate_name_is_409(client: TestClient, headers: dict[str, str]) -> None:
    _create(client, headers)
    response = client.post(
        "/api/agents",
        json={"name": "helper", "displayName": "Other", "systemPrompt": "p"},
        headers=headers,
    )
    assert response.status_code == 409
    assert response.json()["error"] == "An agent with this name already exists"


@pytest.mark.parametrize(
    "body",
    [
        {"name": "Bad Name", "displayName": "X", "systemPrompt": "p"},
        {"name": "ok-name", "displayName": "", "systemPrompt": "p"},
        {"name": "ok-name", "displayName": "X", "systemPrompt": ""},
        {"displayName": "X", "systemPrompt": "p"},
    ],
)
def test_create_invalid_body_is_400(
    client: TestClient, headers: dict[str, str], body: dict[str, str]
) -> None:
    response = client.post("/api/agents", json=body, headers=headers)
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_update_changes_only_supplied_fields(client: TestClient, headers: dict[str, str]) -> None:
    created = _create(client, headers)

    response = client.put(
        f"/api/agents/{created['id']}",
        json={"displayName": "Renamed", "isActive": False},
        headers=headers,
    )
    assert response.status_code == 200
    agent = response.json()["agent"]
    assert agent["displayName"] == "Renamed"
    assert agent["isActive"] is False
    assert agent["systemPrompt"] == "You help."
    assert agent["name"] == "helper"


def test_update_rename_conflict_is_409(client: TestClient, headers: dict[str, str]) -> None:
    _create(client, headers)
    other = _create(client, headers, name="other")

    response = client.put(f"/api/agents/{other['id']}", json={"name": "helper"}, headers=headers)
    assert response.status_code == 409


def test_update_file_agent_id_is_400(client: TestClient, headers: dict[str, str]) -> None:
    response = client.put("/api/agents/file:researcher", json={"name": "x"}, headers=headers)
    assert response.status_code == 400


def test_foreign_agents_look_missing(client: TestClient, headers: dict[str, str]) -> None:
    created = _create(client, headers)
    bob = _auth_headers("bob")
    agent_id = created["id"]

    assert client.get(f"/api/agents/{agent_id}", headers=bob).status_code == 404
    put = client.put(f"/api/agents/{agent_id}", json={"description": "x"}, headers=bob)
    assert put.status_code == 404
    assert put.json()["error"] == "Agent not found or not owned by user"
    assert client.delete(f"/api/agents/{agent_id}", headers=bob).status_code == 404

    missing = client.get("/api/agents/999999", headers=bob)
    assert missing.json() == client.get(f"/api/agents/{agent_id}", headers=bob).json()

    assert client.get(f"/api/agents/{agent_id}", headers=headers).status_code == 200


def test_delete_agent(client: TestClient, headers: dict[str, str]) -> None:
    created = _create(client, headers)

    response = client.delete(f"/api/agents/{created['id']}", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Agent deleted successfully"}
    assert client.get(f"/api/agents/{created['id']}", headers=headers).status_code == 404
    assert client.delete(f"/api/agents/{created['id']}", headers=headers).status_code == 404


def test_templates_endpoint(
    client: TestClient, headers: dict[str, str], file_agent: str
) -> None:
    response = client.get("/api/agents/templates", headers=headers)
    assert response.status_code == 200
    payload = response.json()
    assert [item["name"] for item in payload["templates"]] == [
        "code-reviewer",
        "bug-fixer",
        "doc-writer",
        "refactorer",
        "test-writer",
    ]
    assert payload["fileBasedAgents"] == [
        {
            "name": file_agent,
            "displayName": "Researcher",
            "description": "Digs deep",
            "category": "research",
        }
    ]


def test_agent_payloads_use_camel_case_keys(client: TestClient, headers: dict[str, str]) -> None:
    created = _create(client, headers)
    assert {"displayName", "systemPrompt", "isTemplate", "isActive", "createdAt"} <= set(created)
    assert "display_name" not in created

    listed = client.get("/api/agents", headers=headers).json()["agents"]
    assert all("displayName" in item and "isTemplate" in item for item in listed)

    fetched = client.get(f"/api/agents/{created['id']}", headers=headers).json()["agent"]
    assert fetched["displayName"] == "Helper"
    assert "system_prompt" not in fetched

    templates = client.get("/api/agents/templates", headers=headers).json()
    assert "fileBasedAgents" in templates
    assert templates["templates"][0]["systemPrompt"]


@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE"])
def test_out_of_range_agent_id_is_400(
    client: TestClient, headers: dict[str, str], method: str
) -> None:
    response = client.request(
        method,
        "/api/agents/99999999999999999999",
        json={"description": "x"} if method == "PUT" else None,
        headers=headers,
    )
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid agent ID"}


def test_update_cannot_blank_required_fields(client: TestClient, headers: dict[str, str]) -> None:
    created = _create(client, headers)

    response = client.put(
        f"/api/agents/{created['id']}",
        json={"displayName": "", "systemPrompt": ""},
        headers=headers,
    )
    assert response.status_code == 400
    agent = client.get(f"/api/agents/{created['id']}", headers=headers).json()["agent"]
    assert agent["displayName"] == "Helper"
    assert agent["systemPrompt"] == "You help."
