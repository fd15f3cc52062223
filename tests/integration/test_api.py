"""End-to-end tests of the HTTP API over in-memory stores."""

import asyncio
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from tests.unit.mocks import FakeClock, InMemoryCredentialStore, InMemoryTaskStore
from todo_backend.core.security import BcryptPasswordHasher
from todo_backend.domain.create_models import UserCreate
from todo_backend.main import build_services, create_app
from todo_backend.services.session_registry import SessionRegistry


ADMIN = {"username": "admin.user", "password": "adminpw1", "email": "admin@example.com"}
ALICE = {"username": "alice", "password": "correct1", "email": "a@b.com"}
BOB = {"username": "bobby", "password": "secret12", "email": "bob@b.com"}


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def services(clock):
    services = build_services(
        task_store=InMemoryTaskStore(),
        credential_store=InMemoryCredentialStore(),
        hasher=BcryptPasswordHasher(rounds=4),
        registry=SessionRegistry(ttl=timedelta(minutes=30), clock=clock),
    )
    asyncio.run(services.user_service.create_as_admin(draft=UserCreate(**ADMIN), role="ADMIN"))
    return services


@pytest.fixture
def client(services) -> TestClient:
    return TestClient(create_app(services, with_lifespan=False))


def _register(client: TestClient, account: dict) -> str:
    response = client.post("/users", json=account)
    assert response.status_code == 201
    return response.json()["id"]


def _login(client: TestClient, account: dict) -> dict[str, str]:
    response = client.post("/auth", json={"username": account["username"], "password": account["password"]})
    assert response.status_code == 200
    return {"Authorization": response.json()["cookie"]}


@pytest.fixture
def alice(client) -> dict[str, str]:
    _register(client, ALICE)
    return _login(client, ALICE)


@pytest.fixture
def bob(client) -> dict[str, str]:
    _register(client, BOB)
    return _login(client, BOB)


@pytest.fixture
def admin(client) -> dict[str, str]:
    return _login(client, ADMIN)


@pytest.mark.integration
class TestAuth:
    def test_login_and_whoami(self, client, alice):
        response = client.get("/auth", headers=alice)

        assert response.status_code == 200
        body = response.json()
        assert body["username"] == "alice"
        assert body["role"] == "USER"
        assert "password_hash" not in body

    def test_wrong_password(self, client):
        _register(client, ALICE)

        response = client.post("/auth", json={"username": "alice", "password": "wrong"})

        assert response.status_code == 401
        assert response.json()["code"] == "ERR_INVALID_CREDENTIAL"

    def test_unknown_user(self, client):
        response = client.post("/auth", json={"username": "nobody", "password": "whatever"})

        assert response.status_code == 404

    def test_missing_header_is_bad_request(self, client):
        response = client.get("/tasks")

        assert response.status_code == 400
        assert response.json()["code"] == "ERR_INVALID_INPUT"

    def test_unknown_token(self, client):
        response = client.get("/tasks", headers={"Authorization": "forged"})

        assert response.status_code == 404

    def test_expired_session(self, client, clock, alice):
        clock.advance(minutes=31)

        response = client.get("/auth", headers=alice)

        assert response.status_code == 440
        assert response.json()["code"] == "ERR_SESSION_EXPIRED"

    def test_renew_keeps_session_alive(self, client, clock, alice):
        clock.advance(minutes=20)
        assert client.post("/auth/renew", headers=alice).status_code == 200

        clock.advance(minutes=20)

        assert client.get("/auth", headers=alice).status_code == 200

    def test_logout(self, client, alice):
        assert client.post("/logout", headers=alice).status_code == 200

        assert client.get("/auth", headers=alice).status_code == 404
        assert client.post("/logout", headers=alice).status_code == 404


@pytest.mark.integration
class TestTasks:
    def test_create_list_get(self, client, alice):
        created = client.post("/tasks", json={"name": "Buy milk", "priority": 2, "difficulty": "low"}, headers=alice)

        assert created.status_code == 201
        task = created.json()
        assert task["difficulty"] == "LOW"
        assert task["expired"] is False
        assert "owner_ids" not in task

        assert [t["id"] for t in client.get("/tasks", headers=alice).json()] == [task["id"]]
        assert client.get(f"/tasks/{task['id']}", headers=alice).json()["name"] == "Buy milk"

    def test_invalid_task(self, client, alice):
        response = client.post("/tasks", json={"name": "x", "priority": 6}, headers=alice)

        assert response.status_code == 400
        assert response.json()["code"] == "ERR_INVALID_INPUT"

    def test_malformed_body(self, client, alice):
        response = client.post("/tasks", json={"name": "x", "priority": "high"}, headers=alice)

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request body", "code": "ERR_INVALID_INPUT"}

    def test_other_users_task_is_not_found(self, client, alice, bob):
        task_id = client.post("/tasks", json={"name": "private"}, headers=alice).json()["id"]

        assert client.get(f"/tasks/{task_id}", headers=bob).status_code == 404
        assert client.patch(f"/tasks/{task_id}", json={"done": True}, headers=bob).status_code == 404
        assert client.delete(f"/tasks/{task_id}", headers=bob).status_code == 404
        assert client.get("/tasks", headers=bob).json() == []

    def test_patch_merges_fields(self, client, alice):
        task_id = client.post("/tasks", json={"name": "draft", "description": "keep me"}, headers=alice).json()["id"]

        response = client.patch(f"/tasks/{task_id}", json={"done": True}, headers=alice)

        assert response.status_code == 200
        assert response.json()["done"] is True
        assert response.json()["description"] == "keep me"

    def test_delete_and_delete_all(self, client, alice):
        first = client.post("/tasks", json={"name": "a"}, headers=alice).json()["id"]
        client.post("/tasks", json={"name": "b"}, headers=alice)
        client.post("/tasks", json={"name": "c"}, headers=alice)

        assert client.delete(f"/tasks/{first}", headers=alice).json()["id"] == first
        assert client.delete("/tasks/all", headers=alice).json()["count"] == 2
        assert client.delete("/tasks/all", headers=alice).json()["count"] == 0

    def test_generate_requires_admin(self, client, alice):
        response = client.post("/tasks/gen", headers=alice)

        assert response.status_code == 403
        assert response.json()["error"] == "No access"

    def test_admin_generates_samples(self, client, admin, monkeypatch):
        monkeypatch.setattr("todo_backend.services.task_service.settings.sample_tasks_max", 150)

        response = client.post("/tasks/gen", headers=admin)

        assert response.status_code == 201
        count = response.json()["count"]
        assert 100 <= count <= 150
        assert len(client.get("/tasks", headers=admin).json()) == count

    def test_task_health_is_public(self, client):
        assert client.get("/tasks/health").json()["status"] == "UP"


@pytest.mark.integration
class TestUsers:
    def test_register_ignores_requested_role(self, client, admin):
        user_id = _register(client, {**ALICE, "role": "ADMIN"})

        assert client.get(f"/users/{user_id}", headers=admin).json()["role"] == "USER"

    def test_duplicate_registration(self, client):
        _register(client, ALICE)

        response = client.post("/users", json={**ALICE, "email": "other@b.com"})

        assert response.status_code == 409

    def test_admin_creates_with_role(self, client, admin):
        response = client.post("/users/admin", json={**BOB, "role": "guest"}, headers=admin)

        assert response.status_code == 201
        assert client.get(f"/users/{response.json()['id']}", headers=admin).json()["role"] == "GUEST"

    def test_user_cannot_use_admin_endpoints(self, client, alice):
        assert client.get("/users", headers=alice).status_code == 403
        assert client.post("/users/admin", json={**BOB, "role": "ADMIN"}, headers=alice).status_code == 403

    def test_admin_lists_users(self, client, admin, alice):
        usernames = {u["username"] for u in client.get("/users", headers=admin).json()}

        assert usernames == {"admin.user", "alice"}

    def test_update_own_account(self, client, alice):
        user_id = client.get("/auth", headers=alice).json()["id"]

        response = client.put(f"/users/{user_id}", json={"email": "new@b.com"}, headers=alice)

        assert response.status_code == 200
        assert response.json()["email"] == "new@b.com"

    def test_user_cannot_update_others_or_own_role(self, client, alice, bob):
        alice_id = client.get("/auth", headers=alice).json()["id"]
        bob_id = client.get("/auth", headers=bob).json()["id"]

        assert client.put(f"/users/{bob_id}", json={"email": "x@b.com"}, headers=alice).status_code == 403
        assert client.put(f"/users/{alice_id}", json={"role": "ADMIN"}, headers=alice).status_code == 403

    def test_admin_deletes_user(self, client, admin, alice):
        alice_id = client.get("/auth", headers=alice).json()["id"]
        client.post("/tasks", json={"name": "a"}, headers=alice)

        response = client.delete(f"/users/{alice_id}", headers=admin)

        assert response.status_code == 200
        assert client.get("/auth", headers=alice).status_code == 404
        assert client.get(f"/users/{alice_id}", headers=admin).status_code == 404


@pytest.mark.integration
def test_health_reports_active_sessions(client, alice, admin):
    body = client.get("/health").json()

    assert body["status"] == "healthy"
    assert body["active_sessions"] == 2
