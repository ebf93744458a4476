from datetime import datetime
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from todo_api.errors import ConflictError, InfrastructureError, StartupError
from todo_api.main import create_app
from todo_api.repositories import InMemoryRepository, Repository

SEEDED_ID = "120400b8-eee8-47cc-9e96-5bc0a3e2e874"


@pytest.fixture
def repository(seed_entities):
    repo = InMemoryRepository()
    for entity in seed_entities:
        repo.insert(entity)
    return repo


@pytest.fixture
def client(repository):
    with TestClient(create_app(repository=repository)) as c:
        yield c


class UnavailableRepository(Repository):
    """Repository whose store is always down."""

    def get_all(self):
        raise InfrastructureError("pool checkout timed out")

    def get_by_id(self, entity_id):
        raise InfrastructureError("pool checkout timed out")

    def insert(self, entity):
        raise InfrastructureError("pool checkout timed out")

    def update(self, entity_id, entity):
        raise InfrastructureError("pool checkout timed out")

    def delete(self, entity_id):
        raise InfrastructureError("pool checkout timed out")


def assert_todo_shape(todo: dict):
    for key in ["id", "title", "description", "completed", "completed_at", "created_at"]:
        assert key in todo
    assert isinstance(todo["title"], str)
    assert isinstance(todo["completed"], bool)
    datetime.fromisoformat(todo["created_at"])
    if todo["completed_at"] is not None:
        datetime.fromisoformat(todo["completed_at"])


class TestHealth:
    def test_health_check(self, client):
        res = client.get("/")
        assert res.status_code == 200
        assert res.json()["message"] == "Healthy"


class TestTodosCRUD:
    def test_get_all(self, client):
        res = client.get("/todo")
        assert res.status_code == 200
        assert len(res.json()) == 2

    def test_get_by_id(self, client):
        res = client.get(f"/todo/{SEEDED_ID}")
        assert res.status_code == 200
        todo = res.json()
        assert_todo_shape(todo)
        assert todo["title"] == "Use a mock repository"
        assert todo["description"] == "We should test that we can also use a mock for the same handler"
        assert todo["completed"] is True

    def test_get_by_id_not_found(self, client):
        res = client.get(f"/todo/{uuid4()}")
        assert res.status_code == 404
        assert res.json()["detail"] == "Todo not found"

    def test_create_todo(self, client):
        res = client.post(
            "/todo",
            json={"title": "Test create", "description": "We should test the create method"},
        )
        assert res.status_code == 201
        todo = res.json()
        assert_todo_shape(todo)
        assert todo["title"] == "Test create"
        assert todo["description"] == "We should test the create method"
        assert todo["completed"] is False
        assert todo["completed_at"] is None
        assert client.get(f"/todo/{todo['id']}").status_code == 200

    def test_update_todo(self, client):
        before = client.get(f"/todo/{SEEDED_ID}").json()

        res = client.put(
            f"/todo/{SEEDED_ID}",
            json={
                "new_title": "Test update",
                "new_description": "We should test the update method",
                "completed": True,
            },
        )
        assert res.status_code == 200
        todo = res.json()
        assert todo["id"] == SEEDED_ID
        assert todo["title"] == "Test update"
        assert todo["description"] == "We should test the update method"
        assert todo["completed"] is True
        assert todo["completed_at"] is not None
        assert todo["created_at"] == before["created_at"]

    def test_update_reopen_clears_completed_at(self, client):
        res = client.put(
            f"/todo/{SEEDED_ID}",
            json={"new_title": "Reopened", "new_description": "", "completed": False},
        )
        assert res.status_code == 200
        assert res.json()["completed"] is False
        assert res.json()["completed_at"] is None

    def test_update_not_found(self, client):
        res = client.put(
            f"/todo/{uuid4()}",
            json={"new_title": "Nope", "new_description": "", "completed": False},
        )
        assert res.status_code == 404
        assert res.json()["detail"] == "Todo not found"
        assert len(client.get("/todo").json()) == 2

    def test_delete_todo(self, client):
        assert len(client.get("/todo").json()) == 2

        res = client.delete(f"/todo/{SEEDED_ID}")
        assert res.status_code == 204
        assert res.text == ""

        assert len(client.get("/todo").json()) == 1
        assert client.get(f"/todo/{SEEDED_ID}").status_code == 404
        # Deleting again reports that nothing was removed
        res_again = client.delete(f"/todo/{SEEDED_ID}")
        assert res_again.status_code == 404


class TestValidationErrors:
    @pytest.mark.parametrize("method", ["get", "delete"])
    def test_malformed_id(self, client, method):
        res = getattr(client, method)("/todo/not-a-uuid")
        assert res.status_code == 422
        body = res.json()
        assert body.get("error") == "ValidationError"
        assert body.get("message") == "Request validation failed"
        assert isinstance(body.get("detail"), list)

    def test_create_validation_error_title_empty(self, client):
        res = client.post("/todo", json={"title": "  ", "description": "x"})
        assert res.status_code == 422
        body = res.json()
        assert body.get("error") == "ValidationError"
        assert body["detail"][0]["loc"] == ["body", "title"]
        assert "title length" in body["detail"][0]["msg"]

    def test_update_requires_completed_flag(self, client):
        res = client.put(f"/todo/{SEEDED_ID}", json={"new_title": "x", "new_description": "y"})
        assert res.status_code == 422
        assert res.json().get("error") == "ValidationError"


class TestInfrastructureErrors:
    @pytest.fixture
    def client(self):
        with TestClient(create_app(repository=UnavailableRepository())) as c:
            yield c

    def test_list_is_service_unavailable(self, client):
        res = client.get("/todo")
        assert res.status_code == 503
        assert res.json()["detail"] == "Storage unavailable"

    def test_get_is_not_reported_as_not_found(self, client):
        res = client.get(f"/todo/{SEEDED_ID}")
        assert res.status_code == 503


class TestConflict:
    class CollidingRepository(InMemoryRepository):
        def insert(self, entity):
            raise ConflictError(entity["id"])

    def test_duplicate_id_is_conflict(self):
        with TestClient(create_app(repository=self.CollidingRepository())) as client:
            res = client.post("/todo", json={"title": "Collides"})
        assert res.status_code == 409
        assert res.json()["detail"] == "Todo already exists"


class TestStoreBackedApp:
    @pytest.fixture
    def env(self, monkeypatch, database_url):
        monkeypatch.setenv("DATABASE_URL", database_url)
        monkeypatch.setenv("DB_POOL_SIZE", "2")

    def test_startup_migrates_and_serves(self, env):
        with TestClient(create_app()) as client:
            created = client.post("/todo", json={"title": "Persisted", "description": ""})
            assert created.status_code == 201
            todo_id = created.json()["id"]

        # A second start finds the schema in place and the row still stored
        with TestClient(create_app()) as client:
            res = client.get(f"/todo/{todo_id}")
            assert res.status_code == 200
            assert res.json()["title"] == "Persisted"
            assert client.delete(f"/todo/{todo_id}").status_code == 204
            assert client.get("/todo").json() == []

    def test_missing_database_url_aborts_startup(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        with pytest.raises(StartupError):
            with TestClient(create_app()):
                pass

    def test_unreachable_store_aborts_startup(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'nope' / 'todos.db'}")
        with pytest.raises(StartupError):
            with TestClient(create_app()):
                pass
