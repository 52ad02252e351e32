"""Tests for API endpoints."""

import pytest

from todoboard.config import get_settings

MISSING_CATEGORY_ID = "00000000-0000-0000-0000-000000000000"


@pytest.fixture
async def work_id(client):
    response = await client.post("/api/categories", json={"name": "Work", "color": "#FDE1D3"})
    return response.json()["id"]


@pytest.fixture
def api_key(monkeypatch):
    """Require an API key for the duration of a test."""
    monkeypatch.setenv("TODOBOARD_API_KEY", "secret")
    get_settings.cache_clear()
    yield "secret"
    monkeypatch.delenv("TODOBOARD_API_KEY")
    get_settings.cache_clear()


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    @pytest.mark.asyncio
    async def test_health_check(self, client):
        """Test health check returns healthy status."""
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestTodosAPI:
    """Tests for todo CRUD endpoints."""

    @pytest.mark.asyncio
    async def test_create_todo(self, client, work_id):
        """Test creating a new todo."""
        response = await client.post(
            "/api/todos",
            json={
                "title": "Test todo",
                "urgency": "high",
                "category_ids": [work_id],
                "location": {"address": "Office", "lat": 10.0, "lng": 20.0},
            },
        )
        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Test todo"
        assert data["urgency"] == "high"
        assert data["category_ids"] == [work_id]
        assert data["location"]["address"] == "Office"
        assert data["completed"] is False
        assert data["creator_id"] == "user-1"
        assert "id" in data

    @pytest.mark.asyncio
    async def test_create_todo_with_defaults(self, client):
        """Test creating a todo with default values."""
        response = await client.post("/api/todos", json={"title": "Simple todo"})
        assert response.status_code == 201
        data = response.json()
        assert data["urgency"] == "low"
        assert data["category_ids"] == []
        assert data["reminder"] is None

    @pytest.mark.asyncio
    async def test_create_todo_validation(self, client):
        """Test an empty title and an unknown urgency are rejected."""
        assert (await client.post("/api/todos", json={"title": ""})).status_code == 422
        response = await client.post("/api/todos", json={"title": "x", "urgency": "later"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_create_with_missing_category(self, client):
        """Test a failed association returns 409 and leaves no todo."""
        response = await client.post(
            "/api/todos",
            json={"title": "Orphan", "category_ids": [MISSING_CATEGORY_ID]},
        )
        assert response.status_code == 409

        listed = await client.get("/api/todos")
        assert listed.json() == []

    @pytest.mark.asyncio
    async def test_list_todos(self, client):
        """Test listing todos newest first."""
        await client.post("/api/todos", json={"title": "Todo 1"})
        await client.post("/api/todos", json={"title": "Todo 2"})

        response = await client.get("/api/todos")
        assert response.status_code == 200
        assert [t["title"] for t in response.json()] == ["Todo 2", "Todo 1"]

    @pytest.mark.asyncio
    async def test_list_todos_filtered(self, client, work_id):
        """Test the completed and category_id filters."""
        await client.post("/api/todos", json={"title": "Done", "completed": True})
        await client.post("/api/todos", json={"title": "Work", "category_ids": [work_id]})

        done = await client.get("/api/todos", params={"completed": "true"})
        in_work = await client.get("/api/todos", params={"category_id": work_id})

        assert [t["title"] for t in done.json()] == ["Done"]
        assert [t["title"] for t in in_work.json()] == ["Work"]

    @pytest.mark.asyncio
    async def test_get_todo(self, client):
        """Test getting a specific todo."""
        create_response = await client.post("/api/todos", json={"title": "Get me"})
        todo_id = create_response.json()["id"]

        response = await client.get(f"/api/todos/{todo_id}")
        assert response.status_code == 200
        assert response.json()["title"] == "Get me"

    @pytest.mark.asyncio
    async def test_get_todo_not_found(self, client):
        """Test getting a non-existent todo."""
        response = await client.get("/api/todos/nonexistent-id")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_patch_todo(self, client, work_id):
        """Test a partial update only touches the given fields."""
        create_response = await client.post(
            "/api/todos",
            json={"title": "Original", "content": "body", "category_ids": [work_id]},
        )
        todo_id = create_response.json()["id"]

        response = await client.patch(f"/api/todos/{todo_id}", json={"completed": True})
        assert response.status_code == 200
        data = response.json()
        assert data["completed"] is True
        assert data["completed_at"] is not None
        assert data["content"] == "body"
        assert data["category_ids"] == [work_id]

    @pytest.mark.asyncio
    async def test_put_replaces_categories(self, client, work_id):
        """Test category_ids replaces the association set."""
        create_response = await client.post(
            "/api/todos", json={"title": "Move", "category_ids": [work_id]}
        )
        todo_id = create_response.json()["id"]

        response = await client.put(f"/api/todos/{todo_id}", json={"category_ids": []})
        assert response.status_code == 200
        assert response.json()["category_ids"] == []

    @pytest.mark.asyncio
    async def test_failed_update_changes_nothing(self, client, work_id):
        """Test a 409 update leaves the todo exactly as it was."""
        create_response = await client.post(
            "/api/todos", json={"title": "Stable", "category_ids": [work_id]}
        )
        todo_id = create_response.json()["id"]

        response = await client.patch(
            f"/api/todos/{todo_id}",
            json={"title": "Changed", "category_ids": [MISSING_CATEGORY_ID]},
        )
        assert response.status_code == 409

        current = (await client.get(f"/api/todos/{todo_id}")).json()
        assert current["title"] == "Stable"
        assert current["category_ids"] == [work_id]

    @pytest.mark.asyncio
    async def test_update_todo_not_found(self, client):
        """Test updating a non-existent todo."""
        response = await client.patch("/api/todos/nonexistent-id", json={"title": "x"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_todo(self, client):
        """Test deleting a todo."""
        create_response = await client.post("/api/todos", json={"title": "Delete me"})
        todo_id = create_response.json()["id"]

        response = await client.delete(f"/api/todos/{todo_id}")
        assert response.status_code == 204

        get_response = await client.get(f"/api/todos/{todo_id}")
        assert get_response.status_code == 404

    @pytest.mark.asyncio
    async def test_todos_of_other_users_are_hidden(self, client):
        """Test a todo is only visible to its creator."""
        create_response = await client.post("/api/todos", json={"title": "Private"})
        todo_id = create_response.json()["id"]

        response = await client.get(
            f"/api/todos/{todo_id}", headers={"X-User-Id": "user-2"}
        )
        assert response.status_code == 404


class TestCategoriesAPI:
    """Tests for category endpoints."""

    @pytest.mark.asyncio
    async def test_create_category(self, client):
        """Test creating a category."""
        response = await client.post(
            "/api/categories", json={"name": "Work", "color": "#FF0000"}
        )
        assert response.status_code == 201
        assert response.json()["name"] == "Work"
        assert response.json()["user_id"] == "user-1"

    @pytest.mark.asyncio
    async def test_create_category_bad_color(self, client):
        """Test colors must be hex strings."""
        response = await client.post("/api/categories", json={"name": "Work", "color": "red"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_list_categories_by_name(self, client):
        """Test categories are listed by name."""
        await client.post("/api/categories", json={"name": "Zoo", "color": "#000000"})
        await client.post("/api/categories", json={"name": "Alpha", "color": "#FFFFFF"})

        response = await client.get("/api/categories")
        assert [c["name"] for c in response.json()] == ["Alpha", "Zoo"]

    @pytest.mark.asyncio
    async def test_seed_defaults(self, client):
        """Test the defaults endpoint only seeds an empty user."""
        response = await client.post("/api/categories/defaults")
        assert response.status_code == 200
        seeded = response.json()
        assert [c["name"] for c in seeded] == ["Health", "Personal", "Shopping", "Work"]

        again = await client.post("/api/categories/defaults")
        assert [c["id"] for c in again.json()] == [c["id"] for c in seeded]

    @pytest.mark.asyncio
    async def test_update_category(self, client, work_id):
        """Test renaming a category."""
        response = await client.put(f"/api/categories/{work_id}", json={"name": "Office"})
        assert response.status_code == 200
        assert response.json()["name"] == "Office"
        assert response.json()["color"] == "#FDE1D3"

    @pytest.mark.asyncio
    async def test_delete_category_unlinks_todos(self, client, work_id):
        """Test deleting a category removes it from its todos."""
        create_response = await client.post(
            "/api/todos", json={"title": "Linked", "category_ids": [work_id]}
        )
        todo_id = create_response.json()["id"]

        response = await client.delete(f"/api/categories/{work_id}")
        assert response.status_code == 204

        todo = (await client.get(f"/api/todos/{todo_id}")).json()
        assert todo["category_ids"] == []

    @pytest.mark.asyncio
    async def test_category_not_found(self, client):
        """Test unknown categories return 404."""
        assert (await client.get("/api/categories/nope")).status_code == 404
        assert (await client.delete("/api/categories/nope")).status_code == 404


class TestAuthentication:
    """Tests for user identity and the API key."""

    @pytest.mark.asyncio
    async def test_missing_user_is_unauthorized(self, anonymous_client):
        """Test requests without a user are rejected."""
        assert (await anonymous_client.get("/api/todos")).status_code == 401
        response = await anonymous_client.post("/api/todos", json={"title": "x"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_api_key_required_when_configured(self, client, api_key):
        """Test the API key gate."""
        assert (await client.get("/api/todos")).status_code == 401

        response = await client.get("/api/todos", headers={"X-API-Key": api_key})
        assert response.status_code == 200

        response = await client.get("/api/todos", params={"api_key": api_key})
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_wrong_api_key(self, client, api_key):
        """Test an invalid API key is rejected."""
        response = await client.get("/api/todos", headers={"X-API-Key": "wrong"})
        assert response.status_code == 401
