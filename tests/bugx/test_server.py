"""Tests for the setup service."""

import pytest
from fastapi.testclient import TestClient

from bugx.db.schema import TEST_USER_EMAIL
from bugx.server import create_app


class FakeExecutor:
    """In-memory stand-in for the asyncpg pool."""

    def __init__(self, fail_with: Exception = None):
        self.fail_with = fail_with
        self.statements = []

    async def execute(self, statement):
        if self.fail_with is not None:
            raise self.fail_with
        self.statements.append(statement)

    async def fetchrow(self, query):
        if "COUNT" in query:
            return {"count": 1}
        return {"email": TEST_USER_EMAIL, "name": "Test User"}


@pytest.fixture
def executor():
    return FakeExecutor()


@pytest.fixture
def client(executor):
    with TestClient(create_app(executor=executor)) as client:
        yield client


class TestSetupDatabase:
    """Test the database setup endpoint."""

    def test_setup_success(self, client, executor):
        response = client.post("/api/setup-database")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Database setup completed successfully"
        assert body["results"]["user_count"] == {"count": 1}
        assert body["results"]["test_user"]["email"] == TEST_USER_EMAIL
        assert executor.statements

    def test_setup_is_idempotent(self, client, executor):
        client.post("/api/setup-database")
        applied = len(executor.statements)

        response = client.post("/api/setup-database")

        assert response.status_code == 200
        assert len(executor.statements) == applied

    def test_setup_failure(self):
        app = create_app(executor=FakeExecutor(fail_with=ConnectionError("connection refused")))

        with TestClient(app) as client:
            response = client.post("/api/setup-database")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert "connection refused" in body["error"]
        assert body["details"] == "Check server logs for more information"

    def test_instructions(self, client):
        response = client.get("/api/setup-database")

        assert response.status_code == 200
        assert "Use POST" in response.json()["message"]


class TestHealth:
    """Test the health endpoint."""

    def test_health_before_setup(self, client):
        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["ready"] is True
        assert body["database"] == "uninitialized"

    def test_health_after_setup(self, client):
        client.post("/api/setup-database")

        assert client.get("/health").json()["database"] == "ready"
