"""Tests for bearer-token authentication."""

import jwt
import pytest
from datetime import datetime, timedelta
from fastapi.testclient import TestClient

from executask.auth.jwt import JWT_ALGORITHM, JWT_SECRET_KEY, create_access_token, decode_access_token
from executask.database.user_repository import UserRepository


@pytest.fixture
def auth_client(app, db_session):
    """Test client that authenticates for real; only the database is overridden."""
    from executask.database.database import get_db

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


class TestTokens:

    def test_round_trip(self):
        token = create_access_token("user-1", email="u1@example.com", name="User One")

        claims = decode_access_token(token)

        assert claims["sub"] == "user-1"
        assert claims["email"] == "u1@example.com"
        assert claims["name"] == "User One"

    def test_expired_token_is_rejected(self):
        token = jwt.encode(
            {"sub": "user-1", "exp": datetime.utcnow() - timedelta(minutes=5)},
            JWT_SECRET_KEY,
            algorithm=JWT_ALGORITHM,
        )
        assert decode_access_token(token) is None

    def test_wrong_secret_is_rejected(self):
        token = jwt.encode(
            {"sub": "user-1", "exp": datetime.utcnow() + timedelta(hours=1)},
            "some-other-secret-of-sufficient-length",
            algorithm="HS256",
        )
        assert decode_access_token(token) is None

    def test_garbage_is_rejected(self):
        assert decode_access_token("not-a-jwt") is None


class TestAuthenticatedRequests:

    def test_missing_token_is_401(self, auth_client):
        response = auth_client.get("/api/v1/todos")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert response.json()["code"] == "UNAUTHORIZED"

    def test_invalid_token_is_401(self, auth_client):
        response = auth_client.get("/api/v1/todos", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid or expired token"

    def test_valid_token_creates_the_user(self, auth_client, db_session):
        token = create_access_token("new-user-789", email="new@example.com")

        response = auth_client.post(
            "/api/v1/todos",
            json={"title": "First todo"},
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 201
        assert response.json()["userId"] == "new-user-789"
        user = UserRepository(db_session).get("new-user-789")
        assert user.email == "new@example.com"

    def test_health_needs_no_token(self, auth_client):
        response = auth_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
