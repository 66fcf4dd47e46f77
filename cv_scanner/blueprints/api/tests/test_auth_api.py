"""
Tests for registration, login and bearer-token protection.
"""

from __future__ import annotations

import jwt
import pytest


class TestRegister:
    def test_register_returns_token(self, client, app):
        resp = client.post(
            "/api/v1/auth/register",
            json={"email": "New@Example.com", "password": "hunter22", "name": "Neo"},
        )
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["email"] == "new@example.com"
        assert body["name"] == "Neo"
        claims = jwt.decode(body["token"], app.config["JWT_SECRET"], algorithms=["HS256"])
        assert claims["email"] == "new@example.com"

    def test_duplicate_user(self, client, auth_headers):
        resp = client.post(
            "/api/v1/auth/register",
            json={"email": "recruiter@example.com", "password": "another1"},
        )
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "User already exists."}

    def test_short_password(self, client):
        resp = client.post(
            "/api/v1/auth/register", json={"email": "a@b.co", "password": "123"}
        )
        assert resp.status_code == 400
        assert "at least 6" in resp.get_json()["error"]

    def test_invalid_email(self, client):
        resp = client.post(
            "/api/v1/auth/register", json={"email": "nope", "password": "secret123"}
        )
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Invalid email format."

    def test_missing_fields(self, client):
        resp = client.post("/api/v1/auth/register", json={})
        assert resp.status_code == 400

    @pytest.mark.parametrize("path", ["/api/v1/auth/register", "/api/v1/auth/login"])
    def test_body_must_be_an_object(self, client, path):
        resp = client.post(path, json=["a@b.co", "secret123"])
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Request body must be a JSON object."}


class TestLogin:
    def test_login_success(self, client, auth_headers):
        resp = client.post(
            "/api/v1/auth/login",
            json={"email": "recruiter@example.com", "password": "secret123"},
        )
        assert resp.status_code == 200
        assert resp.get_json()["name"] == "Rita"

    def test_wrong_password(self, client, auth_headers):
        resp = client.post(
            "/api/v1/auth/login",
            json={"email": "recruiter@example.com", "password": "wrong-pass"},
        )
        assert resp.status_code == 401
        assert resp.get_json() == {"error": "Invalid credentials."}

    def test_unknown_user(self, client):
        resp = client.post(
            "/api/v1/auth/login", json={"email": "who@example.com", "password": "secret123"}
        )
        assert resp.status_code == 401


class TestProtection:
    def test_missing_token(self, client):
        resp = client.get("/api/v1/keywords")
        assert resp.status_code == 401
        assert resp.get_json() == {"error": "Authentication token required."}

    def test_bad_token(self, client):
        resp = client.get(
            "/api/v1/keywords", headers={"Authorization": "Bearer not.a.token"}
        )
        assert resp.status_code == 401
        assert resp.get_json() == {"error": "Invalid or expired token."}

    def test_root_is_public(self, client):
        resp = client.get("/")
        assert resp.get_json() == {"message": "CV Scanner API is running!"}

    def test_unknown_route(self, client):
        resp = client.get("/api/v1/nowhere")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Route GET /api/v1/nowhere not found."}
