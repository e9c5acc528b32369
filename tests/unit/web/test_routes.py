"""HTTP-level tests for routing, auth token handling and error mapping."""

from typing import Any

import pytest
from fastapi.testclient import TestClient

from blogsmith.core.modules.humanize.models import HumanizeResult
from blogsmith.core.modules.llm.models import GeneratedTitles
from blogsmith.errors import AccessDeniedError, ProviderError
from blogsmith.web.server import create_fastapi_app

VALID_TOKEN = "valid-token"


class StubApp:
    """Stands in for App, recording the calls routed to it."""

    def __init__(self, config) -> None:
        self.config = config
        self.calls: list[tuple[str, Any]] = []
        self.titles_error: Exception | None = None

    async def is_auth_token_valid(self, auth_token: str) -> bool:
        return auth_token == VALID_TOKEN

    async def login(self, email, password, meta) -> str:
        self.calls.append(("login", (email, meta.user_agent)))
        return VALID_TOKEN

    def get_status(self) -> dict[str, object]:
        return {"status": "ok", "llm_configured": True, "humanizer_configured": False}

    async def get_workflow_session(self, auth_token: str) -> str:
        self.calls.append(("get_workflow_session", auth_token))
        return "session_u1_1700000000000"

    async def generate_titles(self, auth_token, keywords, blog_type, session_id, meta) -> GeneratedTitles:
        self.calls.append(("generate_titles", (keywords, blog_type, session_id, meta.ip_address)))
        if self.titles_error is not None:
            raise self.titles_error
        return GeneratedTitles(titles=["A Title"], session_id=session_id or "session_u1_1700000000000")

    async def humanize(self, auth_token, text, session_id, meta) -> HumanizeResult:
        return HumanizeResult.model_validate({"output": text.upper(), "flesch_score": 60})


@pytest.fixture
def stub_app(config):
    return StubApp(config)


@pytest.fixture
def client(stub_app, config):
    return TestClient(create_fastapi_app(stub_app, config))  # type: ignore[arg-type]


def bearer(token: str = VALID_TOKEN) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class TestPublicRoutes:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_status(self, client):
        response = client.get("/api/v1/status")
        assert response.status_code == 200
        assert response.json()["llm_configured"] is True


class TestAuthToken:
    def test_missing_token(self, client):
        response = client.get("/api/v1/workflow/session")
        assert response.status_code == 401
        assert response.json() == {"message": "Authentication failed", "type": "authentication_error"}

    def test_invalid_token(self, client):
        response = client.get("/api/v1/workflow/session", headers=bearer("nope"))
        assert response.status_code == 401

    def test_bearer_token(self, client, stub_app):
        response = client.get("/api/v1/workflow/session", headers=bearer())
        assert response.status_code == 200
        assert response.json() == {"session_id": "session_u1_1700000000000"}
        assert stub_app.calls == [("get_workflow_session", VALID_TOKEN)]

    def test_cookie_token(self, client):
        client.cookies.set("auth_token", VALID_TOKEN)
        response = client.get("/api/v1/workflow/session")
        assert response.status_code == 200


class TestGenerateRoutes:
    def test_generate_titles_ignores_forwarded_for_from_client(self, client, stub_app):
        response = client.post(
            "/api/v1/generate/titles",
            json={"keywords": ["python"], "blog_type": "Listicle"},
            headers={**bearer(), "X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
        )
        assert response.status_code == 200
        assert response.json()["titles"] == ["A Title"]
        assert stub_app.calls == [("generate_titles", (["python"], "Listicle", None, "testclient"))]

    def test_provider_rate_limit(self, client, stub_app):
        stub_app.titles_error = ProviderError("Rate limit exceeded", status_code=429)
        response = client.post("/api/v1/generate/titles", json={"keywords": ["python"]}, headers=bearer())
        assert response.status_code == 429
        assert response.json() == {"message": "Rate limit exceeded", "type": "provider_error"}

    def test_pending_approval(self, client, stub_app):
        stub_app.titles_error = AccessDeniedError("Account is pending approval")
        response = client.post("/api/v1/generate/titles", json={"keywords": ["python"]}, headers=bearer())
        assert response.status_code == 403

    def test_humanize_returns_provider_body(self, client):
        response = client.post("/api/v1/humanize", json={"text": "hello"}, headers=bearer())
        assert response.status_code == 200
        assert response.json() == {"output": "HELLO", "flesch_score": 60}


class TestLogin:
    def test_sets_auth_cookie(self, client, stub_app):
        response = client.post(
            "/api/v1/auth/login",
            json={"email": "writer@example.com", "password": "secret1"},
            headers={"User-Agent": "pytest-browser"},
        )
        assert response.status_code == 200
        assert response.json() == {"token": VALID_TOKEN}
        assert response.cookies["auth_token"] == VALID_TOKEN
        assert "httponly" in response.headers["set-cookie"].lower()
        assert stub_app.calls == [("login", ("writer@example.com", "pytest-browser"))]


class TestOpenAPI:
    def test_public_endpoints_have_no_security(self, client):
        schema = client.get("/openapi.json").json()
        assert schema["paths"]["/api/v1/status"]["get"]["security"] == []
        assert schema["paths"]["/api/v1/auth/login"]["post"]["security"] == []
        assert set(schema["components"]["securitySchemes"]) == {"BearerAuth", "AuthTokenCookie"}
