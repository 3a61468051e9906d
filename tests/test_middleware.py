from fastapi import FastAPI
from fastapi.testclient import TestClient

from grooming.infrastructure.rate_limit.memory_rate_limiter import InMemoryRateLimiter
from grooming.middleware import ErrorHandlingMiddleware, LoggingMiddleware, RateLimitMiddleware, SecurityMiddleware


def _app(per_minute=2):
    app = FastAPI()
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(SecurityMiddleware)
    app.add_middleware(RateLimitMiddleware, limiter=InMemoryRateLimiter(), per_minute=per_minute)

    @app.get("/ping")
    def ping():
        return {"ok": True}

    @app.get("/boom")
    def boom():
        raise RuntimeError("kaput")

    return app


def test_rate_limit_returns_error_envelope():
    client = TestClient(_app(per_minute=2))
    assert client.get("/ping").status_code == 200
    assert client.get("/ping").status_code == 200
    blocked = client.get("/ping")
    assert blocked.status_code == 429
    assert blocked.headers["Retry-After"] == "60"
    assert blocked.json() == {
        "success": False,
        "data": None,
        "error": "Rate limit exceeded. Please try again later.",
        "code": "RateLimited",
    }


def test_request_id_and_security_headers():
    client = TestClient(_app(per_minute=100))
    resp = client.get("/ping", headers={"X-Request-ID": "abc123"})
    assert resp.headers["X-Request-ID"] == "abc123"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["Cache-Control"] == "no-store"
    assert len(client.get("/ping").headers["X-Request-ID"]) == 32


def test_unhandled_errors_become_500():
    client = TestClient(_app(per_minute=100), raise_server_exceptions=False)
    resp = client.get("/boom")
    assert resp.status_code == 500
    assert resp.json()["code"] == "InternalError"
