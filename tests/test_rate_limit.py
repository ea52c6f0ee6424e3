from fastapi import FastAPI
from fastapi.testclient import TestClient

from trombinoscope.middleware.rate_limit import RateLimitMiddleware


def build_app(max_requests=3, window_seconds=60, enabled=True):
    app = FastAPI()
    app.add_middleware(
        RateLimitMiddleware, max_requests=max_requests, window_seconds=window_seconds, enabled=enabled
    )

    @app.get("/ping")
    async def ping():
        return {"success": True}

    return app


def test_requests_over_limit_get_429():
    client = TestClient(build_app(max_requests=3))
    statuses = [client.get("/ping").status_code for _ in range(4)]
    assert statuses == [200, 200, 200, 429]

    response = client.get("/ping")
    assert response.json()["code"] == "RATE_LIMITED"
    assert response.json()["success"] is False
    assert 1 <= int(response.headers["retry-after"]) <= 60


def test_disabled_limiter_lets_everything_through():
    client = TestClient(build_app(max_requests=1, enabled=False))
    assert all(client.get("/ping").status_code == 200 for _ in range(5))


def test_sliding_window_frees_slots():
    limiter = RateLimitMiddleware(build_app(), max_requests=2, window_seconds=10)
    assert limiter.allow("1.2.3.4", now=100.0)
    assert limiter.allow("1.2.3.4", now=105.0)
    assert not limiter.allow("1.2.3.4", now=109.0)
    assert limiter.retry_after("1.2.3.4", now=109.0) == 1

    # la première requête sort de la fenêtre
    assert limiter.allow("1.2.3.4", now=110.0)
    assert not limiter.allow("1.2.3.4", now=111.0)


def test_counters_are_per_ip():
    limiter = RateLimitMiddleware(build_app(), max_requests=1, window_seconds=10)
    assert limiter.allow("10.0.0.1", now=0.0)
    assert limiter.allow("10.0.0.2", now=0.0)
    assert not limiter.allow("10.0.0.1", now=1.0)
