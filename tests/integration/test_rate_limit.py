import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from orderflow.api.errors import register_exception_handlers
from orderflow.api.ratelimit import RateLimiter


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


class TestRateLimiter:
    def test_burst_then_refill(self, clock):
        limiter = RateLimiter(per_minute=6, burst=2, clock=clock)

        assert limiter.allow("10.0.0.1")
        assert limiter.allow("10.0.0.1")
        assert not limiter.allow("10.0.0.1")

        clock.now += 10  # one token at 6/min
        assert limiter.allow("10.0.0.1")
        assert not limiter.allow("10.0.0.1")

    def test_clients_are_limited_separately(self, clock):
        limiter = RateLimiter(per_minute=1, burst=1, clock=clock)

        assert limiter.allow("a")
        assert not limiter.allow("a")
        assert limiter.allow("b")

    def test_zero_rate_disables(self, clock):
        limiter = RateLimiter(per_minute=0, burst=1, clock=clock)
        assert all(limiter.allow("a") for _ in range(100))

    def test_cleanup_drops_full_buckets(self, clock):
        limiter = RateLimiter(per_minute=60, burst=2, clock=clock)
        limiter.allow("idle")
        limiter.allow("busy")
        limiter.allow("busy")

        clock.now += 1.5
        limiter.cleanup()
        assert "idle" not in limiter._buckets
        assert "busy" in limiter._buckets


def test_throttled_requests_get_429(clock):
    limiter = RateLimiter(per_minute=5, burst=2, clock=clock)
    app = FastAPI()
    register_exception_handlers(app)

    @app.post("/things", dependencies=[Depends(limiter)])
    def create():
        return {"ok": True}

    client = TestClient(app)
    assert client.post("/things").status_code == 200
    assert client.post("/things").status_code == 200

    resp = client.post("/things")
    assert resp.status_code == 429
    assert resp.json() == {
        "error": "Too Many Requests",
        "message": "Rate limit exceeded. Please try again later.",
        "code": "RATE_LIMIT_EXCEEDED",
    }
