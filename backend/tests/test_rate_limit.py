"""Tests for the credential throttle: token bucket step, buckets, middleware."""

from typecraft.middleware.request_context import CredentialThrottle, take_token, throttle


class TestTakeToken:
    """Unit tests for the pure function, no middleware, no HTTP."""

    def test_fresh_bucket_allows(self):
        allowed, retry, bucket = take_token(None, per_minute=60, now=0.0)
        assert allowed is True
        assert retry == 0.0
        assert bucket == (59.0, 0.0)

    def test_denies_after_exhaustion(self):
        bucket = None
        for _ in range(60):
            _, _, bucket = take_token(bucket, per_minute=60, now=0.0)

        allowed, retry, _ = take_token(bucket, per_minute=60, now=0.0)
        assert allowed is False
        assert retry > 0

    def test_refills_over_time(self):
        bucket = None
        for _ in range(60):
            _, _, bucket = take_token(bucket, per_minute=60, now=0.0)

        # one token per second at 60/min
        allowed, _, _ = take_token(bucket, per_minute=60, now=2.0)
        assert allowed is True

    def test_refill_is_capped(self):
        _, _, bucket = take_token((0.0, 0.0), per_minute=5, now=3600.0)
        assert bucket[0] == 4.0


class TestCredentialThrottle:

    def test_separate_clients_independent(self):
        limiter = CredentialThrottle(per_minute=3)
        for _ in range(3):
            limiter.allow("client-a", now=0.0)

        assert limiter.allow("client-a", now=0.0)[0] is False
        assert limiter.allow("client-b", now=0.0)[0] is True

    def test_zero_limit_always_allows(self):
        limiter = CredentialThrottle(per_minute=0)
        for _ in range(100):
            assert limiter.allow("any", now=0.0) == (True, 0.0)

    def test_reset_forgets_clients(self):
        limiter = CredentialThrottle(per_minute=1)
        limiter.allow("client-a", now=0.0)
        assert limiter.allow("client-a", now=0.0)[0] is False
        limiter.reset()
        assert limiter.allow("client-a", now=0.0)[0] is True


class TestThrottleMiddleware:

    def test_login_attempts_are_throttled(self, client):
        for _ in range(throttle.per_minute):
            resp = client.post("/login", json={"username": "nobody", "password": "whatever1"})
            assert resp.status_code == 401

        resp = client.post("/login", json={"username": "nobody", "password": "whatever1"})
        assert resp.status_code == 429
        assert resp.json()["error"] == "RATE_LIMITED"
        assert int(resp.headers["retry-after"]) >= 1

    def test_other_routes_are_not_throttled(self, client):
        for _ in range(throttle.per_minute + 5):
            assert client.get("/health").status_code == 200
