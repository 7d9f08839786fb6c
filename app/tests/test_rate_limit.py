"""
Tests for the fixed-window rate limiter
"""

import pytest
from fastapi import HTTPException

from app.core.config import settings
from app.core.rate_limit import check_rate_limit


@pytest.mark.rate_limit
class TestRateLimiting:

    def test_rate_limit_config(self):
        assert settings.RATE_LIMIT > 0
        assert settings.RATE_LIMIT_WINDOW == 600  # 10 minutes

    async def test_skipped_without_redis(self):
        for _ in range(settings.RATE_LIMIT + 5):
            await check_rate_limit("10.0.0.1", scope="mail")

    async def test_blocks_after_limit(self, fake_redis, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT", 3)

        for _ in range(3):
            await check_rate_limit("10.0.0.1", scope="mail")

        with pytest.raises(HTTPException) as exc:
            await check_rate_limit("10.0.0.1", scope="mail")
        assert exc.value.status_code == 429

    async def test_limits_are_per_identity_and_scope(self, fake_redis, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT", 1)

        await check_rate_limit("10.0.0.1", scope="mail")
        await check_rate_limit("10.0.0.2", scope="mail")
        await check_rate_limit("10.0.0.1", scope="quotes")

        assert set(fake_redis.store) == {"rl:mail:10.0.0.1", "rl:mail:10.0.0.2", "rl:quotes:10.0.0.1"}

    async def test_redis_errors_do_not_block(self, monkeypatch):
        class BrokenRedis:
            async def get(self, key):
                raise ConnectionError("redis down")

        import app.core.redis as redis_module
        monkeypatch.setattr(redis_module, "redis", BrokenRedis())

        await check_rate_limit("10.0.0.1")


@pytest.mark.rate_limit
class TestRateLimitedEndpoints:

    async def test_login_attempts_are_limited(self, test_client, fake_redis, colaborador_user, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT", 2)
        credentials = {"email": "colab@trustcorreduria.com", "password": "wrongpass"}

        assert (await test_client.post("/api/auth/login", json=credentials)).status_code == 401
        assert (await test_client.post("/api/auth/login", json=credentials)).status_code == 401
        response = await test_client.post("/api/auth/login", json=credentials)
        assert response.status_code == 429
