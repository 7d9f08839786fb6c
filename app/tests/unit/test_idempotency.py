import pytest
from app.utils.idempotency import get_idempotent, set_idempotent


@pytest.mark.idempotency
async def test_idemp_flow(fake_redis):
    key = "pytest-idemp"
    assert await get_idempotent(key) is None
    await set_idempotent(key, {"ok": True})
    found = await get_idempotent(key)
    assert found == {"ok": True}
    assert "idemp:pytest-idemp" in fake_redis.store


@pytest.mark.idempotency
async def test_empty_key_is_ignored(fake_redis):
    await set_idempotent("", {"ok": True})
    assert await get_idempotent("") is None
    assert await get_idempotent(None) is None
    assert fake_redis.store == {}


@pytest.mark.idempotency
async def test_noop_without_redis():
    await set_idempotent("k", {"ok": True})
    assert await get_idempotent("k") is None


@pytest.mark.idempotency
async def test_redis_errors_are_treated_as_miss(monkeypatch):
    class BrokenRedis:
        async def get(self, key):
            raise ConnectionError("redis down")

        async def set(self, key, value, ex=None):
            raise ConnectionError("redis down")

    import app.core.redis as redis_module
    monkeypatch.setattr(redis_module, "redis", BrokenRedis())

    await set_idempotent("k", {"ok": True})
    assert await get_idempotent("k") is None
