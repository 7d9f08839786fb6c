import logging
from fastapi import HTTPException
from app.core.redis import get_redis_or_none
from app.core.config import settings
from app.core.metrics import rate_limit_exceeded

logger = logging.getLogger(__name__)


async def check_rate_limit(identity: str, scope: str = "default"):
    """Fixed-window limit per identity; skipped while Redis is unavailable."""
    redis = get_redis_or_none()
    if redis is None:
        return
    key = f"rl:{scope}:{identity}"
    try:
        current = await redis.get(key)
        if current is None:
            await redis.set(key, "1", ex=settings.RATE_LIMIT_WINDOW)
            return
        count = int(current)
        if count < settings.RATE_LIMIT:
            await redis.incr(key)
            return
    except Exception as e:
        logger.warning(f"Rate limiter unavailable: {e}")
        return
    rate_limit_exceeded.labels(scope=scope).inc()
    raise HTTPException(status_code=429, detail="Demasiadas solicitudes, intente más tarde")
