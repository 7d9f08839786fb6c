"""Best-effort JSON cache on Redis; every failure degrades to a miss."""
import json
import logging
from typing import Any, Optional

from app.core.redis import get_redis_or_none
from app.core.metrics import cache_hits, cache_misses

logger = logging.getLogger(__name__)


async def cache_get_json(key: str, metric_label: str) -> Optional[Any]:
    redis = get_redis_or_none()
    if redis is None:
        return None
    try:
        cached = await redis.get(key)
    except Exception as e:
        logger.warning(f"Cache retrieval failed: {e}")
        return None
    if cached is None:
        cache_misses.labels(cache_key=metric_label).inc()
        return None
    cache_hits.labels(cache_key=metric_label).inc()
    return json.loads(cached)


async def cache_set_json(key: str, value: Any, ttl: int) -> None:
    redis = get_redis_or_none()
    if redis is None:
        return
    try:
        await redis.set(key, json.dumps(value, default=str), ex=ttl)
    except Exception as e:
        logger.warning(f"Cache write failed: {e}")
