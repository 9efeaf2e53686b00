import hashlib
import json
import logging
from functools import wraps

from src.fuel_ledger.cache.redis import redis_manager
from src.fuel_ledger.config import get_settings
from src.fuel_ledger.refuelings.schemas import RefuelingFilter
from src.fuel_ledger.statistics.schemas import SummaryView

logger = logging.getLogger(__name__)

SUMMARY_KEY_PREFIX = "summary"
FLEET_SCOPE = "fleet"


def summary_cache_key(filters: RefuelingFilter) -> str:
    scope = filters.vehicle_id or FLEET_SCOPE
    digest = hashlib.md5(
        json.dumps(filters.model_dump(mode="json"), sort_keys=True).encode()
    ).hexdigest()
    return f"{SUMMARY_KEY_PREFIX}:{scope}:{digest}"


def cache_summary(ttl: int | None = None):
    """Cache a ``(self, db_session, filters) -> SummaryView`` coroutine in Redis.

    Redis failures fall through to the wrapped call.
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(self, db_session, filters: RefuelingFilter):
            client = redis_manager.redis_client
            if client is None:
                logger.debug("Redis client is not initialized, summary not cached")
                return await func(self, db_session, filters)

            cache_key = summary_cache_key(filters)
            try:
                cached_result = await client.get(cache_key)
                if cached_result:
                    logger.info(f"Cache hit for {cache_key}")
                    return SummaryView.model_validate_json(cached_result)
            except Exception as e:
                logger.error(f"Failed to get from Redis: {str(e)}")

            result = await func(self, db_session, filters)
            expiry = ttl if ttl is not None else get_settings().SUMMARY_CACHE_TTL
            if expiry > 0:
                try:
                    await client.setex(cache_key, expiry, result.model_dump_json())
                    logger.info(f"Cached summary for {cache_key}")
                except Exception as e:
                    logger.error(f"Failed to cache to Redis: {str(e)}")
            return result

        return wrapper

    return decorator


async def invalidate_vehicle_summaries(vehicle_id: str) -> int:
    """Drop cached summaries of one vehicle and every fleet-wide summary.

    Returns the number of keys removed.
    """
    client = redis_manager.redis_client
    if client is None:
        return 0

    removed = 0
    try:
        for scope in (vehicle_id, FLEET_SCOPE):
            keys = [
                key
                async for key in client.scan_iter(
                    match=f"{SUMMARY_KEY_PREFIX}:{scope}:*", count=500
                )
            ]
            if keys:
                removed += await client.delete(*keys)
        logger.info(f"Invalidated {removed} cached summaries for vehicle {vehicle_id}")
    except Exception as e:
        # Cached entries still expire after SUMMARY_CACHE_TTL
        logger.error(f"Failed to invalidate summaries for {vehicle_id}: {str(e)}")
    return removed
