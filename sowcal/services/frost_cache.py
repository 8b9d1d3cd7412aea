"""
Redis cache for last-frost estimates.

Historical weather for a past spring does not change, so estimates are cached
for FROST_CACHE_TTL_SECONDS (30 days). A "no frost" answer is cached as well
so repeated misses do not refetch the archive.
"""
import json
import logging
from datetime import date
from typing import Any, Optional

from sowcal.core.config import settings
from sowcal.services.frost import estimate_last_frost
from sowcal.services.weather import HistoricalWeatherSource

logger = logging.getLogger(__name__)


def _cache_key(lat: float, lon: float, year: int) -> str:
    return f"last_frost:{lat:.4f}:{lon:.4f}:{year}"


async def get_cached_last_frost(
    lat: float,
    lon: float,
    year: int,
    source: HistoricalWeatherSource,
    redis: Any,
) -> Optional[date]:
    """
    Return the last frost date for the location/year, or None.

    Checks Redis first. On miss: estimates from the weather source and caches
    the result (including None).
    """
    key = _cache_key(lat, lon, year)

    cached = await redis.get(key)
    if cached is not None:
        logger.debug("last frost cache hit: %s", key)
        raw_str = cached.decode("utf-8") if isinstance(cached, bytes) else cached
        value = json.loads(raw_str)["last_frost"]
        return date.fromisoformat(value) if value else None

    logger.debug("last frost cache miss: %s — estimating", key)
    frost = await estimate_last_frost(lat, lon, year, source)

    payload = {"last_frost": frost.isoformat() if frost else None}
    await redis.setex(key, settings.FROST_CACHE_TTL_SECONDS, json.dumps(payload))
    return frost

