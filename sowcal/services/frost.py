"""
Last-frost estimation from historical daily minimum temperatures.

The estimate for a year is the LATEST date between Jan 1 and the end of the
spring window (Jun 30 by default) whose minimum was at or below freezing.
Missing readings neither set nor clear the running result.
"""
import logging
from datetime import date
from typing import Awaitable, Callable, Iterable, Optional

from sowcal.core.config import settings
from sowcal.core.errors import FrostNotFound
from sowcal.schemas.schedule import DailyMinTemperature, FrostLocation
from sowcal.services.weather import HistoricalWeatherSource

logger = logging.getLogger(__name__)


def spring_window(year: int) -> tuple[date, date]:
    return (
        date(year, 1, 1),
        date(year, settings.FROST_SEASON_END_MONTH, settings.FROST_SEASON_END_DAY),
    )


def find_last_frost(
    series: Iterable[DailyMinTemperature], threshold_c: Optional[float] = None
) -> Optional[date]:
    threshold = settings.FROST_THRESHOLD_C if threshold_c is None else threshold_c
    last: Optional[date] = None
    for reading in sorted(series, key=lambda r: r.date):
        if reading.min_temp_c is None:
            continue
        if reading.min_temp_c <= threshold:
            last = reading.date
    return last


async def estimate_last_frost(
    lat: float, lon: float, year: int, source: HistoricalWeatherSource
) -> Optional[date]:
    """Return the last frost date for `year`, or None when no qualifying reading exists."""
    date_from, date_to = spring_window(year)
    series = await source.fetch_daily_min_temperatures(lat, lon, date_from, date_to)
    # The source may over-deliver; only the spring window counts.
    in_window = [r for r in series if date_from <= r.date <= date_to]
    frost = find_last_frost(in_window)
    logger.debug("estimate_last_frost: %.4f,%.4f year=%d -> %s", lat, lon, year, frost)
    return frost


FrostEstimator = Callable[[float, float, int], Awaitable[Optional[date]]]


async def resolve_frost_date(
    location: FrostLocation,
    estimator: FrostEstimator,
    retry_years: Optional[int] = None,
) -> date:
    """
    Estimate the frost date for `location.year`, falling back one year at a time.

    Raises FrostNotFound once the target year and `retry_years` previous years
    have all come back empty. `estimator` is estimate_last_frost (or its
    cached counterpart) bound to a weather source; transport errors propagate.
    """
    retries = settings.FROST_RETRY_YEARS if retry_years is None else max(0, retry_years)
    for year in range(location.year, location.year - retries - 1, -1):
        frost = await estimator(location.latitude, location.longitude, year)
        if frost is not None:
            if year != location.year:
                logger.info(
                    "resolve_frost_date: no frost in %d, using %d estimate %s",
                    location.year, year, frost,
                )
            return frost

    raise FrostNotFound(
        f"no reading <= {settings.FROST_THRESHOLD_C}°C between "
        f"{location.year - retries} and {location.year}"
    )
