"""
Open-Meteo historical weather source.

Fetch daily minimum temperatures (°C) for a lat/lon and date range from the
Open-Meteo archive API. A partial or empty series is a normal answer, not an
error; only transport failures raise, translated into UpstreamTimeout or
UpstreamUnavailable so callers never mistake an outage for "no frost".
"""
import logging
import math
from datetime import date
from typing import Optional, Protocol

import httpx

from sowcal.core.config import settings
from sowcal.core.errors import UpstreamTimeout, UpstreamUnavailable
from sowcal.schemas.schedule import DailyMinTemperature

logger = logging.getLogger(__name__)


class HistoricalWeatherSource(Protocol):
    async def fetch_daily_min_temperatures(
        self, lat: float, lon: float, date_from: date, date_to: date
    ) -> list[DailyMinTemperature]:
        ...


def _as_reading(value) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def parse_archive_response(raw: dict) -> list[DailyMinTemperature]:
    """Map an Open-Meteo archive response to (date, min °C) pairs."""
    daily = raw.get("daily")
    if not isinstance(daily, dict):
        return []
    times = daily.get("time") or []
    mins = daily.get("temperature_2m_min") or []

    series = []
    for i, day in enumerate(times):
        try:
            parsed = date.fromisoformat(str(day))
        except ValueError:
            logger.debug("parse_archive_response: skipping unparsable date %r", day)
            continue
        value = mins[i] if i < len(mins) else None
        series.append(DailyMinTemperature(date=parsed, min_temp_c=_as_reading(value)))
    return series


class OpenMeteoArchiveSource:
    """HistoricalWeatherSource backed by archive-api.open-meteo.com."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._client = client
        self.base_url = base_url or settings.OPEN_METEO_ARCHIVE_BASE_URL
        self.timeout = timeout if timeout is not None else settings.WEATHER_TIMEOUT_SECONDS

    async def _get(self, url: str, params: dict) -> dict:
        if self._client is not None:
            resp = await self._client.get(url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.get(url, params=params)
            resp.raise_for_status()
            return resp.json()

    async def fetch_daily_min_temperatures(
        self, lat: float, lon: float, date_from: date, date_to: date
    ) -> list[DailyMinTemperature]:
        url = f"{self.base_url}/archive"
        params = {
            "latitude": lat,
            "longitude": lon,
            "start_date": date_from.isoformat(),
            "end_date": date_to.isoformat(),
            "daily": "temperature_2m_min",
            "temperature_unit": "celsius",
            "timezone": "auto",
        }
        try:
            raw = await self._get(url, params)
        except httpx.TimeoutException as exc:
            logger.warning("fetch_daily_min_temperatures: timeout for %.4f,%.4f: %s", lat, lon, exc)
            raise UpstreamTimeout(f"weather archive timed out after {self.timeout}s") from exc
        except httpx.HTTPError as exc:
            logger.warning("fetch_daily_min_temperatures: request failed for %.4f,%.4f: %s", lat, lon, exc)
            raise UpstreamUnavailable(f"weather archive request failed: {exc}") from exc
        except ValueError as exc:
            raise UpstreamUnavailable("weather archive returned invalid JSON") from exc
        if not isinstance(raw, dict):
            raise UpstreamUnavailable(f"weather archive returned {type(raw).__name__}, expected an object")

        series = parse_archive_response(raw)
        logger.debug(
            "fetch_daily_min_temperatures: %d readings for %s..%s", len(series), date_from, date_to
        )
        return series
