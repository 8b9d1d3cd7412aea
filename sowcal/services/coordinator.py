"""
Schedule generation for a batch of plants.

Resolves one frost date, then for each plant computes its windows,
materializes tasks and upserts them into the record store. A bad profile or a
failed write for one plant is recorded on the result and the batch moves on.

Safe to run concurrently for the same owner and safe to re-run after partial
success: task ids are deterministic and the store merges, so writes converge.
"""
import asyncio
import logging
from datetime import date, datetime
from functools import partial
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from pydantic import ValidationError

from sowcal.core.config import settings
from sowcal.core.errors import FrostNotFound, ScheduleError, UpstreamTimeout
from sowcal.schemas.plant import PlantOffsetProfile
from sowcal.schemas.schedule import (
    FrostLocation,
    PlantFailure,
    ScheduleResult,
    TaskRecord,
    WateringPreferences,
)
from sowcal.services.frost import FrostEstimator, estimate_last_frost, resolve_frost_date
from sowcal.services.frost_cache import get_cached_last_frost
from sowcal.services.store import RecordStore
from sowcal.services.tasks import materialize_tasks
from sowcal.services.weather import HistoricalWeatherSource, OpenMeteoArchiveSource
from sowcal.services.windows import compute_windows

logger = logging.getLogger(__name__)

Clock = Callable[[], date]
FrostInput = Union[date, FrostLocation]
PlantInput = Union[PlantOffsetProfile, Mapping[str, Any]]


def build_estimator(
    source: HistoricalWeatherSource, redis: Any = None, timeout: Optional[float] = None
) -> FrostEstimator:
    """Bind a frost estimator to `source`, through the Redis cache when given, bounded by `timeout` seconds per year."""
    if redis is not None:
        estimator = partial(get_cached_last_frost, source=source, redis=redis)
    else:
        estimator = partial(estimate_last_frost, source=source)
    if timeout is None:
        return estimator

    async def _bounded(lat: float, lon: float, year: int) -> Optional[date]:
        try:
            return await asyncio.wait_for(estimator(lat, lon, year), timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise UpstreamTimeout(f"frost estimate for {year} timed out after {timeout}s") from exc

    return _bounded


def coerce_preferences(prefs: Union[WateringPreferences, Mapping[str, Any]]) -> WateringPreferences:
    if isinstance(prefs, WateringPreferences):
        return prefs
    return WateringPreferences.from_mapping(dict(prefs))


async def resolve_frost(
    frost_input: FrostInput,
    *,
    weather: Optional[HistoricalWeatherSource] = None,
    redis: Any = None,
    default_frost: Optional[date] = None,
    retry_years: Optional[int] = None,
    weather_timeout: Optional[float] = None,
) -> date:
    """
    A supplied date is used as is. A location is estimated with the
    previous-year fallback; when that finds nothing, `default_frost` is used if
    given, otherwise FrostNotFound reaches the caller. Each weather lookup is
    bounded by `weather_timeout` (WEATHER_TIMEOUT_SECONDS by default) and
    raises UpstreamTimeout when exceeded.
    """
    if isinstance(frost_input, datetime):
        return frost_input.date()
    if isinstance(frost_input, date):
        return frost_input

    timeout = settings.WEATHER_TIMEOUT_SECONDS if weather_timeout is None else weather_timeout
    estimator = build_estimator(weather or OpenMeteoArchiveSource(), redis, timeout)
    try:
        return await resolve_frost_date(frost_input, estimator, retry_years)
    except FrostNotFound:
        if default_frost is None:
            raise
        logger.warning(
            "resolve_frost: no frost found near %.4f,%.4f — using default %s",
            frost_input.latitude, frost_input.longitude, default_frost,
        )
        return default_frost


def _slug_hint(raw: PlantInput) -> str:
    if isinstance(raw, PlantOffsetProfile):
        return raw.resolved_slug
    for key in ("slug", "id", "commonName", "common_name", "name"):
        value = raw.get(key) if isinstance(raw, Mapping) else None
        if value:
            return str(value)
    return "plant"


async def _persist(
    store: RecordStore,
    collection: str,
    records: list[TaskRecord],
    timeout: float,
    result: ScheduleResult,
) -> None:
    for record in records:
        try:
            await asyncio.wait_for(
                store.upsert_merge(collection, record.id, record.upsert_fields()),
                timeout=timeout,
            )
        except asyncio.TimeoutError as exc:
            raise UpstreamTimeout(f"store write {record.id} timed out after {timeout}s") from exc
        result.created += 1


async def generate_schedule(
    frost_input: FrostInput,
    plants: Iterable[PlantInput],
    prefs: Union[WateringPreferences, Mapping[str, Any]],
    owner_id: str,
    *,
    store: RecordStore,
    clock: Clock,
    weather: Optional[HistoricalWeatherSource] = None,
    redis: Any = None,
    default_frost: Optional[date] = None,
    retry_years: Optional[int] = None,
    weather_timeout: Optional[float] = None,
    store_timeout: Optional[float] = None,
    collection: Optional[str] = None,
) -> ScheduleResult:
    """
    Generate and persist tasks for every plant against a single frost date.

    Raises InvalidPreference before any work when prefs are out of range, and
    FrostNotFound / UpstreamTimeout / UpstreamUnavailable when the frost date
    cannot be resolved. Per-plant problems land in `result.failures`.
    `result.created` counts records written in this run, including ones that
    already existed in the store.
    """
    watering = coerce_preferences(prefs)
    frost = await resolve_frost(
        frost_input,
        weather=weather,
        redis=redis,
        default_frost=default_frost,
        retry_years=retry_years,
        weather_timeout=weather_timeout,
    )
    today = clock()
    timeout = settings.STORE_TIMEOUT_SECONDS if store_timeout is None else store_timeout
    collection = collection or settings.TASKS_COLLECTION

    logger.info("generate_schedule: owner=%s frost=%s today=%s", owner_id, frost, today)
    result = ScheduleResult(frost_date=frost)

    for raw in plants:
        slug = _slug_hint(raw)
        try:
            profile = (
                raw if isinstance(raw, PlantOffsetProfile) else PlantOffsetProfile.model_validate(raw)
            )
            slug = profile.resolved_slug
            window = compute_windows(frost, profile)
            records = materialize_tasks(
                slug, profile.display_name, window, watering, today, owner_id
            )
            await _persist(store, collection, records, timeout, result)
            result.per_plant.setdefault(slug, []).extend(records)
        except ValidationError as exc:
            logger.warning("generate_schedule: invalid profile %s: %s", slug, exc)
            result.failures.append(PlantFailure(slug, "invalid_profile", str(exc)))
        except ScheduleError as exc:
            logger.warning("generate_schedule: %s failed for %s: %s", exc.kind, slug, exc.message)
            result.failures.append(PlantFailure(slug, exc.kind, exc.message))
        except Exception as exc:
            logger.exception("generate_schedule: failed for %s: %s", slug, exc)
            result.failures.append(PlantFailure(slug, "unexpected", str(exc)))

    logger.info(
        "generate_schedule: complete — %d tasks for %d plants, %d failures",
        result.created, len(result.per_plant), len(result.failures),
    )
    return result
