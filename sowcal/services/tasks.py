"""
Task materialization.

Turns a plant's ScheduleWindow into TaskRecords with deterministic ids of the
form "{slug}-{type}-{YYYY-MM-DD}". Re-running with the same inputs yields the
same ids, so an upsert-merge store converges instead of duplicating.
Performs no I/O.
"""
import logging
from datetime import date, timedelta
from typing import Iterator, Optional

from sowcal.schemas.schedule import ScheduleWindow, TaskRecord, TaskType, WateringPreferences

logger = logging.getLogger(__name__)

_NOTES: dict[TaskType, str] = {
    TaskType.SEED_INDOORS: "Start {name} indoors",
    TaskType.DIRECT_SOW: "Direct sow {name}",
    TaskType.TRANSPLANT: "Transplant {name}",
    TaskType.HARVEST: "Estimated first harvest: {name}",
    TaskType.WATER: "Water {name}",
}


def task_id(plant_slug: str, task_type: TaskType, due_date: date) -> str:
    return f"{plant_slug}-{TaskType(task_type).value}-{due_date.isoformat()}"


def watering_dates(anchor: date, prefs: WateringPreferences, today: date) -> Iterator[date]:
    """
    Yield watering dates from `anchor` every cadence_days through
    anchor + duration_weeks * 7 (inclusive), skipping dates before `today`.
    The series stays anchored to the transplant date.
    """
    for offset in range(0, prefs.span_days + 1, prefs.cadence_days):
        due = anchor + timedelta(days=offset)
        if due < today:
            continue
        yield due


def _one_shot_dates(window: ScheduleWindow) -> list[tuple[TaskType, Optional[date]]]:
    return [
        (TaskType.SEED_INDOORS, window.start_indoors),
        (TaskType.DIRECT_SOW, window.direct_sow.start if window.direct_sow else None),
        (TaskType.TRANSPLANT, window.transplant.start if window.transplant else None),
        (TaskType.HARVEST, window.harvest_estimate),
    ]


def materialize_tasks(
    plant_slug: str,
    plant_name: str,
    window: ScheduleWindow,
    prefs: WateringPreferences,
    today: date,
    owner_id: str,
) -> list[TaskRecord]:
    def _record(task_type: TaskType, due: date) -> TaskRecord:
        return TaskRecord(
            id=task_id(plant_slug, task_type, due),
            type=task_type,
            due_date=due,
            notes=_NOTES[task_type].format(name=plant_name),
            owner_id=owner_id,
            plant_slug=plant_slug,
        )

    records = [_record(t, due) for t, due in _one_shot_dates(window) if due is not None]

    transplant_from = window.transplant.start if window.transplant else None
    if transplant_from is not None:
        records.extend(
            _record(TaskType.WATER, due) for due in watering_dates(transplant_from, prefs, today)
        )

    logger.debug("materialize_tasks: %s -> %d tasks", plant_slug, len(records))
    return records
