from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, ValidationInfo, field_validator

from sowcal.core.config import settings
from sowcal.core.errors import InvalidPreference


class TaskType(StrEnum):
    SEED_INDOORS = "seed_indoors"
    DIRECT_SOW = "direct_sow"
    TRANSPLANT = "transplant"
    HARVEST = "harvest"
    WATER = "water"


@dataclass(frozen=True)
class DateRange:
    start: Optional[date]
    end: Optional[date]


@dataclass(frozen=True)
class ScheduleWindow:
    start_indoors: Optional[date] = None
    direct_sow: Optional[DateRange] = None
    transplant: Optional[DateRange] = None
    harvest_estimate: Optional[date] = None


@dataclass(frozen=True)
class FrostLocation:
    latitude: float
    longitude: float
    year: int


@dataclass(frozen=True)
class DailyMinTemperature:
    date: date
    min_temp_c: Optional[float]


_USER_INPUT_DEFAULTS = {
    "cadence_days": "DEFAULT_WATERING_CADENCE_DAYS",
    "duration_weeks": "DEFAULT_WATERING_WEEKS",
}


def _describe(exc: ValidationError) -> str:
    return "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors())


class WateringPreferences(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    cadence_days: int
    duration_weeks: int

    def __init__(self, cadence_days: Any = None, duration_weeks: Any = None, **data: Any) -> None:
        try:
            super().__init__(cadence_days=cadence_days, duration_weeks=duration_weeks, **data)
        except ValidationError as exc:
            raise InvalidPreference(_describe(exc)) from exc

    @field_validator("cadence_days", "duration_weeks", mode="before")
    @classmethod
    def clamp_user_input(cls, v: Any, info: ValidationInfo) -> Any:
        """Planner input rule: unparsable or zero means default, then clamp to >= 1."""
        if not (info.context or {}).get("user_input"):
            return v
        default = getattr(settings, _USER_INPUT_DEFAULTS[info.field_name])
        try:
            value = int(float(str(v).strip()))
        except (TypeError, ValueError, OverflowError):
            return default
        return max(1, value or default)

    @field_validator("cadence_days", "duration_weeks")
    @classmethod
    def at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @property
    def span_days(self) -> int:
        return self.duration_weeks * 7

    @classmethod
    def from_user_input(cls, cadence: Any = None, weeks: Any = None) -> "WateringPreferences":
        """Build preferences from free-form planner input. Never raises."""
        return cls.model_validate(
            {"cadence_days": cadence, "duration_weeks": weeks},
            context={"user_input": True},
        )

    @classmethod
    def from_mapping(cls, data: dict) -> "WateringPreferences":
        """Strict construction from a stored settings mapping (camelCase or snake_case keys)."""
        cadence = data.get("cadence_days", data.get("cadenceDays", data.get("wateringCadenceDays")))
        weeks = data.get("duration_weeks", data.get("durationWeeks", data.get("wateringWeeks")))
        if cadence is None or weeks is None:
            raise InvalidPreference("both cadence and duration are required")
        return cls(cadence_days=cadence, duration_weeks=weeks)


@dataclass
class TaskRecord:
    id: str
    type: TaskType
    due_date: date
    notes: str
    owner_id: str
    plant_slug: str
    done: bool = False
    done_at: Optional[datetime] = None

    def upsert_fields(self) -> dict:
        """Merge payload: completion state is owned by the task list, never rewritten here."""
        return {
            "owner_id": self.owner_id,
            "plant_slug": self.plant_slug,
            "type": self.type.value,
            "due_date": self.due_date,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class PlantFailure:
    slug: str
    kind: str
    message: str


@dataclass
class ScheduleResult:
    frost_date: date
    created: int = 0
    per_plant: dict[str, list[TaskRecord]] = field(default_factory=dict)
    failures: list[PlantFailure] = field(default_factory=list)

    @property
    def partial_failure(self) -> bool:
        return bool(self.failures)
