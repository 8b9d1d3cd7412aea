"""
Planting windows relative to the last frost date.

Pure calendar-day arithmetic on civil dates: an offset of N days is
frost + N days regardless of time zone or DST. Absent offsets yield absent
outputs; nothing here raises for a well-typed profile.

Ranges are not checked for from <= to, and days_to_maturity is used as given.
Repairing bad catalog data belongs to catalog ingestion.
"""
from datetime import date, timedelta
from typing import Optional

from sowcal.schemas.plant import PlantOffsetProfile
from sowcal.schemas.schedule import DateRange, ScheduleWindow

# Planner timeline: 8 weeks before frost through 12 weeks after.
SPAN_BEFORE_DAYS = 56
SPAN_AFTER_DAYS = 84


def _shift(frost: date, offset: Optional[int]) -> Optional[date]:
    if offset is None:
        return None
    return frost + timedelta(days=offset)


def _range(frost: date, start: Optional[int], end: Optional[int]) -> Optional[DateRange]:
    if start is None and end is None:
        return None
    return DateRange(start=_shift(frost, start), end=_shift(frost, end))


def earliest_establishment(frost: date, profile: PlantOffsetProfile) -> Optional[date]:
    """Earlier of the direct-sow and transplant start dates, whichever exist."""
    candidates = [
        d
        for d in (_shift(frost, profile.direct_sow_from), _shift(frost, profile.transplant_from))
        if d is not None
    ]
    return min(candidates) if candidates else None


def compute_windows(frost: date, profile: PlantOffsetProfile) -> ScheduleWindow:
    """Shift every known offset from `frost`. A days_to_maturity of 0 still yields a harvest, on the establishment date."""
    established = earliest_establishment(frost, profile)
    harvest = None
    if established is not None and profile.days_to_maturity is not None:
        harvest = established + timedelta(days=profile.days_to_maturity)

    return ScheduleWindow(
        start_indoors=_shift(frost, profile.start_offset_days),
        direct_sow=_range(frost, profile.direct_sow_from, profile.direct_sow_to),
        transplant=_range(frost, profile.transplant_from, profile.transplant_to),
        harvest_estimate=harvest,
    )


def planner_span(frost: date) -> DateRange:
    return DateRange(
        start=frost - timedelta(days=SPAN_BEFORE_DAYS),
        end=frost + timedelta(days=SPAN_AFTER_DAYS),
    )
