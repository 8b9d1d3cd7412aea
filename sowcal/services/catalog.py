"""
Plant catalog loading.

Reads a plant CSV (header row, camelCase columns such as startOffsetDays,
directSowFrom, transplantFrom, daysToMaturity) into PlantOffsetProfiles.
Numeric columns follow the import rule "number or null". Rows that still fail
validation are logged and skipped.
"""
import csv
import logging
from pathlib import Path
from typing import Iterable, Union

from pydantic import ValidationError

from sowcal.schemas.plant import PlantOffsetProfile

logger = logging.getLogger(__name__)


def parse_profiles(rows: Iterable[dict]) -> list[PlantOffsetProfile]:
    profiles: list[PlantOffsetProfile] = []
    for line_no, row in enumerate(rows, start=2):
        try:
            profiles.append(PlantOffsetProfile.model_validate(row))
        except ValidationError as exc:
            logger.warning("parse_profiles: skipping row %d (%s): %s", line_no, row.get("slug") or row.get("name"), exc)
    return profiles


def load_profiles_csv(path: Union[str, Path]) -> list[PlantOffsetProfile]:
    with open(path, newline="", encoding="utf-8") as fh:
        profiles = parse_profiles(csv.DictReader(fh))
    logger.info("load_profiles_csv: %d profiles from %s", len(profiles), path)
    return profiles
