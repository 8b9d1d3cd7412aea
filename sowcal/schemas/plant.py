import math
import re
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

_OFFSET_FIELDS = (
    "start_offset_days",
    "direct_sow_from",
    "direct_sow_to",
    "transplant_from",
    "transplant_to",
    "days_to_maturity",
)


def _alias(snake: str, camel: str) -> AliasChoices:
    return AliasChoices(snake, camel)


class PlantOffsetProfile(BaseModel):
    """Per-plant offset rules, in days relative to the last frost date."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    slug: Optional[str] = None
    id: Optional[str] = None
    common_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("common_name", "commonName", "name")
    )
    variety: Optional[str] = None

    start_offset_days: Optional[int] = Field(
        default=None, validation_alias=_alias("start_offset_days", "startOffsetDays")
    )
    direct_sow_from: Optional[int] = Field(
        default=None, validation_alias=_alias("direct_sow_from", "directSowFrom")
    )
    direct_sow_to: Optional[int] = Field(
        default=None, validation_alias=_alias("direct_sow_to", "directSowTo")
    )
    transplant_from: Optional[int] = Field(
        default=None, validation_alias=_alias("transplant_from", "transplantFrom")
    )
    transplant_to: Optional[int] = Field(
        default=None, validation_alias=_alias("transplant_to", "transplantTo")
    )
    days_to_maturity: Optional[int] = Field(
        default=None, validation_alias=_alias("days_to_maturity", "daysToMaturity")
    )

    @field_validator("slug", "id", "common_name", "variety", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator(*_OFFSET_FIELDS, mode="before")
    @classmethod
    def number_or_null(cls, v: Any) -> Any:
        """Empty, non-numeric and non-finite catalog values mean "no offset"."""
        if v is None or isinstance(v, bool):
            return None
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return None
            try:
                v = float(v)
            except ValueError:
                return None
        if isinstance(v, float):
            if not math.isfinite(v):
                return None
            if v.is_integer():
                return int(v)
        return v

    @property
    def resolved_slug(self) -> str:
        """Stable key used in task ids: slug, then id, then hyphenated common name."""
        if self.slug:
            return self.slug
        if self.id:
            return self.id
        if self.common_name:
            return re.sub(r"\s+", "-", self.common_name.lower())
        return "plant"

    @property
    def display_name(self) -> str:
        return self.common_name or self.resolved_slug
