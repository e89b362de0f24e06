"""Validation of schedule create/update payloads.

Payloads use the camelCase keys of the public API ("scheduleType",
"startTime", ...). Snake_case names are accepted too.
"""

from __future__ import annotations

import re
from typing import Annotated, Any, Dict, List, Mapping, Optional, Type, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import ValidationError
from .schedule import ScheduleType

HHMM = r"^\d{2}:\d{2}$"
YMD = r"^\d{4}-\d{2}-\d{2}$"

Weekday = Annotated[int, Field(ge=0, le=6)]  # 0=Sunday .. 6=Saturday

M = TypeVar("M", bound=BaseModel)


class _SchedulePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_fields(self) -> Dict[str, Any]:
        """Return the explicitly supplied fields keyed by `MenuSchedule` name."""
        return self.model_dump(exclude_unset=True)


class ScheduleCreate(_SchedulePayload):
    """Body of a schedule creation request."""

    schedule_type: ScheduleType = Field(alias="scheduleType")
    start_time: Optional[str] = Field(default=None, alias="startTime", pattern=HHMM)
    end_time: Optional[str] = Field(default=None, alias="endTime", pattern=HHMM)
    days_of_week: Optional[List[Weekday]] = Field(default=None, alias="daysOfWeek")
    start_date: Optional[str] = Field(default=None, alias="startDate", pattern=YMD)
    end_date: Optional[str] = Field(default=None, alias="endDate", pattern=YMD)
    priority: int = 0
    is_active: bool = Field(default=True, alias="isActive")

    def to_fields(self) -> Dict[str, Any]:
        # Defaults apply on creation
        return self.model_dump()


class ScheduleUpdate(_SchedulePayload):
    """Body of a partial schedule update. Only supplied keys change.

    Optional bounds may be sent as null to clear them.
    """

    schedule_type: Optional[ScheduleType] = Field(default=None, alias="scheduleType")
    start_time: Optional[str] = Field(default=None, alias="startTime", pattern=HHMM)
    end_time: Optional[str] = Field(default=None, alias="endTime", pattern=HHMM)
    days_of_week: Optional[List[Weekday]] = Field(default=None, alias="daysOfWeek")
    start_date: Optional[str] = Field(default=None, alias="startDate", pattern=YMD)
    end_date: Optional[str] = Field(default=None, alias="endDate", pattern=YMD)
    priority: Optional[int] = None
    is_active: Optional[bool] = Field(default=None, alias="isActive")

    @field_validator("schedule_type", "priority", "is_active")
    @classmethod
    def _not_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("must not be null")
        return v


def _field_path(loc: Any) -> str:
    return ".".join(str(p) for p in loc) or "_root"


def validate(model: Type[M], data: Any) -> M:
    """Validate `data` against `model`.

    Raises:
      ValidationError: with `details` mapping each failing field path to its
        messages.
    """
    if not isinstance(data, Mapping):
        raise ValidationError({"_root": ["Expected a JSON object"]})
    try:
        return model.model_validate(dict(data))
    except pydantic.ValidationError as exc:
        details: Dict[str, List[str]] = {}
        for err in exc.errors():
            details.setdefault(_field_path(err.get("loc", ())), []).append(err.get("msg", "Invalid value"))
        raise ValidationError(details) from exc


_SLUG = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def is_valid_slug(slug: str) -> bool:
    """Return True if `slug` is a lowercase, dash-separated venue slug."""
    return bool(_SLUG.match(slug or ""))
