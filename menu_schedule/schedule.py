"""Menu schedule evaluation.

Decides whether a schedule (and transitively a menu) is active at a given
instant. Supports overnight time windows such as "22:00"-"02:00", weekday
filters (0=Sunday .. 6=Saturday), inclusive date ranges and priority-ordered
selection among several schedules.

Every function takes the current instant as `now`. When omitted it is read
from the system clock at call time, never inside the evaluation itself.
"""

from __future__ import annotations

import numbers  # Numeric priorities of any real type
import re  # Lenient integer parsing of clock components
from dataclasses import dataclass, replace  # Immutable schedule records
from datetime import date, datetime, time, timezone  # Time handling
from enum import Enum  # Closed set of schedule types
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

ClockTime = Union[str, time, None]
CalendarDate = Union[str, date, None]


class ScheduleType(str, Enum):
    """Kinds of availability rule a menu schedule can declare."""

    ALWAYS = "always"
    TIME_RANGE = "time_range"
    DAY_OF_WEEK = "day_of_week"
    DATE_RANGE = "date_range"

    @classmethod
    def coerce(cls, value: Any) -> Optional["ScheduleType"]:
        """Return the matching member, or None for unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


def _leading_int(s: Any) -> int:
    """Parse the leading integer of `s`, or 0 when there is none."""
    m = _LEADING_INT.match(str(s)) if s is not None else None
    return int(m.group(1)) if m else 0


def _parse_hhmm(s: Union[str, time]) -> int:
    """Parse an "HH:MM" string into minutes since midnight.

    Args:
      s: Time string in 24-hour format (e.g., "22:30"), or a `datetime.time`.
        Seconds ("HH:MM:SS") are ignored.

    Returns:
      Minutes since midnight. Missing or malformed components count as 0.
    """
    if isinstance(s, time):
        return s.hour * 60 + s.minute
    parts = str(s).split(":")
    h = _leading_int(parts[0]) if len(parts) > 0 else 0
    m = _leading_int(parts[1]) if len(parts) > 1 else 0
    return h * 60 + m


def _iso_date(d: Union[str, date]) -> str:
    """Return `d` in "YYYY-MM-DD" form."""
    if isinstance(d, datetime):
        return d.date().isoformat()
    if isinstance(d, date):
        return d.isoformat()
    return str(d)


def _now(now: Optional[datetime]) -> datetime:
    return now if now is not None else datetime.now()


def coerce_priority(value: Any) -> Union[int, float]:
    """Return `value` as a number for ranking; unusable values count as 0.

    Numeric strings such as "5" or "2.5" are parsed. Booleans are not
    priorities.
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, numbers.Real):
        return value
    if isinstance(value, str):
        for parse in (int, float):
            try:
                return parse(value.strip())
            except ValueError:
                continue
    return 0


@dataclass(frozen=True)
class MenuSchedule:
    """One availability rule attached to a menu.

    Only `schedule_type`, the time/day/date bounds, `priority` and `is_active`
    take part in evaluation. The remaining fields belong to storage.
    """

    schedule_type: Union[ScheduleType, str] = ScheduleType.ALWAYS
    start_time: ClockTime = None  # Inclusive "HH:MM"
    end_time: ClockTime = None  # Exclusive "HH:MM"
    days_of_week: Optional[Tuple[int, ...]] = None  # 0=Sunday .. 6=Saturday
    start_date: CalendarDate = None  # Inclusive "YYYY-MM-DD"
    end_date: CalendarDate = None  # Inclusive "YYYY-MM-DD"
    priority: Union[int, float] = 0
    is_active: bool = True
    id: Optional[str] = None
    menu_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    _FIELDS = {
        "scheduleType": "schedule_type",
        "startTime": "start_time",
        "endTime": "end_time",
        "daysOfWeek": "days_of_week",
        "startDate": "start_date",
        "endDate": "end_date",
        "priority": "priority",
        "isActive": "is_active",
        "id": "id",
        "menuId": "menu_id",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    }

    def __post_init__(self) -> None:
        # Day lists are stored as tuples so records stay hashable
        if isinstance(self.days_of_week, (list, set, frozenset)):
            object.__setattr__(self, "days_of_week", tuple(self.days_of_week))
        object.__setattr__(self, "priority", coerce_priority(self.priority))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MenuSchedule":
        """Build a schedule from a record using camelCase or snake_case keys.

        Unknown schedule types are kept verbatim so that they evaluate as
        inactive instead of failing here.
        """
        kwargs: Dict[str, Any] = {}
        for camel, snake in cls._FIELDS.items():
            if camel in data:
                kwargs[snake] = data[camel]
            elif snake in data:
                kwargs[snake] = data[snake]
        st = kwargs.get("schedule_type", ScheduleType.ALWAYS)
        kwargs["schedule_type"] = ScheduleType.coerce(st) or st
        if kwargs.get("is_active") is None:
            kwargs.pop("is_active", None)
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON representation with camelCase keys."""
        out: Dict[str, Any] = {}
        for camel, snake in self._FIELDS.items():
            value = getattr(self, snake)
            if isinstance(value, ScheduleType):
                value = value.value
            elif isinstance(value, time):
                value = value.strftime("%H:%M")
            elif isinstance(value, date):
                value = _iso_date(value)
            elif isinstance(value, tuple):
                value = list(value)
            out[camel] = value
        return out

    def with_changes(self, **changes: Any) -> "MenuSchedule":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


def is_time_in_range(now: datetime, start_time: ClockTime, end_time: ClockTime) -> bool:
    """Check whether the wall-clock time of `now` lies in [start, end).

    Args:
      now: Instant whose hour and minute are compared as given (no timezone
        conversion happens here).
      start_time: Inclusive window start, or None.
      end_time: Exclusive window end, or None.

    Returns:
      True if either bound is missing or `now` is inside the window. When the
      start is later than the end the window wraps past midnight. Equal
      bounds form an empty window that never matches.
    """
    if not start_time or not end_time:
        return True
    current = now.hour * 60 + now.minute
    start = _parse_hhmm(start_time)
    end = _parse_hhmm(end_time)
    if start > end:  # Wrap-around window (spans midnight)
        return current >= start or current < end
    return start <= current < end


def weekday_sunday_first(now: Union[date, datetime]) -> int:
    """Return the weekday of `now` with 0=Sunday .. 6=Saturday."""
    return now.isoweekday() % 7


def is_day_included(now: datetime, days_of_week: Optional[Iterable[int]]) -> bool:
    """Check whether the weekday of `now` is allowed.

    Days are numbered 0=Sunday .. 6=Saturday. An absent or empty list allows
    every day.
    """
    if not days_of_week:
        return True
    try:
        return weekday_sunday_first(now) in days_of_week
    except TypeError:  # Not a collection of days
        return False


def utc_date(now: datetime) -> str:
    """Return the UTC calendar date of `now` as "YYYY-MM-DD".

    A naive `now` is interpreted as system local time.
    """
    return now.astimezone(timezone.utc).date().isoformat()


def is_date_in_range(now: datetime, start_date: CalendarDate, end_date: CalendarDate) -> bool:
    """Check whether the UTC date of `now` lies within [start_date, end_date].

    Both bounds are inclusive and optional.
    """
    today = utc_date(now)
    if start_date and today < _iso_date(start_date):
        return False
    if end_date and today > _iso_date(end_date):
        return False
    return True


def _always(schedule: MenuSchedule, now: datetime) -> bool:
    return True


def _time_range(schedule: MenuSchedule, now: datetime) -> bool:
    # Time range with optional day filter
    return is_time_in_range(now, schedule.start_time, schedule.end_time) and is_day_included(
        now, schedule.days_of_week
    )


def _day_of_week(schedule: MenuSchedule, now: datetime) -> bool:
    # Active all day on the listed days
    return is_day_included(now, schedule.days_of_week)


def _date_range(schedule: MenuSchedule, now: datetime) -> bool:
    return is_date_in_range(now, schedule.start_date, schedule.end_date) and is_time_in_range(
        now, schedule.start_time, schedule.end_time
    )


ACTIVATION_RULES: Dict[ScheduleType, Callable[[MenuSchedule, datetime], bool]] = {
    ScheduleType.ALWAYS: _always,
    ScheduleType.TIME_RANGE: _time_range,
    ScheduleType.DAY_OF_WEEK: _day_of_week,
    ScheduleType.DATE_RANGE: _date_range,
}


def _as_schedule(schedule: Any) -> Optional[MenuSchedule]:
    """Return `schedule` as a `MenuSchedule`; records given as mappings are converted."""
    if isinstance(schedule, MenuSchedule):
        return schedule
    if isinstance(schedule, Mapping):
        return MenuSchedule.from_dict(schedule)
    return None


def is_schedule_active(schedule: Union[MenuSchedule, Mapping[str, Any]], now: Optional[datetime] = None) -> bool:
    """Check if a schedule is active at `now`.

    Args:
      schedule: The schedule to evaluate, or its record as a mapping.
      now: Instant to evaluate at; defaults to the system clock.

    Returns:
      False when the schedule is switched off, its type is unknown or it is
      not a schedule at all, otherwise the result of the rule for its type.
    """
    schedule = _as_schedule(schedule)
    if schedule is None or not schedule.is_active:
        return False
    rule = ACTIVATION_RULES.get(ScheduleType.coerce(schedule.schedule_type))
    if rule is None:
        return False  # Unknown types never activate
    return rule(schedule, _now(now))


def schedule_priority(schedule: Any) -> Union[int, float]:
    """Ranking key of a schedule or schedule record; 0 when it has none."""
    schedule = _as_schedule(schedule)
    return schedule.priority if schedule is not None else 0


def get_active_schedule(
    schedules: Optional[Sequence[MenuSchedule]], now: Optional[datetime] = None
) -> Optional[MenuSchedule]:
    """Return the highest-priority active schedule, or None.

    Schedules with equal priority keep their input order. The input sequence
    is not modified.
    """
    if not schedules:
        return None
    now = _now(now)
    ranked = sorted(schedules, key=schedule_priority, reverse=True)  # sorted() is stable
    return next((s for s in ranked if is_schedule_active(s, now)), None)


def is_menu_schedule_active(
    schedules: Optional[Sequence[MenuSchedule]], now: Optional[datetime] = None
) -> bool:
    """Check if a menu should be visible given its schedules.

    A menu with no schedules is always visible. Otherwise at least one of its
    schedules must be active.
    """
    if not schedules:
        return True
    now = _now(now)
    return any(is_schedule_active(s, now) for s in schedules)


def _menu_schedules(menu: Any) -> Sequence[MenuSchedule]:
    if isinstance(menu, Mapping):
        return menu.get("schedules") or []
    return getattr(menu, "schedules", None) or []


def filter_active_menus(menus: Iterable[Any], now: Optional[datetime] = None) -> List[Any]:
    """Return the menus that are visible at `now`, preserving order.

    Each menu may be a mapping or an object; its `schedules` entry defaults to
    an empty list when absent.
    """
    now = _now(now)
    return [m for m in menus if is_menu_schedule_active(_menu_schedules(m), now)]
