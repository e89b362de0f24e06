"""Menu schedule package.

Evaluates menu schedules (time windows, weekdays, date ranges, priorities) to
decide which menus a venue serves right now, and exposes them through a
Flask API backed by an in-memory catalog.
"""

from .schedule import (
    MenuSchedule,
    ScheduleType,
    filter_active_menus,
    get_active_schedule,
    is_date_in_range,
    is_day_included,
    is_menu_schedule_active,
    is_schedule_active,
    is_time_in_range,
)

__all__ = [
    "MenuSchedule",
    "ScheduleType",
    "filter_active_menus",
    "get_active_schedule",
    "is_date_in_range",
    "is_day_included",
    "is_menu_schedule_active",
    "is_schedule_active",
    "is_time_in_range",
]
