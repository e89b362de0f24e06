# tests/test_service.py

import json
from datetime import datetime, timedelta, timezone

import pytest

from menu_schedule.errors import NotFoundError, ValidationError
from menu_schedule.schedule import MenuSchedule, ScheduleType
from menu_schedule.service import Menu, MenuCatalog, Venue

# Monday 2024-06-03 10:00 UTC, 12:00 in Berlin (CEST)
FIXED = datetime(2024, 6, 3, 10, 0, tzinfo=timezone.utc)

SEED = {
    "venues": [
        {"id": "v1", "slug": "harbor-bistro", "name": "Harbor Bistro", "timezone": "Europe/Berlin"},
        {"id": "v2", "slug": "Not A Slug"},
    ],
    "menus": [
        {"id": "lunch", "venueId": "v1", "name": "Lunch", "sortOrder": 1,
         "schedules": [{"id": "s-lunch", "scheduleType": "time_range", "startTime": "11:00", "endTime": "15:00"}]},
        {"id": "dinner", "venueId": "v1", "name": "Dinner", "sortOrder": 2,
         "schedules": [{"id": "s-dinner", "scheduleType": "time_range", "startTime": "18:00", "endTime": "23:00"}]},
        {"id": "drinks", "venueId": "v1", "name": "Drinks", "sortOrder": 3},
        {"id": "draft", "venueId": "v1", "name": "Draft", "status": "draft", "sortOrder": 0},
        {"id": "orphan", "venueId": "nope", "name": "Orphan"},
    ],
}


@pytest.fixture
def catalog():
    return MenuCatalog.from_dict(SEED, clock=lambda: FIXED)


def test_seed_skips_invalid_records(catalog):
    with pytest.raises(NotFoundError):
        catalog.get_venue_by_slug("Not A Slug")
    with pytest.raises(NotFoundError):
        catalog.get_menu("orphan")
    assert catalog.get_menu("lunch").schedules[0].menu_id == "lunch"


def test_load_missing_file_gives_empty_catalog(tmp_path):
    catalog = MenuCatalog.load(str(tmp_path / "missing.json"))
    with pytest.raises(NotFoundError):
        catalog.get_venue_by_slug("harbor-bistro")


def test_load_reads_json_file(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(SEED), encoding="utf-8")
    catalog = MenuCatalog.load(str(path), clock=lambda: FIXED)
    assert catalog.get_venue_by_slug("harbor-bistro").name == "Harbor Bistro"


def test_visible_menus_use_venue_clock(catalog):
    # 10:00 UTC is lunch time in Berlin
    names = [m.name for m in catalog.visible_menus("harbor-bistro")]
    assert names == ["Lunch", "Drinks"]


def test_visible_menus_at_explicit_instant(catalog):
    evening = datetime(2024, 6, 3, 19, 0)  # naive: venue-local
    assert [m.name for m in catalog.visible_menus("harbor-bistro", evening)] == ["Dinner", "Drinks"]
    # 17:30 UTC is 19:30 in Berlin
    aware = datetime(2024, 6, 3, 17, 30, tzinfo=timezone.utc)
    assert [m.name for m in catalog.visible_menus("harbor-bistro", aware)] == ["Dinner", "Drinks"]


def test_active_menu_is_first_visible(catalog):
    assert catalog.active_menu("harbor-bistro").id == "lunch"


def test_active_menu_not_found_when_nothing_visible():
    catalog = MenuCatalog(clock=lambda: FIXED)
    catalog.add_venue(Venue(id="v", slug="quiet"))
    catalog.add_menu(Menu(id="m", venue_id="v", schedules=[MenuSchedule(ScheduleType.ALWAYS, is_active=False)]))
    with pytest.raises(NotFoundError) as exc:
        catalog.active_menu("quiet")
    assert exc.value.message == "Menu not found"


def test_unknown_timezone_falls_back_to_utc():
    catalog = MenuCatalog(default_timezone="Mars/Olympus", clock=lambda: FIXED)
    venue = catalog.add_venue(Venue(id="v", slug="v", timezone="Nowhere/Land"))
    assert catalog.now_for_venue(venue).utcoffset() == timedelta(0)


def test_default_timezone_applies_to_venues_without_one():
    catalog = MenuCatalog(default_timezone="Asia/Tokyo", clock=lambda: FIXED)
    venue = catalog.add_venue(Venue(id="v", slug="v"))
    assert catalog.now_for_venue(venue).hour == 19


def test_schedule_crud(catalog):
    created = catalog.create_schedule("drinks", {"scheduleType": "day_of_week", "daysOfWeek": [5, 6], "priority": 2})
    assert created.id and created.menu_id == "drinks"
    assert created.created_at == FIXED.isoformat()
    assert catalog.get_schedule("drinks", created.id) == created

    # Monday: drinks menu now hidden
    assert [m.name for m in catalog.visible_menus("harbor-bistro")] == ["Lunch"]

    updated = catalog.update_schedule("drinks", created.id, {"daysOfWeek": None})
    assert updated.days_of_week is None
    assert updated.priority == 2
    assert [m.name for m in catalog.visible_menus("harbor-bistro")] == ["Lunch", "Drinks"]

    removed = catalog.delete_schedule("drinks", created.id)
    assert removed.id == created.id
    assert catalog.list_schedules("drinks") == []


def test_list_schedules_orders_by_ascending_priority(catalog):
    catalog.create_schedule("drinks", {"scheduleType": "always", "priority": 5})
    catalog.create_schedule("drinks", {"scheduleType": "always", "priority": 1})
    assert [s.priority for s in catalog.list_schedules("drinks")] == [1, 5]


def test_schedule_errors(catalog):
    with pytest.raises(NotFoundError):
        catalog.create_schedule("missing", {"scheduleType": "always"})
    with pytest.raises(NotFoundError):
        catalog.get_schedule("lunch", "missing")
    with pytest.raises(NotFoundError):
        catalog.update_schedule("lunch", "missing", {"priority": 1})
    with pytest.raises(NotFoundError):
        catalog.delete_schedule("lunch", "missing")
    with pytest.raises(ValidationError):
        catalog.create_schedule("lunch", {"scheduleType": "time_range", "startTime": "noon"})


def test_schedule_status_reports_winner(catalog):
    catalog.create_schedule("lunch", {"scheduleType": "always", "priority": -1})
    status = catalog.schedule_status("lunch")
    assert status["visible"] is True
    assert status["activeSchedule"]["id"] == "s-lunch"

    late = datetime(2024, 6, 3, 16, 0)
    status = catalog.schedule_status("lunch", late)
    assert status["visible"] is True
    assert status["activeSchedule"]["priority"] == -1

    status = catalog.schedule_status("dinner", late)
    assert status == {"menuId": "dinner", "at": status["at"], "visible": False, "activeSchedule": None}


def test_seed_priorities_are_normalised():
    seed = {
        "venues": [{"id": "v", "slug": "v"}],
        "menus": [{"id": "m", "venueId": "v", "schedules": [
            {"id": "five", "scheduleType": "always", "priority": "5"},
            {"id": "one", "scheduleType": "always", "priority": 1},
            {"id": "junk", "scheduleType": "always", "priority": "high"},
        ]}],
    }
    catalog = MenuCatalog.from_dict(seed, clock=lambda: FIXED)
    assert [s.id for s in catalog.list_schedules("m")] == ["junk", "one", "five"]
    assert catalog.schedule_status("m")["activeSchedule"]["id"] == "five"
