"""In-memory catalog of venues, menus and menu schedules.

The catalog is the caller of the schedule evaluator: it fetches a menu's
schedules, resolves "now" on the venue's clock and asks `schedule` which menus
are visible.
"""

import json
import os
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any, Callable, Dict, List, Mapping, Optional

from dateutil import tz

from .config import Config
from .errors import NotFoundError
from .schedule import (
    MenuSchedule,
    filter_active_menus,
    get_active_schedule,
    is_menu_schedule_active,
    schedule_priority,
)
from .validation import ScheduleCreate, ScheduleUpdate, is_valid_slug, validate

PUBLISHED = "published"


@dataclass
class Venue:
    """A restaurant location whose public page lists its visible menus."""
    id: str
    slug: str
    name: str = ""
    timezone: Optional[str] = None  # IANA name, e.g. "Europe/Berlin"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "slug": self.slug, "name": self.name, "timezone": self.timezone}


@dataclass
class Menu:
    """A menu of a venue together with the schedules that gate its visibility."""
    id: str
    venue_id: str
    name: str = ""
    status: str = PUBLISHED  # draft|published|archived
    sort_order: int = 0
    sections: List[Dict[str, Any]] = field(default_factory=list)
    schedules: List[MenuSchedule] = field(default_factory=list)

    def to_dict(self, include_schedules: bool = True) -> Dict[str, Any]:
        """Return the JSON representation; public responses omit schedules."""
        out: Dict[str, Any] = {
            "id": self.id,
            "venueId": self.venue_id,
            "name": self.name,
            "status": self.status,
            "sortOrder": self.sort_order,
            "sections": self.sections,
        }
        if include_schedules:
            out["schedules"] = [s.to_dict() for s in self.schedules]
        return out


def _utcnow() -> datetime:
    return datetime.now(tz.UTC)


class MenuCatalog:
    """Holds venues and menus and answers schedule questions about them.

    Schedule lists are replaced, never mutated in place, so evaluation can run
    on the list it read without holding the lock.
    """

    def __init__(self, default_timezone: Optional[str] = None, clock: Optional[Callable[[], datetime]] = None) -> None:
        """Create an empty catalog.

        Args:
          default_timezone: IANA zone for venues without one; defaults to
            `Config.DEFAULT_TIMEZONE`.
          clock: Returns the current aware instant; defaults to the system clock.
        """
        self.default_timezone = default_timezone or Config.DEFAULT_TIMEZONE
        self._clock = clock or _utcnow
        self._lock = threading.Lock()
        self._venues: Dict[str, Venue] = {}
        self._menus: Dict[str, Menu] = {}

    # Loading
    @classmethod
    def load(cls, path: str, **kwargs: Any) -> "MenuCatalog":
        """Create a catalog seeded from the JSON file at `path`.

        A missing file yields an empty catalog.
        """
        if not os.path.isfile(path):
            print(f"[menusched] No catalog at {path}; starting empty", flush=True)
            return cls(**kwargs)
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        catalog = cls.from_dict(data, **kwargs)
        print(
            "[menusched] Loaded %d venues and %d menus from %s" % (len(catalog._venues), len(catalog._menus), path),
            flush=True,
        )
        return catalog

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], **kwargs: Any) -> "MenuCatalog":
        """Create a catalog from `{"venues": [...], "menus": [...]}`."""
        catalog = cls(**kwargs)
        for v in data.get("venues") or []:
            slug = str(v.get("slug") or "")
            if not is_valid_slug(slug):
                print(f"[menusched] Skipping venue with invalid slug {slug!r}", flush=True)
                continue
            catalog.add_venue(Venue(
                id=str(v.get("id") or uuid.uuid4()),
                slug=slug,
                name=v.get("name", ""),
                timezone=v.get("timezone"),
            ))
        for m in data.get("menus") or []:
            venue_id = m.get("venueId", m.get("venue_id"))
            if venue_id not in catalog._venues:
                print(f"[menusched] Skipping menu {m.get('id')!r}: unknown venue {venue_id!r}", flush=True)
                continue
            catalog.add_menu(Menu(
                id=str(m.get("id") or uuid.uuid4()),
                venue_id=venue_id,
                name=m.get("name", ""),
                status=m.get("status", PUBLISHED),
                sort_order=int(m.get("sortOrder", m.get("sort_order", 0)) or 0),
                sections=list(m.get("sections") or []),
                schedules=[MenuSchedule.from_dict(s) for s in m.get("schedules") or []],
            ))
        return catalog

    # Venues and menus
    def add_venue(self, venue: Venue) -> Venue:
        with self._lock:
            self._venues[venue.id] = venue
        return venue

    def add_menu(self, menu: Menu) -> Menu:
        menu.schedules = [s if s.menu_id else s.with_changes(menu_id=menu.id) for s in menu.schedules]
        with self._lock:
            self._menus[menu.id] = menu
        return menu

    def get_venue_by_slug(self, slug: str) -> Venue:
        with self._lock:
            for venue in self._venues.values():
                if venue.slug == slug:
                    return venue
        raise NotFoundError("Venue")

    def get_menu(self, menu_id: str) -> Menu:
        with self._lock:
            menu = self._menus.get(menu_id)
        if menu is None:
            raise NotFoundError("Menu")
        return menu

    # Schedules
    def list_schedules(self, menu_id: str) -> List[MenuSchedule]:
        """Return the menu's schedules ordered by ascending priority."""
        return sorted(self.get_menu(menu_id).schedules, key=schedule_priority)

    def get_schedule(self, menu_id: str, schedule_id: str) -> MenuSchedule:
        for s in self.get_menu(menu_id).schedules:
            if s.id == schedule_id:
                return s
        raise NotFoundError("Schedule")

    def create_schedule(self, menu_id: str, payload: Mapping[str, Any]) -> MenuSchedule:
        """Validate `payload` and attach a new schedule to the menu."""
        body = validate(ScheduleCreate, payload)
        menu = self.get_menu(menu_id)
        stamp = self._clock().isoformat()
        schedule = MenuSchedule(id=str(uuid.uuid4()), menu_id=menu_id, created_at=stamp, updated_at=stamp, **body.to_fields())
        with self._lock:
            menu.schedules = menu.schedules + [schedule]
        print(f"[menusched] Created {schedule.schedule_type.value} schedule {schedule.id} on menu {menu_id}", flush=True)
        return schedule

    def update_schedule(self, menu_id: str, schedule_id: str, payload: Mapping[str, Any]) -> MenuSchedule:
        """Apply the supplied fields of `payload` to an existing schedule."""
        body = validate(ScheduleUpdate, payload)
        menu = self.get_menu(menu_id)
        with self._lock:
            for i, s in enumerate(menu.schedules):
                if s.id == schedule_id:
                    updated = s.with_changes(updated_at=self._clock().isoformat(), **body.to_fields())
                    menu.schedules = menu.schedules[:i] + [updated] + menu.schedules[i + 1:]
                    break
            else:
                raise NotFoundError("Schedule")
        print(f"[menusched] Updated schedule {schedule_id} on menu {menu_id}", flush=True)
        return updated

    def delete_schedule(self, menu_id: str, schedule_id: str) -> MenuSchedule:
        menu = self.get_menu(menu_id)
        with self._lock:
            kept = [s for s in menu.schedules if s.id != schedule_id]
            if len(kept) == len(menu.schedules):
                raise NotFoundError("Schedule")
            removed = next(s for s in menu.schedules if s.id == schedule_id)
            menu.schedules = kept
        print(f"[menusched] Deleted schedule {schedule_id} from menu {menu_id}", flush=True)
        return removed

    # Evaluation
    def venue_tz(self, venue: Venue) -> tzinfo:
        """Return the venue's timezone, falling back to the default, then UTC."""
        return tz.gettz(venue.timezone or self.default_timezone) or tz.UTC

    def now_for_venue(self, venue: Venue, now: Optional[datetime] = None) -> datetime:
        """Return `now` (default: the clock) on the venue's wall clock.

        A naive `now` is taken to already be venue-local time.
        """
        zone = self.venue_tz(venue)
        if now is None:
            return self._clock().astimezone(zone)
        if now.tzinfo is None:
            return now.replace(tzinfo=zone)
        return now.astimezone(zone)

    def _venue_of(self, menu: Menu) -> Venue:
        with self._lock:
            venue = self._venues.get(menu.venue_id)
        if venue is None:
            raise NotFoundError("Venue")
        return venue

    def visible_menus(self, slug: str, now: Optional[datetime] = None) -> List[Menu]:
        """Return the venue's published menus that are visible at `now`.

        Menus are ordered by sort order, then name.
        """
        venue = self.get_venue_by_slug(slug)
        with self._lock:
            published = [m for m in self._menus.values() if m.venue_id == venue.id and m.status == PUBLISHED]
        published.sort(key=lambda m: (m.sort_order, m.name))
        return filter_active_menus(published, self.now_for_venue(venue, now))

    def active_menu(self, slug: str, now: Optional[datetime] = None) -> Menu:
        """Return the first visible menu of the venue."""
        menus = self.visible_menus(slug, now)
        if not menus:
            raise NotFoundError("Menu")
        return menus[0]

    def schedule_status(self, menu_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Report whether the menu is visible and which schedule currently wins."""
        menu = self.get_menu(menu_id)
        local_now = self.now_for_venue(self._venue_of(menu), now)
        schedules = menu.schedules
        winner = get_active_schedule(schedules, local_now)
        return {
            "menuId": menu.id,
            "at": local_now.isoformat(),
            "visible": is_menu_schedule_active(schedules, local_now),
            "activeSchedule": winner.to_dict() if winner else None,
        }
