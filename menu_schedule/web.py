"""Flask web application: schedule API and public menu pages."""

from datetime import datetime
from typing import Any, Optional

import flask  # Web server and templating
from dateutil import parser as dtparser  # ISO-8601 timestamps in ?at=

from .errors import AppError, ValidationError
from .service import MenuCatalog


def _ok(data: Any) -> dict:
    return {"success": True, "data": data}


def _at_param() -> Optional[datetime]:
    """Parse the optional `?at=` instant used instead of the venue's clock."""
    raw = flask.request.args.get("at")
    if not raw:
        return None
    try:
        return dtparser.isoparse(raw)
    except (ValueError, OverflowError):
        raise ValidationError({"at": ["Expected an ISO-8601 timestamp"]})


def create_app(catalog: MenuCatalog) -> flask.Flask:
    """Create and configure the Flask application.

    Args:
      catalog: `MenuCatalog` holding venues, menus and schedules.

    Returns:
      A Flask app instance with the schedule API, public menu API and page.
    """
    app = flask.Flask(__name__)

    @app.errorhandler(AppError)
    def app_error(err: AppError):
        """Render application errors as the JSON error envelope."""
        return {"success": False, "error": err.to_dict()}, err.status_code

    @app.route("/healthz")
    def healthz():
        return {"status": "ok"}

    # Schedules of a menu
    @app.route("/api/menus/<menu_id>/schedules", methods=["GET"])
    def list_schedules(menu_id: str):
        return _ok([s.to_dict() for s in catalog.list_schedules(menu_id)])

    @app.route("/api/menus/<menu_id>/schedules", methods=["POST"])
    def create_schedule(menu_id: str):
        body = flask.request.get_json(silent=True)
        return _ok(catalog.create_schedule(menu_id, body).to_dict()), 201

    @app.route("/api/menus/<menu_id>/schedules/status")
    def schedule_status(menu_id: str):
        """Report menu visibility and the winning schedule at `?at=` or now."""
        return _ok(catalog.schedule_status(menu_id, _at_param()))

    @app.route("/api/menus/<menu_id>/schedules/<schedule_id>", methods=["GET"])
    def get_schedule(menu_id: str, schedule_id: str):
        return _ok(catalog.get_schedule(menu_id, schedule_id).to_dict())

    @app.route("/api/menus/<menu_id>/schedules/<schedule_id>", methods=["PATCH"])
    def update_schedule(menu_id: str, schedule_id: str):
        body = flask.request.get_json(silent=True)
        return _ok(catalog.update_schedule(menu_id, schedule_id, body).to_dict())

    @app.route("/api/menus/<menu_id>/schedules/<schedule_id>", methods=["DELETE"])
    def delete_schedule(menu_id: str, schedule_id: str):
        catalog.delete_schedule(menu_id, schedule_id)
        return _ok({"deleted": True})

    # Public
    @app.route("/public/v/<slug>/menus")
    def public_menus(slug: str):
        """Return the venue's currently visible menus (schedules stripped)."""
        menus = catalog.visible_menus(slug, _at_param())
        return _ok([m.to_dict(include_schedules=False) for m in menus])

    @app.route("/public/v/<slug>/menu")
    def public_menu(slug: str):
        """Return the first visible menu of the venue, 404 if none."""
        return _ok(catalog.active_menu(slug, _at_param()).to_dict(include_schedules=False))

    @app.route("/v/<slug>")
    def venue_page(slug: str):
        """Render the public menu page of a venue."""
        venue = catalog.get_venue_by_slug(slug)
        menus = catalog.visible_menus(slug, _at_param())
        return flask.render_template_string(_VENUE_TEMPLATE, venue=venue, menus=menus)

    return app


_VENUE_TEMPLATE = """
<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>{{ venue.name or venue.slug }} – Menu</title>
  <style>
    body { font-family: system-ui, Arial, sans-serif; margin: 0; background: #faf7f2; color: #222; }
    header { padding: 16px; background: #222; color: #fff; }
    main { padding: 16px; max-width: 720px; margin: 0 auto; }
    .menu { background: #fff; padding: 12px 16px; border-radius: 8px; margin-bottom: 16px; }
    .item { display: flex; justify-content: space-between; padding: 4px 0; border-bottom: 1px dotted #ddd; }
    .meta { color: #888; font-size: 12px; }
  </style>
</head>
<body>
  <header><h2 style="margin:0">{{ venue.name or venue.slug }}</h2></header>
  <main>
    {% for menu in menus %}
      <section class="menu">
        <h3>{{ menu.name }}</h3>
        {% for section in menu.sections %}
          <h4>{{ section.name }}</h4>
          {% for item in section["items"] or [] %}
            <div class="item">
              <span>{{ item.name }}</span>
              {% if item.price is defined and item.price is not none %}<span>{{ item.price }}</span>{% endif %}
            </div>
          {% endfor %}
        {% endfor %}
      </section>
    {% else %}
      <div class="meta">No menu is being served right now.</div>
    {% endfor %}
  </main>
</body>
</html>
"""
