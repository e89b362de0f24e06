"""Application entrypoint: loads the menu catalog and starts the Flask app."""

from menu_schedule.config import Config  # App configuration
from menu_schedule.service import MenuCatalog  # Venues, menus and schedules
from menu_schedule.web import create_app  # Flask app factory


def main() -> None:
    """Load the catalog and run the Flask development server."""
    catalog = MenuCatalog.load(Config.DATA_FILE)  # Seed from JSON if present
    app = create_app(catalog)  # Build Flask app bound to the catalog
    app.run(host=Config.HOST, port=Config.PORT, debug=Config.DEBUG, threaded=True)


if __name__ == "__main__":
    main()
