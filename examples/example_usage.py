"""Example: drive the service layer directly (no Flask).

Controllers stay thin; the punch rules live in the services.
"""

import importlib
from datetime import date, timedelta

from config import get_settings_module

from src.geo_attendance.geo_attendance.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    today = date.today()
    print(container.punch_service.get_shift_state(1, today))
    print(container.report_service.summarize(1, today - timedelta(days=29), today))


if __name__ == "__main__":
    main()
