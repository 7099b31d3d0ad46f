"""Example: drive the service layer directly (no Flask).

Controllers are a thin layer; the attendance rules live in the services.
"""

import importlib

from config import get_settings_module

from timeclock.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)

    today = container.attendance_service.get_today_attendance(1)
    print("today:", today.to_dict() if today else None)
    for record in container.attendance_service.get_history(1, limit=5):
        print(record.to_dict())


if __name__ == "__main__":
    main()
