"""Example: use the service layer directly, without Flask.

Controllers stay thin; the rules live in the services.
"""

import importlib

from dotenv import load_dotenv

from brigade_attendance.config import get_settings_module
from brigade_attendance.container import build_container
from brigade_attendance.visibility.caller import AdminCaller


def main():
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    admin = AdminCaller(user_id=1)
    print(container.schedule_service.current_status())
    print(container.analytics_service.dashboard_stats(admin))
    print(container.attendance_service.list_records(admin, limit=5))


if __name__ == "__main__":
    main()
