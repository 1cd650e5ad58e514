from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .analytics.service import AnalyticsService
from .attendance.factory import WindowStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .attendance.window import SessionWindowValidator
from .brigades.mysql_brigade_repository import MySQLBrigadeRepository
from .brigades.mysql_student_repository import MySQLStudentRepository
from .brigades.repository import BrigadeRepository, StudentRepository
from .core import constants
from .database.connection import DBConfig, DatabaseConnection
from .events.mysql_event_repository import MySQLEventRepository
from .events.repository import EventRepository
from .events.service import ScheduleService
from .notifications.publisher import AttendanceNotifier, build_notifier
from .visibility.policy import VisibilityFilter


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    events_repo: EventRepository
    brigades_repo: BrigadeRepository
    students_repo: StudentRepository
    attendance_repo: AttendanceRepository
    notifier: AttendanceNotifier

    schedule_service: ScheduleService
    attendance_service: AttendanceService
    analytics_service: AnalyticsService

    default_page_size: int = constants.DEFAULT_PAGE_SIZE


def assemble(
    *,
    events_repo: EventRepository,
    brigades_repo: BrigadeRepository,
    students_repo: StudentRepository,
    attendance_repo: AttendanceRepository,
    notifier: AttendanceNotifier,
    conn: Optional[DatabaseConnection] = None,
    default_trend_days: int = constants.DEFAULT_TREND_DAYS,
    default_page_size: int = constants.DEFAULT_PAGE_SIZE,
) -> Container:
    """Wire services over the given repositories (MySQL in the app, in-memory in tests)."""

    visibility = VisibilityFilter(brigades_repo, students_repo)
    schedule_service = ScheduleService(events_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        students_repo,
        events_repo,
        visibility,
        notifier=notifier,
        validator=SessionWindowValidator(WindowStrategyFactory()),
    )
    analytics_service = AnalyticsService(
        attendance_repo,
        students_repo,
        brigades_repo,
        events_repo,
        visibility,
        default_trend_days=default_trend_days,
    )

    return Container(
        conn=conn,
        events_repo=events_repo,
        brigades_repo=brigades_repo,
        students_repo=students_repo,
        attendance_repo=attendance_repo,
        notifier=notifier,
        schedule_service=schedule_service,
        attendance_service=attendance_service,
        analytics_service=analytics_service,
        default_page_size=default_page_size,
    )


def build_container(
    *,
    db_config: dict,
    notifier_backend: str = "log",
    redis_url: str = "",
    default_trend_days: int = constants.DEFAULT_TREND_DAYS,
    default_page_size: int = constants.DEFAULT_PAGE_SIZE,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    return assemble(
        events_repo=MySQLEventRepository(conn),
        brigades_repo=MySQLBrigadeRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        notifier=build_notifier(notifier_backend, redis_url=redis_url),
        conn=conn,
        default_trend_days=default_trend_days,
        default_page_size=default_page_size,
    )
