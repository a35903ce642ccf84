from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from .attendance.mysql_session_repository import MySQLSessionRepository
from .attendance.repository import SessionRepository
from .attendance.service import AttendanceService
from .breaks.mysql_break_repository import MySQLBreakRepository
from .breaks.repository import BreakRepository
from .breaks.service import BreakService
from .common.datetime_utils import now_local
from .core.constants import DEFAULT_REQUIRED_DAILY_HOURS, DEFAULT_TICK_SECONDS
from .core.enums import ClassificationMode
from .database.connection import DBConfig, DatabaseConnection
from .policy.classifier.base import BreakClassifier
from .policy.classifier.factory import BreakClassifierFactory
from .policy.model import BreakPolicy
from .reporting.service import ReportService


@dataclass(frozen=True)
class Container:
    sessions_repo: SessionRepository
    breaks_repo: BreakRepository

    policy: BreakPolicy
    classifier: BreakClassifier

    break_service: BreakService
    attendance_service: AttendanceService
    report_service: ReportService

    tick_seconds: float = DEFAULT_TICK_SECONDS
    clock: Callable[[], datetime] = field(default=now_local)
    conn: Optional[DatabaseConnection] = None


def build_services(
    sessions_repo: SessionRepository,
    breaks_repo: BreakRepository,
    *,
    policy: BreakPolicy | None = None,
    classification: str = ClassificationMode.LITERAL.value,
    required_daily_hours: float = DEFAULT_REQUIRED_DAILY_HOURS,
    tick_seconds: float = DEFAULT_TICK_SECONDS,
    clock: Callable[[], datetime] = now_local,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    policy = policy or BreakPolicy()
    classifier = BreakClassifierFactory(policy).for_mode(classification)

    break_service = BreakService(sessions_repo, breaks_repo)
    attendance_service = AttendanceService(
        sessions_repo,
        breaks_repo,
        break_service=break_service,
        required_daily_hours=required_daily_hours,
    )
    report_service = ReportService(sessions_repo, breaks_repo, classifier=classifier)

    return Container(
        sessions_repo=sessions_repo,
        breaks_repo=breaks_repo,
        policy=policy,
        classifier=classifier,
        break_service=break_service,
        attendance_service=attendance_service,
        report_service=report_service,
        tick_seconds=float(tick_seconds),
        clock=clock,
        conn=conn,
    )


def build_container(*, db_config: dict, settings: dict | None = None) -> Container:
    settings = settings or {}
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return build_services(
        MySQLSessionRepository(conn),
        MySQLBreakRepository(conn),
        policy=BreakPolicy.from_settings(settings),
        classification=str(settings.get("BREAK_CLASSIFICATION", ClassificationMode.LITERAL.value)),
        required_daily_hours=float(settings.get("REQUIRED_DAILY_HOURS", DEFAULT_REQUIRED_DAILY_HOURS)),
        tick_seconds=float(settings.get("LIVE_TICK_SECONDS", DEFAULT_TICK_SECONDS)),
        conn=conn,
    )
