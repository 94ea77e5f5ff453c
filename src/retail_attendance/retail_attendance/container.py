from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.reconciliation import SmartAutoCheckoutService
from .attendance.service import AttendanceService
from .common.clock import Clock, SystemClock
from .common.datetime_utils import parse_hhmm
from .common.locks import KeyedLocks
from .database.connection import DBConfig, DatabaseConnection
from .payroll.service import PayrollService
from .penalty.engine import PenaltyCalculationEngine
from .penalty.factory import PenaltyRuleFactory
from .penalty.mysql_penalty_repository import MySQLPenaltyRepository
from .penalty.mysql_policy_repository import MySQLPolicyRepository
from .penalty.service import PenaltyService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    attendance_repo: MySQLAttendanceRepository
    penalties_repo: MySQLPenaltyRepository
    policies_repo: MySQLPolicyRepository

    penalty_engine: PenaltyCalculationEngine
    penalty_service: PenaltyService
    attendance_service: AttendanceService
    reconciliation_service: SmartAutoCheckoutService
    payroll_service: PayrollService


def build_container(*, settings, clock: Optional[Clock] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(settings.DB_CONFIG))
    clock = clock or SystemClock()
    retries = int(getattr(settings, "PERSISTENCE_RETRIES", 3))
    retry_delay = float(getattr(settings, "PERSISTENCE_RETRY_DELAY", 0.2))
    lock_timeout = float(getattr(settings, "LOCK_TIMEOUT_SECONDS", 5))

    attendance_repo = MySQLAttendanceRepository(conn)
    penalties_repo = MySQLPenaltyRepository(conn)
    policies_repo = MySQLPolicyRepository(conn)

    penalty_engine = PenaltyCalculationEngine(penalties_repo, PenaltyRuleFactory(attendance_repo), clock=clock)
    penalty_service = PenaltyService(
        penalties_repo,
        policies_repo,
        tenant=str(getattr(settings, "TENANT", "default")),
        clock=clock,
        retries=retries,
        retry_delay=retry_delay,
        locks=KeyedLocks(timeout=lock_timeout),
    )
    attendance_service = AttendanceService(
        attendance_repo,
        penalty_engine,
        penalty_service,
        clock=clock,
        locks=KeyedLocks(timeout=lock_timeout),
        retries=retries,
        retry_delay=retry_delay,
    )
    reconciliation_service = SmartAutoCheckoutService(
        attendance_repo,
        attendance_service,
        clock=clock,
        checkout_time=parse_hhmm(str(getattr(settings, "AUTO_CHECKOUT_TIME", "22:00"))),
    )
    payroll_service = PayrollService(penalty_service)

    return Container(
        conn=conn,
        attendance_repo=attendance_repo,
        penalties_repo=penalties_repo,
        policies_repo=policies_repo,
        penalty_engine=penalty_engine,
        penalty_service=penalty_service,
        attendance_service=attendance_service,
        reconciliation_service=reconciliation_service,
        payroll_service=payroll_service,
    )
