from __future__ import annotations

from decimal import Decimal

from ..core.exceptions import PolicyNotConfigured
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_time
from .model import PenaltyPolicy
from .repository import PolicyRepository


class MySQLPolicyRepository(PolicyRepository):
    """Versioned policies: every save inserts a row, the highest version is active."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active(self, tenant: str) -> PenaltyPolicy:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT tenant, version, hourly_penalty_rate, leave_penalty_rate,
                       late_arrival_threshold_minutes, early_departure_threshold_minutes,
                       expected_check_in, expected_check_out, standard_work_minutes,
                       paid_leaves_per_month, weekend_penalty_enabled, auto_apply_penalties,
                       updated_at, updated_by
                FROM penalty_policies
                WHERE tenant=%s
                ORDER BY version DESC
                LIMIT 1
                """,
                (tenant,),
            )
            r = fetchone(cur)
            if not r:
                raise PolicyNotConfigured(f"No penalty policy saved for tenant {tenant!r}")
            return PenaltyPolicy(
                tenant=r["tenant"],
                version=int(r["version"]),
                hourly_penalty_rate=Decimal(str(r["hourly_penalty_rate"])),
                leave_penalty_rate=Decimal(str(r["leave_penalty_rate"])),
                late_arrival_threshold_minutes=int(r["late_arrival_threshold_minutes"]),
                early_departure_threshold_minutes=int(r["early_departure_threshold_minutes"]),
                expected_check_in=normalize_mysql_time(r.get("expected_check_in")),
                expected_check_out=normalize_mysql_time(r.get("expected_check_out")),
                standard_work_minutes=int(r["standard_work_minutes"]),
                paid_leaves_per_month=int(r["paid_leaves_per_month"]),
                weekend_penalty_enabled=bool(r["weekend_penalty_enabled"]),
                auto_apply_penalties=bool(r["auto_apply_penalties"]),
                updated_at=r.get("updated_at"),
                updated_by=r.get("updated_by"),
            )

    def save(self, policy: PenaltyPolicy) -> PenaltyPolicy:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO penalty_policies(
                    tenant, version, hourly_penalty_rate, leave_penalty_rate,
                    late_arrival_threshold_minutes, early_departure_threshold_minutes,
                    expected_check_in, expected_check_out, standard_work_minutes,
                    paid_leaves_per_month, weekend_penalty_enabled, auto_apply_penalties,
                    updated_at, updated_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    policy.tenant,
                    int(policy.version),
                    policy.hourly_penalty_rate,
                    policy.leave_penalty_rate,
                    int(policy.late_arrival_threshold_minutes),
                    int(policy.early_departure_threshold_minutes),
                    policy.expected_check_in,
                    policy.expected_check_out,
                    int(policy.standard_work_minutes),
                    int(policy.paid_leaves_per_month),
                    int(policy.weekend_penalty_enabled),
                    int(policy.auto_apply_penalties),
                    policy.updated_at,
                    policy.updated_by,
                ),
            )
        return policy
