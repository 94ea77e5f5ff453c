from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import PenaltyStatus, PenaltyType
from ..core.exceptions import NotFound
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import PenaltyEntry
from .repository import PenaltyRepository

_COLUMNS = """
    penalty_id, employee_id, employee_name, work_date, penalty_type, amount, reason,
    attendance_id, applied_by, applied_at, status, removed_by, removed_at, removed_reason
"""


def _to_entry(r: dict) -> PenaltyEntry:
    return PenaltyEntry(
        penalty_id=int(r["penalty_id"]),
        employee_id=str(r["employee_id"]),
        employee_name=r.get("employee_name"),
        work_date=r["work_date"],
        penalty_type=PenaltyType(r["penalty_type"]),
        amount=Decimal(str(r["amount"])),
        reason=r["reason"],
        attendance_id=int(r["attendance_id"]) if r.get("attendance_id") is not None else None,
        applied_by=r["applied_by"],
        applied_at=r["applied_at"],
        status=PenaltyStatus(r["status"]),
        removed_by=r.get("removed_by"),
        removed_at=r.get("removed_at"),
        removed_reason=r.get("removed_reason"),
    )


class MySQLPenaltyRepository(PenaltyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, entry: PenaltyEntry) -> PenaltyEntry:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO penalties(
                    employee_id, employee_name, work_date, penalty_type, amount, reason,
                    attendance_id, applied_by, applied_at, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    entry.employee_id,
                    entry.employee_name,
                    entry.work_date,
                    entry.penalty_type.value,
                    entry.amount,
                    entry.reason,
                    entry.attendance_id,
                    entry.applied_by,
                    entry.applied_at,
                    entry.status.value,
                ),
            )
            return replace(entry, penalty_id=int(cur.lastrowid))

    def get(self, penalty_id: int) -> Optional[PenaltyEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM penalties WHERE penalty_id=%s", (int(penalty_id),))
            r = fetchone(cur)
            return _to_entry(r) if r else None

    def update(self, entry: PenaltyEntry) -> PenaltyEntry:
        # Only the removal audit fields are mutable, and only while the entry is ACTIVE.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE penalties
                SET status=%s, removed_by=%s, removed_at=%s, removed_reason=%s
                WHERE penalty_id=%s AND status=%s
                """,
                (
                    entry.status.value,
                    entry.removed_by,
                    entry.removed_at,
                    entry.removed_reason,
                    int(entry.penalty_id),
                    PenaltyStatus.ACTIVE.value,
                ),
            )
            if cur.rowcount == 0:
                raise NotFound(f"Active penalty {entry.penalty_id} not found")
        return entry

    def list_for_employee(self, employee_id: str, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[PenaltyEntry]:
        clauses = ["employee_id=%s"]
        params: list[object] = [employee_id]
        if start is not None:
            clauses.append("work_date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("work_date <= %s")
            params.append(end)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM penalties WHERE {' AND '.join(clauses)} ORDER BY work_date DESC, penalty_id DESC",
                tuple(params),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def exists_for_attendance(self, attendance_id: int, penalty_type: PenaltyType) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS hit FROM penalties WHERE attendance_id=%s AND penalty_type=%s LIMIT 1",
                (int(attendance_id), penalty_type.value),
            )
            return fetchone(cur) is not None
