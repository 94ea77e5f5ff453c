from __future__ import annotations

import json
from dataclasses import asdict
from datetime import date, datetime
from typing import Any, Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus, LeaveType
from ..core.exceptions import AttendanceAlreadyExists, NotFound
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, load_json, normalize_mysql_time
from .model import AttendanceRecord, BreakEntry, Location
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, employee_name, work_date, status,
    check_in_time, check_out_time, check_in_photo, check_in_location, check_out_location,
    breaks, total_break_time, total_work_time, leave_type, leave_reason,
    auto_checkout, auto_checkout_reason, auto_checkout_at, penalty_evaluated,
    created_at, updated_at
"""


def _location_to_json(loc: Optional[Location]) -> Optional[str]:
    if loc is None:
        return None
    data = asdict(loc)
    if loc.captured_at is not None:
        data["captured_at"] = loc.captured_at.isoformat()
    return json.dumps(data)


def _location_from_json(value: Any) -> Optional[Location]:
    data = load_json(value)
    if not data:
        return None
    captured = data.get("captured_at")
    return Location(
        latitude=data.get("latitude"),
        longitude=data.get("longitude"),
        accuracy=data.get("accuracy"),
        captured_at=datetime.fromisoformat(captured) if captured else None,
        note=data.get("note"),
    )


def _breaks_to_json(breaks: Sequence[BreakEntry]) -> str:
    return json.dumps(
        [
            {
                "start_time": b.start_time.strftime("%H:%M:%S"),
                "end_time": b.end_time.strftime("%H:%M:%S") if b.end_time else None,
                "duration_minutes": int(b.duration_minutes),
            }
            for b in breaks
        ]
    )


def _breaks_from_json(value: Any) -> tuple[BreakEntry, ...]:
    return tuple(
        BreakEntry(
            start_time=normalize_mysql_time(b["start_time"]),
            end_time=normalize_mysql_time(b.get("end_time")),
            duration_minutes=int(b.get("duration_minutes") or 0),
        )
        for b in load_json(value, default=[])
    )


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=str(r["employee_id"]),
        employee_name=r.get("employee_name") or "",
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        check_in_time=normalize_mysql_time(r.get("check_in_time")),
        check_out_time=normalize_mysql_time(r.get("check_out_time")),
        check_in_photo=r.get("check_in_photo"),
        check_in_location=_location_from_json(r.get("check_in_location")),
        check_out_location=_location_from_json(r.get("check_out_location")),
        breaks=_breaks_from_json(r.get("breaks")),
        total_break_time=int(r.get("total_break_time") or 0),
        total_work_time=int(r.get("total_work_time") or 0),
        leave_type=LeaveType(r["leave_type"]) if r.get("leave_type") else None,
        leave_reason=r.get("leave_reason"),
        auto_checkout=bool(r.get("auto_checkout")),
        auto_checkout_reason=r.get("auto_checkout_reason"),
        auto_checkout_at=r.get("auto_checkout_at"),
        penalty_evaluated=bool(r.get("penalty_evaluated")),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _params(record: AttendanceRecord) -> tuple:
    return (
        record.employee_name,
        record.status.value,
        record.check_in_time,
        record.check_out_time,
        record.check_in_photo,
        _location_to_json(record.check_in_location),
        _location_to_json(record.check_out_location),
        _breaks_to_json(record.breaks),
        int(record.total_break_time),
        int(record.total_work_time),
        record.leave_type.value if record.leave_type else None,
        record.leave_reason,
        int(record.auto_checkout),
        record.auto_checkout_reason,
        record.auto_checkout_at,
        int(record.penalty_evaluated),
        record.updated_at,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_key(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND work_date=%s",
                (employee_id, work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        employee_name, status, check_in_time, check_out_time, check_in_photo,
                        check_in_location, check_out_location, breaks, total_break_time, total_work_time,
                        leave_type, leave_reason, auto_checkout, auto_checkout_reason, auto_checkout_at,
                        penalty_evaluated, updated_at, employee_id, work_date, created_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    _params(record) + (record.employee_id, record.work_date, record.created_at),
                )
            except mysql.connector.IntegrityError:
                raise AttendanceAlreadyExists(
                    f"Attendance already recorded for {record.employee_id} on {record.work_date.isoformat()}"
                ) from None
            attendance_id = int(cur.lastrowid)
        return self.get_by_id(attendance_id)

    def update(self, record: AttendanceRecord) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET employee_name=%s, status=%s, check_in_time=%s, check_out_time=%s, check_in_photo=%s,
                    check_in_location=%s, check_out_location=%s, breaks=%s, total_break_time=%s,
                    total_work_time=%s, leave_type=%s, leave_reason=%s, auto_checkout=%s,
                    auto_checkout_reason=%s, auto_checkout_at=%s, penalty_evaluated=%s, updated_at=%s
                WHERE attendance_id=%s
                """,
                _params(record) + (int(record.attendance_id),),
            )
            if cur.rowcount == 0 and self.get_by_id(int(record.attendance_id)) is None:
                raise NotFound(f"Attendance record {record.attendance_id} not found")
        return record

    def list_for_employee(self, employee_id: str, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[AttendanceRecord]:
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
                f"SELECT {_COLUMNS} FROM attendance_records WHERE {' AND '.join(clauses)} ORDER BY work_date DESC",
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE work_date=%s ORDER BY employee_name",
                (work_date,),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_pending_penalty_evaluation(self) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE penalty_evaluated=0 AND status IN (%s, %s)
                ORDER BY work_date
                """,
                (AttendanceStatus.CHECKED_OUT.value, AttendanceStatus.ON_LEAVE.value),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def count_leaves(self, employee_id: str, start: date, end: date, *, exclude: Optional[date] = None) -> int:
        clauses = ["employee_id=%s", "status=%s", "work_date BETWEEN %s AND %s"]
        params: list[object] = [employee_id, AttendanceStatus.ON_LEAVE.value, start, end]
        if exclude is not None:
            clauses.append("work_date <> %s")
            params.append(exclude)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM attendance_records WHERE {' AND '.join(clauses)}", tuple(params))
            r = fetchone(cur)
            return int(r["n"]) if r else 0
