from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Daily attendance state stored on each record."""

    NOT_CHECKED_IN = "NOT_CHECKED_IN"
    CHECKED_IN = "CHECKED_IN"
    ON_BREAK = "ON_BREAK"
    CHECKED_OUT = "CHECKED_OUT"
    ON_LEAVE = "ON_LEAVE"

    @property
    def is_terminal(self) -> bool:
        return self in (AttendanceStatus.CHECKED_OUT, AttendanceStatus.ON_LEAVE)

    @property
    def is_open(self) -> bool:
        return self in (AttendanceStatus.CHECKED_IN, AttendanceStatus.ON_BREAK)


class AttendanceAction(str, Enum):
    """Moves accepted by the attendance state machine."""

    CHECK_IN = "CHECK_IN"
    START_BREAK = "START_BREAK"
    END_BREAK = "END_BREAK"
    CHECK_OUT = "CHECK_OUT"
    MARK_LEAVE = "MARK_LEAVE"
    EDIT_LEAVE = "EDIT_LEAVE"
    AUTO_CHECKOUT = "AUTO_CHECKOUT"


class LeaveType(str, Enum):
    SICK = "sick"
    PERSONAL = "personal"
    EMERGENCY = "emergency"
    VACATION = "vacation"
    MEDICAL = "medical"
    FAMILY = "family"
    OTHER = "other"


class PenaltyType(str, Enum):
    HOURLY = "HOURLY"
    LEAVE = "LEAVE"
    MANUAL = "MANUAL"


class PenaltyStatus(str, Enum):
    """Lifecycle of a ledger entry. Entries are never deleted, only removed."""

    ACTIVE = "ACTIVE"
    REMOVED = "REMOVED"
