from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import PenaltyType
from .model import PenaltyEntry, PenaltyPolicy


class PenaltyRepository(Protocol):
    """Append-mostly ledger. Rows are updated only to record removal."""

    def add(self, entry: PenaltyEntry) -> PenaltyEntry:
        raise NotImplementedError

    def get(self, penalty_id: int) -> Optional[PenaltyEntry]:
        raise NotImplementedError

    def update(self, entry: PenaltyEntry) -> PenaltyEntry:
        """Write the removal fields of an ACTIVE entry; raise NotFound if it is no longer ACTIVE."""

        raise NotImplementedError

    def list_for_employee(self, employee_id: str, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[PenaltyEntry]:
        raise NotImplementedError

    def exists_for_attendance(self, attendance_id: int, penalty_type: PenaltyType) -> bool:
        raise NotImplementedError


class PolicyRepository(Protocol):
    def get_active(self, tenant: str) -> PenaltyPolicy:
        """Return the latest version; raise PolicyNotConfigured when none was saved."""

        raise NotImplementedError

    def save(self, policy: PenaltyPolicy) -> PenaltyPolicy:
        """Store policy as a new version for its tenant."""

        raise NotImplementedError
