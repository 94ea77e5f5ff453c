from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

import structlog

from ..common.clock import Clock, SystemClock
from ..common.locks import KeyedLocks
from ..common.datetime_utils import month_bounds, parse_hhmm
from ..common.retry import with_retries
from ..common.validators import require_amount, require_non_empty, require_non_negative_int
from ..core.constants import DEFAULT_PERSISTENCE_RETRIES, DEFAULT_PERSISTENCE_RETRY_DELAY, DEFAULT_TENANT
from ..core.enums import PenaltyStatus, PenaltyType
from ..core.exceptions import NotFound, PolicyNotConfigured, ValidationError
from .model import PenaltyEntry, PenaltyPolicy, PenaltyTotals
from .repository import PenaltyRepository, PolicyRepository

log = structlog.get_logger(__name__)

_POLICY_INT_FIELDS = (
    "late_arrival_threshold_minutes",
    "early_departure_threshold_minutes",
    "standard_work_minutes",
    "paid_leaves_per_month",
)
_POLICY_MONEY_FIELDS = ("hourly_penalty_rate", "leave_penalty_rate")
_POLICY_TIME_FIELDS = ("expected_check_in", "expected_check_out")
_POLICY_BOOL_FIELDS = ("weekend_penalty_enabled", "auto_apply_penalties")


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def policy_from_mapping(data: Mapping[str, Any], *, base: Optional[PenaltyPolicy] = None) -> PenaltyPolicy:
    """Build a policy from loosely typed input (JSON body, settings form).

    Missing keys keep the values of `base` (or the documented defaults).
    """

    policy = base or PenaltyPolicy()
    changes: dict[str, Any] = {}
    for name in _POLICY_MONEY_FIELDS:
        if name in data:
            changes[name] = require_amount(data[name], name, allow_zero=True)
    for name in _POLICY_INT_FIELDS:
        if name in data:
            changes[name] = require_non_negative_int(data[name], name)
    for name in _POLICY_TIME_FIELDS:
        if name in data:
            raw = data[name]
            try:
                changes[name] = parse_hhmm(raw) if isinstance(raw, str) and raw.strip() else (raw or None)
            except ValueError:
                raise ValidationError(f"{name} must be HH:MM") from None
    for name in _POLICY_BOOL_FIELDS:
        if name in data:
            changes[name] = _as_bool(data[name])
    return replace(policy, **changes)


def validate_policy(policy: PenaltyPolicy) -> PenaltyPolicy:
    for name in _POLICY_MONEY_FIELDS:
        require_amount(getattr(policy, name), name, allow_zero=True)
    for name in _POLICY_INT_FIELDS:
        require_non_negative_int(getattr(policy, name), name)
    if policy.standard_work_minutes <= 0:
        raise ValidationError("standard_work_minutes must be greater than 0")
    if (
        policy.expected_check_in is not None
        and policy.expected_check_out is not None
        and policy.expected_check_out <= policy.expected_check_in
    ):
        raise ValidationError("expected_check_out must be after expected_check_in")
    return policy


class PenaltyService:
    """Policy settings, manual penalties, removal and ledger queries."""

    def __init__(
        self,
        penalties: PenaltyRepository,
        policies: PolicyRepository,
        *,
        tenant: str = DEFAULT_TENANT,
        clock: Optional[Clock] = None,
        retries: int = DEFAULT_PERSISTENCE_RETRIES,
        retry_delay: float = DEFAULT_PERSISTENCE_RETRY_DELAY,
        locks: Optional[KeyedLocks] = None,
    ):
        self._penalties = penalties
        self._policies = policies
        self._tenant = tenant
        self._clock = clock or SystemClock()
        self._retries = int(retries)
        self._retry_delay = float(retry_delay)
        self._locks = locks or KeyedLocks()

    def _retry(self, operation, label: str):
        return with_retries(operation, attempts=self._retries, delay=self._retry_delay, label=label)

    # Policy

    def get_penalty_settings(self) -> PenaltyPolicy:
        try:
            return self._retry(lambda: self._policies.get_active(self._tenant), "get_penalty_settings")
        except PolicyNotConfigured:
            log.info("penalty_policy_defaults", tenant=self._tenant)
            return PenaltyPolicy(tenant=self._tenant)

    def update_penalty_settings(self, policy: PenaltyPolicy, *, updated_by: str) -> PenaltyPolicy:
        """Store a new policy version. Past penalties are left as they are."""

        updated_by = require_non_empty(updated_by, "updated_by")
        validate_policy(policy)
        current = self.get_penalty_settings()
        saved = self._retry(
            lambda: self._policies.save(
                replace(
                    policy,
                    tenant=self._tenant,
                    version=current.version + 1,
                    updated_at=self._clock.now(),
                    updated_by=updated_by,
                )
            ),
            "update_penalty_settings",
        )
        log.info("penalty_policy_updated", tenant=self._tenant, version=saved.version, updated_by=updated_by)
        return saved

    # Manual penalties and removal

    def apply_manual_penalty(
        self,
        employee_id: str,
        work_date: date,
        amount: Any,
        reason: str,
        applied_by: str,
        *,
        employee_name: Optional[str] = None,
    ) -> PenaltyEntry:
        employee_id = require_non_empty(employee_id, "employee_id")
        value = require_amount(amount, "amount")
        reason = require_non_empty(reason, "reason")
        applied_by = require_non_empty(applied_by, "applied_by")
        if not isinstance(work_date, date):
            raise ValidationError("date is required")

        entry = self._penalties.add(
            PenaltyEntry(
                penalty_id=None,
                employee_id=employee_id,
                employee_name=employee_name,
                work_date=work_date,
                penalty_type=PenaltyType.MANUAL,
                amount=value,
                reason=reason,
                applied_by=applied_by,
                applied_at=self._clock.now(),
            )
        )
        log.info(
            "manual_penalty_applied",
            penalty_id=entry.penalty_id,
            employee_id=employee_id,
            work_date=work_date.isoformat(),
            amount=str(value),
            applied_by=applied_by,
        )
        return entry

    def _remove_active(self, penalty_id: int, removed_by: str, reason: str) -> PenaltyEntry:
        # Read, check and write under the entry's lock; the store also refuses non-ACTIVE rows.
        with self._locks.hold(("penalty", int(penalty_id))):
            entry = self._retry(lambda: self._penalties.get(int(penalty_id)), "get_penalty")
            if entry is None or entry.status != PenaltyStatus.ACTIVE:
                raise NotFound(f"Active penalty {penalty_id} not found")
            removed = self._retry(
                lambda: self._penalties.update(
                    replace(
                        entry,
                        status=PenaltyStatus.REMOVED,
                        removed_by=removed_by,
                        removed_at=self._clock.now(),
                        removed_reason=reason,
                    )
                ),
                "remove_penalty",
            )
        log.info("penalty_removed", penalty_id=entry.penalty_id, employee_id=entry.employee_id, removed_by=removed_by)
        return removed

    def remove_penalty(self, penalty_id: int, removed_by: str, reason: str = "") -> PenaltyEntry:
        removed_by = require_non_empty(removed_by, "removed_by")
        return self._remove_active(penalty_id, removed_by, (reason or "").strip())

    def remove_penalties_in_range(
        self, employee_id: str, start: date, end: date, removed_by: str, reason: str = ""
    ) -> list[PenaltyEntry]:
        removed_by = require_non_empty(removed_by, "removed_by")
        reason = (reason or "").strip()
        removed = []
        for entry in self.get_employee_penalties(employee_id, start, end):
            if entry.status != PenaltyStatus.ACTIVE:
                continue
            try:
                removed.append(self._remove_active(entry.penalty_id, removed_by, reason))
            except NotFound:
                log.info("penalty_already_removed", penalty_id=entry.penalty_id, employee_id=employee_id)
        return removed

    def remove_daily_penalties(self, employee_id: str, work_date: date, removed_by: str, reason: str = "") -> list[PenaltyEntry]:
        return self.remove_penalties_in_range(employee_id, work_date, work_date, removed_by, reason)

    def remove_monthly_penalties(
        self, employee_id: str, year: int, month: int, removed_by: str, reason: str = ""
    ) -> list[PenaltyEntry]:
        try:
            start, end = month_bounds(int(year), int(month))
        except (TypeError, ValueError):
            raise ValidationError("Invalid year/month") from None
        return self.remove_penalties_in_range(employee_id, start, end, removed_by, reason)

    # Ledger queries

    def get_employee_penalties(
        self, employee_id: str, start: Optional[date] = None, end: Optional[date] = None
    ) -> list[PenaltyEntry]:
        if start and end and end < start:
            raise ValidationError("End date must not be before start date")
        rows: Sequence[PenaltyEntry] = self._retry(
            lambda: self._penalties.list_for_employee(employee_id, start, end), "list_penalties"
        )
        return sorted(rows, key=lambda p: (p.work_date, p.applied_at), reverse=True)

    def calculate_total_penalties(self, employee_id: str, start: date, end: date) -> PenaltyTotals:
        penalties = self.get_employee_penalties(employee_id, start, end)
        active = [p for p in penalties if p.status == PenaltyStatus.ACTIVE]
        breakdown = {t: Decimal("0") for t in PenaltyType}
        for p in active:
            breakdown[p.penalty_type] += p.amount
        return PenaltyTotals(
            total_amount=sum((p.amount for p in active), Decimal("0")),
            penalty_count=len(active),
            removed_count=sum(1 for p in penalties if p.status == PenaltyStatus.REMOVED),
            breakdown=breakdown,
            penalties=active,
        )
