from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from ..common.validators import require_amount
from ..core.enums import PenaltyType
from ..penalty.model import PenaltyEntry
from ..penalty.service import PenaltyService
from .calculator.base import SalaryCalculator
from .calculator.standard_calculator import StandardSalaryCalculator


@dataclass(frozen=True)
class SalarySummary:
    base_salary: Decimal
    total_penalties: Decimal
    final_salary: Decimal
    breakdown: dict[PenaltyType, Decimal] = field(default_factory=dict)
    penalties: list[PenaltyEntry] = field(default_factory=list)


class PayrollService:
    def __init__(self, penalties: PenaltyService, *, calculator: Optional[SalaryCalculator] = None):
        self._penalties = penalties
        self._calculator = calculator or StandardSalaryCalculator()

    def calculate_final_salary(self, employee_id: str, base_salary: Any, start: date, end: date) -> SalarySummary:
        base = require_amount(base_salary, "base_salary", allow_zero=True)
        totals = self._penalties.calculate_total_penalties(employee_id, start, end)
        return SalarySummary(
            base_salary=base,
            total_penalties=totals.total_amount,
            final_salary=self._calculator.final_salary(base, totals.total_amount),
            breakdown=totals.breakdown,
            penalties=totals.penalties,
        )
