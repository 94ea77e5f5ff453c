from __future__ import annotations

from decimal import Decimal

from .base import SalaryCalculator


class StandardSalaryCalculator(SalaryCalculator):
    """Standard rule: base - active penalties, not below 0."""

    def final_salary(self, base_salary: Decimal, total_penalties: Decimal) -> Decimal:
        return max(base_salary - total_penalties, Decimal("0"))
