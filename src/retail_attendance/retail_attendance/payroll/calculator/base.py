from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal


class SalaryCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def final_salary(self, base_salary: Decimal, total_penalties: Decimal) -> Decimal:
        raise NotImplementedError
