from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ..model import OvertimeResult


class OvertimeCalculator(ABC):
    """Calculator interface (Strategy Pattern for OT rules)."""

    @abstractmethod
    def compute(self, clock_in: Optional[str], clock_out: Optional[str], date_text: str) -> OvertimeResult:
        raise NotImplementedError
