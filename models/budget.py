from dataclasses import dataclass

from utils.constants import BUDGET_WARNING_THRESHOLD


@dataclass
class MonthlyBudget:
    month: str          # 'YYYY-MM'
    limit: float        # 0 = no limit set


@dataclass
class MonthSummary:
    month: str
    limit: float
    total_spent: float = 0.0
    spent_debit: float = 0.0
    spent_credit: float = 0.0
    count: int = 0

    @property
    def remaining(self) -> float:
        return self.limit - self.total_spent

    @property
    def percentage(self) -> float:
        if self.limit <= 0:
            return 0.0
        return min(self.total_spent / self.limit, 1.0)

    @property
    def status(self) -> str:
        """'ok' | 'warning' | 'over' band used to colour the summary."""
        pct = self.percentage
        if pct >= 1.0:
            return "over"
        if pct > BUDGET_WARNING_THRESHOLD:
            return "warning"
        return "ok"
