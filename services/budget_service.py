import math

from models.budget import MonthlyBudget, MonthSummary
from database.budget_dao import BudgetDAO
from services.transaction_service import TransactionService
from utils.date_helpers import current_month_str, is_valid_month
from utils.exceptions import ValidationError


class BudgetService:
    def __init__(self, budget_dao: BudgetDAO, tx_service: TransactionService):
        self._budget_dao = budget_dao
        self._tx_svc = tx_service

    def get_budget(self, month: str) -> float:
        """Monthly limit, or 0.0 when none has been set."""
        return self._budget_dao.get(month)

    def set_budget(self, month: str, limit: float) -> MonthlyBudget:
        if not is_valid_month(month):
            raise ValidationError(f"Invalid month: {month!r}. Use YYYY-MM.")
        if (
            isinstance(limit, bool)
            or not isinstance(limit, (int, float))
            or not math.isfinite(limit)
        ):
            raise ValidationError("Budget limit must be a number.")
        if limit < 0:
            raise ValidationError("Budget limit must be non-negative.")
        return self._budget_dao.put(MonthlyBudget(month=month, limit=float(limit)))

    def get_month_summary(self, month: str | None = None) -> MonthSummary:
        """Spend for the month split by payment method, against its limit."""
        if month is None:
            month = current_month_str()
        summary = MonthSummary(month=month, limit=self.get_budget(month))
        for tx in self._tx_svc.list_for_month(month):
            summary.total_spent += tx.amount
            if tx.method == "DEBIT":
                summary.spent_debit += tx.amount
            elif tx.method == "CREDIT":
                summary.spent_credit += tx.amount
            summary.count += 1
        return summary
