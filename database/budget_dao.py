import logging
import sqlite3
from typing import Optional

from database.db_manager import DatabaseManager
from models.budget import MonthlyBudget
from utils.exceptions import DuplicateKeyError, StorageError

logger = logging.getLogger(__name__)


class BudgetDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> MonthlyBudget:
        return MonthlyBudget(month=row["month"], limit=row["limit_amount"])

    def get_all(self) -> list[MonthlyBudget]:
        rows = self._db.query("SELECT month, limit_amount FROM budgets ORDER BY month")
        return [self._row_to_model(r) for r in rows]

    def get_record(self, month: str) -> Optional[MonthlyBudget]:
        rows = self._db.query(
            "SELECT month, limit_amount FROM budgets WHERE month = ?", (month,)
        )
        return self._row_to_model(rows[0]) if rows else None

    def get(self, month: str) -> float:
        """Limit for the month; 0.0 when no budget row exists."""
        budget = self.get_record(month)
        return budget.limit if budget else 0.0

    def put(self, budget: MonthlyBudget) -> MonthlyBudget:
        with self._db.transaction() as conn:
            conn.execute(
                """INSERT INTO budgets(month, limit_amount) VALUES (?, ?)
                   ON CONFLICT(month)
                   DO UPDATE SET limit_amount = excluded.limit_amount""",
                (budget.month, budget.limit),
            )
        logger.debug("Set budget %s = %s", budget.month, budget.limit)
        return budget

    def add(self, budget: MonthlyBudget) -> MonthlyBudget:
        """Insert-only variant of put(), used when restoring a backup."""
        try:
            with self._db.transaction() as conn:
                conn.execute(
                    "INSERT INTO budgets(month, limit_amount) VALUES (?, ?)",
                    (budget.month, budget.limit),
                )
        except StorageError as e:
            cause = e.__cause__
            if isinstance(cause, sqlite3.IntegrityError) and "UNIQUE" in str(cause).upper():
                raise DuplicateKeyError("MonthlyBudget", budget.month) from cause
            raise
        return budget

    def clear(self):
        with self._db.transaction() as conn:
            conn.execute("DELETE FROM budgets")
