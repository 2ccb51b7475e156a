"""Backup and restore of the whole store (transactions and monthly budgets)
as a versioned JSON snapshot, plus the clear-everything operation.
"""
import json
import logging
import os
from datetime import datetime
from pathlib import Path

from database.db_manager import DatabaseManager
from database.budget_dao import BudgetDAO
from database.transaction_dao import TransactionDAO
from models.budget import MonthlyBudget
from models.transaction import Transaction
from utils.constants import BACKUP_FILENAME_PREFIX, BACKUP_VERSION
from utils.date_helpers import now_ms
from utils.exceptions import (
    ImportFailedError,
    InvalidBackupError,
    StorageError,
)

logger = logging.getLogger(__name__)


def backup_filename(now: datetime | None = None) -> str:
    """e.g. 'ExpenseManager_2024-05-10_14-30.json'."""
    now = now or datetime.now()
    return f"{BACKUP_FILENAME_PREFIX}_{now:%Y-%m-%d_%H-%M}.json"


class DataService:
    def __init__(
        self,
        db: DatabaseManager,
        tx_dao: TransactionDAO,
        budget_dao: BudgetDAO,
    ):
        self._db = db
        self._tx_dao = tx_dao
        self._budget_dao = budget_dao

    # ── Clear ─────────────────────────────────────────────────────────────────

    def clear_all(self) -> None:
        """Delete every transaction and budget. Irreversible."""
        with self._db.transaction():
            self._tx_dao.clear()
            self._budget_dao.clear()
        logger.info("Cleared all transactions and budgets")

    # ── Export ────────────────────────────────────────────────────────────────

    def export_json(self) -> dict:
        """Return a full snapshot dict (caller writes to disk)."""
        data = {
            "version": BACKUP_VERSION,
            "timestamp": now_ms(),
            "transactions": self._build_transactions(),
            "budgets": self._build_budgets(),
        }
        logger.info(
            "Exported %d transactions, %d budgets",
            len(data["transactions"]), len(data["budgets"]),
        )
        return data

    def write_backup(self, path: str | Path) -> dict:
        """Write the snapshot to path as UTF-8 JSON; atomic via .tmp + os.replace()."""
        data = self.export_json()
        path = Path(path)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp, path)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise StorageError(f"Could not write backup to {path}: {e}") from e
        return data

    # ── Import ────────────────────────────────────────────────────────────────

    def read_backup(self, path: str | Path) -> dict:
        """Parse a backup file. InvalidBackupError when unreadable or not JSON."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, UnicodeDecodeError, ValueError) as e:
            raise InvalidBackupError(f"Could not read backup file: {e}") from e

    def restore_backup(self, path: str | Path) -> dict:
        return self.import_json(self.read_backup(path))

    def import_json(self, data: dict) -> dict:
        """Replace the whole store with the contents of a snapshot.

        Both sections must be present (possibly empty). The clear and every
        insert run in one transaction scope; a failure part way raises
        ImportFailedError. Returns counts of imported records.
        """
        self._validate_snapshot(data)
        stats = {"transactions": 0, "budgets": 0}

        try:
            with self._db.transaction():
                self._tx_dao.clear()
                self._budget_dao.clear()
                for t in data["transactions"]:
                    self._tx_dao.add(self._transaction_from_dict(t))
                    stats["transactions"] += 1
                for b in data["budgets"]:
                    self._budget_dao.add(self._budget_from_dict(b))
                    stats["budgets"] += 1
        except StorageError as e:
            logger.exception("Import failed after %s", stats)
            rolled_back = not self._db.in_transaction
            raise ImportFailedError(
                f"Import failed; store restored to its previous state: {e}"
                if rolled_back else f"Import failed; store may be incomplete: {e}",
                rolled_back=rolled_back,
            ) from e

        logger.info(
            "Imported %d transactions, %d budgets",
            stats["transactions"], stats["budgets"],
        )
        return stats

    # ── Private builders ──────────────────────────────────────────────────────

    def _build_transactions(self) -> list[dict]:
        return [
            {
                "id": t.id,
                "description": t.description,
                "amount": t.amount,
                "method": t.method,
                "date": t.date,
                "time": t.time,
                "createdAt": t.created_at,
            }
            for t in self._tx_dao.get_all()
        ]

    def _build_budgets(self) -> list[dict]:
        return [
            {"month": b.month, "limit": b.limit}
            for b in self._budget_dao.get_all()
        ]

    @staticmethod
    def _validate_snapshot(data) -> None:
        if not isinstance(data, dict):
            raise InvalidBackupError("Invalid backup: expected a JSON object.")
        for key in ("transactions", "budgets"):
            if key not in data:
                raise InvalidBackupError(f"Invalid backup: missing '{key}'.")
            if not isinstance(data[key], list):
                raise InvalidBackupError(f"Invalid backup: '{key}' must be a list.")

    @staticmethod
    def _transaction_from_dict(t: dict) -> Transaction:
        try:
            return Transaction(
                id=str(t["id"]),
                description=str(t["description"]),
                amount=float(t["amount"]),
                method=str(t["method"]),
                date=str(t["date"]),
                time=str(t.get("time") or ""),
                created_at=int(t["createdAt"]),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise StorageError(f"Malformed transaction record: {t!r}") from e

    @staticmethod
    def _budget_from_dict(b: dict) -> MonthlyBudget:
        try:
            return MonthlyBudget(month=str(b["month"]), limit=float(b["limit"]))
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Malformed budget record: {b!r}") from e
