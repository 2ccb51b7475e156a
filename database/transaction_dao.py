import logging
import sqlite3
from typing import Optional

from database.db_manager import DatabaseManager
from models.transaction import Transaction
from utils.exceptions import DuplicateKeyError, StorageError

logger = logging.getLogger(__name__)

_COLUMNS = "id, description, amount, method, date, time, created_at"


class TransactionDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> Transaction:
        return Transaction(
            id=row["id"],
            description=row["description"],
            amount=row["amount"],
            method=row["method"],
            date=row["date"],
            time=row["time"] or "",
            created_at=row["created_at"],
        )

    def _params(self, tx: Transaction) -> tuple:
        return (
            tx.id,
            tx.description,
            tx.amount,
            tx.method,
            tx.date,
            tx.time or "",
            tx.created_at,
        )

    def get_all(self) -> list[Transaction]:
        rows = self._db.query(
            f"SELECT {_COLUMNS} FROM transactions ORDER BY date ASC, rowid ASC"
        )
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, tx_id: str) -> Optional[Transaction]:
        rows = self._db.query(
            f"SELECT {_COLUMNS} FROM transactions WHERE id = ?", (tx_id,)
        )
        return self._row_to_model(rows[0]) if rows else None

    def get_by_date_range(self, start: str, end: str) -> list[Transaction]:
        """All rows whose date string lies within [start, end], inclusive.

        Uses idx_transactions_date; rows come back in index order.
        """
        rows = self._db.query(
            f"""SELECT {_COLUMNS} FROM transactions
                WHERE date BETWEEN ? AND ?
                ORDER BY date ASC, rowid ASC""",
            (start, end),
        )
        return [self._row_to_model(r) for r in rows]

    def count(self) -> int:
        return self._db.query("SELECT COUNT(*) FROM transactions")[0][0]

    def add(self, tx: Transaction) -> Transaction:
        """Insert a new row; DuplicateKeyError if the id is taken."""
        try:
            with self._db.transaction() as conn:
                conn.execute(
                    f"INSERT INTO transactions({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                    self._params(tx),
                )
        except StorageError as e:
            if _is_unique_violation(e):
                raise DuplicateKeyError("Transaction", tx.id) from e.__cause__
            raise
        logger.debug("Added transaction %s", tx.id)
        return tx

    def update(self, tx: Transaction) -> Transaction:
        """Upsert by id: overwrites an existing row or creates it."""
        with self._db.transaction() as conn:
            conn.execute(
                f"""INSERT INTO transactions({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        description = excluded.description,
                        amount      = excluded.amount,
                        method      = excluded.method,
                        date        = excluded.date,
                        time        = excluded.time,
                        created_at  = excluded.created_at""",
                self._params(tx),
            )
        logger.debug("Upserted transaction %s", tx.id)
        return tx

    def delete(self, tx_id: str):
        with self._db.transaction() as conn:
            conn.execute("DELETE FROM transactions WHERE id = ?", (tx_id,))

    def clear(self):
        with self._db.transaction() as conn:
            conn.execute("DELETE FROM transactions")


def _is_unique_violation(error: StorageError) -> bool:
    cause = error.__cause__
    return isinstance(cause, sqlite3.IntegrityError) and "UNIQUE" in str(cause).upper()
