import logging
import math
import uuid
from functools import cmp_to_key

from models.transaction import Transaction
from database.transaction_dao import TransactionDAO
from utils.constants import PAYMENT_METHODS
from utils.date_helpers import (
    is_valid_month,
    is_valid_time,
    month_bounds,
    now_ms,
    now_time_str,
    parse_date,
)
from utils.exceptions import ValidationError

logger = logging.getLogger(__name__)


def _compare_newest_first(a: Transaction, b: Transaction) -> int:
    # Time only breaks ties when both sides carry one.
    if a.date != b.date:
        return -1 if a.date > b.date else 1
    if a.time and b.time and a.time != b.time:
        return -1 if a.time > b.time else 1
    return (b.created_at or 0) - (a.created_at or 0)


def sort_newest_first(transactions: list[Transaction]) -> list[Transaction]:
    """Date desc, then time desc, then created_at desc. Stable for equal keys."""
    return sorted(transactions, key=cmp_to_key(_compare_newest_first))


class TransactionService:
    def __init__(self, tx_dao: TransactionDAO):
        self._dao = tx_dao

    def list_for_month(self, month: str) -> list[Transaction]:
        """All transactions dated inside month (YYYY-MM), newest first."""
        if not is_valid_month(month):
            raise ValidationError(f"Invalid month: {month!r}. Use YYYY-MM.")
        start, end = month_bounds(month)
        return sort_newest_first(self._dao.get_by_date_range(start, end))

    def get(self, tx_id: str) -> Transaction | None:
        return self._dao.get_by_id(tx_id)

    def create(
        self,
        description: str,
        amount: float,
        method: str,
        date: str,
        time: str | None = None,
    ) -> Transaction:
        tx = Transaction(
            id=str(uuid.uuid4()),
            description=(description or "").strip(),
            amount=amount,
            method=method,
            date=date,
            time=time if time is not None else now_time_str(),
            created_at=now_ms(),
        )
        self._validate(tx)
        return self._dao.add(tx)

    def update(
        self,
        tx_id: str,
        description: str,
        amount: float,
        method: str,
        date: str,
        time: str = "",
    ) -> Transaction:
        """Overwrite the editable fields; id and created_at are kept.

        Updating an id that is not stored creates it.
        """
        existing = self._dao.get_by_id(tx_id)
        tx = Transaction(
            id=tx_id,
            description=(description or "").strip(),
            amount=amount,
            method=method,
            date=date,
            time=time or "",
            created_at=existing.created_at if existing else now_ms(),
        )
        self._validate(tx)
        return self._dao.update(tx)

    def delete(self, tx_id: str):
        self._dao.delete(tx_id)

    def _validate(self, tx: Transaction):
        if not tx.id:
            raise ValidationError("Transaction id cannot be empty.")
        if not tx.description:
            raise ValidationError("Description cannot be empty.")
        if (
            isinstance(tx.amount, bool)
            or not isinstance(tx.amount, (int, float))
            or not math.isfinite(tx.amount)
        ):
            raise ValidationError("Amount must be a number.")
        if tx.amount <= 0:
            raise ValidationError("Amount must be positive.")
        if tx.method not in PAYMENT_METHODS:
            raise ValidationError(f"Invalid payment method: {tx.method}")
        if not parse_date(tx.date):
            raise ValidationError("Invalid date format. Use YYYY-MM-DD.")
        if tx.time and not is_valid_time(tx.time):
            raise ValidationError("Invalid time format. Use HH:MM.")
