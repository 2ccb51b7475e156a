import pytest

from database.budget_dao import BudgetDAO
from database.db_manager import DatabaseManager
from database.transaction_dao import TransactionDAO
from models.transaction import Transaction
from services.budget_service import BudgetService
from services.data_service import DataService
from services.transaction_service import TransactionService


@pytest.fixture
def db():
    manager = DatabaseManager(":memory:").open()
    yield manager
    manager.close()


@pytest.fixture
def tx_dao(db):
    return TransactionDAO(db)


@pytest.fixture
def budget_dao(db):
    return BudgetDAO(db)


@pytest.fixture
def tx_service(tx_dao):
    return TransactionService(tx_dao)


@pytest.fixture
def budget_service(budget_dao, tx_service):
    return BudgetService(budget_dao, tx_service)


@pytest.fixture
def data_service(db, tx_dao, budget_dao):
    return DataService(db, tx_dao, budget_dao)


@pytest.fixture
def make_tx():
    """Factory for Transaction objects with sensible defaults."""
    counter = {"n": 0}

    def _make(**overrides) -> Transaction:
        counter["n"] += 1
        fields = dict(
            id=f"tx-{counter['n']}",
            description="Coffee",
            amount=4.5,
            method="DEBIT",
            date="2024-05-10",
            time="09:00",
            created_at=1_700_000_000_000 + counter["n"],
        )
        fields.update(overrides)
        return Transaction(**fields)

    return _make
