"""Tests for the record store: TransactionDAO and BudgetDAO."""

import pytest

from models.budget import MonthlyBudget
from utils.exceptions import DuplicateKeyError, StorageError


class TestTransactionDAO:
    def test_add_and_get_by_id(self, tx_dao, make_tx):
        tx = make_tx(id="a", description="Lunch", amount=12.3)
        tx_dao.add(tx)
        assert tx_dao.get_by_id("a") == tx

    def test_get_by_id_missing_returns_none(self, tx_dao):
        assert tx_dao.get_by_id("nope") is None

    def test_add_duplicate_id_raises_and_leaves_store_unchanged(self, tx_dao, make_tx):
        original = make_tx(id="a", description="Original")
        tx_dao.add(original)

        with pytest.raises(DuplicateKeyError) as exc_info:
            tx_dao.add(make_tx(id="a", description="Impostor"))

        assert exc_info.value.key == "a"
        assert tx_dao.get_all() == [original]

    def test_duplicate_key_error_is_a_storage_error(self, tx_dao, make_tx):
        tx_dao.add(make_tx(id="a"))
        with pytest.raises(StorageError):
            tx_dao.add(make_tx(id="a"))

    def test_update_overwrites_existing(self, tx_dao, make_tx):
        tx_dao.add(make_tx(id="a", amount=1.0))
        changed = make_tx(id="a", amount=99.0, method="CREDIT")
        tx_dao.update(changed)
        assert tx_dao.get_by_id("a") == changed
        assert tx_dao.count() == 1

    def test_update_creates_when_absent(self, tx_dao, make_tx):
        tx = make_tx(id="new")
        tx_dao.update(tx)
        assert tx_dao.get_by_id("new") == tx

    def test_delete_removes_record(self, tx_dao, make_tx):
        tx_dao.add(make_tx(id="a"))
        tx_dao.delete("a")
        assert tx_dao.get_by_id("a") is None

    def test_delete_missing_is_a_no_op(self, tx_dao, make_tx):
        tx = make_tx(id="a")
        tx_dao.add(tx)
        tx_dao.delete("does-not-exist")
        assert tx_dao.get_all() == [tx]

    def test_get_by_date_range_is_inclusive(self, tx_dao, make_tx):
        tx_dao.add(make_tx(id="before", date="2024-04-30"))
        tx_dao.add(make_tx(id="first", date="2024-05-01"))
        tx_dao.add(make_tx(id="last", date="2024-05-31"))
        tx_dao.add(make_tx(id="after", date="2024-06-01"))

        ids = {t.id for t in tx_dao.get_by_date_range("2024-05-01", "2024-05-31")}
        assert ids == {"first", "last"}

    def test_constraint_violation_raises_storage_error(self, tx_dao, make_tx):
        with pytest.raises(StorageError):
            tx_dao.add(make_tx(id="bad", amount=0))
        with pytest.raises(StorageError):
            tx_dao.add(make_tx(id="bad", method="CASH"))
        assert tx_dao.count() == 0

    def test_clear(self, tx_dao, make_tx):
        tx_dao.add(make_tx())
        tx_dao.add(make_tx())
        tx_dao.clear()
        assert tx_dao.get_all() == []

    def test_callers_get_copies(self, tx_dao, make_tx):
        tx_dao.add(make_tx(id="a", description="Lunch"))
        fetched = tx_dao.get_by_id("a")
        fetched.description = "Mutated"
        assert tx_dao.get_by_id("a").description == "Lunch"


class TestBudgetDAO:
    def test_get_missing_month_returns_zero(self, budget_dao):
        assert budget_dao.get("2099-01") == 0.0
        assert budget_dao.get_record("2099-01") is None

    def test_put_is_upsert(self, budget_dao):
        budget_dao.put(MonthlyBudget("2024-05", 500.0))
        budget_dao.put(MonthlyBudget("2024-05", 750.0))
        assert budget_dao.get("2024-05") == 750.0
        assert budget_dao.get_all() == [MonthlyBudget("2024-05", 750.0)]

    def test_add_rejects_existing_month(self, budget_dao):
        budget_dao.add(MonthlyBudget("2024-05", 500.0))
        with pytest.raises(DuplicateKeyError):
            budget_dao.add(MonthlyBudget("2024-05", 1.0))
        assert budget_dao.get("2024-05") == 500.0

    def test_negative_limit_rejected_by_engine(self, budget_dao):
        with pytest.raises(StorageError):
            budget_dao.put(MonthlyBudget("2024-05", -5.0))

    def test_get_all_sorted_by_month(self, budget_dao):
        budget_dao.put(MonthlyBudget("2024-06", 1.0))
        budget_dao.put(MonthlyBudget("2024-01", 2.0))
        assert [b.month for b in budget_dao.get_all()] == ["2024-01", "2024-06"]

    def test_clear(self, budget_dao):
        budget_dao.put(MonthlyBudget("2024-05", 500.0))
        budget_dao.clear()
        assert budget_dao.get_all() == []
        assert budget_dao.get("2024-05") == 0.0
