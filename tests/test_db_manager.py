"""Tests for DatabaseManager: lifecycle, schema, migration, transaction scope."""

import sqlite3
import threading

import pytest

from database.db_manager import DatabaseManager
from utils.constants import DB_SCHEMA_VERSION
from utils.exceptions import StorageError


def _create_first_release_db(path):
    """Schema as shipped before the time column existed."""
    conn = sqlite3.connect(path)
    conn.executescript("""
        CREATE TABLE transactions (
            id          TEXT    PRIMARY KEY,
            description TEXT    NOT NULL,
            amount      REAL    NOT NULL,
            method      TEXT    NOT NULL,
            date        TEXT    NOT NULL,
            created_at  INTEGER NOT NULL
        );
        CREATE INDEX idx_transactions_date ON transactions(date);
        CREATE TABLE budgets (month TEXT PRIMARY KEY, limit_amount REAL NOT NULL);
        PRAGMA user_version = 1;
    """)
    conn.execute(
        "INSERT INTO transactions VALUES ('old-1', 'Rent', 900.0, 'DEBIT', '2023-12-01', 5)"
    )
    conn.commit()
    conn.close()


class TestLifecycle:
    def test_open_creates_schema(self, tmp_path):
        path = str(tmp_path / "expenses.db")
        with DatabaseManager(path) as db:
            tables = {r["name"] for r in db.query(
                "SELECT name FROM sqlite_master WHERE type = 'table'"
            )}
            indexes = {r["name"] for r in db.query(
                "SELECT name FROM sqlite_master WHERE type = 'index'"
            )}
        assert {"transactions", "budgets", "app_settings"} <= tables
        assert "idx_transactions_date" in indexes

    def test_close_is_idempotent(self, db):
        db.close()
        db.close()

    def test_data_survives_reopen(self, tmp_path):
        path = str(tmp_path / "expenses.db")
        with DatabaseManager(path) as db:
            db.set_setting("currency_symbol", "R$")
        with DatabaseManager(path) as db:
            assert db.get_setting("currency_symbol") == "R$"

    def test_default_settings_seeded(self, db):
        assert db.get_setting("appearance_mode") == "system"
        assert db.get_setting("missing", "fallback") == "fallback"


class TestMigration:
    def test_adds_time_column_to_first_release_db(self, tmp_path):
        path = str(tmp_path / "old.db")
        _create_first_release_db(path)

        with DatabaseManager(path) as db:
            cols = {r[1] for r in db.query("PRAGMA table_info(transactions)")}
            row = db.query("SELECT id, time FROM transactions")[0]
            assert "time" in cols
            assert row["id"] == "old-1"
            assert row["time"] == ""
            assert db.schema_version() == DB_SCHEMA_VERSION

    def test_migration_is_idempotent(self, tmp_path):
        path = str(tmp_path / "old.db")
        _create_first_release_db(path)
        DatabaseManager(path).open().close()
        with DatabaseManager(path) as db:
            assert db.schema_version() == DB_SCHEMA_VERSION
            assert len(db.query("SELECT * FROM transactions")) == 1


class TestTransactionScope:
    def test_commit_on_success(self, db):
        with db.transaction() as conn:
            conn.execute("INSERT INTO budgets(month, limit_amount) VALUES ('2024-01', 10)")
        assert len(db.query("SELECT * FROM budgets")) == 1

    def test_rollback_on_exception(self, db):
        with pytest.raises(RuntimeError):
            with db.transaction() as conn:
                conn.execute("INSERT INTO budgets(month, limit_amount) VALUES ('2024-01', 10)")
                raise RuntimeError("boom")
        assert db.query("SELECT * FROM budgets") == []
        assert not db.in_transaction

    def test_nested_scope_joins_outer(self, db):
        with pytest.raises(RuntimeError):
            with db.transaction() as conn:
                with db.transaction() as inner:
                    inner.execute(
                        "INSERT INTO budgets(month, limit_amount) VALUES ('2024-01', 10)"
                    )
                assert db.in_transaction
                conn.execute("INSERT INTO budgets(month, limit_amount) VALUES ('2024-02', 20)")
                raise RuntimeError("boom")
        assert db.query("SELECT * FROM budgets") == []

    def test_engine_error_becomes_storage_error(self, db):
        with pytest.raises(StorageError) as exc_info:
            with db.transaction() as conn:
                conn.execute("INSERT INTO budgets(month, limit_amount) VALUES ('2024-01', -1)")
        assert isinstance(exc_info.value.__cause__, sqlite3.IntegrityError)
        assert not db.in_transaction

    def test_bad_query_becomes_storage_error(self, db):
        with pytest.raises(StorageError):
            db.query("SELECT * FROM no_such_table")

    def test_unopenable_path_raises_storage_error(self, tmp_path):
        bad = str(tmp_path / "missing_dir" / "x.db")
        with pytest.raises(StorageError):
            DatabaseManager(bad).open()


class TestThreadIsolation:
    def test_reader_thread_waits_for_commit(self, db):
        seen = {}

        def read():
            seen["months"] = [r["month"] for r in db.query("SELECT month FROM budgets")]

        with db.transaction() as conn:
            conn.execute("DELETE FROM budgets")
            reader = threading.Thread(target=read)
            reader.start()
            reader.join(timeout=0.2)
            assert reader.is_alive()
            conn.execute("INSERT INTO budgets(month, limit_amount) VALUES ('2024-01', 10)")

        reader.join(timeout=5)
        assert seen == {"months": ["2024-01"]}

    def test_writer_thread_does_not_join_open_scope(self, db):
        seen = {}

        def write():
            seen["in_transaction"] = db.in_transaction
            with db.transaction() as conn:
                conn.execute("INSERT INTO budgets(month, limit_amount) VALUES ('2024-02', 20)")

        with pytest.raises(RuntimeError):
            with db.transaction() as conn:
                conn.execute("INSERT INTO budgets(month, limit_amount) VALUES ('2024-01', 10)")
                writer = threading.Thread(target=write)
                writer.start()
                writer.join(timeout=0.2)
                raise RuntimeError("boom")

        writer.join(timeout=5)
        assert not writer.is_alive()
        assert seen == {"in_transaction": False}
        assert [r["month"] for r in db.query("SELECT month FROM budgets")] == ["2024-02"]
