import logging
import sqlite3
import threading
from contextlib import contextmanager
from typing import Iterator

from utils.constants import DB_FILE, DB_SCHEMA_VERSION, DEFAULT_SETTINGS
from utils.exceptions import StorageError

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Owns the single SQLite connection behind both record kinds.

    Opened explicitly (or lazily on first use) and closed explicitly; one
    instance is created by the composition root and handed to every DAO.

    Every statement runs under a re-entrant lock. A transaction scope keeps
    the lock until it commits or rolls back, so other threads never read
    uncommitted rows and never join a scope they did not open.
    """

    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or DB_FILE
        self._conn: sqlite3.Connection | None = None
        self._tx_depth = 0
        self._lock = threading.RLock()

    def __enter__(self) -> "DatabaseManager":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def open(self) -> "DatabaseManager":
        """Connect, create the schema and run the migration step."""
        self.get_connection()
        self.initialize()
        return self

    def get_connection(self) -> sqlite3.Connection:
        with self._lock:
            return self._connect()

    def _connect(self) -> sqlite3.Connection:
        if self._conn is None:
            try:
                # Autocommit mode: transaction() issues BEGIN/COMMIT itself.
                self._conn = sqlite3.connect(
                    self.db_path, check_same_thread=False, isolation_level=None
                )
                self._conn.row_factory = sqlite3.Row
                self._conn.execute("PRAGMA foreign_keys = ON")
                self._conn.execute("PRAGMA journal_mode = WAL")
            except sqlite3.Error as e:
                self._conn = None
                raise StorageError(f"Could not open database {self.db_path}: {e}") from e
            logger.debug("Opened database %s", self.db_path)
        return self._conn

    @property
    def in_transaction(self) -> bool:
        """True while the calling thread is inside a transaction() scope."""
        if not self._lock.acquire(blocking=False):
            return False
        try:
            return self._tx_depth > 0
        finally:
            self._lock.release()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run the enclosed statements as one engine transaction.

        Nested scopes join the outermost one; only the outermost scope commits
        or rolls back. sqlite3 errors leave the scope as StorageError. The
        connection lock is held for the whole scope.
        """
        with self._lock:
            conn = self._connect()
            outermost = self._tx_depth == 0
            if outermost:
                try:
                    conn.execute("BEGIN IMMEDIATE")
                except sqlite3.Error as e:
                    raise StorageError(f"Could not start transaction: {e}") from e
            self._tx_depth += 1
            try:
                yield conn
            except sqlite3.Error as e:
                self._tx_depth -= 1
                if outermost:
                    self._rollback(conn)
                raise StorageError(str(e)) from e
            except BaseException:
                self._tx_depth -= 1
                if outermost:
                    self._rollback(conn)
                raise
            else:
                self._tx_depth -= 1
                if outermost:
                    try:
                        conn.execute("COMMIT")
                    except sqlite3.Error as e:
                        self._rollback(conn)
                        raise StorageError(f"Commit failed: {e}") from e

    def _rollback(self, conn: sqlite3.Connection):
        try:
            conn.execute("ROLLBACK")
        except sqlite3.Error:
            logger.exception("Rollback failed on %s", self.db_path)

    def query(self, sql: str, params: tuple | list = ()) -> list[sqlite3.Row]:
        """Run a read-only statement, translating engine errors."""
        with self._lock:
            conn = self._connect()
            try:
                return conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                raise StorageError(str(e)) from e

    def initialize(self):
        """Create schema, migrate, and seed defaults."""
        with self.transaction() as conn:
            self._create_schema(conn)
            self._migrate_schema(conn)
            self._seed_defaults(conn)

    def _create_schema(self, conn: sqlite3.Connection):
        conn.execute("""
            CREATE TABLE IF NOT EXISTS transactions (
                id          TEXT    PRIMARY KEY,
                description TEXT    NOT NULL CHECK(length(description) > 0),
                amount      REAL    NOT NULL CHECK(amount > 0),
                method      TEXT    NOT NULL CHECK(method IN ('DEBIT','CREDIT')),
                date        TEXT    NOT NULL,
                time        TEXT    NOT NULL DEFAULT '',
                created_at  INTEGER NOT NULL
            )
        """)
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_transactions_date ON transactions(date)"
        )
        conn.execute("""
            CREATE TABLE IF NOT EXISTS budgets (
                month        TEXT PRIMARY KEY,
                limit_amount REAL NOT NULL CHECK(limit_amount >= 0)
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS app_settings (
                key   TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)

    def _migrate_schema(self, conn: sqlite3.Connection):
        """Idempotent step from the first release (no time column) to current."""
        version = conn.execute("PRAGMA user_version").fetchone()[0]
        if version >= DB_SCHEMA_VERSION:
            return
        cols = {row[1] for row in conn.execute("PRAGMA table_info(transactions)").fetchall()}
        if "time" not in cols:
            conn.execute(
                "ALTER TABLE transactions ADD COLUMN time TEXT NOT NULL DEFAULT ''"
            )
            logger.info("Migrated %s: added transactions.time", self.db_path)
        conn.execute(f"PRAGMA user_version = {DB_SCHEMA_VERSION}")

    def _seed_defaults(self, conn: sqlite3.Connection):
        for key, value in DEFAULT_SETTINGS.items():
            conn.execute(
                "INSERT OR IGNORE INTO app_settings(key, value) VALUES (?, ?)",
                (key, value),
            )

    def schema_version(self) -> int:
        return self.query("PRAGMA user_version")[0][0]

    def get_setting(self, key: str, default: str = "") -> str:
        rows = self.query("SELECT value FROM app_settings WHERE key = ?", (key,))
        return rows[0]["value"] if rows else default

    def set_setting(self, key: str, value: str):
        with self.transaction() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO app_settings(key, value) VALUES (?, ?)",
                (key, value),
            )

    def close(self):
        with self._lock:
            if self._conn:
                self._conn.close()
                self._conn = None
                self._tx_depth = 0
                logger.debug("Closed database %s", self.db_path)
