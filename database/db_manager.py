import sqlite3
import threading
from contextlib import contextmanager

from utils.constants import DB_FILE, DEFAULT_CATEGORIES, DEFAULT_CURRENCY_SYMBOL
from utils.logger import get_logger

logger = get_logger(__name__)


class DatabaseManager:
    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or DB_FILE
        self._conn: sqlite3.Connection | None = None
        self._write_lock = threading.RLock()
        self._depth = 0

    def get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._conn.execute("PRAGMA journal_mode = WAL")
        return self._conn

    @contextmanager
    def transaction(self):
        """Unit of work on the shared connection.

        Writers on other threads wait for the lock. A unit opened inside another
        on the same thread joins it: only the outermost unit commits, and a
        failure anywhere rolls back everything written since it began.
        """
        with self._write_lock:
            conn = self.get_connection()
            self._depth += 1
            try:
                yield conn
            except BaseException:
                if self._depth == 1:
                    conn.rollback()
                raise
            else:
                if self._depth == 1:
                    conn.commit()
            finally:
                self._depth -= 1

    def initialize(self):
        """Create schema and seed defaults."""
        with self.transaction() as conn:
            self._create_schema(conn)
            self._migrate_schema(conn)
            self._seed_defaults(conn)

    def _migrate_schema(self, conn: sqlite3.Connection):
        """Idempotent ALTER TABLE for columns added after initial release."""
        cols = {row[1] for row in conn.execute("PRAGMA table_info(categories)").fetchall()}
        if "sort_index" not in cols:
            conn.execute(
                "ALTER TABLE categories ADD COLUMN sort_index INTEGER NOT NULL DEFAULT 0"
            )
        cols = {row[1] for row in conn.execute("PRAGMA table_info(budgets)").fetchall()}
        if "sync_with_income" not in cols:
            conn.execute(
                "ALTER TABLE budgets ADD COLUMN sync_with_income INTEGER NOT NULL DEFAULT 0"
            )

    def _create_schema(self, conn: sqlite3.Connection):
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS categories (
                id         INTEGER PRIMARY KEY AUTOINCREMENT,
                name       TEXT NOT NULL UNIQUE,
                type       TEXT NOT NULL CHECK(type IN ('income','expense')),
                icon       TEXT NOT NULL DEFAULT 'circle',
                color_hex  TEXT NOT NULL DEFAULT '#6B7280',
                sort_index INTEGER NOT NULL DEFAULT 0,
                is_system  INTEGER NOT NULL DEFAULT 0
            );

            CREATE TABLE IF NOT EXISTS transactions (
                id              INTEGER PRIMARY KEY AUTOINCREMENT,
                amount          REAL NOT NULL,
                date            TEXT NOT NULL,
                note            TEXT NOT NULL DEFAULT '',
                category_id     INTEGER REFERENCES categories(id) ON DELETE SET NULL,
                is_recurring    INTEGER NOT NULL DEFAULT 0,
                recur_frequency TEXT CHECK(recur_frequency IN ('weekly','monthly','yearly')),
                recur_interval  INTEGER NOT NULL DEFAULT 1 CHECK(recur_interval >= 1),
                recur_end_date  TEXT,
                series_id       TEXT,
                created_at      TEXT NOT NULL DEFAULT (datetime('now')),
                updated_at      TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE INDEX IF NOT EXISTS idx_transactions_date        ON transactions(date);
            CREATE INDEX IF NOT EXISTS idx_transactions_category_id ON transactions(category_id);
            CREATE INDEX IF NOT EXISTS idx_transactions_series      ON transactions(series_id, date);

            CREATE TABLE IF NOT EXISTS budgets (
                id               INTEGER PRIMARY KEY AUTOINCREMENT,
                month            TEXT NOT NULL,
                amount           REAL NOT NULL CHECK(amount >= 0),
                category_id      INTEGER REFERENCES categories(id) ON DELETE CASCADE,
                sync_with_income INTEGER NOT NULL DEFAULT 0
            );

            CREATE INDEX IF NOT EXISTS idx_budgets_month ON budgets(month);
            CREATE UNIQUE INDEX IF NOT EXISTS idx_budgets_month_category
                ON budgets(month, COALESCE(category_id, 0));

            CREATE TABLE IF NOT EXISTS app_settings (
                key   TEXT PRIMARY KEY,
                value TEXT NOT NULL
            );
        """)

    def _seed_defaults(self, conn: sqlite3.Connection):
        defaults = [
            ("currency_symbol", DEFAULT_CURRENCY_SYMBOL),
        ]
        for key, value in defaults:
            conn.execute(
                "INSERT OR IGNORE INTO app_settings(key, value) VALUES (?, ?)",
                (key, value),
            )

        # Default categories only on first run, so user deletions stick
        count = conn.execute("SELECT COUNT(*) FROM categories").fetchone()[0]
        if count:
            return
        for idx, cat in enumerate(DEFAULT_CATEGORIES):
            conn.execute(
                """INSERT OR IGNORE INTO categories(name, type, icon, color_hex, sort_index, is_system)
                   VALUES (?, ?, ?, ?, ?, 1)""",
                (cat["name"], cat["type"], cat["icon"], cat["color_hex"], idx),
            )
        logger.info("Seeded %d default categories into %s", len(DEFAULT_CATEGORIES), self.db_path)

    def get_setting(self, key: str, default: str = "") -> str:
        conn = self.get_connection()
        row = conn.execute(
            "SELECT value FROM app_settings WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else default

    def set_setting(self, key: str, value: str):
        with self.transaction() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO app_settings(key, value) VALUES (?, ?)",
                (key, value),
            )

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None
