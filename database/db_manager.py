import json
import logging
import os
import sqlite3

from utils.constants import (
    DB_FILE, DEFAULT_TAB_ORDER, BUDGET_ALERT_THRESHOLD,
    REMINDER_DEFAULT_HOUR, REMINDER_DEFAULT_MINUTE,
)

logger = logging.getLogger(__name__)

# Tables holding user data, in FK-safe deletion order
USER_TABLES = (
    "transaction_tags",
    "transactions",
    "transfers",
    "budgets",
    "tags",
    "categories",
    "balance_accounts",
    "dismissed_reminders",
)


class DatabaseManager:
    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or DB_FILE
        self._conn: sqlite3.Connection | None = None

    def get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
            if self.db_path != ":memory:":
                self._conn.execute("PRAGMA journal_mode = WAL")
        return self._conn

    def initialize(self):
        """Create schema and seed default settings."""
        conn = self.get_connection()
        self._create_schema(conn)
        self._migrate_schema(conn)
        self._seed_defaults(conn)
        conn.commit()
        logger.info("Database ready at %s", self.db_path)

    def _migrate_schema(self, conn: sqlite3.Connection):
        """Idempotent ALTER TABLE for columns added after initial release."""
        cols = {row[1] for row in conn.execute("PRAGMA table_info(balance_accounts)").fetchall()}
        if "icon_name" not in cols:
            conn.execute(
                "ALTER TABLE balance_accounts ADD COLUMN icon_name TEXT NOT NULL DEFAULT 'wallet'"
            )
            logger.info("Migrated balance_accounts: added icon_name")
        cols = {row[1] for row in conn.execute("PRAGMA table_info(categories)").fetchall()}
        if "placement" not in cols:
            conn.execute(
                "ALTER TABLE categories ADD COLUMN placement INTEGER NOT NULL DEFAULT 0"
            )
            logger.info("Migrated categories: added placement")

    def _create_schema(self, conn: sqlite3.Connection):
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS balance_accounts (
                id          INTEGER PRIMARY KEY AUTOINCREMENT,
                name        TEXT    NOT NULL UNIQUE,
                currency    TEXT    NOT NULL DEFAULT 'USD',
                balance     REAL    NOT NULL DEFAULT 0.0,
                icon_name   TEXT    NOT NULL DEFAULT 'wallet',
                color_hex   TEXT    NOT NULL DEFAULT '#2196F3',
                created_at  TEXT    NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS categories (
                id         INTEGER PRIMARY KEY AUTOINCREMENT,
                type       TEXT    NOT NULL CHECK(type IN ('spending','income')),
                name       TEXT    NOT NULL,
                icon_name  TEXT    NOT NULL DEFAULT '',
                color_hex  TEXT    NOT NULL DEFAULT '#888888',
                placement  INTEGER NOT NULL DEFAULT 0,
                UNIQUE(type, name)
            );

            CREATE TABLE IF NOT EXISTS tags (
                id         INTEGER PRIMARY KEY AUTOINCREMENT,
                name       TEXT NOT NULL UNIQUE COLLATE NOCASE,
                color_hex  TEXT NOT NULL DEFAULT '#888888'
            );

            CREATE TABLE IF NOT EXISTS transactions (
                id           INTEGER PRIMARY KEY AUTOINCREMENT,
                type         TEXT    NOT NULL CHECK(type IN ('spending','income')),
                comment      TEXT    NOT NULL DEFAULT '',
                value        REAL    NOT NULL CHECK(value > 0),
                date         TEXT    NOT NULL,
                account_id   INTEGER NOT NULL REFERENCES balance_accounts(id) ON DELETE CASCADE,
                category_id  INTEGER NOT NULL REFERENCES categories(id) ON DELETE RESTRICT,
                created_at   TEXT    NOT NULL DEFAULT (datetime('now')),
                updated_at   TEXT    NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS transaction_tags (
                transaction_id INTEGER NOT NULL REFERENCES transactions(id) ON DELETE CASCADE,
                tag_id         INTEGER NOT NULL REFERENCES tags(id) ON DELETE CASCADE,
                PRIMARY KEY (transaction_id, tag_id)
            );

            CREATE TABLE IF NOT EXISTS transfers (
                id               INTEGER PRIMARY KEY AUTOINCREMENT,
                from_account_id  INTEGER NOT NULL REFERENCES balance_accounts(id) ON DELETE CASCADE,
                to_account_id    INTEGER NOT NULL REFERENCES balance_accounts(id) ON DELETE CASCADE,
                value_from       REAL    NOT NULL CHECK(value_from > 0),
                value_to         REAL    NOT NULL CHECK(value_to >= 0),
                date             TEXT    NOT NULL,
                comment          TEXT    NOT NULL DEFAULT ''
            );

            CREATE TABLE IF NOT EXISTS budgets (
                id           INTEGER PRIMARY KEY AUTOINCREMENT,
                name         TEXT    NOT NULL,
                value        REAL    NOT NULL CHECK(value > 0),
                period       TEXT    NOT NULL CHECK(period IN ('week','month','year')),
                category_id  INTEGER REFERENCES categories(id) ON DELETE CASCADE,
                account_id   INTEGER REFERENCES balance_accounts(id) ON DELETE CASCADE
            );

            CREATE INDEX IF NOT EXISTS idx_transactions_account_id  ON transactions(account_id);
            CREATE INDEX IF NOT EXISTS idx_transactions_date        ON transactions(date);
            CREATE INDEX IF NOT EXISTS idx_transactions_category_id ON transactions(category_id);
            CREATE INDEX IF NOT EXISTS idx_transaction_tags_tag     ON transaction_tags(tag_id);
            CREATE INDEX IF NOT EXISTS idx_transfers_date           ON transfers(date);

            CREATE TABLE IF NOT EXISTS app_settings (
                key   TEXT PRIMARY KEY,
                value TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS dismissed_reminders (
                key     TEXT PRIMARY KEY,
                expires TEXT NOT NULL
            );
        """)

    def _seed_defaults(self, conn: sqlite3.Connection):
        defaults = [
            ("color_scheme", "system"),
            ("date_format", "DD.MM.YYYY"),
            ("budget_alert_threshold", f"{BUDGET_ALERT_THRESHOLD:.2f}"),
            ("first_launch", "1"),
            ("default_account_id", ""),
            ("tag_default_color", ""),
            ("tab_order", json.dumps(DEFAULT_TAB_ORDER)),
            ("reminder_enabled", "1"),
            ("reminder_hour", str(REMINDER_DEFAULT_HOUR)),
            ("reminder_minute", str(REMINDER_DEFAULT_MINUTE)),
        ]
        for key, value in defaults:
            conn.execute(
                "INSERT OR IGNORE INTO app_settings(key, value) VALUES (?, ?)",
                (key, value),
            )

    def get_setting(self, key: str, default: str = "") -> str:
        conn = self.get_connection()
        row = conn.execute(
            "SELECT value FROM app_settings WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else default

    def set_setting(self, key: str, value: str):
        conn = self.get_connection()
        conn.execute(
            "INSERT OR REPLACE INTO app_settings(key, value) VALUES (?, ?)",
            (key, value),
        )
        conn.commit()

    @staticmethod
    def open_default(db_folder: str | None = None) -> "DatabaseManager":
        """Startup factory: open (creating if needed) the app database.

        db_folder: if provided, the DB file lives in that directory instead of CWD.
        """
        if db_folder:
            os.makedirs(db_folder, exist_ok=True)
            path = os.path.join(db_folder, DB_FILE)
        else:
            path = DB_FILE
        db = DatabaseManager(path)
        db.initialize()
        return db

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None
