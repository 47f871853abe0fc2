"""Export and import of the full data graph as JSON, CSV export of
transactions, and wiping all stored data.

The JSON document keeps database ids so that transactions, transfers and
budgets can reference accounts, categories and tags. Import always replaces
the stored data and remaps those ids to the newly inserted rows.
"""
import csv
import json
import logging
from datetime import date, datetime

from database.db_manager import DatabaseManager, USER_TABLES
from database.account_dao import AccountDAO
from database.category_dao import CategoryDAO
from database.tag_dao import TagDAO
from database.transaction_dao import TransactionDAO
from database.transfer_dao import TransferDAO
from database.budget_dao import BudgetDAO
from services.settings_service import SettingsService
from utils.constants import TRANSACTION_TYPES, BUDGET_PERIODS
from utils.currency import format_amount
from utils.date_helpers import format_date, storage_date

logger = logging.getLogger(__name__)

EXPORT_VERSION = 1
CSV_HEADER = ["Date", "Type", "Account", "Currency", "Category", "Tags", "Value", "Comment"]

_SECTIONS = ("balance_accounts", "categories", "tags", "transactions", "transfers", "budgets")

_REQUIRED_FIELDS = {
    "balance_accounts": ("id", "name", "currency"),
    "categories": ("id", "type", "name"),
    "tags": ("id", "name"),
    "transactions": ("id", "type", "value", "date", "account_id", "category_id"),
    "transfers": ("id", "from_account_id", "to_account_id", "value_from", "value_to", "date"),
    "budgets": ("id", "name", "value", "period"),
}


class DataService:
    def __init__(
        self,
        db: DatabaseManager,
        account_dao: AccountDAO,
        category_dao: CategoryDAO,
        tag_dao: TagDAO,
        tx_dao: TransactionDAO,
        transfer_dao: TransferDAO,
        budget_dao: BudgetDAO,
        settings: SettingsService,
    ):
        self._db = db
        self._account_dao = account_dao
        self._category_dao = category_dao
        self._tag_dao = tag_dao
        self._tx_dao = tx_dao
        self._transfer_dao = transfer_dao
        self._budget_dao = budget_dao
        self._settings = settings

    # ── Export ────────────────────────────────────────────────────────────────

    def export_json(self) -> dict:
        """Return the full export dict (caller writes to disk)."""
        return {
            "export_version": EXPORT_VERSION,
            "exported_at": datetime.now().isoformat(timespec="seconds"),
            "default_account_id": self._settings.get_default_account_id(),
            "balance_accounts": [
                {
                    "id": a.id,
                    "name": a.name,
                    "currency": a.currency,
                    "balance": a.balance,
                    "icon_name": a.icon_name,
                    "color_hex": a.color_hex,
                }
                for a in self._account_dao.get_all()
            ],
            "categories": [
                {
                    "id": c.id,
                    "type": c.type,
                    "name": c.name,
                    "icon_name": c.icon_name,
                    "color_hex": c.color_hex,
                    "placement": c.placement,
                }
                for c in self._category_dao.get_all()
            ],
            "tags": [
                {"id": t.id, "name": t.name, "color_hex": t.color_hex}
                for t in self._tag_dao.get_all()
            ],
            "transactions": [
                {
                    "id": tx.id,
                    "type": tx.type,
                    "value": tx.value,
                    "date": tx.date,
                    "comment": tx.comment,
                    "account_id": tx.account_id,
                    "category_id": tx.category_id,
                    "tag_ids": tx.tag_ids,
                }
                for tx in self._tx_dao.get_all()
            ],
            "transfers": [
                {
                    "id": tr.id,
                    "from_account_id": tr.from_account_id,
                    "to_account_id": tr.to_account_id,
                    "value_from": tr.value_from,
                    "value_to": tr.value_to,
                    "date": tr.date,
                    "comment": tr.comment,
                }
                for tr in self._transfer_dao.get_all()
            ],
            "budgets": [
                {
                    "id": b.id,
                    "name": b.name,
                    "value": b.value,
                    "period": b.period,
                    "category_id": b.category_id,
                    "account_id": b.account_id,
                }
                for b in self._budget_dao.get_all()
            ],
        }

    def export_json_file(self, path: str) -> dict:
        data = self.export_json()
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        logger.info("Exported %d transactions to %s", len(data["transactions"]), path)
        return data

    def transactions_csv_rows(
        self, start: date, end: date, account_id: int | None = None
    ) -> list[list[str]]:
        """Header plus one row per transaction in [start, end], oldest first."""
        if start > end:
            raise ValueError("Start date must be on or before the end date.")
        transactions = self._tx_dao.get_filtered(
            account_id=account_id, start=format_date(start), end=format_date(end)
        )
        transactions.sort(key=lambda t: (t.date, t.id))
        rows = [list(CSV_HEADER)]
        for tx in transactions:
            rows.append([
                tx.date,
                tx.type,
                tx.account_name,
                tx.currency,
                tx.category_name,
                tx.tag_names,
                format_amount(tx.value),
                tx.comment,
            ])
        return rows

    def export_transactions_csv(
        self, path: str, start: date, end: date, account_id: int | None = None
    ) -> int:
        """Write transactions in [start, end] to a CSV file. Returns the row count."""
        rows = self.transactions_csv_rows(start, end, account_id)
        with open(path, "w", newline="", encoding="utf-8") as f:
            csv.writer(f).writerows(rows)
        logger.info("Exported %d transactions to %s", len(rows) - 1, path)
        return len(rows) - 1

    # ── Import ────────────────────────────────────────────────────────────────

    @staticmethod
    def load_json_file(path: str) -> dict:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except ValueError as e:
            raise ValueError(f"Invalid export file: {e}") from e

    def preview_import(self, data) -> dict:
        """Validate an export document and return entity counts without writing."""
        self._validate(data)
        return {key: len(data.get(key) or []) for key in _SECTIONS}

    def import_json(self, data) -> dict:
        """Replace all stored data with the export document. Returns created counts."""
        self._validate(data)
        stats = {key: 0 for key in _SECTIONS}
        conn = self._db.get_connection()
        try:
            for table in USER_TABLES:
                conn.execute(f"DELETE FROM {table}")

            acct_map: dict[int, int] = {}
            for a in data.get("balance_accounts") or []:
                cur = conn.execute(
                    """INSERT INTO balance_accounts(name, currency, balance, icon_name, color_hex)
                       VALUES (?, ?, ?, ?, ?)""",
                    (
                        a["name"].strip(), a["currency"], float(a.get("balance") or 0.0),
                        a.get("icon_name") or "wallet", a.get("color_hex") or "#2196F3",
                    ),
                )
                acct_map[a["id"]] = cur.lastrowid
                stats["balance_accounts"] += 1

            cat_map: dict[int, int] = {}
            for c in data.get("categories") or []:
                cur = conn.execute(
                    """INSERT INTO categories(type, name, icon_name, color_hex, placement)
                       VALUES (?, ?, ?, ?, ?)""",
                    (
                        c["type"], c["name"].strip(), c.get("icon_name") or "",
                        c.get("color_hex") or "#888888", int(c.get("placement") or 0),
                    ),
                )
                cat_map[c["id"]] = cur.lastrowid
                stats["categories"] += 1

            tag_map: dict[int, int] = {}
            for t in data.get("tags") or []:
                cur = conn.execute(
                    "INSERT INTO tags(name, color_hex) VALUES (?, ?)",
                    (t["name"].strip(), t.get("color_hex") or "#888888"),
                )
                tag_map[t["id"]] = cur.lastrowid
                stats["tags"] += 1

            for tx in data.get("transactions") or []:
                cur = conn.execute(
                    """INSERT INTO transactions(type, value, date, account_id, category_id, comment)
                       VALUES (?, ?, ?, ?, ?, ?)""",
                    (
                        tx["type"], float(tx["value"]), storage_date(str(tx["date"])),
                        acct_map[tx["account_id"]], cat_map[tx["category_id"]],
                        tx.get("comment") or "",
                    ),
                )
                conn.executemany(
                    "INSERT OR IGNORE INTO transaction_tags(transaction_id, tag_id) VALUES (?, ?)",
                    [(cur.lastrowid, tag_map[tid]) for tid in tx.get("tag_ids") or []],
                )
                stats["transactions"] += 1

            for tr in data.get("transfers") or []:
                conn.execute(
                    """INSERT INTO transfers(from_account_id, to_account_id, value_from, value_to, date, comment)
                       VALUES (?, ?, ?, ?, ?, ?)""",
                    (
                        acct_map[tr["from_account_id"]], acct_map[tr["to_account_id"]],
                        float(tr["value_from"]), float(tr["value_to"]),
                        storage_date(str(tr["date"])), tr.get("comment") or "",
                    ),
                )
                stats["transfers"] += 1

            for b in data.get("budgets") or []:
                conn.execute(
                    """INSERT INTO budgets(name, value, period, category_id, account_id)
                       VALUES (?, ?, ?, ?, ?)""",
                    (
                        b["name"], float(b["value"]), b["period"],
                        cat_map.get(b.get("category_id")), acct_map.get(b.get("account_id")),
                    ),
                )
                stats["budgets"] += 1

            default_id = acct_map.get(data.get("default_account_id"))
            if default_id is None and acct_map:
                default_id = min(acct_map.values())
            conn.execute(
                "INSERT OR REPLACE INTO app_settings(key, value) VALUES ('default_account_id', ?)",
                (str(default_id) if default_id else "",),
            )
            conn.commit()
        except Exception:
            conn.rollback()
            logger.exception("Import failed; previous data kept")
            raise
        finally:
            self._category_dao.invalidate_cache()

        logger.info("Imported %s", stats)
        return stats

    # ── Delete all ────────────────────────────────────────────────────────────

    def delete_all_data(self):
        conn = self._db.get_connection()
        try:
            for table in USER_TABLES:
                conn.execute(f"DELETE FROM {table}")
            conn.execute(
                "INSERT OR REPLACE INTO app_settings(key, value) VALUES ('default_account_id', '')"
            )
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._category_dao.invalidate_cache()
        logger.info("Deleted all stored data")

    # ── Validation ────────────────────────────────────────────────────────────

    @staticmethod
    def _validate(data):
        def fail(msg: str):
            raise ValueError(f"Invalid export file: {msg}")

        if not isinstance(data, dict):
            fail("expected a JSON object.")
        version = data.get("export_version")
        if version is not None and version > EXPORT_VERSION:
            fail(f"export version {version} is newer than this app supports.")

        for key in _SECTIONS:
            items = data.get(key) or []
            if not isinstance(items, list):
                fail(f"'{key}' must be a list.")
            for item in items:
                if not isinstance(item, dict):
                    fail(f"'{key}' entries must be objects.")
                missing = [f for f in _REQUIRED_FIELDS[key] if item.get(f) in (None, "")]
                if missing:
                    fail(f"{key} entry is missing {', '.join(missing)}.")

        def ids(key):
            found = [item["id"] for item in data.get(key) or []]
            if len(found) != len(set(found)):
                fail(f"duplicate ids in '{key}'.")
            return set(found)

        account_ids = ids("balance_accounts")
        category_types = {c["id"]: c["type"] for c in data.get("categories") or []}
        ids("categories")
        tag_ids = ids("tags")

        def unique_names(key, label, name_key):
            seen = set()
            for item in data.get(key) or []:
                if not isinstance(item["name"], str) or not item["name"].strip():
                    fail(f"{key} entry {item['id']} has an invalid name.")
                name = name_key(item)
                if name in seen:
                    fail(f"duplicate {label} '{item['name'].strip()}'.")
                seen.add(name)

        unique_names("balance_accounts", "account name", lambda a: a["name"].strip())
        unique_names("categories", "category name", lambda c: (c["type"], c["name"].strip()))
        unique_names("tags", "tag name", lambda t: t["name"].strip().lower())

        for c in data.get("categories") or []:
            if c["type"] not in TRANSACTION_TYPES:
                fail(f"unknown category type '{c['type']}'.")

        for tx in data.get("transactions") or []:
            if tx["type"] not in TRANSACTION_TYPES:
                fail(f"unknown transaction type '{tx['type']}'.")
            if not _is_positive(tx["value"]):
                fail(f"transaction {tx['id']} has a non-positive value.")
            if storage_date(str(tx["date"])) is None:
                fail(f"transaction {tx['id']} has an invalid date.")
            if tx["account_id"] not in account_ids:
                fail(f"transaction {tx['id']} references a missing account.")
            if category_types.get(tx["category_id"]) != tx["type"]:
                fail(f"transaction {tx['id']} references a missing or mismatched category.")
            if not set(tx.get("tag_ids") or []) <= tag_ids:
                fail(f"transaction {tx['id']} references a missing tag.")

        for tr in data.get("transfers") or []:
            if tr["from_account_id"] not in account_ids or tr["to_account_id"] not in account_ids:
                fail(f"transfer {tr['id']} references a missing account.")
            if not _is_positive(tr["value_from"]):
                fail(f"transfer {tr['id']} has a non-positive value.")
            if not _is_non_negative(tr["value_to"]):
                fail(f"transfer {tr['id']} has a negative or missing target value.")
            if storage_date(str(tr["date"])) is None:
                fail(f"transfer {tr['id']} has an invalid date.")

        for b in data.get("budgets") or []:
            if b["period"] not in BUDGET_PERIODS:
                fail(f"budget {b['id']} has an unknown period.")
            if not _is_positive(b["value"]):
                fail(f"budget {b['id']} has a non-positive value.")
            if b.get("category_id") is not None and b["category_id"] not in category_types:
                fail(f"budget {b['id']} references a missing category.")
            if b.get("account_id") is not None and b["account_id"] not in account_ids:
                fail(f"budget {b['id']} references a missing account.")


def _is_positive(value) -> bool:
    try:
        return float(value) > 0
    except (TypeError, ValueError):
        return False


def _is_non_negative(value) -> bool:
    try:
        return float(value) >= 0
    except (TypeError, ValueError):
        return False
