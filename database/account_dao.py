import logging
from typing import Optional
from database.db_manager import DatabaseManager
from models.account import BalanceAccount

logger = logging.getLogger(__name__)


class AccountDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> BalanceAccount:
        return BalanceAccount(
            id=row["id"],
            name=row["name"],
            currency=row["currency"],
            balance=row["balance"],
            icon_name=row["icon_name"],
            color_hex=row["color_hex"],
            created_at=row["created_at"],
        )

    def get_all(self) -> list[BalanceAccount]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM balance_accounts ORDER BY name"
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, account_id: int) -> Optional[BalanceAccount]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM balance_accounts WHERE id = ?", (account_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def get_by_name(self, name: str) -> Optional[BalanceAccount]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM balance_accounts WHERE name = ?", (name,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def create(
        self,
        name: str,
        currency: str,
        balance: float = 0.0,
        icon_name: str = "wallet",
        color_hex: str = "#2196F3",
    ) -> BalanceAccount:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """INSERT INTO balance_accounts(name, currency, balance, icon_name, color_hex)
               VALUES (?, ?, ?, ?, ?)""",
            (name, currency, balance, icon_name, color_hex),
        )
        conn.commit()
        logger.info("Created account %r (id=%s)", name, cursor.lastrowid)
        return self.get_by_id(cursor.lastrowid)

    def update(
        self,
        account_id: int,
        name: str,
        currency: str,
        balance: float,
        icon_name: str,
        color_hex: str,
    ) -> BalanceAccount:
        conn = self._db.get_connection()
        conn.execute(
            """UPDATE balance_accounts
               SET name = ?, currency = ?, balance = ?, icon_name = ?, color_hex = ?
               WHERE id = ?""",
            (name, currency, balance, icon_name, color_hex, account_id),
        )
        conn.commit()
        logger.debug("Updated account id=%s", account_id)
        return self.get_by_id(account_id)

    def delete(self, account_id: int):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM balance_accounts WHERE id = ?", (account_id,))
        conn.commit()
        logger.info("Deleted account id=%s", account_id)

    def get_balance_changes(self) -> dict[int, float]:
        """Return {account_id: income - spending + transfers in - transfers out}
        for every account, in a single aggregate query."""
        conn = self._db.get_connection()
        rows = conn.execute("""
            SELECT a.id AS account_id,
                   COALESCE((SELECT SUM(CASE t.type WHEN 'income' THEN t.value ELSE -t.value END)
                             FROM transactions t WHERE t.account_id = a.id), 0)
                 + COALESCE((SELECT SUM(tr.value_to)
                             FROM transfers tr WHERE tr.to_account_id = a.id), 0)
                 - COALESCE((SELECT SUM(tr.value_from)
                             FROM transfers tr WHERE tr.from_account_id = a.id), 0)
                   AS change
            FROM balance_accounts a
        """).fetchall()
        return {r["account_id"]: r["change"] for r in rows}

    def move_dependents(self, from_account_id: int, to_account_id: int):
        """Reassign transactions and account-scoped budgets, drop transfers touching the account."""
        conn = self._db.get_connection()
        conn.execute(
            "UPDATE transactions SET account_id = ?, updated_at = datetime('now') WHERE account_id = ?",
            (to_account_id, from_account_id),
        )
        conn.execute(
            "UPDATE budgets SET account_id = ? WHERE account_id = ?",
            (to_account_id, from_account_id),
        )
        conn.execute(
            "DELETE FROM transfers WHERE from_account_id = ? OR to_account_id = ?",
            (from_account_id, from_account_id),
        )
        conn.commit()
