import logging
from typing import Optional
from database.db_manager import DatabaseManager
from models.budget import Budget

logger = logging.getLogger(__name__)


class BudgetDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> Budget:
        return Budget(
            id=row["id"],
            name=row["name"],
            value=row["value"],
            period=row["period"],
            category_id=row["category_id"],
            account_id=row["account_id"],
            category_name=row["category_name"],
            account_name=row["account_name"],
            color_hex=row["color_hex"],
        )

    def _select(self) -> str:
        return """
            SELECT b.*,
                   COALESCE(c.name, '')        AS category_name,
                   COALESCE(a.name, '')        AS account_name,
                   COALESCE(c.color_hex, '#2196F3') AS color_hex
            FROM budgets b
            LEFT JOIN categories c ON b.category_id = c.id
            LEFT JOIN balance_accounts a ON b.account_id = a.id
        """

    def get_all(self) -> list[Budget]:
        conn = self._db.get_connection()
        rows = conn.execute(self._select() + " ORDER BY b.name COLLATE NOCASE, b.id").fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, budget_id: int) -> Optional[Budget]:
        conn = self._db.get_connection()
        row = conn.execute(self._select() + " WHERE b.id = ?", (budget_id,)).fetchone()
        return self._row_to_model(row) if row else None

    def create(
        self,
        name: str,
        value: float,
        period: str,
        category_id: int | None = None,
        account_id: int | None = None,
    ) -> Budget:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """INSERT INTO budgets(name, value, period, category_id, account_id)
               VALUES (?, ?, ?, ?, ?)""",
            (name, value, period, category_id, account_id),
        )
        conn.commit()
        logger.info("Created budget %r (id=%s)", name, cursor.lastrowid)
        return self.get_by_id(cursor.lastrowid)

    def update(
        self,
        budget_id: int,
        name: str,
        value: float,
        period: str,
        category_id: int | None = None,
        account_id: int | None = None,
    ) -> Budget:
        conn = self._db.get_connection()
        conn.execute(
            """UPDATE budgets SET name=?, value=?, period=?, category_id=?, account_id=?
               WHERE id=?""",
            (name, value, period, category_id, account_id, budget_id),
        )
        conn.commit()
        return self.get_by_id(budget_id)

    def delete(self, budget_id: int):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM budgets WHERE id = ?", (budget_id,))
        conn.commit()
        logger.info("Deleted budget id=%s", budget_id)
