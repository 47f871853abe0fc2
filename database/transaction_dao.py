import logging
from typing import Optional, Iterable
from database.db_manager import DatabaseManager
from models.tag import Tag
from models.transaction import Transaction

logger = logging.getLogger(__name__)


class TransactionDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> Transaction:
        return Transaction(
            id=row["id"],
            type=row["type"],
            value=row["value"],
            date=row["date"],
            account_id=row["account_id"],
            category_id=row["category_id"],
            comment=row["comment"],
            account_name=row["account_name"],
            currency=row["currency"],
            category_name=row["category_name"],
            category_color=row["category_color"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _select(self) -> str:
        return """
            SELECT t.*,
                   COALESCE(a.name, '')       AS account_name,
                   COALESCE(a.currency, '')   AS currency,
                   COALESCE(c.name, '')       AS category_name,
                   COALESCE(c.color_hex, '#888888') AS category_color
            FROM transactions t
            LEFT JOIN balance_accounts a ON t.account_id = a.id
            LEFT JOIN categories c ON t.category_id = c.id
        """

    def _attach_tags(self, txs: list[Transaction]) -> list[Transaction]:
        """Fill tx.tags for every transaction, batching the id lookups."""
        if not txs:
            return txs
        by_id = {tx.id: tx for tx in txs}
        ids = list(by_id)
        conn = self._db.get_connection()
        # SQLite caps bound parameters, so batch large id lists
        for i in range(0, len(ids), 500):
            chunk = ids[i:i + 500]
            placeholders = ",".join("?" * len(chunk))
            rows = conn.execute(
                f"""SELECT tt.transaction_id, g.id, g.name, g.color_hex
                    FROM transaction_tags tt JOIN tags g ON g.id = tt.tag_id
                    WHERE tt.transaction_id IN ({placeholders})
                    ORDER BY g.name COLLATE NOCASE""",
                chunk,
            ).fetchall()
            for row in rows:
                by_id[row["transaction_id"]].tags.append(
                    Tag(id=row["id"], name=row["name"], color_hex=row["color_hex"])
                )
        return txs

    def _fetch(self, sql: str, params: Iterable = ()) -> list[Transaction]:
        rows = self._db.get_connection().execute(sql, list(params)).fetchall()
        return self._attach_tags([self._row_to_model(r) for r in rows])

    def get_all(self) -> list[Transaction]:
        return self._fetch(self._select() + " ORDER BY t.date DESC, t.id DESC")

    def get_by_id(self, tx_id: int) -> Optional[Transaction]:
        found = self._fetch(self._select() + " WHERE t.id = ?", (tx_id,))
        return found[0] if found else None

    def get_filtered(
        self,
        account_id: int | None = None,
        start: str | None = None,
        end: str | None = None,
        type_: str | None = None,
        category_id: int | None = None,
    ) -> list[Transaction]:
        """Transactions matching every given filter, newest first. start/end are inclusive YYYY-MM-DD."""
        sql = self._select() + " WHERE 1=1"
        params: list = []
        if account_id is not None:
            sql += " AND t.account_id = ?"
            params.append(account_id)
        if start:
            sql += " AND t.date >= ?"
            params.append(start)
        if end:
            sql += " AND t.date <= ?"
            params.append(end)
        if type_:
            sql += " AND t.type = ?"
            params.append(type_)
        if category_id is not None:
            sql += " AND t.category_id = ?"
            params.append(category_id)
        sql += " ORDER BY t.date DESC, t.id DESC"
        return self._fetch(sql, params)

    def sum_values(
        self,
        start: str,
        end: str,
        type_: str | None = None,
        category_id: int | None = None,
        account_id: int | None = None,
    ) -> float:
        sql = "SELECT COALESCE(SUM(value), 0) AS total FROM transactions WHERE date >= ? AND date <= ?"
        params: list = [start, end]
        if type_:
            sql += " AND type = ?"
            params.append(type_)
        if category_id is not None:
            sql += " AND category_id = ?"
            params.append(category_id)
        if account_id is not None:
            sql += " AND account_id = ?"
            params.append(account_id)
        row = self._db.get_connection().execute(sql, params).fetchone()
        return row["total"]

    def _set_tags(self, conn, tx_id: int, tag_ids: Iterable[int]):
        conn.execute("DELETE FROM transaction_tags WHERE transaction_id = ?", (tx_id,))
        conn.executemany(
            "INSERT OR IGNORE INTO transaction_tags(transaction_id, tag_id) VALUES (?, ?)",
            [(tx_id, tag_id) for tag_id in tag_ids],
        )

    def create(
        self,
        type_: str,
        value: float,
        date: str,
        account_id: int,
        category_id: int,
        comment: str = "",
        tag_ids: Iterable[int] = (),
    ) -> Transaction:
        conn = self._db.get_connection()
        try:
            cursor = conn.execute(
                """INSERT INTO transactions(type, value, date, account_id, category_id, comment)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (type_, value, date, account_id, category_id, comment),
            )
            self._set_tags(conn, cursor.lastrowid, tag_ids)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        logger.info("Created %s transaction id=%s value=%.2f", type_, cursor.lastrowid, value)
        return self.get_by_id(cursor.lastrowid)

    def bulk_create(self, rows: list[tuple]) -> int:
        """Insert many (type, value, date, account_id, category_id, comment) rows at once."""
        conn = self._db.get_connection()
        conn.executemany(
            """INSERT INTO transactions(type, value, date, account_id, category_id, comment)
               VALUES (?, ?, ?, ?, ?, ?)""",
            rows,
        )
        conn.commit()
        return len(rows)

    def update(
        self,
        tx_id: int,
        type_: str,
        value: float,
        date: str,
        account_id: int,
        category_id: int,
        comment: str = "",
        tag_ids: Iterable[int] = (),
    ) -> Transaction:
        conn = self._db.get_connection()
        try:
            conn.execute(
                """UPDATE transactions
                   SET type=?, value=?, date=?, account_id=?, category_id=?, comment=?,
                       updated_at=datetime('now')
                   WHERE id=?""",
                (type_, value, date, account_id, category_id, comment, tx_id),
            )
            self._set_tags(conn, tx_id, tag_ids)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        logger.debug("Updated transaction id=%s", tx_id)
        return self.get_by_id(tx_id)

    def delete(self, tx_id: int):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM transactions WHERE id = ?", (tx_id,))
        conn.commit()
        logger.info("Deleted transaction id=%s", tx_id)

    def delete_all(self) -> int:
        conn = self._db.get_connection()
        cursor = conn.execute("DELETE FROM transactions")
        conn.commit()
        return cursor.rowcount

    def delete_by_account(self, account_id: int) -> int:
        conn = self._db.get_connection()
        cursor = conn.execute("DELETE FROM transactions WHERE account_id = ?", (account_id,))
        conn.commit()
        return cursor.rowcount
