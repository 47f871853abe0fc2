import logging
from typing import Optional
from database.db_manager import DatabaseManager
from models.transfer import Transfer

logger = logging.getLogger(__name__)


class TransferDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> Transfer:
        return Transfer(
            id=row["id"],
            from_account_id=row["from_account_id"],
            to_account_id=row["to_account_id"],
            value_from=row["value_from"],
            value_to=row["value_to"],
            date=row["date"],
            comment=row["comment"],
            from_account_name=row["from_account_name"],
            to_account_name=row["to_account_name"],
            from_currency=row["from_currency"],
            to_currency=row["to_currency"],
        )

    def _select(self) -> str:
        return """
            SELECT tr.*,
                   COALESCE(fa.name, '')     AS from_account_name,
                   COALESCE(ta.name, '')     AS to_account_name,
                   COALESCE(fa.currency, '') AS from_currency,
                   COALESCE(ta.currency, '') AS to_currency
            FROM transfers tr
            LEFT JOIN balance_accounts fa ON tr.from_account_id = fa.id
            LEFT JOIN balance_accounts ta ON tr.to_account_id = ta.id
        """

    def get_all(self) -> list[Transfer]:
        conn = self._db.get_connection()
        rows = conn.execute(
            self._select() + " ORDER BY tr.date DESC, tr.id DESC"
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_page(self, offset: int, limit: int) -> list[Transfer]:
        conn = self._db.get_connection()
        rows = conn.execute(
            self._select() + " ORDER BY tr.date DESC, tr.id DESC LIMIT ? OFFSET ?",
            (limit, offset),
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def count(self) -> int:
        conn = self._db.get_connection()
        return conn.execute("SELECT COUNT(*) FROM transfers").fetchone()[0]

    def get_by_id(self, transfer_id: int) -> Optional[Transfer]:
        conn = self._db.get_connection()
        row = conn.execute(
            self._select() + " WHERE tr.id = ?", (transfer_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def get_for_account(self, account_id: int) -> list[Transfer]:
        conn = self._db.get_connection()
        rows = conn.execute(
            self._select()
            + " WHERE tr.from_account_id = ? OR tr.to_account_id = ? ORDER BY tr.date DESC, tr.id DESC",
            (account_id, account_id),
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def create(
        self,
        from_account_id: int,
        to_account_id: int,
        value_from: float,
        value_to: float,
        date: str,
        comment: str = "",
    ) -> Transfer:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """INSERT INTO transfers(from_account_id, to_account_id, value_from, value_to, date, comment)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (from_account_id, to_account_id, value_from, value_to, date, comment),
        )
        conn.commit()
        logger.info(
            "Created transfer id=%s from account %s to %s",
            cursor.lastrowid, from_account_id, to_account_id,
        )
        return self.get_by_id(cursor.lastrowid)

    def update(
        self,
        transfer_id: int,
        from_account_id: int,
        to_account_id: int,
        value_from: float,
        value_to: float,
        date: str,
        comment: str = "",
    ) -> Transfer:
        conn = self._db.get_connection()
        conn.execute(
            """UPDATE transfers
               SET from_account_id=?, to_account_id=?, value_from=?, value_to=?, date=?, comment=?
               WHERE id=?""",
            (from_account_id, to_account_id, value_from, value_to, date, comment, transfer_id),
        )
        conn.commit()
        return self.get_by_id(transfer_id)

    def delete(self, transfer_id: int):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM transfers WHERE id = ?", (transfer_id,))
        conn.commit()
        logger.info("Deleted transfer id=%s", transfer_id)

    def delete_for_account(self, account_id: int) -> int:
        conn = self._db.get_connection()
        cursor = conn.execute(
            "DELETE FROM transfers WHERE from_account_id = ? OR to_account_id = ?",
            (account_id, account_id),
        )
        conn.commit()
        return cursor.rowcount
