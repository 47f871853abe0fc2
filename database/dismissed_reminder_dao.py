from database.db_manager import DatabaseManager


class DismissedReminderDAO:
    """Persists budget-alert dismissals until their expiry date."""

    def __init__(self, db: DatabaseManager):
        self._db = db

    def dismiss(self, key: str, expires: str) -> None:
        """Insert or replace a dismissal. expires is the first YYYY-MM-DD the alert may show again."""
        conn = self._db.get_connection()
        conn.execute(
            "INSERT OR REPLACE INTO dismissed_reminders(key, expires) VALUES (?, ?)",
            (key, expires),
        )
        conn.commit()

    def get_active_keys(self, ref_date: str) -> set[str]:
        """Purge expired rows, then return the keys still hidden on ref_date."""
        conn = self._db.get_connection()
        conn.execute(
            "DELETE FROM dismissed_reminders WHERE expires <= ?", (ref_date,)
        )
        conn.commit()
        rows = conn.execute("SELECT key FROM dismissed_reminders").fetchall()
        return {row["key"] for row in rows}
