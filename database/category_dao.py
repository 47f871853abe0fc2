import logging
from typing import Optional
from database.db_manager import DatabaseManager
from models.category import Category

logger = logging.getLogger(__name__)


class CategoryDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db
        self._all_cache: list | None = None

    def invalidate_cache(self):
        self._all_cache = None

    def _row_to_model(self, row) -> Category:
        return Category(
            id=row["id"],
            type=row["type"],
            name=row["name"],
            icon_name=row["icon_name"],
            color_hex=row["color_hex"],
            placement=row["placement"],
        )

    def get_all(self) -> list[Category]:
        if self._all_cache is None:
            conn = self._db.get_connection()
            rows = conn.execute(
                "SELECT * FROM categories ORDER BY type DESC, placement, id"
            ).fetchall()
            self._all_cache = [self._row_to_model(r) for r in rows]
        return list(self._all_cache)

    def get_by_id(self, category_id: int) -> Optional[Category]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM categories WHERE id = ?", (category_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def get_by_type(self, type_: str) -> list[Category]:
        """type_: 'spending' or 'income', ordered by placement."""
        return [c for c in self.get_all() if c.type == type_]

    def get_by_type_and_name(self, type_: str, name: str) -> Optional[Category]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM categories WHERE type = ? AND name = ? COLLATE NOCASE",
            (type_, name),
        ).fetchone()
        return self._row_to_model(row) if row else None

    def next_placement(self, type_: str) -> int:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT COALESCE(MAX(placement), 0) + 1 AS nxt FROM categories WHERE type = ?",
            (type_,),
        ).fetchone()
        return row["nxt"]

    def count(self) -> int:
        conn = self._db.get_connection()
        return conn.execute("SELECT COUNT(*) FROM categories").fetchone()[0]

    def create(
        self,
        type_: str,
        name: str,
        icon_name: str,
        color_hex: str = "#888888",
        placement: int | None = None,
    ) -> Category:
        if placement is None:
            placement = self.next_placement(type_)
        conn = self._db.get_connection()
        cursor = conn.execute(
            """INSERT INTO categories(type, name, icon_name, color_hex, placement)
               VALUES (?, ?, ?, ?, ?)""",
            (type_, name, icon_name, color_hex, placement),
        )
        conn.commit()
        self.invalidate_cache()
        logger.info("Created %s category %r (id=%s)", type_, name, cursor.lastrowid)
        return self.get_by_id(cursor.lastrowid)

    def update(self, category_id: int, name: str, icon_name: str, color_hex: str) -> Category:
        conn = self._db.get_connection()
        conn.execute(
            "UPDATE categories SET name=?, icon_name=?, color_hex=? WHERE id=?",
            (name, icon_name, color_hex, category_id),
        )
        conn.commit()
        self.invalidate_cache()
        return self.get_by_id(category_id)

    def set_placements(self, ordered_ids: list[int]):
        """Rewrite placement as 1..n following ordered_ids."""
        conn = self._db.get_connection()
        conn.executemany(
            "UPDATE categories SET placement = ? WHERE id = ?",
            [(i + 1, cid) for i, cid in enumerate(ordered_ids)],
        )
        conn.commit()
        self.invalidate_cache()

    def move_dependents(self, from_category_id: int, to_category_id: int):
        conn = self._db.get_connection()
        conn.execute(
            "UPDATE transactions SET category_id = ?, updated_at = datetime('now') WHERE category_id = ?",
            (to_category_id, from_category_id),
        )
        conn.execute(
            "UPDATE budgets SET category_id = ? WHERE category_id = ?",
            (to_category_id, from_category_id),
        )
        conn.commit()

    def delete_dependents(self, category_id: int):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM transactions WHERE category_id = ?", (category_id,))
        conn.execute("DELETE FROM budgets WHERE category_id = ?", (category_id,))
        conn.commit()

    def delete(self, category_id: int):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM categories WHERE id = ?", (category_id,))
        conn.commit()
        self.invalidate_cache()
        logger.info("Deleted category id=%s", category_id)
