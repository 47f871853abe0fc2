import logging
from typing import Optional
from database.db_manager import DatabaseManager
from models.tag import Tag

logger = logging.getLogger(__name__)


class TagDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> Tag:
        return Tag(id=row["id"], name=row["name"], color_hex=row["color_hex"])

    def get_all(self) -> list[Tag]:
        conn = self._db.get_connection()
        rows = conn.execute("SELECT * FROM tags ORDER BY name COLLATE NOCASE").fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, tag_id: int) -> Optional[Tag]:
        conn = self._db.get_connection()
        row = conn.execute("SELECT * FROM tags WHERE id = ?", (tag_id,)).fetchone()
        return self._row_to_model(row) if row else None

    def get_by_name(self, name: str) -> Optional[Tag]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM tags WHERE name = ? COLLATE NOCASE", (name,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def create(self, name: str, color_hex: str) -> Tag:
        conn = self._db.get_connection()
        cursor = conn.execute(
            "INSERT INTO tags(name, color_hex) VALUES (?, ?)", (name, color_hex)
        )
        conn.commit()
        logger.info("Created tag %r (id=%s)", name, cursor.lastrowid)
        return self.get_by_id(cursor.lastrowid)

    def update(self, tag_id: int, name: str, color_hex: str) -> Tag:
        conn = self._db.get_connection()
        conn.execute(
            "UPDATE tags SET name = ?, color_hex = ? WHERE id = ?",
            (name, color_hex, tag_id),
        )
        conn.commit()
        return self.get_by_id(tag_id)

    def delete(self, tag_id: int):
        """Delete the tag; transaction links go with it via ON DELETE CASCADE."""
        conn = self._db.get_connection()
        conn.execute("DELETE FROM tags WHERE id = ?", (tag_id,))
        conn.commit()
        logger.info("Deleted tag id=%s", tag_id)

    def delete_tagged_transactions(self, tag_id: int) -> int:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """DELETE FROM transactions
               WHERE id IN (SELECT transaction_id FROM transaction_tags WHERE tag_id = ?)""",
            (tag_id,),
        )
        conn.commit()
        return cursor.rowcount
