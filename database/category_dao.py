from typing import Optional
from database.db_manager import DatabaseManager
from models.category import Category


class CategoryDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db
        self._all_cache: list | None = None

    def _invalidate_cache(self):
        self._all_cache = None

    def _row_to_model(self, row) -> Category:
        return Category(
            id=row["id"],
            name=row["name"],
            type=row["type"],
            icon=row["icon"],
            color_hex=row["color_hex"],
            sort_index=row["sort_index"],
            is_system=bool(row["is_system"]),
        )

    def get_all(self) -> list[Category]:
        if self._all_cache is None:
            conn = self._db.get_connection()
            rows = conn.execute(
                "SELECT * FROM categories ORDER BY sort_index, name"
            ).fetchall()
            self._all_cache = [self._row_to_model(r) for r in rows]
        return self._all_cache

    def get_by_id(self, category_id: int) -> Optional[Category]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM categories WHERE id = ?", (category_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def get_by_name(self, name: str) -> Optional[Category]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM categories WHERE name = ? COLLATE NOCASE", (name,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def next_sort_index(self) -> int:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT COALESCE(MAX(sort_index), -1) + 1 AS next_index FROM categories"
        ).fetchone()
        return row["next_index"]

    def create(
        self, name: str, type_: str, icon: str, color_hex: str, sort_index: int
    ) -> Category:
        with self._db.transaction() as conn:
            cursor = conn.execute(
                """INSERT INTO categories(name, type, icon, color_hex, sort_index)
                   VALUES (?, ?, ?, ?, ?)""",
                (name, type_, icon, color_hex, sort_index),
            )
        self._invalidate_cache()
        return self.get_by_id(cursor.lastrowid)

    def update(
        self, category_id: int, name: str, type_: str, icon: str, color_hex: str
    ) -> Category:
        with self._db.transaction() as conn:
            conn.execute(
                "UPDATE categories SET name=?, type=?, icon=?, color_hex=? WHERE id=?",
                (name, type_, icon, color_hex, category_id),
            )
        self._invalidate_cache()
        return self.get_by_id(category_id)

    def delete(self, category_id: int):
        with self._db.transaction() as conn:
            conn.execute("DELETE FROM categories WHERE id = ?", (category_id,))
        self._invalidate_cache()
