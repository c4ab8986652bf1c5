from typing import Optional
from database.db_manager import DatabaseManager
from models.budget import Budget


class BudgetDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row, spent: float = 0.0) -> Budget:
        return Budget(
            id=row["id"],
            month=row["month"],
            amount=row["amount"],
            category_id=row["category_id"],
            category_name=row["category_name"] or "",
            sync_with_income=bool(row["sync_with_income"]),
            spent_amount=spent,
            color_hex=row["color_hex"] or "#6B7280",
        )

    def _select(self) -> str:
        return """
            SELECT b.*, c.name AS category_name, c.color_hex
            FROM budgets b
            LEFT JOIN categories c ON b.category_id = c.id
        """

    def get_by_month(self, month: str) -> list[Budget]:
        """Per-category budgets for the month; the overall budget is excluded."""
        conn = self._db.get_connection()
        rows = conn.execute(
            self._select() + """
            WHERE b.month = ? AND b.category_id IS NOT NULL
            ORDER BY c.sort_index, c.name""",
            (month,),
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_overall(self, month: str) -> Optional[Budget]:
        conn = self._db.get_connection()
        row = conn.execute(
            self._select() + " WHERE b.month = ? AND b.category_id IS NULL",
            (month,),
        ).fetchone()
        return self._row_to_model(row) if row else None

    def get_for_category(self, category_id: int, month: str) -> Optional[Budget]:
        conn = self._db.get_connection()
        row = conn.execute(
            self._select() + " WHERE b.category_id = ? AND b.month = ?",
            (category_id, month),
        ).fetchone()
        return self._row_to_model(row) if row else None

    def upsert_overall(self, month: str, amount: float, sync_with_income: bool) -> Budget:
        with self._db.transaction() as conn:
            existing = self.get_overall(month)
            if existing:
                conn.execute(
                    "UPDATE budgets SET amount=?, sync_with_income=? WHERE id=?",
                    (amount, 1 if sync_with_income else 0, existing.id),
                )
            else:
                conn.execute(
                    """INSERT INTO budgets(month, amount, category_id, sync_with_income)
                       VALUES (?, ?, NULL, ?)""",
                    (month, amount, 1 if sync_with_income else 0),
                )
        return self.get_overall(month)

    def upsert_category(self, category_id: int, month: str, amount: float) -> Budget:
        with self._db.transaction() as conn:
            existing = self.get_for_category(category_id, month)
            if existing:
                conn.execute("UPDATE budgets SET amount=? WHERE id=?", (amount, existing.id))
            else:
                conn.execute(
                    "INSERT INTO budgets(month, amount, category_id) VALUES (?, ?, ?)",
                    (month, amount, category_id),
                )
        return self.get_for_category(category_id, month)

    def delete(self, budget_id: int):
        with self._db.transaction() as conn:
            conn.execute("DELETE FROM budgets WHERE id = ?", (budget_id,))

    def copy_month(self, from_month: str, to_month: str) -> int:
        """Copy per-category limits from one month to another. Returns count copied."""
        count = 0
        with self._db.transaction():
            for budget in self.get_by_month(from_month):
                self.upsert_category(budget.category_id, to_month, budget.amount)
                count += 1
        return count
