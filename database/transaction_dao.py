from typing import Iterable, Optional
from database.db_manager import DatabaseManager
from models.recurrence_rule import RecurrenceRule
from models.transaction import Transaction
from utils.date_helpers import month_range


class TransactionDAO:
    """Insert/update/delete leave the commit to the caller, which wraps them in
    DatabaseManager.transaction() so multi-row series writes land as one unit."""

    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> Transaction:
        rule = None
        if row["recur_frequency"]:
            rule = RecurrenceRule(
                frequency=row["recur_frequency"],
                interval=row["recur_interval"],
                end_date=row["recur_end_date"],
            )
        return Transaction(
            id=row["id"],
            amount=row["amount"],
            date=row["date"],
            note=row["note"],
            category_id=row["category_id"],
            category_name=row["category_name"] if "category_name" in row.keys() else "",
            is_recurring=bool(row["is_recurring"]),
            recurrence=rule,
            series_id=row["series_id"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @staticmethod
    def _rule_columns(tx: Transaction) -> tuple:
        rule = tx.recurrence
        if rule is None:
            return None, 1, None
        return rule.frequency.value, rule.interval, rule.end_date

    def _select(self) -> str:
        return """
            SELECT t.*,
                   COALESCE(c.name, '') AS category_name
            FROM transactions t
            LEFT JOIN categories c ON t.category_id = c.id
        """

    def get_by_id(self, tx_id: int) -> Optional[Transaction]:
        conn = self._db.get_connection()
        row = conn.execute(
            self._select() + " WHERE t.id = ?", (tx_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def get_all(self) -> list[Transaction]:
        conn = self._db.get_connection()
        rows = conn.execute(
            self._select() + " ORDER BY t.date ASC, t.id ASC"
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def query_series(
        self,
        series_id: str,
        start: str | None = None,
        end: str | None = None,
    ) -> list[Transaction]:
        """Series members in ascending date order, optionally limited to [start, end]."""
        conn = self._db.get_connection()
        sql = self._select() + " WHERE t.series_id = ?"
        params: list = [series_id]
        if start:
            sql += " AND t.date >= ?"
            params.append(start)
        if end:
            sql += " AND t.date <= ?"
            params.append(end)
        sql += " ORDER BY t.date ASC, t.id ASC"
        rows = conn.execute(sql, params).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_month(
        self,
        month: str,
        category_ids: Iterable[int] | None = None,
    ) -> list[Transaction]:
        first, last = month_range(month)
        conn = self._db.get_connection()
        sql = self._select() + " WHERE t.date BETWEEN ? AND ?"
        params: list = [first, last]
        if category_ids is not None:
            ids = list(category_ids)
            if not ids:
                return []
            placeholders = ",".join("?" * len(ids))
            sql += f" AND t.category_id IN ({placeholders})"
            params.extend(ids)
        sql += " ORDER BY t.date DESC, t.id DESC"
        rows = conn.execute(sql, params).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_spending_by_category(self, month: str) -> dict[int, float]:
        """Expense magnitude per category_id for the given month."""
        first, last = month_range(month)
        conn = self._db.get_connection()
        rows = conn.execute(
            """SELECT category_id, SUM(-amount) AS total
               FROM transactions
               WHERE amount < 0
                 AND date BETWEEN ? AND ?
                 AND category_id IS NOT NULL
               GROUP BY category_id""",
            (first, last),
        ).fetchall()
        return {r["category_id"]: r["total"] for r in rows}

    def get_totals_for_month(self, month: str) -> dict:
        """Return income, expense (as a positive magnitude) and net for the month."""
        first, last = month_range(month)
        conn = self._db.get_connection()
        row = conn.execute(
            """SELECT
                SUM(CASE WHEN amount > 0 THEN amount  ELSE 0 END) AS income,
                SUM(CASE WHEN amount < 0 THEN -amount ELSE 0 END) AS expense
               FROM transactions
               WHERE date BETWEEN ? AND ?""",
            (first, last),
        ).fetchone()
        income = row["income"] or 0.0
        expense = row["expense"] or 0.0
        return {"income": income, "expense": expense, "net": income - expense}

    def insert(self, tx: Transaction) -> int:
        conn = self._db.get_connection()
        frequency, interval, end_date = self._rule_columns(tx)
        cursor = conn.execute(
            """INSERT INTO transactions
               (amount, date, note, category_id, is_recurring,
                recur_frequency, recur_interval, recur_end_date, series_id)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                tx.amount, tx.date, tx.note, tx.category_id,
                1 if tx.is_recurring else 0,
                frequency, interval, end_date, tx.series_id,
            ),
        )
        return cursor.lastrowid

    def insert_many(self, txs: Iterable[Transaction]) -> int:
        count = 0
        for tx in txs:
            self.insert(tx)
            count += 1
        return count

    def update(self, tx: Transaction):
        conn = self._db.get_connection()
        frequency, interval, end_date = self._rule_columns(tx)
        conn.execute(
            """UPDATE transactions
               SET amount=?, date=?, note=?, category_id=?, is_recurring=?,
                   recur_frequency=?, recur_interval=?, recur_end_date=?,
                   series_id=?, updated_at=datetime('now')
               WHERE id=?""",
            (
                tx.amount, tx.date, tx.note, tx.category_id,
                1 if tx.is_recurring else 0,
                frequency, interval, end_date, tx.series_id, tx.id,
            ),
        )

    def delete(self, tx_id: int):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM transactions WHERE id = ?", (tx_id,))

    def delete_many(self, tx_ids: Iterable[int]) -> int:
        ids = list(tx_ids)
        if not ids:
            return 0
        conn = self._db.get_connection()
        placeholders = ",".join("?" * len(ids))
        cursor = conn.execute(
            f"DELETE FROM transactions WHERE id IN ({placeholders})", ids
        )
        return cursor.rowcount
