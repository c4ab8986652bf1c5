import threading
import weakref
from dataclasses import replace

from database.transaction_dao import TransactionDAO
from models.recurrence_rule import RecurrenceRule
from models.transaction import Transaction
from services import recurrence_engine
from services.category_service import CategoryService
from utils.currency import apply_sign
from utils.date_helpers import normalize_date
from utils.logger import get_logger

logger = get_logger(__name__)


class TransactionService:
    def __init__(self, tx_dao: TransactionDAO, category_service: CategoryService):
        self._dao = tx_dao
        self._categories = category_service
        self._locks_guard = threading.Lock()
        # Entries vanish once no regeneration holds the lock.
        self._series_locks: weakref.WeakValueDictionary[str, threading.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _series_lock(self, series_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._series_locks.get(series_id)
            if lock is None:
                lock = threading.Lock()
                self._series_locks[series_id] = lock
            return lock

    def get_by_id(self, tx_id: int) -> Transaction | None:
        return self._dao.get_by_id(tx_id)

    def require(self, tx_id: int) -> Transaction:
        tx = self._dao.get_by_id(tx_id)
        if tx is None:
            raise ValueError(f"Transaction {tx_id} not found.")
        return tx

    def get_series(self, series_id: str) -> list[Transaction]:
        return self._dao.query_series(series_id)

    def list_for_month(
        self, month: str, category_ids: list[int] | None = None
    ) -> list[Transaction]:
        """Transactions in the month, newest first. An empty filter list matches nothing."""
        return self._dao.get_by_month(month, category_ids)

    def month_totals(self, month: str, category_ids: list[int] | None = None) -> dict:
        """Net and expense totals over the (optionally filtered) month."""
        txs = self._dao.get_by_month(month, category_ids)
        return {
            "count": len(txs),
            "net": sum(t.amount for t in txs),
            "expense": sum(-t.amount for t in txs if t.amount < 0),
        }

    def signed_amount(self, amount: float, category_id: int | None) -> float:
        """Income categories keep amounts positive, all others negative.
        Without a category the amount is taken as entered."""
        if category_id is None:
            return amount
        return apply_sign(amount, self._categories.require(category_id).is_income)

    def create(
        self,
        amount: float,
        date: str,
        note: str = "",
        category_id: int | None = None,
        rule: RecurrenceRule | None = None,
    ) -> tuple[Transaction, int]:
        """Save a transaction; with a rule, also its generated followers.
        Returns (base, follower_count)."""
        date = self._validate(date, category_id)
        rule = self._normalize_rule(rule)
        base = Transaction(
            id=None,
            amount=self.signed_amount(amount, category_id),
            date=date,
            note=note.strip(),
            category_id=category_id,
            is_recurring=rule is not None,
            recurrence=rule,
            series_id=recurrence_engine.new_series_id() if rule else None,
        )

        with self._dao._db.transaction():
            base_id = self._dao.insert(base)
            followers = 0
            if rule is not None:
                followers = self._dao.insert_many(recurrence_engine.materialize(base, rule))

        if rule is not None:
            logger.info(
                "Created series %s (%s) with %d followers from %s",
                base.series_id, rule.describe(), followers, date,
            )
        return self._dao.get_by_id(base_id), followers

    def update(
        self,
        tx_id: int,
        amount: float,
        date: str,
        note: str = "",
        category_id: int | None = None,
        rule: RecurrenceRule | None = None,
        apply_to_future: bool = False,
    ) -> tuple[Transaction, int, int]:
        """Edit a transaction. Returns (updated, deleted_count, created_count).

        Without apply_to_future only this row changes; it keeps its series id
        and records the rule for display. With apply_to_future the series tail
        from this row's date onward is regenerated.
        """
        current = self.require(tx_id)
        date = self._validate(date, category_id)
        rule = self._normalize_rule(rule)
        edited = replace(
            current,
            amount=self.signed_amount(amount, category_id),
            date=date,
            note=note.strip(),
            category_id=category_id,
            recurrence=rule or current.recurrence,
            is_recurring=current.is_recurring or rule is not None,
        )

        new_rule = edited.recurrence
        if not apply_to_future or not edited.is_recurring or new_rule is None:
            with self._dao._db.transaction():
                self._dao.update(edited)
            return self._dao.get_by_id(tx_id), 0, 0

        if edited.series_id is None:
            edited = replace(edited, series_id=recurrence_engine.new_series_id())
        with self._series_lock(edited.series_id):
            siblings = self._dao.query_series(edited.series_id)
            regen = recurrence_engine.regenerate_future_tail(edited, siblings, new_rule)
            with self._dao._db.transaction():
                self._dao.update(regen.anchor)
                deleted = self._dao.delete_many(regen.to_delete)
                created = self._dao.insert_many(regen.to_create)

        logger.info(
            "Regenerated series %s from %s: %d removed, %d created",
            regen.anchor.series_id, regen.anchor.date, deleted, created,
        )
        return self._dao.get_by_id(tx_id), deleted, created

    def duplicate(self, tx_id: int) -> Transaction:
        """Copy a transaction. The copy keeps the rule for display but leaves
        the series, so a series never holds two rows for one occurrence."""
        source = self.require(tx_id)
        with self._dao._db.transaction():
            new_id = self._dao.insert(replace(source, id=None, series_id=None))
        return self._dao.get_by_id(new_id)

    def delete(self, tx_id: int):
        self.require(tx_id)
        with self._dao._db.transaction():
            self._dao.delete(tx_id)

    @staticmethod
    def _normalize_rule(rule: RecurrenceRule | None) -> RecurrenceRule | None:
        if rule is None or not rule.end_date:
            return rule
        return replace(rule, end_date=normalize_date(rule.end_date))

    def _validate(self, date: str, category_id: int | None) -> str:
        normalized = normalize_date(date)
        if category_id is not None:
            self._categories.require(category_id)
        return normalized
