from models.budget import Budget
from models.category import Category
from database.budget_dao import BudgetDAO
from database.transaction_dao import TransactionDAO
from database.category_dao import CategoryDAO
from utils.constants import DEFAULT_OVERALL_BUDGET
from utils.date_helpers import current_month_str, parse_month, prev_month
from utils.logger import get_logger

logger = get_logger(__name__)


class BudgetService:
    def __init__(
        self,
        budget_dao: BudgetDAO,
        tx_dao: TransactionDAO,
        category_dao: CategoryDAO,
    ):
        self._budget_dao = budget_dao
        self._tx_dao = tx_dao
        self._category_dao = category_dao

    def get_budget_status(self, month: str | None = None) -> list[Budget]:
        """Return per-category budgets for the month with spent amounts filled in."""
        month = self._month(month)
        budgets = self._budget_dao.get_by_month(month)
        spending = self._tx_dao.get_spending_by_category(month)
        for b in budgets:
            b.spent_amount = spending.get(b.category_id, 0.0)
        return budgets

    def get_overall(self, month: str | None = None) -> Budget:
        """Overall budget for the month, seeded with the default if missing.
        A budget synced with income is refreshed before it is returned."""
        month = self._month(month)
        overall = self._budget_dao.get_overall(month)
        if overall is None:
            overall = self._budget_dao.upsert_overall(month, DEFAULT_OVERALL_BUDGET, False)
            logger.info("Seeded overall budget for %s at %.2f", month, DEFAULT_OVERALL_BUDGET)
        elif overall.sync_with_income:
            overall = self.refresh_synced_income(month)
        overall.spent_amount = self._tx_dao.get_totals_for_month(month)["expense"]
        return overall

    def set_overall(self, month: str | None, amount: float) -> Budget:
        """Manual overall amount; turns income sync off."""
        self._check_amount(amount)
        return self._budget_dao.upsert_overall(self._month(month), amount, False)

    def set_sync_with_income(
        self, month: str | None, enabled: bool, manual_amount: float | None = None
    ) -> Budget:
        """When enabled the overall budget mirrors the month's income. When
        disabled it keeps manual_amount, or the last value if none is given."""
        month = self._month(month)
        if enabled:
            return self.refresh_synced_income(month)
        if manual_amount is None:
            current = self._budget_dao.get_overall(month)
            manual_amount = current.amount if current else DEFAULT_OVERALL_BUDGET
        self._check_amount(manual_amount)
        return self._budget_dao.upsert_overall(month, manual_amount, False)

    def refresh_synced_income(self, month: str | None = None) -> Budget:
        month = self._month(month)
        income = self._tx_dao.get_totals_for_month(month)["income"]
        return self._budget_dao.upsert_overall(month, income, True)

    def set_category_budget(self, month: str | None, category_id: int, amount: float) -> Budget:
        self._check_amount(amount)
        if self._category_dao.get_by_id(category_id) is None:
            raise ValueError(f"Unknown category id: {category_id}")
        return self._budget_dao.upsert_category(category_id, self._month(month), amount)

    def delete_category_budget(self, month: str | None, category_id: int):
        month = self._month(month)
        budget = self._budget_dao.get_for_category(category_id, month)
        if budget is None:
            raise ValueError(f"No budget for category id {category_id} in {month}.")
        self._budget_dao.delete(budget.id)

    def copy_from_previous_month(self, to_month: str) -> int:
        from_month = prev_month(to_month)
        return self._budget_dao.copy_month(from_month, to_month)

    def get_expense_categories(self) -> list[Category]:
        """Return categories valid for budgeting."""
        return [c for c in self._category_dao.get_all() if not c.is_income]

    @staticmethod
    def _check_amount(amount: float):
        if amount < 0:
            raise ValueError("Budget amount must be non-negative.")

    @staticmethod
    def _month(month: str | None) -> str:
        if month is None:
            return current_month_str()
        if parse_month(month) is None:
            raise ValueError(f"Invalid month: {month}. Use YYYY-MM.")
        return month
