from database.transaction_dao import TransactionDAO
from services.budget_service import BudgetService
from utils.date_helpers import current_month_str


class ReportService:
    def __init__(self, tx_dao: TransactionDAO, budget_service: BudgetService):
        self._tx_dao = tx_dao
        self._budgets = budget_service

    def get_summary(self, month: str | None = None) -> dict:
        """Monthly totals against the overall budget."""
        m = month or current_month_str()
        totals = self._tx_dao.get_totals_for_month(m)
        overall = self._budgets.get_overall(m)
        totals["budget"] = overall.amount
        totals["remaining"] = overall.amount - totals["expense"]
        totals["percentage"] = totals["expense"] / overall.amount if overall.amount > 0 else 0.0
        totals["synced"] = overall.sync_with_income
        return totals

    def get_category_breakdown(self, month: str | None = None) -> list[dict]:
        """Return [{category, color_hex, spent, budget}, ...] for every expense
        category that has either spending or a budget this month."""
        m = month or current_month_str()
        spending = self._tx_dao.get_spending_by_category(m)
        budgets = {b.category_id: b.amount for b in self._budgets.get_budget_status(m)}
        rows = []
        for cat in self._budgets.get_expense_categories():
            spent = spending.get(cat.id, 0.0)
            budget = budgets.get(cat.id, 0.0)
            if spent or budget:
                rows.append({
                    "category": cat.name,
                    "color_hex": cat.color_hex,
                    "spent": spent,
                    "budget": budget,
                })
        return rows
