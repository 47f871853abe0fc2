from datetime import date

from models.budget import Budget
from database.budget_dao import BudgetDAO
from database.transaction_dao import TransactionDAO
from database.category_dao import CategoryDAO
from database.account_dao import AccountDAO
from utils.constants import BUDGET_PERIODS
from utils.date_helpers import period_range, format_date, today


class BudgetService:
    def __init__(
        self,
        budget_dao: BudgetDAO,
        tx_dao: TransactionDAO,
        category_dao: CategoryDAO,
        account_dao: AccountDAO,
    ):
        self._budget_dao = budget_dao
        self._tx_dao = tx_dao
        self._category_dao = category_dao
        self._account_dao = account_dao

    def get_all(self) -> list[Budget]:
        return self._budget_dao.get_all()

    def get_by_id(self, budget_id: int) -> Budget | None:
        return self._budget_dao.get_by_id(budget_id)

    def create(
        self,
        name: str,
        value: float,
        period: str,
        category_id: int | None = None,
        account_id: int | None = None,
    ) -> Budget:
        name = name.strip()
        self._validate(name, value, period, category_id, account_id)
        return self._budget_dao.create(name, value, period, category_id, account_id)

    def update(
        self,
        budget_id: int,
        name: str,
        value: float,
        period: str,
        category_id: int | None = None,
        account_id: int | None = None,
    ) -> Budget:
        if not self._budget_dao.get_by_id(budget_id):
            raise ValueError("Budget not found.")
        name = name.strip()
        self._validate(name, value, period, category_id, account_id)
        return self._budget_dao.update(budget_id, name, value, period, category_id, account_id)

    def delete(self, budget_id: int):
        self._budget_dao.delete(budget_id)

    @staticmethod
    def period_range(period: str, ref_date: date | None = None) -> tuple[date, date]:
        """Inclusive bounds of the budget period containing ref_date (weeks start Monday)."""
        if period not in BUDGET_PERIODS:
            raise ValueError(f"Budget period must be one of: {', '.join(BUDGET_PERIODS)}.")
        return period_range(period, ref_date or today())

    def get_budget_status(self, ref_date: date | None = None) -> list[Budget]:
        """Return all budgets with spent amounts for their current period filled in."""
        budgets = self._budget_dao.get_all()
        for b in budgets:
            self._fill_spent(b, ref_date)
        return budgets

    def get_status(self, budget_id: int, ref_date: date | None = None) -> Budget | None:
        budget = self._budget_dao.get_by_id(budget_id)
        if budget:
            self._fill_spent(budget, ref_date)
        return budget

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _fill_spent(self, budget: Budget, ref_date: date | None):
        start, end = self.period_range(budget.period, ref_date)
        budget.period_start = format_date(start)
        budget.period_end = format_date(end)
        # A category budget counts that category; an open budget counts spending only
        budget.spent_amount = self._tx_dao.sum_values(
            budget.period_start,
            budget.period_end,
            type_=None if budget.category_id is not None else "spending",
            category_id=budget.category_id,
            account_id=budget.account_id,
        )

    def _validate(
        self,
        name: str,
        value: float,
        period: str,
        category_id: int | None,
        account_id: int | None,
    ):
        if not name:
            raise ValueError("Budget name cannot be empty.")
        if value is None or value <= 0:
            raise ValueError("Budget value must be greater than zero.")
        if period not in BUDGET_PERIODS:
            raise ValueError(f"Budget period must be one of: {', '.join(BUDGET_PERIODS)}.")
        if category_id is not None and not self._category_dao.get_by_id(category_id):
            raise ValueError("Category not found.")
        if account_id is not None and not self._account_dao.get_by_id(account_id):
            raise ValueError("Account not found.")
