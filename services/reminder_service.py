from dataclasses import dataclass
from datetime import date, timedelta

from services.budget_service import BudgetService
from services.settings_service import SettingsService
from utils.currency import format_amount
from utils.date_helpers import today, format_date, next_period_start


@dataclass
class Reminder:
    type: str       # 'over_budget' | 'near_budget'
    severity: str   # 'warning' | 'error'
    title: str
    detail: str
    key: str = ""   # e.g. "budget:3"; empty = not dismissable
    expires: str = ""  # first YYYY-MM-DD the alert may show again once dismissed


class ReminderService:
    def __init__(self, budget_service: BudgetService, settings: SettingsService):
        self._budget = budget_service
        self._settings = settings

    def get_reminders(
        self,
        ref_date: date | None = None,
        threshold: float | None = None,
        dismissed_keys: set[str] | None = None,
    ) -> list[Reminder]:
        ref = ref_date or today()
        if threshold is None:
            threshold = self._settings.get_budget_alert_threshold()
        reminders = self._check_budgets(ref, threshold)
        order = {"error": 0, "warning": 1, "info": 2}
        reminders.sort(key=lambda r: order[r.severity])
        if dismissed_keys:
            reminders = [r for r in reminders if r.key not in dismissed_keys]
        return reminders

    def compute_expiry(self, reminder: Reminder, ref_date: date | None = None) -> str:
        """Return the YYYY-MM-DD day after the budget's current period ends."""
        if reminder.expires:
            return reminder.expires
        ref = ref_date or today()
        if reminder.key.startswith("budget:"):
            budget = self._budget.get_by_id(int(reminder.key.split(":", 1)[1]))
            if budget:
                return format_date(next_period_start(budget.period, ref))
        return format_date(ref + timedelta(days=1))

    def _check_budgets(self, ref: date, threshold: float) -> list[Reminder]:
        reminders = []
        for budget in self._budget.get_budget_status(ref):
            pct = budget.percentage
            detail = (
                f"Spent {format_amount(budget.spent_amount)} of "
                f"{format_amount(budget.value)} this {budget.period} "
                f"({pct * 100:.0f}%)"
            )
            common = dict(
                detail=detail,
                key=f"budget:{budget.id}",
                expires=format_date(next_period_start(budget.period, ref)),
            )
            if pct >= 1.0:
                reminders.append(Reminder(
                    type="over_budget",
                    severity="error",
                    title=f"{budget.name} is over budget",
                    **common,
                ))
            elif pct >= threshold:
                reminders.append(Reminder(
                    type="near_budget",
                    severity="warning",
                    title=f"{budget.name} is near its limit",
                    **common,
                ))
        return reminders
