from datetime import date, timedelta

import pytest

from services.budget_service import BudgetService
from services.statistics_service import StatisticsService
from utils.date_helpers import today

REF = date(2026, 4, 15)  # a Wednesday


class TestBudgets:
    def test_period_range_week_starts_monday(self):
        """Weekly budgets run Monday to Sunday."""
        assert BudgetService.period_range("week", REF) == (date(2026, 4, 13), date(2026, 4, 19))

    def test_period_range_month_and_year(self):
        """Monthly and yearly budgets follow the calendar."""
        assert BudgetService.period_range("month", REF) == (date(2026, 4, 1), date(2026, 4, 30))
        assert BudgetService.period_range("year", REF) == (date(2026, 1, 1), date(2026, 12, 31))

    def test_validation(self, budget_svc):
        """Name, positive value and a known period are required."""
        with pytest.raises(ValueError, match="name"):
            budget_svc.create(" ", 10.0, "month")
        with pytest.raises(ValueError, match="greater than zero"):
            budget_svc.create("Food", 0, "month")
        with pytest.raises(ValueError, match="period"):
            budget_svc.create("Food", 10.0, "day")

    def test_category_budget_spent(self, budget_svc, tx_svc, wallet, groceries, cafes):
        """A category budget counts only that category in the current period."""
        budget = budget_svc.create("Food", 200.0, "month", groceries.id)
        tx_svc.create("spending", 50.0, "2026-04-02", wallet.id, groceries.id)
        tx_svc.create("spending", 70.0, "2026-04-20", wallet.id, groceries.id)
        tx_svc.create("spending", 99.0, "2026-04-03", wallet.id, cafes.id)
        tx_svc.create("spending", 500.0, "2026-03-31", wallet.id, groceries.id)
        status = budget_svc.get_status(budget.id, REF)
        assert status.spent_amount == pytest.approx(120.0)
        assert status.percentage == pytest.approx(0.6)
        assert status.remaining == pytest.approx(80.0)
        assert status.period_start == "2026-04-01"

    def test_open_budget_counts_spending_only(self, budget_svc, tx_svc, wallet, groceries, salary):
        """A budget without a category sums spending, never income."""
        budget = budget_svc.create("All", 100.0, "week")
        tx_svc.create("spending", 60.0, "2026-04-14", wallet.id, groceries.id)
        tx_svc.create("spending", 60.0, "2026-04-19", wallet.id, groceries.id)
        tx_svc.create("income", 1000.0, "2026-04-15", wallet.id, salary.id)
        status = budget_svc.get_status(budget.id, REF)
        assert status.spent_amount == pytest.approx(120.0)
        assert status.is_over

    def test_account_budget_filters_account(self, budget_svc, tx_svc, account_svc, wallet, groceries):
        """An account budget ignores other accounts."""
        card = account_svc.create("Card", "USD")
        budget = budget_svc.create("Wallet food", 100.0, "month", groceries.id, wallet.id)
        tx_svc.create("spending", 10.0, "2026-04-02", wallet.id, groceries.id)
        tx_svc.create("spending", 40.0, "2026-04-02", card.id, groceries.id)
        assert budget_svc.get_status(budget.id, REF).spent_amount == pytest.approx(10.0)


class TestStatistics:
    def test_pie_chart_sorted_descending(self, stats_svc, tx_svc, wallet, groceries, cafes):
        """Pie slices are category sums, largest first, carrying their transactions."""
        tx_svc.create("spending", 10.0, "2026-04-02", wallet.id, groceries.id)
        tx_svc.create("spending", 15.0, "2026-04-03", wallet.id, groceries.id)
        tx_svc.create("spending", 40.0, "2026-04-04", wallet.id, cafes.id)
        slices = stats_svc.pie_chart("spending", start=date(2026, 4, 1), end=date(2026, 4, 30))
        assert [s.category.name for s in slices] == ["Cafes", "Groceries"]
        assert slices[1].total == pytest.approx(25.0)
        assert len(slices[1].transactions) == 2

    def test_pie_chart_needs_single_type(self, stats_svc):
        """'both' is not a valid pie type."""
        with pytest.raises(ValueError):
            stats_svc.pie_chart("both")

    def test_bar_chart_both_adds_profit(self, stats_svc, tx_svc, wallet, groceries, salary):
        """With both types each group holds income, spending and profit, oldest first."""
        tx_svc.create("income", 100.0, "2026-03-05", wallet.id, salary.id)
        tx_svc.create("spending", 30.0, "2026-04-05", wallet.id, groceries.id)
        groups = stats_svc.bar_chart("both", "month")
        assert [g.start for g in groups] == [date(2026, 3, 1), date(2026, 4, 1)]
        march, april = groups
        assert [v.type for v in march.values] == ["income", "spending", "profit"]
        assert march.value_for("spending") == 0.0
        assert april.value_for("profit") == pytest.approx(-30.0)

    def test_bar_chart_single_type(self, stats_svc, tx_svc, wallet, groceries, salary):
        """A single-type bar chart ignores the other type."""
        tx_svc.create("income", 100.0, "2026-03-05", wallet.id, salary.id)
        tx_svc.create("spending", 30.0, "2026-03-06", wallet.id, groceries.id)
        groups = stats_svc.bar_chart("spending", "year")
        assert len(groups) == 1
        assert [(v.type, v.value) for v in groups[0].values] == [("spending", 30.0)]

    def test_totals_for(self, stats_svc, tx_svc, wallet, groceries, salary):
        """One total for a single type, otherwise income, spending and profit."""
        a = tx_svc.create("spending", 30.0, "2026-03-06", wallet.id, groceries.id)
        assert [(t.type, t.value) for t in StatisticsService.totals_for([a])] == [("spending", 30.0)]
        b = tx_svc.create("income", 100.0, "2026-03-05", wallet.id, salary.id)
        totals = StatisticsService.totals_for([a, b])
        assert [(t.type, t.value) for t in totals] == [
            ("income", 100.0), ("spending", 30.0), ("profit", 70.0),
        ]
        assert StatisticsService.totals_for([]) == []

    def test_tag_totals(self, stats_svc, tx_svc, tag_svc, wallet, groceries):
        """Tag totals skip untagged transactions and sort descending."""
        trip = tag_svc.create("trip", "#111111")
        work = tag_svc.create("work", "#222222")
        tx_svc.create("spending", 5.0, "2026-03-06", wallet.id, groceries.id, tag_ids=[trip.id])
        tx_svc.create("spending", 20.0, "2026-03-07", wallet.id, groceries.id, tag_ids=[trip.id, work.id])
        tx_svc.create("spending", 99.0, "2026-03-08", wallet.id, groceries.id)
        totals = StatisticsService.tag_totals(tx_svc.get_all())
        assert [(t.tag.name, t.total) for t in totals] == [("trip", 25.0), ("work", 20.0)]

    def test_total_balance_per_currency(self, stats_svc, account_svc, wallet, savings):
        """Balances are summed per currency."""
        account_svc.create("Card", "USD", 50.0)
        assert stats_svc.total_balance("USD") == pytest.approx(150.0)
        assert stats_svc.balances_by_currency() == {"EUR": 0.0, "USD": 150.0}

    def test_date_range_all_time(self):
        """all_time resolves to open bounds."""
        assert StatisticsService.date_range("all_time") == (None, None)
        assert StatisticsService.date_range("month", REF) == (date(2026, 4, 1), date(2026, 4, 30))

    def test_move_date_range_by_length(self):
        """Custom ranges shift by their own length."""
        moved = StatisticsService.move_date_range(date(2026, 3, 10), date(2026, 3, 19), forward=False)
        assert moved == (date(2026, 2, 28), date(2026, 3, 9))

    def test_move_date_range_by_period(self):
        """Calendar periods step to the neighbouring period."""
        moved = StatisticsService.move_date_range(
            date(2026, 3, 1), date(2026, 3, 31), forward=False, period="month"
        )
        assert moved == (date(2026, 2, 1), date(2026, 2, 28))

    def test_move_date_range_stops_at_today(self):
        """Moving past today leaves the range unchanged."""
        now = today()
        assert StatisticsService.move_date_range(now, now, forward=True) == (now, now)

    def test_move_date_range_clamps_to_epoch(self):
        """Ranges never start before 1970-01-01."""
        moved = StatisticsService.move_date_range(date(1970, 1, 5), date(1970, 1, 14), forward=False)
        assert moved == (date(1970, 1, 1), date(1970, 1, 4))

    def test_move_forward_clamps_end(self):
        """A forward move that overlaps today ends today."""
        now = today()
        start = now - timedelta(days=5)
        moved = StatisticsService.move_date_range(start - timedelta(days=3), start, forward=True)
        assert moved[1] <= now
