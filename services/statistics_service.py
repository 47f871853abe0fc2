"""Aggregations behind the Statistics tab: balances, pie and bar chart
series, totals and per-tag sums.

Every chart runs the same pipeline over the transaction set: filter by type,
account and date range, group by category or period, sum, then sort.
"""
from datetime import date, timedelta

from database.category_dao import CategoryDAO
from database.transaction_dao import TransactionDAO
from models.category import Category
from models.statistics import BarGroup, BarValue, CategorySum, TagTotal, TotalValue
from models.transaction import Transaction
from services.account_service import AccountService
from utils.constants import BAR_GROUPINGS, EPOCH_DATE, STAT_DATE_FILTERS, TYPE_FILTERS
from utils.date_helpers import (
    format_date, parse_date, period_label, period_range, period_start, today,
)


class StatisticsService:
    def __init__(
        self,
        tx_dao: TransactionDAO,
        category_dao: CategoryDAO,
        account_service: AccountService,
    ):
        self._tx_dao = tx_dao
        self._category_dao = category_dao
        self._account_svc = account_service

    # ── Balances ─────────────────────────────────────────────────────────────

    def total_balance(self, currency: str) -> float:
        """Sum of current balances over accounts held in `currency`."""
        balances = self._account_svc.current_balances()
        return sum(
            balances.get(a.id, 0.0)
            for a in self._account_svc.get_all()
            if a.currency == currency
        )

    def balances_by_currency(self) -> dict[str, float]:
        balances = self._account_svc.current_balances()
        result: dict[str, float] = {}
        for a in self._account_svc.get_all():
            result[a.currency] = result.get(a.currency, 0.0) + balances.get(a.id, 0.0)
        return result

    # ── Date ranges ──────────────────────────────────────────────────────────

    @staticmethod
    def date_range(
        date_filter: str,
        ref_date: date | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> tuple[date | None, date | None]:
        """Resolve a date filter to inclusive bounds; all_time gives (None, None)."""
        if date_filter not in STAT_DATE_FILTERS:
            raise ValueError(f"Unknown date filter '{date_filter}'.")
        if date_filter == "all_time":
            return None, None
        if date_filter == "date_range":
            if start is None or end is None:
                raise ValueError("Choose both a start and an end date.")
            if start > end:
                raise ValueError("Start date must be on or before the end date.")
            return start, end
        return period_range(date_filter, ref_date or today())

    @staticmethod
    def move_date_range(
        start: date,
        end: date,
        forward: bool,
        period: str | None = None,
    ) -> tuple[date, date]:
        """Shift a range one step back or forward, staying within [1970-01-01, today].

        With a calendar `period` the range steps to the neighbouring period;
        otherwise it shifts by its own length. A move that would start after
        today or end before 1970 returns the range unchanged.
        """
        epoch = parse_date(EPOCH_DATE)
        now = today()
        if period in BAR_GROUPINGS:
            anchor = end + timedelta(days=1) if forward else start - timedelta(days=1)
            new_start, new_end = period_range(period, anchor)
        else:
            length = timedelta(days=(end - start).days + 1)
            new_start, new_end = (start + length, end + length) if forward else (start - length, end - length)
        if new_start > now or new_end < epoch:
            return start, end
        if period not in BAR_GROUPINGS:
            new_start = max(new_start, epoch)
            new_end = min(new_end, now)
        return new_start, new_end

    # ── Charts ───────────────────────────────────────────────────────────────

    def transactions_for(
        self,
        type_filter: str = "both",
        account_id: int | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> list[Transaction]:
        if type_filter not in TYPE_FILTERS:
            raise ValueError(f"Unknown type filter '{type_filter}'.")
        return self._tx_dao.get_filtered(
            account_id=account_id,
            start=format_date(start) if start else None,
            end=format_date(end) if end else None,
            type_=None if type_filter == "both" else type_filter,
        )

    def pie_chart(
        self,
        type_: str,
        account_id: int | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> list[CategorySum]:
        """Per-category sums for one transaction type, largest first."""
        if type_ not in ("spending", "income"):
            raise ValueError("Pie charts need a single transaction type.")
        return self.category_sums(self.transactions_for(type_, account_id, start, end))

    def category_sums(self, transactions: list[Transaction]) -> list[CategorySum]:
        categories = {c.id: c for c in self._category_dao.get_all()}
        groups: dict[int, CategorySum] = {}
        for tx in transactions:
            item = groups.get(tx.category_id)
            if item is None:
                category = categories.get(tx.category_id) or Category(
                    id=tx.category_id, type=tx.type, name=tx.category_name,
                    color_hex=tx.category_color,
                )
                item = groups[tx.category_id] = CategorySum(category=category, total=0.0)
            item.total += tx.value
            item.transactions.append(tx)
        return sorted(groups.values(), key=lambda s: s.total, reverse=True)

    def bar_chart(
        self,
        type_filter: str = "both",
        group: str = "month",
        account_id: int | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> list[BarGroup]:
        """Per-period sums, oldest period first."""
        return self.bar_groups(
            self.transactions_for(type_filter, account_id, start, end), type_filter, group
        )

    @staticmethod
    def bar_groups(
        transactions: list[Transaction], type_filter: str = "both", group: str = "month"
    ) -> list[BarGroup]:
        if group not in BAR_GROUPINGS:
            raise ValueError(f"Unknown grouping '{group}'.")
        sums: dict[date, dict[str, float]] = {}
        for tx in transactions:
            if type_filter != "both" and tx.type != type_filter:
                continue
            d = parse_date(tx.date)
            if d is None:
                continue
            bucket = sums.setdefault(period_start(group, d), {})
            bucket[tx.type] = bucket.get(tx.type, 0.0) + tx.value

        result = []
        for bucket_start in sorted(sums):
            bucket = sums[bucket_start]
            if type_filter == "both":
                income = bucket.get("income", 0.0)
                spending = bucket.get("spending", 0.0)
                values = [
                    BarValue("income", income),
                    BarValue("spending", spending),
                    BarValue("profit", income - spending),
                ]
            else:
                values = [BarValue(type_filter, bucket.get(type_filter, 0.0))]
            result.append(BarGroup(bucket_start, period_label(group, bucket_start), values))
        return result

    # ── Totals ───────────────────────────────────────────────────────────────

    @staticmethod
    def totals_for(transactions: list[Transaction]) -> list[TotalValue]:
        """One total when all transactions share a type, else income, spending and profit."""
        if not transactions:
            return []
        types = {tx.type for tx in transactions}
        if len(types) == 1:
            only = types.pop()
            return [TotalValue(only, sum(tx.value for tx in transactions))]
        income = sum(tx.value for tx in transactions if tx.type == "income")
        spending = sum(tx.value for tx in transactions if tx.type == "spending")
        return [
            TotalValue("income", income),
            TotalValue("spending", spending),
            TotalValue("profit", income - spending),
        ]

    @staticmethod
    def tag_totals(transactions: list[Transaction]) -> list[TagTotal]:
        """Sum of transaction values per tag, largest first; untagged transactions are skipped."""
        totals: dict[int, TagTotal] = {}
        for tx in transactions:
            for tag in tx.tags:
                item = totals.setdefault(tag.id, TagTotal(tag=tag, total=0.0))
                item.total += tx.value
        return sorted(totals.values(), key=lambda t: t.total, reverse=True)
