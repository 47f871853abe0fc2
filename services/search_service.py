import math
from dataclasses import dataclass, field, replace
from datetime import date

from database.category_dao import CategoryDAO
from database.transaction_dao import TransactionDAO
from models.statistics import TransactionGroup
from models.transaction import Transaction
from utils.constants import SEARCH_DATE_FILTERS, TYPE_FILTERS
from utils.date_helpers import format_date, period_range, today


@dataclass
class SearchFilter:
    type: str = "both"                  # 'both' | 'spending' | 'income'
    account_id: int | None = None
    category_id: int | None = None
    tag_ids: list[int] = field(default_factory=list)
    date_filter: str = "month"          # 'day' | 'week' | 'month' | 'year' | 'custom'
    ref_date: date | None = None
    start: date | None = None           # custom range only
    end: date | None = None
    text: str = ""


class SearchService:
    def __init__(self, tx_dao: TransactionDAO, category_dao: CategoryDAO):
        self._tx_dao = tx_dao
        self._category_dao = category_dao

    @staticmethod
    def resolve_dates(flt: SearchFilter) -> tuple[date, date]:
        if flt.date_filter not in SEARCH_DATE_FILTERS:
            raise ValueError(f"Unknown date filter '{flt.date_filter}'.")
        if flt.date_filter == "custom":
            if flt.start is None or flt.end is None:
                raise ValueError("Choose both a start and an end date.")
            if flt.start > flt.end:
                raise ValueError("Start date must be on or before the end date.")
            return flt.start, flt.end
        return period_range(flt.date_filter, flt.ref_date or today())

    def search(self, flt: SearchFilter) -> list[Transaction]:
        """Transactions matching every part of the filter, newest first."""
        if flt.type not in TYPE_FILTERS:
            raise ValueError(f"Unknown type filter '{flt.type}'.")
        start, end = self.resolve_dates(flt)
        candidates = self._tx_dao.get_filtered(
            account_id=flt.account_id,
            start=format_date(start),
            end=format_date(end),
            type_=None if flt.type == "both" else flt.type,
            category_id=flt.category_id,
        )
        wanted_tags = set(flt.tag_ids)
        if wanted_tags:
            candidates = [tx for tx in candidates if wanted_tags <= set(tx.tag_ids)]
        return [tx for tx in candidates if matches_text(tx, flt.text)]

    def search_grouped(self, flt: SearchFilter) -> list[TransactionGroup]:
        return group_by_day(self.search(flt))

    def with_type(self, flt: SearchFilter, type_: str) -> SearchFilter:
        """Copy of flt with a new type; a category of the other type is cleared."""
        if type_ not in TYPE_FILTERS:
            raise ValueError(f"Unknown type filter '{type_}'.")
        category_id = flt.category_id
        if category_id is not None and type_ != "both":
            category = self._category_dao.get_by_id(category_id)
            if category is None or category.type != type_:
                category_id = None
        return replace(flt, type=type_, category_id=category_id)


def matches_text(tx: Transaction, text: str) -> bool:
    """Numeric text matches the value exactly; other text is a case-insensitive
    substring of the account, currency, category, tags or comment."""
    if not text or not text.strip():
        return True
    numeric = text.replace(" ", "").replace(",", ".")
    try:
        number = float(numeric)
    except ValueError:
        number = None
    if number is not None and math.isfinite(number):
        return tx.value == number
    needle = text.strip().lower()
    haystack = (
        tx.account_name,
        tx.currency,
        tx.category_name,
        tx.tag_names,
        tx.comment,
    )
    return any(needle in field_.lower() for field_ in haystack)


def group_by_day(transactions: list[Transaction]) -> list[TransactionGroup]:
    groups: dict[str, TransactionGroup] = {}
    for tx in transactions:
        groups.setdefault(tx.date, TransactionGroup(date=tx.date)).transactions.append(tx)
    return sorted(groups.values(), key=lambda g: g.date, reverse=True)
