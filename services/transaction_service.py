import logging
import random
from datetime import timedelta
from typing import Iterable

from models.transaction import Transaction
from database.transaction_dao import TransactionDAO
from database.account_dao import AccountDAO
from database.category_dao import CategoryDAO
from database.tag_dao import TagDAO
from utils.constants import TRANSACTION_TYPES
from utils.date_helpers import format_date, storage_date, today

logger = logging.getLogger(__name__)


class TransactionService:
    def __init__(
        self,
        tx_dao: TransactionDAO,
        account_dao: AccountDAO,
        category_dao: CategoryDAO,
        tag_dao: TagDAO,
    ):
        self._dao = tx_dao
        self._account_dao = account_dao
        self._category_dao = category_dao
        self._tag_dao = tag_dao

    def get_all(self) -> list[Transaction]:
        return self._dao.get_all()

    def get_by_id(self, tx_id: int) -> Transaction | None:
        return self._dao.get_by_id(tx_id)

    def get_for_account(self, account_id: int) -> list[Transaction]:
        return self._dao.get_filtered(account_id=account_id)

    def get_in_range(
        self, start: str | None, end: str | None, account_id: int | None = None
    ) -> list[Transaction]:
        return self._dao.get_filtered(account_id=account_id, start=start, end=end)

    def create(
        self,
        type_: str,
        value: float,
        date: str,
        account_id: int,
        category_id: int | None,
        comment: str = "",
        tag_ids: Iterable[int] = (),
    ) -> Transaction:
        tag_ids = list(tag_ids)
        date = self._validate(type_, value, date, account_id, category_id, tag_ids)
        return self._dao.create(
            type_, value, date, account_id, category_id, comment.strip(), tag_ids
        )

    def update(
        self,
        tx_id: int,
        type_: str,
        value: float,
        date: str,
        account_id: int,
        category_id: int | None,
        comment: str = "",
        tag_ids: Iterable[int] = (),
    ) -> Transaction:
        if not self._dao.get_by_id(tx_id):
            raise ValueError("Transaction not found.")
        tag_ids = list(tag_ids)
        date = self._validate(type_, value, date, account_id, category_id, tag_ids)
        return self._dao.update(
            tx_id, type_, value, date, account_id, category_id, comment.strip(), tag_ids
        )

    def delete(self, tx_id: int):
        self._dao.delete(tx_id)

    def delete_all(self) -> int:
        removed = self._dao.delete_all()
        logger.info("Deleted all %d transactions", removed)
        return removed

    def bulk_insert_test_data(self, count: int, account_id: int, days: int = 365) -> int:
        """Developer tool: add `count` random transactions spread over the past `days` days."""
        if count <= 0:
            raise ValueError("Count must be greater than zero.")
        if not self._account_dao.get_by_id(account_id):
            raise ValueError("Account not found.")
        categories = self._category_dao.get_all()
        if not categories:
            raise ValueError("Create at least one category first.")
        start = today()
        rows = []
        for i in range(count):
            cat = random.choice(categories)
            day = start - timedelta(days=random.randrange(days))
            value = round(random.uniform(1, 500 if cat.type == "spending" else 3000), 2)
            rows.append((cat.type, value, format_date(day), account_id, cat.id, f"Test #{i + 1}"))
        inserted = self._dao.bulk_create(rows)
        logger.info("Inserted %d test transactions into account %s", inserted, account_id)
        return inserted

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _validate(
        self,
        type_: str,
        value: float,
        date: str,
        account_id: int,
        category_id: int | None,
        tag_ids: list[int],
    ) -> str:
        """Raise ValueError on bad input; return the date in storage form."""
        if type_ not in TRANSACTION_TYPES:
            raise ValueError(f"Invalid transaction type '{type_}'.")
        if value is None or value <= 0:
            raise ValueError("Value must be greater than zero.")
        stored_date = storage_date(date)
        if stored_date is None:
            raise ValueError("Invalid date.")
        if not self._account_dao.get_by_id(account_id):
            raise ValueError("Please select an account.")
        if category_id is None:
            raise ValueError("Please select a category.")
        category = self._category_dao.get_by_id(category_id)
        if category is None:
            raise ValueError("Please select a category.")
        if category.type != type_:
            raise ValueError(f"Category '{category.name}' is not a {type_} category.")
        known_tags = {t.id for t in self._tag_dao.get_all()}
        if any(tag_id not in known_tags for tag_id in tag_ids):
            raise ValueError("One of the selected tags no longer exists.")
        return stored_date
