import logging

from database.account_dao import AccountDAO
from database.transfer_dao import TransferDAO
from models.transfer import Transfer
from utils.constants import RATE_WAYS, TRANSFER_PAGE_SIZE
from utils.date_helpers import storage_date, today_str

logger = logging.getLogger(__name__)


def convert(value_from: float, rate: float, rate_way: str) -> float:
    """Apply an exchange rate: 'multiply' gives value*rate, 'divide' gives value/rate (0 for a zero rate)."""
    if rate_way not in RATE_WAYS:
        raise ValueError(f"Rate way must be one of: {', '.join(RATE_WAYS)}.")
    if rate_way == "divide":
        return value_from / rate if rate else 0.0
    return value_from * rate


class TransferService:
    def __init__(self, transfer_dao: TransferDAO, account_dao: AccountDAO):
        self._dao = transfer_dao
        self._account_dao = account_dao

    def get_by_id(self, transfer_id: int) -> Transfer | None:
        return self._dao.get_by_id(transfer_id)

    def get_all(self) -> list[Transfer]:
        return self._dao.get_all()

    def get_page(self, page: int, page_size: int = TRANSFER_PAGE_SIZE) -> list[Transfer]:
        """Return one 0-based page of transfers, newest first."""
        if page < 0:
            raise ValueError("Page must be 0 or greater.")
        return self._dao.get_page(page * page_size, page_size)

    def page_count(self, page_size: int = TRANSFER_PAGE_SIZE) -> int:
        total = self._dao.count()
        return max(1, -(-total // page_size))

    def get_for_account(self, account_id: int) -> list[Transfer]:
        return self._dao.get_for_account(account_id)

    def create(
        self,
        from_account_id: int,
        to_account_id: int,
        value_from: float,
        date: str,
        comment: str = "",
        rate: float | None = None,
        rate_way: str = "multiply",
    ) -> Transfer:
        value_to = self._resolve(from_account_id, to_account_id, value_from, date, rate, rate_way)
        return self._dao.create(
            from_account_id, to_account_id, value_from, value_to, storage_date(date), comment.strip()
        )

    def update(
        self,
        transfer_id: int,
        from_account_id: int,
        to_account_id: int,
        value_from: float,
        date: str,
        comment: str = "",
        rate: float | None = None,
        rate_way: str = "multiply",
    ) -> Transfer:
        if not self._dao.get_by_id(transfer_id):
            raise ValueError("Transfer not found.")
        value_to = self._resolve(from_account_id, to_account_id, value_from, date, rate, rate_way)
        return self._dao.update(
            transfer_id, from_account_id, to_account_id, value_from, value_to, storage_date(date),
            comment.strip(),
        )

    def delete(self, transfer_id: int):
        self._dao.delete(transfer_id)

    @staticmethod
    def derive_rate(transfer: Transfer) -> float | None:
        """Rate implied by a stored cross-currency transfer, to be applied with way 'divide'."""
        if not transfer.is_cross_currency or not transfer.value_to:
            return None
        return transfer.value_from / transfer.value_to

    def template_from(self, transfer_id: int) -> Transfer:
        """Unsaved copy of an existing transfer dated today, for 'repeat transfer'."""
        source = self._dao.get_by_id(transfer_id)
        if source is None:
            raise ValueError("Transfer not found.")
        return Transfer(
            id=0,
            from_account_id=source.from_account_id,
            to_account_id=source.to_account_id,
            value_from=source.value_from,
            value_to=source.value_to,
            date=today_str(),
            comment=source.comment,
            from_account_name=source.from_account_name,
            to_account_name=source.to_account_name,
            from_currency=source.from_currency,
            to_currency=source.to_currency,
        )

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _resolve(
        self,
        from_account_id: int,
        to_account_id: int,
        value_from: float,
        date: str,
        rate: float | None,
        rate_way: str,
    ) -> float:
        """Validate a transfer and return the value credited to the target account."""
        if from_account_id == to_account_id:
            raise ValueError("Cannot transfer to the same account.")
        source = self._account_dao.get_by_id(from_account_id)
        target = self._account_dao.get_by_id(to_account_id)
        if source is None or target is None:
            raise ValueError("Please select both accounts.")
        if value_from is None or value_from <= 0:
            raise ValueError("Value must be greater than zero.")
        if storage_date(date) is None:
            raise ValueError("Invalid date.")
        if source.currency == target.currency:
            return value_from
        if rate is None or rate <= 0:
            raise ValueError(
                f"Enter an exchange rate between {source.currency} and {target.currency}."
            )
        return round(convert(value_from, rate, rate_way), 2)
