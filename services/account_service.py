import logging

from models.account import BalanceAccount
from database.account_dao import AccountDAO
from database.transaction_dao import TransactionDAO
from database.transfer_dao import TransferDAO
from services.settings_service import SettingsService
from utils.currency import is_known_currency

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(
        self,
        account_dao: AccountDAO,
        tx_dao: TransactionDAO,
        transfer_dao: TransferDAO,
        settings: SettingsService,
    ):
        self._dao = account_dao
        self._tx_dao = tx_dao
        self._transfer_dao = transfer_dao
        self._settings = settings

    def get_all(self) -> list[BalanceAccount]:
        return self._dao.get_all()

    def get_by_id(self, account_id: int) -> BalanceAccount | None:
        return self._dao.get_by_id(account_id)

    def create(
        self,
        name: str,
        currency: str,
        balance: float = 0.0,
        icon_name: str = "wallet",
        color_hex: str = "#2196F3",
    ) -> BalanceAccount:
        name = name.strip()
        self._validate(name, currency)
        if self._dao.get_by_name(name):
            raise ValueError(f"An account named '{name}' already exists.")
        account = self._dao.create(name, currency, balance, icon_name, color_hex)
        if self._settings.get_default_account_id() is None:
            self._settings.set_default_account_id(account.id)
        return account

    def update(
        self,
        account_id: int,
        name: str,
        currency: str,
        balance: float,
        icon_name: str,
        color_hex: str,
    ) -> BalanceAccount:
        name = name.strip()
        self._validate(name, currency)
        existing = self._dao.get_by_name(name)
        if existing and existing.id != account_id:
            raise ValueError(f"An account named '{name}' already exists.")
        if not self._dao.get_by_id(account_id):
            raise ValueError("Account not found.")
        return self._dao.update(account_id, name, currency, balance, icon_name, color_hex)

    # ── Balances ─────────────────────────────────────────────────────────────

    def current_balance(self, account_id: int) -> float:
        account = self._require(account_id)
        return account.balance + self._dao.get_balance_changes().get(account_id, 0.0)

    def current_balances(self) -> dict[int, float]:
        """Return {account_id: current balance} for every account."""
        changes = self._dao.get_balance_changes()
        return {a.id: a.balance + changes.get(a.id, 0.0) for a in self._dao.get_all()}

    def set_current_balance(self, account_id: int, entered: float) -> BalanceAccount:
        """Store the initial balance that makes the current balance equal `entered`."""
        account = self._require(account_id)
        change = self._dao.get_balance_changes().get(account_id, 0.0)
        return self._dao.update(
            account_id, account.name, account.currency, entered - change,
            account.icon_name, account.color_hex,
        )

    # ── Default account ──────────────────────────────────────────────────────

    def get_default(self) -> BalanceAccount | None:
        account_id = self._settings.get_default_account_id()
        return self._dao.get_by_id(account_id) if account_id else None

    def set_default(self, account_id: int):
        self._require(account_id)
        self._settings.set_default_account_id(account_id)

    # ── Deletion ─────────────────────────────────────────────────────────────

    def delete(self, account_id: int):
        """Delete the account, moving its transactions and budgets to the default account."""
        self._require(account_id)
        default = self.get_default()
        if default is None:
            raise ValueError("Set a default account before deleting accounts.")
        if default.id == account_id:
            raise ValueError("The default account cannot be deleted.")
        self._dao.move_dependents(account_id, default.id)
        self._dao.delete(account_id)
        logger.info("Moved transactions of account %s to default account %s", account_id, default.id)

    def delete_with_transactions(self, account_id: int):
        """Delete the account together with its transactions, transfers and budgets."""
        self._require(account_id)
        removed = self._tx_dao.delete_by_account(account_id)
        self._transfer_dao.delete_for_account(account_id)
        self._dao.delete(account_id)
        if self._settings.get_default_account_id() == account_id:
            self._settings.set_default_account_id(None)
        logger.info("Deleted account %s with %d transactions", account_id, removed)

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _require(self, account_id: int) -> BalanceAccount:
        account = self._dao.get_by_id(account_id)
        if account is None:
            raise ValueError("Account not found.")
        return account

    @staticmethod
    def _validate(name: str, currency: str):
        if not name:
            raise ValueError("Account name cannot be empty.")
        if not is_known_currency(currency):
            raise ValueError(f"Unknown currency '{currency}'.")
