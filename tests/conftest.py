"""Shared fixtures: a fresh on-disk database per test with every DAO and service wired."""
import pytest

from database.db_manager import DatabaseManager
from database.account_dao import AccountDAO
from database.category_dao import CategoryDAO
from database.tag_dao import TagDAO
from database.transaction_dao import TransactionDAO
from database.transfer_dao import TransferDAO
from database.budget_dao import BudgetDAO
from database.dismissed_reminder_dao import DismissedReminderDAO
from services.settings_service import SettingsService
from services.account_service import AccountService
from services.category_service import CategoryService
from services.tag_service import TagService
from services.transaction_service import TransactionService
from services.transfer_service import TransferService
from services.budget_service import BudgetService
from services.statistics_service import StatisticsService
from services.search_service import SearchService
from services.data_service import DataService
from services.reminder_service import ReminderService


@pytest.fixture
def db(tmp_path):
    manager = DatabaseManager(str(tmp_path / "test.db"))
    manager.initialize()
    yield manager
    manager.close()


@pytest.fixture
def account_dao(db):
    return AccountDAO(db)


@pytest.fixture
def category_dao(db):
    return CategoryDAO(db)


@pytest.fixture
def tag_dao(db):
    return TagDAO(db)


@pytest.fixture
def tx_dao(db):
    return TransactionDAO(db)


@pytest.fixture
def transfer_dao(db):
    return TransferDAO(db)


@pytest.fixture
def budget_dao(db):
    return BudgetDAO(db)


@pytest.fixture
def dismissed_dao(db):
    return DismissedReminderDAO(db)


@pytest.fixture
def settings(db):
    return SettingsService(db)


@pytest.fixture
def account_svc(account_dao, tx_dao, transfer_dao, settings):
    return AccountService(account_dao, tx_dao, transfer_dao, settings)


@pytest.fixture
def category_svc(category_dao):
    return CategoryService(category_dao)


@pytest.fixture
def tag_svc(tag_dao, settings):
    return TagService(tag_dao, settings)


@pytest.fixture
def tx_svc(tx_dao, account_dao, category_dao, tag_dao):
    return TransactionService(tx_dao, account_dao, category_dao, tag_dao)


@pytest.fixture
def transfer_svc(transfer_dao, account_dao):
    return TransferService(transfer_dao, account_dao)


@pytest.fixture
def budget_svc(budget_dao, tx_dao, category_dao, account_dao):
    return BudgetService(budget_dao, tx_dao, category_dao, account_dao)


@pytest.fixture
def stats_svc(tx_dao, category_dao, account_svc):
    return StatisticsService(tx_dao, category_dao, account_svc)


@pytest.fixture
def search_svc(tx_dao, category_dao):
    return SearchService(tx_dao, category_dao)


@pytest.fixture
def data_svc(db, account_dao, category_dao, tag_dao, tx_dao, transfer_dao, budget_dao, settings):
    return DataService(
        db, account_dao, category_dao, tag_dao, tx_dao, transfer_dao, budget_dao, settings
    )


@pytest.fixture
def reminder_svc(budget_svc, settings):
    return ReminderService(budget_svc, settings)


# ── Sample data ───────────────────────────────────────────────────────────────

@pytest.fixture
def wallet(account_svc):
    return account_svc.create("Wallet", "USD", 100.0)


@pytest.fixture
def savings(account_svc):
    return account_svc.create("Savings", "EUR", 0.0)


@pytest.fixture
def groceries(category_svc):
    return category_svc.create("spending", "Groceries", "cart", "#4CAF50")


@pytest.fixture
def cafes(category_svc):
    return category_svc.create("spending", "Cafes", "cup", "#FF9800")


@pytest.fixture
def salary(category_svc):
    return category_svc.create("income", "Salary", "briefcase", "#2196F3")
