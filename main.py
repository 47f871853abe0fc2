import logging

import customtkinter as ctk

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
from services.notification_service import NotificationService

from ui.app_window import AppWindow
from ui.components.welcome_dialog import WelcomeDialog
from utils.app_config import get_db_folder, get_log_level
from utils.date_helpers import format_date, today
from utils.log_setup import configure_logging

logger = logging.getLogger(__name__)


def main():
    # ── Bootstrap: logging and DB folder from pre-DB config ──────────────────
    configure_logging(get_log_level())
    db_folder = get_db_folder()

    # ── Database ─────────────────────────────────────────────────────────────
    db = DatabaseManager.open_default(db_folder=db_folder)

    # ── DAOs ─────────────────────────────────────────────────────────────────
    account_dao = AccountDAO(db)
    category_dao = CategoryDAO(db)
    tag_dao = TagDAO(db)
    tx_dao = TransactionDAO(db)
    transfer_dao = TransferDAO(db)
    budget_dao = BudgetDAO(db)
    dismissed_reminder_dao = DismissedReminderDAO(db)

    # ── Services ─────────────────────────────────────────────────────────────
    settings = SettingsService(db)
    account_svc = AccountService(account_dao, tx_dao, transfer_dao, settings)
    category_svc = CategoryService(category_dao)
    tag_svc = TagService(tag_dao, settings)
    tx_svc = TransactionService(tx_dao, account_dao, category_dao, tag_dao)
    transfer_svc = TransferService(transfer_dao, account_dao)
    budget_svc = BudgetService(budget_dao, tx_dao, category_dao, account_dao)
    stats_svc = StatisticsService(tx_dao, category_dao, account_svc)
    search_svc = SearchService(tx_dao, category_dao)
    data_svc = DataService(
        db, account_dao, category_dao, tag_dao, tx_dao, transfer_dao, budget_dao, settings
    )
    reminder_svc = ReminderService(budget_svc, settings)
    notification_svc = NotificationService(db)

    # ── Filter dismissed alerts, then gather startup alerts ──────────────────
    dismissed_keys = dismissed_reminder_dao.get_active_keys(format_date(today()))
    reminders = reminder_svc.get_reminders(dismissed_keys=dismissed_keys)

    # ── Appearance ───────────────────────────────────────────────────────────
    ctk.set_appearance_mode(settings.get_color_scheme())
    ctk.set_default_color_theme("blue")

    # ── Launch UI ────────────────────────────────────────────────────────────
    app = AppWindow(
        settings=settings,
        account_service=account_svc,
        category_service=category_svc,
        tag_service=tag_svc,
        tx_service=tx_svc,
        transfer_service=transfer_svc,
        budget_service=budget_svc,
        stats_service=stats_svc,
        search_service=search_svc,
        data_service=data_svc,
        reminder_service=reminder_svc,
        notification_service=notification_svc,
        dismissed_reminder_dao=dismissed_reminder_dao,
        startup_reminders=reminders,
    )

    if settings.is_first_launch():
        def show_welcome():
            dlg = WelcomeDialog(app, account_svc, category_svc, settings)
            app.wait_window(dlg)
            app.notify_tabs_refresh("full")
        app.after(100, show_welcome)

    def on_close():
        notification_svc.cancel()
        db.close()
        app.destroy()

    app.protocol("WM_DELETE_WINDOW", on_close)
    app.mainloop()
    logger.info("Application closed")


if __name__ == "__main__":
    main()
