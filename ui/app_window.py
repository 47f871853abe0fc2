import logging
from tkinter import messagebox

import customtkinter as ctk

from database.dismissed_reminder_dao import DismissedReminderDAO
from services.account_service import AccountService
from services.budget_service import BudgetService
from services.category_service import CategoryService
from services.data_service import DataService
from services.notification_service import NotificationService
from services.reminder_service import Reminder, ReminderService
from services.search_service import SearchService
from services.settings_service import SettingsService
from services.statistics_service import StatisticsService
from services.tag_service import TagService
from services.transaction_service import TransactionService
from services.transfer_service import TransferService
from ui.components.alert_banner import AlertBanner
from ui.components.reminder_dialog import ReminderDialog
from ui.tabs.accounts_tab import AccountsTab
from ui.tabs.budgets_tab import BudgetsTab
from ui.tabs.categories_tab import CategoriesTab
from ui.tabs.search_tab import SearchTab
from ui.tabs.settings_tab import SettingsTab
from ui.tabs.statistics_tab import StatisticsTab
from ui.tabs.tags_tab import TagsTab
from ui.tabs.transactions_tab import TransactionsTab
from ui.tabs.transfers_tab import TransfersTab
from utils.constants import APP_HEIGHT, APP_NAME, APP_WIDTH, TAB_LABELS
from utils.currency import format_currency
from utils.date_helpers import format_date, today

logger = logging.getLogger(__name__)

_REFRESH_SCOPES: dict[str, set[str]] = {
    "transaction": {"transactions", "search", "statistics", "budgets", "accounts"},
    "transfer":    {"transfers", "statistics", "accounts"},
    "budget":      {"budgets"},
    "category":    {"transactions", "search", "statistics", "budgets", "categories"},
    "tag":         {"transactions", "search", "statistics", "tags"},
    "account":     {"transactions", "transfers", "search", "statistics", "budgets",
                    "accounts", "settings"},
    "full":        set(TAB_LABELS),
}

# Scopes after which budget alerts may have changed
_ALERT_SCOPES = {"transaction", "budget", "category", "account", "full"}


class AppWindow(ctk.CTk):
    def __init__(
        self,
        settings: SettingsService,
        account_service: AccountService,
        category_service: CategoryService,
        tag_service: TagService,
        tx_service: TransactionService,
        transfer_service: TransferService,
        budget_service: BudgetService,
        stats_service: StatisticsService,
        search_service: SearchService,
        data_service: DataService,
        reminder_service: ReminderService,
        notification_service: NotificationService,
        dismissed_reminder_dao: DismissedReminderDAO,
        startup_reminders: list[Reminder] | None = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self._settings = settings
        self._acct_svc = account_service
        self._cat_svc = category_service
        self._tag_svc = tag_service
        self._tx_svc = tx_service
        self._transfer_svc = transfer_service
        self._budget_svc = budget_service
        self._stats_svc = stats_service
        self._search_svc = search_service
        self._data_svc = data_service
        self._reminder_svc = reminder_service
        self._notifications = notification_service
        self._dismissed_dao = dismissed_reminder_dao
        self._startup_reminders = startup_reminders or []
        self._date_format = settings.get_date_format()
        self._tabs: dict[str, ctk.CTkFrame] = {}

        self.title(APP_NAME)
        self.minsize(APP_WIDTH, APP_HEIGHT)
        self.geometry(f"{APP_WIDTH}x{APP_HEIGHT}")

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)

        self._build_account_bar()
        self._build_banner_area()
        self._build_tabs()

        # Show reminder dialog after window is drawn
        if self._startup_reminders:
            self.after(200, self._show_reminder_dialog)
        self._notifications.dispatch(self, self._show_notification)

    # ── Default account bar ─────────────────────────────────────────────────
    def _build_account_bar(self):
        bar = ctk.CTkFrame(self, fg_color=("gray85", "gray15"), corner_radius=0, height=44)
        bar.grid(row=0, column=0, sticky="ew")
        bar.grid_propagate(False)

        ctk.CTkLabel(bar, text="Default account:", anchor="e").pack(side="left", padx=(12, 4), pady=8)
        self._acct_combo_var = ctk.StringVar()
        self._acct_combo = ctk.CTkComboBox(
            bar, values=[], variable=self._acct_combo_var,
            width=200, state="readonly", command=self._on_default_changed,
        )
        self._acct_combo.pack(side="left", padx=4)

        self._balance_label = ctk.CTkLabel(
            bar, text="", font=ctk.CTkFont(size=13, weight="bold"),
        )
        self._balance_label.pack(side="left", padx=(8, 8))
        self._refresh_account_bar()

    def _refresh_account_bar(self):
        accounts = self._acct_svc.get_all()
        self._acct_combo.configure(values=[a.name for a in accounts])
        default = self._acct_svc.get_default()
        self._acct_combo_var.set(default.name if default else "")
        if default:
            balance = self._acct_svc.current_balance(default.id)
            self._balance_label.configure(
                text=format_currency(balance, default.currency),
                text_color="#4CAF50" if balance >= 0 else "#F44336",
            )
        else:
            self._balance_label.configure(text="")

    def _on_default_changed(self, name: str):
        account = next((a for a in self._acct_svc.get_all() if a.name == name), None)
        if account:
            self._acct_svc.set_default(account.id)
            self.notify_tabs_refresh("account")

    def _get_default_account_id(self) -> int | None:
        return self._settings.get_default_account_id()

    def _build_banner_area(self):
        self._banner_frame = ctk.CTkFrame(self, fg_color="transparent", height=0)
        self._banner_frame.grid(row=1, column=0, sticky="ew", padx=8)

    # ── Tabs ────────────────────────────────────────────────────────────────
    def _build_tabs(self):
        self._tabview = ctk.CTkTabview(self)
        self._tabview.grid(row=2, column=0, sticky="nsew", padx=8, pady=(0, 8))

        for key in self._settings.get_tab_order():
            label = TAB_LABELS[key]
            self._tabview.add(label)
            parent = self._tabview.tab(label)
            parent.grid_columnconfigure(0, weight=1)
            parent.grid_rowconfigure(0, weight=1)
            tab = self._create_tab(key, parent)
            tab.grid(row=0, column=0, sticky="nsew")
            self._tabs[key] = tab

    def _create_tab(self, key: str, parent) -> ctk.CTkFrame:
        refresh = self.notify_tabs_refresh
        if key == "transactions":
            return TransactionsTab(
                parent, self._tx_svc, self._acct_svc, self._cat_svc, self._tag_svc,
                get_account_id=self._get_default_account_id,
                notify_refresh=refresh, date_format=self._date_format,
            )
        if key == "transfers":
            return TransfersTab(
                parent, self._transfer_svc, self._acct_svc,
                notify_refresh=refresh, date_format=self._date_format,
            )
        if key == "search":
            return SearchTab(
                parent, self._search_svc, self._stats_svc, self._tx_svc,
                self._acct_svc, self._cat_svc, self._tag_svc,
                notify_refresh=refresh, date_format=self._date_format,
            )
        if key == "statistics":
            return StatisticsTab(
                parent, self._stats_svc, self._acct_svc, date_format=self._date_format,
            )
        if key == "budgets":
            return BudgetsTab(
                parent, self._budget_svc, self._cat_svc, self._acct_svc, self._settings,
                notify_refresh=refresh, date_format=self._date_format,
            )
        if key == "accounts":
            return AccountsTab(parent, self._acct_svc, self._stats_svc, notify_refresh=refresh)
        if key == "categories":
            return CategoriesTab(parent, self._cat_svc, notify_refresh=refresh)
        if key == "tags":
            return TagsTab(parent, self._tag_svc, notify_refresh=refresh)
        if key == "settings":
            return SettingsTab(
                parent, self._settings, self._notifications, self._data_svc,
                self._acct_svc, self._tx_svc,
                notify_refresh=refresh, date_format=self._date_format,
            )
        raise ValueError(f"Unknown tab '{key}'.")

    # ── Refresh ──────────────────────────────────────────────────────────────
    def notify_tabs_refresh(self, scope: str = "full"):
        for key in _REFRESH_SCOPES.get(scope, _REFRESH_SCOPES["full"]):
            tab = self._tabs.get(key)
            if tab is not None:
                tab.refresh()
        if scope in ("transaction", "transfer", "account", "full"):
            self._refresh_account_bar()
        if scope in _ALERT_SCOPES:
            self._refresh_alert_banners()

    # ── Banners & dialogs ────────────────────────────────────────────────────
    def _refresh_alert_banners(self):
        for w in self._banner_frame.winfo_children():
            w.destroy()
        dismissed = self._dismissed_dao.get_active_keys(format_date(today()))
        for reminder in self._reminder_svc.get_reminders(dismissed_keys=dismissed):
            AlertBanner(
                self._banner_frame,
                message=f"{reminder.title}. {reminder.detail}",
                severity=reminder.severity,
                action_text="View",
                action_cmd=lambda: self._tabview.set(TAB_LABELS["budgets"]),
                on_dismiss=lambda r=reminder: self._dismiss_reminder(r),
            ).pack(fill="x", pady=2)

    def _dismiss_reminder(self, reminder: Reminder):
        self._dismissed_dao.dismiss(reminder.key, self._reminder_svc.compute_expiry(reminder))

    def _show_reminder_dialog(self):
        ReminderDialog(
            self,
            self._startup_reminders,
            dismissed_dao=self._dismissed_dao,
            reminder_service=self._reminder_svc,
        )

    def _show_notification(self, title: str, body: str):
        logger.info("Showing daily reminder")
        self.bell()
        messagebox.showinfo(title, body, parent=self)
