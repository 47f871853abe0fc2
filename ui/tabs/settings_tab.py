import logging
import sqlite3
from tkinter import filedialog, messagebox

import customtkinter as ctk

from services.account_service import AccountService
from services.data_service import DataService
from services.notification_service import NotificationService
from services.settings_service import SettingsService
from services.transaction_service import TransactionService
from ui.components.color_field import ColorField
from ui.components.confirm_dialog import ConfirmDialog
from ui.components.date_picker import DatePickerWidget
from ui.components.import_preview_dialog import ImportPreviewDialog
from utils.app_config import get_db_folder, set_db_folder
from utils.constants import COLOR_SCHEMES, DB_FILE, PALETTE, TAB_LABELS
from utils.date_helpers import DATE_FORMAT_OPTIONS, format_date, period_range, today

logger = logging.getLogger(__name__)

_ALL_ACCOUNTS = "All accounts"


class SettingsTab(ctk.CTkFrame):
    """Settings tab: preferences, daily reminder, tab order, data I/O, DB folder."""

    def __init__(
        self,
        master,
        settings: SettingsService,
        notification_service: NotificationService,
        data_service: DataService,
        account_service: AccountService,
        tx_service: TransactionService,
        notify_refresh,
        date_format: str = "DD.MM.YYYY",
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._settings = settings
        self._notifications = notification_service
        self._data_svc = data_service
        self._acct_svc = account_service
        self._tx_svc = tx_service
        self._notify_refresh = notify_refresh
        self._date_format = date_format

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(0, weight=1)

        scroll = ctk.CTkScrollableFrame(self, fg_color="transparent")
        scroll.grid(row=0, column=0, sticky="nsew")
        scroll.grid_columnconfigure(0, weight=1)

        self._build_app_settings_section(scroll)
        self._build_reminder_section(scroll)
        self._build_tab_order_section(scroll)
        self._build_export_import_section(scroll)
        self._build_db_folder_section(scroll)
        self._build_developer_section(scroll)

    def refresh(self):
        """Re-read settings from DB and update displayed values."""
        self._scheme_var.set(self._settings.get_color_scheme().title())
        date_fmt = self._settings.get_date_format()
        if date_fmt in DATE_FORMAT_OPTIONS:
            self._date_fmt_var.set(date_fmt)
        self._threshold_var.set(f"{self._settings.get_budget_alert_threshold() * 100:.0f}")
        self._reminder_on_var.set(self._notifications.is_enabled())
        hour, minute = self._notifications.get_time()
        self._hour_var.set(f"{hour:02d}")
        self._minute_var.set(f"{minute:02d}")
        self._reload_account_choices()

    # ── Section 1: App settings ───────────────────────────────────────────────

    def _build_app_settings_section(self, parent):
        section = self._make_section(parent, "App Settings", row=0)

        ctk.CTkLabel(section, text="Appearance:", anchor="e", width=140).grid(
            row=0, column=0, padx=(8, 4), pady=6, sticky="e"
        )
        self._scheme_var = ctk.StringVar(value=self._settings.get_color_scheme().title())
        ctk.CTkComboBox(
            section, values=[s.title() for s in COLOR_SCHEMES], variable=self._scheme_var,
            width=180, state="readonly",
        ).grid(row=0, column=1, padx=4, pady=6, sticky="w")

        ctk.CTkLabel(section, text="Date Format:", anchor="e", width=140).grid(
            row=1, column=0, padx=(8, 4), pady=6, sticky="e"
        )
        self._date_fmt_var = ctk.StringVar(value=self._settings.get_date_format())
        ctk.CTkComboBox(
            section, values=DATE_FORMAT_OPTIONS, variable=self._date_fmt_var,
            width=180, state="readonly",
        ).grid(row=1, column=1, padx=4, pady=6, sticky="w")

        ctk.CTkLabel(section, text="Budget alert at (%):", anchor="e", width=140).grid(
            row=2, column=0, padx=(8, 4), pady=6, sticky="e"
        )
        self._threshold_var = ctk.StringVar(
            value=f"{self._settings.get_budget_alert_threshold() * 100:.0f}"
        )
        ctk.CTkEntry(section, textvariable=self._threshold_var, width=60).grid(
            row=2, column=1, padx=4, pady=6, sticky="w"
        )

        ctk.CTkLabel(section, text="New tag color:", anchor="ne", width=140).grid(
            row=3, column=0, padx=(8, 4), pady=6, sticky="ne"
        )
        tag_color = self._settings.get_tag_default_color()
        tag_frame = ctk.CTkFrame(section, fg_color="transparent")
        tag_frame.grid(row=3, column=1, padx=4, pady=6, sticky="w")
        self._tag_random_var = ctk.BooleanVar(value=tag_color is None)
        ctk.CTkCheckBox(
            tag_frame, text="Random color", variable=self._tag_random_var,
        ).pack(anchor="w", pady=(0, 4))
        self._tag_color = ColorField(tag_frame, initial=tag_color or PALETTE["gray"])
        self._tag_color.pack(anchor="w")

        ctk.CTkLabel(
            section,
            text="Date format changes take effect on next app restart.",
            text_color="gray60",
            font=ctk.CTkFont(size=11),
            anchor="w",
        ).grid(row=4, column=0, columnspan=2, sticky="w", padx=8)

        ctk.CTkButton(
            section, text="Save Settings", width=140, command=self._save_settings,
        ).grid(row=5, column=0, columnspan=2, pady=(10, 8))

        self._settings_status_var = ctk.StringVar()
        ctk.CTkLabel(
            section, textvariable=self._settings_status_var,
            text_color="#4CAF50", font=ctk.CTkFont(size=11),
        ).grid(row=6, column=0, columnspan=2, pady=(0, 8))

    def _save_settings(self):
        try:
            threshold = float(self._threshold_var.get().replace(",", ".")) / 100
        except ValueError:
            messagebox.showerror("Settings", "Alert threshold must be a number.")
            return
        scheme = self._scheme_var.get().lower()
        try:
            self._settings.set_budget_alert_threshold(threshold)
            self._settings.set_color_scheme(scheme)
            self._settings.set_tag_default_color(
                None if self._tag_random_var.get() else self._tag_color.get()
            )
            self._settings.set_date_format(self._date_fmt_var.get())
        except ValueError as e:
            messagebox.showerror("Settings", str(e))
            return
        ctk.set_appearance_mode(scheme)
        self._settings_status_var.set("Settings saved.")
        self._notify_refresh("budget")

    # ── Section 2: Daily reminder ─────────────────────────────────────────────

    def _build_reminder_section(self, parent):
        section = self._make_section(parent, "Daily Reminder", row=1)

        self._reminder_on_var = ctk.BooleanVar(value=self._notifications.is_enabled())
        ctk.CTkSwitch(
            section, text="Remind me to add my spendings every day",
            variable=self._reminder_on_var, command=self._toggle_reminder,
        ).grid(row=0, column=0, columnspan=4, sticky="w", padx=8, pady=6)

        hour, minute = self._notifications.get_time()
        ctk.CTkLabel(section, text="Time (HH:MM):").grid(row=1, column=0, padx=(8, 4), pady=6, sticky="e")
        self._hour_var = ctk.StringVar(value=f"{hour:02d}")
        self._minute_var = ctk.StringVar(value=f"{minute:02d}")
        time_frame = ctk.CTkFrame(section, fg_color="transparent")
        time_frame.grid(row=1, column=1, sticky="w", padx=4)
        ctk.CTkEntry(time_frame, textvariable=self._hour_var, width=44).pack(side="left")
        ctk.CTkLabel(time_frame, text=":").pack(side="left", padx=2)
        ctk.CTkEntry(time_frame, textvariable=self._minute_var, width=44).pack(side="left")
        ctk.CTkButton(
            section, text="Set Time", width=90, command=self._save_reminder_time,
        ).grid(row=1, column=2, padx=8)

        self._reminder_status_var = ctk.StringVar(value=self._next_fire_text())
        ctk.CTkLabel(
            section, textvariable=self._reminder_status_var,
            text_color="gray60", font=ctk.CTkFont(size=11), anchor="w",
        ).grid(row=2, column=0, columnspan=4, sticky="w", padx=8, pady=(0, 6))

    def _next_fire_text(self) -> str:
        fire_at = self._notifications.next_fire_time()
        if fire_at is None:
            return "Reminder is off."
        return f"Next reminder: {fire_at:%Y-%m-%d %H:%M}"

    def _toggle_reminder(self):
        self._notifications.set_enabled(self._reminder_on_var.get())
        self._reminder_status_var.set(self._next_fire_text())

    def _save_reminder_time(self):
        try:
            hour, minute = int(self._hour_var.get()), int(self._minute_var.get())
        except ValueError:
            self._reminder_status_var.set("Hour and minute must be whole numbers.")
            return
        try:
            self._notifications.set_time(hour, minute)
        except ValueError as e:
            self._reminder_status_var.set(str(e))
            return
        self._reminder_status_var.set(self._next_fire_text())

    # ── Section 3: Tab order ──────────────────────────────────────────────────

    def _build_tab_order_section(self, parent):
        section = self._make_section(parent, "Tab Order", row=2)
        self._tab_order = self._settings.get_tab_order()
        self._tab_list = ctk.CTkFrame(section, fg_color="transparent")
        self._tab_list.grid(row=0, column=0, sticky="w", padx=8, pady=4)
        self._render_tab_order()

        btn_frame = ctk.CTkFrame(section, fg_color="transparent")
        btn_frame.grid(row=1, column=0, sticky="w", padx=8, pady=(4, 6))
        ctk.CTkButton(btn_frame, text="Save Order", width=110, command=self._save_tab_order).pack(side="left")
        ctk.CTkButton(
            btn_frame, text="Reset", width=80,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._reset_tab_order,
        ).pack(side="left", padx=8)
        self._tab_status_var = ctk.StringVar()
        ctk.CTkLabel(
            btn_frame, textvariable=self._tab_status_var,
            text_color="#FF9800", font=ctk.CTkFont(size=11),
        ).pack(side="left", padx=8)

    def _render_tab_order(self):
        for w in self._tab_list.winfo_children():
            w.destroy()
        for idx, key in enumerate(self._tab_order):
            ctk.CTkLabel(self._tab_list, text=TAB_LABELS[key], width=120, anchor="w").grid(
                row=idx, column=0, padx=(0, 8), pady=1, sticky="w"
            )
            up = ctk.CTkButton(
                self._tab_list, text="▲", width=28, height=22,
                command=lambda i=idx: self._swap_tabs(i, i - 1),
            )
            up.grid(row=idx, column=1, padx=2)
            down = ctk.CTkButton(
                self._tab_list, text="▼", width=28, height=22,
                command=lambda i=idx: self._swap_tabs(i, i + 1),
            )
            down.grid(row=idx, column=2, padx=2)
            if idx == 0:
                up.configure(state="disabled")
            if idx == len(self._tab_order) - 1:
                down.configure(state="disabled")

    def _swap_tabs(self, i: int, j: int):
        self._tab_order[i], self._tab_order[j] = self._tab_order[j], self._tab_order[i]
        self._render_tab_order()

    def _save_tab_order(self):
        self._settings.set_tab_order(self._tab_order)
        self._tab_status_var.set("Restart the app for the new order to take effect.")

    def _reset_tab_order(self):
        self._settings.set_tab_order([])
        self._tab_order = self._settings.get_tab_order()
        self._render_tab_order()
        self._tab_status_var.set("Restart the app for the new order to take effect.")

    # ── Section 4: Export / Import ────────────────────────────────────────────

    def _build_export_import_section(self, parent):
        section = self._make_section(parent, "Export / Import", row=3)
        self._io_status_var = ctk.StringVar()

        btn_frame = ctk.CTkFrame(section, fg_color="transparent")
        btn_frame.grid(row=0, column=0, sticky="w", padx=8, pady=6)
        ctk.CTkButton(
            btn_frame, text="Export as JSON", width=130, command=self._export_json,
        ).pack(side="left", padx=4)
        ctk.CTkButton(
            btn_frame, text="Import JSON…", width=120,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._import_json,
        ).pack(side="left", padx=4)
        ctk.CTkButton(
            btn_frame, text="Delete All Data", width=130,
            fg_color="#F44336", hover_color="#D32F2F",
            command=self._delete_all,
        ).pack(side="left", padx=(24, 4))

        csv_frame = ctk.CTkFrame(section, fg_color="transparent")
        csv_frame.grid(row=1, column=0, sticky="w", padx=8, pady=6)
        start, end = period_range("month", today())
        ctk.CTkLabel(csv_frame, text="CSV from").pack(side="left", padx=(4, 4))
        self._csv_from = DatePickerWidget(
            csv_frame, initial_date=format_date(start), date_format=self._date_format,
        )
        self._csv_from.pack(side="left")
        ctk.CTkLabel(csv_frame, text="to").pack(side="left", padx=4)
        self._csv_to = DatePickerWidget(
            csv_frame, initial_date=format_date(end), date_format=self._date_format,
        )
        self._csv_to.pack(side="left")
        self._csv_acct_var = ctk.StringVar(value=_ALL_ACCOUNTS)
        self._csv_acct_combo = ctk.CTkComboBox(
            csv_frame, values=[_ALL_ACCOUNTS], variable=self._csv_acct_var,
            width=150, state="readonly",
        )
        self._csv_acct_combo.pack(side="left", padx=8)
        ctk.CTkButton(
            csv_frame, text="Export CSV", width=100, command=self._export_csv,
        ).pack(side="left", padx=4)

        ctk.CTkLabel(
            section, textvariable=self._io_status_var,
            text_color="#4CAF50", font=ctk.CTkFont(size=11), anchor="w",
        ).grid(row=2, column=0, sticky="w", padx=8, pady=(0, 6))

    def _export_json(self):
        path = filedialog.asksaveasfilename(
            title="Export as JSON",
            defaultextension=".json",
            filetypes=[("JSON files", "*.json"), ("All files", "*.*")],
        )
        if not path:
            return
        try:
            self._data_svc.export_json_file(path)
        except OSError as e:
            logger.exception("JSON export failed")
            messagebox.showerror("Export Failed", str(e))
            return
        self._io_status_var.set(f"Exported to {path}")

    def _export_csv(self):
        start, end = self._csv_from.get_date(), self._csv_to.get_date()
        if start is None or end is None:
            messagebox.showerror("Export Failed", "Choose a valid start and end date.")
            return
        path = filedialog.asksaveasfilename(
            title="Export transactions as CSV",
            defaultextension=".csv",
            filetypes=[("CSV files", "*.csv"), ("All files", "*.*")],
            initialfile=f"transactions_{format_date(start)}_{format_date(end)}.csv",
        )
        if not path:
            return
        account = next(
            (a for a in self._acct_svc.get_all() if a.name == self._csv_acct_var.get()), None
        )
        try:
            count = self._data_svc.export_transactions_csv(
                path, start, end, account.id if account else None
            )
        except (OSError, ValueError) as e:
            logger.exception("CSV export failed")
            messagebox.showerror("Export Failed", str(e))
            return
        self._io_status_var.set(f"Exported {count} transactions to {path}")

    def _import_json(self):
        path = filedialog.askopenfilename(
            title="Import JSON",
            filetypes=[("JSON files", "*.json"), ("All files", "*.*")],
        )
        if not path:
            return
        try:
            data = self._data_svc.load_json_file(path)
            counts = self._data_svc.preview_import(data)
        except (OSError, ValueError) as e:
            messagebox.showerror("Import Failed", f"Could not read file:\n{e}")
            return

        if not ImportPreviewDialog(self.winfo_toplevel(), counts).confirmed:
            return
        try:
            stats = self._data_svc.import_json(data)
        except ValueError as e:
            messagebox.showerror("Import Failed", str(e))
            return
        except sqlite3.Error as e:
            logger.exception("JSON import failed")
            messagebox.showerror("Import Failed", str(e))
            return
        self._notify_refresh("full")
        self._io_status_var.set(self._format_stats(stats))

    def _delete_all(self):
        dlg = ConfirmDialog(
            self.winfo_toplevel(),
            "Delete All Data",
            "Delete every account, category, tag, transaction, transfer and budget? "
            "This cannot be undone.",
            confirm_text="Delete Everything",
        )
        if not dlg.result:
            return
        self._data_svc.delete_all_data()
        self._notify_refresh("full")
        self._io_status_var.set("All data deleted.")

    @staticmethod
    def _format_stats(stats: dict) -> str:
        parts = [f"{v} {k.replace('_', ' ')}" for k, v in stats.items() if v > 0]
        return "Imported: " + ", ".join(parts) if parts else "The file was empty."

    # ── Section 5: DB folder ──────────────────────────────────────────────────

    def _build_db_folder_section(self, parent):
        section = self._make_section(parent, "Database Folder", row=4)

        ctk.CTkLabel(
            section,
            text=f"The database file ({DB_FILE}) is stored in this folder.",
            text_color="gray60",
            font=ctk.CTkFont(size=11),
            anchor="w",
        ).grid(row=0, column=0, columnspan=3, sticky="w", padx=8, pady=(4, 6))

        self._db_folder_var = ctk.StringVar(value=get_db_folder() or "(default: app folder)")
        ctk.CTkEntry(
            section, textvariable=self._db_folder_var, state="readonly", width=340,
        ).grid(row=1, column=0, padx=(8, 4), pady=4, sticky="ew")
        section.grid_columnconfigure(0, weight=1)

        ctk.CTkButton(
            section, text="Browse…", width=90, command=self._browse_db_folder,
        ).grid(row=1, column=1, padx=4)
        ctk.CTkButton(
            section, text="Reset to Default", width=120,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._reset_db_folder,
        ).grid(row=1, column=2, padx=(4, 8))

        self._db_restart_label = ctk.CTkLabel(
            section, text="", text_color="#FF9800", font=ctk.CTkFont(size=11), anchor="w",
        )
        self._db_restart_label.grid(row=2, column=0, columnspan=3, sticky="w", padx=8, pady=(0, 6))

    def _browse_db_folder(self):
        path = filedialog.askdirectory(title="Choose DB folder")
        if path:
            set_db_folder(path)
            self._db_folder_var.set(path)
            self._db_restart_label.configure(text="Restart the app for the change to take effect.")

    def _reset_db_folder(self):
        set_db_folder(None)
        self._db_folder_var.set("(default: app folder)")
        self._db_restart_label.configure(text="Restart the app for the change to take effect.")

    # ── Section 6: Developer ──────────────────────────────────────────────────

    def _build_developer_section(self, parent):
        section = self._make_section(parent, "Developer", row=5)

        row = ctk.CTkFrame(section, fg_color="transparent")
        row.grid(row=0, column=0, sticky="w", padx=8, pady=6)
        ctk.CTkLabel(row, text="Insert").pack(side="left", padx=(4, 4))
        self._test_count_var = ctk.StringVar(value="100")
        ctk.CTkEntry(row, textvariable=self._test_count_var, width=70).pack(side="left")
        ctk.CTkLabel(row, text="random transactions into").pack(side="left", padx=4)
        self._test_acct_var = ctk.StringVar()
        self._test_acct_combo = ctk.CTkComboBox(
            row, values=[], variable=self._test_acct_var, width=150, state="readonly",
        )
        self._test_acct_combo.pack(side="left", padx=4)
        ctk.CTkButton(row, text="Insert", width=80, command=self._insert_test_data).pack(side="left", padx=4)

        self._dev_status_var = ctk.StringVar()
        ctk.CTkLabel(
            section, textvariable=self._dev_status_var,
            text_color="gray60", font=ctk.CTkFont(size=11), anchor="w",
        ).grid(row=1, column=0, sticky="w", padx=8, pady=(0, 6))
        self._reload_account_choices()

    def _reload_account_choices(self):
        names = [a.name for a in self._acct_svc.get_all()]
        self._test_acct_combo.configure(values=names)
        if self._test_acct_var.get() not in names:
            self._test_acct_var.set(names[0] if names else "")
        csv_names = [_ALL_ACCOUNTS] + names
        self._csv_acct_combo.configure(values=csv_names)
        if self._csv_acct_var.get() not in csv_names:
            self._csv_acct_var.set(_ALL_ACCOUNTS)

    def _insert_test_data(self):
        account = next(
            (a for a in self._acct_svc.get_all() if a.name == self._test_acct_var.get()), None
        )
        if account is None:
            self._dev_status_var.set("Create an account first.")
            return
        try:
            inserted = self._tx_svc.bulk_insert_test_data(int(self._test_count_var.get()), account.id)
        except ValueError as e:
            self._dev_status_var.set(str(e))
            return
        self._dev_status_var.set(f"Inserted {inserted} transactions.")
        self._notify_refresh("transaction")

    # ── Helpers ───────────────────────────────────────────────────────────────

    def _make_section(self, parent, title: str, row: int) -> ctk.CTkFrame:
        """Create a labelled card section and return its inner frame."""
        outer = ctk.CTkFrame(parent, corner_radius=8)
        outer.grid(row=row, column=0, sticky="ew", padx=12, pady=8)
        outer.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(
            outer, text=title, font=ctk.CTkFont(size=14, weight="bold"), anchor="w",
        ).grid(row=0, column=0, sticky="w", padx=12, pady=(10, 4))

        inner = ctk.CTkFrame(outer, fg_color="transparent")
        inner.grid(row=1, column=0, sticky="ew", padx=4, pady=(0, 8))
        inner.grid_columnconfigure(0, weight=1)
        return inner
