import logging

import customtkinter as ctk

from services.account_service import AccountService
from services.category_service import CategoryService
from services.settings_service import SettingsService
from utils.currency import CURRENCIES, DEFAULT_CURRENCY, parse_amount

logger = logging.getLogger(__name__)


class WelcomeDialog(ctk.CTkToplevel):
    """First-launch setup: create the first account and seed default categories."""

    def __init__(
        self,
        master,
        account_service: AccountService,
        category_service: CategoryService,
        settings: SettingsService,
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._acct_svc = account_service
        self._cat_svc = category_service
        self._settings = settings
        self.completed = False

        self.title("Welcome")
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)
        self.protocol("WM_DELETE_WINDOW", self._on_skip)

        ctk.CTkLabel(
            self, text="Welcome to Finance Tracker",
            font=ctk.CTkFont(size=18, weight="bold"),
        ).grid(row=0, column=0, columnspan=2, padx=20, pady=(20, 4))
        ctk.CTkLabel(
            self, text="Create your first account to get started.",
            text_color="gray60",
        ).grid(row=1, column=0, columnspan=2, padx=20, pady=(0, 12))

        ctk.CTkLabel(self, text="Account name:").grid(row=2, column=0, padx=(16, 8), pady=4, sticky="e")
        self._name_var = ctk.StringVar(value="Wallet")
        ctk.CTkEntry(self, textvariable=self._name_var, width=220).grid(
            row=2, column=1, padx=(0, 16), pady=4, sticky="ew"
        )

        self._currency_labels = [f"{code} · {name}" for code, (name, _sym) in CURRENCIES.items()]
        ctk.CTkLabel(self, text="Currency:").grid(row=3, column=0, padx=(16, 8), pady=4, sticky="e")
        self._currency_var = ctk.StringVar(
            value=next(lbl for lbl in self._currency_labels if lbl.startswith(DEFAULT_CURRENCY))
        )
        ctk.CTkComboBox(
            self, values=self._currency_labels, variable=self._currency_var,
            width=220, state="readonly",
        ).grid(row=3, column=1, padx=(0, 16), pady=4, sticky="ew")

        ctk.CTkLabel(self, text="Balance:").grid(row=4, column=0, padx=(16, 8), pady=4, sticky="e")
        self._balance_var = ctk.StringVar(value="0")
        ctk.CTkEntry(self, textvariable=self._balance_var, width=220).grid(
            row=4, column=1, padx=(0, 16), pady=4, sticky="ew"
        )

        self._error_var = ctk.StringVar()
        ctk.CTkLabel(
            self, textvariable=self._error_var,
            text_color="#F44336", wraplength=280, anchor="w",
        ).grid(row=5, column=0, columnspan=2, padx=16, pady=(0, 4), sticky="ew")

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=6, column=0, columnspan=2, padx=16, pady=(4, 16), sticky="ew")
        ctk.CTkButton(
            btn_frame, text="Skip", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._on_skip,
        ).pack(side="left")
        ctk.CTkButton(
            btn_frame, text="Get Started", width=120, command=self._on_create,
        ).pack(side="right")

        self.transient(master)
        self.grab_set()
        self._center()

    def _on_create(self):
        try:
            balance = parse_amount(self._balance_var.get())
        except ValueError:
            self._error_var.set("Invalid balance.")
            return
        currency = self._currency_var.get().split(" · ", 1)[0]
        try:
            self._acct_svc.create(self._name_var.get(), currency, balance)
        except ValueError as e:
            self._error_var.set(str(e))
            return
        self._finish()
        self.completed = True
        self.destroy()

    def _on_skip(self):
        # Categories are still needed to record anything
        self._finish()
        self.destroy()

    def _finish(self):
        self._cat_svc.seed_defaults()
        self._settings.complete_first_launch()

    def _center(self):
        self.update_idletasks()
        mw = self.master.winfo_x() + self.master.winfo_width() // 2
        mh = self.master.winfo_y() + self.master.winfo_height() // 2
        w, h = self.winfo_reqwidth(), self.winfo_reqheight()
        self.geometry(f"+{mw - w//2}+{mh - h//2}")
