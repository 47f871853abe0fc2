import customtkinter as ctk

from models.account import BalanceAccount
from services.account_service import AccountService
from ui.components.color_field import ColorField
from utils.constants import ACCOUNT_ICONS
from utils.currency import CURRENCIES, DEFAULT_CURRENCY, format_amount, parse_amount


class AccountForm(ctk.CTkToplevel):
    """Add or edit a balance account. Sets self.saved = True on success.

    When editing, the balance field holds the *current* balance; saving it
    back-computes the stored initial balance.
    """

    _CURRENCY_OPTIONS = [f"{code} · {name}" for code, (name, _sym) in CURRENCIES.items()]

    def __init__(
        self,
        master,
        account_service: AccountService,
        account: BalanceAccount | None = None,
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._svc = account_service
        self._account = account
        self.saved = False

        self.title("Edit Account" if account else "New Account")
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)

        ctk.CTkLabel(self, text="Name:").grid(
            row=0, column=0, padx=(16, 8), pady=(16, 4), sticky="e"
        )
        self._name_var = ctk.StringVar(value=account.name if account else "")
        self._name_entry = ctk.CTkEntry(self, textvariable=self._name_var, width=240)
        self._name_entry.grid(row=0, column=1, padx=(0, 16), pady=(16, 4), sticky="ew")

        ctk.CTkLabel(self, text="Currency:").grid(
            row=1, column=0, padx=(16, 8), pady=4, sticky="e"
        )
        code = account.currency if account else DEFAULT_CURRENCY
        self._currency_var = ctk.StringVar(
            value=next(o for o in self._CURRENCY_OPTIONS if o.startswith(code))
            if code in CURRENCIES else code
        )
        ctk.CTkComboBox(
            self, values=self._CURRENCY_OPTIONS, variable=self._currency_var,
            width=240, state="readonly",
        ).grid(row=1, column=1, padx=(0, 16), pady=4, sticky="ew")

        ctk.CTkLabel(self, text="Current balance:" if account else "Balance:").grid(
            row=2, column=0, padx=(16, 8), pady=4, sticky="e"
        )
        balance = account_service.current_balance(account.id) if account else 0.0
        self._balance_var = ctk.StringVar(value=format_amount(balance))
        ctk.CTkEntry(self, textvariable=self._balance_var, width=240).grid(
            row=2, column=1, padx=(0, 16), pady=4, sticky="ew"
        )

        ctk.CTkLabel(self, text="Icon:").grid(
            row=3, column=0, padx=(16, 8), pady=4, sticky="e"
        )
        self._icon_var = ctk.StringVar(value=account.icon_name if account else ACCOUNT_ICONS[0])
        ctk.CTkComboBox(
            self, values=ACCOUNT_ICONS, variable=self._icon_var, width=240,
        ).grid(row=3, column=1, padx=(0, 16), pady=4, sticky="ew")

        ctk.CTkLabel(self, text="Color:").grid(
            row=4, column=0, padx=(16, 8), pady=4, sticky="ne"
        )
        self._color = ColorField(self, initial=account.color_hex if account else "#2196F3")
        self._color.grid(row=4, column=1, padx=(0, 16), pady=4, sticky="ew")

        self._error_var = ctk.StringVar()
        ctk.CTkLabel(
            self, textvariable=self._error_var, text_color="#F44336",
            wraplength=280, anchor="w",
        ).grid(row=5, column=0, columnspan=2, padx=16, pady=(0, 4), sticky="ew")

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=6, column=0, columnspan=2, padx=16, pady=(4, 16), sticky="ew")
        ctk.CTkButton(
            btn_frame, text="Cancel", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self.destroy,
        ).pack(side="left")
        ctk.CTkButton(
            btn_frame, text="Save", width=90, command=self._on_save,
        ).pack(side="right")

        self.transient(master)
        self.grab_set()
        self._center()
        self._name_entry.focus_set()

    def _on_save(self):
        try:
            balance = parse_amount(self._balance_var.get())
        except ValueError:
            self._error_var.set("Balance must be a number.")
            return
        currency = self._currency_var.get().split(" ", 1)[0]
        name = self._name_var.get()
        icon = self._icon_var.get().strip() or ACCOUNT_ICONS[0]
        try:
            if self._account:
                self._svc.update(
                    self._account.id, name, currency, self._account.balance,
                    icon, self._color.get(),
                )
                self._svc.set_current_balance(self._account.id, balance)
            else:
                self._svc.create(name, currency, balance, icon, self._color.get())
        except ValueError as e:
            self._error_var.set(str(e))
            return
        self.saved = True
        self.destroy()

    def _center(self):
        self.update_idletasks()
        mw = self.master.winfo_x() + self.master.winfo_width() // 2
        mh = self.master.winfo_y() + self.master.winfo_height() // 2
        w, h = self.winfo_reqwidth(), self.winfo_reqheight()
        self.geometry(f"+{mw - w//2}+{mh - h//2}")
