import logging
from tkinter import messagebox

import customtkinter as ctk

from models.account import BalanceAccount
from services.account_service import AccountService
from services.statistics_service import StatisticsService
from ui.components.account_form import AccountForm
from ui.components.delete_options_dialog import DeleteOptionsDialog
from utils.currency import format_currency

logger = logging.getLogger(__name__)


class AccountsTab(ctk.CTkFrame):
    """Balance accounts with their current balances and the default marker."""

    def __init__(
        self,
        master,
        account_service: AccountService,
        stats_service: StatisticsService,
        notify_refresh,
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._svc = account_service
        self._stats = stats_service
        self._notify_refresh = notify_refresh

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)

        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))
        ctk.CTkLabel(
            bar, text="Accounts", font=ctk.CTkFont(size=13, weight="bold"),
        ).pack(side="left", padx=(12, 16), pady=8)
        ctk.CTkButton(bar, text="+ Add Account", command=self._open_add).pack(side="left", padx=4, pady=6)

        self._totals_frame = ctk.CTkFrame(self, fg_color="transparent")
        self._totals_frame.grid(row=1, column=0, sticky="ew", padx=16, pady=(8, 0))

        self._scroll = ctk.CTkScrollableFrame(self)
        self._scroll.grid(row=2, column=0, sticky="nsew", padx=8, pady=8)
        self._scroll.grid_columnconfigure(0, weight=1)
        self._load()

    def refresh(self):
        self._load()

    def _load(self):
        for w in self._scroll.winfo_children():
            w.destroy()
        for w in self._totals_frame.winfo_children():
            w.destroy()

        accounts = self._svc.get_all()
        if not accounts:
            ctk.CTkLabel(
                self._scroll, text="No accounts yet. Click '+ Add Account' to create one.",
                text_color="gray60",
            ).grid(row=0, column=0, pady=40)
            return

        ctk.CTkLabel(self._totals_frame, text="Total:", text_color="gray60").pack(side="left", padx=(0, 8))
        for currency, total in sorted(self._stats.balances_by_currency().items()):
            ctk.CTkLabel(
                self._totals_frame, text=format_currency(total, currency),
                font=ctk.CTkFont(size=14, weight="bold"),
                text_color="#4CAF50" if total >= 0 else "#F44336",
            ).pack(side="left", padx=(0, 16))

        balances = self._svc.current_balances()
        default = self._svc.get_default()
        for idx, account in enumerate(accounts):
            self._add_row(
                idx, account, balances.get(account.id, 0.0),
                is_default=default is not None and default.id == account.id,
            )

    def _add_row(self, idx: int, account: BalanceAccount, balance: float, is_default: bool):
        row = ctk.CTkFrame(self._scroll, fg_color=("gray90", "gray20"), corner_radius=8)
        row.grid(row=idx, column=0, sticky="ew", padx=4, pady=3)
        row.grid_columnconfigure(1, weight=1)

        ctk.CTkLabel(
            row, text="", width=28, height=28, corner_radius=4, fg_color=account.color_hex,
        ).grid(row=0, column=0, padx=(10, 0), pady=8)

        name_frame = ctk.CTkFrame(row, fg_color="transparent")
        name_frame.grid(row=0, column=1, padx=8, sticky="w")
        ctk.CTkLabel(
            name_frame, text=account.name, font=ctk.CTkFont(size=13, weight="bold"), anchor="w",
        ).pack(side="left")
        ctk.CTkLabel(
            name_frame, text=f"{account.icon_name} · {account.currency}",
            text_color="gray60", font=ctk.CTkFont(size=11),
        ).pack(side="left", padx=(8, 0))
        if is_default:
            ctk.CTkLabel(
                name_frame, text="★ default", text_color="#FFC107", font=ctk.CTkFont(size=11),
            ).pack(side="left", padx=(8, 0))

        ctk.CTkLabel(
            row, text=format_currency(balance, account.currency), width=140, anchor="e",
            text_color="#4CAF50" if balance >= 0 else "#F44336",
            font=ctk.CTkFont(size=13, weight="bold"),
        ).grid(row=0, column=2, padx=8)

        btn_frame = ctk.CTkFrame(row, fg_color="transparent")
        btn_frame.grid(row=0, column=3, padx=(4, 10), pady=6)
        default_btn = ctk.CTkButton(
            btn_frame, text="Set Default", width=90, height=26,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=lambda a=account: self._set_default(a),
        )
        if is_default:
            default_btn.configure(state="disabled")
        default_btn.pack(side="left", padx=(0, 4))
        ctk.CTkButton(
            btn_frame, text="Edit", width=60, height=26,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=lambda a=account: self._open_edit(a),
        ).pack(side="left", padx=(0, 4))
        ctk.CTkButton(
            btn_frame, text="Delete", width=65, height=26,
            fg_color="#F44336", hover_color="#D32F2F",
            command=lambda a=account: self._on_delete(a, is_default),
        ).pack(side="left")

    def _open_form(self, account: BalanceAccount | None):
        form = AccountForm(self.winfo_toplevel(), self._svc, account=account)
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("account")

    def _open_add(self):
        self._open_form(None)

    def _open_edit(self, account: BalanceAccount):
        self._open_form(account)

    def _set_default(self, account: BalanceAccount):
        self._svc.set_default(account.id)
        self._notify_refresh("account")

    def _on_delete(self, account: BalanceAccount, is_default: bool):
        default = self._svc.get_default()
        if is_default or default is None:
            keep_text = "Keep transactions (set another default account first)"
        else:
            keep_text = f"Move transactions and budgets to '{default.name}'"
        dlg = DeleteOptionsDialog(
            self.winfo_toplevel(),
            title="Delete Account",
            message=f"Delete account '{account.name}'?",
            keep_text=keep_text,
            cascade_text="Delete its transactions, transfers and budgets too",
        )
        if dlg.result is None:
            return
        try:
            if dlg.result == "keep":
                self._svc.delete(account.id)
            else:
                self._svc.delete_with_transactions(account.id)
        except ValueError as e:
            logger.warning("Account delete refused: %s", e)
            messagebox.showerror("Delete Account", str(e))
            return
        self._notify_refresh("account")
