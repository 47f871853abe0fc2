import customtkinter as ctk

from models.transaction import Transaction
from services.account_service import AccountService
from services.category_service import CategoryService
from services.search_service import group_by_day
from services.tag_service import TagService
from services.transaction_service import TransactionService
from ui.components.confirm_dialog import ConfirmDialog
from ui.components.transaction_form import TransactionForm
from utils.constants import TYPE_COLORS
from utils.currency import format_amount, format_currency
from utils.date_helpers import add_months, format_date, friendly_day, period_range, today

_ALL_ACCOUNTS = "All accounts"
_MAX_RENDERED_ROWS = 150


class TransactionsTab(ctk.CTkFrame):
    """Month view of spendings and incomes, grouped by day."""

    def __init__(
        self,
        master,
        tx_service: TransactionService,
        account_service: AccountService,
        category_service: CategoryService,
        tag_service: TagService,
        get_account_id,   # callable → int | None, the default account
        notify_refresh,   # callable(scope)
        date_format: str = "DD.MM.YYYY",
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._tx_svc = tx_service
        self._acct_svc = account_service
        self._cat_svc = category_service
        self._tag_svc = tag_service
        self._get_account_id = get_account_id
        self._notify_refresh = notify_refresh
        self._date_format = date_format

        self._month = today().replace(day=1)
        self._account_var = ctk.StringVar(value=_ALL_ACCOUNTS)
        self._accounts = []

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=1)

        self._build_filter_bar()
        self._scroll = ctk.CTkScrollableFrame(self)
        self._scroll.grid(row=1, column=0, sticky="nsew", padx=8, pady=8)
        self._scroll.grid_columnconfigure(0, weight=1)
        self.refresh()

    def refresh(self):
        self._accounts = self._acct_svc.get_all()
        names = [_ALL_ACCOUNTS] + [a.name for a in self._accounts]
        self._account_combo.configure(values=names)
        if self._account_var.get() not in names:
            self._account_var.set(_ALL_ACCOUNTS)
        self._load()

    # ── Filter bar ──────────────────────────────────────────────────────────
    def _build_filter_bar(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))
        bar.grid_columnconfigure(4, weight=1)

        ctk.CTkButton(bar, text="◀", width=28, command=lambda: self._shift_month(-1)).grid(
            row=0, column=0, padx=(8, 0), pady=6
        )
        self._month_label = ctk.CTkLabel(bar, text="", width=120, anchor="center")
        self._month_label.grid(row=0, column=1, padx=4)
        ctk.CTkButton(bar, text="▶", width=28, command=lambda: self._shift_month(1)).grid(
            row=0, column=2, padx=(0, 8)
        )

        self._account_combo = ctk.CTkComboBox(
            bar, values=[_ALL_ACCOUNTS], variable=self._account_var,
            width=180, state="readonly", command=lambda _v: self._load(),
        )
        self._account_combo.grid(row=0, column=3, padx=8)

        self._summary_label = ctk.CTkLabel(bar, text="", anchor="w", text_color="gray60")
        self._summary_label.grid(row=0, column=4, padx=8, sticky="w")

        btn_frame = ctk.CTkFrame(bar, fg_color="transparent")
        btn_frame.grid(row=0, column=5, padx=(0, 8))
        ctk.CTkButton(
            btn_frame, text="+ Spending", width=96,
            fg_color=TYPE_COLORS["spending"], hover_color="#D32F2F",
            command=lambda: self._open_add_form("spending"),
        ).pack(side="left", padx=2)
        ctk.CTkButton(
            btn_frame, text="+ Income", width=96,
            fg_color=TYPE_COLORS["income"], hover_color="#388E3C",
            command=lambda: self._open_add_form("income"),
        ).pack(side="left", padx=2)

    def _shift_month(self, n: int):
        self._month = add_months(self._month, n)
        self._load()

    def _selected_account_id(self) -> int | None:
        name = self._account_var.get()
        return next((a.id for a in self._accounts if a.name == name), None)

    # ── List ─────────────────────────────────────────────────────────────────
    def _load(self):
        for w in self._scroll.winfo_children():
            w.destroy()
        self._month_label.configure(text=self._month.strftime("%B %Y"))

        start, end = period_range("month", self._month)
        txs = self._tx_svc.get_in_range(format_date(start), format_date(end), self._selected_account_id())
        income = sum(t.value for t in txs if t.type == "income")
        spending = sum(t.value for t in txs if t.type == "spending")
        self._summary_label.configure(
            text=f"{len(txs)} transactions · in {format_amount(income)} · out {format_amount(spending)}" if txs else ""
        )

        if not txs:
            ctk.CTkLabel(
                self._scroll, text="No transactions for this month.", text_color="gray60",
            ).grid(row=0, column=0, pady=20)
            return

        r = 0
        rendered = 0
        for group in group_by_day(txs):
            if rendered >= _MAX_RENDERED_ROWS:
                break
            self._add_day_header(r, group.date)
            r += 1
            for tx in group.transactions:
                self._add_row(r, tx)
                r += 1
                rendered += 1

        if len(txs) > rendered:
            ctk.CTkLabel(
                self._scroll,
                text=f"Showing {rendered} of {len(txs)} transactions. Use Search to narrow results.",
                text_color="gray60",
                font=ctk.CTkFont(size=11),
            ).grid(row=r, column=0, pady=8)

    def _add_day_header(self, r: int, date_str: str):
        ctk.CTkLabel(
            self._scroll, text=friendly_day(date_str),
            font=ctk.CTkFont(size=13, weight="bold"), anchor="w",
        ).grid(row=r, column=0, sticky="ew", padx=6, pady=(10, 2))

    def _add_row(self, r: int, tx: Transaction):
        row = ctk.CTkFrame(self._scroll, fg_color=("gray92", "gray17"), corner_radius=4)
        row.grid(row=r, column=0, sticky="ew", pady=1, padx=2)
        row.grid_columnconfigure(2, weight=1)

        ctk.CTkLabel(row, text="●", text_color=tx.category_color, width=16).grid(
            row=0, column=0, padx=(8, 2), pady=4
        )
        ctk.CTkLabel(row, text=tx.category_name, width=140, anchor="w").grid(
            row=0, column=1, padx=4
        )
        details = " · ".join(p for p in (tx.account_name, tx.tag_names, tx.comment) if p)
        ctk.CTkLabel(row, text=details, anchor="w", text_color=("gray40", "gray70")).grid(
            row=0, column=2, padx=4, sticky="ew"
        )
        sign = "+" if tx.type == "income" else "-"
        ctk.CTkLabel(
            row, text=f"{sign}{format_currency(tx.value, tx.currency)}", width=120, anchor="e",
            text_color=TYPE_COLORS[tx.type],
        ).grid(row=0, column=3, padx=4)

        acts = ctk.CTkFrame(row, fg_color="transparent")
        acts.grid(row=0, column=4, padx=(4, 6))
        ctk.CTkButton(
            acts, text="Edit", width=44, height=24,
            command=lambda t=tx: self._open_edit_form(t),
        ).pack(side="left", padx=2)
        ctk.CTkButton(
            acts, text="Del", width=38, height=24,
            fg_color="#F44336", hover_color="#D32F2F",
            command=lambda t=tx: self._delete_tx(t),
        ).pack(side="left")

    # ── Actions ──────────────────────────────────────────────────────────────
    def _open_form(self, **kwargs):
        form = TransactionForm(
            self.winfo_toplevel(),
            self._tx_svc, self._acct_svc, self._cat_svc, self._tag_svc,
            date_format=self._date_format,
            **kwargs,
        )
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("transaction")

    def _open_add_form(self, type_: str):
        account_id = self._selected_account_id() or self._get_account_id()
        self._open_form(current_account_id=account_id, initial_type=type_)

    def _open_edit_form(self, tx: Transaction):
        self._open_form(current_account_id=tx.account_id, transaction=tx)

    def _delete_tx(self, tx: Transaction):
        dlg = ConfirmDialog(
            self.winfo_toplevel(),
            "Delete Transaction",
            f"Delete this {tx.type} of {format_currency(tx.value, tx.currency)}?",
            confirm_text="Delete",
        )
        if dlg.result:
            self._tx_svc.delete(tx.id)
            self._notify_refresh("transaction")
