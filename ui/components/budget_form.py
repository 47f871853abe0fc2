import customtkinter as ctk

from models.budget import Budget
from services.account_service import AccountService
from services.budget_service import BudgetService
from services.category_service import CategoryService
from ui.components.confirm_dialog import ConfirmDialog
from utils.constants import BUDGET_PERIODS
from utils.currency import format_amount, parse_amount

_ALL_SPENDING = "All spending"
_ALL_ACCOUNTS = "All accounts"


class BudgetForm(ctk.CTkToplevel):
    """Add or edit a budget: a limit per week, month or year, optionally
    narrowed to one category and one account."""

    def __init__(
        self,
        master,
        budget_service: BudgetService,
        category_service: CategoryService,
        account_service: AccountService,
        budget: Budget | None = None,
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._svc = budget_service
        self._budget = budget
        self.saved = False

        self.title("Edit Budget" if budget else "New Budget")
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)

        self._categories = category_service.get_all()
        self._accounts = account_service.get_all()
        cat_names = [_ALL_SPENDING] + [self._cat_label(c) for c in self._categories]
        acct_names = [_ALL_ACCOUNTS] + [a.name for a in self._accounts]

        r = 0
        ctk.CTkLabel(self, text="Name:").grid(
            row=r, column=0, padx=(16, 8), pady=(16, 4), sticky="e"
        )
        self._name_var = ctk.StringVar(value=budget.name if budget else "")
        ctk.CTkEntry(self, textvariable=self._name_var, width=220).grid(
            row=r, column=1, padx=(0, 16), pady=(16, 4), sticky="ew"
        )
        r += 1

        ctk.CTkLabel(self, text="Limit:").grid(
            row=r, column=0, padx=(16, 8), pady=4, sticky="e"
        )
        self._value_var = ctk.StringVar(value=format_amount(budget.value) if budget else "")
        ctk.CTkEntry(self, textvariable=self._value_var, width=220).grid(
            row=r, column=1, padx=(0, 16), pady=4, sticky="ew"
        )
        r += 1

        ctk.CTkLabel(self, text="Period:").grid(
            row=r, column=0, padx=(16, 8), pady=4, sticky="e"
        )
        self._period_var = ctk.StringVar(value=(budget.period if budget else "month").title())
        ctk.CTkSegmentedButton(
            self, values=[p.title() for p in BUDGET_PERIODS], variable=self._period_var,
        ).grid(row=r, column=1, padx=(0, 16), pady=4, sticky="w")
        r += 1

        ctk.CTkLabel(self, text="Category:").grid(
            row=r, column=0, padx=(16, 8), pady=4, sticky="e"
        )
        current_cat = next(
            (self._cat_label(c) for c in self._categories if budget and c.id == budget.category_id),
            _ALL_SPENDING,
        )
        self._cat_var = ctk.StringVar(value=current_cat)
        ctk.CTkComboBox(
            self, values=cat_names, variable=self._cat_var, width=220, state="readonly",
        ).grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
        r += 1

        ctk.CTkLabel(self, text="Account:").grid(
            row=r, column=0, padx=(16, 8), pady=4, sticky="e"
        )
        self._acct_var = ctk.StringVar(
            value=budget.account_name if budget and budget.account_id else _ALL_ACCOUNTS
        )
        ctk.CTkComboBox(
            self, values=acct_names, variable=self._acct_var, width=220, state="readonly",
        ).grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
        r += 1

        self._error_var = ctk.StringVar()
        ctk.CTkLabel(
            self, textvariable=self._error_var,
            text_color="#F44336", wraplength=280, anchor="w",
        ).grid(row=r, column=0, columnspan=2, padx=16, pady=(0, 4), sticky="ew")
        r += 1

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=r, column=0, columnspan=2, padx=16, pady=(4, 16), sticky="ew")
        ctk.CTkButton(
            btn_frame, text="Cancel", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self.destroy,
        ).pack(side="left")
        if budget:
            ctk.CTkButton(
                btn_frame, text="Delete", width=80,
                fg_color="#F44336", hover_color="#D32F2F",
                command=self._on_delete,
            ).pack(side="left", padx=8)
        ctk.CTkButton(btn_frame, text="Save", width=90, command=self._on_save).pack(side="right")

        self.transient(master)
        self.grab_set()
        self._center()

    @staticmethod
    def _cat_label(category) -> str:
        return f"{category.name} ({category.type})"

    def _on_save(self):
        try:
            value = parse_amount(self._value_var.get())
        except ValueError:
            self._error_var.set("Invalid amount.")
            return
        category = next(
            (c for c in self._categories if self._cat_label(c) == self._cat_var.get()), None
        )
        account = next((a for a in self._accounts if a.name == self._acct_var.get()), None)
        args = (
            self._name_var.get(), value, self._period_var.get().lower(),
            category.id if category else None,
            account.id if account else None,
        )
        try:
            if self._budget:
                self._svc.update(self._budget.id, *args)
            else:
                self._svc.create(*args)
        except ValueError as e:
            self._error_var.set(str(e))
            return
        self.saved = True
        self.destroy()

    def _on_delete(self):
        dlg = ConfirmDialog(
            self, "Delete Budget", f"Delete budget '{self._budget.name}'?", confirm_text="Delete",
        )
        if dlg.result:
            self._svc.delete(self._budget.id)
            self.saved = True
            self.destroy()

    def _center(self):
        self.update_idletasks()
        mw = self.master.winfo_x() + self.master.winfo_width() // 2
        mh = self.master.winfo_y() + self.master.winfo_height() // 2
        w, h = self.winfo_reqwidth(), self.winfo_reqheight()
        self.geometry(f"+{mw - w//2}+{mh - h//2}")
