import customtkinter as ctk

from models.budget import Budget
from services.account_service import AccountService
from services.budget_service import BudgetService
from services.category_service import CategoryService
from services.settings_service import SettingsService
from ui.components.budget_form import BudgetForm
from utils.currency import format_amount
from utils.date_helpers import format_display_date


class BudgetsTab(ctk.CTkFrame):
    """Budget cards with spending progress for the current period."""

    def __init__(
        self,
        master,
        budget_service: BudgetService,
        category_service: CategoryService,
        account_service: AccountService,
        settings: SettingsService,
        notify_refresh,
        date_format: str = "DD.MM.YYYY",
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._svc = budget_service
        self._cat_svc = category_service
        self._acct_svc = account_service
        self._settings = settings
        self._notify_refresh = notify_refresh
        self._date_format = date_format

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=1)

        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))
        ctk.CTkLabel(
            bar, text="Budgets", font=ctk.CTkFont(size=13, weight="bold"),
        ).pack(side="left", padx=(12, 16), pady=8)
        ctk.CTkButton(bar, text="+ Add Budget", command=self._open_add).pack(side="left", padx=4, pady=6)

        self._scroll = ctk.CTkScrollableFrame(self)
        self._scroll.grid(row=1, column=0, sticky="nsew", padx=8, pady=8)
        self._scroll.grid_columnconfigure(0, weight=1)
        self._load()

    def refresh(self):
        self._load()

    def _load(self):
        for w in self._scroll.winfo_children():
            w.destroy()

        budgets = self._svc.get_budget_status()
        if not budgets:
            ctk.CTkLabel(
                self._scroll,
                text="No budgets yet. Click '+ Add Budget' to create one.",
                text_color="gray60",
            ).grid(row=0, column=0, pady=40)
            return

        threshold = self._settings.get_budget_alert_threshold()
        for idx, b in enumerate(budgets):
            self._add_budget_card(idx, b, threshold)

    def _add_budget_card(self, idx: int, b: Budget, threshold: float):
        card = ctk.CTkFrame(self._scroll, fg_color=("gray90", "gray20"), corner_radius=8)
        card.grid(row=idx, column=0, sticky="ew", padx=4, pady=4)
        card.grid_columnconfigure(0, weight=1)

        hdr = ctk.CTkFrame(card, fg_color="transparent")
        hdr.grid(row=0, column=0, sticky="ew", padx=12, pady=(10, 4))
        hdr.grid_columnconfigure(0, weight=1)

        scope = b.category_name or "All spending"
        if b.account_name:
            scope += f" · {b.account_name}"
        ctk.CTkLabel(
            hdr, text=f"{b.name}  ({scope})",
            font=ctk.CTkFont(size=13, weight="bold"), anchor="w",
        ).grid(row=0, column=0, sticky="w")

        pct = b.percentage
        pct_color = "#4CAF50" if pct < threshold else ("#FF9800" if pct < 1.0 else "#F44336")
        ctk.CTkLabel(hdr, text=f"{pct*100:.1f}%", text_color=pct_color).grid(row=0, column=1, padx=(8, 0))

        ctk.CTkButton(
            hdr, text="Edit", width=50, height=24,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=lambda budget=b: self._open_edit(budget),
        ).grid(row=0, column=2, padx=(8, 0))

        period = (
            f"{format_display_date(b.period_start, self._date_format)} – "
            f"{format_display_date(b.period_end, self._date_format)}"
        )
        ctk.CTkLabel(
            card,
            text=(
                f"Spent: {format_amount(b.spent_amount)}  /  Limit: {format_amount(b.value)} "
                f"per {b.period}  |  Remaining: {format_amount(b.remaining)}  |  {period}"
            ),
            text_color="gray60", anchor="w",
        ).grid(row=1, column=0, padx=12, sticky="ew")

        bar = ctk.CTkProgressBar(card, progress_color=pct_color)
        bar.grid(row=2, column=0, padx=12, pady=(4, 10), sticky="ew")
        bar.set(min(pct, 1.0))

    def _open_form(self, budget: Budget | None):
        form = BudgetForm(
            self.winfo_toplevel(), self._svc, self._cat_svc, self._acct_svc, budget=budget,
        )
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("budget")

    def _open_add(self):
        self._open_form(None)

    def _open_edit(self, budget: Budget):
        self._open_form(budget)
