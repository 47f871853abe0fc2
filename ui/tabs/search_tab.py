import customtkinter as ctk

from models.transaction import Transaction
from services.account_service import AccountService
from services.category_service import CategoryService
from services.search_service import SearchFilter, SearchService, group_by_day
from services.statistics_service import StatisticsService
from services.tag_service import TagService
from services.transaction_service import TransactionService
from ui.components.date_picker import DatePickerWidget
from ui.components.transaction_form import TransactionForm
from utils.constants import TYPE_COLORS
from utils.currency import format_amount, format_currency
from utils.date_helpers import format_date, friendly_day, today

_ANY_ACCOUNT = "All accounts"
_ANY_CATEGORY = "All categories"
_MAX_RENDERED_ROWS = 200

_DATE_FILTER_LABELS = {
    "Day": "day",
    "Week": "week",
    "Month": "month",
    "Year": "year",
    "Custom": "custom",
}


class SearchTab(ctk.CTkFrame):
    """Filter transactions by type, account, category, tags, date and text."""

    def __init__(
        self,
        master,
        search_service: SearchService,
        stats_service: StatisticsService,
        tx_service: TransactionService,
        account_service: AccountService,
        category_service: CategoryService,
        tag_service: TagService,
        notify_refresh,
        date_format: str = "DD.MM.YYYY",
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._search_svc = search_service
        self._stats = stats_service
        self._tx_svc = tx_service
        self._acct_svc = account_service
        self._cat_svc = category_service
        self._tag_svc = tag_service
        self._notify_refresh = notify_refresh
        self._date_format = date_format

        self._filter = SearchFilter()
        self._accounts = []
        self._categories = []
        self._tag_vars: dict[int, ctk.BooleanVar] = {}

        self._type_var = ctk.StringVar(value="Both")
        self._acct_var = ctk.StringVar(value=_ANY_ACCOUNT)
        self._cat_var = ctk.StringVar(value=_ANY_CATEGORY)
        self._date_var = ctk.StringVar(value="Month")
        self._text_var = ctk.StringVar()
        self._text_var.trace_add("write", lambda *_: self._load())

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(3, weight=1)

        self._build_filters()
        self._build_tags_row()
        self._totals_frame = ctk.CTkFrame(self, fg_color="transparent")
        self._totals_frame.grid(row=2, column=0, sticky="ew", padx=16, pady=(6, 0))

        self._scroll = ctk.CTkScrollableFrame(self)
        self._scroll.grid(row=3, column=0, sticky="nsew", padx=8, pady=8)
        self._scroll.grid_columnconfigure(0, weight=1)
        self.refresh()

    def refresh(self):
        self._accounts = self._acct_svc.get_all()
        names = [_ANY_ACCOUNT] + [a.name for a in self._accounts]
        self._acct_combo.configure(values=names)
        if self._acct_var.get() not in names:
            self._acct_var.set(_ANY_ACCOUNT)
        self._reload_categories()
        self._rebuild_tags()
        self._load()

    # ── Filters ──────────────────────────────────────────────────────────────
    def _build_filters(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))

        ctk.CTkSegmentedButton(
            bar, values=["Both", "Spending", "Income"], variable=self._type_var,
            command=lambda _: self._on_type_change(),
        ).pack(side="left", padx=(8, 8), pady=6)

        self._acct_combo = ctk.CTkComboBox(
            bar, values=[_ANY_ACCOUNT], variable=self._acct_var,
            width=150, state="readonly", command=lambda _: self._load(),
        )
        self._acct_combo.pack(side="left", padx=4)

        self._cat_combo = ctk.CTkComboBox(
            bar, values=[_ANY_CATEGORY], variable=self._cat_var,
            width=170, state="readonly", command=lambda _: self._load(),
        )
        self._cat_combo.pack(side="left", padx=4)

        ctk.CTkComboBox(
            bar, values=list(_DATE_FILTER_LABELS), variable=self._date_var,
            width=100, state="readonly", command=lambda _: self._on_date_change(),
        ).pack(side="left", padx=4)

        self._custom_frame = ctk.CTkFrame(bar, fg_color="transparent")
        start, end = self._search_svc.resolve_dates(SearchFilter(date_filter="month"))
        self._from_picker = DatePickerWidget(
            self._custom_frame, initial_date=format_date(start),
            date_format=self._date_format, on_change=lambda _d: self._load(),
        )
        self._from_picker.pack(side="left")
        ctk.CTkLabel(self._custom_frame, text="–").pack(side="left", padx=4)
        self._to_picker = DatePickerWidget(
            self._custom_frame, initial_date=format_date(end),
            date_format=self._date_format, on_change=lambda _d: self._load(),
        )
        self._to_picker.pack(side="left")

        ctk.CTkEntry(
            bar, textvariable=self._text_var, placeholder_text="Search…", width=160,
        ).pack(side="right", padx=8)

    def _build_tags_row(self):
        self._tags_row = ctk.CTkScrollableFrame(
            self, orientation="horizontal", height=36, fg_color="transparent",
        )
        self._tags_row.grid(row=1, column=0, sticky="ew", padx=8, pady=(4, 0))

    def _rebuild_tags(self):
        selected = {tid for tid, var in self._tag_vars.items() if var.get()}
        for w in self._tags_row.winfo_children():
            w.destroy()
        self._tag_vars = {}
        tags = self._tag_svc.get_all()
        if not tags:
            ctk.CTkLabel(self._tags_row, text="No tags", text_color="gray60").pack(side="left")
            return
        ctk.CTkLabel(self._tags_row, text="Tags:").pack(side="left", padx=(4, 8))
        for tag in tags:
            var = ctk.BooleanVar(value=tag.id in selected)
            self._tag_vars[tag.id] = var
            ctk.CTkCheckBox(
                self._tags_row, text=tag.name, variable=var,
                fg_color=tag.color_hex, command=self._load,
            ).pack(side="left", padx=4)

    def _reload_categories(self):
        type_ = self._type_var.get().lower()
        self._categories = (
            self._cat_svc.get_all() if type_ == "both" else self._cat_svc.get_by_type(type_)
        )
        labels = [_ANY_CATEGORY] + [self._cat_label(c) for c in self._categories]
        self._cat_combo.configure(values=labels)
        if self._cat_var.get() not in labels:
            self._cat_var.set(_ANY_CATEGORY)

    @staticmethod
    def _cat_label(category) -> str:
        return f"{category.name} ({category.type})"

    def _on_type_change(self):
        self._reload_categories()
        self._load()

    def _on_date_change(self):
        if _DATE_FILTER_LABELS[self._date_var.get()] == "custom":
            self._custom_frame.pack(side="left", padx=4)
        else:
            self._custom_frame.pack_forget()
        self._load()

    def _current_filter(self) -> SearchFilter:
        account = next((a for a in self._accounts if a.name == self._acct_var.get()), None)
        category = next(
            (c for c in self._categories if self._cat_label(c) == self._cat_var.get()), None
        )
        flt = SearchFilter(
            account_id=account.id if account else None,
            category_id=category.id if category else None,
            tag_ids=[tid for tid, var in self._tag_vars.items() if var.get()],
            date_filter=_DATE_FILTER_LABELS[self._date_var.get()],
            ref_date=today(),
            start=self._from_picker.get_date(),
            end=self._to_picker.get_date(),
            text=self._text_var.get(),
        )
        return self._search_svc.with_type(flt, self._type_var.get().lower())

    # ── Results ──────────────────────────────────────────────────────────────
    def _load(self):
        for w in self._scroll.winfo_children():
            w.destroy()
        for w in self._totals_frame.winfo_children():
            w.destroy()

        try:
            results = self._search_svc.search(self._current_filter())
        except ValueError as e:
            ctk.CTkLabel(self._scroll, text=str(e), text_color="#F44336").grid(row=0, column=0, pady=20)
            return

        self._render_totals(results)
        if not results:
            ctk.CTkLabel(
                self._scroll, text="No matching transactions.", text_color="gray60",
            ).grid(row=0, column=0, pady=20)
            return

        r = 0
        rendered = 0
        for group in group_by_day(results):
            if rendered >= _MAX_RENDERED_ROWS:
                break
            head = ctk.CTkFrame(self._scroll, fg_color="transparent")
            head.grid(row=r, column=0, sticky="ew", padx=6, pady=(10, 2))
            head.grid_columnconfigure(0, weight=1)
            ctk.CTkLabel(
                head, text=friendly_day(group.date),
                font=ctk.CTkFont(size=13, weight="bold"), anchor="w",
            ).grid(row=0, column=0, sticky="w")
            ctk.CTkLabel(
                head, text=format_amount(group.total), text_color="gray60", anchor="e",
            ).grid(row=0, column=1, sticky="e", padx=(0, 8))
            r += 1
            for tx in group.transactions:
                self._add_row(r, tx)
                r += 1
                rendered += 1

        if len(results) > rendered:
            ctk.CTkLabel(
                self._scroll,
                text=f"Showing {rendered} of {len(results)} results. Narrow the filters to see more.",
                text_color="gray60", font=ctk.CTkFont(size=11),
            ).grid(row=r, column=0, pady=8)

    def _render_totals(self, results: list[Transaction]):
        ctk.CTkLabel(
            self._totals_frame, text=f"{len(results)} results", text_color="gray60",
        ).pack(side="left", padx=(0, 16))
        for total in self._stats.totals_for(results):
            ctk.CTkLabel(
                self._totals_frame,
                text=f"{total.type.title()}: {format_amount(total.value)}",
                text_color=TYPE_COLORS[total.type],
                font=ctk.CTkFont(weight="bold"),
            ).pack(side="left", padx=(0, 16))

    def _add_row(self, r: int, tx: Transaction):
        row = ctk.CTkFrame(self._scroll, fg_color=("gray92", "gray17"), corner_radius=4)
        row.grid(row=r, column=0, sticky="ew", pady=1, padx=2)
        row.grid_columnconfigure(2, weight=1)

        ctk.CTkLabel(row, text="●", text_color=tx.category_color, width=16).grid(
            row=0, column=0, padx=(8, 2), pady=4
        )
        ctk.CTkLabel(row, text=tx.category_name, width=140, anchor="w").grid(row=0, column=1, padx=4)
        details = " · ".join(p for p in (tx.account_name, tx.tag_names, tx.comment) if p)
        ctk.CTkLabel(row, text=details, anchor="w", text_color=("gray40", "gray70")).grid(
            row=0, column=2, padx=4, sticky="ew"
        )
        sign = "+" if tx.type == "income" else "-"
        ctk.CTkLabel(
            row, text=f"{sign}{format_currency(tx.value, tx.currency)}", width=120, anchor="e",
            text_color=TYPE_COLORS[tx.type],
        ).grid(row=0, column=3, padx=4)
        ctk.CTkButton(
            row, text="Edit", width=44, height=24,
            command=lambda t=tx: self._open_edit_form(t),
        ).grid(row=0, column=4, padx=(4, 6))

    def _open_edit_form(self, tx: Transaction):
        form = TransactionForm(
            self.winfo_toplevel(),
            self._tx_svc, self._acct_svc, self._cat_svc, self._tag_svc,
            current_account_id=tx.account_id,
            transaction=tx,
            date_format=self._date_format,
        )
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("transaction")
