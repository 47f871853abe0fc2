import tkinter as tk

import customtkinter as ctk
from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg
from matplotlib.figure import Figure

from models.statistics import BarGroup, CategorySum
from services.account_service import AccountService
from services.statistics_service import StatisticsService
from ui.components.date_picker import DatePickerWidget
from utils.constants import BAR_GROUPINGS, TYPE_COLORS
from utils.currency import format_amount
from utils.date_helpers import format_display_date, format_date, today

_ALL_ACCOUNTS = "All accounts"

_DATE_FILTER_LABELS = {
    "Day": "day",
    "Week": "week",
    "Month": "month",
    "Year": "year",
    "Date range": "date_range",
    "All time": "all_time",
}


class StatisticsTab(ctk.CTkFrame):
    """Pie and bar charts over a date range, with totals and per-tag sums."""

    def __init__(
        self,
        master,
        stats_service: StatisticsService,
        account_service: AccountService,
        date_format: str = "DD.MM.YYYY",
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._stats = stats_service
        self._acct_svc = account_service
        self._date_format = date_format
        self._accounts = []

        self._acct_var = ctk.StringVar(value=_ALL_ACCOUNTS)
        self._filter_var = ctk.StringVar(value="Month")
        self._chart_var = ctk.StringVar(value="Pie")
        self._pie_type_var = ctk.StringVar(value="Spending")
        self._bar_type_var = ctk.StringVar(value="Both")
        self._group_var = ctk.StringVar(value="Month")
        self._start, self._end = self._stats.date_range("month")

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(3, weight=1)

        self._build_toolbar()
        self._build_chart_bar()
        self._build_summary()
        self._build_charts()
        self.refresh()

    def refresh(self):
        self._accounts = self._acct_svc.get_all()
        names = [_ALL_ACCOUNTS] + [a.name for a in self._accounts]
        self._acct_combo.configure(values=names)
        if self._acct_var.get() not in names:
            self._acct_var.set(_ALL_ACCOUNTS)
        self._load()

    # ── Toolbar ──────────────────────────────────────────────────────────────
    def _build_toolbar(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))

        ctk.CTkLabel(bar, text="Account:").pack(side="left", padx=(12, 4), pady=8)
        self._acct_combo = ctk.CTkComboBox(
            bar, values=[_ALL_ACCOUNTS], variable=self._acct_var,
            width=160, state="readonly", command=lambda _: self._load(),
        )
        self._acct_combo.pack(side="left", padx=(0, 12))

        ctk.CTkLabel(bar, text="Period:").pack(side="left", padx=(0, 4))
        ctk.CTkComboBox(
            bar, values=list(_DATE_FILTER_LABELS), variable=self._filter_var,
            width=120, state="readonly", command=lambda _: self._on_filter_change(),
        ).pack(side="left", padx=(0, 8))

        self._prev_btn = ctk.CTkButton(bar, text="◀", width=28, command=lambda: self._move(False))
        self._prev_btn.pack(side="left")
        self._range_label = ctk.CTkLabel(bar, text="", width=190, anchor="center")
        self._range_label.pack(side="left", padx=4)
        self._next_btn = ctk.CTkButton(bar, text="▶", width=28, command=lambda: self._move(True))
        self._next_btn.pack(side="left", padx=(0, 12))

        # Custom range pickers, shown only for "Date range"
        self._custom_frame = ctk.CTkFrame(bar, fg_color="transparent")
        self._from_picker = DatePickerWidget(
            self._custom_frame, initial_date=format_date(self._start),
            date_format=self._date_format, on_change=lambda _d: self._on_custom_change(),
        )
        self._from_picker.pack(side="left")
        ctk.CTkLabel(self._custom_frame, text="–").pack(side="left", padx=4)
        self._to_picker = DatePickerWidget(
            self._custom_frame, initial_date=format_date(self._end),
            date_format=self._date_format, on_change=lambda _d: self._on_custom_change(),
        )
        self._to_picker.pack(side="left")

    def _build_chart_bar(self):
        bar = ctk.CTkFrame(self, fg_color="transparent")
        bar.grid(row=1, column=0, sticky="ew", padx=8, pady=(6, 0))

        ctk.CTkSegmentedButton(
            bar, values=["Pie", "Bar"], variable=self._chart_var,
            command=lambda _: self._on_chart_change(),
        ).pack(side="left", padx=(4, 12))

        self._pie_opts = ctk.CTkSegmentedButton(
            bar, values=["Spending", "Income"], variable=self._pie_type_var,
            command=lambda _: self._load(),
        )
        self._bar_opts = ctk.CTkFrame(bar, fg_color="transparent")
        ctk.CTkSegmentedButton(
            self._bar_opts, values=["Both", "Spending", "Income"], variable=self._bar_type_var,
            command=lambda _: self._load(),
        ).pack(side="left", padx=(0, 8))
        ctk.CTkLabel(self._bar_opts, text="Group by:").pack(side="left", padx=(0, 4))
        ctk.CTkComboBox(
            self._bar_opts, values=[g.title() for g in BAR_GROUPINGS], variable=self._group_var,
            width=100, state="readonly", command=lambda _: self._load(),
        ).pack(side="left")
        self._pie_opts.pack(side="left")

    def _build_summary(self):
        self._summary_frame = ctk.CTkFrame(self, fg_color="transparent")
        self._summary_frame.grid(row=2, column=0, sticky="ew", padx=16, pady=10)
        self._summary_frame.grid_columnconfigure((0, 1, 2), weight=1)

    def _build_charts(self):
        charts = ctk.CTkFrame(self, fg_color="transparent")
        charts.grid(row=3, column=0, sticky="nsew", padx=16, pady=(0, 12))
        charts.grid_columnconfigure(0, weight=3)
        charts.grid_columnconfigure(1, weight=2)
        charts.grid_rowconfigure(0, weight=1)

        chart_outer = ctk.CTkFrame(charts, fg_color=("gray90", "gray20"), corner_radius=8)
        chart_outer.grid(row=0, column=0, sticky="nsew", padx=(0, 8))
        self._chart_title = ctk.CTkLabel(
            chart_outer, text="", font=ctk.CTkFont(size=13, weight="bold"),
        )
        self._chart_title.pack(pady=(10, 0))
        self._fig = Figure(figsize=(5, 3), dpi=80, tight_layout=True)
        self._ax = self._fig.add_subplot(111)
        self._mpl = FigureCanvasTkAgg(self._fig, master=chart_outer)
        self._mpl.get_tk_widget().pack(fill="both", expand=True, padx=8, pady=(4, 10))

        side = ctk.CTkScrollableFrame(charts, fg_color=("gray90", "gray20"), corner_radius=8)
        side.grid(row=0, column=1, sticky="nsew")
        side.grid_columnconfigure(0, weight=1)
        ctk.CTkLabel(
            side, text="Categories", font=ctk.CTkFont(size=13, weight="bold"), anchor="w",
        ).grid(row=0, column=0, sticky="w", padx=8, pady=(8, 2))
        self._legend_frame = ctk.CTkFrame(side, fg_color="transparent")
        self._legend_frame.grid(row=1, column=0, sticky="ew", padx=8)
        ctk.CTkLabel(
            side, text="Tags", font=ctk.CTkFont(size=13, weight="bold"), anchor="w",
        ).grid(row=2, column=0, sticky="w", padx=8, pady=(12, 2))
        self._tags_frame = ctk.CTkFrame(side, fg_color="transparent")
        self._tags_frame.grid(row=3, column=0, sticky="ew", padx=8, pady=(0, 8))

    # ── Date range handling ──────────────────────────────────────────────────
    def _date_filter(self) -> str:
        return _DATE_FILTER_LABELS[self._filter_var.get()]

    def _on_filter_change(self):
        date_filter = self._date_filter()
        if date_filter == "date_range":
            self._custom_frame.pack(side="left", padx=(0, 8))
            self._on_custom_change()
            return
        self._custom_frame.pack_forget()
        self._start, self._end = self._stats.date_range(date_filter, today())
        self._load()

    def _on_custom_change(self):
        start, end = self._from_picker.get_date(), self._to_picker.get_date()
        try:
            self._start, self._end = self._stats.date_range("date_range", start=start, end=end)
        except ValueError as e:
            self._range_label.configure(text=str(e))
            return
        self._load()

    def _move(self, forward: bool):
        if self._start is None or self._end is None:
            return
        date_filter = self._date_filter()
        period = date_filter if date_filter in BAR_GROUPINGS else None
        self._start, self._end = self._stats.move_date_range(self._start, self._end, forward, period)
        if date_filter == "date_range":
            self._from_picker.set(format_date(self._start))
            self._to_picker.set(format_date(self._end))
        self._load()

    def _range_text(self) -> str:
        if self._start is None:
            return "All time"
        start = format_display_date(format_date(self._start), self._date_format)
        if self._start == self._end:
            return start
        return f"{start} – {format_display_date(format_date(self._end), self._date_format)}"

    def _on_chart_change(self):
        if self._chart_var.get() == "Pie":
            self._bar_opts.pack_forget()
            self._pie_opts.pack(side="left")
        else:
            self._pie_opts.pack_forget()
            self._bar_opts.pack(side="left")
        self._load()

    # ── Rendering ────────────────────────────────────────────────────────────
    def _account_id(self) -> int | None:
        name = self._acct_var.get()
        return next((a.id for a in self._accounts if a.name == name), None)

    def _load(self):
        all_time = self._start is None
        self._prev_btn.configure(state="disabled" if all_time else "normal")
        self._next_btn.configure(state="disabled" if all_time else "normal")
        self._range_label.configure(text=self._range_text())

        account_id = self._account_id()
        if self._chart_var.get() == "Pie":
            type_filter = self._pie_type_var.get().lower()
        else:
            type_filter = self._bar_type_var.get().lower()
        transactions = self._stats.transactions_for(type_filter, account_id, self._start, self._end)

        self._render_summary(transactions)
        self._render_tags(transactions)
        if self._chart_var.get() == "Pie":
            sums = self._stats.pie_chart(type_filter, account_id, self._start, self._end)
            self._chart_title.configure(text=f"{self._pie_type_var.get()} by category")
            self._render_legend(sums)
            self.after(50, lambda s=sums: self._draw_pie_chart(s))
        else:
            groups = self._stats.bar_chart(
                type_filter, self._group_var.get().lower(), account_id, self._start, self._end,
            )
            self._chart_title.configure(text=f"{self._bar_type_var.get()} by {self._group_var.get().lower()}")
            self._render_legend(self._stats.category_sums(transactions))
            self.after(50, lambda g=groups: self._draw_bar_chart(g))

    def _render_summary(self, transactions):
        for w in self._summary_frame.winfo_children():
            w.destroy()
        totals = self._stats.totals_for(transactions)
        if not totals:
            ctk.CTkLabel(
                self._summary_frame, text="No transactions in this period.", text_color="gray60",
            ).grid(row=0, column=0, columnspan=3)
            return
        for i, total in enumerate(totals):
            card = ctk.CTkFrame(self._summary_frame, fg_color=("gray90", "gray20"), corner_radius=10)
            card.grid(row=0, column=i, padx=6, sticky="ew")
            ctk.CTkLabel(card, text=total.type.title(), text_color="gray60").pack(pady=(10, 0), padx=16)
            color = TYPE_COLORS[total.type]
            if total.type == "profit" and total.value < 0:
                color = "#FF9800"
            ctk.CTkLabel(
                card, text=format_amount(total.value),
                font=ctk.CTkFont(size=18, weight="bold"), text_color=color,
            ).pack(pady=(4, 10), padx=16)

    def _render_legend(self, sums: list[CategorySum]):
        for w in self._legend_frame.winfo_children():
            w.destroy()
        for item in sums:
            row = ctk.CTkFrame(self._legend_frame, fg_color="transparent")
            row.pack(fill="x", pady=1)
            tk.Label(row, bg=item.category.color_hex, width=2).pack(side="left", padx=(0, 4))
            ctk.CTkLabel(
                row, text=f"{item.category.name} ({item.category.type}): {format_amount(item.total)}",
                anchor="w", font=ctk.CTkFont(size=11),
            ).pack(side="left")

    def _render_tags(self, transactions):
        for w in self._tags_frame.winfo_children():
            w.destroy()
        tag_totals = self._stats.tag_totals(transactions)
        if not tag_totals:
            ctk.CTkLabel(
                self._tags_frame, text="No tagged transactions.", text_color="gray60",
                font=ctk.CTkFont(size=11),
            ).pack(anchor="w")
            return
        for item in tag_totals:
            row = ctk.CTkFrame(self._tags_frame, fg_color="transparent")
            row.pack(fill="x", pady=1)
            tk.Label(row, bg=item.tag.color_hex, width=2).pack(side="left", padx=(0, 4))
            ctk.CTkLabel(
                row, text=f"{item.tag.name}: {format_amount(item.total)}",
                anchor="w", font=ctk.CTkFont(size=11),
            ).pack(side="left")

    def _style_ax(self):
        is_dark = ctk.get_appearance_mode() == "Dark"
        bg = "#2b2b2b" if is_dark else "#e4e4e4"
        fg = "#aaaaaa" if is_dark else "#444444"
        self._fig.patch.set_facecolor(bg)
        self._ax.set_facecolor(bg)
        self._ax.tick_params(colors=fg, labelsize=8)
        for spine in self._ax.spines.values():
            spine.set_edgecolor(fg)

    def _no_data(self, text: str):
        self._ax.text(0.5, 0.5, text, ha="center", va="center",
                      transform=self._ax.transAxes, color="gray")
        self._mpl.draw_idle()

    def _draw_pie_chart(self, sums: list[CategorySum]):
        self._ax.clear()
        self._style_ax()
        if not sums or sum(s.total for s in sums) == 0:
            self._no_data("No data")
            return
        self._ax.pie(
            [s.total for s in sums],
            colors=[s.category.color_hex for s in sums],
            startangle=90,
        )
        self._ax.set_aspect("equal")
        self._mpl.draw_idle()

    def _draw_bar_chart(self, groups: list[BarGroup]):
        self._ax.clear()
        self._style_ax()
        if not groups:
            self._no_data("No data")
            return
        types = [v.type for v in groups[0].values]
        x = list(range(len(groups)))
        w = 0.8 / len(types)
        for i, type_ in enumerate(types):
            offset = (i - (len(types) - 1) / 2) * w
            self._ax.bar(
                [xi + offset for xi in x], [g.value_for(type_) for g in groups], w,
                color=TYPE_COLORS[type_], label=type_.title(),
            )
        self._ax.set_xticks(x)
        self._ax.set_xticklabels([g.label for g in groups], rotation=45 if len(groups) > 8 else 0)
        self._ax.axhline(0, color="gray", linewidth=0.5)
        self._ax.yaxis.set_major_formatter(
            lambda v, _: f"{v/1000:.0f}k" if abs(v) >= 1000 else f"{v:.0f}"
        )
        if len(types) > 1:
            self._ax.legend(fontsize=8)
        self._mpl.draw_idle()
