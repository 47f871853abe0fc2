import customtkinter as ctk

from models.transfer import Transfer
from services.account_service import AccountService
from services.transfer_service import TransferService
from ui.components.transfer_form import TransferForm
from utils.currency import format_currency
from utils.date_helpers import format_display_date


class TransfersTab(ctk.CTkFrame):
    """Paged list of transfers between accounts, newest first."""

    def __init__(
        self,
        master,
        transfer_service: TransferService,
        account_service: AccountService,
        notify_refresh,
        date_format: str = "DD.MM.YYYY",
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._svc = transfer_service
        self._acct_svc = account_service
        self._notify_refresh = notify_refresh
        self._date_format = date_format
        self._page = 0

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)

        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))
        bar.grid_columnconfigure(3, weight=1)
        ctk.CTkButton(bar, text="◀", width=28, command=lambda: self._shift_page(-1)).grid(
            row=0, column=0, padx=(8, 0), pady=6
        )
        self._page_label = ctk.CTkLabel(bar, text="", width=110)
        self._page_label.grid(row=0, column=1, padx=4)
        ctk.CTkButton(bar, text="▶", width=28, command=lambda: self._shift_page(1)).grid(
            row=0, column=2, padx=(0, 8)
        )
        ctk.CTkButton(bar, text="+ Transfer", width=100, command=self._open_add_form).grid(
            row=0, column=4, padx=8
        )

        hdr = ctk.CTkFrame(self, fg_color=("gray82", "gray22"), corner_radius=0)
        hdr.grid(row=1, column=0, sticky="ew", padx=8, pady=(4, 0))
        for i, (label, width) in enumerate(
            [("Date", 90), ("From", 140), ("To", 140), ("Sent", 120),
             ("Received", 120), ("Comment", 160), ("Actions", 110)]
        ):
            ctk.CTkLabel(
                hdr, text=label, width=width, anchor="w", font=ctk.CTkFont(weight="bold"),
            ).grid(row=0, column=i, padx=4, pady=4, sticky="w")

        self._scroll = ctk.CTkScrollableFrame(self)
        self._scroll.grid(row=2, column=0, sticky="nsew", padx=8, pady=(0, 8))
        self._scroll.grid_columnconfigure(0, weight=1)
        self.refresh()

    def refresh(self):
        self._page = min(self._page, self._svc.page_count() - 1)
        self._load()

    def _shift_page(self, n: int):
        new_page = self._page + n
        if 0 <= new_page < self._svc.page_count():
            self._page = new_page
            self._load()

    def _load(self):
        for w in self._scroll.winfo_children():
            w.destroy()
        self._page_label.configure(text=f"Page {self._page + 1} of {self._svc.page_count()}")

        transfers = self._svc.get_page(self._page)
        if not transfers:
            ctk.CTkLabel(
                self._scroll, text="No transfers yet.", text_color="gray60",
            ).grid(row=0, column=0, pady=20)
            return
        for idx, transfer in enumerate(transfers):
            self._add_row(idx, transfer)

    def _add_row(self, idx: int, t: Transfer):
        bg = ("gray92", "gray17") if idx % 2 == 0 else ("gray88", "gray21")
        row = ctk.CTkFrame(self._scroll, fg_color=bg, corner_radius=4)
        row.grid(row=idx, column=0, sticky="ew", pady=1, padx=2)

        cells = [
            (format_display_date(t.date, self._date_format), 90, "w", None),
            (t.from_account_name, 140, "w", None),
            (t.to_account_name, 140, "w", None),
            (f"-{format_currency(t.value_from, t.from_currency)}", 120, "e", "#F44336"),
            (f"+{format_currency(t.value_to, t.to_currency)}", 120, "e", "#4CAF50"),
            (t.comment or "—", 160, "w", None),
        ]
        for col, (text, width, anchor, color) in enumerate(cells):
            kwargs = {"text_color": color} if color else {}
            ctk.CTkLabel(row, text=text, width=width, anchor=anchor, **kwargs).grid(
                row=0, column=col, padx=4, pady=4
            )

        acts = ctk.CTkFrame(row, fg_color="transparent")
        acts.grid(row=0, column=len(cells), padx=(4, 6))
        ctk.CTkButton(
            acts, text="Edit", width=44, height=24,
            command=lambda tr=t: self._open_form(tr),
        ).pack(side="left", padx=2)
        ctk.CTkButton(
            acts, text="Repeat", width=56, height=24,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=lambda tr=t: self._open_form(self._svc.template_from(tr.id)),
        ).pack(side="left")

    def _open_add_form(self):
        if len(self._acct_svc.get_all()) < 2:
            self._page_label.configure(text="Transfers need at least two accounts.")
            return
        self._open_form(None)

    def _open_form(self, transfer: Transfer | None):
        form = TransferForm(
            self.winfo_toplevel(), self._svc, self._acct_svc,
            transfer=transfer, date_format=self._date_format,
        )
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("transfer")
