import customtkinter as ctk

from models.transfer import Transfer
from services.account_service import AccountService
from services.transfer_service import TransferService, convert
from ui.components.confirm_dialog import ConfirmDialog
from ui.components.date_picker import DatePickerWidget
from utils.constants import RATE_WAYS
from utils.currency import format_amount, format_currency, parse_amount
from utils.date_helpers import today_str


class TransferForm(ctk.CTkToplevel):
    """Add, edit or repeat a transfer between two balance accounts.

    The exchange-rate row only appears when the two accounts use different
    currencies. Passing a ``template`` (id 0) pre-fills a new transfer.
    """

    def __init__(
        self,
        master,
        transfer_service: TransferService,
        account_service: AccountService,
        transfer: Transfer | None = None,
        date_format: str = "DD.MM.YYYY",
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._svc = transfer_service
        self._transfer = transfer if transfer and transfer.id else None
        self.saved = False

        self.title("Edit Transfer" if self._transfer else "New Transfer")
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)

        self._accounts = account_service.get_all()
        names = [a.name for a in self._accounts]

        r = 0
        ctk.CTkLabel(self, text="From:").grid(row=r, column=0, padx=(16, 8), pady=(16, 4), sticky="e")
        self._from_var = ctk.StringVar(
            value=transfer.from_account_name if transfer else (names[0] if names else "")
        )
        ctk.CTkComboBox(
            self, values=names, variable=self._from_var, width=220, state="readonly",
            command=lambda _v: self._update_rate_row(),
        ).grid(row=r, column=1, padx=(0, 16), pady=(16, 4), sticky="ew")
        r += 1

        ctk.CTkLabel(self, text="To:").grid(row=r, column=0, padx=(16, 8), pady=4, sticky="e")
        self._to_var = ctk.StringVar(
            value=transfer.to_account_name if transfer else (names[1] if len(names) > 1 else "")
        )
        ctk.CTkComboBox(
            self, values=names, variable=self._to_var, width=220, state="readonly",
            command=lambda _v: self._update_rate_row(),
        ).grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
        r += 1

        ctk.CTkLabel(self, text="Value:").grid(row=r, column=0, padx=(16, 8), pady=4, sticky="e")
        self._value_var = ctk.StringVar(value=format_amount(transfer.value_from) if transfer else "")
        self._value_var.trace_add("write", lambda *_: self._update_preview())
        ctk.CTkEntry(self, textvariable=self._value_var, width=220).grid(
            row=r, column=1, padx=(0, 16), pady=4, sticky="ew"
        )
        r += 1

        self._rate_label = ctk.CTkLabel(self, text="Rate:")
        self._rate_label.grid(row=r, column=0, padx=(16, 8), pady=4, sticky="e")
        self._rate_row = ctk.CTkFrame(self, fg_color="transparent")
        self._rate_row.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
        rate = TransferService.derive_rate(transfer) if transfer else None
        self._rate_var = ctk.StringVar(value=f"{rate:.6g}" if rate else "")
        self._rate_var.trace_add("write", lambda *_: self._update_preview())
        ctk.CTkEntry(self._rate_row, textvariable=self._rate_var, width=100).pack(side="left")
        # A stored rate is always value_from / value_to, i.e. applied by dividing
        self._way_var = ctk.StringVar(value="Divide" if rate else "Multiply")
        ctk.CTkSegmentedButton(
            self._rate_row, values=[w.title() for w in RATE_WAYS], variable=self._way_var,
            command=lambda _v: self._update_preview(),
        ).pack(side="left", padx=(8, 0))
        self._preview_label = ctk.CTkLabel(self, text="", text_color="gray60", anchor="w")
        self._preview_label.grid(row=r + 1, column=1, padx=(0, 16), sticky="ew")
        r += 2

        ctk.CTkLabel(self, text="Date:").grid(row=r, column=0, padx=(16, 8), pady=4, sticky="e")
        self._date_picker = DatePickerWidget(
            self, initial_date=transfer.date if transfer else today_str(), date_format=date_format,
        )
        self._date_picker.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="w")
        r += 1

        ctk.CTkLabel(self, text="Comment:").grid(row=r, column=0, padx=(16, 8), pady=4, sticky="e")
        self._comment_var = ctk.StringVar(value=transfer.comment if transfer else "")
        ctk.CTkEntry(self, textvariable=self._comment_var, width=220).grid(
            row=r, column=1, padx=(0, 16), pady=4, sticky="ew"
        )
        r += 1

        self._error_var = ctk.StringVar()
        ctk.CTkLabel(
            self, textvariable=self._error_var,
            text_color="#F44336", wraplength=300, anchor="w",
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
        if self._transfer:
            ctk.CTkButton(
                btn_frame, text="Delete", width=80,
                fg_color="#F44336", hover_color="#D32F2F",
                command=self._on_delete,
            ).pack(side="left", padx=8)
        ctk.CTkButton(
            btn_frame, text="Save Transfer", width=110, command=self._on_save,
        ).pack(side="right")

        self._update_rate_row()
        self.transient(master)
        self.grab_set()
        self._center()

    def _account(self, name: str):
        return next((a for a in self._accounts if a.name == name), None)

    def _is_cross_currency(self) -> bool:
        src, dst = self._account(self._from_var.get()), self._account(self._to_var.get())
        return bool(src and dst and src.currency != dst.currency)

    def _update_rate_row(self):
        if self._is_cross_currency():
            self._rate_label.grid()
            self._rate_row.grid()
            self._preview_label.grid()
        else:
            self._rate_label.grid_remove()
            self._rate_row.grid_remove()
            self._preview_label.grid_remove()
        self._update_preview()

    def _update_preview(self):
        if not self._is_cross_currency():
            return
        dst = self._account(self._to_var.get())
        try:
            value = parse_amount(self._value_var.get())
            rate = parse_amount(self._rate_var.get())
        except ValueError:
            self._preview_label.configure(text="")
            return
        result = convert(value, rate, self._way_var.get().lower())
        self._preview_label.configure(text=f"= {format_currency(result, dst.currency)}")

    def _on_save(self):
        try:
            value = parse_amount(self._value_var.get())
        except ValueError:
            self._error_var.set("Invalid value.")
            return
        rate = None
        if self._is_cross_currency():
            try:
                rate = parse_amount(self._rate_var.get())
            except ValueError:
                self._error_var.set("Invalid exchange rate.")
                return
        if not self._date_picker.is_valid():
            self._error_var.set("Invalid date.")
            return
        src, dst = self._account(self._from_var.get()), self._account(self._to_var.get())
        if not src or not dst:
            self._error_var.set("Please select both accounts.")
            return
        args = (
            src.id, dst.id, value, self._date_picker.get(), self._comment_var.get(),
            rate, self._way_var.get().lower(),
        )
        try:
            if self._transfer:
                self._svc.update(self._transfer.id, *args)
            else:
                self._svc.create(*args)
        except ValueError as e:
            self._error_var.set(str(e))
            return
        self.saved = True
        self.destroy()

    def _on_delete(self):
        dlg = ConfirmDialog(self, "Delete Transfer", "Delete this transfer?", confirm_text="Delete")
        if dlg.result:
            self._svc.delete(self._transfer.id)
            self.saved = True
            self.destroy()

    def _center(self):
        self.update_idletasks()
        mw = self.master.winfo_x() + self.master.winfo_width() // 2
        mh = self.master.winfo_y() + self.master.winfo_height() // 2
        w, h = self.winfo_reqwidth(), self.winfo_reqheight()
        self.geometry(f"+{mw - w//2}+{mh - h//2}")
