import customtkinter as ctk

from models.transaction import Transaction
from services.account_service import AccountService
from services.category_service import CategoryService
from services.tag_service import TagService
from services.transaction_service import TransactionService
from ui.components.confirm_dialog import ConfirmDialog
from ui.components.date_picker import DatePickerWidget
from utils.currency import format_amount, parse_amount
from utils.date_helpers import today_str


class TransactionForm(ctk.CTkToplevel):
    """Add or edit a spending or income transaction, including its tags."""

    _last_date: str = today_str()  # reset to today on each app launch

    def __init__(
        self,
        master,
        tx_service: TransactionService,
        account_service: AccountService,
        category_service: CategoryService,
        tag_service: TagService,
        current_account_id: int | None,
        initial_type: str = "spending",
        transaction: Transaction | None = None,
        date_format: str = "DD.MM.YYYY",
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._tx_svc = tx_service
        self._cat_svc = category_service
        self._tag_svc = tag_service
        self._transaction = transaction
        self.saved = False

        if transaction:
            initial_type = transaction.type
            current_account_id = transaction.account_id

        self.title(f"{'Edit' if transaction else 'Add'} Transaction")
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)

        self._accounts = account_service.get_all()
        self._tags = tag_service.get_all()
        selected_tags = set(transaction.tag_ids) if transaction else set()

        r = 0
        self._label("Type:", r)
        self._type_var = ctk.StringVar(value=initial_type.title())
        ctk.CTkSegmentedButton(
            self, values=["Spending", "Income"],
            variable=self._type_var, command=lambda _v: self._load_categories(),
        ).grid(row=r, column=1, padx=(0, 16), pady=4, sticky="w")
        r += 1

        self._label("Value:", r)
        self._value_var = ctk.StringVar(
            value=format_amount(transaction.value) if transaction else ""
        )
        value_entry = ctk.CTkEntry(self, textvariable=self._value_var, width=220)
        value_entry.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
        r += 1

        self._label("Date:", r)
        self._date_picker = DatePickerWidget(
            self,
            initial_date=transaction.date if transaction else TransactionForm._last_date,
            date_format=date_format,
        )
        self._date_picker.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="w")
        r += 1

        self._label("Account:", r)
        current = next((a for a in self._accounts if a.id == current_account_id), None)
        if current is None and self._accounts:
            current = self._accounts[0]
        self._acct_var = ctk.StringVar(value=current.name if current else "")
        ctk.CTkComboBox(
            self, values=[a.name for a in self._accounts],
            variable=self._acct_var, width=220, state="readonly",
        ).grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
        r += 1

        self._label("Category:", r)
        self._cat_var = ctk.StringVar()
        self._cat_combo = ctk.CTkComboBox(
            self, values=[], variable=self._cat_var, width=220, state="readonly",
        )
        self._cat_combo.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
        self._load_categories(transaction.category_name if transaction else None)
        r += 1

        self._label("Comment:", r)
        self._comment_var = ctk.StringVar(value=transaction.comment if transaction else "")
        ctk.CTkEntry(self, textvariable=self._comment_var, width=220).grid(
            row=r, column=1, padx=(0, 16), pady=4, sticky="ew"
        )
        r += 1

        self._label("Tags:", r)
        self._tag_frame = ctk.CTkScrollableFrame(self, height=90, width=200)
        self._tag_frame.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
        self._tag_vars: dict[int, ctk.BooleanVar] = {}
        for tag in self._tags:
            self._add_tag_checkbox(tag, tag.id in selected_tags)
        r += 1

        new_tag_row = ctk.CTkFrame(self, fg_color="transparent")
        new_tag_row.grid(row=r, column=1, padx=(0, 16), pady=(0, 4), sticky="ew")
        new_tag_row.grid_columnconfigure(0, weight=1)
        self._new_tag_var = ctk.StringVar()
        ctk.CTkEntry(
            new_tag_row, textvariable=self._new_tag_var, placeholder_text="New tag",
        ).grid(row=0, column=0, sticky="ew")
        ctk.CTkButton(
            new_tag_row, text="Add", width=50, command=self._on_add_tag,
        ).grid(row=0, column=1, padx=(4, 0))
        r += 1

        self._error_var = ctk.StringVar()
        ctk.CTkLabel(
            self, textvariable=self._error_var,
            text_color="#F44336", wraplength=300, anchor="w",
        ).grid(row=r, column=0, columnspan=2, padx=16, pady=(0, 4), sticky="ew")
        r += 1

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=r, column=0, columnspan=2, padx=16, pady=(4, 16), sticky="ew")
        if transaction:
            ctk.CTkButton(
                btn_frame, text="Delete", width=80,
                fg_color="#F44336", hover_color="#D32F2F",
                command=self._on_delete,
            ).pack(side="left")
        ctk.CTkButton(
            btn_frame, text="Save", width=100, command=self._on_save,
        ).pack(side="right")
        ctk.CTkButton(
            btn_frame, text="Cancel", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self.destroy,
        ).pack(side="right", padx=(0, 8))

        self.bind("<Return>", lambda _e: self._on_save())
        self.transient(master)
        self.grab_set()
        self._center()
        value_entry.focus_set()

    def _label(self, text, row):
        ctk.CTkLabel(self, text=text).grid(
            row=row, column=0, padx=(16, 8), pady=4, sticky="e"
        )

    @property
    def _type(self) -> str:
        return self._type_var.get().lower()

    def _load_categories(self, selected: str | None = None):
        self._cats = self._cat_svc.get_by_type(self._type)
        names = [c.name for c in self._cats]
        self._cat_combo.configure(values=names)
        value = selected if selected in names else (names[0] if names else "")
        self._cat_var.set(value)
        self._cat_combo.set(value)

    def _add_tag_checkbox(self, tag, checked: bool):
        var = ctk.BooleanVar(value=checked)
        self._tag_vars[tag.id] = var
        ctk.CTkCheckBox(
            self._tag_frame, text=tag.name, variable=var,
            fg_color=tag.color_hex, checkbox_width=18, checkbox_height=18,
        ).pack(anchor="w", pady=1)

    def _on_add_tag(self):
        name = self._new_tag_var.get().strip()
        if not name:
            return
        try:
            tag = self._tag_svc.get_or_create(name)
        except ValueError as e:
            self._error_var.set(str(e))
            return
        if tag.id in self._tag_vars:
            self._tag_vars[tag.id].set(True)
        else:
            self._add_tag_checkbox(tag, True)
        self._new_tag_var.set("")

    def _on_save(self):
        try:
            value = parse_amount(self._value_var.get())
        except ValueError:
            self._error_var.set("Invalid value.")
            return
        if not self._date_picker.is_valid():
            self._error_var.set("Invalid date.")
            return

        account = next((a for a in self._accounts if a.name == self._acct_var.get()), None)
        category = next((c for c in self._cats if c.name == self._cat_var.get()), None)
        tag_ids = [tid for tid, var in self._tag_vars.items() if var.get()]
        args = (
            self._type, value, self._date_picker.get(),
            account.id if account else None,
            category.id if category else None,
            self._comment_var.get(), tag_ids,
        )
        try:
            if self._transaction:
                self._tx_svc.update(self._transaction.id, *args)
            else:
                self._tx_svc.create(*args)
        except ValueError as e:
            self._error_var.set(str(e))
            return
        TransactionForm._last_date = self._date_picker.get()
        self.saved = True
        self.destroy()

    def _on_delete(self):
        dlg = ConfirmDialog(
            self, "Delete Transaction",
            f"Delete this {self._transaction.type} of {format_amount(self._transaction.value)}?",
            confirm_text="Delete",
        )
        if dlg.result:
            self._tx_svc.delete(self._transaction.id)
            self.saved = True
            self.destroy()

    def _center(self):
        self.update_idletasks()
        mw = self.master.winfo_x() + self.master.winfo_width() // 2
        mh = self.master.winfo_y() + self.master.winfo_height() // 2
        w, h = self.winfo_reqwidth(), self.winfo_reqheight()
        self.geometry(f"+{mw - w//2}+{mh - h//2}")
