import logging
from tkinter import messagebox

import customtkinter as ctk

from models.category import Category
from services.category_service import CategoryService
from ui.components.category_form import CategoryForm
from ui.components.delete_options_dialog import DeleteOptionsDialog

logger = logging.getLogger(__name__)


class CategoriesTab(ctk.CTkFrame):
    """Spending or income categories in display order, with up/down arrows."""

    def __init__(
        self,
        master,
        category_service: CategoryService,
        notify_refresh,
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._svc = category_service
        self._notify_refresh = notify_refresh
        self._type_var = ctk.StringVar(value="Spending")

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=1)

        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))
        ctk.CTkSegmentedButton(
            bar, values=["Spending", "Income"], variable=self._type_var,
            command=lambda _: self._load(),
        ).pack(side="left", padx=(12, 16), pady=8)
        ctk.CTkButton(bar, text="+ Add Category", command=self._open_add).pack(side="left", padx=4, pady=6)

        self._scroll = ctk.CTkScrollableFrame(self)
        self._scroll.grid(row=1, column=0, sticky="nsew", padx=8, pady=8)
        self._scroll.grid_columnconfigure(0, weight=1)
        self._load()

    def refresh(self):
        self._load()

    def _type(self) -> str:
        return self._type_var.get().lower()

    def _load(self):
        for w in self._scroll.winfo_children():
            w.destroy()

        categories = self._svc.get_by_type(self._type())
        if not categories:
            ctk.CTkLabel(
                self._scroll, text="No categories found.", text_color="gray60",
            ).grid(row=0, column=0, pady=40)
            return
        for idx, cat in enumerate(categories):
            self._add_row(idx, cat, is_last=idx == len(categories) - 1)

    def _add_row(self, idx: int, cat: Category, is_last: bool):
        row = ctk.CTkFrame(self._scroll, fg_color=("gray90", "gray20"), corner_radius=8)
        row.grid(row=idx, column=0, sticky="ew", padx=4, pady=3)
        row.grid_columnconfigure(1, weight=1)

        ctk.CTkLabel(
            row, text="", width=28, height=28, corner_radius=4, fg_color=cat.color_hex,
        ).grid(row=0, column=0, padx=(10, 0), pady=8)

        name_frame = ctk.CTkFrame(row, fg_color="transparent")
        name_frame.grid(row=0, column=1, padx=8, sticky="w")
        ctk.CTkLabel(
            name_frame, text=cat.name, font=ctk.CTkFont(size=13, weight="bold"), anchor="w",
        ).pack(side="left")
        if cat.icon_name:
            ctk.CTkLabel(
                name_frame, text=cat.icon_name, text_color="gray60", font=ctk.CTkFont(size=10),
            ).pack(side="left", padx=(6, 0))

        btn_frame = ctk.CTkFrame(row, fg_color="transparent")
        btn_frame.grid(row=0, column=2, padx=(4, 10), pady=6)

        up = ctk.CTkButton(
            btn_frame, text="▲", width=28, height=26,
            command=lambda c=cat, i=idx: self._move(c, i - 1),
        )
        up.pack(side="left", padx=(0, 2))
        down = ctk.CTkButton(
            btn_frame, text="▼", width=28, height=26,
            command=lambda c=cat, i=idx: self._move(c, i + 1),
        )
        down.pack(side="left", padx=(0, 8))
        if idx == 0:
            up.configure(state="disabled")
        if is_last:
            down.configure(state="disabled")

        ctk.CTkButton(
            btn_frame, text="Edit", width=60, height=26,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=lambda c=cat: self._open_edit(c),
        ).pack(side="left", padx=(0, 4))
        ctk.CTkButton(
            btn_frame, text="Delete", width=65, height=26,
            fg_color="#F44336", hover_color="#D32F2F",
            command=lambda c=cat: self._on_delete(c),
        ).pack(side="left")

    def _move(self, cat: Category, new_index: int):
        self._svc.move(cat.id, new_index)
        self._notify_refresh("category")

    def _open_add(self):
        form = CategoryForm(self.winfo_toplevel(), self._svc, initial_type=self._type())
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("category")

    def _open_edit(self, cat: Category):
        form = CategoryForm(self.winfo_toplevel(), self._svc, category=cat)
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("category")

    def _on_delete(self, cat: Category):
        targets = [c for c in self._svc.get_by_type(cat.type) if c.id != cat.id]
        dlg = DeleteOptionsDialog(
            self.winfo_toplevel(),
            title="Delete Category",
            message=f"Delete {cat.type} category '{cat.name}'?",
            keep_text="Move its transactions and budgets to:",
            cascade_text="Delete its transactions and budgets too",
            move_targets=[c.name for c in targets],
        )
        if dlg.result is None:
            return
        try:
            if dlg.result == "keep":
                self._svc.delete(cat.id, targets[dlg.target_index].id)
            else:
                self._svc.delete_with_transactions(cat.id)
        except ValueError as e:
            logger.warning("Category delete refused: %s", e)
            messagebox.showerror("Delete Category", str(e))
            return
        self._notify_refresh("category")
