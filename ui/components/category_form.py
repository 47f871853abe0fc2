import customtkinter as ctk

from models.category import Category
from services.category_service import CategoryService
from ui.components.color_field import ColorField
from utils.constants import CATEGORY_ICONS, PALETTE


class CategoryForm(ctk.CTkToplevel):
    """Add or edit a category. The type can only be chosen when creating."""

    def __init__(
        self,
        master,
        category_service: CategoryService,
        category: Category | None = None,
        initial_type: str = "spending",
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._svc = category_service
        self._category = category
        self.saved = False

        self.title("Edit Category" if category else "New Category")
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)

        r = 0
        ctk.CTkLabel(self, text="Type:").grid(
            row=r, column=0, padx=(16, 8), pady=(16, 4), sticky="e"
        )
        self._type_var = ctk.StringVar(value=(category.type if category else initial_type).title())
        type_btn = ctk.CTkSegmentedButton(
            self, values=["Spending", "Income"], variable=self._type_var,
            command=lambda _v: self._update_suggestions(),
        )
        type_btn.grid(row=r, column=1, padx=(0, 16), pady=(16, 4), sticky="w")
        if category:
            type_btn.configure(state="disabled")
        r += 1

        ctk.CTkLabel(self, text="Name:").grid(
            row=r, column=0, padx=(16, 8), pady=4, sticky="e"
        )
        self._name_var = ctk.StringVar(value=category.name if category else "")
        self._name_var.trace_add("write", lambda *_: self._update_suggestions())
        ctk.CTkEntry(self, textvariable=self._name_var, width=220).grid(
            row=r, column=1, padx=(0, 16), pady=4, sticky="ew"
        )
        r += 1

        # Existing names that look alike, to avoid near-duplicates
        self._similar_label = ctk.CTkLabel(
            self, text="", text_color="gray60", anchor="w",
            font=ctk.CTkFont(size=11), wraplength=220,
        )
        self._similar_label.grid(row=r, column=1, padx=(0, 16), sticky="ew")
        r += 1

        ctk.CTkLabel(self, text="Icon:").grid(
            row=r, column=0, padx=(16, 8), pady=4, sticky="e"
        )
        self._icon_var = ctk.StringVar(value=category.icon_name if category else "")
        ctk.CTkComboBox(
            self, values=CATEGORY_ICONS, variable=self._icon_var, width=220,
        ).grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
        r += 1

        ctk.CTkLabel(self, text="Color:").grid(
            row=r, column=0, padx=(16, 8), pady=4, sticky="ne"
        )
        self._color = ColorField(
            self, initial=category.color_hex if category else PALETTE["blue"],
        )
        self._color.grid(row=r, column=1, padx=(0, 16), pady=4, sticky="ew")
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
        ctk.CTkButton(btn_frame, text="Save", width=90, command=self._on_save).pack(side="right")

        self.transient(master)
        self.grab_set()
        self._center()

    def _update_suggestions(self):
        text = self._name_var.get()
        names = [
            n for n in self._svc.similar_names(self._type_var.get().lower(), text)
            if not self._category or n != self._category.name
        ]
        self._similar_label.configure(text=f"Similar: {', '.join(names)}" if names else "")

    def _on_save(self):
        name = self._name_var.get()
        icon = self._icon_var.get()
        color = self._color.get()
        try:
            if self._category:
                self._svc.update(self._category.id, name, icon, color)
            else:
                self._svc.create(self._type_var.get().lower(), name, icon, color)
        except ValueError as e:
            self._error_var.set(str(e))
            return
        self.saved = True
        self.destroy()

    def _center(self):
        self.update_idletasks()
        mw = self.master.winfo_x() + self.master.winfo_width() // 2
        mh = self.master.winfo_y() + self.master.winfo_height() // 2
        w, h = self.winfo_reqwidth(), self.winfo_reqheight()
        self.geometry(f"+{mw - w//2}+{mh - h//2}")
