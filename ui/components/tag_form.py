import customtkinter as ctk

from models.tag import Tag
from services.tag_service import TagService
from ui.components.color_field import ColorField


class TagForm(ctk.CTkToplevel):
    """Add or edit a tag."""

    def __init__(self, master, tag_service: TagService, tag: Tag | None = None, **kwargs):
        super().__init__(master, **kwargs)
        self._svc = tag_service
        self._tag = tag
        self.saved = False

        self.title("Edit Tag" if tag else "New Tag")
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)

        ctk.CTkLabel(self, text="Name:").grid(
            row=0, column=0, padx=(16, 8), pady=(16, 4), sticky="e"
        )
        self._name_var = ctk.StringVar(value=tag.name if tag else "")
        name_entry = ctk.CTkEntry(self, textvariable=self._name_var, width=220)
        name_entry.grid(row=0, column=1, padx=(0, 16), pady=(16, 4), sticky="ew")

        ctk.CTkLabel(self, text="Color:").grid(
            row=1, column=0, padx=(16, 8), pady=4, sticky="ne"
        )
        self._color = ColorField(self, initial=tag.color_hex if tag else tag_service.new_tag_color())
        self._color.grid(row=1, column=1, padx=(0, 16), pady=4, sticky="ew")

        self._error_var = ctk.StringVar()
        ctk.CTkLabel(
            self, textvariable=self._error_var,
            text_color="#F44336", wraplength=280, anchor="w",
        ).grid(row=2, column=0, columnspan=2, padx=16, pady=(0, 4), sticky="ew")

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=3, column=0, columnspan=2, padx=16, pady=(4, 16), sticky="ew")
        ctk.CTkButton(
            btn_frame, text="Cancel", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self.destroy,
        ).pack(side="left")
        ctk.CTkButton(btn_frame, text="Save", width=90, command=self._on_save).pack(side="right")

        self.bind("<Return>", lambda _e: self._on_save())
        self.transient(master)
        self.grab_set()
        self._center()
        name_entry.focus_set()

    def _on_save(self):
        try:
            if self._tag:
                self._svc.update(self._tag.id, self._name_var.get(), self._color.get())
            else:
                self._svc.create(self._name_var.get(), self._color.get())
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
