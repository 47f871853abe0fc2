import customtkinter as ctk

from models.tag import Tag
from services.tag_service import TagService
from ui.components.delete_options_dialog import DeleteOptionsDialog
from ui.components.tag_form import TagForm


class TagsTab(ctk.CTkFrame):
    def __init__(self, master, tag_service: TagService, notify_refresh, **kwargs):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._svc = tag_service
        self._notify_refresh = notify_refresh

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=1)

        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))
        ctk.CTkLabel(
            bar, text="Tags", font=ctk.CTkFont(size=13, weight="bold"),
        ).pack(side="left", padx=(12, 16), pady=8)
        ctk.CTkButton(bar, text="+ Add Tag", command=self._open_add).pack(side="left", padx=4, pady=6)

        self._scroll = ctk.CTkScrollableFrame(self)
        self._scroll.grid(row=1, column=0, sticky="nsew", padx=8, pady=8)
        self._scroll.grid_columnconfigure(0, weight=1)
        self._load()

    def refresh(self):
        self._load()

    def _load(self):
        for w in self._scroll.winfo_children():
            w.destroy()

        tags = self._svc.get_all()
        if not tags:
            ctk.CTkLabel(
                self._scroll, text="No tags yet. Tags can also be added from the transaction form.",
                text_color="gray60",
            ).grid(row=0, column=0, pady=40)
            return
        for idx, tag in enumerate(tags):
            self._add_row(idx, tag)

    def _add_row(self, idx: int, tag: Tag):
        row = ctk.CTkFrame(self._scroll, fg_color=("gray90", "gray20"), corner_radius=8)
        row.grid(row=idx, column=0, sticky="ew", padx=4, pady=3)
        row.grid_columnconfigure(1, weight=1)

        ctk.CTkLabel(
            row, text="", width=28, height=28, corner_radius=14, fg_color=tag.color_hex,
        ).grid(row=0, column=0, padx=(10, 0), pady=8)
        ctk.CTkLabel(
            row, text=tag.name, font=ctk.CTkFont(size=13, weight="bold"), anchor="w",
        ).grid(row=0, column=1, padx=8, sticky="w")

        btn_frame = ctk.CTkFrame(row, fg_color="transparent")
        btn_frame.grid(row=0, column=2, padx=(4, 10), pady=6)
        ctk.CTkButton(
            btn_frame, text="Edit", width=60, height=26,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=lambda t=tag: self._open_edit(t),
        ).pack(side="left", padx=(0, 4))
        ctk.CTkButton(
            btn_frame, text="Delete", width=65, height=26,
            fg_color="#F44336", hover_color="#D32F2F",
            command=lambda t=tag: self._on_delete(t),
        ).pack(side="left")

    def _open_add(self):
        form = TagForm(self.winfo_toplevel(), self._svc)
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("tag")

    def _open_edit(self, tag: Tag):
        form = TagForm(self.winfo_toplevel(), self._svc, tag=tag)
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("tag")

    def _on_delete(self, tag: Tag):
        dlg = DeleteOptionsDialog(
            self.winfo_toplevel(),
            title="Delete Tag",
            message=f"Delete tag '{tag.name}'?",
            keep_text="Keep tagged transactions, just remove the tag",
            cascade_text="Delete tagged transactions too",
        )
        if dlg.result is None:
            return
        if dlg.result == "keep":
            self._svc.delete(tag.id)
        else:
            self._svc.delete_with_transactions(tag.id)
        self._notify_refresh("tag")
