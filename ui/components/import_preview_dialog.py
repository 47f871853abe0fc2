import customtkinter as ctk

_SECTION_LABELS = {
    "balance_accounts": "Accounts",
    "categories": "Categories",
    "tags": "Tags",
    "transactions": "Transactions",
    "transfers": "Transfers",
    "budgets": "Budgets",
}


class ImportPreviewDialog(ctk.CTkToplevel):
    """Show what an export file contains and confirm replacing all data with it.

    Blocks until closed; .confirmed tells whether the user chose Replace.
    """

    def __init__(self, master, counts: dict, **kwargs):
        super().__init__(master, **kwargs)
        self.confirmed = False

        self.title("Import Data")
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)

        ctk.CTkLabel(
            self, text="The file contains:",
            font=ctk.CTkFont(size=14, weight="bold"), anchor="w",
        ).grid(row=0, column=0, columnspan=2, padx=20, pady=(16, 6), sticky="w")

        r = 1
        for key, label in _SECTION_LABELS.items():
            ctk.CTkLabel(self, text=f"{label}:", anchor="e").grid(
                row=r, column=0, padx=(24, 8), pady=1, sticky="e"
            )
            ctk.CTkLabel(self, text=str(counts.get(key, 0)), anchor="w").grid(
                row=r, column=1, padx=(0, 24), pady=1, sticky="w"
            )
            r += 1

        ctk.CTkLabel(
            self,
            text="Importing replaces everything currently stored. This cannot be undone.",
            text_color="#F44336", wraplength=300, justify="left",
        ).grid(row=r, column=0, columnspan=2, padx=20, pady=(10, 4), sticky="w")
        r += 1

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=r, column=0, columnspan=2, padx=20, pady=(4, 16), sticky="ew")
        ctk.CTkButton(
            btn_frame, text="Cancel", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self.destroy,
        ).pack(side="left")
        ctk.CTkButton(
            btn_frame, text="Replace", width=90,
            fg_color="#F44336", hover_color="#D32F2F",
            command=self._on_replace,
        ).pack(side="right")

        self.bind("<Escape>", lambda _e: self.destroy())
        self.transient(master)
        self.grab_set()
        self._center()
        self.wait_window()

    def _on_replace(self):
        self.confirmed = True
        self.destroy()

    def _center(self):
        self.update_idletasks()
        mw = self.master.winfo_x() + self.master.winfo_width() // 2
        mh = self.master.winfo_y() + self.master.winfo_height() // 2
        w, h = self.winfo_reqwidth(), self.winfo_reqheight()
        self.geometry(f"+{mw - w//2}+{mh - h//2}")
