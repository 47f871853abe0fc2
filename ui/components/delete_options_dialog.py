import customtkinter as ctk


class DeleteOptionsDialog(ctk.CTkToplevel):
    """Ask how to delete an entity that still has transactions.

    The user either keeps the transactions (moving them to ``move_targets[i]``,
    or detaching them when ``move_targets`` is None) or deletes them too.
    After closing, .result is None (cancelled), "keep" or "cascade", and
    .target_index is the chosen move target.
    """

    def __init__(
        self,
        master,
        title: str,
        message: str,
        keep_text: str,
        cascade_text: str,
        move_targets: list[str] | None = None,
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self.title(title)
        self.resizable(False, False)
        self.result: str | None = None
        self.target_index: int | None = None
        self._targets = move_targets
        self.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(
            self, text=message, wraplength=380, justify="left", padx=20, pady=12,
        ).grid(row=0, column=0, sticky="ew")

        self._choice = ctk.StringVar(value="keep")
        ctk.CTkRadioButton(
            self, text=keep_text, variable=self._choice, value="keep",
        ).grid(row=1, column=0, padx=24, pady=4, sticky="w")

        self._target_var = ctk.StringVar(value=move_targets[0] if move_targets else "")
        if move_targets is not None:
            ctk.CTkComboBox(
                self, values=move_targets, variable=self._target_var,
                width=240, state="readonly",
            ).grid(row=2, column=0, padx=48, pady=(0, 4), sticky="w")

        ctk.CTkRadioButton(
            self, text=cascade_text, variable=self._choice, value="cascade",
        ).grid(row=3, column=0, padx=24, pady=4, sticky="w")

        self._error_var = ctk.StringVar()
        ctk.CTkLabel(
            self, textvariable=self._error_var, text_color="#F44336",
            wraplength=360, anchor="w",
        ).grid(row=4, column=0, padx=20, sticky="ew")

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=5, column=0, pady=(4, 16), padx=20, sticky="e")
        ctk.CTkButton(
            btn_frame, text="Cancel", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self.destroy,
        ).pack(side="left", padx=(0, 8))
        ctk.CTkButton(
            btn_frame, text="Delete", width=90,
            fg_color="#F44336", hover_color="#D32F2F",
            command=self._on_delete,
        ).pack(side="left")

        self.transient(master)
        self.grab_set()
        self._center()
        self.wait_window()

    def _on_delete(self):
        choice = self._choice.get()
        if choice == "keep" and self._targets is not None:
            if not self._targets or self._target_var.get() not in self._targets:
                self._error_var.set("There is nowhere to move the transactions to.")
                return
            self.target_index = self._targets.index(self._target_var.get())
        self.result = choice
        self.destroy()

    def _center(self):
        self.update_idletasks()
        mw = self.master.winfo_x() + self.master.winfo_width() // 2
        mh = self.master.winfo_y() + self.master.winfo_height() // 2
        w, h = self.winfo_reqwidth(), self.winfo_reqheight()
        self.geometry(f"+{mw - w//2}+{mh - h//2}")
