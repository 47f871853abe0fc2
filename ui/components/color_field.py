from tkinter import colorchooser

import customtkinter as ctk

from utils.constants import PALETTE


class ColorField(ctk.CTkFrame):
    """Hex entry with a live swatch, palette shortcuts and a system color picker."""

    def __init__(self, master, initial: str = "#888888", **kwargs):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._var = ctk.StringVar(value=initial)

        top = ctk.CTkFrame(self, fg_color="transparent")
        top.pack(fill="x")
        entry = ctk.CTkEntry(top, textvariable=self._var, width=90)
        entry.pack(side="left")
        entry.bind("<FocusOut>", self._sync_swatch)

        self._swatch = ctk.CTkLabel(
            top, text="", width=32, height=24, corner_radius=4, fg_color=initial,
        )
        self._swatch.pack(side="left", padx=(8, 0))

        ctk.CTkButton(
            top, text="Pick", width=60,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._pick_color,
        ).pack(side="left", padx=(8, 0))

        palette = ctk.CTkFrame(self, fg_color="transparent")
        palette.pack(fill="x", pady=(4, 0))
        for color in PALETTE.values():
            ctk.CTkButton(
                palette, text="", width=16, height=16, corner_radius=8,
                fg_color=color, hover_color=color,
                command=lambda c=color: self.set(c),
            ).pack(side="left", padx=1)

    def get(self) -> str:
        color = self._var.get().strip()
        if color and not color.startswith("#"):
            color = "#" + color
        return color.upper()

    def set(self, color: str):
        self._var.set(color)
        self._sync_swatch()

    def _pick_color(self):
        result = colorchooser.askcolor(color=self.get(), parent=self, title="Pick Color")
        if result and result[1]:
            self.set(result[1])

    def _sync_swatch(self, _event=None):
        color = self.get()
        if len(color) == 7:
            try:
                int(color[1:], 16)
            except ValueError:
                return
            self._swatch.configure(fg_color=color)
