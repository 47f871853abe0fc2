import tkinter as tk
from datetime import date
from tkinter import ttk

import customtkinter as ctk
from tkcalendar import Calendar

from utils.date_helpers import (
    parse_date, format_date, format_display_date, parse_display_date,
)


class DatePickerWidget(ctk.CTkFrame):
    """Entry in the user's display format plus a calendar popup button.

    .get() returns a YYYY-MM-DD string for storage ('' when empty).
    .get_date() returns a date or None.
    .set(date_str) accepts YYYY-MM-DD.
    on_change(date_str) fires whenever a valid date is picked or typed.
    """

    def __init__(
        self,
        master,
        initial_date: str | None = None,
        date_format: str = "DD.MM.YYYY",
        on_change=None,
        width: int = 110,
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self.grid_columnconfigure(0, weight=1)

        self._date_format = date_format
        self._on_change = on_change
        self._popup: ctk.CTkToplevel | None = None

        self._var = tk.StringVar(
            value=format_display_date(initial_date, date_format) if initial_date else ""
        )
        self._entry = ctk.CTkEntry(self, textvariable=self._var, width=width)
        self._entry.grid(row=0, column=0, sticky="ew")
        self._entry.bind("<FocusOut>", self._on_commit)
        self._entry.bind("<Return>", self._on_commit)

        ctk.CTkButton(
            self, text="📅", width=32, command=self._toggle_popup,
        ).grid(row=0, column=1, padx=(4, 0))

    # ── Public API ────────────────────────────────────────────────────────────

    def get(self) -> str:
        raw = self._var.get().strip()
        if not raw:
            return ""
        d = self._parse(raw)
        return format_date(d) if d else raw

    def get_date(self) -> date | None:
        return self._parse(self._var.get().strip())

    def set(self, date_str: str):
        d = parse_date(date_str) if date_str else None
        if d:
            self._var.set(format_display_date(format_date(d), self._date_format))
        else:
            self._var.set(date_str or "")
        self._reset_border()

    def is_valid(self) -> bool:
        return self.get_date() is not None

    # ── Internals ─────────────────────────────────────────────────────────────

    def _parse(self, raw: str) -> date | None:
        if not raw:
            return None
        d = parse_display_date(raw, self._date_format)
        if d is None:
            d = parse_date(raw.replace("/", "-").replace(".", "-"))
        return d

    def _on_commit(self, _event=None):
        raw = self._var.get().strip()
        if not raw:
            self._reset_border()
            return
        d = self._parse(raw)
        if d is None:
            self._entry.configure(border_color="#F44336")
            return
        self._var.set(format_display_date(format_date(d), self._date_format))
        self._reset_border()
        if self._on_change:
            self._on_change(format_date(d))

    def _reset_border(self):
        self._entry.configure(border_color=("gray65", "gray35"))

    def _toggle_popup(self):
        if self._popup and self._popup.winfo_exists():
            self._popup.destroy()
            self._popup = None
            return

        popup = ctk.CTkToplevel(self)
        popup.overrideredirect(True)
        popup.resizable(False, False)
        self._popup = popup

        if ctk.get_appearance_mode() == "Dark":
            bg, fg = "#2b2b2b", "#ffffff"
        else:
            bg, fg = "#ffffff", "#000000"
        style = ttk.Style(popup)
        style.theme_use("default")
        style.configure("Calendar.Treeview", background=bg, foreground=fg, fieldbackground=bg)

        current = self.get_date() or date.today()
        # Weeks start on Monday, like budget and statistics periods
        cal = Calendar(
            popup,
            selectmode="day",
            year=current.year,
            month=current.month,
            day=current.day,
            date_pattern="yyyy-mm-dd",
            firstweekday="monday",
            background=bg,
            foreground=fg,
            headersbackground=bg,
            headersforeground=fg,
            selectbackground="#1f6aa5",
            weekendbackground=bg,
            weekendforeground=fg,
            othermonthforeground="gray60",
            bordercolor=bg,
        )
        cal.pack(padx=4, pady=4)
        cal.bind("<<CalendarSelected>>", lambda _e: self._on_date_selected(cal, popup))

        self._entry.update_idletasks()
        x = self._entry.winfo_rootx()
        y = self._entry.winfo_rooty() + self._entry.winfo_height() + 2
        popup.geometry(f"+{x}+{y}")
        popup.bind("<Escape>", lambda _e: self._close_popup(popup))

    def _on_date_selected(self, cal, popup):
        self.set(cal.get_date())
        self._close_popup(popup)
        if self._on_change:
            self._on_change(self.get())

    def _close_popup(self, popup):
        popup.destroy()
        self._popup = None
