import logging

import customtkinter as ctk

from database.dismissed_reminder_dao import DismissedReminderDAO
from services.reminder_service import Reminder, ReminderService
from utils.constants import SEVERITY_COLORS, SEVERITY_ICONS

logger = logging.getLogger(__name__)


class ReminderDialog(ctk.CTkToplevel):
    """Startup dialog listing budget alerts.

    Each row can be hidden until its budget's next period starts; "Dismiss All"
    hides every remaining alert the same way. "Close" keeps them for next launch.
    """

    def __init__(
        self,
        master,
        reminders: list[Reminder],
        dismissed_dao: DismissedReminderDAO,
        reminder_service: ReminderService,
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._dismissed_dao = dismissed_dao
        self._reminder_svc = reminder_service
        self._reminders = list(reminders)

        self.title("Budget Alerts")
        self.geometry("540x380")
        self.resizable(False, True)
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=1)

        ctk.CTkLabel(
            self,
            text="Budget alerts",
            font=ctk.CTkFont(size=16, weight="bold"),
            pady=12,
        ).grid(row=0, column=0, sticky="ew", padx=16)

        self._scroll = ctk.CTkScrollableFrame(self)
        self._scroll.grid(row=1, column=0, sticky="nsew", padx=12, pady=(0, 8))
        self._scroll.grid_columnconfigure(0, weight=1)

        for i, reminder in enumerate(self._reminders):
            self._add_row(reminder, i)

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=2, column=0, padx=16, pady=(0, 16), sticky="ew")
        ctk.CTkButton(
            btn_frame, text="Close", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self.destroy,
        ).pack(side="left")
        ctk.CTkButton(
            btn_frame, text="Dismiss All", width=120, command=self._dismiss_all,
        ).pack(side="right")

        self.transient(master)
        self.grab_set()
        self._center()

    def _add_row(self, reminder: Reminder, index: int):
        color = SEVERITY_COLORS.get(reminder.severity, "#888888")

        row_frame = ctk.CTkFrame(self._scroll, fg_color=("gray90", "gray20"), corner_radius=6)
        row_frame.grid(row=index, column=0, sticky="ew", pady=3, padx=2)
        row_frame.grid_columnconfigure(1, weight=1)

        ctk.CTkLabel(
            row_frame, text=SEVERITY_ICONS.get(reminder.severity, "·"), text_color=color,
            font=ctk.CTkFont(size=18), width=30,
        ).grid(row=0, column=0, rowspan=2, padx=(8, 4), pady=6)

        ctk.CTkLabel(
            row_frame, text=reminder.title,
            font=ctk.CTkFont(size=13, weight="bold"),
            text_color=color, anchor="w",
        ).grid(row=0, column=1, sticky="ew", padx=(0, 4), pady=(6, 0))

        ctk.CTkLabel(
            row_frame, text=reminder.detail,
            font=ctk.CTkFont(size=11),
            text_color=("gray40", "gray70"),
            anchor="w", wraplength=360,
        ).grid(row=1, column=1, sticky="ew", padx=(0, 4), pady=(0, 6))

        if reminder.key:
            ctk.CTkButton(
                row_frame, text="✕", width=28, height=28,
                fg_color="transparent",
                text_color=("gray10", "gray90"),
                hover_color=("gray80", "gray30"),
                command=lambda r=reminder, f=row_frame: self._dismiss_one(r, f),
            ).grid(row=0, column=2, rowspan=2, padx=(4, 8), pady=6)

    def _dismiss(self, reminder: Reminder):
        expiry = self._reminder_svc.compute_expiry(reminder)
        self._dismissed_dao.dismiss(reminder.key, expiry)
        logger.debug("Dismissed %s until %s", reminder.key, expiry)

    def _dismiss_one(self, reminder: Reminder, row_frame: ctk.CTkFrame):
        self._dismiss(reminder)
        self._reminders.remove(reminder)
        row_frame.destroy()
        if not self._reminders:
            self.destroy()

    def _dismiss_all(self):
        for reminder in self._reminders:
            if reminder.key:
                self._dismiss(reminder)
        self.destroy()

    def _center(self):
        self.update_idletasks()
        mw = self.master.winfo_x() + self.master.winfo_width() // 2
        mh = self.master.winfo_y() + self.master.winfo_height() // 2
        w, h = self.winfo_reqwidth(), self.winfo_reqheight()
        self.geometry(f"+{mw - w//2}+{mh - h//2}")
