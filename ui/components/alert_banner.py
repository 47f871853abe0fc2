import customtkinter as ctk

from utils.constants import SEVERITY_COLORS, SEVERITY_ICONS


class AlertBanner(ctk.CTkFrame):
    """Dismissible strip above the tabs for budget alerts and status messages.

    ``on_dismiss`` runs when the user closes the banner with the ✕ button,
    e.g. to persist a budget-alert dismissal.
    """

    def __init__(
        self,
        master,
        message: str,
        severity: str = "info",
        action_text: str | None = None,
        action_cmd=None,
        on_dismiss=None,
        **kwargs,
    ):
        color = SEVERITY_COLORS.get(severity, SEVERITY_COLORS["info"])
        super().__init__(master, fg_color=color, corner_radius=6, **kwargs)
        self._on_dismiss = on_dismiss
        self.grid_columnconfigure(0, weight=1)

        icon = SEVERITY_ICONS.get(severity, "")
        ctk.CTkLabel(
            self, text=f"{icon}  {message}".strip(), text_color="white",
            anchor="w", padx=10, pady=6,
        ).grid(row=0, column=0, sticky="ew")

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=0, column=1, padx=(0, 4))

        if action_text and action_cmd:
            ctk.CTkButton(
                btn_frame, text=action_text, width=60, height=24,
                fg_color="transparent", border_width=1, border_color="white",
                text_color="white", command=action_cmd,
            ).pack(side="left", padx=2)

        ctk.CTkButton(
            btn_frame, text="✕", width=28, height=24,
            fg_color="transparent", text_color="white",
            command=self._dismiss,
        ).pack(side="left")

    def _dismiss(self):
        if self._on_dismiss:
            self._on_dismiss()
        self.destroy()
