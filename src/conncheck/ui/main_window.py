"""Tkinter-based window for choosing the connectivity-check provider."""
import tkinter as tk
from tkinter import ttk
from typing import Callable, List, Optional

try:
    from ttkbootstrap import Style as TBStyle
except Exception:  # pragma: no cover - optional dependency
    TBStyle = None

try:
    from ttkthemes import ThemedStyle
except Exception:  # pragma: no cover - optional dependency
    ThemedStyle = None

from conncheck.logic.connectivity_check import Availability, ConnectivityCheckController
from conncheck.logic.profiles import profile_choices, resolve_by_id, step_choice
from conncheck.logic.revision import RevisionController


PALETTE = {
    "bg": "#14171f",
    "panel": "#1a1e28",
    "text": "#f8f9fa",
    "muted": "#a4acb7",
    "primary": "#2a9fd6",
    "accent": "#77b300",
    "danger": "#df3e3e",
    "hover": "#232a35",
}
BOOTSTRAP_ACTIVE = False


def _configure_style(master: tk.Tk) -> None:
    global PALETTE, BOOTSTRAP_ACTIVE
    BOOTSTRAP_ACTIVE = False
    style = None
    if TBStyle:
        try:
            style = TBStyle("cyborg")
            BOOTSTRAP_ACTIVE = True
            colors = style.colors
            PALETTE = {
                "bg": colors.bg,
                "panel": colors.secondary,
                "text": colors.fg,
                "muted": colors.secondary,
                "primary": colors.primary,
                "accent": colors.success,
                "danger": colors.danger,
                "hover": colors.selectbg,
            }
        except Exception:
            style = None
    if style is None:
        style = ThemedStyle(master) if ThemedStyle else ttk.Style(master)
        if ThemedStyle:
            try:
                style.set_theme("equilux")
            except Exception:
                style.set_theme("clam")
        else:
            style.theme_use("clam")
    style.configure("TFrame", background=PALETTE["bg"])
    style.configure("TLabel", background=PALETTE["bg"], foreground=PALETTE["text"])
    style.configure("Bg.TFrame", background=PALETTE["bg"])

    if BOOTSTRAP_ACTIVE:
        return

    style.configure(
        "Choice.TRadiobutton",
        font=("Helvetica", 12),
        background=PALETTE["bg"],
        foreground=PALETTE["text"],
    )
    style.map(
        "Choice.TRadiobutton",
        background=[("active", PALETTE["hover"])],
        foreground=[("disabled", "#6f7c90")],
    )
    style.configure(
        "Accent.TButton",
        font=("Helvetica", 13, "bold"),
        padding=(14, 10),
        background=PALETTE["accent"],
        foreground="#ffffff",
        borderwidth=1,
        relief="flat",
    )
    style.configure(
        "Menu.TButton",
        font=("Helvetica", 12),
        padding=(12, 8),
        background=PALETTE["panel"],
        foreground=PALETTE["text"],
        borderwidth=1,
        relief="flat",
    )
    style.map(
        "Accent.TButton",
        background=[("active", "#5c9b00")],
        foreground=[("disabled", "#6f7c90")],
    )
    style.map(
        "Menu.TButton",
        background=[("active", PALETTE["hover"])],
        foreground=[("disabled", "#6f7c90")],
    )


class MainWindow(ttk.Frame):
    def __init__(
        self,
        master: tk.Tk,
        connectivity: ConnectivityCheckController,
        revision: Optional[RevisionController] = None,
    ) -> None:
        _configure_style(master)
        super().__init__(master, padding=8)
        self.configure(style="Bg.TFrame")
        self.grid(sticky="nsew")
        master.columnconfigure(0, weight=1)
        master.rowconfigure(0, weight=1)

        self.connectivity = connectivity
        self.revision = revision
        self.choices = profile_choices()
        self.selected = tk.IntVar(value=-1)
        self.radio_buttons: List[ttk.Radiobutton] = []
        self.status_var = tk.StringVar(value="Use Up/Down to pick a provider. Enter to apply.")
        self.revision_var = tk.StringVar(value="")

        self._build_layout()
        self._bind_keys(master)
        self._refresh()

    # Layout builders
    def _build_layout(self) -> None:
        self.columnconfigure(0, weight=1)
        self.columnconfigure(1, weight=1)
        self.rowconfigure(1, weight=1)

        title = ttk.Label(self, text="CONNECTIVITY CHECK", anchor="center", font=("Helvetica", 18, "bold"))
        title.grid(row=0, column=0, columnspan=2, pady=(4, 10))

        choices = ttk.Frame(self, style="Bg.TFrame")
        choices.grid(row=1, column=0, sticky="nsew", padx=(0, 12))
        for row, (profile_id, label) in enumerate(self.choices):
            btn = ttk.Radiobutton(
                choices,
                text=label,
                value=profile_id,
                variable=self.selected,
                takefocus=False,
                **self._radio_style(),
            )
            btn.grid(row=row, column=0, sticky="w", pady=2)
            self.radio_buttons.append(btn)

        side = ttk.Frame(self, style="Bg.TFrame")
        side.grid(row=1, column=1, sticky="nsew")
        side.columnconfigure(0, weight=1)

        self._add_button(side, "Apply", self._apply_selected, row=0, accent=True)
        self._add_button(side, "Reload from device", self._refresh, row=1)

        if self.revision is not None:
            heading = ttk.Label(side, text="Firmware revision", font=("Helvetica", 13, "bold"))
            heading.grid(row=2, column=0, sticky="w", pady=(24, 4))
            text = ttk.Label(side, textvariable=self.revision_var, wraplength=320, font=("Helvetica", 12))
            text.grid(row=3, column=0, sticky="w")
            self._add_button(side, "Open revision page", self._open_revision, row=4)

        status = ttk.Label(self, textvariable=self.status_var, font=("Helvetica", 11), foreground=PALETTE["muted"])
        status.grid(row=2, column=0, columnspan=2, sticky="we", pady=(10, 0))

    def _radio_style(self) -> dict:
        if BOOTSTRAP_ACTIVE:
            return {"bootstyle": "info"}
        return {"style": "Choice.TRadiobutton"}

    def _add_button(self, parent: ttk.Frame, label: str, command: Callable[[], None], row: int, accent: bool = False) -> None:
        if BOOTSTRAP_ACTIVE:
            btn = ttk.Button(
                parent,
                text=label,
                command=command,
                takefocus=False,
                bootstyle="success" if accent else "secondary",
            )
        else:
            btn = ttk.Button(parent, text=label, command=command, style="Accent.TButton" if accent else "Menu.TButton")
        btn.grid(row=row, column=0, sticky="ew", pady=6, ipady=4)

    # Navigation
    def _bind_keys(self, master: tk.Tk) -> None:
        master.bind("<Up>", lambda _: self._move_selection(-1))
        master.bind("<Down>", lambda _: self._move_selection(1))
        master.bind("<Return>", lambda _: self._apply_selected())
        master.bind("<KP_Enter>", lambda _: self._apply_selected())
        master.bind("<Escape>", lambda _: self._refresh())

    def _move_selection(self, delta: int) -> None:
        self.selected.set(step_choice(self.selected.get(), delta))

    def _set_enabled(self, enabled: bool) -> None:
        for btn in self.radio_buttons:
            btn.state(["!disabled"] if enabled else ["disabled"])

    # Actions
    def _refresh(self) -> None:
        try:
            available = self.connectivity.availability_status() is Availability.AVAILABLE
            selected = self.connectivity.display()
        except RuntimeError as exc:
            self.status_var.set(f"Device error: {exc}")
            return
        self._set_enabled(available)
        if selected is not None:
            self.selected.set(selected)
        if not available:
            self.status_var.set("Disabled by device policy (no_config_private_dns).")
        elif selected is None:
            self.status_var.set("Stored probe URL matches no known provider.")
        else:
            self.status_var.set(f"Current provider: {resolve_by_id(selected).name}")
        if self.revision is not None:
            self.revision_var.set(self.revision.summary())

    def _apply_selected(self) -> None:
        value = self.selected.get()
        if value < 0:
            self.status_var.set("Pick a provider first.")
            return
        try:
            self.connectivity.on_preference_change(self.connectivity.preference_key, value)
        except PermissionError:
            self.status_var.set("Disabled by device policy (no_config_private_dns).")
            return
        except RuntimeError as exc:
            self.status_var.set(f"Apply failed: {exc}")
            return
        self.status_var.set(f"Applied: {resolve_by_id(value).name}")

    def _open_revision(self) -> None:
        if self.revision is None:
            return
        try:
            handled = self.revision.handle_click(self.revision.key)
        except RuntimeError as exc:
            self.status_var.set(f"Open failed: {exc}")
            return
        self.status_var.set("Revision page requested." if handled else "Skipped while a UI exerciser is running.")
