"""Transient status message shown after an action."""

from __future__ import annotations

from agriportal.models.enums import SnackbarColor


class Snackbar:
    """Holds the one message the UI is currently flashing."""

    def __init__(self) -> None:
        self.visible: bool = False
        self.message: str = ""
        self.color: SnackbarColor = SnackbarColor.SUCCESS

    def show(self, message: str, color: SnackbarColor = SnackbarColor.SUCCESS) -> None:
        self.message = message
        self.color = SnackbarColor(color)
        self.visible = True

    def hide(self) -> None:
        self.visible = False
