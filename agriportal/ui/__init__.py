"""
UI State Helpers Package.

Framework-neutral state for the portal's screens: dialogs, snackbar,
infinite scroll, image picking, and page actions.  Rendering belongs to
whichever UI toolkit drives these objects.
"""

from agriportal.ui.dialogs import DeleteConfirmation, Dialog, FormDialog
from agriportal.ui.image_picker import ImagePicker
from agriportal.ui.infinite_scroll import InfiniteScroll
from agriportal.ui.page_actions import PageActions
from agriportal.ui.snackbar import Snackbar

__all__ = [
    "DeleteConfirmation",
    "Dialog",
    "FormDialog",
    "ImagePicker",
    "InfiniteScroll",
    "PageActions",
    "Snackbar",
]
