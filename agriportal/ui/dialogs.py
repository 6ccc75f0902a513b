"""
Dialog State Helpers.

Plain state holders for the three dialog patterns every list screen
uses: a bare open/close dialog, a create/edit form dialog, and a delete
confirmation.  They report outcomes through a ``Snackbar`` and never
raise into the UI.
"""

from __future__ import annotations

import copy
from typing import Awaitable, Callable, Generic, Optional, Protocol, TypeVar, Union

from pydantic import BaseModel

from agriportal.models.auth_models import ValidationResult
from agriportal.models.enums import SnackbarColor
from agriportal.ui.snackbar import Snackbar
from agriportal.utils.general import error_message

T = TypeVar("T")

Callback = Callable[[], None]


class OperationOutcome(Protocol):
    """Anything shaped like ``ServiceResult``."""

    success: bool
    error: Optional[str]


class CrudMessages(BaseModel):
    """Snackbar texts for the two form modes."""

    create: str
    update: str


DEFAULT_SUCCESS_MESSAGES = CrudMessages(create="Created successfully", update="Updated successfully")
DEFAULT_ERROR_MESSAGES = CrudMessages(create="Failed to create", update="Failed to update")
DEFAULT_VALIDATION_MESSAGE = "Please check all required fields"


# ---------------------------------------------------------------------------
# Bare dialog
# ---------------------------------------------------------------------------

class Dialog:
    """Open/closed flag with an optional close callback."""

    def __init__(self, on_close: Optional[Callback] = None) -> None:
        self.is_open: bool = False
        self._on_close = on_close

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False
        if self._on_close is not None:
            self._on_close()

    def toggle(self) -> None:
        self.is_open = not self.is_open
        if not self.is_open and self._on_close is not None:
            self._on_close()


# ---------------------------------------------------------------------------
# Create / edit form
# ---------------------------------------------------------------------------

class FormDialog(Generic[T]):
    """Form state for creating a new item or editing an existing one.

    Parameters
    ----------
    initial_data:
        Blank form value, or a factory producing one.
    on_submit:
        ``(data, is_editing) -> outcome``; typically a manager's
        ``create`` or ``update`` wrapped by the caller.
    snackbar:
        Where success and failure messages go.
    validate:
        Optional pre-submit check; a failure is shown and nothing is
        submitted.
    success_messages, error_messages:
        Override the default per-mode snackbar texts.  A custom error
        message wins over the backend's own text.
    on_success, on_error, on_open, on_close:
        Optional lifecycle callbacks.
    """

    def __init__(
        self,
        initial_data: Union[T, Callable[[], T]],
        on_submit: Callable[[T, bool], Awaitable[OperationOutcome]],
        snackbar: Optional[Snackbar] = None,
        validate: Optional[Callable[[T], ValidationResult]] = None,
        success_messages: Optional[CrudMessages] = None,
        error_messages: Optional[CrudMessages] = None,
        on_success: Optional[Callable[[T, bool], None]] = None,
        on_error: Optional[Callable[[str, T, bool], None]] = None,
        on_open: Optional[Callback] = None,
        on_close: Optional[Callback] = None,
    ) -> None:
        self._initial_data = initial_data
        self._on_submit = on_submit
        self._snackbar = snackbar
        self._validate = validate
        self._success_messages = success_messages or DEFAULT_SUCCESS_MESSAGES
        self._error_messages = error_messages
        self._on_success = on_success
        self._on_error = on_error
        self._on_open = on_open
        self._on_close = on_close

        self.is_open: bool = False
        self.is_submitting: bool = False
        self.editing_item: Optional[T] = None
        self.form_data: T = self._blank()

    @property
    def is_editing(self) -> bool:
        return self.editing_item is not None

    def _blank(self) -> T:
        if callable(self._initial_data):
            return self._initial_data()
        return copy.deepcopy(self._initial_data)

    def _notify(self, message: str, color: SnackbarColor) -> None:
        if self._snackbar is not None:
            self._snackbar.show(message, color)

    def reset(self) -> None:
        self.form_data = self._blank()
        self.editing_item = None

    def open_for_create(self) -> None:
        self.reset()
        self.is_open = True
        if self._on_open is not None:
            self._on_open()

    def open_for_edit(self, item: T) -> None:
        self.editing_item = item
        self.form_data = copy.deepcopy(item)
        self.is_open = True
        if self._on_open is not None:
            self._on_open()

    def close(self) -> None:
        self.is_open = False
        if self._on_close is not None:
            self._on_close()
        self.reset()

    async def submit(self) -> bool:
        """Validate, submit, and report; returns whether it succeeded.

        The dialog closes (and resets) only on success.
        """
        if self._validate is not None:
            validation = self._validate(self.form_data)
            if not validation.is_valid:
                self._notify(
                    validation.error_message or DEFAULT_VALIDATION_MESSAGE,
                    SnackbarColor.ERROR,
                )
                return False

        editing = self.is_editing
        data = self.form_data
        self.is_submitting = True
        try:
            outcome = await self._on_submit(data, editing)
        except Exception as exc:
            message = error_message(exc) or "An error occurred"
            self._notify(message, SnackbarColor.ERROR)
            if self._on_error is not None:
                self._on_error(message, data, editing)
            return False
        finally:
            self.is_submitting = False

        if outcome.success:
            message = self._success_messages.update if editing else self._success_messages.create
            self._notify(message, SnackbarColor.SUCCESS)
            if self._on_success is not None:
                self._on_success(data, editing)
            self.close()
            return True

        custom = None
        if self._error_messages is not None:
            custom = self._error_messages.update if editing else self._error_messages.create
        fallback = DEFAULT_ERROR_MESSAGES.update if editing else DEFAULT_ERROR_MESSAGES.create
        self._notify(custom or outcome.error or fallback, SnackbarColor.ERROR)
        if self._on_error is not None:
            self._on_error(outcome.error or "Unknown error", data, editing)
        return False


# ---------------------------------------------------------------------------
# Delete confirmation
# ---------------------------------------------------------------------------

class DeleteConfirmation(Generic[T]):
    """Two-step delete: pick an item, then confirm."""

    def __init__(
        self,
        on_delete: Callable[[T], Awaitable[OperationOutcome]],
        snackbar: Optional[Snackbar] = None,
        success_message: Union[str, Callable[[T], str], None] = None,
        error_message: Union[str, Callable[[T, Optional[str]], str], None] = None,
        on_success: Optional[Callable[[T], None]] = None,
        on_error: Optional[Callable[[str, T], None]] = None,
    ) -> None:
        self._on_delete = on_delete
        self._snackbar = snackbar
        self._success_message = success_message
        self._error_message = error_message
        self._on_success = on_success
        self._on_error = on_error

        self.is_open: bool = False
        self.is_deleting: bool = False
        self.item_to_delete: Optional[T] = None

    def _notify(self, message: str, color: SnackbarColor) -> None:
        if self._snackbar is not None:
            self._snackbar.show(message, color)

    def open_dialog(self, item: T) -> None:
        self.item_to_delete = item
        self.is_open = True

    def close_dialog(self) -> None:
        self.is_open = False
        self.item_to_delete = None

    async def confirm_delete(self) -> bool:
        """Delete the picked item; a no-op returning ``False`` if none is picked."""
        item = self.item_to_delete
        if item is None:
            return False

        self.is_deleting = True
        try:
            outcome = await self._on_delete(item)
        except Exception as exc:
            message = error_message(exc) or "An error occurred while deleting"
            self._notify(message, SnackbarColor.ERROR)
            if self._on_error is not None:
                self._on_error(message, item)
            return False
        finally:
            self.is_deleting = False

        if outcome.success:
            if callable(self._success_message):
                message = self._success_message(item)
            else:
                message = self._success_message or "Item deleted successfully"
            self._notify(message, SnackbarColor.SUCCESS)
            if self._on_success is not None:
                self._on_success(item)
            self.close_dialog()
            return True

        if callable(self._error_message):
            message = self._error_message(item, outcome.error)
        else:
            message = self._error_message or outcome.error or "Failed to delete item"
        self._notify(message, SnackbarColor.ERROR)
        if self._on_error is not None:
            self._on_error(outcome.error or "Unknown error", item)
        return False
