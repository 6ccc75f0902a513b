"""Framework-neutral UI state: dialogs, snackbar, scroll trigger, picker, page actions."""

import asyncio

from agriportal import entities
from agriportal.models.auth_models import ValidationResult
from agriportal.models.enums import SnackbarColor, UserType
from agriportal.models.service_models import ServiceResult
from agriportal.ui import (
    DeleteConfirmation,
    Dialog,
    FormDialog,
    ImagePicker,
    InfiniteScroll,
    PageActions,
    Snackbar,
)
from agriportal.ui.dialogs import CrudMessages

from tests.conftest import make_file


def test_snackbar_show_and_hide():
    snackbar = Snackbar()
    snackbar.show("Saved")
    assert (snackbar.visible, snackbar.message, snackbar.color) == (True, "Saved", SnackbarColor.SUCCESS)

    snackbar.show("Oops", "error")
    assert snackbar.color == SnackbarColor.ERROR

    snackbar.hide()
    assert not snackbar.visible


def test_dialog_toggle_reports_close():
    closed = []
    dialog = Dialog(on_close=lambda: closed.append(True))

    dialog.toggle()
    assert dialog.is_open and closed == []
    dialog.toggle()
    assert not dialog.is_open and closed == [True]


# ---------------------------------------------------------------------------
# FormDialog
# ---------------------------------------------------------------------------

def make_form(outcome, **kwargs):
    submitted = []

    async def on_submit(data, editing):
        submitted.append((dict(data), editing))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    snackbar = Snackbar()
    form = FormDialog({"name": ""}, on_submit, snackbar=snackbar, **kwargs)
    return form, snackbar, submitted


def test_form_create_success_closes_and_resets():
    form, snackbar, submitted = make_form(ServiceResult(success=True))
    form.open_for_create()
    form.form_data["name"] = "Rice"

    assert asyncio.run(form.submit())
    assert submitted == [({"name": "Rice"}, False)]
    assert snackbar.message == "Created successfully"
    assert not form.is_open
    assert form.form_data == {"name": ""}


def test_form_edit_failure_shows_backend_error_and_stays_open():
    form, snackbar, _ = make_form(ServiceResult(success=False, error="duplicate key"))
    form.open_for_edit({"name": "Corn"})

    assert not asyncio.run(form.submit())
    assert form.is_editing
    assert form.is_open
    assert (snackbar.message, snackbar.color) == ("duplicate key", SnackbarColor.ERROR)


def test_form_custom_error_message_wins():
    form, snackbar, _ = make_form(
        ServiceResult(success=False, error="duplicate key"),
        error_messages=CrudMessages(create="Could not add product", update="Could not save product"),
    )
    form.open_for_create()

    asyncio.run(form.submit())

    assert snackbar.message == "Could not add product"


def test_form_validation_blocks_submit():
    form, snackbar, submitted = make_form(
        ServiceResult(success=True),
        validate=lambda data: ValidationResult(is_valid=bool(data["name"]), error_message="Name is required"),
    )
    form.open_for_create()

    assert not asyncio.run(form.submit())
    assert submitted == []
    assert snackbar.message == "Name is required"


def test_form_exception_is_reported():
    errors = []
    form, snackbar, _ = make_form(
        RuntimeError("socket closed"),
        on_error=lambda message, data, editing: errors.append(message),
    )
    form.open_for_create()

    assert not asyncio.run(form.submit())
    assert snackbar.message == "socket closed"
    assert errors == ["socket closed"]
    assert not form.is_submitting


# ---------------------------------------------------------------------------
# DeleteConfirmation
# ---------------------------------------------------------------------------

def test_delete_confirmation_flow():
    deleted = []

    async def on_delete(item):
        deleted.append(item)
        return ServiceResult(success=True, data=item["id"])

    snackbar = Snackbar()
    confirm = DeleteConfirmation(
        on_delete, snackbar=snackbar, success_message=lambda item: f"{item['name']} deleted",
    )

    assert not asyncio.run(confirm.confirm_delete())

    confirm.open_dialog({"id": 3, "name": "Okra"})
    assert asyncio.run(confirm.confirm_delete())
    assert deleted == [{"id": 3, "name": "Okra"}]
    assert snackbar.message == "Okra deleted"
    assert not confirm.is_open
    assert confirm.item_to_delete is None


def test_delete_confirmation_failure_keeps_dialog_open():
    async def on_delete(item):
        return ServiceResult(success=False, error="row is referenced")

    snackbar = Snackbar()
    confirm = DeleteConfirmation(on_delete, snackbar=snackbar)
    confirm.open_dialog({"id": 1})

    assert not asyncio.run(confirm.confirm_delete())
    assert confirm.is_open
    assert snackbar.message == "row is referenced"


# ---------------------------------------------------------------------------
# InfiniteScroll
# ---------------------------------------------------------------------------

def test_infinite_scroll_triggers_near_bottom_only():
    loads = []
    more = [True]

    async def on_load_more():
        loads.append(True)

    scroll = InfiniteScroll(on_load_more, has_more=lambda: more[0])

    assert not asyncio.run(scroll.handle_scroll(100, 1000, 500))
    assert asyncio.run(scroll.handle_scroll(250, 1000, 500))
    more[0] = False
    assert not asyncio.run(scroll.handle_scroll(500, 1000, 500))
    assert loads == [True]


def test_infinite_scroll_drives_list_manager(client, make_manager, session):
    client.seed("products", [{"name": f"P{i}"} for i in range(15)])
    manager = make_manager(entities.PRODUCTS, session)
    asyncio.run(manager.fetch())
    scroll = InfiniteScroll(manager.load_more, has_more=lambda: manager.has_more)

    asyncio.run(scroll.handle_scroll(490, 1000, 500))
    asyncio.run(scroll.handle_scroll(990, 1500, 500))

    assert len(manager.items) == 15
    assert manager.page == 2


# ---------------------------------------------------------------------------
# ImagePicker
# ---------------------------------------------------------------------------

def test_picker_rejects_wrong_type_and_oversized_files():
    picker = ImagePicker(max_size_mb=1)

    picker.select([make_file("doc.pdf", content_type="application/pdf")])
    assert picker.error.startswith("Invalid file type. Allowed types: image/jpeg")
    assert picker.files == []

    picker.select([make_file(size=2 * 1024 * 1024)])
    assert picker.error == "File size exceeds 1MB limit"


def test_single_picker_replaces_selection_with_preview():
    picker = ImagePicker()

    picker.select([make_file("a.png", size=2)])
    picker.select([make_file("b.png", size=2), make_file("c.png")])

    assert [f.name for f in picker.files] == ["b.png"]
    assert picker.preview == "data:image/png;base64,eHg="

    picker.remove_image()
    assert picker.file is None


def test_multi_picker_accumulates_and_removes_by_index():
    picker = ImagePicker(multiple=True)

    accepted = picker.select([make_file("a.png"), make_file("x.txt", content_type="text/plain"), make_file("b.png")])
    picker.select([make_file("c.png")])

    assert [f.name for f in accepted] == ["a.png", "b.png"]
    assert [f.name for f in picker.files] == ["a.png", "b.png", "c.png"]

    picker.remove_image_at_index(1)
    assert [f.name for f in picker.files] == ["a.png", "c.png"]
    assert len(picker.previews) == 2

    picker.clear_all()
    assert picker.files == [] and picker.previews == []


def test_picker_from_config(config):
    picker = ImagePicker.from_config(config, multiple=True)

    assert picker.max_size_mb == 5
    assert "image/webp" in picker.allowed_types
    assert picker.multiple


# ---------------------------------------------------------------------------
# PageActions
# ---------------------------------------------------------------------------

def test_page_actions_forward_search_and_settings():
    queries = []
    routes = []

    async def on_search(query):
        queries.append(query)

    actions = PageActions(UserType.ADMIN, on_search=on_search, navigate=routes.append)

    asyncio.run(actions.handle_search("rice"))
    asyncio.run(actions.handle_clear_search())

    assert queries == ["rice", ""]
    assert actions.handle_settings_click() == "/admin/settings"
    assert routes == ["/admin/settings"]
    assert PageActions("user").settings_route == "/user/settings"
