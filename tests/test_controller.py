"""Behavioural tests for the dashboard controller state machine."""

from __future__ import annotations

import pytest

from conftest import FakeRecordService
from userconsole.controller import DashboardController
from userconsole.models import Record, RecordPayload
from userconsole.notifications import NotificationCenter
from userconsole.state import DashboardMode


pytestmark = pytest.mark.anyio


def _controller(service, clock=None, **kwargs) -> DashboardController:
    notifications = NotificationCenter(clock=clock) if clock is not None else None
    return DashboardController(service, notifications=notifications, **kwargs)


async def test_mount_loads_the_canonical_list(service):
    controller = _controller(service)

    await controller.mount()

    assert controller.mounted
    assert [record.id for record in controller.state.records] == ["a1", "b2"]
    assert controller.state.is_list_loading is False
    assert controller.notification is None
    assert controller.mode is DashboardMode.IDLE


async def test_mount_failure_keeps_previous_list_and_reports(service):
    controller = _controller(service)
    await controller.mount()
    service.failing.add("list")

    assert await controller.refresh() is False

    assert [record.id for record in controller.state.records] == ["a1", "b2"]
    assert controller.state.is_list_loading is False
    assert controller.notification.kind == "error"
    assert controller.notification.message == "Failed to fetch users"


async def test_create_closes_form_refreshes_and_notifies():
    service = FakeRecordService()
    controller = _controller(service)
    await controller.mount()

    assert controller.open_create() is True
    assert controller.mode is DashboardMode.FORM_CREATE
    controller.form.update({"name": "Ana", "email": "a@x.com", "age": "30"})
    assert await controller.form.submit() is True

    assert controller.state.is_form_open is False
    assert controller.form is None
    assert controller.notification.kind == "success"
    assert controller.notification.message == "User created successfully!"
    assert [record.id for record in controller.state.records] == ["u1"]
    assert controller.state.records[0].age == 30
    assert service.operations() == ["list", "create", "list"]


async def test_failed_create_keeps_form_and_draft(service):
    controller = _controller(service)
    await controller.mount()
    controller.open_create()
    controller.form.update({"name": "Ana", "email": "a@x.com", "age": "30"})
    service.failing.add("create")

    await controller.form.submit()

    assert controller.state.is_form_open is True
    assert controller.state.is_submitting is False
    assert controller.form.draft == {"name": "Ana", "email": "a@x.com", "age": 30}
    assert controller.notification.kind == "error"
    assert controller.notification.message == "Failed to create user"
    assert service.operations() == ["list", "create"]


async def test_update_uses_target_id_and_refreshes(service):
    controller = _controller(service)
    await controller.mount()
    target = controller.state.records[1]

    controller.list_view.edit(target)
    assert controller.mode is DashboardMode.FORM_EDIT
    assert controller.state.editing_record is target
    assert controller.form.draft == {"name": "Bob", "email": "bob@example.com", "age": 45}

    controller.form.set_field("age", "46")
    await controller.form.submit()

    assert ("update", "b2", {"name": "Bob", "email": "bob@example.com", "age": 46}) in service.calls
    assert controller.state.editing_record is None
    assert controller.notification.message == "User updated successfully!"
    assert controller.state.records[1].age == 46


async def test_failed_update_stays_open(service):
    controller = _controller(service)
    await controller.mount()
    controller.begin_edit(controller.state.records[0])
    service.failing.add("update")

    await controller.form.submit()

    assert controller.mode is DashboardMode.FORM_EDIT
    assert controller.notification.message == "Failed to update user"


async def test_edit_without_id_is_a_noop(service):
    controller = _controller(service)
    await controller.mount()
    orphan = Record(name="Nobody", email="nobody@example.com", age=1)
    controller.begin_edit(orphan)
    calls_before = list(service.calls)

    result = await controller.submit_form(RecordPayload(name="Changed", email="x@y.z", age=3))

    assert result is False
    assert service.calls == calls_before
    assert controller.state.is_form_open is True
    assert controller.state.editing_record is orphan
    assert controller.state.is_submitting is False
    assert controller.notification is None


async def test_cancel_discards_target_without_network(service):
    controller = _controller(service)
    await controller.mount()
    controller.begin_edit(controller.state.records[0])

    assert controller.form.cancel() is True

    assert controller.mode is DashboardMode.IDLE
    assert controller.state.editing_record is None
    assert service.operations() == ["list"]


async def test_declined_delete_issues_no_call(service):
    controller = _controller(service)
    await controller.mount()
    before = list(controller.state.records)

    assert await controller.delete_record(before[0], confirm=lambda _record: False) is False

    assert service.operations() == ["list"]
    assert controller.state.records == before


async def test_default_gate_refuses_deletion(service):
    controller = _controller(service)
    await controller.mount()

    await controller.list_view.delete(controller.state.records[0])

    assert "delete" not in service.operations()


async def test_non_boolean_confirmation_is_treated_as_declined(service):
    controller = _controller(service)
    await controller.mount()

    await controller.delete_record(controller.state.records[0], confirm=lambda _record: "yes")

    assert "delete" not in service.operations()


async def test_confirmed_delete_refreshes_list(service):
    async def confirm(_record):
        return True

    controller = _controller(service, confirm_delete=confirm)
    await controller.mount()

    await controller.list_view.delete(controller.state.records[0])

    assert service.operations() == ["list", "delete", "list"]
    assert [record.id for record in controller.state.records] == ["b2"]
    assert controller.notification.message == "User deleted successfully!"


async def test_failed_delete_leaves_list_stale(service):
    controller = _controller(service, confirm_delete=lambda _record: True)
    await controller.mount()
    before = list(controller.state.records)
    service.failing.add("delete")

    await controller.delete_record(before[0])

    assert controller.state.records == before
    assert controller.notification.message == "Failed to delete user"
    assert service.operations() == ["list", "delete"]


async def test_list_matches_fresh_fetch_after_mutations(service):
    controller = _controller(service, confirm_delete=lambda _record: True)
    await controller.mount()

    controller.open_create()
    await controller.submit_form(RecordPayload(name="Cara", email="cara@example.com", age=22))
    controller.begin_edit(controller.state.records[0])
    await controller.submit_form(RecordPayload(name="Alicia", email="alice@example.com", age=32))
    await controller.delete_record(controller.state.records[1])

    assert controller.state.records == await service.list_all()


async def test_refresh_drops_records_without_id():
    service = FakeRecordService([Record(id="a1", name="Alice"), Record(id="x")])
    service.records["orphan"] = Record(name="Missing id")
    controller = _controller(service)

    await controller.mount()

    assert [record.id for record in controller.state.records] == ["a1", "x"]


async def test_superseded_fetch_result_is_discarded(service):
    controller = _controller(service)
    await controller.mount()

    original_list_all = service.list_all
    snapshots = []

    async def list_all_with_newer_fetch():
        records = await original_list_all()
        snapshots.append(records)
        if len(snapshots) == 1:
            service.records.pop("a1")
            service.list_all = original_list_all
            await controller.refresh()
        return records

    service.list_all = list_all_with_newer_fetch
    assert await controller.refresh() is False

    assert [record.id for record in controller.state.records] == ["b2"]
    assert controller.state.is_list_loading is False


async def test_busy_flag_blocks_form_interaction(service):
    controller = _controller(service)
    await controller.mount()
    controller.open_create()
    controller.state.is_submitting = True

    assert controller.form.submit_label == "Saving..."
    assert await controller.form.submit() is False
    assert controller.form.cancel() is False
    assert controller.begin_edit(controller.state.records[0]) is False
    assert service.operations() == ["list"]


async def test_open_create_is_ignored_while_form_open(service):
    controller = _controller(service)
    await controller.mount()
    controller.begin_edit(controller.state.records[0])

    assert controller.open_create() is False
    assert controller.mode is DashboardMode.FORM_EDIT


async def test_unmount_discards_state_and_owned_transport(service):
    controller = _controller(service, owns_transport=True)
    await controller.mount()
    controller.open_create()

    await controller.unmount()

    assert controller.mounted is False
    assert controller.state.records == []
    assert controller.form is None
    assert service.closed is True


async def test_later_notification_supersedes_earlier(service, clock):
    controller = _controller(service, clock=clock)
    await controller.mount()
    service.failing.add("list")
    await controller.refresh()

    clock.advance(3)
    service.failing.clear()
    controller.open_create()
    await controller.submit_form(RecordPayload(name="Dan", email="dan@example.com", age=50))
    assert controller.notification.message == "User created successfully!"

    clock.advance(2.5)
    assert controller.notification.message == "User created successfully!"

    clock.advance(3)
    assert controller.notification is None
