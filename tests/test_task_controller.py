# tests/test_task_controller.py

from __future__ import annotations

import datetime as dt

import pytest

from controller.task_controller import TaskListViewModel
from core.exceptions import WriteError
from core.models import Priority, Task


def _ids(tasks) -> list[str]:
    return [t.id for t in tasks]


def test_subscribe_delivers_initial_snapshot_scoped_to_owner(store, session) -> None:
    store.records["mine"] = {"id": "mine", "title": "a", "deadline": "2025-01-01",
                             "priority": "Low", "completed": False, "owner": "u1"}
    store.records["theirs"] = {"id": "theirs", "title": "b", "deadline": "2025-01-01",
                               "priority": "Low", "completed": False, "owner": "u2"}
    vm = TaskListViewModel(store, session)

    vm.subscribe()

    assert _ids(vm.tasks) == ["mine"]
    assert store.subscriptions[0].owner_id == "u1"


def test_add_creates_one_owned_incomplete_task(vm, store) -> None:
    new_id = vm.add_task("Buy milk", "2 litres", "2025-01-01", Priority.HIGH)

    assert list(store.records) == [new_id]
    assert store.records[new_id]["owner"] == "u1"
    assert store.records[new_id]["completed"] is False

    store.push_all()
    assert vm.tasks == (Task(id=new_id, title="Buy milk", description="2 litres", deadline="2025-01-01",
                             priority=Priority.HIGH, completed=False, owner_id="u1"),)


def test_add_waits_for_next_snapshot(vm) -> None:
    vm.add_task("Buy milk")
    assert vm.tasks == ()


@pytest.mark.parametrize("title", ["", "   ", "\t\n"])
def test_add_with_blank_title_is_a_silent_noop(vm, store, title) -> None:
    assert vm.add_task(title, "desc") is None
    assert store.records == {}


def test_add_defaults_to_today_and_medium(vm, store) -> None:
    tid = vm.add_task("Stretch")
    assert store.records[tid]["deadline"] == dt.date.today().isoformat()
    assert store.records[tid]["priority"] == "Medium"


def test_add_accepts_date_objects_and_priority_names(vm, store) -> None:
    tid = vm.add_task("Dentist", deadline=dt.date(2025, 3, 4), priority="Low")
    assert store.records[tid]["deadline"] == "2025-03-04"
    assert store.records[tid]["priority"] == "Low"


def test_add_keeps_title_as_typed(vm, store) -> None:
    tid = vm.add_task("  padded  ")
    assert store.records[tid]["title"] == "  padded  "


def test_toggle_moves_task_between_partitions(vm, store) -> None:
    tid = vm.add_task("Pay rent")
    store.push_all()
    assert _ids(vm.view().incomplete) == [tid]

    vm.toggle_complete(tid, False)
    assert _ids(vm.view().incomplete) == [tid]  # no optimistic update
    store.push_all()
    assert _ids(vm.view().completed) == [tid]
    assert vm.view().incomplete == ()

    vm.toggle_complete(tid, True)
    store.push_all()
    assert _ids(vm.view().incomplete) == [tid]
    assert vm.view().completed == ()


def test_toggle_flips_the_value_the_caller_passed(vm, store) -> None:
    tid = vm.add_task("x")
    # caller's view is stale: it thinks the task is already completed
    vm.toggle_complete(tid, True)
    assert store.records[tid]["completed"] is False


def test_delete_removes_task_from_both_partitions(vm, store) -> None:
    keep = vm.add_task("keep")
    gone = vm.add_task("gone")
    vm.toggle_complete(gone, False)
    store.push_all()

    vm.delete_task(gone)
    assert gone in _ids(vm.tasks)
    store.push_all()

    view = vm.view()
    assert _ids(view.incomplete) == [keep]
    assert view.completed == ()


def test_snapshot_replaces_collection(vm) -> None:
    a = Task(id="a", title="a", description="", deadline="2025-01-01",
             priority=Priority.LOW, completed=False, owner_id="u1")
    b = Task(id="b", title="b", description="", deadline="2025-01-01",
             priority=Priority.LOW, completed=False, owner_id="u1")

    vm.apply_snapshot((a, b))
    vm.apply_snapshot((b,))

    assert vm.tasks == (b,)


def test_malformed_records_are_skipped(vm, store) -> None:
    store.records["bad"] = {"id": "bad", "title": "?", "priority": "Urgent", "owner": "u1"}
    good = vm.add_task("good")
    store.push_all()
    assert _ids(vm.tasks) == [good]


def test_listeners_get_every_snapshot(store, session) -> None:
    seen = []
    vm = TaskListViewModel(store, session)
    vm.subscribe(seen.append)
    vm.add_task("one")
    store.push_all()

    assert len(seen) == 2
    assert seen[0] == ()
    assert [t.title for t in seen[1]] == ["one"]

    vm.remove_listener(seen.append)
    store.push_all()
    assert len(seen) == 2


def test_subscribe_is_idempotent(vm, store) -> None:
    handle = vm.subscribe()
    assert handle is store.subscriptions[0]
    assert vm.subscribe() is handle
    assert len(store.subscriptions) == 1


def test_unsubscribe_is_idempotent_and_stops_snapshots(vm, store) -> None:
    handle = store.subscriptions[0]

    vm.unsubscribe()
    vm.unsubscribe()

    assert handle.close_calls == 1
    assert not vm.subscribed

    vm.add_task("late")
    store.push_all()
    assert vm.tasks == ()


def test_refresh_pulls_a_new_snapshot(vm, store) -> None:
    vm.add_task("pulled")
    vm.refresh()
    assert [t.title for t in vm.tasks] == ["pulled"]


def test_search_text_drives_view(vm, store) -> None:
    vm.add_task("Buy milk")
    vm.add_task("Pay rent", "landlord")
    store.push_all()

    vm.set_search_text("LAND")
    assert [t.title for t in vm.view().incomplete] == ["Pay rent"]

    vm.set_search_text("")
    assert len(vm.view().incomplete) == 2


def test_write_failures_propagate(vm, store) -> None:
    tid = vm.add_task("x")
    store.fail_writes = True

    with pytest.raises(WriteError):
        vm.add_task("y")
    with pytest.raises(WriteError):
        vm.toggle_complete(tid, False)
    with pytest.raises(WriteError):
        vm.delete_task(tid)


def test_end_to_end_ordering(vm, store) -> None:
    vm.add_task("Buy milk", "", "2025-01-01", Priority.HIGH)
    vm.add_task("Pay rent", "", "2025-01-05", Priority.HIGH)
    vm.add_task("Call mom", "", "2024-12-20", Priority.LOW)
    store.push_all()

    view = vm.view()

    assert [t.title for t in view.incomplete] == ["Buy milk", "Pay rent", "Call mom"]
    assert view.completed == ()
