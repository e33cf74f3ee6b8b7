# tests/test_home_screen.py

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

pytest.importorskip("tkinter")

from core.models import Priority  # noqa: E402
from gui.home_screen import AddTaskDialog, HomeScreen  # noqa: E402


def _var(value: str) -> MagicMock:
    v = MagicMock()
    v.get.return_value = value
    return v


def _dialog(on_submit, title: str = "Buy milk") -> SimpleNamespace:
    """Just the fields `AddTaskDialog._submit` reads; no Tk root needed."""
    return SimpleNamespace(
        title_var=_var(title),
        description_var=_var("2 litres"),
        priority_var=_var("High"),
        deadline_error=MagicMock(),
        _deadline=lambda: "2025-01-01",
        _on_submit=on_submit,
        destroy=MagicMock(),
    )


def test_add_reports_success(vm, store) -> None:
    screen = SimpleNamespace(vm=vm)

    assert HomeScreen._on_add(screen, "Buy milk", "", "2025-01-01", Priority.HIGH) is True
    assert [r["title"] for r in store.records.values()] == ["Buy milk"]


def test_add_reports_refused_write(vm, store) -> None:
    store.fail_writes = True
    screen = SimpleNamespace(vm=vm)

    assert HomeScreen._on_add(screen, "Buy milk", "", "2025-01-01", Priority.HIGH) is False
    assert store.records == {}


def test_dialog_closes_after_successful_add() -> None:
    on_submit = MagicMock(return_value=True)
    dialog = _dialog(on_submit)

    AddTaskDialog._submit(dialog)

    on_submit.assert_called_once_with("Buy milk", "2 litres", "2025-01-01", Priority.HIGH)
    dialog.destroy.assert_called_once_with()


def test_dialog_keeps_input_when_add_fails() -> None:
    dialog = _dialog(MagicMock(return_value=False))

    AddTaskDialog._submit(dialog)

    dialog.destroy.assert_not_called()
    dialog.title_var.set.assert_not_called()


def test_dialog_ignores_blank_title() -> None:
    on_submit = MagicMock()
    dialog = _dialog(on_submit, title="   ")

    AddTaskDialog._submit(dialog)

    on_submit.assert_not_called()
    dialog.destroy.assert_not_called()
