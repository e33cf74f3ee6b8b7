# tests/conftest.py

from __future__ import annotations

import pytest

from controller.task_controller import TaskListViewModel
from core.models import Session

from .fakes import FakeIdentity, FakeTaskStore


@pytest.fixture()
def session() -> Session:
    return Session(user_id="u1", email="ana@example.com", token="tok")


@pytest.fixture()
def store() -> FakeTaskStore:
    return FakeTaskStore()


@pytest.fixture()
def identity() -> FakeIdentity:
    return FakeIdentity()


@pytest.fixture()
def vm(store: FakeTaskStore, session: Session) -> TaskListViewModel:
    """View-model already subscribed to the fake store."""
    model = TaskListViewModel(store, session)
    model.subscribe()
    return model
