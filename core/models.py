from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Tuple


class Priority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    description: str
    deadline: str       # YYYY-MM-DD
    priority: Priority
    completed: bool
    owner_id: str       # user id, field "owner" in PocketBase

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Task":
        """Build a Task from a PocketBase record. Unknown priorities raise ValueError."""
        return cls(
            id=record["id"],
            title=record.get("title") or "",
            description=record.get("description") or "",
            deadline=str(record.get("deadline") or "")[:10],
            priority=Priority(record.get("priority")),
            completed=bool(record.get("completed")),
            owner_id=record.get("owner") or "",
        )


# Full result set of the live query, replaced as a whole on every push.
Snapshot = Tuple[Task, ...]


@dataclass(frozen=True)
class TaskView:
    incomplete: Tuple[Task, ...] = ()
    completed: Tuple[Task, ...] = ()


@dataclass(frozen=True)
class Session:
    """Signed-in user. Lives from a successful sign in / sign up until sign out."""
    user_id: str
    email: str
    token: str
