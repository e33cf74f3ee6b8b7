import datetime as dt
from typing import Iterable, Optional, Tuple
from core.models import Priority, Task, TaskView

PRIORITY_COLORS = {
    Priority.HIGH: "red",
    Priority.MEDIUM: "orange",
    Priority.LOW: "green",
}


def _deadline(task: Task) -> Optional[dt.date]:
    try:
        return dt.date.fromisoformat(task.deadline[:10])
    except ValueError:
        return None


def sort_key(task: Task):
    """Priority high first, then earliest deadline. Bad deadlines go last within a priority."""
    d = _deadline(task)
    return (-task.priority.rank, d is None, d or dt.date.min)


def sort_tasks(tasks: Iterable[Task]) -> Tuple[Task, ...]:
    # Tasks equal on both keys keep their snapshot order.
    return tuple(sorted(tasks, key=sort_key))


def matches(task: Task, search_text: str) -> bool:
    needle = search_text.lower()
    return needle in task.title.lower() or needle in task.description.lower()


def filter_tasks(tasks: Iterable[Task], search_text: str = "") -> Tuple[Task, ...]:
    return tuple(t for t in tasks if matches(t, search_text))


def partition_tasks(tasks: Iterable[Task]) -> TaskView:
    tasks = tuple(tasks)
    return TaskView(
        incomplete=tuple(t for t in tasks if not t.completed),
        completed=tuple(t for t in tasks if t.completed),
    )


def derive_view(snapshot: Iterable[Task], search_text: str = "") -> TaskView:
    """Sort, then filter by search text, then split into incomplete/completed."""
    return partition_tasks(filter_tasks(sort_tasks(snapshot), search_text))


# ---------- display helpers ----------
def is_overdue(task: Task, today: Optional[dt.date] = None) -> bool:
    if task.completed:
        return False
    d = _deadline(task)
    return d is not None and d < (today or dt.date.today())


def priority_color(priority: Priority) -> str:
    return PRIORITY_COLORS[priority]


def format_task_line(task: Task) -> str:
    return f"{task.title} | {task.description} | {task.deadline} | {task.priority.value}"
