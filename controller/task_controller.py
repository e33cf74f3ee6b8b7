import datetime as dt
import logging
from typing import Any, Callable, Dict, List, Optional, Union
from core.models import Priority, Session, Snapshot, Task, TaskView
from services.task_views import derive_view

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[Snapshot], None]


class TaskListViewModel:
    """Signed-in user's tasks: holds the last live snapshot and sends writes to the store.

    Writes never touch local state. The list changes only when the next
    snapshot arrives from the live query.
    """

    def __init__(self, store, session: Session):
        self.store = store
        self.session = session
        self.search_text = ""
        self._tasks: Snapshot = ()
        self._listeners: List[SnapshotListener] = []
        self._subscription = None

    # ---- live query ----
    @property
    def tasks(self) -> Snapshot:
        return self._tasks

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None

    def add_listener(self, listener: SnapshotListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: SnapshotListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def subscribe(self, listener: Optional[SnapshotListener] = None):
        """Open the owner-scoped live query. Returns the existing handle if already open."""
        if listener is not None:
            self.add_listener(listener)
        if self._subscription is None:
            logger.info("Subscribing to tasks of %s", self.session.user_id)
            self._subscription = self.store.subscribe_tasks(self.session.user_id, self._on_records)
        return self._subscription

    def unsubscribe(self) -> None:
        sub, self._subscription = self._subscription, None
        if sub is not None:
            sub.close()
            logger.info("Live query closed")

    def refresh(self) -> None:
        """Ask the live query for a fresh snapshot (pull fallback)."""
        if self._subscription is not None:
            self._subscription.refresh()

    def _on_records(self, records: List[Dict[str, Any]]) -> None:
        tasks = []
        for r in records:
            try:
                tasks.append(Task.from_record(r))
            except (KeyError, ValueError) as e:
                logger.warning("Skipping malformed task %s: %s", r.get("id"), e)
        self.apply_snapshot(tuple(tasks))

    def apply_snapshot(self, snapshot: Snapshot) -> None:
        # last snapshot wins, no merge
        self._tasks = tuple(snapshot)
        for listener in list(self._listeners):
            listener(self._tasks)

    # ---- derived view ----
    def set_search_text(self, text: str) -> None:
        self.search_text = text or ""

    def view(self) -> TaskView:
        return derive_view(self._tasks, self.search_text)

    # ---- writes ----
    def add_task(
        self,
        title: str,
        description: str = "",
        deadline: Union[str, dt.date, None] = None,
        priority: Union[Priority, str] = Priority.MEDIUM,
    ) -> Optional[str]:
        """Create a task; returns its id. Blank titles are ignored and return None."""
        if not title or not title.strip():
            return None
        if deadline is None:
            deadline = dt.date.today()
        if isinstance(deadline, dt.date):
            deadline = deadline.isoformat()
        record = self.store.create_task(
            title=title,
            description=description or "",
            deadline=deadline,
            priority=Priority(priority).value,
            owner_id=self.session.user_id,
        )
        logger.debug("Created task %s", record.get("id"))
        return record.get("id")

    def toggle_complete(self, task_id: str, current_completed: bool) -> None:
        self.store.patch_task(task_id, completed=not current_completed)

    def delete_task(self, task_id: str) -> None:
        self.store.delete_task(task_id)
