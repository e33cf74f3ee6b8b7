import datetime as dt
import logging
import threading
import tkinter as tk
from tkinter import ttk
from typing import Callable, Optional
from core.config import SYNC_INTERVAL_MS
from core.exceptions import AuthError, WriteError
from core.models import Priority, Snapshot, Task
from controller.session_controller import SessionController
from controller.task_controller import TaskListViewModel
from gui.task_list import ScrollableTaskList
from services.task_views import format_task_line, is_overdue, priority_color

logger = logging.getLogger(__name__)

TAG_COLORS = {
    Priority.HIGH: "#DC2626",
    Priority.MEDIUM: "#F59E0B",
    Priority.LOW: "#16A34A",
}
OVERDUE_COLOR = "#B00020"


class HomeScreen(ttk.Frame):
    """Task list of the signed-in user. Opens the live query on creation, closes it on destroy."""
    def __init__(self, parent, view_model: TaskListViewModel, sessions: SessionController,
                 on_logout: Callable[[], None]):
        super().__init__(parent, padding=12)
        self.vm = view_model
        self.sessions = sessions
        self._on_logout = on_logout
        self._rt_lock = threading.Lock()
        self._rt_pending = False
        self._sync_job = None

        # Header
        header = ttk.Frame(self)
        header.pack(fill="x", pady=(0, 10))
        ttk.Label(header, text="My To-Do List", font=("TkDefaultFont", 16, "bold")).pack(side="left")
        ttk.Button(header, text="+", width=3, command=self._open_add_dialog).pack(side="right")
        self.status_var = tk.StringVar(value="Loading…")
        ttk.Label(header, textvariable=self.status_var, foreground="#777777").pack(side="right", padx=8)

        # Search
        self.search_var = tk.StringVar()
        self.search_var.trace_add("write", self._on_search)
        search = ttk.Entry(self, textvariable=self.search_var)
        search.pack(fill="x", pady=(0, 6))

        # Lists
        ttk.Label(self, text="Incomplete Tasks", font=("TkDefaultFont", 10, "bold")).pack(anchor="w", pady=(6, 2))
        self.incomplete_list = ScrollableTaskList(self, on_toggle=self._on_toggle_cb, on_delete=self._on_delete_cb)
        self.incomplete_list.pack(fill="both", expand=True)

        ttk.Label(self, text="Completed Tasks", font=("TkDefaultFont", 10, "bold")).pack(anchor="w", pady=(12, 2))
        self.completed_list = ScrollableTaskList(self, on_toggle=self._on_toggle_cb, on_delete=self._on_delete_cb)
        self.completed_list.pack(fill="both", expand=True)

        ttk.Button(self, text="Logout", command=self._on_logout_click).pack(fill="x", pady=(10, 0))

        self.bind("<F5>", lambda e: self.vm.refresh())
        self.vm.subscribe(self._on_snapshot)
        self._render()
        self._sync_job = self.after(SYNC_INTERVAL_MS, self._auto_sync)

    def destroy(self):
        if self._sync_job is not None:
            self.after_cancel(self._sync_job)
            self._sync_job = None
        self.vm.remove_listener(self._on_snapshot)
        self.vm.unsubscribe()
        super().destroy()

    # ---------- live snapshots ----------
    def _on_snapshot(self, snapshot: Snapshot):
        # arrives on the realtime thread; coalesce and hop to the Tk loop
        with self._rt_lock:
            if self._rt_pending:
                return
            self._rt_pending = True
        try:
            self.after(0, self._rt_apply)
        except (tk.TclError, RuntimeError):
            # widget already gone
            pass

    def _rt_apply(self):
        if not self.winfo_exists():
            return
        with self._rt_lock:
            self._rt_pending = False
        self._render()

    def _auto_sync(self):
        try:
            self.vm.refresh()
        finally:
            self._sync_job = self.after(SYNC_INTERVAL_MS, self._auto_sync)

    # ---------- render ----------
    def _render(self):
        view = self.vm.view()
        today = dt.date.today()
        self.incomplete_list.set_tasks([self._row(t, today) for t in view.incomplete])
        self.completed_list.set_tasks([self._row(t, today) for t in view.completed])
        self.status_var.set(f"{len(self.vm.tasks)} tasks · {dt.datetime.now().strftime('%H:%M:%S')}")

    @staticmethod
    def _row(task: Task, today: dt.date) -> dict:
        tags = [(task.priority.value, TAG_COLORS[task.priority])]
        if is_overdue(task, today):
            tags.append(("Overdue", OVERDUE_COLOR))
        return {
            "id": task.id,
            "text": format_task_line(task),
            "done": task.completed,
            "color": priority_color(task.priority),
            "tags": tags,
        }

    def _on_search(self, *_):
        self.vm.set_search_text(self.search_var.get())
        self._render()

    # ---------- row callbacks ----------
    def _on_toggle_cb(self, task_id: str, completed: bool):
        try:
            self.vm.toggle_complete(task_id, completed)
        except WriteError as e:
            logger.warning("Toggle failed for %s: %s", task_id, e)

    def _on_delete_cb(self, task_id: str):
        try:
            self.vm.delete_task(task_id)
        except WriteError as e:
            logger.warning("Delete failed for %s: %s", task_id, e)

    def _open_add_dialog(self):
        AddTaskDialog(self, on_submit=self._on_add)

    def _on_add(self, title: str, description: str, deadline: str, priority: Priority) -> bool:
        """False when the store refused the write, so the dialog keeps what was typed."""
        try:
            self.vm.add_task(title, description, deadline, priority)
        except WriteError as e:
            logger.warning("Add failed: %s", e)
            return False
        return True

    def _on_logout_click(self):
        try:
            self.sessions.sign_out()
        except AuthError as e:
            logger.error("Logout error: %s", e)
            return
        self._on_logout()


class AddTaskDialog(tk.Toplevel):
    """Modal "Add Task" form. Blank titles are ignored without a message."""
    def __init__(self, parent, on_submit: Callable[[str, str, str, Priority], bool]):
        super().__init__(parent)
        self.title("Add Task")
        self.resizable(False, False)
        self.transient(parent.winfo_toplevel())
        self._on_submit = on_submit

        body = ttk.Frame(self, padding=16)
        body.pack(fill="both", expand=True)

        ttk.Label(body, text="Title").pack(anchor="w")
        self.title_var = tk.StringVar()
        title_entry = ttk.Entry(body, textvariable=self.title_var, width=40)
        title_entry.pack(fill="x", pady=(0, 8))

        ttk.Label(body, text="Description").pack(anchor="w")
        self.description_var = tk.StringVar()
        ttk.Entry(body, textvariable=self.description_var).pack(fill="x", pady=(0, 8))

        ttk.Label(body, text="Deadline (YYYY-MM-DD)").pack(anchor="w")
        self.deadline_var = tk.StringVar(value=dt.date.today().isoformat())
        ttk.Entry(body, textvariable=self.deadline_var).pack(fill="x")
        self.deadline_error = ttk.Label(body, text="", foreground=OVERDUE_COLOR)
        self.deadline_error.pack(anchor="w", pady=(0, 8))

        prio = ttk.Frame(body)
        prio.pack(fill="x", pady=(0, 10))
        self.priority_var = tk.StringVar(value=Priority.MEDIUM.value)
        for p in Priority:
            ttk.Radiobutton(prio, text=p.value, value=p.value, variable=self.priority_var).pack(side="left", padx=(0, 10))

        ttk.Button(body, text="Add Task", command=self._submit).pack(fill="x")
        ttk.Button(body, text="Cancel", command=self.destroy).pack(fill="x", pady=(6, 0))

        self.bind("<Return>", self._submit)
        self.bind("<Escape>", lambda e: self.destroy())
        title_entry.focus_set()
        self.grab_set()

    def _deadline(self) -> Optional[str]:
        try:
            return dt.date.fromisoformat(self.deadline_var.get().strip()).isoformat()
        except ValueError:
            return None

    def _submit(self, event=None):
        title = self.title_var.get()
        if not title.strip():
            return
        deadline = self._deadline()
        if deadline is None:
            self.deadline_error.configure(text="Pick a date as YYYY-MM-DD")
            return
        self.deadline_error.configure(text="")
        if self._on_submit(title, self.description_var.get(), deadline, Priority(self.priority_var.get())):
            self.destroy()
