"""
Scrollable Task List widget for Tkinter
--------------------------------------
Renders each task as its own row (a Frame) inside a scrollable Canvas, with:
- a Checkbutton that toggles completion
- the task line ("title | description | deadline | priority") in the priority colour
- optional coloured tags (labels)
- a delete button

The widget is view-only state. Toggle/delete go out through callbacks
(on_toggle gets the task id and its last known `done` value); the rows
change only when `set_tasks()` is called with the next snapshot.
"""
from __future__ import annotations
from typing import Callable, Dict, List, Optional, Tuple
import tkinter as tk
from tkinter import font as tkfont
from tkinter import ttk


class TaskRow(ttk.Frame):
    """A single task row with checkbox, text, coloured tags and a delete button."""
    def __init__(
        self,
        master,
        task_id: str,
        text: str,
        done: bool = False,
        color: Optional[str] = None,
        tags: Optional[List[Tuple[str, str]]] = None,  # [(label, hex_color)]
        on_toggle: Optional[Callable[[str, bool], None]] = None,
        on_delete: Optional[Callable[[str], None]] = None,
        wrap: int = 400,
    ):
        super().__init__(master)
        self.task_id = task_id
        self._on_toggle = on_toggle
        self._on_delete = on_delete
        self.var = tk.BooleanVar(value=done)

        self.columnconfigure(1, weight=1)

        self.chk = ttk.Checkbutton(self, variable=self.var, command=self._toggle)
        self.chk.grid(row=0, column=0, padx=(8, 6), pady=4, sticky="w")

        self.lbl = tk.Label(self, text=text, wraplength=wrap, anchor="w", justify="left",
                            fg=color or "black")
        self.lbl.grid(row=0, column=1, sticky="we")

        self.tag_container = ttk.Frame(self)
        self.tag_container.grid(row=1, column=1, sticky="w", pady=(2, 4))

        self.del_btn = ttk.Button(self, text="✕", width=2, command=self._delete)
        self.del_btn.grid(row=0, column=2, padx=(6, 8))

        self._render_tags(tags or [])
        self._apply_done_style(done)

    # --- Internals ---
    def _render_tags(self, tags: List[Tuple[str, str]]):
        for label, color in tags:
            tag = tk.Label(
                self.tag_container,
                text=label,
                bg=color,
                fg=_ideal_text_color(color),
                padx=4,
                pady=2,
                borderwidth=0,
                relief="flat",
            )
            tag.pack(side="left", padx=(0, 6))

    def _apply_done_style(self, done: bool):
        f = tkfont.nametofont("TkDefaultFont").copy()
        f.configure(overstrike=1 if done else 0)
        self.lbl.configure(font=f)
        self._font = f  # Tk only keeps a name; hold the object

    def _toggle(self):
        # the click is only a request: show the last known state until the next snapshot
        current = not bool(self.var.get())
        self.var.set(current)
        if self._on_toggle:
            self._on_toggle(self.task_id, current)

    def _delete(self):
        if self._on_delete:
            self._on_delete(self.task_id)


class ScrollableTaskList(ttk.Frame):
    """Canvas + interior Frame pattern with mousewheel support."""
    def __init__(
        self,
        master,
        on_toggle: Optional[Callable[[str, bool], None]] = None,
        on_delete: Optional[Callable[[str], None]] = None,
        row_wrap: int = 400,
        row_padding: Tuple[int, int] = (2, 2),
        **kwargs,
    ):
        super().__init__(master, **kwargs)
        self._on_toggle = on_toggle
        self._on_delete = on_delete
        self._row_wrap = row_wrap
        self._row_padding = row_padding
        self._rows: Dict[str, TaskRow] = {}

        self.canvas = tk.Canvas(self, highlightthickness=0, height=160)
        self.vbar = ttk.Scrollbar(self, orient="vertical", command=self.canvas.yview)
        self.canvas.configure(yscrollcommand=self.vbar.set)

        self.canvas.grid(row=0, column=0, sticky="nsew")
        self.vbar.grid(row=0, column=1, sticky="ns")
        self.rowconfigure(0, weight=1)
        self.columnconfigure(0, weight=1)

        self.interior = ttk.Frame(self.canvas)
        self._win_id = self.canvas.create_window(0, 0, window=self.interior, anchor="nw")

        self.interior.bind("<Configure>", self._on_interior_configure)
        self.canvas.bind("<Configure>", self._on_canvas_configure)

        # wheel scrolls whichever list is under the pointer
        self.bind("<Enter>", self._bind_mousewheel)
        self.bind("<Leave>", self._unbind_mousewheel)

    # --- Public API ---
    def set_tasks(self, tasks: List[Dict]):
        """Replace all rows. Each task dict: {
            'id': str,
            'text': str,
            'done': bool,
            'color': str,
            'tags': List[Tuple[label, color]]
        }
        """
        for row in list(self._rows.values()):
            row.destroy()
        self._rows.clear()

        for task in tasks:
            self.insert_task(
                task_id=task["id"],
                text=task.get("text", ""),
                done=task.get("done", False),
                color=task.get("color"),
                tags=task.get("tags", []),
            )

        self._repack_rows()

    def insert_task(self, task_id: str, text: str, done: bool = False, color: Optional[str] = None,
                    tags: Optional[List[Tuple[str, str]]] = None):
        if task_id in self._rows:
            return
        row = TaskRow(
            self.interior,
            task_id=task_id,
            text=text,
            done=done,
            color=color,
            tags=tags or [],
            on_toggle=self._on_toggle,
            on_delete=self._on_delete,
            wrap=self._row_wrap,
        )
        self._rows[task_id] = row
        row.grid(sticky="we", padx=(8, 8), pady=self._row_padding)
        self.interior.columnconfigure(0, weight=1)

    # --- Internals ---
    def _repack_rows(self):
        for i, row in enumerate(self._rows.values()):
            row.grid_configure(row=i)
        self._update_scrollregion()

    def _update_scrollregion(self):
        self.update_idletasks()
        self.canvas.configure(scrollregion=self.canvas.bbox("all"))

    def _on_interior_configure(self, _):
        self.canvas.configure(scrollregion=self.canvas.bbox("all"))

    def _on_canvas_configure(self, event):
        self.canvas.itemconfigure(self._win_id, width=event.width)
        for row in self._rows.values():
            row.lbl.configure(wraplength=max(event.width - 120, 100))

    def _bind_mousewheel(self, _=None):
        self.bind_all("<MouseWheel>", self._on_mousewheel_windows_mac)
        self.bind_all("<Button-4>", self._on_mousewheel_linux)
        self.bind_all("<Button-5>", self._on_mousewheel_linux)

    def _unbind_mousewheel(self, _=None):
        self.unbind_all("<MouseWheel>")
        self.unbind_all("<Button-4>")
        self.unbind_all("<Button-5>")

    def _on_mousewheel_windows_mac(self, event):
        # Windows: +/-120 per notch; macOS reports smaller deltas
        delta = int(-1 * (event.delta / 120)) or (-1 if event.delta > 0 else 1)
        self.canvas.yview_scroll(delta, "units")

    def _on_mousewheel_linux(self, event):
        if event.num == 4:
            self.canvas.yview_scroll(-1, "units")
        elif event.num == 5:
            self.canvas.yview_scroll(1, "units")


def _ideal_text_color(bg_hex: str) -> str:
    """Return black or white depending on background brightness."""
    bg_hex = bg_hex.strip().lstrip('#')
    if len(bg_hex) == 3:
        bg_hex = ''.join(c*2 for c in bg_hex)
    try:
        r = int(bg_hex[0:2], 16)
        g = int(bg_hex[2:4], 16)
        b = int(bg_hex[4:6], 16)
    except ValueError:
        return "black"
    luminance = 0.299*r + 0.587*g + 0.114*b
    return "black" if luminance > 186 else "white"
