import logging
import tkinter as tk
from tkinter import ttk
from core.config import IDENTITY, TOPMOST, WINDOW_GEOMETRY
from core.models import Session
from controller.session_controller import SessionController
from controller.task_controller import TaskListViewModel
from gui.auth_screens import LoginScreen, RegisterScreen
from gui.home_screen import HomeScreen

logger = logging.getLogger(__name__)


class MainWindow(tk.Tk):
    """Hosts one screen at a time; navigating replaces the current one."""
    def __init__(self, sessions: SessionController, store):
        super().__init__()
        self.sessions = sessions
        self.store = store
        self.title("To-Do PB")
        self.geometry(WINDOW_GEOMETRY)
        self.configure(padx=8, pady=8)
        if TOPMOST:
            self.attributes("-topmost", True)

        self.screen = None
        self.show_login()

    def _replace(self, screen: ttk.Frame):
        if self.screen is not None:
            self.screen.destroy()
        self.screen = screen
        screen.pack(fill="both", expand=True)

    # ---------- navigation ----------
    def show_login(self):
        self._replace(LoginScreen(self, self.sessions, on_success=self.show_home,
                                  on_register=self.show_register, email=IDENTITY))

    def show_register(self):
        self._replace(RegisterScreen(self, self.sessions, on_success=self.show_home,
                                     on_login=self.show_login))

    def show_home(self, session: Session):
        logger.info("Opening task list for %s", session.email)
        vm = TaskListViewModel(self.store, session)
        self._replace(HomeScreen(self, vm, self.sessions, on_logout=self.show_login))
