import logging
import tkinter as tk
from tkinter import ttk, messagebox as mb
from core.exceptions import AuthError
from controller.session_controller import SessionController

logger = logging.getLogger(__name__)


class _CredentialsForm(ttk.Frame):
    """Email + password entries shared by the login and register screens."""
    def __init__(self, parent, title: str, subtitle: str, email: str = ""):
        super().__init__(parent, padding=25)
        ttk.Label(self, text=title, font=("TkDefaultFont", 18, "bold")).pack(pady=(0, 6))
        ttk.Label(self, text=subtitle, foreground="#555555").pack(pady=(0, 18))

        ttk.Label(self, text="Email").pack(anchor="w")
        self.email_var = tk.StringVar(value=email)
        self.email_entry = ttk.Entry(self, textvariable=self.email_var)
        self.email_entry.pack(fill="x", pady=(0, 10))

        ttk.Label(self, text="Password").pack(anchor="w")
        self.password_var = tk.StringVar()
        self.password_entry = ttk.Entry(self, textvariable=self.password_var, show="•")
        self.password_entry.pack(fill="x", pady=(0, 16))

        self.email_entry.focus_set()


class LoginScreen(_CredentialsForm):
    def __init__(self, parent, sessions: SessionController, on_success, on_register, email: str = ""):
        super().__init__(parent, "Welcome to To-Do App", "Please login to continue", email)
        self.sessions = sessions
        self._on_success = on_success

        self.login_btn = ttk.Button(self, text="Login", command=self._on_login)
        self.login_btn.pack(fill="x", pady=(0, 10))
        ttk.Button(self, text="Go to Register", command=on_register).pack(fill="x")
        self.password_entry.bind("<Return>", self._on_login)

    def _on_login(self, event=None):
        email = self.email_var.get()
        password = self.password_var.get()
        if not email.strip() or not password.strip():
            mb.showerror("Error", "Please enter both email and password.", parent=self)
            return
        self.login_btn.configure(state="disabled", text="Signing in…")
        self.update_idletasks()
        try:
            session = self.sessions.sign_in(email.strip(), password)
        except AuthError as e:
            logger.info("Login failed: %s", e)
            mb.showerror("Login Error", e.message, parent=self)
            return
        finally:
            if self.winfo_exists():
                self.login_btn.configure(state="normal", text="Login")
        self._on_success(session)


class RegisterScreen(_CredentialsForm):
    def __init__(self, parent, sessions: SessionController, on_success, on_login):
        super().__init__(parent, "Create Account", "Register to get started")
        self.sessions = sessions
        self._on_success = on_success

        ttk.Button(self, text="Register", command=self._on_register).pack(fill="x", pady=(0, 10))
        ttk.Button(self, text="Go to Login", command=on_login).pack(fill="x")
        self.password_entry.bind("<Return>", self._on_register)

    def _on_register(self, event=None):
        try:
            session = self.sessions.sign_up(self.email_var.get(), self.password_var.get())
        except AuthError as e:
            logger.info("Registration failed: %s", e)
            mb.showerror("Registration Error", e.message, parent=self)
            return
        mb.showinfo("Success", "Account created successfully!", parent=self)
        self._on_success(session)
