from typing import Optional
from core.models import Session


class SessionController:
    """Owns the current Session: created on sign in / sign up, dropped on sign out."""

    def __init__(self, identity):
        self.identity = identity
        self._session: Optional[Session] = None

    @property
    def session(self) -> Optional[Session]:
        return self._session

    def sign_in(self, email: str, password: str) -> Session:
        self._session = self.identity.login(email, password)
        return self._session

    def sign_up(self, email: str, password: str) -> Session:
        self._session = self.identity.register(email, password)
        return self._session

    def sign_out(self) -> None:
        """On failure the session is kept and the error propagates."""
        self.identity.logout()
        self._session = None
