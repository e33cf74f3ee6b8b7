from typing import Optional


class PBError(Exception):
    """A PocketBase call failed."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class AuthError(PBError):
    """Sign in / sign up / sign out failed. The message is shown to the user as is."""


class WriteError(PBError):
    """Create, update or delete of a record failed."""
