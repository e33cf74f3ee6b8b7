from __future__ import annotations
import json
import logging
import requests
from typing import Any, Callable, Dict, List, Optional
from core.exceptions import AuthError, PBError, WriteError
from core.models import Session
from storage.realtime import LiveQuery

logger = logging.getLogger(__name__)

USERS = "users"
PER_PAGE = 500


def pb_string(value: Any) -> str:
    """Quote a value for a PocketBase filter expression."""
    return json.dumps(str(value))


def owner_filter(user_id: str) -> str:
    return f"owner = {pb_string(user_id)}"


def error_message(r: requests.Response) -> str:
    """Message from a PocketBase error body, field errors appended."""
    try:
        data = r.json()
    except ValueError:
        return r.text or f"HTTP {r.status_code}"
    if not isinstance(data, dict):
        return r.text or f"HTTP {r.status_code}"
    msg = data.get("message") or f"HTTP {r.status_code}"
    fields = data.get("data") or {}
    details = [f"{name}: {err.get('message')}" for name, err in fields.items()
               if isinstance(err, dict) and err.get("message")]
    if details:
        msg = f"{msg} ({'; '.join(details)})"
    return msg


class PocketBaseClient:
    """Identity provider + document store, backed by the PocketBase REST API."""

    def __init__(self, base_url: str, timeout: float = 10, session: Optional[requests.Session] = None,
                 tasks_collection: str = "tasks"):
        self.base_url = base_url.rstrip("/")
        self.tasks_collection = tasks_collection
        self.timeout = timeout
        self.session = session or requests.Session()
        self.token: Optional[str] = None
        self.user_id: Optional[str] = None

    def _records_url(self, collection: str, record_id: Optional[str] = None) -> str:
        url = f"{self.base_url}/api/collections/{collection}/records"
        return f"{url}/{record_id}" if record_id else url

    # ---------- auth ----------
    def login(self, identity: str, password: str) -> Session:
        url = f"{self.base_url}/api/collections/{USERS}/auth-with-password"
        try:
            r = self.session.post(url, json={"identity": identity, "password": password}, timeout=self.timeout)
        except requests.RequestException as e:
            raise AuthError(str(e)) from e
        if not r.ok:
            raise AuthError(error_message(r), r.status_code)
        data = r.json()
        token = data.get("token")
        record = data.get("record") or {}
        if not token or not record.get("id"):
            raise AuthError("Missing token or user id in login response")
        self.token = token
        self.user_id = record["id"]
        self.session.headers.update({"Authorization": f"Bearer {self.token}"})
        logger.info("Signed in as %s", record.get("email") or identity)
        return Session(user_id=record["id"], email=record.get("email") or identity, token=token)

    def register(self, email: str, password: str) -> Session:
        """Create the account, then sign in with it."""
        payload = {"email": email, "password": password, "passwordConfirm": password}
        try:
            r = self.session.post(self._records_url(USERS), json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise AuthError(str(e)) from e
        if not r.ok:
            raise AuthError(error_message(r), r.status_code)
        logger.info("Account created for %s", email)
        return self.login(email, password)

    def logout(self) -> None:
        # PocketBase tokens are stateless; signing out drops them locally.
        self.session.headers.pop("Authorization", None)
        self.token = None
        self.user_id = None
        logger.info("Signed out")

    # ---------- records ----------
    def list_records(self, collection: str, filt: str = "", sort: Optional[str] = None) -> List[Dict[str, Any]]:
        """Every record matching `filt`, reading page after page."""
        items: List[Dict[str, Any]] = []
        page = 1
        while True:
            params: Dict[str, Any] = {"page": page, "perPage": PER_PAGE}
            if filt:
                params["filter"] = filt
            if sort:
                params["sort"] = sort
            try:
                r = self.session.get(self._records_url(collection), params=params, timeout=self.timeout)
            except requests.RequestException as e:
                raise PBError(str(e)) from e
            if not r.ok:
                raise PBError(error_message(r), r.status_code)
            data = r.json()
            items.extend(data.get("items", []))
            if page >= (data.get("totalPages") or 1):
                return items
            page += 1

    def create_record(self, collection: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        try:
            r = self.session.post(self._records_url(collection), json=fields, timeout=self.timeout)
        except requests.RequestException as e:
            raise WriteError(str(e)) from e
        if not r.ok:
            raise WriteError(f"Create failed: {r.status_code} {error_message(r)}", r.status_code)
        return r.json()

    def update_record(self, collection: str, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        try:
            r = self.session.patch(self._records_url(collection, record_id), json=fields, timeout=self.timeout)
        except requests.RequestException as e:
            raise WriteError(str(e)) from e
        if not r.ok:
            raise WriteError(f"Update failed: {r.status_code} {error_message(r)}", r.status_code)
        return r.json()

    def delete_record(self, collection: str, record_id: str) -> None:
        try:
            r = self.session.delete(self._records_url(collection, record_id), timeout=self.timeout)
        except requests.RequestException as e:
            raise WriteError(str(e)) from e
        if not r.ok:
            raise WriteError(f"Delete failed: {r.status_code} {error_message(r)}", r.status_code)

    def subscribe(self, collection: str, filt: str,
                  on_records: Callable[[List[Dict[str, Any]]], None]) -> LiveQuery:
        """Open a live query; the returned handle must be closed by the caller."""
        return LiveQuery(self, collection, filt, on_records).open()

    # ---------- tasks ----------
    def subscribe_tasks(self, owner_id: str,
                        on_records: Callable[[List[Dict[str, Any]]], None]) -> LiveQuery:
        return self.subscribe(self.tasks_collection, owner_filter(owner_id), on_records)

    def create_task(self, *, title: str, description: str, deadline: str,
                    priority: str, owner_id: str) -> Dict[str, Any]:
        payload = {
            "title": title,
            "description": description,
            "deadline": deadline,
            "priority": priority,
            "completed": False,
            "owner": owner_id,
        }
        return self.create_record(self.tasks_collection, payload)

    def patch_task(self, task_id: str, **fields) -> Dict[str, Any]:
        return self.update_record(self.tasks_collection, task_id, fields)

    def delete_task(self, task_id: str) -> None:
        self.delete_record(self.tasks_collection, task_id)
