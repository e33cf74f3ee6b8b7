# Creates/updates the `tasks` collection on a PocketBase server through the Admin API.
# Run with:  TODO_PB_ADMIN_EMAIL=... TODO_PB_ADMIN_PASSWORD=... python pb_bootstrap.py

import logging
import sys
import requests
from core.config import BASE_URL, LOG_DIR, SETTINGS, TASKS_COLLECTION
from core.logging_setup import setup_logging
from storage.pocketbase import error_message

logger = logging.getLogger("pb_bootstrap")

OWNER_RULE = "owner = @request.auth.id"


def die(msg):
    logger.error(msg)
    sys.exit(1)


class PBAdmin:
    """Just enough of the Admin API to install one collection."""

    def __init__(self, base, timeout: float = 15):
        self.base = base.rstrip('/')
        self.timeout = timeout
        self.s = requests.Session()

    def _call(self, method, path, what, **kw):
        r = self.s.request(method, f"{self.base}{path}", timeout=self.timeout, **kw)
        if not r.ok:
            die(f"[{what}] {r.status_code}: {error_message(r)}")
        return r.json()

    def admin_login(self, email, password):
        tok = self._call("POST", "/api/admins/auth-with-password", "LOGIN",
                         json={"identity": email, "password": password}).get("token")
        if not tok:
            die("[LOGIN] missing token")
        self.s.headers.update({"Authorization": f"Bearer {tok}"})
        logger.info("[OK] admin login")

    def find_collection(self, name):
        r = self.s.get(f"{self.base}/api/collections/{name}", timeout=self.timeout)
        if r.status_code == 404:
            return None
        if not r.ok:
            die(f"[GET {name}] {r.status_code}: {error_message(r)}")
        return r.json()

    def save_collection(self, payload, collection_id=None):
        """POST a new collection, or PATCH the one with `collection_id`."""
        if collection_id is None:
            return self._call("POST", "/api/collections", f"CREATE {payload['name']}", json=payload)
        return self._call("PATCH", f"/api/collections/{collection_id}", f"UPDATE {payload['name']}",
                          json=payload)


def tasks_schema(name: str = "tasks") -> dict:
    """Collection definition: one record per task, readable and writable only by its owner."""
    schema = [
        {"name": "title", "type": "text", "required": True, "options": {"min": 1, "max": 200}},
        {"name": "description", "type": "text", "required": False, "options": {"max": 5000}},
        # kept as text so the stored value stays exactly YYYY-MM-DD
        {"name": "deadline", "type": "text", "required": True,
         "options": {"pattern": r"^\d{4}-\d{2}-\d{2}$"}},
        {"name": "priority", "type": "select", "required": True,
         "options": {"maxSelect": 1, "values": ["High", "Medium", "Low"]}},
        {"name": "completed", "type": "bool", "required": False, "options": {}},
        {"name": "owner", "type": "relation", "required": True,
         "options": {"collectionId": "_pb_users_auth_", "cascadeDelete": True, "maxSelect": 1}},
    ]
    return {
        "name": name,
        "type": "base",
        "schema": schema,
        "indexes": [
            f"CREATE INDEX idx_{name}_owner ON {name} (owner)",
        ],
        "listRule": OWNER_RULE,
        "viewRule": OWNER_RULE,
        "createRule": "@request.auth.id != '' && @request.data.owner = @request.auth.id",
        "updateRule": OWNER_RULE + " && (@request.data.owner:isset = false || @request.data.owner = owner)",
        "deleteRule": OWNER_RULE,
    }


def install_tasks_collection(pb: PBAdmin, collection: dict):
    existing = pb.find_collection(collection["name"])
    if existing is None:
        logger.info("Creating collection %s", collection["name"])
        return pb.save_collection(collection)
    logger.info("Updating collection %s (%s)", existing["name"], existing["id"])
    return pb.save_collection({**collection, "id": existing["id"]}, existing["id"])


def main():
    setup_logging(log_dir=LOG_DIR)
    if not SETTINGS.admin_email or not SETTINGS.admin_password:
        die("Set TODO_PB_ADMIN_EMAIL and TODO_PB_ADMIN_PASSWORD")
    pb = PBAdmin(BASE_URL)
    pb.admin_login(SETTINGS.admin_email, SETTINGS.admin_password)

    col = install_tasks_collection(pb, tasks_schema(TASKS_COLLECTION))
    logger.info("OK: %s %s", TASKS_COLLECTION, col.get("id"))
    logger.info("Bootstrap complete.")


if __name__ == "__main__":
    main()
