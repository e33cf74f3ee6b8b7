"""
Live query over the PocketBase realtime channel.

A LiveQuery pushes the *full* current result set of (collection, filter) to
its callback: once when opened, then again every time the realtime stream
reports a change. The stream only tells us *that* something changed; the
records themselves are always re-read through the REST API, so every push is
a complete snapshot and the consumer never merges anything.

PocketBase realtime is Server-Sent Events:
  GET  /api/realtime                 -> stream, first event PB_CONNECT {"clientId"}
  POST /api/realtime {clientId, subscriptions: ["<collection>/*"]}
after which every record change arrives as an event named after the topic.

The stream is read on a daemon thread; callbacks fire on that thread (or on
the caller's thread for `refresh()`). GUI code has to hop back to its own
loop before touching widgets.
"""
from __future__ import annotations
import json
import logging
import threading
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union

import requests

from core.exceptions import PBError

logger = logging.getLogger(__name__)

Records = List[Dict[str, Any]]

REALTIME_PATH = "/api/realtime"
CONNECT_EVENT = "PB_CONNECT"
RECONNECT_DELAY = 5.0


def iter_sse(lines: Iterable[Union[str, bytes]]) -> Iterator[Tuple[str, str]]:
    """Group raw event-stream lines into (event, data) pairs. A blank line ends an event."""
    event, data = "message", []
    for line in lines:
        if isinstance(line, bytes):
            line = line.decode("utf-8", "replace")
        if not line:
            if data:
                yield event, "\n".join(data)
            event, data = "message", []
            continue
        if line.startswith(":"):
            continue
        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if name == "event":
            event = value
        elif name == "data":
            data.append(value)


class LiveQuery:
    """Cancellable subscription handle. The consumer owns it and must `close()` it."""

    def __init__(
        self,
        client,
        collection: str,
        filt: str,
        on_records: Callable[[Records], None],
        http: Optional[requests.Session] = None,
        reconnect_delay: float = RECONNECT_DELAY,
    ):
        self.client = client
        self.collection = collection
        self.filter = filt
        self.reconnect_delay = reconnect_delay
        self._on_records = on_records
        self._http = http if http is not None else requests.Session()
        # guards state only; never held while calling out
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._stream = None
        self._thread: Optional[threading.Thread] = None
        self._seq = 0
        self._delivered = 0
        self.client_id: Optional[str] = None
        self.last_records: Optional[Records] = None

    @property
    def closed(self) -> bool:
        return self._stop.is_set()

    @property
    def realtime_url(self) -> str:
        return self.client.base_url.rstrip("/") + REALTIME_PATH

    @property
    def topic(self) -> str:
        return f"{self.collection}/*"

    # ---------- lifecycle ----------
    def open(self) -> "LiveQuery":
        self.refresh()
        with self._lock:
            if self.closed or self._thread is not None:
                return self
            self._thread = threading.Thread(target=self._run, name=f"live-{self.collection}", daemon=True)
            self._thread.start()
        return self

    def close(self) -> None:
        """Release the stream. Safe to call more than once; no push happens afterwards."""
        with self._lock:
            if self._stop.is_set():
                return
            self._stop.set()
            stream, self._stream = self._stream, None
        if stream is not None:
            stream.close()
        logger.debug("[realtime] %s closed", self.collection)

    def __enter__(self) -> "LiveQuery":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ---------- snapshots ----------
    def refresh(self) -> Optional[Records]:
        """Re-read the whole result set and push it. Returns None if closed, stale or the read failed."""
        with self._lock:
            if self.closed:
                return None
            self._seq += 1
            seq = self._seq
        try:
            records = self.client.list_records(self.collection, self.filter)
        except PBError as e:
            logger.warning("[realtime] could not read %s: %s", self.collection, e)
            return None
        with self._lock:
            # a slower, older read must not replace a newer snapshot
            if self.closed or seq < self._delivered:
                return None
            self._delivered = seq
            self.last_records = records
        self._on_records(list(records))
        return records

    # ---------- event stream ----------
    def _run(self) -> None:
        while not self.closed:
            try:
                self._listen()
            except (requests.RequestException, OSError, ValueError) as e:
                if self.closed:
                    break
                logger.warning("[realtime] stream for %s dropped (%s); retrying in %.0fs",
                               self.collection, e, self.reconnect_delay)
            if self._stop.wait(self.reconnect_delay):
                break

    def _listen(self) -> None:
        """One connection: read events until the server ends the stream or we are closed."""
        resp = self._http.get(self.realtime_url, stream=True, headers={"Accept": "text/event-stream"},
                              timeout=(self.client.timeout, None))
        with self._lock:
            if self.closed:
                resp.close()
                return
            self._stream = resp
        try:
            resp.raise_for_status()
            resp.encoding = "utf-8"
            for event, data in iter_sse(resp.iter_lines(chunk_size=1, decode_unicode=True)):
                if self.closed:
                    return
                self._dispatch(event, data)
        finally:
            with self._lock:
                if self._stream is resp:
                    self._stream = None
            resp.close()

    def _dispatch(self, event: str, data: str) -> None:
        if event == CONNECT_EVENT:
            self.client_id = json.loads(data).get("clientId")
            self._subscribe()
            # anything that changed between the first read and the subscription
            self.refresh()
        else:
            logger.debug("[realtime] %s on %s", event, self.collection)
            self.refresh()

    def _subscribe(self) -> None:
        headers = {}
        if self.client.token:
            headers["Authorization"] = f"Bearer {self.client.token}"
        r = self._http.post(self.realtime_url, json={"clientId": self.client_id, "subscriptions": [self.topic]},
                            headers=headers, timeout=self.client.timeout)
        r.raise_for_status()
        logger.info("[realtime] subscribed to %s", self.topic)
