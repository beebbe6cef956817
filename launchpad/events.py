"""
Launchpad SDK - Event Log

Append-only notification stream. Events emitted inside an atomic unit are
held back and only published (appended + delivered to subscribers) when the
unit commits; a rolled-back unit leaves no trace.

Nothing in the engine reads this log.
"""

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .guard import Journaled

log = logging.getLogger(__name__)

LAUNCH_CREATED = "launch_created"
TRADED = "traded"
COMPLETED = "completed"
UNLOCKED = "unlocked"
RESERVE_WITHDRAWN = "reserve_withdrawn"
RESERVE_APPROVED = "reserve_approved"
LIQUIDITY_ADDED = "liquidity_added"
AUTHORITY_TRANSFERRED = "authority_transferred"


@dataclass
class Event:
    kind: str
    data: Dict[str, Any]
    seq: int = 0
    ts: int = field(default_factory=lambda: int(time.time()))

    def to_dict(self) -> dict:
        return {"seq": self.seq, "kind": self.kind, "ts": self.ts, **self.data}


class EventLog(Journaled):
    """
    Usage:
        events = EventLog()
        events.subscribe(lambda ev: print(ev.kind))
        events.emit(TRADED, asset_id="0x..", ...)   # pending
        events.commit()                             # appended + delivered
        events.list(kind=TRADED)
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self.entries: List[Event] = []
        self._pending: List[Event] = []
        self._subscribers: List[Callable[[Event], None]] = []

    # ── Journaled ──────────────────────────────────────────────────────────

    def snapshot(self):
        return len(self._pending)

    def restore(self, snapshot) -> None:
        del self._pending[snapshot:]

    def commit(self) -> None:
        published, self._pending = self._pending, []
        for event in published:
            event.seq = len(self.entries)
            self.entries.append(event)
        for event in published:
            for callback in list(self._subscribers):
                try:
                    callback(event)
                except Exception as e:
                    log.error(f"Event subscriber failed on {event.kind}: {e}")

    # ── API ────────────────────────────────────────────────────────────────

    def emit(self, kind: str, **data) -> Event:
        event = Event(kind=kind, data=data, ts=int(self.clock()))
        self._pending.append(event)
        return event

    def subscribe(self, callback: Callable[[Event], None]) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[Event], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def list(self, kind: str = "", asset_id: str = "",
             since: int = 0) -> List[Event]:
        """
        Published events with optional filtering.

        Args:
            kind: Filter by event kind
            asset_id: Filter by asset
            since: Only events with seq >= since
        """
        result = []
        for event in self.entries[since:]:
            if kind and event.kind != kind:
                continue
            if asset_id and event.data.get("asset_id") != asset_id:
                continue
            result.append(event)
        return result

    def last(self, kind: str = "") -> Optional[Event]:
        matching = self.list(kind=kind)
        return matching[-1] if matching else None

    def export(self, kind: str = "", asset_id: str = "") -> str:
        """Export published events as JSON (amounts as decimal strings)."""
        return json.dumps({
            "version": "1.0",
            "timestamp": int(self.clock()),
            "events": [_stringify(e.to_dict())
                       for e in self.list(kind=kind, asset_id=asset_id)],
        }, indent=2)


def _stringify(data: dict) -> dict:
    return {k: str(v) if isinstance(v, int) and not isinstance(v, bool) else v
            for k, v in data.items()}
