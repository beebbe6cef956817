"""
Launchpad SDK - Execution Guard

Every mutating engine call runs as one atomic unit:
  - the execution lock is taken on entry and released on every exit path
  - a nested call arriving while the lock is held is rejected, never queued
  - every journaled participant is snapshotted after the lock is taken and
    restored if anything inside the unit raises
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, List, Tuple

from .errors import ReentrantCallRejected

log = logging.getLogger(__name__)


class Journaled:
    """State that can take part in an atomic unit."""

    def snapshot(self) -> Any:
        raise NotImplementedError

    def restore(self, snapshot: Any) -> None:
        raise NotImplementedError

    def commit(self) -> None:
        """Called once the unit succeeded."""


class ExecutionLock:
    """Per-engine boolean lock. Not a mutex: contention is an error."""

    def __init__(self):
        self._held_by = ""

    @property
    def locked(self) -> bool:
        return bool(self._held_by)

    @contextmanager
    def hold(self, operation: str) -> Iterator[None]:
        if self._held_by:
            log.warning(f"Rejected reentrant {operation} during {self._held_by}")
            raise ReentrantCallRejected(
                f"{operation} called while {self._held_by} is in progress")
        self._held_by = operation
        try:
            yield
        finally:
            self._held_by = ""


class AtomicUnit:
    """
    All-or-nothing execution over a set of participants.

    Usage:
        unit = AtomicUnit(lock)
        with unit.run("buy", [registry, bank, events]):
            ...  # any exception restores every participant
    """

    def __init__(self, lock: ExecutionLock):
        self.lock = lock

    @contextmanager
    def run(self, operation: str,
            participants: Iterable[Journaled]) -> Iterator[None]:
        with self.lock.hold(operation):
            taken: List[Tuple[Journaled, Any]] = [
                (p, p.snapshot()) for p in participants
            ]
            try:
                yield
            except Exception as e:
                for participant, snap in reversed(taken):
                    participant.restore(snap)
                log.info(f"Rolled back {operation}: {e}")
                raise

        # Lock released: commit hooks may call back into the engine
        for participant, _ in taken:
            participant.commit()
