from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Protocol

from dispatchboard.services.alerts import AlertTrigger
from dispatchboard.services.status import APPROACHING_SECONDS, StatusView, classify_all, overdue_in
from dispatchboard_io.schema import DispatchRecord
from dispatchboard_persist.stores.dispatch_store import DispatchStore


def local_now() -> datetime:
    return datetime.now().astimezone()


@dataclass(frozen=True)
class BoardRow:
    record: DispatchRecord
    view: StatusView


@dataclass(frozen=True)
class BoardSnapshot:
    """Result of one polling tick."""

    now: datetime
    rows: tuple[BoardRow, ...]
    overdue: frozenset[str]
    alarming: bool


SnapshotListener = Callable[[BoardSnapshot], None]


class Scheduler(Protocol):
    """Deferred-call primitive of the hosting event loop."""

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> Any:  # pragma: no cover - interface definition
        ...

    def cancel(self, handle: Any) -> None:  # pragma: no cover - interface definition
        ...


class DispatchPoller:
    """Owns the 1 Hz tick: classify every record, then drive the alert trigger.

    The poller is started against the hosting context's scheduler and must be
    stopped when that context is torn down.
    """

    def __init__(
        self,
        store: DispatchStore,
        trigger: AlertTrigger,
        *,
        interval_ms: int = 1000,
        approaching_seconds: int = APPROACHING_SECONDS,
        clock: Callable[[], datetime] = local_now,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.trigger = trigger
        self.interval_ms = interval_ms
        self.approaching_seconds = approaching_seconds
        self.clock = clock
        self.logger = logger or logging.getLogger("dispatchboard.poller")
        self._listeners: list[SnapshotListener] = []
        self._scheduler: Scheduler | None = None
        self._handle: Any = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None

    def add_listener(self, listener: SnapshotListener) -> None:
        self._listeners.append(listener)

    def snapshot(self, now: datetime | None = None) -> BoardSnapshot:
        """Classify the store's records without touching the alert trigger."""

        current = now or self.clock()
        classified = classify_all(self.store.records, current, approaching_seconds=self.approaching_seconds)
        rows = tuple(BoardRow(record, view) for record, view in classified)
        overdue = overdue_in(classified)
        return BoardSnapshot(now=current, rows=rows, overdue=overdue, alarming=False)

    def tick(self, now: datetime | None = None) -> BoardSnapshot:
        snapshot = self.snapshot(now)
        alarming = self.trigger.update(snapshot.overdue)
        snapshot = BoardSnapshot(now=snapshot.now, rows=snapshot.rows, overdue=snapshot.overdue, alarming=alarming)
        for listener in self._listeners:
            listener(snapshot)
        return snapshot

    def start(self, scheduler: Scheduler) -> None:
        if self._scheduler is not None:
            return
        self._scheduler = scheduler
        self.logger.info("Dispatch poller started (every %d ms)", self.interval_ms)
        self._on_timer()

    def _on_timer(self) -> None:
        if self._scheduler is None:
            return
        self._handle = self._scheduler.call_later(self.interval_ms, self._on_timer)
        self.tick()

    def stop(self) -> None:
        if self._scheduler is None:
            return
        if self._handle is not None:
            self._scheduler.cancel(self._handle)
        self._handle = None
        self._scheduler = None
        self.trigger.update(())
        self.logger.info("Dispatch poller stopped")
