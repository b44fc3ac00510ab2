"""
RESPONSIBILITIES
- Own the in-memory dispatch snapshot (ordered records + last mutation time).
- Replace it wholesale from spreadsheet rows, confirm records by id, and
  mirror every mutation to the durable slot before it becomes visible.
PROCESS OVERVIEW
1. restore() reads the slot on startup; missing or corrupt data yields an empty snapshot.
2. load()/load_file() map spreadsheet rows into pending records and persist the new snapshot.
3. confirm() marks every record carrying the id as confirmed and persists.
4. _commit() writes the slot first and only then swaps the in-memory snapshot.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Mapping

from dispatchboard_io.excel_reader import read_rows
from dispatchboard_io.mapping import ColumnMapping
from dispatchboard_io.schema import (
    STATUS_CONFIRMED,
    STATUS_OVERDUE,
    STATUS_PENDING,
    DispatchRecord,
    DispatchState,
    utcnow,
)
from dispatchboard_persist.stores.base_store import DurableSlot, StoreError, StoreValidationError
from dispatchboard_persist.utils.log import get_logger

Clock = Callable[[], datetime]


def encode_state(state: DispatchState) -> str:
    return json.dumps(state.to_dict(), ensure_ascii=False, indent=2)


def decode_state(payload: str) -> DispatchState:
    """Parse a stored snapshot, normalizing derived-only values.

    Raises:
        StoreValidationError: When the payload is not a valid snapshot.
    """

    try:
        data = json.loads(payload)
        if not isinstance(data, Mapping):
            raise ValueError("snapshot must be a JSON object")
        state = DispatchState.from_dict(data)
    except (ValueError, TypeError) as exc:
        raise StoreValidationError(f"Invalid stored dispatch state: {exc}") from exc

    records: list[DispatchRecord] = []
    for record in state.records:
        if record.status == STATUS_OVERDUE:
            # overdue is a display label only; older snapshots may still carry it
            record.status = STATUS_PENDING
        if record.status == STATUS_CONFIRMED and record.confirmed_at is None:
            record.confirmed_at = state.last_updated
        elif record.status != STATUS_CONFIRMED:
            record.confirmed_at = None
        records.append(record)
    state.records = records
    return state


class DispatchStore:
    """Dispatch snapshot backed by a durable slot."""

    def __init__(
        self,
        slot: DurableSlot,
        *,
        mapping: ColumnMapping | None = None,
        clock: Clock = utcnow,
        logger: logging.Logger | None = None,
    ) -> None:
        self.slot = slot
        self.mapping = mapping or ColumnMapping()
        self._clock = clock
        self.logger = logger or get_logger("dispatch_store")
        self._state = DispatchState(records=[], last_updated=clock())

    @property
    def state(self) -> DispatchState:
        return self._state

    @property
    def records(self) -> tuple[DispatchRecord, ...]:
        return tuple(self._state.records)

    @property
    def last_updated(self) -> datetime:
        return self._state.last_updated

    def restore(self) -> DispatchState:
        """Adopt the stored snapshot, or start empty when there is none."""

        try:
            payload = self.slot.read()
        except StoreError as exc:
            self.logger.warning("Dispatch slot unavailable, starting empty: %s", exc)
            payload = None
        else:
            if payload is None:
                self.logger.info("No stored dispatch state at %s", self.slot.location)

        state = DispatchState(records=[], last_updated=self._clock())
        if payload is not None:
            try:
                state = decode_state(payload)
            except StoreValidationError as exc:
                self.logger.warning("Discarding unreadable dispatch state: %s", exc)
            else:
                self.logger.info(
                    "Restored %d dispatch records (last updated %s)",
                    len(state.records),
                    state.last_updated.isoformat(),
                )
        self._state = state
        return state

    def load(self, rows: Iterable[Mapping[str, object]]) -> DispatchState:
        """Replace all records with the mapped *rows* and persist."""

        records = self.mapping.map_rows(rows)
        state = DispatchState(records=records, last_updated=self._clock())
        self._commit(state)
        self.logger.info("Loaded %d dispatch records", len(records))
        return state

    def load_file(self, path: Path, sheet: str | int = 0) -> DispatchState:
        return self.load(read_rows(Path(path), sheet=sheet))

    def confirm(self, record_id: str) -> int:
        """Confirm every record whose id equals *record_id*.

        Returns:
            Number of records updated. Duplicated ids are all confirmed.
        """

        now = self._clock()
        matched = 0
        records: list[DispatchRecord] = []
        for record in self._state.records:
            if record.id == record_id:
                records.append(record.confirmed(now))
                matched += 1
            else:
                records.append(record)
        self._commit(DispatchState(records=records, last_updated=now))
        if matched == 0:
            self.logger.warning("No dispatch record with id %r to confirm", record_id)
        elif matched > 1:
            self.logger.warning("Confirmed %d records sharing id %r", matched, record_id)
        else:
            self.logger.info("Confirmed dispatch record %r", record_id)
        return matched

    def _commit(self, state: DispatchState) -> None:
        self.slot.write(encode_state(state))
        self._state = state
