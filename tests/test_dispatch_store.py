from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest

from dispatchboard_io.schema import DispatchState
from dispatchboard_persist.stores.base_store import StorePersistError
from dispatchboard_persist.stores.dispatch_store import DispatchStore, decode_state
from dispatchboard_persist.stores.json_slot import JsonFileSlot


ROWS = [
    {"時間": "14:00", "編號": "R1", "搭乘人數": "2", "駕駛姓名": "王小明"},
    {"時間": "15:30", "編號": "R2", "搭乘人數": "1", "行李件數": "2"},
]


class BrokenSlot:
    location = "broken://slot"

    def read(self) -> str | None:
        return None

    def write(self, payload: str) -> None:
        raise StorePersistError("disk full")


class UnreadableSlot:
    location = "unreadable://slot"

    def __init__(self) -> None:
        self.writes: list[str] = []

    def read(self) -> str | None:
        raise StorePersistError("permission denied")

    def write(self, payload: str) -> None:
        self.writes.append(payload)


def _store(tmp_path: Path, clock) -> DispatchStore:
    return DispatchStore(JsonFileSlot(tmp_path / "store" / "dispatchData.json"), clock=clock)


def test_load_replaces_records_and_persists(tmp_path: Path, clock) -> None:
    store = _store(tmp_path, clock)

    state = store.load(ROWS)

    assert [record.id for record in state.records] == ["R1", "R2"]
    assert state.last_updated == clock.now
    payload = json.loads((tmp_path / "store" / "dispatchData.json").read_text(encoding="utf-8"))
    assert [item["id"] for item in payload["records"]] == ["R1", "R2"]
    assert payload["records"][0]["driverName"] == "王小明"
    assert payload["records"][1]["luggage"] == 2
    assert "confirmedAt" not in payload["records"][0]

    clock.advance(minutes=5)
    store.load([{"時間": "18:00", "編號": "R3"}])
    assert [record.id for record in store.records] == ["R3"]


def test_restore_round_trips_loaded_state(tmp_path: Path, clock) -> None:
    store = _store(tmp_path, clock)
    loaded = store.load(ROWS)
    clock.advance(minutes=1)
    store.confirm("R2")
    expected = store.state

    restored = _store(tmp_path, clock).restore()

    assert restored == expected
    assert loaded.records[0] == restored.records[0]


def test_confirm_sets_status_and_timestamp(tmp_path: Path, clock) -> None:
    store = _store(tmp_path, clock)
    store.load(ROWS)
    confirmed_at = clock.advance(minutes=10)

    matched = store.confirm("R1")

    assert matched == 1
    first, second = store.records
    assert first.status == "confirmed"
    assert first.confirmed_at == confirmed_at
    assert second.status == "pending"
    assert second.confirmed_at is None
    assert store.last_updated == confirmed_at


def test_confirm_is_idempotent_and_keeps_latest_timestamp(tmp_path: Path, clock) -> None:
    store = _store(tmp_path, clock)
    store.load(ROWS)
    clock.advance(minutes=1)
    store.confirm("R1")
    latest = clock.advance(minutes=1)

    store.confirm("R1")

    record = store.records[0]
    assert record.status == "confirmed"
    assert record.confirmed_at == latest


def test_confirm_updates_every_duplicate(tmp_path: Path, clock) -> None:
    store = _store(tmp_path, clock)
    store.load([{"時間": "14:00", "編號": "R1"}, {"時間": "15:00", "編號": "R1"}, {"編號": "R2"}])

    matched = store.confirm("R1")

    assert matched == 2
    assert [record.status for record in store.records] == ["confirmed", "confirmed", "pending"]


def test_confirm_unknown_id_changes_nothing_but_timestamp(tmp_path: Path, clock) -> None:
    store = _store(tmp_path, clock)
    store.load(ROWS)
    before = store.records
    later = clock.advance(seconds=30)

    assert store.confirm("missing") == 0
    assert store.records == before
    assert store.last_updated == later


def test_restore_without_stored_state_starts_empty(tmp_path: Path, clock) -> None:
    state = _store(tmp_path, clock).restore()

    assert state.records == []


def test_restore_discards_corrupt_state(tmp_path: Path, clock) -> None:
    slot_path = tmp_path / "store" / "dispatchData.json"
    slot_path.parent.mkdir(parents=True)
    slot_path.write_text("{not json", encoding="utf-8")

    state = _store(tmp_path, clock).restore()

    assert state.records == []


def test_restore_discards_invalid_records(tmp_path: Path, clock) -> None:
    slot_path = tmp_path / "store" / "dispatchData.json"
    slot_path.parent.mkdir(parents=True)
    slot_path.write_text(
        json.dumps({"records": [{"id": "R1", "passengers": "two"}], "lastUpdated": "2025-03-14T05:00:00Z"}),
        encoding="utf-8",
    )

    assert _store(tmp_path, clock).restore().records == []


def test_decode_state_treats_stored_overdue_as_pending() -> None:
    payload = json.dumps(
        {
            "records": [
                {"id": "R1", "time": "08:00", "status": "overdue"},
                {"id": "R2", "time": "09:00", "status": "confirmed"},
                {"id": 3, "time": "10:00", "status": "pending", "confirmedAt": "2025-03-14T01:00:00.000Z"},
            ],
            "lastUpdated": "2025-03-14T02:00:00.000Z",
        }
    )

    state = decode_state(payload)

    r1, r2, r3 = state.records
    assert r1.status == "pending"
    assert r2.status == "confirmed"
    assert r2.confirmed_at == state.last_updated
    assert r3.id == "3"
    assert r3.confirmed_at is None


def test_failed_write_keeps_previous_state(clock) -> None:
    store = DispatchStore(BrokenSlot(), clock=clock)

    with pytest.raises(StorePersistError):
        store.load(ROWS)

    assert store.records == ()


def test_load_file_reads_spreadsheet(tmp_path: Path, clock) -> None:
    source = tmp_path / "dispatch.xlsx"
    pd.DataFrame([{"時間": "14:00", "編號": "R1", "搭乘人數": "abc"}]).to_excel(source, index=False)
    store = _store(tmp_path, clock)

    state = store.load_file(source)

    assert isinstance(state, DispatchState)
    assert state.records[0].id == "R1"
    assert state.records[0].passengers == 0


def test_restore_starts_empty_when_slot_unreadable(clock) -> None:
    slot = UnreadableSlot()
    store = DispatchStore(slot, clock=clock)

    state = store.restore()

    assert state.records == []
    assert state.last_updated == clock.now
    assert store.records == ()

    store.load(ROWS)
    assert len(slot.writes) == 1
    assert [record.id for record in store.records] == ["R1", "R2"]
