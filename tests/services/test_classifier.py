from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from dispatchboard.services.status import classify, classify_all, overdue_ids, overdue_in
from dispatchboard.services.status.classifier import parse_time_of_day, scheduled_instant
from dispatchboard_io.mapping import ColumnMapping
from dispatchboard_io.schema import DispatchRecord

TAIPEI = timezone(timedelta(hours=8))


def _at(hour: int, minute: int, second: int = 0) -> datetime:
    return datetime(2025, 3, 14, hour, minute, second, tzinfo=TAIPEI)


@pytest.fixture()
def r1() -> DispatchRecord:
    return ColumnMapping().map_row({"時間": "14:00", "編號": "R1", "搭乘人數": "2"})


def test_one_hour_ahead_is_normal(r1: DispatchRecord) -> None:
    view = classify(r1, _at(13, 0))

    assert r1.passengers == 2
    assert view.label == "normal"
    assert view.urgency == "none"
    assert view.seconds_remaining == 3600


def test_within_forty_five_minutes_is_approaching(r1: DispatchRecord) -> None:
    assert classify(r1, _at(13, 15)).label == "approaching"
    assert classify(r1, _at(13, 14, 59)).label == "normal"
    assert classify(r1, _at(13, 15)).urgency == "warning"


def test_exact_schedule_time_is_still_approaching(r1: DispatchRecord) -> None:
    assert classify(r1, _at(14, 0)).label == "approaching"
    assert classify(r1, _at(14, 0, 1)).label == "overdue"


def test_past_schedule_is_overdue(r1: DispatchRecord) -> None:
    view = classify(r1, _at(14, 5))

    assert view.label == "overdue"
    assert view.urgency == "error"
    assert view.display == "已超時"


def test_confirmed_overrides_overdue(r1: DispatchRecord) -> None:
    confirmed = r1.confirmed(datetime(2025, 3, 14, 6, 0, tzinfo=timezone.utc))

    for now in (_at(13, 0), _at(14, 5), _at(23, 59)):
        view = classify(confirmed, now)
        assert view.label == "confirmed"
        assert view.urgency == "success"


def test_classify_is_pure(r1: DispatchRecord) -> None:
    now = _at(13, 50)

    assert classify(r1, now) == classify(r1, now)


def test_custom_window() -> None:
    record = DispatchRecord(id="R5", time="14:00")

    assert classify(record, _at(13, 0), approaching_seconds=3600).label == "approaching"


def test_unparseable_time_is_normal() -> None:
    for text in ("", "soon", "25:00"):
        assert classify(DispatchRecord(id="X", time=text), _at(23, 0)).label == "normal"


def test_schedule_anchors_to_current_date() -> None:
    record = DispatchRecord(id="late", time="00:30")

    assert scheduled_instant(record, _at(23, 0)) == datetime(2025, 3, 14, 0, 30, tzinfo=TAIPEI)
    assert classify(record, _at(23, 0)).label == "overdue"


def test_parse_time_of_day_accepts_seconds() -> None:
    assert parse_time_of_day("07:05:30") is not None
    assert parse_time_of_day("7:05") is not None
    assert parse_time_of_day("seven") is None


def test_overdue_ids_skip_confirmed() -> None:
    records = [
        DispatchRecord(id="A", time="09:00"),
        DispatchRecord(id="B", time="09:00").confirmed(datetime(2025, 3, 14, tzinfo=timezone.utc)),
        DispatchRecord(id="C", time="18:00"),
    ]

    assert overdue_ids(records, _at(10, 0)) == frozenset({"A"})


def test_classify_all_keeps_order_and_feeds_overdue_in() -> None:
    records = [
        DispatchRecord(id="late", time="09:00"),
        DispatchRecord(id="soon", time="10:30"),
        DispatchRecord(id="later", time="18:00"),
    ]

    classified = classify_all(records, _at(10, 0))

    assert [record.id for record, _ in classified] == ["late", "soon", "later"]
    assert [view.label for _, view in classified] == ["overdue", "approaching", "normal"]
    assert overdue_in(classified) == overdue_ids(records, _at(10, 0)) == frozenset({"late"})
