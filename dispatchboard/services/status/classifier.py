"""Time-to-deadline status classification for dispatch records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Iterable, Literal, Optional

from dispatchboard_io.schema import DispatchRecord

StatusLabel = Literal["normal", "approaching", "overdue", "confirmed"]
Urgency = Literal["none", "warning", "error", "success"]

APPROACHING_SECONDS = 45 * 60

DISPLAY_LABELS: dict[str, str] = {
    "normal": "待確認",
    "approaching": "即將出發",
    "overdue": "已超時",
    "confirmed": "已確認",
}

_URGENCY: dict[str, Urgency] = {
    "normal": "none",
    "approaching": "warning",
    "overdue": "error",
    "confirmed": "success",
}

_TIME_FORMATS = ("%H:%M", "%H:%M:%S")


@dataclass(frozen=True, slots=True)
class StatusView:
    """Derived display state of one record at one instant."""

    label: StatusLabel
    urgency: Urgency
    seconds_remaining: Optional[float] = None

    @property
    def display(self) -> str:
        return DISPLAY_LABELS[self.label]


def parse_time_of_day(text: str) -> Optional[time]:
    """Parse ``HH:MM`` (or ``HH:MM:SS``); returns None when unparseable."""

    raw = (text or "").strip()
    for fmt in _TIME_FORMATS:
        try:
            return datetime.strptime(raw, fmt).time()
        except ValueError:
            continue
    return None


def scheduled_instant(record: DispatchRecord, now: datetime) -> Optional[datetime]:
    """Anchor the record's time-of-day to ``now``'s calendar date."""

    tod = parse_time_of_day(record.time)
    if tod is None:
        return None
    return datetime.combine(now.date(), tod, tzinfo=now.tzinfo)


def _view(label: StatusLabel, seconds: Optional[float] = None) -> StatusView:
    return StatusView(label=label, urgency=_URGENCY[label], seconds_remaining=seconds)


def classify(
    record: DispatchRecord,
    now: datetime,
    *,
    approaching_seconds: int = APPROACHING_SECONDS,
) -> StatusView:
    """Classify *record* at *now*.

    Confirmed records are always ``confirmed``. Otherwise the signed number of
    seconds until the scheduled instant decides: negative is ``overdue``, up to
    ``approaching_seconds`` is ``approaching``, anything later is ``normal``.
    A time that cannot be parsed never compares as due and stays ``normal``.
    Records are assumed to be scheduled for the current day.
    """

    if record.is_confirmed:
        return _view("confirmed")
    scheduled = scheduled_instant(record, now)
    if scheduled is None:
        return _view("normal")
    remaining = (scheduled - now).total_seconds()
    if remaining < 0:
        return _view("overdue", remaining)
    if remaining <= approaching_seconds:
        return _view("approaching", remaining)
    return _view("normal", remaining)


def classify_all(
    records: Iterable[DispatchRecord],
    now: datetime,
    *,
    approaching_seconds: int = APPROACHING_SECONDS,
) -> list[tuple[DispatchRecord, StatusView]]:
    """Classify *records* against one shared instant, keeping their order."""

    return [(record, classify(record, now, approaching_seconds=approaching_seconds)) for record in records]


def overdue_in(classified: Iterable[tuple[DispatchRecord, StatusView]]) -> frozenset[str]:
    return frozenset(record.id for record, view in classified if view.label == "overdue")


def overdue_ids(
    records: Iterable[DispatchRecord],
    now: datetime,
    *,
    approaching_seconds: int = APPROACHING_SECONDS,
) -> frozenset[str]:
    return overdue_in(classify_all(records, now, approaching_seconds=approaching_seconds))
