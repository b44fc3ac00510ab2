"""Dispatch record and snapshot schemas."""

# Module responsibilities:
# - Define the normalized dispatch record produced from one spreadsheet row.
# - Define the persisted snapshot (ordered records + last mutation time).
# - Convert both to and from the JSON payload kept in the durable slot.

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, List, Literal, Mapping, MutableMapping, Optional

DispatchStatus = Literal["pending", "confirmed", "overdue"]

STATUS_PENDING: DispatchStatus = "pending"
STATUS_CONFIRMED: DispatchStatus = "confirmed"
STATUS_OVERDUE: DispatchStatus = "overdue"

# attribute -> key used in the stored JSON payload
STORAGE_KEYS: dict[str, str] = {
    "time": "time",
    "type": "type",
    "id": "id",
    "car_number": "carNumber",
    "driver_name": "driverName",
    "driver_phone": "driverPhone",
    "car_type": "carType",
    "flight_number": "flightNumber",
    "flight_time": "flightTime",
    "terminal": "terminal",
    "address": "address",
    "passenger_name": "passengerName",
    "passenger_phone": "passengerPhone",
    "customer_type": "customerType",
    "project_name": "projectName",
    "passengers": "passengers",
    "luggage": "luggage",
}

COUNT_FIELDS: tuple[str, ...] = ("passengers", "luggage")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    return value.isoformat()


def parse_timestamp(text: object) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z`` for UTC."""

    if not isinstance(text, str) or not text.strip():
        raise ValueError(f"timestamp must be a non-empty string, got {text!r}")
    raw = text.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(slots=True)
class DispatchRecord:
    """One scheduled vehicle pickup/dropoff event."""

    time: str = ""
    type: str = ""
    id: str = ""
    car_number: str = ""
    driver_name: str = ""
    driver_phone: str = ""
    car_type: str = ""
    flight_number: str = ""
    flight_time: str = ""
    terminal: str = ""
    address: str = ""
    passenger_name: str = ""
    passenger_phone: str = ""
    customer_type: str = ""
    project_name: str = ""
    passengers: int = 0
    luggage: int = 0
    status: DispatchStatus = STATUS_PENDING
    confirmed_at: Optional[datetime] = None

    @property
    def is_confirmed(self) -> bool:
        return self.status == STATUS_CONFIRMED

    def confirmed(self, at: datetime) -> "DispatchRecord":
        """Return a copy marked confirmed at *at*."""

        return replace(self, status=STATUS_CONFIRMED, confirmed_at=at)

    def to_dict(self) -> MutableMapping[str, object]:
        payload: MutableMapping[str, object] = {
            key: getattr(self, attr) for attr, key in STORAGE_KEYS.items()
        }
        payload["status"] = self.status
        if self.confirmed_at is not None:
            payload["confirmedAt"] = format_timestamp(self.confirmed_at)
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "DispatchRecord":
        """Build a record from its stored payload.

        Raises:
            ValueError: When a field holds a value of the wrong shape.
        """

        values: dict[str, Any] = {}
        for attr, key in STORAGE_KEYS.items():
            raw = payload.get(key)
            if attr in COUNT_FIELDS:
                if raw is None:
                    values[attr] = 0
                elif isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
                    raise ValueError(f"{key} must be a non-negative integer, got {raw!r}")
                else:
                    values[attr] = raw
            else:
                if raw is None:
                    values[attr] = ""
                elif isinstance(raw, int) and not isinstance(raw, bool):
                    # numeric ids written by older exports
                    values[attr] = str(raw)
                elif not isinstance(raw, str):
                    raise ValueError(f"{key} must be text, got {raw!r}")
                else:
                    values[attr] = raw
        status = payload.get("status", STATUS_PENDING)
        if status not in (STATUS_PENDING, STATUS_CONFIRMED, STATUS_OVERDUE):
            raise ValueError(f"unknown status {status!r}")
        confirmed_raw = payload.get("confirmedAt")
        confirmed_at = parse_timestamp(confirmed_raw) if confirmed_raw else None
        return cls(status=status, confirmed_at=confirmed_at, **values)


@dataclass(slots=True)
class DispatchState:
    """Persisted snapshot: records in spreadsheet order plus last mutation time."""

    records: List[DispatchRecord] = field(default_factory=list)
    last_updated: datetime = field(default_factory=utcnow)

    def to_dict(self) -> MutableMapping[str, object]:
        return {
            "records": [record.to_dict() for record in self.records],
            "lastUpdated": format_timestamp(self.last_updated),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "DispatchState":
        records_raw = payload.get("records")
        if not isinstance(records_raw, list):
            raise ValueError("records must be a list")
        records = []
        for item in records_raw:
            if not isinstance(item, Mapping):
                raise ValueError(f"record must be an object, got {item!r}")
            records.append(DispatchRecord.from_dict(item))
        return cls(records=records, last_updated=parse_timestamp(payload.get("lastUpdated")))

