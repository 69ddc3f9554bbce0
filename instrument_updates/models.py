"""
Instrument data model and the persisted state wire format.

Field names on the wire are camelCase and must round-trip exactly:

    {"instruments": [{"ticker", "shortName", "longName", "isinCode", "type"}, ...],
     "updates": [{"type": "added"|"removed", "dateTime": "...Z", "instrument": {...}}, ...]}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Literal
import json

from instrument_updates.errors import StorageError


UpdateType = Literal["added", "removed"]

ROW_FIELDS = ("ticker", "shortName", "longName", "isinCode", "type")


# ---------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class Instrument:
    ticker: str
    short_name: str
    long_name: str
    isin_code: str
    type: str

    @classmethod
    def from_row(cls, row: list) -> "Instrument":
        """Record view of a validated upstream row (extra fields ignored)."""
        return cls(*row[:5])

    @classmethod
    def from_dict(cls, data: dict) -> "Instrument":
        values = [data[name] for name in ROW_FIELDS]
        if not all(isinstance(v, str) for v in values):
            raise TypeError(f"instrument fields must be strings: {data!r}")
        return cls(*values)

    def to_dict(self) -> dict:
        return dict(zip(ROW_FIELDS, (
            self.ticker,
            self.short_name,
            self.long_name,
            self.isin_code,
            self.type,
        )))


@dataclass(frozen=True)
class UpdateRecord:
    type: UpdateType
    date_time: str
    instrument: Instrument

    @classmethod
    def from_dict(cls, data: dict) -> "UpdateRecord":
        return cls(
            type=data["type"],
            date_time=data["dateTime"],
            instrument=Instrument.from_dict(data["instrument"]),
        )

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "dateTime": self.date_time,
            "instrument": self.instrument.to_dict(),
        }


@dataclass
class PersistedState:
    instruments: list[Instrument] = field(default_factory=list)
    updates: list[UpdateRecord] = field(default_factory=list)

    @classmethod
    def from_json(cls, body: bytes) -> "PersistedState":
        try:
            data = json.loads(body.decode("utf-8"))
            return cls(
                instruments=[Instrument.from_dict(i) for i in data["instruments"]],
                updates=[UpdateRecord.from_dict(u) for u in data["updates"]],
            )
        except (UnicodeDecodeError, json.JSONDecodeError, KeyError, TypeError) as e:
            raise StorageError(f"Persisted state is unreadable: {e}") from e

    def to_json(self) -> bytes:
        data = {
            "instruments": [i.to_dict() for i in self.instruments],
            "updates": [u.to_dict() for u in self.updates],
        }
        return json.dumps(data, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------

def format_timestamp(moment: datetime) -> str:
    """UTC, millisecond precision, Z suffix: 2026-10-19T05:38:00.123Z"""
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now() -> datetime:
    return datetime.now(UTC)
