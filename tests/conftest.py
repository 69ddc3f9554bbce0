from __future__ import annotations

from datetime import datetime, UTC, timedelta
import json

import pytest


class MemoryStore:
    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}
        self.content_types: dict[str, str] = {}
        self.writes: list[str] = []

    def __repr__(self) -> str:
        return "MemoryStore()"

    def exists(self, key: str) -> bool:
        return key in self.blobs

    def read(self, key: str) -> bytes:
        return self.blobs[key]

    def write(self, key: str, data: bytes, content_type: str) -> None:
        self.blobs[key] = data
        self.content_types[key] = content_type
        self.writes.append(key)

    def state(self, key: str = "data.json") -> dict:
        return json.loads(self.blobs[key].decode("utf-8"))


class StepClock:
    """Returns start, start + step, start + 2*step, ... on each call."""

    def __init__(self, start: datetime, step: timedelta = timedelta(minutes=1)) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current += self.step
        return now


def make_row(isin: str, ticker: str | None = None, type_: str = "Részvény", **overrides) -> list:
    ticker = ticker or isin[-4:]
    row = [
        ticker,
        overrides.get("short_name", f"{ticker} Nyrt"),
        overrides.get("long_name", f"{ticker} Holding Nyrt."),
        isin,
        type_,
    ]
    return row


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def clock() -> StepClock:
    return StepClock(datetime(2026, 10, 19, 6, 0, tzinfo=UTC))


@pytest.fixture
def upstream_rows() -> list[list]:
    return [
        ["OTP", "OTP Bank", "OTP Bank Nyrt.", "HU0000061726", "Részvény"],
        ["MOL", "MOL", "MOL Magyar Olaj- és Gázipari Nyrt.", "HU0000153937", "Részvény"],
        ["SPY", "SPDR S&P 500", "SPDR S&P 500 ETF Trust", "US78462F1030", "ETF"],
        ["RCHU5", "Certificate", "Random Capital certificate 5", "HU0000712345", "Certifikát"],
        ["GBTC", "Grayscale BTC", "Grayscale Bitcoin Trust", "US3896371099", "Pink Sheet"],
    ]
