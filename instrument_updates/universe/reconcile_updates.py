"""
Instrument Update Reconciliation

Purpose:
- Compare the newly selected instruments with the stored snapshot
- Append added / removed records to the update log
- Replace the stored snapshot with the new selection

Keyed on isinCode only: a renamed ticker for the same ISIN is not an update.
Append-only. Idempotent on unchanged input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable

from instrument_updates.config import DATA_FILE_CONTENT_TYPE, DATA_FILE_NAME
from instrument_updates.models import (
    Instrument,
    PersistedState,
    UpdateRecord,
    format_timestamp,
    utc_now,
)
from instrument_updates.storage import SnapshotStore


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------

def normalise_snapshot(instruments: Iterable[Instrument]) -> list[Instrument]:
    """Unique by ISIN (first occurrence wins), ascending by ISIN."""
    seen: dict[str, Instrument] = {}
    for instrument in instruments:
        seen.setdefault(instrument.isin_code, instrument)
    return sorted(seen.values(), key=lambda i: i.isin_code)


@dataclass
class SnapshotDiff:
    added: list[Instrument] = field(default_factory=list)
    removed: list[Instrument] = field(default_factory=list)
    # (before, after) pairs sharing an ISIN but differing elsewhere
    drifted: list[tuple[Instrument, Instrument]] = field(default_factory=list)


def diff_snapshots(prev: list[Instrument], curr: list[Instrument]) -> SnapshotDiff:
    """
    Merge-walk two snapshots already sorted and unique by ISIN.

    Linear in len(prev) + len(curr). Removals come out in prev order,
    additions in curr order.
    """
    diff = SnapshotDiff()
    i = j = 0

    while i < len(prev) and j < len(curr):
        before, after = prev[i], curr[j]

        if before.isin_code == after.isin_code:
            if before != after:
                diff.drifted.append((before, after))
            i += 1
            j += 1
        elif before.isin_code < after.isin_code:
            diff.removed.append(before)
            i += 1
        else:
            diff.added.append(after)
            j += 1

    diff.removed.extend(prev[i:])
    diff.added.extend(curr[j:])

    return diff


# ---------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------

class Reconciler:
    """
    Owns the persisted state blob behind `key` in `store`.

    One reconcile() per run. After it returns, `state` holds what was
    written and `diff` the comparison that produced this run's records
    (None on bootstrap).
    """

    def __init__(
        self,
        store: SnapshotStore,
        key: str = DATA_FILE_NAME,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.key = key
        self.clock = clock
        self.state: PersistedState | None = None
        self.diff: SnapshotDiff | None = None

    def reconcile(self, rows: list[list]) -> list[UpdateRecord]:
        """Fold the selected rows into the stored state; return this run's records."""
        selected = normalise_snapshot(Instrument.from_row(row) for row in rows)

        if not self.store.exists(self.key):
            return self._bootstrap(selected)

        state = PersistedState.from_json(self.store.read(self.key))
        previous = normalise_snapshot(state.instruments)

        self.diff = diff_snapshots(previous, selected)

        now = format_timestamp(self.clock())
        appended = [
            UpdateRecord("removed", now, instrument) for instrument in self.diff.removed
        ] + [
            UpdateRecord("added", now, instrument) for instrument in self.diff.added
        ]

        self.state = PersistedState(
            instruments=selected,
            updates=state.updates + appended,
        )
        self._write()

        return appended

    def _bootstrap(self, selected: list[Instrument]) -> list[UpdateRecord]:
        self.diff = None
        self.state = PersistedState(instruments=selected, updates=[])
        self._write()
        return []

    def _write(self) -> None:
        self.store.write(self.key, self.state.to_json(), DATA_FILE_CONTENT_TYPE)
