"""
Select tracked instruments.

Keeps validated rows whose type is on the allow-list.
Order-preserving. No dedupe here (reconciliation owns ISIN uniqueness).
"""

from __future__ import annotations

import pandas as pd

from instrument_updates.models import Instrument


# ---------------------------------------------------------------------
# Tracking rules (explicit, not runtime input)
# ---------------------------------------------------------------------

TRACKED_INSTRUMENT_TYPES = (
    "Részvény",
    "ETF",
    "Pink Sheet",
)


def select_instruments(rows: list[list]) -> list[list]:
    return [
        row for row in rows
        if Instrument.from_row(row).type in TRACKED_INSTRUMENT_TYPES
    ]


def summarise_types(rows: list[list]) -> pd.Series:
    """Row count per instrument type, largest first."""
    types = pd.Series([Instrument.from_row(row).type for row in rows], dtype="object")
    return types.value_counts()
