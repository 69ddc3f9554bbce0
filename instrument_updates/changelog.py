"""
Changelog presentation.

Orders the update log newest first and renders it as a standalone HTML page.
"""

from __future__ import annotations

from datetime import datetime
from html import escape
from string import Template
import textwrap

import pandas as pd

from instrument_updates.errors import RenderError
from instrument_updates.models import UpdateRecord


UPDATE_LABELS = {
    "added": "Added",
    "removed": "Removed",
}

PAGE = Template(textwrap.dedent("""
    <!DOCTYPE html>
    <html lang="en">
    <head>
    <meta charset="utf-8">
    <title>Instrument updates</title>
    $analytics
    <style>
      body { font-family: sans-serif; margin: 2em; }
      table { border-collapse: collapse; }
      th, td { padding: 0.3em 0.8em; border-bottom: 1px solid #ddd; text-align: left; }
      tr.added td:nth-child(2) { color: #1a7f37; }
      tr.removed td:nth-child(2) { color: #cf222e; }
    </style>
    </head>
    <body>
    <h1>Instrument updates</h1>
    <p>Generated $generated</p>
    <table>
    <thead><tr><th>Date</th><th>Change</th><th>Ticker</th><th>Short name</th><th>Name</th><th>ISIN</th><th>Type</th></tr></thead>
    <tbody>
    $rows
    </tbody>
    </table>
    </body>
    </html>
""").strip())

ANALYTICS = Template(textwrap.dedent("""
    <script async src="https://www.googletagmanager.com/gtag/js?id=$tid"></script>
    <script>
      window.dataLayer = window.dataLayer || [];
      function gtag(){dataLayer.push(arguments);}
      gtag('js', new Date());
      gtag('config', '$tid');
    </script>
""").strip())

EMPTY_ROW = '<tr><td colspan="7">No instrument updates recorded yet.</td></tr>'


def order_updates(updates: list[UpdateRecord]) -> list[UpdateRecord]:
    """Newest first. Records sharing a dateTime keep their log order."""
    if not updates:
        return []

    try:
        when = pd.to_datetime(
            pd.Series([u.date_time for u in updates]),
            utc=True,
            format="ISO8601",
        )
    except (ValueError, TypeError) as e:
        raise RenderError(f"Unparseable update dateTime: {e}") from e

    order = when.sort_values(ascending=False, kind="stable").index
    return [updates[i] for i in order]


def format_date(moment: datetime) -> str:
    return f"{moment:%b} {moment.day}, {moment.year}"


def _update_row(update: UpdateRecord) -> str:
    i = update.instrument
    cells = [
        format_date(pd.Timestamp(update.date_time).to_pydatetime()),
        UPDATE_LABELS[update.type],
        i.ticker,
        i.short_name,
        i.long_name,
        i.isin_code,
        i.type,
    ]
    tds = "".join(f"<td>{escape(str(c))}</td>" for c in cells)
    return f'<tr class="{update.type}">{tds}</tr>'


def render_changelog(
    updates: list[UpdateRecord],
    generated_at: datetime,
    ga_tracking_id: str | None = None,
) -> str:
    """Render `updates` in the order given; call order_updates() first."""
    try:
        rows = "\n".join(_update_row(u) for u in updates)
        analytics = ANALYTICS.substitute(tid=escape(ga_tracking_id)) if ga_tracking_id else ""

        return PAGE.substitute(
            analytics=analytics,
            generated=escape(format_date(generated_at)),
            rows=rows or EMPTY_ROW,
        )
    except (KeyError, ValueError, TypeError) as e:
        raise RenderError(f"Failed to render changelog: {e}") from e
