from datetime import datetime, UTC
import json

import pytest

from instrument_updates.changelog import format_date, order_updates, render_changelog
from instrument_updates.errors import RenderError
from instrument_updates.models import Instrument, PersistedState, UpdateRecord


def update(type_: str, when: str, isin: str, ticker: str = "OTP") -> UpdateRecord:
    return UpdateRecord(
        type_,
        when,
        Instrument(ticker, "Short", "Long name", isin, "Részvény"),
    )


def test_order_is_newest_first_and_stable_on_ties() -> None:
    log = [
        update("added", "2017-03-01T10:00:00.000Z", "HU0000000001"),
        update("removed", "2017-03-05T10:00:00.000Z", "HU0000000002"),
        update("added", "2017-03-05T10:00:00.000Z", "HU0000000003"),
        update("added", "2017-03-03T10:00:00.000Z", "HU0000000004"),
    ]

    ordered = order_updates(log)

    assert [u.instrument.isin_code for u in ordered] == [
        "HU0000000002",
        "HU0000000003",
        "HU0000000004",
        "HU0000000001",
    ]
    assert [u.instrument.isin_code for u in log][0] == "HU0000000001"


def test_order_accepts_mixed_timestamp_precision() -> None:
    state = PersistedState.from_json(json.dumps({
        "instruments": [],
        "updates": [
            update("added", "2017-03-02T10:15:30.123Z", "HU0000000001").to_dict(),
            update("removed", "2017-03-05T10:15:30Z", "HU0000000002").to_dict(),
            update("added", "2017-03-03T08:00:00.5+00:00", "HU0000000003").to_dict(),
        ],
    }).encode("utf-8"))

    ordered = order_updates(state.updates)

    assert [u.instrument.isin_code for u in ordered] == [
        "HU0000000002",
        "HU0000000003",
        "HU0000000001",
    ]


def test_order_empty() -> None:
    assert order_updates([]) == []


def test_unparseable_datetime_is_render_error() -> None:
    with pytest.raises(RenderError):
        order_updates([update("added", "yesterday-ish", "HU0000000001")])


def test_format_date() -> None:
    assert format_date(datetime(2026, 10, 9, tzinfo=UTC)) == "Oct 9, 2026"


def test_render_lists_updates_in_given_order() -> None:
    html = render_changelog(
        [
            update("removed", "2017-03-05T10:00:00.000Z", "HU0000000002", ticker="MOL"),
            update("added", "2017-03-01T10:00:00.000Z", "HU0000000001", ticker="OTP"),
        ],
        generated_at=datetime(2026, 10, 19, tzinfo=UTC),
    )

    assert html.startswith("<!DOCTYPE html>")
    assert "Generated Oct 19, 2026" in html
    assert html.index("HU0000000002") < html.index("HU0000000001")
    assert '<tr class="removed"><td>Mar 5, 2017</td><td>Removed</td><td>MOL</td>' in html
    assert "googletagmanager" not in html


def test_render_escapes_instrument_text() -> None:
    html = render_changelog(
        [update("added", "2017-03-01T10:00:00.000Z", "HU0000000001", ticker="<b>X")],
        generated_at=datetime(2026, 10, 19, tzinfo=UTC),
    )

    assert "&lt;b&gt;X" in html
    assert "<b>X" not in html


def test_render_empty_log() -> None:
    html = render_changelog([], generated_at=datetime(2026, 10, 19, tzinfo=UTC))

    assert "No instrument updates recorded yet." in html


def test_render_with_analytics() -> None:
    html = render_changelog(
        [],
        generated_at=datetime(2026, 10, 19, tzinfo=UTC),
        ga_tracking_id="UA-12345-1",
    )

    assert "gtag/js?id=UA-12345-1" in html
    assert "gtag('config', 'UA-12345-1');" in html


def test_unknown_update_type_is_render_error() -> None:
    with pytest.raises(RenderError):
        render_changelog(
            [update("renamed", "2017-03-01T10:00:00.000Z", "HU0000000001")],
            generated_at=datetime(2026, 10, 19, tzinfo=UTC),
        )
