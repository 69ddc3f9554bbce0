"""
Upstream instrument list fetch.

Returns the raw body. Parsing and validation happen downstream so the
exact bytes can be hashed into the run manifest.
"""

from __future__ import annotations

import time

import requests

from instrument_updates.config import FETCH_TIMEOUT_SECONDS, INSTRUMENTS_DATA_URL
from instrument_updates.errors import FetchError


def fetch_instruments(
    url: str = INSTRUMENTS_DATA_URL,
    max_retries: int = 3,
    base_delay: float = 10.0,
    timeout: float = FETCH_TIMEOUT_SECONDS,
) -> bytes:
    """
    GET the instrument list with polite retry on 429.
    Anything else that is not a 200 fails fast.
    """

    for attempt in range(1, max_retries + 1):
        try:
            resp = requests.get(url, headers={"Accept": "application/json"}, timeout=timeout)
        except requests.RequestException as e:
            raise FetchError(f"Upstream unreachable: {e}") from e

        if resp.status_code == 200:
            return resp.content

        if resp.status_code == 429:
            delay = base_delay * attempt
            print(
                f"⚠ Rate limited by upstream (429). "
                f"Retry {attempt}/{max_retries} in {delay:.1f}s…"
            )
            time.sleep(delay)
            continue

        raise FetchError(
            f"got non 200 response, status code: {resp.status_code}",
            status_code=resp.status_code,
        )

    raise FetchError(
        f"Exceeded upstream rate limits after {max_retries} attempts",
        status_code=429,
    )
