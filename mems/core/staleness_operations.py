"""Staleness detection."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from mems.data_models import Entry, utc_now


def find_stale(
    entries: Iterable[Entry],
    threshold: Union[timedelta, int, float],
    now: Optional[datetime] = None,
    include_archived: bool = False,
) -> list[Entry]:
    """Return entries not updated within ``threshold``, oldest first.

    A number is taken as a count of days. Archived entries are skipped unless
    ``include_archived`` is set.
    """
    if not isinstance(threshold, timedelta):
        threshold = timedelta(days=threshold)
    now = now or utc_now()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    stale = [
        entry
        for entry in entries
        if (include_archived or not entry.archived) and now - entry.updated_at > threshold
    ]
    stale.sort(key=lambda entry: (entry.updated_at, entry.logical_path))
    return stale
