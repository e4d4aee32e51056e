"""Publication date parsing for feed entries."""

from __future__ import annotations

import calendar
from datetime import datetime, timezone, timedelta

from dateutil.parser import parse as parse_date

# Timezone abbreviations for date parsing
TZINFOS = {
    "EST": timezone(timedelta(hours=-5)),
    "EDT": timezone(timedelta(hours=-4)),
    "CST": timezone(timedelta(hours=-6)),
    "CDT": timezone(timedelta(hours=-5)),
    "MST": timezone(timedelta(hours=-7)),
    "MDT": timezone(timedelta(hours=-6)),
    "PST": timezone(timedelta(hours=-8)),
    "PDT": timezone(timedelta(hours=-7)),
    "GMT": timezone.utc,
    "UTC": timezone.utc,
    "BST": timezone(timedelta(hours=1)),
}


def parse_entry_date(entry) -> datetime | None:
    """Extract the publication date from a feedparser entry.

    Prefers the raw ``published``/``updated`` strings parsed with dateutil,
    then falls back to feedparser's own ``*_parsed`` struct_time values.
    Naive results are assumed to be UTC.
    """
    for key in ("published", "updated"):
        raw = entry.get(key)
        if not raw:
            continue
        try:
            dt = parse_date(raw, tzinfos=TZINFOS)
        except (ValueError, OverflowError):
            continue
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt

    for key in ("published_parsed", "updated_parsed"):
        parsed = entry.get(key)
        if parsed:
            return datetime.fromtimestamp(calendar.timegm(parsed), tz=timezone.utc)

    return None
