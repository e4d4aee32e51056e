"""Content-level staleness check for feeds that passed the network probe."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from xml.sax import SAXException

import feedparser
import requests

from check_feeds.config import DEFAULT_USER_AGENT
from check_feeds.deadline import open_session, request_deadline
from check_feeds.models import StalenessKind, StalenessOutcome
from common.dates import parse_entry_date

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def check_age(
    url: str,
    max_age_days: int,
    now: datetime,
    timeout: float,
    user_agent: str = DEFAULT_USER_AGENT,
) -> StalenessOutcome:
    """Fetch the feed at `url` and decide whether it is stale."""
    session = open_session()
    watch = None
    try:
        with request_deadline(timeout) as watch:
            response = session.get(
                url,
                timeout=(timeout, timeout),
                headers={"User-Agent": user_agent},
            )
            response.raise_for_status()
            content = response.content
    except requests.HTTPError as e:
        logger.debug("Age check fetch for %s returned an error status: %s", url, e)
        return StalenessOutcome(StalenessKind.AGE_UNKNOWN)
    except requests.RequestException as e:
        logger.debug("Age check fetch for %s failed: %s", url, e)
        return StalenessOutcome(StalenessKind.UNPARSABLE)
    except Exception as e:
        if watch is not None and watch.expired:
            logger.debug("Age check fetch for %s ran past its deadline", url)
            return StalenessOutcome(StalenessKind.UNPARSABLE)
        logger.warning("Unexpected error fetching %s for age check: %s", url, e)
        return StalenessOutcome(StalenessKind.AGE_UNKNOWN)
    finally:
        session.close()

    try:
        return assess_feed(content, max_age_days, now)
    except Exception as e:
        logger.warning("Failed to check age of %s: %s", url, e)
        return StalenessOutcome(StalenessKind.AGE_UNKNOWN)


def assess_feed(content: bytes, max_age_days: int, now: datetime) -> StalenessOutcome:
    """Date the first entry of a feed document and compare it with `max_age_days`.

    Only the first entry is looked at; feeds list their newest item first.
    Entries dated in the future give a negative age and count as fresh.
    """
    if not content or not content.strip():
        return StalenessOutcome(StalenessKind.UNPARSABLE)

    feed = feedparser.parse(content)
    if feed.get("bozo") and isinstance(feed.get("bozo_exception"), SAXException):
        return StalenessOutcome(StalenessKind.UNPARSABLE)

    if not feed.get("version") or not feed.entries:
        return StalenessOutcome(StalenessKind.AGE_UNKNOWN)

    published_at = parse_entry_date(feed.entries[0])
    if published_at is None:
        return StalenessOutcome(StalenessKind.AGE_UNKNOWN)

    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    age_days = (now - published_at) // ONE_DAY
    if age_days > max_age_days:
        return StalenessOutcome(StalenessKind.STALE, age_days=age_days)
    return StalenessOutcome(StalenessKind.FRESH)
