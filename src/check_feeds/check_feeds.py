"""Probe a list of feeds and report the ones with problems."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import partial
from typing import Iterable

from check_feeds.check_age import check_age
from check_feeds.config import CheckConfig
from check_feeds.dispatch import run_bounded
from check_feeds.models import (
    FeedDiagnosis,
    ProbeKind,
    ProbeOutcome,
    StalenessKind,
    StalenessOutcome,
)
from check_feeds.probe_feed import probe_feed
from check_feeds.report import build_report

logger = logging.getLogger(__name__)


def diagnose_feed(url: str, config: CheckConfig, now: datetime) -> FeedDiagnosis:
    """Run the probe and, when it is inconclusive, the age check for one feed.

    Never raises: a fault in one feed ends up as that feed's diagnosis.
    """
    try:
        outcome = probe_feed(url, config.timeout, user_agent=config.user_agent)
    except Exception as e:
        logger.warning("Probe of %s failed unexpectedly: %s", url, e)
        outcome = ProbeOutcome(ProbeKind.ERROR, reason=str(e))

    if not outcome.needs_content_check:
        logger.debug("%s: %s", url, outcome.kind.value)
        return FeedDiagnosis(url=url, message=outcome.message())

    if outcome.kind is ProbeKind.ERROR:
        logger.debug("%s: probe failed (%s), checking content", url, outcome.reason)

    try:
        staleness = check_age(
            url,
            config.max_age_days,
            now,
            config.timeout,
            user_agent=config.user_agent,
        )
    except Exception as e:
        logger.warning("Age check of %s failed unexpectedly: %s", url, e)
        staleness = StalenessOutcome(StalenessKind.AGE_UNKNOWN)

    logger.debug("%s: %s", url, staleness.kind.value)
    return FeedDiagnosis(url=url, message=staleness.message())


def check_feeds(
    urls: Iterable[str],
    config: CheckConfig,
    now: datetime | None = None,
) -> list[str]:
    """Check every feed once and return the sorted problem report."""
    if now is None:
        now = datetime.now(timezone.utc)

    # Each URL is probed once even if the caller lists it twice
    unique_urls = list(dict.fromkeys(urls))
    logger.info(
        "Checking %d feeds (parallelism=%d, timeout=%ss, max age=%d days)",
        len(unique_urls),
        config.parallelism,
        config.timeout,
        config.max_age_days,
    )

    diagnoses = run_bounded(
        unique_urls,
        partial(diagnose_feed, config=config, now=now),
        config.parallelism,
    )

    report = build_report(diagnoses)
    logger.info("%d of %d feeds have problems", len(report), len(unique_urls))
    return report
