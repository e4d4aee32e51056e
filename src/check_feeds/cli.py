"""CLI for checking the feeds of an OPML subscription list."""

from __future__ import annotations

import logging
import sys

import yaml
from dotenv import load_dotenv

from check_feeds.check_feeds import check_feeds
from check_feeds.config import apply_overrides, load_config
from check_feeds.helpers import parse_check_feeds_args
from check_feeds.opml import OpmlError, load_feed_urls
from check_feeds.report import emit_report
from common.cli_helpers import setup_logging

load_dotenv()

setup_logging()
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    args = parse_check_feeds_args(argv)

    try:
        config = apply_overrides(
            load_config(args.config),
            timeout=args.timeout,
            age=args.age,
            parallelism=args.parallelism,
        )
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(1)

    try:
        urls = load_feed_urls(args.input)
    except OpmlError as e:
        logger.error("%s", e)
        sys.exit(1)

    if not urls:
        logger.warning("No feeds found in %s", args.input)
        return

    report = check_feeds(urls, config)
    emit_report(report)


if __name__ == "__main__":
    main()
