"""Helper functions for the feed checker CLI."""

from __future__ import annotations

import argparse

from common.cli_helpers import non_negative_int, positive_float, positive_int

VERSION = "0.3"


def parse_check_feeds_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for check_feeds.

    Numeric options default to None so that values from a config file are
    only replaced when a flag is given.
    """

    parser = argparse.ArgumentParser(
        prog="feed-checker",
        description=(
            "Check every feed listed in an OPML file for redirects, "
            "unreachable hosts, broken markup and staleness."
        ),
    )

    # Input options
    parser.add_argument(
        "-i",
        "--input",
        required=True,
        help="OPML file listing the feeds to check",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="YAML config file (default: $FEED_CHECKER_CONFIG, if set)",
    )

    # Check options
    parser.add_argument(
        "-t",
        "--timeout",
        type=positive_float,
        default=None,
        help="Timeout interval in seconds (default: 60)",
    )
    parser.add_argument(
        "-a",
        "--age",
        type=non_negative_int,
        default=None,
        help="Report feeds without an update for more than this many days (default: 365)",
    )
    parser.add_argument(
        "-p",
        "--parallelism",
        type=positive_int,
        default=None,
        help="Number of feeds checked at the same time (default: 5)",
    )

    parser.add_argument(
        "-e",
        "--version",
        action="version",
        version=f"%(prog)s {VERSION}",
    )

    return parser.parse_args(argv)
