"""Common CLI helper utilities."""

from __future__ import annotations

import argparse
import logging
import math


def setup_logging(level: int = logging.INFO) -> None:
    """Configure standard logging format for CLI tools.

    Log records go to stderr so stdout stays reserved for report output.
    """
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def positive_int(value: str) -> int:
    """Parse a strictly positive integer for argparse arguments."""
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer") from exc
    if number < 1:
        raise argparse.ArgumentTypeError(f"{value!r} must be a positive integer")
    return number


def non_negative_int(value: str) -> int:
    """Parse an integer that may be zero but not negative."""
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer") from exc
    if number < 0:
        raise argparse.ArgumentTypeError(f"{value!r} must not be negative")
    return number


def positive_float(value: str) -> float:
    """Parse a strictly positive number of seconds for argparse arguments."""
    try:
        number = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"{value!r} is not a number") from exc
    if not math.isfinite(number) or number <= 0:
        raise argparse.ArgumentTypeError(f"{value!r} must be a finite number greater than zero")
    return number
