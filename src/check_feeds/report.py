"""Assemble and print the problem report."""

from __future__ import annotations

import sys
from typing import Iterable, TextIO

from check_feeds.models import FeedDiagnosis


def build_report(diagnoses: Iterable[FeedDiagnosis]) -> list[str]:
    """Return one sorted line per feed that has a problem."""
    return sorted(d.line() for d in diagnoses if d.has_problem)


def emit_report(lines: Iterable[str], stream: TextIO | None = None) -> None:
    out = stream if stream is not None else sys.stdout
    for line in lines:
        out.write(line + "\n")
    out.flush()
