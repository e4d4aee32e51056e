"""Data models for the feed checker."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ProbeKind(Enum):
    """Network-level outcome of a single HEAD probe."""
    REDIRECT = "redirect"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    HOST_UNRESOLVED = "host_unresolved"
    CONNECTION_FAILED = "connection_failed"
    BAD_HTTP_RESPONSE = "bad_http_response"
    HEALTHY = "healthy"
    ERROR = "error"


class StalenessKind(Enum):
    """Content-level outcome of the age check."""
    STALE = "stale"
    FRESH = "fresh"
    UNPARSABLE = "unparsable"
    AGE_UNKNOWN = "age_unknown"


# Message templates for outcomes that end up in the report.
PROBE_MESSAGES = {
    ProbeKind.REDIRECT: "Redirect ... new URI: {location}",
    ProbeKind.FORBIDDEN: "Forbidden ... check URI",
    ProbeKind.NOT_FOUND: "Not found ... check URI",
    ProbeKind.TIMEOUT: "Connection timed out",
    ProbeKind.HOST_UNRESOLVED: "{host} not found",
    ProbeKind.CONNECTION_FAILED: "Connection to {host} failed!",
    ProbeKind.BAD_HTTP_RESPONSE: "{host} sends bad HTTP data",
}

STALENESS_MESSAGES = {
    StalenessKind.STALE: "is out of date. Age: {age_days} days without an update",
    StalenessKind.UNPARSABLE: "feed isn't well formed and couldn't be parsed",
    StalenessKind.AGE_UNKNOWN: "age could not be checked",
}


@dataclass(frozen=True)
class ProbeOutcome:
    """Result of probing one feed URL.

    ``location`` is only meaningful for redirects and ``reason`` only for
    unclassified errors.
    """
    kind: ProbeKind
    host: str = ""
    location: str = ""
    reason: str = ""

    @property
    def needs_content_check(self) -> bool:
        """True when the probe found no problem of its own and the body must be checked."""
        return self.kind not in PROBE_MESSAGES

    def message(self) -> Optional[str]:
        """Diagnosis text for terminal outcomes, ``None`` otherwise."""
        template = PROBE_MESSAGES.get(self.kind)
        if template is None:
            return None
        return template.format(host=self.host, location=self.location)


@dataclass(frozen=True)
class StalenessOutcome:
    """Result of fetching and dating a feed body."""
    kind: StalenessKind
    age_days: Optional[int] = None

    def message(self) -> Optional[str]:
        """Diagnosis text, or ``None`` for a fresh feed."""
        template = STALENESS_MESSAGES.get(self.kind)
        if template is None:
            return None
        return template.format(age_days=self.age_days)


@dataclass(frozen=True)
class FeedDiagnosis:
    """A feed URL paired with its diagnosis, ``None`` meaning no problem."""
    url: str
    message: Optional[str]

    @property
    def has_problem(self) -> bool:
        return self.message is not None

    def line(self) -> str:
        return f"{self.url} {self.message}"
