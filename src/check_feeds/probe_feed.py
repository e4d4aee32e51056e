"""Network-level probe of a single feed URL.

A HEAD request is sent without following redirects and the result is
mapped to a ProbeOutcome. Exceptions are matched against an ordered rule
list, so an error that fits several rules gets the first one.
"""

from __future__ import annotations

import http.client
import logging
import socket
from time import monotonic
from typing import Iterator
from urllib.parse import urlsplit

import requests
from urllib3.exceptions import NameResolutionError, NewConnectionError

from check_feeds.config import DEFAULT_USER_AGENT
from check_feeds.deadline import open_session, request_deadline
from check_feeds.models import ProbeKind, ProbeOutcome

logger = logging.getLogger(__name__)


def probe_feed(
    url: str,
    timeout: float,
    user_agent: str = DEFAULT_USER_AGENT,
) -> ProbeOutcome:
    """Send a HEAD request to `url` and classify what happened.

    `timeout` bounds the whole request, not just each socket read.
    """
    host = host_of(url)
    started = monotonic()
    session = open_session()
    try:
        with request_deadline(timeout) as watch:
            try:
                response = session.head(
                    url,
                    timeout=(timeout, timeout),
                    allow_redirects=False,
                    headers={"User-Agent": user_agent},
                )
            except requests.RequestException as e:
                if watch.expired:
                    return ProbeOutcome(ProbeKind.TIMEOUT, host=host)
                return classify_exception(e, host)
            except Exception as e:
                if watch.expired:
                    return ProbeOutcome(ProbeKind.TIMEOUT, host=host)
                logger.warning("Unexpected error probing %s: %s", url, e)
                return ProbeOutcome(ProbeKind.ERROR, host=host, reason=str(e))

        try:
            if watch.expired or monotonic() - started >= timeout:
                return ProbeOutcome(ProbeKind.TIMEOUT, host=host)
            return classify_response(response, host)
        finally:
            response.close()
    finally:
        session.close()


def host_of(url: str) -> str:
    """Host name of `url`, or the URL itself when it has none."""
    try:
        return urlsplit(url).hostname or url
    except ValueError:
        return url


def classify_response(response: requests.Response, host: str) -> ProbeOutcome:
    status = response.status_code
    for matches, kind in _STATUS_RULES:
        if matches(status):
            location = response.headers.get("Location", "") if kind is ProbeKind.REDIRECT else ""
            return ProbeOutcome(kind, host=host, location=location)
    return ProbeOutcome(ProbeKind.HEALTHY, host=host)


def classify_exception(exc: requests.RequestException, host: str) -> ProbeOutcome:
    for matches, kind in _EXCEPTION_RULES:
        if matches(exc):
            return ProbeOutcome(kind, host=host)
    return ProbeOutcome(ProbeKind.ERROR, host=host, reason=str(exc))


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Walk `exc` and every exception it wraps.

    requests and urllib3 nest the low-level socket error inside args,
    ``reason`` attributes and ``__cause__``, so all three are followed.
    """
    seen: set[int] = set()
    pending = [exc]
    while pending:
        current = pending.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current

        pending.extend(arg for arg in current.args if isinstance(arg, BaseException))
        for linked in (getattr(current, "reason", None), current.__cause__, current.__context__):
            if isinstance(linked, BaseException):
                pending.append(linked)


def _chain_contains(exc: BaseException, types: tuple) -> bool:
    return any(isinstance(e, types) for e in _exception_chain(exc))


def _is_unresolved_host(exc: requests.RequestException) -> bool:
    if isinstance(exc, (requests.exceptions.MissingSchema,
                        requests.exceptions.InvalidSchema,
                        requests.exceptions.InvalidURL,
                        requests.exceptions.URLRequired)):
        return True
    return _chain_contains(exc, (NameResolutionError, socket.gaierror))


def _is_connection_failure(exc: requests.RequestException) -> bool:
    return _chain_contains(
        exc,
        (ConnectionRefusedError, ConnectionResetError, BrokenPipeError, NewConnectionError),
    )


def _is_timeout(exc: requests.RequestException) -> bool:
    return isinstance(exc, requests.Timeout) or _chain_contains(exc, (TimeoutError,))


def _is_bad_http(exc: requests.RequestException) -> bool:
    if isinstance(exc, (requests.exceptions.InvalidHeader,
                        requests.exceptions.ChunkedEncodingError,
                        requests.exceptions.ContentDecodingError)):
        return True
    return _chain_contains(exc, (http.client.HTTPException,))


# Order matters: earlier rules win.
_EXCEPTION_RULES = (
    (_is_unresolved_host, ProbeKind.HOST_UNRESOLVED),
    (_is_connection_failure, ProbeKind.CONNECTION_FAILED),
    (_is_timeout, ProbeKind.TIMEOUT),
    (_is_bad_http, ProbeKind.BAD_HTTP_RESPONSE),
)

_STATUS_RULES = (
    (lambda status: 300 <= status < 400, ProbeKind.REDIRECT),
    (lambda status: status == 403, ProbeKind.FORBIDDEN),
    (lambda status: status == 404, ProbeKind.NOT_FOUND),
)
