"""Whole-request deadlines for requests calls.

requests only bounds each socket operation, so a server that trickles its
response one byte at a time can hold a request open indefinitely. Sessions
from `open_session` record every socket they open on the calling thread;
when a `request_deadline` expires those sockets are shut down, which makes
the blocked request fail straight away.
"""

from __future__ import annotations

import logging
import socket
import threading
from contextlib import contextmanager
from typing import Iterator

import requests
from requests.adapters import HTTPAdapter
from urllib3.connection import HTTPConnection, HTTPSConnection
from urllib3.connectionpool import HTTPConnectionPool, HTTPSConnectionPool

logger = logging.getLogger(__name__)

_local = threading.local()


class DeadlineWatch:
    """Sockets opened under one deadline and whether it has passed."""

    def __init__(self) -> None:
        self.expired = False
        self._sockets: list[socket.socket] = []
        self._lock = threading.Lock()

    def track(self, sock: socket.socket) -> None:
        with self._lock:
            if not self.expired:
                self._sockets.append(sock)
                return
        _shutdown(sock)

    def expire(self) -> None:
        with self._lock:
            self.expired = True
            sockets, self._sockets = self._sockets, []
        for sock in sockets:
            _shutdown(sock)


def _shutdown(sock: socket.socket) -> None:
    # socket.socket.shutdown skips SSLSocket's override, which would
    # unwrap the TLS object under the thread still reading from it.
    try:
        socket.socket.shutdown(sock, socket.SHUT_RDWR)
    except OSError as e:
        logger.debug("Socket already closed at deadline: %s", e)


@contextmanager
def request_deadline(seconds: float) -> Iterator[DeadlineWatch]:
    """Shut down sockets opened by this thread once `seconds` have passed."""
    watch = DeadlineWatch()
    timer = threading.Timer(seconds, watch.expire)
    timer.daemon = True
    previous = getattr(_local, "watch", None)
    _local.watch = watch
    timer.start()
    try:
        yield watch
    finally:
        timer.cancel()
        _local.watch = previous


class _WatchedConnectionMixin:
    def _new_conn(self):
        sock = super()._new_conn()
        watch = getattr(_local, "watch", None)
        if watch is not None:
            watch.track(sock)
        return sock


class _WatchedHTTPConnection(_WatchedConnectionMixin, HTTPConnection):
    pass


class _WatchedHTTPSConnection(_WatchedConnectionMixin, HTTPSConnection):
    pass


class _WatchedHTTPConnectionPool(HTTPConnectionPool):
    ConnectionCls = _WatchedHTTPConnection


class _WatchedHTTPSConnectionPool(HTTPSConnectionPool):
    ConnectionCls = _WatchedHTTPSConnection


class DeadlineAdapter(HTTPAdapter):
    """HTTPAdapter whose connections register with the active deadline."""

    def init_poolmanager(self, *args, **kwargs) -> None:
        super().init_poolmanager(*args, **kwargs)
        self.poolmanager.pool_classes_by_scheme = {
            "http": _WatchedHTTPConnectionPool,
            "https": _WatchedHTTPSConnectionPool,
        }


def open_session() -> requests.Session:
    """New session whose connections can be cut off by `request_deadline`.

    Sessions are not shared between feeds, so a pooled connection is never
    reused under a different deadline.
    """
    session = requests.Session()
    adapter = DeadlineAdapter()
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session
