"""Read feed URLs from an OPML subscription list."""

from __future__ import annotations

import logging
from pathlib import Path

from lxml import etree

logger = logging.getLogger(__name__)


class OpmlError(Exception):
    """Raised when an OPML file cannot be read or parsed."""


def load_feed_urls(path: str | Path) -> list[str]:
    """Read the OPML file at `path` and return its feed URLs."""
    try:
        content = Path(path).read_bytes()
    except OSError as e:
        raise OpmlError(f"File {path} not found!") from e

    urls = parse_feed_urls(content, source=str(path))
    logger.info("Loaded %d feed URLs from %s", len(urls), path)
    return urls


def parse_feed_urls(content: bytes, source: str = "<opml>") -> list[str]:
    """
    Extract the ``xmlUrl`` of every leaf outline under ``opml/body``.

    Outlines that contain other outlines are folders and are skipped.
    URLs are returned in document order with duplicates dropped.
    """
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(content, parser=parser)
    except etree.XMLSyntaxError as e:
        raise OpmlError(f"File {source} could not be parsed!") from e

    body = root.find("body") if root is not None and root.tag == "opml" else None
    if body is None:
        raise OpmlError(f"File {source} could not be parsed!")

    urls: list[str] = []
    seen: set[str] = set()
    for outline in body.iter("outline"):
        if outline.find("outline") is not None:
            continue
        url = (outline.get("xmlUrl") or "").strip()
        if not url or url in seen:
            continue
        seen.add(url)
        urls.append(url)

    return urls
