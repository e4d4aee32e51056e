"""Tests for check_feeds.check_age module."""

from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from unittest.mock import Mock, patch

import requests

from check_feeds.check_age import assess_feed, check_age
from check_feeds.models import StalenessKind

NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def _rss(*published: datetime | None) -> bytes:
    items = []
    for i, dt in enumerate(published):
        date = f"<pubDate>{format_datetime(dt)}</pubDate>" if dt is not None else ""
        items.append(
            f"<item><title>Item {i}</title><link>https://example.com/{i}</link>{date}</item>"
        )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel><title>Example</title>'
        "<link>https://example.com</link><description>Example feed</description>"
        + "".join(items)
        + "</channel></rss>"
    ).encode("utf-8")


ATOM = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Example</title>
  <id>urn:example</id>
  <updated>2024-12-01T00:00:00Z</updated>
  <entry>
    <title>Entry</title>
    <id>urn:example:1</id>
    <updated>2024-12-01T00:00:00Z</updated>
  </entry>
</feed>
"""


class TestAssessFeed:
    def test_old_feed_is_stale(self) -> None:
        outcome = assess_feed(_rss(NOW - timedelta(days=400)), 365, NOW)

        assert outcome.kind is StalenessKind.STALE
        assert outcome.age_days == 400
        assert outcome.message() == "is out of date. Age: 400 days without an update"

    def test_recent_feed_is_fresh(self) -> None:
        outcome = assess_feed(_rss(NOW - timedelta(days=10)), 365, NOW)

        assert outcome.kind is StalenessKind.FRESH
        assert outcome.message() is None

    def test_age_equal_to_threshold_is_fresh(self) -> None:
        outcome = assess_feed(_rss(NOW - timedelta(days=365, hours=23)), 365, NOW)
        assert outcome.kind is StalenessKind.FRESH

    def test_future_item_is_fresh(self) -> None:
        outcome = assess_feed(_rss(NOW + timedelta(days=30)), 365, NOW)
        assert outcome.kind is StalenessKind.FRESH

    def test_only_first_item_is_used(self) -> None:
        outcome = assess_feed(
            _rss(NOW - timedelta(days=500), NOW - timedelta(days=1)), 365, NOW
        )
        assert outcome.kind is StalenessKind.STALE
        assert outcome.age_days == 500

    def test_atom_updated_date(self) -> None:
        outcome = assess_feed(ATOM, 30, NOW)
        assert outcome.kind is StalenessKind.STALE
        assert outcome.age_days == 410

    def test_malformed_markup_is_unparsable(self) -> None:
        bad = b"<rss version='2.0'><channel><item><title>x</title></channel></rss>"

        outcome = assess_feed(bad, 365, NOW)

        assert outcome.kind is StalenessKind.UNPARSABLE
        assert outcome.message() == "feed isn't well formed and couldn't be parsed"

    def test_empty_document_is_unparsable(self) -> None:
        assert assess_feed(b"", 365, NOW).kind is StalenessKind.UNPARSABLE
        assert assess_feed(b"  \n", 365, NOW).kind is StalenessKind.UNPARSABLE

    def test_item_without_date_is_age_unknown(self) -> None:
        outcome = assess_feed(_rss(None), 365, NOW)

        assert outcome.kind is StalenessKind.AGE_UNKNOWN
        assert outcome.message() == "age could not be checked"

    def test_feed_without_items_is_age_unknown(self) -> None:
        assert assess_feed(_rss(), 365, NOW).kind is StalenessKind.AGE_UNKNOWN

    def test_non_feed_document_is_age_unknown(self) -> None:
        html = b"<html><head><title>Hi</title></head><body><p>Hello</p></body></html>"
        assert assess_feed(html, 365, NOW).kind is StalenessKind.AGE_UNKNOWN

    def test_naive_now_is_treated_as_utc(self) -> None:
        naive_now = NOW.replace(tzinfo=None)
        outcome = assess_feed(_rss(NOW - timedelta(days=400)), 365, naive_now)
        assert outcome.age_days == 400


@patch("check_feeds.check_age.open_session")
class TestCheckAge:
    def test_fetches_and_assesses_body(self, mock_open_session) -> None:
        mock_get = mock_open_session.return_value.get
        mock_get.return_value = Mock(content=_rss(NOW - timedelta(days=400)))

        outcome = check_age("https://example.com/rss", 365, NOW, timeout=5, user_agent="ua")

        assert outcome.kind is StalenessKind.STALE
        mock_get.assert_called_once_with(
            "https://example.com/rss", timeout=(5, 5), headers={"User-Agent": "ua"}
        )
        mock_open_session.return_value.close.assert_called_once()

    def test_transport_error_is_unparsable(self, mock_open_session) -> None:
        mock_open_session.return_value.get.side_effect = requests.ConnectionError("connection dropped")

        outcome = check_age("https://example.com/rss", 365, NOW, timeout=5)

        assert outcome.kind is StalenessKind.UNPARSABLE

    def test_http_error_status_is_age_unknown(self, mock_open_session) -> None:
        response = Mock()
        response.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
        mock_open_session.return_value.get.return_value = response

        outcome = check_age("https://example.com/rss", 365, NOW, timeout=5)

        assert outcome.kind is StalenessKind.AGE_UNKNOWN

    def test_non_requests_fetch_error_is_age_unknown(self, mock_open_session) -> None:
        mock_open_session.return_value.get.side_effect = OverflowError(
            "timestamp out of range for platform time_t"
        )

        outcome = check_age("https://example.com/rss", 365, NOW, timeout=5)

        assert outcome.kind is StalenessKind.AGE_UNKNOWN
        mock_open_session.return_value.close.assert_called_once()

    @patch("check_feeds.check_age.assess_feed")
    def test_unexpected_error_is_age_unknown(self, mock_assess, mock_open_session) -> None:
        mock_open_session.return_value.get.return_value = Mock(content=b"<rss/>")
        mock_assess.side_effect = TypeError("unsupported operand")

        outcome = check_age("https://example.com/rss", 365, NOW, timeout=5)

        assert outcome.kind is StalenessKind.AGE_UNKNOWN
