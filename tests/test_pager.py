from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from farcaster_export.cast import Author, FeedRecord, PageResult
from farcaster_export.errors import FeedApiError
from farcaster_export.pager import coerce_page_count, fetch_channel_feed
from farcaster_export.run_log import RunLogger


def _casts(*hashes: str) -> tuple[FeedRecord, ...]:
    return tuple(FeedRecord(hash=h, author=Author()) for h in hashes)


class _ScriptedSource:
    def __init__(self, pages: list[PageResult | Exception]) -> None:
        self._pages = pages
        self.calls: list[tuple[str, str | None]] = []

    def fetch_channel_page(self, channel_id: str, *, cursor: str | None = None) -> PageResult:
        self.calls.append((channel_id, cursor))
        page = self._pages[len(self.calls) - 1]
        if isinstance(page, Exception):
            raise page
        return page


class TestFetchChannelFeed(unittest.TestCase):
    def test_follows_cursor_until_cap(self) -> None:
        source = _ScriptedSource(
            [
                PageResult(_casts("a", "b"), next_cursor="c1"),
                PageResult(_casts("c"), next_cursor="c2"),
                PageResult(_casts("d", "e"), next_cursor=None),
            ]
        )

        records, pages = fetch_channel_feed(source, "abc", max_pages=3)

        self.assertEqual(pages, 3)
        self.assertEqual(source.calls, [("abc", None), ("abc", "c1"), ("abc", "c2")])
        self.assertEqual([r.hash for r in records], ["a", "b", "c", "d", "e"])

    def test_stops_when_first_page_has_no_cursor(self) -> None:
        source = _ScriptedSource([PageResult(_casts("a"), next_cursor=None)])

        records, pages = fetch_channel_feed(source, "abc", max_pages=10)

        self.assertEqual(pages, 1)
        self.assertEqual(len(source.calls), 1)
        self.assertEqual([r.hash for r in records], ["a"])

    def test_stops_at_cap_even_with_cursor(self) -> None:
        source = _ScriptedSource(
            [PageResult(_casts(str(i)), next_cursor=f"c{i}") for i in range(5)]
        )

        records, pages = fetch_channel_feed(source, "abc", max_pages=2)

        self.assertEqual(pages, 2)
        self.assertEqual([r.hash for r in records], ["0", "1"])

    def test_page_cap_below_one_fetches_once(self) -> None:
        for cap in (0, -4):
            source = _ScriptedSource([PageResult(_casts("a"), next_cursor="more")] * 3)
            _, pages = fetch_channel_feed(source, "abc", max_pages=cap)
            self.assertEqual(pages, 1)

    def test_errors_propagate(self) -> None:
        source = _ScriptedSource(
            [PageResult(_casts("a"), next_cursor="c1"), FeedApiError("HTTP 401")]
        )
        with self.assertRaises(FeedApiError):
            fetch_channel_feed(source, "abc", max_pages=5)
        self.assertEqual(len(source.calls), 2)

    def test_logs_each_page(self) -> None:
        source = _ScriptedSource(
            [PageResult(_casts("a"), next_cursor="c1"), PageResult(_casts("b"))]
        )
        with tempfile.TemporaryDirectory() as td:
            log_path = Path(td) / "export.log"
            with RunLogger.open(log_path) as log:
                fetch_channel_feed(source, "abc", max_pages=5, logger=log)

            lines = log_path.read_text(encoding="utf-8").splitlines()
            self.assertEqual(len(lines), 2)
            self.assertIn('"event":"feed_page_fetched"', lines[0])
            self.assertIn('"has_next":false', lines[1])


class TestCoercePageCount(unittest.TestCase):
    def test_values(self) -> None:
        self.assertEqual(coerce_page_count(5), 5)
        self.assertEqual(coerce_page_count("7"), 7)
        self.assertEqual(coerce_page_count(0), 1)
        self.assertEqual(coerce_page_count(-3), 1)
        self.assertEqual(coerce_page_count("abc"), 1)
        self.assertEqual(coerce_page_count(None), 1)


if __name__ == "__main__":
    unittest.main()
