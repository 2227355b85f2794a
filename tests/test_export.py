from __future__ import annotations

import unittest

from farcaster_export.cast import PageResult
from farcaster_export.errors import ConfigError, FeedApiError, RecordShapeError
from farcaster_export.export import ExportRequest, run_export
from farcaster_export.offline import OfflineFeedClient


class _FailingSource:
    def __init__(self, exc: Exception) -> None:
        self._exc = exc

    def fetch_channel_page(self, channel_id: str, *, cursor: str | None = None) -> PageResult:
        raise self._exc


class TestExportRequest(unittest.TestCase):
    def test_normalizes_inputs(self) -> None:
        req = ExportRequest(channel_id=" abc ", api_key=" k ", max_pages=0)
        self.assertEqual(req.channel_id, " abc ")
        self.assertEqual(req.api_key, "k")
        self.assertEqual(req.max_pages, 1)
        self.assertTrue(req.is_ready)

    def test_channel_id_is_used_as_given(self) -> None:
        source = OfflineFeedClient()
        result = run_export(ExportRequest(channel_id="My-Channel ", api_key="k"), source)

        assert result.document is not None
        self.assertEqual(source.calls[0], ("My-Channel ", None))
        self.assertEqual(result.document.filename, "farcaster_feed_My-Channel .csv")

    def test_not_ready_without_channel_or_key(self) -> None:
        self.assertFalse(ExportRequest(channel_id="", api_key="k").is_ready)
        self.assertFalse(ExportRequest(channel_id="   ", api_key="k").is_ready)
        self.assertFalse(ExportRequest(channel_id="abc", api_key="   ").is_ready)


class TestRunExport(unittest.TestCase):
    def test_offline_feed_exports_all_pages(self) -> None:
        source = OfflineFeedClient()
        result = run_export(ExportRequest(channel_id="abc", api_key="k", max_pages=5), source)

        self.assertTrue(result.ok)
        assert result.document is not None
        self.assertEqual(result.pages_fetched, 2)
        self.assertEqual(source.calls, [("abc", None), ("abc", "offline-cursor-1")])
        self.assertEqual(result.document.record_count, 3)
        self.assertEqual(result.document.filename, "farcaster_feed_abc.csv")
        self.assertEqual(len(result.document.text.split("\n")), 4)

    def test_page_cap_limits_offline_feed(self) -> None:
        result = run_export(
            ExportRequest(channel_id="abc", api_key="k", max_pages=1), OfflineFeedClient()
        )
        assert result.document is not None
        self.assertEqual(result.pages_fetched, 1)
        self.assertEqual(result.document.record_count, 2)

    def test_remote_failure_is_returned(self) -> None:
        result = run_export(
            ExportRequest(channel_id="abc", api_key="k"),
            _FailingSource(FeedApiError("HTTP 401")),
        )

        self.assertFalse(result.ok)
        self.assertIsNone(result.document)
        assert result.failure is not None
        self.assertEqual(result.failure.stage, "fetch")
        self.assertEqual(result.failure.error_type, "FeedApiError")
        self.assertIn("401", result.failure.message)

    def test_shape_failure_is_returned(self) -> None:
        source = OfflineFeedClient(pages=[{"casts": [{"hash": "0x1"}]}])
        result = run_export(ExportRequest(channel_id="abc", api_key="k"), source)

        self.assertFalse(result.ok)
        assert result.failure is not None
        self.assertEqual(result.failure.error_type, RecordShapeError.__name__)

    def test_missing_input_raises_config_error(self) -> None:
        with self.assertRaises(ConfigError):
            run_export(ExportRequest(channel_id="", api_key="k"), OfflineFeedClient())


if __name__ == "__main__":
    unittest.main()
