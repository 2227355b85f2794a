from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from farcaster_export.run_log import RunLogger


class TestRunLogger(unittest.TestCase):
    def test_records_carry_channel_once_bound(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "nested" / "export.log"
            with RunLogger.open(path, session_id="s1") as log:
                log.info("before_bind")
                log.bind_channel(" abc ")
                log.warning("after_bind", count=2)
                try:
                    raise ValueError("bad cast")
                except ValueError as e:
                    log.exception("failed", exc=e, stage="fetch")

            records = [json.loads(ln) for ln in path.read_text(encoding="utf-8").splitlines()]

        self.assertEqual([r["event"] for r in records], ["before_bind", "after_bind", "failed"])
        self.assertNotIn("channel_id", records[0])
        self.assertEqual(records[1]["channel_id"], "abc")
        self.assertEqual(records[1]["level"], "WARN")
        self.assertEqual(records[1]["data"], {"count": 2})
        self.assertEqual(records[2]["data"]["error"]["type"], "ValueError")
        self.assertEqual(records[2]["data"]["stage"], "fetch")
        self.assertTrue(all(r["session_id"] == "s1" for r in records))

    def test_append_mode_keeps_existing_lines(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "export.log"
            with RunLogger.open(path) as log:
                log.info("first")
            with RunLogger.open(path, overwrite=False) as log:
                log.info("second")

            self.assertEqual(len(path.read_text(encoding="utf-8").splitlines()), 2)


if __name__ == "__main__":
    unittest.main()
