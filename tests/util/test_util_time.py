import unittest
from datetime import datetime, timezone

from gdriveproxy.util.time import (
    from_epoch_ms,
    normalize_dt,
    now_utc,
    parse_rfc3339,
    to_epoch_ms,
    to_rfc3339,
)


class TestUtilTime(unittest.TestCase):
    def test_now_utc_is_tz_aware(self) -> None:
        dt = now_utc()
        self.assertIsNotNone(dt.tzinfo)
        self.assertEqual(dt.tzinfo, timezone.utc)

    def test_normalize_dt_rejects_naive(self) -> None:
        naive = datetime(2025, 1, 1, 12, 0, 0)
        with self.assertRaises(ValueError):
            normalize_dt(naive)

    def test_parse_rfc3339_z(self) -> None:
        dt = parse_rfc3339("2025-01-01T12:34:56Z")
        self.assertEqual(dt.tzinfo, timezone.utc)
        self.assertEqual(dt, datetime(2025, 1, 1, 12, 34, 56, tzinfo=timezone.utc))

    def test_parse_rfc3339_fractional_z(self) -> None:
        dt = parse_rfc3339("2025-01-01T12:34:56.123Z")
        self.assertEqual(dt, datetime(2025, 1, 1, 12, 34, 56, 123000, tzinfo=timezone.utc))

    def test_parse_rfc3339_offset_converts_to_utc(self) -> None:
        dt = parse_rfc3339("2025-01-01T12:34:56+09:00")
        self.assertEqual(dt.tzinfo, timezone.utc)
        # 12:34:56 JST == 03:34:56 UTC
        self.assertEqual(dt, datetime(2025, 1, 1, 3, 34, 56, tzinfo=timezone.utc))

    def test_parse_rfc3339_rejects_empty(self) -> None:
        with self.assertRaises(ValueError):
            parse_rfc3339("")

    def test_to_rfc3339_outputs_z_with_millis(self) -> None:
        dt = datetime(2025, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
        self.assertEqual(to_rfc3339(dt), "2025-01-01T00:00:00.000Z")

    def test_epoch_ms_round_trip(self) -> None:
        dt = datetime(2025, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
        ms = to_epoch_ms(dt)
        self.assertEqual(ms, 1735689600000)
        self.assertEqual(from_epoch_ms(ms), dt)

    def test_to_epoch_ms_reads_naive_as_utc(self) -> None:
        naive = datetime(2025, 1, 1, 0, 0, 0)
        self.assertEqual(to_epoch_ms(naive), 1735689600000)


if __name__ == "__main__":
    unittest.main()
