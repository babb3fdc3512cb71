import unittest
from datetime import datetime, timedelta, timezone

import support  # noqa: F401

from api.dates import parse_instant
from api.errors import DecodingError

TEN_THIRTY = datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc)


class ParseInstantTestCase(unittest.TestCase):
    # ---------- epoch numbers ----------

    def test_epoch_seconds_and_millis_agree(self):
        self.assertEqual(parse_instant(1736936400), parse_instant(1736936400000))
        self.assertEqual(parse_instant(1736937000), TEN_THIRTY)
        self.assertEqual(parse_instant(1736937000000), TEN_THIRTY)
        self.assertEqual(parse_instant(1736937000.5).microsecond, 500000)

    def test_epoch_is_utc_aware(self):
        parsed = parse_instant(0)
        self.assertEqual(parsed, datetime(1970, 1, 1, tzinfo=timezone.utc))
        self.assertEqual(parsed.utcoffset().total_seconds(), 0)

    def test_booleans_are_not_epochs(self):
        with self.assertRaises(DecodingError):
            parse_instant(True)

    # ---------- strings ----------

    def test_all_accepted_formats_denote_the_same_instant(self):
        values = [
            "2025-01-15T10:30:00Z",
            "2025-01-15T10:30:00.000Z",
            "2025-01-15T12:30:00+02:00",
            "2025-01-15T05:30:00-05:00",
            "2025-01-15T12:30:00+0200",
            "2025-01-15T10:30:00",
            "2025-01-15 10:30:00",
            1736937000,
            1736937000000,
        ]
        for value in values:
            with self.subTest(value=value):
                self.assertEqual(parse_instant(value), TEN_THIRTY)

    def test_millisecond_fraction(self):
        parsed = parse_instant("2025-01-15T10:30:00.123Z")
        self.assertEqual(parsed, TEN_THIRTY + timedelta(milliseconds=123))

    def test_fractional_seconds(self):
        parsed = parse_instant("2025-01-15T10:30:00.123456Z")
        self.assertEqual(parsed.microsecond, 123456)
        parsed = parse_instant("2025-01-15T10:30:00.5Z")
        self.assertEqual(parsed.microsecond, 500000)

    def test_nanosecond_fraction_is_truncated(self):
        parsed = parse_instant("2025-01-15T10:30:00.123456789Z")
        self.assertEqual(parsed.microsecond, 123456)

    def test_fraction_without_offset(self):
        parsed = parse_instant("2025-01-15T10:30:00.250")
        self.assertEqual(parsed, TEN_THIRTY.replace(microsecond=250000))

    def test_result_is_always_utc(self):
        parsed = parse_instant("2025-01-15T12:30:00+02:00")
        self.assertEqual(parsed.tzinfo, timezone.utc)
        self.assertEqual(parsed.hour, 10)

    # ---------- rejects ----------

    def test_garbage_raises_decoding_error_with_raw_value(self):
        for value in ["not-a-date", "yesterday", "", "2025-13-45T10:30:00Z", "15/01/2025", None, [], {}]:
            with self.subTest(value=value):
                with self.assertRaises(DecodingError) as ctx:
                    parse_instant(value)
                self.assertEqual(ctx.exception.raw, value)


if __name__ == "__main__":
    unittest.main()
