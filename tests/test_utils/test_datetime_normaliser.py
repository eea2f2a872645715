import unittest
from datetime import date, datetime, timezone, timedelta
from common.utils.datetime_normaliser import (
    from_iso_string,
    normalise_to_utc,
    optional_from_iso,
    optional_to_iso,
    to_iso_string,
)

class TestDatetimeNormaliser(unittest.TestCase):
    def test_from_iso_string_with_timezone(self):
        iso = "2026-01-29T12:00:00+05:30"
        dt = from_iso_string(iso)
        self.assertIsInstance(dt, datetime)
        self.assertEqual(dt.tzinfo, timezone.utc)
        self.assertEqual(dt.hour, 6)

    def test_from_iso_string_utc(self):
        iso = "2026-01-29T06:00:00+00:00"
        dt = from_iso_string(iso)
        self.assertIsInstance(dt, datetime)
        self.assertEqual(dt.tzinfo, timezone.utc)
        self.assertEqual(dt.hour, 6)

    def test_from_iso_string_naive_raises(self):
        iso = "2026-01-29T12:00:00"
        with self.assertRaises(ValueError):
            from_iso_string(iso)

    def test_optional_helpers_pass_none_through(self):
        self.assertIsNone(optional_from_iso(None))
        self.assertIsNone(optional_from_iso(""))
        self.assertIsNone(optional_to_iso(None))

    def test_to_iso_string_converts_to_utc(self):
        dt = datetime(2026, 1, 29, 12, 0, tzinfo=timezone(timedelta(hours=1)))
        self.assertEqual(to_iso_string(dt), "2026-01-29T11:00:00+00:00")

    def test_to_iso_string_naive_raises(self):
        with self.assertRaises(ValueError):
            to_iso_string(datetime(2026, 1, 29, 12, 0))

    def test_normalise_date_is_midnight_utc(self):
        dt = normalise_to_utc(date(2026, 4, 10))
        self.assertEqual(dt, datetime(2026, 4, 10, tzinfo=timezone.utc))

    def test_normalise_naive_datetime_taken_as_utc(self):
        dt = normalise_to_utc(datetime(2026, 4, 10, 15, 30))
        self.assertEqual(dt, datetime(2026, 4, 10, 15, 30, tzinfo=timezone.utc))

    def test_normalise_aware_datetime_converted(self):
        dt = normalise_to_utc(datetime(2026, 4, 10, 1, 0, tzinfo=timezone(timedelta(hours=2))))
        self.assertEqual(dt.tzinfo, timezone.utc)
        self.assertEqual(dt.day, 9)
        self.assertEqual(dt.hour, 23)

if __name__ == "__main__":
    unittest.main()
