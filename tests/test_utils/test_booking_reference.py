import unittest
from datetime import datetime, timezone
from common.utils.booking_reference import generate_booking_reference, to_base36


class TestBookingReference(unittest.TestCase):
    def test_to_base36(self):
        self.assertEqual(to_base36(0), "0")
        self.assertEqual(to_base36(35), "z")
        self.assertEqual(to_base36(36), "10")
        self.assertEqual(to_base36(1295), "zz")

    def test_to_base36_negative_raises(self):
        with self.assertRaises(ValueError):
            to_base36(-1)

    def test_reference_shape(self):
        now = datetime(2026, 1, 1, tzinfo=timezone.utc)
        reference = generate_booking_reference(now)

        self.assertRegex(reference, r"^BK[0-9A-Z]+$")
        timestamp = to_base36(int(now.timestamp() * 1000)).upper()
        self.assertTrue(reference.startswith("BK" + timestamp))
        self.assertEqual(len(reference), 2 + len(timestamp) + 5)

    def test_reference_without_clock(self):
        self.assertRegex(generate_booking_reference(), r"^BK[0-9A-Z]+$")


if __name__ == "__main__":
    unittest.main()
