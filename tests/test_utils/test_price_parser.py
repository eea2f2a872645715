import unittest
from decimal import Decimal
from common.models.packages import Money
from common.utils.custom_exceptions import PriceParseError
from common.utils.price_parser import detect_currency, parse_price


class TestParsePrice(unittest.TestCase):
    def test_scenario_price(self):
        self.assertEqual(parse_price("₦100,000"), Money(Decimal("100000"), "NGN"))

    def test_naira_display_string(self):
        self.assertEqual(parse_price("₦2,500,000"), Money(Decimal("2500000"), "NGN"))

    def test_iso_code_with_decimals(self):
        self.assertEqual(parse_price("USD 1,200.50"), Money(Decimal("1200.50"), "USD"))

    def test_dollar_symbol(self):
        self.assertEqual(parse_price("$450"), Money(Decimal("450"), "USD"))

    def test_plain_number_string_uses_default_currency(self):
        self.assertEqual(parse_price("450", "GBP"), Money(Decimal("450"), "GBP"))

    def test_numeric_values(self):
        self.assertEqual(parse_price(1500), Money(Decimal("1500"), "NGN"))
        self.assertEqual(parse_price(Decimal("99.99")).amount, Decimal("99.99"))

    def test_surrounding_whitespace(self):
        self.assertEqual(parse_price("  ₦ 75,000  ").amount, Decimal("75000"))

    def test_unreadable_prices_raise(self):
        for raw in ("Contact us", "2.5M", "1,20,000", "", "₦", None, True, -5, ["100"]):
            with self.subTest(raw=raw):
                with self.assertRaises(PriceParseError):
                    parse_price(raw)

    def test_error_keeps_raw_price(self):
        with self.assertRaises(PriceParseError) as ctx:
            parse_price("on request")
        self.assertEqual(ctx.exception.raw_price, "on request")
        self.assertEqual(ctx.exception.status_code, 422)


class TestDetectCurrency(unittest.TestCase):
    def test_symbol(self):
        self.assertEqual(detect_currency("£1,000"), "GBP")

    def test_code(self):
        self.assertEqual(detect_currency("1000 EUR"), "EUR")

    def test_fallbacks(self):
        self.assertEqual(detect_currency("1000", "NGN"), "NGN")
        self.assertEqual(detect_currency(None, "USD"), "USD")


if __name__ == "__main__":
    unittest.main()
