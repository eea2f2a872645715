import unittest
from unittest.mock import MagicMock
from decimal import Decimal
from botocore.exceptions import ClientError

from common.repository.package_repo import PackageRepository
from common.models.packages import Money
from common.utils.custom_exceptions import PersistenceError, PriceParseError


class TestPackageRepository(unittest.TestCase):

    def setUp(self):
        self.table = MagicMock()
        self.repo = PackageRepository(self.table)
        self.item = {
            "pk": "PACKAGE#p1",
            "sk": "DETAILS",
            "title": "Umrah Premium",
            "price": "₦2,500,000",
            "category": "pilgrimage",
            "location": "Mecca",
            "duration": "14 days",
            "rating": Decimal("4.8"),
            "image": "https://img.example.com/umrah.jpg",
            "includes": ["Flights", "Hotel"],
        }

    def test_get_package_parses_display_price(self):
        self.table.get_item.return_value = {"Item": self.item}

        package = self.repo.get_package_by_id("p1")

        self.table.get_item.assert_called_once_with(Key={"pk": "PACKAGE#p1", "sk": "DETAILS"})
        self.assertEqual(package.price, Money(Decimal("2500000"), "NGN"))
        self.assertEqual(package.rating, 4.8)
        self.assertEqual(package.includes, ["Flights", "Hotel"])

    def test_structured_price_wins(self):
        self.item.update({"price_amount": Decimal("1999.99"), "currency": "USD"})
        self.table.get_item.return_value = {"Item": self.item}

        package = self.repo.get_package_by_id("p1")

        self.assertEqual(package.price, Money(Decimal("1999.99"), "USD"))

    def test_numeric_price_takes_currency_from_display(self):
        self.item.update({"numeric_price": Decimal("2500000"), "price": "₦2.5M"})
        self.table.get_item.return_value = {"Item": self.item}

        package = self.repo.get_package_by_id("p1")

        self.assertEqual(package.price, Money(Decimal("2500000"), "NGN"))

    def test_unreadable_price_raises(self):
        self.item["price"] = "Contact us"
        self.table.get_item.return_value = {"Item": self.item}

        with self.assertRaises(PriceParseError):
            self.repo.get_package_by_id("p1")

    def test_summary_ignores_price(self):
        self.item["price"] = "Contact us"
        self.table.get_item.return_value = {"Item": self.item}

        summary = self.repo.get_package_summary("p1")

        self.assertEqual(summary.title, "Umrah Premium")
        self.assertEqual(summary.location, "Mecca")
        self.assertEqual(summary.includes, ["Flights", "Hotel"])

    def test_summary_without_title(self):
        del self.item["title"]
        self.table.get_item.return_value = {"Item": self.item}

        summary = self.repo.get_package_summary("p1")

        self.assertIsNone(summary.title)
        self.assertEqual(summary.category, "pilgrimage")

    def test_package_without_title(self):
        del self.item["title"]
        self.table.get_item.return_value = {"Item": self.item}

        package = self.repo.get_package_by_id("p1")

        self.assertEqual(package.title, "")
        self.assertEqual(package.price, Money(Decimal("2500000"), "NGN"))

    def test_missing_package(self):
        self.table.get_item.return_value = {}

        self.assertIsNone(self.repo.get_package_by_id("nope"))
        self.assertIsNone(self.repo.get_package_summary("nope"))

    def test_client_error(self):
        self.table.get_item.side_effect = ClientError(
            {"Error": {"Code": "InternalServerError", "Message": "boom"}}, "GetItem"
        )

        with self.assertRaises(PersistenceError):
            self.repo.get_package_by_id("p1")


if __name__ == "__main__":
    unittest.main()
