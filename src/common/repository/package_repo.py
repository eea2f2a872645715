from botocore.exceptions import ClientError
import logging
from decimal import Decimal
from typing import Optional
from common.models.packages import Money, Package, PackageSummary
from common.utils.custom_exceptions import PersistenceError
from common.utils.constants import DEFAULT_CURRENCY
from common.utils.price_parser import detect_currency, parse_price

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from types_boto3_dynamodb.service_resource import Table
else:
    Table = object


logger = logging.getLogger(__name__)


class PackageRepository:
    """Read-only view of the package items kept by the catalogue side."""

    def __init__(self, table: Table):
        self.table = table

    def _get_item(self, package_id: str) -> Optional[dict]:
        try:
            response = self.table.get_item(
                Key={"pk": f"PACKAGE#{package_id}", "sk": "DETAILS"}
            )
        except ClientError as err:
            logger.error(f"Error retrieving package {package_id}: {err}")
            raise PersistenceError("could not read package") from err
        return response.get("Item")

    def get_package_by_id(self, package_id: str) -> Optional[Package]:
        item = self._get_item(package_id)
        if not item:
            return None
        return self._to_domain(package_id, item)

    def get_package_summary(self, package_id: str) -> Optional[PackageSummary]:
        # display fields only, so a badly formatted price never breaks a read
        item = self._get_item(package_id)
        if not item:
            return None
        rating = item.get("rating")
        return PackageSummary(
            package_id=package_id,
            title=item.get("title"),
            category=item.get("category"),
            location=item.get("location"),
            duration=item.get("duration"),
            rating=float(rating) if rating is not None else None,
            image=item.get("image"),
            includes=list(item.get("includes", [])),
        )

    @staticmethod
    def _price_of(item: dict) -> Money:
        currency = item.get("currency", DEFAULT_CURRENCY)
        if item.get("price_amount") is not None:
            return Money(amount=Decimal(str(item["price_amount"])), currency=currency)
        if item.get("numeric_price") is not None:
            return Money(
                amount=Decimal(str(item["numeric_price"])),
                currency=detect_currency(item.get("price"), currency),
            )
        return parse_price(item.get("price"), currency)

    def _to_domain(self, package_id: str, item: dict) -> Package:
        rating = item.get("rating")
        return Package(
            package_id=package_id,
            title=item.get("title", ""),
            price=self._price_of(item),
            category=item.get("category"),
            location=item.get("location"),
            duration=item.get("duration"),
            rating=float(rating) if rating is not None else None,
            image=item.get("image"),
            includes=list(item.get("includes", [])),
        )
