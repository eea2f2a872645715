from botocore.exceptions import ClientError
import logging
from typing import Optional, List
from boto3.dynamodb.conditions import Attr, Key
from common.models.bookings import (
    ActivityLogEntry,
    Address,
    Booking,
    BookingDetails,
    BookingStatus,
    CustomerInfo,
    EmergencyContact,
    RoomType,
    TravelerCount,
)
from common.models.packages import Money
from common.utils.custom_exceptions import (
    ConflictException,
    DuplicateReference,
    NotFoundException,
    PersistenceError,
)
from common.utils.datetime_normaliser import (
    from_iso_string,
    optional_from_iso,
    optional_to_iso,
    to_iso_string,
)
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from types_boto3_dynamodb.service_resource import Table
    from types_boto3_dynamodb import DynamoDBClient
else:
    Table = object
    DynamoDBClient = object


logger = logging.getLogger(__name__)

BOOKING_ENTITY = "BOOKING"
BATCH_GET_LIMIT = 100


def _compact(values: dict) -> dict:
    return {k: v for k, v in values.items() if v is not None}


def _cancellation_codes(err: ClientError) -> List[str]:
    reasons = err.response.get("CancellationReasons") or []
    return [reason.get("Code", "None") for reason in reasons]


def _is_transaction_cancelled(err: ClientError) -> bool:
    return err.response.get("Error", {}).get("Code") == "TransactionCanceledException"


class BookingRepository:
    def __init__(self, table: Table, client: DynamoDBClient = None):
        self.table = table
        self.client = client if client else table.meta.client

    @staticmethod
    def _booking_key(booking_id: str) -> dict:
        return {"pk": f"BOOKING#{booking_id}", "sk": "DETAILS"}

    @staticmethod
    def _reference_key(reference: str) -> dict:
        return {"pk": f"REFERENCE#{reference}", "sk": "REFERENCE"}

    @staticmethod
    def _customer_key(email: str, booking: Booking) -> dict:
        return {
            "pk": f"CUSTOMER#{email}",
            "sk": f"BOOKING#{to_iso_string(booking.created_at)}#{booking.booking_id}",
        }

    def add_booking(self, booking: Booking):
        reference_item = {
            **self._reference_key(booking.booking_reference),
            "booking_id": booking.booking_id,
        }
        customer_item = {
            **self._customer_key(booking.customer_info.email, booking),
            "booking_id": booking.booking_id,
        }

        try:
            self.client.transact_write_items(
                TransactItems=[
                    {
                        "Put": {
                            "TableName": self.table.name,
                            "Item": self._to_item(booking),
                            "ConditionExpression": "attribute_not_exists(pk)",
                        }
                    },
                    {
                        "Put": {
                            "TableName": self.table.name,
                            "Item": reference_item,
                            "ConditionExpression": "attribute_not_exists(pk)",
                        }
                    },
                    {
                        "Put": {
                            "TableName": self.table.name,
                            "Item": customer_item,
                        }
                    },
                ]
            )
        except ClientError as err:
            if _is_transaction_cancelled(err):
                codes = _cancellation_codes(err)
                if len(codes) > 1 and codes[1] == "ConditionalCheckFailed":
                    raise DuplicateReference(
                        f"booking reference {booking.booking_reference} already exists"
                    )
            logger.error(f"Error creating booking {booking.booking_id}: {err}")
            raise PersistenceError("could not create booking") from err

    def get_booking_by_id(self, booking_id: str) -> Optional[Booking]:
        try:
            response = self.table.get_item(Key=self._booking_key(booking_id))
        except ClientError as err:
            logger.error(f"Error retrieving booking {booking_id}: {err}")
            raise PersistenceError("could not read booking") from err

        item = response.get("Item")
        if not item:
            return None
        return self._to_domain(item)

    def get_booking_by_reference(self, reference: str) -> Optional[Booking]:
        try:
            response = self.table.get_item(Key=self._reference_key(reference))
        except ClientError as err:
            logger.error(f"Error retrieving booking reference {reference}: {err}")
            raise PersistenceError("could not read booking") from err

        item = response.get("Item")
        if not item:
            return None
        return self.get_booking_by_id(item["booking_id"])

    def list_bookings(self) -> List[Booking]:
        scan_kwargs = {"FilterExpression": Attr("entity").eq(BOOKING_ENTITY)}
        items = []
        try:
            while True:
                response = self.table.scan(**scan_kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                scan_kwargs["ExclusiveStartKey"] = last_key
        except ClientError as err:
            logger.error(f"Error listing bookings: {err}")
            raise PersistenceError("could not list bookings") from err

        return [self._to_domain(item) for item in items]

    def get_customer_bookings(self, email: str) -> List[Booking]:
        """Bookings for one customer email, newest first."""
        query_kwargs = {
            "KeyConditionExpression": Key("pk").eq(f"CUSTOMER#{email}")
            & Key("sk").begins_with("BOOKING#"),
            "ScanIndexForward": False,
        }
        booking_ids = []
        try:
            while True:
                response = self.table.query(**query_kwargs)
                booking_ids.extend(
                    item["booking_id"] for item in response.get("Items", [])
                )
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                query_kwargs["ExclusiveStartKey"] = last_key
        except ClientError as err:
            logger.error(f"Error retrieving bookings for customer {email}: {err}")
            raise PersistenceError("could not read customer bookings") from err

        if not booking_ids:
            return []

        by_id = {b.booking_id: b for b in self._batch_get(booking_ids)}
        return [by_id[booking_id] for booking_id in booking_ids if booking_id in by_id]

    def _batch_get(self, booking_ids: List[str]) -> List[Booking]:
        items = []
        try:
            for start in range(0, len(booking_ids), BATCH_GET_LIMIT):
                chunk = booking_ids[start:start + BATCH_GET_LIMIT]
                request = {
                    self.table.name: {
                        "Keys": [self._booking_key(booking_id) for booking_id in chunk]
                    }
                }
                while request:
                    response = self.client.batch_get_item(RequestItems=request)
                    items.extend(response.get("Responses", {}).get(self.table.name, []))
                    request = response.get("UnprocessedKeys") or None
        except ClientError as err:
            logger.error(f"Error batch reading bookings: {err}")
            raise PersistenceError("could not read bookings") from err

        return [self._to_domain(item) for item in items]

    def update_booking(self, booking: Booking, previous_email: Optional[str] = None):
        """Write the whole booking back if nobody changed it since it was read.

        ``booking.version`` must still hold the version that was loaded; it is
        bumped here once the write succeeds.
        """
        expected_version = booking.version
        item = self._to_item(booking)
        item["version"] = expected_version + 1

        transact_items = [
            {
                "Put": {
                    "TableName": self.table.name,
                    "Item": item,
                    "ConditionExpression": "attribute_exists(pk) AND #version = :expected",
                    "ExpressionAttributeNames": {"#version": "version"},
                    "ExpressionAttributeValues": {":expected": expected_version},
                }
            }
        ]
        new_email = booking.customer_info.email
        if previous_email and previous_email != new_email:
            transact_items.append(
                {
                    "Delete": {
                        "TableName": self.table.name,
                        "Key": self._customer_key(previous_email, booking),
                    }
                }
            )
            transact_items.append(
                {
                    "Put": {
                        "TableName": self.table.name,
                        "Item": {
                            **self._customer_key(new_email, booking),
                            "booking_id": booking.booking_id,
                        },
                    }
                }
            )

        try:
            self.client.transact_write_items(TransactItems=transact_items)
        except ClientError as err:
            if _is_transaction_cancelled(err):
                codes = _cancellation_codes(err)
                if codes and codes[0] == "ConditionalCheckFailed":
                    raise ConflictException("Booking was modified concurrently")
            logger.error(f"Error updating booking {booking.booking_id}: {err}")
            raise PersistenceError("could not update booking") from err

        booking.version = expected_version + 1

    def delete_booking(self, booking: Booking):
        try:
            self.client.transact_write_items(
                TransactItems=[
                    {
                        "Delete": {
                            "TableName": self.table.name,
                            "Key": self._booking_key(booking.booking_id),
                            "ConditionExpression": "attribute_exists(pk)",
                        }
                    },
                    {
                        "Delete": {
                            "TableName": self.table.name,
                            "Key": self._reference_key(booking.booking_reference),
                        }
                    },
                    {
                        "Delete": {
                            "TableName": self.table.name,
                            "Key": self._customer_key(
                                booking.customer_info.email, booking
                            ),
                        }
                    },
                ]
            )
        except ClientError as err:
            if _is_transaction_cancelled(err):
                codes = _cancellation_codes(err)
                if codes and codes[0] == "ConditionalCheckFailed":
                    raise NotFoundException("booking", booking.booking_id)
            logger.error(f"Error deleting booking {booking.booking_id}: {err}")
            raise PersistenceError("could not delete booking") from err

    def _to_item(self, booking: Booking) -> dict:
        customer = booking.customer_info
        details = booking.booking_details
        travelers = details.number_of_travelers

        item = {
            **self._booking_key(booking.booking_id),
            "entity": BOOKING_ENTITY,
            "booking_id": booking.booking_id,
            "package_id": booking.package_id,
            "package_title": booking.package_title,
            "package_price": {
                "amount": Decimal(str(booking.package_price.amount)),
                "currency": booking.package_price.currency,
            },
            "customer_info": _compact(
                {
                    "first_name": customer.first_name,
                    "last_name": customer.last_name,
                    "email": customer.email,
                    "phone": customer.phone,
                    "address": (
                        _compact(vars(customer.address)) if customer.address else None
                    ),
                }
            ),
            "booking_details": _compact(
                {
                    "start_date": optional_to_iso(details.start_date),
                    "end_date": optional_to_iso(details.end_date),
                    "number_of_travelers": {
                        "adults": travelers.adults,
                        "children": travelers.children,
                        "infants": travelers.infants,
                    },
                    "room_type": details.room_type.value,
                    "special_requests": details.special_requests,
                }
            ),
            "emergency_contact": (
                _compact(vars(booking.emergency_contact))
                if booking.emergency_contact
                else None
            ),
            "estimated_total": Decimal(str(booking.estimated_total)),
            "booking_status": booking.booking_status.value,
            "booking_reference": booking.booking_reference,
            "admin_notes": booking.admin_notes,
            "admin_activity_logs": [
                _compact(
                    {
                        "updated_by": entry.updated_by,
                        "status": entry.status.value,
                        "note": entry.note,
                        "date": to_iso_string(entry.date),
                    }
                )
                for entry in booking.admin_activity_logs
            ],
            "contacted_at": optional_to_iso(booking.contacted_at),
            "contacted_by": booking.contacted_by,
            "follow_up_date": optional_to_iso(booking.follow_up_date),
            "customer_email": customer.email,
            "created_at": to_iso_string(booking.created_at),
            "updated_at": to_iso_string(booking.updated_at),
            "version": booking.version,
        }
        return _compact(item)

    @staticmethod
    def _to_domain(item: dict) -> Booking:
        customer = item["customer_info"]
        details = item["booking_details"]
        travelers = details["number_of_travelers"]
        address = customer.get("address")
        contact = item.get("emergency_contact")

        return Booking(
            booking_id=item["booking_id"],
            package_id=item["package_id"],
            package_title=item["package_title"],
            package_price=Money(
                amount=Decimal(str(item["package_price"]["amount"])),
                currency=item["package_price"]["currency"],
            ),
            customer_info=CustomerInfo(
                first_name=customer["first_name"],
                last_name=customer["last_name"],
                email=customer["email"],
                phone=customer["phone"],
                address=Address(**address) if address else None,
            ),
            booking_details=BookingDetails(
                number_of_travelers=TravelerCount(
                    adults=int(travelers["adults"]),
                    children=int(travelers.get("children", 0)),
                    infants=int(travelers.get("infants", 0)),
                ),
                start_date=optional_from_iso(details.get("start_date")),
                end_date=optional_from_iso(details.get("end_date")),
                room_type=RoomType(details.get("room_type", RoomType.DOUBLE.value)),
                special_requests=details.get("special_requests"),
            ),
            emergency_contact=EmergencyContact(**contact) if contact else None,
            estimated_total=Decimal(str(item["estimated_total"])),
            booking_reference=item["booking_reference"],
            booking_status=BookingStatus(item["booking_status"]),
            admin_notes=item.get("admin_notes"),
            admin_activity_logs=[
                ActivityLogEntry(
                    updated_by=entry["updated_by"],
                    status=BookingStatus(entry["status"]),
                    note=entry.get("note"),
                    date=from_iso_string(entry["date"]),
                )
                for entry in item.get("admin_activity_logs", [])
            ],
            contacted_at=optional_from_iso(item.get("contacted_at")),
            contacted_by=item.get("contacted_by"),
            follow_up_date=optional_from_iso(item.get("follow_up_date")),
            created_at=from_iso_string(item["created_at"]),
            updated_at=from_iso_string(item["updated_at"]),
            version=int(item.get("version", 1)),
        )
