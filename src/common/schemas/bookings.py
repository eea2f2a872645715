from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel
from common.models.bookings import (
    Address,
    Booking,
    BookingPage,
    BookingDetails,
    BookingStatus,
    CustomerInfo,
    EmergencyContact,
    RoomType,
    TravelerCount,
)
from common.utils.constants import (
    DEFAULT_PAGE_SIZE,
    MAX_NOTE_LENGTH,
    MAX_PAGE_SIZE,
    MAX_SPECIAL_REQUESTS_LENGTH,
)
from common.utils.datetime_normaliser import (
    normalise_to_utc,
    optional_to_iso,
    utc_now,
)

SORTABLE_FIELDS = (
    "created_at",
    "updated_at",
    "estimated_total",
    "booking_status",
    "booking_reference",
    "follow_up_date",
    "package_title",
)


class RequestSchema(BaseModel):
    # bodies arrive camelCase from the web client, snake_case is accepted too
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _normalise_optional_date(value):
    if value is None:
        return None
    return normalise_to_utc(value)


class AddressSchema(RequestSchema):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None

    def to_domain(self) -> Address:
        return Address(**self.model_dump())


class CustomerInfoSchema(RequestSchema):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: EmailStr
    phone: str = Field(min_length=1)
    address: Optional[AddressSchema] = None

    @field_validator("first_name", "last_name", "phone", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email", mode="before")
    @classmethod
    def normalise_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    def to_domain(self) -> CustomerInfo:
        return CustomerInfo(
            first_name=self.first_name,
            last_name=self.last_name,
            email=str(self.email),
            phone=self.phone,
            address=self.address.to_domain() if self.address else None,
        )


class TravelerCountSchema(RequestSchema):
    adults: int = Field(ge=1)
    children: int = Field(default=0, ge=0)
    infants: int = Field(default=0, ge=0)

    def to_domain(self) -> TravelerCount:
        return TravelerCount(
            adults=self.adults, children=self.children, infants=self.infants
        )


class BookingDetailsSchema(RequestSchema):
    number_of_travelers: TravelerCountSchema
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    room_type: RoomType = RoomType.DOUBLE
    special_requests: Optional[str] = Field(
        default=None, max_length=MAX_SPECIAL_REQUESTS_LENGTH
    )

    @field_validator("start_date", "end_date")
    @classmethod
    def to_utc(cls, v):
        return _normalise_optional_date(v)

    @model_validator(mode="after")
    def check_date_order(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    def to_domain(self) -> BookingDetails:
        return BookingDetails(
            number_of_travelers=self.number_of_travelers.to_domain(),
            start_date=self.start_date,
            end_date=self.end_date,
            room_type=self.room_type,
            special_requests=self.special_requests,
        )


class EmergencyContactSchema(RequestSchema):
    name: Optional[str] = None
    phone: Optional[str] = None
    relationship: Optional[str] = None

    def to_domain(self) -> EmergencyContact:
        return EmergencyContact(**self.model_dump())


class BookingRequest(RequestSchema):
    package_id: str = Field(min_length=1)
    customer_info: CustomerInfoSchema
    booking_details: BookingDetailsSchema
    emergency_contact: Optional[EmergencyContactSchema] = None


class StatusUpdateRequest(RequestSchema):
    booking_status: Optional[BookingStatus] = None
    admin_notes: Optional[str] = Field(default=None, max_length=MAX_NOTE_LENGTH)
    contacted_by: Optional[str] = None
    follow_up_date: Optional[datetime] = None
    note: Optional[str] = Field(default=None, max_length=MAX_NOTE_LENGTH)

    @field_validator("follow_up_date")
    @classmethod
    def to_utc(cls, v):
        return _normalise_optional_date(v)


class CancelRequest(RequestSchema):
    reason: Optional[str] = Field(default=None, max_length=MAX_NOTE_LENGTH)


class BookingUpdateRequest(RequestSchema):
    """Fields an admin may overwrite directly.

    Anything else in the body (reference, created_at, the package snapshot,
    the activity log...) is dropped.
    """

    model_config = ConfigDict(extra="ignore")

    customer_info: Optional[CustomerInfoSchema] = None
    booking_details: Optional[BookingDetailsSchema] = None
    emergency_contact: Optional[EmergencyContactSchema] = None
    booking_status: Optional[BookingStatus] = None
    admin_notes: Optional[str] = Field(default=None, max_length=MAX_NOTE_LENGTH)
    follow_up_date: Optional[datetime] = None
    contacted_at: Optional[datetime] = None
    contacted_by: Optional[str] = None

    @field_validator("follow_up_date", "contacted_at")
    @classmethod
    def to_utc(cls, v):
        return _normalise_optional_date(v)


class PaginationQuery(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)


class BookingListQuery(PaginationQuery):
    status: Optional[BookingStatus] = None
    search: Optional[str] = None
    needs_follow_up: bool = Field(
        default=False,
        validation_alias=AliasChoices("needs_follow_up", "needsFollowUp"),
    )
    sort_by: Literal[SORTABLE_FIELDS] = Field(
        default="created_at", validation_alias=AliasChoices("sort_by", "sortBy")
    )
    sort_order: Literal["asc", "desc"] = Field(
        default="desc", validation_alias=AliasChoices("sort_order", "sortOrder")
    )

    @field_validator("search", mode="before")
    @classmethod
    def blank_search_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v


def _money_value(amount: Decimal):
    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)


def _date_value(value: Optional[datetime]):
    return optional_to_iso(value)


def serialize_booking(booking: Booking, now: Optional[datetime] = None) -> dict:
    now = now or utc_now()
    customer = booking.customer_info
    details = booking.booking_details
    travelers = details.number_of_travelers
    address = customer.address
    contact = booking.emergency_contact

    return {
        "booking_id": booking.booking_id,
        "booking_reference": booking.booking_reference,
        "package_id": booking.package_id,
        "package_title": booking.package_title,
        "package_price": {
            "amount": _money_value(booking.package_price.amount),
            "currency": booking.package_price.currency,
            "display": booking.package_price.format(),
        },
        "package": (
            {
                "package_id": booking.package.package_id,
                "title": booking.package.title,
                "category": booking.package.category,
                "location": booking.package.location,
                "duration": booking.package.duration,
                "rating": booking.package.rating,
                "image": booking.package.image,
                "includes": booking.package.includes,
            }
            if booking.package
            else None
        ),
        "customer_info": {
            "first_name": customer.first_name,
            "last_name": customer.last_name,
            "email": customer.email,
            "phone": customer.phone,
            "address": (
                {
                    "street": address.street,
                    "city": address.city,
                    "state": address.state,
                    "zip_code": address.zip_code,
                    "country": address.country,
                }
                if address
                else None
            ),
        },
        "booking_details": {
            "start_date": _date_value(details.start_date),
            "end_date": _date_value(details.end_date),
            "number_of_travelers": {
                "adults": travelers.adults,
                "children": travelers.children,
                "infants": travelers.infants,
            },
            "room_type": details.room_type.value,
            "special_requests": details.special_requests,
        },
        "emergency_contact": (
            {
                "name": contact.name,
                "phone": contact.phone,
                "relationship": contact.relationship,
            }
            if contact
            else None
        ),
        "estimated_total": _money_value(booking.estimated_total),
        "booking_status": booking.booking_status.value,
        "admin_notes": booking.admin_notes,
        "admin_activity_logs": [
            {
                "updated_by": entry.updated_by,
                "status": entry.status.value,
                "note": entry.note,
                "date": _date_value(entry.date),
            }
            for entry in booking.admin_activity_logs
        ],
        "contacted_at": _date_value(booking.contacted_at),
        "contacted_by": booking.contacted_by,
        "follow_up_date": _date_value(booking.follow_up_date),
        "created_at": _date_value(booking.created_at),
        "updated_at": _date_value(booking.updated_at),
        "version": booking.version,
        "total_travelers": booking.total_travelers,
        "duration": booking.duration,
        "customer_full_name": booking.customer_full_name,
        "needs_follow_up": booking.needs_follow_up(now),
    }


def serialize_page(page: BookingPage, now: Optional[datetime] = None) -> dict:
    now = now or utc_now()
    data = {
        "bookings": [serialize_booking(b, now) for b in page.bookings],
        "pagination": {
            "current_page": page.page,
            "limit": page.limit,
            "total_pages": page.total_pages,
            "total_bookings": page.total,
            "has_next": page.has_next,
            "has_prev": page.has_prev,
        },
    }
    if page.stats is not None:
        data["stats"] = [
            {
                "status": s.status.value,
                "count": s.count,
                "total_estimated": _money_value(s.total_estimated),
            }
            for s in page.stats
        ]
    return data
