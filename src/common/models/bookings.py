import math
from enum import Enum
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from common.models.packages import Money, PackageSummary
from common.utils.datetime_normaliser import utc_now


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONTACTED = "contacted"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    def can_transition_to(self, target: "BookingStatus") -> bool:
        return target in ALLOWED_TRANSITIONS[self]


# only enforced when STRICT_STATUS_TRANSITIONS is on
ALLOWED_TRANSITIONS = {
    BookingStatus.PENDING: {
        BookingStatus.CONTACTED,
        BookingStatus.CONFIRMED,
        BookingStatus.CANCELLED,
    },
    BookingStatus.CONTACTED: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.CANCELLED: set(),
    BookingStatus.COMPLETED: set(),
}


class RoomType(str, Enum):
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"
    FAMILY = "family"
    SUITE = "suite"


@dataclass
class Address:
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


@dataclass
class CustomerInfo:
    first_name: str
    last_name: str
    email: str
    phone: str
    address: Optional[Address] = None


@dataclass
class TravelerCount:
    adults: int
    children: int = 0
    infants: int = 0

    @property
    def total(self) -> int:
        return self.adults + self.children + self.infants


@dataclass
class BookingDetails:
    number_of_travelers: TravelerCount
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    room_type: RoomType = RoomType.DOUBLE
    special_requests: Optional[str] = None


@dataclass
class EmergencyContact:
    name: Optional[str] = None
    phone: Optional[str] = None
    relationship: Optional[str] = None


@dataclass(frozen=True)
class ActivityLogEntry:
    updated_by: str
    status: BookingStatus
    note: Optional[str] = None
    date: datetime = field(default_factory=utc_now)


@dataclass
class Booking:
    booking_id: str
    package_id: str
    package_title: str
    package_price: Money
    customer_info: CustomerInfo
    booking_details: BookingDetails
    estimated_total: Decimal
    booking_reference: str
    booking_status: BookingStatus = BookingStatus.PENDING
    emergency_contact: Optional[EmergencyContact] = None
    admin_notes: Optional[str] = None
    admin_activity_logs: List[ActivityLogEntry] = field(default_factory=list)
    contacted_at: Optional[datetime] = None
    contacted_by: Optional[str] = None
    follow_up_date: Optional[datetime] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    version: int = 1

    # populated from the package lookup for responses, never stored
    package: Optional[PackageSummary] = field(default=None, compare=False)

    @property
    def total_travelers(self) -> int:
        return self.booking_details.number_of_travelers.total

    @property
    def duration(self) -> Optional[int]:
        start = self.booking_details.start_date
        end = self.booking_details.end_date
        if start is None or end is None:
            return None
        return math.ceil(abs((end - start).total_seconds()) / 86400)

    @property
    def customer_full_name(self) -> str:
        return f"{self.customer_info.first_name} {self.customer_info.last_name}"

    def needs_follow_up(self, now: Optional[datetime] = None) -> bool:
        if self.booking_status == BookingStatus.PENDING:
            return True
        now = now or utc_now()
        return self.follow_up_date is not None and self.follow_up_date < now

    def append_activity(self, entry: ActivityLogEntry):
        self.admin_activity_logs.append(entry)


@dataclass
class StatusSummary:
    status: BookingStatus
    count: int
    total_estimated: Decimal


@dataclass
class BookingPage:
    bookings: List[Booking]
    page: int
    limit: int
    total: int
    stats: Optional[List[StatusSummary]] = None

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1
