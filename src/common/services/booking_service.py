import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, List, Optional
from uuid import uuid4
from common.repository.booking_repo import BookingRepository
from common.repository.package_repo import PackageRepository
from common.models.bookings import (
    ActivityLogEntry,
    Booking,
    BookingPage,
    BookingStatus,
    StatusSummary,
)
from common.models.packages import PackageSummary
from common.schemas.bookings import (
    BookingListQuery,
    BookingRequest,
    BookingUpdateRequest,
    PaginationQuery,
    StatusUpdateRequest,
)
from common.utils.booking_reference import generate_booking_reference
from common.utils.constants import MAX_REFERENCE_ATTEMPTS, STRICT_STATUS_TRANSITIONS
from common.utils.custom_exceptions import (
    ConflictException,
    DuplicateReference,
    NotFoundException,
    PersistenceError,
    Unauthorized,
)
from common.utils.datetime_normaliser import utc_now

logger = logging.getLogger(__name__)

DEFAULT_CANCEL_NOTE = "Booking cancelled"


class BookingService:
    def __init__(
        self,
        booking_repo: BookingRepository,
        package_repo: PackageRepository,
        strict_transitions: bool = STRICT_STATUS_TRANSITIONS,
        reference_generator: Callable[[], str] = generate_booking_reference,
        clock: Callable[[], datetime] = utc_now,
        max_reference_attempts: int = MAX_REFERENCE_ATTEMPTS,
    ):
        self.booking_repo = booking_repo
        self.package_repo = package_repo
        self.strict_transitions = strict_transitions
        self.reference_generator = reference_generator
        self.clock = clock
        self.max_reference_attempts = max_reference_attempts

    def create_booking(self, req: BookingRequest) -> Booking:
        package = self.package_repo.get_package_by_id(req.package_id)
        if package is None:
            raise NotFoundException("package", req.package_id)

        details = req.booking_details.to_domain()
        estimated_total = package.price.amount * details.number_of_travelers.total
        now = self.clock()

        booking = Booking(
            booking_id=str(uuid4()),
            package_id=req.package_id,
            package_title=package.title,
            package_price=package.price,
            customer_info=req.customer_info.to_domain(),
            booking_details=details,
            emergency_contact=(
                req.emergency_contact.to_domain() if req.emergency_contact else None
            ),
            estimated_total=estimated_total,
            booking_reference=self.reference_generator(),
            booking_status=BookingStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

        for attempt in range(1, self.max_reference_attempts + 1):
            try:
                self.booking_repo.add_booking(booking)
                break
            except DuplicateReference:
                logger.warning(
                    f"Reference {booking.booking_reference} taken "
                    f"(attempt {attempt}/{self.max_reference_attempts})"
                )
                if attempt == self.max_reference_attempts:
                    raise PersistenceError("could not allocate a unique booking reference")
                booking.booking_reference = self.reference_generator()

        logger.info(
            f"Created booking {booking.booking_id} ({booking.booking_reference}) "
            f"for package {package.package_id}"
        )
        booking.package = package.summary()
        return booking

    def get_booking(self, booking_id: str) -> Booking:
        booking = self._load(booking_id)
        self._populate([booking])
        return booking

    def get_booking_by_reference(self, reference: str) -> Booking:
        booking = self.booking_repo.get_booking_by_reference(reference)
        if booking is None:
            raise NotFoundException("booking", reference)
        self._populate([booking])
        return booking

    def list_bookings(self, query: BookingListQuery) -> BookingPage:
        now = self.clock()
        bookings = self.booking_repo.list_bookings()

        matches = [b for b in bookings if self._matches(b, query, now)]
        matches = self._sort(matches, query.sort_by, query.sort_order == "desc")

        page = self._paginate(matches, query.page, query.limit)
        page.stats = self._status_breakdown(bookings)
        self._populate(page.bookings)
        return page

    def get_customer_bookings(self, email: str, query: PaginationQuery) -> BookingPage:
        bookings = self.booking_repo.get_customer_bookings(email.strip().lower())
        page = self._paginate(bookings, query.page, query.limit)
        self._populate(page.bookings)
        return page

    def get_follow_up_bookings(self) -> List[Booking]:
        now = self.clock()
        bookings = [
            b for b in self.booking_repo.list_bookings() if self._is_follow_up(b, now)
        ]
        bookings = self._sort(bookings, "created_at", descending=True)
        self._populate(bookings)
        return bookings

    def update_booking(self, booking_id: str, req: BookingUpdateRequest) -> Booking:
        booking = self._load(booking_id)
        # package read comes first so a failed lookup never follows a committed write
        self._populate([booking])
        previous_email = booking.customer_info.email
        fields = req.model_fields_set

        if "customer_info" in fields and req.customer_info is not None:
            booking.customer_info = req.customer_info.to_domain()
        if "booking_details" in fields and req.booking_details is not None:
            booking.booking_details = req.booking_details.to_domain()
        if "emergency_contact" in fields:
            booking.emergency_contact = (
                req.emergency_contact.to_domain() if req.emergency_contact else None
            )
        if "booking_status" in fields and req.booking_status is not None:
            self._check_transition(booking.booking_status, req.booking_status)
            booking.booking_status = req.booking_status
        if "admin_notes" in fields:
            booking.admin_notes = req.admin_notes
        if "follow_up_date" in fields:
            booking.follow_up_date = req.follow_up_date
        if "contacted_at" in fields:
            booking.contacted_at = req.contacted_at
        if "contacted_by" in fields:
            booking.contacted_by = req.contacted_by

        booking.updated_at = self.clock()
        self.booking_repo.update_booking(booking, previous_email=previous_email)
        logger.info(f"Updated booking {booking_id} fields {sorted(fields)}")
        return booking

    def update_booking_status(
        self, booking_id: str, req: StatusUpdateRequest, actor: str
    ) -> Booking:
        if not actor:
            raise Unauthorized("an acting admin is required to update a booking status")

        booking = self._load(booking_id)
        self._populate([booking])
        now = self.clock()

        if req.booking_status is not None:
            self._check_transition(booking.booking_status, req.booking_status)
            booking.booking_status = req.booking_status
            if req.booking_status == BookingStatus.CONTACTED:
                booking.contacted_at = now
                booking.contacted_by = req.contacted_by or actor

        if req.admin_notes is not None:
            booking.admin_notes = req.admin_notes

        if req.follow_up_date is not None:
            booking.follow_up_date = req.follow_up_date

        booking.append_activity(
            ActivityLogEntry(
                updated_by=actor,
                status=booking.booking_status,
                note=req.note,
                date=now,
            )
        )
        booking.updated_at = now

        self.booking_repo.update_booking(booking)
        logger.info(
            f"{actor} set booking {booking_id} to {booking.booking_status.value}"
        )
        return booking

    def cancel_booking(self, booking_id: str, reason: Optional[str] = None) -> Booking:
        booking = self._load(booking_id)
        if booking.booking_status == BookingStatus.CANCELLED:
            raise ConflictException("Booking is already cancelled")
        self._populate([booking])

        self._check_transition(booking.booking_status, BookingStatus.CANCELLED)
        booking.booking_status = BookingStatus.CANCELLED
        booking.admin_notes = reason or DEFAULT_CANCEL_NOTE
        booking.updated_at = self.clock()

        self.booking_repo.update_booking(booking)
        logger.info(f"Cancelled booking {booking_id}")
        return booking

    def delete_booking(self, booking_id: str):
        booking = self._load(booking_id)
        self.booking_repo.delete_booking(booking)
        logger.info(f"Deleted booking {booking_id} ({booking.booking_reference})")

    def _load(self, booking_id: str) -> Booking:
        booking = self.booking_repo.get_booking_by_id(booking_id)
        if booking is None:
            raise NotFoundException("booking", booking_id)
        return booking

    def _check_transition(self, current: BookingStatus, target: BookingStatus):
        if not self.strict_transitions or current == target:
            return
        if not current.can_transition_to(target):
            raise ConflictException(
                f"Cannot move booking from {current.value} to {target.value}"
            )

    @staticmethod
    def _is_follow_up(booking: Booking, now: datetime) -> bool:
        if booking.booking_status == BookingStatus.PENDING:
            return True
        return booking.follow_up_date is not None and booking.follow_up_date <= now

    def _matches(self, booking: Booking, query: BookingListQuery, now: datetime) -> bool:
        if query.status is not None and booking.booking_status != query.status:
            return False

        # the follow-up clause takes the place of the search clause
        if query.needs_follow_up:
            return self._is_follow_up(booking, now)

        if query.search:
            term = query.search.lower()
            haystack = (
                booking.booking_reference,
                booking.customer_info.first_name,
                booking.customer_info.last_name,
                booking.customer_info.email,
                booking.package_title,
            )
            return any(term in (value or "").lower() for value in haystack)

        return True

    @staticmethod
    def _sort(bookings: List[Booking], sort_by: str, descending: bool) -> List[Booking]:
        def key(booking: Booking):
            value = getattr(booking, sort_by)
            if isinstance(value, BookingStatus):
                return value.value
            return value

        present = [b for b in bookings if key(b) is not None]
        missing = [b for b in bookings if key(b) is None]
        present.sort(key=key, reverse=descending)
        return present + missing

    @staticmethod
    def _paginate(bookings: List[Booking], page: int, limit: int) -> BookingPage:
        start = (page - 1) * limit
        return BookingPage(
            bookings=bookings[start:start + limit],
            page=page,
            limit=limit,
            total=len(bookings),
        )

    @staticmethod
    def _status_breakdown(bookings: List[Booking]) -> List[StatusSummary]:
        summaries: Dict[BookingStatus, StatusSummary] = {}
        for booking in bookings:
            summary = summaries.setdefault(
                booking.booking_status,
                StatusSummary(status=booking.booking_status, count=0, total_estimated=Decimal(0)),
            )
            summary.count += 1
            summary.total_estimated += booking.estimated_total
        return [summaries[status] for status in BookingStatus if status in summaries]

    def _populate(self, bookings: List[Booking]):
        cache: Dict[str, Optional[PackageSummary]] = {}
        for booking in bookings:
            if booking.package_id not in cache:
                cache[booking.package_id] = self.package_repo.get_package_summary(
                    booking.package_id
                )
            booking.package = cache[booking.package_id]
