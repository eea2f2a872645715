import logging
from boto3 import resource

from common.repository.booking_repo import BookingRepository
from common.repository.package_repo import PackageRepository
from common.services.booking_service import BookingService
from common.schemas.bookings import (
    BookingListQuery,
    PaginationQuery,
    serialize_booking,
    serialize_page,
)
from common.utils.constants import AWS_REGION, LOG_LEVEL, TABLE_NAME
from common.utils.custom_response import send_custom_response, send_validation_error
from common.utils.custom_exceptions import (
    Forbidden,
    NotFoundException,
    PersistenceError,
    Unauthorized,
)
from common.utils.request_context import path_param, query_params, require_admin
from pydantic import ValidationError

logger = logging.getLogger()
logger.setLevel(LOG_LEVEL)

dynamodb = resource("dynamodb", region_name=AWS_REGION)
table = dynamodb.Table(TABLE_NAME)

booking_repo = BookingRepository(table)
package_repo = PackageRepository(table)
booking_service = BookingService(booking_repo=booking_repo, package_repo=package_repo)


def list_bookings(event, context):
    try:
        require_admin(event)
    except (Unauthorized, Forbidden) as err:
        return send_custom_response(err.status_code, str(err))

    try:
        query = BookingListQuery.model_validate(query_params(event))
    except ValidationError as e:
        return send_validation_error(e)

    try:
        page = booking_service.list_bookings(query)
        return send_custom_response(
            200, "Bookings retrieved successfully", serialize_page(page)
        )
    except PersistenceError as err:
        logger.error(f"Failed to list bookings: {err}")
        return send_custom_response(err.status_code, "Failed to fetch bookings")
    except Exception:
        logger.exception("Unhandled error while listing bookings")
        return send_custom_response(500, "Internal server error")


def get_follow_up_bookings(event, context):
    try:
        require_admin(event)
    except (Unauthorized, Forbidden) as err:
        return send_custom_response(err.status_code, str(err))

    try:
        bookings = booking_service.get_follow_up_bookings()
        return send_custom_response(
            200,
            "Follow-up bookings retrieved successfully",
            {
                "count": len(bookings),
                "bookings": [serialize_booking(b) for b in bookings],
            },
        )
    except PersistenceError as err:
        logger.error(f"Failed to list follow-up bookings: {err}")
        return send_custom_response(err.status_code, "Failed to fetch follow-up bookings")
    except Exception:
        logger.exception("Unhandled error while listing follow-up bookings")
        return send_custom_response(500, "Internal server error")


def get_booking(event, context):
    try:
        require_admin(event)
    except (Unauthorized, Forbidden) as err:
        return send_custom_response(err.status_code, str(err))

    booking_id = path_param(event, "booking_id")
    if not booking_id:
        return send_custom_response(400, "booking_id is required in the path")

    try:
        booking = booking_service.get_booking(booking_id)
        return send_custom_response(200, "Booking retrieved successfully", serialize_booking(booking))
    except NotFoundException as err:
        return send_custom_response(err.status_code, str(err))
    except PersistenceError as err:
        logger.error(f"Failed to fetch booking {booking_id}: {err}")
        return send_custom_response(err.status_code, "Failed to fetch booking")
    except Exception:
        logger.exception(f"Unhandled error while fetching booking {booking_id}")
        return send_custom_response(500, "Internal server error")


def get_booking_by_reference(event, context):
    reference = path_param(event, "reference")
    if not reference:
        return send_custom_response(400, "reference is required in the path")

    try:
        booking = booking_service.get_booking_by_reference(reference.strip().upper())
        return send_custom_response(200, "Booking retrieved successfully", serialize_booking(booking))
    except NotFoundException as err:
        return send_custom_response(err.status_code, str(err))
    except PersistenceError as err:
        logger.error(f"Failed to fetch booking {reference}: {err}")
        return send_custom_response(err.status_code, "Failed to fetch booking")
    except Exception:
        logger.exception(f"Unhandled error while fetching booking {reference}")
        return send_custom_response(500, "Internal server error")


def get_customer_bookings(event, context):
    email = path_param(event, "email")
    if not email:
        return send_custom_response(400, "email is required in the path")

    try:
        query = PaginationQuery.model_validate(query_params(event))
    except ValidationError as e:
        return send_validation_error(e)

    try:
        page = booking_service.get_customer_bookings(email, query)
        return send_custom_response(
            200, "Bookings retrieved successfully", serialize_page(page)
        )
    except PersistenceError as err:
        logger.error(f"Failed to fetch customer bookings: {err}")
        return send_custom_response(err.status_code, "Failed to fetch customer bookings")
    except Exception:
        logger.exception("Unhandled error while fetching customer bookings")
        return send_custom_response(500, "Internal server error")
