import logging
from boto3 import resource

from common.repository.booking_repo import BookingRepository
from common.repository.package_repo import PackageRepository
from common.services.booking_service import BookingService
from common.schemas.bookings import BookingRequest, serialize_booking
from common.utils.constants import AWS_REGION, LOG_LEVEL, TABLE_NAME
from common.utils.custom_response import send_custom_response, send_validation_error
from common.utils.custom_exceptions import (
    NotFoundException,
    PersistenceError,
    PriceParseError,
)
from pydantic import ValidationError

logger = logging.getLogger()
logger.setLevel(LOG_LEVEL)

dynamodb = resource("dynamodb", region_name=AWS_REGION)
table = dynamodb.Table(TABLE_NAME)

booking_repo = BookingRepository(table)
package_repo = PackageRepository(table)
booking_service = BookingService(booking_repo=booking_repo, package_repo=package_repo)


def create_booking(event, context):
    if not event.get("body"):
        return send_custom_response(400, "Request body is required")

    try:
        request_body = BookingRequest.model_validate_json(event["body"])
    except ValidationError as e:
        return send_validation_error(e)

    try:
        booking = booking_service.create_booking(request_body)
        return send_custom_response(
            201,
            "Booking request submitted successfully. We will contact you soon!",
            serialize_booking(booking),
        )

    except NotFoundException as err:
        return send_custom_response(err.status_code, str(err))

    except PriceParseError as err:
        logger.error(f"Package {request_body.package_id} has an unreadable price: {err}")
        return send_custom_response(err.status_code, "Package price is not available")

    except PersistenceError as err:
        logger.error(f"Failed to create booking: {err}")
        return send_custom_response(err.status_code, "Failed to create booking")

    except Exception:
        logger.exception("Unhandled error while creating booking")
        return send_custom_response(500, "Internal server error")
