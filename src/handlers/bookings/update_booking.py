import logging
from boto3 import resource

from common.repository.booking_repo import BookingRepository
from common.repository.package_repo import PackageRepository
from common.services.booking_service import BookingService
from common.schemas.bookings import (
    BookingUpdateRequest,
    StatusUpdateRequest,
    serialize_booking,
)
from common.utils.constants import AWS_REGION, LOG_LEVEL, TABLE_NAME
from common.utils.custom_response import send_custom_response, send_validation_error
from common.utils.custom_exceptions import (
    ConflictException,
    Forbidden,
    NotFoundException,
    PersistenceError,
    Unauthorized,
)
from common.utils.request_context import path_param, require_admin
from pydantic import ValidationError

logger = logging.getLogger()
logger.setLevel(LOG_LEVEL)

dynamodb = resource("dynamodb", region_name=AWS_REGION)
table = dynamodb.Table(TABLE_NAME)

booking_repo = BookingRepository(table)
package_repo = PackageRepository(table)
booking_service = BookingService(booking_repo=booking_repo, package_repo=package_repo)


def update_booking(event, context):
    try:
        require_admin(event)
    except (Unauthorized, Forbidden) as err:
        return send_custom_response(err.status_code, str(err))

    booking_id = path_param(event, "booking_id")
    if not booking_id:
        return send_custom_response(400, "booking_id is required in the path")

    if not event.get("body"):
        return send_custom_response(400, "Request body is required")

    try:
        request_body = BookingUpdateRequest.model_validate_json(event["body"])
    except ValidationError as e:
        return send_validation_error(e)

    try:
        booking = booking_service.update_booking(booking_id, request_body)
        return send_custom_response(200, "Booking updated successfully", serialize_booking(booking))
    except NotFoundException as err:
        return send_custom_response(err.status_code, str(err))
    except ConflictException as err:
        return send_custom_response(err.status_code, str(err))
    except PersistenceError as err:
        logger.error(f"Failed to update booking {booking_id}: {err}")
        return send_custom_response(err.status_code, "Failed to update booking")
    except Exception:
        logger.exception(f"Unhandled error while updating booking {booking_id}")
        return send_custom_response(500, "Internal server error")


def update_booking_status(event, context):
    try:
        actor = require_admin(event)
    except (Unauthorized, Forbidden) as err:
        return send_custom_response(err.status_code, str(err))

    booking_id = path_param(event, "booking_id")
    if not booking_id:
        return send_custom_response(400, "booking_id is required in the path")

    if not event.get("body"):
        return send_custom_response(400, "Request body is required")

    try:
        request_body = StatusUpdateRequest.model_validate_json(event["body"])
    except ValidationError as e:
        return send_validation_error(e)

    try:
        booking = booking_service.update_booking_status(booking_id, request_body, actor)
        return send_custom_response(
            200, "Booking status updated successfully", serialize_booking(booking)
        )
    except NotFoundException as err:
        return send_custom_response(err.status_code, str(err))
    except ConflictException as err:
        return send_custom_response(err.status_code, str(err))
    except PersistenceError as err:
        logger.error(f"Failed to update status of booking {booking_id}: {err}")
        return send_custom_response(err.status_code, "Failed to update booking status")
    except Exception:
        logger.exception(f"Unhandled error while updating status of booking {booking_id}")
        return send_custom_response(500, "Internal server error")
