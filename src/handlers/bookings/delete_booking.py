import logging
from boto3 import resource

from common.repository.booking_repo import BookingRepository
from common.repository.package_repo import PackageRepository
from common.services.booking_service import BookingService
from common.utils.constants import AWS_REGION, LOG_LEVEL, TABLE_NAME
from common.utils.custom_response import send_custom_response
from common.utils.custom_exceptions import (
    Forbidden,
    NotFoundException,
    PersistenceError,
    Unauthorized,
)
from common.utils.request_context import path_param, require_admin

logger = logging.getLogger()
logger.setLevel(LOG_LEVEL)

dynamodb = resource("dynamodb", region_name=AWS_REGION)
table = dynamodb.Table(TABLE_NAME)

booking_repo = BookingRepository(table)
package_repo = PackageRepository(table)
booking_service = BookingService(booking_repo=booking_repo, package_repo=package_repo)


def delete_booking(event, context):
    try:
        actor = require_admin(event)
    except (Unauthorized, Forbidden) as err:
        return send_custom_response(err.status_code, str(err))

    booking_id = path_param(event, "booking_id")
    if not booking_id:
        return send_custom_response(400, "booking_id is required in the path")

    try:
        booking_service.delete_booking(booking_id)
        logger.info(f"{actor} deleted booking {booking_id}")
        return send_custom_response(200, "Booking deleted successfully")
    except NotFoundException as err:
        return send_custom_response(err.status_code, str(err))
    except PersistenceError as err:
        logger.error(f"Failed to delete booking {booking_id}: {err}")
        return send_custom_response(err.status_code, "Failed to delete booking")
    except Exception:
        logger.exception(f"Unhandled error while deleting booking {booking_id}")
        return send_custom_response(500, "Internal server error")
