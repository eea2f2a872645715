from typing import Optional
from urllib.parse import unquote
from common.models.users import UserRole
from common.utils.custom_exceptions import Forbidden, Unauthorized


def get_authorizer(event: dict) -> dict:
    return (event.get("requestContext") or {}).get("authorizer") or {}


def require_admin(event: dict) -> str:
    """Return the acting admin's name, or raise if the caller is not an admin."""
    authorizer = get_authorizer(event)
    role_raw = authorizer.get("role")
    if not role_raw:
        raise Unauthorized("Unauthorized")

    try:
        role = UserRole(role_raw.upper())
    except ValueError:
        raise Forbidden("Forbidden")

    if role != UserRole.ADMIN:
        raise Forbidden("Only admins can manage bookings")

    actor = authorizer.get("name") or authorizer.get("email")
    if not actor:
        raise Unauthorized("Unauthorized")
    return actor


def path_param(event: dict, name: str) -> Optional[str]:
    value = (event.get("pathParameters") or {}).get(name)
    if not value:
        return None
    return unquote(value)


def query_params(event: dict) -> dict:
    params = event.get("queryStringParameters") or {}
    return {k: v for k, v in params.items() if v not in (None, "")}
