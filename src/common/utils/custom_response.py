from pydantic import BaseModel, ValidationError
from typing import Generic, List, TypeVar, Optional

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    status_code: int
    message: str
    data: Optional[T] = None


def send_custom_response(status_code: int, message: str, data: Optional[T] = None):
    return {
        "statusCode": status_code,
        "headers": {
            "Content-Type": "application/json",
        },
        "body": APIResponse(
            status_code=status_code, message=message, data=data
        ).model_dump_json(),
    }


def validation_details(err: ValidationError) -> List[dict]:
    return [
        {"field": ".".join(map(str, e["loc"])), "message": e["msg"]}
        for e in err.errors()
    ]


def send_validation_error(err: ValidationError):
    details = validation_details(err)
    message = "; ".join(f"{d['field']}: {d['message']}" for d in details)
    return send_custom_response(400, message or "Invalid request", details)
