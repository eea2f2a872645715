import secrets
import string
from datetime import datetime
from typing import Optional
from common.utils.constants import REFERENCE_PREFIX
from common.utils.datetime_normaliser import utc_now

BASE36_ALPHABET = string.digits + string.ascii_lowercase
RANDOM_SUFFIX_LENGTH = 5


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("base36 encoding needs a non-negative integer")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_booking_reference(now: Optional[datetime] = None) -> str:
    now = now or utc_now()
    timestamp = to_base36(int(now.timestamp() * 1000))
    suffix = "".join(
        secrets.choice(BASE36_ALPHABET) for _ in range(RANDOM_SUFFIX_LENGTH)
    )
    return f"{REFERENCE_PREFIX}{timestamp}{suffix}".upper()
