import os

TABLE_NAME = os.environ.get("TABLE_NAME", "travel-bookings")
AWS_REGION = os.environ.get("AWS_REGION", "ap-south-1")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

DEFAULT_PAGE_SIZE = int(os.environ.get("DEFAULT_PAGE_SIZE", "10"))
MAX_PAGE_SIZE = int(os.environ.get("MAX_PAGE_SIZE", "100"))

DEFAULT_CURRENCY = os.environ.get("DEFAULT_CURRENCY", "NGN")

# any status may move to any other unless this is switched on
STRICT_STATUS_TRANSITIONS = (
    os.environ.get("STRICT_STATUS_TRANSITIONS", "false").lower() == "true"
)

MAX_REFERENCE_ATTEMPTS = int(os.environ.get("MAX_REFERENCE_ATTEMPTS", "3"))
REFERENCE_PREFIX = "BK"

MAX_NOTE_LENGTH = 1000
MAX_SPECIAL_REQUESTS_LENGTH = 500

CURRENCY_SYMBOLS = {
    "₦": "NGN",
    "$": "USD",
    "£": "GBP",
    "€": "EUR",
    "₹": "INR",
}
