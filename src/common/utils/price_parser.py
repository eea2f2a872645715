import re
from decimal import Decimal, InvalidOperation
from common.models.packages import Money
from common.utils.constants import CURRENCY_SYMBOLS, DEFAULT_CURRENCY
from common.utils.custom_exceptions import PriceParseError

_AMOUNT = re.compile(r"\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?")
_ISO_CODE = re.compile(r"\b([A-Z]{3})\b")


def parse_price(raw, default_currency: str = DEFAULT_CURRENCY) -> Money:
    """Turn a stored package price into Money.

    Accepts plain numbers and display strings such as "₦2,500,000",
    "USD 1,200.50" or "450". Anything else raises PriceParseError instead
    of guessing.
    """
    if isinstance(raw, bool) or raw is None:
        raise PriceParseError(raw)

    if isinstance(raw, (int, float, Decimal)):
        amount = _to_decimal(str(raw), raw)
        currency = default_currency
    elif isinstance(raw, str):
        amount, currency = _parse_display_price(raw, default_currency)
    else:
        raise PriceParseError(raw)

    if amount < 0:
        raise PriceParseError(raw)
    return Money(amount=amount, currency=currency)


def detect_currency(raw, default_currency: str = DEFAULT_CURRENCY) -> str:
    if not isinstance(raw, str):
        return default_currency
    _, currency = _split_currency(raw.strip(), default_currency)
    return currency


def _split_currency(text: str, default_currency: str):
    for symbol, code in CURRENCY_SYMBOLS.items():
        if symbol in text:
            return text.replace(symbol, ""), code

    code_match = _ISO_CODE.search(text)
    if code_match:
        return text.replace(code_match.group(1), ""), code_match.group(1)
    return text, default_currency


def _parse_display_price(raw: str, default_currency: str):
    text, currency = _split_currency(raw.strip(), default_currency)
    text = text.strip()
    if not _AMOUNT.fullmatch(text):
        raise PriceParseError(raw)

    return _to_decimal(text.replace(",", ""), raw), currency


def _to_decimal(text: str, raw) -> Decimal:
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise PriceParseError(raw)
    if not amount.is_finite():
        raise PriceParseError(raw)
    return amount
