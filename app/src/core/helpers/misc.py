import re
from datetime import date, datetime
from decimal import Decimal
from json import JSONEncoder
from typing import Any

from babel.numbers import format_currency, get_currency_precision
from src.core.config import settings

_SLUG_INVALID_CHARS = re.compile(r"[^a-z0-9-]+")
_SLUG_DASHES = re.compile(r"-{2,}")


def slugify(value: str) -> str:
    """
    Lower-case ``value`` and turn whitespace into dashes.

    >>> slugify("Brake Pads & Rotors")
    'brake-pads-rotors'
    """
    slug = re.sub(r"\s+", "-", value.strip().lower())
    slug = _SLUG_INVALID_CHARS.sub("", slug)
    return _SLUG_DASHES.sub("-", slug).strip("-")


def format_price(amount: Decimal | int | float, currency: str | None = None) -> str:
    """
    Render ``amount`` in the store currency. UGX has no minor unit so
    amounts are shown without decimals.
    """
    currency = currency or settings.CURRENCY_CODE
    digits = get_currency_precision(currency)
    pattern = "¤#,##0" if digits == 0 else None

    return format_currency(
        Decimal(str(amount)),
        currency,
        format=pattern,
        locale=settings.CURRENCY_LOCALE,
        currency_digits=digits != 0,
    )


class DateTimeEncoder(JSONEncoder):
    """JSON encoder for the datetime, UUID and Decimal values found in cart payloads."""

    def default(self, obj: Any) -> Any:  # type: ignore
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Decimal):
            return str(obj)
        return super().default(obj)
