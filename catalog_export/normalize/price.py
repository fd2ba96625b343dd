"""Parse localized listing price text into major currency units."""

import logging
from decimal import Decimal
from typing import Optional

logger = logging.getLogger(__name__)

CURRENCY_MARKER = "lei"

# Digit-group separators. Every occurrence is removed.
SEPARATORS = (".", ",")

CENTS = Decimal("0.01")


class PriceParseError(ValueError):
    """Raised when price text does not reduce to a minor-unit integer."""

    def __init__(self, price_text: Optional[str]):
        self.price_text = price_text
        super().__init__(f"Could not parse price from: {price_text!r}")


def parse_price(price_text: Optional[str]) -> Decimal:
    """
    Parse a listing price such as ``"2.499,99 Lei"`` or ``"249999 Lei"``.

    The listing renders the decimals as a superscript, so once the
    separators are gone the digits are the price in bani (minor units).

    Args:
        price_text: Raw inner text of the price element

    Returns:
        Price in lei, quantized to two decimals

    Raises:
        PriceParseError: If no digit string remains after cleaning
    """
    if price_text is None:
        raise PriceParseError(price_text)

    cleaned = price_text.lower()
    marker_at = cleaned.find(CURRENCY_MARKER)
    if marker_at >= 0:
        cleaned = cleaned[:marker_at]

    for separator in SEPARATORS:
        cleaned = cleaned.replace(separator, "")
    cleaned = "".join(cleaned.split())  # Also drops NBSP and newlines

    if not cleaned.isdigit() or not cleaned.isascii():
        raise PriceParseError(price_text)

    return (Decimal(int(cleaned)) / 100).quantize(CENTS)


def parse_old_price(price_text: Optional[str]) -> Optional[Decimal]:
    """Parse the strikethrough price. Blank text means no discount is shown."""
    if price_text is None or not price_text.strip():
        return None
    return parse_price(price_text)
