"""Classify listing stock-status labels into availability states."""

import logging
import re
from typing import Optional

from catalog_export import metrics
from catalog_export.ingest.base import Availability, StockInfo

logger = logging.getLogger(__name__)

# Romanian diacritics folded to plain Latin
DIACRITICS = {
    "ă": "a",
    "â": "a",
    "î": "i",
    "ș": "s",
    "ț": "t",
}

_DIACRITICS_TABLE = str.maketrans(DIACRITICS)
_DIGITS = re.compile(r"\d+")

# Exact labels, checked in order
EXACT_RULES = [
    ({"in_stoc", "in_stoc_furnizor"}, Availability.AVAILABLE),
    ({"indisponibil", "stoc_epuizat"}, Availability.UNAVAILABLE),
]


def normalize_stock_text(stock_text: str) -> str:
    """Trim, lower-case, fold diacritics and join words with underscores."""
    folded = stock_text.strip().lower().translate(_DIACRITICS_TABLE)
    return "_".join(folded.split())


def _trailing_number(normalized: str, prefix: str) -> Optional[int]:
    match = _DIGITS.search(normalized, len(prefix))
    return int(match.group()) if match else None


def classify_stock_status(stock_text: Optional[str]) -> Optional[StockInfo]:
    """
    Classify a stock-status label. First matching rule wins.

    Examples:
        "În stoc" -> AVAILABLE
        "Ultimele 3 produse" -> AVAILABLE, 3 items left
        "Livrare in 5 zile" -> AVAILABLE, 5 days
        "Stoc limitat" -> LIMITED

    Args:
        stock_text: Raw inner text of the stock element, or None if missing

    Returns:
        StockInfo, or None when the label is absent or unrecognized
    """
    if stock_text is None:
        return None

    normalized = normalize_stock_text(stock_text)

    for labels, availability in EXACT_RULES:
        if normalized in labels:
            return StockInfo(availability=availability)

    if normalized.startswith("livrare_in"):
        return StockInfo(
            availability=Availability.AVAILABLE,
            estimated_delivery_days=_trailing_number(normalized, "livrare_in"),
        )

    if normalized.startswith("ultimele"):
        return StockInfo(
            availability=Availability.AVAILABLE,
            items_left_on_stock=_trailing_number(normalized, "ultimele"),
        )

    if normalized == "ultimul_produs_in_stoc":
        return StockInfo(availability=Availability.AVAILABLE, items_left_on_stock=1)

    if normalized == "stoc_limitat":
        return StockInfo(availability=Availability.LIMITED)

    if normalized.startswith("precomanda"):
        return StockInfo(availability=Availability.PRE_ORDER)

    logger.warning(f"Unrecognized stock status {stock_text!r} (normalized: {normalized!r})")
    metrics.record_classification_miss()
    return None
