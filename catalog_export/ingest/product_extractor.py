"""Positional product-card scanner for one rendered listing page."""

import logging
import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, List, Optional

from catalog_export.ingest.base import BrowserSession, ElementNotFoundError, Product
from catalog_export.normalize.price import parse_old_price, parse_price
from catalog_export.normalize.stock import classify_stock_status

logger = logging.getLogger(__name__)

# Card layout. Sub-selectors are scoped under the card element.
CARD_SELECTOR = ".card-item:nth-child({index})"
TITLE_ATTRIBUTE = "data-name"
TOP_SECTION_SELECTOR = ".card > .card-section-wrapper > .card-section-top"
PRODUCT_URL_SELECTOR = ".js-product-url"
_PRICING = ".card > .card-section-wrapper > .card-section-btm > .card-body > .pricing-old_preserve-space"
OLD_PRICE_SELECTOR = f"{_PRICING} > .product-old-price"
PRICE_SELECTOR = f"{_PRICING} > .product-new-price"
STOCK_SELECTOR = ".card > .card-section-wrapper > .card-section-btm > .card-body > .product-stock-status"

DEFAULT_TOLERANCE = 1.05
DEFAULT_SLOT_TIMEOUT_MS = 50


class SlotSkip(Exception):
    """A required field of one slot could not be read."""

    def __init__(self, index: int, reason: str):
        self.index = index
        self.reason = reason
        super().__init__(f"slot {index}: {reason}")


@dataclass
class PageExtraction:
    """Products assembled from one page plus scan diagnostics."""

    products: List[Product] = field(default_factory=list)
    skipped: int = 0
    slots_scanned: int = 0


def max_slot_index(expected_size: int, tolerance: float) -> int:
    """Last slot index to try. Uses decimal arithmetic so 40 x 1.05 is 42."""
    return math.ceil(Decimal(str(tolerance)) * expected_size)


class ProductExtractor:
    """
    Scan product slots on the current page by position.

    Slots that are not product cards (ads, banners) are skipped without
    retrying; a short per-lookup timeout bounds how long each one can stall
    the scan. Scanning stops once ``expected_size`` products were assembled or
    the tolerance window beyond the page size is exhausted.
    """

    def __init__(
        self,
        tolerance: float = DEFAULT_TOLERANCE,
        slot_timeout_ms: int = DEFAULT_SLOT_TIMEOUT_MS,
    ):
        if tolerance < 1.0:
            raise ValueError(f"Tolerance must be >= 1.0, got {tolerance}")
        self.tolerance = tolerance
        self.slot_timeout_ms = slot_timeout_ms

    async def extract_page(
        self,
        session: BrowserSession,
        expected_size: int,
        category: str = "",
    ) -> PageExtraction:
        """
        Extract products from the page currently loaded in ``session``.

        Args:
            session: Browser session already showing the listing page
            expected_size: Number of products the page should hold
            category: Category name, only used for log messages

        Returns:
            PageExtraction; never raises for missing or malformed slots
        """
        result = PageExtraction()
        last_slot = max_slot_index(expected_size, self.tolerance)

        index = 1
        while len(result.products) < expected_size and index <= last_slot:
            try:
                product = await self._extract_slot(session, index)
            except SlotSkip as e:
                result.skipped += 1
                logger.debug(f"{category} -> skipping {e}")
            except Exception as e:
                result.skipped += 1
                logger.debug(f"{category} -> skipping slot {index}: {type(e).__name__}: {e}")
            else:
                result.products.append(product)
            result.slots_scanned = index
            index += 1

        if len(result.products) < expected_size:
            logger.warning(
                f"{category}: found {len(result.products)}/{expected_size} products "
                f"after scanning {result.slots_scanned} slots ({result.skipped} skipped)"
            )
        return result

    async def _extract_slot(self, session: BrowserSession, index: int) -> Product:
        card = await self._require(session, CARD_SELECTOR.format(index=index), index)

        title = await session.attribute(card, TITLE_ATTRIBUTE)
        if not title or not title.strip():
            raise SlotSkip(index, f"card has no {TITLE_ATTRIBUTE}")

        top_section = await self._require(session, TOP_SECTION_SELECTOR, index, within=card)
        url = await self._optional_attribute(session, PRODUCT_URL_SELECTOR, "href", top_section)

        old_price_text = await self._optional_text(session, OLD_PRICE_SELECTOR, card)
        try:
            old_price = parse_old_price(old_price_text)
        except ValueError as e:
            logger.debug(f"Ignoring old price in slot {index}: {e}")
            old_price = None

        price_element = await self._require(session, PRICE_SELECTOR, index, within=card)
        try:
            price = parse_price(await session.text(price_element))
        except ValueError as e:
            raise SlotSkip(index, str(e))

        stock_text = await self._optional_text(session, STOCK_SELECTOR, card)

        return Product(
            title=title.strip(),
            url=url,
            price=price,
            old_price=old_price,
            stock_info=classify_stock_status(stock_text),
        )

    async def _require(
        self,
        session: BrowserSession,
        selector: str,
        index: int,
        within: Any = None,
    ) -> Any:
        try:
            return await session.find(selector, self.slot_timeout_ms, within=within)
        except ElementNotFoundError as e:
            raise SlotSkip(index, str(e))

    async def _optional_text(
        self,
        session: BrowserSession,
        selector: str,
        within: Any,
    ) -> Optional[str]:
        try:
            element = await session.find(selector, self.slot_timeout_ms, within=within)
            return await session.text(element)
        except ElementNotFoundError:
            return None
        except Exception as e:
            logger.debug(f"Optional read {selector[-30:]} failed: {e}")
            return None

    async def _optional_attribute(
        self,
        session: BrowserSession,
        selector: str,
        name: str,
        within: Any,
    ) -> Optional[str]:
        try:
            element = await session.find(selector, self.slot_timeout_ms, within=within)
            return await session.attribute(element, name)
        except ElementNotFoundError:
            return None
        except Exception as e:
            logger.debug(f"Optional read {selector} [{name}] failed: {e}")
            return None
