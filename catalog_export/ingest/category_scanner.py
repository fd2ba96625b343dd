"""Category scanner: walks every listing page of one category in order."""

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from catalog_export import metrics
from catalog_export.config import Settings
from catalog_export.ingest.base import (
    BrowserSession,
    ElementNotFoundError,
    NavigationError,
    Product,
)
from catalog_export.ingest.fetchers.headless import PlaywrightBrowserSession
from catalog_export.ingest.pagination import (
    PaginationInfo,
    PaginationLabelError,
    parse_pagination_label,
)
from catalog_export.ingest.product_extractor import ProductExtractor
from catalog_export.logging_config import get_logger

logger = logging.getLogger(__name__)

PAGINATION_LABEL_SELECTOR = ".listing-panel > .listing-panel-footer > .row > .col-lg-3 > .control-label"

SessionFactory = Callable[[], BrowserSession]


class FatalCategoryError(RuntimeError):
    """Raised when a category cannot be scanned at all (no pagination, no page)."""

    def __init__(self, category: str, url: str, message: str):
        super().__init__(message)
        self.category = category
        self.url = url


@dataclass
class CategoryScan:
    """Everything collected from one category."""

    category: str
    pagination: PaginationInfo
    products: List[Product] = field(default_factory=list)
    pages_scanned: int = 0
    skipped_slots: int = 0
    duration_seconds: float = 0.0


def category_url(base_url: str, category: str) -> str:
    """First page of a category listing."""
    return f"{base_url.rstrip('/')}/{category}/c"


def category_page_url(base_url: str, category: str, page_index: int) -> str:
    """Listing page ``page_index`` (1-based) of a category."""
    return f"{base_url.rstrip('/')}/{category}/p{page_index}/c"


def playwright_session_factory(config: Settings) -> SessionFactory:
    """Build a factory that opens one fresh Playwright session per call."""

    def factory() -> BrowserSession:
        return PlaywrightBrowserSession(
            headless=config.headless_browser,
            navigation_timeout_ms=config.navigation_timeout_ms,
            viewport_width=config.viewport_width,
            viewport_height=config.viewport_height,
        )

    return factory


class CategoryScanner:
    """Reads pagination from page 1, then extracts every page sequentially."""

    def __init__(
        self,
        session_factory: SessionFactory,
        base_url: str,
        extractor: Optional[ProductExtractor] = None,
        pagination_label_timeout_ms: int = 10000,
        max_pages: int = 0,
    ):
        """
        Initialize the scanner.

        Args:
            session_factory: Returns a new, unopened BrowserSession per category
            base_url: Site root, e.g. https://www.emag.ro
            extractor: Slot scanner (default tolerance if None)
            pagination_label_timeout_ms: How long to wait for the pagination label
            max_pages: Stop after this many pages (0 = every page)
        """
        self.session_factory = session_factory
        self.base_url = base_url
        self.extractor = extractor or ProductExtractor()
        self.pagination_label_timeout_ms = pagination_label_timeout_ms
        self.max_pages = max_pages

    @classmethod
    def from_settings(
        cls,
        config: Settings,
        session_factory: Optional[SessionFactory] = None,
    ) -> "CategoryScanner":
        return cls(
            session_factory=session_factory or playwright_session_factory(config),
            base_url=config.base_url,
            extractor=ProductExtractor(
                tolerance=config.slot_tolerance,
                slot_timeout_ms=config.slot_read_timeout_ms,
            ),
            pagination_label_timeout_ms=config.pagination_label_timeout_ms,
            max_pages=config.max_pages_per_category,
        )

    async def scan_category(self, category: str) -> CategoryScan:
        """
        Scan every page of a category.

        Args:
            category: Category path segment, e.g. "laptopuri"

        Returns:
            CategoryScan with products in page order

        Raises:
            FatalCategoryError: If navigation fails or the pagination label
                is missing or malformed
        """
        log = get_logger(__name__, category=category)
        started = time.monotonic()

        async with self.session_factory() as session:
            first_url = category_url(self.base_url, category)
            await self._navigate(session, category, first_url)
            pagination = await self._read_pagination(session, category, first_url)

            page_count = pagination.page_count
            if self.max_pages and page_count > self.max_pages:
                log.info(f"Limiting {category} to {self.max_pages} of {page_count} pages")
                page_count = self.max_pages

            log.info(
                f"Total products for category {category} is {pagination.total_products}: "
                f"{pagination.page_count} pages of {pagination.page_size}"
            )

            scan = CategoryScan(category=category, pagination=pagination)
            for page_index in range(1, page_count + 1):
                url = category_page_url(self.base_url, category, page_index)
                await self._navigate(session, category, url)

                expected = pagination.expected_size(page_index)
                page = await self.extractor.extract_page(session, expected, category=category)

                scan.products.extend(page.products)
                scan.skipped_slots += page.skipped
                scan.pages_scanned += 1
                metrics.record_page_scan(category, len(page.products), page.skipped)
                log.info(
                    f"{category} page {page_index}/{page_count}: "
                    f"{len(page.products)}/{expected} products, {page.skipped} skipped"
                )

        scan.duration_seconds = time.monotonic() - started
        log.info(
            f"Found {len(scan.products)} products for {category} "
            f"({scan.skipped_slots} slots skipped) in {scan.duration_seconds:.1f}s"
        )
        if log.isEnabledFor(logging.DEBUG):
            log.debug(
                f"{category} products: "
                + json.dumps([p.to_dict() for p in scan.products], ensure_ascii=False)
            )
        return scan

    async def _navigate(self, session: BrowserSession, category: str, url: str) -> None:
        try:
            await session.goto(url)
        except NavigationError as e:
            raise FatalCategoryError(category, url, str(e)) from e

    async def _read_pagination(
        self,
        session: BrowserSession,
        category: str,
        url: str,
    ) -> PaginationInfo:
        try:
            label_element = await session.find(
                PAGINATION_LABEL_SELECTOR,
                self.pagination_label_timeout_ms,
            )
            label = await session.text(label_element)
        except ElementNotFoundError as e:
            raise FatalCategoryError(category, url, f"Pagination label not found: {e}") from e

        try:
            pagination = parse_pagination_label(label)
        except PaginationLabelError as e:
            raise FatalCategoryError(category, url, str(e)) from e

        logger.debug(
            f"Current page start {pagination.current_page_start}, "
            f"current page end {pagination.current_page_end}, "
            f"current page size {pagination.page_size}"
        )
        return pagination
