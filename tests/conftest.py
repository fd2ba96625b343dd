"""Shared fixtures: an in-memory browser session serving fake listing pages."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pytest

from catalog_export.ingest.base import BrowserSession, ElementNotFoundError, NavigationError
from catalog_export.ingest.category_scanner import PAGINATION_LABEL_SELECTOR
from catalog_export.ingest.product_extractor import (
    CARD_SELECTOR,
    OLD_PRICE_SELECTOR,
    PRICE_SELECTOR,
    PRODUCT_URL_SELECTOR,
    STOCK_SELECTOR,
    TITLE_ATTRIBUTE,
    TOP_SECTION_SELECTOR,
)


@dataclass
class FakeElement:
    text: str = ""
    attrs: Dict[str, str] = field(default_factory=dict)
    children: Dict[str, "FakeElement"] = field(default_factory=dict)


def product_card(
    title: str,
    price: str = "1.99999 Lei",
    url: Optional[str] = "",
    old_price: Optional[str] = "",
    stock: Optional[str] = "În stoc",
) -> FakeElement:
    """Build a listing card. Pass None for a field to leave its element out."""
    top = FakeElement()
    if url is not None:
        top.children[PRODUCT_URL_SELECTOR] = FakeElement(
            attrs={"href": url or f"https://www.emag.ro/{title.lower().replace(' ', '-')}/pd/X/"}
        )
    card = FakeElement(attrs={TITLE_ATTRIBUTE: title}, children={TOP_SECTION_SELECTOR: top})
    if old_price is not None:
        card.children[OLD_PRICE_SELECTOR] = FakeElement(text=old_price)
    if price is not None:
        card.children[PRICE_SELECTOR] = FakeElement(text=price)
    if stock is not None:
        card.children[STOCK_SELECTOR] = FakeElement(text=stock)
    return card


def listing_page(cards: List[Optional[FakeElement]], label: Optional[str] = None) -> FakeElement:
    """A rendered page; None entries are non-product grid cells."""
    root = FakeElement()
    for position, card in enumerate(cards, start=1):
        if card is not None:
            root.children[CARD_SELECTOR.format(index=position)] = card
    if label is not None:
        root.children[PAGINATION_LABEL_SELECTOR] = FakeElement(text=label)
    return root


class FakeSession(BrowserSession):
    """BrowserSession over a dict of url -> FakeElement page."""

    def __init__(self, pages: Dict[str, FakeElement], fail_urls=()):
        self.pages = pages
        self.fail_urls = set(fail_urls)
        self.visited: List[str] = []
        self.lookups: List[str] = []
        self.opened = False
        self.closed = False
        self._current: Optional[FakeElement] = None

    async def open(self) -> None:
        self.opened = True

    async def close(self) -> None:
        self.closed = True

    async def goto(self, url: str) -> None:
        self.visited.append(url)
        if url in self.fail_urls or url not in self.pages:
            raise NavigationError(url, "HTTP 404")
        self._current = self.pages[url]

    async def find(self, selector: str, timeout_ms: int, within=None):
        self.lookups.append(selector)
        scope = within if within is not None else self._current
        if scope is None or selector not in scope.children:
            raise ElementNotFoundError(selector, timeout_ms)
        return scope.children[selector]

    async def text(self, element: FakeElement) -> str:
        return element.text

    async def attribute(self, element: FakeElement, name: str) -> Optional[str]:
        return element.attrs.get(name)


def show_page(page: FakeElement) -> FakeSession:
    """A session already showing ``page``."""
    session = FakeSession({"about:listing": page})
    session._current = page
    return session


def build_category_site(
    base_url: str,
    category: str,
    total: int,
    page_size: int,
    non_product_slots: Dict[int, List[int]] = None,
) -> Dict[str, FakeElement]:
    """
    Pages for a category of ``total`` products, ``page_size`` per page.

    ``non_product_slots`` maps a page number to slot positions holding ads.
    Page 1 is served at both /c and /p1/c.
    """
    non_product_slots = non_product_slots or {}
    pages: Dict[str, FakeElement] = {}
    page_count = -(-total // page_size)
    for page_index in range(1, page_count + 1):
        start = (page_index - 1) * page_size + 1
        end = min(page_index * page_size, total)
        cards: List[Optional[FakeElement]] = [
            product_card(f"{category} {n}", price=f"{n}00 Lei")
            for n in range(start, end + 1)
        ]
        for position in sorted(non_product_slots.get(page_index, [])):
            cards.insert(position - 1, None)
        page = listing_page(cards, label=f"{start}-{end} din {total} de produse")
        pages[f"{base_url}/{category}/p{page_index}/c"] = page
        if page_index == 1:
            pages[f"{base_url}/{category}/c"] = page
    return pages


@pytest.fixture
def base_url() -> str:
    return "https://shop.test"
