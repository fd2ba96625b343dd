"""Product records and the browser session interface used by the scanners."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class Availability(Enum):
    """Stock availability states shown on listing cards."""

    AVAILABLE = "AVAILABLE"
    LIMITED = "LIMITED"
    UNAVAILABLE = "UNAVAILABLE"
    PRE_ORDER = "PRE_ORDER"


@dataclass(frozen=True)
class StockInfo:
    """Classified stock status. At most one of the optional counts is set."""

    availability: Availability
    items_left_on_stock: Optional[int] = None
    estimated_delivery_days: Optional[int] = None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"availability": self.availability.name}
        if self.items_left_on_stock is not None:
            data["itemsLeftOnStock"] = self.items_left_on_stock
        if self.estimated_delivery_days is not None:
            data["estimatedDeliveryDays"] = self.estimated_delivery_days
        return data


@dataclass(frozen=True)
class Product:
    """A product found on a category listing page."""

    title: str
    price: Decimal
    url: Optional[str] = None
    old_price: Optional[Decimal] = None  # Strikethrough price
    stock_info: Optional[StockInfo] = None

    @property
    def discount_percent(self) -> Optional[float]:
        """Calculate discount percentage from the strikethrough price."""
        if self.old_price and self.old_price > 0:
            return float((1 - self.price / self.old_price) * 100)
        return None

    def to_dict(self) -> dict:
        """Serialize to the export document shape."""
        return {
            "title": self.title,
            "url": self.url,
            "price": float(self.price),
            "oldPrice": float(self.old_price) if self.old_price is not None else None,
            "stockInfo": self.stock_info.to_dict() if self.stock_info else None,
        }


class ElementNotFoundError(Exception):
    """A DOM lookup did not match within its timeout."""

    def __init__(self, selector: str, timeout_ms: Optional[int] = None):
        self.selector = selector
        self.timeout_ms = timeout_ms
        suffix = f" within {timeout_ms}ms" if timeout_ms is not None else ""
        super().__init__(f"No element matched {selector!r}{suffix}")


class NavigationError(Exception):
    """Page failed to load."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to load {url}: {reason}")


class BrowserSession(ABC):
    """
    One exclusive browsing session (browser, context and a single page).

    Navigation replaces the current view, so callers must not navigate
    concurrently on the same session. Use as an async context manager so the
    session is closed on every exit path.
    """

    @abstractmethod
    async def open(self) -> None:
        """Start the underlying browser."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying browser. Must be safe to call twice."""
        pass

    @abstractmethod
    async def goto(self, url: str) -> None:
        """
        Navigate the page and wait for the navigation to complete.

        Raises:
            NavigationError: If the page cannot be loaded
        """
        pass

    @abstractmethod
    async def find(
        self,
        selector: str,
        timeout_ms: int,
        within: Any = None,
    ) -> Any:
        """
        Locate an element, optionally scoped under a previously found one.

        Raises:
            ElementNotFoundError: If nothing matches before the timeout
        """
        pass

    @abstractmethod
    async def text(self, element: Any) -> str:
        """Read an element's rendered inner text."""
        pass

    @abstractmethod
    async def attribute(self, element: Any, name: str) -> Optional[str]:
        """Read a named attribute, or None if it is not set."""
        pass

    async def __aenter__(self) -> "BrowserSession":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
