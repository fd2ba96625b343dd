"""Batch scheduler that runs categories concurrently, one fixed-size batch at a time."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from catalog_export import metrics
from catalog_export.ingest.base import Product
from catalog_export.ingest.category_scanner import CategoryScan, CategoryScanner

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """Outcome of one category task. ``error`` is set when the category failed."""

    category: str
    products: List[Product] = field(default_factory=list)
    pages_scanned: int = 0
    skipped_slots: int = 0
    error: Optional[str] = None
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def from_scan(cls, scan: CategoryScan) -> "ScanResult":
        return cls(
            category=scan.category,
            products=scan.products,
            pages_scanned=scan.pages_scanned,
            skipped_slots=scan.skipped_slots,
            duration_seconds=scan.duration_seconds,
        )


@dataclass
class ScanProgress:
    """Tracks progress of an export run."""

    total_categories: int
    completed_categories: int = 0
    total_products: int = 0
    total_skipped_slots: int = 0
    batches_run: int = 0
    errors: List[str] = field(default_factory=list)
    skipped_categories: List[str] = field(default_factory=list)
    results: List[ScanResult] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def progress_percent(self) -> float:
        if self.total_categories == 0:
            return 0.0
        return (self.completed_categories / self.total_categories) * 100

    @property
    def is_complete(self) -> bool:
        return self.completed_categories >= self.total_categories

    @property
    def failed(self) -> List[ScanResult]:
        return [r for r in self.results if not r.ok]


class CategoryBatchScheduler:
    """
    Run category scans in consecutive batches of at most ``batch_size``.

    Categories inside a batch run concurrently; the next batch starts only
    after every task of the current one has settled. A failing category is
    reported as a ScanResult with ``error`` set and does not affect siblings.
    """

    def __init__(
        self,
        scanner: CategoryScanner,
        batch_size: int = 5,
        abort_on_error: bool = False,
    ):
        if batch_size < 1:
            raise ValueError(f"Batch size must be >= 1, got {batch_size}")
        self.scanner = scanner
        self.batch_size = batch_size
        self.abort_on_error = abort_on_error

    @staticmethod
    def partition(categories: Sequence[str], batch_size: int) -> List[List[str]]:
        """Split categories into consecutive batches, preserving order."""
        if batch_size < 1:
            raise ValueError(f"Batch size must be >= 1, got {batch_size}")
        return [
            list(categories[i:i + batch_size])
            for i in range(0, len(categories), batch_size)
        ]

    async def _run_category(self, category: str) -> ScanResult:
        started = time.monotonic()
        metrics.increment_active_scans()
        try:
            scan = await self.scanner.scan_category(category)
        except Exception as e:
            duration = time.monotonic() - started
            logger.error(f"Scan failed for category {category}: {type(e).__name__}: {e}")
            metrics.record_category_scan(category, duration, success=False)
            return ScanResult(category=category, error=str(e) or type(e).__name__, duration_seconds=duration)
        finally:
            metrics.decrement_active_scans()

        metrics.record_category_scan(category, scan.duration_seconds, success=True)
        return ScanResult.from_scan(scan)

    async def run(
        self,
        categories: Sequence[str],
        on_result: Optional[Callable[[ScanResult], None]] = None,
    ) -> ScanProgress:
        """
        Scan all categories batch after batch.

        Args:
            categories: Category identifiers, in the order to scan them
            on_result: Optional callback for each result as its task settles

        Returns:
            ScanProgress with one ScanResult per started category
        """
        progress = ScanProgress(total_categories=len(categories))
        batches = self.partition(categories, self.batch_size)

        async def run_and_report(category: str) -> ScanResult:
            result = await self._run_category(category)

            progress.completed_categories += 1
            progress.total_products += len(result.products)
            progress.total_skipped_slots += result.skipped_slots
            progress.results.append(result)
            if result.error:
                progress.errors.append(f"{result.category}: {result.error}")

            if on_result:
                try:
                    on_result(result)
                except Exception as e:
                    logger.error(f"Result callback failed for {category}: {e}")
                    result.error = f"Result callback failed: {e}"
                    progress.errors.append(f"{category}: {result.error}")
            return result

        for batch_number, batch in enumerate(batches, start=1):
            logger.info(f"Starting batch {batch_number}/{len(batches)}: {', '.join(batch)}")
            results = await asyncio.gather(*(run_and_report(c) for c in batch))
            progress.batches_run += 1

            failures = [r.category for r in results if not r.ok]
            logger.info(
                f"Batch {batch_number}/{len(batches)} done: "
                f"{len(batch) - len(failures)} ok, {len(failures)} failed "
                f"({progress.progress_percent:.0f}% of categories)"
            )

            if failures and self.abort_on_error:
                remaining = [c for b in batches[batch_number:] for c in b]
                progress.skipped_categories.extend(remaining)
                if remaining:
                    logger.error(
                        f"Aborting run after failures in {', '.join(failures)}; "
                        f"{len(remaining)} categories not started"
                    )
                break

        return progress
