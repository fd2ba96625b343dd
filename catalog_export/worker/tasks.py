"""Export task runner: scans the configured categories and writes their files."""

import logging
import time
from typing import Optional, Sequence

from catalog_export import metrics
from catalog_export.config import Settings
from catalog_export.export.json_writer import JsonExportWriter
from catalog_export.ingest.category_scanner import CategoryScanner, SessionFactory
from catalog_export.ingest.scan_engine import CategoryBatchScheduler, ScanProgress, ScanResult

logger = logging.getLogger(__name__)


class ExportTaskRunner:
    """Runs one complete export for an explicit configuration."""

    def __init__(
        self,
        config: Settings,
        session_factory: Optional[SessionFactory] = None,
        writer: Optional[JsonExportWriter] = None,
    ):
        self.config = config
        self.writer = writer or JsonExportWriter(config.output_dir)
        self.scanner = CategoryScanner.from_settings(config, session_factory)
        self.scheduler = CategoryBatchScheduler(
            self.scanner,
            batch_size=config.category_batch_size,
            abort_on_error=config.abort_on_category_error,
        )

    def _write_result(self, result: ScanResult) -> None:
        if result.ok:
            self.writer.write(result.category, result.products)

    async def run_export(self, categories: Optional[Sequence[str]] = None) -> ScanProgress:
        """
        Scan categories and write one JSON file per successful category.

        Args:
            categories: Categories to export (defaults to the configured list)

        Returns:
            ScanProgress for the run
        """
        categories = list(categories if categories is not None else self.config.categories)
        started = time.monotonic()
        logger.info(
            f"Export started: {len(categories)} categories, "
            f"batch size {self.config.category_batch_size}"
        )

        progress = await self.scheduler.run(categories, on_result=self._write_result)

        elapsed_ms = (time.monotonic() - started) * 1000
        success = not progress.errors and not progress.skipped_categories
        metrics.record_export_run(success)

        logger.info(
            f"Export finished: {progress.total_products} products from "
            f"{progress.completed_categories - len(progress.failed)}/{len(categories)} categories, "
            f"{progress.total_skipped_slots} slots skipped. Time effort: {elapsed_ms:.0f} millis"
        )
        for error in progress.errors:
            logger.error(f"Category failed: {error}")
        return progress
