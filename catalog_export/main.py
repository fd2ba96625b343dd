"""Command-line entry point: export once or on a fixed interval."""

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from prometheus_client import start_http_server

from catalog_export.config import Settings, settings
from catalog_export.logging_config import setup_logging
from catalog_export.worker.scheduler import setup_scheduler
from catalog_export.worker.tasks import ExportTaskRunner

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="catalog-export",
        description="Export product listings (title, price, discount, stock) per category to JSON",
    )
    parser.add_argument(
        "--category",
        dest="categories",
        action="append",
        help="Category path segment to export; repeat for several (default: configured list)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        help="Categories scanned concurrently per batch (default: from settings)",
    )
    parser.add_argument("--output-dir", help="Directory for <category>.json files")
    parser.add_argument(
        "--interval-minutes",
        type=int,
        help="Repeat the export every N minutes (0 = run once)",
    )
    parser.add_argument("--max-pages", type=int, help="Pages per category (0 = all)")
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window",
    )
    parser.add_argument(
        "--abort-on-error",
        action="store_true",
        help="Do not start further batches once a category failed",
    )
    parser.add_argument("--log-level", help="Logging level (default: from settings)")
    return parser


def config_from_args(args: argparse.Namespace, base: Settings) -> Settings:
    """Apply CLI overrides on top of the environment settings."""
    overrides = {}
    if args.categories:
        overrides["categories"] = args.categories
    if args.batch_size is not None:
        overrides["category_batch_size"] = args.batch_size
    if args.output_dir:
        overrides["output_dir"] = args.output_dir
    if args.interval_minutes is not None:
        overrides["export_interval_minutes"] = args.interval_minutes
    if args.max_pages is not None:
        overrides["max_pages_per_category"] = args.max_pages
    if args.headed:
        overrides["headless_browser"] = False
    if args.abort_on_error:
        overrides["abort_on_category_error"] = True
    if args.log_level:
        overrides["log_level"] = args.log_level

    # Re-validate so CLI values get the same bounds as env values
    return Settings.model_validate({**base.model_dump(), **overrides})


async def run_once(config: Settings) -> int:
    runner = ExportTaskRunner(config)
    progress = await runner.run_export()
    return 1 if progress.errors or progress.skipped_categories else 0


async def run_forever(config: Settings) -> int:
    runner = ExportTaskRunner(config)
    scheduler = setup_scheduler(runner, config.export_interval_minutes)
    scheduler.start()
    logger.info("Scheduler started")
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = config_from_args(args, settings)

    setup_logging(base_dir=config.log_dir or None, level=config.log_level)

    if config.metrics_port:
        start_http_server(config.metrics_port)
        logger.info(f"Metrics available on :{config.metrics_port}/metrics")

    try:
        if config.export_interval_minutes:
            return asyncio.run(run_forever(config))
        return asyncio.run(run_once(config))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
