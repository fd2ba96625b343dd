"""Prometheus metrics for the catalog exporter."""

import time

from prometheus_client import Counter, Gauge, Histogram, Info

# Application info
app_info = Info("catalog_export", "Catalog exporter application info")
app_info.info({"version": "0.1.0", "name": "catalog-export"})

# Extraction metrics
products_extracted_total = Counter(
    "products_extracted_total",
    "Total number of products assembled from listing pages",
    ["category"],
)

slots_skipped_total = Counter(
    "slots_skipped_total",
    "Total number of listing slots skipped because a required field was missing",
    ["category"],
)

stock_classification_misses_total = Counter(
    "stock_classification_misses_total",
    "Total number of stock-status labels that matched no known rule",
)

pages_scanned_total = Counter(
    "pages_scanned_total",
    "Total number of listing pages scanned",
    ["category"],
)

# Category scan metrics
category_scans_total = Counter(
    "category_scans_total",
    "Total number of category scans",
    ["category", "status"],
)

category_scan_duration_seconds = Histogram(
    "category_scan_duration_seconds",
    "Time spent scanning a whole category",
    ["category"],
    buckets=[5.0, 15.0, 30.0, 60.0, 120.0, 300.0, 600.0, 1800.0],
)

active_category_scans = Gauge(
    "active_category_scans",
    "Number of category scans currently in flight",
)

# Export run metrics
export_runs_total = Counter(
    "export_runs_total",
    "Total number of export runs",
    ["status"],
)

export_last_run_timestamp = Gauge(
    "export_last_run_timestamp",
    "Timestamp of the last finished export run",
)


def record_page_scan(category: str, products: int, skipped: int):
    """Record one listing page's extraction outcome."""
    pages_scanned_total.labels(category=category).inc()
    if products:
        products_extracted_total.labels(category=category).inc(products)
    if skipped:
        slots_skipped_total.labels(category=category).inc(skipped)


def record_classification_miss():
    """Record an unrecognized stock-status label."""
    stock_classification_misses_total.inc()


def record_category_scan(category: str, duration: float, success: bool):
    """Record a finished category scan."""
    status = "success" if success else "error"
    category_scans_total.labels(category=category, status=status).inc()
    category_scan_duration_seconds.labels(category=category).observe(duration)


def increment_active_scans():
    active_category_scans.inc()


def decrement_active_scans():
    active_category_scans.dec()


def record_export_run(success: bool):
    """Record an export run."""
    status = "success" if success else "error"
    export_runs_total.labels(status=status).inc()
    export_last_run_timestamp.set(time.time())
