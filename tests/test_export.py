"""Tests for the JSON exporter and the export task runner."""

import json
from decimal import Decimal

import pytest

from catalog_export.config import Settings
from catalog_export.export.json_writer import JsonExportWriter, category_output_path
from catalog_export.ingest.base import Availability, Product, StockInfo
from catalog_export.main import build_parser, config_from_args
from catalog_export.worker.scheduler import EXPORT_JOB_ID, setup_scheduler
from catalog_export.worker.tasks import ExportTaskRunner

from conftest import FakeSession, build_category_site


def test_product_serialization_shape():
    discounted = Product(
        title="Laptop",
        url="https://www.emag.ro/laptop/pd/L1/",
        price=Decimal("2499.99"),
        old_price=Decimal("2999.99"),
        stock_info=StockInfo(Availability.AVAILABLE, items_left_on_stock=3),
    )
    plain = Product(title="Cablu", price=Decimal("25.00"))

    assert discounted.to_dict() == {
        "title": "Laptop",
        "url": "https://www.emag.ro/laptop/pd/L1/",
        "price": 2499.99,
        "oldPrice": 2999.99,
        "stockInfo": {"availability": "AVAILABLE", "itemsLeftOnStock": 3},
    }
    assert plain.to_dict() == {
        "title": "Cablu",
        "url": None,
        "price": 25.0,
        "oldPrice": None,
        "stockInfo": None,
    }
    assert plain.discount_percent is None


def test_delivery_days_serialized():
    info = StockInfo(Availability.AVAILABLE, estimated_delivery_days=4)

    assert info.to_dict() == {"availability": "AVAILABLE", "estimatedDeliveryDays": 4}


def test_writer_creates_one_file_per_category(tmp_path):
    writer = JsonExportWriter(tmp_path / "exports")
    products = [
        Product(title="Televizor Ñ", price=Decimal("1999.00"), stock_info=StockInfo(Availability.LIMITED)),
    ]

    path = writer.write("televizoare", products)

    assert path == tmp_path / "exports" / "televizoare.json"
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data == [
        {
            "title": "Televizor Ñ",
            "url": None,
            "price": 1999.0,
            "oldPrice": None,
            "stockInfo": {"availability": "LIMITED"},
        }
    ]


def test_output_path_sanitizes_category(tmp_path):
    assert category_output_path(tmp_path, "telefoane/mobile") == tmp_path / "telefoane_mobile.json"
    with pytest.raises(ValueError):
        category_output_path(tmp_path, "..")


@pytest.mark.asyncio
async def test_runner_writes_successful_categories(tmp_path, base_url):
    pages = {}
    pages.update(build_category_site(base_url, "laptopuri", total=45, page_size=20))
    pages.update(build_category_site(base_url, "smartwatch", total=5, page_size=5))
    config = Settings(
        base_url=base_url,
        categories=["laptopuri", "missing", "smartwatch"],
        category_batch_size=2,
        output_dir=str(tmp_path),
    )
    runner = ExportTaskRunner(config, session_factory=lambda: FakeSession(pages))

    progress = await runner.run_export()

    assert progress.completed_categories == 3
    assert [r.category for r in progress.failed] == ["missing"]
    assert len(json.loads((tmp_path / "laptopuri.json").read_text(encoding="utf-8"))) == 45
    assert len(json.loads((tmp_path / "smartwatch.json").read_text(encoding="utf-8"))) == 5
    assert not (tmp_path / "missing.json").exists()


@pytest.mark.asyncio
async def test_runner_accepts_explicit_categories(tmp_path, base_url):
    pages = build_category_site(base_url, "televizoare", total=3, page_size=3)
    config = Settings(base_url=base_url, categories=["ignored"], output_dir=str(tmp_path))
    runner = ExportTaskRunner(config, session_factory=lambda: FakeSession(pages))

    progress = await runner.run_export(["televizoare"])

    assert progress.errors == []
    assert (tmp_path / "televizoare.json").exists()


def test_cli_overrides_settings():
    args = build_parser().parse_args(
        ["--category", "laptopuri", "--category", "televizoare", "--batch-size", "2", "--headed", "--max-pages", "1"]
    )

    config = config_from_args(args, Settings())

    assert config.categories == ["laptopuri", "televizoare"]
    assert config.category_batch_size == 2
    assert config.headless_browser is False
    assert config.max_pages_per_category == 1


def test_cli_rejects_invalid_batch_size():
    args = build_parser().parse_args(["--batch-size", "0"])

    with pytest.raises(ValueError):
        config_from_args(args, Settings())


def test_scheduler_registers_interval_job(tmp_path):
    runner = ExportTaskRunner(Settings(output_dir=str(tmp_path)), session_factory=lambda: FakeSession({}))

    scheduler = setup_scheduler(runner, interval_minutes=60)

    job = scheduler.get_job(EXPORT_JOB_ID)
    assert job is not None
    assert job.max_instances == 1
    with pytest.raises(ValueError):
        setup_scheduler(runner, interval_minutes=0)
