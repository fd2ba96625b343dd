"""Application configuration using Pydantic settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Target site
    base_url: str = "https://www.emag.ro"
    categories: list[str] = [
        "telefoane-mobile",
        "televizoare",
        "laptopuri",
        "smartwatch",
    ]

    # App Settings
    log_level: str = "INFO"
    log_dir: str = ""  # Empty = current working directory

    # ==========================================================================
    # Category Scheduling
    # ==========================================================================
    category_batch_size: int = Field(default=5, ge=1)  # Categories in flight at once
    abort_on_category_error: bool = False  # Stop starting new batches after a failure
    max_pages_per_category: int = Field(default=0, ge=0)  # 0 = walk every page

    # ==========================================================================
    # Slot Scanning
    # ==========================================================================
    slot_tolerance: float = Field(default=1.05, ge=1.0)  # Overshoot beyond page size
    slot_read_timeout_ms: int = Field(default=50, gt=0)  # Per-element lookup in a slot

    # ==========================================================================
    # Browser
    # ==========================================================================
    headless_browser: bool = True
    navigation_timeout_ms: int = Field(default=30000, gt=0)
    pagination_label_timeout_ms: int = Field(default=10000, gt=0)
    viewport_width: int = 1278
    viewport_height: int = 1287

    # ==========================================================================
    # Output & Scheduling
    # ==========================================================================
    output_dir: str = "data/exports"
    export_interval_minutes: int = Field(default=0, ge=0)  # 0 = run once and exit
    metrics_port: int = Field(default=0, ge=0)  # 0 = no Prometheus endpoint

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
