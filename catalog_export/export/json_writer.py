"""Write each category's products to its own JSON document."""

import json
import logging
from pathlib import Path
from typing import Iterable

from catalog_export.ingest.base import Product

logger = logging.getLogger(__name__)


def category_output_path(output_dir: str | Path, category: str) -> Path:
    """Path of a category's export file. Path separators become underscores."""
    safe_name = category.strip().replace("/", "_").replace("\\", "_")
    if not safe_name or safe_name in {".", ".."}:
        raise ValueError(f"Invalid category name for export: {category!r}")
    return Path(output_dir) / f"{safe_name}.json"


class JsonExportWriter:
    """Writes one ``<category>.json`` array per category into ``output_dir``."""

    def __init__(self, output_dir: str | Path):
        self.output_dir = Path(output_dir)

    def write(self, category: str, products: Iterable[Product]) -> Path:
        """
        Serialize products and overwrite the category's file.

        Returns:
            Path of the written file
        """
        path = category_output_path(self.output_dir, category)
        path.parent.mkdir(parents=True, exist_ok=True)

        documents = [product.to_dict() for product in products]
        with path.open("w", encoding="utf-8") as f:
            json.dump(documents, f, ensure_ascii=False, indent=2)

        logger.info(f"Wrote {len(documents)} products for {category} to {path}")
        return path
