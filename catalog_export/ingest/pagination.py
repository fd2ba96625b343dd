"""Pagination geometry derived from the listing's "1-60 din 527 de produse" label."""

from dataclasses import dataclass

RANGE_MARKER = "din"
TOTAL_SUFFIX = "de produse"

# Thousands separators that may appear inside the total
_GROUP_SEPARATORS = (".", ",")


class PaginationLabelError(ValueError):
    """Raised when the pagination label does not have the expected shape."""

    def __init__(self, label: str, reason: str):
        self.label = label
        self.reason = reason
        super().__init__(f"Unparseable pagination label {label!r}: {reason}")


@dataclass(frozen=True)
class PaginationInfo:
    """Product range shown on one page plus the category total."""

    current_page_start: int
    current_page_end: int
    total_products: int

    @property
    def page_size(self) -> int:
        return self.current_page_end - self.current_page_start + 1

    @property
    def page_count(self) -> int:
        return compute_page_count(self.total_products, self.page_size)

    @property
    def is_first_page(self) -> bool:
        return self.current_page_start == 1

    @property
    def is_last_page(self) -> bool:
        return self.current_page_end == self.total_products

    def expected_size(self, page_index: int) -> int:
        """Products expected on a 1-based page; only the last page may be shorter."""
        if page_index < 1 or page_index > self.page_count:
            raise ValueError(f"Page {page_index} outside 1..{self.page_count}")
        if page_index < self.page_count:
            return self.page_size
        return self.total_products - (self.page_count - 1) * self.page_size


def _parse_int(raw: str, label: str, what: str) -> int:
    cleaned = raw
    for separator in _GROUP_SEPARATORS:
        cleaned = cleaned.replace(separator, "")
    cleaned = "".join(cleaned.split())
    if not cleaned.isdigit() or not cleaned.isascii():
        raise PaginationLabelError(label, f"{what} is not a number: {raw.strip()!r}")
    return int(cleaned)


def parse_pagination_label(label: str) -> PaginationInfo:
    """
    Parse a label such as ``"1-60 din 527 de produse"``.

    Args:
        label: Raw inner text of the pagination label

    Returns:
        PaginationInfo for the page the label was read from

    Raises:
        PaginationLabelError: If the label is not in the expected format
    """
    if label is None:
        raise PaginationLabelError("", "label is missing")

    text = label.strip()
    marker_at = text.find(RANGE_MARKER)
    if marker_at < 0:
        raise PaginationLabelError(label, f"missing {RANGE_MARKER!r}")

    range_part = text[:marker_at]
    total_part = text[marker_at + len(RANGE_MARKER):]
    suffix_at = total_part.find(TOTAL_SUFFIX)
    if suffix_at >= 0:
        total_part = total_part[:suffix_at]

    bounds = range_part.split("-")
    if len(bounds) != 2:
        raise PaginationLabelError(label, "range is not '<start>-<end>'")

    start = _parse_int(bounds[0], label, "range start")
    end = _parse_int(bounds[1], label, "range end")
    total = _parse_int(total_part, label, "total")

    if start < 1 or end < start:
        raise PaginationLabelError(label, f"invalid range {start}-{end}")
    if total < end:
        raise PaginationLabelError(label, f"total {total} is below range end {end}")

    return PaginationInfo(
        current_page_start=start,
        current_page_end=end,
        total_products=total,
    )


def compute_page_count(total_products: int, page_size: int) -> int:
    """Number of pages: integer division plus one if there is a remainder."""
    if page_size < 1:
        raise ValueError(f"Page size must be positive, got {page_size}")
    pages, remainder = divmod(total_products, page_size)
    return pages + 1 if remainder else pages
