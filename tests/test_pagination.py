"""Tests for pagination label parsing and page arithmetic."""

import pytest

from catalog_export.ingest.pagination import (
    PaginationInfo,
    PaginationLabelError,
    compute_page_count,
    parse_pagination_label,
)


def test_parse_first_page_label():
    info = parse_pagination_label("1-60 din 527 de produse")

    assert info == PaginationInfo(current_page_start=1, current_page_end=60, total_products=527)
    assert info.page_size == 60
    assert info.is_first_page
    assert not info.is_last_page


def test_parse_label_with_spaces_and_thousands():
    info = parse_pagination_label(" 1 - 40 din 1.527 de produse ")

    assert info.current_page_start == 1
    assert info.current_page_end == 40
    assert info.total_products == 1527


def test_last_page_label():
    info = parse_pagination_label("521-527 din 527 de produse")

    assert info.page_size == 7
    assert info.is_last_page
    assert not info.is_first_page


def test_page_count_527_by_40():
    assert compute_page_count(527, 40) == 14

    info = PaginationInfo(current_page_start=1, current_page_end=40, total_products=527)
    assert info.page_count == 14
    assert [info.expected_size(i) for i in (1, 13, 14)] == [40, 40, 7]


def test_page_count_exact_multiple():
    assert compute_page_count(120, 40) == 3
    assert compute_page_count(1, 40) == 1


def test_page_count_rejects_empty_page():
    with pytest.raises(ValueError):
        compute_page_count(10, 0)


def test_expected_size_out_of_range():
    info = PaginationInfo(current_page_start=1, current_page_end=40, total_products=80)

    with pytest.raises(ValueError):
        info.expected_size(3)


@pytest.mark.parametrize(
    "label",
    [
        "",
        "527 de produse",
        "1-60 of 527 products",
        "60 din 527 de produse",
        "a-60 din 527 de produse",
        "1-60 din multe de produse",
        "10-5 din 527 de produse",
        "1-60 din 20 de produse",
    ],
)
def test_malformed_labels_raise(label):
    with pytest.raises(PaginationLabelError):
        parse_pagination_label(label)


def test_label_error_is_value_error():
    with pytest.raises(ValueError):
        parse_pagination_label(None)
