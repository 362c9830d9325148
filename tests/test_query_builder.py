"""Tests for list parameter normalization and filter construction."""

from datetime import datetime

import pytest

from common.enum import CategoryEnum, SortOrderEnum
from models import Transaction
from query_builder import MAX_OFFSET, apply_filters, apply_page, build_transaction_query


def test_defaults() -> None:
    params = build_transaction_query()

    assert params.sort_by == "date"
    assert params.order is SortOrderEnum.DESC
    assert params.page == 1
    assert params.limit == 50
    assert params.offset == 0


@pytest.mark.parametrize(
    "page, limit, expected_page, expected_limit",
    [
        ("0", "0", 1, 1),
        ("-3", "500", 1, 100),
        ("3", "20", 3, 20),
        ("abc", "xyz", 1, 50),
        ("2.9", "10.5", 2, 10),
        ("", "", 1, 50),
    ],
)
def test_page_and_limit_are_clamped(page, limit, expected_page, expected_limit) -> None:
    params = build_transaction_query(page=page, limit=limit)

    assert params.page == expected_page
    assert params.limit == expected_limit
    assert 1 <= params.limit <= 100


def test_offset_is_page_minus_one_times_limit() -> None:
    params = build_transaction_query(page="4", limit="25")

    assert params.offset == 75


def test_order_other_than_asc_is_descending() -> None:
    assert build_transaction_query(order="asc").order is SortOrderEnum.ASC
    assert build_transaction_query(order="ASC").order is SortOrderEnum.DESC
    assert build_transaction_query(order="sideways").order is SortOrderEnum.DESC


def test_unknown_sort_field_falls_back_to_date() -> None:
    assert build_transaction_query(sort_by="password").sort_by == "date"
    assert build_transaction_query(sort_by="amount").sort_by == "amount"


def test_unparseable_bounds_are_dropped() -> None:
    params = build_transaction_query(start_date="yesterday", min_amount="lots", max_amount="12.5")

    assert params.start_date is None
    assert params.min_amount is None
    assert params.max_amount == 12.5


def test_blank_filters_impose_nothing() -> None:
    params = build_transaction_query(category="", type=" ", search="")

    assert params.category is None
    assert params.type is None
    assert params.search is None


@pytest.fixture
def seeded(db_session):
    rows = [
        ("Coffee", -4.5, datetime(2024, 1, 15), CategoryEnum.FOOD),
        ("Salary", 3000, datetime(2024, 1, 1), CategoryEnum.INCOME),
        ("Bus ticket", -2.75, datetime(2024, 1, 20), CategoryEnum.TRANSPORTATION),
        ("Coffee beans", -18, datetime(2024, 2, 3), CategoryEnum.FOOD),
        ("100%_juice", -3, datetime(2024, 2, 10), CategoryEnum.FOOD),
    ]
    for title, amount, date, category in rows:
        db_session.add(Transaction(title=title, amount=amount, date=date, category=category))
    db_session.commit()
    return db_session


def _titles(db_session, **raw):
    params = build_transaction_query(**raw)
    query = apply_page(apply_filters(db_session.query(Transaction), params), params)
    return [t.title for t in query.all()]


def test_category_and_type_filters(seeded) -> None:
    assert _titles(seeded, category="Food", order="asc") == ["Coffee", "Coffee beans", "100%_juice"]
    assert _titles(seeded, type="income") == ["Salary"]
    assert _titles(seeded, category="Food", type="income") == []


def test_unknown_category_or_type_matches_nothing(seeded) -> None:
    assert _titles(seeded, category="Groceries") == []
    assert _titles(seeded, type="transfer") == []


def test_search_is_case_insensitive_substring(seeded) -> None:
    assert sorted(_titles(seeded, search="COFFEE")) == ["Coffee", "Coffee beans"]


def test_search_treats_pattern_characters_literally(seeded) -> None:
    assert _titles(seeded, search="%_") == ["100%_juice"]
    assert _titles(seeded, search="_") == ["100%_juice"]


def test_date_range_is_inclusive(seeded) -> None:
    titles = _titles(seeded, start_date="2024-01-15", end_date="2024-01-20", order="asc")

    assert titles == ["Coffee", "Bus ticket"]


def test_amount_range_is_inclusive(seeded) -> None:
    titles = _titles(seeded, min_amount="-4.5", max_amount="-2.75", sort_by="amount", order="asc")

    assert titles == ["Coffee", "100%_juice", "Bus ticket"]


def test_single_bounds_apply_independently(seeded) -> None:
    assert _titles(seeded, min_amount="0") == ["Salary"]
    assert _titles(seeded, start_date="2024-02-01", order="asc") == ["Coffee beans", "100%_juice"]


def test_sort_and_pagination(seeded) -> None:
    assert _titles(seeded, sort_by="amount", order="desc", limit="2") == ["Salary", "Bus ticket"]
    assert _titles(seeded, sort_by="amount", order="desc", limit="2", page="3") == ["Coffee beans"]
    assert _titles(seeded, page="9") == []


def test_huge_page_is_capped_to_a_bindable_offset() -> None:
    params = build_transaction_query(page=str(10 ** 20), limit="50")

    assert params.offset <= MAX_OFFSET
    assert params.offset + params.limit > MAX_OFFSET


def test_search_folds_non_ascii_case(seeded) -> None:
    seeded.add(Transaction(title="École fees", amount=-900, date=datetime(2024, 3, 1), category=CategoryEnum.EDUCATION))
    seeded.commit()

    assert _titles(seeded, search="école") == ["École fees"]
    assert _titles(seeded, search="ÉCOLE FEES") == ["École fees"]
