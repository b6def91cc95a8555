"""Tests for Datagrid."""

from __future__ import annotations

from typing import Any

import pytest

from admin_datagrid import (
    CallbackFilter,
    Datagrid,
    DatagridError,
    FilterNotFoundError,
    ProxyQuery,
)


def title_contains(query: ProxyQuery, alias: str, field: str, data: dict[str, Any]) -> bool:
    if not data.get("value"):
        return False
    query.get_query_builder().and_where(f"{alias}.{field} LIKE :title")
    query.get_query_builder().set_parameter("title", f"%{data['value']}%")
    return True


def author_is(query: ProxyQuery, alias: str, field: str, data: dict[str, Any]) -> bool:
    if not data.get("value"):
        return False
    query.get_query_builder().and_where(f"{alias}.{field} = :author")
    query.get_query_builder().set_parameter("author", data["value"])
    return True


@pytest.fixture
def datagrid(proxy_query: ProxyQuery) -> Datagrid:
    grid = Datagrid(proxy_query, per_page=10)
    title = CallbackFilter()
    title.initialize("title", {"callback": title_contains})
    author = CallbackFilter()
    author.initialize(
        "author",
        {
            "callback": author_is,
            "field_name": "name",
            "parent_association_mappings": ["author"],
        },
    )
    grid.add_filter(title)
    grid.add_filter(author)
    return grid


def test_filter_registry(datagrid: Datagrid) -> None:
    assert datagrid.has_filter("title")
    assert set(datagrid.get_filters()) == {"title", "author"}
    assert datagrid.get_filter("title").name == "title"

    datagrid.remove_filter("title")

    assert not datagrid.has_filter("title")


def test_get_unknown_filter_raises(datagrid: Datagrid) -> None:
    with pytest.raises(FilterNotFoundError, match="missing"):
        datagrid.get_filter("missing")


def test_add_uninitialized_filter_raises(datagrid: Datagrid) -> None:
    with pytest.raises(ValueError, match="initialized"):
        datagrid.add_filter(CallbackFilter())


def test_only_submitted_filters_are_applied(datagrid: Datagrid) -> None:
    datagrid.set_value("title", {"value": "Dune"})
    datagrid.set_value("author", {"type": None})

    query = datagrid.build_query()

    assert datagrid.get_filter("title").is_active()
    assert not datagrid.get_filter("author").is_active()
    assert datagrid.has_active_filters()
    assert query.get_entity_join_aliases() == []


def test_build_query_is_idempotent(datagrid: Datagrid) -> None:
    datagrid.set_value("title", {"value": "Dune"})

    datagrid.build_query()
    datagrid.build_query()

    assert len(datagrid.query.get_query_builder().get_where_parts()) == 1


def test_failed_build_cannot_be_retried(datagrid: Datagrid) -> None:
    def broken(*_: Any) -> bool:
        raise ZeroDivisionError("boom")

    datagrid.get_filter("author").set_option("callback", broken)
    datagrid.set_values({"title": {"value": "Dune"}, "author": {"value": "x"}})

    with pytest.raises(ZeroDivisionError):
        datagrid.build_query()
    with pytest.raises(DatagridError, match="failed"):
        datagrid.build_query()

    assert len(datagrid.query.get_query_builder().get_where_parts()) == 1


def test_values_are_frozen_after_build(datagrid: Datagrid) -> None:
    datagrid.build_query()

    with pytest.raises(DatagridError):
        datagrid.set_value("title", {"value": "Dune"})


def test_no_values_means_no_active_filters(datagrid: Datagrid) -> None:
    datagrid.build_query()

    assert not datagrid.has_active_filters()
    assert datagrid.query.get_max_results() == 10
    assert datagrid.query.get_first_result() == 0


def test_paging_and_sorting_values(datagrid: Datagrid) -> None:
    datagrid.set_values(
        {"_sort_by": "year", "_sort_order": "desc", "_page": "3", "_per_page": "2"}
    )

    query = datagrid.build_query()

    assert query.get_sort_by() == "year"
    assert query.get_sort_order() == "DESC"
    assert query.get_max_results() == 2
    assert query.get_first_result() == 4


def test_invalid_paging_values_fall_back(proxy_query: ProxyQuery) -> None:
    grid = Datagrid(proxy_query, per_page=10, max_per_page=50)
    grid.set_values(
        {"_sort_by": "title", "_sort_order": "sideways", "_page": "x", "_per_page": 500}
    )

    query = grid.build_query()

    assert query.get_sort_order() == "ASC"
    assert query.get_first_result() == 0
    assert query.get_max_results() == 50


def test_execute(datagrid: Datagrid, session: Any) -> None:
    datagrid.set_values(
        {
            "title": {"value": "Dune"},
            "author": {"value": "Frank Herbert"},
            "_sort_by": "year",
            "_sort_order": "DESC",
        }
    )

    rows = datagrid.execute(session)

    assert [book.title for book in rows] == ["Children of Dune", "Dune"]
    assert datagrid.query.get_entity_join_aliases() == ["s_author"]
