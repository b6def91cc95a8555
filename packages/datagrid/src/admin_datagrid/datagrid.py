"""Datagrid: bind submitted values to filters and run the filtered query."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .exceptions import DatagridError, FilterNotFoundError

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from .filter import Filter
    from .query import ProxyQuery

logger = logging.getLogger("admin_datagrid.datagrid")

SORT_BY_KEY = "_sort_by"
SORT_ORDER_KEY = "_sort_order"
PAGE_KEY = "_page"
PER_PAGE_KEY = "_per_page"


class Datagrid:
    """
    A set of named filters applied to one ``ProxyQuery``.

    Submitted values are keyed by filter name; a filter is applied only when
    its value is a mapping with a ``value`` key.  The reserved keys
    ``_sort_by``, ``_sort_order``, ``_page`` and ``_per_page`` drive sorting
    and paging.
    """

    def __init__(
        self,
        query: ProxyQuery,
        *,
        per_page: int = 25,
        max_per_page: int = 250,
    ) -> None:
        self._query = query
        self._per_page = per_page
        self._max_per_page = max_per_page
        self._filters: dict[str, Filter] = {}
        self._values: dict[str, Any] = {}
        self._built = False
        self._complete = False

    @property
    def query(self) -> ProxyQuery:
        return self._query

    # -- filters ------------------------------------------------------------

    def add_filter(self, filter_: Filter) -> None:
        if not filter_.name:
            raise ValueError("Filter must be initialized with a name before it is added")
        self._filters[filter_.name] = filter_

    def has_filter(self, name: str) -> bool:
        return name in self._filters

    def get_filter(self, name: str) -> Filter:
        try:
            return self._filters[name]
        except KeyError:
            raise FilterNotFoundError(name) from None

    def remove_filter(self, name: str) -> None:
        self._filters.pop(name, None)

    def get_filters(self) -> dict[str, Filter]:
        return dict(self._filters)

    def has_active_filters(self) -> bool:
        return any(f.is_active() for f in self._filters.values())

    # -- values -------------------------------------------------------------

    def set_value(self, name: str, data: Any) -> None:
        if self._built:
            raise DatagridError("Cannot change values once the query has been built")
        self._values[name] = data

    def set_values(self, values: Mapping[str, Any]) -> None:
        for name, data in values.items():
            self.set_value(name, data)

    def get_values(self) -> dict[str, Any]:
        return dict(self._values)

    # -- query --------------------------------------------------------------

    def _int_value(self, key: str, default: int) -> int:
        raw = self._values.get(key)
        if raw is None:
            return default
        try:
            return max(1, int(raw))
        except (TypeError, ValueError):
            return default

    def _apply_sorting(self) -> None:
        sort_by = self._values.get(SORT_BY_KEY)
        if sort_by:
            order = str(self._values.get(SORT_ORDER_KEY) or "ASC").upper()
            self._query.set_sort_by(str(sort_by))
            self._query.set_sort_order(order if order in ("ASC", "DESC") else "ASC")

    def _apply_paging(self) -> None:
        per_page = min(self._max_per_page, self._int_value(PER_PAGE_KEY, self._per_page))
        page = self._int_value(PAGE_KEY, 1)
        self._query.set_max_results(per_page)
        self._query.set_first_result((page - 1) * per_page)

    def build_query(self) -> ProxyQuery:
        """
        Apply every filter with submitted data, once.

        A build that raised leaves the query partially filtered and cannot be
        retried.

        Raises:
            DatagridError: If a previous build of this datagrid failed.
        """
        if self._built:
            if not self._complete:
                raise DatagridError("A previous build of this datagrid failed")
            return self._query
        self._built = True
        for name, filter_ in self._filters.items():
            data = self._values.get(name)
            if isinstance(data, Mapping) and "value" in data:
                filter_.apply(self._query, data)
        self._apply_sorting()
        self._apply_paging()
        self._complete = True
        logger.debug(
            "Built datagrid query with %d active filter(s)",
            sum(1 for f in self._filters.values() if f.is_active()),
        )
        return self._query

    def execute(self, session: Session) -> list[Any]:
        return self.build_query().execute(session)
