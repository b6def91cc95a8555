"""Filter: base class for datagrid filters."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any

from .options import FilterOptions, build_options
from .rendering import WidgetType

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .query import ProxyQuery
    from .rendering import RenderSettings

logger = logging.getLogger("admin_datagrid.filter")


class FilterCondition(str, Enum):
    """How a filter's condition is combined with the existing ``WHERE``."""

    AND = "and"
    OR = "or"


class Filter(ABC):
    """
    Base class for datagrid filters.

    A filter is created empty and configured with :meth:`initialize`.  The
    datagrid then calls :meth:`apply` with the submitted data; the filter
    resolves the alias and field through :meth:`association` and
    contributes its condition in :meth:`filter`.
    """

    def __init__(self) -> None:
        self._name: str | None = None
        self._options = FilterOptions()
        self._condition = FilterCondition.AND
        self._value: Any = None
        self._active = False

    def initialize(self, name: str, options: Mapping[str, Any] | None = None) -> None:
        """
        Store the filter name and options.

        Options are merged over :meth:`get_default_options`.

        Raises:
            InvalidFilterOptionsError: If the options cannot be built.
        """
        self._name = name
        self._options = build_options(self.get_default_options(), options)
        self._active = False

    def get_default_options(self) -> dict[str, Any]:
        return {}

    # -- naming -------------------------------------------------------------

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def form_name(self) -> str | None:
        """Name usable as a form field (dots are not allowed there)."""
        return self._name.replace(".", "__") if self._name else self._name

    # -- options ------------------------------------------------------------

    @property
    def options(self) -> FilterOptions:
        return self._options

    def get_option(self, key: str, default: Any = None) -> Any:
        return self._options.get(key, default)

    def set_option(self, key: str, value: Any) -> None:
        """
        Replace a single option.

        Raises:
            InvalidFilterOptionsError: If the new value is not valid.
        """
        self._options = build_options(self._options.as_dict(), {key: value})

    def get_field_name(self) -> str | None:
        """``field_name`` option, then ``field_options['field_name']``, then the name."""
        field_name = self.get_option("field_name")
        if field_name:
            return str(field_name)
        field_name = self.get_field_options().get("field_name")
        if field_name:
            return str(field_name)
        return self._name

    def get_field_options(self) -> dict[str, Any]:
        return dict(self._options.field_options)

    def get_field_type(self) -> WidgetType | str:
        return self.get_option("field_type", WidgetType.TEXT)

    def get_label(self) -> str | bool | None:
        return self.get_option("label")

    def get_parent_association_mappings(self) -> list[Any]:
        return list(self._options.parent_association_mappings)

    # -- state --------------------------------------------------------------

    def set_condition(self, condition: FilterCondition | str) -> None:
        self._condition = FilterCondition(condition)

    def get_condition(self) -> FilterCondition:
        return self._condition

    @property
    def value(self) -> Any:
        """Data passed to the last :meth:`apply` call."""
        return self._value

    def is_active(self) -> bool:
        return self._active

    # -- query helpers ------------------------------------------------------

    def apply(self, query: ProxyQuery, data: Any) -> None:
        """Resolve alias and field, then delegate to :meth:`filter`."""
        self._value = data
        alias, field = self.association(query, data)
        logger.debug("Applying filter %s on %s.%s", self._name, alias, field)
        self.filter(query, alias, field, data)

    def association(self, query: ProxyQuery, data: Any) -> tuple[str, str | None]:
        """Join the parent associations and return ``(alias, field)``."""
        alias = query.entity_join(self.get_parent_association_mappings())
        return self.get_option("alias", alias), self.get_field_name()

    def apply_where(self, query: ProxyQuery, condition: Any) -> None:
        """Add ``condition`` to the query and mark the filter active."""
        builder = query.get_query_builder()
        if self._condition is FilterCondition.OR:
            builder.or_where(condition)
        else:
            builder.and_where(condition)
        self._active = True

    def get_new_parameter_name(self, query: ProxyQuery) -> str:
        return f"{self.form_name}_{query.get_unique_parameter_id()}"

    @abstractmethod
    def filter(self, query: ProxyQuery, alias: str, field: str | None, data: Any) -> None:
        """Contribute this filter's condition to ``query``."""
        ...

    @abstractmethod
    def get_render_settings(self) -> RenderSettings:
        """Return the ``(widget, options)`` pair for the form layer."""
        ...
