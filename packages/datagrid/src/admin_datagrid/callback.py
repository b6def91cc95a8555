"""CallbackFilter: delegate the query mutation to application code."""

from __future__ import annotations

import logging
import warnings
from typing import TYPE_CHECKING, Any

from .exceptions import CallbackNotConfiguredError
from .filter import Filter
from .rendering import RenderSettings, WidgetType

if TYPE_CHECKING:
    from .query import ProxyQuery

logger = logging.getLogger("admin_datagrid.filter")

NON_BOOLEAN_RETURN_DEPRECATION = (
    "Using another return type than boolean for the callback option is deprecated"
    " since admin-datagrid 1.1 and will raise an exception in version 2.0."
)


class CallbackFilter(Filter):
    """
    Filter whose condition is built by a user-supplied callback.

    The ``callback`` option is called as ``callback(query, alias, field,
    data)`` and returns ``True`` when it added a condition to ``query``.

    Usage::

        def by_title(query, alias, field, data):
            if not data.get("value"):
                return False
            query.get_query_builder().and_where(f"{alias}.{field} = :title")
            query.get_query_builder().set_parameter("title", data["value"])
            return True

        title = CallbackFilter()
        title.initialize("title", {"callback": by_title})
    """

    def get_default_options(self) -> dict[str, Any]:
        return {
            "callback": None,
            "field_type": WidgetType.TEXT,
            "operator_type": WidgetType.HIDDEN,
            "operator_options": {},
        }

    def filter(self, query: ProxyQuery, alias: str, field: str | None, data: Any) -> None:
        """
        Invoke the callback and record whether the filter is active.

        Raises:
            CallbackNotConfiguredError: If no callback is configured.
        """
        callback = self.get_option("callback")
        if callback is None:
            raise CallbackNotConfiguredError(self.name)

        self._active = False
        result = callback(query, alias, field, data)

        # TODO(2.0): raise instead of coercing non-boolean results.
        if not isinstance(result, bool):
            warnings.warn(NON_BOOLEAN_RETURN_DEPRECATION, DeprecationWarning, stacklevel=2)
        self._active = bool(result)
        logger.debug("Callback filter %s active=%s", self.name, self._active)

    def get_render_settings(self) -> RenderSettings:
        return RenderSettings(
            WidgetType.DEFAULT,
            {
                "field_type": self.get_field_type(),
                "field_options": self.get_field_options(),
                "operator_type": WidgetType.HIDDEN,
                "operator_options": {},
                "label": self.get_label(),
            },
        )
