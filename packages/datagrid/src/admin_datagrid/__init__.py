"""Admin datagrid filters over SQLAlchemy: callback filters, proxy queries."""

from __future__ import annotations

from .callback import NON_BOOLEAN_RETURN_DEPRECATION, CallbackFilter
from .datagrid import Datagrid
from .exceptions import (
    CallbackNotConfiguredError,
    DatagridError,
    FilterError,
    FilterNotFoundError,
    InvalidFilterOptionsError,
    QueryBuilderError,
)
from .filter import Filter, FilterCondition
from .options import FilterOptions, build_options, resolve_callback
from .query import ROOT_ALIAS, IQueryBuilder, ProxyQuery, SelectQueryBuilder
from .rendering import RenderSettings, WidgetType

__all__ = [
    "CallbackFilter",
    "CallbackNotConfiguredError",
    "Datagrid",
    "DatagridError",
    "Filter",
    "FilterCondition",
    "FilterError",
    "FilterNotFoundError",
    "FilterOptions",
    "IQueryBuilder",
    "InvalidFilterOptionsError",
    "NON_BOOLEAN_RETURN_DEPRECATION",
    "ProxyQuery",
    "QueryBuilderError",
    "ROOT_ALIAS",
    "RenderSettings",
    "SelectQueryBuilder",
    "WidgetType",
    "build_options",
    "resolve_callback",
]
