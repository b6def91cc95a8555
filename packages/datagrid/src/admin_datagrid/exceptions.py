"""Exceptions for the admin datagrid filters."""

from __future__ import annotations


class DatagridError(Exception):
    """Root exception for the admin-datagrid package."""


class FilterError(DatagridError):
    """Base class for all filter-related errors."""


class CallbackNotConfiguredError(FilterError, RuntimeError):
    """Raised when a callback filter is invoked without a ``callback`` option."""

    def __init__(self, filter_name: str | None) -> None:
        self.filter_name = filter_name
        super().__init__(
            f'Please provide a valid callback option "filter" for field "{filter_name}"'
        )


class InvalidFilterOptionsError(FilterError):
    """Raised when filter options cannot be built.

    Carries structured errors: ``{field: [messages]}``.
    """

    def __init__(self, errors: dict[str, list[str]]) -> None:
        self.errors = errors
        super().__init__(str(errors))


class FilterNotFoundError(DatagridError, KeyError):
    """Raised when a datagrid has no filter with the requested name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Filter {name!r} does not exist")

    def __str__(self) -> str:
        return f"Filter {self.name!r} does not exist"


class QueryBuilderError(DatagridError):
    """Raised when an alias or relationship cannot be resolved on a query."""
