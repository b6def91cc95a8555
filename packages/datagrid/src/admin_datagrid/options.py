"""FilterOptions: configuration map handed to ``Filter.initialize``."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import InvalidFilterOptionsError
from .rendering import WidgetType


def resolve_callback(value: Any) -> Any:
    """Turn an ``(object, "method_name")`` pair into a bound callable.

    Plain callables and ``None`` pass through untouched; anything else is
    left for the field type check to reject.
    """
    if (
        isinstance(value, (tuple, list))
        and len(value) == 2
        and isinstance(value[1], str)
    ):
        target, method_name = value
        method = getattr(target, method_name, None)
        if method is None or not callable(method):
            raise ValueError(
                f"{type(target).__name__!s} has no callable attribute {method_name!r}"
            )
        return method
    return value


class FilterOptions(BaseModel):
    """Options of a single filter.

    Unknown keys are kept (``extra="allow"``) so filter types and the form
    layer can carry their own settings alongside the recognised ones.
    """

    model_config = ConfigDict(extra="allow", arbitrary_types_allowed=True)

    callback: Callable[..., Any] | None = None
    field_name: str | None = None
    field_type: WidgetType | str = WidgetType.TEXT
    field_options: dict[str, Any] = Field(default_factory=dict)
    operator_type: WidgetType | str | None = None
    operator_options: dict[str, Any] = Field(default_factory=dict)
    label: str | bool | None = None
    show_filter: bool | None = None
    advanced_filter: bool = True
    parent_association_mappings: list[Any] = Field(default_factory=list)
    alias: str | None = None

    @field_validator("callback", mode="before")
    @classmethod
    def _resolve_callback(cls, value: Any) -> Any:
        return resolve_callback(value)

    def get(self, key: str, default: Any = None) -> Any:
        """Dict-style lookup; ``None`` values fall back to ``default``."""
        value = getattr(self, key, None)
        return default if value is None else value

    def as_dict(self) -> dict[str, Any]:
        data = {name: getattr(self, name) for name in type(self).model_fields}
        data.update(self.model_extra or {})
        return data


def build_options(
    defaults: Mapping[str, Any], options: Mapping[str, Any] | None = None
) -> FilterOptions:
    """Merge ``options`` over ``defaults`` and validate the result.

    Raises:
        InvalidFilterOptionsError: If the merged mapping is not valid.
    """
    merged = {**defaults, **(options or {})}
    try:
        return FilterOptions.model_validate(merged)
    except PydanticValidationError as exc:
        errors: dict[str, list[str]] = {}
        for error in exc.errors():
            loc = ".".join(str(p) for p in error.get("loc", ("__root__",)))
            msg = error.get("msg", "validation error")
            errors.setdefault(loc, []).append(msg)
        raise InvalidFilterOptionsError(errors) from exc
