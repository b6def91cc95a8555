"""Render settings handed to the form layer."""

from __future__ import annotations

from enum import Enum
from typing import Any, NamedTuple


class WidgetType(str, Enum):
    """Widget kinds understood by the form layer."""

    DEFAULT = "default"
    TEXT = "text"
    HIDDEN = "hidden"
    CHOICE = "choice"
    NUMBER = "number"
    CHECKBOX = "checkbox"
    DATE = "date"


class RenderSettings(NamedTuple):
    """``(widget, options)`` pair describing how to build a filter control."""

    widget: WidgetType
    options: dict[str, Any]
