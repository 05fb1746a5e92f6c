"""Filter strategies and the registry that selects the current one."""

from __future__ import annotations

from .base import QueryFilter
from .external import DEFAULT_BUFFER_THRESHOLD, ExternalCommandFilter
from .regexp import (
    CASE_SENSITIVE,
    IGNORE_CASE,
    REGEXP,
    SMART_CASE,
    CaseSensitiveFilter,
    IgnoreCaseFilter,
    RegexpFilter,
    SmartCaseFilter,
    builtin_filters,
)
from .registry import FilterSet

__all__ = [
    "CASE_SENSITIVE",
    "CaseSensitiveFilter",
    "DEFAULT_BUFFER_THRESHOLD",
    "ExternalCommandFilter",
    "FilterSet",
    "IGNORE_CASE",
    "IgnoreCaseFilter",
    "QueryFilter",
    "REGEXP",
    "RegexpFilter",
    "SMART_CASE",
    "SmartCaseFilter",
    "builtin_filters",
]
