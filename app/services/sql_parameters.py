from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any

from app.services.safe_sql import summarize_sql
from app.services.sql_escape import escape_value

logger = logging.getLogger(__name__)

# `?` or `:name`, but not the second colon of a `::type` cast.
PLACEHOLDER_PATTERN = re.compile(r"\?|(?<!:):(\w+)")

ParameterCollection = Sequence[Any] | Mapping[Any, Any]

_MISSING = object()


class PlaceholderCursor:
    """Replacement state for one substitution pass.

    Positional and named placeholders share a single cursor, which only moves
    forward when a placeholder was actually replaced.
    """

    def __init__(self, parameters: ParameterCollection) -> None:
        self.parameters = parameters
        self.position = _starting_position(parameters)
        self.replaced = 0
        self.unresolved = 0

    def __call__(self, match: re.Match[str]) -> str:
        name = match.group(1)
        value = _MISSING
        if name is not None:
            value = _lookup(self.parameters, name)
        if value is _MISSING:
            value = _lookup(self.parameters, self.position)
        if value is _MISSING:
            self.unresolved += 1
            return match.group(0)

        self.position += 1
        self.replaced += 1
        return escape_value(value)


def replace_query_parameters(query: str, parameters: ParameterCollection) -> str:
    cursor = PlaceholderCursor(parameters)
    result = PLACEHOLDER_PATTERN.sub(cursor, query)

    summary = summarize_sql(query)
    logger.info(
        "replace_query_parameters: sql_len=%s sql_hash=%s parameters=%s replaced=%s unresolved=%s",
        summary["len"],
        summary["sha256_8"],
        len(parameters),
        cursor.replaced,
        cursor.unresolved,
    )
    return result


def _starting_position(parameters: ParameterCollection) -> int:
    if _lookup(parameters, 0) is _MISSING and _lookup(parameters, 1) is not _MISSING:
        return 1
    return 0


def _lookup(parameters: ParameterCollection, key: int | str) -> Any:
    if isinstance(parameters, Mapping):
        return parameters.get(key, _MISSING)
    if isinstance(key, int) and 0 <= key < len(parameters):
        return parameters[key]
    return _MISSING
