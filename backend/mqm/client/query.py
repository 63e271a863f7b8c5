"""
MQM CI Bridge — query-string builder for workspace entity collections.

MQM filters look like ``query="name='*foo*';subtype='taxonomy_item_node'"``:
conditions are ANDed with ``;`` and an OR group is joined with ``||``.
"""

from __future__ import annotations

from typing import Any


def escape_query_value(value: str) -> str:
    """Double backslashes, then backslash-escape quotes."""
    return value.replace("\\", "\\\\").replace("'", "\\'").replace('"', '\\"')


def condition(name: str, value: str) -> str:
    return f"{name}='{escape_query_value(value)}'"


def any_of(*conditions: str) -> str:
    return "||".join(conditions)


def wildcard(value: str) -> str:
    return f"*{value}*"


def name_conditions(name: str | None, *also_match: str) -> list[str]:
    """
    Substring match on ``name`` (and optionally on other fields, ORed).
    An empty filter contributes no condition at all.
    """
    if not name:
        return []
    fields = ("name",) + also_match
    return [any_of(*(condition(f, wildcard(name)) for f in fields))]


def query_params(conditions: list[str], offset: int, limit: int) -> dict[str, Any]:
    params: dict[str, Any] = {}
    if conditions:
        params["query"] = '"' + ";".join(conditions) + '"'
    params["offset"] = offset
    params["limit"] = limit
    params["order_by"] = "id"
    return params
