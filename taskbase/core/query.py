"""Query builder - compiles selection definitions into engine query strings.

Example::

    {"folder": "Projects", "filters": [{"property": "status", "operator": "=", "value": "active"}]}

compiles (with completed tasks hidden) to::

    @task and childof(@page and path("Projects") and status = "active") and $completed = false
"""

from __future__ import annotations

import re

from taskbase.config import PropertyFilter, SourceConfig, ViewConfig

# Keywords the engine evaluates as relative dates
DATE_KEYWORDS = ("today", "now")

ISO_DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
NUMBER_PATTERN = re.compile(r"-?[0-9]+(?:\.[0-9]+)?")
CHILDOF_PATTERN = re.compile(r"childof\(([^)]+)\)")

ALL_PAGES = "@page"
COMPLETED_CLAUSE = "$completed = false"


def _quote(value: str) -> str:
    return '"' + value.replace('"', '\\"') + '"'


def format_value(value: str) -> str:
    """Render a raw filter value as a literal in the engine's query language.

    First match wins, in this order:
    date keyword, ISO date, tag, boolean, number, string.
    """
    if value in DATE_KEYWORDS:
        return f"date({value})"

    if ISO_DATE_PATTERN.fullmatch(value):
        return f"date({value})"

    # Tags are opaque strings to the engine
    if value.startswith("#"):
        return _quote(value)

    if value in ("true", "false"):
        return value

    if NUMBER_PATTERN.fullmatch(value):
        return value

    return _quote(value)


def build_filter_expression(filter: PropertyFilter) -> str:
    """Build a single filter expression."""
    value = format_value(filter.value)

    if filter.operator == "contains":
        return f"{filter.property}.contains({value})"

    return f"{filter.property} {filter.operator} {value}"


def build_page_query(source: SourceConfig) -> str:
    """Build the page-level query (folder scope and property filters)."""
    conditions: list[str] = []

    if source.folder and source.folder.strip():
        conditions.append(f"path({_quote(source.folder)})")

    for f in source.filters:
        conditions.append(build_filter_expression(f))

    if not conditions:
        return ALL_PAGES

    return f"{ALL_PAGES} and {' and '.join(conditions)}"


def build_query(source: SourceConfig, view: ViewConfig) -> str:
    """Build the complete task query.

    Hiding completed tasks happens here and nowhere else.
    """
    query = f"@task and childof({build_page_query(source)})"

    if not view.show_completed:
        query += f" and {COMPLETED_CLAUSE}"

    return query


def describe_query(query: str) -> list[str]:
    """Break a compiled query into human-readable parts (for debugging)."""
    parts: list[str] = []

    if "@task" in query:
        parts.append("Queries tasks")

    match = CHILDOF_PATTERN.search(query)
    if match:
        parts.append(f"From pages matching: {match.group(1)}")

    if COMPLETED_CLAUSE in query:
        parts.append("Excludes completed tasks")

    return parts
