"""Task aggregation - turns flat engine results into grouped task trees."""

from __future__ import annotations

import locale
from collections.abc import Iterable
from functools import cmp_to_key

from taskbase.config import ViewConfig
from taskbase.models import Node, TaskGroup, TaskNode, is_task


def group_by_file(results: Iterable[Node]) -> dict[str, list[TaskNode]]:
    """Group root tasks by source document.

    Nested tasks (``parent_line >= 0``) are skipped; they are reached
    through their parent's ``children``. Each group is sorted by line
    number regardless of the configured sort.
    """
    groups: dict[str, list[TaskNode]] = {}

    for item in results:
        if not is_task(item) or item.parent_line >= 0:
            continue
        groups.setdefault(item.path, []).append(item)

    for tasks in groups.values():
        tasks.sort(key=lambda t: t.line)

    return groups


def sort_groups(
    groups: dict[str, list[TaskNode]],
    sort_by: str,
    sort_direction: str,
) -> list[tuple[str, list[TaskNode]]]:
    """Order groups by the active sort rule.

    Only ``file`` reorders (locale-aware path comparison). Other sort
    fields are accepted and leave the grouping order as-is.
    """
    entries = list(groups.items())
    direction = 1 if sort_direction == "asc" else -1

    def compare(a: tuple[str, list[TaskNode]], b: tuple[str, list[TaskNode]]) -> int:
        if sort_by == "file":
            return direction * locale.strcoll(a[0], b[0])
        return 0

    entries.sort(key=cmp_to_key(compare))
    return entries


def aggregate(results: Iterable[Node], view: ViewConfig) -> list[TaskGroup]:
    """Group and sort one pass of engine results."""
    grouped = group_by_file(results)
    ordered = sort_groups(grouped, view.sort_by, view.sort_direction)
    return [TaskGroup(source_document=path, tasks=tasks) for path, tasks in ordered]


def child_tasks(node: Node) -> list[TaskNode]:
    """Return the children of a node that are tasks (plain list items dropped)."""
    return [child for child in node.children if is_task(child)]


def count_tasks(tasks: Iterable[TaskNode]) -> int:
    """Count tasks including nested task children, at any depth."""
    count = 0
    for task in tasks:
        count += 1
        count += count_tasks(child_tasks(task))
    return count


def total_task_count(groups: Iterable[TaskGroup]) -> int:
    return sum(count_tasks(group.tasks) for group in groups)


def display_name(path: str, full_path: bool = False) -> str:
    """File name for a group header, without the .md extension."""
    if full_path:
        name = path
    else:
        name = path.rsplit("/", 1)[-1] or path
    if name.endswith(".md"):
        name = name[: -len(".md")]
    return name
