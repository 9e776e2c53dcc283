"""Data models for taskbase."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class ListItem:
    """A plain list item returned by the engine (no checkbox)."""

    path: str
    line: int
    text: str
    parent_line: int = -1
    children: tuple[Node, ...] = ()


@dataclass(frozen=True)
class TaskNode:
    """A checklist item returned by the engine.

    Line numbers are 0-based. A node is a root task iff ``parent_line < 0``.
    ``children`` may mix tasks and plain list items.
    """

    path: str
    line: int
    completed: bool
    text: str
    parent_line: int = -1
    children: tuple[Node, ...] = ()

    @property
    def is_root(self) -> bool:
        return self.parent_line < 0

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Node:
        """Build a node from an engine result record.

        Accepts engine-style ``$``-prefixed keys or plain keys. Records
        without a boolean completion value become ``ListItem``.
        """
        path = _field(record, "$file", "path")
        line = _field(record, "$line", "line")
        text = _field(record, "$text", "text", default="")
        parent_line = _field(record, "$parentLine", "parent_line", default=-1)
        completed = _field(record, "$completed", "completed", default=None)
        raw_children = _field(record, "$elements", "children", default=None) or []

        if not isinstance(path, str) or not path:
            raise ValueError(f"Record has no source path: {record!r}")
        if not isinstance(line, int) or isinstance(line, bool) or line < 0:
            raise ValueError(f"Record has invalid line number: {line!r}")
        if not isinstance(parent_line, int) or isinstance(parent_line, bool):
            raise ValueError(f"Record has invalid parent line: {parent_line!r}")

        children = tuple(cls.from_record(child) for child in raw_children)

        if isinstance(completed, bool):
            return cls(
                path=path,
                line=line,
                completed=completed,
                text=str(text),
                parent_line=parent_line,
                children=children,
            )
        return ListItem(
            path=path,
            line=line,
            text=str(text),
            parent_line=parent_line,
            children=children,
        )


Node = Union[TaskNode, ListItem]


def _field(record: Mapping[str, Any], key: str, alt: str, default: Any = ...) -> Any:
    if key in record:
        return record[key]
    if alt in record:
        return record[alt]
    if default is ...:
        raise ValueError(f"Record is missing '{alt}': {record!r}")
    return default


def is_task(item: object) -> bool:
    """Check if a list item is a task (exposes a boolean completion state)."""
    return isinstance(getattr(item, "completed", None), bool)


@dataclass
class TaskGroup:
    """Root tasks from a single source document."""

    source_document: str
    tasks: list[TaskNode] = field(default_factory=list)


@dataclass(frozen=True)
class ToggleableTask:
    """Minimal task shape needed to write back a completion change."""

    path: str
    line: int  # 0-based
    completed: bool

    @classmethod
    def from_node(cls, node: TaskNode) -> ToggleableTask:
        return cls(path=node.path, line=node.line, completed=node.completed)
