"""Task list rendering for the terminal."""

from __future__ import annotations

from rich.console import Group, RenderableType
from rich.markup import escape
from rich.text import Text
from rich.tree import Tree

from taskbase.config import Settings
from taskbase.core.tasks import child_tasks, display_name
from taskbase.core.view import TaskBaseView, ViewStatus
from taskbase.models import TaskGroup, TaskNode


def _task_label(task: TaskNode) -> str:
    text = escape(task.text)
    if task.completed:
        return f"[green]\\[x][/green] [dim strike]{text}[/dim strike] [dim]:{task.line}[/dim]"
    return f"\\[ ] {text} [dim]:{task.line}[/dim]"


def _add_task(parent: Tree, task: TaskNode) -> None:
    node = parent.add(_task_label(task))
    # Plain list items under a task are not shown
    for child in child_tasks(task):
        _add_task(node, child)


def render_group(
    group: TaskGroup, show_task_count: bool = True, show_full_path: bool = False
) -> Tree:
    header = f"[bold cyan]{escape(display_name(group.source_document, show_full_path))}[/bold cyan]"
    if show_task_count:
        header += f" [dim]({len(group.tasks)})[/dim]"
    tree = Tree(header, guide_style="dim")
    for task in group.tasks:
        _add_task(tree, task)
    return tree


def render_empty() -> RenderableType:
    return Group(
        Text("No tasks found", style="bold"),
        Text("Adjust your filters or add tasks to matching files", style="dim"),
    )


def render_view(view: TaskBaseView, settings: Settings) -> RenderableType:
    """Render the current view state (loading, error or grouped tasks)."""
    if view.status is ViewStatus.ERROR:
        return Text(view.message, style="red")
    if view.status is ViewStatus.LOADING:
        return Text(view.message or "Loading", style="dim")
    if not view.groups:
        return render_empty()

    parts: list[RenderableType] = [
        render_group(g, settings.show_task_count, settings.show_full_path)
        for g in view.groups
    ]
    parts.append(
        Text(f"{view.task_count} tasks in {view.file_count} files", style="dim")
    )
    return Group(*parts)
