"""Task toggle service - writes completion changes back to the source line."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass

from taskbase.errors import InvalidLineError, NotACheckboxError, ToggleError
from taskbase.models import ToggleableTask
from taskbase.storage import VaultStore

logger = logging.getLogger(__name__)

# Markdown checkbox at the start of a line. Matches:
#   - [ ] Task
#   * [x] Task
#   + [X] Task
#     - [ ] Indented task
CHECKBOX_PATTERN = re.compile(r"^(?P<prefix>\s*[-*+]\s*\[)(?P<marker>[ xX])(?P<rest>\].*)")


@dataclass
class ToggleResult:
    """Outcome of a single write-back."""

    success: bool
    new_status: bool | None = None
    error: ToggleError | None = None
    written: bool = False


def _checkbox_line(lines: list[str], path: str, line_number: int) -> re.Match[str]:
    if line_number < 0 or line_number >= len(lines):
        raise InvalidLineError(f"Invalid line number: {line_number}", path, line_number)
    match = CHECKBOX_PATTERN.match(lines[line_number])
    if not match:
        raise NotACheckboxError(
            f"Line {line_number} is not a checkbox", path, line_number
        )
    return match


def set_checkbox_marker(content: str, path: str, line_number: int, completed: bool) -> str:
    """Return ``content`` with the checkbox marker on one line replaced.

    Only the marker character changes; every other character of the
    document is kept as-is.

    Raises:
        InvalidLineError: ``line_number`` is outside the document.
        NotACheckboxError: The line is not a checkbox list item.

    """
    lines = content.split("\n")
    match = _checkbox_line(lines, path, line_number)
    marker = "x" if completed else " "
    lines[line_number] = f"{match.group('prefix')}{marker}{match.group('rest')}"
    return "\n".join(lines)


def observe_task(store: VaultStore, path: str, line_number: int) -> ToggleableTask:
    """Read the current completion state of a checkbox line.

    Raises:
        ToggleError: If the document or line can't be used.

    """
    lines = store.read(path).split("\n")
    match = _checkbox_line(lines, path, line_number)
    return ToggleableTask(
        path=path, line=line_number, completed=match.group("marker") in ("x", "X")
    )


def toggle_task(store: VaultStore, task: ToggleableTask) -> ToggleResult:
    """Flip a task's completion state in its source file.

    The new state is the negation of ``task.completed``. The file is re-read
    immediately before the change; on any failure nothing is written.
    """
    new_status = not task.completed

    try:
        store.process(
            task.path,
            lambda content: set_checkbox_marker(content, task.path, task.line, new_status),
        )
    except ToggleError as e:
        logger.error("Failed to toggle task %s:%d: %s", task.path, task.line, e)
        return ToggleResult(success=False, error=e)

    logger.debug("Toggled %s:%d -> %s", task.path, task.line, new_status)
    return ToggleResult(success=True, new_status=new_status, written=True)


def toggle_tasks(store: VaultStore, tasks: Iterable[ToggleableTask]) -> list[ToggleResult]:
    """Toggle several tasks, one at a time, in order.

    A failure does not stop later toggles. Results match the input order.
    """
    results: list[ToggleResult] = []
    for task in tasks:
        results.append(toggle_task(store, task))
    return results


def set_task_status(
    store: VaultStore, task: ToggleableTask, completed: bool
) -> ToggleResult:
    """Set a task to a specific completion state (no write if already there)."""
    if task.completed == completed:
        return ToggleResult(success=True, new_status=completed)
    return toggle_task(store, task)
