"""TaskBaseView - keeps a rendered task list in sync with the engine.

The view owns the lifecycle around the pure pieces: it loads the
selection definition, waits for the engine, runs query and aggregation
passes, reacts to engine updates through the debouncer, writes checkbox
toggles back, and releases everything on close.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from taskbase.config import SelectionDefinition, load_selection
from taskbase.core.debounce import Debouncer
from taskbase.core.query import build_query
from taskbase.core.tasks import aggregate, total_task_count
from taskbase.core.toggle import ToggleResult, toggle_task
from taskbase.engine.base import INITIALIZED, UPDATE, Engine, Subscription
from taskbase.errors import ConfigError, QueryError
from taskbase.models import Node, TaskGroup, TaskNode, ToggleableTask
from taskbase.storage import VaultStore

logger = logging.getLogger(__name__)

# Quiet interval before re-running the query after engine updates
DEBOUNCE_SECONDS = 0.5


class ViewStatus(Enum):
    """What the view is currently showing."""

    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class TaskBaseView:
    """Controller for one open .taskbase file."""

    def __init__(
        self,
        engine: Engine,
        store: VaultStore,
        selection_path: Path,
        on_render: Callable[[TaskBaseView], None] | None = None,
        debounce_seconds: float = DEBOUNCE_SECONDS,
    ):
        self.engine = engine
        self.store = store
        self.selection_path = selection_path
        self.on_render = on_render

        self.config: SelectionDefinition | None = None
        self.groups: list[TaskGroup] = []
        self.status = ViewStatus.LOADING
        self.message = "Loading"
        self.last_query: str | None = None
        self.refresh_count = 0

        self._debouncer = Debouncer(debounce_seconds, self._start_background_refresh)
        self._config_debouncer = Debouncer(debounce_seconds, self._reload_config_in_background)
        self._init_ref: Subscription | None = None
        self._update_ref: Subscription | None = None
        self._closed = False

        # Track background refreshes to prevent garbage collection
        self._background_tasks: set[asyncio.Task] = set()
        # Bumped per pass; results of an older pass are dropped
        self._generation = 0

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def open(self) -> None:
        """Load the definition and start following the engine."""
        self.load_config()

        if not self.engine.initialized:
            self.message = "Waiting for engine to initialize"
            self._render()
            self._init_ref = self.engine.on(INITIALIZED, self._handle_initialized)
            return

        self._on_engine_ready()

    def close(self) -> None:
        """Release subscriptions and cancel any pending refresh."""
        if self._update_ref is not None:
            self.engine.off(self._update_ref)
            self._update_ref = None
        if self._init_ref is not None:
            self.engine.off(self._init_ref)
            self._init_ref = None
        self._debouncer.cancel()
        self._config_debouncer.cancel()
        for task in list(self._background_tasks):
            task.cancel()
        self.groups = []
        self._closed = True
        logger.debug("Closed view for %s", self.selection_path)

    @property
    def refresh_pending(self) -> bool:
        """True while a debounced refresh is scheduled or still running."""
        return self._debouncer.pending or any(
            not task.done() for task in self._background_tasks
        )

    def _handle_initialized(self) -> None:
        if self._init_ref is not None:
            self.engine.off(self._init_ref)
            self._init_ref = None
        self._on_engine_ready()

    def _on_engine_ready(self) -> None:
        self.refresh()
        self._update_ref = self.engine.on(UPDATE, self.schedule_refresh)

    def schedule_refresh(self) -> None:
        if self._closed:
            return
        self._debouncer.schedule()

    # -------------------------------------------------------------------------
    # Config loading
    # -------------------------------------------------------------------------

    def load_config(self) -> bool:
        """(Re)load the selection definition.

        A file that fails to load leaves the view in a blocking error state;
        no previous definition is kept around.
        """
        try:
            self.config = load_selection(self.selection_path)
        except FileNotFoundError:
            self.config = None
            self.show_error(f"Config file not found: {self.selection_path}")
            return False
        except ConfigError as e:
            self.config = None
            self.show_error(f"Invalid config: {e}")
            return False
        except OSError as e:
            self.config = None
            self.show_error(f"Failed to read config: {e}")
            return False
        return True

    def schedule_config_reload(self) -> None:
        if self._closed:
            return
        self._config_debouncer.schedule()

    def handle_config_change(self) -> None:
        if self._closed:
            return
        logger.debug("Config file changed, reloading: %s", self.selection_path)
        if self.load_config():
            self.refresh()

    def _reload_config_in_background(self) -> None:
        if self._closed:
            return
        logger.debug("Config file changed, reloading: %s", self.selection_path)
        if self.load_config():
            self._start_background_refresh()

    # -------------------------------------------------------------------------
    # Query & render
    # -------------------------------------------------------------------------

    def refresh(self) -> None:
        """Run one query and aggregation pass.

        A no-op while the engine is not initialized or the config is invalid.
        """
        query = self._begin_pass()
        if query is None:
            return

        try:
            results = self.engine.query(query)
        except QueryError as e:
            self._query_failed(e)
            return

        self._apply_results(results)

    async def refresh_async(self) -> None:
        """Run a pass with the engine query in a worker thread.

        Uses asyncio.to_thread() so a slow engine doesn't stall the event
        loop. Results arriving after a newer pass started, or after the
        view was closed, are dropped.
        """
        query = self._begin_pass()
        if query is None:
            return
        generation = self._generation

        try:
            results = await asyncio.to_thread(self.engine.query, query)
        except QueryError as e:
            if self._is_current(generation):
                self._query_failed(e)
            return

        if not self._is_current(generation):
            logger.debug("Dropping results of a superseded refresh")
            return
        self._apply_results(results)

    def _start_background_refresh(self) -> None:
        if self._closed:
            return
        task = asyncio.get_running_loop().create_task(self.refresh_async())
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    def _begin_pass(self) -> str | None:
        if self._closed or not self.engine.initialized or self.config is None:
            return None

        query = build_query(self.config.source, self.config.view)
        self.last_query = query
        self._generation += 1
        logger.debug("Query: %s", query)
        return query

    def _is_current(self, generation: int) -> bool:
        return (
            not self._closed
            and self.config is not None
            and generation == self._generation
        )

    def _query_failed(self, error: QueryError) -> None:
        logger.error("Query failed: %s", error)
        self.groups = []
        self.show_error(f"Query failed: {error}")

    def _apply_results(self, results: list[Node]) -> None:
        self.groups = aggregate(results, self.config.view)
        self.status = ViewStatus.READY
        self.message = ""
        self.refresh_count += 1
        self._render()

    @property
    def task_count(self) -> int:
        return total_task_count(self.groups)

    @property
    def file_count(self) -> int:
        return len(self.groups)

    def show_error(self, message: str) -> None:
        self.status = ViewStatus.ERROR
        self.message = message
        self._render()

    def _render(self) -> None:
        if self.on_render is not None:
            self.on_render(self)

    # -------------------------------------------------------------------------
    # Task toggle
    # -------------------------------------------------------------------------

    def handle_toggle(self, task: TaskNode) -> ToggleResult:
        """Write a checkbox click back to the source file.

        On failure the list is re-queried so the displayed state matches the
        file again. On success the engine's update event drives the refresh.
        """
        result = toggle_task(self.store, ToggleableTask.from_node(task))
        if not result.success:
            logger.warning("Toggle failed: %s", result.error)
            self.refresh()
        return result
