"""Engine adapter that delegates queries to an external program.

The program is invoked as ``<engine_command> <query>`` and must print a JSON
array of result records on stdout.
"""

from __future__ import annotations

import json
import logging
import shlex
import shutil
import subprocess
from typing import Any

from taskbase.errors import QueryError

from .base import Engine

logger = logging.getLogger(__name__)


class CommandEngine(Engine):
    """Run queries through a configured command line."""

    def __init__(self, command: str, timeout: float = 30.0):
        super().__init__()
        self.argv = shlex.split(command)
        if not self.argv:
            raise ValueError("Engine command is empty")
        self.timeout = timeout

    def start(self) -> None:
        """Check the program is available, then report ready."""
        if shutil.which(self.argv[0]) is None:
            raise QueryError(f"Engine command not found: {self.argv[0]}")
        self.mark_initialized()

    def _execute(self, query: str) -> list[Any]:
        logger.debug("Running engine: %s %r", self.argv, query)
        try:
            proc = subprocess.run(
                [*self.argv, query],
                capture_output=True,
                text=True,
                encoding="utf-8",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise QueryError(f"Engine timed out after {self.timeout:g}s", query) from e
        except OSError as e:
            raise QueryError(f"Failed to run engine: {e}", query) from e

        if proc.returncode != 0:
            message = proc.stderr.strip() or f"exit status {proc.returncode}"
            raise QueryError(message, query)

        try:
            return json.loads(proc.stdout)
        except json.JSONDecodeError as e:
            raise QueryError(f"Engine returned invalid JSON: {e}", query) from e
