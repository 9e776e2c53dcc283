"""Document storage over a vault directory.

Documents are addressed by vault-relative, forward-slash paths. Reads and
writes never translate newlines, so untouched lines stay byte-identical.
"""

from __future__ import annotations

import os
import shutil
import tempfile
import time
from collections.abc import Callable
from pathlib import Path

from taskbase.errors import DocumentIOError, NotAFileError, NotFoundError


class VaultStore:
    """Read and replace whole documents under a vault root."""

    def __init__(self, root: Path):
        self.root = root

    def _full_path(self, path: str) -> Path:
        full = (self.root / path).resolve()
        try:
            full.relative_to(self.root.resolve())
        except ValueError:
            raise NotFoundError(f"File not found: {path}", path) from None
        return full

    def resolve(self, path: str) -> Path:
        """Resolve a vault path to a document on disk.

        Raises:
            NotFoundError: Nothing exists at the path (or it escapes the vault).
            NotAFileError: The path is a directory.

        """
        full = self._full_path(path)
        if not full.exists():
            raise NotFoundError(f"File not found: {path}", path)
        if not full.is_file():
            raise NotAFileError(f"Not a file: {path}", path)
        return full

    def read(self, path: str) -> str:
        """Return a document's full text.

        Raises:
            NotFoundError: Nothing exists at the path.
            NotAFileError: The path is a directory.
            DocumentIOError: The file can't be read or isn't UTF-8 text.

        """
        full = self.resolve(path)
        try:
            return _read_file_with_retry(full)
        except UnicodeDecodeError as e:
            raise DocumentIOError(f"Not a UTF-8 text file: {path}", path) from e
        except OSError as e:
            raise DocumentIOError(f"Failed to read {path}: {e}", path) from e

    def write(self, path: str, content: str) -> None:
        """Replace a document's content in one step (temp file + rename)."""
        full = self.resolve(path)
        try:
            _replace_file(full, content)
        except (OSError, UnicodeEncodeError) as e:
            raise DocumentIOError(f"Failed to write {path}: {e}", path) from e

    def process(self, path: str, fn: Callable[[str], str]) -> str:
        """Read-modify-write a document.

        ``fn`` receives the current content and returns the new content. If
        it raises, nothing is written.
        """
        content = self.read(path)
        new_content = fn(content)
        self.write(path, new_content)
        return new_content


def _read_file_with_retry(path: Path, max_attempts: int = 3, delay: float = 0.2) -> str:
    """Read a file with retry logic for Windows file locking."""
    last_error: PermissionError | None = None
    for attempt in range(max_attempts):
        try:
            with path.open(encoding="utf-8", newline="") as f:
                return f.read()
        except PermissionError as e:
            last_error = e
            if attempt < max_attempts - 1:
                time.sleep(delay)
    raise last_error  # type: ignore[misc]


def _replace_file(full: Path, content: str) -> None:
    fd, tmp_name = tempfile.mkstemp(
        dir=full.parent, prefix=f".{full.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        # mkstemp creates the file as 0600; keep the document's own mode
        shutil.copymode(full, tmp_name)
        os.replace(tmp_name, full)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
