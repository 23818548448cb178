"""Project file access and the version-store collaborator.

The engine itself is text in, text out. This module is the thin I/O layer
the tool handlers use: paths are resolved against the project root (never
outside it), and writes are atomic (temp file + rename) so a failed
operation never leaves a half-written chapter behind.

Versioning is not the store's job. After a successful write the handlers
hand the changed paths and a message to a ``VersionStore``; staging,
diffing and history belong to that collaborator.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from .config import settings
from .errors import FileAccessError

logger = logging.getLogger(__name__)


class VersionStore(Protocol):
    """Accepts changed paths plus a message and records them atomically."""

    async def commit(self, paths: list[str], message: str) -> str | None:
        """Record a change.

        Args:
            paths: Project-relative paths that changed
            message: Descriptive commit message

        Returns:
            Version id, or None when nothing was recorded
        """
        ...


class NullVersionStore:
    """Version store that records nothing (plain-directory projects)."""

    async def commit(self, paths: list[str], message: str) -> str | None:
        logger.debug(f"No version store configured; not committing {paths}: {message}")
        return None


class ProjectStore:
    """Reads and writes project files relative to a root directory."""

    def __init__(self, root: str | Path | None = None):
        self.root = Path(root if root is not None else settings.project_root).resolve()

    def resolve(self, path: str) -> Path:
        """Absolute path for a project-relative path.

        Raises:
            FileAccessError: If the path escapes the project root
        """
        target = (self.root / path).resolve()
        if target != self.root and self.root not in target.parents:
            raise FileAccessError(path, "path is outside the project root")
        return target

    def exists(self, path: str) -> bool:
        return self.resolve(path).is_file()

    def read_text(self, path: str) -> str:
        """Read a UTF-8 text file.

        Raises:
            FileAccessError: If the file does not exist or cannot be read
        """
        target = self.resolve(path)
        try:
            # newline="" keeps line endings exactly as stored
            with open(target, encoding="utf-8", newline="") as f:
                return f.read()
        except FileNotFoundError:
            raise FileAccessError(path, "no such file") from None
        except (OSError, UnicodeDecodeError) as e:
            raise FileAccessError(path, str(e)) from e

    def write_text(self, path: str, text: str) -> None:
        """Atomically replace (or create) a UTF-8 text file."""
        target = self.resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(text)
            os.replace(tmp_name, target)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise FileAccessError(path, str(e)) from e
        logger.debug(f"Wrote {len(text)} chars to {path}")

    def read_json(self, path: str) -> Any:
        """Read a JSON file.

        Raises:
            FileAccessError: If the file is missing or not valid JSON
        """
        raw = self.read_text(path)
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise FileAccessError(path, f"invalid JSON ({e})") from e

    def write_json(self, path: str, data: Any) -> None:
        self.write_text(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")
