"""Storage abstraction for scorekeeper snapshots.

A snapshot is a single JSON document holding the player collection and the
active game. Snapshots are rewritten after every state change, so writes go
through temp-file-then-rename: a reader never sees a truncated file. Files are
owner-only (0o600) inside an owner-only directory (0o700).
"""

import contextlib
import os
import tempfile
from pathlib import Path
from typing import Protocol

import structlog

logger = structlog.get_logger()

_SNAPSHOT_DIR_MODE = 0o700

_SNAPSHOT_FILE_MODE = 0o600

_SNAPSHOT_SUFFIX = ".json"


class SnapshotStorage(Protocol):
    """Protocol for persisting serialized snapshots by name."""

    def save_snapshot(self, name: str, content: str) -> None: ...

    def load_snapshot(self, name: str) -> str | None: ...

    def delete_snapshot(self, name: str) -> None: ...


class LocalSnapshotStorage:
    """Stores snapshots as JSON files in a local directory."""

    def __init__(self, snapshot_dir: str | Path) -> None:
        self._snapshot_dir = Path(snapshot_dir).resolve()

    def _target(self, name: str) -> Path:
        """Resolve the file for name, rejecting paths outside the snapshot root."""
        target = (self._snapshot_dir / f"{name}{_SNAPSHOT_SUFFIX}").resolve()
        if not target.is_relative_to(self._snapshot_dir):
            raise ValueError(f"Path traversal rejected: '{name}' resolves outside snapshot directory")
        return target

    def save_snapshot(self, name: str, content: str) -> None:
        """Atomically replace the named snapshot with content.

        Creates the directory lazily on first write.
        """
        target = self._target(name)

        self._snapshot_dir.mkdir(mode=_SNAPSHOT_DIR_MODE, parents=True, exist_ok=True)
        self._snapshot_dir.chmod(_SNAPSHOT_DIR_MODE)

        fd, tmp_path = tempfile.mkstemp(dir=str(self._snapshot_dir), suffix=".tmp", prefix=".snapshot_")
        fd_owned = True
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                fd_owned = False  # os.fdopen took ownership; it will close fd
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, _SNAPSHOT_FILE_MODE)  # noqa: PTH101
            Path(tmp_path).replace(target)
        except BaseException:
            if fd_owned:
                with contextlib.suppress(OSError):
                    os.close(fd)
            with contextlib.suppress(OSError):
                Path(tmp_path).unlink()
            raise
        logger.debug("saved snapshot", name=name, path=str(target))

    def load_snapshot(self, name: str) -> str | None:
        """Return the named snapshot's content, or None if it was never saved."""
        target = self._target(name)
        if not target.is_file():
            return None
        return target.read_text(encoding="utf-8")

    def delete_snapshot(self, name: str) -> None:
        """Remove the named snapshot if present."""
        target = self._target(name)
        with contextlib.suppress(FileNotFoundError):
            target.unlink()
            logger.info("deleted snapshot", name=name)
