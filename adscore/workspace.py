"""
Scoped temporary working directory for one analysis request.

Everything written to disk for a request (source video, extracted audio,
extracted frames) lives under a single Workspace root which is removed when
the workspace is closed, whatever the exit path.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

WORKSPACE_PREFIX = "adscore-"


class Workspace:
    """
    Private temp directory with guaranteed cleanup.

    Usage:
        with Workspace() as ws:
            video_path = ws.write("source.mp4", data)
            ...
    """

    def __init__(self, prefix: str = WORKSPACE_PREFIX, base_dir: Optional[str] = None):
        self.root = Path(tempfile.mkdtemp(prefix=prefix, dir=base_dir))
        self._closed = False
        logger.debug("Created workspace %s", self.root)

    @property
    def closed(self) -> bool:
        return self._closed

    def path(self, name: str) -> Path:
        """Resolve a file name inside the workspace root."""
        if self._closed:
            raise RuntimeError(f"Workspace {self.root} is already closed")
        candidate = (self.root / name).resolve()
        if candidate.parent != self.root.resolve():
            raise ValueError(f"Workspace file names must be plain names, got {name!r}")
        return candidate

    def write(self, name: str, data: bytes) -> Path:
        """Write bytes to a workspace file and return its path."""
        target = self.path(name)
        target.write_bytes(data)
        return target

    def discard(self, path: Path) -> None:
        """Delete a single workspace file early (missing files are ignored)."""
        try:
            Path(path).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Unable to delete %s: %s", path, e)

    def close(self) -> None:
        """Remove the workspace directory and everything in it."""
        if self._closed:
            return
        self._closed = True
        shutil.rmtree(self.root, ignore_errors=True)
        if self.root.exists():
            logger.warning("Failed to fully clean up workspace %s", self.root)
        else:
            logger.debug("Cleaned up workspace %s", self.root)

    def __enter__(self) -> "Workspace":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Workspace(root={str(self.root)!r}, closed={self._closed})"


__all__ = ["Workspace", "WORKSPACE_PREFIX"]
