"""Per-request scratch directories.

Every download gets its own directory named with a random UUID under a fixed
namespace in the temp root. No two requests share a directory, and the
directory is removed before the request finishes.
"""

import contextlib
import os
import shutil
import tempfile
import uuid
from pathlib import Path
from types import TracebackType
from typing import List, Optional, Type

import structlog

from ytaudio.core.metrics import MetricsCollector

logger = structlog.get_logger(__name__)

DEFAULT_NAMESPACE = "yt-audio-downloads"


class ScratchWorkspace:
    """Exclusively owned temporary directory for one download."""

    def __init__(self, root: Optional[str] = None, namespace: str = DEFAULT_NAMESPACE):
        """
        Initialize the workspace. Nothing is created until create() is called.

        Args:
            root: Parent temp directory, defaults to the system temp dir
            namespace: Subdirectory grouping all workspaces of this service
        """
        self.workspace_id = uuid.uuid4().hex
        self.path = Path(root or tempfile.gettempdir()) / namespace / self.workspace_id
        self._created = False

    def create(self) -> Path:
        """Create the directory and any missing parents."""
        self.path.mkdir(parents=True, exist_ok=False)
        self._created = True
        MetricsCollector.workspace_opened()
        logger.debug("workspace_created", path=str(self.path))
        return self.path

    def list_files(self) -> List[str]:
        """Names of the regular files in the workspace, sorted."""
        return sorted(entry.name for entry in self.path.iterdir() if entry.is_file())

    def cleanup(self) -> None:
        """Delete every file and then the directory, ignoring all errors."""
        if not self._created:
            return
        self._created = False
        MetricsCollector.workspace_closed()

        try:
            entries = list(self.path.iterdir())
        except OSError:
            entries = []

        for entry in entries:
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry, ignore_errors=True)
                continue
            with contextlib.suppress(OSError):
                entry.unlink()

        with contextlib.suppress(OSError):
            os.rmdir(self.path)

        logger.debug("workspace_removed", path=str(self.path), removed=not self.path.exists())

    def __enter__(self) -> "ScratchWorkspace":
        self.create()
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.cleanup()
