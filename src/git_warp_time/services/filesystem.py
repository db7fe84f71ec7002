"""Modification time reads and writes for files in the working tree."""

import logging
import os
from pathlib import Path
from typing import Union

from ..errors import FilesystemError

logger = logging.getLogger(__name__)

NANOSECONDS = 1_000_000_000


class FilesystemAdapter:
    """Thin wrapper over ``os.lstat``/``os.utime`` rooted at the working tree."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def _full_path(self, path: Union[str, Path]) -> Path:
        return self.root / path

    def exists(self, path: Union[str, Path]) -> bool:
        return self._full_path(path).exists()

    def get_mtime_ns(self, path: Union[str, Path]) -> int:
        """Return the modification time of ``path`` in nanoseconds."""
        try:
            return os.lstat(self._full_path(path)).st_mtime_ns
        except OSError as e:
            raise FilesystemError(str(path), e.strerror or str(e))

    def set_mtime(self, path: Union[str, Path], timestamp: int) -> None:
        """
        Set the modification time of ``path`` to ``timestamp`` seconds.

        The access time is left as it was. A symbolic link is updated itself,
        never the file it points to.

        Raises:
            FilesystemError: If the file cannot be stat'ed or updated
        """
        full_path = self._full_path(path)
        try:
            atime_ns = os.lstat(full_path).st_atime_ns
            os.utime(
                full_path,
                ns=(atime_ns, timestamp * NANOSECONDS),
                follow_symlinks=False,
            )
        except OSError as e:
            raise FilesystemError(str(path), e.strerror or str(e))
        logger.debug("Set mtime of %s to %d", path, timestamp)
