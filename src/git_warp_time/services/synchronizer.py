"""Apply the timestamp reconciliation policy to resolved files."""

import logging
from enum import Enum
from typing import Optional, Set

from rich.console import Console

from ..config import WarpOptions
from .filesystem import NANOSECONDS, FilesystemAdapter

logger = logging.getLogger(__name__)


class SyncAction(Enum):
    """What happened to a file's modification time."""

    UNCHANGED = "unchanged"
    REWOUND = "rewound"
    ADVANCED = "advanced"
    SKIPPED_OLDER = "skipped_older"


class MTimeSynchronizer:
    """
    Sets a file's mtime to its commit time when the two disagree.

    Files newer than their history are always rewound. Files older than their
    history are moved forward unless ``ignore_older`` is set. Every changed
    path is recorded in ``touched``.
    """

    def __init__(
        self,
        filesystem: FilesystemAdapter,
        options: WarpOptions,
        console: Optional[Console] = None,
    ):
        self.filesystem = filesystem
        self.options = options
        self.console = console or Console()
        self.touched: Set[str] = set()

    def apply(self, path: str, timestamp: int) -> SyncAction:
        """Reconcile ``path`` with ``timestamp`` (seconds) and report the action."""
        file_mtime_ns = self.filesystem.get_mtime_ns(path)
        commit_mtime_ns = timestamp * NANOSECONDS

        if file_mtime_ns == commit_mtime_ns:
            return SyncAction.UNCHANGED

        if file_mtime_ns > commit_mtime_ns:
            action = SyncAction.REWOUND
        elif self.options.ignore_older:
            logger.debug("Leaving %s older than its history", path)
            return SyncAction.SKIPPED_OLDER
        else:
            action = SyncAction.ADVANCED

        self.filesystem.set_mtime(path, timestamp)
        self.touched.add(path)

        if self.options.verbose:
            verb = "Rewound" if action == SyncAction.REWOUND else "Advanced"
            self.console.print(
                f"{verb} the clock: {path}", markup=False, soft_wrap=True
            )
        return action
