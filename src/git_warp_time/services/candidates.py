"""
Candidate selection: decide which tracked files are eligible for a reset.

Explicit paths must all be tracked in HEAD. Without explicit paths every HEAD
file is classified by its working directory status, and only clean files (plus
dirty or ignored ones when requested) are kept.
"""

import logging
from typing import Dict, Optional, Set

from rich.console import Console

from ..config import WarpOptions
from ..errors import PathNotTracked
from .repository import FileStatus, GitRepository

logger = logging.getLogger(__name__)

SKIP_MESSAGES = {
    FileStatus.INDEX_MODIFIED: "Ignored file with staged modifications",
    FileStatus.WT_MODIFIED: "Ignored file with local modifications",
    FileStatus.MODIFIED: "Ignored file with staged and local modifications",
    FileStatus.IGNORED: "Ignored file ignored by git",
}

DIRTY_STATES = frozenset(
    {FileStatus.INDEX_MODIFIED, FileStatus.WT_MODIFIED, FileStatus.MODIFIED}
)


class CandidateSelector:
    """Turns options plus repository status into the set of paths to process."""

    def __init__(
        self,
        repo: GitRepository,
        options: WarpOptions,
        console: Optional[Console] = None,
    ):
        self.repo = repo
        self.options = options
        self.console = console or Console()

    def select(self, head_files: Dict[str, str]) -> Set[str]:
        """
        Return the candidate paths, all guaranteed to be present in ``head_files``.

        Raises:
            PathNotTracked: If any explicit path is missing from HEAD; the
                error lists every missing path
        """
        tracked = set(head_files)

        if self.options.explicit_paths is not None:
            not_tracked = self.options.explicit_paths - tracked
            if not_tracked:
                raise PathNotTracked(not_tracked)
            return tracked & self.options.explicit_paths

        candidates = set()
        statuses = self.repo.statuses(include_ignored=self.options.include_ignored)
        for path, status in statuses.items():
            if self._accepts(path, status):
                candidates.add(path)

        # Status may report paths that are not regular files in HEAD
        candidates &= tracked
        logger.debug(
            "Selected %d of %d tracked files", len(candidates), len(tracked)
        )
        return candidates

    def _accepts(self, path: str, status: FileStatus) -> bool:
        if status == FileStatus.CURRENT:
            return True
        if status in DIRTY_STATES and self.options.include_dirty:
            return True
        if status == FileStatus.IGNORED and self.options.include_ignored:
            return True

        if self.options.verbose:
            message = SKIP_MESSAGES.get(
                status, f"Ignored file in state {status.name}"
            )
            self.console.print(
                f"{message}: {path}", style="dim", markup=False, soft_wrap=True
            )
        return False
