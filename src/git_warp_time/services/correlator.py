"""
Rename-aware correlation of files with the commit that last changed them.

Each candidate is identified by its HEAD blob fingerprint and path. The
first-parent chain is walked newest first and each commit is diffed against
its parent with rename detection. The first commit whose diff has a delta
producing exactly that fingerprint at exactly that path is the most recent
commit that introduced the file's current content there, renames included.

Entries are removed from the pending map on their first match and never
reconsidered, so the walk stops as soon as every candidate is resolved.
Entries that are never matched stay unresolved; this happens when content
has been identical since before the start of the walked history.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Set, Tuple

from .repository import Commit, GitRepository

logger = logging.getLogger(__name__)

# (blob fingerprint, repository-relative path)
EntryKey = Tuple[str, str]


@dataclass(frozen=True)
class Resolution:
    """A candidate matched to the newest commit that introduced its content."""

    path: str
    commit: Commit

    @property
    def timestamp(self) -> int:
        return self.commit.timestamp


class RenameAwareCorrelator:
    """Single-pass, multi-target search of first-parent history."""

    def __init__(self, repo: GitRepository):
        self.repo = repo
        self.pending: Set[EntryKey] = set()
        self.commits_examined = 0

    @property
    def unresolved(self) -> List[str]:
        """Paths of candidates that no walked commit could be matched to."""
        return sorted(path for _, path in self.pending)

    def _fingerprint(self, path: str, head_files: Dict[str, str]) -> str:
        fingerprint = head_files.get(path)
        if fingerprint is None:
            # Raises unless the entry is a regular file in HEAD
            fingerprint = self.repo.resolve_fingerprint(path, "HEAD")
        return fingerprint

    def correlate(
        self,
        candidates: Iterable[str],
        head_files: Dict[str, str],
        commits: Iterable[Commit],
    ) -> Iterator[Resolution]:
        """
        Yield a Resolution for every candidate that can be matched, in walk order.

        Args:
            candidates: Repository-relative paths present in HEAD
            head_files: Path to fingerprint mapping of the HEAD tree
            commits: First-parent commits, newest first

        Yields:
            Resolution for each matched candidate; unmatched candidates remain
            in ``pending`` once the generator is exhausted.
        """
        self.pending = {
            (self._fingerprint(path, head_files), path) for path in candidates
        }
        self.commits_examined = 0

        for commit in commits:
            if not self.pending:
                break
            self.commits_examined += 1

            # Unmatched entries carry their HEAD identity on to older commits
            for delta in self.repo.diff_to_parent(commit):
                if delta.new_fingerprint is None or delta.new_path is None:
                    continue
                key = (delta.new_fingerprint, delta.new_path)
                if key not in self.pending:
                    continue
                self.pending.discard(key)
                logger.debug(
                    "Resolved %s at %s (%s)",
                    delta.new_path,
                    commit.sha[:12],
                    delta.status,
                )
                yield Resolution(path=delta.new_path, commit=commit)

        logger.debug(
            "Examined %d commits, %d files unresolved",
            self.commits_examined,
            len(self.pending),
        )
