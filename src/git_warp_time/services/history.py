"""
First-parent history walk.

Only the mainline is consulted: following every side of each merge is
expensive and does not match the usual notion of when content last changed
on a branch. Content introduced on a merged-in branch is therefore attributed
to the merge commit.
"""

import logging
from typing import List

from .repository import Commit, GitRepository

logger = logging.getLogger(__name__)


class HistoryWalker:
    """Produces the first-parent commit sequence from HEAD, newest first."""

    def __init__(self, repo: GitRepository):
        self.repo = repo

    def commits(self) -> List[Commit]:
        commits = self.repo.first_parent_commits("HEAD")
        logger.debug("Walking %d first-parent commits", len(commits))
        return commits
