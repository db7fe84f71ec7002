"""Repository, filesystem and history services used by reset_mtimes."""

from .candidates import CandidateSelector
from .correlator import RenameAwareCorrelator, Resolution
from .filesystem import FilesystemAdapter
from .history import HistoryWalker
from .repository import Commit, Delta, FileStatus, GitRepository
from .synchronizer import MTimeSynchronizer, SyncAction

__all__ = [
    "CandidateSelector",
    "RenameAwareCorrelator",
    "Resolution",
    "FilesystemAdapter",
    "HistoryWalker",
    "Commit",
    "Delta",
    "FileStatus",
    "GitRepository",
    "MTimeSynchronizer",
    "SyncAction",
]
