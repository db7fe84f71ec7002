"""Top-level operation: reset working tree mtimes to their last commit time."""

import logging
import os
from pathlib import Path
from typing import Optional, Set, Union

from rich.console import Console

from .config import WarpOptions
from .errors import PathNotTracked
from .services.candidates import CandidateSelector
from .services.correlator import RenameAwareCorrelator
from .services.filesystem import FilesystemAdapter
from .services.history import HistoryWalker
from .services.repository import GitRepository
from .services.synchronizer import MTimeSynchronizer

logger = logging.getLogger(__name__)


def get_repo(start: Optional[Union[str, Path]] = None) -> GitRepository:
    """Return the repository found from ``start``, the environment or the cwd."""
    return GitRepository.discover(start)


def resolve_repo_path(
    repo: GitRepository,
    path: Union[str, Path],
    cwd: Optional[Union[str, Path]] = None,
) -> str:
    """
    Convert a path relative to ``cwd`` (or absolute) into a repository path.

    Args:
        repo: Repository the path belongs to
        path: Path as given by the user
        cwd: Directory relative paths are interpreted from, default the cwd

    Returns:
        POSIX path relative to the repository root

    Raises:
        PathNotTracked: If the path lies outside the working tree
    """
    base = Path(cwd) if cwd is not None else Path.cwd()
    absolute = Path(os.path.normpath(base / path))
    # Only the directory part is resolved so a symlinked file keeps its own name
    absolute = absolute.parent.resolve() / absolute.name
    try:
        relative = absolute.relative_to(repo.workdir.resolve())
    except ValueError:
        raise PathNotTracked([str(path)])
    return relative.as_posix()


def reset_mtimes(
    repo: GitRepository,
    options: WarpOptions,
    console: Optional[Console] = None,
) -> Set[str]:
    """
    Reset the modification time of eligible files to their last commit time.

    Candidates are chosen from ``options``, the first-parent history is walked
    once to find the newest commit that introduced each file's current content
    at its current path, and files whose mtime disagrees are corrected.
    Corrections already applied stay in place if a later step fails.

    Args:
        repo: Repository to operate on
        options: Which files to consider and how to treat older files
        console: Where verbose notices are printed

    Returns:
        Repository-relative paths whose modification time was changed

    Raises:
        PathNotTracked: Explicit paths missing from HEAD, before any write
        RepositoryAccessError: History, tree or status queries failed
        FilesystemError: Reading or setting a file's mtime failed
    """
    console = console or Console()

    head_files = repo.head_files()
    candidates = CandidateSelector(repo, options, console).select(head_files)
    if not candidates:
        logger.debug("No candidate files, nothing to do")
        return set()

    commits = HistoryWalker(repo).commits()
    correlator = RenameAwareCorrelator(repo)
    synchronizer = MTimeSynchronizer(
        FilesystemAdapter(repo.workdir), options, console
    )

    for resolution in correlator.correlate(candidates, head_files, commits):
        synchronizer.apply(resolution.path, resolution.timestamp)

    if correlator.unresolved:
        logger.debug(
            "No originating commit found for: %s", ", ".join(correlator.unresolved)
        )
    return synchronizer.touched
