"""
git-warp-time - reset file modification times to their last commit.

A fresh checkout stamps every file with the checkout time, which defeats
build tools that decide staleness by mtime. git-warp-time walks the
first-parent history once, follows renames, and sets each file's mtime to the
time of the newest commit that introduced its current content.
"""

__version__ = "0.8.5"

from .config import WarpOptions  # noqa: E402
from .errors import (  # noqa: E402
    FilesystemError,
    PathEncodingError,
    PathNotFound,
    PathNotTracked,
    RepositoryAccessError,
    WarpTimeError,
)
from .warp import get_repo, reset_mtimes, resolve_repo_path  # noqa: E402

__all__ = [
    "WarpOptions",
    "WarpTimeError",
    "RepositoryAccessError",
    "PathNotTracked",
    "PathNotFound",
    "FilesystemError",
    "PathEncodingError",
    "get_repo",
    "reset_mtimes",
    "resolve_repo_path",
]
