"""Exceptions raised while resetting file modification times."""

from typing import Iterable, Optional


class WarpTimeError(Exception):
    """Base class for all git-warp-time failures."""

    def __init__(self, message: str, user_guidance: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.user_guidance = user_guidance or ""


class RepositoryAccessError(WarpTimeError):
    """Repository could not be discovered, or a history/tree/diff query failed."""


class PathNotTracked(WarpTimeError):
    """One or more explicitly requested paths are absent from the HEAD tree."""

    def __init__(self, paths: Iterable[str]):
        self.paths = sorted(paths)
        listed = ", ".join(f"'{path}'" for path in self.paths)
        super().__init__(
            f"Paths [{listed}] are not tracked in the repository",
            user_guidance="Only files committed to HEAD can be given explicitly.",
        )


class PathNotFound(WarpTimeError):
    """A path given on the command line does not exist on disk."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Path '{path}' does not exist")


class FilesystemError(WarpTimeError):
    """Reading or writing the metadata of a specific file failed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Unable to access metadata of '{path}': {reason}")


class PathEncodingError(WarpTimeError):
    """A path reported by git is not valid UTF-8."""

    def __init__(self, raw: bytes):
        self.raw = raw
        super().__init__(
            f"Path {raw!r} cannot be represented as UTF-8 text",
            user_guidance="Rename the file or restrict the run to explicit paths.",
        )
