"""
Repository access facade built on git plumbing commands.

Everything the timestamp reset needs from git goes through ``GitRepository``:
the HEAD tree listing, working directory status, the first-parent commit
chain and rename-aware tree diffs. Output is always requested NUL-delimited
(``-z``) so paths never need unquoting.
"""

import logging
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from ..errors import PathEncodingError, RepositoryAccessError
from ..utils.git_runner import run_git_command

logger = logging.getLogger(__name__)

REGULAR_FILE_MODES = frozenset({"100644", "100755"})

# Prefix of each commit header in the history stream (%x01 in --format)
COMMIT_MARKER = b"\x01"


class FileStatus(Enum):
    """Working directory state of a path relative to the index and HEAD."""

    CURRENT = "current"
    INDEX_MODIFIED = "index_modified"
    WT_MODIFIED = "wt_modified"
    MODIFIED = "modified"
    IGNORED = "ignored"
    OTHER = "other"


@dataclass(frozen=True)
class Commit:
    """A commit on the first-parent chain."""

    sha: str
    timestamp: int  # committer time, seconds since the epoch
    parent: Optional[str]


@dataclass(frozen=True)
class Delta:
    """One changed entry between a commit's tree and its first parent's tree."""

    old_path: Optional[str]
    old_fingerprint: Optional[str]
    new_path: Optional[str]
    new_fingerprint: Optional[str]
    status: str


def _decode_path(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        raise PathEncodingError(raw)


def _is_null(fingerprint: str) -> bool:
    return not fingerprint.strip("0")


def _classify_porcelain(xy: str) -> Optional[FileStatus]:
    """Map a porcelain v1 ``XY`` code to a FileStatus, None for untracked."""
    if xy == "??":
        return None
    if xy == "!!":
        return FileStatus.IGNORED
    index, worktree = xy[0], xy[1]
    if index == "M" and worktree == " ":
        return FileStatus.INDEX_MODIFIED
    if index == " " and worktree == "M":
        return FileStatus.WT_MODIFIED
    if index == "M" and worktree == "M":
        return FileStatus.MODIFIED
    # Conflicts, additions, deletions, type changes
    return FileStatus.OTHER


def _parse_raw_entry(meta: bytes, tokens: Iterator[bytes]) -> Delta:
    """Build a Delta from a ``--raw -z`` record, consuming its path tokens."""
    _, _, old_sha, new_sha, status = meta[1:].decode("ascii").split()
    letter = status[0]
    if letter in ("R", "C"):
        old_path = _decode_path(next(tokens))
        new_path = _decode_path(next(tokens))
    else:
        old_path = new_path = _decode_path(next(tokens))

    old_missing = _is_null(old_sha)
    new_missing = _is_null(new_sha)
    return Delta(
        old_path=None if old_missing else old_path,
        old_fingerprint=None if old_missing else old_sha,
        new_path=None if new_missing else new_path,
        new_fingerprint=None if new_missing else new_sha,
        status=letter,
    )


class GitRepository:
    """Read-only view of a git working tree and its history."""

    def __init__(self, workdir: Path):
        """
        Initialize the facade for an already discovered working tree.

        Args:
            workdir: Top-level directory of the working tree
        """
        self.workdir = Path(workdir)
        self._head_files: Optional[Dict[str, str]] = None
        self._deltas: Dict[str, List[Delta]] = {}

    @classmethod
    def discover(cls, start: Optional[Union[str, Path]] = None) -> "GitRepository":
        """
        Find the repository containing ``start`` (default: current directory).

        ``GIT_DIR`` and ``GIT_WORK_TREE`` from the environment are honored by
        git itself.

        Raises:
            RepositoryAccessError: If no working tree can be found
        """
        start_dir = Path(start) if start is not None else Path.cwd()
        try:
            result = run_git_command(
                ["git", "rev-parse", "--show-toplevel"], cwd=start_dir
            )
        except subprocess.CalledProcessError as e:
            raise RepositoryAccessError(
                (e.stderr or "").strip() or f"Not a git repository: {start_dir}",
                user_guidance="Run git-warp-time from inside a git working tree.",
            )
        except (FileNotFoundError, NotADirectoryError) as e:
            raise RepositoryAccessError(f"Unable to run git in {start_dir}: {e}")

        workdir = result.stdout.strip()
        if not workdir:
            raise RepositoryAccessError(f"No git working tree found at {start_dir}")
        logger.debug("Discovered repository at %s", workdir)
        return cls(Path(workdir))

    def _git(self, args: List[str], text: bool = False) -> Union[str, bytes]:
        try:
            result = run_git_command(["git", *args], cwd=self.workdir, text=text)
        except subprocess.CalledProcessError as e:
            stderr = e.stderr
            if isinstance(stderr, bytes):
                stderr = stderr.decode("utf-8", errors="replace")
            raise RepositoryAccessError(
                f"git {args[0]} failed: {(stderr or '').strip() or e}"
            )
        except FileNotFoundError as e:
            raise RepositoryAccessError(f"Unable to run git: {e}")
        return result.stdout

    def head_commit(self) -> str:
        """Return the sha HEAD points at."""
        try:
            result = run_git_command(
                ["git", "rev-parse", "--verify", "--quiet", "HEAD^{commit}"],
                cwd=self.workdir,
                check=False,
            )
        except FileNotFoundError as e:
            raise RepositoryAccessError(f"Unable to run git: {e}")
        sha = result.stdout.strip()
        if result.returncode != 0 or not sha:
            raise RepositoryAccessError(
                "Repository has no commits yet",
                user_guidance="Commit at least once before resetting timestamps.",
            )
        return sha

    def _ls_tree(self, treeish: str, paths: Optional[List[str]] = None) -> List[tuple]:
        args = ["ls-tree", "-z", "--full-tree"]
        if paths is None:
            args.append("-r")
        args.append(treeish)
        if paths is not None:
            args.extend(["--", *paths])

        entries = []
        output = self._git(args)
        for record in output.split(b"\0"):
            if not record:
                continue
            meta, _, raw_path = record.partition(b"\t")
            mode, kind, fingerprint = meta.decode("ascii").split()
            entries.append((mode, kind, fingerprint, _decode_path(raw_path)))
        return entries

    def head_files(self) -> Dict[str, str]:
        """
        List every regular file in the HEAD tree.

        Returns:
            Mapping of repository-relative path to blob fingerprint. Symlinks,
            submodules and directories are excluded.
        """
        if self._head_files is None:
            head = self.head_commit()
            self._head_files = {
                path: fingerprint
                for mode, kind, fingerprint, path in self._ls_tree(head)
                if kind == "blob" and mode in REGULAR_FILE_MODES
            }
            logger.debug("HEAD tree holds %d regular files", len(self._head_files))
        return self._head_files

    def resolve_fingerprint(self, path: str, treeish: str = "HEAD") -> str:
        """
        Resolve a path to its blob fingerprint within a tree.

        Raises:
            RepositoryAccessError: If the entry is absent or not a regular file
        """
        for mode, kind, fingerprint, entry_path in self._ls_tree(treeish, [path]):
            if entry_path != path:
                continue
            if kind != "blob" or mode not in REGULAR_FILE_MODES:
                raise RepositoryAccessError(
                    f"'{path}' in {treeish} is not a regular file ({kind} {mode})"
                )
            return fingerprint
        raise RepositoryAccessError(f"'{path}' does not exist in {treeish}")

    def _skip_worktree_paths(self) -> List[str]:
        """Index entries flagged skip-worktree, e.g. outside a sparse checkout."""
        paths = []
        for record in self._git(["ls-files", "-t", "-z"]).split(b"\0"):
            if record.startswith(b"S "):
                paths.append(_decode_path(record[2:]))
        return paths

    def statuses(self, include_ignored: bool = False) -> Dict[str, FileStatus]:
        """
        Classify every HEAD path against the index and working tree.

        Paths git does not report are unmodified and classified CURRENT.
        Untracked files are never returned. When a path is reported both as
        deleted from the index and as ignored on disk, IGNORED wins.
        Skip-worktree entries are never compared with the working tree by
        git status, so they are classified OTHER.
        """
        args = [
            "status",
            "--porcelain=v1",
            "-z",
            "--no-renames",
            "--ignore-submodules=all",
        ]
        if include_ignored:
            args.extend(["--untracked-files=all", "--ignored"])
        else:
            args.append("--untracked-files=no")

        statuses = {path: FileStatus.CURRENT for path in self.head_files()}
        output = self._git(args)
        for record in output.split(b"\0"):
            if len(record) < 4:
                continue
            xy = record[:2].decode("ascii")
            status = _classify_porcelain(xy)
            if status is None:
                continue
            path = _decode_path(record[3:])
            if statuses.get(path) == FileStatus.IGNORED:
                continue
            statuses[path] = status

        for path in self._skip_worktree_paths():
            if path in statuses:
                statuses[path] = FileStatus.OTHER
        return statuses

    def first_parent_commits(self, rev: str = "HEAD") -> List[Commit]:
        """
        Return the first-parent chain starting at ``rev``, newest first.

        A single ``git log`` pass also records each commit's raw diff against
        its first parent, which ``diff_to_parent`` then answers from.
        """
        self.head_commit()
        output = self._git(
            [
                "log",
                "--first-parent",
                "--diff-merges=first-parent",
                "--root",
                "-M",
                "--raw",
                "-z",
                "--no-abbrev",
                "--no-color",
                "--no-show-signature",
                "--format=%x01%H %ct %P",
                rev,
                "--",
            ]
        )

        commits = []
        tokens = iter(output.split(b"\0"))
        current: Optional[Commit] = None
        for token in tokens:
            token = token.lstrip(b"\n")
            if token.startswith(COMMIT_MARKER):
                header, _, token = token[1:].partition(b"\n")
                fields = header.decode("ascii").split()
                current = Commit(
                    sha=fields[0],
                    timestamp=int(fields[1]),
                    parent=fields[2] if len(fields) > 2 else None,
                )
                commits.append(current)
                self._deltas[current.sha] = []
                token = token.lstrip(b"\n")
            if current is not None and token.startswith(b":"):
                self._deltas[current.sha].append(_parse_raw_entry(token, tokens))
        logger.debug("Read %d first-parent commits in one pass", len(commits))
        return commits

    def diff_to_parent(self, commit: Commit) -> List[Delta]:
        """
        Diff a commit against its first parent with rename detection.

        Root commits are diffed against the empty tree. Commits already read
        by ``first_parent_commits`` are answered without running git again.
        """
        if commit.sha in self._deltas:
            return list(self._deltas[commit.sha])

        args = ["diff-tree", "-r", "-z", "-M", "--no-commit-id"]
        if commit.parent is None:
            args.extend(["--root", commit.sha])
        else:
            args.extend([commit.parent, commit.sha])

        deltas = []
        tokens = iter(self._git(args).split(b"\0"))
        for token in tokens:
            token = token.lstrip(b"\n")
            if token.startswith(b":"):
                deltas.append(_parse_raw_entry(token, tokens))
        return deltas
