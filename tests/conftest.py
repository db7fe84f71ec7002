"""
Shared pytest fixtures for git-warp-time tests.

Provides a builder for throwaway git repositories whose commits carry fixed,
known committer times so modification times can be asserted exactly.
"""

import os
import subprocess
from pathlib import Path
from typing import Dict, Iterable, Optional

import pytest

# Fixed commit times used across the suite
T0 = 1_600_000_000
T1 = T0 + 86_400
T2 = T1 + 86_400
T3 = T2 + 86_400


class GitRepoBuilder:
    """Creates commits with deterministic timestamps in a scratch repository."""

    def __init__(self, root: Path):
        self.root = root

    def git(self, *args: str, timestamp: Optional[int] = None) -> str:
        env = os.environ.copy()
        for key in ("GIT_DIR", "GIT_WORK_TREE", "GIT_INDEX_FILE"):
            env.pop(key, None)
        if timestamp is not None:
            env["GIT_AUTHOR_DATE"] = f"{timestamp} +0000"
            env["GIT_COMMITTER_DATE"] = f"{timestamp} +0000"
        result = subprocess.run(
            ["git", *args],
            cwd=self.root,
            env=env,
            check=True,
            capture_output=True,
            text=True,
        )
        return result.stdout

    def init(self) -> "GitRepoBuilder":
        self.git("init", "-q")
        self.git("symbolic-ref", "HEAD", "refs/heads/main")
        self.git("config", "user.name", "Test User")
        self.git("config", "user.email", "test@example.com")
        self.git("config", "commit.gpgsign", "false")
        return self

    def write(self, path: str, content: str) -> Path:
        file_path = self.root / path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content)
        return file_path

    def commit(
        self,
        message: str,
        timestamp: int,
        files: Optional[Dict[str, str]] = None,
        remove: Iterable[str] = (),
        move: Optional[Dict[str, str]] = None,
    ) -> str:
        """Stage the given changes, commit them at ``timestamp`` and return the sha."""
        for path, content in (files or {}).items():
            self.write(path, content)
            self.git("add", path)
        for path in remove:
            self.git("rm", "-q", path)
        for source, destination in (move or {}).items():
            self.git("mv", source, destination)
        self.git("commit", "-q", "--allow-empty", "-m", message, timestamp=timestamp)
        return self.git("rev-parse", "HEAD").strip()

    def blob_id(self, path: str) -> str:
        return self.git("rev-parse", f"HEAD:{path}").strip()

    def mtime(self, path: str) -> int:
        return int(os.stat(self.root / path).st_mtime)

    def set_mtime(self, path: str, timestamp: int) -> None:
        os.utime(self.root / path, (timestamp, timestamp))


@pytest.fixture
def git_repo(tmp_path):
    """An initialized, empty git repository."""
    root = tmp_path / "repo"
    root.mkdir()
    return GitRepoBuilder(root).init()


@pytest.fixture
def simple_repo(git_repo):
    """One commit at T0 adding ``f.txt``."""
    git_repo.commit("Add f", T0, files={"f.txt": "A\n"})
    return git_repo


@pytest.fixture
def non_git_dir(tmp_path):
    """A directory that is not inside any git repository."""
    directory = tmp_path / "plain"
    directory.mkdir()
    (directory / "file.txt").write_text("not tracked")
    return directory
