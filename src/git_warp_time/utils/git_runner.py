"""
Git command runner with dubious ownership handling.

Freshly cloned checkouts in CI, containers, or under sudo are frequently owned
by a different user than the one resetting timestamps. Git refuses to operate
on such repositories unless they are listed in ``safe.directory``, so every
command is run with an environment that marks the working directory as safe.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import List, Dict, Optional

logger = logging.getLogger(__name__)


def get_git_environment(project_dir: Path) -> Dict[str, str]:
    """
    Get environment variables for git commands to handle dubious ownership.

    Args:
        project_dir: Path to the project directory

    Returns:
        Dictionary of environment variables for git commands
    """
    env = os.environ.copy()

    env["GIT_CONFIG_COUNT"] = "1"
    env["GIT_CONFIG_KEY_0"] = "safe.directory"
    env["GIT_CONFIG_VALUE_0"] = str(project_dir.resolve())

    # Existing GIT_CONFIG_KEY_n/VALUE_n pairs are shifted up by one to make
    # room for safe.directory at index 0
    config_count = 1
    inherited_count = os.environ.get("GIT_CONFIG_COUNT", "")
    if inherited_count.isdigit():
        for idx in range(int(inherited_count)):
            key = os.environ.get(f"GIT_CONFIG_KEY_{idx}")
            if key is None:
                continue
            new_idx = idx + 1
            env[f"GIT_CONFIG_KEY_{new_idx}"] = key
            env[f"GIT_CONFIG_VALUE_{new_idx}"] = os.environ.get(
                f"GIT_CONFIG_VALUE_{idx}", ""
            )
            config_count = max(config_count, new_idx + 1)

    env["GIT_CONFIG_COUNT"] = str(config_count)

    return env


def run_git_command(
    cmd: List[str],
    cwd: Path,
    check: bool = True,
    capture_output: bool = True,
    text: bool = True,
    timeout: Optional[float] = None,
    **kwargs,
) -> subprocess.CompletedProcess:
    """
    Run a git command with proper environment handling for dubious ownership.

    Args:
        cmd: Git command as a list (e.g., ["git", "status"])
        cwd: Working directory for the command
        check: Whether to raise CalledProcessError on non-zero exit
        capture_output: Whether to capture stdout and stderr
        text: Whether to decode output as text
        timeout: Optional timeout in seconds
        **kwargs: Additional arguments to pass to subprocess.run

    Returns:
        CompletedProcess instance with the command result

    Raises:
        subprocess.CalledProcessError: If check=True and command fails
        subprocess.TimeoutExpired: If timeout is exceeded
        FileNotFoundError: If the git executable cannot be found
    """
    if not cmd or cmd[0] != "git":
        raise ValueError("Command must start with 'git'")

    env = get_git_environment(cwd)

    if "env" in kwargs:
        env.update(kwargs.pop("env"))

    logger.debug("Running %s in %s", " ".join(cmd), cwd)

    return subprocess.run(
        cmd,
        cwd=cwd,
        check=check,
        capture_output=capture_output,
        text=text,
        timeout=timeout,
        env=env,
        **kwargs,
    )
