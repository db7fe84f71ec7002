"""Unit tests for the git command runner."""

from unittest.mock import patch

import pytest

from git_warp_time.utils.git_runner import get_git_environment, run_git_command


class TestGetGitEnvironment:
    def test_marks_project_as_safe_directory(self, tmp_path, monkeypatch):
        monkeypatch.delenv("GIT_CONFIG_COUNT", raising=False)

        env = get_git_environment(tmp_path)

        assert env["GIT_CONFIG_COUNT"] == "1"
        assert env["GIT_CONFIG_KEY_0"] == "safe.directory"
        assert env["GIT_CONFIG_VALUE_0"] == str(tmp_path.resolve())

    def test_inherited_config_is_shifted(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GIT_CONFIG_COUNT", "2")
        monkeypatch.setenv("GIT_CONFIG_KEY_0", "core.quotepath")
        monkeypatch.setenv("GIT_CONFIG_VALUE_0", "off")
        monkeypatch.setenv("GIT_CONFIG_KEY_1", "diff.renames")
        monkeypatch.setenv("GIT_CONFIG_VALUE_1", "false")

        env = get_git_environment(tmp_path)

        assert env["GIT_CONFIG_COUNT"] == "3"
        assert env["GIT_CONFIG_KEY_0"] == "safe.directory"
        assert env["GIT_CONFIG_KEY_1"] == "core.quotepath"
        assert env["GIT_CONFIG_VALUE_1"] == "off"
        assert env["GIT_CONFIG_KEY_2"] == "diff.renames"
        assert env["GIT_CONFIG_VALUE_2"] == "false"


class TestRunGitCommand:
    def test_rejects_non_git_commands(self, tmp_path):
        with pytest.raises(ValueError, match="must start with 'git'"):
            run_git_command(["ls"], cwd=tmp_path)

    def test_passes_safe_directory_environment(self, tmp_path):
        with patch("git_warp_time.utils.git_runner.subprocess.run") as mock_run:
            run_git_command(["git", "status"], cwd=tmp_path, env={"LC_ALL": "C"})

        kwargs = mock_run.call_args.kwargs
        assert kwargs["cwd"] == tmp_path
        assert kwargs["env"]["GIT_CONFIG_KEY_0"] == "safe.directory"
        assert kwargs["env"]["LC_ALL"] == "C"
