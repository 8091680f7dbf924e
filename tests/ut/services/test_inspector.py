"""RepoInspector 单元测试"""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from gitlink.core.exceptions import NotAGitRepositoryError
from gitlink.services.link.inspector import RepoInspector


class TestGetRemoteUrl:
    def test_returns_stripped_url(self, tmp_path: Path, executor) -> None:
        executor.on("remote", stdout="origin\n")
        executor.on("ls-remote", "--get-url", stdout="git@host:org/lib-a.git\n")
        url = asyncio.run(RepoInspector(executor).get_remote_url(tmp_path))
        assert url == "git@host:org/lib-a.git"
        assert executor.calls[0][1] == str(tmp_path)

    def test_missing_path(self, tmp_path: Path, executor) -> None:
        with pytest.raises(NotAGitRepositoryError, match="路径不存在"):
            asyncio.run(RepoInspector(executor).get_remote_url(tmp_path / "missing"))
        assert executor.calls == []

    def test_not_a_repository(self, tmp_path: Path, executor) -> None:
        executor.on("remote", rc=128, stderr="fatal: not a git repository")
        with pytest.raises(NotAGitRepositoryError, match="不是 Git 仓库"):
            asyncio.run(RepoInspector(executor).get_remote_url(tmp_path))

    def test_no_remote_configured(self, tmp_path: Path, executor) -> None:
        executor.on("remote", stdout="")
        with pytest.raises(NotAGitRepositoryError, match="未配置远程"):
            asyncio.run(RepoInspector(executor).get_remote_url(tmp_path))

    def test_custom_git_binary(self, tmp_path: Path, executor) -> None:
        executor.on("remote", stdout="origin\n")
        executor.on("ls-remote", "--get-url", stdout="u\n")
        asyncio.run(RepoInspector(executor, git_binary="/opt/git/bin/git").get_remote_url(tmp_path))
        assert all(args[0] == "/opt/git/bin/git" for args, _ in executor.calls)


class TestGetCurrentBranch:
    def test_branch(self, tmp_path: Path, executor) -> None:
        executor.on("branch", "--no-color", stdout="  dev\n* main\n")
        info = asyncio.run(RepoInspector(executor).get_current_branch(tmp_path))
        assert info.name == "main"
        assert info.detached is False

    @pytest.mark.parametrize(("line", "label"), [
        ("* (HEAD detached at v1.2.0)", "v1.2.0"),
        ("* (HEAD detached from 1a2b3c4)", "1a2b3c4"),
        ("* (detached from v0.9)", "v0.9"),
    ])
    def test_detached(self, tmp_path: Path, executor, line: str, label: str) -> None:
        executor.on("branch", "--no-color", stdout=f"{line}\n  main\n")
        info = asyncio.run(RepoInspector(executor).get_current_branch(tmp_path))
        assert info.name == label
        assert info.detached is True

    def test_no_branch_state(self, tmp_path: Path, executor) -> None:
        executor.on("branch", "--no-color", stdout="* (no branch)\n")
        info = asyncio.run(RepoInspector(executor).get_current_branch(tmp_path))
        assert info.detached is True

    def test_unborn_branch(self, tmp_path: Path, executor) -> None:
        executor.on("branch", "--no-color", stdout="")
        executor.on("symbolic-ref", "--short", "-q", "HEAD", stdout="main\n")
        info = asyncio.run(RepoInspector(executor).get_current_branch(tmp_path))
        assert info.name == "main"

    def test_git_output_forced_to_c_locale(
        self, tmp_path: Path, executor, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("LC_ALL", "zh_CN.UTF-8")
        monkeypatch.setenv("PATH", "/opt/git/bin")
        executor.on("branch", "--no-color", stdout="* (HEAD detached at v1.0)\n")
        asyncio.run(RepoInspector(executor).get_current_branch(tmp_path))
        env = executor.envs[0]
        assert env["LC_ALL"] == "C"
        assert env["PATH"] == "/opt/git/bin"

    def test_failure(self, tmp_path: Path, executor) -> None:
        executor.on("branch", "--no-color", rc=128, stderr="fatal")
        with pytest.raises(NotAGitRepositoryError, match="本地分支"):
            asyncio.run(RepoInspector(executor).get_current_branch(tmp_path))
