"""本地仓库查询 — 远程地址与当前分支/标签（只读）"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from gitlink.core.exceptions import NotAGitRepositoryError
from gitlink.core.models import BranchInfo
from gitlink.utils.fs import path_exists
from gitlink.utils.shell import CommandExecutor, CommandResult, get_executor

logger = logging.getLogger(__name__)

# "* (HEAD detached at v1.0)" / "* (HEAD detached from 1a2b3c4)" / "* (no branch)"
_DETACHED_RE = re.compile(r"^\((?:HEAD )?detached (?:at|from) (\S+)\)$")

# git branch 的输出随 locale 翻译，解析前固定为英文
_GIT_LOCALE = {"LC_ALL": "C"}


class RepoInspector:
    """查询本地目录对应仓库的远程地址和当前检出状态"""

    def __init__(self, executor: CommandExecutor | None = None, git_binary: str = "git") -> None:
        self._executor = executor or get_executor()
        self._git = git_binary

    async def _git_cmd(self, path: Path, *args: str) -> CommandResult:
        return await self._executor.execute(
            [self._git, *args], cwd=str(path), env={**os.environ, **_GIT_LOCALE},
        )

    async def get_remote_url(self, path: Path) -> str:
        """返回仓库配置的远程地址

        异常:
            NotAGitRepositoryError: 路径不存在、不是仓库或未配置远程
        """
        if not await path_exists(path):
            raise NotAGitRepositoryError(f"路径不存在: {path}")

        remotes = await self._git_cmd(path, "remote")
        if not remotes.success:
            raise NotAGitRepositoryError(f"{path} 不是 Git 仓库: {remotes.stderr.strip()[:300]}")
        if not remotes.stdout.strip():
            raise NotAGitRepositoryError(f"{path} 未配置远程仓库")

        r = await self._git_cmd(path, "ls-remote", "--get-url")
        url = r.stdout.strip()
        if not r.success or not url:
            raise NotAGitRepositoryError(f"无法获取 {path} 的远程地址")
        return url

    async def get_current_branch(self, path: Path) -> BranchInfo:
        """返回当前分支名；HEAD 游离时返回所在标签/提交并标记 detached

        异常:
            NotAGitRepositoryError: 无法读取分支信息
        """
        r = await self._git_cmd(path, "branch", "--no-color")
        if not r.success:
            raise NotAGitRepositoryError(
                f"读取 {path} 的本地分支失败: {r.stderr.strip()[:300]}"
            )

        for line in r.stdout.splitlines():
            if not line.startswith("* "):
                continue
            label = line[2:].strip()
            m = _DETACHED_RE.match(label)
            if m:
                return BranchInfo(name=m.group(1), detached=True)
            if label.startswith("("):
                return BranchInfo(name=label.strip("()"), detached=True)
            return BranchInfo(name=label)

        # 尚无提交的新仓库，git branch 没有输出
        r = await self._git_cmd(path, "symbolic-ref", "--short", "-q", "HEAD")
        if r.success and r.stdout.strip():
            return BranchInfo(name=r.stdout.strip())
        raise NotAGitRepositoryError(f"无法确定 {path} 的当前分支")
