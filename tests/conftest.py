"""共享 fixture — fake 命令执行器 + 日志清理"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

import pytest

from gitlink.utils.logger import reset_logging
from gitlink.utils.shell import CommandResult

Effect = Callable[[list[str], str], None]


class FakeExecutor:
    """按 git 子命令匹配预设结果的命令执行器

    查找顺序: 完整参数 → 仅子命令。未预设的命令返回 rc=1。
    """

    def __init__(self) -> None:
        self.calls: list[tuple[list[str], str]] = []
        self.envs: list[dict[str, str] | None] = []
        self._responses: dict[tuple[str, ...], tuple[int, str, str, Effect | None]] = {}

    def on(
        self, *args: str, rc: int = 0, stdout: str = "", stderr: str = "",
        effect: Effect | None = None,
    ) -> FakeExecutor:
        self._responses[args] = (rc, stdout, stderr, effect)
        return self

    def subcommands(self) -> list[str]:
        return [args[1] for args, _ in self.calls]

    async def execute(
        self,
        args: list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
    ) -> CommandResult:
        self.calls.append((list(args), cwd))
        self.envs.append(env)
        key = tuple(args[1:])
        resp = self._responses.get(key) or self._responses.get(key[:1])
        if resp is None:
            return CommandResult(returncode=1, stdout="", stderr=f"unexpected: {args}")
        rc, stdout, stderr, effect = resp
        if effect is not None:
            effect(list(args), cwd)
        return CommandResult(returncode=rc, stdout=stdout, stderr=stderr)


def fake_clone(args: list[str], cwd: str) -> None:
    """模拟 git clone: 在目标目录生成工作区文件和 .git 目录"""
    dest = Path(args[-1])
    (dest / ".git" / "objects").mkdir(parents=True)
    (dest / ".git" / "HEAD").write_text("ref: refs/heads/master\n")
    (dest / "README.md").write_text(f"cloned from {args[-2]}\n")


@pytest.fixture()
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture(autouse=True)
def _clean_logging():
    level = logging.getLogger().level
    yield
    reset_logging()
    logging.getLogger().setLevel(level)


@pytest.fixture()
def clone_effect() -> Effect:
    return fake_clone
