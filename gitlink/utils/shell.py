"""子进程调用 — 异步命令执行器

通过 CommandExecutor 协议抽象子进程执行，方便测试替换。
所有调用都通过 asyncio 子进程完成，等待期间让出事件循环。
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


# =========================================================================
# 命令执行结果
# =========================================================================

@dataclass
class CommandResult:
    """命令执行结果（与 subprocess 解耦）"""

    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


# =========================================================================
# 命令执行器协议
# =========================================================================

class CommandExecutor(Protocol):
    """命令执行器协议 — 抽象子进程调用

    测试时可注入 fake 实现，无需 patch asyncio。
    """

    async def execute(
        self,
        args: list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
    ) -> CommandResult:
        """执行命令并返回结果"""
        ...


# =========================================================================
# 默认实现: 本地异步执行器
# =========================================================================

class LocalExecutor:
    """本地异步命令执行器（默认实现）

    无法启动进程（命令不存在、cwd 无效）时返回 rc=127 的结果，
    由调用方按失败处理。
    """

    async def execute(
        self,
        args: list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
    ) -> CommandResult:
        logger.debug("  exec: %s (cwd=%s)", " ".join(args), cwd)
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                cwd=cwd,
                env=env,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            return CommandResult(returncode=127, stdout="", stderr=str(e))
        out, err = await proc.communicate()
        return CommandResult(
            returncode=proc.returncode if proc.returncode is not None else -1,
            stdout=out.decode("utf-8", errors="replace"),
            stderr=err.decode("utf-8", errors="replace"),
        )


# =========================================================================
# 全局默认执行器（可替换）
# =========================================================================

_default_executor: CommandExecutor = LocalExecutor()


def get_executor() -> CommandExecutor:
    """获取全局默认命令执行器"""
    return _default_executor


def set_executor(executor: CommandExecutor) -> None:
    """替换全局默认命令执行器（用于测试）"""
    global _default_executor  # noqa: PLW0603
    _default_executor = executor
