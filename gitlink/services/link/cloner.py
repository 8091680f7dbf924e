"""克隆回退 — 在 targetPath/name 生成去除版本控制元数据的全新副本

步骤:
  1. 删除目标路径上的旧对象
  2. git clone repository
  3. checkout branch || tag || "master"（失败时删除半成品克隆）
  4. 删除 .git 目录
"""

from __future__ import annotations

import logging
from pathlib import Path

from gitlink.core.exceptions import (
    CheckoutError,
    CloneError,
    InvalidConfigError,
    MetadataStripError,
)
from gitlink.core.models import ManifestEntry
from gitlink.services.link.validator import wants_local_link
from gitlink.utils.fs import removal_reaches, remove_path
from gitlink.utils.shell import CommandExecutor, get_executor

logger = logging.getLogger(__name__)

GIT_METADATA_DIR = ".git"


def _reject_option_like(entry: ManifestEntry, field: str, value: str) -> None:
    """以 "-" 开头的值会被 git 当作选项解析"""
    if value.startswith("-"):
        raise InvalidConfigError(f"{entry.name}: {field} 不能以 '-' 开头: {value!r}")


class RepoCloner:
    """仓库克隆器"""

    def __init__(
        self,
        project_root: Path,
        executor: CommandExecutor | None = None,
        git_binary: str = "git",
    ) -> None:
        self.project_root = project_root
        self._executor = executor or get_executor()
        self._git = git_binary

    async def clone(self, entry: ManifestEntry) -> Path:
        """克隆并准备条目，返回落地路径

        异常:
            InvalidConfigError: 目标路径无法计算、参数形似命令行选项，或会覆盖本地工作副本
            CloneError / CheckoutError / MetadataStripError
        """
        dest = entry.repo_path(self.project_root)
        revision = entry.clone_revision

        if not entry.repository:
            raise CloneError(f"{entry.name}: 未定义 repository")
        _reject_option_like(entry, "repository", entry.repository)
        _reject_option_like(entry, "branch/tag", revision)

        if wants_local_link(entry) and isinstance(entry.local_link_path, str):
            local = entry.local_path(self.project_root)
            if await removal_reaches(dest, local):
                raise InvalidConfigError(
                    f"{entry.name}: 目标路径 {dest} 与本地工作副本 {local} 重叠，拒绝删除"
                )

        try:
            await remove_path(dest)
        except OSError as e:
            raise CloneError(f"清理目标路径失败 {dest}: {e}") from e

        r = await self._executor.execute(
            [self._git, "clone", "--", entry.repository, str(dest)],
            cwd=str(self.project_root),
        )
        if not r.success:
            raise CloneError(
                f"git clone 失败 {entry.repository} (rc={r.returncode}): {r.stderr.strip()[:300]}"
            )

        r = await self._executor.execute(
            [self._git, "checkout", "--end-of-options", revision], cwd=str(dest),
        )
        if not r.success:
            await self._discard(dest)
            raise CheckoutError(
                f"checkout 分支/标签 {revision} 失败 (包: {entry.name}): {r.stderr.strip()[:300]}"
            )
        logger.info("克隆并检出 %s : %s 成功", entry.name, revision)

        try:
            await remove_path(dest / GIT_METADATA_DIR)
        except OSError as e:
            raise MetadataStripError(f"删除 {dest / GIT_METADATA_DIR} 失败: {e}") from e
        logger.info("克隆包 %s 准备完成", entry.name)
        return dest

    @staticmethod
    async def _discard(dest: Path) -> None:
        """删除未能检出目标版本的克隆，避免留下错误版本"""
        try:
            await remove_path(dest)
        except OSError as e:
            logger.warning("清理失败的克隆 %s 出错: %s", dest, e)
