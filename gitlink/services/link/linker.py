"""链接创建 — 替换 targetPath/name 为指向本地工作副本的目录链接

先删除旧对象再创建链接，两步之间不具备事务性：
中途中断会留下空的目标路径，重新运行即可恢复。
"""

from __future__ import annotations

import logging
from pathlib import Path

from gitlink.core.exceptions import InvalidConfigError, LinkCreationError
from gitlink.core.models import ManifestEntry
from gitlink.utils.fs import create_link, removal_reaches, remove_path

logger = logging.getLogger(__name__)


class LinkCreator:
    """目录链接创建器"""

    def __init__(self, project_root: Path, kind: str = "junction") -> None:
        self.project_root = project_root
        self.kind = kind

    async def link(self, entry: ManifestEntry, local_path: Path) -> Path:
        """创建 targetPath/name -> local_path 的链接，返回链接路径

        异常:
            InvalidConfigError: 目标路径无法计算，或与 local_path 重叠
            LinkCreationError: 清理旧对象或创建链接失败
        """
        dest = entry.repo_path(self.project_root)
        if await removal_reaches(dest, local_path):
            raise InvalidConfigError(f"目标路径 {dest} 与本地工作副本 {local_path} 重叠")

        try:
            await remove_path(dest)
        except OSError as e:
            raise LinkCreationError(f"清理目标路径失败 {dest}: {e}") from e

        try:
            await create_link(local_path, dest, kind=self.kind)
        except OSError as e:
            raise LinkCreationError(f"创建链接失败 {dest} -> {local_path}: {e}") from e

        logger.info("包 %s 已从 %s 链接成功", entry.name, entry.local_link_path)
        return dest
