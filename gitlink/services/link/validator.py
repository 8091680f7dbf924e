"""本地链接资格校验

按顺序检查，遇到第一个失败即停止:
  1. 未启用 useLocalLink 或缺少 localLinkPath → 不走链接（返回 None，非错误）
  2. localLinkPath 不是字符串 → InvalidConfigError
  3. 同时定义 branch 与 tag → InvalidConfigError（与本地状态无关，先于任何查询）
  4. 本地目录不存在 → PathNotFoundError
     本地目录与 targetPath/name 重叠 → InvalidConfigError
  5. 无法获取远程地址 → NotAGitRepositoryError
  6. 远程地址（去除全部空白后）不一致 → RemoteMismatchError
  7. 未要求版本 → 通过
  8. 当前分支/标签不一致 → RevisionMismatchError（HEAD 游离仅告警）
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from gitlink.core.exceptions import (
    InvalidConfigError,
    PathNotFoundError,
    RemoteMismatchError,
    RevisionMismatchError,
)
from gitlink.core.models import ManifestEntry
from gitlink.services.link.inspector import RepoInspector
from gitlink.utils.fs import path_exists, removal_reaches

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s")


def remove_whitespace(value: str) -> str:
    return _WHITESPACE_RE.sub("", value)


def remotes_match(actual: str, expected: str) -> bool:
    """远程地址比较：忽略空白，其余逐字符精确匹配（不做 URL 归一化）"""
    return remove_whitespace(actual) == remove_whitespace(expected)


def wants_local_link(entry: ManifestEntry) -> bool:
    """条目是否配置了本地链接（useLocalLink 且 localLinkPath 非空）"""
    return bool(entry.use_local_link and entry.local_link_path)


class LinkValidator:
    """判断条目能否链接到本地工作副本"""

    def __init__(self, inspector: RepoInspector, project_root: Path) -> None:
        self.inspector = inspector
        self.project_root = project_root

    async def validate(self, entry: ManifestEntry) -> Path | None:
        """校验通过返回本地工作副本的绝对路径；未配置链接返回 None

        异常:
            InvalidConfigError / PathNotFoundError / NotAGitRepositoryError /
            RemoteMismatchError / RevisionMismatchError
        """
        if not wants_local_link(entry):
            if entry.use_local_link:
                logger.warning(
                    "%s 设置了 useLocalLink 但未定义 localLinkPath，改为克隆", entry.name,
                )
            return None

        if not isinstance(entry.local_link_path, str):
            raise InvalidConfigError(
                f"{entry.repository or entry.name} 的 localLinkPath 定义不正确"
                f" (类型: {type(entry.local_link_path).__name__})"
            )

        if entry.branch and entry.tag:
            raise InvalidConfigError(
                f"{entry.name} 同时定义了 tag 和 branch，只允许其中一个"
            )

        logger.info("尝试为 Git 包创建链接: %s", entry.name)
        local = entry.local_path(self.project_root)
        if not await path_exists(local):
            raise PathNotFoundError(f"本地链接路径不可达或不存在: {local}")

        dest = entry.repo_path(self.project_root)
        if await removal_reaches(dest, local):
            raise InvalidConfigError(
                f"{entry.name} 的 localLinkPath {local} 与目标路径 {dest} 重叠，拒绝覆盖本地工作副本"
            )

        url = await self.inspector.get_remote_url(local)
        if not remotes_match(url, entry.repository):
            raise RemoteMismatchError(
                f"远程地址 {url.strip()} 与清单不一致: {entry.repository}",
                expected=entry.repository, actual=url,
            )

        version_id = entry.version_id
        if not version_id:
            return local

        current = await self.inspector.get_current_branch(local)
        if current.detached:
            logger.warning(
                "本地仓库 %s HEAD 处于游离状态，标签: %s", entry.repository, current.name,
            )
        if current.name != version_id:
            raise RevisionMismatchError(
                f"{entry.name} 的 TAG/BRANCH 不一致: 本地 {current.name}，清单要求 {version_id}",
                expected=version_id, actual=current.name,
            )
        logger.info("分支匹配: %s (包: %s)", current.name, entry.name)
        return local
