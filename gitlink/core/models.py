"""数据模型

数据类:
- ManifestEntry: 清单中的单个链接包
- BranchInfo: 本地仓库当前分支/标签信息
- EntryResult: 单个条目的解析结果
- ResolveReport: 一次运行的结果汇总
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from gitlink.core.exceptions import GitLinkError, InvalidConfigError

DEFAULT_REVISION = "master"


@dataclass
class ManifestEntry:
    """清单中的单个链接包

    local_link_path 保留清单中的原始值（可能不是字符串），由 LinkValidator 校验。
    """

    name: str
    repository: str = ""
    branch: str = ""
    tag: str = ""
    use_local_link: bool = False
    local_link_path: Any = None
    target_path: str = ""

    @classmethod
    def from_dict(cls, key: str, data: dict[str, Any]) -> ManifestEntry:
        """从清单 JSON 对象构建，name 缺省时使用映射键"""
        options = data.get("options") if isinstance(data.get("options"), dict) else {}
        paths = data.get("paths") if isinstance(data.get("paths"), dict) else {}
        return cls(
            name=str(data.get("name") or key),
            repository=str(data.get("repository") or ""),
            branch=str(data.get("branch") or ""),
            tag=str(data.get("tag") or ""),
            use_local_link=bool(options.get("useLocalLink", False)),
            local_link_path=paths.get("localLinkPath"),
            target_path=str(paths.get("targetPath") or ""),
        )

    @property
    def version_id(self) -> str:
        """链接校验要求的版本，空串表示不校验"""
        return self.branch or self.tag

    @property
    def clone_revision(self) -> str:
        """克隆后 checkout 的版本"""
        return self.branch or self.tag or DEFAULT_REVISION

    def repo_path(self, root: Path) -> Path:
        """包最终落地的位置: root/targetPath/name"""
        if not self.target_path:
            raise InvalidConfigError(f"{self.name}: 未定义 paths.targetPath")
        if not self.name or "/" in self.name or "\\" in self.name or self.name in (".", ".."):
            raise InvalidConfigError(f"非法的包名: {self.name!r}")
        return root / self.target_path / self.name

    def local_path(self, root: Path) -> Path:
        """本地工作副本的绝对路径"""
        return (root / str(self.local_link_path)).resolve()


@dataclass
class BranchInfo:
    """本地仓库当前检出状态"""

    name: str
    detached: bool = False


# 条目终态
LINKED = "linked"
CLONED = "cloned"
FAILED = "failed"


@dataclass
class EntryResult:
    """单个条目的解析结果

    error 记录使条目终止（failed）或被转向克隆（cloned）的异常。
    """

    name: str
    status: str  # "linked", "cloned", "failed"
    message: str = ""
    error: GitLinkError | None = None
    duration: float = 0.0  # 秒
    path: str = ""

    @property
    def ok(self) -> bool:
        return self.status != FAILED

    @property
    def error_code(self) -> str:
        return self.error.code if self.error else ""


@dataclass
class ResolveReport:
    """一次运行的结果汇总"""

    total: int = 0
    linked: int = 0
    cloned: int = 0
    failed: int = 0
    results: list[EntryResult] = field(default_factory=list)

    @classmethod
    def from_results(cls, results: list[EntryResult]) -> ResolveReport:
        """从 EntryResult 列表构建，自动统计状态"""
        return cls(
            total=len(results),
            linked=sum(1 for r in results if r.status == LINKED),
            cloned=sum(1 for r in results if r.status == CLONED),
            failed=sum(1 for r in results if not r.ok),
            results=results,
        )

    @property
    def success(self) -> bool:
        return self.failed == 0
