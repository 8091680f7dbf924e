"""统一异常体系

所有业务异常继承 GitLinkError，每个子类带有稳定的 code 字段。
条目级异常由 Resolver 收敛为 EntryResult，不会中断其它条目；
ConfigError / SymlinkUnsupportedError 属于进程级致命错误。
"""

from __future__ import annotations


class GitLinkError(Exception):
    """基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


# =========================================================================
# 进程级错误
# =========================================================================

class ConfigError(GitLinkError):
    """清单或配置文件缺失、无法解析"""

    code = "CONFIG_ERROR"


class SymlinkUnsupportedError(GitLinkError):
    """当前环境/权限不允许创建文件系统链接"""

    code = "SYMLINK_UNSUPPORTED"


# =========================================================================
# 条目级错误
# =========================================================================

class InvalidConfigError(GitLinkError):
    """单个清单条目配置无效"""

    code = "INVALID_CONFIG"


class PathNotFoundError(GitLinkError):
    """本地链接路径不存在"""

    code = "PATH_NOT_FOUND"


class NotAGitRepositoryError(GitLinkError):
    """路径不是 Git 仓库，或无法获取远程地址/当前分支"""

    code = "NOT_A_GIT_REPOSITORY"


class RemoteMismatchError(GitLinkError):
    """本地仓库的远程地址与清单不一致"""

    code = "REMOTE_MISMATCH"

    def __init__(self, message: str, expected: str = "", actual: str = "") -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class RevisionMismatchError(GitLinkError):
    """本地仓库当前分支/标签与清单不一致"""

    code = "REVISION_MISMATCH"

    def __init__(self, message: str, expected: str = "", actual: str = "") -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class LinkCreationError(GitLinkError):
    """链接创建被拒绝（权限不足、文件系统不支持等）"""

    code = "LINK_CREATION_FAILED"


class CloneError(GitLinkError):
    """git clone 或清理目标路径失败"""

    code = "CLONE_FAILED"


class CheckoutError(GitLinkError):
    """克隆后 checkout 指定版本失败"""

    code = "CHECKOUT_FAILED"


class MetadataStripError(GitLinkError):
    """删除克隆结果中的 .git 目录失败"""

    code = "METADATA_STRIP_FAILED"
