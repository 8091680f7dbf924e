"""集中配置管理

提供统一的配置入口：YAML 设置文件 + CLI 参数覆盖。
设置文件与清单文件的相对路径都以项目根目录为基准。
项目根目录在启动时解析一次，之后显式传递给各组件，不再依赖进程当前目录。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path

from gitlink.core.exceptions import ConfigError
from gitlink.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST = "./git.link.json"
DEFAULT_SETTINGS = "gitlink.yml"


@dataclass
class Config:
    """全局配置"""

    # 路径
    manifest: str = DEFAULT_MANIFEST
    project_root: str = ""  # 为空时取进程启动目录

    # Git
    git_binary: str = "git"

    # 执行
    max_concurrency: int = 0  # 0 表示不限制
    fallback_on_link_failure: bool = True
    fail_on_error: bool = True

    @classmethod
    def from_file(cls, path: str | Path = DEFAULT_SETTINGS) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认；未知配置项告警后忽略"""
        try:
            data = load_yaml(path)
        except (OSError, ValueError) as e:
            raise ConfigError(f"配置文件读取失败: {path} - {e}") from e
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = sorted(str(k) for k in data if k not in known)
        if unknown:
            logger.warning("配置文件 %s 中的未知配置项已忽略: %s", path, ", ".join(unknown))
        return cls(**{k: v for k, v in data.items() if k in known})

    def root_path(self) -> Path:
        """项目根目录的绝对路径"""
        return Path(self.project_root or Path.cwd()).resolve()

    def manifest_path(self) -> Path:
        """清单文件的绝对路径（相对路径以项目根目录为基准）"""
        p = Path(self.manifest)
        return p if p.is_absolute() else self.root_path() / p


def settings_path(path: str = DEFAULT_SETTINGS, root: str | None = None) -> Path:
    """设置文件路径；相对路径与清单一样以项目根目录为基准"""
    p = Path(path)
    if p.is_absolute() or not root:
        return p
    return Path(root) / p


def load_config(path: str = DEFAULT_SETTINGS, root: str | None = None) -> Config:
    """加载设置文件，root 非空时同时作为项目根目录"""
    target = settings_path(path, root)
    cfg = Config.from_file(target)
    if root:
        cfg.project_root = root
    logger.debug("配置已加载: %s", target)
    return cfg
