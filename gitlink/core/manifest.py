"""清单加载

清单为 JSON 对象: {包名: 条目配置}，启动时读取一次。
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from gitlink.core.exceptions import ConfigError
from gitlink.core.models import ManifestEntry

logger = logging.getLogger(__name__)


def load_manifest(path: str | Path) -> list[ManifestEntry]:
    """读取清单文件，返回条目列表（保持文件中的顺序）

    异常:
        ConfigError: 文件不存在、JSON 无效或顶层不是对象
    """
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"未找到清单文件: {p.resolve()}")

    try:
        with open(p, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(
            f"清单 JSON 无效 {p.name} (行 {e.lineno}, 列 {e.colno}): {e.msg}"
        ) from e
    except OSError as e:
        raise ConfigError(f"清单读取失败: {p} - {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"清单顶层必须是对象: {p}")

    entries: list[ManifestEntry] = []
    for key, info in data.items():
        if not isinstance(info, dict):
            logger.warning("忽略无效条目 %s: 不是对象", key)
            continue
        entries.append(ManifestEntry.from_dict(key, info))

    logger.info("已加载 %d 个链接包: %s", len(entries), p)
    return entries
