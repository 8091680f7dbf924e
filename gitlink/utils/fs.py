"""文件系统原语：链接能力探测、创建链接、递归删除

阻塞调用统一通过 asyncio.to_thread 执行，避免阻塞事件循环。
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import stat
import tempfile
from pathlib import Path

from gitlink.core.exceptions import SymlinkUnsupportedError

logger = logging.getLogger(__name__)


def can_symlink() -> bool:
    """探测当前环境/用户权限是否允许创建文件系统链接

    在临时目录内实际创建一次目录链接，成功即认为可用。
    """
    with tempfile.TemporaryDirectory(prefix="gitlink-probe-") as tmp:
        src = Path(tmp) / "src"
        dst = Path(tmp) / "dst"
        src.mkdir()
        try:
            os.symlink(src, dst, target_is_directory=True)
        except (OSError, NotImplementedError) as e:
            logger.debug("链接能力探测失败: %s", e)
            return False
        return True


def is_link(path: Path) -> bool:
    """符号链接或 Windows 目录联接"""
    return path.is_symlink() or os.path.isjunction(path)


def _make_link(source: Path, dest: Path, kind: str) -> None:
    if kind == "junction" and os.name == "nt":
        import _winapi
        _winapi.CreateJunction(str(source), str(dest))
    else:
        os.symlink(source, dest, target_is_directory=source.is_dir())


async def create_link(source: str | Path, dest: str | Path, kind: str = "junction") -> None:
    """创建 dest -> source 的目录链接

    kind="junction" 在 Windows 上创建目录联接，其它平台上为目录符号链接。
    dest 的父目录不存在时自动创建。

    异常:
        OSError: 底层链接操作被拒绝
    """
    src, dst = Path(source), Path(dest)
    await asyncio.to_thread(dst.parent.mkdir, parents=True, exist_ok=True)
    await asyncio.to_thread(_make_link, src, dst, kind)


def _force_writable(func, path, exc) -> None:  # noqa: ANN001
    """rmtree 回调：只读文件（如 .git/objects）先去掉只读位再重试"""
    if isinstance(exc, PermissionError):
        os.chmod(path, stat.S_IWRITE)
        func(path)
    else:
        raise exc


def _remove(path: Path) -> None:
    if is_link(path):
        # 只删除链接本身，不触碰链接指向的目录
        if os.name == "nt" and path.is_dir():
            os.rmdir(path)
        else:
            path.unlink()
    elif path.is_dir():
        shutil.rmtree(path, onexc=_force_writable)
    elif path.exists():
        path.unlink()


async def remove_path(path: str | Path) -> None:
    """递归删除 path 处的任意对象；不存在时视为成功

    异常:
        OSError: 删除失败
    """
    await asyncio.to_thread(_remove, Path(path))


def _overlaps(a: Path, b: Path) -> bool:
    return a == b or a in b.parents or b in a.parents


def _removal_reaches(target: Path, other: Path) -> bool:
    if is_link(target):
        return False
    return _overlaps(target.resolve(), other.resolve())


async def removal_reaches(target: str | Path, other: str | Path) -> bool:
    """删除 target 是否会波及 other（两者相同或互为上下级目录）

    target 本身是链接时删除只移除链接，不算波及。
    """
    return await asyncio.to_thread(_removal_reaches, Path(target), Path(other))


async def path_exists(path: str | Path) -> bool:
    """异步判断路径是否存在"""
    return await asyncio.to_thread(Path(path).exists)


def ensure_symlink_support() -> None:
    """链接能力探测失败时抛出 SymlinkUnsupportedError"""
    if not can_symlink():
        raise SymlinkUnsupportedError(
            "当前环境无法创建符号链接，需要调整用户/系统权限后才能继续"
        )
