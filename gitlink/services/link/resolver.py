"""条目解析编排

每个条目独立运行: 校验链接 → 创建链接；任何校验失败都回退到克隆。
所有条目并发启动并显式等待完成，结果汇总为 ResolveReport。

状态流转:
    Start → ValidatingLink → LinkCreated
                           ↘ CloningFallback → CloneSucceeded / CloneFailed
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path

from gitlink.core.exceptions import GitLinkError
from gitlink.core.models import (
    CLONED,
    FAILED,
    LINKED,
    EntryResult,
    ManifestEntry,
    ResolveReport,
)
from gitlink.services.link.cloner import RepoCloner
from gitlink.services.link.inspector import RepoInspector
from gitlink.services.link.linker import LinkCreator
from gitlink.services.link.validator import LinkValidator
from gitlink.utils.shell import CommandExecutor

logger = logging.getLogger(__name__)


class Resolver:
    """链接包解析器

    组件可通过构造参数注入（测试时替换为 fake），
    未注入时按 project_root / executor 构建默认实现。
    """

    def __init__(
        self,
        project_root: Path,
        *,
        executor: CommandExecutor | None = None,
        git_binary: str = "git",
        max_concurrency: int = 0,
        fallback_on_link_failure: bool = True,
        validator: LinkValidator | None = None,
        linker: LinkCreator | None = None,
        cloner: RepoCloner | None = None,
    ) -> None:
        self.project_root = Path(project_root)
        self.max_concurrency = max(0, max_concurrency)
        self.fallback_on_link_failure = fallback_on_link_failure
        if validator is None:
            inspector = RepoInspector(executor, git_binary=git_binary)
            validator = LinkValidator(inspector, self.project_root)
        self.validator = validator
        self.linker = linker or LinkCreator(self.project_root)
        self.cloner = cloner or RepoCloner(self.project_root, executor, git_binary=git_binary)

    async def resolve_entry(self, entry: ManifestEntry) -> EntryResult:
        """解析单个条目，所有条目级错误收敛为 EntryResult"""
        start = time.monotonic()
        redirect: GitLinkError | None = None

        try:
            local = await self.validator.validate(entry)
        except GitLinkError as e:
            logger.warning(
                "%s 链接校验失败 [%s]: %s，回退克隆", entry.name, e.code, e,
                extra={"entry": entry.name, "code": e.code},
            )
            local, redirect = None, e

        if local is not None:
            try:
                dest = await self.linker.link(entry, local)
                return EntryResult(
                    name=entry.name, status=LINKED, path=str(dest),
                    message=f"已链接到 {local}",
                    duration=time.monotonic() - start,
                )
            except GitLinkError as e:
                logger.error(
                    "%s 创建链接失败 [%s]: %s", entry.name, e.code, e,
                    extra={"entry": entry.name, "code": e.code},
                )
                if not self.fallback_on_link_failure:
                    return self._failed(entry, e, start)
                redirect = e

        try:
            dest = await self.cloner.clone(entry)
        except GitLinkError as e:
            logger.error(
                "%s 克隆失败 [%s]: %s", entry.name, e.code, e,
                extra={"entry": entry.name, "code": e.code},
            )
            return self._failed(entry, e, start)

        return EntryResult(
            name=entry.name, status=CLONED, path=str(dest), error=redirect,
            message=f"已克隆 {entry.repository}@{entry.clone_revision}",
            duration=time.monotonic() - start,
        )

    async def check_entry(self, entry: ManifestEntry) -> EntryResult:
        """只做链接校验，不改动文件系统；status 表示运行时将走的路径"""
        try:
            local = await self.validator.validate(entry)
        except GitLinkError as e:
            return EntryResult(
                name=entry.name, status=CLONED, error=e,
                message=f"将克隆 {entry.repository}@{entry.clone_revision}: {e}",
            )
        if local is None:
            return EntryResult(
                name=entry.name, status=CLONED,
                message=f"将克隆 {entry.repository}@{entry.clone_revision}",
            )
        return EntryResult(name=entry.name, status=LINKED, message=f"将链接到 {local}")

    async def resolve_all(self, entries: list[ManifestEntry], *, dry_run: bool = False) -> ResolveReport:
        """并发解析全部条目并等待完成"""
        sem = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None
        handler = self.check_entry if dry_run else self.resolve_entry

        async def _one(entry: ManifestEntry) -> EntryResult:
            if sem is None:
                return await handler(entry)
            async with sem:
                return await handler(entry)

        outcomes = await asyncio.gather(
            *(_one(e) for e in entries), return_exceptions=True,
        )

        results: list[EntryResult] = []
        for entry, outcome in zip(entries, outcomes):
            if isinstance(outcome, EntryResult):
                results.append(outcome)
            elif isinstance(outcome, Exception):
                logger.error(
                    "%s 解析出现未预期错误: %r", entry.name, outcome, extra={"entry": entry.name},
                )
                results.append(EntryResult(name=entry.name, status=FAILED, message=str(outcome)))
            else:
                raise outcome

        report = ResolveReport.from_results(results)
        logger.info(
            "解析汇总: %d 链接, %d 克隆, %d 失败 (共 %d)",
            report.linked, report.cloned, report.failed, report.total,
        )
        return report

    def run(self, entries: list[ManifestEntry], *, dry_run: bool = False) -> ResolveReport:
        """同步入口"""
        return asyncio.run(self.resolve_all(entries, dry_run=dry_run))

    @staticmethod
    def _failed(entry: ManifestEntry, error: GitLinkError, start: float) -> EntryResult:
        return EntryResult(
            name=entry.name, status=FAILED, error=error, message=str(error),
            duration=time.monotonic() - start,
        )
