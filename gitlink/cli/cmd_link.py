"""链接包命令：link, check, list"""

from __future__ import annotations

import click

from gitlink.core.config import DEFAULT_SETTINGS, Config, load_config
from gitlink.core.exceptions import GitLinkError
from gitlink.core.manifest import load_manifest
from gitlink.core.models import ManifestEntry, ResolveReport
from gitlink.services.link import Resolver
from gitlink.utils.fs import ensure_symlink_support
from gitlink.utils.logger import get_logger

logger = get_logger(__name__)

_STATUS_MARK = {"linked": "LINK", "cloned": "CLONE", "failed": "FAIL"}


def register(main: click.Group) -> None:
    """注册链接相关命令"""
    main.add_command(link)
    main.add_command(check)
    main.add_command(list_entries)


def _common_options(func):  # noqa: ANN001, ANN202
    func = click.option("--jobs", "-j", type=int, default=None, help="最大并发条目数（0 不限制）")(func)
    func = click.option("--settings", default=DEFAULT_SETTINGS, help="YAML 设置文件路径（相对路径以项目根目录为基准）")(func)
    func = click.option("--root", default=None, help="项目根目录（默认当前目录）")(func)
    func = click.option("--config", "-c", "manifest", default=None, help="清单文件路径（默认 ./git.link.json）")(func)
    return func


def _load(manifest: str | None, root: str | None, settings: str, jobs: int | None) -> tuple[Config, list[ManifestEntry]]:
    """加载设置与清单，CLI 参数覆盖设置文件"""
    try:
        cfg = load_config(settings, root)
        if manifest:
            cfg.manifest = manifest
        if jobs is not None:
            cfg.max_concurrency = jobs
        entries = load_manifest(cfg.manifest_path())
    except GitLinkError as e:
        raise click.ClickException(str(e)) from e
    return cfg, entries


def _resolver(cfg: Config) -> Resolver:
    return Resolver(
        cfg.root_path(),
        git_binary=cfg.git_binary,
        max_concurrency=cfg.max_concurrency,
        fallback_on_link_failure=cfg.fallback_on_link_failure,
    )


def _echo_report(report: ResolveReport) -> None:
    for r in report.results:
        mark = _STATUS_MARK.get(r.status, r.status.upper())
        code = f" [{r.error_code}]" if r.error_code else ""
        elapsed = f" ({r.duration:.1f}s)" if r.duration else ""
        click.echo(f"  [{mark:5s}] {r.name}{code}: {r.message}{elapsed}")
    click.echo(
        f"共 {report.total}  链接: {report.linked}  克隆: {report.cloned}  失败: {report.failed}"
    )


@click.command()
@_common_options
def link(manifest: str | None, root: str | None, settings: str, jobs: int | None) -> None:
    """按清单链接或克隆全部包"""
    try:
        ensure_symlink_support()
    except GitLinkError as e:
        raise click.ClickException(str(e)) from e

    cfg, entries = _load(manifest, root, settings, jobs)
    logger.info("---------- GitLinking ----------")
    report = _resolver(cfg).run(entries)
    _echo_report(report)
    if not report.success and cfg.fail_on_error:
        raise SystemExit(1)


@click.command()
@_common_options
def check(manifest: str | None, root: str | None, settings: str, jobs: int | None) -> None:
    """只校验本地链接条件，不修改任何文件"""
    cfg, entries = _load(manifest, root, settings, jobs)
    report = _resolver(cfg).run(entries, dry_run=True)
    _echo_report(report)
    if not report.success:
        raise SystemExit(1)


@click.command(name="list")
@_common_options
def list_entries(manifest: str | None, root: str | None, settings: str, jobs: int | None) -> None:
    """列出清单中的链接包"""
    _, entries = _load(manifest, root, settings, jobs)
    if not entries:
        click.echo("清单中没有链接包。")
        return
    for e in entries:
        rev = e.version_id or "-"
        local = f" local={e.local_link_path}" if e.use_local_link and e.local_link_path else ""
        click.echo(f"  {e.name:20s} {rev:12s} -> {e.target_path}{local}  {e.repository}")
