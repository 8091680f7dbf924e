"""RepoCloner 单元测试"""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from gitlink.core.exceptions import CheckoutError, CloneError, InvalidConfigError, MetadataStripError
from gitlink.core.models import ManifestEntry
from gitlink.services.link import cloner as cloner_mod
from gitlink.services.link.cloner import RepoCloner

REPO = "git@host:org/lib-a.git"


def _entry(**kw) -> ManifestEntry:
    data = {"name": "lib-a", "repository": REPO, "branch": "main", "target_path": "./packages"}
    data.update(kw)
    return ManifestEntry(**data)


class TestRepoCloner:
    def test_clone_checkout_strip(self, tmp_path: Path, executor, clone_effect) -> None:
        executor.on("clone", effect=clone_effect)
        executor.on("checkout", "--end-of-options", "main")
        dest = asyncio.run(RepoCloner(tmp_path, executor).clone(_entry()))

        assert dest == tmp_path / "packages" / "lib-a"
        assert (dest / "README.md").exists()
        assert not (dest / ".git").exists()
        clone_args, clone_cwd = executor.calls[0]
        assert clone_args == ["git", "clone", "--", REPO, str(dest)]
        assert clone_cwd == str(tmp_path)
        assert executor.calls[1] == (["git", "checkout", "--end-of-options", "main"], str(dest))

    @pytest.mark.parametrize(("kw", "revision"), [
        ({"branch": "", "tag": "v2.0"}, "v2.0"),
        ({"branch": ""}, "master"),
    ])
    def test_revision_selection(self, tmp_path: Path, executor, clone_effect, kw: dict, revision: str) -> None:
        executor.on("clone", effect=clone_effect)
        executor.on("checkout", "--end-of-options", revision)
        asyncio.run(RepoCloner(tmp_path, executor).clone(_entry(**kw)))
        assert executor.calls[1][0] == ["git", "checkout", "--end-of-options", revision]

    def test_stale_target_removed_first(self, tmp_path: Path, executor, clone_effect) -> None:
        stale = tmp_path / "packages" / "lib-a"
        stale.mkdir(parents=True)
        (stale / "unrelated.txt").write_text("x")
        executor.on("clone", effect=clone_effect)
        executor.on("checkout", "--end-of-options", "main")
        dest = asyncio.run(RepoCloner(tmp_path, executor).clone(_entry()))
        assert not (dest / "unrelated.txt").exists()

    def test_clone_failure(self, tmp_path: Path, executor) -> None:
        executor.on("clone", rc=128, stderr="fatal: repository not found")
        with pytest.raises(CloneError, match="repository not found"):
            asyncio.run(RepoCloner(tmp_path, executor).clone(_entry()))
        assert executor.subcommands() == ["clone"]

    def test_missing_repository(self, tmp_path: Path, executor) -> None:
        with pytest.raises(CloneError, match="repository"):
            asyncio.run(RepoCloner(tmp_path, executor).clone(_entry(repository="")))
        assert executor.calls == []

    def test_checkout_failure_discards_clone(self, tmp_path: Path, executor, clone_effect) -> None:
        executor.on("clone", effect=clone_effect)
        executor.on("checkout", "--end-of-options", "main", rc=1, stderr="error: pathspec 'main' did not match")
        with pytest.raises(CheckoutError, match="main"):
            asyncio.run(RepoCloner(tmp_path, executor).clone(_entry()))
        assert not (tmp_path / "packages" / "lib-a").exists()

    def test_metadata_strip_failure(
        self, tmp_path: Path, executor, clone_effect, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        real_remove = cloner_mod.remove_path

        async def _remove(path):
            if Path(path).name == ".git":
                raise PermissionError("locked")
            await real_remove(path)

        monkeypatch.setattr(cloner_mod, "remove_path", _remove)
        executor.on("clone", effect=clone_effect)
        executor.on("checkout", "--end-of-options", "main")
        with pytest.raises(MetadataStripError):
            asyncio.run(RepoCloner(tmp_path, executor).clone(_entry()))

    @pytest.mark.parametrize("kw", [
        {"branch": "--detach"},
        {"branch": "", "tag": "-b"},
        {"repository": "--upload-pack=touch /tmp/x"},
    ])
    def test_option_like_values_rejected(self, tmp_path: Path, executor, kw: dict) -> None:
        with pytest.raises(InvalidConfigError, match="'-'"):
            asyncio.run(RepoCloner(tmp_path, executor).clone(_entry(**kw)))
        assert executor.calls == []

    @pytest.mark.parametrize("local", ["./packages/lib-a", "./packages", "./packages/lib-a/sub"])
    def test_local_copy_at_target_is_kept(self, tmp_path: Path, executor, local: str) -> None:
        work = tmp_path / "packages" / "lib-a" / "sub"
        work.mkdir(parents=True)
        (work / "uncommitted.txt").write_text("wip")
        entry = _entry(use_local_link=True, local_link_path=local)
        with pytest.raises(InvalidConfigError, match="重叠"):
            asyncio.run(RepoCloner(tmp_path, executor).clone(entry))
        assert (work / "uncommitted.txt").read_text() == "wip"
        assert executor.calls == []
