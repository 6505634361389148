"""Tests for the release orchestration in modpub.release.service."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from modpub.core.config import ReleaseConfig
from modpub.core.result import Err, Ok, Result
from modpub.git.repository import Repository
from modpub.output.console import MockConsole
from modpub.release.errors import ReleaseError
from modpub.release.identity import GitIdentity
from modpub.release.model import RepositoryTarget
from modpub.release.service import ModuleReleaser


class StaticIdentity:
    def __init__(self, identity: GitIdentity | None = GitIdentity("Rel Bot", "bot@example.com")):
        self._identity = identity

    def resolve(self, config: ReleaseConfig) -> Result[GitIdentity, ReleaseError]:
        del config
        if self._identity is None:
            return Err(ReleaseError(kind="identity_missing", message="Unable to detect user name."))
        return Ok(self._identity)


@dataclass
class FakeCloner:
    runner: object
    existing: dict[str, str] = field(default_factory=dict)
    cloned: list[RepositoryTarget] = field(default_factory=list)

    def __call__(self, target: RepositoryTarget, dest: Path) -> Result[Repository, ReleaseError]:
        self.cloned.append(target)
        (dest / ".git").mkdir(parents=True)
        for name, content in self.existing.items():
            (dest / name).write_text(content)
        return Ok(Repository(dest, runner=self.runner))  # type: ignore[arg-type]


def _git(_: str) -> Path:
    return Path("/usr/bin/git")


def _releaser(
    cfg: ReleaseConfig,
    *,
    runner,
    cloner: FakeCloner,
    ws: Path,
    console: MockConsole | None = None,
    identity: StaticIdentity | None = None,
    which=_git,
) -> ModuleReleaser:
    return ModuleReleaser(
        cfg,
        console=console or MockConsole(),
        runner=runner,
        identity_resolver=identity or StaticIdentity(),
        cloner=cloner,
        workspace_factory=lambda: ws,
        which=which,
    )


@pytest.fixture
def root_staging(tmp_path: Path, make_module) -> Path:
    staging = make_module(tmp_path / "dist" / "go", "github.com/acme/widgets", "2.0.0")
    (staging / "widgets.go").write_text("package widgets\n")
    return staging


def test_end_to_end_root_module(fake_runner, tmp_path: Path, root_staging: Path) -> None:
    fake_runner.fail("git", "diff-index", returncode=1, stderr="")
    cloner = FakeCloner(fake_runner, existing={"old.go": "package old"})
    ws = tmp_path / "ws"

    result = _releaser(
        ReleaseConfig(staging_dir=root_staging), runner=fake_runner, cloner=cloner, ws=ws
    ).release()

    assert isinstance(result, Ok)
    assert result.value.tags == ("v2.0.0",)
    assert result.value.pushed is True
    assert cloner.cloned == [RepositoryTarget("acme", "widgets")]
    assert fake_runner.git_calls() == [
        ["checkout", "main"],
        ["add", "."],
        ["diff-index", "--quiet", "--cached", "HEAD", "--"],
        ["config", "user.name", "Rel Bot"],
        ["config", "user.email", "bot@example.com"],
        ["commit", "-m", "chore(release): go@2.0.0"],
        ["tag", "-a", "v2.0.0", "-m", "v2.0.0"],
        ["push", "origin", "main"],
        ["push", "origin", "v2.0.0"],
    ]
    # workspace discarded after a successful push
    assert not ws.exists()


def test_full_tree_replace(fake_runner, tmp_path: Path, root_staging: Path) -> None:
    fake_runner.fail("git", "diff-index", returncode=1, stderr="")
    cloner = FakeCloner(fake_runner, existing={"old.go": "package old"})
    ws = tmp_path / "ws"

    result = _releaser(
        ReleaseConfig(staging_dir=root_staging, keep_workspace=True),
        runner=fake_runner,
        cloner=cloner,
        ws=ws,
    ).release()

    assert isinstance(result, Ok)
    assert result.value.workspace == ws / "widgets"
    assert sorted(p.name for p in (ws / "widgets").iterdir()) == [
        ".git",
        "go.mod",
        "version",
        "widgets.go",
    ]


def test_unchanged_tree_is_noop(fake_runner, tmp_path: Path, root_staging: Path) -> None:
    console = MockConsole()
    cloner = FakeCloner(fake_runner)

    result = _releaser(
        ReleaseConfig(staging_dir=root_staging),
        runner=fake_runner,
        cloner=cloner,
        ws=tmp_path / "ws",
        console=console,
    ).release()

    assert isinstance(result, Ok)
    assert result.value.tags == ()
    assert result.value.is_noop
    commands = [c[0] for c in fake_runner.git_calls()]
    assert "commit" not in commands
    assert "tag" not in commands
    assert "push" not in commands
    assert console.find("No changes. Skipping release")


def test_dry_run_tags_locally_without_push(fake_runner, tmp_path: Path, make_module) -> None:
    staging = tmp_path / "go"
    make_module(staging / "sub", "github.com/acme/widgets/sub", "0.1.0")
    fake_runner.fail("git", "diff-index", returncode=1, stderr="")
    console = MockConsole()
    ws = tmp_path / "ws"

    result = _releaser(
        ReleaseConfig(staging_dir=staging, dry_run=True),
        runner=fake_runner,
        cloner=FakeCloner(fake_runner),
        ws=ws,
        console=console,
    ).release()

    assert isinstance(result, Ok)
    assert result.value.tags == ("sub/v0.1.0",)
    assert result.value.pushed is False
    assert result.value.workspace == ws / "widgets"
    assert ws.exists()
    assert ["tag", "-a", "sub/v0.1.0", "-m", "sub/v0.1.0"] in fake_runner.git_calls()
    assert not any(c[0] == "push" for c in fake_runner.git_calls())
    assert console.find("Will push to branch: main")
    assert console.find("Will push tag: sub/v0.1.0")


def test_global_version_and_message_override(fake_runner, tmp_path: Path, make_module) -> None:
    staging = make_module(tmp_path / "go", "github.com/acme/widgets")
    make_module(staging / "sub", "github.com/acme/widgets/sub")
    fake_runner.fail("git", "diff-index", returncode=1, stderr="")

    result = _releaser(
        ReleaseConfig(staging_dir=staging, version="3.0.0", branch="release"),
        runner=fake_runner,
        cloner=FakeCloner(fake_runner),
        ws=tmp_path / "ws",
    ).release()

    assert isinstance(result, Ok)
    assert result.value.tags == ("v3.0.0", "sub/v3.0.0")
    calls = fake_runner.git_calls()
    assert ["commit", "-m", "chore(release): 3.0.0"] in calls
    assert calls[-3:] == [
        ["push", "origin", "release"],
        ["push", "origin", "v3.0.0"],
        ["push", "origin", "sub/v3.0.0"],
    ]

    fake_runner.calls.clear()
    result = _releaser(
        ReleaseConfig(staging_dir=staging, version="3.0.1", commit_message="ship it"),
        runner=fake_runner,
        cloner=FakeCloner(fake_runner),
        ws=tmp_path / "ws2",
    ).release()

    assert isinstance(result, Ok)
    assert ["commit", "-m", "ship it"] in fake_runner.git_calls()


def test_multiple_repositories_never_clone(fake_runner, tmp_path: Path, make_module) -> None:
    staging = tmp_path / "go"
    make_module(staging / "a", "github.com/acme/widgets/a", "1.0.0")
    make_module(staging / "b", "github.com/other/gadgets/b", "1.0.0")
    cloner = FakeCloner(fake_runner)

    result = _releaser(
        ReleaseConfig(staging_dir=staging), runner=fake_runner, cloner=cloner, ws=tmp_path / "ws"
    ).release()

    assert isinstance(result, Err)
    assert result.error.kind == "multiple_repositories"
    assert cloner.cloned == []
    assert fake_runner.calls == []


def test_missing_version_never_clones(fake_runner, tmp_path: Path, make_module) -> None:
    staging = make_module(tmp_path / "go", "github.com/acme/widgets")
    cloner = FakeCloner(fake_runner)

    result = _releaser(
        ReleaseConfig(staging_dir=staging), runner=fake_runner, cloner=cloner, ws=tmp_path / "ws"
    ).release()

    assert isinstance(result, Err)
    assert result.error.kind == "version_missing"
    assert str(staging) in result.error.message
    assert cloner.cloned == []


def test_missing_git_is_precondition(fake_runner, tmp_path: Path, root_staging: Path) -> None:
    cloner = FakeCloner(fake_runner)

    result = _releaser(
        ReleaseConfig(staging_dir=root_staging),
        runner=fake_runner,
        cloner=cloner,
        ws=tmp_path / "ws",
        which=lambda _: None,
    ).release()

    assert isinstance(result, Err)
    assert result.error.kind == "tool_missing"
    assert cloner.cloned == []


def test_missing_identity_is_precondition(fake_runner, tmp_path: Path, root_staging: Path) -> None:
    cloner = FakeCloner(fake_runner)

    result = _releaser(
        ReleaseConfig(staging_dir=root_staging),
        runner=fake_runner,
        cloner=cloner,
        ws=tmp_path / "ws",
        identity=StaticIdentity(None),
    ).release()

    assert isinstance(result, Err)
    assert result.error.kind == "identity_missing"
    assert cloner.cloned == []


def test_missing_token_with_default_cloner(fake_runner, tmp_path: Path, root_staging: Path) -> None:
    releaser = ModuleReleaser(
        ReleaseConfig(staging_dir=root_staging, token=None),
        console=MockConsole(),
        runner=fake_runner,
        identity_resolver=StaticIdentity(),
        workspace_factory=lambda: tmp_path / "ws",
        which=_git,
    )

    result = releaser.release()

    assert isinstance(result, Err)
    assert result.error.kind == "token_missing"
    assert fake_runner.calls == []
    assert not (tmp_path / "ws").exists()


def test_push_failure_keeps_workspace(fake_runner, tmp_path: Path, root_staging: Path) -> None:
    fake_runner.fail("git", "diff-index", returncode=1, stderr="")
    fake_runner.fail("git", "push", stderr="remote rejected")
    console = MockConsole()
    ws = tmp_path / "ws"

    result = _releaser(
        ReleaseConfig(staging_dir=root_staging),
        runner=fake_runner,
        cloner=FakeCloner(fake_runner),
        ws=ws,
        console=console,
    ).release()

    assert isinstance(result, Err)
    assert result.error.kind == "push_failed"
    assert (ws / "widgets").exists()
    assert console.find("workspace left for inspection")
