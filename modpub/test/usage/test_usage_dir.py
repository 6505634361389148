"""Tests for modpub.usage.usage_dir."""

from __future__ import annotations

from pathlib import Path

from modpub.core.result import Err, Ok
from modpub.output.console import MockConsole
from modpub.usage.usage_dir import UsageDir

NOW_S = 1_700_000_000.0
NOW_MS = int(NOW_S * 1000)


def _usage(tmp_path: Path) -> UsageDir:
    return UsageDir(tmp_path / "usage", clock=lambda: NOW_S)


def test_reset_creates_layout(tmp_path: Path) -> None:
    usage = _usage(tmp_path)

    assert usage.reset() == Ok(None)

    assert usage.cwd_dir.is_dir()
    assert usage.current_env() == Ok({"CWD_FILES_DIR": str(usage.cwd_dir)})
    script = (usage.directory / "activate.bash").read_text(encoding="utf-8")
    assert str(usage.env_file) in script
    assert "cp -R $CWD_FILES_DIR/ ." in script


def test_reset_discards_previous_content(tmp_path: Path) -> None:
    usage = _usage(tmp_path)
    usage.reset()
    usage.add_to_env({"TOKEN": "abc"})
    usage.put_file("scratch.txt", "x")

    usage.reset()

    assert not (usage.directory / "scratch.txt").exists()
    assert "TOKEN" not in usage.current_env().unwrap()


def test_fresh_directory_is_not_valid(tmp_path: Path) -> None:
    usage = _usage(tmp_path)
    usage.reset()

    assert usage.is_valid() is False


def test_settings_make_it_valid(tmp_path: Path) -> None:
    usage = _usage(tmp_path)
    usage.reset()
    usage.add_to_env({"NPM_CONFIG_REGISTRY": "https://registry.example.com"})

    assert usage.is_valid() is True


def test_expiration(tmp_path: Path) -> None:
    usage = _usage(tmp_path)
    usage.reset()
    usage.add_to_env({"TOKEN": "abc"})

    usage.set_expiration_time_ms(NOW_MS + 60_000)
    assert usage.is_valid() is True

    usage.set_expiration_time_ms(NOW_MS)
    assert usage.is_valid() is False


def test_add_to_env_replaces_keys(tmp_path: Path) -> None:
    usage = _usage(tmp_path)
    usage.reset()

    usage.add_to_env({"A": "1", "B": "2"})
    usage.add_to_env({"A": "3"})

    env = usage.current_env().unwrap()
    assert env["A"] == "3"
    assert env["B"] == "2"
    assert usage.env_file.read_text(encoding="utf-8").count("A=") == 1


def test_current_env_ignores_malformed_lines(tmp_path: Path) -> None:
    usage = _usage(tmp_path)
    usage.directory.mkdir(parents=True)
    usage.env_file.write_text("# comment\nGOOD = value with spaces\nnot a pair\n", encoding="utf-8")

    assert usage.current_env() == Ok({"GOOD": "value with spaces"})


def test_activate_in_current_process(tmp_path: Path) -> None:
    usage = _usage(tmp_path)
    usage.reset()
    usage.add_to_env({"TOKEN": "abc"})
    usage.put_cwd_file(".npmrc", "registry=x\n")
    workdir = tmp_path / "work"
    workdir.mkdir()
    environ: dict[str, str] = {}

    assert usage.activate_in_current_process(environ=environ, cwd=workdir) == Ok(None)

    assert environ["TOKEN"] == "abc"
    assert environ["CWD_FILES_DIR"] == str(usage.cwd_dir)
    assert (workdir / ".npmrc").read_text(encoding="utf-8") == "registry=x\n"


def test_copy_select_cwd_file_here(tmp_path: Path) -> None:
    usage = _usage(tmp_path)
    usage.reset()
    usage.put_cwd_file("a.txt", "a")
    usage.put_cwd_file("b.txt", "b")
    workdir = tmp_path / "work"
    workdir.mkdir()

    assert usage.copy_select_cwd_file_here("a.txt", cwd=workdir) == Ok(None)
    assert [p.name for p in workdir.iterdir()] == ["a.txt"]

    missing = usage.copy_select_cwd_file_here("absent.txt", cwd=workdir)
    assert isinstance(missing, Err)


def test_json_roundtrip_and_missing(tmp_path: Path) -> None:
    usage = _usage(tmp_path)
    usage.reset()

    assert usage.read_json("login") == Ok(None)
    usage.put_json("login", {"user": "bot", "ttl": 3600})
    assert usage.read_json("login") == Ok({"user": "bot", "ttl": 3600})


def test_read_json_invalid(tmp_path: Path) -> None:
    usage = _usage(tmp_path)
    usage.put_file("broken.json", "{")

    result = usage.read_json("broken")

    assert isinstance(result, Err)
    assert "Invalid JSON" in result.error.message


def test_delete(tmp_path: Path) -> None:
    usage = _usage(tmp_path)
    usage.reset()

    assert usage.delete() == Ok(None)
    assert not usage.directory.exists()
    assert usage.delete() == Ok(None)


def test_advertise(tmp_path: Path) -> None:
    usage = _usage(tmp_path)
    console = MockConsole()

    usage.advertise(console)

    assert console.messages[-1] == f"    source {usage.directory / 'activate.bash'}"
