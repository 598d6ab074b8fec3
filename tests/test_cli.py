from __future__ import annotations

import argparse
from pathlib import Path

import pytest

from subsorter import cli
from subsorter.config import build_config
from subsorter.hosts import FilesystemHost, PlexHost


def _write_config(path: Path, library: Path) -> None:
    path.write_text(
        f"""
settings:
  libraries:
    - name: Movies
      locations: ["{library}"]
""",
        encoding="utf-8",
    )


@pytest.fixture
def captured(monkeypatch) -> list[str]:
    output: list[str] = []

    def fake_print(message, **kwargs):
        output.append(str(message))

    monkeypatch.setattr("subsorter.cli.CONSOLE.print", fake_print)
    return output


@pytest.fixture(autouse=True)
def _quiet(monkeypatch) -> None:
    monkeypatch.setattr("subsorter.cli.configure_logging", lambda *args, **kwargs: None)
    for name in ("SUBSORTER_HOST", "SUBSORTER_NAMING_MODE", "PLEX_URL", "PLEX_TOKEN"):
        monkeypatch.delenv(name, raising=False)


def _run_args(config: Path, **overrides) -> argparse.Namespace:
    values = dict(
        config=config,
        verbose=False,
        log_level=None,
        log_file=None,
        naming_mode=None,
        command="run",
    )
    values.update(overrides)
    return argparse.Namespace(**values)


def test_run_links_subtitles(tmp_path) -> None:
    library = tmp_path / "Movies"
    movie_dir = library / "Heat (1995)"
    (movie_dir / "Subs").mkdir(parents=True)
    (movie_dir / "Heat (1995).mkv").write_bytes(b"")
    (movie_dir / "Subs" / "English.en.srt").write_text("subs", encoding="utf-8")
    config_path = tmp_path / "subsorter.yaml"
    _write_config(config_path, library)

    assert cli.run_reconcile(_run_args(config_path)) == 0
    assert (movie_dir / "Heat (1995).en.srt").is_symlink()

    assert cli.run_reconcile(_run_args(config_path, naming_mode="append")) == 0
    assert (movie_dir / "Heat (1995).English.en.srt").is_symlink()


def test_run_reports_failures_with_exit_code(tmp_path, monkeypatch) -> None:
    library = tmp_path / "Movies"
    movie_dir = library / "Heat (1995)"
    (movie_dir / "Subs").mkdir(parents=True)
    (movie_dir / "Heat (1995).mkv").write_bytes(b"")
    (movie_dir / "Subs" / "English.srt").write_text("subs", encoding="utf-8")
    config_path = tmp_path / "subsorter.yaml"
    _write_config(config_path, library)

    def unsupported(src, dst):
        raise NotImplementedError

    monkeypatch.setattr("os.symlink", unsupported)

    assert cli.run_reconcile(_run_args(config_path)) == 1


def test_run_with_missing_config(tmp_path, captured) -> None:
    assert cli.run_reconcile(_run_args(tmp_path / "missing.yaml")) == 2
    assert "Failed to load configuration" in "\n".join(captured)


def test_validate_config_success(tmp_path, captured) -> None:
    config_path = tmp_path / "subsorter.yaml"
    _write_config(config_path, tmp_path)

    exit_code = cli.run_validate_config(argparse.Namespace(config=config_path, command="validate-config"))

    assert exit_code == 0
    assert "Configuration passed validation" in "\n".join(captured)


def test_validate_config_failure(tmp_path, captured) -> None:
    config_path = tmp_path / "subsorter.yaml"
    config_path.write_text("settings:\n  naming_mode: rename\n  libraries: [/m]\n", encoding="utf-8")

    exit_code = cli.run_validate_config(argparse.Namespace(config=config_path, command="validate-config"))

    assert exit_code == 1
    assert "naming_mode" in "\n".join(captured)


def test_name_command(captured) -> None:
    exit_code = cli.main(["name", "/L/M (Y)/M (Y).mkv", "/L/M (Y)/sub/track.en.srt"])

    assert exit_code == 0
    assert captured == ["/L/M (Y)/M (Y).en.srt"]


def test_main_without_command_prints_help(capsys) -> None:
    assert cli.main([]) == 2
    assert "usage" in capsys.readouterr().out.lower()


def test_build_host_selects_adapter(tmp_path) -> None:
    fs_config = build_config({"settings": {"libraries": [str(tmp_path)]}})
    plex_config = build_config(
        {"settings": {"host": "plex", "plex": {"url": "http://plex:32400", "token": "t", "library_names": ["Movies"]}}}
    )

    assert isinstance(cli.build_host(fs_config), FilesystemHost)
    plex_host = cli.build_host(plex_config)
    assert isinstance(plex_host, PlexHost)
    assert plex_host.library_names == ["movies"]
