"""CLI integration tests for file discovery."""

from __future__ import annotations

import errno
from pathlib import Path

import pytest

from globscan.cli import main
from globscan.traversal import fs


def _make_tree(root: Path) -> None:
    """Create a minimal project directory tree for testing."""
    (root / "README.md").write_text("# Root\n")
    docs = root / "docs"
    docs.mkdir()
    (docs / "guide.md").write_text("# Guide\n")
    (docs / "api.md").write_text("# API\n")
    (root / "code.py").write_text("print('hello')\n")
    nm = root / "node_modules" / "pkg"
    nm.mkdir(parents=True)
    (nm / "README.md").write_text("# Excluded by ignore\n")
    venv = root / ".venv" / "lib"
    venv.mkdir(parents=True)
    (venv / "README.md").write_text("# Skipped as a dot directory\n")


def _lines(out: str) -> list[str]:
    return [line for line in out.split("\n") if line]


def test_prints_matches_in_order(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    _make_tree(tmp_path)
    monkeypatch.chdir(tmp_path)
    assert main(["**/*.md", "!**/node_modules"]) == 0
    out = capsys.readouterr().out
    assert _lines(out) == ["README.md", "docs/api.md", "docs/guide.md"]


def test_ignore_flag_and_cwd(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _make_tree(tmp_path)
    assert main(["--cwd", str(tmp_path), "--ignore", "docs", "--ignore", "node_modules", "**/*.md"]) == 0
    assert _lines(capsys.readouterr().out) == ["README.md"]


def test_dot_flag(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _make_tree(tmp_path)
    assert main(["--cwd", str(tmp_path), "--dot", "--only-files", ".venv/**"]) == 0
    assert _lines(capsys.readouterr().out) == [".venv/lib/README.md"]


def test_only_directories_and_deep(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _make_tree(tmp_path)
    assert main(["--cwd", str(tmp_path), "--only-directories", "--deep", "0", "**"]) == 0
    assert _lines(capsys.readouterr().out) == ["docs", "node_modules"]


def test_async_flag_gives_same_output(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _make_tree(tmp_path)
    assert main(["--cwd", str(tmp_path), "**/*.md"]) == 0
    sync_out = capsys.readouterr().out
    assert main(["--cwd", str(tmp_path), "--async", "--concurrency", "2", "**/*.md"]) == 0
    assert capsys.readouterr().out == sync_out


def test_gitignore_flag(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "keep.md").write_text("# Keep\n")
    (tmp_path / ".gitignore").write_text("ignored/\n")
    ignored = tmp_path / "ignored"
    ignored.mkdir()
    (ignored / "skip.md").write_text("# Skip\n")

    assert main(["--cwd", str(tmp_path), "--gitignore", "**/*.md"]) == 0
    assert _lines(capsys.readouterr().out) == ["keep.md"]


def test_config_file_applies(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _make_tree(tmp_path)
    (tmp_path / "globscan.toml").write_text('ignore = ["**/node_modules", "docs"]\n')
    assert main(["--cwd", str(tmp_path), "**/*.md"]) == 0
    assert _lines(capsys.readouterr().out) == ["README.md"]

    assert main(["--cwd", str(tmp_path), "--no-config", "**/*.md"]) == 0
    assert "docs/guide.md" in capsys.readouterr().out


def test_no_patterns_is_an_error(capsys: pytest.CaptureFixture[str]) -> None:
    assert main([]) == 1
    assert "No patterns specified" in capsys.readouterr().err


def test_bad_pattern_exit_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--cwd", str(tmp_path), "src/[abc"]) == 1
    assert "unterminated character class" in capsys.readouterr().err


def test_strict_missing_path_exit_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--cwd", str(tmp_path), "--no-config", "missing.txt"]) == 0
    assert capsys.readouterr().out == ""
    assert main(["--cwd", str(tmp_path), "--no-config", "--strict", "missing.txt"]) == 2
    assert "missing.txt" in capsys.readouterr().err


def test_filesystem_error_exit_code(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    _make_tree(tmp_path)

    def broken(path: str, follow_symlinks: bool = True) -> fs.DirListing:
        raise OSError(errno.EIO, "Input/output error", path)

    monkeypatch.setattr(fs, "read_directory", broken)
    assert main(["--cwd", str(tmp_path), "--no-config", "**/*.md"]) == 2
    assert "Input/output error" in capsys.readouterr().err
