"""Tests for config file loading and merging."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from globscan.cli import Options, _parse_args
from globscan.config import GlobscanConfig, find_config_file, load_config, merge_cli_with_config


def test_find_config_globscan_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "globscan.toml"
    config_file.write_text("dot = true\n")
    result = find_config_file(tmp_path)
    assert result == config_file


def test_find_config_dot_globscan_toml_takes_precedence(tmp_path: Path) -> None:
    (tmp_path / "globscan.toml").write_text("dot = true\n")
    dot_config = tmp_path / ".globscan.toml"
    dot_config.write_text("dot = false\n")
    result = find_config_file(tmp_path)
    assert result == dot_config


def test_find_config_pyproject_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "pyproject.toml"
    config_file.write_text("[tool.globscan]\ndeep = 3\n")
    result = find_config_file(tmp_path)
    assert result == config_file


def test_find_config_pyproject_without_section_skipped(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text("[tool.ruff]\nline-length = 100\n")
    result = find_config_file(tmp_path)
    assert result is None


def test_find_config_walks_up(tmp_path: Path) -> None:
    config_file = tmp_path / "globscan.toml"
    config_file.write_text("dot = true\n")
    subdir = tmp_path / "sub" / "deep"
    subdir.mkdir(parents=True)
    result = find_config_file(subdir)
    assert result == config_file


def test_load_config_globscan_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "globscan.toml"
    config_file.write_text('dot = true\ndeep = 2\nignore = ["**/node_modules"]\n')
    config = load_config(config_file)
    assert config.dot is True
    assert config.deep == 2
    assert config.ignore == ["**/node_modules"]
    # Unset fields should be None (not set)
    assert config.absolute is None


def test_load_config_pyproject_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "pyproject.toml"
    config_file.write_text("[tool.globscan]\nabsolute = true\ngitignore = true\n")
    config = load_config(config_file)
    assert config.absolute is True
    assert config.gitignore is True


def test_load_config_kebab_case_and_sections(tmp_path: Path) -> None:
    config_file = tmp_path / "globscan.toml"
    config_file.write_text(
        "[filters]\n"
        "only-files = true\n"
        "case-sensitive = false\n"
        'ignore = "dist"\n'
        "\n"
        "[traversal]\n"
        "follow-symlinks = false\n"
        "concurrency = 4\n"
        "unknown-key = 1\n"
    )
    config = load_config(config_file)
    assert config.only_files is True
    assert config.case_sensitive is False
    assert config.ignore == ["dist"]
    assert config.follow_symlinks is False
    assert config.concurrency == 4


def _options(**kwargs: object) -> Options:
    options, _ = _parse_args(["*.py"])
    for key, value in kwargs.items():
        setattr(options, key, value)
    return options


def test_merge_no_config() -> None:
    opts = _options(dot=False)
    result = merge_cli_with_config(opts, config=None, explicit_flags=set())
    assert result.dot is False


def test_merge_config_overrides_defaults() -> None:
    opts = _options()
    config = GlobscanConfig(dot=True, deep=1, gitignore=True)
    result = merge_cli_with_config(opts, config=config, explicit_flags=set())
    assert result.dot is True
    assert result.deep == 1
    assert result.gitignore is True


def test_merge_explicit_cli_overrides_config() -> None:
    opts = _options(deep=5)
    config = GlobscanConfig(deep=1)
    result = merge_cli_with_config(opts, config=config, explicit_flags={"deep"})
    assert result.deep == 5


def test_merge_ignore_is_additive() -> None:
    opts = _options(ignore=["build"])
    config = GlobscanConfig(ignore=["**/node_modules"])
    result = merge_cli_with_config(opts, config=config, explicit_flags=set())
    assert result.ignore == ["**/node_modules", "build"]


def test_parse_args_tracks_explicit_flags() -> None:
    options, explicit = _parse_args(["--dot", "--deep", "0", "--ignore-case", "src/*"])
    assert options.patterns == ["src/*"]
    assert options.dot is True
    assert options.deep == 0
    assert options.case_sensitive is False
    assert explicit == {"dot", "deep", "case_sensitive"}
    glob_options = options.to_glob_options()
    assert glob_options.deep == 0
    assert glob_options.case_sensitive is False


def test_load_config_warns_on_unknown_keys(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    config_file = tmp_path / "globscan.toml"
    config_file.write_text('dot = true\nwidth = 80\n[output]\nformat = "json"\n')
    with caplog.at_level(logging.WARNING, logger="globscan.config"):
        config = load_config(config_file)
    assert config.dot is True
    assert "width" in caplog.text
    assert "output" in caplog.text


def test_pyproject_without_section_loads_empty(tmp_path: Path) -> None:
    config_file = tmp_path / "pyproject.toml"
    config_file.write_text("[tool.ruff]\nline-length = 100\n")
    assert load_config(config_file) == GlobscanConfig()
