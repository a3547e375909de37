#!/usr/bin/env python3
"""
globscan: Find files and directories matching glob patterns

Common usage:
  globscan 'src/**/*.py'
  globscan 'src/**/*.ts' '!**/*.test.ts'
  globscan --only-directories --deep 1 'src/*'
  globscan --absolute --ignore '**/node_modules' '**/package.json'

Patterns starting with `!` are ignore rules. Quote patterns so the shell does
not expand them. Settings can also be read from `[tool.globscan]` in
pyproject.toml, or from globscan.toml / .globscan.toml.
"""

from __future__ import annotations

import argparse
import asyncio
import importlib.metadata
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from globscan.api import glob, glob_sync
from globscan.config import find_config_file, load_config, merge_cli_with_config
from globscan.errors import GlobError, PatternSyntaxError
from globscan.traversal.types import DEFAULT_CONCURRENCY, GlobOptions


@dataclass
class Options:
    """Command-line options for the globscan tool."""

    patterns: list[str]
    ignore: list[str]
    dot: bool
    absolute: bool
    deep: int | None
    only_directories: bool
    only_files: bool
    cwd: str | None
    case_sensitive: bool
    follow_symlinks: bool
    strict: bool
    gitignore: bool
    concurrency: int
    use_async: bool
    no_config: bool
    verbose: bool
    version: bool

    def to_glob_options(self) -> GlobOptions:
        return GlobOptions(
            ignore=list(self.ignore),
            dot=self.dot,
            absolute=self.absolute,
            deep=self.deep,
            only_directories=self.only_directories,
            only_files=self.only_files,
            cwd=self.cwd,
            case_sensitive=self.case_sensitive,
            follow_symlinks=self.follow_symlinks,
            strict=self.strict,
            gitignore=self.gitignore,
            concurrency=self.concurrency,
        )


# Flags whose presence must win over the config file. Their argparse default is
# None, so a non-None value means the user passed the flag.
_TRACKED_FLAGS = (
    "dot",
    "absolute",
    "deep",
    "only_directories",
    "only_files",
    "case_sensitive",
    "follow_symlinks",
    "strict",
    "gitignore",
    "concurrency",
)


def _parse_args(args: list[str] | None = None) -> tuple[Options, set[str]]:
    """
    Parse command-line arguments.

    Returns a tuple of (options, explicit_flags) where `explicit_flags` tracks
    which flags the user explicitly passed (for config merge precedence).
    """
    # Use the module's docstring as the description
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    description = doc_parts[0]
    epilog = "\n\n".join(doc_parts[1:])

    parser = argparse.ArgumentParser(
        prog="globscan",
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("patterns", nargs="*", type=str, default=[], help="Glob patterns")
    parser.add_argument(
        "--ignore",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Additional ignore pattern. Can be repeated",
    )
    parser.add_argument(
        "--dot", action="store_true", default=None, help="Let wildcards match dotfiles"
    )
    parser.add_argument(
        "--absolute", action="store_true", default=None, help="Print absolute paths"
    )
    parser.add_argument(
        "--deep",
        type=int,
        default=None,
        metavar="N",
        help="Maximum depth below each pattern's base directory (0 = base directory only)",
    )
    type_group = parser.add_mutually_exclusive_group()
    type_group.add_argument(
        "--only-directories",
        action="store_true",
        default=None,
        dest="only_directories",
        help="Only report directories",
    )
    type_group.add_argument(
        "--only-files",
        action="store_true",
        default=None,
        dest="only_files",
        help="Only report non-directories",
    )
    parser.add_argument(
        "--cwd", type=str, default=None, metavar="DIR", help="Base directory for relative patterns"
    )
    parser.add_argument(
        "--ignore-case",
        action="store_false",
        default=None,
        dest="case_sensitive",
        help="Match case-insensitively",
    )
    parser.add_argument(
        "--no-follow-symlinks",
        action="store_false",
        default=None,
        dest="follow_symlinks",
        help="Do not descend into symlinked directories",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Fail on unreadable directories and missing literal paths",
    )
    parser.add_argument(
        "--gitignore", action="store_true", default=None, help="Apply .gitignore rules"
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        metavar="N",
        help=f"Directory reads in flight with --async (default: {DEFAULT_CONCURRENCY})",
    )
    parser.add_argument(
        "--async",
        action="store_true",
        dest="use_async",
        help="Use the asyncio traversal",
    )
    parser.add_argument(
        "--no-config",
        action="store_true",
        dest="no_config",
        help="Do not read globscan settings from config files",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log skipped directories")
    parser.add_argument("--version", action="store_true", help="Show version information and exit")
    opts = parser.parse_args(args)

    explicit_flags = {name for name in _TRACKED_FLAGS if getattr(opts, name) is not None}

    def flag(name: str, default: bool) -> bool:
        value = getattr(opts, name)
        return default if value is None else value

    return (
        Options(
            patterns=opts.patterns,
            ignore=opts.ignore,
            dot=flag("dot", False),
            absolute=flag("absolute", False),
            deep=opts.deep,
            only_directories=flag("only_directories", False),
            only_files=flag("only_files", False),
            cwd=opts.cwd,
            case_sensitive=flag("case_sensitive", True),
            follow_symlinks=flag("follow_symlinks", True),
            strict=flag("strict", False),
            gitignore=flag("gitignore", False),
            concurrency=opts.concurrency if opts.concurrency is not None else DEFAULT_CONCURRENCY,
            use_async=opts.use_async,
            no_config=opts.no_config,
            verbose=opts.verbose,
            version=opts.version,
        ),
        explicit_flags,
    )


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the globscan CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, 1 for pattern or usage errors, 2 for filesystem errors)
    """
    options, explicit_flags = _parse_args(args)

    if options.version:
        try:
            version = importlib.metadata.version("globscan")
            print(f"v{version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    logging.basicConfig(
        level=logging.DEBUG if options.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    if not options.patterns:
        print("Error: No patterns specified. Use --help for more options.", file=sys.stderr)
        return 1

    if not options.no_config:
        config_path = find_config_file(Path(options.cwd) if options.cwd else Path.cwd())
        if config_path:
            merge_cli_with_config(options, load_config(config_path), explicit_flags)

    try:
        glob_options = options.to_glob_options()
        if options.use_async:
            matches = asyncio.run(glob(options.patterns, glob_options))
        else:
            matches = glob_sync(options.patterns, glob_options)
    except (PatternSyntaxError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (GlobError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    for path in matches:
        print(path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
