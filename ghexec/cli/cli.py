#!/usr/bin/env python3

import argparse
import sys
from typing import List, Optional, Sequence, Tuple

from .. import __version__
from ..core.errors import GithubExecError
from ..core.fetcher import prepare_executable
from ..core.github import GitHubClient
from ..utils import console
from ..utils.cache import clear_cache, ephemeral_cache_dir, get_cache_info
from ..utils.config import build_config
from ..utils.system import detect_platform, exec_executable, run_executable

USAGE = """\
github-exec - Execute binaries from GitHub releases

Usage: github-exec [OPTIONS] <user/repo> [args...]

Options:
  --version VERSION    Use specific version instead of latest
  --force              Force redownload
  --help               Show this help
  --cache-dir DIR      Custom cache directory (default: ~/.cache/github-exec)
  --no-cache           Use a temporary cache removed when the program exits
  --config FILE        Configuration file (default: ./github-exec.yaml,
                       ~/.config/github-exec/config.yaml)
  --verbose            Show debug output
  --clear-cache        Remove every cached executable and exit
  --cache-info         Show cache location and size and exit

Examples:
  github-exec zacuke/run-node index.js
  github-exec --version v1.2.3 zacuke/some-tool --help
"""

# Options that consume the following argument
VALUE_OPTIONS = ("--version", "--cache-dir", "--config")


class _UsageAction(argparse.Action):
    def __init__(self, option_strings, dest, **kwargs):
        super().__init__(option_strings, dest, nargs=0, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        parser.exit_with_usage()


class ArgumentParser(argparse.ArgumentParser):
    """Parser that shows the full usage and exits 1 on any argument problem"""

    def exit_with_usage(self, message: Optional[str] = None):
        if message:
            console.error(message)
        sys.stderr.write(USAGE)
        sys.exit(1)

    def error(self, message):
        self.exit_with_usage(message)


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="github-exec",
        description=f"github-exec v{__version__} - Execute binaries from GitHub releases",
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument("--help", action=_UsageAction, help="Show this help")
    parser.add_argument("--version", help="Use specific version instead of latest")
    parser.add_argument("--force", action="store_true", help="Force redownload")
    parser.add_argument("--cache-dir", help="Custom cache directory")
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Use a temporary cache removed when the program exits",
    )
    parser.add_argument("--config", help="Configuration file")
    parser.add_argument("--verbose", action="store_true", help="Show debug output")
    parser.add_argument(
        "--clear-cache",
        action="store_true",
        help="Remove every cached executable and exit",
    )
    parser.add_argument(
        "--cache-info",
        action="store_true",
        help="Show cache information and statistics",
    )
    return parser


def split_argv(argv: Sequence[str]) -> Tuple[List[str], List[str]]:
    """Split argv into our options and the repo plus pass-through arguments.

    Option parsing stops at the first positional argument (or ``--``);
    everything from there on belongs to the repo and its executable.
    """
    argv = list(argv)
    i = 0
    while i < len(argv):
        token = argv[i]
        if token == "--":
            return argv[:i], argv[i + 1:]
        if not token.startswith("-") or token == "-":
            break
        if token in VALUE_OPTIONS:
            i += 2
        else:
            i += 1
    return argv[:i], argv[i:]


def parse_args(argv: Optional[Sequence[str]] = None):
    """Parse command-line arguments"""
    if argv is None:
        argv = sys.argv[1:]
    options, rest = split_argv(argv)
    parser = build_parser()
    args = parser.parse_args(options)
    args.repo = rest[0] if rest else None
    args.args = tuple(rest[1:])
    if args.repo is None and not (args.clear_cache or args.cache_info):
        parser.exit_with_usage()
    return args


def handle_cache_info(cache_dir: str) -> None:
    """Handle the --cache-info command"""
    cache_info = get_cache_info(cache_dir)
    print(f"Cache directory: {cache_info['path']}")

    if cache_info["exists"]:
        print(f"Cache size: {cache_info['size_bytes'] / (1024*1024):.2f} MB")
        print(f"Cached executables: {cache_info['entries']}")
    else:
        print("Cache directory does not exist yet")


def run(argv: Optional[Sequence[str]] = None) -> int:
    """Resolve and run; returns an exit code unless the process is replaced"""
    args = parse_args(argv)
    console.set_verbose(args.verbose)

    if args.clear_cache or args.cache_info:
        config = build_config(
            repo="", cache_dir=args.cache_dir, config_path=args.config
        )
        if args.clear_cache:
            if clear_cache(config.cache_dir):
                console.success("✅ Cache successfully cleared")
            else:
                console.warn(f"No cache directory found at {config.cache_dir}")
        if args.cache_info:
            handle_cache_info(config.cache_dir)
        return 0

    config = build_config(
        repo=args.repo,
        args=args.args,
        version=args.version,
        force=args.force,
        cache_dir=args.cache_dir,
        no_cache=args.no_cache,
        config_path=args.config,
    )
    client = GitHubClient(api_url=config.api_url, token=config.token, timeout=config.timeout)
    hint = detect_platform()

    if config.no_cache:
        with ephemeral_cache_dir() as cache_root:
            plan = prepare_executable(config, client, hint, cache_root=cache_root)
            console.info(f"🚀 Executing: {' '.join(plan.argv)}")
            return run_executable(plan.path, plan.args)

    plan = prepare_executable(config, client, hint)
    console.info(f"🚀 Executing: {' '.join(plan.argv)}")
    exec_executable(plan.path, plan.args)
    return 0


def run_cli():
    """Run the command-line interface"""
    try:
        code = run()
    except GithubExecError as e:
        console.error(f"Error: {e}")
        sys.exit(1)
    except OSError as e:
        console.error(f"Error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        console.error("Interrupted")
        sys.exit(130)
    sys.exit(code)


if __name__ == "__main__":
    run_cli()
