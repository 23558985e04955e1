#!/usr/bin/env python3

"""
github-exec - Execute binaries from GitHub releases

Usage:
  github-exec [options] <user/repo> [args...]

Options:
  --version VERSION  Use specific version instead of latest
  --force            Force redownload
  --cache-dir DIR    Custom cache directory (default: ~/.cache/github-exec)
  --no-cache         Use a temporary cache removed when the program exits
  --config FILE      Configuration file
  --help             Show this help message

Configuration file is searched in the following locations:
1. Specified path via --config
2. Current directory (github-exec.yaml)
3. User config directory (~/.config/github-exec/config.yaml)
4. System-wide location (/etc/github-exec/config.yaml)
"""

from ghexec import run_cli

if __name__ == "__main__":
    run_cli()
