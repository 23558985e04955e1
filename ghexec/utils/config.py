#!/usr/bin/env python3

import os
import yaml
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from ..core.errors import InvalidInput
from ..core.models import LATEST
from .cache import CACHE_DIR
from .system import get_real_home

# Default paths
DEFAULT_CONFIG_NAME = "github-exec.yaml"
USER_CONFIG_PATH = os.path.join(get_real_home(), ".config/github-exec/config.yaml")
SYSTEM_CONFIG_PATH = "/etc/github-exec/config.yaml"
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = None  # block indefinitely, like curl without --max-time


@dataclass(frozen=True)
class ExecConfig:
    """Every caller-supplied option for one invocation"""

    repo: str
    version: str = LATEST
    force: bool = False
    cache_dir: str = CACHE_DIR
    no_cache: bool = False
    args: Tuple[str, ...] = field(default_factory=tuple)
    timeout: Optional[float] = DEFAULT_TIMEOUT
    api_url: str = DEFAULT_API_URL
    token: Optional[str] = None


def find_config_file(config_path: Optional[str] = None) -> Optional[str]:
    """
    Find the configuration file by checking multiple locations:
    1. Specified path from command line
    2. Current directory (github-exec.yaml)
    3. User config directory (~/.config/github-exec/config.yaml)
    4. System-wide location (/etc/github-exec/config.yaml)
    """
    if config_path:
        if not os.path.isfile(config_path):
            raise InvalidInput(f"Config file not found at: {config_path}")
        return config_path

    for candidate in (
        os.path.join(os.getcwd(), DEFAULT_CONFIG_NAME),
        USER_CONFIG_PATH,
        SYSTEM_CONFIG_PATH,
    ):
        if os.path.isfile(candidate):
            return candidate

    return None


def load_options(config_path: Optional[str]) -> Dict[str, Any]:
    """Load the options mapping from a config file, empty if there is none"""
    if config_path is None:
        return {}

    try:
        with open(config_path, "r") as file:
            config = yaml.safe_load(file) or {}
    except OSError as e:
        raise InvalidInput(f"Failed to read config file {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise InvalidInput(f"Error parsing YAML in {config_path}: {e}") from e

    if not isinstance(config, dict):
        raise InvalidInput(f"Config file {config_path} must contain a mapping")

    options = config.get("options") or {}
    if not isinstance(options, dict):
        raise InvalidInput(f"'options' in {config_path} must be a mapping")

    timeout = options.get("timeout")
    if timeout is not None and (
        isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0
    ):
        raise InvalidInput(f"'timeout' in {config_path} must be a positive number")

    for key in ("cache_dir", "api_url"):
        if key in options and not isinstance(options[key], str):
            raise InvalidInput(f"'{key}' in {config_path} must be a string")

    return options


def build_config(
    repo: str,
    args: Tuple[str, ...] = (),
    version: Optional[str] = None,
    force: bool = False,
    cache_dir: Optional[str] = None,
    no_cache: bool = False,
    config_path: Optional[str] = None,
) -> ExecConfig:
    """Merge command-line values over config file values over defaults"""
    options = load_options(find_config_file(config_path))

    resolved_cache_dir = cache_dir or options.get("cache_dir") or CACHE_DIR
    return ExecConfig(
        repo=repo,
        version=version or LATEST,
        force=force,
        cache_dir=os.path.expanduser(resolved_cache_dir),
        no_cache=no_cache,
        args=tuple(args),
        timeout=options.get("timeout", DEFAULT_TIMEOUT),
        api_url=options.get("api_url", DEFAULT_API_URL).rstrip("/"),
        token=os.environ.get("GITHUB_TOKEN") or None,
    )
