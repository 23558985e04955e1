#!/usr/bin/env python3

import os
import platform
import shlex
import subprocess
import sys
from typing import Dict, Optional, Sequence

from ..core.errors import FilesystemError
from ..core.models import PlatformHint

OS_RELEASE_PATH = "/etc/os-release"

# Generic kernel-family tokens, in match order
KERNEL_TOKENS = {
    "linux": ("linux",),
    "darwin": ("darwin", "macos"),
    "windows": ("windows",),
}


def get_real_home() -> str:
    """Get the real user's home directory even when running with sudo"""
    if "SUDO_USER" in os.environ and os.environ.get("HOME") == "/root":
        real_user = os.environ["SUDO_USER"]
        return os.path.expanduser(f"~{real_user}")
    return os.path.expanduser("~")


def read_os_release(path: str = OS_RELEASE_PATH) -> Dict[str, str]:
    """Parse an os-release file into a dict, empty if it cannot be read"""
    fields = {}
    try:
        with open(path, "r") as f:
            lines = f.readlines()
    except OSError:
        return fields

    for line in lines:
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        try:
            tokens = shlex.split(value)
        except ValueError:
            continue
        fields[key.strip()] = tokens[0] if tokens else ""
    return fields


def _kernel_family(system: str) -> str:
    s = system.lower()
    if s.startswith("win"):
        return "windows"
    if s.startswith("darwin"):
        return "darwin"
    return "linux"


def _normalize_arch(machine: str) -> Optional[str]:
    m = machine.lower()
    if m in ("x86_64", "amd64", "x64"):
        return "x86_64"
    if m in ("aarch64", "arm64"):
        return "aarch64"
    return m or None


def detect_platform(
    os_release_path: str = OS_RELEASE_PATH,
    system: Optional[str] = None,
    machine: Optional[str] = None,
) -> PlatformHint:
    """Describe the invoking machine for asset selection"""
    family = _kernel_family(system if system is not None else platform.system())
    arch = _normalize_arch(machine if machine is not None else platform.machine())

    distro = None
    distro_version = None
    if family == "linux":
        release = read_os_release(os_release_path)
        distro_id = release.get("ID", "").strip().lower()
        if distro_id:
            distro = distro_id
            version_id = release.get("VERSION_ID", "").strip().lower()
            if version_id:
                distro_version = f"{distro_id}{version_id}"

    return PlatformHint(
        distro_version=distro_version,
        distro=distro,
        kernel_tokens=KERNEL_TOKENS[family],
        arch=arch,
    )


def exec_executable(path: str, args: Sequence[str]) -> None:
    """Replace the current process with the resolved executable"""
    sys.stdout.flush()
    sys.stderr.flush()
    try:
        os.execv(path, [path] + list(args))
    except OSError as e:
        raise FilesystemError(
            f"Failed to execute {path}: {e}", context={"path": path}
        ) from e


def run_executable(path: str, args: Sequence[str]) -> int:
    """Run the resolved executable as a child and return its exit code"""
    try:
        completed = subprocess.run([path] + list(args))
    except OSError as e:
        raise FilesystemError(
            f"Failed to execute {path}: {e}", context={"path": path}
        ) from e
    if completed.returncode < 0:
        return 128 - completed.returncode
    return completed.returncode
