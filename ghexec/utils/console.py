#!/usr/bin/env python3

import sys
from colorama import Fore, Style, init

# stdout belongs to the executed program, so everything here goes to stderr
init()

_verbose = False


def set_verbose(enabled: bool) -> None:
    global _verbose
    _verbose = enabled


def _emit(message: str) -> None:
    print(message, file=sys.stderr)
    sys.stderr.flush()


def info(message: str) -> None:
    _emit(message)


def success(message: str) -> None:
    _emit(f"{Fore.GREEN}{message}{Style.RESET_ALL}")


def warn(message: str) -> None:
    _emit(f"{Fore.YELLOW}⚠️  {message}{Style.RESET_ALL}")


def error(message: str) -> None:
    _emit(f"{Fore.RED}❌ {message}{Style.RESET_ALL}")


def debug(message: str) -> None:
    if _verbose:
        _emit(f"{Style.DIM}{message}{Style.RESET_ALL}")
