#!/usr/bin/env python3

from .cli import run_cli, parse_args
