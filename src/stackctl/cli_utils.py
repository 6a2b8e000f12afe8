#!/usr/bin/env python3
"""Shared CLI helpers."""

from __future__ import annotations

import shlex
from importlib.metadata import PackageNotFoundError, version as package_version
from typing import Mapping, Optional


def get_cli_version() -> str:
    try:
        return package_version("stackctl")
    except PackageNotFoundError:
        from . import __version__

        return __version__


def split_args_variable(environ: Mapping[str, str], name: str = "ARGS") -> list[str]:
    """Split an ARGS-style environment variable into argv tokens."""
    raw = environ.get(name, "")
    if not raw.strip():
        return []
    return shlex.split(raw)


def env_value(environ: Mapping[str, str], name: str) -> Optional[str]:
    """Return a stripped environment value, or None when unset/blank."""
    value = environ.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None
