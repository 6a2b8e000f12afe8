#!/usr/bin/env python3
"""
Local environment override file (.env) handling.

The file holds KEY=VALUE lines. Values are returned as a mapping and merged
into an explicit environment by ``settings``; ``os.environ`` is never
mutated.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Mapping, Optional

logger = logging.getLogger(__name__)


class WorkspaceEnvError(RuntimeError):
    """Raised when an env file cannot be read."""


def _strip_inline_comment(line: str) -> str:
    in_quotes = False
    quote_char = None
    for i, char in enumerate(line):
        if char in ('"', "'") and (i == 0 or line[i - 1] != '\\'):
            if not in_quotes:
                in_quotes = True
                quote_char = char
            elif char == quote_char:
                in_quotes = False
                quote_char = None
        elif char == '#' and not in_quotes and (i == 0 or line[i - 1].isspace()):
            return line[:i].rstrip()
    return line


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def parse_env_file(env_file: Path | str) -> Dict[str, str]:
    """
    Parse a KEY=VALUE file.

    Blank lines and comments are skipped, an ``export`` prefix is accepted,
    surrounding quotes are removed. Lines without '=' are skipped with a
    warning.

    Raises:
        WorkspaceEnvError: if the file does not exist or cannot be read
    """
    path = Path(env_file)
    try:
        text = path.read_text(encoding='utf-8')
    except FileNotFoundError as e:
        raise WorkspaceEnvError(f"Environment file not found: {path}") from e
    except OSError as e:
        raise WorkspaceEnvError(f"Failed to read environment file {path}: {e}") from e

    values: Dict[str, str] = {}
    for line_num, raw in enumerate(text.splitlines(), 1):
        line = raw.strip()
        if not line or line.startswith('#'):
            continue
        if line.startswith('export '):
            line = line[len('export '):].lstrip()

        line = _strip_inline_comment(line)
        if '=' not in line:
            logger.warning(f"Skipping invalid line {line_num} in {path}: '{line}'")
            continue

        key, value = line.split('=', 1)
        key = key.strip()
        if not key:
            logger.warning(f"Skipping line {line_num} in {path}: empty key")
            continue
        values[key] = _unquote(value.strip())

    return values


def load_env_overrides(env_file: Path | str) -> Dict[str, str]:
    """Load the override file if it exists; absence is not an error."""
    path = Path(env_file)
    if not path.is_file():
        logger.debug(f"No local override file at {path}")
        return {}

    values = parse_env_file(path)
    logger.debug(f"Loaded {len(values)} override(s) from {path}: {sorted(values)}")
    return values


def build_environment(
    env_file: Path | str,
    base_env: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Return the process environment overlaid with the override file."""
    env = dict(os.environ if base_env is None else base_env)
    env.update(load_env_overrides(env_file))
    return env
