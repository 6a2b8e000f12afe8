"""Mode selection: dev/prod -> (compose file, project namespace)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from . import config_constants as const
from .settings import Settings

logger = logging.getLogger(__name__)


class Mode(str, Enum):
    DEV = const.MODE_DEV
    PROD = const.MODE_PROD


@dataclass(frozen=True)
class ModeContext:
    mode: Mode
    compose_file: str
    project_name: str
    volumes: tuple[str, ...] = ()


def parse_mode(token: Optional[str]) -> Mode:
    """
    Map a mode token to a Mode.

    Only 'prod' selects production. Anything else, including unknown tokens,
    falls back to development.
    """
    normalized = (token or '').strip().lower()
    if normalized == Mode.PROD.value:
        return Mode.PROD
    if normalized and normalized != Mode.DEV.value:
        logger.warning(f"Unknown mode '{token}', falling back to '{Mode.DEV.value}'")
    return Mode.DEV


def resolve_mode(token: Optional[str], settings: Settings) -> ModeContext:
    mode = parse_mode(token)
    config = settings.mode_config(mode.value)
    return ModeContext(
        mode=mode,
        compose_file=config.compose_file,
        project_name=config.project_name,
        volumes=config.volumes,
    )
