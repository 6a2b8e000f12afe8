"""
Command composition for docker compose.

Every command has the shape::

    <compose> -f <compose_file> -p <project> <verb> [defaults...] [extra...] [service] [command...]

Extra arguments always precede the service token so flags bind to the verb.
Each token stays a separate argv element; nothing is joined into a shell
string.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from . import config_constants as const
from .modes import ModeContext

MASK = '***'


def compose_base(context: ModeContext, compose_prefix: Sequence[str] = tuple(const.COMPOSE_COMMAND)) -> list[str]:
    return [*compose_prefix, '-f', context.compose_file, '-p', context.project_name]


def compose_command(
    context: ModeContext,
    verb: str,
    service: Optional[str] = None,
    extra_args: Iterable[str] = (),
    default_args: Iterable[str] = (),
    command: Iterable[str] = (),
    compose_prefix: Sequence[str] = tuple(const.COMPOSE_COMMAND),
) -> list[str]:
    argv = compose_base(context, compose_prefix)
    argv.append(verb)
    argv.extend(default_args)
    argv.extend(extra_args)
    if service:
        argv.append(service)
    argv.extend(command)
    return argv


def format_command(argv: Sequence[str], secrets: Iterable[Optional[str]] = ()) -> str:
    """Render argv for log output with secret values replaced."""
    hidden = {secret for secret in secrets if secret}
    return ' '.join(MASK if token in hidden else token for token in argv)
