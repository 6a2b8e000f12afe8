#!/usr/bin/env python3
"""
Action and alias catalog.

The catalog is a static registry: each action binds a compose verb plus its
default arguments, or names a native handler (backup, reset, health, ...).
Aliases pre-bind a mode and/or a service onto an action. Dispatch looks names
up here; there is no per-name branching.

Precedence for mode and service (highest first):
    explicit CLI flag > alias binding > environment (MODE / SERVICE) > action default
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from . import config_constants as const
from .compose import compose_command
from .errors import UnknownActionError
from .modes import ModeContext
from .settings import Settings

logger = logging.getLogger(__name__)

SECTION_SERVICES = 'Docker Services'
SECTION_DEV = 'Convenience Aliases (Development)'
SECTION_PROD = 'Convenience Aliases (Production)'
SECTION_DATABASE = 'Database Operations'
SECTION_CLEANUP = 'Cleanup'
SECTION_UTILITIES = 'Utilities'

SECTIONS = (
    SECTION_SERVICES,
    SECTION_DEV,
    SECTION_PROD,
    SECTION_DATABASE,
    SECTION_CLEANUP,
    SECTION_UTILITIES,
)


@dataclass(frozen=True)
class ActionSpec:
    name: str
    description: str
    section: str
    verb: Optional[str] = None
    default_args: tuple[str, ...] = ()
    default_service: Optional[str] = None
    command: tuple[str, ...] = ()
    handler: Optional[str] = None
    banner: Optional[str] = None
    # False: the action always covers the whole stack of its mode
    accepts_service: bool = True

    @property
    def is_native(self) -> bool:
        return self.handler is not None


@dataclass(frozen=True)
class AliasSpec:
    name: str
    action: str
    description: str
    section: str
    mode: Optional[str] = None
    service: Optional[str] = None


@dataclass(frozen=True)
class Invocation:
    name: str
    spec: ActionSpec
    mode: Optional[str]
    service: Optional[str]
    extra_args: tuple[str, ...] = ()


def _catalog(*specs):
    return {spec.name: spec for spec in specs}


ACTIONS: dict[str, ActionSpec] = _catalog(
    ActionSpec('up', 'Start services (detached)', SECTION_SERVICES,
               verb='up', default_args=('-d',), banner='Starting services in {mode} mode...'),
    ActionSpec('down', 'Stop services', SECTION_SERVICES,
               verb='down', banner='Stopping services in {mode} mode...'),
    ActionSpec('build', 'Build images', SECTION_SERVICES,
               verb='build', banner='Building images in {mode} mode...'),
    ActionSpec('logs', 'Follow service logs', SECTION_SERVICES,
               verb='logs', default_args=('-f',)),
    ActionSpec('restart', 'Restart services', SECTION_SERVICES, verb='restart'),
    ActionSpec('shell', 'Open a shell in a container (default: backend)', SECTION_SERVICES,
               verb='exec', default_service=const.DEFAULT_SHELL_SERVICE,
               command=tuple(const.SHELL_COMMAND), banner='Opening shell in {service}...'),
    ActionSpec('ps', 'Show running containers', SECTION_SERVICES, verb='ps'),
    ActionSpec('backup', 'Dump the database to the backups directory', SECTION_DATABASE,
               handler='backup'),
    ActionSpec('reset', 'Destroy the database volume for the mode (asks first)', SECTION_DATABASE,
               handler='reset'),
    ActionSpec('clean', 'Remove containers and networks for the mode', SECTION_CLEANUP,
               verb='down', default_args=('--remove-orphans',), accepts_service=False),
    ActionSpec('clean-all', 'Remove containers, images and volumes for BOTH modes (asks first)',
               SECTION_CLEANUP, handler='clean-all'),
    ActionSpec('clean-volumes', 'Remove the named data volumes of both modes (asks first)',
               SECTION_CLEANUP, handler='clean-volumes'),
    ActionSpec('health', 'Check gateway and backend health', SECTION_UTILITIES, handler='health'),
    ActionSpec('config', 'Print the resolved configuration', SECTION_UTILITIES, handler='config'),
    ActionSpec('help', 'Show this help', SECTION_UTILITIES, handler='help'),
)

MONGO_SHELL = ActionSpec(
    'mongo-shell', 'Open an authenticated mongosh session', SECTION_DEV,
    handler='mongo-shell', banner='Connecting to MongoDB shell...',
)

ALIASES: dict[str, AliasSpec] = _catalog(
    AliasSpec('dev-up', 'up', 'Start services in dev mode', SECTION_DEV, mode=const.MODE_DEV),
    AliasSpec('dev-down', 'down', 'Stop services in dev mode', SECTION_DEV, mode=const.MODE_DEV),
    AliasSpec('dev-build', 'build', 'Build images in dev mode', SECTION_DEV, mode=const.MODE_DEV),
    AliasSpec('dev-logs', 'logs', 'Follow logs in dev mode', SECTION_DEV, mode=const.MODE_DEV),
    AliasSpec('dev-restart', 'restart', 'Restart services in dev mode', SECTION_DEV, mode=const.MODE_DEV),
    AliasSpec('dev-shell', 'shell', 'Open a backend shell in dev mode', SECTION_DEV,
              mode=const.MODE_DEV, service='backend'),
    AliasSpec('dev-ps', 'ps', 'Show dev containers', SECTION_DEV, mode=const.MODE_DEV),
    AliasSpec('backend-shell', 'shell', 'Open a shell in the backend container', SECTION_DEV,
              service='backend'),
    AliasSpec('gateway-shell', 'shell', 'Open a shell in the gateway container', SECTION_DEV,
              service='gateway'),
    AliasSpec('mongo-shell', MONGO_SHELL.name, MONGO_SHELL.description, SECTION_DEV),
    AliasSpec('prod-up', 'up', 'Start services in prod mode', SECTION_PROD, mode=const.MODE_PROD),
    AliasSpec('prod-down', 'down', 'Stop services in prod mode', SECTION_PROD, mode=const.MODE_PROD),
    AliasSpec('prod-build', 'build', 'Build images in prod mode', SECTION_PROD, mode=const.MODE_PROD),
    AliasSpec('prod-logs', 'logs', 'Follow logs in prod mode', SECTION_PROD, mode=const.MODE_PROD),
    AliasSpec('prod-restart', 'restart', 'Restart services in prod mode', SECTION_PROD,
              mode=const.MODE_PROD),
    AliasSpec('db-backup', 'backup', 'Same as backup', SECTION_DATABASE),
    AliasSpec('db-reset', 'reset', 'Same as reset', SECTION_DATABASE),
    AliasSpec('status', 'ps', 'Same as ps', SECTION_UTILITIES),
)

_TARGETS: dict[str, ActionSpec] = {**ACTIONS, MONGO_SHELL.name: MONGO_SHELL}


def catalog_names() -> list[str]:
    """All invocable names, actions first, in declaration order."""
    return [*ACTIONS, *ALIASES]


def _first(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value:
            return value
    return None


def resolve_invocation(
    name: str,
    mode: Optional[str] = None,
    service: Optional[str] = None,
    extra_args: Iterable[str] = (),
    env_mode: Optional[str] = None,
    env_service: Optional[str] = None,
) -> Invocation:
    """Bind a catalog name plus caller overrides into an Invocation."""
    alias = ALIASES.get(name)
    if alias is not None:
        spec = _TARGETS[alias.action]
        if mode and alias.mode and mode.strip().lower() != alias.mode:
            logger.warning(
                f"'{name}' is bound to mode '{alias.mode}' but --mode {mode} was given; using '{mode}'"
            )
        resolved_mode = _first(mode, alias.mode, env_mode)
        resolved_service = _first(service, alias.service, env_service, spec.default_service)
    elif name in ACTIONS:
        spec = ACTIONS[name]
        resolved_mode = _first(mode, env_mode)
        resolved_service = _first(service, env_service, spec.default_service)
    else:
        raise UnknownActionError(f"Unknown action '{name}'. Run 'stackctl help' for the list.")

    if not spec.accepts_service and resolved_service is not None:
        if service:
            logger.warning(f"'{name}' acts on every service; ignoring --service {service}")
        resolved_service = None

    return Invocation(
        name=name,
        spec=spec,
        mode=resolved_mode,
        service=resolved_service,
        extra_args=tuple(extra_args),
    )


def build_action_command(invocation: Invocation, context: ModeContext, settings: Settings) -> list[str]:
    """Compose the docker compose argv for a verb-bound action."""
    spec = invocation.spec
    if spec.verb is None:
        raise ValueError(f"Action '{spec.name}' has no compose verb")
    return compose_command(
        context,
        spec.verb,
        service=invocation.service,
        extra_args=invocation.extra_args,
        default_args=spec.default_args,
        command=spec.command,
        compose_prefix=settings.compose_command,
    )


def mongo_shell_command(
    context: ModeContext,
    settings: Settings,
    extra_args: Iterable[str] = (),
) -> list[str]:
    """
    Compose an authenticated mongosh session inside the database container.

    Raises:
        ConfigurationError: when credentials are not set
    """
    creds = settings.credentials()
    return compose_command(
        context,
        'exec',
        service=settings.database_service,
        extra_args=extra_args,
        command=(const.DATABASE_CLIENT, '-u', creds.username, '-p', creds.password),
        compose_prefix=settings.compose_command,
    )
