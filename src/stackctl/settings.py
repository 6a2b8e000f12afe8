#!/usr/bin/env python3
"""
Resolved configuration for one stackctl invocation.

Sources, lowest precedence first:
1. Built-in defaults (config_constants)
2. stackctl.toml (Jinja2 template rendered with ``env``, then TOML)
3. Process environment overlaid with the local .env file

The result is a frozen ``Settings`` object handed to every component
explicitly. Nothing here writes to ``os.environ``.
"""

from __future__ import annotations

import copy
import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from . import config_constants as const
from .cli_utils import env_value
from .errors import ConfigurationError
from .workspace_env import WorkspaceEnvError, build_environment

logger = logging.getLogger(__name__)

MASK = '***'

DEFAULT_CONFIG: Dict[str, Any] = {
    'stackctl': {
        'compose_command': list(const.COMPOSE_COMMAND),
        'backup_dir': const.BACKUP_DIR,
        'log_level': const.DEFAULT_LOG_LEVEL,
    },
    'database': {
        'service': const.DATABASE_SERVICE,
    },
    'health': {
        'host': const.HEALTH_HOST,
        'gateway_path': const.GATEWAY_HEALTH_PATH,
        'backend_path': const.BACKEND_HEALTH_PATH,
        'timeout': const.HEALTH_TIMEOUT_SECONDS,
    },
    'modes': {
        const.MODE_DEV: {
            'compose_file': const.COMPOSE_FILE_DEV,
            'project_name': const.PROJECT_NAME_DEV,
            'volumes': list(const.VOLUMES_DEV),
        },
        const.MODE_PROD: {
            'compose_file': const.COMPOSE_FILE_PROD,
            'project_name': const.PROJECT_NAME_PROD,
            'volumes': list(const.VOLUMES_PROD),
        },
    },
}


@dataclass(frozen=True)
class ModeConfig:
    compose_file: str
    project_name: str
    volumes: tuple[str, ...] = ()


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class Settings:
    root: Path
    modes: Mapping[str, ModeConfig]
    compose_command: tuple[str, ...] = tuple(const.COMPOSE_COMMAND)
    database_service: str = const.DATABASE_SERVICE
    backup_dir: Path = Path(const.BACKUP_DIR)
    health_host: str = const.HEALTH_HOST
    gateway_health_path: str = const.GATEWAY_HEALTH_PATH
    backend_health_path: str = const.BACKEND_HEALTH_PATH
    health_timeout: float = const.HEALTH_TIMEOUT_SECONDS
    gateway_port: Optional[int] = None
    db_username: Optional[str] = field(default=None, repr=False)
    db_password: Optional[str] = field(default=None, repr=False)
    log_level: str = const.DEFAULT_LOG_LEVEL
    environ: Mapping[str, str] = field(default_factory=dict, repr=False)

    def credentials(self) -> Credentials:
        """Return database credentials or fail before any external call."""
        missing = []
        if not self.db_username:
            missing.append(const.ENV_DB_USERNAME)
        if not self.db_password:
            missing.append(const.ENV_DB_PASSWORD)
        if missing:
            raise ConfigurationError(
                f"Missing database credentials: {', '.join(missing)} "
                f"(set them in the environment or in {const.LOCAL_ENV_FILE})"
            )
        return Credentials(self.db_username, self.db_password)

    def require_gateway_port(self) -> int:
        if self.gateway_port is None:
            raise ConfigurationError(
                f"{const.ENV_GATEWAY_PORT} is not set "
                f"(set it in the environment or in {const.LOCAL_ENV_FILE})"
            )
        return self.gateway_port

    def mode_config(self, mode: str) -> ModeConfig:
        return self.modes[mode]


def deep_merge_configs(base: dict, override: dict) -> dict:
    """Key-level merge; nested dicts merge, everything else is replaced."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge_configs(result[key], value)
        else:
            if key in result:
                logger.debug(f"  Override: {key} = {value!r}")
            result[key] = value
    return result


def load_project_config(config_path: Path, environ: Mapping[str, str]) -> dict:
    """
    Render stackctl.toml through Jinja2 (``env`` in context) and parse it.

    A missing file yields an empty dict.
    """
    if not config_path.is_file():
        logger.debug(f"No project config at {config_path}")
        return {}

    from jinja2 import StrictUndefined, Template, TemplateError

    logger.debug(f"Rendering project config: {config_path}")
    try:
        template = Template(config_path.read_text(encoding='utf-8'), undefined=StrictUndefined)
        rendered = template.render(env=dict(environ))
    except TemplateError as e:
        raise ConfigurationError(f"Failed to render {config_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Failed to read {config_path}: {e}") from e

    try:
        return tomllib.loads(rendered)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"TOML syntax error in {config_path}: {e}") from e


def _parse_modes(raw_modes: Any) -> Dict[str, ModeConfig]:
    if not isinstance(raw_modes, dict):
        raise ConfigurationError("[modes] must be a table")

    unknown = sorted(set(raw_modes) - {const.MODE_DEV, const.MODE_PROD})
    if unknown:
        raise ConfigurationError(
            f"Unknown mode(s) in [modes]: {', '.join(unknown)} "
            f"(only '{const.MODE_DEV}' and '{const.MODE_PROD}' are supported)"
        )

    modes: Dict[str, ModeConfig] = {}
    for name in (const.MODE_DEV, const.MODE_PROD):
        entry = raw_modes[name]
        if not isinstance(entry, dict):
            raise ConfigurationError(f"[modes.{name}] must be a table")
        compose_file = entry.get('compose_file')
        project_name = entry.get('project_name')
        if not compose_file or not project_name:
            raise ConfigurationError(f"[modes.{name}] needs compose_file and project_name")
        modes[name] = ModeConfig(
            compose_file=str(compose_file),
            project_name=str(project_name),
            volumes=tuple(str(v) for v in entry.get('volumes', [])),
        )

    dev, prod = modes[const.MODE_DEV], modes[const.MODE_PROD]
    if dev.project_name == prod.project_name:
        raise ConfigurationError(
            f"dev and prod share project name '{dev.project_name}'; modes must stay isolated"
        )
    if dev.compose_file == prod.compose_file:
        raise ConfigurationError(
            f"dev and prod share compose file '{dev.compose_file}'; modes must stay isolated"
        )
    return modes


def _parse_port(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        port = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{const.ENV_GATEWAY_PORT} must be an integer, got '{raw}'") from e
    if not 0 < port < 65536:
        raise ConfigurationError(f"{const.ENV_GATEWAY_PORT} out of range: {port}")
    return port


def load_settings(
    root: Path,
    environ: Optional[Mapping[str, str]] = None,
    env_file: Optional[Path] = None,
    config_file: Optional[Path] = None,
) -> Settings:
    """Build the Settings object for one invocation."""
    root = Path(root)
    env_path = env_file if env_file is not None else root / const.LOCAL_ENV_FILE
    config_path = config_file if config_file is not None else root / const.PROJECT_CONFIG_FILE

    try:
        env = build_environment(env_path, environ)
    except WorkspaceEnvError as e:
        raise ConfigurationError(str(e)) from e

    config = deep_merge_configs(DEFAULT_CONFIG, load_project_config(config_path, env))
    general = config.get('stackctl', {})
    health = config.get('health', {})

    compose_command = general.get('compose_command')
    if not compose_command or not all(isinstance(token, str) for token in compose_command):
        raise ConfigurationError("[stackctl].compose_command must be a non-empty list of strings")

    backup_dir = Path(general.get('backup_dir', const.BACKUP_DIR))
    if not backup_dir.is_absolute():
        backup_dir = root / backup_dir

    try:
        timeout = float(health.get('timeout', const.HEALTH_TIMEOUT_SECONDS))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"[health].timeout must be a number: {e}") from e

    log_level = env_value(env, const.ENV_LOG_LEVEL) or general.get('log_level', const.DEFAULT_LOG_LEVEL)

    return Settings(
        root=root,
        modes=_parse_modes(config.get('modes', {})),
        compose_command=tuple(compose_command),
        database_service=str(config.get('database', {}).get('service', const.DATABASE_SERVICE)),
        backup_dir=backup_dir,
        health_host=str(health.get('host', const.HEALTH_HOST)),
        gateway_health_path=str(health.get('gateway_path', const.GATEWAY_HEALTH_PATH)),
        backend_health_path=str(health.get('backend_path', const.BACKEND_HEALTH_PATH)),
        health_timeout=timeout,
        gateway_port=_parse_port(env_value(env, const.ENV_GATEWAY_PORT)),
        db_username=env_value(env, const.ENV_DB_USERNAME),
        db_password=env_value(env, const.ENV_DB_PASSWORD),
        log_level=str(log_level).upper(),
        environ=env,
    )


def settings_to_toml(settings: Settings) -> str:
    """Render resolved settings as TOML with credentials masked."""
    import tomli_w

    document: Dict[str, Any] = {
        'stackctl': {
            'root': str(settings.root),
            'compose_command': list(settings.compose_command),
            'backup_dir': str(settings.backup_dir),
            'log_level': settings.log_level,
        },
        'database': {
            'service': settings.database_service,
            'username': MASK if settings.db_username else '',
            'password': MASK if settings.db_password else '',
        },
        'health': {
            'host': settings.health_host,
            'gateway_path': settings.gateway_health_path,
            'backend_path': settings.backend_health_path,
            'timeout': settings.health_timeout,
        },
        'modes': {
            name: {
                'compose_file': mode.compose_file,
                'project_name': mode.project_name,
                'volumes': list(mode.volumes),
            }
            for name, mode in settings.modes.items()
        },
    }
    if settings.gateway_port is not None:
        document['health']['gateway_port'] = settings.gateway_port
    return tomli_w.dumps(document)
